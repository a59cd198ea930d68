"""Norm diagnostics for state vectors."""

from __future__ import annotations

import torch

from qregister.constants import EQUALITY_TOLERANCE
from qregister.errors import ImplementationError


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """
    Compute the L2 norm of a state tensor.

    Parameters
    ----------
    state:
        Complex tensor with shape (..., dim).

    Returns
    -------
    torch.Tensor
        Real tensor with shape (...) giving the norm of each batch element.

    Raises
    ------
    ValueError
        If state has fewer than 1 dimension.
    """
    if state.dim() < 1:
        raise ValueError("state_norm expects a tensor with at least 1 dimension.")

    norm_sq = (state.conj() * state).sum(dim=-1).real
    return torch.sqrt(norm_sq)


def total_probability(state: torch.Tensor) -> float:
    """Return the sum of squared amplitude magnitudes of a 1-D state."""
    return float((state.abs() ** 2).sum())


def is_normalized(state: torch.Tensor, atol: float = EQUALITY_TOLERANCE) -> bool:
    """
    Return True if a 1-D state has total probability 1 within ``atol``.

    The state length must also be a power of two.
    """
    if state.dim() != 1:
        return False
    dim = state.shape[0]
    if dim < 1 or dim & (dim - 1) != 0:
        return False

    total = total_probability(state)
    if total != total:  # NaN
        return False
    return (1.0 - atol) < total < (1.0 + atol)


def assert_normalized(state: torch.Tensor, atol: float = EQUALITY_TOLERANCE) -> None:
    """
    Verify the unit-norm invariant of a state vector.

    Raises
    ------
    ImplementationError
        If the state is not normalized within ``atol``. The message carries
        a dump of the offending vector.
    """
    if not is_normalized(state, atol=atol):
        raise ImplementationError(
            f"State is not normalized within tolerance {atol}; "
            f"total probability is {total_probability(state)!r}.",
            state=state,
        )
