"""Projective measurement of a subset of qubits of a shared state."""

from __future__ import annotations

from typing import Sequence, Tuple

import torch

from qregister.backend.statevector import project_indices
from qregister.diagnostics import assert_normalized
from qregister.errors import ImplementationError
from qregister.linalg import complex_sqrt
from qregister.logging import get_logger
from qregister.measurement.result import ClassicalResult

logger = get_logger(__name__)


def _bucket_keys(state: torch.Tensor, positions: Sequence[int]) -> torch.Tensor:
    idx = torch.arange(state.shape[0], dtype=torch.int64, device=state.device)
    return project_indices(idx, positions)


def fold_buckets(
    state: torch.Tensor, positions: Sequence[int]
) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Fold a state into one bucket per outcome of the qubits at ``positions``.

    Parameters
    ----------
    state:
        1D complex statevector.
    positions:
        Absolute bits being measured. Bit ``j`` of a bucket key is the value
        of ``positions[j]``.

    Returns
    -------
    probabilities:
        Float64 tensor of length 2**len(positions); the summed |a|^2 per bucket.
    amplitudes:
        Complex tensor of the same length. Each entry has magnitude
        ``sqrt(probability)`` and the phase of ``sqrt(sum(a^2))`` over the
        bucket (phase 0 where that root vanishes).
    """
    keys = _bucket_keys(state, positions)
    n_buckets = 2 ** len(positions)

    probs = torch.zeros(n_buckets, dtype=torch.float64, device=state.device)
    probs.index_add_(0, keys, (state.abs() ** 2).to(torch.float64))

    squares = (state * state).to(torch.complex128)
    sq_re = torch.zeros(n_buckets, dtype=torch.float64, device=state.device)
    sq_im = torch.zeros(n_buckets, dtype=torch.float64, device=state.device)
    sq_re.index_add_(0, keys, squares.real)
    sq_im.index_add_(0, keys, squares.imag)
    root = complex_sqrt(torch.complex(sq_re, sq_im))

    root_abs = root.abs()
    phase = torch.where(
        root_abs > 0,
        root / torch.where(root_abs > 0, root_abs, torch.ones_like(root_abs)),
        torch.ones_like(root),
    )
    amplitudes = torch.sqrt(probs).to(torch.complex128) * phase
    return probs, amplitudes


def select_bucket(probabilities: torch.Tensor, draw: float) -> int:
    """
    Inverse-CDF selection of a bucket.

    Returns the first bucket whose cumulative mass exceeds ``draw`` times the
    total mass and whose own probability is nonzero.

    Raises
    ------
    ImplementationError
        If no bucket qualifies, which only happens for an empty state.
    """
    cumulative = torch.cumsum(probabilities, dim=0)
    threshold = float(draw) * float(cumulative[-1])
    eligible = (cumulative > threshold) & (probabilities > 0)
    hits = torch.nonzero(eligible, as_tuple=False)
    if hits.numel() == 0:
        raise ImplementationError(
            f"No measurement outcome could be selected for draw {draw!r}; "
            f"total probability is {float(cumulative[-1])!r}."
        )
    return int(hits[0, 0])


def collapse_state(
    state: torch.Tensor,
    positions: Sequence[int],
    bucket: int,
    amplitude: torch.Tensor | complex,
) -> torch.Tensor:
    """
    Keep only the amplitudes consistent with ``bucket`` and renormalize.

    Matching amplitudes are divided by ``amplitude``; the rest become zero.
    Returns a new tensor.
    """
    keys = _bucket_keys(state, positions)
    amplitude = torch.as_tensor(amplitude, dtype=state.dtype, device=state.device)
    return torch.where(keys == bucket, state / amplitude, torch.zeros_like(state))


def measure_state(
    state: torch.Tensor,
    exposure: Sequence[int],
    generator: torch.Generator | None = None,
) -> Tuple[torch.Tensor, ClassicalResult]:
    """
    Measure the absolute bits listed in ``exposure``.

    Parameters
    ----------
    state:
        1D complex statevector; it is not modified.
    exposure:
        Absolute bit of each exposed position, in output order.
    generator:
        Source of the uniform draw. None uses torch's global generator.

    Returns
    -------
    (collapsed_state, result):
        The post-measurement state and the outcome, where ``result[p]`` is
        the value observed for ``exposure[p]``.

    Raises
    ------
    ImplementationError
        If the collapsed state is not normalized.
    """
    probs, amplitudes = fold_buckets(state, exposure)
    draw = float(torch.rand(1, generator=generator, dtype=torch.float64)[0])
    bucket = select_bucket(probs, draw)

    collapsed = collapse_state(state, exposure, bucket, amplitudes[bucket])
    assert_normalized(collapsed)

    result = ClassicalResult.from_uint(bucket, n_bits=len(exposure))
    logger.debug(
        "Measured bits %s -> %s (p=%.6g)", list(exposure), result, float(probs[bucket])
    )
    return collapsed, result
