"""Statevector kernels for the shared register state.

Convention: bit ``b`` of a basis index is the value of absolute qubit ``b``
(qubit 0 is the least significant bit). Slot ``j`` of a 2^k x 2^k operator is
bit ``j`` of the operator's row/column index.

Two equivalent application paths are provided:

- ``apply_operator_dense`` builds the full 2^N x 2^N expansion by indexing
  and multiplies. It is the reference semantics and costs O(4^N).
- ``apply_operator`` contracts the operator with the target axes of the
  state viewed as a rank-N tensor. It costs O(2^N * 4^k).
"""

from __future__ import annotations

from typing import Sequence

import torch

from ..constants import (
    DEFAULT_COMPLEX_DTYPE,
    DENSE_EXPANSION_WARN_QUBITS,
    MAXIMUM_QUBITS_IN_REGISTER,
)
from ..core.device import Device, resolve_device
from ..errors import DuplicateIndexError, QubitRangeError, SizeMismatchError
from ..logging import get_logger

logger = get_logger(__name__)


def _check_qubit_count(n_qubits: int) -> None:
    if n_qubits < 1 or n_qubits > MAXIMUM_QUBITS_IN_REGISTER:
        raise QubitRangeError(
            f"n_qubits must be in [1, {MAXIMUM_QUBITS_IN_REGISTER}], got {n_qubits}"
        )


def basis_state(
    n_qubits: int,
    index: int = 0,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the computational basis state |index⟩ on n_qubits.

    Args:
        n_qubits: Number of qubits, 1 <= n_qubits <= MAXIMUM_QUBITS_IN_REGISTER.
        index: Basis index whose amplitude is set to 1.
        device: Device specification. Can be Device, str, torch.device, or None.
        dtype: Complex dtype. Defaults to torch.complex128.

    Returns:
        A complex tensor of shape (2**n_qubits,).

    Raises:
        QubitRangeError: If n_qubits or index is out of range.
    """
    _check_qubit_count(n_qubits)
    dim = 2**n_qubits
    if index < 0 or index >= dim:
        raise QubitRangeError(
            f"Basis index must be in [0, {dim}), got {index}"
        )
    qdevice = resolve_device(device)
    if dtype is None:
        dtype = DEFAULT_COMPLEX_DTYPE

    state = torch.zeros(dim, dtype=dtype, device=qdevice.as_torch_device())
    state[index] = 1.0 + 0.0j
    return state


def zero_state(
    n_qubits: int,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """Create |0...0⟩ for n_qubits."""
    return basis_state(n_qubits, 0, device=device, dtype=dtype)


def bits_to_index(bits: Sequence[bool]) -> int:
    """Return the basis index whose bit ``i`` is ``bits[i]``."""
    index = 0
    for i, bit in enumerate(bits):
        if bit:
            index |= 1 << i
    return index


def project_indices(indices: torch.Tensor, positions: Sequence[int]) -> torch.Tensor:
    """
    Gather the bits at ``positions`` out of each index.

    Bit ``j`` of each result is bit ``positions[j]`` of the matching input.
    This is both the sub-pattern an operator sees and the bucket key used by
    measurement.

    Args:
        indices: Integer tensor of basis indices.
        positions: Absolute bit positions to read, in output order.

    Returns:
        An int64 tensor with the same shape as ``indices``.
    """
    indices = indices.to(torch.int64)
    out = torch.zeros_like(indices)
    for j, position in enumerate(positions):
        out |= ((indices >> int(position)) & 1) << j
    return out


def _validate_targets(matrix: torch.Tensor, targets: Sequence[int], n_qubits: int) -> int:
    k = len(targets)
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1] or matrix.shape[0] != 2**k:
        raise SizeMismatchError(
            f"A matrix acting on {k} targets must have shape ({2**k}, {2**k}), "
            f"got {tuple(matrix.shape)}"
        )
    if k > n_qubits:
        raise SizeMismatchError(
            f"Operator on {k} qubits does not fit a state of {n_qubits} qubits"
        )
    for t in targets:
        if t < 0 or t >= n_qubits:
            raise QubitRangeError(
                f"Target bit {t} is out of range for {n_qubits} qubits"
            )
    if len(set(targets)) != k:
        raise DuplicateIndexError(f"Target bits must be distinct, got {list(targets)}")
    return k


def expand_operator(
    matrix: torch.Tensor, targets: Sequence[int], n_qubits: int
) -> torch.Tensor:
    """
    Build the full 2^N x 2^N matrix of ``matrix`` acting on ``targets``.

    Entry (r, c) is zero when r and c differ on any bit outside ``targets``.
    Otherwise it is ``matrix[sub(r), sub(c)]``, where ``sub`` gathers the
    target bits in slot order.
    """
    _validate_targets(matrix, targets, n_qubits)
    if n_qubits > DENSE_EXPANSION_WARN_QUBITS:
        logger.warning(
            "Expanding a %d-qubit operator to a dense %d x %d matrix",
            len(targets),
            2**n_qubits,
            2**n_qubits,
        )

    dim = 2**n_qubits
    idx = torch.arange(dim, dtype=torch.int64, device=matrix.device)
    target_mask = 0
    for t in targets:
        target_mask |= 1 << int(t)
    other = idx & ~target_mask

    sub = project_indices(idx, targets)
    valid = other[:, None] == other[None, :]
    gathered = matrix[sub[:, None], sub[None, :]]
    return torch.where(valid, gathered, torch.zeros((), dtype=matrix.dtype, device=matrix.device))


def apply_operator_dense(
    state: torch.Tensor,
    matrix: torch.Tensor,
    targets: Sequence[int],
    n_qubits: int,
) -> torch.Tensor:
    """Apply an operator by materializing its full expansion. Returns a new tensor."""
    matrix = matrix.to(dtype=state.dtype, device=state.device)
    return expand_operator(matrix, targets, n_qubits) @ state


def apply_operator(
    state: torch.Tensor,
    matrix: torch.Tensor,
    targets: Sequence[int],
    n_qubits: int,
) -> torch.Tensor:
    """
    Apply a 2^k x 2^k operator to the absolute bits ``targets`` of a state.

    The state is viewed as a rank-N tensor whose axis ``a`` holds absolute
    bit ``N-1-a``. The operator is viewed as a rank-2k tensor whose output
    axis ``m`` holds slot ``k-1-m``. Contracting the input axes with the
    target axes of the state and moving the output axes into their places
    gives the same vector as ``apply_operator_dense``.

    Args:
        state: Statevector of shape (2**n_qubits,).
        matrix: Operator of shape (2**k, 2**k).
        targets: Absolute bit receiving each slot, ``targets[j]`` for slot ``j``.
        n_qubits: Total number of qubits in the state.

    Returns:
        A new statevector tensor with the operator applied.

    Raises:
        SizeMismatchError: If the matrix does not match the targets or the state.
        QubitRangeError: If a target is outside the state.
    """
    k = _validate_targets(matrix, targets, n_qubits)
    if state.shape != (2**n_qubits,):
        raise SizeMismatchError(
            f"state must have shape ({2**n_qubits},), got {tuple(state.shape)}"
        )
    matrix = matrix.to(dtype=state.dtype, device=state.device)

    psi = state.reshape([2] * n_qubits)
    gate = matrix.reshape([2] * (2 * k))
    axes = [n_qubits - 1 - int(targets[k - 1 - m]) for m in range(k)]

    out = torch.tensordot(gate, psi, dims=([k + m for m in range(k)], axes))
    out = torch.movedim(out, list(range(k)), axes)
    return out.reshape(-1).contiguous()


APPLY_METHODS = {
    "tensor": apply_operator,
    "dense": apply_operator_dense,
}


def marginal_probabilities(state: torch.Tensor, positions: Sequence[int]) -> torch.Tensor:
    """
    Fold the probability mass of a state onto the bits at ``positions``.

    Bit ``j`` of the returned index is bit ``positions[j]`` of the full index.

    Returns:
        A float64 tensor of length 2**len(positions).
    """
    probs = (state.abs() ** 2).to(torch.float64)
    idx = torch.arange(state.shape[0], dtype=torch.int64, device=state.device)
    keys = project_indices(idx, positions)
    out = torch.zeros(2 ** len(positions), dtype=torch.float64, device=state.device)
    return out.index_add_(0, keys, probs)
