"""Standard gate matrices.

Every multi-qubit matrix follows the register's slot convention: slot ``j``
of a gate is bit ``j`` of the matrix row/column index. For CNOT, slot 0 is
the control and slot 1 the target.

Every factory accepts a ``dtype``, but a register only accepts operators that
are unitary within ``EQUALITY_TOLERANCE`` (1e-13). Single precision rounding
of entries such as 1/sqrt(2) exceeds that, so matrices meant for a register
must keep the default complex128.
"""

from __future__ import annotations

import cmath
import math

import torch

from qregister.constants import DEFAULT_COMPLEX_DTYPE

_P0 = [[1.0, 0.0], [0.0, 0.0]]
_P1 = [[0.0, 0.0], [0.0, 1.0]]


def _resolve(
    dtype: torch.dtype | None, device: torch.device | None
) -> tuple[torch.dtype, torch.device]:
    if dtype is None:
        dtype = DEFAULT_COMPLEX_DTYPE
    if device is None:
        device = torch.device("cpu")
    return dtype, device


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Identity gate (single-qubit)."""
    dtype, device = _resolve(dtype, device)
    return torch.eye(2, dtype=dtype, device=device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X gate (bit-flip, NOT gate)."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor([[0.0, 1.0], [1.0, 0.0]], dtype=dtype, device=device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Y gate."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor([[0.0, -1.0j], [1.0j, 0.0]], dtype=dtype, device=device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z gate (phase-flip)."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor([[1.0, 0.0], [0.0, -1.0]], dtype=dtype, device=device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard gate."""
    dtype, device = _resolve(dtype, device)
    sqrt2_inv = 1.0 / math.sqrt(2.0)
    return torch.tensor(
        [[sqrt2_inv, sqrt2_inv], [sqrt2_inv, -sqrt2_inv]], dtype=dtype, device=device
    )


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S gate (phase gate, √Z)."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor([[1.0, 0.0], [0.0, 1.0j]], dtype=dtype, device=device)


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T gate (π/8 gate, √S)."""
    dtype, device = _resolve(dtype, device)
    exp_i_pi_4 = cmath.exp(1.0j * math.pi / 4.0)
    return torch.tensor([[1.0, 0.0], [0.0, exp_i_pi_4]], dtype=dtype, device=device)


def PHASE(
    phi: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Phase shift diag(1, e^{iφ})."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor(
        [[1.0, 0.0], [0.0, cmath.exp(1.0j * float(phi))]], dtype=dtype, device=device
    )


def RK(
    k: int,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Fourier-transform rotation R_k = diag(1, e^{2πi/2^k}).

    Raises:
        ValueError: If k < 0.
    """
    if k < 0:
        raise ValueError(f"k must be >= 0, got {k}")
    return PHASE(2.0 * math.pi / (2**k), dtype=dtype, device=device)


def RX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation gate around X-axis: RX(θ) = exp(-iθX/2).

    Matrix form:
        [[cos(θ/2), -i sin(θ/2)],
         [-i sin(θ/2), cos(θ/2)]]
    """
    dtype, device = _resolve(dtype, device)
    half_theta = float(theta) / 2.0
    cos_half = math.cos(half_theta)
    sin_half = math.sin(half_theta)
    return torch.tensor(
        [[cos_half, -1.0j * sin_half], [-1.0j * sin_half, cos_half]],
        dtype=dtype,
        device=device,
    )


def RY(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation gate around Y-axis: RY(θ) = exp(-iθY/2).

    Matrix form:
        [[cos(θ/2), -sin(θ/2)],
         [sin(θ/2), cos(θ/2)]]
    """
    dtype, device = _resolve(dtype, device)
    half_theta = float(theta) / 2.0
    cos_half = math.cos(half_theta)
    sin_half = math.sin(half_theta)
    return torch.tensor(
        [[cos_half, -sin_half], [sin_half, cos_half]], dtype=dtype, device=device
    )


def RZ(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation gate around Z-axis: RZ(θ) = exp(-iθZ/2).

    Matrix form:
        [[exp(-iθ/2), 0],
         [0, exp(iθ/2)]]
    """
    dtype, device = _resolve(dtype, device)
    half_theta = float(theta) / 2.0
    return torch.tensor(
        [[cmath.exp(-1.0j * half_theta), 0.0], [0.0, cmath.exp(1.0j * half_theta)]],
        dtype=dtype,
        device=device,
    )


def controlled(u: torch.Tensor) -> torch.Tensor:
    """
    Controlled version of a gate.

    The control becomes slot 0 (the low index bit); the slots of ``u`` move up
    by one. The result is ``kron(I, |0><0|) + kron(u, |1><1|)``.

    Raises:
        ValueError: If u is not a square matrix.
    """
    if u.dim() != 2 or u.shape[0] != u.shape[1]:
        raise ValueError(f"controlled() expects a square matrix, got shape {tuple(u.shape)}")
    p0 = torch.tensor(_P0, dtype=u.dtype, device=u.device)
    p1 = torch.tensor(_P1, dtype=u.dtype, device=u.device)
    eye = torch.eye(u.shape[0], dtype=u.dtype, device=u.device)
    return torch.kron(eye, p0) + torch.kron(u, p1)


def CNOT(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    CNOT gate (controlled-NOT), control on slot 0 and target on slot 1.

    The basis index is ``c + 2*t``; the matrix swaps index 1 (control set,
    target clear) with index 3.
    """
    dtype, device = _resolve(dtype, device)
    return torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
        ],
        dtype=dtype,
        device=device,
    )


def SWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """SWAP gate: exchanges slots 0 and 1."""
    dtype, device = _resolve(dtype, device)
    return torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=dtype,
        device=device,
    )


def TOFFOLI(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Toffoli (CCNOT): controls on slots 0 and 1, target on slot 2."""
    dtype, device = _resolve(dtype, device)
    return controlled(CNOT(dtype=dtype, device=device))


def FREDKIN(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Fredkin (CSWAP): control on slot 0, swaps slots 1 and 2."""
    dtype, device = _resolve(dtype, device)
    return controlled(SWAP(dtype=dtype, device=device))
