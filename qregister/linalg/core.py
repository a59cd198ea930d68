"""Dense complex scalar and matrix primitives.

Tensors play the role of complex scalars, vectors and matrices. These helpers
add the tolerance-based equality and the structural checks the engine relies
on.
"""

from __future__ import annotations

from functools import reduce

import torch

from qregister.constants import DEFAULT_COMPLEX_DTYPE, EQUALITY_TOLERANCE


def as_complex(
    value: torch.Tensor | complex | float | list,
    dtype: torch.dtype = DEFAULT_COMPLEX_DTYPE,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Return ``value`` as a complex tensor of ``dtype``, never aliasing it."""
    if isinstance(value, torch.Tensor):
        return value.detach().to(dtype=dtype, device=device).clone()
    return torch.tensor(value, dtype=dtype, device=device)


def complex_equal(
    a: torch.Tensor | complex | float,
    b: torch.Tensor | complex | float,
    atol: float = EQUALITY_TOLERANCE,
) -> bool:
    """
    Tolerance equality of complex values.

    Real and imaginary parts are compared independently against ``atol``.
    Tensors are compared elementwise and must all match.
    """
    a_t = torch.as_tensor(a, dtype=DEFAULT_COMPLEX_DTYPE)
    b_t = torch.as_tensor(b, dtype=DEFAULT_COMPLEX_DTYPE, device=a_t.device)
    diff = a_t - b_t
    return bool(
        torch.all(diff.real.abs() < atol) and torch.all(diff.imag.abs() < atol)
    )


def matrices_equal(
    a: torch.Tensor, b: torch.Tensor, atol: float = EQUALITY_TOLERANCE
) -> bool:
    """Value equality of two matrices: same shape and every cell within ``atol``."""
    if a.shape != b.shape:
        return False
    return complex_equal(a, b, atol=atol)


def is_power_of_two(n: int) -> bool:
    """Return True for 1, 2, 4, 8, ..."""
    return n >= 1 and n & (n - 1) == 0


def is_square(matrix: torch.Tensor) -> bool:
    """Return True if ``matrix`` is 2-D with as many rows as columns."""
    return matrix.dim() == 2 and matrix.shape[0] == matrix.shape[1]


def identity(
    dim: int,
    dtype: torch.dtype = DEFAULT_COMPLEX_DTYPE,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Identity matrix of size ``dim``."""
    return torch.eye(dim, dtype=dtype, device=device)


def conjugate_transpose(matrix: torch.Tensor) -> torch.Tensor:
    """Hermitian adjoint U†."""
    return matrix.conj().transpose(-2, -1)


def kron(*matrices: torch.Tensor) -> torch.Tensor:
    """
    Kronecker (tensor) product of one or more matrices, left to right.

    ``kron(a, b)`` places ``a`` on the high-order index bits and ``b`` on the
    low-order bits.
    """
    if not matrices:
        raise ValueError("kron requires at least one matrix.")
    return reduce(torch.kron, matrices)


def is_unitary(matrix: torch.Tensor, atol: float = EQUALITY_TOLERANCE) -> bool:
    """
    Check whether a matrix is unitary within a given tolerance.

    A matrix U is unitary if U†U = I.

    Returns:
        True if the matrix is square and unitary, False otherwise.
    """
    if not is_square(matrix):
        return False
    product = conjugate_transpose(matrix) @ matrix
    eye = identity(matrix.shape[0], dtype=product.dtype, device=product.device)
    diff = product - eye
    if not torch.all(torch.isfinite(diff.abs())):
        return False
    return complex_equal(diff, 0.0, atol=atol)


def complex_sqrt(z: torch.Tensor) -> torch.Tensor:
    """Principal square root of complex values."""
    return torch.sqrt(z.to(DEFAULT_COMPLEX_DTYPE))
