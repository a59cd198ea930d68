"""Scalar and dense-matrix primitives over torch tensors."""

from .core import (
    as_complex,
    complex_equal,
    complex_sqrt,
    conjugate_transpose,
    identity,
    is_power_of_two,
    is_square,
    is_unitary,
    kron,
    matrices_equal,
)

__all__ = [
    "as_complex",
    "complex_equal",
    "complex_sqrt",
    "conjugate_transpose",
    "identity",
    "is_power_of_two",
    "is_square",
    "is_unitary",
    "kron",
    "matrices_equal",
]
