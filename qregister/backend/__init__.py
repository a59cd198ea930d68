"""Statevector kernels."""

from .statevector import (
    APPLY_METHODS,
    apply_operator,
    apply_operator_dense,
    basis_state,
    bits_to_index,
    expand_operator,
    marginal_probabilities,
    project_indices,
    zero_state,
)

__all__ = [
    "basis_state",
    "zero_state",
    "bits_to_index",
    "project_indices",
    "expand_operator",
    "apply_operator",
    "apply_operator_dense",
    "marginal_probabilities",
    "APPLY_METHODS",
]
