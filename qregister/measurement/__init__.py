"""Measurement outcomes and state collapse."""

from .collapse import collapse_state, fold_buckets, measure_state, select_bucket
from .result import ClassicalResult

__all__ = [
    "ClassicalResult",
    "fold_buckets",
    "select_bucket",
    "collapse_state",
    "measure_state",
]
