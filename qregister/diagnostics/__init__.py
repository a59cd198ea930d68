"""Diagnostics and verification-mode utilities."""

from .core import (
    assert_normalized,
    is_normalized,
    state_norm,
    total_probability,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
    verify_if_enabled,
)

__all__ = [
    "state_norm",
    "total_probability",
    "is_normalized",
    "assert_normalized",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    "verify_if_enabled",
]
