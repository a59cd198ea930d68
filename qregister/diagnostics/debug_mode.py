"""Verification mode: optional norm checks after every operator application.

Construction, measurement and growth always verify the unit-norm invariant of
the shared state. Operator application is the hot path, so it only does so
while verification mode is on. The initial setting comes from the
``QREGISTER_DEBUG`` environment variable.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

import torch

from .core import assert_normalized

_DEBUG_ENV_VAR = "QREGISTER_DEBUG"
_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in _TRUTHY


_debug_enabled: bool = _env_flag(_DEBUG_ENV_VAR)


def is_debug_enabled() -> bool:
    """Return whether verification mode is currently enabled."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Globally enable or disable verification mode."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


def verify_if_enabled(state: torch.Tensor) -> None:
    """
    Check the norm of ``state`` when verification mode is on.

    Raises
    ------
    ImplementationError
        If verification mode is on and the state is not normalized.
    """
    if _debug_enabled:
        assert_normalized(state)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Temporarily switch verification mode, restoring the previous setting.

    Example
    -------
    >>> from qregister import QuantumRegister, hadamard
    >>> with debug_context(True):
    ...     QuantumRegister(1).apply_operation(hadamard(0))
    QuantumRegister(length=1, total_length=1, exposure=(0,))
    """
    global _debug_enabled
    prev = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = prev
