"""Quantum register views over a shared state."""

from .core import QuantumRegister, SharedState

__all__ = ["QuantumRegister", "SharedState"]
