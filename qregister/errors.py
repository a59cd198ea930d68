"""Exception hierarchy for the register engine.

Each error also derives from the builtin a caller would naturally catch, so
``except ValueError`` keeps working for bad input.
"""

from __future__ import annotations

from typing import Optional

import torch


class QRegisterError(Exception):
    """Base class for all qregister errors."""


class QubitRangeError(QRegisterError, ValueError, IndexError):
    """An index, qubit count, value or bit position outside its valid domain."""


class DuplicateIndexError(QRegisterError, ValueError):
    """The same index was supplied more than once where it must be unique."""


class SizeMismatchError(QRegisterError, ValueError):
    """An operation does not fit the register, or paired sizes disagree."""


class NotUnitaryOperationError(QRegisterError, ValueError):
    """An operation matrix failed the unitarity check."""


class ImplementationError(QRegisterError, RuntimeError):
    """An internal invariant was violated.

    This signals a defect in the engine rather than bad input. The offending
    state vector is kept on the exception and dumped into its message.
    """

    def __init__(self, message: str, state: Optional[torch.Tensor] = None) -> None:
        self.state = None if state is None else state.detach().clone()
        if state is not None:
            message = f"{message}\nState:\n{_dump_state(state)}"
        super().__init__(message)


def _dump_state(state: torch.Tensor) -> str:
    flat = state.detach().reshape(-1).cpu()
    lines = []
    for index, amplitude in enumerate(flat.tolist()):
        lines.append(f"  [{index}] {amplitude.real:+.15f} {amplitude.imag:+.15f}i")
    return "\n".join(lines)
