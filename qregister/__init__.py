"""qregister - a PyTorch-backed dense state-vector quantum register simulator."""

__version__ = "0.1.0"

from .backend import (
    apply_operator,
    apply_operator_dense,
    basis_state,
    expand_operator,
    marginal_probabilities,
    zero_state,
)
from .constants import EQUALITY_TOLERANCE, MAXIMUM_QUBITS_IN_REGISTER
from .core import Device, default_device, device

# Diagnostics
from .diagnostics import (
    assert_normalized,
    debug_context,
    is_debug_enabled,
    is_normalized,
    set_debug_enabled,
)
from .errors import (
    DuplicateIndexError,
    ImplementationError,
    NotUnitaryOperationError,
    QRegisterError,
    QubitRangeError,
    SizeMismatchError,
)
from .logging import configure_logging, get_logger, set_log_level
from .measurement import ClassicalResult

# Operations
from .operations import (
    Operation,
    QuantumOperation,
    cnot,
    controlled_u,
    fredkin,
    hadamard,
    identity_op,
    not_op,
    phase_shift,
    rotate_k,
    rotate_x,
    rotate_y,
    rotate_z,
    s_gate,
    swap,
    t_gate,
    toffoli,
    y_op,
    z_op,
)
from .register import QuantumRegister

__all__ = [
    "__version__",
    # Register
    "QuantumRegister",
    "ClassicalResult",
    # Operations
    "Operation",
    "QuantumOperation",
    "identity_op",
    "not_op",
    "y_op",
    "z_op",
    "hadamard",
    "s_gate",
    "t_gate",
    "phase_shift",
    "rotate_x",
    "rotate_y",
    "rotate_z",
    "rotate_k",
    "cnot",
    "swap",
    "toffoli",
    "fredkin",
    "controlled_u",
    # Backend
    "basis_state",
    "zero_state",
    "expand_operator",
    "apply_operator",
    "apply_operator_dense",
    "marginal_probabilities",
    # Devices
    "Device",
    "device",
    "default_device",
    # Errors
    "QRegisterError",
    "QubitRangeError",
    "DuplicateIndexError",
    "SizeMismatchError",
    "NotUnitaryOperationError",
    "ImplementationError",
    # Diagnostics
    "assert_normalized",
    "is_normalized",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    # Constants
    "EQUALITY_TOLERANCE",
    "MAXIMUM_QUBITS_IN_REGISTER",
]
