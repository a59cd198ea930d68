"""Operation descriptors and factories."""

from .core import (
    Operation,
    QuantumOperation,
    check_unique,
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

__all__ = [
    "Operation",
    "QuantumOperation",
    "check_unique",
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
]
