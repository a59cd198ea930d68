"""Quantum gate matrices."""

from .standard import (
    CNOT,
    FREDKIN,
    PHASE,
    RK,
    RX,
    RY,
    RZ,
    SWAP,
    TOFFOLI,
    H,
    I,
    S,
    T,
    X,
    Y,
    Z,
    controlled,
)

__all__ = [
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "T",
    "PHASE",
    "RK",
    "RX",
    "RY",
    "RZ",
    "CNOT",
    "SWAP",
    "TOFFOLI",
    "FREDKIN",
    "controlled",
]
