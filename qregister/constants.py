"""Named constants shared across the register engine."""

from __future__ import annotations

import torch

# Absolute tolerance for complex equality and for the unit-norm invariant.
EQUALITY_TOLERANCE = 1e-13

# 2**62 amplitudes is the last size whose basis index fits a signed 64-bit int
# with room for the bit arithmetic in the kernels.
MAXIMUM_QUBITS_IN_REGISTER = 62

DEFAULT_LOCATION = "localhost"
LOCAL_LOCATIONS = ("localhost", "127.0.0.1")

DEFAULT_COMPLEX_DTYPE = torch.complex128

# Dense expansion above this size is logged as a warning.
DENSE_EXPANSION_WARN_QUBITS = 10
