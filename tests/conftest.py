"""Pytest configuration and shared fixtures for qregister tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A fixture that restores verification mode after each test
"""

import os

import numpy as np
import pytest
import torch

from qregister.diagnostics import is_debug_enabled, set_debug_enabled


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for register measurement.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded CPU torch.Generator instance.
    """
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_seed())


@pytest.fixture(scope="function", autouse=True)
def restore_debug_mode():
    """Leave verification mode as it was found."""
    original = is_debug_enabled()
    yield
    set_debug_enabled(original)
