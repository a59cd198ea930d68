"""Tests for register measurement."""

import math

import pytest
import torch

from qregister import ClassicalResult, QuantumRegister, cnot, hadamard, not_op, rotate_y
from qregister.errors import DuplicateIndexError, QubitRangeError


class TestCertainOutcomes:
    """Basis states measure deterministically."""

    def test_one_stays_one(self, torch_rng):
        reg = QuantumRegister([True], generator=torch_rng)
        for _ in range(50):
            assert reg.measure().to_uint() == 1
        assert reg.peek_state()[1] == 1.0

    def test_zero_stays_zero(self, torch_rng):
        reg = QuantumRegister(1, generator=torch_rng)
        for _ in range(50):
            assert reg.measure().to_uint() == 0

    def test_result_length_matches_view(self, torch_rng):
        reg = QuantumRegister(4, generator=torch_rng)
        assert len(reg.measure()) == 4
        assert len(reg.slice(1, 2).measure()) == 2

    def test_result_in_exposure_order(self, torch_rng):
        reg = QuantumRegister([True, True, False], generator=torch_rng)
        assert reg.slice_reverse().measure().to_bool_array() == [False, True, True]


class TestMeasureOverloads:
    """measure() with no argument, an int, or an iterable."""

    def test_single_index(self, torch_rng):
        reg = QuantumRegister([False, True, False], generator=torch_rng)
        assert reg.measure(1) == ClassicalResult.from_bool_array([True])
        assert reg.measure(0) == ClassicalResult.from_bool_array([False])

    def test_index_list(self, torch_rng):
        reg = QuantumRegister([False, True, True], generator=torch_rng)
        assert reg.measure([2, 0]).to_bool_array() == [True, False]

    def test_index_out_of_range(self):
        with pytest.raises(QubitRangeError):
            QuantumRegister(2).measure(2)

    def test_duplicate_indexes(self):
        with pytest.raises(DuplicateIndexError):
            QuantumRegister(2).measure([0, 0])

    def test_result_carries_labels(self, torch_rng):
        reg = QuantumRegister([True, False], generator=torch_rng, labels=("L", "H"))
        assert str(reg.measure()) == "HL"


class TestCollapse:
    """Measurement mutates the shared state."""

    def test_superposition_collapses(self, torch_rng):
        reg = QuantumRegister(1, generator=torch_rng)
        reg.apply_operation(hadamard(0))
        first = reg.measure().to_uint()
        for _ in range(10):
            assert reg.measure().to_uint() == first

    def test_partial_measurement_keeps_other_qubit(self, torch_rng):
        reg = QuantumRegister(2, generator=torch_rng)
        reg.apply_operation(hadamard(0))
        reg.apply_operation(hadamard(1))
        reg.measure(0)
        probs = reg.probabilities()
        nonzero = [i for i in range(4) if probs[i] > 1e-12]
        assert len(nonzero) == 2
        assert all(float(probs[i]) == pytest.approx(0.5) for i in nonzero)

    def test_state_valid_after_measurement(self, torch_rng):
        reg = QuantumRegister(3, generator=torch_rng)
        reg.apply_operations([hadamard(0), cnot(0, 1), rotate_y(0.4, 2)])
        reg.measure([1, 2])
        assert reg.is_valid_state()

    def test_relative_phase_preserved_in_unmeasured_qubits(self, torch_rng):
        """Measuring qubit 1 leaves qubit 0 in (|0> - |1>)/sqrt(2)."""
        reg = QuantumRegister(2, generator=torch_rng)
        reg.apply_operations([not_op(0), hadamard(0)])
        reg.measure(1)
        state = reg.peek_state()
        s = 1.0 / math.sqrt(2.0)
        assert torch.allclose(state, torch.tensor([s, -s, 0.0, 0.0], dtype=torch.complex128))


class TestStatistics:
    """Outcome frequencies follow the Born rule."""

    def test_biased_qubit(self, torch_rng):
        p_one = 0.3
        theta = 2.0 * math.asin(math.sqrt(p_one))
        ones = 0
        trials = 2000
        for _ in range(trials):
            reg = QuantumRegister(1, generator=torch_rng)
            reg.apply_operation(rotate_y(theta, 0))
            ones += reg.measure().to_uint()
        assert abs(ones / trials - p_one) < 0.05

    def test_seed_reproducibility(self):
        def run(seed):
            reg = QuantumRegister(3, seed=seed)
            out = []
            for _ in range(8):
                reg.apply_operations([hadamard(0), hadamard(1), hadamard(2)])
                out.append(reg.measure().to_uint())
            return out

        assert run(11) == run(11)
