"""Tests for the statevector kernels."""

import itertools
import logging
import math

import numpy as np
import pytest
import torch

from qregister.backend.statevector import (
    apply_operator,
    apply_operator_dense,
    basis_state,
    bits_to_index,
    expand_operator,
    marginal_probabilities,
    project_indices,
    zero_state,
)
from qregister.constants import MAXIMUM_QUBITS_IN_REGISTER
from qregister.errors import DuplicateIndexError, QubitRangeError, SizeMismatchError
from qregister.gates import standard as stdgates
from qregister.linalg import is_unitary, kron, matrices_equal


def _random_state(rng: np.random.Generator, n_qubits: int) -> torch.Tensor:
    dim = 2**n_qubits
    raw = rng.normal(size=dim) + 1j * rng.normal(size=dim)
    raw /= np.linalg.norm(raw)
    return torch.tensor(raw, dtype=torch.complex128)


def _random_unitary(rng: np.random.Generator, n_qubits: int) -> torch.Tensor:
    dim = 2**n_qubits
    raw = rng.normal(size=(dim, dim)) + 1j * rng.normal(size=(dim, dim))
    q, r = np.linalg.qr(raw)
    q = q * (np.diag(r) / np.abs(np.diag(r)))
    return torch.tensor(q, dtype=torch.complex128)


class TestBasisStates:
    """Construction of computational basis states."""

    def test_zero_state(self):
        state = zero_state(3)
        assert state.shape == (8,)
        assert state.dtype == torch.complex128
        assert state[0] == 1.0
        assert int((state != 0).sum()) == 1

    def test_basis_state_index(self):
        state = basis_state(2, 3)
        assert state[3] == 1.0
        assert int((state != 0).sum()) == 1

    @pytest.mark.parametrize("n", [0, -1, MAXIMUM_QUBITS_IN_REGISTER + 1])
    def test_qubit_count_out_of_range(self, n):
        with pytest.raises(QubitRangeError):
            zero_state(n)

    def test_index_out_of_range(self):
        with pytest.raises(QubitRangeError):
            basis_state(2, 4)

    def test_device_string(self):
        assert zero_state(1, device="sv_cpu").device.type == "cpu"


class TestIndexHelpers:
    """Bit gathering helpers."""

    def test_bits_to_index_lsb_first(self):
        assert bits_to_index([True, False, True]) == 5
        assert bits_to_index([False, True]) == 2
        assert bits_to_index([]) == 0

    def test_project_indices_gathers_in_position_order(self):
        idx = torch.arange(8)
        # bit 0 of the key is bit 2 of the index, bit 1 is bit 0
        keys = project_indices(idx, [2, 0])
        expected = [((i >> 2) & 1) | (((i >> 0) & 1) << 1) for i in range(8)]
        assert keys.tolist() == expected

    def test_project_indices_empty_positions(self):
        assert project_indices(torch.arange(4), []).tolist() == [0, 0, 0, 0]


class TestExpandOperator:
    """The reference dense expansion."""

    def test_single_target_matches_kron(self):
        """X on qubit 1 of 2 is kron(X, I)."""
        expanded = expand_operator(stdgates.X(), [1], 2)
        assert matrices_equal(expanded, kron(stdgates.X(), stdgates.I()))

    def test_identity_order_targets_match_matrix(self):
        expanded = expand_operator(stdgates.CNOT(), [0, 1], 2)
        assert matrices_equal(expanded, stdgates.CNOT())

    def test_swapped_targets(self):
        """CNOT with control on qubit 1 and target on qubit 0."""
        expanded = expand_operator(stdgates.CNOT(), [1, 0], 2)
        # |control=1, target=0> is index 2, goes to index 3
        assert expanded[3, 2] == 1.0
        assert expanded[2, 3] == 1.0
        assert expanded[1, 1] == 1.0

    def test_expansion_is_unitary(self, rng):
        u = _random_unitary(rng, 2)
        assert is_unitary(expand_operator(u, [2, 0], 3), atol=1e-12)

    def test_rejects_operator_larger_than_state(self):
        with pytest.raises(SizeMismatchError):
            expand_operator(stdgates.TOFFOLI(), [0, 1, 2], 2)

    def test_rejects_matrix_target_mismatch(self):
        with pytest.raises(SizeMismatchError):
            expand_operator(stdgates.CNOT(), [0], 2)

    def test_rejects_out_of_range_target(self):
        with pytest.raises(QubitRangeError):
            expand_operator(stdgates.X(), [2], 2)

    def test_rejects_duplicate_targets(self):
        with pytest.raises(DuplicateIndexError):
            expand_operator(stdgates.CNOT(), [1, 1], 2)

    def test_large_expansion_logs_warning(self, caplog):
        logger = logging.getLogger("qregister.backend.statevector")
        logger.propagate = True
        try:
            with caplog.at_level(logging.WARNING, logger="qregister.backend.statevector"):
                expand_operator(stdgates.X(), [0], 11)
        finally:
            logger.propagate = False
        assert "dense 2048 x 2048" in caplog.text


class TestApplyOperator:
    """The tensor contraction path agrees with the dense reference."""

    @pytest.mark.parametrize(
        "n_qubits,targets",
        [
            (1, [0]),
            (2, [0]),
            (2, [1]),
            (2, [0, 1]),
            (2, [1, 0]),
            (3, [2, 0]),
            (3, [1, 2, 0]),
            (4, [3, 1]),
            (4, [0, 3, 2]),
            (5, [4, 0, 2, 1]),
        ],
    )
    def test_tensor_path_matches_dense_path(self, rng, n_qubits, targets):
        state = _random_state(rng, n_qubits)
        u = _random_unitary(rng, len(targets))
        dense = apply_operator_dense(state, u, targets, n_qubits)
        fast = apply_operator(state, u, targets, n_qubits)
        assert torch.allclose(fast, dense, atol=1e-12)

    def test_norm_preserved(self, rng):
        state = _random_state(rng, 4)
        for _ in range(10):
            k = int(rng.integers(1, 4))
            targets = [int(t) for t in rng.permutation(4)[:k]]
            state = apply_operator(state, _random_unitary(rng, k), targets, 4)
            assert abs(float((state.abs() ** 2).sum()) - 1.0) < 1e-12

    @pytest.mark.parametrize("control,target", [(0, 1), (1, 0), (0, 2), (2, 1)])
    def test_cnot_truth_table_on_three_qubits(self, control, target):
        for index in range(8):
            state = basis_state(3, index)
            out = apply_operator(state, stdgates.CNOT(), [control, target], 3)
            expected = index ^ (1 << target) if (index >> control) & 1 else index
            assert out[expected] == 1.0

    def test_does_not_modify_input(self):
        state = zero_state(2)
        apply_operator(state, stdgates.X(), [0], 2)
        assert state[0] == 1.0

    def test_rejects_wrong_state_shape(self):
        with pytest.raises(SizeMismatchError):
            apply_operator(zero_state(3), stdgates.X(), [0], 2)

    def test_complex64_state(self):
        state = zero_state(2, dtype=torch.complex64)
        out = apply_operator(state, stdgates.H(), [1], 2)
        assert out.dtype == torch.complex64
        assert torch.allclose(out[2].abs(), torch.tensor(1.0 / math.sqrt(2.0)))


class TestMarginalProbabilities:
    """Probability mass folded onto a subset of bits."""

    def test_product_state(self):
        s = 1.0 / math.sqrt(2.0)
        # qubit 0 in |+>, qubit 1 in |1>
        state = torch.tensor([0.0, 0.0, s, s], dtype=torch.complex128)
        assert torch.allclose(
            marginal_probabilities(state, [1]), torch.tensor([0.0, 1.0], dtype=torch.float64)
        )
        assert torch.allclose(
            marginal_probabilities(state, [0]), torch.tensor([0.5, 0.5], dtype=torch.float64)
        )

    def test_order_of_positions(self):
        state = basis_state(3, 0b001)
        probs = marginal_probabilities(state, [2, 0])
        # bit 0 of the outcome is qubit 2 (0), bit 1 is qubit 0 (1)
        assert probs[0b10] == 1.0

    def test_sums_to_one(self, rng):
        state = _random_state(rng, 4)
        for positions in itertools.permutations(range(4), 2):
            assert float(marginal_probabilities(state, positions).sum()) == pytest.approx(1.0)
