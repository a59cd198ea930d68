"""Tests for the Operation descriptor and its factories."""

import math

import pytest
import torch

from qregister.errors import DuplicateIndexError, QubitRangeError, SizeMismatchError
from qregister.gates import standard as stdgates
from qregister.linalg import matrices_equal
from qregister.operations import (
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
from qregister.register import QuantumRegister


class TestOperationConstruction:
    """Validation performed when an Operation is built."""

    def test_default_targets(self):
        op = Operation(stdgates.CNOT())
        assert op.targets == (0, 1)
        assert op.n_qubits == 2
        assert op.span == 2

    def test_matrix_is_private_complex128_copy(self):
        src = torch.eye(2, dtype=torch.complex64)
        op = Operation(src)
        src[0, 0] = 5.0
        assert op.matrix.dtype == torch.complex128
        assert op.matrix[0, 0] == 1.0

    def test_real_matrix_is_promoted(self):
        op = Operation(torch.tensor([[0.0, 1.0], [1.0, 0.0]]))
        assert op.matrix.dtype == torch.complex128

    def test_rejects_non_power_of_two(self):
        with pytest.raises(SizeMismatchError, match="power-of-two"):
            Operation(torch.eye(3, dtype=torch.complex128))

    def test_rejects_non_square(self):
        with pytest.raises(SizeMismatchError):
            Operation(torch.zeros(2, 4, dtype=torch.complex128))

    def test_rejects_1x1(self):
        with pytest.raises(SizeMismatchError):
            Operation(torch.eye(1, dtype=torch.complex128))

    def test_rejects_wrong_target_count(self):
        with pytest.raises(SizeMismatchError, match="needs 2 targets"):
            Operation(stdgates.CNOT(), (0,))

    def test_rejects_negative_target(self):
        with pytest.raises(QubitRangeError):
            Operation(stdgates.X(), (-1,))

    def test_rejects_duplicate_targets(self):
        with pytest.raises(DuplicateIndexError):
            Operation(stdgates.CNOT(), (1, 1))

    def test_is_frozen(self):
        op = not_op(0)
        with pytest.raises(Exception):
            op.name = "other"

    def test_satisfies_capability_protocol(self):
        assert isinstance(hadamard(0), QuantumOperation)

    def test_span_uses_highest_target(self):
        assert cnot(3, 1).span == 4


class TestOperationAlgebra:
    """Derived operations."""

    def test_equality_by_value(self):
        assert not_op(0) == Operation(stdgates.X(), (0,))
        assert not_op(0) != not_op(1)
        assert not_op(0) != z_op(0)

    def test_with_targets(self):
        op = cnot().with_targets(2, 0)
        assert op.targets == (2, 0)
        assert cnot().with_targets([1, 0]).targets == (1, 0)

    def test_adjoint_inverts(self):
        op = t_gate(0)
        product = op.combine(op.adjoint())
        assert matrices_equal(product.matrix, torch.eye(2, dtype=torch.complex128), atol=1e-12)

    def test_combine_applies_other_first(self):
        """combine(other) is self.matrix @ other.matrix."""
        h, s = hadamard(0), s_gate(0)
        combined = s.combine(h)
        assert matrices_equal(combined.matrix, s.matrix @ h.matrix)

    def test_combine_requires_same_targets(self):
        with pytest.raises(SizeMismatchError):
            not_op(0).combine(not_op(1))

    def test_tensor_joins_disjoint_targets(self):
        op = not_op(2).tensor(z_op(0))
        assert op.targets == (2, 0)
        # slot 0 is NOT, slot 1 is Z
        assert matrices_equal(op.matrix, torch.kron(stdgates.Z(), stdgates.X()))

    def test_tensor_rejects_overlap(self):
        with pytest.raises(DuplicateIndexError):
            not_op(1).tensor(z_op(1))

    def test_tensor_matches_separate_application(self):
        joined = QuantumRegister(3).apply_operation(hadamard(0).tensor(not_op(2)))
        separate = QuantumRegister(3).apply_operations([hadamard(0), not_op(2)])
        assert matrices_equal(joined.peek_state(), separate.peek_state())

    def test_operations_are_hashable(self):
        ops = {not_op(0), not_op(0), hadamard(1)}
        assert len(ops) == 2
        assert hash(cnot(0, 1)) == hash(Operation(stdgates.CNOT(), (0, 1), "other"))

    def test_non_unitary_is_detected(self):
        op = Operation(2.0 * torch.eye(2, dtype=torch.complex128))
        assert not op.is_unitary()
        assert hadamard().is_unitary()


class TestFactories:
    """Named operation factories."""

    @pytest.mark.parametrize(
        "op",
        [
            identity_op(0),
            not_op(0),
            y_op(0),
            z_op(0),
            hadamard(0),
            s_gate(0),
            t_gate(0),
            phase_shift(0.4, 0),
            rotate_x(0.4, 0),
            rotate_y(0.4, 0),
            rotate_z(0.4, 0),
            rotate_k(3, 0),
            cnot(0, 1),
            swap(0, 1),
            toffoli(0, 1, 2),
            fredkin(0, 1, 2),
        ],
    )
    def test_factories_are_unitary(self, op):
        assert op.is_unitary()

    def test_factory_targets(self):
        assert not_op(3).targets == (3,)
        assert cnot(2, 0).targets == (2, 0)
        assert toffoli(4, 2, 0).targets == (4, 2, 0)
        assert fredkin(1, 0, 2).targets == (1, 0, 2)

    @pytest.mark.parametrize(
        "build",
        [
            lambda: cnot(1, 1),
            lambda: swap(0, 0),
            lambda: toffoli(0, 1, 0),
            lambda: fredkin(2, 2, 1),
            lambda: controlled_u(not_op(0), control=0),
        ],
    )
    def test_repeated_indexes_are_rejected(self, build):
        with pytest.raises(DuplicateIndexError):
            build()

    def test_controlled_u_of_not_is_cnot(self):
        op = controlled_u(not_op(1), control=0)
        assert op == cnot(0, 1)

    def test_controlled_u_of_bare_matrix(self):
        op = controlled_u(stdgates.SWAP(), control=2)
        assert op.targets == (2, 3, 4)
        assert matrices_equal(op.matrix, stdgates.FREDKIN())

    def test_controlled_u_explicit_targets(self):
        op = controlled_u(stdgates.Z(), control=1, targets=[0])
        assert op.targets == (1, 0)

    def test_rotate_x_pi_is_not_up_to_phase(self):
        assert matrices_equal(rotate_x(math.pi).matrix, -1.0j * not_op().matrix, atol=1e-12)

    def test_repr_names_operation(self):
        assert repr(cnot(0, 1)) == "Operation(name='CNOT', targets=(0, 1))"
