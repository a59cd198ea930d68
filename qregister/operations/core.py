"""Operation descriptors: a unitary matrix plus the slots it targets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, Tuple, runtime_checkable

import torch

from qregister.constants import DEFAULT_COMPLEX_DTYPE, EQUALITY_TOLERANCE
from qregister.errors import DuplicateIndexError, QubitRangeError, SizeMismatchError
from qregister.gates import standard as stdgates
from qregister.linalg import (
    conjugate_transpose,
    is_power_of_two,
    is_square,
    is_unitary,
    kron,
    matrices_equal,
)


@runtime_checkable
class QuantumOperation(Protocol):
    """
    Capability interface the register engine depends on.

    Any object exposing these three members can be applied to a register.
    """

    @property
    def n_qubits(self) -> int: ...

    @property
    def targets(self) -> Tuple[int, ...]: ...

    @property
    def matrix(self) -> torch.Tensor: ...


def check_unique(indexes: Iterable[int], what: str = "index") -> Tuple[int, ...]:
    """Return ``indexes`` as a tuple, raising DuplicateIndexError on repeats."""
    seen = set()
    out = []
    for index in indexes:
        index = int(index)
        if index in seen:
            raise DuplicateIndexError(
                f"The {what} {index} is specified more than once."
            )
        seen.add(index)
        out.append(index)
    return tuple(out)


@dataclass(frozen=True, eq=False)
class Operation:
    """
    An immutable operation: a 2^k x 2^k matrix and k target slots.

    ``targets[j]`` is the exposed register position that receives slot ``j``
    of the matrix, where slot ``j`` is bit ``j`` of the matrix index. The
    default targets are ``(0, 1, ..., k-1)``.

    Attributes
    ----------
    matrix:
        Complex matrix of shape (2**k, 2**k), stored as a private complex128
        copy.
    targets:
        Exposed positions, one per slot.
    name:
        Display name used in logs and reprs.

    Equality compares targets and matrices within ``EQUALITY_TOLERANCE`` and
    ignores the name. The hash only covers the targets.
    """

    matrix: torch.Tensor
    targets: Optional[Tuple[int, ...]] = None
    name: str = "U"

    def __post_init__(self) -> None:
        matrix = torch.as_tensor(self.matrix)
        if not is_square(matrix) or not is_power_of_two(matrix.shape[0]):
            raise SizeMismatchError(
                "Operation matrix must be square with a power-of-two size, "
                f"got shape {tuple(matrix.shape)}."
            )
        if matrix.shape[0] < 2:
            raise SizeMismatchError("Operation matrix must act on at least one qubit.")
        matrix = matrix.detach().to(DEFAULT_COMPLEX_DTYPE).clone()
        k = matrix.shape[0].bit_length() - 1

        if self.targets is None:
            targets = tuple(range(k))
        else:
            targets = tuple(int(t) for t in self.targets)
        if len(targets) != k:
            raise SizeMismatchError(
                f"A {k}-qubit operation needs {k} targets, got {len(targets)}: {targets}."
            )
        for t in targets:
            if t < 0:
                raise QubitRangeError(f"Target indexes must be >= 0, got {t}.")
        check_unique(targets, what="target index")

        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "targets", targets)

    @property
    def n_qubits(self) -> int:
        """Number of qubits the matrix acts on."""
        return len(self.targets)

    @property
    def span(self) -> int:
        """Minimum exposed length a register needs to host this operation."""
        return max(self.targets) + 1

    def is_unitary(self, atol: float = EQUALITY_TOLERANCE) -> bool:
        return is_unitary(self.matrix, atol=atol)

    def with_targets(self, *targets: int) -> "Operation":
        """Return a copy aimed at different exposed positions."""
        if len(targets) == 1 and not isinstance(targets[0], int):
            targets = tuple(targets[0])
        return Operation(self.matrix, tuple(targets), self.name)

    def adjoint(self) -> "Operation":
        """Return the inverse operation U† on the same targets."""
        return Operation(conjugate_transpose(self.matrix), self.targets, f"{self.name}†")

    def tensor(self, other: "Operation") -> "Operation":
        """
        Join two operations on disjoint targets into one.

        The result's slots are this operation's slots followed by ``other``'s.

        Raises
        ------
        DuplicateIndexError
            If the two operations share a target.
        """
        targets = check_unique(self.targets + other.targets, what="target index")
        matrix = kron(other.matrix, self.matrix)
        return Operation(matrix, targets, f"{self.name}⊗{other.name}")

    def combine(self, other: "Operation") -> "Operation":
        """
        Return the operation that applies ``other`` first and then ``self``.

        Raises
        ------
        SizeMismatchError
            If the operations do not act on the same targets.
        """
        if self.targets != other.targets:
            raise SizeMismatchError(
                f"Cannot combine operations on targets {self.targets} and {other.targets}."
            )
        return Operation(self.matrix @ other.matrix, self.targets, f"{self.name}·{other.name}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return self.targets == other.targets and matrices_equal(self.matrix, other.matrix)

    def __hash__(self) -> int:
        # Matrices compare within a tolerance, so only the targets are hashed.
        return hash((Operation, self.targets))

    def __repr__(self) -> str:
        return f"Operation(name={self.name!r}, targets={self.targets})"


def identity_op(index: int = 0) -> Operation:
    return Operation(stdgates.I(), (index,), "I")


def not_op(index: int = 0) -> Operation:
    """NOT (Pauli-X) on one exposed position."""
    return Operation(stdgates.X(), (index,), "NOT")


def y_op(index: int = 0) -> Operation:
    return Operation(stdgates.Y(), (index,), "Y")


def z_op(index: int = 0) -> Operation:
    return Operation(stdgates.Z(), (index,), "Z")


def hadamard(index: int = 0) -> Operation:
    """Hadamard on one exposed position."""
    return Operation(stdgates.H(), (index,), "H")


def s_gate(index: int = 0) -> Operation:
    return Operation(stdgates.S(), (index,), "S")


def t_gate(index: int = 0) -> Operation:
    return Operation(stdgates.T(), (index,), "T")


def phase_shift(phi: float, index: int = 0) -> Operation:
    return Operation(stdgates.PHASE(phi), (index,), "PHASE")


def rotate_x(theta: float, index: int = 0) -> Operation:
    return Operation(stdgates.RX(theta), (index,), "RX")


def rotate_y(theta: float, index: int = 0) -> Operation:
    return Operation(stdgates.RY(theta), (index,), "RY")


def rotate_z(theta: float, index: int = 0) -> Operation:
    return Operation(stdgates.RZ(theta), (index,), "RZ")


def rotate_k(k: int, index: int = 0) -> Operation:
    """Fourier-transform rotation R_k on one exposed position."""
    return Operation(stdgates.RK(k), (index,), f"R{k}")


def cnot(control: int = 0, target: int = 1) -> Operation:
    """Controlled-NOT; raises DuplicateIndexError if control == target."""
    return Operation(stdgates.CNOT(), check_unique((control, target)), "CNOT")


def swap(first: int = 0, second: int = 1) -> Operation:
    return Operation(stdgates.SWAP(), check_unique((first, second)), "SWAP")


def toffoli(control1: int = 0, control2: int = 1, target: int = 2) -> Operation:
    return Operation(
        stdgates.TOFFOLI(), check_unique((control1, control2, target)), "TOFFOLI"
    )


def fredkin(control: int = 0, first: int = 1, second: int = 2) -> Operation:
    return Operation(
        stdgates.FREDKIN(), check_unique((control, first, second)), "FREDKIN"
    )


def controlled_u(
    u: Operation | torch.Tensor,
    control: int = 0,
    targets: Optional[Sequence[int]] = None,
) -> Operation:
    """
    Controlled version of ``u``.

    ``targets`` defaults to the targets of ``u`` when it is an Operation, or
    to the positions following ``control`` when it is a bare matrix.
    """
    if isinstance(u, Operation):
        matrix, name = u.matrix, u.name
        if targets is None:
            targets = u.targets
    else:
        matrix, name = torch.as_tensor(u), "U"
        if not is_square(matrix) or not is_power_of_two(matrix.shape[0]):
            raise SizeMismatchError(
                f"controlled_u expects a 2^k x 2^k matrix, got shape {tuple(matrix.shape)}."
            )
        if targets is None:
            k = matrix.shape[0].bit_length() - 1
            targets = tuple(control + 1 + i for i in range(k))
    all_targets = check_unique((control, *targets))
    return Operation(stdgates.controlled(matrix.to(DEFAULT_COMPLEX_DTYPE)), all_targets, f"C{name}")
