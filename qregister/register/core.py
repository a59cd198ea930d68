"""Quantum registers: aliasing views over one shared state vector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import torch

from qregister.backend.statevector import (
    APPLY_METHODS,
    basis_state,
    bits_to_index,
    marginal_probabilities,
)
from qregister.constants import (
    DEFAULT_LOCATION,
    EQUALITY_TOLERANCE,
    LOCAL_LOCATIONS,
    MAXIMUM_QUBITS_IN_REGISTER,
)
from qregister.core.device import Device, resolve_device
from qregister.diagnostics import assert_normalized, is_normalized, verify_if_enabled
from qregister.errors import (
    NotUnitaryOperationError,
    QubitRangeError,
    SizeMismatchError,
)
from qregister.linalg import is_unitary
from qregister.logging import get_logger
from qregister.measurement import ClassicalResult, measure_state
from qregister.operations import Operation, QuantumOperation, check_unique, not_op

logger = get_logger(__name__)


@dataclass(eq=False)
class SharedState:
    """
    The mutable state behind a register and every view derived from it.

    Operator application and measurement copy into ``amplitudes`` in place.
    Growth rebinds ``amplitudes`` and ``n_qubits`` here, so every view that
    holds this object sees the new state.

    Attributes
    ----------
    amplitudes:
        1D complex tensor of length 2**n_qubits.
    n_qubits:
        Number of absolute qubits backing the state.
    device:
        Device the amplitudes live on.
    generator:
        Source of measurement draws, shared by all views.
    method:
        Operator application path, ``"tensor"`` or ``"dense"``.
    """

    amplitudes: torch.Tensor
    n_qubits: int
    device: Device
    generator: torch.Generator
    method: str = "tensor"


def _make_generator(
    generator: Optional[torch.Generator], seed: Optional[int]
) -> torch.Generator:
    if generator is not None and seed is not None:
        raise ValueError("Pass either generator or seed, not both.")
    if generator is not None:
        return generator
    gen = torch.Generator()
    if seed is not None:
        gen.manual_seed(int(seed))
    else:
        gen.seed()
    return gen


class QuantumRegister:
    """
    A view of some or all qubits of a shared state vector.

    The exposure map gives, for each exposed position ``p``, the absolute
    qubit it refers to. Slicing creates a new view with a new exposure map
    over the same state; nothing is copied, and applying an operator or
    measuring through any view is visible through all of them.

    Example
    -------
    >>> from qregister.operations import cnot, hadamard
    >>> reg = QuantumRegister(2, seed=7)
    >>> reg.apply_operation(hadamard(0)).apply_operation(cnot(0, 1))
    QuantumRegister(length=2, total_length=2, exposure=(0, 1))
    >>> r = reg.measure()
    >>> r[0] == r[1]
    True
    """

    def __init__(
        self,
        n_qubits: Union[int, Sequence[bool], None] = None,
        initial_values: Optional[Sequence[bool]] = None,
        *,
        device: Device | torch.device | str | None = None,
        generator: Optional[torch.Generator] = None,
        seed: Optional[int] = None,
        method: str = "tensor",
        labels: Tuple[str, str] = ("0", "1"),
    ) -> None:
        """
        Create a register in a computational basis state.

        Args:
            n_qubits: Number of qubits, or a sequence of initial values.
                Defaults to 1 when neither this nor ``initial_values`` is given.
            initial_values: Initial value of each qubit, qubit 0 first.
            device: Where the state lives ("sv_cpu", "sv_cuda", ...).
            generator: Random source for measurement. Shared with all views.
            seed: Seed for a fresh generator. Mutually exclusive with generator.
            method: "tensor" (default) or "dense" operator application.
            labels: Display labels for 0 and 1 in measurement results.

        Raises:
            QubitRangeError: If the qubit count is outside [1, 62].
            SizeMismatchError: If n_qubits and initial_values disagree.
            ValueError: If method is unknown.
        """
        if n_qubits is not None and not isinstance(n_qubits, int):
            if initial_values is not None:
                raise TypeError("initial values given twice")
            n_qubits, initial_values = None, n_qubits

        if initial_values is not None:
            bits = tuple(bool(v) for v in initial_values)
            if n_qubits is not None and n_qubits != len(bits):
                raise SizeMismatchError(
                    f"n_qubits={n_qubits} does not match {len(bits)} initial values"
                )
            n_qubits = len(bits)
            index = bits_to_index(bits)
        else:
            n_qubits = 1 if n_qubits is None else int(n_qubits)
            index = 0

        if method not in APPLY_METHODS:
            raise ValueError(
                f"Unknown method {method!r}. Supported methods: {sorted(APPLY_METHODS)}"
            )

        qdevice = resolve_device(device)
        amplitudes = basis_state(
            n_qubits, index, device=qdevice, dtype=qdevice.complex_dtype
        )
        assert_normalized(amplitudes)

        self._shared = SharedState(
            amplitudes=amplitudes,
            n_qubits=n_qubits,
            device=qdevice,
            generator=_make_generator(generator, seed),
            method=method,
        )
        self._exposure: Tuple[int, ...] = tuple(range(n_qubits))
        self._label_zero, self._label_one = labels
        self._location = DEFAULT_LOCATION
        logger.debug("Created %d-qubit register in basis state %d", n_qubits, index)

    def _view(self, exposure: Iterable[int]) -> "QuantumRegister":
        exposure = tuple(exposure)
        if not exposure:
            raise QubitRangeError("A register view must expose at least one qubit.")
        view = object.__new__(type(self))
        view._shared = self._shared
        view._exposure = exposure
        view._label_zero = self._label_zero
        view._label_one = self._label_one
        view._location = self._location
        return view

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        """Number of exposed qubits."""
        return len(self._exposure)

    def __len__(self) -> int:
        return len(self._exposure)

    @property
    def total_length(self) -> int:
        """Number of absolute qubits behind the shared state."""
        return self._shared.n_qubits

    @property
    def exposure(self) -> Tuple[int, ...]:
        """Absolute qubit of each exposed position."""
        return self._exposure

    @property
    def device(self) -> Device:
        return self._shared.device

    @property
    def method(self) -> str:
        return self._shared.method

    @property
    def generator(self) -> torch.Generator:
        return self._shared.generator

    @property
    def location(self) -> str:
        return self._location

    def set_location(self, location: str) -> None:
        """
        Set the location of the register.

        Raises:
            ValueError: Unless location is "localhost" or "127.0.0.1".
        """
        if location.lower() not in LOCAL_LOCATIONS:
            raise ValueError(
                f"The location can only be localhost (127.0.0.1), got {location!r}"
            )
        self._location = location

    @property
    def label_zero(self) -> str:
        return self._label_zero

    @property
    def label_one(self) -> str:
        return self._label_one

    def set_labels(self, label_zero: str, label_one: str) -> None:
        """Set the labels used when measurement results are printed."""
        self._label_zero = label_zero
        self._label_one = label_one

    def get_indexes(
        self, beginning: Optional[int] = None, end: Optional[int] = None
    ) -> List[int]:
        """
        Exposed positions from ``beginning`` to ``end``, both inclusive.

        Positions are relative to this view and always start at 0.
        """
        beginning = 0 if beginning is None else beginning
        end = self.length - 1 if end is None else end
        self._check_position(beginning)
        self._check_position(end)
        return list(range(beginning, end + 1))

    def shares_state_with(self, other: "QuantumRegister") -> bool:
        """Return True if both views are backed by the same state."""
        return self._shared is other._shared

    def peek_state(self) -> torch.Tensor:
        """Return a copy of the full state vector without collapsing it."""
        return self._shared.amplitudes.clone()

    def probabilities(self) -> torch.Tensor:
        """
        Outcome probabilities for measuring this view, without collapsing.

        Index ``i`` of the result corresponds to the outcome whose bit ``p``
        is the value of exposed position ``p``.
        """
        return marginal_probabilities(self._shared.amplitudes, self._exposure)

    def is_valid_state(self) -> bool:
        return is_normalized(self._shared.amplitudes)

    def verify_valid_state(self) -> None:
        """Raise ImplementationError if the shared state is not normalized."""
        assert_normalized(self._shared.amplitudes)

    def __repr__(self) -> str:
        return (
            f"QuantumRegister(length={self.length}, "
            f"total_length={self.total_length}, exposure={self._exposure})"
        )

    # ------------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------------

    def _check_position(self, index: int) -> int:
        index = int(index)
        if index < 0 or index >= self.length:
            raise QubitRangeError(
                f"Index {index} is out of range. Valid indexes are 0 - {self.length - 1}."
            )
        return index

    def _check_positions(self, indexes: Iterable[int]) -> Tuple[int, ...]:
        positions = check_unique(indexes)
        for index in positions:
            self._check_position(index)
        return positions

    def slice(self, start: int, stop: int) -> "QuantumRegister":
        """
        View of exposed positions ``start`` through ``stop``, inclusive.

        Raises:
            QubitRangeError: If either index is out of range or stop < start.
        """
        self._check_position(start)
        self._check_position(stop)
        if stop < start:
            raise QubitRangeError(
                f"The stop index must be >= the start index, got {start} - {stop}."
            )
        return self._view(self._exposure[start : stop + 1])

    def slice_reverse(
        self, start: Optional[int] = None, stop: Optional[int] = None
    ) -> "QuantumRegister":
        """View of positions ``start`` through ``stop`` (default: all) in reverse order."""
        start = 0 if start is None else start
        stop = self.length - 1 if stop is None else stop
        return self._view(reversed(self.slice(start, stop)._exposure))

    def slice_from(self, start: int) -> "QuantumRegister":
        self._check_position(start)
        return self._view(self._exposure[start:])

    def slice_to(self, end: int) -> "QuantumRegister":
        """View of positions 0 through ``end``, inclusive."""
        self._check_position(end)
        return self._view(self._exposure[: end + 1])

    def slice_subset(self, indexes: Iterable[int]) -> "QuantumRegister":
        """
        View of the given positions, in the given order.

        Raises:
            QubitRangeError: If an index is out of range or none are given.
            DuplicateIndexError: If an index is repeated.
        """
        positions = self._check_positions(indexes)
        return self._view(self._exposure[p] for p in positions)

    def slice_reorder(self, new_indexes: Sequence[int]) -> "QuantumRegister":
        """
        View of all positions in a new order.

        Position ``p`` of the result is position ``new_indexes[p]`` of this
        view, so ``[2, 0, 1]`` puts the current position 2 first.

        Raises:
            SizeMismatchError: If new_indexes does not cover every position.
        """
        new_indexes = list(new_indexes)
        if len(new_indexes) != self.length:
            raise SizeMismatchError(
                f"Reorder needs {self.length} indexes, got {len(new_indexes)}."
            )
        return self.slice_subset(new_indexes)

    def __getitem__(
        self, key: Union[int, slice, Sequence[int]]
    ) -> "QuantumRegister":
        if isinstance(key, slice):
            return self.slice_subset(range(self.length)[key])
        if isinstance(key, int):
            if key < 0:
                key += self.length
            return self.slice_subset([key])
        return self.slice_subset(key)

    def __iter__(self) -> Iterator["QuantumRegister"]:
        for position in range(self.length):
            yield self._view([self._exposure[position]])

    # ------------------------------------------------------------------
    # Operator application
    # ------------------------------------------------------------------

    def _resolve(
        self, operation: QuantumOperation, indexes: Optional[Sequence[int]] = None
    ) -> Tuple[torch.Tensor, Tuple[int, ...]]:
        """Validate an operation against this view and map it to absolute qubits."""
        matrix = torch.as_tensor(operation.matrix)
        n_op = operation.n_qubits
        dim = 2**n_op
        if n_op < 1 or matrix.dim() != 2 or tuple(matrix.shape) != (dim, dim):
            raise SizeMismatchError(
                f"Operation {operation!r} acts on {n_op} qubits and needs a "
                f"{dim} x {dim} matrix, got shape {tuple(matrix.shape)}."
            )
        if n_op > self.length:
            raise SizeMismatchError(
                f"Operation {operation!r} acts on {n_op} qubits but the register "
                f"exposes {self.length}."
            )
        if indexes is None:
            positions = tuple(operation.targets)
            if len(positions) == n_op and max(positions) >= self.length:
                raise SizeMismatchError(
                    f"Operation {operation!r} needs {max(positions) + 1} exposed qubits "
                    f"but the register exposes {self.length}."
                )
        else:
            positions = tuple(indexes)
        if len(positions) != n_op:
            raise SizeMismatchError(
                f"Operation {operation!r} acts on {n_op} qubits but "
                f"{len(positions)} indexes were given."
            )
        positions = self._check_positions(positions)

        if not is_unitary(matrix):
            raise NotUnitaryOperationError(
                f"The operation {operation!r} is not unitary within {EQUALITY_TOLERANCE}. "
                "All operations must be unitary, and matrices must be built in double "
                "precision to pass this check."
            )
        absolute = tuple(self._exposure[p] for p in positions)
        return matrix, absolute

    def _apply_resolved(self, matrix: torch.Tensor, absolute: Sequence[int]) -> None:
        shared = self._shared
        kernel = APPLY_METHODS[shared.method]
        new_state = kernel(shared.amplitudes, matrix, absolute, shared.n_qubits)
        shared.amplitudes.copy_(new_state)
        verify_if_enabled(shared.amplitudes)

    def apply_operation(
        self, operation: QuantumOperation, indexes: Optional[Sequence[int]] = None
    ) -> "QuantumRegister":
        """
        Apply a unitary operation to this view.

        Args:
            operation: Any object with ``n_qubits``, ``targets`` and ``matrix``.
            indexes: Exposed position for each slot of the operation. Defaults
                to ``operation.targets``.

        Returns:
            This register, so calls can be chained.

        Raises:
            SizeMismatchError: If the operation does not fit this view.
            QubitRangeError: If an index is out of range.
            DuplicateIndexError: If an index is repeated.
            NotUnitaryOperationError: If the matrix is not unitary.
        """
        matrix, absolute = self._resolve(operation, indexes)
        logger.debug("Applying %r to absolute qubits %s", operation, list(absolute))
        self._apply_resolved(matrix, absolute)
        return self

    def apply_operations(
        self, operations: Iterable[QuantumOperation]
    ) -> "QuantumRegister":
        """
        Apply operations in order.

        Every operation is validated before any is applied, so a failure
        leaves the state untouched.
        """
        resolved = [self._resolve(op) for op in operations]
        for matrix, absolute in resolved:
            self._apply_resolved(matrix, absolute)
        return self

    def apply_operation_all(self, operation: QuantumOperation) -> "QuantumRegister":
        """
        Apply a single-qubit operation to every exposed position.

        The operation's own target is ignored. It is validated once before
        any position is touched.

        Raises:
            SizeMismatchError: If the operation acts on more than one qubit.
            NotUnitaryOperationError: If the matrix is not unitary.
        """
        if operation.n_qubits != 1:
            raise SizeMismatchError(
                f"Only single-qubit operations can be applied to every qubit, "
                f"got {operation!r} on {operation.n_qubits} qubits."
            )
        matrix, _ = self._resolve(operation, [0])
        logger.debug("Applying %r to every exposed qubit %s", operation, list(self._exposure))
        for qubit in self._exposure:
            self._apply_resolved(matrix, (qubit,))
        return self

    def apply_matrix(self, matrix: torch.Tensor) -> "QuantumRegister":
        """
        Apply a 2^M x 2^M unitary to the whole view, slot ``p`` on position ``p``.

        Raises:
            SizeMismatchError: If the matrix size is not 2**len(self).
        """
        operation = Operation(matrix)
        if operation.n_qubits != self.length:
            raise SizeMismatchError(
                f"Matrix acts on {operation.n_qubits} qubits but the register "
                f"exposes {self.length}."
            )
        return self.apply_operation(operation)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def measure(
        self, indexes: Union[int, Iterable[int], None] = None
    ) -> ClassicalResult:
        """
        Measure this view, or the given positions of it, collapsing the state.

        The collapse is applied to the shared state, so every view observes
        it. ``result[i]`` is the outcome of the i-th measured position.
        """
        if indexes is None:
            target = self
        elif isinstance(indexes, int):
            target = self.slice_subset([indexes])
        else:
            target = self.slice_subset(indexes)

        shared = self._shared
        collapsed, result = measure_state(
            shared.amplitudes, target._exposure, shared.generator
        )
        shared.amplitudes.copy_(collapsed)
        return result.with_labels(self._label_zero, self._label_one)

    def set_qubits(
        self, values: Union[Sequence[bool], ClassicalResult], start: int = 0
    ) -> "QuantumRegister":
        """
        Force positions ``start``, ``start+1``, ... to classical values.

        The positions are measured first, which also affects any qubit
        entangled with them, and then flipped where the outcome differs.

        Raises:
            QubitRangeError: If the values do not fit after ``start``.
        """
        bits = tuple(bool(v) for v in values)
        if not bits:
            return self
        self._check_position(start)
        if start + len(bits) > self.length:
            raise QubitRangeError(
                f"{len(bits)} values do not fit in the register after index {start}; "
                f"only {self.length - start} qubits remain."
            )

        target = self.slice(start, start + len(bits) - 1)
        observed = target.measure()
        for position, (have, want) in enumerate(zip(observed, bits)):
            if have != want:
                target.apply_operation(not_op(position))
        return self

    def set_qubit(self, index: int, value: bool) -> "QuantumRegister":
        return self.set_qubits([value], start=index)

    def set_all_qubits(self, value: bool) -> "QuantumRegister":
        return self.set_qubits([value] * self.length)

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    def insert_qubits(
        self, at_index: int, count: int, initialize_to: bool = False
    ) -> "QuantumRegister":
        """
        Add ``count`` new qubits to the shared state, exposed at ``at_index``.

        The new qubits become the highest absolute qubits, so the exposure
        maps of other views stay valid. Only this view exposes them.

        Args:
            at_index: Exposed position of the first new qubit, 0 to len(self).
            count: Number of qubits to add.
            initialize_to: Value of every new qubit.

        Raises:
            QubitRangeError: If at_index or count is invalid, or the register
                would exceed MAXIMUM_QUBITS_IN_REGISTER.
        """
        if at_index < 0 or at_index > self.length:
            raise QubitRangeError(
                f"Insert index {at_index} is out of range 0 - {self.length}."
            )
        if count < 0:
            raise QubitRangeError(f"count must be >= 0, got {count}")
        if count == 0:
            return self

        shared = self._shared
        total = shared.n_qubits + count
        if total > MAXIMUM_QUBITS_IN_REGISTER:
            raise QubitRangeError(
                f"The maximum number of qubits in a register is "
                f"{MAXIMUM_QUBITS_IN_REGISTER}. This register has {shared.n_qubits} "
                f"qubits; adding {count} exceeds that limit."
            )

        block_index = (2**count - 1) if initialize_to else 0
        block = basis_state(
            count, block_index, device=shared.device, dtype=shared.amplitudes.dtype
        )
        new_qubits = range(shared.n_qubits, total)
        shared.amplitudes = torch.kron(block, shared.amplitudes)
        shared.n_qubits = total
        assert_normalized(shared.amplitudes)

        exposure = list(self._exposure)
        exposure[at_index:at_index] = new_qubits
        self._exposure = tuple(exposure)
        logger.debug(
            "Inserted %d qubits at position %d; total is now %d", count, at_index, total
        )
        return self

    def insert_qubits_at_beginning(
        self, count: int, initialize_to: bool = False
    ) -> "QuantumRegister":
        return self.insert_qubits(0, count, initialize_to)

    def insert_qubits_at_end(
        self, count: int, initialize_to: bool = False
    ) -> "QuantumRegister":
        return self.insert_qubits(self.length, count, initialize_to)
