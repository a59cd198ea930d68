"""Classical measurement outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Tuple

from qregister.errors import QubitRangeError


@dataclass(frozen=True)
class ClassicalResult:
    """
    Immutable bit-string produced by a measurement.

    ``bits[i]`` is the outcome of exposed position ``i`` of the measured
    register. As an unsigned integer, ``bits[0]`` is the least significant
    bit. The labels only affect ``str()``; equality compares bits alone.

    Examples
    --------
    >>> r = ClassicalResult.from_uint(6, n_bits=3)
    >>> r.to_bool_array()
    [False, True, True]
    >>> str(r)
    '011'
    """

    bits: Tuple[bool, ...]
    label_zero: str = field(default="0", compare=False)
    label_one: str = field(default="1", compare=False)

    def __post_init__(self) -> None:
        bits = tuple(bool(b) for b in self.bits)
        if not bits:
            raise QubitRangeError("A ClassicalResult needs at least one bit.")
        object.__setattr__(self, "bits", bits)

    @classmethod
    def from_bool_array(
        cls,
        values: Iterable[bool],
        label_zero: str = "0",
        label_one: str = "1",
    ) -> "ClassicalResult":
        return cls(tuple(values), label_zero, label_one)

    @classmethod
    def from_uint(
        cls,
        value: int,
        n_bits: Optional[int] = None,
        label_zero: str = "0",
        label_one: str = "1",
    ) -> "ClassicalResult":
        """
        Build a result from an unsigned integer, least significant bit first.

        Parameters
        ----------
        value:
            Non-negative integer.
        n_bits:
            Width of the result. Defaults to the bit length of ``value``
            (at least 1).

        Raises
        ------
        QubitRangeError
            If ``value`` is negative or does not fit in ``n_bits`` bits.
        """
        value = int(value)
        if value < 0:
            raise QubitRangeError(f"value must be non-negative, got {value}.")
        if n_bits is None:
            n_bits = max(1, value.bit_length())
        if n_bits < 1:
            raise QubitRangeError(f"n_bits must be >= 1, got {n_bits}.")
        if value >= 1 << n_bits:
            raise QubitRangeError(
                f"value {value} does not fit in {n_bits} bits."
            )
        bits = tuple(bool((value >> i) & 1) for i in range(n_bits))
        return cls(bits, label_zero, label_one)

    def to_bool_array(self) -> list[bool]:
        return list(self.bits)

    def to_uint(self) -> int:
        """Unsigned value with ``bits[0]`` as the least significant bit."""
        value = 0
        for i, bit in enumerate(self.bits):
            if bit:
                value |= 1 << i
        return value

    def to_int(self) -> int:
        """Two's complement value; the last bit is the sign bit."""
        value = self.to_uint()
        if self.bits[-1]:
            value -= 1 << len(self.bits)
        return value

    def with_labels(self, label_zero: str, label_one: str) -> "ClassicalResult":
        return replace(self, label_zero=label_zero, label_one=label_one)

    def __len__(self) -> int:
        return len(self.bits)

    def __getitem__(self, index: int) -> bool:
        return self.bits[index]

    def __iter__(self) -> Iterator[bool]:
        return iter(self.bits)

    def __str__(self) -> str:
        return "".join(self.label_one if b else self.label_zero for b in self.bits)
