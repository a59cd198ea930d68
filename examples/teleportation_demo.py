"""Teleportation example: move a qubit state using a shared Bell pair.

Qubit 0 holds the state to send, qubits 1 and 2 share a Bell pair. After the
sender measures qubits 0 and 1, the receiver applies X and Z corrections to
qubit 2, which then carries the original state.
"""

from __future__ import annotations

import math

import qregister as qr


def main() -> None:
    """Teleport RY(theta)|0> from qubit 0 to qubit 2."""
    theta = 1.1
    expected_one = math.sin(theta / 2.0) ** 2

    reg = qr.QuantumRegister(3, seed=0)
    sender, receiver = reg.slice(0, 1), reg[2]

    reg.apply_operation(qr.rotate_y(theta, 0))
    reg.apply_operations([qr.hadamard(1), qr.cnot(1, 2)])
    sender.apply_operations([qr.cnot(0, 1), qr.hadamard(0)])

    m = sender.measure()
    if m[1]:
        receiver.apply_operation(qr.not_op(0))
    if m[0]:
        receiver.apply_operation(qr.z_op(0))

    p_one = float(receiver.probabilities()[1])
    print(f"Sender measured: {m}")
    print(f"Receiver P(1) = {p_one:.6f} (expected {expected_one:.6f})")

    if abs(p_one - expected_one) > 1e-9:
        raise SystemExit("Teleportation failed")
    print("Teleportation succeeded")


if __name__ == "__main__":
    main()
