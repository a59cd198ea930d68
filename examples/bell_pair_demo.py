"""Bell pair example: entangle two qubits and sample correlated outcomes.

This example prepares (|00> + |11>)/sqrt(2) with a Hadamard and a CNOT,
measures the qubits one at a time through single-qubit views, and tallies
the joint outcomes over many runs.
"""

from __future__ import annotations

from collections import Counter

import qregister as qr


def main() -> None:
    """Prepare and measure Bell pairs."""
    generator_seed = 0
    trials = 1000

    counts: Counter[str] = Counter()
    reg = qr.QuantumRegister(2, seed=generator_seed)
    for _ in range(trials):
        reg.set_all_qubits(False)
        reg.apply_operations([qr.hadamard(0), qr.cnot(0, 1)])
        first = reg[0].measure()
        second = reg[1].measure()
        counts[f"{first}{second}"] += 1

    print(f"Bell pair outcomes over {trials} trials:")
    for outcome in ("00", "01", "10", "11"):
        print(f"  {outcome}: {counts[outcome]}")

    if counts["01"] or counts["10"]:
        raise SystemExit("Uncorrelated outcome observed")
    print("All outcomes correlated")


if __name__ == "__main__":
    main()
