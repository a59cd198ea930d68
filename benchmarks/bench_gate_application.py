"""Benchmark operator application: tensor contraction vs dense expansion."""

import time
from typing import Dict

import torch

import qregister as qr
from qregister.backend.statevector import apply_operator, apply_operator_dense, zero_state
from qregister.gates import standard as stdgates


def benchmark_operator_application(
    n_qubits: int,
    n_gates: int = 200,
    method: str = "tensor",
    device: str = "cpu",
) -> Dict[str, float]:
    """Benchmark one- and two-qubit operator application on a statevector.

    Args:
        n_qubits: Number of qubits.
        n_gates: Number of operators to apply.
        method: "tensor" or "dense".
        device: Device ('cpu' or 'cuda').

    Returns:
        Dictionary with timing results.
    """
    device_map = {"cpu": "sv_cpu", "cuda": "sv_cuda"}
    qr_device = qr.device(device_map.get(device, "sv_cpu"))
    torch_device = torch.device(device)
    kernel = apply_operator if method == "tensor" else apply_operator_dense

    state = zero_state(n_qubits, device=qr_device)
    gates = [
        (stdgates.H(device=torch_device), 1),
        (stdgates.CNOT(device=torch_device), 2),
        (stdgates.T(device=torch_device), 1),
    ]

    # Warmup
    for _ in range(3):
        kernel(state, gates[0][0], [0], n_qubits)

    start = time.perf_counter()
    for i in range(n_gates):
        gate, k = gates[i % len(gates)]
        targets = [(i + j) % n_qubits for j in range(k)]
        state = kernel(state, gate, targets, n_qubits)
    end = time.perf_counter()

    total_time = end - start
    return {
        "n_qubits": n_qubits,
        "n_gates": n_gates,
        "total_time_sec": total_time,
        "time_per_gate_sec": total_time / n_gates,
        "gates_per_sec": n_gates / total_time,
    }


if __name__ == "__main__":
    print("Benchmarking operator application...")

    for n in (4, 8, 10):
        dense = benchmark_operator_application(n_qubits=n, n_gates=50, method="dense")
        tensor = benchmark_operator_application(n_qubits=n, n_gates=50, method="tensor")
        print(f"{n} qubits:")
        print(f"  dense:  {dense['time_per_gate_sec']*1e3:.3f} ms per gate")
        print(f"  tensor: {tensor['time_per_gate_sec']*1e3:.3f} ms per gate")

    results = benchmark_operator_application(n_qubits=20, n_gates=200)
    print("Tensor path (20 qubits, 200 gates):")
    print(f"  Time per gate: {results['time_per_gate_sec']*1e3:.3f} ms")
    print(f"  Gates per second: {results['gates_per_sec']:.0f}")
