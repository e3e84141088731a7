#!/usr/bin/env python3
# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Compare naive and vectorized NumPy kernels with benchmulti.

Each kernel is run in both forms with equivalence checking on; results are
compared with np.allclose since the loop and vectorized forms round
differently.

Usage:
    python benchmarks/bench_kernels.py [ITERATIONS] [--json DIR]
"""

import os
import sys

import numpy as np

from benchmulti import benchmark, export_json

SEED = 42


def allclose(a, b):
    return np.allclose(a, b, rtol=1e-5, atol=1e-6)


def softmax_naive(x):
    out = np.zeros_like(x)
    for r in range(x.shape[0]):
        e = np.exp(x[r] - np.max(x[r]))
        out[r] = e / np.sum(e)
    return out


def softmax_numpy(x):
    e = np.exp(x - np.max(x, axis=1, keepdims=True))
    return e / np.sum(e, axis=1, keepdims=True)


def silu_naive(x):
    out = np.zeros_like(x)
    for i in range(len(x)):
        out[i] = x[i] * (1.0 / (1.0 + np.exp(-x[i])))
    return out


def silu_numpy(x):
    return x * (1.0 / (1.0 + np.exp(-x)))


def rmsnorm_naive(x, weight, eps=1e-6):
    out = np.zeros_like(x)
    for i in range(x.shape[0]):
        rms = np.sqrt(np.sum(x[i] ** 2) / x.shape[1] + eps)
        out[i] = (x[i] / rms) * weight
    return out


def rmsnorm_numpy(x, weight, eps=1e-6):
    rms = np.sqrt(np.mean(x ** 2, axis=1, keepdims=True) + eps)
    return (x / rms) * weight


def kernel_cases():
    rng = np.random.default_rng(SEED)
    x2d = rng.standard_normal((64, 256)).astype(np.float32)
    x1d = rng.standard_normal(2048).astype(np.float32)
    weight = rng.standard_normal(256).astype(np.float32)
    return {
        "softmax": {
            "naive": lambda: softmax_naive(x2d),
            "numpy": lambda: softmax_numpy(x2d),
        },
        "silu": {
            "naive": lambda: silu_naive(x1d),
            "numpy": lambda: silu_numpy(x1d),
        },
        "rmsnorm": {
            "naive": lambda: rmsnorm_naive(x2d, weight),
            "numpy": lambda: rmsnorm_numpy(x2d, weight),
        },
    }


def main(argv):
    iterations = int(argv[0]) if argv and not argv[0].startswith("-") else 20
    json_dir = argv[argv.index("--json") + 1] if "--json" in argv else None

    for name, forms in kernel_cases().items():
        table = benchmark(forms, iterations, check_equivalence=True, equal=allclose)
        print(f"\n=== {name} (x{iterations}) ===")
        print(table.render())
        if json_dir:
            export_json(table, os.path.join(json_dir, f"{name}.json"))


if __name__ == "__main__":
    main(sys.argv[1:])
