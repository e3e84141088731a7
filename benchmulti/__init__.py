# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Micro-benchmark and correctness-comparison harness.

Runs several alternative implementations ("forms") of the same computation,
times each, counts garbage-collector activity, optionally checks that all
forms agree, and ranks them in a table with relative-speed factors.

Key components:
  - Timer/Collector: per-candidate timed window with GC accounting (timer.py)
  - Equivalence: deep value equality and diffs across results (equivalence.py)
  - Isolation: freshly compiled single-use units (isolation.py)
  - Report: sorting, speed factors, table rendering (report.py)
  - Drivers: native vs isolated, and per-environment comparisons (drivers.py)
"""

from .errors import (
    BenchError,
    CandidateFault,
    ConfigurationError,
    EquivalenceError,
    IsolationBuildError,
)
from .config import IsolationConfig
from .candidate import Candidate, normalize_candidates
from .timer import Measurement, GCMonitor, measure, measure_with_result
from .equivalence import EquivalenceRecord, check, diff_values, values_equal
from .report import (
    HEADER,
    SEPARATOR,
    ReportRow,
    Table,
    aggregate,
    build_table,
    export_json,
    prefix_measurements,
)
from .runner import benchmark, run_pipeline
from .isolation import IsolationUnit, UnitBuilder, benchmark_isolated, live_units
from .drivers import benchmark_dual_context, benchmark_multi_environment

__all__ = [
    "BenchError",
    "CandidateFault",
    "ConfigurationError",
    "EquivalenceError",
    "IsolationBuildError",
    "IsolationConfig",
    "Candidate",
    "normalize_candidates",
    "Measurement",
    "GCMonitor",
    "measure",
    "measure_with_result",
    "EquivalenceRecord",
    "check",
    "diff_values",
    "values_equal",
    "HEADER",
    "SEPARATOR",
    "ReportRow",
    "Table",
    "aggregate",
    "build_table",
    "export_json",
    "prefix_measurements",
    "benchmark",
    "run_pipeline",
    "IsolationUnit",
    "UnitBuilder",
    "benchmark_isolated",
    "live_units",
    "benchmark_dual_context",
    "benchmark_multi_environment",
]
