# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Timer/Collector: time one candidate's repeated execution.

Measurement methodology:
  - Wall time: time.perf_counter_ns (monotonic, ~ns resolution)
  - GC count:  delta of gc.get_stats() collections across the timed window
  - GC time:   gc.callbacks "start"/"stop" phases, accumulated only while the
               candidate runs

A full collection is forced before the timed window so garbage left by
earlier candidates is not attributed to this one.  There is no warmup and no
statistics beyond totals: one window, ``iterations`` sequential calls.
"""

from __future__ import annotations

import gc
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Union

from .errors import ConfigurationError


@dataclass(frozen=True)
class Measurement:
    """Raw statistics for one candidate in one run."""

    description: Union[str, int]
    elapsed_seconds: float
    gc_count: int
    gc_elapsed_seconds: float

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Measurement:
        return cls(
            description=data["description"],
            elapsed_seconds=float(data["elapsed_seconds"]),
            gc_count=int(data["gc_count"]),
            gc_elapsed_seconds=float(data["gc_elapsed_seconds"]),
        )

    def relabel(self, description) -> Measurement:
        return Measurement(
            description, self.elapsed_seconds, self.gc_count, self.gc_elapsed_seconds
        )


class GCMonitor:
    """Accumulate wall time spent inside the garbage collector.

    Registered in gc.callbacks only between __enter__ and __exit__, so
    collections outside the timed window (including the forced one) are
    never counted.
    """

    def __init__(self):
        self.elapsed_ns = 0
        self._start_ns = 0

    def _callback(self, phase, info):
        if phase == "start":
            self._start_ns = time.perf_counter_ns()
        elif phase == "stop":
            self.elapsed_ns += time.perf_counter_ns() - self._start_ns

    def __enter__(self) -> GCMonitor:
        gc.callbacks.append(self._callback)
        return self

    def __exit__(self, exc_type, exc, tb):
        gc.callbacks.remove(self._callback)
        return False


def collection_count() -> int:
    """Total collections so far, all generations."""
    return sum(s.get("collections", 0) for s in gc.get_stats())


def measure_with_result(
    computation: Callable[[], Any], iterations: int, description="",
) -> tuple[Measurement, Any]:
    """Time ``iterations`` calls of ``computation``.

    Returns the Measurement and the value of the last call.  An exception
    raised by ``computation`` propagates unchanged.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise ConfigurationError(f"iterations must be an integer >= 1, got {iterations!r}")

    gc.collect()
    last_value = None
    with GCMonitor() as monitor:
        count_before = collection_count()
        t0 = time.perf_counter_ns()
        for _ in range(iterations):
            last_value = computation()
        t1 = time.perf_counter_ns()
        count_after = collection_count()

    measurement = Measurement(
        description=description,
        elapsed_seconds=(t1 - t0) / 1e9,
        gc_count=count_after - count_before,
        gc_elapsed_seconds=monitor.elapsed_ns / 1e9,
    )
    return measurement, last_value


def measure(computation: Callable[[], Any], iterations: int, description="") -> Measurement:
    """Time ``iterations`` calls of ``computation``; see measure_with_result."""
    return measure_with_result(computation, iterations, description)[0]
