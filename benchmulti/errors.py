# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Error taxonomy for the benchmark harness.

Every failure aborts the whole run; no partial report is ever produced.
A candidate that raises in-process is NOT wrapped: its own exception
propagates unchanged.  CandidateFault exists only for candidates that fail
inside a subprocess-isolated unit, where the original exception object
cannot cross the process boundary.
"""

from __future__ import annotations

from typing import Any


class BenchError(Exception):
    """Base class for all harness errors."""

    pass


class ConfigurationError(BenchError, ValueError):
    """Malformed candidate set or invalid harness options."""

    pass


class CandidateFault(BenchError):
    """A candidate failed inside a subprocess-isolated unit."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class EquivalenceError(BenchError):
    """Two candidates produced results that are not equal.

    ``diff`` is best-effort: the elements present in one sequence but not the
    other, the pair of raw values for non-sequences, or an empty list when two
    sequences differ only by element count.
    """

    def __init__(self, left: Any, right: Any, diff: Any):
        self.left = left
        self.right = right
        self.diff = diff
        super().__init__(
            f"results of {left!r} and {right!r} are not equivalent: {diff!r}"
        )


class IsolationBuildError(BenchError):
    """The generated isolation unit failed to compile.

    The temporary unit has already been removed when this is raised.
    """

    def __init__(self, message: str, log: str = ""):
        super().__init__(message)
        self.log = log
