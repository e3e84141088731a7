# SPDX-License-Identifier: CC-BY-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Isolation configuration.

Controls how an Isolated Execution Context compiles and runs its generated
unit.  The "default" preset compiles with full optimization (optimize=2:
asserts and docstrings stripped, ``__debug__`` is False) in the current
interpreter; the "subprocess" preset runs the unit in a fresh interpreter.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace

from .errors import ConfigurationError

MODES = ("inprocess", "subprocess")

# Interpreter flags matching compile()'s optimize levels.
OPTIMIZE_FLAGS = {0: [], 1: ["-O"], 2: ["-OO"]}


@dataclass
class IsolationConfig:
    """Isolated execution settings.

    optimize follows ``compile()``: 0 keeps asserts and ``__debug__``,
    1 strips asserts, 2 also strips docstrings.
    """

    mode: str = "inprocess"
    optimize: int = 2
    python: str = sys.executable  # interpreter for subprocess mode
    workdir: str | None = None  # None -> system temp dir

    @classmethod
    def default(cls) -> IsolationConfig:
        """Fully optimized, in-process."""
        return cls()

    @classmethod
    def unoptimized(cls) -> IsolationConfig:
        """In-process with asserts and ``__debug__`` kept."""
        return cls(optimize=0)

    @classmethod
    def subprocess(cls, optimize: int = 2) -> IsolationConfig:
        """Fresh interpreter per unit, started with -O/-OO to match ``optimize``."""
        return cls(mode="subprocess", optimize=optimize)

    def with_options(self, **changes) -> IsolationConfig:
        return replace(self, **changes)

    def interpreter_flags(self) -> list[str]:
        return list(OPTIMIZE_FLAGS[self.optimize])

    def validate(self) -> IsolationConfig:
        if self.mode not in MODES:
            raise ConfigurationError(
                f"unknown isolation mode {self.mode!r} (expected one of {MODES})"
            )
        if self.optimize not in OPTIMIZE_FLAGS:
            raise ConfigurationError(
                f"optimize must be 0, 1 or 2, got {self.optimize!r}"
            )
        return self
