# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Progress and debug output on stderr.

Progress lines are quiet by default so library callers and test runs stay
silent; enable them with ``set_verbose(True)`` or ``BENCHMULTI_VERBOSE=1``.
``debug`` is a development side channel gated by ``BENCHMULTI_DEBUG=1``.
The label is always passed by the caller; nothing here inspects the stack.
"""

import os
import sys

_verbose = os.environ.get("BENCHMULTI_VERBOSE", "") not in ("", "0")


def set_verbose(enabled):
    global _verbose
    _verbose = bool(enabled)


def is_verbose():
    return _verbose


def log(msg):
    if _verbose:
        print(msg, file=sys.stderr)


def debug(label, **values):
    """Print ``values`` tagged with ``label`` when BENCHMULTI_DEBUG is set."""
    if os.environ.get("BENCHMULTI_DEBUG", "") in ("", "0"):
        return
    fields = " ".join(f"{k}={v!r}" for k, v in values.items())
    print(f"[{label}] {fields}", file=sys.stderr)
