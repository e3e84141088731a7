# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""The standard measurement pipeline.

For each candidate, in registration order:
  1. measure it (forced collection, timed window, GC accounting)
  2. if equivalence checking is on, compare its last result with the
     previous candidate's, aborting on the first mismatch
Then sort and annotate the measurements into a Table, unless raw output is
requested.

``run_pipeline`` is also the body of every generated isolation driver, so it
must stay importable from a fresh interpreter with no other setup.
"""

from __future__ import annotations

from .candidate import new_namespace, normalize_candidates, prime_namespace
from .equivalence import EquivalenceRecord
from .log import log
from .report import build_table
from .timer import measure_with_result


def run_pipeline(
    candidates,
    iterations=1,
    check_equivalence=False,
    raw=False,
    namespace=None,
    equal=None,
):
    items = normalize_candidates(candidates)
    if namespace is None and any(c.is_source for c in items):
        namespace = new_namespace()

    record = EquivalenceRecord(equal) if check_equivalence else None
    measurements = []
    try:
        for idx, cand in enumerate(items, 1):
            log(f"  [{cand.description}] ({idx}/{len(items)}) measuring x{iterations}")
            m, value = measure_with_result(cand.thunk(namespace), iterations, cand.description)
            if record is not None:
                record.add(cand.description, value)
            measurements.append(m)
    finally:
        if record is not None:
            record.clear()

    if raw:
        return measurements
    return build_table(measurements)


def benchmark(
    candidates,
    iterations=1,
    check_equivalence=False,
    raw=False,
    *,
    setup=None,
    namespace=None,
    equal=None,
):
    """Benchmark candidates in the caller's own interpreter.

    Callables run as given.  Expression strings are compiled into a fresh
    namespace primed by ``setup``, or into ``namespace`` when the caller
    passes one (e.g. ``globals()``) to give them access to its names.

    Returns a Table, or the list of Measurements when ``raw`` is true.
    """
    if namespace is None:
        if setup is not None:
            namespace = new_namespace(setup)
    else:
        prime_namespace(namespace, setup)
    return run_pipeline(
        candidates,
        iterations=iterations,
        check_equivalence=check_equivalence,
        raw=raw,
        namespace=namespace,
        equal=equal,
    )
