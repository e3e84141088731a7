# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Equivalence checking across candidate results.

Results are compared adjacent-by-adjacent in registration order.  On the
first mismatch an EquivalenceError is raised carrying both descriptions and
a diff:

  - both values sequences: elements of the left missing from the right, or
    if there are none, elements of the right missing from the left, or an
    empty list when the two differ only by element count
  - otherwise: the two raw values as a pair

NumPy arrays are compared with np.array_equal and diffed element-wise on
their flattened contents.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

import numpy as np

from .errors import EquivalenceError

EqualFn = Callable[[Any, Any], bool]


def _is_sequence(value) -> bool:
    return isinstance(value, (list, tuple, np.ndarray))


def _as_list(value) -> list:
    if isinstance(value, np.ndarray):
        return value.ravel().tolist()
    return list(value)


def values_equal(a, b) -> bool:
    """Deep value equality.

    A numpy array on either side compares with np.array_equal against the
    other value as an array, so [1, 2] equals np.array([1, 2]).  Otherwise
    lists and tuples compare element-wise and only against their own type,
    mappings by keys then values; anything else falls back to ``==`` with
    array-valued comparisons reduced by np.all.
    """
    if a is b:
        return True
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        try:
            return bool(np.array_equal(np.asarray(a), np.asarray(b)))
        except (TypeError, ValueError):
            return False
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    outcome = a == b
    if isinstance(outcome, np.ndarray):
        return bool(outcome.all())
    return bool(outcome)


def _missing(items: list, other: list) -> list:
    return [x for x in items if not any(values_equal(x, y) for y in other)]


def diff_values(a, b):
    """Best-effort diff for two unequal values; see module docstring."""
    if _is_sequence(a) and _is_sequence(b):
        left, right = _as_list(a), _as_list(b)
        only_left = _missing(left, right)
        if only_left:
            return only_left
        return _missing(right, left)
    return (a, b)


class EquivalenceRecord:
    """Incremental checker owned by a single run.

    Each ``add`` compares the new value with the previously added one, so a
    mismatch aborts the run before later candidates are executed.
    """

    def __init__(self, equal: EqualFn | None = None):
        self._equal = equal or values_equal
        self._results: dict = {}
        self._last = None

    def add(self, description, value) -> None:
        if self._results:
            prev = self._last
            prev_value = self._results[prev]
            if not self._equal(prev_value, value):
                diff = diff_values(prev_value, value)
                self.clear()
                raise EquivalenceError(prev, description, diff)
        self._results[description] = value
        self._last = description

    def clear(self) -> None:
        self._results.clear()
        self._last = None

    def __len__(self) -> int:
        return len(self._results)


def check(results: Mapping, equal: EqualFn | None = None) -> None:
    """Check an ordered mapping of description -> value.

    Returns None when all values are equivalent, raises EquivalenceError on
    the first adjacent pair that differs.
    """
    record = EquivalenceRecord(equal)
    try:
        for description, value in results.items():
            record.add(description, value)
    finally:
        record.clear()
