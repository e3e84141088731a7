# SPDX-License-Identifier: CC-BY-NC-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Tests for candidate handling and the native benchmark pipeline."""

import numpy as np
import pytest

from benchmulti import benchmark
from benchmulti.candidate import Candidate, new_namespace, normalize_candidates
from benchmulti.errors import ConfigurationError, EquivalenceError
from benchmulti.report import FASTEST, Table
from benchmulti.timer import Measurement


class TestNormalizeCandidates:
    def test_mapping_keeps_labels(self):
        items = normalize_candidates({"a": lambda: 1, "b": "2"})
        assert [c.description for c in items] == ["a", "b"]
        assert items[1].is_source

    def test_unlabeled_take_ordinal(self):
        items = normalize_candidates([lambda: 1, ("named", lambda: 2), "3"])
        assert [c.description for c in items] == [0, "named", 2]

    def test_candidate_objects_pass_through(self):
        items = normalize_candidates([Candidate("x", "1")])
        assert items == [Candidate("x", "1")]

    @pytest.mark.parametrize("bad", [None, [], {}, "1+1", lambda: 1])
    def test_empty_or_malformed_set(self, bad):
        with pytest.raises(ConfigurationError):
            normalize_candidates(bad)

    def test_duplicate_labels(self):
        with pytest.raises(ConfigurationError, match="duplicate"):
            normalize_candidates([("f", lambda: 1), ("f", lambda: 2)])

    def test_duplicate_between_label_and_ordinal(self):
        with pytest.raises(ConfigurationError, match="duplicate"):
            normalize_candidates([lambda: 1, (0, lambda: 2)])

    def test_non_callable_computation(self):
        with pytest.raises(ConfigurationError):
            normalize_candidates({"a": 42})

    def test_invalid_expression(self):
        with pytest.raises(ConfigurationError, match="not a valid expression"):
            normalize_candidates(["x = 1"])

    def test_spliced_expression_rejected(self):
        with pytest.raises(ConfigurationError):
            normalize_candidates(["1), (2"])

    def test_source_check_can_be_skipped(self):
        items = normalize_candidates(["x = 1"], check_source=False)
        assert items[0].computation == "x = 1"


class TestCandidateThunk:
    def test_callable_returned_as_is(self):
        fn = lambda: 5
        assert Candidate("f", fn).thunk() is fn

    def test_source_uses_namespace(self):
        ns = new_namespace("import math\nk = 3")
        assert Candidate("f", "math.factorial(k)").thunk(ns)() == 6

    def test_invalid_setup(self):
        with pytest.raises(ConfigurationError, match="setup"):
            new_namespace("def (")


class TestBenchmark:
    def test_table_by_default(self):
        table = benchmark({"a": lambda: 1, "b": lambda: 1})
        assert isinstance(table, Table)
        assert sorted(table.descriptions()) == ["a", "b"]
        assert table[0].speed_factor == FASTEST

    def test_raw_measurements(self):
        ms = benchmark([lambda: 1, lambda: 2], iterations=3, raw=True)
        assert all(isinstance(m, Measurement) for m in ms)
        assert [m.description for m in ms] == [0, 1]

    def test_rows_sorted_ascending(self):
        table = benchmark(
            {"slow": lambda: sum(range(100000)), "fast": lambda: None}, iterations=5
        )
        elapsed = [r.elapsed_seconds for r in table.rows]
        assert elapsed == sorted(elapsed)
        assert table.rows[0].description == "fast"

    def test_equivalence_passes(self):
        table = benchmark({"a": lambda: 1, "b": lambda: 1}, check_equivalence=True)
        assert len(table) == 2

    def test_equivalence_failure_reports_diff(self):
        with pytest.raises(EquivalenceError) as info:
            benchmark({"a": lambda: [1, 2], "b": lambda: [1, 3]}, check_equivalence=True)
        assert info.value.diff in ([2], [3])

    def test_mismatch_aborts_before_later_candidates(self):
        ran = []
        with pytest.raises(EquivalenceError):
            benchmark(
                [
                    ("a", lambda: 1),
                    ("b", lambda: 2),
                    ("c", lambda: ran.append("c") or 2),
                ],
                check_equivalence=True,
            )
        assert ran == []

    def test_equality_oracle(self):
        table = benchmark(
            {"a": lambda: np.float64(0.1) * 3, "b": lambda: 0.3},
            check_equivalence=True,
            equal=lambda x, y: np.isclose(x, y),
        )
        assert len(table) == 2

    def test_candidate_fault_propagates(self):
        with pytest.raises(KeyError):
            benchmark({"ok": lambda: 1, "bad": lambda: {}["missing"]})

    def test_source_candidates_with_setup(self):
        ms = benchmark(
            ["sorted(data)", "list(data)"],
            iterations=2,
            check_equivalence=True,
            raw=True,
            setup="data = list(range(50))",
        )
        assert [m.description for m in ms] == [0, 1]

    def test_source_candidates_see_caller_namespace(self):
        data = [3, 1, 2]
        ms = benchmark(["sorted(data)"], raw=True, namespace={"data": data})
        assert len(ms) == 1

    def test_invalid_iterations(self):
        with pytest.raises(ConfigurationError):
            benchmark([lambda: 1], iterations=0)

    def test_structure_is_idempotent(self):
        cands = {"x": lambda: sum(range(10)), "y": lambda: 45}
        first = benchmark(cands, iterations=2, raw=True)
        second = benchmark(cands, iterations=2, raw=True)
        assert {m.description for m in first} == {m.description for m in second} == {"x", "y"}
