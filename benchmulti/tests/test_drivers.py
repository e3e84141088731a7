# SPDX-License-Identifier: CC-BY-NC-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Tests for the composite drivers."""

import pytest

from benchmulti import benchmark_dual_context, benchmark_multi_environment
from benchmulti.config import IsolationConfig
from benchmulti.errors import ConfigurationError, EquivalenceError
from benchmulti.isolation import live_units
from benchmulti.report import FASTEST


@pytest.fixture
def config(tmp_path):
    return IsolationConfig(workdir=str(tmp_path))


def _assert_ranked(table):
    elapsed = [r.elapsed_seconds for r in table.rows]
    assert elapsed == sorted(elapsed)
    assert [r.speed_factor for r in table.rows].count(FASTEST) == 1
    assert table.rows[0].speed_factor == FASTEST


class TestDualContext:
    def test_labels_both_contexts(self, config):
        table = benchmark_dual_context({"f": "sum(range(100))"}, iterations=5, config=config)
        assert sorted(table.descriptions()) == ["isolated: f", "native: f"]
        _assert_ranked(table)

    def test_ordinal_labels(self, config):
        table = benchmark_dual_context(["1", "2"], config=config)
        assert sorted(table.descriptions()) == [
            "isolated: 0", "isolated: 1", "native: 0", "native: 1",
        ]
        _assert_ranked(table)

    def test_setup_shared_by_both_contexts(self, config):
        table = benchmark_dual_context(
            ["sorted(xs)", "list(range(10))"],
            check_equivalence=True,
            setup="xs = list(range(9, -1, -1))",
            config=config,
        )
        assert len(table) == 4

    def test_equivalence_failure_is_fatal(self, config, tmp_path):
        with pytest.raises(EquivalenceError):
            benchmark_dual_context(["1", "2"], check_equivalence=True, config=config)
        assert list(tmp_path.iterdir()) == []

    def test_callables_cannot_be_isolated(self, config):
        with pytest.raises(ConfigurationError):
            benchmark_dual_context({"f": lambda: 1}, config=config)

    def test_one_shot_iterable(self, config):
        table = benchmark_dual_context((form for form in ["1", "2"]), config=config)
        assert sorted(table.descriptions()) == [
            "isolated: 0", "isolated: 1", "native: 0", "native: 1",
        ]


class TestMultiEnvironment:
    def test_labels_every_environment(self, config):
        table = benchmark_multi_environment(
            {"small": {"n": 10}, "big": {"n": "10 ** 4"}},
            {"loop": "sum(range(n))", "formula": "n * (n - 1) // 2"},
            iterations=3,
            check_equivalence=True,
            config=config,
        )
        assert sorted(table.descriptions()) == [
            "big: formula", "big: loop", "small: formula", "small: loop",
        ]
        _assert_ranked(table)
        assert live_units() == []

    def test_sequence_of_environments(self, config):
        table = benchmark_multi_environment(
            [("a", {"k": 1}), ("b", {"k": 2})], ["k"], config=config
        )
        assert sorted(table.descriptions()) == ["a: 0", "b: 0"]

    def test_bindings_actually_differ(self, config):
        with pytest.raises(EquivalenceError):
            benchmark_multi_environment(
                {"env": {"a": 1, "b": 2}}, ["a", "b"], check_equivalence=True, config=config
            )

    def test_one_shot_iterable_reaches_every_environment(self, config):
        table = benchmark_multi_environment(
            {"a": {"k": 1}, "b": {"k": 2}}, (form for form in ["k", "k + 0"]), config=config
        )
        assert sorted(table.descriptions()) == ["a: 0", "a: 1", "b: 0", "b: 1"]

    def test_malformed_binding_rejected(self, config):
        with pytest.raises(ConfigurationError):
            benchmark_multi_environment({"e": {"x": "1), (2"}}, ["x"], config=config)

    def test_setup_available_to_bindings(self, config):
        table = benchmark_multi_environment(
            {"e": {"root": "math.sqrt(16)"}}, ["root"], setup="import math", config=config
        )
        assert table.descriptions() == ["e: 0"]

    @pytest.mark.parametrize("envs", [{}, [], None])
    def test_no_environments(self, config, envs):
        with pytest.raises(ConfigurationError):
            benchmark_multi_environment(envs, ["1"], config=config)

    def test_duplicate_environment_names(self, config):
        with pytest.raises(ConfigurationError, match="duplicate"):
            benchmark_multi_environment([("a", {}), ("a", {})], ["1"], config=config)

    def test_bindings_must_be_mapping(self, config):
        with pytest.raises(ConfigurationError):
            benchmark_multi_environment([("a", ["x"])], ["1"], config=config)
