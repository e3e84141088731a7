# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Composite drivers: one candidate set, several execution contexts.

Each context runs the full pipeline in raw mode; descriptions are prefixed
with the context's label and the union is re-aggregated, so the fastest
candidate across all contexts is the shared baseline.
"""

from __future__ import annotations

from collections.abc import Mapping

from .candidate import normalize_candidates
from .config import IsolationConfig
from .errors import ConfigurationError
from .isolation import benchmark_isolated
from .log import log
from .report import Table, build_table, prefix_measurements
from .runner import benchmark

NATIVE_LABEL = "native"
ISOLATED_LABEL = "isolated"


def benchmark_dual_context(
    candidates,
    iterations=1,
    check_equivalence=False,
    *,
    setup=None,
    config: IsolationConfig | None = None,
) -> Table:
    """Run expression candidates natively and in an isolation unit.

    Rows are labelled "native: <form>" and "isolated: <form>".
    """
    candidates = normalize_candidates(candidates)
    closures = [c.description for c in candidates if not c.is_source]
    if closures:
        raise ConfigurationError(
            "dual-context candidates must be expression strings, "
            f"got callables for {closures!r}"
        )
    log("dual-context run: native")
    native = benchmark(
        candidates, iterations, check_equivalence, raw=True, setup=setup
    )
    log("dual-context run: isolated")
    isolated = benchmark_isolated(
        candidates, iterations, check_equivalence, raw=True, setup=setup, config=config
    )
    return build_table(
        prefix_measurements(NATIVE_LABEL, native)
        + prefix_measurements(ISOLATED_LABEL, isolated)
    )


def _environment_items(environments) -> list[tuple[str, dict]]:
    if isinstance(environments, Mapping):
        items = list(environments.items())
    else:
        items = [tuple(env) for env in environments or ()]
    if not items:
        raise ConfigurationError("no environments given")
    seen = set()
    for name, bindings in items:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"invalid environment name {name!r}")
        if name in seen:
            raise ConfigurationError(f"duplicate environment name {name!r}")
        if not isinstance(bindings, Mapping):
            raise ConfigurationError(f"bindings of environment {name!r} must be a mapping")
        seen.add(name)
    return items


def benchmark_multi_environment(
    environments,
    candidates,
    iterations=1,
    check_equivalence=False,
    *,
    setup=None,
    config: IsolationConfig | None = None,
) -> Table:
    """Run the isolated pipeline once per named environment.

    ``environments`` is a mapping (or sequence of pairs) of name -> bindings,
    where bindings map identifiers to expression strings or literals.  Rows
    are labelled "<name>: <form>".  Equivalence is checked within each
    environment, not across them.
    """
    items = _environment_items(environments)
    candidates = normalize_candidates(candidates, check_source=False)
    measurements = []
    for name, bindings in items:
        log(f"environment {name}: {sorted(bindings)}")
        result = benchmark_isolated(
            candidates,
            iterations,
            check_equivalence,
            raw=True,
            bindings=bindings,
            setup=setup,
            config=config,
        )
        measurements.extend(prefix_measurements(name, result))
    return build_table(measurements)
