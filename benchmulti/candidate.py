# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Candidate normalization.

A candidate set may be given as:
  - a mapping of label -> computation
  - a sequence whose items are computations or (label, computation) pairs

A computation is a zero-argument callable or a Python expression source
string.  Unlabeled candidates take their zero-based position as description.
"""

from __future__ import annotations

import builtins
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Union

from .errors import ConfigurationError

Computation = Union[Callable[[], Any], str]


@dataclass(frozen=True)
class Candidate:
    description: Union[str, int]
    computation: Computation

    @property
    def is_source(self) -> bool:
        return isinstance(self.computation, str)

    def thunk(self, namespace: dict | None = None) -> Callable[[], Any]:
        """Return a zero-argument callable for this candidate.

        Source candidates are compiled to ``lambda: (<expr>)`` so that the
        timed loop calls a real function, not ``eval``.
        """
        if not self.is_source:
            return self.computation
        if namespace is None:
            namespace = new_namespace()
        code = compile_expression(self.computation, f"<candidate {self.description}>")
        return eval(code, namespace)


def new_namespace(setup: str | None = None) -> dict:
    """Fresh globals for source candidates, optionally primed by ``setup``."""
    namespace = {"__builtins__": builtins, "__name__": "__benchmulti__"}
    return prime_namespace(namespace, setup)


def prime_namespace(namespace: dict, setup: str | None) -> dict:
    if setup:
        try:
            code = compile(setup, "<setup>", "exec")
        except SyntaxError as exc:
            raise ConfigurationError(f"invalid setup source: {exc}") from exc
        exec(code, namespace)
    return namespace


def compile_expression(source: str, filename: str, optimize: int = -1):
    """Compile ``source`` as the body of a zero-argument lambda.

    The expression is first compiled on its own so that statements and
    fragments like ``1), (2`` are rejected instead of being spliced in.
    """
    compile(source, filename, "eval", optimize=optimize)
    return compile(f"lambda: (\n{source}\n)", filename, "eval", optimize=optimize)


def _check_expression(label, source):
    try:
        compile_expression(source, f"<candidate {label}>")
    except (SyntaxError, ValueError) as exc:
        raise ConfigurationError(
            f"candidate {label!r} is not a valid expression: {exc}"
        ) from exc


def normalize_candidates(candidates, check_source: bool = True) -> list[Candidate]:
    """Turn any accepted candidate-set shape into a list of Candidates.

    Raises ConfigurationError on an empty set, a duplicate description or a
    computation that is neither callable nor a string.  With ``check_source``
    source candidates with syntax errors are reported here too; isolation
    turns that off and reports them as build errors instead.
    """
    if candidates is None:
        raise ConfigurationError("candidate set is empty")
    if isinstance(candidates, Mapping):
        pairs = list(candidates.items())
    elif isinstance(candidates, (str, bytes)) or callable(candidates):
        raise ConfigurationError(
            "candidates must be a mapping or a sequence of computations"
        )
    else:
        pairs = []
        for idx, item in enumerate(candidates):
            if isinstance(item, Candidate):
                pairs.append((item.description, item.computation))
            elif isinstance(item, tuple) and len(item) == 2:
                pairs.append(item)
            else:
                pairs.append((idx, item))

    if not pairs:
        raise ConfigurationError("candidate set is empty")

    result = []
    seen = set()
    for label, computation in pairs:
        if not isinstance(label, (str, int)) or isinstance(label, bool):
            raise ConfigurationError(f"invalid candidate label {label!r}")
        if label in seen:
            raise ConfigurationError(f"duplicate candidate label {label!r}")
        seen.add(label)
        if isinstance(computation, str):
            if check_source:
                _check_expression(label, computation)
        elif not callable(computation):
            raise ConfigurationError(
                f"candidate {label!r} must be callable or an expression string"
            )
        result.append(Candidate(label, computation))
    return result
