# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Isolated Execution Context.

Benchmarks a batch of expression candidates inside a freshly generated and
independently compiled module, so the optimization level the candidates run
under is chosen here rather than inherited from the caller.

Lifecycle of an IsolationUnit:
  materialize -> compile -> execute once -> extract results -> discard

  - materialize: UnitBuilder renders a module with the setup statements, the
    environment bindings and one uniquely named driver function whose body
    calls run_pipeline over the candidate expressions.  The driver's return
    value is the only result channel.
  - compile: compile(..., optimize=N).  Any failure is an
    IsolationBuildError; there is no fallback to uncompiled execution.
  - execute: in-process, the module is registered under its unique name and
    executed in a fresh namespace; in subprocess mode a new interpreter runs
    the file with -O/-OO and prints its measurements as JSON.
  - discard: the temp file is deleted and the module name unregistered on
    every exit path.

Candidates must be self-contained expressions: the generated module cannot
see the caller's locals, only its own setup and bindings.
"""

from __future__ import annotations

import ast
import json
import keyword
import os
import subprocess
import sys
import tempfile
import textwrap
import traceback
import types
import uuid

from .candidate import normalize_candidates
from .config import IsolationConfig
from .errors import (
    CandidateFault,
    ConfigurationError,
    EquivalenceError,
    IsolationBuildError,
)
from .log import debug, log
from .report import build_table
from .timer import Measurement

UNIT_PREFIX = "_benchmulti_unit_"
DRIVER_PREFIX = "_bench_driver_"
RESULT_MARKER = "@@benchmulti-result@@"
EQUIVALENCE_EXIT = 3

_PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _render_binding(name, value) -> str:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise ConfigurationError(f"invalid binding name {name!r}")
    if name.startswith("_bench"):
        raise ConfigurationError(f"binding name {name!r} is reserved")
    if isinstance(value, str):
        try:
            compile(value, f"<binding {name}>", "eval")
        except (SyntaxError, ValueError) as exc:
            raise ConfigurationError(
                f"binding {name!r} is not a valid expression: {exc}"
            ) from exc
        return value
    source = repr(value)
    try:
        ok = ast.literal_eval(source) == value
    except (ValueError, SyntaxError):
        ok = False
    if not ok:
        raise ConfigurationError(
            f"binding {name!r} must be an expression string or a literal value"
        )
    return source


class UnitBuilder:
    """Render the source of one isolation unit from a data description."""

    def __init__(
        self,
        candidates,
        iterations=1,
        check_equivalence=False,
        raw=False,
        bindings=None,
        setup=None,
    ):
        self.candidates = candidates
        self.iterations = iterations
        self.check_equivalence = bool(check_equivalence)
        self.raw = bool(raw)
        self.setup = textwrap.dedent(setup).strip() if setup else ""
        self.bindings = [
            (name, _render_binding(name, value)) for name, value in dict(bindings or {}).items()
        ]

    def build(self, unit_name: str, driver_name: str, emit_json: bool = False) -> str:
        lines = [
            f"# Isolation unit {unit_name}, removed after a single run.",
            "from benchmulti.runner import run_pipeline as _bench_run_pipeline",
            "",
        ]
        if self.setup:
            lines += [self.setup, ""]
        for name, source in self.bindings:
            lines.append(f"{name} = (\n{source}\n)")
        lines += [
            "",
            f"def {driver_name}(_bench_equal=None):",
            "    return _bench_run_pipeline(",
            "        [",
        ]
        for cand in self.candidates:
            lines.append(f"            ({cand.description!r}, lambda: (\n{cand.computation}\n)),")
        lines += [
            "        ],",
            f"        iterations={self.iterations!r},",
            f"        check_equivalence={self.check_equivalence!r},",
            f"        raw={self.raw or emit_json!r},",
            "        equal=_bench_equal,",
            "    )",
            "",
        ]
        if emit_json:
            lines += self._json_main(driver_name)
        return "\n".join(lines)

    def _json_main(self, driver_name: str) -> list[str]:
        return [
            "",
            'if __name__ == "__main__":',
            "    import json as _bench_json",
            "    import sys as _bench_sys",
            "    from benchmulti.errors import EquivalenceError as _BenchEquivalenceError",
            "    try:",
            f"        _bench_result = {driver_name}()",
            "    except _BenchEquivalenceError as _bench_exc:",
            "        _bench_payload = {'equivalence_error': {",
            "            'left': _bench_exc.left,",
            "            'right': _bench_exc.right,",
            "            'diff': repr(_bench_exc.diff),",
            "        }}",
            f"        print({RESULT_MARKER!r} + _bench_json.dumps(_bench_payload))",
            f"        _bench_sys.exit({EQUIVALENCE_EXIT})",
            "    _bench_payload = {'measurements': [m.to_dict() for m in _bench_result]}",
            f"    print({RESULT_MARKER!r} + _bench_json.dumps(_bench_payload))",
            "",
        ]


class IsolationUnit:
    """A generated, compiled, single-use module.

    Use as a context manager: entering materializes the temp file, leaving
    always discards it together with the registered module name.
    """

    def __init__(self, builder: UnitBuilder, config: IsolationConfig | None = None):
        self.builder = builder
        self.config = config or IsolationConfig.default()
        token = uuid.uuid4().hex
        self.name = UNIT_PREFIX + token
        self.driver_name = DRIVER_PREFIX + token
        self.path: str | None = None
        self.source: str | None = None
        self.code = None

    @property
    def subprocess_mode(self) -> bool:
        return self.config.mode == "subprocess"

    def materialize(self) -> str:
        self.source = self.builder.build(
            self.name, self.driver_name, emit_json=self.subprocess_mode
        )
        fd, self.path = tempfile.mkstemp(
            prefix=self.name, suffix=".py", dir=self.config.workdir
        )
        with os.fdopen(fd, "w") as f:
            f.write(self.source)
        debug("isolation.materialize", name=self.name, path=self.path)
        return self.path

    def compile(self):
        optimize = self.config.optimize
        try:
            for cand in self.builder.candidates:
                compile(cand.computation, f"<candidate {cand.description}>", "eval",
                        optimize=optimize)
            self.code = compile(self.source, self.path, "exec", optimize=optimize)
        except (SyntaxError, ValueError) as exc:
            build_log = "".join(traceback.format_exception_only(type(exc), exc))
            raise IsolationBuildError(
                f"isolation unit {self.name} failed to compile", log=build_log
            ) from exc
        return self.code

    def execute(self, equal=None):
        """Run the driver exactly once and return its value."""
        if self.code is None:
            raise IsolationBuildError(f"isolation unit {self.name} was not compiled")
        if self.subprocess_mode:
            return self._execute_subprocess()
        module = types.ModuleType(self.name)
        module.__file__ = self.path
        sys.modules[self.name] = module
        exec(self.code, module.__dict__)
        driver = module.__dict__[self.driver_name]
        return driver(equal)

    def _execute_subprocess(self) -> list[Measurement]:
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (_PACKAGE_ROOT, env.get("PYTHONPATH", "")) if p
        )
        env["PYTHONDONTWRITEBYTECODE"] = "1"
        cmd = [self.config.python, *self.config.interpreter_flags(), self.path]
        log(f"  [{self.name}] {' '.join(cmd)}")
        proc = subprocess.run(cmd, capture_output=True, text=True, env=env)

        payload = None
        for line in reversed(proc.stdout.splitlines()):
            if line.startswith(RESULT_MARKER):
                payload = json.loads(line[len(RESULT_MARKER):])
                break

        if proc.returncode == EQUIVALENCE_EXIT and payload and "equivalence_error" in payload:
            err = payload["equivalence_error"]
            raise EquivalenceError(err["left"], err["right"], err["diff"])
        if proc.returncode != 0 or payload is None:
            raise CandidateFault(
                f"isolation unit {self.name} exited with status {proc.returncode}",
                stderr=proc.stderr,
            )
        return [Measurement.from_dict(d) for d in payload["measurements"]]

    def discard(self):
        sys.modules.pop(self.name, None)
        if self.path is not None and os.path.exists(self.path):
            os.unlink(self.path)
        debug("isolation.discard", name=self.name)

    def __enter__(self) -> IsolationUnit:
        try:
            self.materialize()
        except BaseException:
            self.discard()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.discard()
        return False


def live_units() -> list[str]:
    """Names of isolation units still registered in this interpreter."""
    return [name for name in sys.modules if name.startswith(UNIT_PREFIX)]


def benchmark_isolated(
    candidates,
    iterations=1,
    check_equivalence=False,
    raw=False,
    *,
    bindings=None,
    setup=None,
    equal=None,
    config=None,
):
    """Benchmark expression candidates inside a fresh isolation unit.

    Returns a Table, or the list of Measurements when ``raw`` is true.
    Raises IsolationBuildError when the unit does not compile; the unit is
    removed before the error reaches the caller.
    """
    config = (config or IsolationConfig.default()).validate()
    items = normalize_candidates(candidates, check_source=False)
    closures = [c.description for c in items if not c.is_source]
    if closures:
        raise ConfigurationError(
            f"isolated candidates must be expression strings, got callables for {closures!r}"
        )
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise ConfigurationError(f"iterations must be an integer >= 1, got {iterations!r}")
    if equal is not None and config.mode == "subprocess":
        raise ConfigurationError("an equality oracle cannot be passed to a subprocess unit")

    builder = UnitBuilder(
        items,
        iterations=iterations,
        check_equivalence=check_equivalence,
        raw=raw,
        bindings=bindings,
        setup=setup,
    )
    log(f"isolated run: {len(items)} candidates, mode={config.mode}, optimize={config.optimize}")
    with IsolationUnit(builder, config) as unit:
        unit.compile()
        result = unit.execute(equal)

    if unit.subprocess_mode and not raw:
        return build_table(result)
    return result
