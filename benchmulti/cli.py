# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Command-line front end.

Usage:
    python -m benchmulti "sum(range(1000))" "fast=math.fsum(range(1000))" \\
        --setup "import math" -n 1000 --check
    python -m benchmulti --mode dual -n 100 "sorted(x)" "list(reversed(x))" --setup "x=list(range(50))"
    python -m benchmulti --env small "n=10" --env big "n=10000" "sum(range(n))" "n*(n-1)//2"

The table goes to stdout; progress (with -v) and errors go to stderr.
"""

import argparse
import json
import sys

from .config import IsolationConfig
from .drivers import benchmark_dual_context, benchmark_multi_environment
from .errors import BenchError
from .isolation import benchmark_isolated
from .log import log, set_verbose
from .report import export_json
from .runner import benchmark

MODES = ("native", "isolated", "dual")


def parse_form(text):
    """Split ``LABEL=EXPR`` into a (label, expr) pair; plain ``EXPR`` stays as is."""
    head, sep, tail = text.partition("=")
    if sep and head.strip().isidentifier() and not tail.startswith("="):
        return (head.strip(), tail)
    return text


def parse_bindings(text):
    """``a=1;b=range(3)`` -> {"a": "1", "b": "range(3)"}."""
    bindings = {}
    for part in text.split(";"):
        if not part.strip():
            continue
        name, sep, expr = part.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"binding {part!r} is not NAME=EXPR")
        bindings[name.strip()] = expr
    return bindings


def build_parser():
    parser = argparse.ArgumentParser(
        prog="benchmulti",
        description="Benchmark and compare alternative forms of a computation.",
    )
    parser.add_argument("forms", nargs="+", help="EXPR or LABEL=EXPR")
    parser.add_argument("-n", "--iterations", type=int, default=1)
    parser.add_argument("--check", action="store_true", help="verify all forms agree")
    parser.add_argument("--raw", action="store_true", help="print raw measurements as JSON")
    parser.add_argument("--mode", choices=MODES, default="native")
    parser.add_argument(
        "--env", nargs=2, action="append", metavar=("NAME", "BINDINGS"),
        help="named environment, e.g. --env small 'n=10;k=2' (repeatable; "
        "excludes --mode and --raw)",
    )
    parser.add_argument("--setup", default=None, help="statements run before the forms")
    parser.add_argument("-O", "--optimize", type=int, choices=(0, 1, 2), default=2)
    parser.add_argument("--subprocess", action="store_true",
                        help="run isolation units in a fresh interpreter")
    parser.add_argument("--json", dest="json_path", default=None, help="export result to PATH")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def run(args, environments=None):
    forms = [parse_form(f) for f in args.forms]
    config = IsolationConfig(
        mode="subprocess" if args.subprocess else "inprocess",
        optimize=args.optimize,
    )

    if environments:
        log(f"multi-environment run over {[n for n, _ in environments]}")
        return benchmark_multi_environment(
            environments, forms, args.iterations, args.check,
            setup=args.setup, config=config,
        )
    if args.mode == "dual":
        return benchmark_dual_context(
            forms, args.iterations, args.check, setup=args.setup, config=config
        )
    if args.mode == "isolated":
        return benchmark_isolated(
            forms, args.iterations, args.check, args.raw, setup=args.setup, config=config
        )
    return benchmark(forms, args.iterations, args.check, args.raw, setup=args.setup)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        environments = [(name, parse_bindings(b)) for name, b in args.env or []]
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    if environments and (args.mode != "native" or args.raw):
        parser.error("--env cannot be combined with --mode or --raw")

    try:
        result = run(args, environments)
    except BenchError as exc:
        print(f"benchmulti: {exc}", file=sys.stderr)
        return 1

    if isinstance(result, list):
        print(json.dumps([m.to_dict() for m in result], indent=2))
    else:
        print(result.render())
    if args.json_path:
        export_json(result, args.json_path)
        log(f"wrote {args.json_path}")
    return 0
