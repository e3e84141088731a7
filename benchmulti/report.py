# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

"""Report aggregation: sort measurements and annotate relative speed.

Rows are sorted ascending by elapsed time (stable).  The first row carries
the literal "fastest"; every other row carries elapsed / fastest formatted
to two decimals.  Elapsed time is formatted to six decimals.  GC time is
formatted to six decimals only when non-zero and is otherwise the plain
integer 0.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from .timer import Measurement

HEADER = ("Form", "x fastest", "Total runtime", "# of GCs", "Total GC runtime")
SEPARATOR = "-"
FASTEST = "fastest"


@dataclass(frozen=True)
class ReportRow:
    description: Union[str, int]
    speed_factor: str
    elapsed_seconds: float
    gc_count: int
    gc_elapsed_seconds: float

    def cells(self) -> tuple:
        return (
            self.description,
            self.speed_factor,
            f"{self.elapsed_seconds:.6f}",
            self.gc_count,
            format_gc_elapsed(self.gc_elapsed_seconds),
        )


def format_gc_elapsed(seconds: float):
    if seconds > 0:
        return f"{seconds:.6f}"
    return 0


def speed_factor(elapsed: float, fastest: float) -> str:
    if fastest > 0:
        return f"{elapsed / fastest:.2f}"
    # A zero-time baseline; only other zero rows are comparable.
    return "1.00" if elapsed <= 0 else "inf"


def aggregate(measurements: Iterable[Measurement]) -> list[ReportRow]:
    ordered = sorted(measurements, key=lambda m: m.elapsed_seconds)
    if not ordered:
        return []
    fastest = ordered[0].elapsed_seconds
    rows = []
    for idx, m in enumerate(ordered):
        factor = FASTEST if idx == 0 else speed_factor(m.elapsed_seconds, fastest)
        rows.append(
            ReportRow(
                m.description, factor, m.elapsed_seconds, m.gc_count, m.gc_elapsed_seconds
            )
        )
    return rows


class Table:
    """Header row, separator marker, then one formatted row per candidate.

    Iterating yields exactly that sequence, which is what text-table
    renderers expect.
    """

    def __init__(self, rows: list[ReportRow]):
        self.rows = rows

    @property
    def header(self) -> tuple:
        return HEADER

    def data_rows(self) -> list[tuple]:
        return [row.cells() for row in self.rows]

    def descriptions(self) -> list:
        return [row.description for row in self.rows]

    def __iter__(self) -> Iterator:
        yield HEADER
        yield SEPARATOR
        yield from self.data_rows()

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, idx) -> ReportRow:
        return self.rows[idx]

    def render(self) -> str:
        body = [tuple(str(c) for c in cells) for cells in self.data_rows()]
        widths = [len(h) for h in HEADER]
        for cells in body:
            widths = [max(w, len(c)) for w, c in zip(widths, cells)]
        total = sum(widths) + 2 * (len(widths) - 1)

        def fmt(cells):
            first = f"{cells[0]:<{widths[0]}}"
            rest = [f"{c:>{w}}" for c, w in zip(cells[1:], widths[1:])]
            return "  ".join([first] + rest)

        lines = [fmt(HEADER), SEPARATOR * total]
        lines.extend(fmt(cells) for cells in body)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "header": list(HEADER),
            "rows": [
                {
                    "description": r.description,
                    "speed_factor": r.speed_factor,
                    "elapsed_seconds": r.elapsed_seconds,
                    "gc_count": r.gc_count,
                    "gc_elapsed_seconds": r.gc_elapsed_seconds,
                }
                for r in self.rows
            ],
        }

    def __repr__(self) -> str:
        return f"Table({self.descriptions()!r})"


def build_table(measurements: Iterable[Measurement]) -> Table:
    return Table(aggregate(measurements))


def prefix_measurements(label: str, measurements: Iterable[Measurement]) -> list[Measurement]:
    """Relabel each measurement as "<label>: <description>"."""
    return [m.relabel(f"{label}: {m.description}") for m in measurements]


def export_json(result, filepath: str):
    """Write a Table or a list of Measurements to ``filepath`` as JSON."""
    if isinstance(result, Table):
        data = result.to_dict()
    else:
        data = [m.to_dict() for m in result]
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)
