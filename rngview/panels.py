"""Derivation of panel contents from a single RNG report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from .reader import RngReport

TRANSITION_COLUMNS = 2
"""Number of columns in the transition matrix grid."""


@dataclass(frozen=True)
class MetricCell:
    """One labelled scalar in the performance panel."""

    label: str
    value: str


@dataclass(frozen=True)
class TransitionCell:
    """One (from, to) pair of the transition matrix."""

    source: str
    target: str
    count: float

    @property
    def label(self) -> str:
        return f"{self.source} => {self.target}"

    @property
    def value(self) -> str:
        return format_grouped(self.count)


# (metric key, label, formatter suffix); ``None`` means grouped formatting.
_PERFORMANCE_LAYOUT: Tuple[Tuple[str, str, str | None], ...] = (
    ("chi_square", "Chi Square", ""),
    ("bit_entropy", "Bit Entropy", ""),
    ("generation_time", "Generation Time", "s"),
    ("numbers_per_second", "Numbers/Second", None),
)


def format_fixed(value: float, digits: int = 3) -> str:
    """Format ``value`` with exactly ``digits`` fraction digits."""

    return f"{float(value):.{digits}f}"


def format_grouped(value: float) -> str:
    """Format ``value`` with thousands separators and at most 3 fraction digits."""

    if isinstance(value, int):
        return f"{value:,}"
    rendered = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if rendered == "-0" else rendered


def performance_cells(report: RngReport) -> Tuple[MetricCell, ...]:
    """Return the four performance cells; missing metrics render as zero."""

    metrics: Mapping[str, float] = report.get("metrics") or {}
    cells = []
    for key, label, suffix in _PERFORMANCE_LAYOUT:
        value = metrics.get(key, 0)
        if suffix is None:
            rendered = format_grouped(value)
        else:
            rendered = format_fixed(value) + suffix
        cells.append(MetricCell(label=label, value=rendered))
    return tuple(cells)


def transition_cells(report: RngReport) -> Tuple[TransitionCell, ...]:
    """Return one cell per (from, to) pair present, in stored order."""

    matrix = report.get("transition_matrix") or {}
    return tuple(
        TransitionCell(source=source, target=target, count=count)
        for source, row in matrix.items()
        for target, count in row.items()
    )


def distribution_series(report: RngReport) -> List[Dict[str, float]]:
    """Return ``[{"bucket": int, "count": n}, ...]`` ordered by bucket."""

    return [
        {"bucket": index, "count": count}
        for index, count in _ordered_counts(report.get("distribution") or {})
    ]


def bit_series(report: RngReport) -> List[Dict[str, float]]:
    """Return ``[{"bit": int, "count": n}, ...]`` ordered by bit position."""

    return [
        {"bit": index, "count": count}
        for index, count in _ordered_counts(report.get("bit_counts") or {})
    ]


def _ordered_counts(counts: Mapping[str, float]) -> List[Tuple[int, float]]:
    return sorted((int(key), count) for key, count in counts.items())


__all__ = [
    "TRANSITION_COLUMNS",
    "MetricCell",
    "TransitionCell",
    "bit_series",
    "distribution_series",
    "format_fixed",
    "format_grouped",
    "performance_cells",
    "transition_cells",
]
