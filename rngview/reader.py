"""Reading stored RNG test results.

Two reports are kept in storage, one per generator under test, each as a JSON
encoded object under a well-known key.  A missing or empty value is a valid empty
state and yields an empty report.  A value that cannot be decoded is corrupted
state that cannot be recovered locally, so :class:`ResultLoadError` is raised
and the caller decides how to present the failure.

The statistics producer writes ``distribution`` and ``bit_counts`` as arrays
and ``transition_matrix`` as an array of rows.  Those sections are normalised
here into string keyed mappings so every consumer sees a single shape::

    {"distribution": [10, 3]}  ->  {"distribution": {"0": 10, "1": 3}}
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Mapping, Tuple, TypedDict

from .errors import ResultLoadError
from .storage import StoragePort

GAME_RNG = "game_rng"
CRYPTO_RNG = "crypto_rng"

REPORT_IDS: Tuple[str, ...] = (GAME_RNG, CRYPTO_RNG)
"""Canonical report identifiers, in selector order."""

STORAGE_KEYS: Mapping[str, str] = {
    GAME_RNG: "game_rng_results",
    CRYPTO_RNG: "crypto_rng_results",
}
"""Storage key holding the serialised report of each identifier."""

METRIC_NAMES: Tuple[str, ...] = (
    "chi_square",
    "bit_entropy",
    "generation_time",
    "numbers_per_second",
)

_COUNT_SECTIONS = ("distribution", "bit_counts")


class RngReport(TypedDict, total=False):
    """Statistics bundle for one random-number generator under test."""

    metrics: Dict[str, float]
    distribution: Dict[str, int]
    bit_counts: Dict[str, int]
    transition_matrix: Dict[str, Dict[str, int]]


TestResultSet = Dict[str, RngReport]
"""Reports keyed by identifier; always holds exactly :data:`REPORT_IDS`."""


def read_test_results(storage: StoragePort) -> TestResultSet:
    """Read both reports from ``storage``, substituting ``{}`` for absent or empty values."""

    results: TestResultSet = {}
    for report_id in REPORT_IDS:
        key = STORAGE_KEYS[report_id]
        raw = storage.get_item(key)
        if not raw:
            results[report_id] = {}
            continue
        try:
            results[report_id] = parse_report(raw)
        except ResultLoadError as exc:
            raise ResultLoadError(f"Stored value '{key}' is unusable: {exc}") from exc
    return results


def make_reader(storage: StoragePort) -> Callable[[], TestResultSet]:
    """Bind ``storage`` into a zero-argument reader."""

    def reader() -> TestResultSet:
        return read_test_results(storage)

    return reader


def parse_report(raw: str) -> RngReport:
    """Decode a single stored report and normalise its sections."""

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ResultLoadError(f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ResultLoadError("report root must be a JSON object")

    report: Dict[str, Any] = dict(data)
    if "metrics" in report:
        report["metrics"] = _normalise_metrics(report["metrics"])
    for section in _COUNT_SECTIONS:
        if section in report:
            report[section] = _normalise_counts(section, report[section])
    if "transition_matrix" in report:
        report["transition_matrix"] = _normalise_matrix(report["transition_matrix"])
    return report  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Section normalisation
# ---------------------------------------------------------------------------

def _normalise_metrics(value: object) -> Dict[str, float]:
    if not isinstance(value, dict):
        raise ResultLoadError("'metrics' must be a JSON object")
    for name, metric in value.items():
        if not _is_number(metric):
            raise ResultLoadError(f"metric '{name}' must be numeric")
    return dict(value)


def _normalise_counts(section: str, value: object) -> Dict[str, int]:
    items = _section_items(section, value)
    counts: Dict[str, int] = {}
    for key, count in items:
        try:
            int(key)
        except ValueError as exc:
            raise ResultLoadError(
                f"'{section}' key '{key}' does not parse to an integer"
            ) from exc
        if not _is_number(count):
            raise ResultLoadError(f"'{section}' count for '{key}' must be numeric")
        counts[key] = count
    return counts


def _normalise_matrix(value: object) -> Dict[str, Dict[str, int]]:
    matrix: Dict[str, Dict[str, int]] = {}
    for source, row in _section_items("transition_matrix", value):
        cells: Dict[str, int] = {}
        for target, count in _section_items(f"transition_matrix[{source}]", row):
            if not _is_number(count):
                raise ResultLoadError(
                    f"transition count for '{source} => {target}' must be numeric"
                )
            cells[target] = count
        matrix[source] = cells
    return matrix


def _section_items(section: str, value: object) -> Tuple[Tuple[str, Any], ...]:
    if isinstance(value, dict):
        return tuple((str(key), item) for key, item in value.items())
    if isinstance(value, list):
        return tuple((str(index), item) for index, item in enumerate(value))
    raise ResultLoadError(f"'{section}' must be a JSON object or array")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


__all__ = [
    "CRYPTO_RNG",
    "GAME_RNG",
    "METRIC_NAMES",
    "REPORT_IDS",
    "STORAGE_KEYS",
    "RngReport",
    "TestResultSet",
    "make_reader",
    "parse_report",
    "read_test_results",
]
