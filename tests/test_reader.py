"""Tests for :mod:`rngview.reader`."""

from __future__ import annotations

import json

import pytest

from rngview.errors import ResultLoadError
from rngview.reader import make_reader, parse_report, read_test_results
from rngview.storage import MappingStorage

GAME_REPORT = {
    "metrics": {
        "chi_square": 12.34567,
        "bit_entropy": 1.99998,
        "generation_time": 0.0421,
        "numbers_per_second": 23752969,
    },
    "distribution": {"0": 10, "5": 3},
    "bit_counts": {"0": 500, "1": 498},
    "transition_matrix": {"0": {"0": 250, "1": 251}, "1": {"0": 249, "1": 250}},
}


def test_read_test_results_without_keys_returns_empty_reports() -> None:
    results = read_test_results(MappingStorage())

    assert results == {"game_rng": {}, "crypto_rng": {}}


def test_read_test_results_with_only_game_report() -> None:
    storage = MappingStorage({"game_rng_results": json.dumps(GAME_REPORT)})

    results = read_test_results(storage)

    assert set(results) == {"game_rng", "crypto_rng"}
    assert results["game_rng"] == GAME_REPORT
    assert results["crypto_rng"] == {}


def test_read_test_results_treats_empty_strings_as_absent() -> None:
    storage = MappingStorage({"game_rng_results": "", "crypto_rng_results": ""})

    assert read_test_results(storage) == {"game_rng": {}, "crypto_rng": {}}


def test_read_test_results_malformed_json_propagates() -> None:
    storage = MappingStorage({"game_rng_results": "{not json"})

    with pytest.raises(ResultLoadError) as excinfo:
        read_test_results(storage)

    assert "game_rng_results" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ResultLoadError)


def test_make_reader_reads_storage_on_each_call() -> None:
    reader = make_reader(MappingStorage({"crypto_rng_results": "{}"}))

    assert reader() == {"game_rng": {}, "crypto_rng": {}}


def test_parse_report_normalises_producer_arrays() -> None:
    raw = json.dumps(
        {
            "rng": "game_rng",
            "distribution": [4, 0, 7],
            "bit_counts": [1, 2],
            "transition_matrix": [[10, 11], [12, 13]],
            "metrics": {"chi_square": 1.5},
        }
    )

    report = parse_report(raw)

    assert report["distribution"] == {"0": 4, "1": 0, "2": 7}
    assert report["bit_counts"] == {"0": 1, "1": 2}
    assert report["transition_matrix"] == {"0": {"0": 10, "1": 11}, "1": {"0": 12, "1": 13}}
    assert report["rng"] == "game_rng"


@pytest.mark.parametrize(
    "payload",
    [
        "[1, 2]",
        '{"metrics": [1, 2]}',
        '{"metrics": {"chi_square": "high"}}',
        '{"distribution": {"zero": 1}}',
        '{"bit_counts": {"0": true}}',
        '{"transition_matrix": {"0": 5}}',
        '{"distribution": "1,2,3"}',
    ],
)
def test_parse_report_rejects_corrupted_reports(payload: str) -> None:
    with pytest.raises(ResultLoadError):
        parse_report(payload)
