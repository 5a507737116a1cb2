from __future__ import annotations

import pytest

from rngview.panels import (
    bit_series,
    distribution_series,
    format_fixed,
    format_grouped,
    performance_cells,
    transition_cells,
)


def test_distribution_series_orders_by_numeric_bucket() -> None:
    report = {"distribution": {"0": 10, "5": 3}}

    assert distribution_series(report) == [
        {"bucket": 0, "count": 10},
        {"bucket": 5, "count": 3},
    ]


def test_series_sort_numerically_not_lexically() -> None:
    report = {"bit_counts": {"10": 1, "2": 2, "1": 3}}

    assert [point["bit"] for point in bit_series(report)] == [1, 2, 10]


def test_series_of_empty_report_are_empty() -> None:
    assert distribution_series({}) == []
    assert bit_series({}) == []
    assert transition_cells({}) == ()


@pytest.mark.parametrize(
    ("value", "expected"),
    [(12.34567, "12.346"), (0, "0.000"), (2.0, "2.000"), (0.0005, "0.001")],
)
def test_format_fixed(value: float, expected: str) -> None:
    assert format_fixed(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (23752969, "23,752,969"),
        (999, "999"),
        (1234.5678, "1,234.568"),
        (1000.0, "1,000"),
        (0.0, "0"),
    ],
)
def test_format_grouped(value: float, expected: str) -> None:
    assert format_grouped(value) == expected


def test_performance_cells_format_each_metric() -> None:
    report = {
        "metrics": {
            "chi_square": 12.34567,
            "bit_entropy": 1.99998,
            "generation_time": 0.0421,
            "numbers_per_second": 23752969,
        }
    }

    cells = performance_cells(report)

    assert [(cell.label, cell.value) for cell in cells] == [
        ("Chi Square", "12.346"),
        ("Bit Entropy", "2.000"),
        ("Generation Time", "0.042s"),
        ("Numbers/Second", "23,752,969"),
    ]


def test_performance_cells_of_empty_report_render_zero() -> None:
    values = [cell.value for cell in performance_cells({})]

    assert values == ["0.000", "0.000", "0.000s", "0"]


def test_transition_cells_keep_stored_order() -> None:
    report = {"transition_matrix": {"1": {"0": 1500, "1": 2}, "0": {"1": 7}}}

    cells = transition_cells(report)

    assert [cell.label for cell in cells] == ["1 => 0", "1 => 1", "0 => 1"]
    assert cells[0].value == "1,500"
