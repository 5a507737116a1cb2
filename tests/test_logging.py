from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from rngview.app import ViewResult
from rngview.logging import LOG_FIELDNAMES, ViewLog, log_view_result
from rngview.view import ViewState, ViewStatus, render_view


def _make_view_result(base_dir: Path, *, status: ViewStatus = ViewStatus.READY, idx: int = 0) -> ViewResult:
    started_at = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=idx)
    state = ViewState(status=status, selected_id="crypto_rng", reports={"game_rng": {}, "crypto_rng": {}})
    if status is ViewStatus.ERROR:
        state = ViewState(status=status, error="Failed to load test results")
    return ViewResult(
        storage_path=base_dir / f"storage-{idx}.json",
        config_path=None,
        state=state,
        view_model=render_view(state),
        dashboard_path=base_dir / "dash.html",
        started_at=started_at,
        duration=timedelta(seconds=1),
    )


def test_log_view_result_appends_jsonl(tmp_path: Path) -> None:
    result = _make_view_result(tmp_path)

    log_file = log_view_result(result, log_path=tmp_path / "log.jsonl", fmt="jsonl")

    payload = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert len(payload) == 1
    entry = json.loads(payload[0])
    assert entry["status"] == "READY"
    assert entry["selected_rng"] == "crypto_rng"
    assert entry["dashboard_path"] == str(tmp_path / "dash.html")


def test_log_view_result_enforces_jsonl_retention(tmp_path: Path) -> None:
    log_path = tmp_path / "history.jsonl"

    for idx in range(5):
        log_view_result(_make_view_result(tmp_path, idx=idx), log_path=log_path, retention=3)

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 3
    timestamps = [json.loads(line)["timestamp"] for line in lines]
    assert timestamps == sorted(timestamps)
    assert timestamps[0].startswith("2024-01-01T00:02:00")


def test_log_view_result_supports_csv(tmp_path: Path) -> None:
    log_path = tmp_path / "runs.csv"

    log_view_result(_make_view_result(tmp_path, status=ViewStatus.ERROR), log_path=log_path, fmt="csv")

    content = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert content[0] == "timestamp,storage,status,selected_rng,dashboard_path"
    assert len(content) == 2
    assert content[1].split(",")[2] == "ERROR"


def test_log_view_result_enforces_csv_retention(tmp_path: Path) -> None:
    log_path = tmp_path / "runs.csv"

    for idx in range(6):
        log_view_result(_make_view_result(tmp_path, idx=idx), log_path=log_path, fmt="csv", retention=2)

    content = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(content) == 3  # header + two retained rows


def test_log_view_result_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        log_view_result(_make_view_result(tmp_path), log_path=tmp_path / "log.xml", fmt="xml")


def test_view_log_reads_back_csv_records_without_retention(tmp_path: Path) -> None:
    view_log = ViewLog(tmp_path / "runs.csv", fmt="CSV", retention=0)

    for idx in range(4):
        view_log.append(_make_view_result(tmp_path, idx=idx))

    records = view_log.records()
    assert [record["storage"] for record in records] == [
        str(tmp_path / f"storage-{idx}.json") for idx in range(4)
    ]
    assert set(records[0]) == set(LOG_FIELDNAMES)


def test_view_log_records_empty_when_file_missing(tmp_path: Path) -> None:
    assert ViewLog(tmp_path / "absent.jsonl").records() == []
