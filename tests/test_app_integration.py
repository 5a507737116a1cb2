from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from rngview.app import RngViewerApp
from rngview.errors import MissingFileError
from rngview.view import ViewStatus

GAME_REPORT = {
    "rng": "game_rng",
    "distribution": [3, 5, 2],
    "bit_counts": [4, 6],
    "transition_matrix": [[1, 2], [3, 4]],
    "metrics": {
        "chi_square": 0.5,
        "bit_entropy": 1.998,
        "generation_time": 0.125,
        "numbers_per_second": 8000,
    },
}

CONFIG_TEMPLATE = """
[storage]
path = storage.json

[view]
default_rng = game

[output]
dashboard_path = out/dashboard.html

[logging]
enabled = true
path = logs/view.jsonl
""".strip()


def _write_storage(tmp_path: Path, items: dict[str, object]) -> Path:
    storage_path = tmp_path / "storage.json"
    storage_path.write_text(json.dumps(items), encoding="utf-8")
    return storage_path


def test_app_run_renders_ready_dashboard(tmp_path: Path) -> None:
    _write_storage(tmp_path, {"game_rng_results": json.dumps(GAME_REPORT)})
    config_path = tmp_path / "config.ini"
    config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    stream = io.StringIO()

    result = RngViewerApp(stream=stream).run(config_path=config_path, verbose=True)

    assert result.status is ViewStatus.READY
    assert result.selected_id == "game_rng"
    assert result.dashboard_path == (tmp_path / "out" / "dashboard.html").resolve()
    assert result.dashboard_path.exists()
    assert "Numbers/Second: 8,000" in stream.getvalue()
    log_lines = (tmp_path / "logs" / "view.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(log_lines[0])["status"] == "READY"


def test_app_run_with_corrupted_storage_renders_error_state(tmp_path: Path) -> None:
    storage_path = _write_storage(tmp_path, {"game_rng_results": "{oops"})
    stream = io.StringIO()

    result = RngViewerApp(stream=stream).run(
        storage_path=storage_path,
        dashboard_path=tmp_path / "dash.html",
    )

    assert result.status is ViewStatus.ERROR
    assert result.view_model.panels == ()
    assert "Result: ERROR | Failed to load test results" in stream.getvalue()
    assert "Failed to load test results" in (tmp_path / "dash.html").read_text(encoding="utf-8")


def test_app_run_selects_requested_report(tmp_path: Path) -> None:
    storage_path = _write_storage(tmp_path, {})

    result = RngViewerApp(stream=io.StringIO()).run(
        storage_path=storage_path,
        dashboard_path=tmp_path / "dash.html",
        rng_id="crypto",
    )

    assert result.status is ViewStatus.READY
    assert result.selected_id == "crypto_rng"
    assert result.state.reports == {"game_rng": {}, "crypto_rng": {}}


def test_app_run_requires_storage_location(tmp_path: Path) -> None:
    with pytest.raises(MissingFileError):
        RngViewerApp(stream=io.StringIO()).run(dashboard_path=tmp_path / "dash.html")


def test_app_run_with_injected_storage(tmp_path: Path) -> None:
    from rngview.storage import MappingStorage

    storage = MappingStorage({"crypto_rng_results": json.dumps(GAME_REPORT)})
    app = RngViewerApp(storage_factory=lambda config: storage, stream=io.StringIO())

    result = app.run(dashboard_path=tmp_path / "dash.html", rng_id="crypto_rng")

    assert result.view_model.panels[2].points[0] == {"bucket": 0, "count": 3}
