"""Application orchestration for the RNG results viewer CLI."""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, TextIO, Tuple

from .config import ViewerConfig, default_config, load_config
from .dashboard import print_console_summary, write_dashboard
from .errors import MissingFileError
from .logging import log_view_result
from .reader import make_reader
from .storage import StoragePort, open_storage
from .view import ResultsView, ViewModel, ViewState, ViewStatus


@dataclass(frozen=True)
class ViewResult:
    """Summary of a full application run."""

    storage_path: Path | None
    config_path: Path | None
    state: ViewState
    view_model: ViewModel
    dashboard_path: Path | None
    started_at: datetime
    duration: timedelta
    warnings: Tuple[str, ...] = ()

    @property
    def status(self) -> ViewStatus:
        return self.state.status

    @property
    def selected_id(self) -> str:
        return self.state.selected_id


class RngViewerApp:
    """High level service wiring configuration, storage, view and rendering."""

    def __init__(
        self,
        *,
        storage_factory: Callable[[ViewerConfig], StoragePort] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self._storage_factory = storage_factory or _open_configured_storage
        self._stream = stream

    def run(
        self,
        storage_path: Path | None = None,
        config_path: Path | None = None,
        dashboard_path: Path | None = None,
        rng_id: str | None = None,
        verbose: bool = False,
    ) -> ViewResult:
        """Load results once, render the dashboard and summarise the outcome."""

        started_at = datetime.now(timezone.utc)
        config = load_config(config_path) if config_path is not None else default_config()
        if storage_path is not None:
            config = replace(
                config,
                storage=replace(config.storage, path=Path(storage_path).expanduser().resolve()),
            )
        storage = self._storage_factory(config)

        view = ResultsView(make_reader(storage), default_id=config.view.default_rng)
        if rng_id is not None:
            view.select(rng_id)
        state = view.load()
        view_model = view.render()

        stream = self._stream if self._stream is not None else sys.stdout
        for warning in config.warnings:
            print(f"Warning: {warning}", file=stream)
        print_console_summary(view_model, verbose=verbose, stream=stream)
        if verbose and view.outcome is not None and view.outcome.cause is not None:
            print(f"Cause: {view.outcome.cause}", file=stream)

        target = write_dashboard(
            state,
            dashboard_path or config.output.dashboard_path,
            charts=config.charts,
            generated_at=started_at,
        )
        result = ViewResult(
            storage_path=config.storage.path,
            config_path=config_path,
            state=state,
            view_model=view_model,
            dashboard_path=target,
            started_at=started_at,
            duration=datetime.now(timezone.utc) - started_at,
            warnings=config.warnings,
        )
        if config.output.log_results:
            log_view_result(
                result,
                log_path=config.output.run_log_path,
                fmt=config.output.run_log_format,
                retention=config.output.run_log_retention,
            )
        return result


def _open_configured_storage(config: ViewerConfig) -> StoragePort:
    if config.storage.path is None:
        raise MissingFileError("No storage location given; pass --storage or set [storage] path.")
    return open_storage(config.storage.path, backend=config.storage.backend)


__all__ = ["RngViewerApp", "ViewResult"]
