"""Configuration parsing utilities for the RNG results viewer."""

from __future__ import annotations

import configparser
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Tuple

from .errors import InvalidConfigurationError, MissingFileError, UnknownReportError
from .logging import LOG_FORMATS
from .reader import GAME_RNG
from .storage import StorageBackend
from .view import resolve_report_id

DEFAULT_CHART_WIDTH = 600
DEFAULT_CHART_HEIGHT = 300
DEFAULT_CHART_COLOR = "#4f46e5"

_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class StorageSection:
    """Where the serialised test results are read from."""

    path: Path | None
    backend: StorageBackend | None


@dataclass(frozen=True)
class ViewSection:
    default_rng: str


@dataclass(frozen=True)
class ChartSection:
    """Dimensions and colour shared by the distribution charts."""

    width: int
    height: int
    color: str


@dataclass(frozen=True)
class OutputSection:
    """Options controlling where the dashboard and run log are written."""

    dashboard_path: Path | None
    log_results: bool
    run_log_path: Path
    run_log_format: str
    run_log_retention: int | None


@dataclass(frozen=True)
class ViewerConfig:
    """Aggregate configuration container returned by :func:`load_config`."""

    storage: StorageSection
    view: ViewSection
    charts: ChartSection
    output: OutputSection
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def default_config(base_dir: Path | None = None) -> ViewerConfig:
    """Return the configuration used when no file is supplied."""

    base = (base_dir or Path.cwd()).resolve()
    return ViewerConfig(
        storage=StorageSection(path=None, backend=None),
        view=ViewSection(default_rng=GAME_RNG),
        charts=ChartSection(
            width=DEFAULT_CHART_WIDTH,
            height=DEFAULT_CHART_HEIGHT,
            color=DEFAULT_CHART_COLOR,
        ),
        output=OutputSection(
            dashboard_path=None,
            log_results=False,
            run_log_path=(base / "logs" / "view_log.jsonl").resolve(),
            run_log_format="jsonl",
            run_log_retention=100,
        ),
    )


def load_config(path: Path) -> ViewerConfig:
    """Load and validate an INI configuration file."""

    parser = configparser.ConfigParser()
    try:
        with path.open("r", encoding="utf-8") as config_file:
            parser.read_file(config_file)
    except FileNotFoundError as exc:
        raise MissingFileError(f"Configuration file not found: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read configuration file: {path}") from exc
    except configparser.Error as exc:
        raise InvalidConfigurationError(f"Configuration is not valid INI: {exc}") from exc

    base_dir = path.resolve().parent
    warnings: list[str] = []
    storage = _parse_storage(parser, base_dir)
    view = _parse_view(parser)
    charts = _parse_charts(parser)
    output = _parse_output(parser, base_dir)
    if output.log_results and output.run_log_retention is None:
        warnings.append("Run log retention is disabled; the log will grow without bound.")

    return ViewerConfig(
        storage=storage,
        view=view,
        charts=charts,
        output=output,
        warnings=tuple(warnings),
    )


def _parse_storage(parser: configparser.ConfigParser, base_dir: Path) -> StorageSection:
    if not parser.has_section("storage"):
        return StorageSection(path=None, backend=None)
    section = parser["storage"]
    storage_path = _resolve_path(section.get("path", ""), base_dir)
    raw_backend = section.get("backend", "").strip().lower()
    if raw_backend and raw_backend not in {"file", "directory"}:
        raise InvalidConfigurationError(
            "Option 'backend' in [storage] must be either 'file' or 'directory'."
        )
    return StorageSection(path=storage_path, backend=raw_backend or None)  # type: ignore[arg-type]


def _parse_view(parser: configparser.ConfigParser) -> ViewSection:
    default_rng = GAME_RNG
    if parser.has_section("view") and "default_rng" in parser["view"]:
        raw = parser["view"]["default_rng"].strip()
        try:
            default_rng = resolve_report_id(raw)
        except UnknownReportError as exc:
            raise InvalidConfigurationError(
                f"Option 'default_rng' in [view] is invalid: {exc}"
            ) from exc
    return ViewSection(default_rng=default_rng)


def _parse_charts(parser: configparser.ConfigParser) -> ChartSection:
    width = DEFAULT_CHART_WIDTH
    height = DEFAULT_CHART_HEIGHT
    color = DEFAULT_CHART_COLOR
    if parser.has_section("charts"):
        section = parser["charts"]
        width = _positive_int(section, "width", width)
        height = _positive_int(section, "height", height)
        if "color" in section:
            color = section["color"].strip()
            if not _COLOR_PATTERN.match(color):
                raise InvalidConfigurationError(
                    "Option 'color' in [charts] must be a hex colour such as '#4f46e5'."
                )
    return ChartSection(width=width, height=height, color=color)


def _positive_int(section: configparser.SectionProxy, key: str, default: int) -> int:
    if key not in section:
        return default
    try:
        value = section.getint(key)
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section.name}] must be an integer value."
        ) from exc
    if value is None or value <= 0:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section.name}] must be greater than zero."
        )
    return value


def _parse_output(parser: configparser.ConfigParser, base_dir: Path) -> OutputSection:
    defaults = default_config(base_dir).output
    dashboard_path = defaults.dashboard_path
    if parser.has_section("output"):
        dashboard_path = _resolve_path(parser["output"].get("dashboard_path", ""), base_dir)
    if not parser.has_section("logging"):
        return replace(defaults, dashboard_path=dashboard_path)

    section = parser["logging"]
    try:
        enabled = section.getboolean("enabled", fallback=defaults.log_results)
    except ValueError as exc:
        raise InvalidConfigurationError(
            "Option 'enabled' in [logging] must be a boolean value."
        ) from exc
    log_format = section.get("format", defaults.run_log_format).strip().lower()
    if log_format not in LOG_FORMATS:
        raise InvalidConfigurationError(
            "Option 'format' in [logging] must be either 'jsonl' or 'csv'."
        )
    retention = defaults.run_log_retention
    if section.get("retention", "").strip():
        try:
            retention = section.getint("retention")
        except ValueError as exc:
            raise InvalidConfigurationError(
                "Option 'retention' in [logging] must be an integer value."
            ) from exc
        if retention is not None and retention <= 0:
            retention = None

    return OutputSection(
        dashboard_path=dashboard_path,
        log_results=enabled,
        run_log_path=_resolve_path(section.get("path", ""), base_dir) or defaults.run_log_path,
        run_log_format=log_format,
        run_log_retention=retention,
    )


def _resolve_path(raw_path: str, base_dir: Path) -> Path | None:
    stripped = raw_path.strip()
    if not stripped:
        return None
    candidate = Path(stripped).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


__all__ = [
    "ChartSection",
    "OutputSection",
    "StorageSection",
    "ViewSection",
    "ViewerConfig",
    "default_config",
    "load_config",
]
