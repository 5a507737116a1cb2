"""Command line entry point for the RNG results viewer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .app import RngViewerApp
from .errors import (
    InvalidConfigurationError,
    MissingFileError,
    UnknownReportError,
)
from .view import ViewStatus

EXIT_SUCCESS = 0
EXIT_MISSING_FILE = 2
EXIT_INVALID_CONFIG = 3
EXIT_LOAD_FAILURE = 4
EXIT_UNKNOWN_REPORT = 5
EXIT_UNEXPECTED_ERROR = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render stored game and crypto RNG test results as an HTML dashboard.",
    )
    parser.add_argument(
        "--storage",
        "-s",
        type=Path,
        help="JSON file or directory holding the serialised test results.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Optional path to an INI configuration file.",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Optional path where the HTML dashboard will be written.",
    )
    parser.add_argument(
        "--rng",
        "-r",
        help="Report to select initially: game_rng (game) or crypto_rng (crypto).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print the panel contents to the console output.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    app = RngViewerApp()
    try:
        result = app.run(
            storage_path=args.storage,
            config_path=args.config,
            dashboard_path=args.output,
            rng_id=args.rng,
            verbose=args.verbose,
        )
    except MissingFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_MISSING_FILE
    except InvalidConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except UnknownReportError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_UNKNOWN_REPORT
    except Exception as exc:  # pragma: no cover - last-resort handler
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR
    print(f"Dashboard written to {result.dashboard_path}")
    if result.status is ViewStatus.ERROR:
        return EXIT_LOAD_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
