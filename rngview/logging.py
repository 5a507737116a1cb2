"""History of viewer runs kept as a JSONL or CSV file."""

from __future__ import annotations

import csv
import json
from datetime import timezone
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .app import ViewResult


LOG_FIELDNAMES = ("timestamp", "storage", "status", "selected_rng", "dashboard_path")

LOG_FORMATS = ("jsonl", "csv")


def view_log_record(result: "ViewResult") -> Dict[str, str]:
    """Flatten ``result`` into the fields recorded for each run."""

    return {
        "timestamp": result.started_at.astimezone(timezone.utc).isoformat(),
        "storage": str(result.storage_path) if result.storage_path else "",
        "status": result.status.value.upper(),
        "selected_rng": result.selected_id,
        "dashboard_path": str(result.dashboard_path) if result.dashboard_path else "",
    }


class ViewLog:
    """Run history holding at most ``retention`` records, oldest first.

    ``retention`` of ``None`` keeps every record.
    """

    def __init__(self, path: Path, *, fmt: str = "jsonl", retention: int | None = 100) -> None:
        fmt = fmt.lower()
        if fmt not in LOG_FORMATS:
            raise ValueError(f"Unsupported log format: {fmt}")
        self.path = Path(path).expanduser().resolve()
        self.fmt = fmt
        self.retention = retention if retention is None or retention > 0 else None

    def records(self) -> List[Dict[str, str]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            if self.fmt == "csv":
                return [dict(row) for row in csv.DictReader(handle)]
            return [json.loads(line) for line in handle if line.strip()]

    def append(self, result: "ViewResult") -> Path:
        """Record ``result`` and drop the oldest records beyond the retention."""

        records = self.records()
        records.append(view_log_record(result))
        if self.retention is not None:
            records = records[-self.retention:]
        self._write(records)
        return self.path

    def _write(self, records: List[Dict[str, str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            if self.fmt == "csv":
                writer = csv.DictWriter(handle, fieldnames=LOG_FIELDNAMES, lineterminator="\n")
                writer.writeheader()
                writer.writerows(records)
            else:
                handle.writelines(json.dumps(record, ensure_ascii=False) + "\n" for record in records)


def log_view_result(
    result: "ViewResult",
    *,
    log_path: Path,
    fmt: str = "jsonl",
    retention: int | None = 100,
) -> Path:
    """Append ``result`` to the run history at ``log_path``."""

    return ViewLog(log_path, fmt=fmt, retention=retention).append(result)


__all__ = ["LOG_FIELDNAMES", "LOG_FORMATS", "ViewLog", "log_view_result", "view_log_record"]
