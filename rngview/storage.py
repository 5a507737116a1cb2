"""Key-value storage backends holding serialised test results.

Results are produced by an external process and written to a string keyed
store, the way a browser page would keep them in local storage.  The viewer
only ever reads from the store, through the :class:`StoragePort` protocol, so
tests can inject an in-memory mapping instead of touching the filesystem.
"""

from __future__ import annotations

import json
import re
from pathlib import Path, PureWindowsPath
from typing import Literal, Mapping, MutableMapping, Protocol

from .errors import InvalidConfigurationError, MissingFileError, StorageReadError

StorageBackend = Literal["file", "directory"]

DIRECTORY_SUFFIX = ".json"


class StoragePort(Protocol):
    """Read-only access to a string keyed storage medium."""

    def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None`` when absent."""


class MappingStorage:
    """Storage backed by an in-memory mapping of keys to serialised values."""

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: MutableMapping[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def __repr__(self) -> str:
        return f"MappingStorage(keys={sorted(self._items)!r})"


class JsonFileStorage:
    """Storage backed by a JSON object file, such as a local storage export.

    String values are returned unchanged.  Any other JSON value is re-encoded
    so callers always receive the serialised form a key-value store would hold.
    The file is read lazily and only once per instance.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = _normalise_path(path)
        self._items: Mapping[str, object] | None = None

    def get_item(self, key: str) -> str | None:
        items = self._load()
        if key not in items:
            return None
        value = items[key]
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return json.dumps(value)

    def _load(self) -> Mapping[str, object]:
        if self._items is not None:
            return self._items
        if not self.path.exists():
            raise MissingFileError(f"Storage file not found: {self.path}")
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise StorageReadError(f"Storage file is not valid JSON: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StorageReadError(f"Storage file is not valid UTF-8: {self.path}") from exc
        except OSError as exc:  # pragma: no cover - filesystem guard
            raise StorageReadError(f"Could not read storage file: {self.path}") from exc
        if not isinstance(data, Mapping):
            raise StorageReadError("Storage file root must be a JSON object.")
        self._items = data
        return data

    def __repr__(self) -> str:
        return f"JsonFileStorage({str(self.path)!r})"


class DirectoryStorage:
    """Storage backed by a directory holding one ``<key>.json`` file per key."""

    def __init__(self, path: Path | str) -> None:
        self.path = _normalise_path(path)

    def get_item(self, key: str) -> str | None:
        if not self.path.is_dir():
            raise MissingFileError(f"Storage directory not found: {self.path}")
        candidate = self.path / f"{key}{DIRECTORY_SUFFIX}"
        if not candidate.exists():
            return None
        try:
            return candidate.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise StorageReadError(f"Storage entry is not valid UTF-8: {candidate}") from exc
        except OSError as exc:  # pragma: no cover - filesystem guard
            raise StorageReadError(f"Could not read storage entry: {candidate}") from exc

    def __repr__(self) -> str:
        return f"DirectoryStorage({str(self.path)!r})"


def open_storage(
    path: Path | str, *, backend: StorageBackend | None = None
) -> JsonFileStorage | DirectoryStorage:
    """Open the storage at ``path``, inferring the backend when not given."""

    candidate = _normalise_path(path)
    if not candidate.exists():
        raise MissingFileError(f"Storage location not found: {candidate}")
    if backend is None:
        backend = "directory" if candidate.is_dir() else "file"
    if backend == "directory":
        if not candidate.is_dir():
            raise InvalidConfigurationError(
                f"Storage backend 'directory' requires a directory: {candidate}"
            )
        return DirectoryStorage(candidate)
    if backend == "file":
        if candidate.is_dir():
            raise InvalidConfigurationError(
                f"Storage backend 'file' requires a JSON file: {candidate}"
            )
        return JsonFileStorage(candidate)
    raise InvalidConfigurationError(f"Unsupported storage backend: {backend}")


def _normalise_path(path: Path | str) -> Path:
    if isinstance(path, str) and re.match(r"^[A-Za-z]:\\", path):
        return Path(PureWindowsPath(path))
    candidate = path if isinstance(path, Path) else Path(path)
    return candidate.expanduser().resolve()


__all__ = [
    "DirectoryStorage",
    "JsonFileStorage",
    "MappingStorage",
    "StorageBackend",
    "StoragePort",
    "open_storage",
]
