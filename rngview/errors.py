"""Custom exceptions for the RNG results viewer."""

from __future__ import annotations


class RngViewerError(Exception):
    """Base error type for application specific failures."""


class MissingFileError(RngViewerError):
    """Raised when a required file or directory could not be located."""


class InvalidConfigurationError(RngViewerError):
    """Raised when the configuration file is malformed or invalid."""


class StorageReadError(RngViewerError):
    """Raised when the storage medium exists but cannot be read."""


class ResultLoadError(RngViewerError):
    """Raised when stored test results are corrupted and cannot be loaded."""


class UnknownReportError(RngViewerError):
    """Raised when a report identifier does not name a known RNG."""
