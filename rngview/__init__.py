"""Viewer for stored RNG test statistics."""

from .app import RngViewerApp, ViewResult
from .reader import read_test_results
from .view import ResultsView, ViewStatus, render_view

__all__ = [
    "RngViewerApp",
    "ViewResult",
    "ResultsView",
    "ViewStatus",
    "read_test_results",
    "render_view",
]
