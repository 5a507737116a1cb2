"""State machine and view model for the results dashboard.

A :class:`ResultsView` moves through three states::

    LOADING --load()--> READY(selection)
            \\--------> ERROR

``LOADING`` is the initial state, ``READY`` and ``ERROR`` are terminal.  The
reader is invoked exactly once per view; changing the selection in ``READY``
only re-derives panel contents from the reports already held.  Rendering is a
pure function, :func:`render_view`, of the immutable :class:`ViewState`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Mapping, Tuple

from .errors import RngViewerError, UnknownReportError
from .panels import (
    TRANSITION_COLUMNS,
    MetricCell,
    TransitionCell,
    bit_series,
    distribution_series,
    performance_cells,
    transition_cells,
)
from .reader import CRYPTO_RNG, GAME_RNG, REPORT_IDS, TestResultSet

LOAD_ERROR_MESSAGE = "Failed to load test results"

REPORT_LABELS: Mapping[str, str] = {
    GAME_RNG: "Game RNG",
    CRYPTO_RNG: "Crypto RNG",
}

REPORT_ALIASES: Mapping[str, str] = {
    "game": GAME_RNG,
    "crypto": CRYPTO_RNG,
}

PERFORMANCE_TITLE = "Performance Metrics"
TRANSITION_TITLE = "Transition Matrix"
DISTRIBUTION_TITLE = "Value Distribution"
BIT_TITLE = "Bit Distribution"

SKELETON_CELLS = 4

Reader = Callable[[], TestResultSet]


class ViewStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class ViewState:
    """Immutable snapshot of everything the view renders from."""

    status: ViewStatus = ViewStatus.LOADING
    selected_id: str = GAME_RNG
    reports: TestResultSet | None = None
    error: str | None = None


@dataclass(frozen=True)
class LoadOutcome:
    """Result of the one-shot load: either ``reports`` or ``error`` is set."""

    reports: TestResultSet | None = None
    error: str | None = None
    cause: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Selector:
    options: Tuple[Tuple[str, str], ...]
    selected: str

    @property
    def selected_label(self) -> str:
        return dict(self.options)[self.selected]


@dataclass(frozen=True)
class Panel:
    """One dashboard panel; skeleton panels carry no data."""

    title: str
    kind: str
    skeleton: bool = False
    metrics: Tuple[MetricCell, ...] = ()
    transitions: Tuple[TransitionCell, ...] = ()
    points: Tuple[Dict[str, float], ...] = ()
    columns: int = 2


@dataclass(frozen=True)
class ViewModel:
    status: ViewStatus
    selector: Selector | None = None
    panels: Tuple[Panel, ...] = ()
    error: str | None = None


def resolve_report_id(rng_id: str) -> str:
    """Map a canonical identifier or a short alias to the canonical identifier."""

    candidate = rng_id.strip().lower()
    candidate = REPORT_ALIASES.get(candidate, candidate)
    if candidate not in REPORT_IDS:
        known = ", ".join(REPORT_IDS + tuple(REPORT_ALIASES))
        raise UnknownReportError(f"Unknown report identifier '{rng_id}' (expected one of: {known}).")
    return candidate


def fetch_results(reader: Reader) -> LoadOutcome:
    """Invoke ``reader`` once and capture a load failure instead of raising."""

    try:
        reports = reader()
    except (RngViewerError, OSError) as exc:
        return LoadOutcome(error=LOAD_ERROR_MESSAGE, cause=exc)
    return LoadOutcome(reports=reports)


class ResultsView:
    """Dashboard controller holding the view state for one page lifetime."""

    def __init__(self, reader: Reader, *, default_id: str = GAME_RNG) -> None:
        self._reader = reader
        self._state = ViewState(selected_id=resolve_report_id(default_id))
        self._outcome: LoadOutcome | None = None
        self._pending: asyncio.Task[LoadOutcome] | None = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def outcome(self) -> LoadOutcome | None:
        """The load outcome, or ``None`` while the view is still loading."""

        return self._outcome

    def load(self) -> ViewState:
        """Run the one-shot load; later calls return the current state.

        While a :meth:`load_async` call is in flight the view stays in
        ``LOADING`` and the reader is not invoked again.
        """

        if self._state.status is not ViewStatus.LOADING or self._pending is not None:
            return self._state
        return self._apply(fetch_results(self._reader))

    async def load_async(self) -> ViewState:
        """Awaitable variant of :meth:`load` running the reader in a thread.

        Concurrent callers share the single in-flight read.
        """

        if self._state.status is not ViewStatus.LOADING:
            return self._state
        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(fetch_results, self._reader))
        outcome = await asyncio.shield(self._pending)
        if self._state.status is not ViewStatus.LOADING:
            return self._state
        return self._apply(outcome)

    def select(self, rng_id: str) -> ViewState:
        """Change the selected report without touching storage."""

        self._state = replace(self._state, selected_id=resolve_report_id(rng_id))
        return self._state

    def render(self) -> "ViewModel":
        return render_view(self._state)

    def _apply(self, outcome: LoadOutcome) -> ViewState:
        self._outcome = outcome
        if outcome.ok:
            self._state = replace(self._state, status=ViewStatus.READY, reports=outcome.reports)
        else:
            self._state = replace(self._state, status=ViewStatus.ERROR, error=outcome.error)
        return self._state


def render_view(state: ViewState) -> ViewModel:
    """Build the view model for ``state``."""

    if state.status is ViewStatus.ERROR:
        return ViewModel(status=state.status, error=state.error or LOAD_ERROR_MESSAGE)

    selector = Selector(
        options=tuple((report_id, REPORT_LABELS[report_id]) for report_id in REPORT_IDS),
        selected=state.selected_id,
    )
    if state.status is ViewStatus.LOADING or state.reports is None:
        return ViewModel(status=ViewStatus.LOADING, selector=selector, panels=_skeleton_panels())

    report = state.reports.get(state.selected_id) or {}
    panels = (
        Panel(title=PERFORMANCE_TITLE, kind="metrics", metrics=performance_cells(report)),
        Panel(
            title=TRANSITION_TITLE,
            kind="transitions",
            transitions=transition_cells(report),
            columns=TRANSITION_COLUMNS,
        ),
        Panel(title=DISTRIBUTION_TITLE, kind="line", points=tuple(distribution_series(report))),
        Panel(title=BIT_TITLE, kind="bar", points=tuple(bit_series(report))),
    )
    return ViewModel(status=ViewStatus.READY, selector=selector, panels=panels)


def _skeleton_panels() -> Tuple[Panel, ...]:
    placeholders: List[Panel] = [
        Panel(title=PERFORMANCE_TITLE, kind="metrics", skeleton=True),
        Panel(title=TRANSITION_TITLE, kind="transitions", skeleton=True, columns=TRANSITION_COLUMNS),
        Panel(title=DISTRIBUTION_TITLE, kind="line", skeleton=True),
        Panel(title=BIT_TITLE, kind="bar", skeleton=True),
    ]
    return tuple(placeholders)


__all__ = [
    "LOAD_ERROR_MESSAGE",
    "REPORT_LABELS",
    "SKELETON_CELLS",
    "LoadOutcome",
    "Panel",
    "ResultsView",
    "Selector",
    "ViewModel",
    "ViewState",
    "ViewStatus",
    "fetch_results",
    "render_view",
    "resolve_report_id",
]
