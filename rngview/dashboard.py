"""Dashboard rendering for console and Bokeh HTML output.

The HTML dashboard is a static, self-contained Bokeh document.  In the ready
state the panels of every report are embedded and the selector toggles their
visibility in the browser, so switching reports never reads storage again.
"""

from __future__ import annotations

import html
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Sequence, TextIO

from bokeh.embed import file_html
from bokeh.layouts import column, row
from bokeh.models import ColumnDataSource, CustomJS, Div, HoverTool, Select
from bokeh.models.layouts import LayoutDOM
from bokeh.plotting import figure
from bokeh.resources import CDN

from .config import ChartSection, default_config
from .reader import REPORT_IDS
from .view import (
    SKELETON_CELLS,
    Panel,
    ViewModel,
    ViewState,
    ViewStatus,
    render_view,
)

DASHBOARD_TITLE = "RNG Test Results"

_CELL_STYLE = "padding:16px;background:#f9fafb;border-radius:4px;"
_LABEL_STYLE = "font-size:0.875rem;color:#4b5563;"
_VALUE_STYLE = "font-size:1.125rem;font-weight:500;"
_SKELETON_STYLE = (
    "padding:16px;min-height:24px;background:#f3f4f6;border-radius:4px;"
    "animation:pulse 2s cubic-bezier(0.4,0,0.6,1) infinite;"
)
_PULSE_KEYFRAMES = "<style>@keyframes pulse{50%{opacity:.5}}</style>"


def build_dashboard(state: ViewState, *, charts: ChartSection | None = None) -> LayoutDOM:
    """Build the Bokeh layout for ``state``."""

    chart_options = charts or default_config().charts
    view_model = render_view(state)
    selector = view_model.selector
    if view_model.status is ViewStatus.ERROR or selector is None:
        message = html.escape(view_model.error or "")
        return column(Div(text=f'<div style="padding:16px;color:#ef4444;">{message}</div>'))

    header = Div(text=f"<h1>{html.escape(DASHBOARD_TITLE)}</h1>")
    select = Select(
        title="Random number generator",
        value=selector.selected,
        options=list(selector.options),
    )

    if view_model.status is ViewStatus.LOADING:
        return column(row(header, select), _panel_grid(view_model.panels, chart_options))

    groups: List[LayoutDOM] = []
    for report_id in REPORT_IDS:
        panels = render_view(replace(state, selected_id=report_id)).panels
        group = _panel_grid(panels, chart_options)
        group.visible = report_id == selector.selected
        group.name = f"panels-{report_id}"
        groups.append(group)
    select.js_on_change(
        "value",
        CustomJS(
            args=dict(groups=groups, keys=list(REPORT_IDS)),
            code="""
            for (let i = 0; i < groups.length; i++) {
                groups[i].visible = keys[i] === cb_obj.value;
            }
            """,
        ),
    )
    return column(row(header, select), *groups)


def build_dashboard_html(
    state: ViewState,
    *,
    charts: ChartSection | None = None,
    title: str = DASHBOARD_TITLE,
) -> str:
    """Render ``state`` into a standalone HTML document."""

    return file_html(build_dashboard(state, charts=charts), CDN, title)


def write_dashboard(
    state: ViewState,
    path: Path | None = None,
    *,
    charts: ChartSection | None = None,
    generated_at: datetime | None = None,
) -> Path:
    """Render and persist the HTML dashboard for ``state``."""

    target = _resolve_dashboard_path(path, generated_at)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(build_dashboard_html(state, charts=charts), encoding="utf-8")
    return target


def print_console_summary(
    view_model: ViewModel, *, verbose: bool = False, stream: TextIO | None = None
) -> None:
    """Print a short summary of ``view_model`` to ``stream``."""

    output = stream if stream is not None else sys.stdout
    status = view_model.status.value.upper()
    if view_model.status is ViewStatus.ERROR:
        print(f"Result: {status} | {view_model.error}", file=output)
        return
    selector = view_model.selector
    label = selector.selected_label if selector is not None else "-"
    print(f"Result: {status} | RNG: {label}", file=output)
    if not verbose or view_model.status is not ViewStatus.READY:
        return

    for panel in view_model.panels:
        print(f"{panel.title}:", file=output)
        for line in _panel_lines(panel):
            print(f" - {line}", file=output)


# ---------------------------------------------------------------------------
# Panel builders
# ---------------------------------------------------------------------------

def _panel_grid(panels: Sequence[Panel], charts: ChartSection) -> LayoutDOM:
    widgets = [_build_panel(panel, charts) for panel in panels]
    rows = [row(*widgets[idx:idx + 2]) for idx in range(0, len(widgets), 2)]
    return column(*rows)


def _build_panel(panel: Panel, charts: ChartSection) -> LayoutDOM:
    heading = Div(text=f"<h2>{html.escape(panel.title)}</h2>")
    if panel.kind == "line" or panel.kind == "bar":
        if panel.skeleton:
            body = Div(
                text=_PULSE_KEYFRAMES
                + f'<div class="skeleton" style="{_SKELETON_STYLE}height:{charts.height}px;'
                f'width:{charts.width}px;"></div>'
            )
        else:
            body = _build_chart(panel, charts)
        return column(heading, body)
    return column(heading, Div(text=_cell_grid_html(panel), width=charts.width))


def _cell_grid_html(panel: Panel) -> str:
    if panel.skeleton:
        cells = [f'<div class="skeleton" style="{_SKELETON_STYLE}"></div>'] * SKELETON_CELLS
        prefix = _PULSE_KEYFRAMES
    elif panel.kind == "metrics":
        cells = [_cell_html(cell.label, cell.value) for cell in panel.metrics]
        prefix = ""
    else:
        cells = [_cell_html(cell.label, cell.value, centred=True) for cell in panel.transitions]
        prefix = ""
    grid_style = (
        f"display:grid;grid-template-columns:repeat({panel.columns},minmax(0,1fr));gap:8px;"
    )
    return prefix + f'<div style="{grid_style}">' + "".join(cells) + "</div>"


def _cell_html(label: str, value: str, *, centred: bool = False) -> str:
    align = "text-align:center;" if centred else ""
    return (
        f'<div style="{_CELL_STYLE}{align}">'
        f'<div style="{_LABEL_STYLE}">{html.escape(label)}</div>'
        f'<div style="{_VALUE_STYLE}">{html.escape(value)}</div>'
        "</div>"
    )


def _build_chart(panel: Panel, charts: ChartSection) -> figure:
    x_key = "bucket" if panel.kind == "line" else "bit"
    source = ColumnDataSource(
        data={
            x_key: [point[x_key] for point in panel.points],
            "count": [point["count"] for point in panel.points],
        }
    )
    plot = figure(
        width=charts.width,
        height=charts.height,
        x_axis_label=x_key.capitalize(),
        y_axis_label="Count",
        toolbar_location="above",
    )
    if panel.kind == "line":
        plot.line(x=x_key, y="count", source=source, color=charts.color, line_width=2, legend_label="count")
    else:
        plot.vbar(x=x_key, top="count", source=source, width=0.8, color=charts.color, legend_label="count")
        plot.xgrid.grid_line_color = None
        plot.y_range.start = 0
    plot.add_tools(HoverTool(tooltips=[(x_key.capitalize(), f"@{x_key}"), ("Count", "@count{0,0}")]))
    plot.legend.location = "top_right"
    return plot


def _panel_lines(panel: Panel) -> List[str]:
    if panel.kind == "metrics":
        return [f"{cell.label}: {cell.value}" for cell in panel.metrics]
    if panel.kind == "transitions":
        if not panel.transitions:
            return ["(no transitions recorded)"]
        return [f"{cell.label}: {cell.value}" for cell in panel.transitions]
    unit = "buckets" if panel.kind == "line" else "bits"
    total = sum(point["count"] for point in panel.points)
    return [f"{len(panel.points)} {unit}, total count {total:,}"]


def _resolve_dashboard_path(path: Path | None, generated_at: datetime | None) -> Path:
    if path is not None:
        return Path(path).expanduser().resolve()
    moment = generated_at or datetime.now(timezone.utc)
    timestamp = moment.astimezone(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return (Path("dashboards") / f"rng-results-{timestamp}.html").resolve()


__all__ = [
    "DASHBOARD_TITLE",
    "build_dashboard",
    "build_dashboard_html",
    "print_console_summary",
    "write_dashboard",
]
