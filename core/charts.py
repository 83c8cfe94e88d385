from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd
import plotly.graph_objects as go

from core.filters import FilteredView
from core.models import Dataset, Series

alt.data_transformers.disable_max_rows()

CHART_TYPES = ("line", "bar", "pie", "scatter")
DEFAULT_CHART_TYPE = "line"
SCATTER_COLOR = "#ff9800"
DOT_COLOR = "#fb7185"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def aligned(data: List[Any], length: int) -> List[Any]:
    """Pad short series with None (rendered as gaps) and drop values past the last label."""
    return (list(data) + [None] * length)[:length]


def series_frame(view: FilteredView) -> pd.DataFrame:
    """Long-form frame with one row per (label, series) pair."""
    rows = []
    for series in view.series:
        for pos, (label, value) in enumerate(zip(view.labels, aligned(series.data, len(view.labels)))):
            rows.append({"position": pos, "label": label, "series": series.name, "value": value})
    return pd.DataFrame(rows, columns=["position", "label", "series", "value"])


def table_frame(dataset: Dataset) -> pd.DataFrame:
    table = pd.DataFrame({"Label": dataset.labels})
    for series in dataset.series:
        table[series.name] = aligned(series.data, len(dataset.labels))
    return table


def _color_scale(series: List[Series]) -> alt.Scale:
    names = [s.name for s in series]
    if names and all(s.color for s in series):
        return alt.Scale(domain=names, range=[s.color for s in series])
    return alt.Scale(domain=names, scheme="category10")


def main_chart(view: FilteredView, chart_type: str = DEFAULT_CHART_TYPE, *, height: int = 320) -> alt.Chart:
    """Main dashboard chart. Pie and scatter only plot the first series of the view."""
    chart_type = chart_type if chart_type in CHART_TYPES else DEFAULT_CHART_TYPE
    df = series_frame(view)
    label_order = list(dict.fromkeys(view.labels))

    if chart_type == "pie":
        first = df[df["series"] == view.series[0].name] if view.series else df.iloc[0:0]
        return (
            alt.Chart(first)
            .mark_arc()
            .encode(
                theta=alt.Theta("value:Q"),
                color=alt.Color("label:N", sort=label_order, legend=alt.Legend(orient="bottom")),
                tooltip=["label:N", alt.Tooltip("value:Q", format=",")],
            )
            .properties(height=height)
        )

    if chart_type == "scatter":
        first = df[df["series"] == view.series[0].name] if view.series else df.iloc[0:0]
        return (
            alt.Chart(first)
            .mark_point(filled=True, size=70, color=SCATTER_COLOR)
            .encode(
                x=alt.X("label:N", sort=label_order, title="Index/Label"),
                y=alt.Y("value:Q", scale=alt.Scale(zero=True)),
                tooltip=["label:N", "series:N", alt.Tooltip("value:Q", format=",")],
            )
            .properties(height=height)
        )

    base = alt.Chart(df).encode(
        x=alt.X("label:N", sort=label_order, title=None),
        y=alt.Y("value:Q", title=None, scale=alt.Scale(zero=True)),
        color=alt.Color("series:N", scale=_color_scale(view.series), legend=alt.Legend(orient="bottom")),
        tooltip=["label:N", "series:N", alt.Tooltip("value:Q", format=",")],
    )
    if chart_type == "bar":
        return base.mark_bar().encode(xOffset="series:N").properties(height=height)
    area = base.mark_area(opacity=0.2, interpolate="monotone")
    line = base.mark_line(point=True, interpolate="monotone")
    return (area + line).properties(height=height)


def donut_figure(dataset: Dataset) -> Optional[go.Figure]:
    """Distribution of the first series across labels. None when the dataset has no series."""
    if not dataset.series:
        return None
    first = dataset.series[0]
    labels = [dataset.labels[i] if i < len(dataset.labels) else f"#{i + 1}" for i in range(len(first.data))]
    fig = go.Figure(go.Pie(labels=labels, values=[v or 0 for v in first.data], hole=0.5, sort=False))
    fig.update_traces(marker=dict(line=dict(color="#ffffff", width=1)), hovertemplate="%{label}: %{value:,}<extra></extra>")
    fig.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10), showlegend=False)
    return fig


def scatter_figure(dataset: Dataset) -> Optional[go.Figure]:
    """First series on x against the second on y; with one series, y is the point position."""
    if not dataset.series:
        return None
    first = dataset.series[0]
    xs = [v or 0 for v in first.data]
    if len(dataset.series) > 1:
        second = dataset.series[1].data
        ys = [(second[i] if i < len(second) else None) or 0 for i in range(len(xs))]
        y_title = dataset.series[1].name
    else:
        ys = list(range(len(xs)))
        y_title = "position"
    labels = [dataset.labels[i] if i < len(dataset.labels) else str(i) for i in range(len(xs))]
    fig = go.Figure(
        go.Scatter(
            x=xs,
            y=ys,
            mode="markers",
            text=labels,
            marker=dict(size=10, color=DOT_COLOR, opacity=0.9),
            hovertemplate="%{text}: x=%{x:,} y=%{y:,}<extra></extra>",
        )
    )
    fig.update_layout(
        height=300,
        margin=dict(t=10, b=40, l=40, r=10),
        xaxis=dict(title=first.name, rangemode="tozero"),
        yaxis=dict(title=y_title, rangemode="tozero"),
    )
    return fig
