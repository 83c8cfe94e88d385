from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Callable, Optional

import streamlit as st

from core.charts import CHART_TYPES, donut_figure, main_chart, scatter_figure
from core.client import DashboardClient
from core.config import Settings, configure_logging
from core.controller import DashboardController
from core.csv_import import dataset_name_from_filename
from core.errors import DashboardError
from core.export import chart_to_html
from core.models import Snapshot

settings = Settings.from_env()
configure_logging(settings.log_level)
st.set_page_config(page_title="Data Visualizer", layout="wide")


# ---------- UI / layout helpers ----------
def inject_base_styles():
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        </style>
        """,
        unsafe_allow_html=True,
    )


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def flash(kind: str, message: str) -> None:
    st.session_state["_flash"] = (kind, message)


def render_flash() -> None:
    msg = st.session_state.pop("_flash", None)
    if not msg:
        return
    kind, text = msg
    if kind == "error":
        st.error(text)
    else:
        st.success(text)


def guarded(action: Callable[[], Optional[str]]) -> None:
    """Run a widget callback; failures surface as an error banner on the next render."""
    try:
        done = action()
    except DashboardError as exc:
        flash("error", exc.message)
        return
    if done:
        flash("success", done)


# ---------- controller / widget state ----------
def sync_widgets(ctl: DashboardController) -> None:
    st.session_state["chart_type"] = ctl.state.chart_type
    st.session_state["filter_from"] = ctl.state.filters.from_
    st.session_state["filter_to"] = ctl.state.filters.to
    st.session_state["filter_series"] = ctl.state.filters.series_name


def get_controller() -> DashboardController:
    if "controller" not in st.session_state:
        ctl = DashboardController(DashboardClient(settings.api_base_url))
        st.session_state["controller"] = ctl
        guarded(ctl.refresh)
        sync_widgets(ctl)
    return st.session_state["controller"]


ctl = get_controller()


def on_select(dataset_id: str) -> None:
    ctl.select_dataset(dataset_id)
    sync_widgets(ctl)


def on_refresh() -> None:
    guarded(ctl.refresh)
    sync_widgets(ctl)


def on_random() -> None:
    guarded(lambda: f"Random dataset created: {ctl.create_random_dataset().name}")
    sync_widgets(ctl)


def on_upload() -> None:
    upload = st.session_state.get("csv_file")
    if upload is None:
        flash("error", "Choose a CSV file first.")
        return
    name = st.session_state.get("csv_name") or dataset_name_from_filename(upload.name)
    text = upload.getvalue().decode("utf-8", errors="replace")
    guarded(lambda: f"Dataset uploaded: {ctl.import_csv(text, name).name}")
    sync_widgets(ctl)


def on_chart_type() -> None:
    ctl.set_chart_type(st.session_state["chart_type"])


def on_apply_filters() -> None:
    ctl.set_filters(
        st.session_state.get("filter_from", ""),
        st.session_state.get("filter_to", ""),
        st.session_state.get("filter_series", ""),
    )


def on_reset_filters() -> None:
    ctl.reset_filters()
    sync_widgets(ctl)


def on_save_snapshot() -> None:
    name = st.session_state.get("snapshot_name", "")
    token = st.session_state.get("admin_token", "")
    guarded(lambda: f"Snapshot saved: {ctl.save_snapshot(name, token).name}")


def on_apply_snapshot(snapshot: Snapshot) -> None:
    ctl.apply_snapshot(snapshot)
    sync_widgets(ctl)


def on_rename() -> None:
    token = st.session_state.get("admin_token", "")
    guarded(lambda: f"Dataset renamed: {ctl.rename_dataset(token, st.session_state.get('rename_to', '')).name}")


def on_delete() -> None:
    token = st.session_state.get("admin_token", "")
    guarded(lambda: f"Dataset deleted: {ctl.delete_dataset(token).name}")
    sync_widgets(ctl)


# ---------- UI setup ----------
inject_base_styles()
render_flash()

with st.sidebar:
    st.markdown("### Datasets")
    query = st.text_input("Search datasets", key="dataset_search")
    for ds in ctl.search(query):
        currency = ds.meta.get("currency", "")
        label = f"{ds.name}  ·  {currency}" if currency else ds.name
        st.button(
            label,
            key=f"ds_{ds.id}",
            on_click=on_select,
            args=(ds.id,),
            type="primary" if ds.id == ctl.state.current_id else "secondary",
            use_container_width=True,
        )
    btn_cols = st.columns(2)
    btn_cols[0].button("Refresh", on_click=on_refresh, use_container_width=True)
    btn_cols[1].button("Random dataset", on_click=on_random, use_container_width=True)

    st.markdown("---")
    st.markdown("### Upload CSV")
    st.file_uploader("CSV file (first column = labels)", type=["csv"], key="csv_file")
    st.text_input("Dataset name (optional)", key="csv_name")
    st.button("Upload", on_click=on_upload)

    st.markdown("---")
    st.markdown("### Admin")
    st.text_input("Admin token", type="password", key="admin_token", help="Kept for this session only.")

    st.markdown("### Snapshots")
    for snap in ctl.state.snapshots:
        st.button(
            f"{snap.name} · {snap.created_at or ''}",
            key=f"snap_{snap.id}",
            on_click=on_apply_snapshot,
            args=(snap,),
            use_container_width=True,
        )
    st.text_input("Snapshot name", key="snapshot_name")
    st.button("Save snapshot", on_click=on_save_snapshot)

dataset = ctl.current_dataset
st.markdown(
    f"<div class='app-top-bar'><div class='breadcrumb'>Data Visualizer</div>"
    f"<div class='page-title'>{dataset.name if dataset else 'No dataset selected'}</div></div>",
    unsafe_allow_html=True,
)
if dataset is None:
    st.info("No datasets yet. Upload a CSV or create a random dataset from the sidebar.")
    st.stop()

with card("Controls"):
    ctrl_cols = st.columns([2, 2, 2, 2, 1, 1])
    ctrl_cols[0].selectbox("Chart type", options=list(CHART_TYPES), key="chart_type", on_change=on_chart_type)
    ctrl_cols[1].text_input("From", key="filter_from", placeholder="YYYY-MM-DD")
    ctrl_cols[2].text_input("To", key="filter_to", placeholder="YYYY-MM-DD")
    series_options = [""] + ctl.series_options()
    if st.session_state.get("filter_series") not in series_options:
        st.session_state["filter_series"] = ""
    ctrl_cols[3].selectbox("Series", options=series_options, key="filter_series", format_func=lambda s: s or "All")
    ctrl_cols[4].button("Apply", on_click=on_apply_filters)
    ctrl_cols[5].button("Reset", on_click=on_reset_filters)

chart = main_chart(ctl.view(), ctl.state.chart_type)
with card(f"{dataset.name} ({ctl.state.chart_type})"):
    st.altair_chart(chart, use_container_width=True)

viz_cols = st.columns(2)
with viz_cols[0]:
    with card("Distribution"):
        donut = donut_figure(dataset)
        if donut is None:
            st.info("No data")
        else:
            st.plotly_chart(donut, use_container_width=True)
with viz_cols[1]:
    with card("Scatter"):
        scatter = scatter_figure(dataset)
        if scatter is None:
            st.info("No data")
        else:
            st.plotly_chart(scatter, use_container_width=True)

with card("Data"):
    st.dataframe(ctl.table(), hide_index=True, use_container_width=True)

export_cols = st.columns(2)
chart_name, chart_html = chart_to_html(chart, dataset.name)
export_cols[0].download_button("Download chart", data=chart_html, file_name=chart_name, mime="text/html")
json_name, json_bytes = ctl.export_json()
export_cols[1].download_button("Export JSON", data=json_bytes, file_name=json_name, mime="application/json")

with st.expander("Admin actions", expanded=False):
    st.text_input("New name", key="rename_to", placeholder=dataset.name)
    admin_cols = st.columns(2)
    admin_cols[0].button("Rename dataset", on_click=on_rename)
    admin_cols[1].button("Delete dataset", on_click=on_delete)

st.caption(f"© {date.today().year} Data Visualizer · API {settings.api_base_url}")
