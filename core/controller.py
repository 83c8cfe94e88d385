"""Frontend controller.

Holds the dashboard state (datasets, selection, filters, chart type, snapshots)
independently of Streamlit so the behaviour can be exercised without a UI.
Rendering itself lives in ``core.charts``; ``app.py`` only wires widgets to
the methods below.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.charts import CHART_TYPES, DEFAULT_CHART_TYPE, table_frame
from core.client import DashboardClient
from core.csv_import import build_dataset_from_csv, parse_csv, random_color
from core.errors import ValidationError
from core.export import dataset_to_json
from core.filters import DashboardFilters, FilteredView, apply_filters, normalize_filters
from core.models import Dataset, Snapshot
from core.seed import monthly_labels

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    datasets: List[Dataset] = field(default_factory=list)
    snapshots: List[Snapshot] = field(default_factory=list)
    current_id: Optional[str] = None
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    chart_type: str = DEFAULT_CHART_TYPE


class DashboardController:
    def __init__(self, client: DashboardClient, state: Optional[DashboardState] = None) -> None:
        self.client = client
        self.state = state or DashboardState()

    # ----- loading / selection -----

    @property
    def current_dataset(self) -> Optional[Dataset]:
        return self._find(self.state.current_id)

    def refresh(self) -> None:
        self.load_datasets()
        self.load_snapshots()

    def load_datasets(self) -> List[Dataset]:
        self.state.datasets = self.client.list_datasets()
        if self.current_dataset is None:
            self.state.current_id = None
            if self.state.datasets:
                self.select_dataset(self.state.datasets[0].id)
        return self.state.datasets

    def load_snapshots(self) -> List[Snapshot]:
        self.state.snapshots = self.client.list_snapshots()
        return self.state.snapshots

    def select_dataset(self, dataset_id: str) -> Optional[Dataset]:
        dataset = self._find(dataset_id)
        if dataset is None:
            return None
        if dataset.id != self.state.current_id:
            # series options are rebuilt for the new dataset
            self.state.filters = replace(self.state.filters, series_name="")
        self.state.current_id = dataset.id
        return dataset

    def search(self, query: str) -> List[Dataset]:
        q = (query or "").strip().lower()
        if not q:
            return list(self.state.datasets)
        return [
            ds
            for ds in self.state.datasets
            if q in ds.name.lower() or q in str(ds.meta.get("currency", "")).lower()
        ]

    # ----- filters / view -----

    def series_options(self) -> List[str]:
        dataset = self.current_dataset
        return [s.name for s in dataset.series] if dataset else []

    def set_filters(self, from_: str = "", to: str = "", series_name: str = "") -> DashboardFilters:
        self.state.filters = normalize_filters({"from": from_, "to": to, "seriesName": series_name})
        return self.state.filters

    def reset_filters(self) -> None:
        self.state.filters = DashboardFilters()

    def set_chart_type(self, chart_type: str) -> None:
        self.state.chart_type = chart_type if chart_type in CHART_TYPES else DEFAULT_CHART_TYPE

    def view(self) -> FilteredView:
        dataset = self.current_dataset
        if dataset is None:
            return FilteredView()
        return apply_filters(dataset.labels, dataset.series, self.state.filters)

    def table(self) -> pd.DataFrame:
        dataset = self.current_dataset
        return table_frame(dataset) if dataset else pd.DataFrame()

    # ----- dataset creation -----

    def import_csv(self, text: str, name: str) -> Dataset:
        parsed = parse_csv(text)
        if parsed is None:
            raise ValidationError("CSV parse failed or not enough rows.")
        created = self.client.create_dataset(build_dataset_from_csv(name, parsed))
        logger.info("uploaded CSV dataset %s", created.id)
        self.load_datasets()
        return created

    def create_random_dataset(self, rng: Optional[random.Random] = None) -> Dataset:
        rng = rng or random.Random()
        labels = monthly_labels(2025)
        payload = {
            "name": f"Random {rng.randrange(1000)}",
            "labels": labels,
            "series": [
                {"name": "A", "data": [rng.randrange(1000) for _ in labels], "color": random_color()},
                {"name": "B", "data": [rng.randrange(800) for _ in labels], "color": random_color()},
            ],
        }
        created = self.client.create_dataset(payload)
        self.load_datasets()
        return created

    # ----- snapshots -----

    def dashboard_state(self) -> Dict[str, Any]:
        return {
            "datasetId": self.state.current_id,
            "chartType": self.state.chart_type,
            "filters": self.state.filters.to_state(),
        }

    def save_snapshot(self, name: str, token: str) -> Snapshot:
        if self.current_dataset is None:
            raise ValidationError("Select a dataset first")
        if not name:
            raise ValidationError("Snapshot name is required")
        if not token:
            raise ValidationError("Snapshot not saved: admin token is required.")
        snapshot = self.client.create_snapshot(token, name, self.dashboard_state())
        self.load_snapshots()
        return snapshot

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        state = snapshot.dashboard_state or {}
        dataset_id = state.get("datasetId")
        if dataset_id:
            self.select_dataset(dataset_id)
        if state.get("chartType"):
            self.set_chart_type(state["chartType"])
        filters = state.get("filters")
        if isinstance(filters, dict):
            self.state.filters = normalize_filters(filters)

    # ----- admin -----

    def rename_dataset(self, token: str, name: str) -> Dataset:
        dataset = self._require_current()
        updated = self.client.update_dataset(dataset.id, token, {"name": name})
        self.load_datasets()
        return updated

    def delete_dataset(self, token: str) -> Dataset:
        dataset = self._require_current()
        removed = self.client.delete_dataset(dataset.id, token)
        self.state.current_id = None
        self.load_datasets()
        return removed

    # ----- export -----

    def export_json(self) -> Tuple[str, bytes]:
        return dataset_to_json(self._require_current())

    def _require_current(self) -> Dataset:
        dataset = self.current_dataset
        if dataset is None:
            raise ValidationError("Select a dataset first")
        return dataset

    def _find(self, dataset_id: Optional[str]) -> Optional[Dataset]:
        if dataset_id is None:
            return None
        for ds in self.state.datasets:
            if ds.id == dataset_id:
                return ds
        return None
