"""Tests for the frontend controller against an in-process fake backend."""

from __future__ import annotations

import json
import random
from typing import Any, Dict, List

import pytest

from core.controller import DashboardController
from core.datasets import DatasetService
from core.errors import ApiError, DashboardError, ValidationError
from core.filters import DashboardFilters
from core.models import Dataset, DatasetPatch, Snapshot
from core.seed import ensure_sample_dataset
from core.snapshots import SnapshotService
from tests.conftest import ADMIN_TOKEN


class FakeClient:
    """Mirrors DashboardClient on top of the real services."""

    def __init__(self, datasets: DatasetService, snapshots: SnapshotService) -> None:
        self.datasets = datasets
        self.snapshots = snapshots
        self.calls: List[str] = []

    def _call(self, name: str, fn):
        self.calls.append(name)
        try:
            return fn()
        except DashboardError as exc:
            raise ApiError(exc.message, status_code=exc.status_code) from exc

    def list_datasets(self) -> List[Dataset]:
        return self._call("list_datasets", self.datasets.list)

    def create_dataset(self, payload: Dict[str, Any]) -> Dataset:
        return self._call("create_dataset", lambda: self.datasets.create(**payload))

    def update_dataset(self, dataset_id: str, token: str, patch: Dict[str, Any]) -> Dataset:
        return self._call("update_dataset", lambda: self.datasets.update(dataset_id, token, DatasetPatch.from_dict(patch)))

    def delete_dataset(self, dataset_id: str, token: str) -> Dataset:
        return self._call("delete_dataset", lambda: self.datasets.delete(dataset_id, token))

    def list_snapshots(self) -> List[Snapshot]:
        return self._call("list_snapshots", self.snapshots.list)

    def create_snapshot(self, token: str, name: str, dashboard_state: Dict[str, Any]) -> Snapshot:
        return self._call("create_snapshot", lambda: self.snapshots.create(token, name, dashboard_state))


@pytest.fixture
def fake_client(dataset_service, snapshot_service) -> FakeClient:
    return FakeClient(dataset_service, snapshot_service)


@pytest.fixture
def controller(fake_client, dataset_service) -> DashboardController:
    ensure_sample_dataset(dataset_service, random.Random(1))
    ctl = DashboardController(fake_client)
    ctl.refresh()
    return ctl


def test_refresh_selects_first_dataset(controller) -> None:
    assert controller.current_dataset is not None
    assert controller.current_dataset.name == "Sample Sales 2024"
    assert controller.series_options() == ["Revenue", "Orders"]
    assert controller.state.snapshots == []


def test_refresh_with_no_datasets(fake_client) -> None:
    ctl = DashboardController(fake_client)
    ctl.refresh()
    assert ctl.current_dataset is None
    assert ctl.view().labels == []
    assert ctl.table().empty


def test_view_applies_filters(controller) -> None:
    controller.set_filters("2024-02", "2024-02", "Orders")
    view = controller.view()

    source = controller.current_dataset
    assert view.labels == ["2024-02"]
    assert [s.name for s in view.series] == ["Orders"]
    assert view.series[0].data == [source.series[1].data[1]]
    assert len(source.labels) == 12


def test_import_csv_creates_and_lists(controller) -> None:
    created = controller.import_csv("label,A,B\n2024-01,10,20\n2024-02,30,40", "Upload")

    assert created.labels == ["2024-01", "2024-02"]
    assert [s.data for s in created.series] == [[10, 30], [20, 40]]
    assert created.id in [d.id for d in controller.state.datasets]
    assert controller.current_dataset.name == "Sample Sales 2024"


def test_import_bad_csv_raises(controller, fake_client) -> None:
    with pytest.raises(ValidationError):
        controller.import_csv("just a header", "x")
    assert "create_dataset" not in fake_client.calls


def test_select_dataset_resets_series_filter(controller) -> None:
    other = controller.create_random_dataset(random.Random(3))
    controller.set_filters(series_name="Orders")

    controller.select_dataset(other.id)
    assert controller.current_dataset.id == other.id
    assert controller.state.filters.series_name == ""
    assert controller.series_options() == ["A", "B"]


def test_select_unknown_dataset_keeps_selection(controller) -> None:
    current = controller.state.current_id
    assert controller.select_dataset("missing") is None
    assert controller.state.current_id == current


def test_random_dataset_shape(controller) -> None:
    created = controller.create_random_dataset(random.Random(5))
    assert created.name.startswith("Random ")
    assert created.labels[0] == "2025-01" and len(created.labels) == 12
    assert all(0 <= v < 1000 for v in created.series[0].data)
    assert all(0 <= v < 800 for v in created.series[1].data)


def test_search_matches_name_and_currency(controller) -> None:
    controller.create_random_dataset(random.Random(2))
    assert [d.name for d in controller.search("sample")] == ["Sample Sales 2024"]
    assert [d.name for d in controller.search("usd")] == ["Sample Sales 2024"]
    assert len(controller.search("")) == 2


def test_save_and_apply_snapshot(controller) -> None:
    sample_id = controller.state.current_id
    controller.set_chart_type("bar")
    controller.set_filters("2024-03", "2024-06", "Revenue")

    saved = controller.save_snapshot("Q2 revenue", ADMIN_TOKEN)
    assert saved.dashboard_state == {
        "datasetId": sample_id,
        "chartType": "bar",
        "filters": {"from": "2024-03", "to": "2024-06", "series": "Revenue"},
    }
    assert [s.id for s in controller.state.snapshots] == [saved.id]

    other = controller.create_random_dataset()
    controller.select_dataset(other.id)
    controller.set_chart_type("pie")
    controller.reset_filters()

    controller.apply_snapshot(saved)
    assert controller.state.current_id == sample_id
    assert controller.state.chart_type == "bar"
    assert controller.state.filters == DashboardFilters(from_="2024-03", to="2024-06", series_name="Revenue")
    assert controller.view().labels == ["2024-03", "2024-04", "2024-05", "2024-06"]


def test_save_snapshot_requires_name_and_token(controller, fake_client) -> None:
    with pytest.raises(ValidationError):
        controller.save_snapshot("", ADMIN_TOKEN)
    with pytest.raises(ValidationError):
        controller.save_snapshot("name", "")
    assert "create_snapshot" not in fake_client.calls


def test_save_snapshot_bad_token_surfaces_api_error(controller) -> None:
    with pytest.raises(ApiError) as exc:
        controller.save_snapshot("name", "wrong")
    assert exc.value.status_code == 401


def test_unknown_chart_type_falls_back(controller) -> None:
    controller.set_chart_type("radar")
    assert controller.state.chart_type == "line"


def test_rename_and_delete(controller) -> None:
    renamed = controller.rename_dataset(ADMIN_TOKEN, "Renamed")
    assert renamed.name == "Renamed"
    assert controller.current_dataset.name == "Renamed"

    other = controller.create_random_dataset()
    controller.delete_dataset(ADMIN_TOKEN)
    assert [d.id for d in controller.state.datasets] == [other.id]
    assert controller.current_dataset.id == other.id


def test_export_json(controller) -> None:
    filename, payload = controller.export_json()
    assert filename == "Sample Sales 2024.json"
    assert json.loads(payload)["id"] == controller.state.current_id


def test_apply_snapshot_with_empty_filters_resets_them(controller) -> None:
    controller.set_filters("2024-03", "2024-06", "Revenue")
    controller.apply_snapshot(Snapshot(id="s", name="s", dashboard_state={"filters": {}}))
    assert controller.state.filters == DashboardFilters()


@pytest.mark.parametrize("filters", ["2024-01", ["2024-01"], 7, None])
def test_apply_snapshot_ignores_non_mapping_filters(controller, filters) -> None:
    controller.set_filters("2024-03", "2024-06", "Revenue")
    controller.apply_snapshot(Snapshot(id="s", name="s", dashboard_state={"chartType": "bar", "filters": filters}))

    assert controller.state.chart_type == "bar"
    assert controller.state.filters == DashboardFilters(from_="2024-03", to="2024-06", series_name="Revenue")
