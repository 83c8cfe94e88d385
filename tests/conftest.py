"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.auth import make_authorizer  # noqa: E402
from core.config import Settings  # noqa: E402
from core.datasets import DatasetService  # noqa: E402
from core.snapshots import SnapshotService  # noqa: E402
from core.store import InMemoryStore  # noqa: E402

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def authorize():
    return make_authorizer(ADMIN_TOKEN)


@pytest.fixture
def dataset_service(store, authorize) -> DatasetService:
    return DatasetService(store, authorize)


@pytest.fixture
def snapshot_service(store, authorize) -> SnapshotService:
    return SnapshotService(store, authorize)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    static_dir = tmp_path / "public"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<html>dashboard</html>", encoding="utf-8")
    (static_dir / "style.css").write_text("body {}", encoding="utf-8")
    return Settings(
        port=4000,
        admin_token=ADMIN_TOKEN,
        data_file=tmp_path / "data.json",
        static_dir=static_dir,
    )


@pytest.fixture
def sample_payload() -> dict:
    return {
        "name": "Sales",
        "labels": ["2024-01", "2024-02", "2024-03"],
        "series": [
            {"name": "Revenue", "data": [100, 200, 300], "color": "#007bff"},
            {"name": "Orders", "data": [10, 20, 30]},
        ],
        "meta": {"currency": "USD"},
    }
