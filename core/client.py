from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from core.errors import ApiError
from core.models import Dataset, Snapshot

logger = logging.getLogger(__name__)

ADMIN_HEADER = "x-admin-token"


class DashboardClient:
    """Thin ``requests`` wrapper over the dashboard REST API. No retries."""

    def __init__(self, base_url: str, *, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def list_datasets(self) -> List[Dataset]:
        body = self._request("GET", "/api/datasets")
        return [Dataset.from_dict(d) for d in body.get("datasets", [])]

    def get_dataset(self, dataset_id: str) -> Dataset:
        body = self._request("GET", f"/api/datasets/{dataset_id}")
        return Dataset.from_dict(body["dataset"])

    def create_dataset(self, payload: Dict[str, Any]) -> Dataset:
        body = self._request("POST", "/api/datasets", json=payload)
        return Dataset.from_dict(body["dataset"])

    def update_dataset(self, dataset_id: str, token: str, patch: Dict[str, Any]) -> Dataset:
        body = self._request("PUT", f"/api/datasets/{dataset_id}", json=patch, token=token)
        return Dataset.from_dict(body["dataset"])

    def delete_dataset(self, dataset_id: str, token: str) -> Dataset:
        body = self._request("DELETE", f"/api/datasets/{dataset_id}", token=token)
        return Dataset.from_dict(body["removed"])

    def list_snapshots(self) -> List[Snapshot]:
        body = self._request("GET", "/api/snapshots")
        return [Snapshot.from_dict(s) for s in body.get("snapshots", [])]

    def create_snapshot(self, token: str, name: str, dashboard_state: Dict[str, Any]) -> Snapshot:
        body = self._request(
            "POST",
            "/api/snapshots",
            json={"name": name, "dashboardState": dashboard_state},
            token=token,
        )
        return Snapshot.from_dict(body["snapshot"])

    def info(self) -> Dict[str, Any]:
        return self._request("GET", "/api/info")

    def _request(self, method: str, path: str, *, json: Any = None, token: Optional[str] = None) -> Dict[str, Any]:
        headers = {ADMIN_HEADER: token} if token is not None else {}
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Backend unreachable: {exc}", status_code=503) from exc
        try:
            body = resp.json()
        except ValueError as exc:
            raise ApiError(f"Unexpected response from {path} (HTTP {resp.status_code})", status_code=resp.status_code) from exc
        if not isinstance(body, dict) or not body.get("ok"):
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiError(message or f"Request failed (HTTP {resp.status_code})", status_code=resp.status_code)
        return body
