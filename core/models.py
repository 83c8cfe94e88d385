from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]

_DATASET_KEYS = ("id", "name", "labels", "series", "meta", "createdAt", "updatedAt")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-01-31T08:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Series:
    name: str
    data: List[Optional[Number]] = field(default_factory=list)
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Series":
        return cls(
            name=str(raw.get("name", "")),
            data=list(raw.get("data") or []),
            color=raw.get("color"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "data": list(self.data)}
        if self.color is not None:
            out["color"] = self.color
        return out


@dataclass(frozen=True)
class Dataset:
    id: str
    name: str
    labels: List[str]
    series: List[Series]
    meta: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # keys written by other tools; carried through updates untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Dataset":
        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            labels=[str(x) for x in (raw.get("labels") or [])],
            series=[Series.from_dict(s) for s in (raw.get("series") or [])],
            meta=dict(raw.get("meta") or {}),
            created_at=raw.get("createdAt"),
            updated_at=raw.get("updatedAt"),
            extra={k: v for k, v in raw.items() if k not in _DATASET_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            **copy.deepcopy(self.extra),
            "id": self.id,
            "name": self.name,
            "labels": list(self.labels),
            "series": [s.to_dict() for s in self.series],
            "meta": copy.deepcopy(self.meta),
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            out["updatedAt"] = self.updated_at
        return out


@dataclass(frozen=True)
class Snapshot:
    id: str
    name: str
    dashboard_state: Dict[str, Any]
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Snapshot":
        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            dashboard_state=dict(raw.get("dashboardState") or {}),
            created_at=raw.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dashboardState": copy.deepcopy(self.dashboard_state),
            "createdAt": self.created_at,
        }


@dataclass
class Document:
    """The whole persisted state: read fully, mutated in memory, written fully back."""

    datasets: List[Dataset] = field(default_factory=list)
    snapshots: List[Snapshot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "Document":
        if not isinstance(raw, dict):
            return cls()
        return cls(
            datasets=[Dataset.from_dict(d) for d in (raw.get("datasets") or []) if isinstance(d, dict)],
            snapshots=[Snapshot.from_dict(s) for s in (raw.get("snapshots") or []) if isinstance(s, dict)],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "datasets": [d.to_dict() for d in self.datasets],
            "snapshots": [s.to_dict() for s in self.snapshots],
        }

    def index_of(self, dataset_id: str) -> int:
        for idx, ds in enumerate(self.datasets):
            if ds.id == dataset_id:
                return idx
        return -1


@dataclass(frozen=True)
class DatasetPatch:
    """Partial dataset update; ``None`` means "keep the existing value"."""

    name: Optional[str] = None
    labels: Optional[List[str]] = None
    series: Optional[List[Series]] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "DatasetPatch":
        raw = raw or {}
        series = raw.get("series")
        labels = raw.get("labels")
        return cls(
            name=raw.get("name"),
            labels=[str(x) for x in labels] if labels is not None else None,
            series=[s if isinstance(s, Series) else Series.from_dict(s) for s in series] if series is not None else None,
            meta=raw.get("meta"),
        )


def apply_patch(existing: Dataset, patch: DatasetPatch, *, updated_at: Optional[str] = None) -> Dataset:
    """Shallow-merge ``patch`` over ``existing`` and stamp ``updated_at``.

    An empty name counts as absent, so a dataset can never lose its name.
    """
    return replace(
        existing,
        name=patch.name or existing.name,
        labels=list(patch.labels) if patch.labels is not None else existing.labels,
        series=list(patch.series) if patch.series is not None else existing.series,
        meta=dict(patch.meta) if patch.meta is not None else existing.meta,
        updated_at=updated_at or utc_timestamp(),
    )
