from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from core.auth import Authorizer
from core.errors import NotFound, Unauthorized, ValidationError
from core.models import Dataset, DatasetPatch, Series, apply_patch, new_id, utc_timestamp
from core.store import Store

logger = logging.getLogger(__name__)

SeriesInput = Union[Series, Dict[str, Any]]


def _as_series(items: Iterable[SeriesInput]) -> List[Series]:
    return [s if isinstance(s, Series) else Series.from_dict(s) for s in items]


class DatasetService:
    """CRUD over the ``datasets`` collection. Update and delete are admin-gated; create is open."""

    def __init__(self, store: Store, authorize: Authorizer) -> None:
        self._store = store
        self._authorize = authorize

    def list(self) -> List[Dataset]:
        return self._store.load().datasets

    def get(self, dataset_id: str) -> Dataset:
        doc = self._store.load()
        idx = doc.index_of(dataset_id)
        if idx == -1:
            raise NotFound("Dataset not found")
        return doc.datasets[idx]

    def create(
        self,
        name: Optional[str],
        labels: Optional[Iterable[Any]],
        series: Optional[Iterable[SeriesInput]],
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dataset:
        if not name or labels is None or series is None:
            raise ValidationError("Missing name, labels or series")
        doc = self._store.load()
        dataset = Dataset(
            id=new_id(),
            name=name,
            labels=[str(x) for x in labels],
            series=_as_series(series),
            meta=dict(meta or {}),
            created_at=utc_timestamp(),
        )
        doc.datasets.append(dataset)
        self._store.save(doc)
        logger.info("created dataset %s (%s)", dataset.id, dataset.name)
        return dataset

    def update(self, dataset_id: str, token: Optional[str], patch: DatasetPatch) -> Dataset:
        self.require_admin(token)
        doc = self._store.load()
        idx = doc.index_of(dataset_id)
        if idx == -1:
            raise NotFound("Dataset not found")
        updated = apply_patch(doc.datasets[idx], patch)
        doc.datasets[idx] = updated
        self._store.save(doc)
        logger.info("updated dataset %s", dataset_id)
        return updated

    def delete(self, dataset_id: str, token: Optional[str]) -> Dataset:
        self.require_admin(token)
        doc = self._store.load()
        idx = doc.index_of(dataset_id)
        if idx == -1:
            raise NotFound("Dataset not found")
        removed = doc.datasets.pop(idx)
        self._store.save(doc)
        logger.info("deleted dataset %s", dataset_id)
        return removed

    def require_admin(self, token: Optional[str]) -> None:
        if not self._authorize(token):
            logger.warning("rejected dataset mutation with a bad admin token")
            raise Unauthorized()
