from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from core.auth import Authorizer
from core.errors import Unauthorized, ValidationError
from core.models import Snapshot, new_id, utc_timestamp
from core.store import Store

logger = logging.getLogger(__name__)


class SnapshotService:
    """Append-only saved dashboard views. Snapshots are never updated or deleted."""

    def __init__(self, store: Store, authorize: Authorizer) -> None:
        self._store = store
        self._authorize = authorize

    def list(self) -> List[Snapshot]:
        return self._store.load().snapshots

    def create(self, token: Optional[str], name: Optional[str], dashboard_state: Optional[Dict[str, Any]]) -> Snapshot:
        self.require_admin(token)
        if not name or dashboard_state is None:
            raise ValidationError("Missing name or dashboardState")
        doc = self._store.load()
        snapshot = Snapshot(id=new_id(), name=name, dashboard_state=dict(dashboard_state), created_at=utc_timestamp())
        doc.snapshots.append(snapshot)
        self._store.save(doc)
        logger.info("saved snapshot %s (%s)", snapshot.id, snapshot.name)
        return snapshot

    def require_admin(self, token: Optional[str]) -> None:
        if not self._authorize(token):
            logger.warning("rejected snapshot creation with a bad admin token")
            raise Unauthorized()
