from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from core.errors import StorageError
from core.models import Document

logger = logging.getLogger(__name__)


class Store(Protocol):
    def load(self) -> Document: ...

    def save(self, doc: Document) -> None: ...

    def ensure_initialized(self) -> bool: ...


class JsonFileStore:
    """Whole-document JSON file storage.

    Every call reads or rewrites the entire file. There is no locking and no
    atomic rename, so concurrent writers race and the last write wins.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Document:
        try:
            return self._decode(self._read())
        except StorageError as exc:
            logger.debug("treating data file as empty: %s", exc.message)
            return Document()

    def save(self, doc: Document) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(doc.to_dict(), indent=2, allow_nan=False), encoding="utf-8")

    def ensure_initialized(self) -> bool:
        """Write an empty document if the backing file is absent. Returns True when created."""
        if self.path.exists():
            return False
        self.save(Document())
        logger.info("initialized empty data file at %s", self.path)
        return True

    def _read(self) -> object:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"cannot read {self.path}: {exc}") from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"corrupt JSON in {self.path}: {exc}") from exc

    def _decode(self, raw: object) -> Document:
        try:
            return Document.from_dict(raw)
        except (TypeError, AttributeError, ValueError) as exc:
            raise StorageError(f"unexpected layout in {self.path}: {exc}") from exc


class InMemoryStore:
    def __init__(self, doc: Optional[Document] = None) -> None:
        self._doc = copy.deepcopy(doc) if doc is not None else Document()
        self.saves = 0

    def load(self) -> Document:
        return copy.deepcopy(self._doc)

    def save(self, doc: Document) -> None:
        self._doc = copy.deepcopy(doc)
        self.saves += 1

    def ensure_initialized(self) -> bool:
        return False
