"""
SQLAlchemy implementation of the Document Store.

Documents are schemaless JSON maps keyed by (collection, id). Live queries are
kept in-process: after every committed write the store pushes a fresh snapshot
to each active watcher of the written collection.
"""

import threading
import uuid
from typing import Any, Dict, Iterable, List, Optional

import structlog
from sqlalchemy.orm import sessionmaker

from agenda.core.exceptions import EntityNotFoundException
from agenda.domain.models.document import DocumentRecord
from agenda.domain.repositories.base import DocumentStore, Snapshot, SnapshotCallback
from agenda.domain.schemas.document import Document

logger = structlog.get_logger(__name__)


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


class LiveQuery:
    """Subscription handle returned by `SQLAlchemyDocumentStore.watch`."""

    def __init__(self, store: "SQLAlchemyDocumentStore", collection: str, filters: Dict[str, Any], callback: SnapshotCallback):
        self.collection = collection
        self.filters = dict(filters)
        self._store = store
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, snapshot: Snapshot) -> None:
        if self._active:
            self._callback(snapshot)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._forget(self)

    def __repr__(self):
        return f"<LiveQuery {self.collection} {self.filters} active={self._active}>"


class SQLAlchemyDocumentStore(DocumentStore):
    """Document store backed by the 'documents' table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._watchers: List[LiveQuery] = []
        self._lock = threading.RLock()

    # --- reads -----------------------------------------------------------

    def get(self, collection: str, id: str) -> Optional[Document]:
        with self._session_factory() as db:
            record = db.get(DocumentRecord, (collection, id))
            if record is None:
                return None
            return Document(id=record.id, data=dict(record.data or {}))

    def query(self, collection: str, **equals: Any) -> Snapshot:
        with self._session_factory() as db:
            records = (
                db.query(DocumentRecord)
                .filter(DocumentRecord.collection == collection)
                .order_by(DocumentRecord.created_at.asc(), DocumentRecord.id.asc())
                .all()
            )
            return tuple(
                Document(id=r.id, data=dict(r.data or {}))
                for r in records
                if all((r.data or {}).get(field) == value for field, value in equals.items())
            )

    # --- writes ----------------------------------------------------------

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = new_document_id()
        with self._session_factory() as db:
            db.add(DocumentRecord(collection=collection, id=doc_id, data=dict(data)))
            db.commit()
        logger.debug("Document created", collection=collection, id=doc_id)
        self._notify(collection)
        return doc_id

    def add_many(self, collection: str, items: Iterable[Dict[str, Any]]) -> List[str]:
        ids = []
        with self._session_factory() as db:
            for item in items:
                data = dict(item)
                doc_id = str(data.pop("id", None) or new_document_id())
                db.add(DocumentRecord(collection=collection, id=doc_id, data=data))
                ids.append(doc_id)
            db.commit()
        logger.info("Documents created in batch", collection=collection, count=len(ids))
        if ids:
            self._notify(collection)
        return ids

    def set(self, collection: str, id: str, data: Dict[str, Any], merge: bool = False) -> None:
        with self._session_factory() as db:
            record = db.get(DocumentRecord, (collection, id))
            if record is None:
                db.add(DocumentRecord(collection=collection, id=id, data=dict(data)))
            elif merge:
                record.data = {**(record.data or {}), **data}
            else:
                record.data = dict(data)
            db.commit()
        self._notify(collection)

    def update(self, collection: str, id: str, patch: Dict[str, Any]) -> None:
        with self._session_factory() as db:
            record = db.get(DocumentRecord, (collection, id))
            if record is None:
                raise EntityNotFoundException(
                    "Documento não encontrado", details={"collection": collection, "id": id}
                )
            # Reassign so the JSON column is flagged dirty
            record.data = {**(record.data or {}), **patch}
            db.commit()
        self._notify(collection)

    def delete(self, collection: str, id: str) -> None:
        with self._session_factory() as db:
            record = db.get(DocumentRecord, (collection, id))
            if record is None:
                return
            db.delete(record)
            db.commit()
        self._notify(collection)

    # --- live queries ----------------------------------------------------

    def watch(self, collection: str, filters: Dict[str, Any], callback: SnapshotCallback) -> LiveQuery:
        live = LiveQuery(self, collection, filters, callback)
        with self._lock:
            self._watchers.append(live)
            live.deliver(self.query(collection, **live.filters))
        return live

    def _forget(self, live: LiveQuery) -> None:
        with self._lock:
            if live in self._watchers:
                self._watchers.remove(live)

    def _notify(self, collection: str) -> None:
        with self._lock:
            targets = [w for w in self._watchers if w.collection == collection]
            for live in targets:
                if not live.active:
                    continue
                try:
                    live.deliver(self.query(collection, **live.filters))
                except Exception:
                    logger.exception("Snapshot listener failed", collection=collection, filters=live.filters)
