"""
Live collection store — a tenant-scoped projection of one document collection.

Lifecycle:
1. Auth change: every subscription of the previous scope is cancelled and the
   list is cleared; for a signed-in user the store watches its profile document.
2. Once the profile carries a `salonId`, the store watches the collection
   filtered on that tenant. A profile change to another tenant re-subscribes.

Writes never touch local state: the collection watch delivers the result.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar, Union

import structlog
from pydantic import BaseModel, ValidationError

from agenda.domain.repositories.base import DocumentStore, Snapshot, Subscription
from agenda.domain.schemas.auth import AuthUser
from agenda.infrastructure.auth_provider import AuthProvider

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)
Listener = Callable[[Tuple[Any, ...]], None]
Fields = Union[BaseModel, Dict[str, Any]]

PROFILES_COLLECTION = "users"
RESERVED_FIELDS = ("id", "userId", "salonId", "createdAt")


def _as_dict(fields: Fields, partial: bool = False) -> Dict[str, Any]:
    if isinstance(fields, BaseModel):
        return fields.model_dump(by_alias=True, exclude_unset=partial)
    return dict(fields)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LiveCollectionStore(Generic[T]):
    collection: str
    model: Type[T]

    def __init__(self, auth: AuthProvider, documents: DocumentStore):
        self._documents = documents
        self._items: Tuple[T, ...] = ()
        self._listeners: List[Listener] = []
        self._user: Optional[AuthUser] = None
        self._salon_id: Optional[str] = None
        self._profile_sub: Optional[Subscription] = None
        self._data_sub: Optional[Subscription] = None
        self._scope = 0
        self._unsubscribe_auth = auth.on_auth_state_changed(self._on_auth_changed)

    # --- read side -------------------------------------------------------

    @property
    def snapshot(self) -> Tuple[T, ...]:
        return self._items

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def salon_id(self) -> Optional[str]:
        return self._salon_id

    def get(self, id: str) -> Optional[T]:
        return next((item for item in self._items if item.id == id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns an idempotent unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sort_key(self, item: T):
        return item.id

    # --- subscription lifecycle -----------------------------------------

    def _publish(self, items: Tuple[T, ...]) -> None:
        self._items = items
        for listener in list(self._listeners):
            listener(items)

    def _cancel_data(self) -> None:
        if self._data_sub is not None:
            self._data_sub.cancel()
            self._data_sub = None

    def _cancel_all(self) -> None:
        self._cancel_data()
        if self._profile_sub is not None:
            self._profile_sub.cancel()
            self._profile_sub = None

    def _on_auth_changed(self, user: Optional[AuthUser]) -> None:
        self._scope += 1
        self._cancel_all()
        self._user = user
        self._salon_id = None
        self._publish(())

        if user is None:
            return

        scope = self._scope
        self._profile_sub = self._documents.watch(
            PROFILES_COLLECTION,
            {"uid": user.uid},
            lambda snapshot: self._on_profile(scope, snapshot),
        )

    def _on_profile(self, scope: int, snapshot: Snapshot) -> None:
        if scope != self._scope:
            return
        salon_id = (snapshot[0].get("salonId") if snapshot else None) or None
        if salon_id is not None and salon_id == self._salon_id and self._data_sub is not None:
            return

        self._cancel_data()
        self._salon_id = salon_id
        if salon_id is None:
            logger.warning("Tenant not resolved for user", collection=self.collection, uid=self._user.uid)
            self._publish(())
            return

        self._data_sub = self._documents.watch(
            self.collection,
            {"salonId": self._salon_id},
            lambda snap: self._on_snapshot(scope, snap),
        )

    def _on_snapshot(self, scope: int, snapshot: Snapshot) -> None:
        if scope != self._scope:
            return
        items = []
        for doc in snapshot:
            try:
                items.append(self.model.from_document(doc))
            except ValidationError as e:
                logger.warning("Skipping malformed document", collection=self.collection, id=doc.id, errors=e.errors())
        self._publish(tuple(sorted(items, key=self.sort_key)))

    def close(self) -> None:
        self._scope += 1
        self._unsubscribe_auth()
        self._cancel_all()
        self._listeners.clear()

    # --- write side ------------------------------------------------------

    def _can_write(self, action: str) -> bool:
        if self._user is None or not self._salon_id:
            logger.warning(
                "Write ignored: no authenticated user or tenant",
                collection=self.collection,
                action=action,
                authenticated=self._user is not None,
            )
            return False
        return True

    def _stamp(self, fields: Fields) -> Dict[str, Any]:
        data = {k: v for k, v in _as_dict(fields).items() if k not in RESERVED_FIELDS}
        data.update(userId=self._user.uid, salonId=self._salon_id, createdAt=utc_now_iso())
        return data

    def add(self, fields: Fields) -> Optional[str]:
        """Create a record for the current tenant. No-op (None) without user or tenant."""
        if not self._can_write("add"):
            return None
        try:
            return self._documents.add(self.collection, self._stamp(fields))
        except Exception:
            logger.exception("Failed to add document", collection=self.collection)
            raise

    def add_many(self, items: Iterable[Fields]) -> List[str]:
        """Batched create. An item's 'id' is kept as its document id."""
        if not self._can_write("add_many"):
            return []
        payload = []
        for fields in items:
            data = self._stamp(fields)
            local_id = _as_dict(fields).get("id")
            if local_id:
                data["id"] = local_id
            payload.append(data)
        try:
            return self._documents.add_many(self.collection, payload)
        except Exception:
            logger.exception("Failed to add documents in batch", collection=self.collection, count=len(payload))
            raise

    def update(self, id: str, patch: Fields) -> None:
        data = {k: v for k, v in _as_dict(patch, partial=True).items() if k not in RESERVED_FIELDS}
        try:
            self._documents.update(self.collection, id, data)
        except Exception:
            logger.exception("Failed to update document", collection=self.collection, id=id)
            raise

    def remove(self, id: str) -> None:
        try:
            self._documents.delete(self.collection, id)
        except Exception:
            logger.exception("Failed to remove document", collection=self.collection, id=id)
            raise
