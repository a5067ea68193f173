"""
Document Store Interface.
Defines the contract of the remote document database consumed by the stores.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Tuple

from agenda.domain.schemas.document import Document

Snapshot = Tuple[Document, ...]
SnapshotCallback = Callable[[Snapshot], None]


class Subscription(Protocol):
    """Handle of a live query. Cancelling is synchronous and idempotent."""

    @property
    def active(self) -> bool:
        ...

    def cancel(self) -> None:
        ...


class DocumentStore(Protocol):
    """Interface for collection-scoped document operations and live queries."""

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a server-assigned id."""
        ...

    def add_many(self, collection: str, items: Iterable[Dict[str, Any]]) -> list[str]:
        """Create several documents in one batch. An item's 'id' key, if present, becomes its document id."""
        ...

    def set(self, collection: str, id: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Create or replace (or merge into) a document with a known id."""
        ...

    def get(self, collection: str, id: str) -> Optional[Document]:
        """Read a single document."""
        ...

    def update(self, collection: str, id: str, patch: Dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        ...

    def delete(self, collection: str, id: str) -> None:
        """Delete a document."""
        ...

    def query(self, collection: str, **equals: Any) -> Snapshot:
        """Documents whose fields equal every given value."""
        ...

    def watch(self, collection: str, filters: Dict[str, Any], callback: SnapshotCallback) -> Subscription:
        """Live query: callback receives the current snapshot now and after every write."""
        ...
