"""Clients store — live, tenant-scoped client list ordered by name (case/accent-insensitive)."""

from agenda.application.services.live_store import LiveCollectionStore
from agenda.application.services.search import normalize
from agenda.domain.schemas.client import Client


class ClientsStore(LiveCollectionStore[Client]):
    collection = "clients"
    model = Client

    def sort_key(self, item: Client):
        return (normalize(item.name), item.id)
