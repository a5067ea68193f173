"""Client service — client form save/delete and the searchable client list."""

from typing import List, Optional

from agenda.application.services.clients_store import ClientsStore
from agenda.application.services.search import filter_clients
from agenda.core.exceptions import EntityNotFoundException, ValidationException
from agenda.domain.schemas.client import Client, ClientCreate, ClientUpdate


def list_clients(store: ClientsStore, query: str = "") -> List[Client]:
    return filter_clients(store.snapshot, query)


def get_client(store: ClientsStore, client_id: str) -> Client:
    client = store.get(client_id)
    if client is None:
        raise EntityNotFoundException("Cliente não encontrado", details={"id": client_id})
    return client


def save_client(
    store: ClientsStore,
    name: str,
    phone: str,
    address: Optional[str] = None,
    client_id: Optional[str] = None,
) -> Optional[str]:
    """Create (client_id None) or edit a client. Returns the id of the written client."""
    name = (name or "").strip()
    phone = (phone or "").strip()
    address = (address or "").strip()
    if not name or not phone:
        raise ValidationException("Preencha nome e telefone.")

    if client_id:
        get_client(store, client_id)
        store.update(client_id, ClientUpdate(name=name, phone=phone, address=address))
        return client_id

    return store.add(ClientCreate(name=name, phone=phone, address=address))


def delete_client(store: ClientsStore, client_id: str) -> None:
    get_client(store, client_id)
    store.remove(client_id)
