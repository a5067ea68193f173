"""Client API routes — searchable list, client form and contact import."""

from typing import List

from fastapi import APIRouter, Depends, status

from agenda.application.services.client_service import delete_client, get_client, list_clients, save_client
from agenda.core.exceptions import UnauthorizedException
from agenda.domain.schemas.auth import AuthUser
from agenda.domain.schemas.client import Client, ClientCreate, ClientUpdate
from agenda.domain.schemas.contact import ImportResult
from agenda.interfaces.api.deps import get_current_user
from agenda.interfaces.deps import AgendaContainer, get_container

router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.get("", response_model=List[Client])
def list_all(
    q: str = "",
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    """Tenant clients sorted by name, filtered by name or phone."""
    return list_clients(container.clients, q)


@router.post("/import", response_model=ImportResult)
def import_contacts(
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.importer.import_contacts()


@router.get("/{client_id}", response_model=Client)
def get_one(
    client_id: str,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return get_client(container.clients, client_id)


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
def create(
    body: ClientCreate,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    client_id = save_client(container.clients, body.name, body.phone, body.address)
    if client_id is None:
        raise UnauthorizedException("Salão do usuário não identificado")
    return get_client(container.clients, client_id)


@router.put("/{client_id}", response_model=Client)
def update(
    client_id: str,
    body: ClientUpdate,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    current = get_client(container.clients, client_id)
    save_client(
        container.clients,
        body.name if body.name is not None else current.name,
        body.phone if body.phone is not None else current.phone,
        body.address if body.address is not None else current.address,
        client_id=client_id,
    )
    return get_client(container.clients, client_id)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    client_id: str,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    delete_client(container.clients, client_id)
