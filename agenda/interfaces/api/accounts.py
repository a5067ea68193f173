"""Account API routes — salon info, professionals list and colleague registration."""

from typing import List

from fastapi import APIRouter, Depends, status

from agenda.core.exceptions import BusinessRuleViolationException
from agenda.domain.schemas.auth import AuthUser, ColleagueCreate, ProfessionalRead, SalonRead, TokenResponse
from agenda.interfaces.api.auth import token_response
from agenda.interfaces.api.deps import get_current_user
from agenda.interfaces.deps import AgendaContainer, get_container

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.get("/salon", response_model=SalonRead)
def current_salon(
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.accounts.current_salon()


@router.get("/professionals", response_model=List[ProfessionalRead])
def list_professionals(
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    """Accounts the device can switch to."""
    return container.accounts.list_professionals()


@router.post("/professionals", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register_colleague(
    body: ColleagueCreate,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    """Registers a colleague in the current salon; the session moves to the new account."""
    created = container.accounts.register_colleague(body.name, body.email, body.password)
    if created is None:
        raise BusinessRuleViolationException("Dados do salão indisponíveis para cadastrar profissionais.")
    return token_response(container, created)
