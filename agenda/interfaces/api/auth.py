"""Auth API routes — login, registration, password reset, session, account switching."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from agenda.application.services.auth_gate import resolve_route
from agenda.domain.schemas.auth import (
    AuthUser,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    ProfessionalCreate,
    SalonDraft,
    SalonRegistrationRequest,
    SessionRead,
    SwitchAccountRequest,
    SwitchAccountResult,
    TokenResponse,
)
from agenda.interfaces.api.deps import get_current_user, get_optional_user
from agenda.interfaces.deps import AgendaContainer, get_container

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def token_response(container: AgendaContainer, user: AuthUser) -> TokenResponse:
    return TokenResponse(access_token=container.auth.create_access_token(), user=user)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, container: AgendaContainer = Depends(get_container)):
    user = container.accounts.login(body)
    return token_response(container, user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    container.accounts.logout()


@router.post("/register/salon", response_model=SalonDraft)
def register_salon(body: SalonRegistrationRequest, container: AgendaContainer = Depends(get_container)):
    """First registration step: validate the salon CPF/CNPJ. Nothing is written yet."""
    return container.accounts.start_salon_registration(body)


@router.post("/register/professional", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register_professional(body: ProfessionalCreate, container: AgendaContainer = Depends(get_container)):
    user = container.accounts.register_professional(body)
    return token_response(container, user)


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
def password_reset(body: PasswordResetRequest, container: AgendaContainer = Depends(get_container)):
    container.accounts.send_password_reset(body.email)
    return {"message": "E-mail de recuperação enviado."}


@router.post("/password-reset/confirm")
def password_reset_confirm(body: PasswordResetConfirm, container: AgendaContainer = Depends(get_container)):
    container.accounts.confirm_password_reset(body.token, body.new_password)
    return {"message": "Senha redefinida."}


@router.get("/session", response_model=SessionRead)
def session(
    route: Optional[str] = None,
    container: AgendaContainer = Depends(get_container),
    user: Optional[AuthUser] = Depends(get_optional_user),
):
    if user is None:
        return SessionRead(
            authenticated=False,
            area="public",
            route=resolve_route(route, signed_in=False) if route else None,
        )
    gate = container.gate
    return SessionRead(
        authenticated=True,
        area=gate.area,
        user=user,
        route=gate.resolve(route) if route else None,
    )


@router.post("/switch", response_model=SwitchAccountResult)
def switch_account(
    body: SwitchAccountRequest,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    """Move the session to another cached account. The caller's token stops working once switched."""
    result = container.accounts.switch_account(body.uid)
    if result.user is None:
        return result
    return result.model_copy(update={"access_token": container.auth.create_access_token()})
