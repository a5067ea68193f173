"""FastAPI dependency — JWT bearer guard bound to the signed-in session."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agenda.core.exceptions import UnauthorizedException
from agenda.domain.schemas.auth import AuthUser
from agenda.interfaces.deps import AgendaContainer, get_container

security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    container: AgendaContainer = Depends(get_container),
) -> Optional[AuthUser]:
    """The session user when the request carries a valid access token issued to that user."""
    if credentials is None:
        return None

    uid = container.auth.decode_access_token(credentials.credentials)
    user = container.gate.user
    # Tokens of a signed-out or switched-away account no longer match the session
    if uid is None or user is None or user.uid != uid:
        return None
    return user


def get_current_user(
    user: Optional[AuthUser] = Depends(get_optional_user),
    container: AgendaContainer = Depends(get_container),
) -> AuthUser:
    if user is None:
        raise UnauthorizedException("Token inválido ou expirado")
    return container.gate.require_user()
