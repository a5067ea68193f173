"""Auth gate — follows auth-state changes and decides which navigation area a route belongs to."""

from typing import Optional

import structlog

from agenda.core.exceptions import UnauthorizedException
from agenda.domain.schemas.auth import AuthUser
from agenda.infrastructure.auth_provider import AuthProvider

logger = structlog.get_logger(__name__)

LOGIN_ROUTE = "login"
HOME_ROUTE = "tabs"
# Only reachable while signed out
PUBLIC_ONLY_ROUTES = frozenset({"login", "register"})
# Reachable either way (a signed-in owner registers colleagues)
OPEN_ROUTES = frozenset({"register_professional"})


def resolve_route(route: str, signed_in: bool) -> str:
    """Route to show for a requested route: signed-out callers go to login, signed-in ones skip login/register."""
    if route in OPEN_ROUTES:
        return route
    if not signed_in:
        return route if route in PUBLIC_ONLY_ROUTES else LOGIN_ROUTE
    return HOME_ROUTE if route in PUBLIC_ONLY_ROUTES else route


class AuthGate:
    def __init__(self, auth: AuthProvider):
        self._auth = auth
        self._uid: Optional[str] = None
        self._unsubscribe = auth.on_auth_state_changed(self._on_change)

    def _on_change(self, user: Optional[AuthUser]) -> None:
        uid = user.uid if user else None
        if uid != self._uid:
            self._uid = uid
            logger.info("Auth area changed", area=self.area, uid=uid)

    @property
    def user(self) -> Optional[AuthUser]:
        return self._auth.current_user

    @property
    def area(self) -> str:
        return "protected" if self._uid else "public"

    def resolve(self, route: str) -> str:
        return resolve_route(route, self._uid is not None)

    def require_user(self) -> AuthUser:
        user = self.user
        if user is None:
            raise UnauthorizedException("Usuário não autenticado")
        return user

    def close(self) -> None:
        self._unsubscribe()
