"""Auth provider — credential verification, JWT session/refresh tokens and auth-state listeners."""

import hashlib
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import sessionmaker

from agenda.config import Settings
from agenda.core.exceptions import AuthProviderError, UnauthorizedException
from agenda.domain.models.account import AuthAccount
from agenda.domain.schemas.auth import AuthUser

logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AuthStateCallback = Callable[[Optional[AuthUser]], None]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _credential_version(password_hash: str) -> str:
    """Fingerprint of the current password; tokens issued before a password change stop working."""
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def _to_user(account: AuthAccount) -> AuthUser:
    return AuthUser(
        uid=account.uid,
        email=account.email,
        display_name=account.display_name,
        photo_url=account.photo_url,
    )


class AuthProvider:
    """Email/password auth with a single signed-in user per process (the device session)."""

    def __init__(self, session_factory: sessionmaker, settings: Settings):
        self._session_factory = session_factory
        self._settings = settings
        self._current_user: Optional[AuthUser] = None
        self._listeners: List[AuthStateCallback] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    # --- auth state ------------------------------------------------------

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register a listener; it is called immediately with the current user."""
        self._listeners.append(callback)
        callback(self._current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_current_user(self, user: Optional[AuthUser]) -> None:
        self._current_user = user
        for listener in list(self._listeners):
            listener(user)

    # --- credentials -----------------------------------------------------

    def _check_email(self, email: str) -> str:
        email = (email or "").strip().lower()
        if not EMAIL_RE.match(email):
            raise AuthProviderError("invalid-email")
        return email

    def sign_in(self, email: str, password: str) -> AuthUser:
        email = self._check_email(email)
        with self._session_factory() as db:
            account = db.query(AuthAccount).filter(AuthAccount.email == email).first()
            if account is None or not account.is_active:
                raise AuthProviderError("user-not-found")
            if not verify_password(password, account.password_hash):
                raise AuthProviderError("wrong-password")
            user = _to_user(account)

        logger.info("User signed in", uid=user.uid)
        self._set_current_user(user)
        return user

    def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an account and sign it in."""
        email = self._check_email(email)
        if len(password or "") < self._settings.MIN_PASSWORD_LENGTH:
            raise AuthProviderError("weak-password")

        with self._session_factory() as db:
            if db.query(AuthAccount).filter(AuthAccount.email == email).first():
                raise AuthProviderError("email-already-in-use")
            account = AuthAccount(
                uid=uuid.uuid4().hex[:28],
                email=email,
                password_hash=hash_password(password),
            )
            db.add(account)
            db.commit()
            user = _to_user(account)

        logger.info("Account created", uid=user.uid)
        self._set_current_user(user)
        return user

    def sign_out(self) -> None:
        if self._current_user is None:
            return
        logger.info("User signed out", uid=self._current_user.uid)
        self._set_current_user(None)

    def update_profile(self, display_name: Optional[str] = None, photo_url: Optional[str] = None) -> AuthUser:
        """Update the signed-in user's profile. Does not fire auth-state listeners."""
        if self._current_user is None:
            raise UnauthorizedException("Usuário não autenticado")

        with self._session_factory() as db:
            account = db.get(AuthAccount, self._current_user.uid)
            if account is None:
                raise AuthProviderError("user-not-found")
            if display_name is not None:
                account.display_name = display_name
            if photo_url is not None:
                account.photo_url = photo_url
            db.commit()
            self._current_user = _to_user(account)

        return self._current_user

    # --- tokens ----------------------------------------------------------

    def _encode(self, claims: dict, expires_delta: timedelta) -> str:
        to_encode = claims.copy()
        to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
        return jwt.encode(to_encode, self._settings.SECRET_KEY, algorithm=self._settings.JWT_ALGORITHM)

    def _decode(self, token: str, token_type: str) -> Optional[dict]:
        try:
            payload = jwt.decode(token, self._settings.SECRET_KEY, algorithms=[self._settings.JWT_ALGORITHM])
        except JWTError:
            return None
        if payload.get("type") != token_type:
            return None
        return payload

    def create_access_token(self) -> str:
        """Short-lived bearer token for the current account's API requests."""
        if self._current_user is None:
            raise UnauthorizedException("Usuário não autenticado")
        return self._encode(
            {"sub": self._current_user.uid, "type": "access"},
            timedelta(minutes=self._settings.JWT_EXPIRATION_MINUTES),
        )

    def decode_access_token(self, token: str) -> Optional[str]:
        """uid carried by a valid access token, else None."""
        payload = self._decode(token, "access")
        return payload.get("sub") if payload else None

    def issue_refresh_token(self) -> str:
        """Long-lived token that re-authenticates the current account without its password."""
        if self._current_user is None:
            raise UnauthorizedException("Usuário não autenticado")
        with self._session_factory() as db:
            account = db.get(AuthAccount, self._current_user.uid)
            if account is None:
                raise AuthProviderError("user-not-found")
            version = _credential_version(account.password_hash)
        return self._encode(
            {"sub": self._current_user.uid, "type": "refresh", "ver": version},
            timedelta(days=self._settings.REFRESH_TOKEN_EXPIRATION_DAYS),
        )

    def sign_in_with_refresh_token(self, token: str) -> AuthUser:
        payload = self._decode(token, "refresh")
        if payload is None:
            raise AuthProviderError("invalid-credential")

        with self._session_factory() as db:
            account = db.get(AuthAccount, payload.get("sub"))
            if (
                account is None
                or not account.is_active
                or payload.get("ver") != _credential_version(account.password_hash)
            ):
                raise AuthProviderError("invalid-credential")
            user = _to_user(account)

        logger.info("User signed in with refresh token", uid=user.uid)
        self._set_current_user(user)
        return user

    # --- password reset --------------------------------------------------

    def send_password_reset(self, email: str) -> str:
        """Issue a password reset code. Delivery is the mail provider's job; the code is returned and logged."""
        email = self._check_email(email)
        with self._session_factory() as db:
            account = db.query(AuthAccount).filter(AuthAccount.email == email).first()
            if account is None:
                raise AuthProviderError("user-not-found")
            uid = account.uid

        token = self._encode(
            {"sub": uid, "type": "password_reset"},
            timedelta(minutes=self._settings.PASSWORD_RESET_EXPIRATION_MINUTES),
        )
        logger.info("Password reset requested", uid=uid)
        return token

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        payload = self._decode(token, "password_reset")
        if payload is None:
            raise AuthProviderError("invalid-action-code")
        if len(new_password or "") < self._settings.MIN_PASSWORD_LENGTH:
            raise AuthProviderError("weak-password")

        with self._session_factory() as db:
            account = db.get(AuthAccount, payload.get("sub"))
            if account is None:
                raise AuthProviderError("user-not-found")
            account.password_hash = hash_password(new_password)
            db.commit()
        logger.info("Password reset completed", uid=payload.get("sub"))
