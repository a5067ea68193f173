"""Encrypted key/value store for per-account credentials (refresh tokens for account switching)."""

import base64
import hashlib
from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.orm import sessionmaker

from agenda.domain.models.secure_entry import SecureEntry

logger = structlog.get_logger(__name__)


def _fernet_for(key_material: str) -> Fernet:
    """Derive a valid 32-byte urlsafe Fernet key from arbitrary key material."""
    digest = hashlib.sha256(key_material.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class SecureStore:
    def __init__(self, session_factory: sessionmaker, key_material: str):
        self._session_factory = session_factory
        self._cipher = _fernet_for(key_material)

    def set_item(self, key: str, value: str) -> None:
        token = self._cipher.encrypt(value.encode()).decode()
        with self._session_factory() as db:
            entry = db.get(SecureEntry, key)
            if entry is None:
                db.add(SecureEntry(key=key, value=token))
            else:
                entry.value = token
            db.commit()

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            entry = db.get(SecureEntry, key)
            if entry is None:
                return None
            token = entry.value
        try:
            return self._cipher.decrypt(token.encode()).decode()
        except InvalidToken:
            # Written under another key; treat as absent
            logger.warning("Secure entry could not be decrypted", key=key)
            return None

    def delete_item(self, key: str) -> None:
        with self._session_factory() as db:
            entry = db.get(SecureEntry, key)
            if entry is not None:
                db.delete(entry)
                db.commit()
