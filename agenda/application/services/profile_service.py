"""Profile service — display name and avatar changes for the signed-in professional."""

from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from agenda.core.exceptions import (
    EntityNotFoundException,
    UnauthorizedException,
    UploadFailedException,
    ValidationException,
)
from agenda.domain.repositories.base import DocumentStore
from agenda.domain.schemas.auth import AuthUser
from agenda.infrastructure.auth_provider import AuthProvider
from agenda.infrastructure.image_host import CloudinaryClient

logger = structlog.get_logger(__name__)

USERS = "users"


class ProfileService:
    def __init__(self, auth: AuthProvider, documents: DocumentStore, image_host: CloudinaryClient):
        self.auth = auth
        self.documents = documents
        self.image_host = image_host

    def _require_user(self) -> AuthUser:
        user = self.auth.current_user
        if user is None:
            raise UnauthorizedException("Usuário não autenticado")
        return user

    def _sync_profile_document(self, uid: str, fields: dict) -> None:
        # The auth profile is the source of truth; the users document is a copy
        try:
            self.documents.update(USERS, uid, fields)
        except (EntityNotFoundException, SQLAlchemyError) as e:
            logger.warning("Profile document not updated", uid=uid, fields=list(fields), error=str(e))

    async def change_avatar(self, image_path: str) -> AuthUser:
        """Upload a local image and make it the profile photo. The previous photo is kept on failure."""
        user = self._require_user()
        url: Optional[str] = await self.image_host.upload(image_path)
        if not url:
            logger.error("Avatar change failed: no URL from image host", uid=user.uid)
            raise UploadFailedException()

        updated = self.auth.update_profile(photo_url=url)
        self._sync_profile_document(user.uid, {"photoURL": url})
        logger.info("Avatar changed", uid=user.uid)
        return updated

    def update_display_name(self, display_name: str) -> AuthUser:
        user = self._require_user()
        name = (display_name or "").strip()
        if not name:
            raise ValidationException("Informe seu nome.")

        updated = self.auth.update_profile(display_name=name)
        self._sync_profile_document(user.uid, {"name": name})
        return updated
