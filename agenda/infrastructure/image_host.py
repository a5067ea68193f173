"""Cloudinary HTTP client — unsigned image upload with a fixed upload preset."""

import asyncio
import mimetypes
import os
from typing import Optional

import httpx
import structlog

from agenda.config import Settings

logger = structlog.get_logger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class CloudinaryClient:
    """Uploads local images and returns their public `secure_url`.

    No retries: a failed upload returns None and the caller keeps the previous image.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.upload_preset = settings.CLOUDINARY_UPLOAD_PRESET
        self.timeout = settings.IMAGE_UPLOAD_TIMEOUT
        self._transport = transport

    @property
    def upload_url(self) -> str:
        return f"{CLOUDINARY_API_URL}/{self.cloud_name}/image/upload"

    async def upload(self, image_path: str) -> Optional[str]:
        content_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        filename = os.path.basename(image_path) or "profile_pic.jpg"

        try:
            content = await asyncio.to_thread(_read_bytes, image_path)

            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.upload_url,
                    files={"file": (filename, content, content_type)},
                    data={"upload_preset": self.upload_preset},
                )
                result = response.json()
        except (OSError, httpx.HTTPError, ValueError) as e:
            logger.error("Image upload failed", path=image_path, error=str(e))
            return None

        secure_url = result.get("secure_url") if isinstance(result, dict) else None
        if not secure_url:
            logger.error("Image host returned no URL", status_code=response.status_code, response=result)
            return None

        logger.info("Image uploaded", url=secure_url)
        return secure_url
