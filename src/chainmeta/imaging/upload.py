"""Hosted storage for generated vault icons."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from eth_utils import to_checksum_address

from chainmeta.settings.config import ImageHostSettings

LOGGER = logging.getLogger("chainmeta.imaging.upload")


class ImageHostConfigError(RuntimeError):
    """Raised when the image host is used without credentials."""


@dataclass(frozen=True)
class UploadResult:
    success: bool
    url: str | None = None
    error: str | None = None


class ImageHost(Protocol):
    def upload_vault_image(self, image: bytes, vault_address: str) -> UploadResult: ...


class CloudinaryImageHost:
    """Upload vault icons to Cloudinary under ``<folder>/<checksum address>``."""

    def __init__(
        self,
        settings: ImageHostSettings,
        *,
        uploader: Optional[Callable[..., Dict[str, Any]]] = None,
    ) -> None:
        if uploader is None:
            if not settings.is_configured:
                raise ImageHostConfigError(
                    "Missing Cloudinary credentials. Set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY "
                    "and CLOUDINARY_API_SECRET."
                )
            cloudinary.config(
                cloud_name=settings.cloud_name,
                api_key=settings.api_key,
                api_secret=settings.api_secret,
                secure=True,
            )
            uploader = cloudinary.uploader.upload
        self._upload = uploader
        self._folder = settings.folder

    def upload_vault_image(self, image: bytes, vault_address: str) -> UploadResult:
        """Upload ``image`` and return its secure URL; errors become a failed result."""

        try:
            public_id = to_checksum_address(vault_address)
            data_uri = "data:image/jpeg;base64," + base64.b64encode(image).decode("ascii")
            response = self._upload(
                data_uri,
                folder=self._folder,
                public_id=public_id,
                overwrite=True,
                resource_type="image",
                format="jpg",
            )
        except (CloudinaryError, ValueError, OSError) as exc:
            LOGGER.error("Failed to upload vault image: %s", exc)
            return UploadResult(success=False, error=str(exc))

        url = response.get("secure_url")
        if not url:
            return UploadResult(success=False, error="Upload response did not include a secure_url")
        return UploadResult(success=True, url=url)


__all__ = ["CloudinaryImageHost", "ImageHost", "ImageHostConfigError", "UploadResult"]
