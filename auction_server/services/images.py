# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Profile image hosting on Cloudinary (signed REST uploads)."""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Protocol

import httpx
from fastapi import UploadFile

from auction_server.config import settings
from auction_server.errors import AppError, ImageUploadError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp"}


@dataclass(frozen=True)
class HostedImage:
    public_id: str
    url: str


class ImageStore(Protocol):
    async def upload(self, image: UploadFile) -> HostedImage: ...

    async def destroy(self, public_id: str) -> None: ...


def check_image_format(image: UploadFile, message: str = "File format not supported.") -> None:
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise AppError(message)


def sign_params(params: dict[str, str], secret: str) -> str:
    """Cloudinary signature: sha1 of the sorted ``key=value`` pairs joined by ``&``, then the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{secret}".encode()).hexdigest()


class CloudinaryImageStore:
    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self.client = client

    def _endpoint(self, action: str) -> str:
        return f"{settings.cloudinary_api_url.rstrip('/')}/{settings.cloudinary_cloud_name}/image/{action}"

    def _signed(self, params: dict[str, str]) -> dict[str, str]:
        if not (settings.cloudinary_cloud_name and settings.cloudinary_api_key and settings.cloudinary_api_secret):
            raise ImageUploadError("Image hosting is not configured.")
        params = {**params, "timestamp": str(int(time.time()))}
        return {
            **params,
            "api_key": settings.cloudinary_api_key,
            "signature": sign_params(params, settings.cloudinary_api_secret),
        }

    async def _post(self, action: str, data: dict[str, str], files: dict | None = None) -> httpx.Response:
        if self.client is None:
            async with httpx.AsyncClient(timeout=30.0) as client:
                return await client.post(self._endpoint(action), data=data, files=files)
        return await self.client.post(self._endpoint(action), data=data, files=files)

    async def upload(self, image: UploadFile) -> HostedImage:
        data = self._signed({"folder": settings.cloudinary_folder})
        content = await image.read()
        files = {"file": (image.filename or "profile", content, image.content_type)}
        try:
            r = await self._post("upload", data, files)
        except httpx.HTTPError as e:
            logger.warning("Cloudinary upload failed: %s", e)
            raise ImageUploadError() from e
        if r.status_code >= 400:
            logger.warning("Cloudinary rejected upload (%s): %s", r.status_code, r.text[:200])
            raise ImageUploadError()
        body = r.json()
        return HostedImage(public_id=body["public_id"], url=body["secure_url"])

    async def destroy(self, public_id: str) -> None:
        """Remove a hosted image. Failures are logged; the account change still goes through."""
        try:
            data = self._signed({"public_id": public_id})
            r = await self._post("destroy", data)
            if r.status_code >= 400:
                logger.warning("Cloudinary refused to delete %s (%s)", public_id, r.status_code)
        except (httpx.HTTPError, ImageUploadError) as e:
            logger.warning("Cloudinary delete of %s failed: %s", public_id, e)
