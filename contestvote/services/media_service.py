"""Media host client for participant photos (Cloudinary REST API)."""
import asyncio
import hashlib
import logging
import re
import time
from dataclasses import dataclass
from typing import Iterable, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from contestvote.config import Settings, get_settings
from contestvote.utils.exceptions import MediaUploadError

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


@dataclass(frozen=True)
class MediaAsset:
    """An uploaded photo: public delivery URL plus the host's id for it."""
    url: str
    public_id: str


def public_id_from_url(url: str | None) -> str | None:
    """Derive the media host public id from a delivery URL.

    ``https://res.cloudinary.com/demo/image/upload/v1712/contest_participants/abc.jpg``
    becomes ``contest_participants/abc``. Returns None for URLs that do not
    look like upload delivery URLs.
    """
    if not url or "/upload/" not in url:
        return None

    path = url.split("/upload/", 1)[1].split("?", 1)[0]
    segments = [segment for segment in path.split("/") if segment]
    if segments and _VERSION_SEGMENT.match(segments[0]):
        segments = segments[1:]
    if not segments:
        return None

    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments) or None


class MediaService:
    """
    Client for the photo host.

    Uploads raise MediaUploadError; deletes are best-effort and only ever
    return False on failure so callers can treat them as fire-and-forget.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.base_url = (
            f"{self.settings.cloudinary_base_url.rstrip('/')}/{self.settings.cloudinary_cloud_name}/image"
        )
        self.timeout = ClientTimeout(total=self.settings.media_timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def configured(self) -> bool:
        return self.settings.media_configured

    async def _ensure_session(self):
        """Ensure session exists and is not closed."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.debug("Created new aiohttp session for media service")

    async def close(self):
        """Close the underlying aiohttp client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp session for media service")
        self._session = None

    def _signed_params(self, params: dict) -> dict:
        """Add timestamp, api key and SHA-1 signature to request parameters."""
        params = {**params, "timestamp": int(time.time())}
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        signature = hashlib.sha1(f"{to_sign}{self.settings.cloudinary_api_secret}".encode("utf-8")).hexdigest()
        return {**params, "api_key": self.settings.cloudinary_api_key, "signature": signature}

    async def upload(self, filename: str, content: bytes, content_type: str | None = None) -> MediaAsset:
        """
        Upload a photo to the participant folder.

        Raises:
            MediaUploadError: If the host is not configured or rejects the upload
        """
        if not self.configured:
            raise MediaUploadError("Media storage is not configured")

        await self._ensure_session()
        form = aiohttp.FormData()
        for key, value in self._signed_params({"folder": self.settings.cloudinary_folder}).items():
            form.add_field(key, str(value))
        form.add_field(
            "file",
            content,
            filename=filename or "photo",
            content_type=content_type or "application/octet-stream",
        )

        try:
            async with self._session.post(f"{self.base_url}/upload", data=form) as response:
                data = await response.json(content_type=None)
                if response.status != 200 or not data.get("secure_url"):
                    error = (data.get("error") or {}).get("message", response.status)
                    logger.error(f"Media upload rejected: {error}")
                    raise MediaUploadError(f"Failed to upload image: {error}")
        except asyncio.TimeoutError as e:
            logger.error("Media upload timed out")
            raise MediaUploadError("Failed to upload image: timeout") from e
        except ClientError as e:
            logger.error(f"Media upload client error: {e}")
            raise MediaUploadError(f"Failed to upload image: {e}") from e

        asset = MediaAsset(url=data["secure_url"], public_id=data["public_id"])
        logger.info(f"Uploaded photo {asset.public_id}")
        return asset

    async def delete(self, public_id: str | None) -> bool:
        """Delete a photo by public id. Never raises."""
        if not public_id:
            return False
        if not self.configured:
            logger.warning(f"Media storage not configured, skipping delete of {public_id}")
            return False

        try:
            await self._ensure_session()
            async with self._session.post(
                f"{self.base_url}/destroy",
                data=self._signed_params({"public_id": public_id}),
            ) as response:
                data = await response.json(content_type=None)
                if response.status == 200 and data.get("result") == "ok":
                    logger.info(f"Deleted photo {public_id}")
                    return True
                logger.error(f"Failed to delete photo {public_id}: status={response.status} body={data}")
                return False
        except asyncio.TimeoutError:
            logger.error(f"Failed to delete photo {public_id}: timeout")
            return False
        except ClientError as e:
            logger.error(f"Failed to delete photo {public_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to delete photo {public_id}: unexpected error {e}")
            return False

    async def delete_by_url(self, url: str | None) -> bool:
        """Delete a photo given its delivery URL. Never raises."""
        public_id = public_id_from_url(url)
        if not public_id:
            if url:
                logger.warning(f"Cannot derive media id from photo URL: {url}")
            return False
        return await self.delete(public_id)

    async def delete_many_by_url(self, urls: Iterable[str | None]) -> int:
        """Delete several photos, returning how many were removed."""
        deleted = 0
        for url in urls:
            if url and await self.delete_by_url(url):
                deleted += 1
        return deleted


_media_service: MediaService | None = None


def get_media_service() -> MediaService:
    """Get the process-wide media service instance."""
    global _media_service
    if _media_service is None:
        _media_service = MediaService()
    return _media_service
