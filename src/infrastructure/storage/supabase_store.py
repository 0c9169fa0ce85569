"""Supabase Storage implementation of the image store.

Objects are written with the service role key through the supabase
client and served from the bucket's public URL:

    {supabase_url}/storage/v1/object/public/{bucket}/{path}
"""

import asyncio
import mimetypes
from pathlib import PurePosixPath
from typing import Optional
from uuid import uuid4

import httpx
import structlog
from storage3.utils import StorageException
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from core.config import Settings
from core.exceptions import ImageUploadError
from infrastructure.storage.provider import ImageUpload

logger = structlog.get_logger()

DEFAULT_CONTENT_TYPE = "application/octet-stream"
OBJECT_PREFIX = "profiles"


class SupabaseImageStore:
    """Uploads profile and header images to a public Supabase bucket.

    The supabase client is created on first upload so an unconfigured
    store can still be built at startup.
    """

    def __init__(
        self,
        supabase_url: str,
        service_role_key: str,
        bucket: str,
        timeout: float = 30.0,
        client: Optional[AsyncClient] = None,
    ) -> None:
        self._base_url = supabase_url.rstrip("/")
        self._service_role_key = service_role_key
        self._bucket = bucket
        self._timeout = timeout
        self._client = client
        self._client_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseImageStore":
        return cls(
            supabase_url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            bucket=settings.storage_bucket,
            timeout=settings.storage_timeout_seconds,
        )

    async def _get_client(self) -> AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = await acreate_client(
                    self._base_url,
                    self._service_role_key,
                    options=AsyncClientOptions(
                        storage_client_timeout=int(self._timeout),
                        auto_refresh_token=False,
                        persist_session=False,
                    ),
                )
            return self._client

    async def upload(self, image: ImageUpload) -> str:
        """Upload the image under a fresh object name and return its public URL."""
        if not self._base_url or not self._service_role_key:
            raise ImageUploadError("Image storage is not configured")

        content_type = image.content_type or _guess_content_type(image.filename)
        object_path = f"{OBJECT_PREFIX}/{uuid4().hex}{_extension_for(image, content_type)}"

        client = await self._get_client()
        try:
            await client.storage.from_(self._bucket).upload(
                path=object_path,
                file=image.data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except StorageException as e:
            logger.warning(
                "image_upload_rejected",
                error=str(e),
                bucket=self._bucket,
                path=object_path,
            )
            raise ImageUploadError(f"Image store rejected upload: {e}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "image_upload_failed",
                error=str(e),
                error_type=type(e).__name__,
                bucket=self._bucket,
            )
            raise ImageUploadError(f"Image upload failed: {e}") from e

        public_url = self.public_url(object_path)
        logger.info("image_uploaded", bucket=self._bucket, path=object_path, size=len(image.data))
        return public_url

    def public_url(self, object_path: str) -> str:
        # Public buckets serve every object at this fixed path.
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{object_path}"


def _guess_content_type(filename: Optional[str]) -> str:
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_CONTENT_TYPE


def _extension_for(image: ImageUpload, content_type: str) -> str:
    if image.filename:
        suffix = PurePosixPath(image.filename).suffix.lower()
        if suffix:
            return suffix
    return mimetypes.guess_extension(content_type) or ""
