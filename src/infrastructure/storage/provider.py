"""Image store protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ImageUpload:
    """An in-memory image received with a request."""

    data: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None


class IImageStore(Protocol):
    """Protocol for image hosting providers."""

    async def upload(self, image: ImageUpload) -> str:
        """
        Store the image bytes durably.

        Args:
            image: The image payload to store

        Returns:
            A public URL that serves the stored image

        Raises:
            ImageUploadError: the provider rejected or failed the upload
        """
        ...
