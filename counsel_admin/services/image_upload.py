"""
Image Upload Service - blob-then-document writes for blog cover images.

Upload order is fixed: the bytes are stored first, the durable URL is
handed to the caller's document write, and only after that write succeeds
is the previously referenced blob released. A failed upload never reaches
the document write.
"""

import re
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Awaitable, Callable, Optional

from counsel_admin.core.blob_store import BlobStore, ProgressCallback, get_blob_store
from counsel_admin.core.config import settings
from counsel_admin.core.exceptions import (
    BlobStoreError,
    ImageUploadError,
    RecordValidationError,
)
from counsel_admin.core.logging import get_service_logger

LinkWriter = Callable[[str], Awaitable[Any]]


@dataclass
class ImageFile:
    """Image bytes received from the editor."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StoredImage:
    url: str
    key: str
    size: int
    content_type: Optional[str]


def sanitize_filename(filename: str) -> str:
    """
    Reduce a client filename to characters that are safe in a storage key.

    Args:
        filename: Original filename, possibly with a client path

    Returns:
        Sanitized base name (``image`` when nothing usable is left)
    """
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    sanitized = re.sub(r"[^a-zA-Z0-9._-]", "_", name).strip("._")
    if not sanitized:
        return "image"
    if len(sanitized) > 120:
        stem, dot, ext = sanitized.rpartition(".")
        if dot and len(ext) <= 10:
            sanitized = f"{stem[: 119 - len(ext)]}.{ext}"
        else:
            sanitized = sanitized[:120]
    return sanitized


class ImageUploadService:
    """Uploads cover images and links them into documents."""

    def __init__(
        self,
        blob_store: Optional[BlobStore] = None,
        prefix: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._blob_store = blob_store
        self.prefix = (prefix or settings.BLOG_IMAGE_PREFIX).strip("/")
        self.clock = clock
        self.logger = get_service_logger("image_upload")

    @property
    def blob_store(self) -> BlobStore:
        if self._blob_store is None:
            self._blob_store = get_blob_store()
        return self._blob_store

    def validate_image(self, file: ImageFile) -> None:
        """
        Check an image before any bytes leave the process.

        Raises:
            RecordValidationError: On empty, oversized or unsupported files
        """
        if file.size == 0:
            raise RecordValidationError("Image file is empty")

        if file.size > settings.MAX_IMAGE_SIZE:
            max_mb = settings.MAX_IMAGE_SIZE // (1024 * 1024)
            raise RecordValidationError(
                f"Image size exceeds maximum limit of {max_mb}MB",
                {"size": file.size, "max_size": settings.MAX_IMAGE_SIZE},
            )

        if file.content_type not in settings.ALLOWED_IMAGE_TYPES:
            raise RecordValidationError(
                f"Unsupported image type. Allowed types: {', '.join(settings.ALLOWED_IMAGE_TYPES)}",
                {"content_type": file.content_type},
            )

    def build_key(self, filename: str) -> str:
        """Storage key ``{prefix}/{epoch-millis}-{sanitized filename}``."""
        millis = int(self.clock() * 1000)
        return f"{self.prefix}/{millis}-{sanitize_filename(filename)}"

    async def upload(
        self, file: ImageFile, on_progress: Optional[ProgressCallback] = None
    ) -> StoredImage:
        """
        Validate and store an image.

        Returns:
            StoredImage with the durable URL

        Raises:
            RecordValidationError: If the file is rejected before upload
            ImageUploadError: If the blob store fails
        """
        self.validate_image(file)
        key = self.build_key(file.filename)

        try:
            await self.blob_store.upload_async(
                key, file.content, file.content_type, on_progress
            )
            url = self.blob_store.url_for(key)
        except BlobStoreError as e:
            self.logger.error(
                "Image upload failed",
                key=key,
                filename=file.filename,
                error=e.message,
            )
            raise ImageUploadError(f"Image upload failed: {e.message}", {"key": key})

        self.logger.info("Image uploaded", key=key, size=file.size)
        return StoredImage(
            url=url, key=key, size=file.size, content_type=file.content_type
        )

    async def upload_and_link(
        self,
        file: ImageFile,
        write: LinkWriter,
        previous_ref: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> StoredImage:
        """
        Upload an image, write its URL into a document, then release the old one.

        Args:
            file: Image to upload
            write: Coroutine function persisting the new URL
            previous_ref: URL of the image being replaced, if any
            on_progress: Upload progress callback (0.0 - 1.0)

        Returns:
            The stored image
        """
        image = await self.upload(file, on_progress)

        try:
            await write(image.url)
        except Exception:
            # The document never pointed at the new blob
            await self.release_previous(image.url)
            raise

        if previous_ref and previous_ref != image.url:
            await self.release_previous(previous_ref)
        return image

    async def release_previous(self, reference: Optional[str]) -> bool:
        """
        Best-effort delete of a blob that is no longer referenced.

        Returns:
            True when the blob was deleted; failures are logged, never raised
        """
        if not reference:
            return False
        try:
            deleted = await self.blob_store.delete_async(reference)
        except BlobStoreError as e:
            self.logger.warning(
                "Failed to delete previous image",
                reference=reference,
                error=e.message,
            )
            return False

        if deleted:
            self.logger.info("Previous image deleted", reference=reference)
        return deleted


# Global service instance
image_upload_service = ImageUploadService()
