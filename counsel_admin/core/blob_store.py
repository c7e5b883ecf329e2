import os
import asyncio
from typing import Callable, Optional
from functools import lru_cache
from urllib.parse import quote, unquote, urlparse

from google.cloud import storage
from google.cloud.storage import Bucket
from google.auth.exceptions import DefaultCredentialsError
from google.api_core.exceptions import GoogleAPIError, NotFound

from counsel_admin.core.config import settings
from counsel_admin.core.exceptions import BlobStoreError
from counsel_admin.core.logging import get_service_logger

logger = get_service_logger("blob_store")

ProgressCallback = Callable[[float], None]


class BlobStore:
    """Google Cloud Storage client for blog media (cover images)."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        public_base_url: Optional[str] = None,
        chunk_size: Optional[int] = None,
        bucket: Optional[Bucket] = None,
    ):
        self.logger = logger
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[Bucket] = bucket
        self._bucket_name = bucket_name or settings.GCS_BUCKET_NAME
        self._public_base_url = (public_base_url or settings.BLOB_PUBLIC_BASE_URL).rstrip(
            "/"
        )
        self._chunk_size = chunk_size or settings.UPLOAD_CHUNK_SIZE
        self._initialized = bucket is not None
        self._initialization_error: Optional[str] = None

        # Only initialize if required settings are provided
        if not self._initialized and self._should_initialize():
            try:
                self._initialize_client()
            except BlobStoreError as e:
                self.logger.warning(
                    "GCS client initialization failed, will operate in disabled mode",
                    error=str(e),
                )
                self._initialization_error = str(e)

    def _should_initialize(self) -> bool:
        """Check if GCS client should be initialized based on available settings."""
        has_credentials = settings.GOOGLE_APPLICATION_CREDENTIALS or os.environ.get(
            "GOOGLE_APPLICATION_CREDENTIALS"
        )
        return bool(has_credentials and settings.GCP_PROJECT_ID)

    def _initialize_client(self) -> None:
        """Initialize GCS client and bucket."""
        try:
            if settings.GOOGLE_APPLICATION_CREDENTIALS:
                os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = (
                    settings.GOOGLE_APPLICATION_CREDENTIALS
                )

            self._client = storage.Client(project=settings.GCP_PROJECT_ID)
            self._bucket = self._client.bucket(self._bucket_name)
            # Test bucket access by checking if it exists
            self._bucket.reload()
            self._initialized = True
            self.logger.info("Connected to GCS bucket", bucket=self._bucket_name)

        except NotFound:
            self.logger.error("GCS bucket not found", bucket=self._bucket_name)
            raise BlobStoreError(f"Bucket '{self._bucket_name}' not found")
        except DefaultCredentialsError as e:
            self.logger.error("GCS authentication failed", error=str(e))
            raise BlobStoreError(f"GCS authentication failed: {e}")
        except GoogleAPIError as e:
            self.logger.error("Failed to initialize GCS client", error=str(e))
            raise BlobStoreError(f"Failed to initialize GCS client: {e}")

    @property
    def is_initialized(self) -> bool:
        """Check if GCS client is properly initialized."""
        return self._initialized

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    @property
    def bucket(self) -> Bucket:
        """Get the GCS bucket instance."""
        self._ensure_initialized()
        return self._bucket

    def _ensure_initialized(self) -> None:
        """Ensure GCS client is initialized, raise error if not."""
        if not self._initialized:
            error_msg = "Blob store is not initialized"
            if self._initialization_error:
                error_msg += f": {self._initialization_error}"
            else:
                error_msg += ". Please configure GCP_PROJECT_ID, GCS_BUCKET_NAME, and authentication credentials."
            raise BlobStoreError(error_msg)

    def url_for(self, key: str) -> str:
        """Durable retrieval URL for a stored key."""
        return f"{self._public_base_url}/{self._bucket_name}/{quote(key, safe='/')}"

    def key_from_reference(self, reference: str) -> str:
        """
        Resolve a blob reference to its storage key.

        Accepts URLs produced by ``url_for``, ``gs://bucket/key`` URIs,
        Firebase-style download URLs (``.../b/<bucket>/o/<encoded key>``)
        and bare keys.

        Raises:
            BlobStoreError: If the reference points outside this bucket
        """
        reference = (reference or "").strip()
        if not reference:
            raise BlobStoreError("Empty blob reference")

        if reference.startswith("gs://"):
            bucket, _, key = reference[len("gs://") :].partition("/")
            if bucket != self._bucket_name or not key:
                raise BlobStoreError(
                    "Blob reference points outside the configured bucket",
                    {"reference": reference},
                )
            return key

        parsed = urlparse(reference)
        if parsed.scheme not in ("http", "https"):
            return reference.lstrip("/")

        if "/o/" in parsed.path and f"/b/{self._bucket_name}/" in parsed.path:
            return unquote(parsed.path.split("/o/", 1)[1])

        prefix = f"{self._public_base_url}/{self._bucket_name}/"
        plain_reference = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
        if plain_reference.startswith(prefix):
            key = unquote(plain_reference[len(prefix) :])
            if key:
                return key

        raise BlobStoreError(
            "Blob reference points outside the configured bucket",
            {"reference": reference},
        )

    def upload(
        self,
        key: str,
        content: bytes,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload bytes under ``key`` with a resumable, chunked upload.

        Args:
            key: Storage key
            content: File content as bytes
            content_type: MIME content type
            on_progress: Called with the uploaded fraction (0.0 - 1.0)

        Returns:
            Storage key of the uploaded object
        """
        self._ensure_initialized()
        total = len(content)

        def report(fraction: float) -> None:
            if on_progress is not None:
                on_progress(fraction)

        try:
            blob = self.bucket.blob(key)
            report(0.0)

            if total == 0:
                blob.upload_from_string(content, content_type=content_type)
            else:
                with blob.open(
                    "wb", chunk_size=self._chunk_size, content_type=content_type
                ) as writer:
                    for offset in range(0, total, self._chunk_size):
                        chunk = content[offset : offset + self._chunk_size]
                        writer.write(chunk)
                        written = offset + len(chunk)
                        # The final chunk is only committed when the writer closes
                        if written < total:
                            report(written / total)

            report(1.0)

            self.logger.info(
                "Uploaded blob to GCS",
                key=key,
                size=total,
                content_type=content_type,
            )
            return key

        except GoogleAPIError as e:
            self.logger.error("Failed to upload blob to GCS", key=key, error=str(e))
            raise BlobStoreError(f"Failed to upload blob: {e}")

    def delete(self, reference: str) -> bool:
        """
        Delete a blob by URL or key.

        Returns:
            True if deleted, False if the blob did not exist
        """
        self._ensure_initialized()
        key = self.key_from_reference(reference)
        try:
            self.bucket.blob(key).delete()
            self.logger.info("Deleted blob from GCS", key=key)
            return True
        except NotFound:
            self.logger.warning("Blob not found for deletion", key=key)
            return False
        except GoogleAPIError as e:
            self.logger.error("Failed to delete blob from GCS", key=key, error=str(e))
            raise BlobStoreError(f"Failed to delete blob: {e}")

    async def upload_async(
        self,
        key: str,
        content: bytes,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Async version of upload using thread pool."""
        return await asyncio.to_thread(
            self.upload, key, content, content_type, on_progress
        )

    async def delete_async(self, reference: str) -> bool:
        """Async version of delete using thread pool."""
        return await asyncio.to_thread(self.delete, reference)

    def health_check(self) -> bool:
        """
        Check if GCS client and bucket are accessible.

        Returns:
            True if healthy, False otherwise
        """
        if not self._initialized:
            return False

        try:
            self._bucket.reload()
            return True
        except GoogleAPIError as e:
            self.logger.error("GCS health check failed", error=str(e))
            return False


@lru_cache()
def get_blob_store() -> BlobStore:
    """Get singleton blob store instance."""
    return BlobStore()
