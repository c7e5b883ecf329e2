"""
Unit tests for the GCS blob store client.

The bucket is a MagicMock; no network access is made.
"""

from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable


class TestBlobReferences:
    """Tests for URL building and reference parsing."""

    @pytest.mark.unit
    def test_url_for_quotes_key(self, blob_store):
        url = blob_store.url_for("blog-images/1700000000123-my cover.png")

        assert url == (
            "https://storage.googleapis.com/test-bucket/"
            "blog-images/1700000000123-my%20cover.png"
        )

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "reference",
        [
            "https://storage.googleapis.com/test-bucket/blog-images/a%20b.png",
            "https://storage.googleapis.com/test-bucket/blog-images/a%20b.png?alt=media",
            "gs://test-bucket/blog-images/a b.png",
            "https://firebasestorage.googleapis.com/v0/b/test-bucket/o/blog-images%2Fa%20b.png?alt=media&token=abc",
            "blog-images/a b.png",
        ],
    )
    def test_key_from_reference(self, blob_store, reference):
        assert blob_store.key_from_reference(reference) == "blog-images/a b.png"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "reference",
        [
            "gs://other-bucket/blog-images/a.png",
            "https://storage.googleapis.com/other-bucket/a.png",
            "https://example.com/a.png",
            "   ",
        ],
    )
    def test_foreign_references_are_rejected(self, blob_store, reference):
        from counsel_admin.core.exceptions import BlobStoreError

        with pytest.raises(BlobStoreError):
            blob_store.key_from_reference(reference)


class TestBlobUpload:
    """Tests for chunked uploads and progress reporting."""

    @pytest.mark.unit
    def test_upload_writes_in_chunks_and_reports_progress(self, mock_bucket):
        from counsel_admin.core.blob_store import BlobStore

        chunk = 256 * 1024
        store = BlobStore(bucket_name="test-bucket", chunk_size=chunk, bucket=mock_bucket)
        content = b"x" * (chunk * 2 + 100)
        progress = []

        key = store.upload("k.png", content, "image/png", on_progress=progress.append)

        assert key == "k.png"
        blob = mock_bucket.blobs["k.png"]
        blob.open.assert_called_once_with("wb", chunk_size=chunk, content_type="image/png")
        writer = blob.open.return_value.__enter__.return_value
        written = b"".join(call.args[0] for call in writer.write.call_args_list)
        assert written == content
        assert progress[0] == 0.0
        assert progress[-1] == 1.0
        assert progress == sorted(progress)
        assert all(0.0 <= p <= 1.0 for p in progress)
        assert len(progress) == 4

    @pytest.mark.unit
    def test_empty_upload_uses_simple_upload(self, blob_store, mock_bucket):
        progress = []

        blob_store.upload("empty.txt", b"", "text/plain", on_progress=progress.append)

        blob = mock_bucket.blobs["empty.txt"]
        blob.upload_from_string.assert_called_once_with(b"", content_type="text/plain")
        blob.open.assert_not_called()
        assert progress == [0.0, 1.0]

    @pytest.mark.unit
    def test_upload_failure_raises_blob_store_error(self, blob_store, mock_bucket):
        from counsel_admin.core.exceptions import BlobStoreError

        blob = mock_bucket.blob("fail.png")
        blob.open.side_effect = ServiceUnavailable("storage down")

        with pytest.raises(BlobStoreError):
            blob_store.upload("fail.png", b"data", "image/png")

    @pytest.mark.unit
    def test_uninitialized_store_raises(self):
        from counsel_admin.core.blob_store import BlobStore
        from counsel_admin.core.exceptions import BlobStoreError

        store = BlobStore(bucket_name="test-bucket")

        assert store.is_initialized is False
        with pytest.raises(BlobStoreError):
            store.upload("k.png", b"data", "image/png")


class TestBlobDelete:
    @pytest.mark.unit
    def test_delete_by_url(self, blob_store, mock_bucket):
        deleted = blob_store.delete(
            "https://storage.googleapis.com/test-bucket/blog-images/old.png"
        )

        assert deleted is True
        mock_bucket.blobs["blog-images/old.png"].delete.assert_called_once()

    @pytest.mark.unit
    def test_delete_missing_returns_false(self, blob_store, mock_bucket):
        mock_bucket.blob("gone.png").delete.side_effect = NotFound("gone")

        assert blob_store.delete("gone.png") is False

    @pytest.mark.unit
    def test_delete_failure_raises(self, blob_store, mock_bucket):
        from counsel_admin.core.exceptions import BlobStoreError

        mock_bucket.blob("err.png").delete.side_effect = ServiceUnavailable("down")

        with pytest.raises(BlobStoreError):
            blob_store.delete("err.png")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_async_runs_delete(self, blob_store, mock_bucket):
        assert await blob_store.delete_async("a.png") is True
        mock_bucket.blobs["a.png"].delete.assert_called_once()


class TestBlobHealth:
    @pytest.mark.unit
    def test_health_check_reloads_bucket(self, blob_store, mock_bucket):
        assert blob_store.health_check() is True
        mock_bucket.reload.assert_called_once()

    @pytest.mark.unit
    def test_health_check_failure(self, mock_bucket):
        from counsel_admin.core.blob_store import BlobStore

        mock_bucket.reload.side_effect = ServiceUnavailable("down")
        store = BlobStore(bucket_name="test-bucket", bucket=mock_bucket)

        assert store.health_check() is False

    @pytest.mark.unit
    def test_disabled_store_is_unhealthy(self):
        from counsel_admin.core.blob_store import BlobStore

        assert BlobStore(bucket_name="test-bucket").health_check() is False
