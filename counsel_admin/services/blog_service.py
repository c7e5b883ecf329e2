"""
Blog Service - create, edit and delete blog posts with their cover images.

Every editor payload is validated before the first network call. Cover
images follow the blob-then-document order of ``ImageUploadService``: the
previous blob is released at most once, after the document write, and a
failed release never fails the edit.
"""

from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from counsel_admin.core.blob_store import ProgressCallback
from counsel_admin.core.config import settings
from counsel_admin.core.document_store import (
    CREATED_AT,
    DocumentStore,
    UPDATED_AT,
    document_store,
)
from counsel_admin.core.exceptions import (
    ConfirmationRequiredError,
    RecordNotFoundError,
    RecordValidationError,
)
from counsel_admin.core.logging import get_service_logger
from counsel_admin.models.base import Page
from counsel_admin.models.blog import (
    SUGGESTED_TAGS,
    BlogPost,
    BlogPostCreate,
    BlogPostUpdate,
    BlogTagOptions,
)
from counsel_admin.services.image_upload import (
    ImageFile,
    ImageUploadService,
    StoredImage,
    image_upload_service,
)
from counsel_admin.services.pager import CursorPager
from counsel_admin.utils.timestamps import utc_now

COVER_IMAGE_URL = "coverImageUrl"

M = TypeVar("M", bound=BaseModel)


def validate_payload(model: Type[M], data: Union[M, Dict[str, Any]]) -> M:
    """
    Validate an editor payload without touching the network.

    Raises:
        RecordValidationError: With one entry per invalid field
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"].removeprefix("Value error, "),
            }
            for error in e.errors()
        ]
        message = errors[0]["message"] if errors else "Invalid blog post"
        raise RecordValidationError(message, {"validation_errors": errors})


class BlogService:
    """Service for blog post authoring."""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        images: Optional[ImageUploadService] = None,
        collection: Optional[str] = None,
    ):
        self.store = store if store is not None else document_store
        self.images = images if images is not None else image_upload_service
        self.collection = collection or settings.BLOG_POSTS_COLLECTION
        self.logger = get_service_logger("blog")
        self.pager = CursorPager(
            self.store,
            self.collection,
            parse=BlogPost.model_validate,
            order_by=CREATED_AT,
            descending=False,
        )

    async def list_page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Page[BlogPost]:
        """Page of posts, oldest first."""
        return await self.pager.fetch_page(cursor, limit)

    async def get(self, post_id: str) -> BlogPost:
        return BlogPost.model_validate(await self._get_document(post_id))

    def tag_options(self) -> BlogTagOptions:
        return BlogTagOptions(
            suggested_tags=list(SUGGESTED_TAGS),
            max_tags=settings.MAX_BLOG_TAGS,
        )

    async def upload_image(
        self, file: ImageFile, on_progress: Optional[ProgressCallback] = None
    ) -> StoredImage:
        """Store an image for later use as a cover (no document is written)."""
        return await self.images.upload(file, on_progress)

    async def create_post(
        self,
        data: Union[BlogPostCreate, Dict[str, Any]],
        cover_image: Optional[ImageFile] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Create a post, uploading its cover image first when one is given.

        Args:
            data: Editor payload
            cover_image: Optional image file; takes precedence over
                ``cover_image_url`` in the payload
            on_progress: Upload progress callback

        Returns:
            The new post id

        Raises:
            RecordValidationError: Before any network call, on invalid input
            ImageUploadError: If the cover upload fails (no post is written)
            DocumentStoreError: If the store write fails
        """
        post = validate_payload(BlogPostCreate, data)
        if cover_image is not None:
            self.images.validate_image(cover_image)

        now = utc_now()
        document = post.model_dump(by_alias=True, exclude_none=True)
        document[CREATED_AT] = now
        document[UPDATED_AT] = now

        if cover_image is None:
            post_id = await self.store.add(self.collection, document)
        else:
            created: Dict[str, str] = {}

            async def write(url: str) -> None:
                created["id"] = await self.store.add(
                    self.collection, {**document, COVER_IMAGE_URL: url}
                )

            await self.images.upload_and_link(cover_image, write, on_progress=on_progress)
            post_id = created["id"]

        self.logger.info(
            "Blog post created",
            post_id=post_id,
            title=post.title,
            has_cover_image=cover_image is not None or bool(post.cover_image_url),
        )
        return post_id

    async def update_post(
        self,
        post_id: str,
        data: Union[BlogPostUpdate, Dict[str, Any]],
        cover_image: Optional[ImageFile] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BlogPost:
        """
        Rewrite the editable fields of a post.

        The cover is replaced by ``cover_image`` when given, otherwise by a
        different ``cover_image_url``, and cleared by ``remove_cover_image``.
        A replaced or cleared blob is deleted best-effort after the write.

        Returns:
            The updated post

        Raises:
            RecordValidationError: Before any network call, on invalid input
            RecordNotFoundError: If the post does not exist
            ImageUploadError: If the new cover upload fails (post unchanged)
        """
        update = validate_payload(BlogPostUpdate, data)
        if cover_image is not None:
            self.images.validate_image(cover_image)

        existing = await self._get_document(post_id)
        previous = existing.get(COVER_IMAGE_URL) or None

        patch = update.model_dump(
            by_alias=True, exclude={"remove_cover_image", "cover_image_url"}
        )
        patch[UPDATED_AT] = utc_now()

        if cover_image is not None:
            document = await self._write_with_new_cover(
                post_id, patch, cover_image, previous, on_progress
            )
        else:
            if update.remove_cover_image:
                patch[COVER_IMAGE_URL] = None
            elif update.cover_image_url:
                patch[COVER_IMAGE_URL] = update.cover_image_url

            document = await self.store.update(self.collection, post_id, patch)

            current = patch.get(COVER_IMAGE_URL, previous)
            if previous and current != previous:
                await self.images.release_previous(previous)

        self.logger.info("Blog post updated", post_id=post_id, fields=sorted(patch))
        return BlogPost.model_validate(document)

    async def replace_cover_image(
        self,
        post_id: str,
        cover_image: ImageFile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BlogPost:
        """Upload a new cover for an existing post and release the old one."""
        self.images.validate_image(cover_image)
        existing = await self._get_document(post_id)
        previous = existing.get(COVER_IMAGE_URL) or None

        document = await self._write_with_new_cover(
            post_id, {UPDATED_AT: utc_now()}, cover_image, previous, on_progress
        )
        self.logger.info("Blog cover image replaced", post_id=post_id)
        return BlogPost.model_validate(document)

    async def delete_post(self, post_id: str, confirmed: bool = False) -> Optional[bool]:
        """
        Delete a post, then best-effort delete its cover image.

        Args:
            post_id: Post id
            confirmed: Must be True; nothing is called otherwise

        Returns:
            None when the post had no cover image, otherwise whether the
            blob was deleted

        Raises:
            ConfirmationRequiredError: If ``confirmed`` is not True
            RecordNotFoundError: If the post does not exist
        """
        if confirmed is not True:
            raise ConfirmationRequiredError(
                "Are you sure you want to delete this blog post? Pass confirm=true."
            )

        existing = await self._get_document(post_id)
        await self.store.delete(self.collection, post_id)

        cover = existing.get(COVER_IMAGE_URL)
        cover_deleted = None
        if cover:
            cover_deleted = await self.images.release_previous(cover)

        self.logger.info(
            "Blog post deleted", post_id=post_id, cover_image_deleted=cover_deleted
        )
        return cover_deleted

    async def _get_document(self, post_id: str) -> Dict[str, Any]:
        document = await self.store.get(self.collection, post_id)
        if document is None:
            raise RecordNotFoundError(
                "Blog post not found", collection=self.collection, record_id=post_id
            )
        return document

    async def _write_with_new_cover(
        self,
        post_id: str,
        patch: Dict[str, Any],
        cover_image: ImageFile,
        previous: Optional[str],
        on_progress: Optional[ProgressCallback],
    ) -> Dict[str, Any]:
        written: Dict[str, Dict[str, Any]] = {}

        async def write(url: str) -> None:
            patch[COVER_IMAGE_URL] = url
            written["document"] = await self.store.update(
                self.collection, post_id, patch
            )

        await self.images.upload_and_link(
            cover_image, write, previous_ref=previous, on_progress=on_progress
        )
        return written["document"]


# Global service instance
blog_service = BlogService()


def get_blog_service() -> BlogService:
    return blog_service
