"""
Blog post authoring endpoints.

Editor payloads are accepted as JSON objects and validated by
``BlogService`` so that field errors surface as 400 responses before any
store or blob call is made.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, Path, Query, UploadFile, status

from counsel_admin.core.security import AdminSession, get_current_admin
from counsel_admin.models.base import PageResponse
from counsel_admin.models.blog import (
    BlogImageUploadResponse,
    BlogPost,
    BlogPostDeleteResponse,
    BlogPostSaveResponse,
    BlogTagOptions,
)
from counsel_admin.services.blog_service import BlogService, get_blog_service
from .common import (
    PageParams,
    get_page_params,
    log_operation_start,
    log_operation_success,
    read_image_upload,
)

router = APIRouter(prefix="/blog-posts", dependencies=[Depends(get_current_admin)])

POST_EXAMPLE = {
    "title": "Contract Basics",
    "excerpt": "What every agreement needs before you sign it.",
    "content": "## Offer and acceptance\n\nA contract starts with ...",
    "tags": ["Contract Law"],
    "metaTitle": "Contract Basics | Legal Blog",
    "metaDescription": "A short primer on the essentials of a valid contract.",
    "keywords": "contract, agreement, offer",
}

VALIDATION_RESPONSE = {
    400: {
        "description": "Invalid blog post",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "VALIDATION_ERROR",
                        "message": "Title is required",
                        "error_id": "1a2b3c4d",
                        "details": {
                            "validation_errors": [
                                {"field": "title", "message": "Title is required"}
                            ]
                        },
                    }
                }
            }
        },
    }
}


@router.get(
    "",
    response_model=PageResponse[BlogPost],
    summary="List Blog Posts",
    operation_id="listBlogPosts",
    description="Page through blog posts, oldest first.",
)
async def list_blog_posts(
    page: PageParams = Depends(get_page_params),
    service: BlogService = Depends(get_blog_service),
) -> PageResponse[BlogPost]:
    result = await service.list_page(page.cursor, page.limit)
    return PageResponse.from_page(result)


@router.get(
    "/tags",
    response_model=BlogTagOptions,
    summary="Blog Tag Options",
    operation_id="getBlogTagOptions",
    description="Suggested tags and the maximum number of tags per post.",
)
async def get_tag_options(
    service: BlogService = Depends(get_blog_service),
) -> BlogTagOptions:
    return service.tag_options()


@router.post(
    "/images",
    response_model=BlogImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Blog Image",
    operation_id="uploadBlogImage",
    description="""Store an image and return its durable URL.

Use the returned `url` as `coverImageUrl` when creating or editing a post.""",
    responses=VALIDATION_RESPONSE,
)
async def upload_blog_image(
    file: UploadFile = File(..., description="JPEG, PNG, GIF or WebP image"),
    service: BlogService = Depends(get_blog_service),
) -> BlogImageUploadResponse:
    image = await read_image_upload(file)
    log_operation_start("Blog image upload", filename=image.filename, size=image.size)
    stored = await service.upload_image(image)
    log_operation_success("Blog image upload", key=stored.key)
    return BlogImageUploadResponse(
        url=stored.url,
        key=stored.key,
        size=stored.size,
        content_type=stored.content_type or "",
    )


@router.get(
    "/{post_id}",
    response_model=BlogPost,
    summary="Get Blog Post",
    operation_id="getBlogPost",
)
async def get_blog_post(
    post_id: str = Path(..., description="Post id"),
    service: BlogService = Depends(get_blog_service),
) -> BlogPost:
    return await service.get(post_id)


@router.post(
    "",
    response_model=BlogPostSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Blog Post",
    operation_id="createBlogPost",
    responses=VALIDATION_RESPONSE,
)
async def create_blog_post(
    payload: Dict[str, Any] = Body(..., examples=[POST_EXAMPLE]),
    service: BlogService = Depends(get_blog_service),
    session: AdminSession = Depends(get_current_admin),
) -> BlogPostSaveResponse:
    log_operation_start("Blog post creation", admin=session.email)
    post_id = await service.create_post(payload)
    post = await service.get(post_id)
    log_operation_success("Blog post creation", post_id=post_id)
    return BlogPostSaveResponse(message="Blog post created successfully", post=post)


@router.put(
    "/{post_id}",
    response_model=BlogPostSaveResponse,
    summary="Update Blog Post",
    operation_id="updateBlogPost",
    description="""Rewrite the editable fields of a post.

- a different `coverImageUrl` replaces the cover and deletes the old image
- `removeCoverImage: true` clears the cover and deletes the old image
- omitting both keeps the current cover
- setting both is rejected with 400""",
    responses=VALIDATION_RESPONSE,
)
async def update_blog_post(
    post_id: str = Path(..., description="Post id"),
    payload: Dict[str, Any] = Body(..., examples=[POST_EXAMPLE]),
    service: BlogService = Depends(get_blog_service),
    session: AdminSession = Depends(get_current_admin),
) -> BlogPostSaveResponse:
    log_operation_start("Blog post update", post_id=post_id, admin=session.email)
    post = await service.update_post(post_id, payload)
    log_operation_success("Blog post update", post_id=post_id)
    return BlogPostSaveResponse(message="Blog post updated successfully", post=post)


@router.put(
    "/{post_id}/cover-image",
    response_model=BlogPostSaveResponse,
    summary="Replace Blog Cover Image",
    operation_id="replaceBlogCoverImage",
    description="Upload a new cover image for a post; the previous image is deleted.",
    responses=VALIDATION_RESPONSE,
)
async def replace_cover_image(
    post_id: str = Path(..., description="Post id"),
    file: UploadFile = File(..., description="JPEG, PNG, GIF or WebP image"),
    service: BlogService = Depends(get_blog_service),
) -> BlogPostSaveResponse:
    image = await read_image_upload(file)
    log_operation_start("Blog cover replacement", post_id=post_id, size=image.size)
    post = await service.replace_cover_image(post_id, image)
    log_operation_success("Blog cover replacement", post_id=post_id)
    return BlogPostSaveResponse(message="Cover image updated successfully", post=post)


@router.delete(
    "/{post_id}",
    response_model=BlogPostDeleteResponse,
    summary="Delete Blog Post",
    operation_id="deleteBlogPost",
    description="Delete a post and its cover image. Requires `confirm=true`.",
)
async def delete_blog_post(
    post_id: str = Path(..., description="Post id"),
    confirm: bool = Query(False, description="Must be true to delete"),
    service: BlogService = Depends(get_blog_service),
    session: AdminSession = Depends(get_current_admin),
) -> BlogPostDeleteResponse:
    log_operation_start("Blog post deletion", post_id=post_id, admin=session.email)
    cover_deleted = await service.delete_post(post_id, confirmed=confirm)
    log_operation_success("Blog post deletion", post_id=post_id)
    return BlogPostDeleteResponse(
        message="Blog post deleted successfully",
        id=post_id,
        cover_image_deleted=cover_deleted,
    )
