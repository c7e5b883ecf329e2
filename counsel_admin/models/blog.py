"""Blog post schemas (collection ``blogPosts``)."""

from typing import List, Optional

from pydantic import Field, computed_field, field_validator, model_validator

from counsel_admin.core.config import settings
from counsel_admin.utils.timestamps import format_date
from .base import RecordModel, StoredRecord

# Suggested tags offered by the editor; free-form tags are also accepted.
SUGGESTED_TAGS = [
    "Indian Constitution",
    "Criminal Law",
    "Civil Law",
    "Contract Law",
    "Property Law",
    "Intellectual Property Rights",
    "Family Law",
    "Corporate Law",
    "Tax Law",
    "Environmental Law",
    "Human Rights",
    "International Law",
    "Cyber Law",
    "Media Law",
    "Labor Law",
    "Banking Law",
]


class Author(RecordModel):
    name: str = Field(default_factory=lambda: settings.DEFAULT_AUTHOR_NAME)


def _required_text(value: Optional[str], label: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{label} must be text")
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    if tags is not None and not isinstance(tags, (list, tuple)):
        raise ValueError("Tags must be a list")
    cleaned = []
    for tag in tags or []:
        if not isinstance(tag, str):
            raise ValueError("Tags must be text")
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    if not cleaned:
        raise ValueError("At least one tag is required")
    if len(cleaned) > settings.MAX_BLOG_TAGS:
        raise ValueError(f"At most {settings.MAX_BLOG_TAGS} tags are allowed")
    return cleaned


class BlogPostFields(RecordModel):
    """Editable fields shared by the create and edit forms."""

    title: str = Field(..., max_length=100, example="Contract Basics")
    excerpt: str = Field(..., max_length=200)
    content: str = Field(..., description="Markdown body")
    tags: List[str] = Field(..., example=["Contract Law"])
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)
    keywords: Optional[str] = Field(None, description="Comma separated SEO keywords")
    cover_image_url: Optional[str] = Field(
        None, description="URL of an already stored or preset cover image"
    )

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _required_text(v, "Title")

    @field_validator("excerpt", mode="before")
    @classmethod
    def validate_excerpt(cls, v):
        return _required_text(v, "Excerpt")

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        return _required_text(v, "Content")

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    @field_validator("meta_title", "meta_description", "keywords", "cover_image_url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class BlogPostCreate(BlogPostFields):
    author: Author = Field(default_factory=Author)


class BlogPostUpdate(BlogPostFields):
    """Edit form payload.

    ``cover_image_url`` replaces the current cover when set;
    ``remove_cover_image`` clears it. Leaving both unset keeps the cover.
    """

    remove_cover_image: bool = False

    @model_validator(mode="after")
    def check_cover_change(self) -> "BlogPostUpdate":
        if self.remove_cover_image and self.cover_image_url:
            raise ValueError(
                "Set either coverImageUrl or removeCoverImage, not both"
            )
        return self


class BlogPost(StoredRecord):
    title: str = ""
    excerpt: str = ""
    content: str = ""
    author: Author = Field(default_factory=Author)
    tags: List[str] = Field(default_factory=list)
    cover_image_url: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None

    @computed_field(alias="createdDate")
    @property
    def created_date(self) -> str:
        return format_date(self.created_at)


class BlogTagOptions(RecordModel):
    suggested_tags: List[str]
    max_tags: int
    allow_custom_tags: bool = True


class BlogImageUploadResponse(RecordModel):
    url: str
    key: str
    size: int
    content_type: str


class BlogPostSaveResponse(RecordModel):
    success: bool = True
    message: str
    post: BlogPost


class BlogPostDeleteResponse(RecordModel):
    success: bool = True
    message: str
    id: str
    cover_image_deleted: Optional[bool] = Field(
        None, description="Null when the post had no cover image"
    )
