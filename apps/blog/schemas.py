"""
Pydantic schemas for the Blog API.

Request bodies for create/update, the two public projections of a post
(summary for lists, detail for single posts) and the pagination envelope.
"""
import math
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from apps.blog.constants import (
    AUTHOR_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    CONTENT_MIN_LENGTH,
    EXCERPT_MAX_LENGTH,
    SLUG_MAX_LENGTH,
    TAG_SEPARATOR,
    TAGS_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from apps.blog.filters import PostFilters
from apps.blog.utils import clean_tags, parse_tags, plain_text


class BlogPostUpdate(BaseModel):
    """Full replacement body for PUT /api/posts/{slug}."""
    title: str = Field(..., min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=CONTENT_MIN_LENGTH)
    author_name: str = Field(..., min_length=1, max_length=AUTHOR_MAX_LENGTH)
    tags: list[str] = Field(default_factory=list)
    category: str = Field("", max_length=CATEGORY_MAX_LENGTH)
    featured: bool = False
    published: bool = True
    excerpt: Optional[str] = Field(None, max_length=EXCERPT_MAX_LENGTH)

    @field_validator("title", "author_name")
    @classmethod
    def not_blank(cls, v: str, info: ValidationInfo) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be blank")
        return v

    @field_validator("content")
    @classmethod
    def content_has_text(cls, v: str) -> str:
        # An excerpt is derived from this text, so it cannot be markup only
        if not plain_text(v).strip():
            raise ValueError("content must contain text outside of markup tags")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        tags = clean_tags(v)
        if any(TAG_SEPARATOR in tag for tag in tags):
            raise ValueError("tags must not contain commas")
        if len(TAG_SEPARATOR.join(tags)) > TAGS_MAX_LENGTH:
            raise ValueError(f"tags must fit in {TAGS_MAX_LENGTH} characters")
        return tags


class BlogPostCreate(BlogPostUpdate):
    """Body for POST /api/posts. slug is derived from the title when omitted."""
    slug: Optional[str] = Field(
        None,
        min_length=1,
        max_length=SLUG_MAX_LENGTH,
        pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    )


class BlogPostSummary(BaseModel):
    """Post as shown in lists. No content."""
    id: int
    title: str
    slug: str
    excerpt: str = ""
    author_name: str
    tags: list[str] = Field(default_factory=list)
    category: str = ""
    featured: bool = False
    published: bool = True
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("tags", mode="before")
    @classmethod
    def split_stored_tags(cls, v):
        if v is None or isinstance(v, str):
            return parse_tags(v)
        return v

    @field_validator("excerpt", "category", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""


class BlogPostDetail(BlogPostSummary):
    """Post as shown on its own page, content included."""
    content: str


class PaginatedPostsResponse(BaseModel):
    posts: list[BlogPostSummary]
    current_page: int
    total_pages: int
    total_posts: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, posts: list, total: int, filters: PostFilters) -> "PaginatedPostsResponse":
        total_pages = math.ceil(total / filters.limit)
        return cls(
            posts=[BlogPostSummary.model_validate(p) for p in posts],
            current_page=filters.page,
            total_pages=total_pages,
            total_posts=total,
            has_next=filters.page < total_pages,
            has_prev=filters.page > 1,
        )
