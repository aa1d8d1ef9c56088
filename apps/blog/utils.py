"""
Derived-field helpers for blog posts.

Pure functions called explicitly by the write path (apps/blog/crud.py):
slug from title, excerpt from content, tag list <-> stored string,
and the one-time published_at stamp.
"""
import re
import time
from datetime import datetime, timezone
from typing import Iterable, Optional

from apps.blog.constants import (
    EXCERPT_ELLIPSIS,
    EXCERPT_LENGTH,
    SLUG_FALLBACK,
    SLUG_MAX_LENGTH,
    SLUG_SUFFIX_MODULUS,
    TAG_SEPARATOR,
)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_MARKUP_TAG = re.compile(r"<[^>]*>")


def slugify(title: str) -> str:
    """Lowercase, collapse runs outside [a-z0-9] into one hyphen, trim hyphens."""
    slug = _NON_SLUG_CHARS.sub("-", title.lower())
    return slug.strip("-")


def generate_slug(title: str, now: Optional[float] = None) -> str:
    """
    Build a slug for a new post: slugify(title) plus "-NNNN" where NNNN is
    the current unix time in seconds mod 10000.

    The suffix only makes collisions less likely. The unique index on
    blog_posts.slug is what actually guarantees uniqueness.
    """
    if now is None:
        now = time.time()

    suffix = f"-{int(now) % SLUG_SUFFIX_MODULUS}"
    base = slugify(title) or SLUG_FALLBACK

    # Keep the whole slug inside the column
    base = base[:SLUG_MAX_LENGTH - len(suffix)].rstrip("-")

    return base + suffix


def plain_text(content: str) -> str:
    """Strip every <...> markup tag."""
    return _MARKUP_TAG.sub("", content)


def generate_excerpt(content: str) -> str:
    """First 200 characters of the markup-free content, with "..." if cut."""
    text = plain_text(content)

    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + EXCERPT_ELLIPSIS

    return text


def clean_tags(tags: Iterable[str]) -> list[str]:
    """Trim every tag and drop the empty ones, preserving order."""
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag:
            cleaned.append(tag)
    return cleaned


def serialize_tags(tags: Iterable[str]) -> str:
    """["a", "b"] -> "a,b" (storage format of blog_posts.tags)"""
    return TAG_SEPARATOR.join(clean_tags(tags))


def parse_tags(raw: Optional[str]) -> list[str]:
    """"a, b ,c" -> ["a", "b", "c"]"""
    if not raw:
        return []
    return clean_tags(raw.split(TAG_SEPARATOR))


def stamp_published_at(post, now: Optional[datetime] = None) -> bool:
    """
    Set post.published_at the first time a post is published.

    An existing published_at is never overwritten. Returns True if the
    timestamp was set.
    """
    if not post.published or post.published_at is not None:
        return False

    post.published_at = now or datetime.now(timezone.utc)
    return True
