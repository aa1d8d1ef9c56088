"""
Database operations for blog posts.

Every function takes the SQLAlchemy session explicitly. Derived fields are
computed here with the helpers from apps/blog/utils.py, right before the
row is written.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from apps.blog.models import BlogPost
from apps.blog.schemas import BlogPostCreate, BlogPostUpdate
from apps.blog.utils import (
    generate_excerpt,
    generate_slug,
    serialize_tags,
    stamp_published_at,
)

logger = logging.getLogger(__name__)


class BlogError(Exception):
    """Base class for blog domain errors."""


class PostNotFoundError(BlogError):
    def __init__(self, slug: str):
        super().__init__(f"Blog post '{slug}' not found")
        self.slug = slug


class SlugConflictError(BlogError):
    def __init__(self, slug: str):
        super().__init__(f"Blog post with slug '{slug}' already exists")
        self.slug = slug


def get_post_by_slug(db: Session, slug: str) -> Optional[BlogPost]:
    """Any post, published or not."""
    return db.query(BlogPost).filter(BlogPost.slug == slug).first()


def get_published_post(db: Session, slug: str) -> BlogPost:
    post = (
        db.query(BlogPost)
        .filter(BlogPost.slug == slug, BlogPost.published == True)
        .first()
    )
    if not post:
        raise PostNotFoundError(slug)
    return post


def _commit(db: Session, post: BlogPost) -> BlogPost:
    """Commit and refresh, turning a unique violation into SlugConflictError."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise SlugConflictError(post.slug)
    except Exception:
        db.rollback()
        raise

    db.refresh(post)
    return post


def create_post(db: Session, data: BlogPostCreate) -> BlogPost:
    """
    Insert a new post.

    slug and excerpt are derived when the body does not carry them, and
    published_at is stamped if the post starts out published.

    Raises:
        SlugConflictError: the slug is already taken
    """
    post = BlogPost(
        title=data.title,
        slug=data.slug or generate_slug(data.title),
        content=data.content,
        excerpt=data.excerpt or generate_excerpt(data.content),
        author_name=data.author_name,
        tags=serialize_tags(data.tags),
        category=data.category,
        featured=data.featured,
        published=data.published,
    )
    stamp_published_at(post)

    db.add(post)
    _commit(db, post)

    logger.info(f"Created blog post {post.slug} (id={post.id})")
    return post


def update_post(db: Session, slug: str, data: BlogPostUpdate) -> BlogPost:
    """
    Replace the mutable fields of the post with this slug.

    There are no partial updates: title, content, author_name, tags,
    category, featured and published are always overwritten. The excerpt
    is replaced only if the body carries one, and derived again from the
    new content when it ends up blank. The slug never changes.

    Raises:
        PostNotFoundError: no post with this slug
    """
    post = get_post_by_slug(db, slug)
    if not post:
        raise PostNotFoundError(slug)

    post.title = data.title
    post.content = data.content
    post.author_name = data.author_name
    post.tags = serialize_tags(data.tags)
    post.category = data.category
    post.featured = data.featured
    post.published = data.published

    if data.excerpt is not None:
        post.excerpt = data.excerpt
    if not post.excerpt:
        post.excerpt = generate_excerpt(post.content)

    if stamp_published_at(post):
        logger.info(f"Blog post {slug} published for the first time")

    _commit(db, post)

    logger.info(f"Updated blog post {slug}")
    return post


def delete_post(db: Session, slug: str) -> None:
    """
    Delete the post with this slug in a single statement.

    Raises:
        PostNotFoundError: nothing was deleted
    """
    try:
        deleted = (
            db.query(BlogPost)
            .filter(BlogPost.slug == slug)
            .delete(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    if deleted == 0:
        raise PostNotFoundError(slug)

    logger.info(f"Deleted blog post {slug}")


def seed_posts(db: Session, posts: Iterable[dict]) -> int:
    """
    Insert fixed posts (demo corpus) whose slug is not in the table yet.

    Each dict holds BlogPost columns; tags may be given as a list.
    Missing excerpts and published_at are derived the same way as for
    posts created through the API. Returns the number of rows inserted.
    """
    inserted = 0
    for values in posts:
        if get_post_by_slug(db, values["slug"]):
            continue

        values = dict(values)
        values.setdefault("published", True)
        if not isinstance(values.get("tags", ""), str):
            values["tags"] = serialize_tags(values["tags"])

        post = BlogPost(**values)
        if not post.excerpt:
            post.excerpt = generate_excerpt(post.content)
        stamp_published_at(post)

        db.add(post)
        inserted += 1

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Seeded {inserted} blog posts")
    return inserted
