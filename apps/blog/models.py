"""
Blog database models.

A single table of posts. Slugs are the public lookup key and carry a
unique index; tags are stored as one comma-separated string.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func

from apps.shared.database import Base
from apps.blog.constants import (
    AUTHOR_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    EXCERPT_MAX_LENGTH,
    SLUG_MAX_LENGTH,
    TAGS_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)


class BlogPost(Base):
    """
    Blog post.

    Derived fields (slug, excerpt, published_at) are filled in by
    apps/blog/crud.py before insert/update, not by ORM events.
    """
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(EXCERPT_MAX_LENGTH))
    author_name = Column(String(AUTHOR_MAX_LENGTH), nullable=False)
    tags = Column(String(TAGS_MAX_LENGTH), default="")  # "accessibility,WCAG"
    category = Column(String(CATEGORY_MAX_LENGTH), default="")
    featured = Column(Boolean, default=False, nullable=False)
    published = Column(Boolean, default=True, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<BlogPost id={self.id} slug={self.slug!r}>"
