"""
Listing filters for the public post index.

All optional query parameters are collected into one PostFilters value,
and build_posts_query turns that value into a single SQLAlchemy query.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from apps.blog.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_OFFSET, MAX_PAGE_SIZE
from apps.blog.models import BlogPost

LIKE_ESCAPE = "\\"


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class PostFilters:
    search: Optional[str] = None
    category: Optional[str] = None
    featured: bool = False
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_query_params(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        featured: Optional[str] = None,
    ) -> "PostFilters":
        """
        Parse raw query string values.

        Bad values never fail the request: a limit outside [1, 50] or not a
        number becomes 6, a page below 1, not a number, or so large that its
        offset overflows a 64-bit integer becomes 1, and only
        featured="true" turns the featured filter on.
        """
        parsed_limit = _parse_int(limit)
        if parsed_limit is None or not 1 <= parsed_limit <= MAX_PAGE_SIZE:
            parsed_limit = DEFAULT_PAGE_SIZE

        parsed_page = _parse_int(page)
        if (
            parsed_page is None
            or parsed_page < 1
            or (parsed_page - 1) * parsed_limit > MAX_OFFSET
        ):
            parsed_page = DEFAULT_PAGE

        return cls(
            search=search or None,
            category=category or None,
            featured=featured == "true",
            page=parsed_page,
            limit=parsed_limit,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_posts_query(db: Session, filters: PostFilters) -> Query:
    """Published posts matching the filters, unordered and unpaginated."""
    query = db.query(BlogPost).filter(BlogPost.published == True)

    if filters.search:
        pattern = f"%{escape_like(filters.search.lower())}%"
        query = query.filter(
            or_(
                func.lower(BlogPost.title).like(pattern, escape=LIKE_ESCAPE),
                func.lower(BlogPost.content).like(pattern, escape=LIKE_ESCAPE),
                func.lower(BlogPost.excerpt).like(pattern, escape=LIKE_ESCAPE),
                func.lower(BlogPost.tags).like(pattern, escape=LIKE_ESCAPE),
            )
        )

    if filters.category:
        query = query.filter(func.lower(BlogPost.category) == filters.category.lower())

    if filters.featured:
        query = query.filter(BlogPost.featured == True)

    return query


def list_posts(db: Session, filters: PostFilters) -> tuple[list[BlogPost], int]:
    """
    One page of published posts plus the total count of the filtered set.

    The total is counted before ordering and pagination. Posts are ordered
    newest first by published_at, then created_at, then id.
    """
    query = build_posts_query(db, filters)
    total = query.count()

    posts = (
        query.order_by(
            BlogPost.published_at.desc().nulls_last(),
            BlogPost.created_at.desc(),
            BlogPost.id.desc(),
        )
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )

    return posts, total
