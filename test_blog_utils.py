"""
Unit tests for the blog derivation helpers and listing filters.
"""
import re
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from apps.blog.filters import PostFilters, escape_like
from apps.blog.schemas import PaginatedPostsResponse
from apps.blog.utils import (
    generate_excerpt,
    generate_slug,
    parse_tags,
    plain_text,
    serialize_tags,
    slugify,
    stamp_published_at,
)

SLUG_BASE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class TestSlug:
    def test_slugify_collapses_and_trims(self):
        assert slugify("Hello, World!") == "hello-world"
        assert slugify("  --ARIA Labels: A Complete Guide--  ") == "aria-labels-a-complete-guide"
        assert slugify("a___b   c") == "a-b-c"

    def test_generate_slug_appends_time_suffix(self):
        assert generate_slug("Hello, World!", now=1700001234.9) == "hello-world-1234"
        assert generate_slug("Hello, World!", now=1700000007) == "hello-world-7"

    @pytest.mark.parametrize("title", [
        "Getting Started with Web Accessibility",
        "ARIA Labels: A Complete Guide",
        "  Leading and trailing  ",
        "Café & Crème 2024!!",
        "---dashes---everywhere---",
    ])
    def test_slug_base_is_lowercase_alnum_and_hyphens(self, title):
        slug = generate_slug(title, now=1234)
        base, suffix = slug.rsplit("-", 1)
        assert suffix == "1234"
        assert SLUG_BASE.match(base)

    def test_title_without_alphanumerics_gets_fallback(self):
        assert generate_slug("!!! ???", now=42) == "post-42"

    def test_long_title_fits_column(self):
        slug = generate_slug("word " * 200, now=9999)
        assert len(slug) <= 255
        assert slug.endswith("-9999")
        assert not slug[:-5].endswith("-")


class TestExcerpt:
    def test_strips_markup(self):
        assert plain_text("<h2>Title</h2><p>Body <strong>bold</strong></p>") == "TitleBody bold"
        assert generate_excerpt("<p>Short body</p>") == "Short body"

    def test_truncates_long_text_to_200_plus_ellipsis(self):
        content = "<p>" + "a" * 150 + "</p><p>" + "b" * 150 + "</p>"
        excerpt = generate_excerpt(content)
        assert excerpt == "a" * 150 + "b" * 50 + "..."
        assert len(excerpt) == 203

    def test_exactly_200_chars_is_not_truncated(self):
        content = "<div>" + "x" * 200 + "</div>"
        assert generate_excerpt(content) == "x" * 200


class TestTags:
    def test_round_trip_from_messy_string(self):
        assert serialize_tags(parse_tags("a, b ,c")) == "a,b,c"

    def test_parse_drops_empty_segments(self):
        assert parse_tags("a,,b, ,") == ["a", "b"]
        assert parse_tags("") == []
        assert parse_tags(None) == []

    def test_serialize_trims_and_preserves_order(self):
        assert serialize_tags([" WCAG", "accessibility ", "", "ARIA"]) == "WCAG,accessibility,ARIA"

    @pytest.mark.parametrize("tags", [
        [],
        ["one"],
        ["screen readers", "testing", "NVDA"],
    ])
    def test_serialize_is_idempotent(self, tags):
        stored = serialize_tags(tags)
        assert serialize_tags(parse_tags(stored)) == stored
        assert parse_tags(stored) == tags


class TestPublishedAt:
    def test_stamps_first_publish(self):
        post = SimpleNamespace(published=True, published_at=None)
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert stamp_published_at(post, now=when) is True
        assert post.published_at == when

    def test_never_overwrites(self):
        original = datetime(2023, 1, 1, tzinfo=timezone.utc)
        post = SimpleNamespace(published=True, published_at=original)
        assert stamp_published_at(post) is False
        assert post.published_at == original

    def test_unpublished_is_left_alone(self):
        post = SimpleNamespace(published=False, published_at=None)
        assert stamp_published_at(post) is False
        assert post.published_at is None


class TestPostFilters:
    def test_defaults(self):
        filters = PostFilters.from_query_params()
        assert filters == PostFilters(search=None, category=None, featured=False, page=1, limit=6)
        assert filters.offset == 0

    @pytest.mark.parametrize("page", ["0", "-3", "abc", "", "1.5"])
    def test_bad_page_falls_back_to_first(self, page):
        assert PostFilters.from_query_params(page=page).page == 1

    @pytest.mark.parametrize("limit", ["0", "51", "100", "-1", "ten"])
    def test_bad_limit_falls_back_to_default(self, limit):
        assert PostFilters.from_query_params(limit=limit).limit == 6

    def test_limit_bounds_are_inclusive(self):
        assert PostFilters.from_query_params(limit="1").limit == 1
        assert PostFilters.from_query_params(limit="50").limit == 50

    def test_featured_only_for_exact_true(self):
        assert PostFilters.from_query_params(featured="true").featured is True
        assert PostFilters.from_query_params(featured="TRUE").featured is False
        assert PostFilters.from_query_params(featured="1").featured is False

    def test_empty_strings_are_absent(self):
        filters = PostFilters.from_query_params(search="", category="")
        assert filters.search is None
        assert filters.category is None

    def test_page_with_overflowing_offset_falls_back_to_first(self):
        assert PostFilters.from_query_params(page="99999999999999999999").page == 1
        assert PostFilters.from_query_params(page=str(2**62), limit="6").page == 1
        assert PostFilters.from_query_params(page=str(2**62), limit="1").page == 2**62

    def test_offset(self):
        assert PostFilters.from_query_params(page="3", limit="6").offset == 12

    def test_escape_like(self):
        assert escape_like("100%_done\\") == "100\\%\\_done\\\\"


class TestPaginationEnvelope:
    @pytest.mark.parametrize("page,total_pages,has_next,has_prev", [
        (1, 3, True, False),
        (2, 3, True, True),
        (3, 3, False, True),
        (4, 3, False, True),
    ])
    def test_fourteen_posts_six_per_page(self, page, total_pages, has_next, has_prev):
        filters = PostFilters(page=page, limit=6)
        envelope = PaginatedPostsResponse.build([], 14, filters)
        assert envelope.current_page == page
        assert envelope.total_pages == total_pages
        assert envelope.total_posts == 14
        assert envelope.has_next is has_next
        assert envelope.has_prev is has_prev

    def test_empty_result(self):
        envelope = PaginatedPostsResponse.build([], 0, PostFilters())
        assert envelope.total_pages == 0
        assert envelope.has_next is False
        assert envelope.has_prev is False
