"""
Test fixtures for the blog service.

Every test gets its own app on an in-memory SQLite database.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from apps.shared.database import Base
from apps.blog.main import create_app
from apps.blog.models import BlogPost
from apps.blog.utils import serialize_tags

TEST_DATABASE_URL = "sqlite://"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

SAMPLE_CONTENT = (
    "<p>This is sample blog content used by the tests. It is long enough to pass "
    "the minimum length rule for post bodies and has some markup in it.</p>"
)


@pytest.fixture
def app(tmp_path):
    app = create_app(
        database_url=TEST_DATABASE_URL,
        demo_mode=False,
        frontend_dir=str(tmp_path / "no-frontend"),
    )
    Base.metadata.create_all(bind=app.state.engine)
    yield app
    Base.metadata.drop_all(bind=app.state.engine)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def session_factory(app):
    return app.state.session_factory


@pytest.fixture
def make_post(session_factory):
    """Insert a post row directly, bypassing the API."""
    counter = {"n": 0}

    def _make_post(**overrides) -> dict:
        n = counter["n"]
        counter["n"] += 1

        values = {
            "title": f"Sample post {n}",
            "slug": f"sample-post-{n}",
            "content": SAMPLE_CONTENT,
            "excerpt": f"Excerpt {n}",
            "author_name": "Test Author",
            "tags": ["testing"],
            "category": "General",
            "featured": False,
            "published": True,
            "published_at": BASE_TIME + timedelta(hours=n),
        }
        values.update(overrides)
        values["tags"] = serialize_tags(values["tags"])

        with session_factory() as db:
            post = BlogPost(**values)
            db.add(post)
            db.commit()
            return {"id": post.id, "slug": post.slug}

    return _make_post


@pytest.fixture
def post_payload():
    return {
        "title": "Test Post Title",
        "content": SAMPLE_CONTENT,
        "author_name": "Jane Doe",
        "tags": ["python", " fastapi ", ""],
        "category": "Development",
        "featured": False,
        "published": True,
    }
