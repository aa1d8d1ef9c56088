"""
Blog Service API

CRUD endpoints for blog posts with pagination, search and
category/featured filtering, plus the single-page frontend.
"""
import os
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from apps.shared.database import (
    Base,
    build_database_url,
    check_db_connection,
    get_db,
    make_engine,
    make_session_factory,
)
from apps.shared.cors import setup_cors
from apps.shared.errors import setup_error_handlers
from apps.shared.security_headers import setup_security_headers
from apps.blog import crud
from apps.blog.crud import PostNotFoundError, SlugConflictError
from apps.blog.filters import PostFilters, list_posts
from apps.blog.mock_data import MOCK_POSTS
from apps.blog.schemas import (
    BlogPostCreate,
    BlogPostDetail,
    BlogPostUpdate,
    PaginatedPostsResponse,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

DEMO_DATABASE_URL = "sqlite://"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in ("1", "true", "yes")


def not_found(slug: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"message": f"Blog post '{slug}' not found", "category": "not_found"},
    )


# ──────────────────────────────────────────────────────────────────────────────
# Posts API
# ──────────────────────────────────────────────────────────────────────────────

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=PaginatedPostsResponse)
def get_posts(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size, 1-50 (default 6)"),
    search: Optional[str] = Query(None, description="Matches title, content, excerpt or tags"),
    category: Optional[str] = Query(None, description="Exact category, case-insensitive"),
    featured: Optional[str] = Query(None, description='"true" for featured posts only'),
    db: Session = Depends(get_db),
):
    """
    List published posts, newest first.
    Invalid page/limit values fall back to the defaults instead of failing.
    """
    filters = PostFilters.from_query_params(
        page=page,
        limit=limit,
        search=search,
        category=category,
        featured=featured,
    )
    posts, total = list_posts(db, filters)
    return PaginatedPostsResponse.build(posts, total, filters)


@router.get("/{slug}", response_model=BlogPostDetail)
def get_post(slug: str, db: Session = Depends(get_db)):
    """Get a single published post by slug."""
    try:
        post = crud.get_published_post(db, slug)
    except PostNotFoundError:
        raise not_found(slug)
    return BlogPostDetail.model_validate(post)


@router.post("", response_model=BlogPostDetail, status_code=201)
def create_post(post_data: BlogPostCreate, db: Session = Depends(get_db)):
    """Create a new post. slug and excerpt are derived when omitted."""
    try:
        post = crud.create_post(db, post_data)
    except SlugConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "category": "conflict"},
        )
    return BlogPostDetail.model_validate(post)


@router.put("/{slug}", response_model=BlogPostDetail)
def update_post(slug: str, post_data: BlogPostUpdate, db: Session = Depends(get_db)):
    """Replace a post. All mutable fields are overwritten."""
    try:
        post = crud.update_post(db, slug, post_data)
    except PostNotFoundError:
        raise not_found(slug)
    except SlugConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "category": "conflict"},
        )
    return BlogPostDetail.model_validate(post)


@router.delete("/{slug}", status_code=204)
def delete_post(slug: str, db: Session = Depends(get_db)):
    """Delete a post."""
    try:
        crud.delete_post(db, slug)
    except PostNotFoundError:
        raise not_found(slug)


# ──────────────────────────────────────────────────────────────────────────────
# Frontend (SPA)
# ──────────────────────────────────────────────────────────────────────────────

def setup_frontend(app: FastAPI, frontend_dir: Path) -> None:
    """
    Serve the single-page app from frontend_dir.

    Files with an extension are served as-is, every other path gets
    index.html so client-side routing works. Unknown /api/ paths stay 404.
    """
    root = frontend_dir.resolve()
    index_file = root / "index.html"

    for static_dir in ("src", "assets"):
        if (root / static_dir).is_dir():
            app.mount(f"/{static_dir}", StaticFiles(directory=root / static_dir), name=static_dir)

    @app.get("/{full_path:path}", include_in_schema=False)
    def spa(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        if "." in full_path and not full_path.endswith(".html"):
            candidate = (root / full_path).resolve()
            if candidate.is_relative_to(root) and candidate.is_file():
                return FileResponse(candidate)
            raise HTTPException(status_code=404, detail="Not Found")

        if not index_file.is_file():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_file, media_type="text/html")


# ──────────────────────────────────────────────────────────────────────────────
# App factory
# ──────────────────────────────────────────────────────────────────────────────

def create_app(
    database_url: Optional[str] = None,
    demo_mode: Optional[bool] = None,
    frontend_dir: Optional[str] = None,
) -> FastAPI:
    """
    Build the blog service.

    Arguments override the environment (DATABASE_URL / DB_*, BLOG_DEMO_MODE,
    FRONTEND_DIR). Demo mode runs on an in-memory SQLite database seeded
    with the demo corpus instead of the configured database.
    """
    if demo_mode is None:
        demo_mode = _env_flag("BLOG_DEMO_MODE")
    if demo_mode:
        database_url = DEMO_DATABASE_URL
    elif database_url is None:
        database_url = build_database_url()

    engine = make_engine(database_url)
    session_factory = make_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            Base.metadata.create_all(bind=engine)
        except Exception as e:
            # Requests will report the database error themselves
            logger.warning(f"Could not create blog tables: {e}", exc_info=True)
        else:
            if demo_mode:
                logger.info("Demo mode enabled - serving in-memory demo posts")
                with session_factory() as db:
                    crud.seed_posts(db, MOCK_POSTS)

        logger.info(f"Blog service started (database: {engine.url.render_as_string(hide_password=True)})")
        yield
        engine.dispose()

    app = FastAPI(
        title="Blog Service",
        version="1.0.0",
        description="Blog posts with pagination, search and filtering",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.demo_mode = demo_mode

    setup_cors(app)
    setup_security_headers(app)
    setup_error_handlers(app)

    @app.get("/health")
    def health(request: Request):
        """Health check endpoint - the service is up even if the database is not."""
        db_connected = check_db_connection(request.app.state.engine)
        return {
            "status": "ok",
            "service": "blog",
            "database": "connected" if db_connected else "disconnected",
        }

    app.include_router(router)

    frontend_path = Path(frontend_dir or os.getenv("FRONTEND_DIR", "./frontend"))
    if frontend_path.is_dir():
        setup_frontend(app, frontend_path)
    else:
        logger.info(f"No frontend found at {frontend_path}, serving API only")

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Server starting on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
