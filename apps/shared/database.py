"""
Database configuration and session management

This module provides the basic SQLAlchemy setup for database connectivity.
NO models are defined here - this is just infrastructure.

The engine and session factory are owned by the application that creates
them (see create_app in apps/blog/main.py) and kept on app.state, so each
request gets its session through the get_db dependency instead of a
module-level handle.
"""

import os
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

# Base class for ORM models
Base = declarative_base()


def build_database_url() -> str:
    """
    Resolve the database URL from the environment.

    DATABASE_URL wins if set, otherwise the URL is composed from the
    DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME / DB_SSLMODE variables.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    name = os.getenv("DB_NAME", "blog_db")
    sslmode = os.getenv("DB_SSLMODE", "disable")

    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def make_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create an engine for the given URL.

    SQLite gets a single shared connection so in-memory databases survive
    across sessions (tests, demo mode). Everything else uses NullPool for
    better compatibility with containerized environments.
    """
    url = database_url or build_database_url()

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_engine(
        url,
        poolclass=NullPool,
        echo=False,  # Set to True for SQL query logging during development
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency injection for database sessions
    Usage in FastAPI endpoints:

    @app.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        # use db here
        pass
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(engine: Engine) -> bool:
    """
    Test database connectivity
    Returns True if connection successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
