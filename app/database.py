"""Database engine and session management."""
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from app.config import get_settings


def get_database_url() -> str:
    """Build the database URL from settings.

    An explicit DATABASE_URL wins. Otherwise a Cloud SQL unix socket is used
    when INSTANCE_CONNECTION_NAME is set, falling back to plain TCP.
    """
    settings = get_settings()
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    credentials = f"{settings.DB_USER}:{settings.DB_PASSWORD}"
    if settings.INSTANCE_CONNECTION_NAME:
        return (
            f"postgresql://{credentials}@/{settings.DB_NAME}"
            f"?host=/cloudsql/{settings.INSTANCE_CONNECTION_NAME}"
        )

    return f"postgresql://{credentials}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"


@lru_cache
def get_engine():
    """Create SQLAlchemy engine (cached)."""
    return create_engine(
        get_database_url(),
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@lru_cache
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine())


def get_db():
    """Dependency for FastAPI routes that need a database session."""
    db: Session = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
