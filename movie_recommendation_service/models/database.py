"""Engine and session factory for the configured database, built on first use."""
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from movie_recommendation_service.config import get_database_url


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine for DATABASE_URL; nothing connects until a session is used."""
    return create_engine(
        get_database_url(),
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False  # Set to True for SQL debugging
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Session factory bound to the shared engine"""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def reset_engine() -> None:
    """Dispose the cached engine so the next call re-reads DATABASE_URL."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


def get_db():
    """Dependency to get database session"""
    db: Session = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
