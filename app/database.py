import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from app.config import settings
from app.core.exceptions import BusinessManagerException, StorageError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases; SQLite needs thread sharing."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


# Create SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    **_engine_options(settings.DATABASE_URL),
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run one logical operation as a single database transaction.

    Commits when the block exits cleanly. Any exception rolls back so that
    partial writes are never visible. Driver and connection failures are
    re-raised as StorageError so callers can tell them apart from
    validation failures; IntegrityError is left for the caller to map.
    """
    try:
        yield db
        db.commit()
    except BusinessManagerException:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storage failure, transaction rolled back")
        raise StorageError(f"Storage operation failed: {e.__class__.__name__}") from e
