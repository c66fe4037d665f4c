"""
Database connection (PostgreSQL)

This module centralizes access to the store:
- SQLAlchemy engine and session factory
- FastAPI dependency for request-scoped sessions
- run_in_transaction: the single primitive used for atomic multi-row writes
- Connectivity check with retry (used by /health)

Author: TM3
Updated: 2025-10-17
"""
import time
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================================
# SQLAlchemy Configuration
# ============================================================================

def _engine_options(database_url: str) -> dict:
    """Pool options only apply to server databases (PostgreSQL)"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connection before use
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for ORM models
Base = declarative_base()


def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy session

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================================
# Transactions
# ============================================================================

def run_in_transaction(
    work: Callable[[Session], T],
    session_factory: Optional[sessionmaker] = None
) -> T:
    """
    Execute work(session) inside a single database transaction

    The session is the transaction handle: every read and write made through it
    belongs to the same atomic unit. The transaction commits when work returns and
    rolls back when work raises (the exception is re-raised).

    Args:
        work: Callable receiving the transactional session
        session_factory: Session factory to use (default: SessionLocal)

    Returns:
        Whatever work returns

    Example:
        def reserve(session):
            product = session.get(Product, 1)
            product.stock -= 1
            return product.stock

        remaining = run_in_transaction(reserve)
    """
    factory = session_factory or SessionLocal
    with factory() as session:
        with session.begin():
            return work(session)


# ============================================================================
# Connectivity check with Retry Logic
# ============================================================================

def check_database_connection(max_retries=3, retry_delay=1.0, bind=None) -> float:
    """
    Run SELECT 1 against the database with automatic retry on connection failures

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)
        bind: Engine to check (default: the application engine)

    Returns:
        Latency of the successful attempt in milliseconds

    Raises:
        sqlalchemy.exc.OperationalError: If all retry attempts fail
    """
    target = bind or engine

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            start = time.time()
            with target.connect() as conn:
                conn.execute(text("SELECT 1"))
            latency_ms = (time.time() - start) * 1000
            logger.debug(f"Database connection successful on attempt {attempt}")
            return latency_ms

        except OperationalError as e:
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e.orig}")

            # Don't retry on last attempt
            if attempt >= max_retries:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

            # Exponential backoff
            delay = retry_delay * (2 ** (attempt - 1))
            logger.info(f"Retrying in {delay:.2f} seconds...")
            time.sleep(delay)
