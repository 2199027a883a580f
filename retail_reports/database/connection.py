"""
Database Connection Management

SQLAlchemy 2.0 engine lifecycle and read-only snapshot transactions.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from sqlalchemy import Connection, Engine, create_engine, text

from retail_reports.config import get_settings
from .models import Base

logger = structlog.get_logger(__name__)

# Global engine
_engine: Optional[Engine] = None


def init_database(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Initialize the database engine.

    Args:
        url: SQLAlchemy URL (defaults to settings.database.url)
        echo: Echo SQL (defaults to settings.database.echo)

    Returns:
        Engine: The initialized database engine
    """
    global _engine

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings()
    url = url or settings.database.url

    _engine = create_engine(
        url,
        echo=settings.database.echo if echo is None else echo,
        pool_pre_ping=True,
    )

    # Verify connection
    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection established", dialect=_engine.dialect.name)
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        _engine.dispose()
        _engine = None
        raise

    return _engine


def close_database() -> None:
    """Dispose of the database engine and its pool."""
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database connection pool closed")


def get_engine() -> Engine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


def create_schema(engine: Engine) -> None:
    """Create the five report tables if they do not exist."""
    Base.metadata.create_all(engine)
    logger.info("Schema created", tables=sorted(Base.metadata.tables))


def _snapshot_isolation(engine: Engine) -> str:
    """Isolation level giving a consistent multi-table read"""
    if engine.dialect.name == "postgresql":
        return "REPEATABLE READ"
    if engine.dialect.name in ("mysql", "mariadb"):
        return "REPEATABLE READ"
    return "SERIALIZABLE"


@contextmanager
def read_only_snapshot(engine: Engine) -> Iterator[Connection]:
    """
    Open a read-only transaction with snapshot isolation.

    Every query issued on the yielded connection observes the same
    committed state of the database. The transaction is always rolled back.

    Example:
        with read_only_snapshot(engine) as conn:
            rows = conn.execute(select(Sale)).all()
    """
    isolation = _snapshot_isolation(engine)
    with engine.connect().execution_options(isolation_level=isolation) as conn:
        trans = conn.begin()
        try:
            if engine.dialect.name == "postgresql":
                conn.execute(text("SET TRANSACTION READ ONLY"))
            logger.debug("Snapshot opened", isolation=isolation)
            yield conn
        finally:
            trans.rollback()
            logger.debug("Snapshot closed")
