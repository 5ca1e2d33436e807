"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.

Services only add and flush. Transaction boundaries belong to the caller:
the API request, the CLI command or the provisioning run.
"""

from collections.abc import Generator
from contextlib import contextmanager
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from shared.config.logging import get_logger
from shared.config.settings import DATABASE_URL
from shared.utils.exceptions import DatabaseError

logger = get_logger(__name__)


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLite honour SAVEPOINT / nested transactions.

    The pysqlite driver manages BEGIN on its own and breaks nested
    transactions, so SQLAlchemy takes over transaction control.
    """

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str) -> Engine:
    """Create an engine with pool settings suited to the dialect."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
        enable_sqlite_savepoints(sqlite_engine)
        return sqlite_engine

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=_calculate_pool_size(),
        max_overflow=15,
        pool_timeout=30,  # Wait max 30s for connection from pool
        pool_recycle=1800,  # Recycle connections after 30 minutes
        connect_args={"connect_timeout": 10},
        echo=False,
    )


engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.scalars(select(Item)).all()

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with session_scope() as db:
            db.scalars(select(Item)).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Generator[Session, None, None]:
    """
    Commit everything done inside the block, or roll it all back.

    Usage:
        with unit_of_work(db):
            tenant_service.create(...)
            restaurant_service.create(...)

    Driver errors surface as DatabaseError; domain errors propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Unit of work rolled back", error=type(e).__name__)
        raise DatabaseError("la transacción", error=str(e)) from e
    except Exception:
        db.rollback()
        logger.warning("Unit of work rolled back")
        raise

