import logging
import re
from typing import Any, Optional, Sequence

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.core.config import settings
from app.core.errors import TransportError

logger = logging.getLogger(__name__)

_POSITIONAL = re.compile(r"\$(\d+)")


def make_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine for `url`.

    SQLite connections get foreign key enforcement switched on, since jobs
    rely on ON DELETE CASCADE from companies.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using them
        pool_size=10,  # Connection pool size
        max_overflow=20,  # Allow up to 20 connections beyond pool_size
        **kwargs
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Create SQLAlchemy engine
engine = make_engine(settings.DATABASE_URL)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(create_tables: Optional[bool] = None):
    """
    Initialize database.

    Imports the models so their tables are registered on Base.metadata.
    Tables are only created when AUTO_CREATE_TABLES is set (or create_tables
    is passed); otherwise the schema is expected to exist already.
    """
    from app.models import company, job, user  # noqa: F401  Import models to register them

    if create_tables is None:
        create_tables = settings.AUTO_CREATE_TABLES
    if create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")


def execute(db: Session, sql: str, values: Optional[Sequence[Any]] = None) -> CursorResult:
    """
    Run `sql` written with $1..$n placeholders, binding `values` in order.

    Integrity violations roll back and propagate unchanged so repositories
    can translate them; every other driver error becomes a TransportError.
    """
    values = list(values or [])
    params = {f"p{index}": value for index, value in enumerate(values, start=1)}
    statement = text(_POSITIONAL.sub(lambda match: f":p{match.group(1)}", sql))

    try:
        return db.execute(statement, params)
    except IntegrityError:
        db.rollback()
        raise
    except DBAPIError as e:
        db.rollback()
        logger.error(f"Query failed: {e.orig!r}")
        raise TransportError("Database error") from e


def commit(db: Session) -> None:
    """
    Commit the session, translating driver errors the same way as execute().

    Constraints checked at commit time (deferred ones on PostgreSQL) surface
    as IntegrityError for the repository to translate.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except DBAPIError as e:
        db.rollback()
        logger.error(f"Commit failed: {e.orig!r}")
        raise TransportError("Database error") from e


def is_unique_violation(error: IntegrityError) -> bool:
    """True for UNIQUE/primary-key collisions (PostgreSQL and SQLite wording)."""
    message = str(error.orig).lower()
    return "unique" in message or "duplicate key" in message


def is_foreign_key_violation(error: IntegrityError) -> bool:
    return "foreign key" in str(error.orig).lower()
