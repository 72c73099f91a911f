from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from nonceguard.config import settings

REQUIRED_TABLES = ("nonce",)


class Base(DeclarativeBase):
    pass


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create an engine for the given URL, falling back to settings."""
    url = database_url or settings.database_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # SQLite specific
    return create_engine(url, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def check_database_tables(engine: Engine) -> None:
    """
    Verify that the tables the Persistent Store writes to exist.

    The schema is provisioned by Alembic, not by this package.
    Raises RuntimeError naming the missing tables.
    """
    existing = set(inspect(engine).get_table_names())
    missing = [table for table in REQUIRED_TABLES if table not in existing]
    if missing:
        raise RuntimeError(
            f"Database tables missing: {', '.join(missing)}. "
            "Run `alembic upgrade head` to create them."
        )
