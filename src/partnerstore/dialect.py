"""Dialect helpers — backend detection and SQLite foreign key enforcement."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import event

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine


def get_dialect(engine: Engine | AsyncEngine) -> str:
    """Return 'sqlite', 'postgresql', or the raw dialect name."""
    # AsyncEngine wraps a sync engine
    sync_engine = getattr(engine, "sync_engine", engine)
    name = sync_engine.dialect.name
    if name == "sqlite":
        return "sqlite"
    if name in ("postgresql", "postgres"):
        return "postgresql"
    return name


def _set_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine: Engine | AsyncEngine) -> bool:
    """Turn on foreign key enforcement for every new SQLite connection.

    SQLite ships with foreign keys disabled, so unknown user ids would
    otherwise be accepted on insert.  Must be called before the engine
    opens its first connection.  Returns False for non-SQLite engines.
    """
    if get_dialect(engine) != "sqlite":
        return False
    sync_engine = getattr(engine, "sync_engine", engine)
    if not event.contains(sync_engine, "connect", _set_sqlite_foreign_keys):
        event.listen(sync_engine, "connect", _set_sqlite_foreign_keys)
    return True
