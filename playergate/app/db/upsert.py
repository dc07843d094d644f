# playergate/app/db/upsert.py
"""
INSERT ... ON CONFLICT for the two supported backends.

Both SQLite and PostgreSQL resolve the conflict inside one statement
against a unique constraint, so concurrent writers racing on the same
key never produce duplicate rows.
"""
from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def check_supported_url(url: str) -> None:
    """
    Raises:
        ValueError: the URL's backend has no upsert support (fail at
            startup, not per request)
    """
    backend = make_url(url).get_backend_name()
    if backend not in _INSERTS:
        raise ValueError(
            f"Unsupported database backend {backend!r}; expected one of {sorted(_INSERTS)}"
        )


def dialect_insert(session: AsyncSession, table: Table):
    """Return a dialect-specific insert() supporting on_conflict_*."""
    return _INSERTS[session.bind.dialect.name](table)
