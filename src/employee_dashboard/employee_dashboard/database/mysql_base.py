from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import mysql.connector

from ..common.validators import require_identifier
from ..core.exceptions import StorageError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` on a fresh connection; commit on success.

    Connector errors surface as ``StorageError`` with the server message.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageError(str(exc)) from exc
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            _quietly(cur.close)
    except mysql.connector.Error as exc:
        _quietly(conn.rollback)
        raise StorageError(str(exc)) from exc
    except Exception:
        _quietly(conn.rollback)
        raise
    finally:
        _quietly(conn.close)


def _quietly(cleanup) -> None:
    # A dead connection fails its cleanup too; the original error is the one reported.
    try:
        cleanup()
    except mysql.connector.Error as exc:
        logger.debug("%s failed: %s", getattr(cleanup, "__name__", cleanup), exc)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return [dict(r) for r in rows or []]


def quote_identifier(name: str) -> str:
    return f"`{require_identifier(name, 'identifier')}`"


def column_list(fields: Union[str, Sequence[str]]) -> str:
    """Render a select list from ``"*"``, ``"a, b"`` or ``["a", "b"]``."""
    if isinstance(fields, str):
        if fields.strip() == "*":
            return "*"
        fields = [f.strip() for f in fields.split(",") if f.strip()]
    if not fields:
        return "*"
    return ", ".join(quote_identifier(f) for f in fields)


def where_clause(
    equals: Optional[Mapping[str, Any]] = None,
    any_of: Optional[Mapping[str, Any]] = None,
) -> Tuple[str, List[Any]]:
    """Build ``WHERE`` text: ``equals`` ANDed, ``any_of`` ORed inside one group."""
    clauses: List[str] = []
    params: List[Any] = []

    for field, value in (equals or {}).items():
        clauses.append(f"{quote_identifier(field)}=%s")
        params.append(value)

    if any_of:
        parts = []
        for field, value in any_of.items():
            parts.append(f"{quote_identifier(field)}=%s")
            params.append(value)
        clauses.append("(" + " OR ".join(parts) + ")")

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params
