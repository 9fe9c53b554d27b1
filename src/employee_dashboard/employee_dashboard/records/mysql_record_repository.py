from __future__ import annotations

from typing import Any, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import column_list, db_cursor, fetchall, fetchone, quote_identifier, where_clause
from .repository import Fields, RecordRepository


class MySQLRecordRepository(RecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def select(
        self,
        collection: str,
        *,
        fields: Fields = "*",
        equals: Optional[Mapping[str, Any]] = None,
        any_of: Optional[Mapping[str, Any]] = None,
    ) -> list[dict]:
        where, params = where_clause(equals, any_of)
        sql = f"SELECT {column_list(fields)} FROM {quote_identifier(collection)}{where}"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return fetchall(cur)

    def select_one(self, collection: str, *, id_field: str, identity: Any, fields: Fields = "*") -> Optional[dict]:
        where, params = where_clause({id_field: identity})
        sql = f"SELECT {column_list(fields)} FROM {quote_identifier(collection)}{where} LIMIT 1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return fetchone(cur)

    def insert(self, collection: str, record: Mapping[str, Any]) -> dict:
        table = quote_identifier(collection)
        columns = list(record.keys())
        if columns:
            placeholders = ",".join(["%s"] * len(columns))
            sql = f"INSERT INTO {table}({','.join(quote_identifier(c) for c in columns)}) VALUES({placeholders})"
        else:
            sql = f"INSERT INTO {table}() VALUES()"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(record[c] for c in columns))
            generated_id = cur.lastrowid

            pk = self._primary_key(cur, collection)
            if pk is None:
                return dict(record)

            identity = generated_id if generated_id else record.get(pk)
            if identity is None:
                return dict(record)

            cur.execute(f"SELECT * FROM {table} WHERE {quote_identifier(pk)}=%s LIMIT 1", (identity,))
            row = fetchone(cur)
            if row:
                return row
            return {**record, pk: identity}

    def update(self, collection: str, patch: Mapping[str, Any], *, id_field: str, identity: Any) -> list[dict]:
        table = quote_identifier(collection)
        assignments = ", ".join(f"{quote_identifier(c)}=%s" for c in patch.keys())
        where, params = where_clause({id_field: identity})

        with db_cursor(self._conn_factory) as (_, cur):
            if assignments:
                cur.execute(f"UPDATE {table} SET {assignments}{where}", (*patch.values(), *params))
            cur.execute(f"SELECT * FROM {table}{where}", tuple(params))
            return fetchall(cur)

    def delete(self, collection: str, *, id_field: str, identity: Any) -> int:
        where, params = where_clause({id_field: identity})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {quote_identifier(collection)}{where}", tuple(params))
            return int(cur.rowcount or 0)

    def primary_key(self, collection: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._primary_key(cur, collection)

    @staticmethod
    def _primary_key(cur, collection: str) -> Optional[str]:
        cur.execute(
            """
            SELECT COLUMN_NAME AS column_name
            FROM information_schema.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = %s
              AND CONSTRAINT_NAME = 'PRIMARY'
            ORDER BY ORDINAL_POSITION
            LIMIT 1
            """,
            (collection,),
        )
        r = fetchone(cur)
        return str(r["column_name"]) if r else None
