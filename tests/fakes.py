from __future__ import annotations

from collections import defaultdict
from itertools import count
from typing import Any, Mapping, Optional

from src.employee_dashboard.employee_dashboard.core.exceptions import StorageError


def _project(row: dict, fields) -> dict:
    if fields is None or (isinstance(fields, str) and fields.strip() == "*"):
        return dict(row)
    if isinstance(fields, str):
        fields = [f.strip() for f in fields.split(",") if f.strip()]
    return {f: row.get(f) for f in fields}


class InMemoryRecords:
    """Dict-backed RecordRepository.

    ``fail_on`` holds collection names, or ``(operation, collection)`` pairs, that raise ``StorageError``.
    """

    def __init__(self, primary_keys: Optional[Mapping[str, str]] = None, fail_on=()):
        self.tables: dict[str, list[dict]] = defaultdict(list)
        self.primary_keys = dict(primary_keys or {})
        self.fail_on = set(fail_on)
        self.calls: list[tuple[str, str, dict]] = []
        self._ids = count(1)

    def seed(self, collection: str, *rows: dict) -> None:
        for r in rows:
            self.tables[collection].append(dict(r))

    def rows(self, collection: str) -> list[dict]:
        return [dict(r) for r in self.tables.get(collection, [])]

    def _check(self, op: str, collection: str) -> None:
        if collection in self.fail_on or (op, collection) in self.fail_on:
            raise StorageError(f'permission denied for table "{collection}"')

    def select(self, collection, *, fields="*", equals=None, any_of=None):
        self.calls.append(("select", collection, {"equals": dict(equals or {}), "any_of": dict(any_of or {})}))
        self._check("select", collection)
        out = []
        for r in self.tables.get(collection, []):
            if not all(r.get(k) == v for k, v in (equals or {}).items()):
                continue
            if any_of and not any(r.get(k) == v for k, v in any_of.items()):
                continue
            out.append(_project(r, fields))
        return out

    def select_one(self, collection, *, id_field, identity, fields="*"):
        rows = self.select(collection, fields=fields, equals={id_field: identity})
        return rows[0] if rows else None

    def insert(self, collection, record):
        self.calls.append(("insert", collection, {"record": dict(record)}))
        self._check("insert", collection)
        pk = self.primary_keys.get(collection, "id")
        row = dict(record)
        if pk is not None and row.get(pk) is None:
            row[pk] = next(self._ids)
        self.tables[collection].append(row)
        return dict(row)

    def update(self, collection, patch, *, id_field, identity):
        self.calls.append(("update", collection, {"patch": dict(patch), "identity": identity}))
        self._check("update", collection)
        out = []
        for r in self.tables.get(collection, []):
            if r.get(id_field) == identity:
                r.update(patch)
                out.append(dict(r))
        return out

    def delete(self, collection, *, id_field, identity):
        self.calls.append(("delete", collection, {"identity": identity}))
        self._check("delete", collection)
        before = self.tables.get(collection, [])
        kept = [r for r in before if r.get(id_field) != identity]
        self.tables[collection] = kept
        return len(before) - len(kept)

    def primary_key(self, collection):
        return self.primary_keys.get(collection, "id")

    def ops(self, op: str, collection: Optional[str] = None) -> list[tuple[str, str, dict]]:
        return [c for c in self.calls if c[0] == op and (collection is None or c[1] == collection)]


def log_rows(records: InMemoryRecords, log_collection: str, **match: Any) -> list[dict]:
    return [r for r in records.rows(log_collection) if all(r.get(k) == v for k, v in match.items())]
