from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_identifier, require_identity
from ..core.enums import OperationKind, Role
from ..core.exceptions import DomainError, ValidationError
from ..core.result import Result
from ..roles.profiles import RoleProfile
from .audit import AuditLogWriter
from .identity import IdentityResolver
from .model import SYSTEM_ACTOR_ID, Actor, OperationLogEntry
from .repository import Fields, RecordRepository

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "updated_at")


class AuditedEntityStore:
    """CRUD over named collections for one role, with an operations log.

    Every public method returns a ``Result``; invalid arguments and storage
    failures are captured into it. Each successful mutation appends one entry
    to the role's log collection on a best-effort basis (see ``AuditLogWriter``).
    """

    def __init__(
        self,
        records: RecordRepository,
        profile: RoleProfile,
        *,
        clock: Callable[[], datetime] = now_local,
        resolver: Optional[IdentityResolver] = None,
        fanout_workers: int = 4,
    ):
        self._records = records
        self._profile = profile
        self._clock = clock
        self._resolver = resolver or IdentityResolver(records)
        self._audit = AuditLogWriter(records, profile.log_collection, actor_column=profile.actor_column)
        self._fanout_workers = max(1, int(fanout_workers))

    @property
    def role(self) -> Role:
        return self._profile.role

    @property
    def profile(self) -> RoleProfile:
        return self._profile

    @property
    def audit(self) -> AuditLogWriter:
        return self._audit

    # -------- Reads --------
    def list(
        self,
        collection: str,
        fields: Fields = "*",
        filters: Optional[Mapping[str, Any]] = None,
        *,
        actor: Optional[Actor] = None,
    ) -> Result:
        try:
            collection = require_identifier(collection, "collection")
            equals = {k: v for k, v in (filters or {}).items() if v is not None}
            equals.update(self._profile.scope_filters(collection, actor))
            for field in equals:
                require_identifier(field, "filter field")

            rows = self._records.select(collection, fields=fields, equals=equals)
            logger.debug("%s list %s %r -> %d rows", self.role.value, collection, equals, len(rows))
            return Result.success(rows, count=len(rows))
        except DomainError as exc:
            logger.warning("%s list %s failed: %s", self.role.value, collection, exc)
            return Result.from_error(exc)

    def list_many(
        self,
        queries: Mapping[str, Optional[Mapping[str, Any]]],
        *,
        fields: Fields = "*",
        actor: Optional[Actor] = None,
    ) -> dict[str, Result]:
        """Run independent ``list`` calls concurrently, keyed by collection."""
        if not queries:
            return {}
        with ThreadPoolExecutor(max_workers=min(self._fanout_workers, len(queries))) as executor:
            futures = {
                name: executor.submit(self.list, name, fields, filters, actor=actor)
                for name, filters in queries.items()
            }
            return {name: future.result() for name, future in futures.items()}

    def get(self, collection: str, identity: Any, *, id_field: str = "id", fields: Fields = "*") -> Result:
        try:
            collection = require_identifier(collection, "collection")
            id_field = require_identifier(id_field, "id_field")
            require_identity(identity, id_field)
            row = self._records.select_one(collection, id_field=id_field, identity=identity, fields=fields)
            return Result.success(row, count=0 if row is None else 1)
        except DomainError as exc:
            logger.warning("%s get %s #%s failed: %s", self.role.value, collection, identity, exc)
            return Result.from_error(exc)

    def resolve(self, collection: str, primary_key: Any = None, secondary_key: Optional[str] = None, fields: Fields = "*") -> Result:
        return self._resolver.resolve(collection, primary_key, secondary_key, fields)

    def resolve_any(self, collection: str, primary_key: Any = None, secondary_key: Optional[str] = None, fields: Fields = "*") -> Result:
        return self._resolver.resolve_any(collection, primary_key, secondary_key, fields)

    # -------- Mutations --------
    def create(
        self,
        collection: str,
        payload: Mapping[str, Any],
        actor: Optional[Actor] = None,
        *,
        id_field: Optional[str] = None,
    ) -> Result:
        """Insert one row; ``id_field`` defaults to the collection's primary key."""
        try:
            collection = require_identifier(collection, "collection")
            if id_field is None:
                id_field = self._records.primary_key(collection)
            else:
                id_field = require_identifier(id_field, "id_field")
            now = self._clock()
            record = {**dict(payload or {}), "created_at": now, "updated_at": now}

            row = self._records.insert(collection, record)
        except DomainError as exc:
            logger.warning("%s create on %s failed: %s", self.role.value, collection, exc)
            return Result.from_error(exc)

        record_id = row.get(id_field) if id_field else None
        logger.info("%s created %s #%s", self.role.value, collection, record_id)
        self.log_operation(
            OperationKind.CREATE,
            collection,
            record_id,
            actor,
            new_data=_without_timestamps(payload),
        )
        return Result.success(row, count=1)

    def update(
        self,
        collection: str,
        identity: Any,
        payload: Mapping[str, Any],
        actor: Optional[Actor] = None,
        *,
        id_field: str = "id",
    ) -> Result:
        """Patch rows where ``id_field == identity``.

        Zero matched rows is still a success; ``Result.count`` tells the caller.
        """
        try:
            collection = require_identifier(collection, "collection")
            id_field = require_identifier(id_field, "id_field")
            require_identity(identity, id_field)
            patch = dict(payload or {})
            if id_field in patch:
                if str(patch[id_field]) != str(identity):
                    raise ValidationError(f"{id_field} cannot be changed")
                del patch[id_field]

            old_data = self._snapshot(collection, id_field, identity)
            patch["updated_at"] = self._clock()
            rows = self._records.update(collection, patch, id_field=id_field, identity=identity)
        except DomainError as exc:
            logger.warning("%s update %s #%s failed: %s", self.role.value, collection, identity, exc)
            return Result.from_error(exc)

        if not rows:
            logger.info("%s update %s #%s matched no rows", self.role.value, collection, identity)
        self.log_operation(
            OperationKind.UPDATE,
            collection,
            identity,
            actor,
            old_data=old_data,
            new_data=_without_timestamps(payload),
        )
        return Result.success(rows, count=len(rows))

    def delete(
        self,
        collection: str,
        identity: Any,
        actor: Optional[Actor] = None,
        *,
        id_field: str = "id",
    ) -> Result:
        try:
            collection = require_identifier(collection, "collection")
            id_field = require_identifier(id_field, "id_field")
            require_identity(identity, id_field)

            old_data = self._snapshot(collection, id_field, identity)
            deleted = self._records.delete(collection, id_field=id_field, identity=identity)
        except DomainError as exc:
            logger.warning("%s delete %s #%s failed: %s", self.role.value, collection, identity, exc)
            return Result.from_error(exc)

        logger.info("%s deleted %s #%s (%d rows)", self.role.value, collection, identity, deleted)
        self.log_operation(OperationKind.DELETE, collection, identity, actor, old_data=old_data)
        return Result.success(None, count=deleted)

    def update_own(
        self,
        collection: str,
        payload: Mapping[str, Any],
        *,
        primary_key: Any = None,
        secondary_key: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> Result:
        """Update an employee's own rows, keyed by employee id or, failing that, email."""
        try:
            field, value = self._resolver.matching_field(collection, primary_key, secondary_key)
        except DomainError as exc:
            return Result.from_error(exc)
        return self.update(collection, value, payload, actor, id_field=field)

    def delete_own(
        self,
        collection: str,
        *,
        primary_key: Any = None,
        secondary_key: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> Result:
        try:
            field, value = self._resolver.matching_field(collection, primary_key, secondary_key)
        except DomainError as exc:
            return Result.from_error(exc)
        return self.delete(collection, value, actor, id_field=field)

    # -------- Operations log --------
    def build_entry(
        self,
        kind: OperationKind,
        collection: str,
        record_id: Any,
        actor: Optional[Actor],
        *,
        old_data: Optional[dict] = None,
        new_data: Optional[dict] = None,
    ) -> OperationLogEntry:
        return OperationLogEntry(
            operation=kind,
            table_name=collection,
            record_id=record_id,
            actor_id=actor.actor_id if actor else SYSTEM_ACTOR_ID,
            email=(actor.email if actor and actor.email else self._profile.fallback_email),
            operation_time=self._clock(),
            old_data=old_data,
            new_data=new_data,
        )

    def log_operation(
        self,
        kind: OperationKind,
        collection: str,
        record_id: Any,
        actor: Optional[Actor],
        *,
        old_data: Optional[dict] = None,
        new_data: Optional[dict] = None,
    ) -> None:
        """Fire-and-forget append; failures never reach the caller."""
        entry = self.build_entry(kind, collection, record_id, actor, old_data=old_data, new_data=new_data)
        self._audit.append_best_effort(entry)

    def _snapshot(self, collection: str, id_field: str, identity: Any) -> Optional[dict]:
        # Audit "before" image; a failed or ambiguous read leaves it empty.
        try:
            rows = self._records.select(collection, equals={id_field: identity})
        except DomainError as exc:
            logger.warning("Could not read %s #%s before write: %s", collection, identity, exc)
            return None
        if len(rows) != 1:
            return None
        return dict(rows[0])


def _without_timestamps(payload: Optional[Mapping[str, Any]]) -> dict:
    return {k: v for k, v in dict(payload or {}).items() if k not in TIMESTAMP_FIELDS}
