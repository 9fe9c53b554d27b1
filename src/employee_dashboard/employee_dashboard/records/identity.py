from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.validators import has_value, require_identifier
from ..core.exceptions import DomainError, StorageError, ValidationError
from ..core.result import Result
from .repository import Fields, RecordRepository

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Finds an employee's own rows by employee id, falling back to email.

    Two strategies, chosen by the caller:

    - ``resolve`` prefers the primary key: when it matches, the secondary key
      is never queried, even if it would match other rows.
    - ``resolve_any`` issues one query matching either key and returns the union.
    """

    def __init__(self, records: RecordRepository, *, primary_field: str = "empid", secondary_field: str = "email"):
        self._records = records
        self._primary_field = primary_field
        self._secondary_field = secondary_field

    @property
    def primary_field(self) -> str:
        return self._primary_field

    @property
    def secondary_field(self) -> str:
        return self._secondary_field

    def resolve(
        self,
        collection: str,
        primary_key: Any = None,
        secondary_key: Optional[str] = None,
        fields: Fields = "*",
    ) -> Result:
        try:
            return Result.success(self.lookup(collection, primary_key, secondary_key, fields))
        except DomainError as exc:
            logger.warning("Resolve on %s failed: %s", collection, exc)
            return Result.from_error(exc)

    def resolve_any(
        self,
        collection: str,
        primary_key: Any = None,
        secondary_key: Optional[str] = None,
        fields: Fields = "*",
    ) -> Result:
        try:
            collection = require_identifier(collection, "collection")
            keys = {}
            if has_value(primary_key):
                keys[self._primary_field] = primary_key
            if has_value(secondary_key):
                keys[self._secondary_field] = secondary_key
            if not keys:
                raise ValidationError(f"Neither {self._primary_field} nor {self._secondary_field} provided")

            rows = self._records.select(collection, fields=fields, any_of=keys)
            return Result.success(rows, count=len(rows))
        except DomainError as exc:
            logger.warning("Resolve-any on %s failed: %s", collection, exc)
            return Result.from_error(exc)

    def lookup(self, collection: str, primary_key: Any, secondary_key: Optional[str], fields: Fields = "*") -> list[dict]:
        """Prefer-primary lookup; raises instead of returning a Result.

        An empty or failed primary query falls through to the secondary key
        when one is given; only a failed secondary query is raised.
        """
        collection = require_identifier(collection, "collection")
        use_primary = has_value(primary_key)
        use_secondary = has_value(secondary_key)
        if not use_primary and not use_secondary:
            raise ValidationError(f"Neither {self._primary_field} nor {self._secondary_field} provided")

        if use_primary:
            rows = self._select_primary(collection, primary_key, fields, fallback=use_secondary)
            if rows:
                return rows
            logger.debug("No %s rows for %s=%r", collection, self._primary_field, primary_key)

        if use_secondary:
            return self._records.select(collection, fields=fields, equals={self._secondary_field: secondary_key})
        return []

    def matching_field(self, collection: str, primary_key: Any, secondary_key: Optional[str]) -> tuple[str, Any]:
        """Which key (field, value) currently selects the employee's rows in ``collection``."""
        collection = require_identifier(collection, "collection")
        use_secondary = has_value(secondary_key)
        if has_value(primary_key):
            if not use_secondary or self._select_primary(collection, primary_key, "*", fallback=True):
                return self._primary_field, primary_key
        if use_secondary:
            return self._secondary_field, secondary_key
        raise ValidationError(f"Neither {self._primary_field} nor {self._secondary_field} provided")

    def _select_primary(self, collection: str, primary_key: Any, fields: Fields, *, fallback: bool) -> list[dict]:
        try:
            return self._records.select(collection, fields=fields, equals={self._primary_field: primary_key})
        except StorageError as exc:
            if not fallback:
                raise
            logger.warning(
                "%s lookup by %s failed, trying %s: %s", collection, self._primary_field, self._secondary_field, exc
            )
            return []
