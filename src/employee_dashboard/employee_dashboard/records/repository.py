from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence, Union

Fields = Union[str, Sequence[str]]


class RecordRepository(Protocol):
    """Schema-agnostic access to named collections.

    Implementations raise ``StorageError`` with the backend's message on any failure.
    """

    def select(
        self,
        collection: str,
        *,
        fields: Fields = "*",
        equals: Optional[Mapping[str, Any]] = None,
        any_of: Optional[Mapping[str, Any]] = None,
    ) -> list[dict]:
        """Rows matching every ``equals`` pair and at least one ``any_of`` pair."""

        raise NotImplementedError

    def select_one(self, collection: str, *, id_field: str, identity: Any, fields: Fields = "*") -> Optional[dict]:
        raise NotImplementedError

    def insert(self, collection: str, record: Mapping[str, Any]) -> dict:
        """Insert one row and return it as stored (generated identity and defaults included)."""

        raise NotImplementedError

    def update(self, collection: str, patch: Mapping[str, Any], *, id_field: str, identity: Any) -> list[dict]:
        """Apply ``patch`` to matching rows and return them after the write."""

        raise NotImplementedError

    def delete(self, collection: str, *, id_field: str, identity: Any) -> int:
        """Delete matching rows and return how many were removed."""

        raise NotImplementedError

    def primary_key(self, collection: str) -> Optional[str]:
        """Name of the collection's primary-key column, ``None`` if it has none."""

        raise NotImplementedError
