from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import json_default
from ..core.enums import OperationKind

SYSTEM_ACTOR_ID = "system"


@dataclass(frozen=True)
class Actor:
    """Whoever performs a mutation. Supplied by the caller, never checked against a session."""

    actor_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class OperationLogEntry:
    """One append-only audit row written after a successful mutation."""

    operation: OperationKind
    table_name: str
    record_id: Any
    actor_id: str
    email: str
    operation_time: datetime
    old_data: Optional[dict] = None
    new_data: Optional[dict] = None

    def to_row(self, *, actor_column: str = "actor_id") -> dict:
        return {
            "operation": self.operation.value,
            "table_name": self.table_name,
            "record_id": None if self.record_id is None else str(self.record_id),
            actor_column: self.actor_id,
            "email": self.email,
            "old_data": _dump(self.old_data),
            "new_data": _dump(self.new_data),
            "operation_time": self.operation_time,
        }


def _dump(snapshot: Optional[dict]) -> Optional[str]:
    if snapshot is None:
        return None
    return json.dumps(snapshot, default=json_default, sort_keys=True)
