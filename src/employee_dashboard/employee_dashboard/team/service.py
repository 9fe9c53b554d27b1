from __future__ import annotations

from typing import Any, Optional

from ..common.validators import require_identity
from ..core.enums import ErrorKind, LeaveStatus, OperationKind
from ..core.exceptions import ValidationError
from ..core.result import Result
from ..records.model import Actor
from ..records.service import AuditedEntityStore


class TeamService:
    def __init__(self, store: AuditedEntityStore):
        self._store = store

    def team_members(self, manager_id: Any) -> Result:
        try:
            require_identity(manager_id, "manager_id")
        except ValidationError as exc:
            return Result.from_error(exc)
        return self._store.list("employee", "*", {"status": "Active"}, actor=Actor(str(manager_id)))

    def process_leave_request(
        self,
        leave_id: Any,
        status: LeaveStatus | str,
        remarks: Optional[str],
        actor: Actor,
    ) -> Result:
        """Approve or reject a leave request and record the decision in the manager log."""
        try:
            decision = LeaveStatus(str(status).lower())
        except ValueError:
            return Result.failure(ErrorKind.INVALID_ARGUMENT, f"Invalid leave status: {status!r}")

        patch = {
            "leavestatus": decision.value,
            "remarks": remarks,
            "approvedby": actor.actor_id,
        }
        result = self._store.update("employeeleave", leave_id, patch, actor, id_field="leaveid")
        if result.ok:
            self._store.log_operation(
                OperationKind.LEAVE_PROCESS,
                "employeeleave",
                leave_id,
                actor,
                new_data={"action": decision.value, "remarks": remarks},
            )
        return result
