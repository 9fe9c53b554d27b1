from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from ..core.enums import Role
from ..records.model import Actor

ScopeFn = Callable[[str, Optional[Actor]], Mapping[str, Any]]


@dataclass(frozen=True)
class RoleProfile:
    """What distinguishes one role's store from another's.

    ``scope`` returns extra equality filters for list queries (may be empty).
    """

    role: Role
    log_collection: str
    actor_column: str = "actor_id"
    scope: Optional[ScopeFn] = None

    @property
    def fallback_email(self) -> str:
        return f"{self.role.value}@system"

    def scope_filters(self, collection: str, actor: Optional[Actor]) -> dict:
        if self.scope is None:
            return {}
        return dict(self.scope(collection, actor) or {})


def manager_scope(collection: str, actor: Optional[Actor]) -> Mapping[str, Any]:
    """Managers only see employees reporting to them."""
    if collection == "employee" and actor is not None:
        return {"managerid": actor.actor_id}
    return {}


ROLE_PROFILES: dict[Role, RoleProfile] = {
    Role.EMPLOYEE: RoleProfile(Role.EMPLOYEE, log_collection="audit_logs"),
    Role.ADMIN: RoleProfile(Role.ADMIN, log_collection="audit_logs"),
    Role.HR: RoleProfile(Role.HR, log_collection="audit_logs"),
    Role.ACCOUNTANT: RoleProfile(Role.ACCOUNTANT, log_collection="accountant_operations", actor_column="accountant_id"),
    Role.MANAGER: RoleProfile(
        Role.MANAGER,
        log_collection="manager_operations",
        actor_column="manager_id",
        scope=manager_scope,
    ),
    Role.CEO: RoleProfile(Role.CEO, log_collection="md_operations", actor_column="md_id"),
}


def get_profile(role: Role | str) -> RoleProfile:
    return ROLE_PROFILES[Role(role)]
