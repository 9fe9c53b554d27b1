from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..core.enums import ErrorKind, Role
from ..core.result import Result
from ..records.model import Actor
from ..records.service import AuditedEntityStore
from . import exporter


class ReportService:
    """Report bookkeeping for the admin and HR dashboards, plus tabular export."""

    def __init__(self, stores: Mapping[Role, AuditedEntityStore], *, clock: Callable[[], datetime] = now_local):
        self._stores = stores
        self._clock = clock

    def generate_report(self, config: Mapping[str, Any], actor: Optional[Actor] = None, *, role: Role = Role.ADMIN) -> Result:
        role = Role(role)
        name = config.get("name")
        if not name:
            return Result.failure(ErrorKind.INVALID_ARGUMENT, "Report name is required")
        email = config.get("email") or (actor.email if actor and actor.email else f"{role.value}@system")

        if role == Role.HR:
            collection = "hr_reports"
            payload = {
                "report_name": name,
                "report_type": config.get("type"),
                "generated_by": config.get("generated_by") or (actor.actor_id if actor else None),
                "file_path": config.get("file_path"),
            }
        elif role == Role.ADMIN:
            collection = "reports"
            payload = {
                "name": name,
                "type": config.get("type"),
                "format": config.get("format"),
            }
        else:
            return Result.failure(ErrorKind.INVALID_ARGUMENT, f"{role.value} cannot generate reports")

        payload.update(status="completed", email=email, report_date=self._clock())
        return self._stores[role].create(collection, payload, actor)

    def export(self, result: Result, *, fmt: str = "xlsx", columns=None, sheet_name: str = "Report") -> bytes:
        """Render a successful list result; failed results are not exportable."""
        if not result.ok:
            raise ValueError(f"Cannot export a failed result: {result.error}")
        rows = result.data or []
        if fmt == "xlsx":
            return exporter.export_excel(rows, columns=columns, sheet_name=sheet_name)
        if fmt == "csv":
            return exporter.export_csv(rows, columns=columns)
        if fmt == "pdf":
            return exporter.export_pdf(rows, columns=columns, title=sheet_name, generated_at=self._clock())
        raise ValueError(f"Unsupported export format: {fmt!r}")
