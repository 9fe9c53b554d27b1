from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Mapping, Optional

from ..common.datetime_utils import today_local
from ..common.validators import require_identity
from ..core.enums import ErrorKind, OperationKind
from ..core.exceptions import AuditLogError, ValidationError
from ..core.result import Result
from ..payroll.service import sum_column
from ..records.model import Actor
from ..records.service import AuditedEntityStore

logger = logging.getLogger(__name__)

RECENT_REPORTS = 5


def _average(rows: list, column: str) -> float:
    if not rows:
        return 0.0
    return sum_column(rows, column) / len(rows)


def _first_failure(results: Mapping[str, Result]) -> Optional[Result]:
    for r in results.values():
        if not r.ok:
            return r
    return None


class PerformanceService:
    """HR view of employee KPIs."""

    def __init__(self, store: AuditedEntityStore):
        self._store = store

    def update_employee_kpi(self, empid: Any, kpi: Mapping[str, Any], actor: Optional[Actor] = None) -> Result:
        """Record a KPI value and mirror it onto ``employee.kpiscore``."""
        try:
            require_identity(empid, "empid")
            if kpi.get("kpivalue") is None:
                raise ValidationError("kpivalue is required")
        except ValidationError as exc:
            return Result.from_error(exc)

        today = today_local()
        created = self._store.create(
            "kpi",
            {
                "empid": empid,
                "kpivalue": kpi["kpivalue"],
                "calculatedate": kpi.get("calculatedate") or today.isoformat(),
                "kpiyear": kpi.get("kpiyear") or today.year,
                "email": kpi.get("email"),
            },
            actor,
        )
        if not created.ok:
            return created

        employee = self._store.update("employee", empid, {"kpiscore": kpi["kpivalue"]}, actor, id_field="empid")
        if not employee.ok:
            return employee
        return Result.success({"kpi": created.data, "employee": employee.data})

    def employee_performance(self, empid: Any) -> Result:
        try:
            require_identity(empid, "empid")
        except ValidationError as exc:
            return Result.from_error(exc)

        results = self._store.list_many(
            {
                "kpi": {"empid": empid},
                "attendance": {"empid": empid},
                "employee_feedback": {"empid": empid},
            }
        )
        failed = _first_failure(results)
        if failed:
            return failed
        return Result.success(
            {
                "kpi": results["kpi"].data,
                "attendance": results["attendance"].data,
                "feedback": results["employee_feedback"].data,
            }
        )


class ExecutiveService:
    """CEO dashboards: company-wide aggregates and strategic approvals."""

    def __init__(self, store: AuditedEntityStore):
        self._store = store

    def company_overview(self) -> Result:
        results = self._store.list_many(
            {
                "employee": None,
                "departments": None,
                "financialreports": None,
                "strategic_goals": None,
            }
        )
        failed = _first_failure(results)
        if failed:
            return failed

        employees = results["employee"].data or []
        breakdown = Counter(e.get("department") for e in employees)
        return Result.success(
            {
                "total_employees": len(employees),
                "total_departments": len(results["departments"].data or []),
                "active_employees": sum(1 for e in employees if e.get("status") == "Active"),
                "recent_financial_reports": (results["financialreports"].data or [])[-RECENT_REPORTS:],
                "strategic_goals": results["strategic_goals"].data or [],
                "department_breakdown": dict(breakdown),
            }
        )

    def performance_metrics(self) -> Result:
        results = self._store.list_many(
            {
                "kpi": None,
                "attendance": None,
                "financialreports": None,
                "employee_feedback": None,
            }
        )
        failed = _first_failure(results)
        if failed:
            return failed

        attendance = results["attendance"].data or []
        reports = results["financialreports"].data or []
        present = sum(1 for a in attendance if a.get("status") == "present")
        return Result.success(
            {
                "avg_kpi": _average(results["kpi"].data or [], "kpivalue"),
                "attendance_rate": (present / len(attendance) * 100) if attendance else 0.0,
                "recent_profit": float(reports[-1].get("netprofit") or 0) if reports else 0.0,
                "avg_feedback_rating": _average(results["employee_feedback"].data or [], "rating"),
                "total_revenue": sum_column(reports, "totalrevenue"),
            }
        )

    def approve_strategic_decision(self, decision: Mapping[str, Any], actor: Actor) -> Result:
        """The log entry is the approval itself, so a failed write is reported."""
        try:
            decision_id = require_identity(decision.get("decision_id"), "decision_id")
        except ValidationError as exc:
            return Result.from_error(exc)

        entry = self._store.build_entry(
            OperationKind.STRATEGIC_APPROVAL,
            "strategic_decisions",
            decision_id,
            actor,
            new_data={
                "decision_type": decision.get("type"),
                "description": decision.get("description"),
                "impact": decision.get("impact"),
                "approved_data": dict(decision),
            },
        )
        try:
            row = self._store.audit.append(entry)
        except AuditLogError as exc:
            logger.warning("Strategic approval %s not recorded: %s", decision_id, exc)
            return Result.failure(ErrorKind.STORAGE_ERROR, str(exc))
        return Result.success(row, count=1)
