from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from ..core.enums import ContributionKind, ErrorKind
from ..core.result import Result
from ..records.model import Actor
from ..records.service import AuditedEntityStore

logger = logging.getLogger(__name__)

# collection -> column summed into the payroll summary
SUMMARY_COLUMNS: dict[str, str] = {
    "salary": "totalsalary",
    "bonus": "amount",
    "ot": "amount",
    "epf_contributions": "totalcontribution",
    "etf_contributions": "employercontribution",
}

CONTRIBUTION_COLLECTIONS: dict[ContributionKind, str] = {
    ContributionKind.EPF: "epf_contributions",
    ContributionKind.ETF: "etf_contributions",
}


@dataclass(frozen=True)
class PayrollSummary:
    total_salaries: float
    total_bonuses: float
    total_overtime: float
    total_epf: float
    total_etf: float
    employee_count: int


def sum_column(rows: Optional[list], column: str) -> float:
    total = 0.0
    for r in rows or []:
        value = r.get(column)
        if value is None or value == "":
            continue
        total += float(value)
    return total


class PayrollService:
    """Accountant workflows built on the accountant's audited store."""

    def __init__(self, store: AuditedEntityStore):
        self._store = store

    def process_salary(self, salary: Mapping[str, Any], actor: Optional[Actor] = None) -> Result:
        """Record a salary row and carry its basic salary onto the employee."""
        result = self._store.create("salary", salary, actor, id_field="salaryid")
        if not result.ok:
            return result

        empid = salary.get("empid")
        if empid is not None and salary.get("basicsalary") is not None:
            synced = self._store.update(
                "employee", empid, {"basicsalary": salary["basicsalary"]}, actor, id_field="empid"
            )
            if not synced.ok:
                logger.warning("Salary stored but employee %s basicsalary not synced: %s", empid, synced.error)
        return result

    def process_contribution(self, kind: ContributionKind | str, data: Mapping[str, Any], actor: Optional[Actor] = None) -> Result:
        try:
            collection = CONTRIBUTION_COLLECTIONS[ContributionKind(str(kind).upper())]
        except (KeyError, ValueError):
            return Result.failure(ErrorKind.INVALID_ARGUMENT, f"Invalid contribution type: {kind!r}")
        return self._store.create(collection, data, actor)

    def generate_financial_report(self, quarter: Mapping[str, Any], actor: Optional[Actor] = None) -> Result:
        return self._store.create("financialreports", quarter, actor, id_field="reportid")

    def payroll_summary(self, month: Any = None) -> Result:
        results = self._store.list_many({name: {"month": month} for name in SUMMARY_COLUMNS})
        failed = [r for r in results.values() if not r.ok]
        if failed:
            return failed[0]

        rows = {name: r.data for name, r in results.items()}
        summary = PayrollSummary(
            total_salaries=sum_column(rows["salary"], SUMMARY_COLUMNS["salary"]),
            total_bonuses=sum_column(rows["bonus"], SUMMARY_COLUMNS["bonus"]),
            total_overtime=sum_column(rows["ot"], SUMMARY_COLUMNS["ot"]),
            total_epf=sum_column(rows["epf_contributions"], SUMMARY_COLUMNS["epf_contributions"]),
            total_etf=sum_column(rows["etf_contributions"], SUMMARY_COLUMNS["etf_contributions"]),
            employee_count=len(rows["salary"] or []),
        )
        return Result.success(asdict(summary))
