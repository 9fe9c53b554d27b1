from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.enums import Role
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import PayrollService
from .performance.service import ExecutiveService, PerformanceService
from .records.mysql_record_repository import MySQLRecordRepository
from .records.repository import RecordRepository
from .records.service import AuditedEntityStore
from .reports.service import ReportService
from .roles.profiles import ROLE_PROFILES
from .team.service import TeamService


@dataclass(frozen=True)
class Container:
    records: RecordRepository
    stores: dict[Role, AuditedEntityStore]

    payroll_service: PayrollService
    team_service: TeamService
    performance_service: PerformanceService
    executive_service: ExecutiveService
    report_service: ReportService

    def store_for(self, role: Role | str) -> AuditedEntityStore:
        return self.stores[Role(role)]


def build_stores(records: RecordRepository, *, fanout_workers: int = 4) -> dict[Role, AuditedEntityStore]:
    return {
        role: AuditedEntityStore(records, profile, fanout_workers=fanout_workers)
        for role, profile in ROLE_PROFILES.items()
    }


def build_container(
    *,
    db_config: Optional[dict] = None,
    records: Optional[RecordRepository] = None,
    fanout_workers: int = 4,
) -> Container:
    """Wire repositories and services; pass ``records`` to skip MySQL entirely."""
    if records is None:
        if db_config is None:
            raise ValueError("Either db_config or records is required")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        records = MySQLRecordRepository(conn)

    stores = build_stores(records, fanout_workers=fanout_workers)

    return Container(
        records=records,
        stores=stores,
        payroll_service=PayrollService(stores[Role.ACCOUNTANT]),
        team_service=TeamService(stores[Role.MANAGER]),
        performance_service=PerformanceService(stores[Role.HR]),
        executive_service=ExecutiveService(stores[Role.CEO]),
        report_service=ReportService(stores),
    )
