from __future__ import annotations

import json

from src.employee_dashboard.employee_dashboard.container import build_container
from src.employee_dashboard.employee_dashboard.core.enums import ErrorKind
from src.employee_dashboard.employee_dashboard.records.model import Actor
from tests.fakes import InMemoryRecords, log_rows


def _setup():
    records = InMemoryRecords(primary_keys={"salary": "salaryid", "employee": "empid", "financialreports": "reportid"})
    container = build_container(records=records, fanout_workers=2)
    return records, container.payroll_service


def test_process_salary_syncs_employee_basic_salary():
    records, payroll = _setup()
    records.seed("employee", {"empid": "E1", "basicsalary": 1000})

    result = payroll.process_salary(
        {"empid": "E1", "basicsalary": 1500, "totalsalary": 1700, "salarydate": "2026-01-31"},
        Actor("ACC1"),
    )

    assert result.ok
    assert records.rows("employee")[0]["basicsalary"] == 1500
    entries = log_rows(records, "accountant_operations", accountant_id="ACC1")
    assert [e["operation"] for e in entries] == ["CREATE", "UPDATE"]
    assert json.loads(entries[1]["old_data"])["basicsalary"] == 1000


def test_process_salary_failure_leaves_employee_untouched():
    records, payroll = _setup()
    records.seed("employee", {"empid": "E1", "basicsalary": 1000})
    records.fail_on.add(("insert", "salary"))

    result = payroll.process_salary({"empid": "E1", "basicsalary": 1500, "totalsalary": 1500}, Actor("ACC1"))

    assert not result.ok
    assert records.rows("employee")[0]["basicsalary"] == 1000


def test_contribution_kind_selects_collection():
    records, payroll = _setup()

    epf = payroll.process_contribution("epf", {"empid": "E1", "totalcontribution": 300, "month": "2026-01"})
    etf = payroll.process_contribution("ETF", {"empid": "E1", "employercontribution": 90, "month": "2026-01"})

    assert epf.ok and etf.ok
    assert len(records.rows("epf_contributions")) == 1
    assert len(records.rows("etf_contributions")) == 1


def test_unknown_contribution_kind_is_rejected():
    records, payroll = _setup()

    result = payroll.process_contribution("PENSION", {"empid": "E1"})

    assert result.error_kind == ErrorKind.INVALID_ARGUMENT
    assert records.calls == []


def test_financial_report_is_stored_and_logged():
    records, payroll = _setup()

    result = payroll.generate_financial_report({"quarterenddate": "2026-03-31", "netprofit": 10}, Actor("ACC1"))

    assert result.ok
    assert log_rows(records, "accountant_operations", table_name="financialreports", record_id=str(result.data["reportid"]))


def test_payroll_summary_totals_for_month():
    records, payroll = _setup()
    records.seed(
        "salary",
        {"salaryid": 1, "month": "2026-01", "totalsalary": 1000},
        {"salaryid": 2, "month": "2026-01", "totalsalary": 2000},
        {"salaryid": 3, "month": "2026-02", "totalsalary": 9999},
    )
    records.seed("bonus", {"month": "2026-01", "amount": 150}, {"month": "2026-01", "amount": None})
    records.seed("ot", {"month": "2026-01", "amount": "75.5"})
    records.seed("epf_contributions", {"month": "2026-01", "totalcontribution": 300})
    records.seed("etf_contributions", {"month": "2026-01", "employercontribution": 90})

    result = payroll.payroll_summary("2026-01")

    assert result.ok
    assert result.data == {
        "total_salaries": 3000.0,
        "total_bonuses": 150.0,
        "total_overtime": 75.5,
        "total_epf": 300.0,
        "total_etf": 90.0,
        "employee_count": 2,
    }


def test_payroll_summary_fails_when_any_collection_fails():
    records, payroll = _setup()
    records.fail_on.add("ot")

    result = payroll.payroll_summary("2026-01")

    assert not result.ok
    assert result.error_kind == ErrorKind.STORAGE_ERROR
