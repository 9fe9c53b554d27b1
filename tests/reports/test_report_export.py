from __future__ import annotations

import io
from datetime import datetime

import pandas as pd
import pytest

from src.employee_dashboard.employee_dashboard.container import build_container
from src.employee_dashboard.employee_dashboard.core.enums import ErrorKind, Role
from src.employee_dashboard.employee_dashboard.core.result import Result
from src.employee_dashboard.employee_dashboard.records.model import Actor
from src.employee_dashboard.employee_dashboard.reports import exporter
from src.employee_dashboard.employee_dashboard.reports.service import ReportService
from tests.fakes import InMemoryRecords, log_rows

ROWS = [
    {"empid": "E1", "full_name": "Nimal", "basicsalary": 1000},
    {"empid": "E2", "full_name": "Kamala", "basicsalary": 1250, "kpiscore": 70},
]


def test_excel_export_round_trips_through_pandas():
    payload = exporter.export_excel(ROWS, sheet_name="employee")

    df = pd.read_excel(io.BytesIO(payload), sheet_name="employee")
    assert list(df["empid"]) == ["E1", "E2"]
    assert list(df["basicsalary"]) == [1000, 1250]


def test_export_columns_pick_and_order_output():
    payload = exporter.export_csv(ROWS, columns=["full_name", "empid", "missing"])

    lines = payload.decode("utf-8").splitlines()
    assert lines[0] == "full_name,empid,missing"
    assert lines[1] == "Nimal,E1,"


def test_export_of_empty_rows_still_writes_header_only_sheet():
    payload = exporter.export_excel([], columns=["empid"])

    df = pd.read_excel(io.BytesIO(payload))
    assert list(df.columns) == ["empid"]
    assert df.empty


def test_service_refuses_failed_results():
    service = ReportService({})

    with pytest.raises(ValueError):
        service.export(Result.failure(ErrorKind.STORAGE_ERROR, "boom"))


def test_service_rejects_unknown_format():
    service = ReportService({})

    with pytest.raises(ValueError):
        service.export(Result.success(ROWS), fmt="docx")


def test_generate_admin_report_is_audited():
    records = InMemoryRecords()
    container = build_container(records=records)
    service = ReportService(container.stores, clock=lambda: datetime(2026, 2, 1, 8, 0))

    result = service.generate_report({"name": "Headcount", "type": "employee", "format": "xlsx"}, Actor("AD1"))

    assert result.ok
    [report] = records.rows("reports")
    assert report["status"] == "completed"
    assert report["report_date"] == datetime(2026, 2, 1, 8, 0)
    assert report["email"] == "admin@system"
    assert log_rows(records, "audit_logs", table_name="reports", actor_id="AD1")


def test_generate_hr_report_uses_hr_collection():
    records = InMemoryRecords()
    container = build_container(records=records)

    result = container.report_service.generate_report(
        {"name": "Leave usage", "type": "leave"}, Actor("HR1", "hr1@corp.com"), role=Role.HR
    )

    assert result.ok
    [report] = records.rows("hr_reports")
    assert report["report_name"] == "Leave usage"
    assert report["generated_by"] == "HR1"
    assert report["email"] == "hr1@corp.com"


def test_generate_report_requires_name_and_reporting_role():
    container = build_container(records=InMemoryRecords())

    assert container.report_service.generate_report({}).error_kind == ErrorKind.INVALID_ARGUMENT
    assert container.report_service.generate_report({"name": "x"}, role=Role.CEO).error_kind == ErrorKind.INVALID_ARGUMENT


def test_pdf_export_renders_table_document():
    payload = exporter.export_pdf(ROWS, columns=["empid", "full_name"], title="employee", generated_at=datetime(2026, 2, 1, 8, 0))

    assert payload.startswith(b"%PDF")
    assert payload.rstrip().endswith(b"%%EOF")


def test_pdf_export_of_empty_rows_is_still_a_document():
    empty = exporter.export_pdf([], title="employee", generated_at=datetime(2026, 2, 1, 8, 0))
    full = exporter.export_pdf(ROWS * 20, title="employee", generated_at=datetime(2026, 2, 1, 8, 0))

    assert empty.startswith(b"%PDF")
    assert len(empty) < len(full)


def test_pdf_cells_are_readable():
    assert exporter.pdf_cell(None) == "-"
    assert exporter.pdf_cell(True) == "Yes"
    assert exporter.pdf_cell(datetime(2026, 2, 1, 8, 0)) == "2026-02-01"
    assert exporter.pdf_cell(12.5) == "12.5"


def test_service_exports_pdf():
    service = ReportService({}, clock=lambda: datetime(2026, 2, 1, 8, 0))

    assert service.export(Result.success(ROWS), fmt="pdf", sheet_name="employee").startswith(b"%PDF")
