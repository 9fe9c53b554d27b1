from __future__ import annotations

import io
from datetime import date, datetime
from typing import Any, Optional, Sequence

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import now_local

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIMETYPE = "application/pdf"

EMPTY_REPORT_TEXT = "No data available for report"


def rows_to_frame(rows: Sequence[dict], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Tabulate rows; ``columns`` picks and orders the output, missing cells stay empty."""
    df = pd.DataFrame(list(rows or []))
    if columns:
        df = df.reindex(columns=list(columns))
    return df


def export_excel(rows: Sequence[dict], *, columns: Optional[Sequence[str]] = None, sheet_name: str = "Report") -> bytes:
    df = rows_to_frame(rows, columns)
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return out.getvalue()


def export_csv(rows: Sequence[dict], *, columns: Optional[Sequence[str]] = None) -> bytes:
    return rows_to_frame(rows, columns).to_csv(index=False).encode("utf-8")


def pdf_cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def export_pdf(
    rows: Sequence[dict],
    *,
    columns: Optional[Sequence[str]] = None,
    title: str = "Report",
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Title, generation time and record count, then one table of ``columns``.

    Without rows the table is replaced by a short notice.
    """
    rows = list(rows or [])
    generated_at = generated_at or now_local()

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=12 * mm,
        leftMargin=12 * mm,
        topMargin=15 * mm,
        bottomMargin=12 * mm,
        title=title,
    )
    styles = getSampleStyleSheet()

    elements = [
        Paragraph(f"{title} Report", styles["Heading1"]),
        Paragraph(f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}", styles["Normal"]),
        Paragraph(f"Total Records: {len(rows)}", styles["Normal"]),
        Spacer(1, 6 * mm),
    ]

    if not rows:
        elements.append(Paragraph(EMPTY_REPORT_TEXT, styles["Normal"]))
    else:
        headers = list(columns) if columns else list(rows[0].keys())
        data = [headers] + [[pdf_cell(r.get(h)) for h in headers] for r in rows]
        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2980b9")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f5f5")]),
                ]
            )
        )
        elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
