from __future__ import annotations

from datetime import date
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from cnx_payroll.models.report import PaymentReportRow

TOTAL_HEADERS = [
    "Total diárias",
    "Total empreitas",
    "Reembolso",
    "Adiantamento",
    "Total a pagar",
]


def _day_header(iso_day: str) -> str:
    """Render an ISO day key as DD/MM for column titles."""

    return date.fromisoformat(iso_day).strftime("%d/%m")


def report_days(rows: list[PaymentReportRow]) -> list[str]:
    """Collect every day that has activity for at least one worker, sorted."""

    days: set[str] = set()
    for row in rows:
        days.update(row.dias)
    return sorted(days)


def build_payment_report_workbook(
    rows: list[PaymentReportRow],
    *,
    date_from: date,
    date_to: date,
) -> Workbook:
    """Lay out the payment report on a single sheet."""

    days = report_days(rows)
    wb = Workbook()
    ws = wb.active
    ws.title = f"{date_from:%d-%m} a {date_to:%d-%m}"

    ws.append(["Funcionário", *(_day_header(d) for d in days), *TOTAL_HEADERS])
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in rows:
        day_values = []
        for day in days:
            bucket = row.dias.get(day)
            day_values.append(None if bucket is None else bucket.diaria + bucket.empreita)
        ws.append(
            [
                row.worker.nome,
                *day_values,
                row.total_diaria,
                row.total_empreita,
                row.total_reembolso,
                row.total_adiantamento,
                row.total_pagar,
            ]
        )

    money_columns = range(2, len(days) + len(TOTAL_HEADERS) + 2)
    for col_idx in money_columns:
        for (cell,) in ws.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
            cell.number_format = "#,##0.00"
    ws.column_dimensions[get_column_letter(1)].width = 32
    ws.freeze_panes = "B2"
    return wb


def write_payment_report_xlsx(
    rows: list[PaymentReportRow],
    path: Path,
    *,
    date_from: date,
    date_to: date,
) -> Path:
    """Write the payment report as a one-sheet workbook and return its path."""

    wb = build_payment_report_workbook(rows, date_from=date_from, date_to=date_to)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def payment_report_xlsx_bytes(rows: list[PaymentReportRow], *, date_from: date, date_to: date) -> bytes:
    """Serialize the payment report workbook in memory, for HTTP downloads."""

    buffer = BytesIO()
    build_payment_report_workbook(rows, date_from=date_from, date_to=date_to).save(buffer)
    return buffer.getvalue()
