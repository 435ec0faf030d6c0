"""Public model exports for the payroll API."""

from cnx_payroll.models.api_requests import PaymentReportQuery
from cnx_payroll.models.api_responses import HealthResponse, PaymentReportResponse
from cnx_payroll.models.common import ErrorResponse
from cnx_payroll.models.enums import PayrollTable, Situacao
from cnx_payroll.models.records import (
    AdjustmentEntry,
    DailyEntry,
    PieceWorkEntry,
    Principal,
    Worker,
)
from cnx_payroll.models.report import DayTotals, PaymentReportRow

__all__ = [
    "AdjustmentEntry",
    "DailyEntry",
    "DayTotals",
    "ErrorResponse",
    "HealthResponse",
    "PaymentReportQuery",
    "PaymentReportResponse",
    "PaymentReportRow",
    "PayrollTable",
    "PieceWorkEntry",
    "Principal",
    "Situacao",
    "Worker",
]
