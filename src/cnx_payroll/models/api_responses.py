from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from cnx_payroll.models.common import StrictModel
from cnx_payroll.models.report import PaymentReportRow


class HealthResponse(StrictModel):
    """Liveness payload."""

    ok: Literal[True] = True
    name: str = "CNX API"
    time: datetime


class PaymentReportResponse(StrictModel):
    """Public envelope for the payment report route."""

    ok: Literal[True] = True
    data: list[PaymentReportRow] = Field(default_factory=list)
