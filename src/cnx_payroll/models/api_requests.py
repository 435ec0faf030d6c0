from __future__ import annotations

from datetime import date
from typing import Annotated

from pydantic import Field, field_validator

from cnx_payroll.models.common import StrictModel

MISSING_BOUNDS_MESSAGE = "Informe inicio e fim no formato YYYY-MM-DD"


class PaymentReportQuery(StrictModel):
    """Inclusive date window for the payment report."""

    inicio: Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]
    fim: Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]

    @field_validator("inicio", "fim", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("inicio", "fim")
    @classmethod
    def _calendar_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value

    @property
    def date_from(self) -> date:
        return date.fromisoformat(self.inicio)

    @property
    def date_to(self) -> date:
        return date.fromisoformat(self.fim)
