from __future__ import annotations

from pydantic import ConfigDict, Field

from cnx_payroll.models.common import StrictModel
from cnx_payroll.models.records import Worker


class DayTotals(StrictModel):
    """Amounts paid to one worker on one calendar day."""

    diaria: float = 0.0
    empreita: float = 0.0


class PaymentReportRow(StrictModel):
    """One worker's aggregated totals and day-by-day breakdown.

    The worker is exposed as `funcionario` on the wire.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    worker: Worker = Field(alias="funcionario")
    dias: dict[str, DayTotals] = Field(default_factory=dict)
    total_diaria: float = 0.0
    total_empreita: float = 0.0
    total_reembolso: float = 0.0
    total_adiantamento: float = 0.0
    total_pagar: float = 0.0
