"""Payment report aggregation over pre-fetched roster and fact rows."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from cnx_payroll.models.records import AdjustmentEntry, DailyEntry, PieceWorkEntry, Worker
from cnx_payroll.models.report import DayTotals, PaymentReportRow

DEFAULT_QTD = 1.0
DEFAULT_AMOUNT = 0.0


def _finite_or(value: float | None, default: float) -> float:
    """Return `value` when it is a finite number, else `default`."""

    if value is None or not math.isfinite(value):
        return default
    return float(value)


@dataclass
class _WorkerAccumulator:
    """Running totals for one worker within a single aggregation call."""

    dias: dict[str, DayTotals] = field(default_factory=dict)
    total_diaria: float = 0.0
    total_empreita: float = 0.0
    total_reembolso: float = 0.0
    total_adiantamento: float = 0.0

    def day(self, key: str) -> DayTotals:
        bucket = self.dias.get(key)
        if bucket is None:
            bucket = self.dias[key] = DayTotals()
        return bucket


def aggregate(
    roster: Sequence[Worker],
    daily_entries: Iterable[DailyEntry],
    piece_work: Iterable[PieceWorkEntry],
    adjustments: Iterable[AdjustmentEntry],
) -> list[PaymentReportRow]:
    """Build one report row per roster worker, in roster order.

    Fact rows must already be scoped to the roster and the date window.
    Rows whose `funcionario_id` is not in the roster are ignored. Missing or
    non-finite quantities count as 1 and missing monetary amounts as 0.
    Adjustments only feed the worker totals, never a day bucket.
    """

    if not roster:
        return []

    acc: dict[str, _WorkerAccumulator] = {w.id: _WorkerAccumulator() for w in roster}

    for entry in daily_entries:
        target = acc.get(entry.funcionario_id)
        if target is None:
            continue
        amount = _finite_or(entry.qtd, DEFAULT_QTD) * _finite_or(
            entry.valor_diaria_aplicado, DEFAULT_AMOUNT
        )
        target.day(entry.data.isoformat()).diaria += amount
        target.total_diaria += amount

    for entry in piece_work:
        target = acc.get(entry.funcionario_id)
        if target is None:
            continue
        amount = _finite_or(entry.valor, DEFAULT_AMOUNT)
        target.day(entry.data_pagamento.isoformat()).empreita += amount
        target.total_empreita += amount

    for entry in adjustments:
        target = acc.get(entry.funcionario_id)
        if target is None:
            continue
        target.total_reembolso += _finite_or(entry.reembolso, DEFAULT_AMOUNT)
        target.total_adiantamento += _finite_or(entry.adiantamento, DEFAULT_AMOUNT)

    rows: list[PaymentReportRow] = []
    for worker in roster:
        totals = acc[worker.id]
        rows.append(
            PaymentReportRow(
                worker=worker,
                # ISO keys sort chronologically
                dias=dict(sorted(totals.dias.items())),
                total_diaria=totals.total_diaria,
                total_empreita=totals.total_empreita,
                total_reembolso=totals.total_reembolso,
                total_adiantamento=totals.total_adiantamento,
                total_pagar=(
                    totals.total_diaria
                    + totals.total_empreita
                    + totals.total_reembolso
                    - totals.total_adiantamento
                ),
            )
        )
    return rows
