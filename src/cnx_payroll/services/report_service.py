from __future__ import annotations

import asyncio
from datetime import date

from loguru import logger

from cnx_payroll.errors import StoreReadError
from cnx_payroll.models.report import PaymentReportRow
from cnx_payroll.services.aggregation import aggregate
from cnx_payroll.services.ports import PayrollStore


def _as_date(value: date | str) -> date:
    """Accept a date or an ISO `YYYY-MM-DD` string."""

    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


class PaymentReportService:
    """Application service that reads the report inputs and aggregates them."""

    def __init__(self, store: PayrollStore) -> None:
        """Bind the persistence implementation."""

        self.store = store

    async def build_payment_report(
        self, date_from: date | str, date_to: date | str
    ) -> list[PaymentReportRow]:
        """Build the payment report for an inclusive date window.

        The roster is read first; the three fact reads then run concurrently.
        Any failed read aborts the whole report with `StoreReadError`.
        """

        start, end = _as_date(date_from), _as_date(date_to)
        try:
            roster = await self.store.select_workers()
            if not roster:
                logger.info("payment report {}..{}: empty roster", start, end)
                return []
            worker_ids = [w.id for w in roster]
            daily, piece_work, adjustments = await asyncio.gather(
                self.store.select_daily_entries(worker_ids, start, end),
                self.store.select_piece_work(worker_ids, start, end),
                self.store.select_adjustments(worker_ids, start, end),
            )
        except StoreReadError as exc:
            logger.error("payment report {}..{} aborted, read failed on {}: {}", start, end, exc.table, exc.message)
            raise

        rows = aggregate(roster, daily, piece_work, adjustments)
        logger.info(
            "payment report {}..{}: workers={} diarias={} empreitas={} ajustes={}",
            start,
            end,
            len(roster),
            len(daily),
            len(piece_work),
            len(adjustments),
        )
        return rows
