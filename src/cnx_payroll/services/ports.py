from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from cnx_payroll.models.records import (
    AdjustmentEntry,
    DailyEntry,
    PieceWorkEntry,
    Principal,
    Worker,
)


class PayrollStore(Protocol):
    """Read contract the payment report needs from persistence.

    Implementations raise `StoreReadError` when a read fails. Date bounds are
    inclusive.
    """

    async def select_workers(self) -> list[Worker]:
        """Return the full roster ordered by name."""

        ...

    async def select_daily_entries(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[DailyEntry]:
        """Return daily-rate entries whose `data` falls in the window."""

        ...

    async def select_piece_work(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[PieceWorkEntry]:
        """Return piece-work payments whose `data_pagamento` falls in the window."""

        ...

    async def select_adjustments(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[AdjustmentEntry]:
        """Return adjustments whose `data_inicio` falls in the window."""

        ...


class IdentityProvider(Protocol):
    """Bearer-token verification contract."""

    async def verify_token(self, token: str) -> Principal | None:
        """Resolve a token to its principal, or None when it is not valid."""

        ...
