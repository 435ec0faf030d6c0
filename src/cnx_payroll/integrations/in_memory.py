from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cnx_payroll.errors import StoreReadError
from cnx_payroll.models.enums import PayrollTable
from cnx_payroll.models.records import (
    AdjustmentEntry,
    DailyEntry,
    PieceWorkEntry,
    Principal,
    Worker,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Natural keys used by upsert in the persisted schema.
CONFLICT_KEYS: dict[PayrollTable, tuple[str, ...]] = {
    PayrollTable.DAILY_ENTRIES: ("obra_id", "funcionario_id", "data"),
    PayrollTable.ADJUSTMENTS: ("obra_id", "funcionario_id", "data_inicio"),
}


def _in_window(value: date, date_from: date, date_to: date) -> bool:
    return date_from <= value <= date_to


class InMemoryPayrollStore:
    """In-memory store implementation for local development and tests."""

    def __init__(self) -> None:
        """Initialize empty tables guarded by an async lock."""

        self._tables: dict[PayrollTable, list[dict[str, Any]]] = {t: [] for t in PayrollTable}
        self._lock = asyncio.Lock()

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryPayrollStore":
        """Seed a store from a JSON object keyed by table name."""

        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a JSON object keyed by table name")
        store = cls()
        for name, rows in raw.items():
            table = PayrollTable(name)
            if not isinstance(rows, list):
                raise ValueError(f"{path}: table {name} must be a list of rows")
            store._tables[table].extend(dict(r) for r in rows)
        return store

    async def insert(self, table: PayrollTable, rows: Iterable[dict[str, Any]]) -> None:
        """Append rows to a table."""

        async with self._lock:
            self._tables[table].extend(dict(r) for r in rows)

    async def upsert(
        self,
        table: PayrollTable,
        rows: Iterable[dict[str, Any]],
        *,
        on_conflict: Sequence[str] | None = None,
    ) -> None:
        """Insert rows, replacing any existing row with the same conflict key."""

        keys = tuple(on_conflict or CONFLICT_KEYS.get(table, ()))
        if not keys:
            raise ValueError(f"{table.value} has no conflict key; use insert")
        async with self._lock:
            existing = self._tables[table]
            for row in rows:
                row = dict(row)
                key = tuple(str(row.get(k)) for k in keys)
                for idx, current in enumerate(existing):
                    if tuple(str(current.get(k)) for k in keys) == key:
                        existing[idx] = {**current, **row}
                        break
                else:
                    existing.append(row)

    async def _rows(self, table: PayrollTable) -> list[dict[str, Any]]:
        async with self._lock:
            return list(self._tables[table])

    async def _load(self, table: PayrollTable, model: type[ModelT]) -> list[ModelT]:
        rows = await self._rows(table)
        try:
            return [model.model_validate(r) for r in rows]
        except ValidationError as exc:
            raise StoreReadError(table.value, f"malformed row: {exc.errors()[0]['msg']}") from exc

    async def select_workers(self) -> list[Worker]:
        """Return the roster ordered by name."""

        workers = await self._load(PayrollTable.WORKERS, Worker)
        return sorted(workers, key=lambda w: w.nome)

    async def select_daily_entries(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[DailyEntry]:
        """Return daily-rate entries for the workers within the window."""

        ids = set(worker_ids)
        entries = await self._load(PayrollTable.DAILY_ENTRIES, DailyEntry)
        return [e for e in entries if e.funcionario_id in ids and _in_window(e.data, date_from, date_to)]

    async def select_piece_work(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[PieceWorkEntry]:
        """Return piece-work payments for the workers within the window."""

        ids = set(worker_ids)
        entries = await self._load(PayrollTable.PIECE_WORK, PieceWorkEntry)
        return [
            e for e in entries if e.funcionario_id in ids and _in_window(e.data_pagamento, date_from, date_to)
        ]

    async def select_adjustments(
        self, worker_ids: Sequence[str], date_from: date, date_to: date
    ) -> list[AdjustmentEntry]:
        """Return adjustments whose period start falls within the window."""

        ids = set(worker_ids)
        entries = await self._load(PayrollTable.ADJUSTMENTS, AdjustmentEntry)
        return [
            e for e in entries if e.funcionario_id in ids and _in_window(e.data_inicio, date_from, date_to)
        ]


class InMemoryIdentityProvider:
    """Token-to-principal lookup for local development and tests."""

    def __init__(self, tokens: dict[str, Principal] | None = None) -> None:
        self._tokens = dict(tokens or {})

    async def verify_token(self, token: str) -> Principal | None:
        """Return the principal bound to `token`, if any."""

        return self._tokens.get(token)
