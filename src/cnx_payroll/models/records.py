from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cnx_payroll.models.common import to_optional_number
from cnx_payroll.models.enums import Situacao


class RecordModel(BaseModel):
    """Base for persisted rows; unknown store columns are dropped.

    Numeric ids (serial keys in some stores) are read as strings.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class Principal(RecordModel):
    """Authenticated account resolved from a bearer token."""

    id: str
    email: str | None = None


class Worker(BaseModel):
    """Roster entry (funcionário). Extra columns pass through untouched."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str = Field(min_length=1)
    nome: str
    apelido: str | None = None
    funcao: str | None = None
    situacao: Situacao = Situacao.ATIVO

    @field_validator("situacao", mode="before")
    @classmethod
    def _normalize_situacao(cls, value: Any) -> Situacao:
        return Situacao.normalize(value)


class DailyEntry(RecordModel):
    """One worker-day paid at a daily rate (lanc_diarias).

    `qtd` and `valor_diaria_aplicado` stay None when missing or not a finite
    number; the report then uses 1 and 0 respectively.
    """

    funcionario_id: str
    data: date
    obra_id: str | None = None
    qtd: float | None = None
    valor_diaria_aplicado: float | None = None

    @field_validator("qtd", "valor_diaria_aplicado", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return to_optional_number(value)


class PieceWorkEntry(RecordModel):
    """One piece-work payment (empreita), dated by when it is paid."""

    funcionario_id: str
    data_pagamento: date
    obra_id: str | None = None
    valor: float | None = None
    descricao: str | None = None

    @field_validator("valor", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return to_optional_number(value)


class AdjustmentEntry(RecordModel):
    """Period-level reimbursement/advance anchored on the period start date.

    The store keeps these amounts as integer cents (`reembolso_centavos`,
    `adiantamento_centavos`); those columns are converted to currency units
    when the plain amount is missing or unusable.
    """

    funcionario_id: str
    data_inicio: date
    obra_id: str | None = None
    reembolso: float | None = None
    adiantamento: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_centavos(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field in ("reembolso", "adiantamento"):
            if to_optional_number(data.get(field)) is not None:
                continue
            cents = to_optional_number(data.get(f"{field}_centavos"))
            if cents is not None:
                data[field] = cents / 100
        return data

    @field_validator("reembolso", "adiantamento", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return to_optional_number(value)
