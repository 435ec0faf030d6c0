from __future__ import annotations

from enum import Enum


class Situacao(str, Enum):
    """Active flag shared by workers, sites and team assignments."""

    ATIVO = "ativo"  # Currently employed / assigned.
    INATIVO = "inativo"  # Kept for history, hidden from new entries.

    @classmethod
    def normalize(cls, value: object) -> "Situacao":
        """Map free text to a status; anything but 'inativo' counts as active."""

        if isinstance(value, cls):
            return value
        text = str(value or cls.ATIVO.value).strip().lower()
        return cls.INATIVO if text == cls.INATIVO.value else cls.ATIVO


class PayrollTable(str, Enum):
    """Store tables read by the payment report."""

    WORKERS = "cadastro_func"  # Worker roster.
    DAILY_ENTRIES = "lanc_diarias"  # Daily-rate entries.
    PIECE_WORK = "empreitas"  # Piece-work payments.
    ADJUSTMENTS = "lanc_diarias_ajustes"  # Period reimbursements/advances.
