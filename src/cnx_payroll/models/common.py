from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base model that rejects unknown fields to keep schema strict."""

    model_config = ConfigDict(extra="forbid")


class ErrorResponse(StrictModel):
    """Error envelope shared by every API route."""

    ok: bool = False
    error: str


def to_optional_number(value: Any) -> float | None:
    """Convert number-like values into float, or None when missing or unusable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text or text.lower() in {"none", "null", "nan"}:
            return None
        try:
            number = float(text.replace(",", "."))
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number
