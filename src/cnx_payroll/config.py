from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from cnx_payroll.models.records import Principal

load_dotenv()


def _split_csv(raw: str | None) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def parse_auth_tokens(raw: str | None) -> dict[str, Principal]:
    """Parse `token=user_id:email` pairs separated by commas."""

    tokens: dict[str, Principal] = {}
    for item in _split_csv(raw):
        token, sep, identity = item.partition("=")
        if not sep or not token.strip() or not identity.strip():
            raise ValueError(f"AUTH_TOKENS entry must look like token=user_id[:email], got {item!r}")
        user_id, _, email = identity.partition(":")
        tokens[token.strip()] = Principal(id=user_id.strip(), email=email.strip() or None)
    return tokens


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    cors_origins: list[str] = field(default_factory=list)
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_dir: Path | None = None
    data_path: Path | None = None
    auth_tokens: dict[str, Principal] = field(default_factory=dict)


def load_settings() -> Settings:
    """Build settings from environment variables (a `.env` file is honored)."""

    log_dir = os.getenv("LOG_DIR", "").strip()
    data_path = os.getenv("PAYROLL_DATA_PATH", "").strip()
    return Settings(
        cors_origins=_split_csv(os.getenv("CORS_ORIGIN")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=Path(log_dir) if log_dir else None,
        data_path=Path(data_path) if data_path else None,
        auth_tokens=parse_auth_tokens(os.getenv("AUTH_TOKENS")),
    )
