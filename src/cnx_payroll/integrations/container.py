from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from cnx_payroll.config import Settings, load_settings
from cnx_payroll.integrations.in_memory import InMemoryIdentityProvider, InMemoryPayrollStore
from cnx_payroll.services.ports import IdentityProvider, PayrollStore
from cnx_payroll.services.report_service import PaymentReportService


@dataclass
class AppContainer:
    """Runtime dependency container for API/service wiring."""

    settings: Settings
    store: PayrollStore
    identity: IdentityProvider
    reports: PaymentReportService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default in-memory runtime container for local execution."""

    settings = settings or load_settings()
    if settings.data_path is not None:
        store = InMemoryPayrollStore.from_json(settings.data_path)
        logger.info("seeded in-memory store from {}", settings.data_path)
    else:
        store = InMemoryPayrollStore()
    identity = InMemoryIdentityProvider(settings.auth_tokens)
    return AppContainer(
        settings=settings,
        store=store,
        identity=identity,
        reports=PaymentReportService(store),
    )
