"""HTTP contract tests for the payroll API."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest
from openpyxl import load_workbook

from cnx_payroll.config import Settings
from cnx_payroll.errors import StoreReadError
from cnx_payroll.integrations.container import AppContainer, build_container
from cnx_payroll.integrations.in_memory import InMemoryIdentityProvider, InMemoryPayrollStore
from cnx_payroll.models.enums import PayrollTable
from cnx_payroll.models.records import Principal
from cnx_payroll.services.report_service import PaymentReportService

FIXTURE = Path(__file__).parent / "fixtures" / "payroll_sample.json"
TOKEN = "test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


class _BrokenDailyStore(InMemoryPayrollStore):
    async def _rows(self, table: PayrollTable) -> list[dict[str, Any]]:
        if table == PayrollTable.DAILY_ENTRIES:
            raise StoreReadError(table.value, "timeout")
        return await super()._rows(table)


class _CrashingStore(InMemoryPayrollStore):
    async def _rows(self, table: PayrollTable) -> list[dict[str, Any]]:
        raise RuntimeError("driver bug")


def _settings() -> Settings:
    return Settings(
        data_path=FIXTURE,
        auth_tokens={TOKEN: Principal(id="u1", email="admin@cnx.com.br")},
    )


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    """TestClient bound to a fresh container seeded from the sample fixture."""

    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    import cnx_payroll.api.main as api_main

    monkeypatch.setattr(api_main, "container", build_container(_settings()))
    with TestClient(api_main.app) as test_client:
        yield test_client


def test_health(client) -> None:
    """Health is public and names the service."""

    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["name"] == "CNX API"
    assert body["time"]


def test_report_requires_bearer_token(client) -> None:
    """Missing and unknown tokens are both rejected with 401."""

    res = client.get("/relatorios/pagamento", params={"inicio": "2026-02-01", "fim": "2026-02-15"})
    assert res.status_code == 401
    assert res.json() == {"ok": False, "error": "Token ausente"}

    res = client.get(
        "/relatorios/pagamento",
        params={"inicio": "2026-02-01", "fim": "2026-02-15"},
        headers={"Authorization": "Bearer nope"},
    )
    assert res.status_code == 401
    assert res.json() == {"ok": False, "error": "Token inválido"}


@pytest.mark.parametrize(
    "params",
    [{}, {"inicio": "2026-02-01"}, {"fim": "2026-02-15"}, {"inicio": "01/02/2026", "fim": "2026-02-15"}],
)
def test_report_rejects_missing_or_malformed_bounds(client, params: dict[str, str]) -> None:
    """Both bounds are required ISO dates; failures are 400 with the envelope."""

    res = client.get("/relatorios/pagamento", params=params, headers=AUTH)
    assert res.status_code == 400
    assert res.json() == {"ok": False, "error": "Informe inicio e fim no formato YYYY-MM-DD"}


def test_report_payload_shape(client) -> None:
    """Rows come in roster order with the worker under `funcionario`."""

    res = client.get(
        "/relatorios/pagamento",
        params={"inicio": "2026-02-01", "fim": "2026-02-15"},
        headers=AUTH,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    names = [row["funcionario"]["nome"] for row in body["data"]]
    assert names == ["Ana Souza", "Bruno Lima", "Carlos Dias"]

    bruno = body["data"][1]
    assert bruno["funcionario"]["chave_pix"] == "bruno@pix"
    assert bruno["dias"] == {"2026-02-03": {"diaria": 200.0, "empreita": 300.0}}
    assert bruno["total_diaria"] == 200.0
    assert bruno["total_empreita"] == 300.0
    assert bruno["total_reembolso"] == 45.5
    assert bruno["total_adiantamento"] == 100.0
    assert bruno["total_pagar"] == 445.5

    carlos = body["data"][2]
    assert carlos["dias"] == {}
    assert carlos["total_pagar"] == 0.0


def test_report_read_failure_is_a_single_500(client, monkeypatch: pytest.MonkeyPatch) -> None:
    """A failed upstream read yields one error response, never a partial report."""

    import cnx_payroll.api.main as api_main

    store = _BrokenDailyStore()
    store._tables[PayrollTable.WORKERS].append({"id": "w1", "nome": "Ana"})
    settings = _settings()
    monkeypatch.setattr(
        api_main,
        "container",
        AppContainer(
            settings=settings,
            store=store,
            identity=InMemoryIdentityProvider(settings.auth_tokens),
            reports=PaymentReportService(store),
        ),
    )

    res = client.get(
        "/relatorios/pagamento",
        params={"inicio": "2026-02-01", "fim": "2026-02-15"},
        headers=AUTH,
    )
    assert res.status_code == 500
    assert res.json() == {"ok": False, "error": "Falha ao buscar diárias"}


def test_report_xlsx_download(client) -> None:
    """The spreadsheet route returns a workbook with one row per worker."""

    res = client.get(
        "/relatorios/pagamento.xlsx",
        params={"inicio": "2026-02-01", "fim": "2026-02-15"},
        headers=AUTH,
    )
    assert res.status_code == 200
    assert res.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    ws = load_workbook(io.BytesIO(res.content)).active
    assert ws.cell(row=1, column=1).value == "Funcionário"
    assert [ws.cell(row=r, column=1).value for r in range(2, ws.max_row + 1)] == [
        "Ana Souza",
        "Bruno Lima",
        "Carlos Dias",
    ]


def test_report_xlsx_is_served_from_memory(client, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Repeated downloads leave no files behind and name the window."""

    monkeypatch.chdir(tmp_path)

    for _ in range(3):
        res = client.get(
            "/relatorios/pagamento.xlsx",
            params={"inicio": "2026-02-01", "fim": "2026-02-15"},
            headers=AUTH,
        )
        assert res.status_code == 200
        assert 'filename="pagamento_2026-02-01_2026-02-15.xlsx"' in res.headers["content-disposition"]
        assert load_workbook(io.BytesIO(res.content)).active.max_row == 4

    assert list(tmp_path.rglob("*")) == []


def test_unexpected_failure_uses_error_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    """Errors outside the mapped ones still answer 500 with `{ok, error}`."""

    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    import cnx_payroll.api.main as api_main

    store = _CrashingStore()
    settings = _settings()
    monkeypatch.setattr(
        api_main,
        "container",
        AppContainer(
            settings=settings,
            store=store,
            identity=InMemoryIdentityProvider(settings.auth_tokens),
            reports=PaymentReportService(store),
        ),
    )

    with TestClient(api_main.app, raise_server_exceptions=False) as test_client:
        res = test_client.get(
            "/relatorios/pagamento",
            params={"inicio": "2026-02-01", "fim": "2026-02-15"},
            headers=AUTH,
        )

    assert res.status_code == 500
    assert res.json() == {"ok": False, "error": "Erro interno"}


def test_cors_preflight_for_report(client) -> None:
    """CORS preflight for the report route is answered, with Authorization allowed."""

    res = client.options(
        "/relatorios/pagamento",
        headers={
            "Origin": "http://127.0.0.1:5173",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert res.status_code == 200
    assert res.headers.get("access-control-allow-origin") in {"*", "http://127.0.0.1:5173"}
    assert "GET" in (res.headers.get("access-control-allow-methods") or "")
