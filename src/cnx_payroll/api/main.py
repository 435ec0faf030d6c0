from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cnx_payroll.errors import StoreReadError
from cnx_payroll.integrations.container import AppContainer, build_container
from cnx_payroll.integrations.excel_report_adapter import payment_report_xlsx_bytes
from cnx_payroll.logging_config import configure_logging
from cnx_payroll.models.api_requests import MISSING_BOUNDS_MESSAGE, PaymentReportQuery
from cnx_payroll.models.api_responses import HealthResponse, PaymentReportResponse
from cnx_payroll.models.common import ErrorResponse
from cnx_payroll.models.enums import PayrollTable
from cnx_payroll.models.records import Principal

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 401, 500)}

READ_FAILURE_MESSAGES = {
    PayrollTable.WORKERS.value: "Falha ao listar funcionários",
    PayrollTable.DAILY_ENTRIES.value: "Falha ao buscar diárias",
    PayrollTable.PIECE_WORK.value: "Falha ao buscar empreitas",
    PayrollTable.ADJUSTMENTS.value: "Falha ao buscar ajustes",
}

container: AppContainer = build_container()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup."""

    configure_logging(container.settings.log_level, container.settings.log_dir)
    logger.info("CNX API starting; cors origins={}", container.settings.cors_origins or "*")
    yield


app = FastAPI(title="CNX payroll API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=container.settings.cors_origins or ["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors in the `{ok, error}` envelope."""

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(StoreReadError)
async def store_error_handler(request: Request, exc: StoreReadError) -> JSONResponse:
    """Fail the whole request when any upstream read failed."""

    logger.error("{} {} failed on {}: {}", request.method, request.url.path, exc.table, exc.message)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=READ_FAILURE_MESSAGES.get(exc.table, "Erro interno")).model_dump(),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any other failure as a 500 in the `{ok, error}` envelope."""

    logger.opt(exception=exc).error("{} {} failed unexpectedly", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponse(error="Erro interno").model_dump())


async def require_auth(authorization: Annotated[str | None, Header()] = None) -> Principal:
    """Resolve the bearer token to a principal or reject with 401."""

    header = authorization or ""
    token = header[7:].strip() if header.startswith("Bearer ") else ""
    if not token:
        raise HTTPException(status_code=401, detail="Token ausente")
    principal = await container.identity.verify_token(token)
    if principal is None:
        logger.warning("rejected bearer token")
        raise HTTPException(status_code=401, detail="Token inválido")
    return principal


def _parse_window(inicio: str | None, fim: str | None) -> PaymentReportQuery:
    """Validate report bounds; both are required ISO dates."""

    try:
        return PaymentReportQuery(inicio=inicio or "", fim=fim or "")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=MISSING_BOUNDS_MESSAGE) from exc


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Lightweight health endpoint for liveness checks."""

    return HealthResponse(time=datetime.now(UTC))


@app.get("/relatorios/pagamento", response_model=PaymentReportResponse, responses=ERROR_RESPONSES)
async def payment_report(
    principal: Annotated[Principal, Depends(require_auth)],
    inicio: str | None = None,
    fim: str | None = None,
) -> PaymentReportResponse:
    """Payment report per worker for the inclusive window `inicio`..`fim`."""

    window = _parse_window(inicio, fim)
    rows = await container.reports.build_payment_report(window.date_from, window.date_to)
    return PaymentReportResponse(data=rows)


@app.get("/relatorios/pagamento.xlsx", responses=ERROR_RESPONSES)
async def payment_report_xlsx(
    principal: Annotated[Principal, Depends(require_auth)],
    inicio: str | None = None,
    fim: str | None = None,
) -> Response:
    """Same report as `/relatorios/pagamento`, as an Excel workbook."""

    window = _parse_window(inicio, fim)
    rows = await container.reports.build_payment_report(window.date_from, window.date_to)
    content = payment_report_xlsx_bytes(rows, date_from=window.date_from, date_to=window.date_to)
    filename = f"pagamento_{window.inicio}_{window.fim}.xlsx"
    logger.info("exported payment report {} for {}", filename, principal.id)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def run() -> None:
    """Local API entrypoint used by script/console command."""

    import uvicorn

    uvicorn.run(
        "cnx_payroll.api.main:app",
        host=container.settings.host,
        port=container.settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
