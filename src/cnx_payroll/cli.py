from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .errors import StoreReadError
from .integrations.excel_report_adapter import write_payment_report_xlsx
from .integrations.in_memory import InMemoryPayrollStore
from .logging_config import configure_logging
from .models.api_requests import MISSING_BOUNDS_MESSAGE, PaymentReportQuery
from .models.report import PaymentReportRow
from .services.report_service import PaymentReportService

app = typer.Typer(help="CNX payroll tools: payment report and local API.")
console = Console()


def _money(value: float) -> str:
    """Format an amount Brazilian-style, e.g. 1.234,50."""

    text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def _render_table(rows: list[PaymentReportRow], *, inicio: str, fim: str) -> Table:
    table = Table(title=f"Pagamentos {inicio} a {fim}")
    table.add_column("Funcionário")
    table.add_column("Dias", justify="right")
    for header in ("Diárias", "Empreitas", "Reembolso", "Adiantamento", "Total a pagar"):
        table.add_column(header, justify="right")
    for row in rows:
        table.add_row(
            row.worker.nome,
            str(len(row.dias)),
            _money(row.total_diaria),
            _money(row.total_empreita),
            _money(row.total_reembolso),
            _money(row.total_adiantamento),
            _money(row.total_pagar),
        )
    return table


@app.command()
def report(
    data: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON fixture keyed by table name."),
    inicio: str = typer.Option(..., help="Window start, YYYY-MM-DD (inclusive)."),
    fim: str = typer.Option(..., help="Window end, YYYY-MM-DD (inclusive)."),
    xlsx: Optional[Path] = typer.Option(None, help="Also write the report to this Excel file."),
    as_json: bool = typer.Option(False, "--json", help="Print rows as JSON instead of a table."),
    log_level: str = typer.Option("WARNING", help="Log level for stderr output."),
) -> None:
    """Compute the payment report for a window from a local data file."""

    configure_logging(log_level.upper())
    try:
        window = PaymentReportQuery(inicio=inicio, fim=fim)
    except ValidationError:
        console.print(f"[red]{MISSING_BOUNDS_MESSAGE}[/red]")
        raise typer.Exit(code=2)

    try:
        store = InMemoryPayrollStore.from_json(data)
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Could not load {data}:[/red] {exc}")
        raise typer.Exit(code=1)
    service = PaymentReportService(store)
    try:
        rows = asyncio.run(service.build_payment_report(window.date_from, window.date_to))
    except StoreReadError as exc:
        console.print(f"[red]Read failed on {exc.table}:[/red] {exc.message}")
        raise typer.Exit(code=1)

    if as_json:
        payload = [row.model_dump(mode="json", by_alias=True) for row in rows]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        console.print(_render_table(rows, inicio=window.inicio, fim=window.fim))

    if xlsx is not None:
        out_path = write_payment_report_xlsx(rows, xlsx, date_from=window.date_from, date_to=window.date_to)
        console.print(f"[green]Wrote[/green] {out_path}")


@app.command()
def serve() -> None:
    """Start the HTTP API with uvicorn (HOST/PORT from the environment)."""

    from .api.main import run

    run()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
