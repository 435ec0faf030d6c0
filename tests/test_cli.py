from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

from cnx_payroll import cli

runner = CliRunner()
FIXTURE = Path(__file__).parent / "fixtures" / "payroll_sample.json"


def test_report_prints_table_and_writes_xlsx(tmp_path: Path) -> None:
    xlsx_path = tmp_path / "run" / "pagamento.xlsx"

    result = runner.invoke(
        cli.app,
        [
            "report",
            "--data",
            str(FIXTURE),
            "--inicio",
            "2026-02-01",
            "--fim",
            "2026-02-15",
            "--xlsx",
            str(xlsx_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Bruno" in result.output
    assert "445,50" in result.output
    assert xlsx_path.exists()
    ws = load_workbook(xlsx_path).active
    assert ws.max_row == 4


def test_report_json_output() -> None:
    result = runner.invoke(
        cli.app,
        ["report", "--data", str(FIXTURE), "--inicio", "2026-02-01", "--fim", "2026-02-15", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [row["funcionario"]["nome"] for row in payload] == ["Ana Souza", "Bruno Lima", "Carlos Dias"]
    assert payload[0]["total_pagar"] == 210.0


def test_report_rejects_bad_bounds() -> None:
    result = runner.invoke(
        cli.app,
        ["report", "--data", str(FIXTURE), "--inicio", "01/02/2026", "--fim", "2026-02-15"],
    )

    assert result.exit_code == 2
    assert "YYYY-MM-DD" in result.output


@pytest.mark.parametrize(
    "content",
    ["{not json", '{"folha": []}', '{"empreitas": {"a": 1}}'],
)
def test_report_rejects_unreadable_data_file(tmp_path: Path, content: str) -> None:
    data = tmp_path / "data.json"
    data.write_text(content, encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["report", "--data", str(data), "--inicio", "2026-02-01", "--fim", "2026-02-15"],
    )

    assert result.exit_code == 1
    assert "Could not load" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
