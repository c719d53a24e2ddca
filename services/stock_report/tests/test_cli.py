import json

import pytest
from typer.testing import CliRunner

from stock_report.cli import app

runner = CliRunner()

REPORT = "200.AZ Qtde P M\nA PRODUZIR: 1 2\n100.AZ Qtde P M\nA PRODUZIR: 3 4\n"


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("STOCK_REPORT_PRODUCT_ORDER", raising=False)


@pytest.fixture
def report_path(tmp_path):
    path = tmp_path / "estoque.txt"
    path.write_text(REPORT, encoding="utf-8")
    return path


def test_parse_prints_product_snapshots(report_path):
    result = runner.invoke(app, ["parse", str(report_path), "--indent", "0"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [item["productCode"] for item in payload] == ["200", "100"]
    assert payload[0]["variations"][0]["tamanhos"] == {"P": 1, "M": 2}


def test_parse_with_order_and_flatten(report_path):
    result = runner.invoke(app, ["parse", str(report_path), "--order", "100,200", "--flatten"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload == [
        {"productCode": "100", "ref": "100.AZ", "tamanhos": {"P": 3, "M": 4}, "total": 7},
        {"productCode": "200", "ref": "200.AZ", "tamanhos": {"P": 1, "M": 2}, "total": 3},
    ]


def test_parse_uses_configured_order(monkeypatch, report_path):
    monkeypatch.setenv("STOCK_REPORT_PRODUCT_ORDER", "100")
    result = runner.invoke(app, ["parse", str(report_path), "--flatten"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)[0]["productCode"] == "100"


def test_parse_reports_import_errors(tmp_path):
    empty = tmp_path / "vazio.txt"
    empty.write_text("nada por aqui\n", encoding="utf-8")
    result = runner.invoke(app, ["parse", str(empty)])
    assert result.exit_code == 1
    assert "NO_VARIATIONS_FOUND" in result.output


def test_parse_rejects_unknown_extensions(tmp_path):
    other = tmp_path / "relatorio.json"
    other.write_text("{}", encoding="utf-8")
    result = runner.invoke(app, ["parse", str(other)])
    assert result.exit_code == 1
    assert "UNSUPPORTED_FILE_TYPE" in result.output
