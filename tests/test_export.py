import datetime

from export import (
    BOM,
    DAILY_HEADERS,
    build_monthly_csv,
    export_daily_records,
    export_monthly_summary,
)
from metrics import monthly_summary


def _rows() -> list[dict]:
    return [
        {"id": "1", "data": "2025-01-15", "gasto_ads": 150, "valor_vendas": 800.0, "qtd_leads": 45, "qtd_vendas": 3},
        {"id": "2", "data": "2025-01-16", "gasto_ads": 0, "valor_vendas": 0, "qtd_leads": 0, "qtd_vendas": 0},
    ]


def test_empty_export_notifies_and_returns_none() -> None:
    notices = []

    assert export_daily_records([], notify=notices.append) is None
    assert export_monthly_summary(monthly_summary([]), notify=notices.append) is None
    assert len(notices) == 2


def test_daily_export_formats_two_decimals_with_bom() -> None:
    export = export_daily_records(_rows(), today=datetime.date(2025, 2, 1))

    assert export is not None
    assert export.filename == "lancamentos_2025-02-01.csv"
    assert export.text.startswith(BOM)
    lines = export.text[len(BOM):].strip().split("\n")
    assert lines[0] == ",".join(DAILY_HEADERS)

    by_date = {line.split(",")[0]: line.split(",") for line in lines[1:]}
    first = by_date["2025-01-15"]
    assert first[1] == "150.00"
    assert first[2] == "800.00"
    assert first[3] == "45"
    assert first[10] == "6.67"
    empty_day = by_date["2025-01-16"]
    assert empty_day[8] == "0.00"
    assert empty_day[10] == "0.00"


def test_monthly_csv_includes_compensation_and_net_profit() -> None:
    text = build_monthly_csv(monthly_summary(_rows()), {"2025-01": 100.0})
    lines = text[len(BOM):].strip().split("\n")

    assert lines[0].startswith("Month,Revenue (R$)")
    row = lines[1].split(",")
    assert row[0] == "2025-01"
    assert row[3] == "650.00"
    assert row[4] == "100.00"
    assert row[5] == "550.00"


def test_monthly_export_filename() -> None:
    export = export_monthly_summary(monthly_summary(_rows()), today=datetime.date(2025, 3, 5))

    assert export is not None
    assert export.filename == "resumo_mensal_2025-03-05.csv"
    assert export.data.startswith(BOM.encode("utf-8"))
