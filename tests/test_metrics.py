import datetime

import pandas as pd

from metrics import (
    calculate_cpl,
    calculate_profit,
    calculate_roi,
    compensation_lookup,
    daily_metrics,
    daily_metrics_table,
    filter_by_date_range,
    group_by_month,
    monthly_summary,
    monthly_with_compensation,
    preset_date_range,
    record_averages,
    records_frame,
    total_metrics,
)


def _sample_rows() -> list[dict]:
    return [
        {"id": "1", "data": "2025-01-15", "gasto_ads": 150.0, "valor_vendas": 800.0, "qtd_leads": 45, "qtd_vendas": 3},
        {"id": "2", "data": "2025-01-31", "gasto_ads": 50.0, "valor_vendas": 200.0, "qtd_leads": 15, "qtd_vendas": 1},
        {"id": "3", "data": "2025-02-01", "gasto_ads": 250.0, "valor_vendas": 1800.0, "qtd_leads": 80, "qtd_vendas": 7},
    ]


def test_cpl_divides_and_guards_zero_leads() -> None:
    assert calculate_cpl(150.0, 30) == 5.0
    assert calculate_cpl(150.0, 0) == 0.0


def test_profit_can_be_negative() -> None:
    assert calculate_profit(100.0, 250.0) == -150.0


def test_roi_without_spend_is_zero() -> None:
    assert calculate_roi(500.0, 0) == 0.0
    assert calculate_roi(200.0, 100.0) == 2.0


def test_daily_metrics_accepts_backend_row() -> None:
    out = daily_metrics({"gasto_ads": 100.0, "valor_vendas": 300.0, "qtd_leads": 20, "qtd_vendas": 0})

    assert out["profit"] == 200.0
    assert out["cpl"] == 5.0
    assert out["cpa"] == 0.0
    assert out["average_ticket"] == 0.0
    assert out["roi"] == 3.0


def test_records_frame_normalizes_types_and_sorts_newest_first() -> None:
    frame = records_frame(
        [
            {"data": "2025-01-01", "gasto_ads": "10.5", "valor_vendas": None, "qtd_leads": "4", "qtd_vendas": 1},
            {"data": "2025-03-01", "gasto_ads": 1, "valor_vendas": 2, "qtd_leads": 3, "qtd_vendas": 1},
        ]
    )

    assert list(frame["Date"].dt.strftime("%Y-%m-%d")) == ["2025-03-01", "2025-01-01"]
    assert frame.loc[1, "AdSpend"] == 10.5
    assert frame.loc[1, "SalesValue"] == 0.0
    assert frame.loc[1, "Leads"] == 4


def test_total_metrics_uses_totals_not_mean_of_daily_ratios() -> None:
    rows = [
        {"data": "2025-01-01", "gasto_ads": 10.0, "valor_vendas": 100.0, "qtd_leads": 1, "qtd_vendas": 1},
        {"data": "2025-01-02", "gasto_ads": 1000.0, "valor_vendas": 1000.0, "qtd_leads": 10, "qtd_vendas": 5},
    ]
    totals = total_metrics(rows)
    mean_of_daily = (10.0 + 1.0) / 2

    assert totals["roi"] == 1100.0 / 1010.0
    assert round(totals["roi"], 4) != round(mean_of_daily, 4)
    assert totals["total_leads"] == 11
    assert totals["leads_per_sale"] == 11 / 6
    assert record_averages(rows)["mean_roi"] == mean_of_daily


def test_total_metrics_empty_input_is_zero() -> None:
    totals = total_metrics([])

    assert totals["total_ad_spend"] == 0.0
    assert totals["roi"] == 0.0
    assert totals["entries"] == 0
    assert record_averages([])["entries"] == 0


def test_monthly_summary_merges_same_month_and_sorts_ascending() -> None:
    summary = monthly_summary(_sample_rows())

    assert list(summary.index) == ["2025-01", "2025-02"]
    january = summary.loc["2025-01"]
    assert january["AdSpend"] == 200.0
    assert january["SalesValue"] == 1000.0
    assert january["Leads"] == 60
    assert january["Sales"] == 4
    assert january["ROI"] == 5.0
    assert january["CPA"] == 50.0


def test_month_boundaries_do_not_drift_with_timezone_suffix() -> None:
    rows = [
        {"data": "2025-01-31T23:30:00-03:00", "gasto_ads": 1.0, "valor_vendas": 1.0, "qtd_leads": 1, "qtd_vendas": 1},
        {"data": "2025-02-01", "gasto_ads": 1.0, "valor_vendas": 1.0, "qtd_leads": 1, "qtd_vendas": 1},
    ]
    groups = group_by_month(rows)

    assert list(groups) == ["2025-01", "2025-02"]
    assert len(groups["2025-01"]) == 1


def test_monthly_summary_empty_input_has_columns() -> None:
    summary = monthly_summary([])

    assert summary.empty
    assert "ROI" in summary.columns


def test_monthly_with_compensation_computes_net_profit() -> None:
    summary = monthly_summary(_sample_rows())
    lookup = compensation_lookup([{"mes_ano": "2025-01", "valor": "300"}])
    out = monthly_with_compensation(summary, lookup)

    assert out.loc["2025-01", "Compensation"] == 300.0
    assert out.loc["2025-01", "NetProfit"] == 500.0
    assert out.loc["2025-02", "Compensation"] == 0.0


def test_daily_metrics_table_adds_conversion() -> None:
    table = daily_metrics_table(_sample_rows())
    row = table.set_index("id").loc["2"]

    assert round(float(row["ConversionPct"]), 4) == round(1 / 15 * 100, 4)
    assert float(row["Profit"]) == 150.0


def test_filter_by_date_range_is_inclusive() -> None:
    out = filter_by_date_range(_sample_rows(), datetime.date(2025, 1, 31), datetime.date(2025, 2, 1))

    assert sorted(out["id"]) == ["2", "3"]
    assert len(filter_by_date_range(_sample_rows(), None, None)) == 3


def test_preset_date_range() -> None:
    today = datetime.date(2025, 3, 10)

    assert preset_date_range("all", today) == (None, None)
    assert preset_date_range("today", today) == (today, today)
    assert preset_date_range("7d", today) == (datetime.date(2025, 3, 3), today)


def test_records_frame_accepts_existing_frame() -> None:
    frame = records_frame(pd.DataFrame(_sample_rows()))
    again = records_frame(frame)

    assert len(again) == 3
    assert again["AdSpend"].sum() == 450.0
