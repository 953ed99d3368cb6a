"""KPI helpers for daily marketing entries and monthly summaries."""

from __future__ import annotations

import datetime
from typing import Any, Iterable, Mapping

import pandas as pd

# Backend column -> frame column.
DAILY_COLUMNS = {
    "data": "Date",
    "gasto_ads": "AdSpend",
    "valor_vendas": "SalesValue",
    "qtd_leads": "Leads",
    "qtd_vendas": "Sales",
}
MONEY_COLUMNS = ["AdSpend", "SalesValue"]
COUNT_COLUMNS = ["Leads", "Sales"]

COMPENSATION_COLUMNS = {
    "mes_ano": "Month",
    "valor": "Amount",
    "descricao": "Description",
}

MONTHLY_COLUMNS = [
    "AdSpend",
    "SalesValue",
    "Leads",
    "Sales",
    "Profit",
    "CPL",
    "CPA",
    "AverageTicket",
    "ROI",
    "LeadsPerSale",
    "ConversionPct",
]

DATE_PRESETS = {
    "all": None,
    "today": 0,
    "7d": 7,
    "15d": 15,
    "30d": 30,
}


def calculate_profit(sales_value: float, ad_spend: float) -> float:
    return sales_value - ad_spend


def calculate_cpl(ad_spend: float, leads: int) -> float:
    if leads == 0:
        return 0.0
    return ad_spend / leads


def calculate_average_ticket(sales_value: float, sales: int) -> float:
    if sales == 0:
        return 0.0
    return sales_value / sales


def calculate_cpa(ad_spend: float, sales: int) -> float:
    if sales == 0:
        return 0.0
    return ad_spend / sales


def calculate_roi(sales_value: float, ad_spend: float) -> float:
    """Return ROI as a multiplier: 200 back on 100 spent is 2.0."""
    if ad_spend == 0:
        return 0.0
    return sales_value / ad_spend


def calculate_leads_per_sale(leads: int, sales: int) -> float:
    if sales == 0:
        return 0.0
    return leads / sales


def calculate_conversion_rate(sales: int, leads: int) -> float:
    """Sales as a percentage of leads."""
    if leads == 0:
        return 0.0
    return sales / leads * 100.0


def parse_entry_dates(values: pd.Series) -> pd.Series:
    """Parse entry dates as naive calendar days at midnight.

    Only the YYYY-MM-DD part is read, so timezone suffixes never move a
    record into a neighbouring day or month.
    """
    text = values.astype(str).str.strip().str.slice(0, 10)
    return pd.to_datetime(text, format="%Y-%m-%d", errors="coerce")


def month_key(dates: pd.Series) -> pd.Series:
    """Return YYYY-MM keys from parsed entry dates."""
    return dates.dt.strftime("%Y-%m")


def records_frame(rows: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> pd.DataFrame:
    """Normalize backend rows into a typed frame sorted by date, newest first."""
    if isinstance(rows, pd.DataFrame):
        frame = rows.copy()
    else:
        frame = pd.DataFrame([dict(row) for row in (rows or [])])
    frame = frame.rename(columns=DAILY_COLUMNS)

    if "id" not in frame.columns:
        frame["id"] = pd.Series(dtype=object)
    if "Date" not in frame.columns:
        frame["Date"] = pd.Series(dtype=object)
    for col in MONEY_COLUMNS + COUNT_COLUMNS:
        if col not in frame.columns:
            frame[col] = pd.Series(dtype=float)

    frame["Date"] = parse_entry_dates(frame["Date"])
    for col in MONEY_COLUMNS:
        frame[col] = pd.to_numeric(frame[col], errors="coerce").fillna(0.0).astype(float)
    for col in COUNT_COLUMNS:
        frame[col] = pd.to_numeric(frame[col], errors="coerce").fillna(0).astype(int)

    return frame.sort_values("Date", ascending=False, na_position="last").reset_index(drop=True)


def as_records_frame(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame) and "AdSpend" in records.columns:
        return records
    return records_frame(records)


def _pick(record: Mapping[str, Any], frame_col: str) -> Any:
    if frame_col in record:
        return record[frame_col]
    for backend_col, mapped in DAILY_COLUMNS.items():
        if mapped == frame_col:
            return record.get(backend_col)
    return None


def _as_float(value: Any) -> float:
    number = pd.to_numeric(value, errors="coerce")
    return 0.0 if pd.isna(number) else float(number)


def _as_int(value: Any) -> int:
    number = pd.to_numeric(value, errors="coerce")
    return 0 if pd.isna(number) else int(number)


def daily_metrics(record: Mapping[str, Any]) -> dict[str, float]:
    """Derived KPIs for one daily entry (backend or frame column names)."""
    ad_spend = _as_float(_pick(record, "AdSpend"))
    sales_value = _as_float(_pick(record, "SalesValue"))
    leads = _as_int(_pick(record, "Leads"))
    sales = _as_int(_pick(record, "Sales"))
    return {
        "profit": calculate_profit(sales_value, ad_spend),
        "cpl": calculate_cpl(ad_spend, leads),
        "cpa": calculate_cpa(ad_spend, sales),
        "average_ticket": calculate_average_ticket(sales_value, sales),
        "roi": calculate_roi(sales_value, ad_spend),
    }


def total_metrics(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> dict[str, float]:
    """Sum the entries and derive every ratio from the sums."""
    frame = as_records_frame(records)
    ad_spend = float(frame["AdSpend"].sum())
    sales_value = float(frame["SalesValue"].sum())
    leads = int(frame["Leads"].sum())
    sales = int(frame["Sales"].sum())
    return {
        "total_ad_spend": ad_spend,
        "total_sales_value": sales_value,
        "total_leads": leads,
        "total_sales": sales,
        "entries": int(len(frame)),
        "profit": calculate_profit(sales_value, ad_spend),
        "cpl": calculate_cpl(ad_spend, leads),
        "cpa": calculate_cpa(ad_spend, sales),
        "average_ticket": calculate_average_ticket(sales_value, sales),
        "roi": calculate_roi(sales_value, ad_spend),
        "leads_per_sale": calculate_leads_per_sale(leads, sales),
        "conversion_pct": calculate_conversion_rate(sales, leads),
    }


def _safe_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    ratio = numerator.astype(float) / denominator.replace(0, float("nan")).astype(float)
    return ratio.fillna(0.0)


def _with_ratio_columns(table: pd.DataFrame) -> pd.DataFrame:
    out = table.copy()
    out["Profit"] = out["SalesValue"] - out["AdSpend"]
    out["CPL"] = _safe_ratio(out["AdSpend"], out["Leads"])
    out["CPA"] = _safe_ratio(out["AdSpend"], out["Sales"])
    out["AverageTicket"] = _safe_ratio(out["SalesValue"], out["Sales"])
    out["ROI"] = _safe_ratio(out["SalesValue"], out["AdSpend"])
    out["LeadsPerSale"] = _safe_ratio(out["Leads"], out["Sales"])
    out["ConversionPct"] = _safe_ratio(out["Sales"], out["Leads"]) * 100.0
    return out


def daily_metrics_table(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> pd.DataFrame:
    """Entries plus per-row KPI columns, used by the history table."""
    frame = as_records_frame(records)
    return _with_ratio_columns(frame)


def group_by_month(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> dict[str, pd.DataFrame]:
    """Split entries by calendar month, keys in ascending order."""
    frame = as_records_frame(records)
    keys = month_key(frame["Date"])
    groups: dict[str, pd.DataFrame] = {}
    for key in sorted(keys.dropna().unique().tolist()):
        groups[key] = frame.loc[keys == key].reset_index(drop=True)
    return groups


def monthly_summary(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> pd.DataFrame:
    """Aggregate entries by calendar month with ratios taken from the monthly totals."""
    frame = as_records_frame(records)
    work = frame.assign(Month=month_key(frame["Date"])).dropna(subset=["Month"])
    if work.empty:
        empty = pd.DataFrame(columns=MONTHLY_COLUMNS, dtype=float)
        empty.index.name = "Month"
        return empty

    summary = (
        work.groupby("Month")
        .agg(
            AdSpend=("AdSpend", "sum"),
            SalesValue=("SalesValue", "sum"),
            Leads=("Leads", "sum"),
            Sales=("Sales", "sum"),
        )
        .sort_index()
    )
    return _with_ratio_columns(summary)[MONTHLY_COLUMNS]


def compensation_frame(rows: Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    """Normalize monthly compensation rows, newest month first."""
    frame = pd.DataFrame([dict(row) for row in (rows or [])]).rename(columns=COMPENSATION_COLUMNS)
    for col in ["id", "Month", "Description"]:
        if col not in frame.columns:
            frame[col] = pd.Series(dtype=object)
    if "Amount" not in frame.columns:
        frame["Amount"] = pd.Series(dtype=float)
    frame["Amount"] = pd.to_numeric(frame["Amount"], errors="coerce").fillna(0.0).astype(float)
    frame["Description"] = frame["Description"].fillna("").astype(str)
    frame["Month"] = frame["Month"].astype(str)
    return frame.sort_values("Month", ascending=False).reset_index(drop=True)[
        ["id", "Month", "Amount", "Description"]
    ]


def compensation_lookup(rows: Iterable[Mapping[str, Any]] | None) -> dict[str, float]:
    """Month key -> compensation amount."""
    lookup: dict[str, float] = {}
    for row in rows or []:
        month = str(row.get("mes_ano") or "").strip()
        if not month:
            continue
        lookup[month] = _as_float(row.get("valor"))
    return lookup


def monthly_with_compensation(summary: pd.DataFrame, compensation: Mapping[str, float] | None) -> pd.DataFrame:
    """Attach the month's compensation and the resulting net profit."""
    out = summary.copy()
    lookup = dict(compensation or {})
    out["Compensation"] = [float(lookup.get(month, 0.0)) for month in out.index]
    out["NetProfit"] = out["Profit"] - out["Compensation"]
    return out


def record_averages(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> dict[str, float]:
    """Per-entry means of ROI and profit (day averages, not aggregate ratios)."""
    table = daily_metrics_table(records)
    count = int(len(table))
    if not count:
        return {"mean_roi": 0.0, "mean_profit": 0.0, "entries": 0}
    return {
        "mean_roi": float(table["ROI"].mean()),
        "mean_profit": float(table["Profit"].mean()),
        "entries": count,
    }


def filter_by_date_range(
    records: Iterable[Mapping[str, Any]] | pd.DataFrame | None,
    start_date: datetime.date | None,
    end_date: datetime.date | None,
) -> pd.DataFrame:
    """Keep entries in the inclusive date range; open bounds keep everything."""
    frame = as_records_frame(records)
    if start_date is None:
        return frame.copy()
    end_date = end_date or start_date
    mask = frame["Date"].dt.date.between(start_date, end_date)
    return frame.loc[mask].reset_index(drop=True)


def preset_date_range(
    preset: str, today: datetime.date | None = None
) -> tuple[datetime.date | None, datetime.date | None]:
    """Return (start, end) for a quick filter preset."""
    if preset not in DATE_PRESETS:
        raise ValueError(f"Unknown date preset: {preset}")
    days = DATE_PRESETS[preset]
    if days is None:
        return None, None
    today = today or datetime.date.today()
    return today - datetime.timedelta(days=days), today
