"""CSV exports for daily entries and the monthly summary."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

import pandas as pd

from metrics import (
    as_records_frame,
    calculate_conversion_rate,
    daily_metrics_table,
    monthly_with_compensation,
)

logger = logging.getLogger(__name__)

BOM = "\ufeff"

DAILY_HEADERS = [
    "Date",
    "Ad spend (R$)",
    "Sales (R$)",
    "Leads",
    "Sales count",
    "CPL (R$)",
    "CPA (R$)",
    "Average ticket (R$)",
    "ROI",
    "Profit (R$)",
    "Conversion (%)",
]

MONTHLY_HEADERS = [
    "Month",
    "Revenue (R$)",
    "Ad spend (R$)",
    "Gross profit (R$)",
    "Compensation (R$)",
    "Net profit (R$)",
    "ROI",
    "Leads",
    "Sales",
    "CPL (R$)",
    "CPA (R$)",
    "Average ticket (R$)",
    "Conversion (%)",
]

EMPTY_DAILY_MESSAGE = "There is no data to export."
EMPTY_MONTHLY_MESSAGE = "There is no monthly data to export."


@dataclass(frozen=True)
class CsvExport:
    filename: str
    text: str

    @property
    def data(self) -> bytes:
        return self.text.encode("utf-8")


def _money(value: float) -> str:
    return f"{float(value):.2f}"


def _conversion(sales: int, leads: int) -> str:
    return _money(calculate_conversion_rate(int(sales), int(leads)))


def _to_csv(rows: list[list[str]], headers: list[str]) -> str:
    table = pd.DataFrame(rows, columns=headers)
    return BOM + table.to_csv(index=False, lineterminator="\n")


def build_daily_csv(records: Iterable[Mapping[str, Any]] | pd.DataFrame | None) -> str:
    """One row per entry with its derived KPIs, two decimals for money and ratios."""
    table = daily_metrics_table(records)
    rows = []
    for _, row in table.iterrows():
        rows.append(
            [
                row["Date"].strftime("%Y-%m-%d") if pd.notna(row["Date"]) else "",
                _money(row["AdSpend"]),
                _money(row["SalesValue"]),
                str(int(row["Leads"])),
                str(int(row["Sales"])),
                _money(row["CPL"]),
                _money(row["CPA"]),
                _money(row["AverageTicket"]),
                _money(row["ROI"]),
                _money(row["Profit"]),
                _conversion(row["Sales"], row["Leads"]),
            ]
        )
    return _to_csv(rows, DAILY_HEADERS)


def build_monthly_csv(summary: pd.DataFrame, compensation: Mapping[str, float] | None = None) -> str:
    """One row per month; compensation is subtracted to give net profit."""
    table = summary if "NetProfit" in summary.columns else monthly_with_compensation(summary, compensation)
    rows = []
    for month, row in table.iterrows():
        rows.append(
            [
                str(month),
                _money(row["SalesValue"]),
                _money(row["AdSpend"]),
                _money(row["Profit"]),
                _money(row["Compensation"]),
                _money(row["NetProfit"]),
                _money(row["ROI"]),
                str(int(row["Leads"])),
                str(int(row["Sales"])),
                _money(row["CPL"]),
                _money(row["CPA"]),
                _money(row["AverageTicket"]),
                _conversion(row["Sales"], row["Leads"]),
            ]
        )
    return _to_csv(rows, MONTHLY_HEADERS)


def export_filename(kind: str, today: datetime.date | None = None) -> str:
    return f"{kind}_{(today or datetime.date.today()).isoformat()}.csv"


def _notify_empty(message: str, notify: Callable[[str], Any] | None) -> None:
    logger.info("Export skipped: %s", message)
    if notify is not None:
        notify(message)


def export_daily_records(
    records: Iterable[Mapping[str, Any]] | pd.DataFrame | None,
    today: datetime.date | None = None,
    notify: Callable[[str], Any] | None = None,
) -> CsvExport | None:
    """Build the entries file, or notify and return None when there is nothing to export."""
    frame = as_records_frame(records)
    if frame.empty:
        _notify_empty(EMPTY_DAILY_MESSAGE, notify)
        return None
    return CsvExport(filename=export_filename("lancamentos", today), text=build_daily_csv(frame))


def export_monthly_summary(
    summary: pd.DataFrame | None,
    compensation: Mapping[str, float] | None = None,
    today: datetime.date | None = None,
    notify: Callable[[str], Any] | None = None,
) -> CsvExport | None:
    if summary is None or summary.empty:
        _notify_empty(EMPTY_MONTHLY_MESSAGE, notify)
        return None
    return CsvExport(
        filename=export_filename("resumo_mensal", today),
        text=build_monthly_csv(summary, compensation),
    )
