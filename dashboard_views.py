"""Modular Streamlit page renderers."""

from __future__ import annotations

import datetime

import pandas as pd
import streamlit as st

from export import export_daily_records, export_monthly_summary
from formatting import (
    format_count,
    format_currency,
    format_multiplier,
    format_number,
    format_percent,
    month_label,
)
from metric_guide import METRIC_GUIDE
from state import AppState, MutationOutcome


FLASH_KEY = "flash_messages"


def _show_outcome(outcome: MutationOutcome) -> None:
    if outcome.ok:
        # Rerun so every view reads the refetched rows.
        st.session_state[FLASH_KEY] = list(outcome.messages)
        st.rerun()
    for message in outcome.messages:
        st.error(message)


def render_flash() -> None:
    for message in st.session_state.pop(FLASH_KEY, []):
        st.success(message)


def _chart_frame(monthly: pd.DataFrame, columns: dict[str, str]) -> pd.DataFrame:
    return monthly[list(columns)].rename(columns=columns)


def render_kpis(totals: dict[str, float]) -> None:
    st.subheader("Snapshot KPIs")

    rows = [
        [
            ("Revenue", format_currency(totals["total_sales_value"])),
            ("Ad spend", format_currency(totals["total_ad_spend"])),
            ("Profit", format_currency(totals["profit"])),
            ("ROI", format_multiplier(totals["roi"])),
        ],
        [
            ("Leads", format_count(totals["total_leads"])),
            ("Sales", format_count(totals["total_sales"])),
            ("Avg CPL", format_currency(totals["cpl"])),
            ("Avg ticket", format_currency(totals["average_ticket"])),
        ],
        [
            ("CPA", format_currency(totals["cpa"])),
            ("Leads per sale", format_number(totals["leads_per_sale"])),
            ("Conversion", format_percent(totals["conversion_pct"])),
            ("Entries", format_count(totals["entries"])),
        ],
    ]

    for row in rows:
        cols = st.columns(4)
        for idx, (label, value) in enumerate(row):
            cols[idx].metric(label, value)


def render_dashboard(totals: dict[str, float], monthly: pd.DataFrame) -> None:
    st.header("Dashboard")
    if not totals["entries"]:
        st.info("No entries recorded yet.")
        return

    render_kpis(totals)

    left, right = st.columns(2)
    with left:
        st.markdown("### Monthly revenue vs ad spend")
        st.bar_chart(_chart_frame(monthly, {"SalesValue": "Revenue", "AdSpend": "Ad spend"}))
    with right:
        st.markdown("### Monthly profit")
        st.line_chart(_chart_frame(monthly, {"Profit": "Profit"}))

    left, right = st.columns(2)
    with left:
        st.markdown("### ROI by month")
        st.line_chart(_chart_frame(monthly, {"ROI": "ROI"}))
    with right:
        st.markdown("### Where revenue went")
        split = pd.DataFrame(
            {"Value": [max(0.0, totals["profit"]), totals["total_ad_spend"]]},
            index=["Profit", "Ad spend"],
        )
        st.bar_chart(split)


def render_entry_form(state: AppState) -> None:
    st.header("New entry")
    st.caption("One entry per day. Values are checked before anything is saved.")

    with st.form(key="entry_form"):
        entry_date = st.date_input("Date", value=datetime.date.today())
        ad_spend = st.number_input("Ad spend (R$)", value=0.0, step=0.01, format="%.2f")
        sales_value = st.number_input("Sales value (R$)", value=0.0, step=0.01, format="%.2f")
        leads = st.number_input("Leads", value=0, step=1)
        sales = st.number_input("Sales", value=0, step=1)
        submit = st.form_submit_button("Save entry")

    if not submit:
        return

    outcome = state.add_entry(
        {
            "data": entry_date.isoformat() if entry_date else "",
            "gasto_ads": ad_spend,
            "valor_vendas": sales_value,
            "qtd_leads": leads,
            "qtd_vendas": sales,
        }
    )
    _show_outcome(outcome)


def _history_display(history: pd.DataFrame) -> pd.DataFrame:
    view = pd.DataFrame(
        {
            "Date": history["Date"].dt.strftime("%d/%m/%Y"),
            "Ad spend": history["AdSpend"].map(format_currency),
            "Sales": history["SalesValue"].map(format_currency),
            "Leads": history["Leads"],
            "Sales count": history["Sales"],
            "CPL": history["CPL"].map(format_currency),
            "CPA": history["CPA"].map(format_currency),
            "Avg ticket": history["AverageTicket"].map(format_currency),
            "ROI": history["ROI"].map(format_multiplier),
            "Profit": history["Profit"].map(format_currency),
        }
    )
    return view


def _render_entry_editor(state: AppState, history: pd.DataFrame) -> None:
    options = {
        row["Date"].strftime("%Y-%m-%d"): row
        for _, row in history.iterrows()
        if pd.notna(row["Date"])
    }
    if not options:
        return

    with st.expander("Edit or delete an entry", expanded=False):
        selected = st.selectbox("Entry date", list(options), key="history_selected")
        row = options[selected]

        with st.form(key=f"edit_entry_{row['id']}"):
            entry_date = st.date_input("Date", value=row["Date"].date())
            ad_spend = st.number_input("Ad spend (R$)", value=float(row["AdSpend"]), step=0.01, format="%.2f")
            sales_value = st.number_input(
                "Sales value (R$)", value=float(row["SalesValue"]), step=0.01, format="%.2f"
            )
            leads = st.number_input("Leads", value=int(row["Leads"]), step=1)
            sales = st.number_input("Sales", value=int(row["Sales"]), step=1)
            save = st.form_submit_button("Save changes")

        if save:
            outcome = state.update_entry(
                row["id"],
                {
                    "data": entry_date.isoformat() if entry_date else "",
                    "gasto_ads": ad_spend,
                    "valor_vendas": sales_value,
                    "qtd_leads": leads,
                    "qtd_vendas": sales,
                },
            )
            _show_outcome(outcome)

        confirm = st.checkbox("I want to delete this entry", key=f"confirm_delete_{row['id']}")
        if st.button("Delete entry", disabled=not confirm, key=f"delete_entry_{row['id']}"):
            _show_outcome(state.delete_entry(row["id"]))


def render_history(state: AppState, start: datetime.date | None, end: datetime.date | None) -> None:
    st.header("History")
    history = state.history(start, end)
    if history.empty:
        st.info("No entries recorded yet.")
        return

    if st.button("Export CSV", key="export_entries"):
        export = export_daily_records(state.filtered_entries(start, end), notify=st.warning)
        if export is not None:
            st.download_button(
                "Download entries (.csv)",
                data=export.data,
                file_name=export.filename,
                mime="text/csv",
            )

    st.dataframe(_history_display(history), use_container_width=True, hide_index=True)
    _render_entry_editor(state, history)

    averages = state.averages(start, end)
    a, b, c = st.columns(3)
    a.metric("Avg ROI / entry", format_multiplier(averages["mean_roi"]))
    b.metric("Avg profit / entry", format_currency(averages["mean_profit"]))
    c.metric("Days recorded", format_count(averages["entries"]))


def _monthly_display(monthly: pd.DataFrame) -> pd.DataFrame:
    view = pd.DataFrame(
        {
            "Month": [month_label(month) for month in monthly.index],
            "Revenue": monthly["SalesValue"].map(format_currency).tolist(),
            "Ad spend": monthly["AdSpend"].map(format_currency).tolist(),
            "Gross profit": monthly["Profit"].map(format_currency).tolist(),
            "Compensation": monthly["Compensation"].map(format_currency).tolist(),
            "Net profit": monthly["NetProfit"].map(format_currency).tolist(),
            "ROI": monthly["ROI"].map(format_multiplier).tolist(),
            "Leads": monthly["Leads"].tolist(),
            "Sales": monthly["Sales"].tolist(),
            "CPL": monthly["CPL"].map(format_currency).tolist(),
            "CPA": monthly["CPA"].map(format_currency).tolist(),
            "Avg ticket": monthly["AverageTicket"].map(format_currency).tolist(),
            "Conv. %": monthly["ConversionPct"].map(format_percent).tolist(),
        }
    )
    return view


def render_monthly(state: AppState, start: datetime.date | None, end: datetime.date | None) -> None:
    st.header("Monthly view")
    monthly = state.monthly(start, end)
    if monthly.empty:
        st.info("No entries recorded yet.")
        return

    totals = state.totals(start, end)
    compensation_total = float(monthly["Compensation"].sum())
    cols = st.columns(5)
    cols[0].metric("Revenue", format_currency(totals["total_sales_value"]))
    cols[1].metric("Ad spend", format_currency(totals["total_ad_spend"]))
    cols[2].metric("Net profit", format_currency(totals["profit"] - compensation_total))
    cols[3].metric("Leads", format_count(totals["total_leads"]))
    cols[4].metric("Sales", format_count(totals["total_sales"]))
    st.caption(f"Compensation in period: {format_currency(compensation_total)}")

    left, right = st.columns(2)
    with left:
        st.markdown("### Revenue vs ad spend")
        st.bar_chart(_chart_frame(monthly, {"SalesValue": "Revenue", "AdSpend": "Ad spend"}))
    with right:
        st.markdown("### Profit trend")
        st.line_chart(_chart_frame(monthly, {"Profit": "Gross profit", "NetProfit": "Net profit"}))

    left, right = st.columns(2)
    with left:
        st.markdown("### Leads and sales")
        st.bar_chart(_chart_frame(monthly, {"Leads": "Leads", "Sales": "Sales"}))
    with right:
        st.markdown("### ROI by month")
        st.line_chart(_chart_frame(monthly, {"ROI": "ROI"}))

    st.markdown("### Month by month")
    st.dataframe(_monthly_display(monthly), use_container_width=True, hide_index=True)

    if st.button("Export CSV", key="export_monthly"):
        export = export_monthly_summary(monthly, notify=st.warning)
        if export is not None:
            st.download_button(
                "Download monthly summary (.csv)",
                data=export.data,
                file_name=export.filename,
                mime="text/csv",
            )


def render_compensation(state: AppState) -> None:
    st.header("Compensation")
    st.caption("Owner's monthly draw, subtracted from each month's profit in the monthly view.")

    with st.expander("Add compensation", expanded=False):
        with st.form(key="compensation_form"):
            month = st.text_input("Month (YYYY-MM)", value=datetime.date.today().strftime("%Y-%m"))
            amount = st.number_input("Amount (R$)", value=0.0, step=0.01, format="%.2f")
            description = st.text_input("Description (optional)")
            submit = st.form_submit_button("Add")
        if submit:
            _show_outcome(
                state.add_compensation({"mes_ano": month.strip(), "valor": amount, "descricao": description})
            )

    table = state.compensation_table()
    if table.empty:
        st.info("No compensation registered yet.")
        return

    st.dataframe(
        pd.DataFrame(
            {
                "Month": table["Month"].map(month_label),
                "Amount": table["Amount"].map(format_currency),
                "Description": table["Description"],
            }
        ),
        use_container_width=True,
        hide_index=True,
    )

    options = {row["Month"]: row for _, row in table.iterrows()}
    with st.expander("Edit or delete compensation", expanded=False):
        selected = st.selectbox("Month", list(options), format_func=month_label, key="compensation_selected")
        row = options[selected]
        with st.form(key=f"edit_compensation_{row['id']}"):
            month = st.text_input("Month (YYYY-MM)", value=row["Month"])
            amount = st.number_input("Amount (R$)", value=float(row["Amount"]), step=0.01, format="%.2f")
            description = st.text_input("Description (optional)", value=row["Description"])
            save = st.form_submit_button("Save changes")
        if save:
            _show_outcome(
                state.update_compensation(
                    row["id"], {"mes_ano": month.strip(), "valor": amount, "descricao": description}
                )
            )

        confirm = st.checkbox("I want to delete this record", key=f"confirm_comp_{row['id']}")
        if st.button("Delete", disabled=not confirm, key=f"delete_comp_{row['id']}"):
            _show_outcome(state.delete_compensation(row["id"]))


def render_metric_guide() -> None:
    st.header("Metric Guide")
    st.caption("Definitions and formulas behind each KPI.")
    st.dataframe(pd.DataFrame(METRIC_GUIDE), use_container_width=True, hide_index=True)
