"""AdLedger Streamlit entrypoint with modular page navigation."""

from __future__ import annotations

import datetime
import logging

import streamlit as st

from backend import build_gateways
from config import load_settings
from dashboard_views import (
    render_compensation,
    render_dashboard,
    render_entry_form,
    render_flash,
    render_history,
    render_metric_guide,
    render_monthly,
)
from metrics import preset_date_range
from state import AppState

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="AdLedger", page_icon="\U0001f4ca", layout="wide")

PAGES = ["Dashboard", "New entry", "History", "Monthly view", "Compensation", "Metric Guide"]
# Pages that work on the whole dataset and hide the date filter.
UNFILTERED_PAGES = {"New entry", "Compensation", "Metric Guide"}

DATE_FILTER_LABELS = {
    "All": "all",
    "Today": "today",
    "Last 7 days": "7d",
    "Last 15 days": "15d",
    "Last 30 days": "30d",
    "Custom": "custom",
}


def _inject_styles() -> None:
    st.markdown(
        """
        <style>
        .stApp {
            background: linear-gradient(180deg, #f5f8ff 0%, #edf2fb 100%);
        }
        .hero {
            margin-bottom: 0.6rem;
            padding: 1rem 1.2rem;
            border-radius: 14px;
            color: #ffffff;
            background: linear-gradient(90deg, #2563eb 0%, #1d4ed8 100%);
            box-shadow: 0 16px 36px rgba(37, 99, 235, 0.18);
        }
        .hero h1 {
            margin: 0;
            color: #ffffff;
        }
        .hero p {
            margin: 0.35rem 0 0 0;
            color: #dbeafe;
        }
        [data-testid="stMetric"] {
            background: rgba(255,255,255,0.92);
            border: 1px solid rgba(37, 99, 235, 0.20);
            border-radius: 12px;
            padding: 0.45rem 0.6rem;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _render_header() -> None:
    st.markdown(
        """
        <div class="hero">
          <h1>AdLedger</h1>
          <p>Daily ad spend, leads and sales with ROI, CPL, CPA and monthly results.</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _get_state() -> AppState:
    if "app_state" not in st.session_state:
        settings = load_settings()
        logging.getLogger().setLevel(settings.log_level)
        state = AppState(build_gateways(settings))
        state.reload()
        st.session_state["app_state"] = state
    return st.session_state["app_state"]


def _date_filter() -> tuple[datetime.date | None, datetime.date | None]:
    st.sidebar.header("Period")
    label = st.sidebar.selectbox("Show", list(DATE_FILTER_LABELS), index=0)
    preset = DATE_FILTER_LABELS[label]

    if preset != "custom":
        return preset_date_range(preset)

    today = datetime.date.today()
    start = st.sidebar.date_input("From", value=today - datetime.timedelta(days=30), key="filter_start")
    end = st.sidebar.date_input("To", value=today, key="filter_end")
    if start > end:
        st.sidebar.warning("Start date is after end date; showing the start day only.")
        return start, start
    return start, end


def main() -> None:
    _inject_styles()
    _render_header()

    view = st.sidebar.radio("Navigate", PAGES)
    state = _get_state()

    if st.sidebar.button("Reload data"):
        state.reload()

    if state.offline:
        st.warning("Demo mode: showing sample data. Configure the backend to use real data.")
    if state.load_error:
        st.error(state.load_error)
    render_flash()

    start, end = (None, None)
    if view not in UNFILTERED_PAGES:
        start, end = _date_filter()

    if view == "Dashboard":
        render_dashboard(state.totals(start, end), state.monthly(start, end))
    elif view == "New entry":
        render_entry_form(state)
    elif view == "History":
        render_history(state, start, end)
    elif view == "Monthly view":
        render_monthly(state, start, end)
    elif view == "Compensation":
        render_compensation(state)
    elif view == "Metric Guide":
        render_metric_guide()


if __name__ == "__main__":
    main()
