"""Human-readable metric definitions for the app."""

METRIC_GUIDE = [
    {
        "Metric": "Revenue (R$)",
        "Meaning": "Total sales value in the selected period.",
        "Formula": "sum(sales value)",
    },
    {
        "Metric": "Ad spend (R$)",
        "Meaning": "Total paid on ads in the selected period.",
        "Formula": "sum(ad spend)",
    },
    {
        "Metric": "Profit",
        "Meaning": "What is left of revenue after ad spend. Can be negative.",
        "Formula": "Revenue - Ad spend",
    },
    {
        "Metric": "ROI",
        "Meaning": "Revenue returned per unit spent on ads, as a multiple (2.00x returns twice the spend).",
        "Formula": "Revenue / Ad spend (0 when nothing was spent)",
    },
    {
        "Metric": "CPL",
        "Meaning": "Cost per lead.",
        "Formula": "Ad spend / Leads (0 without leads)",
    },
    {
        "Metric": "CPA",
        "Meaning": "Cost per acquisition, i.e. ad spend per closed sale.",
        "Formula": "Ad spend / Sales (0 without sales)",
    },
    {
        "Metric": "Average ticket",
        "Meaning": "Average revenue per sale.",
        "Formula": "Revenue / Sales (0 without sales)",
    },
    {
        "Metric": "Leads per sale",
        "Meaning": "How many leads it takes to close one sale.",
        "Formula": "Leads / Sales (0 without sales)",
    },
    {
        "Metric": "Conversion (%)",
        "Meaning": "Share of leads that became sales.",
        "Formula": "(Sales / Leads) * 100 (0 without leads)",
    },
    {
        "Metric": "Compensation",
        "Meaning": "Owner's monthly draw (pro-labore) registered for the month.",
        "Formula": "amount of the month's compensation record",
    },
    {
        "Metric": "Net profit",
        "Meaning": "Monthly profit after the owner's compensation.",
        "Formula": "Profit - Compensation",
    },
    {
        "Metric": "Monthly and total ratios",
        "Meaning": "Period ratios come from period totals, never from an average of daily ratios.",
        "Formula": "e.g. ROI = sum(Revenue) / sum(Ad spend)",
    },
    {
        "Metric": "Avg ROI / entry",
        "Meaning": "Plain mean of each day's ROI, shown under the history table.",
        "Formula": "mean(daily ROI)",
    },
]
