"""Plotly chart helpers for the expense dashboard.

Each function accepts an output of :mod:`expense_tracker.aggregation` and
returns a `plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.  Empty input yields a blank figure titled
"No data to display" rather than an error.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from . import config
from .aggregation import CategoryTotals, category_breakdown
from .formatting import display_category


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_category_pie_chart(totals: CategoryTotals, title: str | None = None) -> go.Figure:
    """Pie chart of spending per category.

    Parameters
    ----------
    totals : CategoryTotals
        Result of :func:`~expense_tracker.aggregation.category_totals`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart; zero buckets are left out.
    """
    rows = [(name, amount) for name, amount in category_breakdown(totals) if amount > 0]
    if not rows:
        return _empty_figure()
    df = pd.DataFrame(rows, columns=["Category", "Amount"])
    fig = px.pie(df, names="Category", values="Amount")
    fig.update_traces(hovertemplate=f"%{{label}}: {config.CURRENCY_SYMBOL}%{{value:,.2f}}<extra></extra>")
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_daily_bar_chart(daily: Sequence[Tuple[str, float]], title: str | None = None) -> go.Figure:
    """Bar chart of daily totals, oldest day on the left.

    Parameters
    ----------
    daily : sequence of (display date, amount)
        Result of :func:`~expense_tracker.aggregation.daily_totals`
        (newest first).
    title : str, optional
        Chart title.
    """
    if not daily:
        return _empty_figure()
    df = pd.DataFrame(list(reversed(daily)), columns=["Date", "Amount"])
    fig = px.bar(df, x="Date", y="Amount")
    fig.update_layout(
        title=title or "Daily spending",
        xaxis_title="Date",
        yaxis_title=f"Amount ({config.CURRENCY_SYMBOL})",
        xaxis_type="category",
    )
    return fig


def create_budget_gauge(budget: float, spent: float, title: str | None = None) -> go.Figure:
    """Gauge of spending against the budget; the bar turns red past 100%."""
    if budget <= 0:
        return _empty_figure("No budget set")
    percent = float(np.clip(spent / budget * 100, 0, 200))
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=percent,
            number={"suffix": "%", "valueformat": ".1f"},
            gauge={
                "axis": {"range": [0, max(100.0, percent)]},
                "bar": {"color": "crimson" if spent > budget else "seagreen"},
            },
        )
    )
    fig.update_layout(title=title or "Budget used")
    return fig


def create_monthly_bar_chart(summary: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Stacked bars of monthly totals per category.

    Parameters
    ----------
    summary : pandas.DataFrame
        Result of :func:`~expense_tracker.aggregation.monthly_summary`.
    """
    if summary.empty:
        return _empty_figure()
    df = summary.sort_values("Month").copy()
    df["Category"] = df["Category"].map(display_category)
    months: List[str] = df["Month"].unique().tolist()
    fig = px.bar(df, x="Month", y="Total", color="Category", barmode="stack", category_orders={"Month": months})
    fig.update_layout(
        title=title or "Monthly spending",
        xaxis_title="Month",
        yaxis_title=f"Amount ({config.CURRENCY_SYMBOL})",
    )
    return fig
