"""Plotly visualisation helpers for the budget dashboard.

Each function accepts one of the view models produced by
:mod:`budget_dashboard.calculations` or
:mod:`budget_dashboard.recommendations` and returns a
`plotly.graph_objects.Figure`.  Nothing is rendered here; a front end
decides how to display the figures.
"""

from __future__ import annotations

from typing import Dict

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .formatting import format_percentage
from .models import BudgetAnalysis

STATUS_COLORS: Dict[str, str] = {
    'over': '#d62728',
    'under': '#1f77b4',
    'on-track': '#2ca02c',
}


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_monthly_trend_chart(trend: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Grouped bar chart of monthly income vs. expenses.

    Parameters
    ----------
    trend : pandas.DataFrame
        Output of :func:`calculations.monthly_trend_dataframe` with
        ``Month``, ``Income`` and ``Expenses`` columns.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        One bar trace per metric, months in series order.
    """
    if trend.empty:
        return _empty_figure()
    long_df = trend.melt(
        id_vars="Month",
        value_vars=["Income", "Expenses"],
        var_name="Metric",
        value_name="Amount",
    )
    fig = px.bar(long_df, x="Month", y="Amount", color="Metric", barmode="group")
    fig.update_layout(
        title=title or "Monthly trend",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_category_breakdown_chart(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Pie chart of the month's spending by category.

    Parameters
    ----------
    breakdown : pandas.DataFrame
        Output of :func:`calculations.category_breakdown`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart labelled with each category's share.
    """
    if breakdown.empty:
        return _empty_figure()
    labels = [
        f"{category}: {format_percentage(pct)}"
        for category, pct in zip(breakdown["Category"], breakdown["Percentage"])
    ]
    fig = go.Figure(go.Pie(labels=labels, values=breakdown["Amount"], sort=False))
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_recommendation_chart(analysis: BudgetAnalysis, title: str | None = None) -> go.Figure:
    """Recommended vs. actual spending per recommendation row.

    Actual bars are coloured by status.
    """
    if not analysis.recommendations:
        return _empty_figure("No recommendations to display")
    categories = [rec.category for rec in analysis.recommendations]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Recommended",
        x=categories,
        y=[rec.recommended_amount for rec in analysis.recommendations],
        marker_color="#7f7f7f",
    ))
    fig.add_trace(go.Bar(
        name="Actual",
        x=categories,
        y=[rec.actual_amount for rec in analysis.recommendations],
        marker_color=[STATUS_COLORS.get(rec.status, "#7f7f7f") for rec in analysis.recommendations],
    ))
    fig.update_layout(
        title=title or "Budget recommendations",
        barmode="group",
        xaxis_title="Category",
        yaxis_title="Amount",
    )
    return fig
