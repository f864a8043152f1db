"""Report aggregation package."""

from expense_tracker.reports.aggregator import (
    MONTH_NAMES,
    BudgetSummary,
    ChartSeries,
    DashboardSummary,
    budget_summary,
    budget_usage_percent,
    by_category,
    by_month,
    chart_series,
    dashboard_summary,
    grand_total,
    is_over_budget,
    month_bounds,
    remaining_budget,
    total_for_date,
    total_for_month,
    total_for_week,
    week_bounds,
)

__all__ = [
    "MONTH_NAMES",
    "BudgetSummary",
    "ChartSeries",
    "DashboardSummary",
    "budget_summary",
    "budget_usage_percent",
    "by_category",
    "by_month",
    "chart_series",
    "dashboard_summary",
    "grand_total",
    "is_over_budget",
    "month_bounds",
    "remaining_budget",
    "total_for_date",
    "total_for_month",
    "total_for_week",
    "week_bounds",
]
