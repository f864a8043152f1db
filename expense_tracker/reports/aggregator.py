"""
Expense Aggregation

Pure functions over a collection of ExpenseRecord. Nothing here reads the
clock: every windowed total takes the reference "now" from the caller.

Windows:
- day:   records whose date equals the given date
- week:  Sunday through Saturday of the week containing now
- month: first through last day of the calendar month containing now

Amounts are summed as plain floats, in record order. Currency symbols,
rounding and locale formatting belong to the display layer.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence, Union

from pydantic import BaseModel, Field

from expense_tracker.models.expense import ExpenseRecord


DateLike = Union[date, datetime]

MONTH_NAMES = {
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    "gu": (
        "જાન્યુઆરી", "ફેબ્રુઆરી", "માર્ચ", "એપ્રિલ", "મે", "જૂન",
        "જુલાઈ", "ઓગસ્ટ", "સપ્ટેમ્બર", "ઓક્ટોબર", "નવેમ્બર", "ડિસેમ્બર",
    ),
}


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _sum_between(records: Iterable[ExpenseRecord], start: date, end: date) -> float:
    return sum(
        (record.amount for record in records if start <= record.date <= end),
        0.0,
    )


# =============================================================================
# WINDOWS
# =============================================================================

def week_bounds(now: DateLike) -> tuple[date, date]:
    """Sunday and Saturday of the week containing now."""
    today = _as_date(now)
    # date.weekday() counts from Monday=0; shift so Sunday is day 0
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(now: DateLike) -> tuple[date, date]:
    """First and last day of the month containing now."""
    today = _as_date(now)
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


# =============================================================================
# TOTALS
# =============================================================================

def total_for_date(records: Iterable[ExpenseRecord], day: DateLike) -> float:
    target = _as_date(day)
    return _sum_between(records, target, target)


def total_for_week(records: Iterable[ExpenseRecord], now: DateLike) -> float:
    return _sum_between(records, *week_bounds(now))


def total_for_month(records: Iterable[ExpenseRecord], now: DateLike) -> float:
    return _sum_between(records, *month_bounds(now))


def grand_total(records: Iterable[ExpenseRecord]) -> float:
    return sum((record.amount for record in records), 0.0)


# =============================================================================
# BUDGET
# =============================================================================

def remaining_budget(budget: float, month_total: float) -> float:
    """What is left of the budget this month; never negative."""
    return max(0.0, budget - month_total)


def budget_usage_percent(budget: float, month_total: float) -> float:
    """
    Share of the budget spent, in percent.

    0 when no budget is set. Not capped: overspending reports above 100.
    """
    if budget <= 0:
        return 0.0
    return (month_total / budget) * 100


def is_over_budget(budget: float, month_total: float) -> bool:
    """True when a budget is set and this month's spending exceeds it."""
    return budget > 0 and month_total > budget


# =============================================================================
# BREAKDOWNS
# =============================================================================

def by_category(records: Iterable[ExpenseRecord]) -> dict[str, float]:
    """
    Total per category, largest first.

    Equal totals keep the order in which their categories first appeared.
    """
    totals: dict[str, float] = {}
    for record in records:
        totals[record.category] = totals.get(record.category, 0.0) + record.amount
    # sorted() is stable, so ties stay in first-seen order
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def by_month(
    records: Iterable[ExpenseRecord],
    year: int,
    month_names: Sequence[str] = MONTH_NAMES["en"],
) -> dict[str, float]:
    """
    Total per month of `year`, in calendar order.

    Only months with at least one record appear.
    """
    totals = [0.0] * 12
    seen = [False] * 12
    for record in records:
        if record.date.year != year:
            continue
        index = record.date.month - 1
        totals[index] += record.amount
        seen[index] = True
    return {
        month_names[index]: totals[index]
        for index in range(12)
        if seen[index]
    }


# =============================================================================
# SUMMARIES FOR THE DISPLAY LAYER
# =============================================================================

class DashboardSummary(BaseModel):
    """The four dashboard cards plus the overspend warning."""

    today: float = Field(..., description="Spent on the reference date")
    week: float = Field(..., description="Spent this Sunday-Saturday week")
    month: float = Field(..., description="Spent this calendar month")
    total: float = Field(..., description="Spent overall")
    over_budget: bool = Field(
        default=False,
        description="A budget is set and this month exceeds it"
    )


class BudgetSummary(BaseModel):
    """Budget panel figures."""

    budget: float
    month_total: float
    remaining: float
    usage_percent: float = Field(..., description="Uncapped usage")
    progress_percent: float = Field(
        ...,
        ge=0,
        le=100,
        description="Usage clamped to 100 for a progress bar"
    )


class ChartSeries(BaseModel):
    """Label/value pairs handed to the charting collaborator."""

    labels: list[str] = Field(default_factory=list)
    values: list[float] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels


def dashboard_summary(
    records: Sequence[ExpenseRecord],
    budget: float,
    now: DateLike,
) -> DashboardSummary:
    month = total_for_month(records, now)
    return DashboardSummary(
        today=total_for_date(records, now),
        week=total_for_week(records, now),
        month=month,
        total=grand_total(records),
        over_budget=is_over_budget(budget, month),
    )


def budget_summary(
    records: Sequence[ExpenseRecord],
    budget: float,
    now: DateLike,
) -> BudgetSummary:
    month = total_for_month(records, now)
    usage = budget_usage_percent(budget, month)
    return BudgetSummary(
        budget=budget,
        month_total=month,
        remaining=remaining_budget(budget, month),
        usage_percent=usage,
        progress_percent=min(usage, 100.0),
    )


def chart_series(totals: Mapping[str, float]) -> ChartSeries:
    return ChartSeries(labels=list(totals.keys()), values=list(totals.values()))
