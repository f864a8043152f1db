"""Tests for the aggregation functions."""

from datetime import date, datetime

import pytest

from expense_tracker.reports import (
    MONTH_NAMES,
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

from tests.conftest import make_record


class TestWindows:
    """Tests for the week and month windows."""

    @pytest.mark.parametrize("day", ["2024-03-17", "2024-03-20", "2024-03-23"])
    def test_week_runs_sunday_to_saturday(self, day):
        """Test that every day of a week maps to the same Sunday-Saturday window."""
        assert week_bounds(date.fromisoformat(day)) == (date(2024, 3, 17), date(2024, 3, 23))

    def test_week_accepts_datetime(self):
        """Test that a datetime is reduced to its date."""
        assert week_bounds(datetime(2024, 3, 20, 23, 59))[0] == date(2024, 3, 17)

    def test_month_bounds_leap_year(self):
        """Test that February 2024 ends on the 29th."""
        assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestTotals:
    """Tests for windowed totals."""

    def test_month_total_scenario(self, march_records, fixed_now):
        """Test that only March records count toward the March total."""
        assert total_for_month(march_records, fixed_now) == 150

    def test_day_and_week_totals(self, fixed_now):
        """Test day and week windows around Wednesday 20 March."""
        records = [
            make_record(1, "2024-03-20", amount=100),
            make_record(2, "2024-03-17", amount=40),
            make_record(3, "2024-03-16", amount=25),
            make_record(4, "2024-03-24", amount=10),
        ]
        assert total_for_date(records, fixed_now) == 100
        assert total_for_week(records, fixed_now) == 140
        assert grand_total(records) == 175

    def test_empty_collection(self, fixed_now):
        """Test that no records sum to zero."""
        assert total_for_month([], fixed_now) == 0.0
        assert grand_total([]) == 0.0

    def test_grand_total_equals_sum_of_month_totals(self):
        """Test that monthly totals over one year add up to the grand total."""
        records = [
            make_record(1, "2024-01-31", amount=12.5),
            make_record(2, "2024-02-29", amount=40),
            make_record(3, "2024-02-01", amount=7.25),
            make_record(4, "2024-06-15", amount=300),
            make_record(5, "2024-12-31", amount=0.75),
        ]
        months = {(r.date.year, r.date.month) for r in records}
        monthly = sum(total_for_month(records, date(year, month, 1)) for year, month in months)
        assert monthly == pytest.approx(grand_total(records))


class TestBudgetMath:
    """Tests for budget helpers."""

    def test_overspend_scenario(self):
        """Test that remaining never goes below zero and usage is uncapped."""
        assert remaining_budget(1000, 1200) == 0
        assert budget_usage_percent(1000, 1200) == 120

    def test_usage_without_budget(self):
        """Test that usage is 0 when no budget is set."""
        assert budget_usage_percent(0, 500) == 0.0

    def test_over_budget_warning(self):
        """Test the dashboard overspend condition."""
        assert is_over_budget(1000, 1000.01)
        assert not is_over_budget(1000, 1000)
        assert not is_over_budget(0, 50)

    def test_budget_summary_clamps_progress(self, march_records, fixed_now):
        """Test that the progress bar value stops at 100."""
        summary = budget_summary(march_records, 100, fixed_now)
        assert summary.month_total == 150
        assert summary.remaining == 0
        assert summary.usage_percent == 150
        assert summary.progress_percent == 100


class TestBreakdowns:
    """Tests for category and month breakdowns."""

    def test_category_scenario(self, march_records):
        """Test that categories are ordered by total, largest first."""
        assert list(by_category(march_records).items()) == [("Rent", 500), ("Food", 150)]

    def test_category_ties_keep_first_seen_order(self):
        """Test that equal totals keep the order of first appearance."""
        records = [
            make_record(1, "2024-03-01", "Food", 50),
            make_record(2, "2024-03-02", "Travel", 80),
            make_record(3, "2024-03-03", "Rent", 50),
        ]
        assert list(by_category(records)) == ["Travel", "Food", "Rent"]

    def test_by_month_calendar_order(self):
        """Test that months come in calendar order and other years are ignored."""
        records = [
            make_record(1, "2024-04-02", amount=10),
            make_record(2, "2024-01-15", amount=20),
            make_record(3, "2023-01-15", amount=999),
            make_record(4, "2024-04-20", amount=5),
        ]
        assert by_month(records, 2024) == {"January": 20, "April": 15}

    def test_by_month_localized_names(self):
        """Test that month labels come from the given name table."""
        records = [make_record(1, "2024-03-05", amount=10)]
        assert by_month(records, 2024, MONTH_NAMES["gu"]) == {"માર્ચ": 10}


class TestSummaries:
    """Tests for the display-layer summaries."""

    def test_dashboard_summary(self, fixed_now):
        """Test the four dashboard cards and the warning flag."""
        records = [
            make_record(1, "2024-03-20", amount=100),
            make_record(2, "2024-03-18", amount=50),
            make_record(3, "2024-03-01", amount=30),
            make_record(4, "2024-02-28", amount=20),
        ]
        summary = dashboard_summary(records, 150, fixed_now)
        assert summary.today == 100
        assert summary.week == 150
        assert summary.month == 180
        assert summary.total == 200
        assert summary.over_budget is True

    def test_chart_series(self):
        """Test conversion of totals into chart labels and values."""
        series = chart_series({"Rent": 500, "Food": 150})
        assert series.labels == ["Rent", "Food"]
        assert series.values == [500, 150]
        assert chart_series({}).is_empty
