"""Unit tests for grouping, statistics, time windows and date helpers"""

import pytest
from datetime import date
from finance_coach.domain.models import TimeView, TimeWindow, Transaction
from finance_coach.domain.aggregation import (
    aggregate,
    by_category,
    by_vendor,
    category_summaries,
    group_transactions,
    monthly_spend_series,
    monthly_totals,
    within,
)
from finance_coach.utils.date_utils import add_months, days_between, month_end, month_key, month_name


def txn(day: date, amount: float, vendor: str = "Store", category: str = "Shopping", id: int = 0):
    return Transaction(id=id, date=day, vendor=vendor, amount=amount, category=category)


def test_group_transactions_keeps_first_seen_order():
    transactions = [
        txn(date(2025, 1, 1), -5, vendor="B"),
        txn(date(2025, 1, 2), -5, vendor="A"),
        txn(date(2025, 1, 3), -5, vendor="B"),
    ]

    groups = group_transactions(transactions, by_vendor)

    assert list(groups) == ["B", "A"]
    assert len(groups["B"]) == 2


def test_aggregate_uses_absolute_amounts_and_population_variance():
    transactions = [
        txn(date(2025, 1, 1), -2),
        txn(date(2025, 1, 5), -4),
        txn(date(2025, 1, 3), -6),
    ]

    [stats] = aggregate(transactions, by_category)

    assert stats.key == "Shopping"
    assert stats.count == 3
    assert stats.total == pytest.approx(12)
    assert stats.mean == pytest.approx(4)
    # ((2-4)^2 + 0 + (6-4)^2) / 3
    assert stats.variance == pytest.approx(8 / 3)
    assert stats.first_date == date(2025, 1, 1)
    assert stats.last_date == date(2025, 1, 5)


def test_aggregate_drops_small_groups():
    transactions = [
        txn(date(2025, 1, 1), -2, category="Dining"),
        txn(date(2025, 1, 2), -2, category="Travel"),
        txn(date(2025, 1, 3), -2, category="Travel"),
    ]

    groups = aggregate(transactions, by_category, min_size=2)

    assert [g.key for g in groups] == ["Travel"]


def test_monthly_totals_chronological():
    transactions = [
        txn(date(2025, 3, 10), -50),
        txn(date(2025, 1, 5), 1000),
        txn(date(2025, 1, 20), -200),
        txn(date(2025, 3, 1), -25),
    ]

    totals = monthly_totals(transactions)

    assert [m.month for m in totals] == ["2025-01", "2025-03"]
    assert totals[0].income == pytest.approx(1000)
    assert totals[0].expenses == pytest.approx(200)
    assert totals[0].net == pytest.approx(800)
    assert totals[1].expenses == pytest.approx(75)


def test_monthly_spend_series():
    transactions = [txn(date(2025, 2, 1), -30), txn(date(2025, 1, 1), -10), txn(date(2025, 2, 9), -5)]

    assert monthly_spend_series(transactions) == [10, 35]


def test_category_summaries_largest_first_with_percentages():
    transactions = [
        txn(date(2025, 1, 1), -100, category="Dining"),
        txn(date(2025, 1, 2), -300, category="Rent"),
        txn(date(2025, 1, 3), -100, category="Dining"),
        txn(date(2025, 1, 4), 2000, category="Salary"),
    ]

    summaries = category_summaries(transactions)

    assert [s.category for s in summaries] == ["Rent", "Dining"]
    assert summaries[0].percentage == 60
    assert summaries[1].percentage == 40
    assert summaries[1].transaction_count == 2
    assert summaries[1].average_transaction == pytest.approx(100)
    assert summaries[1].last_transaction == date(2025, 1, 3)


def test_category_summaries_empty():
    assert category_summaries([]) == []


def test_within_inclusive_bounds():
    transactions = [txn(date(2025, 1, d), -1, id=d) for d in (1, 10, 31)]

    assert [t.id for t in within(transactions, (date(2025, 1, 1), date(2025, 1, 10)))] == [1, 10]
    assert len(within(transactions, None)) == 3


def test_time_window_bounds():
    today = date(2025, 6, 15)

    assert TimeWindow(TimeView.COMPREHENSIVE).bounds(today) is None
    assert TimeWindow(TimeView.RECENT).bounds(today) == (date(2025, 3, 15), today)
    assert TimeWindow(TimeView.MONTHLY, year=2024, month=2).bounds(today) == (
        date(2024, 2, 1),
        date(2024, 2, 29),
    )
    assert TimeWindow(TimeView.YEARLY, year=2024).bounds(today) == (date(2024, 1, 1), date(2024, 12, 31))


def test_time_window_without_period_falls_back_to_recent():
    today = date(2025, 6, 15)

    assert TimeWindow(TimeView.MONTHLY, year=2025).bounds(today) == (date(2025, 3, 15), today)
    assert TimeWindow(TimeView.YEARLY).bounds(today) == (date(2025, 3, 15), today)


def test_date_helpers():
    assert month_key(date(2025, 3, 7)) == "2025-03"
    assert month_end(date(2025, 2, 10)) == date(2025, 2, 28)
    assert add_months(date(2025, 5, 31), -3) == date(2025, 2, 28)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
    assert add_months(date(2025, 1, 15), -1) == date(2024, 12, 15)
    assert month_name(12) == "December"
    assert days_between(date(2025, 1, 1), date(2025, 1, 31)) == 30
