"""Unit tests for spending forecasts and seasonality"""

import pytest
from datetime import date
from finance_coach.domain.models import Impact, Transaction
from finance_coach.domain.forecasting import (
    fit_linear_trend,
    forecast_insights,
    forecast_next,
    r_squared,
    seasonal_insights,
    seasonal_patterns,
)


def expense(day: date, amount: float, category: str = "Groceries"):
    return Transaction(id=0, date=day, vendor="Supermarket", amount=-amount, category=category, type="expense")


def test_fit_linear_trend():
    slope, intercept = fit_linear_trend([100, 200, 300])

    assert slope == pytest.approx(100)
    assert intercept == pytest.approx(100)


def test_forecast_perfect_line():
    forecast = forecast_next([100, 200, 300])

    assert forecast.predicted_amount == pytest.approx(400)
    assert forecast.confidence == pytest.approx(1.0)


def test_forecast_needs_three_points():
    assert forecast_next([100, 200]) is None
    assert forecast_next([]) is None


def test_forecast_flat_series_has_zero_confidence():
    forecast = forecast_next([50, 50, 50])

    assert forecast.predicted_amount == pytest.approx(50)
    assert forecast.confidence == 0.0


def test_forecast_never_negative():
    forecast = forecast_next([400, 200, 0])

    assert forecast.predicted_amount == 0.0


def test_r_squared_clamped():
    assert 0.0 <= r_squared([10, 30, 20], 0.0, 0.0) <= 1.0


def test_forecast_insight_for_rising_category():
    today = date(2025, 6, 15)
    transactions = [
        expense(date(2025, 3, 5), 100),
        expense(date(2025, 4, 5), 200),
        expense(date(2025, 5, 5), 300),
        expense(date(2025, 6, 5), 350),
    ]

    insights = forecast_insights(transactions, today)

    assert len(insights) == 1
    insight = insights[0]
    assert insight.id == "forecast_Groceries"
    assert insight.impact == Impact.MEDIUM
    # Series [100, 200, 300, 350] predicts 450 next month
    assert "$450.00" in insight.message
    assert "28.6% increase" in insight.message
    assert "$367.50" in insight.recommendation
    assert 0.0 < insight.confidence <= 1.0


def test_forecast_emitted_without_current_month_spend():
    today = date(2025, 6, 15)
    transactions = [
        expense(date(2025, 2, 5), 100),
        expense(date(2025, 3, 5), 200),
        expense(date(2025, 4, 5), 300),
    ]

    insights = forecast_insights(transactions, today)

    assert [i.id for i in insights] == ["forecast_Groceries"]
    assert "$400.00" in insights[0].message
    assert "0.0% increase" in insights[0].message


def test_forecast_skipped_for_steady_category():
    today = date(2025, 6, 15)
    transactions = [expense(date(2025, m, 5), 200) for m in (3, 4, 5, 6)]

    assert forecast_insights(transactions, today) == []


def december_heavy_history():
    transactions = [expense(date(2024, m, 10), 100, category="Shopping") for m in range(1, 12)]
    transactions.append(expense(date(2024, 12, 10), 500, category="Shopping"))
    return transactions


def test_seasonal_patterns():
    patterns = seasonal_patterns(december_heavy_history())

    assert len(patterns) == 12
    december = patterns[11]
    assert december.month == 12
    assert december.month_name == "December"
    assert december.pattern == "high"
    assert december.seasonality == pytest.approx(3.75)
    assert patterns[0].pattern == "low"


def test_seasonal_patterns_without_data_are_normal():
    patterns = seasonal_patterns([])

    assert all(p.pattern == "normal" and p.seasonality == 1.0 for p in patterns)


def test_seasonal_insight_in_high_month():
    insights = seasonal_insights(december_heavy_history(), date(2025, 12, 1))

    assert [i.id for i in insights] == ["seasonal_high"]
    assert "December" in insights[0].message
    assert "275.0% above average" in insights[0].message


def test_no_seasonal_insight_in_ordinary_month():
    assert seasonal_insights(december_heavy_history(), date(2025, 3, 1)) == []
