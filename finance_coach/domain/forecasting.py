"""Spending forecasts and seasonal patterns"""

from datetime import date
from typing import List, Optional, Sequence

from finance_coach.domain.aggregation import by_category, group_transactions, monthly_spend_series
from finance_coach.domain.models import Forecast, Impact, Insight, Priority, SeasonalMonth, Transaction
from finance_coach.utils.date_utils import month_key, month_name

MIN_FORECAST_POINTS = 3
FORECAST_ALERT_RATIO = 1.1
SEASONAL_HIGH = 1.2
SEASONAL_LOW = 0.8


def fit_linear_trend(values: Sequence[float]) -> tuple[float, float]:
    """
    Ordinary least squares fit of values against their index 0..n-1.

    Returns: (slope, intercept)
    """
    n = len(values)
    xs = range(n)
    sum_x = sum(xs)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(xs, values))
    sum_xx = sum(x * x for x in xs)

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def r_squared(values: Sequence[float], slope: float, intercept: float) -> float:
    """Goodness of fit clamped to [0, 1]; a flat series scores 0"""
    mean = sum(values) / len(values)
    ss_total = sum((y - mean) ** 2 for y in values)
    if ss_total == 0:
        return 0.0

    ss_residual = sum((y - (slope * x + intercept)) ** 2 for x, y in enumerate(values))
    return max(0.0, min(1.0, 1 - ss_residual / ss_total))


def forecast_next(values: Sequence[float]) -> Optional[Forecast]:
    """
    Predict the value following a chronological series of monthly totals.

    Needs at least three points. Negative predictions are clamped to zero.
    """
    if len(values) < MIN_FORECAST_POINTS:
        return None

    slope, intercept = fit_linear_trend(values)
    predicted = slope * len(values) + intercept

    return Forecast(
        predicted_amount=max(0.0, predicted),
        confidence=r_squared(values, slope, intercept),
    )


def current_month_spending(transactions: List[Transaction], today: date) -> float:
    current = month_key(today)
    return sum(abs(t.amount) for t in transactions if month_key(t.date) == current)


def forecast_insights(transactions: List[Transaction], today: date) -> List[Insight]:
    """Warn about categories whose trend points well above this month's spend"""
    insights = []

    for category, category_transactions in group_transactions(transactions, by_category).items():
        forecast = forecast_next(monthly_spend_series(category_transactions))
        if forecast is None:
            continue

        current = current_month_spending(category_transactions, today)
        if forecast.predicted_amount <= current * FORECAST_ALERT_RATIO:
            continue

        # No spend yet this month leaves nothing to take a percentage of
        increase = (forecast.predicted_amount / current - 1) * 100 if current > 0 else 0.0
        insights.append(
            Insight(
                id=f"forecast_{category}",
                category="Spending Forecast",
                message=(
                    f"Based on your spending patterns, you're likely to spend "
                    f"${forecast.predicted_amount:.2f} on {category} next month "
                    f"({increase:.1f}% increase)."
                ),
                impact=Impact.MEDIUM,
                kind="forecasting",
                priority=Priority.MEDIUM,
                actionable=True,
                recommendation=(
                    f"Consider setting a budget limit of ${current * 1.05:.2f} for "
                    f"{category} to control this predicted increase."
                ),
                confidence=forecast.confidence,
            )
        )

    return insights


def seasonal_patterns(transactions: List[Transaction]) -> List[SeasonalMonth]:
    """
    Spending index for each calendar month relative to the yearly baseline.

    Each month's figure is its average transaction size across all years; the
    baseline averages those twelve figures, counting empty months as zero.
    """
    totals = [0.0] * 12
    counts = [0] * 12
    for txn in transactions:
        totals[txn.date.month - 1] += abs(txn.amount)
        counts[txn.date.month - 1] += 1

    averages = [total / count if count else 0.0 for total, count in zip(totals, counts)]
    overall = sum(averages) / 12

    patterns = []
    for index, avg in enumerate(averages):
        if avg > overall * SEASONAL_HIGH:
            pattern = "high"
        elif avg < overall * SEASONAL_LOW:
            pattern = "low"
        else:
            pattern = "normal"

        patterns.append(
            SeasonalMonth(
                month=index + 1,
                month_name=month_name(index + 1),
                avg_spending=avg,
                seasonality=avg / overall if overall > 0 else 1.0,
                pattern=pattern,
            )
        )

    return patterns


def seasonal_insights(transactions: List[Transaction], today: date) -> List[Insight]:
    current = seasonal_patterns(transactions)[today.month - 1]
    if current.pattern != "high":
        return []

    above = (current.seasonality - 1) * 100
    return [
        Insight(
            id="seasonal_high",
            category="Seasonal Patterns",
            message=(
                f"{current.month_name} is typically a high-spending month for you "
                f"({above:.1f}% above average). Plan accordingly."
            ),
            impact=Impact.MEDIUM,
            kind="seasonal_analysis",
            priority=Priority.MEDIUM,
            actionable=True,
            recommendation=(
                f"Increase your budget by {above:.1f}% this month or look for ways "
                "to reduce non-essential spending."
            ),
        )
    ]
