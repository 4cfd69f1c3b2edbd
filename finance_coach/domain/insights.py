"""Insight aggregation - fans a transaction snapshot out to every generator"""

import logging
from typing import Callable, List, Optional

from finance_coach.domain.aggregation import (
    category_summaries,
    expenses_only,
    monthly_totals,
    within,
)
from finance_coach.domain.analyzers import (
    analyze_recent_activity,
    analyze_savings_goal,
    analyze_subscription_cost,
    analyze_top_category,
    analyze_trend,
    analyze_vendor_frequency,
    current_month_cash_flow,
    detect_anomalies,
)
from finance_coach.domain.forecasting import forecast_insights, seasonal_insights
from finance_coach.domain.models import (
    AnalysisContext,
    Impact,
    Insight,
    SpendingReport,
    TimeView,
    TimeWindow,
    Transaction,
)
from finance_coach.infrastructure.observability.metrics import record_generator_failure

logger = logging.getLogger(__name__)


def no_data_insight(window: TimeWindow) -> Insight:
    """Placeholder returned when the requested window holds no transactions"""
    if window.view == TimeView.MONTHLY and window.month is not None:
        message = (
            f"No transaction data found for month {window.month}. "
            "Add some transactions to get personalized insights."
        )
    elif window.view == TimeView.YEARLY:
        period = window.year if window.year is not None else "this year"
        message = (
            f"No transaction data found for {period}. "
            "Begin tracking your finances to see your spending patterns."
        )
    else:
        message = (
            "No transaction data found for this period. "
            "Add some transactions to get personalized insights."
        )

    return Insight(
        id="no_data",
        category="Data",
        message=message,
        impact=Impact.LOW,
        kind="data_encouragement",
        estimated_annual_savings=0,
    )


def _run_generator(name: str, generator: Callable[[], List[Insight]]) -> List[Insight]:
    """Run one generator; a failure costs only that generator's insights"""
    try:
        return generator()
    except Exception:
        logger.exception("Insight generator failed", extra={"generator": name})
        record_generator_failure(name)
        return []


def generate_insights(
    transactions: List[Transaction],
    window: TimeWindow,
    context: Optional[AnalysisContext] = None,
) -> List[Insight]:
    """
    Build the ordered insight list for a transaction snapshot.

    transactions is the owner's full history; window selects the slice used for
    category, vendor-frequency and trend analysis. Anomaly, forecast,
    seasonality and savings-rate analysis always look at the full history.
    Recent-activity alerts are added for the comprehensive view only.

    The only time-dependent input is context.today, so identical snapshots and
    contexts produce identical output.
    """
    context = context or AnalysisContext()
    today = context.today

    in_window = within(transactions, window.bounds(today))
    if not in_window:
        return [no_data_insight(window)]

    history_expenses = expenses_only(transactions)
    window_expenses = expenses_only(in_window)
    _, month_expenses = current_month_cash_flow(transactions, today)
    active = [s for s in context.subscriptions if s.status == "active"]

    generators = [
        ("anomaly", lambda: detect_anomalies(history_expenses)),
        ("forecast", lambda: forecast_insights(history_expenses, today)),
        ("seasonality", lambda: seasonal_insights(history_expenses, today)),
        ("behavioral", lambda: analyze_vendor_frequency(window_expenses)),
        ("savings_goal", lambda: analyze_savings_goal(transactions, today)),
        ("category_optimization", lambda: analyze_top_category(category_summaries(in_window))),
        ("trend", lambda: analyze_trend(monthly_totals(in_window))),
        ("subscription_cost", lambda: analyze_subscription_cost(active, month_expenses)),
    ]
    if window.view == TimeView.COMPREHENSIVE:
        generators.append(("recent_activity", lambda: analyze_recent_activity(transactions, today)))

    insights: List[Insight] = []
    for name, generator in generators:
        insights.extend(_run_generator(name, generator))

    return insights


def build_spending_report(
    transactions: List[Transaction],
    window: TimeWindow,
    context: Optional[AnalysisContext] = None,
) -> SpendingReport:
    """Windowed spending overview plus the generated insights"""
    context = context or AnalysisContext()
    in_window = within(transactions, window.bounds(context.today))

    categories = category_summaries(in_window)
    trends = monthly_totals(in_window)
    active = [s for s in context.subscriptions if s.status == "active"]

    return SpendingReport(
        spending_categories=categories,
        monthly_trends=trends,
        subscriptions=active,
        insights=generate_insights(transactions, window, context),
        total_spent=sum(c.total_spent for c in categories),
        average_monthly_spending=sum(m.expenses for m in trends) / max(len(trends), 1),
        monthly_subscription_cost=sum(s.monthly_cost for s in active),
    )
