"""Unit tests for recurring-charge detection and subscription bookkeeping"""

import pytest
from datetime import date, timedelta
from finance_coach.domain.models import AnalysisContext, BillingCycle, Impact, Subscription, Transaction
from finance_coach.domain.subscriptions import (
    classify_billing_cycle,
    detect_subscription_candidates,
    normalize_frequency,
    subscription_portfolio_insights,
    summarize_subscriptions,
    to_subscription_draft,
    upcoming_renewals,
)


def charges(vendor: str, dates: list[date], amount: float = -15.99, category: str = "Entertainment"):
    return [
        Transaction(id=i + 1, date=d, vendor=vendor, amount=amount, category=category, type="expense")
        for i, d in enumerate(dates)
    ]


def every(start: date, days: int, count: int) -> list[date]:
    return [start + timedelta(days=days * i) for i in range(count)]


def sub(name="Netflix", amount=15.99, frequency="monthly", status="active", category="Entertainment", next_billing=None):
    return Subscription(
        id=1,
        name=name,
        amount=amount,
        frequency=frequency,
        next_billing=next_billing or date(2025, 7, 1),
        category=category,
        status=status,
    )


def test_monthly_vendor_detected():
    """Four charges 30 days apart are a high-confidence monthly subscription"""
    dates = every(date(2025, 1, 1), 30, 4)

    candidates = detect_subscription_candidates(charges("Netflix", dates))

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.vendor_key == "Netflix"
    assert candidate.billing_cycle == BillingCycle.MONTHLY
    assert candidate.confidence == 0.9
    assert candidate.last_seen_date == dates[-1]
    assert candidate.predicted_next_date == dates[-1] + timedelta(days=30)
    assert candidate.transaction_count == 4
    assert candidate.average_amount == pytest.approx(15.99)
    assert candidate.estimated_monthly_cost == pytest.approx(15.99)
    assert candidate.total_spent == pytest.approx(63.96)
    assert candidate.pattern.avg_days_between == 30
    assert candidate.pattern.regularity == "high"
    assert candidate.pattern.variance_days == 0


def test_monthly_with_drift_gets_lower_confidence():
    candidates = detect_subscription_candidates(charges("Gym", every(date(2025, 1, 1), 40, 3)))

    assert candidates[0].billing_cycle == BillingCycle.MONTHLY
    assert candidates[0].confidence == 0.7


def test_yearly_vendor_spreads_cost_over_twelve_months():
    txns = charges("Cloud Storage", [date(2024, 3, 1), date(2025, 3, 1)], amount=-120.0)

    candidates = detect_subscription_candidates(txns)

    assert len(candidates) == 1
    assert candidates[0].billing_cycle == BillingCycle.YEARLY
    assert candidates[0].confidence == 0.8
    assert candidates[0].estimated_monthly_cost == pytest.approx(10.0)


def test_irregular_vendor_needs_three_charges():
    start = date(2025, 1, 1)
    dates = [start, start + timedelta(days=10), start + timedelta(days=50), start + timedelta(days=55)]

    candidates = detect_subscription_candidates(charges("Coffee Cart", dates, amount=-4.5))

    assert len(candidates) == 1
    assert candidates[0].billing_cycle == BillingCycle.IRREGULAR
    assert candidates[0].confidence == 0.5
    assert candidates[0].pattern.regularity == "medium"
    assert candidates[0].pattern.variance_days == 35


def test_single_transaction_never_a_candidate():
    assert detect_subscription_candidates(charges("Netflix", [date(2025, 1, 1)])) == []


def test_same_day_charges_never_a_candidate():
    """Two charges on one date carry no timing information"""
    txns = charges("Netflix", [date(2025, 1, 1), date(2025, 1, 1)])

    assert detect_subscription_candidates(txns) == []


def test_very_long_gap_pair_is_discarded():
    txns = charges("Passport Office", [date(2020, 1, 1), date(2021, 6, 1)], amount=-80.0)

    assert detect_subscription_candidates(txns) == []


def test_income_is_ignored():
    txns = charges("Employer", every(date(2025, 1, 1), 30, 4), amount=3000.0, category="Salary")

    assert detect_subscription_candidates(txns) == []


def test_excluded_vendors_are_skipped():
    txns = charges("Netflix", every(date(2025, 1, 1), 30, 4)) + charges(
        "Spotify", every(date(2025, 1, 5), 30, 4), amount=-9.99
    )

    candidates = detect_subscription_candidates(txns, AnalysisContext(excluded_vendors=frozenset({"Netflix"})))

    assert [c.vendor_key for c in candidates] == ["Spotify"]


def test_candidates_ordered_by_confidence_then_first_seen():
    start = date(2024, 1, 1)
    irregular = charges(
        "Coffee Cart",
        [start, start + timedelta(days=10), start + timedelta(days=50), start + timedelta(days=55)],
    )
    yearly = charges("Cloud Storage", [date(2024, 2, 1), date(2025, 2, 1)])
    monthly_a = charges("Spotify", every(date(2024, 3, 1), 30, 3))
    monthly_b = charges("Netflix", every(date(2024, 3, 2), 30, 3))

    candidates = detect_subscription_candidates(irregular + yearly + monthly_a + monthly_b)

    assert [c.vendor_key for c in candidates] == ["Spotify", "Netflix", "Cloud Storage", "Coffee Cart"]


def test_category_taken_from_first_transaction():
    txns = charges("Amazon", [date(2025, 2, 1)], category="Shopping") + charges(
        "Amazon", [date(2025, 1, 1), date(2025, 3, 3)], category="Prime"
    )

    candidates = detect_subscription_candidates(txns)

    assert candidates[0].category == "Shopping"


def test_detection_is_idempotent():
    txns = charges("Netflix", every(date(2025, 1, 1), 30, 4))

    assert detect_subscription_candidates(txns) == detect_subscription_candidates(txns)


def test_classify_billing_cycle_unknown_below_three_irregular_charges():
    assert classify_billing_cycle(20.0, False, 2) == (BillingCycle.UNKNOWN, 0.0)
    assert classify_billing_cycle(20.0, False, 3) == (BillingCycle.IRREGULAR, 0.5)


def test_normalize_frequency():
    assert normalize_frequency("yearly") == "yearly"
    assert normalize_frequency("monthly") == "monthly"
    assert normalize_frequency("irregular") == "monthly"
    assert normalize_frequency(None) == "monthly"


def test_draft_from_irregular_candidate_is_monthly():
    start = date(2025, 1, 1)
    dates = [start, start + timedelta(days=10), start + timedelta(days=50), start + timedelta(days=55)]
    candidate = detect_subscription_candidates(charges("Coffee Cart", dates, category=""))[0]

    draft = to_subscription_draft(candidate)

    assert draft.name == "Coffee Cart"
    assert draft.frequency == "monthly"
    assert draft.category == "Other"
    assert draft.status == "active"
    assert draft.next_billing == candidate.predicted_next_date


def test_draft_from_yearly_candidate_keeps_yearly():
    candidate = detect_subscription_candidates(
        charges("Cloud Storage", [date(2024, 3, 1), date(2025, 3, 1)], amount=-120.0)
    )[0]

    draft = to_subscription_draft(candidate)

    assert draft.frequency == "yearly"
    assert draft.amount == pytest.approx(120.0)


def test_summarize_subscriptions_counts_and_costs():
    subscriptions = [
        sub(amount=20.0),
        sub(name="Cloud", amount=120.0, frequency="yearly"),
        sub(name="Trial", amount=10.0, status="trial"),
        sub(name="Gym", amount=40.0, status="forgotten"),
    ]

    summary = summarize_subscriptions(subscriptions)

    assert summary.total_subscriptions == 4
    assert summary.active_subscriptions == 2
    assert summary.trial_subscriptions == 1
    assert summary.forgotten_subscriptions == 1
    assert summary.monthly_cost == pytest.approx(30.0)
    assert summary.yearly_cost == pytest.approx(360.0)


def test_upcoming_renewals_window():
    today = date(2025, 6, 15)
    soon = sub(name="Soon", next_billing=date(2025, 6, 20))
    sooner = sub(name="Sooner", next_billing=date(2025, 6, 16))
    later = sub(name="Later", next_billing=date(2025, 8, 1))
    past = sub(name="Past", next_billing=date(2025, 6, 1))
    trial = sub(name="Trial", next_billing=date(2025, 6, 18), status="trial")

    renewals = upcoming_renewals([soon, sooner, later, past, trial], today, 30)

    assert [s.name for s in renewals] == ["Sooner", "Soon"]


def test_portfolio_insights_empty():
    insights = subscription_portfolio_insights([])

    assert [i.id for i in insights] == ["no_subscriptions"]
    assert insights[0].impact == Impact.POSITIVE


def test_portfolio_insights_costly_portfolio():
    subscriptions = [sub(name=f"Service {i}", amount=15.0, category="Streaming") for i in range(5)]
    subscriptions.append(sub(name="Premium Gym", amount=60.0, category="Fitness"))
    subscriptions.append(sub(name="Old App", amount=5.0, status="forgotten", category="Apps"))

    insights = {i.id: i for i in subscription_portfolio_insights(subscriptions)}

    assert insights["high_monthly_cost"].impact == Impact.MEDIUM
    assert insights["expensive_subscription"].impact == Impact.HIGH
    assert "Premium Gym" in insights["expensive_subscription"].message
    assert "Streaming" in insights["duplicate_categories"].message
    assert insights["forgotten_savings"].estimated_annual_savings == pytest.approx(60.0)
    assert "1 unused subscription." in insights["forgotten_savings"].message
    assert insights["many_subscriptions"].impact == Impact.LOW


def test_portfolio_insights_modest_portfolio_is_quiet():
    assert subscription_portfolio_insights([sub(amount=10.0)]) == []


def test_detection_over_mixed_history(sample_transactions):
    """Salary is ignored; weekly groceries bill often enough to look monthly"""
    candidates = detect_subscription_candidates(sample_transactions)

    assert [c.vendor_key for c in candidates] == ["Netflix", "Supermarket"]
    assert candidates[0].transaction_count == 3
    assert candidates[1].pattern.avg_days_between == 7
