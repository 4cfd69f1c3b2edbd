"""Recurring-charge detection and subscription bookkeeping"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from finance_coach.domain.aggregation import (
    MIN_SUBSCRIPTION_GROUP_SIZE,
    by_vendor,
    expenses_only,
    group_transactions,
)
from finance_coach.domain.models import (
    AnalysisContext,
    BillingCycle,
    DetectedSubscriptionCandidate,
    Insight,
    Impact,
    PatternStats,
    Subscription,
    SubscriptionDraft,
    SubscriptionSummary,
    Transaction,
)
from finance_coach.utils.date_utils import days_between

# Gaps further than this from the average gap break regularity
REGULARITY_TOLERANCE_DAYS = 7
MIN_CONFIDENCE = 0.4


def classify_billing_cycle(
    avg_gap: float,
    is_regular: bool,
    transaction_count: int,
) -> tuple[BillingCycle, float]:
    """
    Map the average gap between charges to a billing cycle and confidence.

    - Regular, up to 35 days:  monthly (0.9), also covers weekly charges
    - Regular, up to 45 days:  monthly with drift (0.7)
    - Regular, up to 400 days: yearly (0.8)
    - Irregular, 3+ charges:   irregular (0.5)
    - Anything else:           unknown (0.0), never surfaced

    Returns: (billing_cycle, confidence)
    """
    if is_regular and avg_gap <= 35:
        return BillingCycle.MONTHLY, 0.9
    elif is_regular and avg_gap <= 45:
        return BillingCycle.MONTHLY, 0.7
    elif is_regular and avg_gap <= 400:
        return BillingCycle.YEARLY, 0.8
    elif transaction_count >= 3:
        return BillingCycle.IRREGULAR, 0.5
    else:
        return BillingCycle.UNKNOWN, 0.0


def _build_candidate(vendor: str, transactions: List[Transaction]) -> Optional[DetectedSubscriptionCandidate]:
    ordered = sorted(transactions, key=lambda t: t.date)
    gaps = [
        days_between(previous.date, current.date)
        for previous, current in zip(ordered, ordered[1:])
    ]
    # Same-day charges carry no timing information
    gaps = [gap for gap in gaps if gap > 0]
    if not gaps:
        return None

    avg_gap = sum(gaps) / len(gaps)
    is_regular = all(abs(gap - avg_gap) < REGULARITY_TOLERANCE_DAYS for gap in gaps)

    billing_cycle, confidence = classify_billing_cycle(avg_gap, is_regular, len(transactions))
    if confidence <= MIN_CONFIDENCE:
        return None

    total_spent = sum(abs(t.amount) for t in transactions)
    average_amount = total_spent / len(transactions)
    if billing_cycle == BillingCycle.YEARLY:
        monthly_cost = average_amount / 12
    else:
        monthly_cost = average_amount

    last_seen = ordered[-1].date

    return DetectedSubscriptionCandidate(
        id=f"detected_{vendor}",
        vendor_key=vendor,
        display_name=vendor,
        average_amount=average_amount,
        estimated_monthly_cost=monthly_cost,
        billing_cycle=billing_cycle,
        confidence=confidence,
        category=transactions[0].category,
        last_seen_date=last_seen,
        predicted_next_date=last_seen + timedelta(days=int(avg_gap)),
        transaction_count=len(transactions),
        total_spent=total_spent,
        pattern=PatternStats(
            avg_days_between=round(avg_gap),
            regularity="high" if is_regular else "medium",
            variance_days=round(max(gaps) - min(gaps)),
        ),
    )


def detect_subscription_candidates(
    transactions: Iterable[Transaction],
    context: Optional[AnalysisContext] = None,
) -> List[DetectedSubscriptionCandidate]:
    """
    Infer which vendors bill on a recurring schedule.

    Only expenses count. Vendors in the context's excluded_vendors (confirmed
    or dismissed by the owner) are skipped. Vendors with fewer than two charges,
    or whose charges all fall on one day, never produce a candidate.

    Returns candidates ordered by confidence, highest first; vendors with equal
    confidence keep the order in which they first appear in the input.
    """
    excluded = context.excluded_vendors if context else frozenset()
    expenses = [t for t in expenses_only(transactions) if t.vendor not in excluded]

    candidates = []
    for vendor, vendor_transactions in group_transactions(expenses, by_vendor).items():
        if len(vendor_transactions) < MIN_SUBSCRIPTION_GROUP_SIZE:
            continue

        candidate = _build_candidate(vendor, vendor_transactions)
        if candidate is not None:
            candidates.append(candidate)

    candidates.sort(key=lambda c: c.confidence, reverse=True)
    return candidates


def normalize_frequency(frequency: Optional[str]) -> str:
    """The store accepts only monthly and yearly; anything else is monthly"""
    return "yearly" if frequency == "yearly" else "monthly"


def to_subscription_draft(candidate: DetectedSubscriptionCandidate) -> SubscriptionDraft:
    """
    Shape a confirmed candidate for the subscription store.

    The store only knows monthly and yearly billing, so irregular and unknown
    cycles are recorded as monthly.
    """
    return SubscriptionDraft(
        name=candidate.display_name or "Unknown Service",
        amount=candidate.average_amount or 0.0,
        frequency=normalize_frequency(candidate.billing_cycle.value),
        next_billing=candidate.predicted_next_date,
        category=candidate.category or "Other",
        status="active",
    )


def summarize_subscriptions(subscriptions: Iterable[Subscription]) -> SubscriptionSummary:
    subscriptions = list(subscriptions)
    active = [s for s in subscriptions if s.status == "active"]

    return SubscriptionSummary(
        total_subscriptions=len(subscriptions),
        active_subscriptions=len(active),
        trial_subscriptions=sum(1 for s in subscriptions if s.status == "trial"),
        forgotten_subscriptions=sum(1 for s in subscriptions if s.status == "forgotten"),
        monthly_cost=sum(s.monthly_cost for s in active),
        yearly_cost=sum(s.yearly_cost for s in active),
    )


def upcoming_renewals(subscriptions: Iterable[Subscription], today: date, days: int) -> List[Subscription]:
    """Active subscriptions billing between today and today + days, soonest first"""
    horizon = today + timedelta(days=days)
    renewals = [
        s for s in subscriptions
        if s.status == "active" and today <= s.next_billing <= horizon
    ]
    return sorted(renewals, key=lambda s: s.next_billing)


def subscription_portfolio_insights(subscriptions: Iterable[Subscription]) -> List[Insight]:
    """Commentary on the confirmed subscriptions themselves"""
    subscriptions = list(subscriptions)
    if not subscriptions:
        return [
            Insight(
                id="no_subscriptions",
                category="Subscription Management",
                message=(
                    "You currently have no active subscriptions, which helps keep "
                    "your monthly expenses low."
                ),
                impact=Impact.POSITIVE,
                kind="subscription_status",
            )
        ]

    insights = []
    active = [s for s in subscriptions if s.status == "active"]
    forgotten = [s for s in subscriptions if s.status == "forgotten"]

    if active:
        total_monthly = sum(s.monthly_cost for s in active)
        if total_monthly > 100:
            insights.append(
                Insight(
                    id="high_monthly_cost",
                    category="Subscription Management",
                    message=(
                        f"Your active subscriptions total ${total_monthly:.2f} monthly. "
                        "Consider reviewing which ones you actually use."
                    ),
                    impact=Impact.MEDIUM,
                    kind="subscription_cost",
                    actionable=True,
                    recommendation="Review and cancel unused subscriptions to save money.",
                )
            )

        most_expensive = max(active, key=lambda s: s.monthly_cost)
        if most_expensive.monthly_cost > 50:
            insights.append(
                Insight(
                    id="expensive_subscription",
                    category="Subscription Management",
                    message=(
                        f"{most_expensive.name} costs ${most_expensive.monthly_cost:.2f} monthly. "
                        "Verify this is providing value."
                    ),
                    impact=Impact.HIGH,
                    kind="subscription_cost",
                    actionable=True,
                    recommendation="Evaluate if this service is worth the cost.",
                )
            )

        per_category: dict[str, int] = {}
        for sub in active:
            per_category[sub.category] = per_category.get(sub.category, 0) + 1
        duplicated = [category for category, count in per_category.items() if count > 1]
        if duplicated:
            insights.append(
                Insight(
                    id="duplicate_categories",
                    category="Subscription Management",
                    message=(
                        f"You have multiple subscriptions in: {', '.join(duplicated)}. "
                        "Consider consolidating."
                    ),
                    impact=Impact.LOW,
                    kind="subscription_overlap",
                    actionable=True,
                    recommendation="Look for overlapping services you can eliminate.",
                )
            )

    if forgotten:
        annual_savings = sum(s.yearly_cost for s in forgotten)
        plural = "s" if len(forgotten) > 1 else ""
        insights.append(
            Insight(
                id="forgotten_savings",
                category="Subscription Management",
                message=(
                    f"You could save ${annual_savings:.2f} annually by canceling "
                    f"{len(forgotten)} unused subscription{plural}."
                ),
                impact=Impact.MEDIUM,
                kind="subscription_savings",
                estimated_annual_savings=annual_savings,
                actionable=True,
                recommendation="Review and cancel forgotten subscriptions.",
            )
        )

    if len(active) > 5:
        insights.append(
            Insight(
                id="many_subscriptions",
                category="Subscription Management",
                message=(
                    f"You have {len(active)} active subscriptions. "
                    "Consider consolidating similar services."
                ),
                impact=Impact.LOW,
                kind="subscription_overlap",
                actionable=True,
                recommendation="Look for overlapping services you can eliminate.",
            )
        )

    return insights
