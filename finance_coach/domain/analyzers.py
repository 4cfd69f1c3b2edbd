"""
Rule-based insight generators.

Every generator is a pure function of its inputs and returns a (possibly
empty) list of Insight records. Thresholds are fixed constants; callers never
tune them per request.
"""

from datetime import date, timedelta
from typing import List, Sequence

from finance_coach.domain.aggregation import (
    MIN_ANOMALY_GROUP_SIZE,
    aggregate,
    by_category,
    by_vendor,
)
from finance_coach.domain.models import (
    CategorySummary,
    Impact,
    Insight,
    MonthlyTotal,
    Priority,
    SavingsOpportunity,
    Subscription,
    Transaction,
)
from finance_coach.utils.date_utils import month_key, month_start

TARGET_SAVINGS_RATE = 20.0
FREQUENT_VENDOR_VISITS = 8
TREND_ALERT_PERCENT = 15.0
TREND_HIGH_PERCENT = 25.0


def detect_anomalies(transactions: List[Transaction]) -> List[Insight]:
    """
    Flag transactions more than two standard deviations above their category mean.

    Categories with fewer than three transactions, or where every amount is
    identical, are skipped. Amounts beyond three standard deviations are high
    severity.
    """
    insights = []

    for stats in aggregate(transactions, by_category, min_size=MIN_ANOMALY_GROUP_SIZE):
        if stats.std_dev == 0:
            continue

        for txn in stats.transactions:
            amount = abs(txn.amount)
            if amount <= stats.mean + 2 * stats.std_dev:
                continue

            deviation = (amount - stats.mean) / stats.std_dev
            severity = Impact.HIGH if amount > stats.mean + 3 * stats.std_dev else Impact.MEDIUM
            insights.append(
                Insight(
                    id=f"anomaly_{len(insights)}",
                    category="Anomaly Detection",
                    message=(
                        f"Unusual {stats.key} expense: ${amount:.2f} at {txn.vendor} on "
                        f"{txn.date.isoformat()}. This is {deviation:.1f} standard deviations "
                        "above your normal spending."
                    ),
                    impact=severity,
                    kind="anomaly_detection",
                    priority=Priority.HIGH if severity == Impact.HIGH else Priority.MEDIUM,
                    estimated_annual_savings=amount - stats.mean,
                    actionable=True,
                    recommendation=(
                        f"Review if this {stats.key} expense of ${amount:.2f} was necessary. "
                        f"Your average for this category is ${stats.mean:.2f}."
                    ),
                )
            )

    return insights


def analyze_vendor_frequency(transactions: List[Transaction]) -> List[Insight]:
    """Call out the most-visited vendors when visits exceed roughly twice a week"""
    vendors = aggregate(transactions, by_vendor)
    vendors.sort(key=lambda v: v.count, reverse=True)

    insights = []
    for index, vendor in enumerate(vendors[:3]):
        if vendor.count <= FREQUENT_VENDOR_VISITS:
            continue

        savings = vendor.total * 0.2
        heavy = vendor.total > 200
        insights.append(
            Insight(
                id=f"behavior_{index}",
                category="Behavioral Patterns",
                message=(
                    f"You visit {vendor.key} frequently ({vendor.count} times this period, "
                    f"averaging ${vendor.mean:.2f} per visit). Total: ${vendor.total:.2f}."
                ),
                impact=Impact.HIGH if heavy else Impact.MEDIUM,
                kind="behavioral_analysis",
                priority=Priority.HIGH if heavy else Priority.MEDIUM,
                estimated_annual_savings=savings,
                actionable=True,
                recommendation=(
                    f"Consider reducing visits to {vendor.key} by 20% to save ${savings:.2f}."
                ),
            )
        )

    return insights


def current_month_cash_flow(transactions: List[Transaction], today: date) -> tuple[float, float]:
    """
    Income and expenses dated in today's calendar month.

    Returns: (income, expenses) with expenses as a positive number
    """
    current = month_key(today)
    in_month = [t for t in transactions if month_key(t.date) == current]
    income = sum(t.amount for t in in_month if t.is_income)
    expenses = sum(abs(t.amount) for t in in_month if t.is_expense)
    return income, expenses


def savings_rate(income: float, expenses: float) -> float:
    """Percentage of income left after expenses; 0 without income"""
    return (income - expenses) / income * 100 if income > 0 else 0.0


def analyze_savings_goal(transactions: List[Transaction], today: date) -> List[Insight]:
    income, expenses = current_month_cash_flow(transactions, today)
    rate = savings_rate(income, expenses)

    if rate < TARGET_SAVINGS_RATE:
        gap = income * TARGET_SAVINGS_RATE / 100 - (income - expenses)
        return [
            Insight(
                id="savings_goal",
                category="Financial Goals",
                message=(
                    f"Your current savings rate is {rate:.1f}%. Financial experts "
                    "recommend saving at least 20% of income."
                ),
                impact=Impact.HIGH,
                kind="goal_oriented",
                priority=Priority.HIGH,
                actionable=True,
                recommendation=(
                    f"To reach a 20% savings rate, reduce monthly expenses by ${gap:.2f}."
                ),
                target_amount=gap,
            )
        ]

    return [
        Insight(
            id="savings_excellent",
            category="Financial Goals",
            message=(
                f"Excellent! Your savings rate of {rate:.1f}% exceeds the recommended 20%. "
                "You're building strong financial security."
            ),
            impact=Impact.POSITIVE,
            kind="goal_oriented",
            priority=Priority.LOW,
            actionable=False,
        )
    ]


def analyze_top_category(categories: Sequence[CategorySummary]) -> List[Insight]:
    """Suggest a cap for the largest spending category; expects largest first"""
    if not categories:
        return []

    top = categories[0]
    if top.total_spent <= 300:
        return []

    return [
        Insight(
            id="category_optimization",
            category="Category Optimization",
            message=(
                f"Your top spending category is {top.category} at ${top.total_spent:.2f} "
                f"({top.percentage}% of total spending). This is a significant portion "
                "of your budget."
            ),
            impact=Impact.HIGH,
            kind="category_optimization",
            priority=Priority.HIGH,
            estimated_annual_savings=round(top.total_spent * 0.15),
            actionable=True,
            recommendation=(
                f"Consider setting a budget limit of ${top.total_spent * 0.8:.2f} for "
                f"{top.category} to reduce spending by 20%."
            ),
        )
    ]


def savings_opportunities(categories: Sequence[CategorySummary]) -> List[SavingsOpportunity]:
    """Categories with more than $100 of spend, each with a 20% reduction target"""
    return [
        SavingsOpportunity(
            category=c.category,
            potential=round(c.total_spent * 0.2),
            reason=(
                f"High spending in {c.category} with {c.transaction_count} transactions "
                f"averaging ${round(c.average_transaction)}"
            ),
            current_spending=c.total_spent,
        )
        for c in categories
        if c.total_spent > 100
    ]


def percent_change(previous: float, latest: float) -> float:
    return (latest - previous) * 100 / previous if previous > 0 else 0.0


def analyze_trend(monthly: Sequence[MonthlyTotal]) -> List[Insight]:
    """
    Compare expenses of the two most recent months.

    monthly must be ordered oldest first. Changes of more than 15% are
    reported; 25% or more is high impact.
    """
    if len(monthly) < 2:
        return []

    previous, latest = monthly[-2], monthly[-1]
    change = latest.expenses - previous.expenses
    change_pct = percent_change(previous.expenses, latest.expenses)
    if abs(change_pct) <= TREND_ALERT_PERCENT:
        return []

    increased = change > 0
    significant = abs(change_pct) >= TREND_HIGH_PERCENT
    direction = "increased" if increased else "decreased"
    tone = (
        "This significant increase warrants attention."
        if increased
        else "Great job on reducing spending!"
    )

    return [
        Insight(
            id="trend_analysis",
            category="Trend Analysis",
            message=(
                f"Your spending {direction} by {abs(change_pct):.1f}% from "
                f"{previous.month} to {latest.month}. {tone}"
            ),
            impact=Impact.HIGH if significant else Impact.MEDIUM,
            kind="trend_analysis",
            priority=Priority.HIGH if significant else Priority.MEDIUM,
            estimated_annual_savings=round(abs(change) * 0.2) if increased else 0,
            actionable=increased,
            recommendation=(
                f"Investigate what caused this {change_pct:.1f}% spending increase and "
                "identify areas to cut back."
                if increased
                else "Maintain this positive trend!"
            ),
        )
    ]


def analyze_subscription_cost(subscriptions: Sequence[Subscription], monthly_expenses: float) -> List[Insight]:
    """Comment on the recurring cost of active subscriptions"""
    if not subscriptions:
        return [
            Insight(
                id="subscription_status",
                category="Subscription Management",
                message=(
                    "You currently have no active subscriptions. This is excellent for "
                    "keeping monthly expenses low and avoiding recurring charges."
                ),
                impact=Impact.POSITIVE,
                kind="subscription_status",
                priority=Priority.LOW,
                actionable=False,
            )
        ]

    total = sum(s.monthly_cost for s in subscriptions)
    if total <= 100:
        return []

    share = total / monthly_expenses * 100 if monthly_expenses > 0 else 0.0
    return [
        Insight(
            id="subscription_optimization",
            category="Subscription Management",
            message=(
                f"You're spending ${total:.2f} monthly on subscriptions. This represents "
                f"{share:.1f}% of your total expenses."
            ),
            impact=Impact.MEDIUM,
            kind="subscription_optimization",
            priority=Priority.MEDIUM,
            estimated_annual_savings=round(total * 0.2),
            actionable=True,
            recommendation=(
                "Review all subscriptions and cancel any you don't actively use. Even a 20% "
                f"reduction could save you ${total * 0.2:.2f} monthly."
            ),
        )
    ]


def analyze_recent_activity(transactions: List[Transaction], today: date) -> List[Insight]:
    """
    Short-horizon alerts anchored on today.

    - Today's spend against the month-to-date daily average
    - Each category's last-seven-days spend against its month-to-date weekly average
    - Expenses from the last three days against the average expense overall
    """
    expenses = [t for t in transactions if t.is_expense]
    if not expenses:
        return []

    insights = []
    first_of_month = month_start(today)
    month_to_date = [t for t in expenses if t.date >= first_of_month]

    today_spend = sum(abs(t.amount) for t in expenses if t.date == today)
    if today_spend > 0:
        avg_daily = sum(abs(t.amount) for t in month_to_date) / 30
        if avg_daily > 0 and today_spend > avg_daily * 2:
            insights.append(
                Insight(
                    id="today_high_spending",
                    category="Today's Spending Alert",
                    message=(
                        f"You spent ${today_spend:.2f} today, which is "
                        f"{today_spend / avg_daily:.1f}x your average daily spending of "
                        f"${avg_daily:.2f}."
                    ),
                    impact=Impact.HIGH,
                    kind="daily_alert",
                    priority=Priority.HIGH,
                    actionable=True,
                    recommendation=(
                        "Review today's expenses and identify any non-essential purchases "
                        "that could be reduced."
                    ),
                )
            )

    week_cutoff = today - timedelta(days=7)
    week_by_category: dict[str, float] = {}
    for txn in expenses:
        if txn.date > week_cutoff:
            week_by_category[txn.category] = week_by_category.get(txn.category, 0.0) + abs(txn.amount)

    for category, amount in week_by_category.items():
        weekly_avg = sum(abs(t.amount) for t in month_to_date if t.category == category) / 4
        if weekly_avg == 0:
            continue
        if amount > weekly_avg * 1.5:
            insights.append(
                Insight(
                    id=f"week_{category}_high",
                    category="Weekly Spending Pattern",
                    message=(
                        f"You spent ${amount:.2f} on {category} this week, which is "
                        f"{amount / weekly_avg:.1f}x your typical weekly average."
                    ),
                    impact=Impact.MEDIUM,
                    kind="weekly_pattern",
                    priority=Priority.MEDIUM,
                    actionable=True,
                    recommendation=(
                        f"Monitor your {category} spending. Consider setting a weekly budget "
                        "limit for this category."
                    ),
                )
            )

    avg_expense = sum(abs(t.amount) for t in expenses) / len(expenses)
    recent_cutoff = today - timedelta(days=3)
    unusual = [
        t for t in expenses
        if t.date > recent_cutoff and abs(t.amount) > avg_expense * 3
    ]
    for index, txn in enumerate(unusual):
        amount = abs(txn.amount)
        insights.append(
            Insight(
                id=f"recent_unusual_{index}",
                category="Recent Unusual Spending",
                message=(
                    f"Recent unusual expense: ${amount:.2f} at {txn.vendor} on "
                    f"{txn.date.isoformat()}. This is {amount / avg_expense:.1f}x your "
                    "average transaction amount."
                ),
                impact=Impact.MEDIUM,
                kind="recent_alert",
                priority=Priority.MEDIUM,
                actionable=True,
                recommendation=(
                    "Verify this transaction was necessary and consider if similar expenses "
                    "can be avoided in the future."
                ),
            )
        )

    return insights
