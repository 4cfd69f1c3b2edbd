"""Transaction grouping and per-group statistics shared by the analyzers"""

import math
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from finance_coach.domain.models import CategorySummary, GroupStats, MonthlyTotal, Transaction
from finance_coach.utils.date_utils import month_key

# Minimum group sizes below which a group carries no usable signal
MIN_SUBSCRIPTION_GROUP_SIZE = 2
MIN_ANOMALY_GROUP_SIZE = 3


def group_transactions(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], str],
) -> Dict[str, List[Transaction]]:
    """Group transactions by key, keeping the order in which keys first appear"""
    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(key(txn), []).append(txn)
    return groups


def summarize_group(key: str, transactions: List[Transaction]) -> GroupStats:
    """
    Compute count, absolute-amount total, mean and population variance.

    The caller guarantees a non-empty group.
    """
    amounts = [abs(t.amount) for t in transactions]
    count = len(amounts)
    total = sum(amounts)
    mean = total / count
    variance = sum((amount - mean) ** 2 for amount in amounts) / count
    dates = [t.date for t in transactions]

    return GroupStats(
        key=key,
        transactions=list(transactions),
        count=count,
        total=total,
        mean=mean,
        variance=variance,
        std_dev=math.sqrt(variance),
        first_date=min(dates),
        last_date=max(dates),
    )


def aggregate(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], str],
    min_size: int = 1,
) -> List[GroupStats]:
    """Group and summarize, dropping groups smaller than min_size"""
    return [
        summarize_group(group_key, items)
        for group_key, items in group_transactions(transactions, key).items()
        if len(items) >= min_size
    ]


def by_vendor(txn: Transaction) -> str:
    return txn.vendor


def by_category(txn: Transaction) -> str:
    return txn.category


def expenses_only(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.is_expense]


def within(
    transactions: Iterable[Transaction],
    bounds: Optional[Tuple[date, date]],
) -> List[Transaction]:
    """Transactions inside inclusive (start, end) bounds; None keeps everything"""
    if bounds is None:
        return list(transactions)
    start, end = bounds
    return [t for t in transactions if start <= t.date <= end]


def monthly_totals(transactions: Iterable[Transaction]) -> List[MonthlyTotal]:
    """Income and expense totals per YYYY-MM, oldest month first"""
    totals: Dict[str, MonthlyTotal] = {}
    for txn in transactions:
        key = month_key(txn.date)
        bucket = totals.setdefault(key, MonthlyTotal(month=key, income=0.0, expenses=0.0))
        if txn.is_expense:
            bucket.expenses += abs(txn.amount)
        elif txn.is_income:
            bucket.income += txn.amount
    return [totals[key] for key in sorted(totals)]


def monthly_spend_series(transactions: Iterable[Transaction]) -> List[float]:
    """Absolute spend per month with activity, oldest month first"""
    totals: Dict[str, float] = {}
    for txn in transactions:
        key = month_key(txn.date)
        totals[key] = totals.get(key, 0.0) + abs(txn.amount)
    return [totals[key] for key in sorted(totals)]


def category_summaries(transactions: Iterable[Transaction]) -> List[CategorySummary]:
    """
    Per-category expense summary, largest spend first.

    Percentages are whole-number shares of the combined spend across all
    categories and stay 0 when nothing was spent.
    """
    summaries = [
        CategorySummary(
            category=stats.key,
            total_spent=stats.total,
            transaction_count=stats.count,
            average_transaction=stats.mean,
            last_transaction=stats.last_date,
        )
        for stats in aggregate(expenses_only(transactions), by_category)
    ]
    summaries.sort(key=lambda s: s.total_spent, reverse=True)

    total_spent = sum(s.total_spent for s in summaries)
    if total_spent > 0:
        for summary in summaries:
            summary.percentage = round(summary.total_spent / total_spent * 100)

    return summaries
