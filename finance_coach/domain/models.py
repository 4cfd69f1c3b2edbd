"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from finance_coach.utils.date_utils import add_months, month_end


class Impact(str, Enum):
    """How strongly an insight should be surfaced"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    POSITIVE = "positive"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BillingCycle(str, Enum):
    """Inferred recurrence period of a detected subscription"""

    MONTHLY = "monthly"
    YEARLY = "yearly"
    IRREGULAR = "irregular"
    UNKNOWN = "unknown"


class TimeView(str, Enum):
    COMPREHENSIVE = "comprehensive"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    RECENT = "recent"


@dataclass
class Transaction:
    """Income or expense record from the transaction store"""

    id: int
    date: date
    vendor: str
    amount: float  # negative = expense, positive = income
    category: str
    type: str = ""  # "income" or "expense"; the sign of amount is authoritative
    description: str = ""

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0


@dataclass
class Subscription:
    """Recurring charge the owner has confirmed"""

    id: int
    name: str
    amount: float
    frequency: str  # "monthly" or "yearly"
    next_billing: date
    category: str
    status: str = "active"  # "active", "trial" or "forgotten"

    @property
    def monthly_cost(self) -> float:
        return self.amount if self.frequency == "monthly" else self.amount / 12

    @property
    def yearly_cost(self) -> float:
        return self.amount if self.frequency == "yearly" else self.amount * 12


@dataclass
class SubscriptionDraft:
    """Subscription fields ready to be written to the store"""

    name: str
    amount: float
    frequency: str
    next_billing: date
    category: str
    status: str = "active"


@dataclass
class SubscriptionSummary:
    """Counts per status and the cost of active subscriptions"""

    total_subscriptions: int
    active_subscriptions: int
    trial_subscriptions: int
    forgotten_subscriptions: int
    monthly_cost: float
    yearly_cost: float


@dataclass
class PatternStats:
    avg_days_between: int
    regularity: str  # "high" or "medium"
    variance_days: int


@dataclass
class DetectedSubscriptionCandidate:
    """Vendor whose charge timing looks like a subscription"""

    id: str
    vendor_key: str
    display_name: str
    average_amount: float
    estimated_monthly_cost: float
    billing_cycle: BillingCycle
    confidence: float
    category: str
    last_seen_date: date
    predicted_next_date: date
    transaction_count: int
    total_spent: float
    pattern: PatternStats


@dataclass
class Insight:
    """Human-readable observation about spending behaviour"""

    id: str
    category: str  # grouping label, not the transaction category
    message: str
    impact: Impact
    kind: str
    priority: Optional[Priority] = None
    estimated_annual_savings: Optional[float] = None
    actionable: bool = False
    recommendation: Optional[str] = None
    confidence: Optional[float] = None
    target_amount: Optional[float] = None


@dataclass
class GroupStats:
    """Aggregate statistics for one group of transactions"""

    key: str
    transactions: List[Transaction]
    count: int
    total: float
    mean: float
    variance: float
    std_dev: float
    first_date: date
    last_date: date


@dataclass
class MonthlyTotal:
    month: str  # YYYY-MM
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass
class CategorySummary:
    category: str
    total_spent: float
    transaction_count: int
    average_transaction: float
    last_transaction: date
    percentage: int = 0


@dataclass
class SavingsOpportunity:
    category: str
    potential: float
    reason: str
    current_spending: float


@dataclass
class SeasonalMonth:
    month: int  # 1-12
    month_name: str
    avg_spending: float
    seasonality: float
    pattern: str  # "high", "low" or "normal"


@dataclass
class Forecast:
    predicted_amount: float
    confidence: float


@dataclass(frozen=True)
class TimeWindow:
    """Period an insight request is scoped to"""

    view: TimeView = TimeView.RECENT
    year: Optional[int] = None
    month: Optional[int] = None  # 1-12

    def bounds(self, today: date) -> Optional[Tuple[date, date]]:
        """Inclusive (start, end) dates, or None for the whole history"""
        if self.view == TimeView.COMPREHENSIVE:
            return None
        if self.view == TimeView.MONTHLY and self.year is not None and self.month is not None:
            start = date(self.year, self.month, 1)
            return start, month_end(start)
        if self.view == TimeView.YEARLY and self.year is not None:
            return date(self.year, 1, 1), date(self.year, 12, 31)
        return add_months(today, -3), today


@dataclass
class AnalysisContext:
    """Per-request state handed to the insight and detection engines"""

    today: date = field(default_factory=date.today)
    subscriptions: List[Subscription] = field(default_factory=list)
    excluded_vendors: FrozenSet[str] = frozenset()


@dataclass
class SpendingReport:
    """Windowed spending overview returned with the generated insights"""

    spending_categories: List[CategorySummary]
    monthly_trends: List[MonthlyTotal]
    subscriptions: List[Subscription]
    insights: List[Insight]
    total_spent: float
    average_monthly_spending: float
    monthly_subscription_cost: float
