"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date
from typing import List, Literal, Optional

from finance_coach.domain.models import BillingCycle, Impact, Priority


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    date: date
    vendor: str = Field(..., min_length=1, description="Merchant or payee name")
    amount: float = Field(..., description="Signed amount: negative for expenses, positive for income")
    category: str = Field(..., min_length=1)
    type: Optional[Literal["income", "expense"]] = Field(
        None, description="Derived from the amount sign when omitted"
    )
    description: str = ""
    owner_id: Optional[int] = None

    @model_validator(mode="after")
    def check_type_matches_sign(self) -> "TransactionCreate":
        # The amount sign is authoritative; type is only cross-checked
        if self.type is None:
            self.type = "expense" if self.amount < 0 else "income"
        elif self.type == "expense" and self.amount > 0:
            raise ValueError("expense transactions must have a negative amount")
        elif self.type == "income" and self.amount < 0:
            raise ValueError("income transactions must have a positive amount")
        return self


class TransactionSchema(BaseModel):
    """Single stored transaction"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    vendor: str
    description: str
    amount: float
    category: str
    type: str


class SubscriptionCreate(BaseModel):
    """Request body for POST /v1/subscriptions"""

    name: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    frequency: Literal["monthly", "yearly"]
    next_billing: date
    category: str = Field(..., min_length=1)
    status: Literal["active", "trial", "forgotten"] = "active"
    owner_id: Optional[int] = None


class SubscriptionStatusUpdate(BaseModel):
    """Request body for PATCH /v1/subscriptions/{id}/status"""

    status: Literal["active", "trial", "forgotten"]
    owner_id: Optional[int] = None


class SubscriptionSchema(BaseModel):
    """Single confirmed subscription"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    amount: float
    frequency: str
    next_billing: date
    category: str
    status: str
    monthly_cost: float


class SubscriptionSummarySchema(BaseModel):
    """Response for GET /v1/subscriptions/summary"""

    model_config = ConfigDict(from_attributes=True)

    total_subscriptions: int
    active_subscriptions: int
    trial_subscriptions: int
    forgotten_subscriptions: int
    monthly_cost: float
    yearly_cost: float


class PatternSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    avg_days_between: int
    regularity: str
    variance_days: int


class CandidateSchema(BaseModel):
    """Detected subscription candidate"""

    model_config = ConfigDict(from_attributes=True)

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
    pattern: PatternSchema


class CandidatesResponse(BaseModel):
    """Response for GET /v1/subscriptions/candidates"""

    owner_id: int
    candidates: List[CandidateSchema]


class ConfirmCandidateRequest(BaseModel):
    """
    Request body for POST /v1/subscriptions/confirm.

    Mirrors the candidate fields the client was shown. frequency is accepted
    as any string and stored as monthly unless it is exactly "yearly".
    """

    vendor_key: Optional[str] = None
    name: Optional[str] = None
    amount: Optional[float] = None
    frequency: Optional[str] = None
    next_billing: date
    category: Optional[str] = None
    owner_id: Optional[int] = None


class DismissVendorRequest(BaseModel):
    """Request body for POST /v1/subscriptions/dismiss"""

    vendor: str = Field(..., min_length=1)
    owner_id: Optional[int] = None


class DismissVendorResponse(BaseModel):
    message: str
    vendor: str
    owner_id: int
    persisted: bool = False


class InsightSchema(BaseModel):
    """Single generated insight"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    message: str
    impact: Impact
    kind: str
    priority: Optional[Priority] = None
    estimated_annual_savings: Optional[float] = None
    actionable: bool = False
    recommendation: Optional[str] = None
    confidence: Optional[float] = None
    target_amount: Optional[float] = None


class CategorySummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total_spent: float
    transaction_count: int
    average_transaction: float
    last_transaction: date
    percentage: int


class MonthlyTrendSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    income: float
    expenses: float
    net: float


class SpendingSummarySchema(BaseModel):
    total_spent: float
    average_monthly_spending: float
    total_subscriptions: int
    monthly_subscription_cost: float


class InsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    owner_id: int
    time_view: str
    spending_categories: List[CategorySummarySchema]
    monthly_trends: List[MonthlyTrendSchema]
    subscriptions: List[SubscriptionSchema]
    insights: List[InsightSchema]
    summary: SpendingSummarySchema


class SubscriptionInsightsResponse(BaseModel):
    """Response for GET /v1/subscriptions/insights"""

    owner_id: int
    insights: List[InsightSchema]


class TrendsResponse(BaseModel):
    """Response for GET /v1/analytics/trends"""

    owner_id: int
    trends: List[MonthlyTrendSchema]


class SavingsOpportunitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    potential: float
    reason: str
    current_spending: float


class SavingsOpportunitiesResponse(BaseModel):
    """Response for GET /v1/analytics/savings-opportunities"""

    owner_id: int
    month: str
    opportunities: List[SavingsOpportunitySchema]
