"""GET /v1/analytics/* - cash-flow trends and savings opportunities"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_coach.api.v1.schemas import (
    MonthlyTrendSchema,
    SavingsOpportunitiesResponse,
    SavingsOpportunitySchema,
    TrendsResponse,
)
from finance_coach.api.dependencies import get_owner_id, get_today
from finance_coach.config import settings
from finance_coach.infrastructure.database.session import get_db
from finance_coach.infrastructure.database.repositories import TransactionRepository
from finance_coach.domain.aggregation import category_summaries, monthly_totals
from finance_coach.domain.analyzers import savings_opportunities
from finance_coach.utils.date_utils import add_months, month_end, month_key

router = APIRouter()


@router.get("/analytics/trends", response_model=TrendsResponse)
def get_trends(
    owner_id: int = Depends(get_owner_id),
    months: int = Query(settings.trend_months, ge=1, le=120, description="Months of history"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Monthly income, expenses and net cash flow, oldest month first"""
    transactions = TransactionRepository(db).list_transactions(owner_id, start=add_months(today, -months))
    return TrendsResponse(
        owner_id=owner_id,
        trends=[MonthlyTrendSchema.model_validate(m) for m in monthly_totals(transactions)],
    )


@router.get("/analytics/savings-opportunities", response_model=SavingsOpportunitiesResponse)
def get_savings_opportunities(
    owner_id: int = Depends(get_owner_id),
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Categories where a 20% cut would save the most in the given month"""
    try:
        start = date.fromisoformat(f"{month}-01") if month else today.replace(day=1)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid month format, expected YYYY-MM")

    transactions = TransactionRepository(db).list_transactions(owner_id, start=start, end=month_end(start))
    opportunities = savings_opportunities(category_summaries(transactions))

    return SavingsOpportunitiesResponse(
        owner_id=owner_id,
        month=month_key(start),
        opportunities=[SavingsOpportunitySchema.model_validate(o) for o in opportunities],
    )
