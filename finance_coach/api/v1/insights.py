"""GET /v1/insights - spending report with generated insights"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_coach.api.v1.schemas import (
    CategorySummarySchema,
    InsightSchema,
    InsightsResponse,
    MonthlyTrendSchema,
    SpendingSummarySchema,
    SubscriptionSchema,
)
from finance_coach.api.dependencies import get_owner_id, get_request_id, get_today
from finance_coach.infrastructure.database.session import get_db
from finance_coach.infrastructure.database.repositories import SubscriptionRepository, TransactionRepository
from finance_coach.domain.insights import build_spending_report
from finance_coach.domain.models import AnalysisContext, TimeView, TimeWindow
from finance_coach.infrastructure.observability.metrics import record_insights
from finance_coach.infrastructure.observability.logging import log_insight_run

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    request: Request,
    owner_id: int = Depends(get_owner_id),
    time_view: TimeView = Query(TimeView.RECENT, description="comprehensive | monthly | yearly | recent"),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Generate spending insights for a time window.

    Flow:
    1. Load the owner's full transaction history and active subscriptions
    2. Slice the window and summarize categories and monthly trends
    3. Run every insight generator over the snapshot
    4. Return the report; an empty window yields a single placeholder insight
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        transactions = TransactionRepository(db).list_transactions(owner_id)
        subscriptions = SubscriptionRepository(db).list_active_subscriptions(owner_id)
    except SQLAlchemyError as e:
        logging.error(f"Failed to load data for insights: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    window = TimeWindow(view=time_view, year=year, month=month)
    context = AnalysisContext(today=today, subscriptions=subscriptions)
    report = build_spending_report(transactions, window, context)

    duration_ms = (time.time() - start_time) * 1000
    record_insights(i.category for i in report.insights)
    log_insight_run(request_id, owner_id, time_view.value, len(report.insights), len(transactions), duration_ms)

    return InsightsResponse(
        owner_id=owner_id,
        time_view=time_view.value,
        spending_categories=[CategorySummarySchema.model_validate(c) for c in report.spending_categories],
        monthly_trends=[MonthlyTrendSchema.model_validate(m) for m in report.monthly_trends],
        subscriptions=[SubscriptionSchema.model_validate(s) for s in report.subscriptions],
        insights=[InsightSchema.model_validate(i) for i in report.insights],
        summary=SpendingSummarySchema(
            total_spent=report.total_spent,
            average_monthly_spending=report.average_monthly_spending,
            total_subscriptions=len(report.subscriptions),
            monthly_subscription_cost=report.monthly_subscription_cost,
        ),
    )
