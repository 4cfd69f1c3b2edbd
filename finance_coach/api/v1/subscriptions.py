"""/v1/subscriptions - confirmed subscriptions and recurring-charge detection"""

import time
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_coach.api.v1.schemas import (
    CandidateSchema,
    CandidatesResponse,
    ConfirmCandidateRequest,
    DismissVendorRequest,
    DismissVendorResponse,
    InsightSchema,
    SubscriptionCreate,
    SubscriptionInsightsResponse,
    SubscriptionSchema,
    SubscriptionStatusUpdate,
    SubscriptionSummarySchema,
)
from finance_coach.api.dependencies import get_owner_id, get_request_id, get_today
from finance_coach.config import settings
from finance_coach.infrastructure.database.session import get_db
from finance_coach.infrastructure.database.repositories import SubscriptionRepository, TransactionRepository
from finance_coach.domain.models import AnalysisContext, SubscriptionDraft
from finance_coach.domain.subscriptions import (
    detect_subscription_candidates,
    normalize_frequency,
    subscription_portfolio_insights,
    summarize_subscriptions,
    upcoming_renewals,
)
from finance_coach.domain.exceptions import SubscriptionNotFoundError, SubscriptionStoreError
from finance_coach.infrastructure.observability.metrics import record_candidates, subscriptions_confirmed_counter
from finance_coach.infrastructure.observability.logging import log_detection_run

router = APIRouter()


def _store_subscription(db: Session, owner_id: int, draft: SubscriptionDraft, request_id: str) -> SubscriptionSchema:
    """Write a subscription and commit, mapping store failures to 503"""
    try:
        subscription = SubscriptionRepository(db).create_subscription(owner_id, draft)
        db.commit()
    except (SubscriptionStoreError, SQLAlchemyError) as e:
        db.rollback()
        logging.error(f"Subscription store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Subscription store unavailable")

    return SubscriptionSchema.model_validate(subscription)


@router.get("/subscriptions", response_model=List[SubscriptionSchema])
def list_subscriptions(
    owner_id: int = Depends(get_owner_id),
    status: Optional[str] = Query(None, description="active | trial | forgotten"),
    db: Session = Depends(get_db),
):
    """List subscriptions, soonest billing first"""
    subscriptions = SubscriptionRepository(db).list_subscriptions(owner_id, status=status)
    return [SubscriptionSchema.model_validate(s) for s in subscriptions]


@router.post("/subscriptions", response_model=SubscriptionSchema, status_code=201)
def create_subscription(
    request_body: SubscriptionCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Add a subscription by hand"""
    owner_id = request_body.owner_id if request_body.owner_id is not None else settings.default_owner_id
    draft = SubscriptionDraft(
        name=request_body.name.strip(),
        amount=request_body.amount,
        frequency=request_body.frequency,
        next_billing=request_body.next_billing,
        category=request_body.category.strip(),
        status=request_body.status,
    )
    return _store_subscription(db, owner_id, draft, get_request_id(request))


@router.get("/subscriptions/summary", response_model=SubscriptionSummarySchema)
def get_subscription_summary(owner_id: int = Depends(get_owner_id), db: Session = Depends(get_db)):
    """Counts per status plus monthly and yearly cost of active subscriptions"""
    subscriptions = SubscriptionRepository(db).list_subscriptions(owner_id)
    return SubscriptionSummarySchema.model_validate(summarize_subscriptions(subscriptions))


@router.get("/subscriptions/renewals", response_model=List[SubscriptionSchema])
def get_upcoming_renewals(
    owner_id: int = Depends(get_owner_id),
    days: int = Query(settings.renewal_window_days, ge=0, description="Look-ahead window in days"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Active subscriptions billing within the next `days` days"""
    subscriptions = SubscriptionRepository(db).list_subscriptions(owner_id)
    return [SubscriptionSchema.model_validate(s) for s in upcoming_renewals(subscriptions, today, days)]


@router.get("/subscriptions/insights", response_model=SubscriptionInsightsResponse)
def get_subscription_insights(owner_id: int = Depends(get_owner_id), db: Session = Depends(get_db)):
    """Commentary on the confirmed subscription portfolio"""
    subscriptions = SubscriptionRepository(db).list_subscriptions(owner_id)
    insights = subscription_portfolio_insights(subscriptions)
    return SubscriptionInsightsResponse(
        owner_id=owner_id,
        insights=[InsightSchema.model_validate(i) for i in insights],
    )


@router.get("/subscriptions/candidates", response_model=CandidatesResponse)
def get_subscription_candidates(
    request: Request,
    owner_id: int = Depends(get_owner_id),
    exclude: List[str] = Query([], description="Vendors dismissed during this session"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Detect vendors that look like subscriptions.

    Runs over the owner's full history. Vendors already stored as subscriptions
    and vendors passed in `exclude` are skipped; dismissals live with the
    client and are not persisted.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    transactions = TransactionRepository(db).list_transactions(owner_id)
    confirmed = {s.name for s in SubscriptionRepository(db).list_subscriptions(owner_id)}
    context = AnalysisContext(today=today, excluded_vendors=frozenset(confirmed | set(exclude)))

    candidates = detect_subscription_candidates(transactions, context)

    duration_ms = (time.time() - start_time) * 1000
    record_candidates(c.billing_cycle.value for c in candidates)
    log_detection_run(request_id, owner_id, len(candidates), len(context.excluded_vendors), duration_ms)

    return CandidatesResponse(
        owner_id=owner_id,
        candidates=[CandidateSchema.model_validate(c) for c in candidates],
    )


@router.post("/subscriptions/confirm", response_model=SubscriptionSchema, status_code=201)
def confirm_candidate(
    request_body: ConfirmCandidateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Promote a detected candidate to a stored subscription.

    Frequencies other than "yearly" are stored as monthly. Once stored, the
    vendor drops out of detection until the subscription is deleted.
    """
    owner_id = request_body.owner_id if request_body.owner_id is not None else settings.default_owner_id
    draft = SubscriptionDraft(
        name=request_body.name or request_body.vendor_key or "Unknown Service",
        amount=request_body.amount or 0.0,
        frequency=normalize_frequency(request_body.frequency),
        next_billing=request_body.next_billing,
        category=request_body.category or "Other",
        status="active",
    )

    subscription = _store_subscription(db, owner_id, draft, get_request_id(request))
    subscriptions_confirmed_counter.inc()
    return subscription


@router.post("/subscriptions/dismiss", response_model=DismissVendorResponse)
def dismiss_vendor(request_body: DismissVendorRequest, request: Request):
    """
    Acknowledge that a vendor is not a subscription.

    Nothing is stored: the client keeps its dismissed vendors for the session
    and sends them back as `exclude` on the candidates endpoint.
    """
    owner_id = request_body.owner_id if request_body.owner_id is not None else settings.default_owner_id
    vendor = request_body.vendor.strip()
    logging.info(
        "Vendor dismissed from detection",
        extra={"request_id": get_request_id(request), "owner_id": owner_id, "vendor": vendor},
    )
    return DismissVendorResponse(
        message="Vendor marked as not a subscription",
        vendor=vendor,
        owner_id=owner_id,
        persisted=False,
    )


@router.patch("/subscriptions/{subscription_id}/status", response_model=SubscriptionSchema)
def update_subscription_status(
    subscription_id: int,
    request_body: SubscriptionStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    owner_id = request_body.owner_id if request_body.owner_id is not None else settings.default_owner_id

    try:
        subscription = SubscriptionRepository(db).update_status(owner_id, subscription_id, request_body.status)
        db.commit()
    except SubscriptionNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except (SubscriptionStoreError, SQLAlchemyError) as e:
        db.rollback()
        logging.error(f"Subscription store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Subscription store unavailable")

    return SubscriptionSchema.model_validate(subscription)


@router.delete("/subscriptions/{subscription_id}")
def delete_subscription(
    subscription_id: int,
    request: Request,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Cancel a subscription; its vendor becomes detectable again"""
    try:
        SubscriptionRepository(db).delete_subscription(owner_id, subscription_id)
        db.commit()
    except SubscriptionNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except (SubscriptionStoreError, SQLAlchemyError) as e:
        db.rollback()
        logging.error(f"Subscription store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Subscription store unavailable")

    return {"message": "Subscription deleted successfully", "id": subscription_id}
