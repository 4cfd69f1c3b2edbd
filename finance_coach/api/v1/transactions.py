"""POST/GET /v1/transactions - transaction store access"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_coach.api.v1.schemas import TransactionCreate, TransactionSchema
from finance_coach.api.dependencies import get_owner_id
from finance_coach.config import settings
from finance_coach.infrastructure.database.session import get_db
from finance_coach.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(request_body: TransactionCreate, db: Session = Depends(get_db)):
    """Record an income or expense transaction"""
    owner_id = request_body.owner_id if request_body.owner_id is not None else settings.default_owner_id

    try:
        txn = TransactionRepository(db).create_transaction(
            owner_id=owner_id,
            txn_date=request_body.date,
            vendor=request_body.vendor.strip(),
            amount=request_body.amount,
            category=request_body.category.strip(),
            txn_type=request_body.type,
            description=request_body.description.strip(),
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to store transaction: {e}")
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    return TransactionSchema.model_validate(txn)


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    owner_id: int = Depends(get_owner_id),
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound"),
    db: Session = Depends(get_db),
):
    """
    List an owner's transactions, newest first.

    Without bounds the full history is returned.
    """
    transactions = TransactionRepository(db).list_transactions(owner_id, start=start_date, end=end_date)
    return [TransactionSchema.model_validate(t) for t in transactions]
