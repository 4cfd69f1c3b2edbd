"""Data access layer for transactions and subscriptions"""

from datetime import date
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from finance_coach.infrastructure.database.models import SubscriptionRecord, TransactionRecord
from finance_coach.domain.models import Subscription, SubscriptionDraft, Transaction
from finance_coach.domain.exceptions import SubscriptionNotFoundError, SubscriptionStoreError


def to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        date=record.date,
        vendor=record.vendor,
        amount=record.amount,
        category=record.category,
        type=record.type,
        description=record.description or "",
    )


def to_subscription(record: SubscriptionRecord) -> Subscription:
    return Subscription(
        id=record.id,
        name=record.name,
        amount=record.amount,
        frequency=record.frequency,
        next_billing=record.next_billing,
        category=record.category,
        status=record.status,
    )


class TransactionRepository:
    """Repository for income and expense transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        owner_id: int,
        txn_date: date,
        vendor: str,
        amount: float,
        category: str,
        txn_type: str,
        description: str = "",
    ) -> Transaction:
        """Persist a transaction"""
        record = TransactionRecord(
            owner_id=owner_id,
            date=txn_date,
            vendor=vendor,
            description=description,
            amount=amount,
            category=category,
            type=txn_type,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return to_transaction(record)

    def list_transactions(
        self,
        owner_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Transaction]:
        """
        Fetch an owner's transactions, newest first.

        Without bounds the full history is returned.
        """
        query = self.db.query(TransactionRecord).filter(TransactionRecord.owner_id == owner_id)
        if start is not None:
            query = query.filter(TransactionRecord.date >= start)
        if end is not None:
            query = query.filter(TransactionRecord.date <= end)

        records = query.order_by(TransactionRecord.date.desc(), TransactionRecord.id.desc()).all()
        return [to_transaction(r) for r in records]


class SubscriptionRepository:
    """Repository for confirmed subscriptions"""

    def __init__(self, db: Session):
        self.db = db

    def create_subscription(self, owner_id: int, draft: SubscriptionDraft) -> Subscription:
        """
        Persist a subscription.

        Raises:
            SubscriptionStoreError: The database rejected the write
        """
        record = SubscriptionRecord(
            owner_id=owner_id,
            name=draft.name,
            amount=draft.amount,
            frequency=draft.frequency,
            next_billing=draft.next_billing,
            category=draft.category,
            status=draft.status,
        )
        try:
            self.db.add(record)
            self.db.flush()
        except SQLAlchemyError as e:
            raise SubscriptionStoreError(f"Failed to store subscription {draft.name!r}: {e}") from e

        return to_subscription(record)

    def list_subscriptions(self, owner_id: int, status: Optional[str] = None) -> List[Subscription]:
        """Fetch subscriptions ordered by next billing date"""
        query = self.db.query(SubscriptionRecord).filter(SubscriptionRecord.owner_id == owner_id)
        if status is not None:
            query = query.filter(SubscriptionRecord.status == status)

        records = query.order_by(SubscriptionRecord.next_billing.asc(), SubscriptionRecord.id.asc()).all()
        return [to_subscription(r) for r in records]

    def list_active_subscriptions(self, owner_id: int) -> List[Subscription]:
        return self.list_subscriptions(owner_id, status="active")

    def _get_record(self, owner_id: int, subscription_id: int) -> SubscriptionRecord:
        record = (
            self.db.query(SubscriptionRecord)
            .filter(SubscriptionRecord.id == subscription_id, SubscriptionRecord.owner_id == owner_id)
            .first()
        )
        if record is None:
            raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
        return record

    def update_status(self, owner_id: int, subscription_id: int, status: str) -> Subscription:
        record = self._get_record(owner_id, subscription_id)
        record.status = status
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise SubscriptionStoreError(f"Failed to update subscription {subscription_id}: {e}") from e
        return to_subscription(record)

    def delete_subscription(self, owner_id: int, subscription_id: int) -> None:
        record = self._get_record(owner_id, subscription_id)
        try:
            self.db.delete(record)
            self.db.flush()
        except SQLAlchemyError as e:
            raise SubscriptionStoreError(f"Failed to delete subscription {subscription_id}: {e}") from e
