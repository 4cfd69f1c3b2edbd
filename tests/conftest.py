"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_coach.api.main import create_app
from finance_coach.api.dependencies import get_today
from finance_coach.infrastructure.database.models import Base
from finance_coach.infrastructure.database.session import get_db
from finance_coach.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed "today" so month-anchored insights are reproducible
TODAY = date(2025, 6, 15)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Three months of salary, a streaming subscription and weekly groceries"""
    base_date = TODAY - timedelta(days=90)
    transactions = []

    for month in range(3):
        transactions.append(
            Transaction(
                id=len(transactions) + 1,
                date=base_date + timedelta(days=month * 30),
                vendor="Employer",
                amount=3000.0,
                category="Salary",
                type="income",
                description="Salary Deposit",
            )
        )
        transactions.append(
            Transaction(
                id=len(transactions) + 1,
                date=base_date + timedelta(days=month * 30 + 2),
                vendor="Netflix",
                amount=-15.99,
                category="Entertainment",
                type="expense",
                description="Streaming",
            )
        )

    for day in range(0, 90, 7):
        transactions.append(
            Transaction(
                id=len(transactions) + 1,
                date=base_date + timedelta(days=day),
                vendor="Supermarket",
                amount=-120.0,
                category="Groceries",
                type="expense",
                description="Weekly shop",
            )
        )

    return transactions
