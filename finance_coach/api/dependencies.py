"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional
from fastapi import Query, Request
from finance_coach.config import settings


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_owner_id(owner_id: Optional[int] = Query(None, description="Owner identifier")) -> int:
    """Owner from the query string, falling back to the demo account"""
    return owner_id if owner_id is not None else settings.default_owner_id


def get_today() -> date:
    """Anchor for 'current month' and 'today' calculations"""
    return date.today()
