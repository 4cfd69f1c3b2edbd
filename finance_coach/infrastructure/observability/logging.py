"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from finance_coach.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_insight_run(
    request_id: str,
    owner_id: int,
    time_view: str,
    insight_count: int,
    transaction_count: int,
    duration_ms: float,
) -> None:
    """Log one insight-generation request"""
    logging.info(
        "Insights generated",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "insights_complete",
            "time_view": time_view,
            "insight_count": insight_count,
            "transaction_count": transaction_count,
            "duration_ms": duration_ms,
        },
    )


def log_detection_run(
    request_id: str,
    owner_id: int,
    candidate_count: int,
    excluded_count: int,
    duration_ms: float,
) -> None:
    """Log one subscription-detection request"""
    logging.info(
        "Subscription detection completed",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "detection_complete",
            "candidate_count": candidate_count,
            "excluded_count": excluded_count,
            "duration_ms": duration_ms,
        },
    )
