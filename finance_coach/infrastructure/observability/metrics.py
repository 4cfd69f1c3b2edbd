"""Prometheus metrics for insight generation, subscription detection and HTTP latency"""

from typing import Iterable

from prometheus_client import Counter, Histogram

# Insight metrics
insights_generated_counter = Counter(
    "finance_insights_generated_total",
    "Insights returned to clients",
    ["category"],  # Anomaly Detection | Spending Forecast | ...
)

insight_generator_failures_counter = Counter(
    "finance_insight_generator_failures_total",
    "Insight generators that raised and were skipped",
    ["generator"],
)

# Subscription metrics
subscription_candidates_counter = Counter(
    "finance_subscription_candidates_total",
    "Subscription candidates detected",
    ["billing_cycle"],  # monthly | yearly | irregular
)

subscriptions_confirmed_counter = Counter(
    "finance_subscriptions_confirmed_total",
    "Detected subscriptions confirmed by the owner",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_insights(categories: Iterable[str]) -> None:
    for category in categories:
        insights_generated_counter.labels(category=category).inc()


def record_generator_failure(generator: str) -> None:
    insight_generator_failures_counter.labels(generator=generator).inc()


def record_candidates(billing_cycles: Iterable[str]) -> None:
    for billing_cycle in billing_cycles:
        subscription_candidates_counter.labels(billing_cycle=billing_cycle).inc()
