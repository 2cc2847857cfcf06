"""Prometheus metrics for the Card Gateway service.

Metrics are organized into two categories:

Business Metrics (for Product/Credit):
- card_gateway_applications_created_total: Applications created by card tier
- card_gateway_submission_total: Submissions by outcome
- card_gateway_automatic_decision_total: Automatic decisions by action
- card_gateway_compensation_total: Submissions reverted to draft

Technical Metrics (for Engineering/SRE):
- card_gateway_submission_latency_seconds: End-to-end submission latency
- card_gateway_core_banking_latency_seconds: Core banking call latency
- card_gateway_core_banking_failures_total: Core banking failures
- card_gateway_integration_retry_total: Integration step retries
- card_gateway_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

applications_created_total = Counter(
    "card_gateway_applications_created_total",
    "Total number of credit card applications created",
    ["card_tier"],
)

submission_total = Counter(
    "card_gateway_submission_total",
    "Total number of application submissions",
    ["outcome"],  # completed, failed, rejected_precondition
)

automatic_decision_total = Counter(
    "card_gateway_automatic_decision_total",
    "Automatic decisions applied after the risk bureau query",
    ["action"],  # APPROVE, REJECT, MANUAL_REVIEW
)

compensation_total = Counter(
    "card_gateway_compensation_total",
    "Submissions reverted to draft after an integration failure",
)


# =============================================================================
# Technical Metrics
# =============================================================================

submission_latency = Histogram(
    "card_gateway_submission_latency_seconds",
    "Submission workflow latency in seconds",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

core_banking_latency = Histogram(
    "card_gateway_core_banking_latency_seconds",
    "Core banking call latency in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

core_banking_total = Counter(
    "card_gateway_core_banking_total",
    "Total number of core banking calls",
    ["operation", "status"],  # success, failure
)

core_banking_failures = Counter(
    "card_gateway_core_banking_failures_total",
    "Total number of core banking failures",
    ["operation", "error_type"],  # timeout, error
)

integration_retries = Counter(
    "card_gateway_integration_retry_total",
    "Total number of integration step retries",
    ["step"],
)

http_requests_total = Counter(
    "card_gateway_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "card_gateway_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_application_created(card_tier: str | None) -> None:
    """Record a newly created application."""
    applications_created_total.labels(card_tier=card_tier or "unspecified").inc()


def record_submission(outcome: str) -> None:
    """Record the outcome of a submission."""
    submission_total.labels(outcome=outcome).inc()


def record_automatic_decision(action: str) -> None:
    """Record an automatic decision applied to an application."""
    automatic_decision_total.labels(action=action).inc()


def record_compensation() -> None:
    """Record a submission reverted to draft."""
    compensation_total.inc()


def record_integration_retry(step: str) -> None:
    """Record a retry of an integration step."""
    integration_retries.labels(step=step).inc()


@contextmanager
def track_submission_latency() -> Generator[None, None, None]:
    """Context manager to track submission latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        submission_latency.observe(duration)


@contextmanager
def track_core_banking_latency(operation: str) -> Generator[None, None, None]:
    """Context manager to track core banking call latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        core_banking_latency.labels(operation=operation).observe(duration)


def record_core_banking_success(operation: str) -> None:
    """Record a successful core banking call."""
    core_banking_total.labels(operation=operation, status="success").inc()


def record_core_banking_failure(operation: str, error_type: str) -> None:
    """Record a failed core banking call."""
    core_banking_total.labels(operation=operation, status="failure").inc()
    core_banking_failures.labels(operation=operation, error_type=error_type).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
