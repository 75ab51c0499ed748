"""Prometheus metrics for the CreditMind service.

Metrics are organized into two categories:

Business Metrics (for Risk/Product):
- creditmind_assessment_decision_total: Decisions by phase and internal outcome
- creditmind_consistency_flag_total: Consistency bands seen at blending
- creditmind_admin_override_total: Manual overrides by decision
- creditmind_final_pd: Distribution of final PD values

Technical Metrics (for Engineering/SRE):
- creditmind_scoring_latency_seconds: Pipeline stage latency
- creditmind_question_api_latency_seconds: Question service latency
- creditmind_question_api_failures_total: Question service failures
- creditmind_question_api_total: Question service requests by status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from creditmind.core.config import settings


# =============================================================================
# Business Metrics (Risk/Product dashboards)
# =============================================================================

assessment_decision_total = Counter(
    "creditmind_assessment_decision_total",
    "Total number of assessment decisions made",
    ["phase", "decision"],  # phase1, blended / approved, pending_approval, manual_review
)

consistency_flag_total = Counter(
    "creditmind_consistency_flag_total",
    "Consistency index bands observed at blending",
    ["flag"],
)

admin_override_total = Counter(
    "creditmind_admin_override_total",
    "Total number of manual admin overrides",
    ["decision"],  # approve, decline, manual_review
)

final_pd = Histogram(
    "creditmind_final_pd",
    "Final probability of default per assessment",
    ["phase"],
    buckets=[0.02, 0.04, 0.06, 0.08, 0.10, 0.14, 0.18, 0.25, 0.35],
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

scoring_latency = Histogram(
    "creditmind_scoring_latency_seconds",
    "Scoring pipeline latency in seconds",
    ["stage"],  # phase1, blended
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)

question_api_latency = Histogram(
    "creditmind_question_api_latency_seconds",
    "Question generation API latency in seconds",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

question_api_failures = Counter(
    "creditmind_question_api_failures_total",
    "Total number of question generation API failures",
    ["error_type"],  # timeout, error, malformed
)

question_api_total = Counter(
    "creditmind_question_api_total",
    "Total number of question generation API requests",
    ["status"],  # success, failure
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_assessment_decision(phase: str, decision: str, pd: float) -> None:
    """Record a Phase 1 or blended decision in metrics."""
    if not settings.metrics_enabled:
        return
    assessment_decision_total.labels(phase=phase, decision=decision).inc()
    final_pd.labels(phase=phase).observe(pd)


def record_consistency_flag(flag: str) -> None:
    """Record the consistency band of a blended assessment."""
    if not settings.metrics_enabled:
        return
    consistency_flag_total.labels(flag=flag).inc()


def record_admin_override(decision: str) -> None:
    """Record a manual override."""
    if not settings.metrics_enabled:
        return
    admin_override_total.labels(decision=decision).inc()


@contextmanager
def track_scoring_latency(stage: str) -> Generator[None, None, None]:
    """Context manager to track scoring pipeline latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        if settings.metrics_enabled:
            scoring_latency.labels(stage=stage).observe(time.perf_counter() - start)


@contextmanager
def track_question_api_latency() -> Generator[None, None, None]:
    """Context manager to track question generation API latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        if settings.metrics_enabled:
            question_api_latency.observe(time.perf_counter() - start)


def record_question_api_success() -> None:
    """Record a successful question generation request."""
    if settings.metrics_enabled:
        question_api_total.labels(status="success").inc()


def record_question_api_failure(error_type: str) -> None:
    """Record a failed question generation request."""
    if not settings.metrics_enabled:
        return
    question_api_total.labels(status="failure").inc()
    question_api_failures.labels(error_type=error_type).inc()


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
