"""
Prometheus metrics for hunkreview.

This module provides:
- LLM metrics (requests, tokens, latency per model/provider)
- Hunk analysis metrics (reviewed, failed, skipped)
- GitHub API metrics (request counts, latency, rate limit)
- Export to a node_exporter textfile at the end of a run
"""

import time

import structlog
from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

logger = structlog.get_logger()

# =============================================================================
# LLM Metrics
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "hunkreview_llm_requests_total",
    "Total number of LLM API requests",
    ["provider", "model", "status"],  # status: success, error
)

LLM_TOKENS_TOTAL = Counter(
    "hunkreview_llm_tokens_total",
    "Total number of tokens processed",
    ["provider", "model", "direction"],  # direction: input, output
)

LLM_REQUEST_DURATION_SECONDS = Histogram(
    "hunkreview_llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["provider", "model"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0, 100.0),
)

# =============================================================================
# Review Metrics
# =============================================================================

HUNKS_TOTAL = Counter(
    "hunkreview_hunks_total",
    "Number of diff hunks processed by the review engine",
    ["outcome"],  # reviewed, failed, skipped
)

SUGGESTIONS_DROPPED_TOTAL = Counter(
    "hunkreview_suggestions_dropped_total",
    "Model suggestions dropped because their line was outside the hunk",
)

# =============================================================================
# GitHub API Metrics
# =============================================================================

GITHUB_API_REQUESTS_TOTAL = Counter(
    "hunkreview_github_api_requests_total",
    "Total number of GitHub API requests",
    ["endpoint", "method", "status_code"],
)

GITHUB_API_DURATION_SECONDS = Histogram(
    "hunkreview_github_api_duration_seconds",
    "GitHub API request duration in seconds",
    ["endpoint", "method"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

GITHUB_RATE_LIMIT_REMAINING = Gauge(
    "hunkreview_github_rate_limit_remaining",
    "Remaining GitHub API rate limit",
)

GITHUB_RATE_LIMIT_RESET_SECONDS = Gauge(
    "hunkreview_github_rate_limit_reset_seconds",
    "Seconds until GitHub rate limit resets",
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_llm_request(
    provider: str,
    model: str,
    status: str,
    duration_seconds: float,
    tokens_input: int = 0,
    tokens_output: int = 0,
) -> None:
    """
    Record metrics for an LLM API request.

    Args:
        provider: LLM provider name (openai, anthropic, ollama)
        model: Model identifier
        status: Request status (success, error)
        duration_seconds: Request duration
        tokens_input: Number of input/prompt tokens
        tokens_output: Number of output/completion tokens
    """
    LLM_REQUESTS_TOTAL.labels(provider=provider, model=model, status=status).inc()
    LLM_REQUEST_DURATION_SECONDS.labels(provider=provider, model=model).observe(
        duration_seconds
    )

    if tokens_input > 0:
        LLM_TOKENS_TOTAL.labels(provider=provider, model=model, direction="input").inc(
            tokens_input
        )

    if tokens_output > 0:
        LLM_TOKENS_TOTAL.labels(provider=provider, model=model, direction="output").inc(
            tokens_output
        )


def record_hunk(outcome: str, dropped_suggestions: int = 0) -> None:
    """Record the outcome of one hunk analysis (reviewed, failed, skipped)."""
    HUNKS_TOTAL.labels(outcome=outcome).inc()
    if dropped_suggestions > 0:
        SUGGESTIONS_DROPPED_TOTAL.inc(dropped_suggestions)


def record_github_api_call(
    endpoint: str,
    method: str,
    status_code: int,
    duration_seconds: float,
    rate_limit_remaining: int | None = None,
    rate_limit_reset: int | None = None,
) -> None:
    """
    Record metrics for a GitHub API call.

    Args:
        endpoint: API endpoint (e.g., "pulls", "pulls_reviews")
        method: HTTP method
        status_code: Response status code (0 when no response was received)
        duration_seconds: Request duration
        rate_limit_remaining: Remaining rate limit (if available)
        rate_limit_reset: Rate limit reset timestamp (if available)
    """
    GITHUB_API_REQUESTS_TOTAL.labels(
        endpoint=endpoint,
        method=method,
        status_code=str(status_code),
    ).inc()

    GITHUB_API_DURATION_SECONDS.labels(endpoint=endpoint, method=method).observe(
        duration_seconds
    )

    if rate_limit_remaining is not None:
        GITHUB_RATE_LIMIT_REMAINING.set(rate_limit_remaining)

    if rate_limit_reset is not None:
        reset_in_seconds = max(0, rate_limit_reset - int(time.time()))
        GITHUB_RATE_LIMIT_RESET_SECONDS.set(reset_in_seconds)


def export_metrics(path: str | None, registry: CollectorRegistry = REGISTRY) -> bool:
    """
    Write the registry in text exposition format for the node_exporter
    textfile collector.

    Returns:
        True if a file was written.
    """
    if not path:
        return False

    try:
        write_to_textfile(path, registry)
    except OSError as e:
        logger.warning("Failed to export metrics", path=path, error=str(e))
        return False

    logger.debug("Metrics exported", path=path)
    return True
