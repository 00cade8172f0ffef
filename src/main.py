"""Entrypoint for running one review from a GitHub Actions event."""

import asyncio
import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.core.config import settings
from src.core.exceptions import ConfigurationError, ReviewerError
from src.core.logging import configure_logging
from src.core.metrics import export_metrics
from src.services.github.models import PullRequestEvent
from src.services.review.pipeline import PipelineResult, ReviewPipeline

logger = structlog.get_logger()


def load_event(event_path: str | None) -> PullRequestEvent:
    """Read and validate the ``pull_request`` event payload."""
    if not event_path:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set")

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read event payload: {e}") from e

    try:
        return PullRequestEvent.model_validate(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Not a pull_request event payload: {e}") from e


async def run(event: PullRequestEvent, pipeline: ReviewPipeline | None = None) -> PipelineResult:
    pipeline = pipeline or ReviewPipeline()
    try:
        return await pipeline.execute(event)
    finally:
        await pipeline.close()
        export_metrics(settings.metrics_textfile)


def main() -> int:
    configure_logging(settings.log_level)

    try:
        event = load_event(settings.github_event_path)
        result = asyncio.run(run(event))
    except ReviewerError as e:
        logger.error("Review failed", error=e.message, details=e.details)
        return 1

    logger.info(
        "Review finished",
        pr_number=result.pr_number,
        hunks_reviewed=result.hunks_reviewed,
        hunks_failed=result.hunks_failed,
        comments=result.total_comments,
        review_posted=result.review_posted,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
