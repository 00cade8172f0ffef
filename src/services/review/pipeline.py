"""Main review pipeline orchestration."""

from dataclasses import dataclass

import structlog

from src.core.config import settings
from src.services.github.client import GitHubClient
from src.services.github.models import PullRequestDetails, PullRequestEvent
from src.services.llm.router import LLMRouter
from src.services.review.aggregator import CommentAggregator
from src.services.review.diff_parser import DiffParser
from src.services.review.engine import ReviewEngine

logger = structlog.get_logger()

FULL_DIFF_ACTIONS = ("opened", "reopened")
INCREMENTAL_DIFF_ACTIONS = ("synchronize",)


@dataclass
class PipelineResult:
    """Result of a review pipeline execution."""

    pr_number: int
    pr_title: str = ""
    files_reviewed: int = 0
    hunks_reviewed: int = 0
    hunks_failed: int = 0
    total_comments: int = 0
    review_posted: bool = False
    github_review_id: int | None = None


class ReviewPipeline:
    """Orchestrates the code review process."""

    def __init__(
        self,
        github_client: GitHubClient | None = None,
        llm_router: LLMRouter | None = None,
        diff_parser: DiffParser | None = None,
        engine: ReviewEngine | None = None,
    ) -> None:
        self.github = github_client or GitHubClient()
        self.llm = llm_router or LLMRouter()
        self.diff_parser = diff_parser or DiffParser()
        self.engine = engine or ReviewEngine(
            llm=self.llm,
            aggregator=CommentAggregator(settings.exclude_patterns),
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            max_concurrency=settings.max_concurrency,
            include_style=settings.include_style,
        )

    async def execute(
        self,
        event: PullRequestEvent,
        post_review: bool = True,
    ) -> PipelineResult:
        """
        Review the pull request an event refers to.

        ``opened``/``reopened`` review the whole PR diff; ``synchronize``
        reviews only the commits between ``before`` and ``after``. Other
        actions are ignored.

        Raises:
            GitHubError: If PR details or the diff cannot be fetched.
            DiffParseError: If the diff is not a unified diff.
            PublishError: If the review cannot be submitted.
        """
        owner, repo, pr_number = event.owner, event.repo, event.number

        if event.action in FULL_DIFF_ACTIONS:
            pr = await self.github.get_pull_request_details(owner, repo, pr_number)
            diff = await self.github.get_pull_request_diff(owner, repo, pr_number)
        elif event.action in INCREMENTAL_DIFF_ACTIONS and event.before and event.after:
            pr = await self.github.get_pull_request_details(owner, repo, pr_number)
            diff = await self.github.get_compare_diff(owner, repo, event.before, event.after)
        else:
            logger.info("Unsupported event", action=event.action, pr_number=pr_number)
            return PipelineResult(pr_number=pr_number)

        return await self._review_diff(pr, diff, post_review)

    async def execute_for_pull_request(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        post_review: bool = True,
    ) -> PipelineResult:
        """Review the full diff of a pull request, independent of any event."""
        pr = await self.github.get_pull_request_details(owner, repo, pr_number)
        diff = await self.github.get_pull_request_diff(owner, repo, pr_number)
        return await self._review_diff(pr, diff, post_review)

    async def _review_diff(
        self,
        pr: PullRequestDetails,
        diff: str,
        post_review: bool,
    ) -> PipelineResult:
        logger.info(
            "Starting review",
            owner=pr.owner,
            repo=pr.repo,
            pr_number=pr.pull_number,
            title=pr.title,
        )

        if not diff.strip():
            logger.info("No diff found", pr_number=pr.pull_number)
            return PipelineResult(pr_number=pr.pull_number, pr_title=pr.title)

        files = self.diff_parser.parse(diff)
        reviewable = [f for f in files if not f.is_deleted]
        logger.info("Parsed diff", files=len(files), reviewable_files=len(reviewable))

        analysis = await self.engine.analyze(files, pr)
        comments = analysis.comments

        if analysis.hunks_failed:
            logger.warning(
                "Some hunks could not be reviewed",
                hunks_failed=analysis.hunks_failed,
                hunks_reviewed=analysis.hunks_reviewed,
            )

        result = PipelineResult(
            pr_number=pr.pull_number,
            pr_title=pr.title,
            files_reviewed=len({r.path for r in analysis.hunk_results}),
            hunks_reviewed=analysis.hunks_reviewed,
            hunks_failed=analysis.hunks_failed,
            total_comments=len(comments),
        )

        if not comments:
            logger.info("No issues found, skipping review", pr_number=pr.pull_number)
            return result

        if not post_review:
            logger.info("Dry run, not posting review", comments=len(comments))
            return result

        response = await self.github.create_review(
            pr.owner, pr.repo, pr.pull_number, comments
        )
        result.review_posted = True
        result.github_review_id = response.get("id")
        logger.info("Posted review to GitHub", review_id=result.github_review_id)

        return result

    async def close(self) -> None:
        """Clean up resources."""
        await self.github.close()
