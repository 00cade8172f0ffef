"""Per-hunk review: prompt, model call, validation, line mapping."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from src.core.exceptions import LLMError
from src.core.metrics import record_hunk
from src.prompts.review import build_review_prompt
from src.services.github.models import PullRequestDetails, ReviewComment
from src.services.llm.base import CompletionRequest
from src.services.llm.router import LLMRouter
from src.services.review.aggregator import CommentAggregator, HunkResult
from src.services.review.diff_parser import FileChange, Hunk
from src.services.review.response_parser import ParseErr, parse_review_response

logger = structlog.get_logger()


@dataclass
class AnalysisResult:
    """Everything the engine produced for one diff."""

    comments: list[ReviewComment] = field(default_factory=list)
    hunk_results: list[HunkResult] = field(default_factory=list)
    suggestions_dropped: int = 0

    @property
    def hunks_reviewed(self) -> int:
        return sum(1 for r in self.hunk_results if r.status == "reviewed")

    @property
    def hunks_failed(self) -> int:
        return sum(1 for r in self.hunk_results if r.status == "failed")


@dataclass(frozen=True)
class _HunkTask:
    file: FileChange
    hunk: Hunk
    hunk_index: int


class ReviewEngine:
    """Asks the model about every reviewable hunk and maps its answers to comments."""

    def __init__(
        self,
        llm: LLMRouter,
        aggregator: CommentAggregator | None = None,
        max_tokens: int = 700,
        temperature: float = 0.2,
        max_concurrency: int = 4,
        include_style: bool = False,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.llm = llm
        self.aggregator = aggregator or CommentAggregator()
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_concurrency = max_concurrency
        self.include_style = include_style

    def _collect_tasks(self, files: Sequence[FileChange]) -> list[_HunkTask]:
        tasks = []
        for file in files:
            if file.is_deleted:
                logger.debug("Skipping deleted file", old_path=file.old_path)
                continue
            if self.aggregator.is_excluded(file.path):
                logger.info("Skipping excluded file", path=file.path)
                continue
            for index, hunk in enumerate(file.hunks):
                if not hunk.has_changes:
                    record_hunk("skipped")
                    continue
                tasks.append(_HunkTask(file=file, hunk=hunk, hunk_index=index))
        return tasks

    async def analyze(
        self,
        files: Sequence[FileChange],
        pr: PullRequestDetails,
    ) -> AnalysisResult:
        """
        Review every non-deleted, non-excluded file hunk by hunk.

        Args:
            files: Parsed diff, in diff order.
            pr: Pull request metadata embedded in each prompt.

        Returns:
            AnalysisResult whose comments keep file-then-hunk order.
        """
        tasks = self._collect_tasks(files)
        if not tasks:
            return AnalysisResult()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(task: _HunkTask) -> tuple[HunkResult, int]:
            async with semaphore:
                return await self._analyze_hunk(task, pr)

        # gather returns results in task order, not completion order
        outcomes = await asyncio.gather(*(run(task) for task in tasks))

        hunk_results = [result for result, _ in outcomes]
        result = AnalysisResult(
            comments=self.aggregator.aggregate(hunk_results),
            hunk_results=hunk_results,
            suggestions_dropped=sum(dropped for _, dropped in outcomes),
        )

        logger.info(
            "Analysis complete",
            hunks_reviewed=result.hunks_reviewed,
            hunks_failed=result.hunks_failed,
            suggestions_dropped=result.suggestions_dropped,
            comments=len(result.comments),
        )
        return result

    async def _analyze_hunk(
        self,
        task: _HunkTask,
        pr: PullRequestDetails,
    ) -> tuple[HunkResult, int]:
        """Analyse one hunk; failures are returned, never raised."""
        file, hunk = task.file, task.hunk
        log = logger.bind(path=file.path, hunk=task.hunk_index)

        prompt = build_review_prompt(file, hunk, pr, include_style=self.include_style)
        request = CompletionRequest(
            prompt=prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        try:
            completion = await self.llm.complete(request)
        except LLMError as e:
            log.warning("Model call failed, skipping hunk", reason=e.message)
            record_hunk("failed")
            return HunkResult(file.path, task.hunk_index, "failed", reason=e.message), 0
        except Exception as e:
            log.exception("Unexpected error from model client, skipping hunk")
            record_hunk("failed")
            return HunkResult(file.path, task.hunk_index, "failed", reason=repr(e)), 0

        parsed = parse_review_response(completion.text)
        if isinstance(parsed, ParseErr):
            log.warning(
                "Unusable model response, skipping hunk",
                reason=parsed.reason,
                response=completion.text[:500],
            )
            record_hunk("failed")
            return HunkResult(file.path, task.hunk_index, "failed", reason=parsed.reason), 0

        comments = []
        dropped = 0
        for suggestion in parsed.suggestions:
            if not hunk.contains_relative_line(suggestion.line_number):
                log.debug(
                    "Dropping suggestion outside hunk",
                    line_number=suggestion.line_number,
                    new_lines=hunk.new_lines,
                )
                dropped += 1
                continue
            comments.append(
                ReviewComment(
                    path=file.path,
                    line=hunk.to_absolute_line(suggestion.line_number),
                    body=suggestion.review_comment,
                )
            )

        record_hunk("reviewed", dropped_suggestions=dropped)
        return HunkResult(file.path, task.hunk_index, "reviewed", comments=comments), dropped
