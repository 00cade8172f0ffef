from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Literal

from src.services.github.models import ReviewComment


@dataclass
class HunkResult:
    """Outcome of analysing one hunk."""

    path: str
    hunk_index: int
    status: Literal["reviewed", "failed"]
    comments: list[ReviewComment] = field(default_factory=list)
    reason: str | None = None


def _globstar_variants(pattern: str) -> set[str]:
    """``pattern`` plus every form with some ``**/`` segments matching zero directories."""
    start = pattern.find("**/")
    if start == -1:
        return {pattern}
    head, rest = pattern[: start + 3], _globstar_variants(pattern[start + 3 :])
    return {head + tail for tail in rest} | {pattern[:start] + tail for tail in rest}


class CommentAggregator:
    """Flattens per-hunk results into one ordered comment list."""

    def __init__(self, exclude_patterns: Sequence[str] | None = None) -> None:
        self.exclude_patterns = [p.strip() for p in exclude_patterns or () if p.strip()]
        self._matchers = sorted(
            {variant for p in self.exclude_patterns for variant in _globstar_variants(p)}
        )

    def is_excluded(self, path: str) -> bool:
        """Whether ``path`` matches any exclusion glob."""
        return any(fnmatchcase(path, pattern) for pattern in self._matchers)

    def aggregate(self, results: Iterable[HunkResult]) -> list[ReviewComment]:
        """Concatenate comments in result order, dropping excluded paths.

        ``results`` must already be in file-then-hunk order; no sorting by
        completion time happens here.
        """
        return [
            comment
            for result in results
            for comment in result.comments
            if not self.is_excluded(comment.path)
        ]
