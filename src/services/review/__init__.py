"""Review service package."""

from src.services.review.aggregator import CommentAggregator, HunkResult
from src.services.review.diff_parser import DiffParser, FileChange, Hunk, LineChange, LineType
from src.services.review.response_parser import (
    ParseErr,
    ParseOk,
    ReviewSuggestion,
    parse_review_response,
)

__all__ = [
    "CommentAggregator",
    "DiffParser",
    "FileChange",
    "Hunk",
    "HunkResult",
    "LineChange",
    "LineType",
    "ParseErr",
    "ParseOk",
    "ReviewSuggestion",
    "parse_review_response",
]
