from src.services.github.client import GitHubClient
from src.services.github.models import (
    PullRequestDetails,
    PullRequestEvent,
    ReviewComment,
)

__all__ = [
    "GitHubClient",
    "PullRequestDetails",
    "PullRequestEvent",
    "ReviewComment",
]
