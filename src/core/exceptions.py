from typing import Any


class ReviewerError(Exception):
    """Base exception for the review assistant."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ReviewerError):
    """Invalid or missing configuration or event payload."""

    pass


class GitHubError(ReviewerError):
    """Errors related to GitHub API interactions."""

    pass


class GitHubAuthenticationError(GitHubError):
    """GitHub authentication failed."""

    pass


class GitHubRateLimitError(GitHubError):
    """GitHub API rate limit exceeded."""

    def __init__(self, reset_at: int, message: str = "Rate limit exceeded") -> None:
        self.reset_at = reset_at
        super().__init__(message, {"reset_at": reset_at})


class GitHubNotFoundError(GitHubError):
    """Requested GitHub resource not found."""

    pass


class PublishError(GitHubError):
    """Submitting the review to GitHub failed."""

    pass


class DiffParseError(ReviewerError):
    """Diff text is not a syntactically valid unified diff."""

    pass


class LLMError(ReviewerError):
    """Errors related to LLM interactions (network, auth, provider failures)."""

    pass


class LLMProviderUnavailableError(LLMError):
    """LLM provider is not available or configured."""

    pass


class LLMRateLimitError(LLMError):
    """LLM provider rate limit exceeded."""

    pass


class LLMResponseParseError(LLMError):
    """The model replied, but not in the expected review schema."""

    pass
