"""Pytest configuration and fixtures."""

import os

import pytest

# =============================================================================
# Environment Setup (must happen before settings are imported)
# =============================================================================

os.environ.setdefault("GITHUB_TOKEN", "test-token-for-testing")
os.environ.setdefault("OPENAI_API_KEY", "test-key-for-testing")

from src.services.github.models import PullRequestDetails  # noqa: E402

# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def pr_details() -> PullRequestDetails:
    """Sample pull request metadata."""
    return PullRequestDetails(
        owner="owner",
        repo="repo",
        pull_number=1,
        title="PR Title",
        description="PR Description",
    )


@pytest.fixture
def mock_pull_request_response() -> dict[str, object]:
    """Sample GitHub PR response."""
    return {
        "id": 12345,
        "number": 1,
        "title": "PR Title",
        "body": "PR Description",
        "state": "open",
        "html_url": "https://github.com/owner/repo/pull/1",
        "head": {"sha": "abc123def456", "ref": "feature-branch"},
        "base": {"sha": "def456abc123", "ref": "main"},
    }

