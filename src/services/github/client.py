"""GitHub API client with metrics instrumentation."""

import time
from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from src.core.config import settings
from src.core.exceptions import (
    GitHubAuthenticationError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    PublishError,
)
from src.core.metrics import record_github_api_call
from src.services.github.models import PullRequestDetails, ReviewComment

logger = structlog.get_logger()

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
REVIEW_EVENT = "COMMENT"


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(self, token: str | None = None, base_url: str | None = None) -> None:
        self.token = token or settings.github_token.get_secret_value()
        self.base_url = base_url or settings.github_api_url
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github.v3+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _extract_endpoint_name(self, endpoint: str) -> str:
        """
        Extract a normalized endpoint name for metrics.

        Converts:
            /repos/owner/repo/pulls/123 -> pulls
            /repos/owner/repo/pulls/123/reviews -> pulls_reviews
            /repos/owner/repo/compare/abc...def -> compare
        """
        parts = endpoint.strip("/").split("/")

        # Skip 'repos', owner, repo parts
        if len(parts) >= 3 and parts[0] == "repos":
            parts = parts[3:]

        # Filter out IDs and commit ranges
        parts = [p for p in parts if not p.isdigit() and "..." not in p]

        return "_".join(parts) if parts else "unknown"

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> dict[str, Any] | list[Any] | str:
        """Make an authenticated request to GitHub API."""
        client = await self._get_client()
        endpoint_name = self._extract_endpoint_name(endpoint)

        logger.debug("GitHub API request", method=method, endpoint=endpoint)

        start_time = time.perf_counter()
        status_code = 0
        rate_limit_remaining = None
        rate_limit_reset = None

        try:
            try:
                response = await client.request(method, endpoint, **kwargs)
            except httpx.HTTPError as e:
                raise GitHubError(f"GitHub API request failed: {e}") from e

            status_code = response.status_code

            if "X-RateLimit-Remaining" in response.headers:
                rate_limit_remaining = int(response.headers["X-RateLimit-Remaining"])
            if "X-RateLimit-Reset" in response.headers:
                rate_limit_reset = int(response.headers["X-RateLimit-Reset"])

            if response.status_code == 401:
                raise GitHubAuthenticationError("Invalid GitHub token")

            if response.status_code == 403:
                if "rate limit" in response.text.lower():
                    raise GitHubRateLimitError(reset_at=rate_limit_reset or 0)
                raise GitHubAuthenticationError("Access forbidden")

            if response.status_code == 404:
                raise GitHubNotFoundError(f"Resource not found: {endpoint}")

            if response.status_code >= 400:
                raise GitHubError(
                    f"GitHub API error: {response.status_code}",
                    details={"response": response.text},
                )

            # Handle diff responses (plain text)
            headers = kwargs.get("headers", {})
            if isinstance(headers, dict) and DIFF_MEDIA_TYPE in headers.get("Accept", ""):
                return response.text

            result: dict[str, Any] | list[Any] = response.json()
            return result

        finally:
            duration_seconds = time.perf_counter() - start_time
            record_github_api_call(
                endpoint=endpoint_name,
                method=method,
                status_code=status_code,
                duration_seconds=duration_seconds,
                rate_limit_remaining=rate_limit_remaining,
                rate_limit_reset=rate_limit_reset,
            )

    async def get_pull_request_details(
        self,
        owner: str,
        repo: str,
        pr_number: int,
    ) -> PullRequestDetails:
        """Fetch the title and description of a pull request."""
        data = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pr_number}")

        if not isinstance(data, dict):
            raise GitHubError("Unexpected response format")

        return PullRequestDetails(
            owner=owner,
            repo=repo,
            pull_number=pr_number,
            title=data.get("title") or "",
            description=data.get("body") or "",
        )

    async def get_pull_request_diff(
        self,
        owner: str,
        repo: str,
        pr_number: int,
    ) -> str:
        """Fetch the raw diff for a PR."""
        diff = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{pr_number}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )

        if not isinstance(diff, str):
            raise GitHubError("Unexpected response format for diff")

        return diff

    async def get_compare_diff(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
    ) -> str:
        """Fetch the raw diff between two commits."""
        diff = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )

        if not isinstance(diff, str):
            raise GitHubError("Unexpected response format for compare diff")

        return diff

    async def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: Sequence[ReviewComment],
    ) -> dict[str, Any]:
        """Submit all comments as a single non-blocking review.

        Raises:
            PublishError: If GitHub rejects the submission or is unreachable.
        """
        payload: dict[str, Any] = {
            "event": REVIEW_EVENT,
            "comments": [c.model_dump() for c in comments],
        }

        try:
            data = await self._request(
                "POST",
                f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews",
                json=payload,
            )
        except GitHubError as e:
            raise PublishError(f"Failed to submit review: {e.message}", details=e.details) from e

        if not isinstance(data, dict):
            raise PublishError("Unexpected response format")

        logger.info(
            "Review submitted",
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            comment_count=len(payload["comments"]),
        )

        return data
