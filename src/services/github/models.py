from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PullRequestDetails(BaseModel):
    """Pull request metadata the review is run against."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    pull_number: int
    title: str
    description: str = ""


class ReviewComment(BaseModel):
    """An inline review comment on a line of the new file version."""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int = Field(..., ge=1)
    body: str = Field(..., min_length=1)


class PullRequestEvent(BaseModel):
    """The parts of a ``pull_request`` event payload the reviewer reads."""

    action: str
    number: int
    repository: dict[str, Any]
    before: str | None = None
    after: str | None = None

    @property
    def owner(self) -> str:
        owner = self.repository.get("owner", {})
        if isinstance(owner, dict):
            return str(owner.get("login", ""))
        return ""

    @property
    def repo(self) -> str:
        return str(self.repository.get("name", ""))
