"""Decode and validate the model's review reply.

The reply is untrusted text. It is accepted only when the whole of it is
JSON in one of two shapes, optionally wrapped in a single ```json fence:

    [{"lineNumber": 1, "reviewComment": "..."}]
    {"reviews": [{"lineNumber": "1", "reviewComment": "..."}]}

Anything else yields ``ParseErr``; nothing here raises.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from src.core.exceptions import LLMResponseParseError

_FENCED_REPLY = re.compile(r"\A\s*```(?:json)?[ \t]*\n(.*?)\n?[ \t]*```\s*\Z", re.DOTALL)
_INTEGER = re.compile(r"\s*[+-]?\d+\s*")


class ReviewSuggestion(BaseModel):
    """One suggestion as emitted by the model (line is hunk-relative)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    line_number: int = Field(..., alias="lineNumber")
    review_comment: str = Field(..., alias="reviewComment")

    @field_validator("line_number", mode="before")
    @classmethod
    def _parse_line_number(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("lineNumber must be an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _INTEGER.fullmatch(value):
            return int(value)
        raise ValueError("lineNumber must be an integer")

    @field_validator("review_comment")
    @classmethod
    def _non_empty_comment(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reviewComment must not be empty")
        return value


_SUGGESTIONS = TypeAdapter(list[ReviewSuggestion])


@dataclass(frozen=True)
class ParseOk:
    suggestions: list[ReviewSuggestion]


@dataclass(frozen=True)
class ParseErr:
    reason: str

    def to_exception(self) -> LLMResponseParseError:
        return LLMResponseParseError(self.reason)


ParseResult = ParseOk | ParseErr


def parse_review_response(response_text: str) -> ParseResult:
    """Parse a raw model reply into review suggestions."""
    fenced = _FENCED_REPLY.match(response_text)
    json_str = fenced.group(1) if fenced else response_text.strip()

    if not json_str:
        return ParseErr("Empty response")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        return ParseErr(f"Invalid JSON in response: {e}")

    if isinstance(data, dict):
        if set(data) != {"reviews"}:
            return ParseErr(f"Unexpected top-level keys: {sorted(data)}")
        items = data["reviews"]
    else:
        items = data

    if not isinstance(items, list):
        return ParseErr(f"Expected a list of reviews, got {type(items).__name__}")

    try:
        suggestions = _SUGGESTIONS.validate_python(items)
    except ValidationError as e:
        return ParseErr(f"Response does not match review schema: {e.error_count()} error(s)")

    return ParseOk(suggestions)
