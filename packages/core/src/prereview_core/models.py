"""Review data model.

ReviewResult and Issue are pydantic models because they double as the output
schema handed to the model: ``ReviewResult.model_json_schema()`` is what the
provider adapters use to constrain generation, and ``model_validate_json`` is
what turns the response back into a typed value. Everything that never
crosses the model boundary is a plain dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IssueType = Literal["bug", "style", "performance", "security"]
Severity = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class ModelId:
    """A model identifier in ``provider/name`` form."""

    provider: str
    name: str

    def __str__(self) -> str:
        return f"{self.provider}/{self.name}"


@dataclass(frozen=True)
class ReviewRequest:
    """Everything needed to review one pull request. Built once from config."""

    owner: str
    repository: str
    pr_number: int
    model: ModelId
    system_prompt: str
    max_input_tokens: int
    max_output_tokens: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"


@dataclass(frozen=True)
class ChangedFile:
    path: str
    additions: int
    deletions: int


@dataclass(frozen=True)
class PullRequestInfo:
    title: str
    description: str
    head_sha: str
    author: str = ""


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    file: str = Field(description="the file that the issue is in")
    line: int = Field(description="the line that the issue is on")
    type: IssueType
    description: str = Field(description="a description of the issue")
    severity: Severity


class ReviewResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    summary: str = Field(
        description=(
            "A summary of the entire pull request review, focus on summation of issues and suggestions. "
            "Don't explain what the change does, the author knows that. Keep it short, 1-3 sentences."
        )
    )
    # Every field is required and nothing is coerced; a reply that leaves a
    # list out must say so with an empty list.
    issues: list[Issue] = Field(description="Issues found in the changed lines, empty when there are none.")
    suggestions: list[str] = Field(
        description="Suggestions for the pull request. Keep it to 0-3 bullet points with 1-3 sentences each.",
    )
    score: int = Field(
        ge=1,
        le=10,
        description="A score for the PR between 1 and 10, where 1 is the worst and 10 is the best.",
    )


@dataclass(frozen=True)
class CallMetadata:
    """Usage reported by the model service. Not part of the output schema."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class ReviewResponse:
    result: ReviewResult
    metadata: CallMetadata | None = None


@dataclass(frozen=True)
class InlineComment:
    """A comment anchored to a file path and line of the PR diff."""

    path: str
    line: int
    body: str


class ReviewState(str, Enum):
    START = "start"
    FETCHED_PR = "fetched_pr"
    FETCHED_DIFF = "fetched_diff"
    FETCHED_FILES = "fetched_files"
    REVIEWED = "reviewed"
    SUMMARY_POSTED = "summary_posted"
    INLINE_POSTED = "inline_posted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReviewOutcome:
    """What one orchestrated review run produced."""

    state: ReviewState
    response: ReviewResponse | None = None
    summary_markdown: str = ""
    inline_comments: list[InlineComment] = field(default_factory=list)
