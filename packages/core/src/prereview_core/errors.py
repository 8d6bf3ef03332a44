"""Error kinds raised by the review pipeline.

Every failure that reaches the process boundary is a ReviewError. The
subclass tells operators where the run died; in particular PublicationError
means the model call already happened and its spend was wasted.
"""

from __future__ import annotations


class ReviewError(Exception):
    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step


class ConfigurationError(ReviewError):
    """Invalid or missing configuration, detected before any network call."""


class CollaboratorFetchError(ReviewError):
    """Fetching the PR, its diff or its changed files failed."""


class BudgetExceededError(ReviewError):
    def __init__(
        self,
        estimated_tokens: int,
        max_tokens: int,
        notice_error: BaseException | None = None,
        step: str | None = None,
    ):
        super().__init__(f"review prompt has too many tokens: {estimated_tokens} > {max_tokens}", step=step)
        self.estimated_tokens = estimated_tokens
        self.max_tokens = max_tokens
        self.notice_error = notice_error


class ModelInvocationError(ReviewError):
    def __init__(self, message: str, model: str, cause: object = None, step: str | None = None):
        super().__init__(message, step=step)
        self.model = model
        self.cause = cause


class PublicationError(ReviewError):
    """Posting the summary or inline comments failed after the model was called."""


class ReviewCancelled(ReviewError):
    """The caller cancelled the run or its deadline passed."""
