"""Input token budget enforcement.

The estimate is a fixed four-characters-per-token heuristic. It is only a
proxy for the model's context window, used to refuse oversized PRs before
any tokens are spent.
"""

from __future__ import annotations

import logging
from typing import Callable

from prereview_core.errors import BudgetExceededError

_logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    return len(text) // CHARS_PER_TOKEN


def budget_notice(estimated_tokens: int, max_tokens: int) -> str:
    return (
        "# LLM PR Review - too long\n\n"
        f"Review skipped due to length of input, ~{estimated_tokens} tokens \\\n"
        f"Maximum input length is ~{max_tokens} tokens\n"
    )


class TokenBudgetGuard:
    """Rejects prompts that exceed ``max_input_tokens``.

    On rejection the notice is handed to ``publish`` (normally a PR comment)
    before BudgetExceededError is raised. A failure to publish does not
    change the outcome; it is attached to the error as ``notice_error``.
    """

    def __init__(self, max_input_tokens: int, logger: logging.Logger | None = None):
        self.max_input_tokens = max_input_tokens
        self._logger = logger or _logger

    def exceeds(self, prompt: str) -> bool:
        return len(prompt) > self.max_input_tokens * CHARS_PER_TOKEN

    def enforce(self, prompt: str, publish: Callable[[str], object]) -> None:
        if not self.exceeds(prompt):
            return

        estimated = estimate_tokens(prompt)
        self._logger.error(
            "review prompt too long length=%d max=%d", len(prompt), self.max_input_tokens * CHARS_PER_TOKEN
        )
        try:
            publish(budget_notice(estimated, self.max_input_tokens))
        except Exception as e:
            self._logger.error("failed to post input-too-long notice err=%s", e)
            raise BudgetExceededError(estimated, self.max_input_tokens, notice_error=e) from e
        raise BudgetExceededError(estimated, self.max_input_tokens)
