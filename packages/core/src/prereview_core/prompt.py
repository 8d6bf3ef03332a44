"""Review prompt construction."""

from __future__ import annotations

import logging
from typing import Iterable

from prereview_core.models import ChangedFile, PullRequestInfo

_logger = logging.getLogger(__name__)


def format_changed_file(file: ChangedFile) -> str:
    return f"- {file.path} (+{file.additions} -{file.deletions})"


def build_review_prompt(
    pull_info: PullRequestInfo,
    diff: str,
    files: Iterable[ChangedFile],
    logger: logging.Logger | None = None,
) -> str:
    """Assemble the user prompt sent to the model.

    Files are listed in the order given; nothing is sorted or truncated here.
    Oversized prompts are the budget guard's concern.
    """
    logger = logger or _logger
    parts = [
        "Please review this pull request:\n\n",
        f"**Title:** {pull_info.title}\n",
        f"**Description:** {pull_info.description}\n\n",
        "**Changed Files:**\n",
    ]
    parts.extend(format_changed_file(f) + "\n" for f in files)
    parts.append("\n**Diff:**\n```diff\n")
    parts.append(diff)
    parts.append("\n```")

    prompt = "".join(parts)
    logger.debug("built review prompt length=%d", len(prompt))
    return prompt
