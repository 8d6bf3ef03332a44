"""Model line numbers → GitHub review comment lines.

The model reports lines relative to the diff text it was shown; GitHub
anchors review comments one line further down. The offset was found
empirically and is not derived from the hunk structure, so it stays
configurable rather than assumed to hold for every diff shape.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable

from prereview_core.models import InlineComment

DEFAULT_LINE_OFFSET = 1


def map_line(line: int, offset: int = DEFAULT_LINE_OFFSET) -> int:
    return line + offset


def map_inline_comments(comments: Iterable[InlineComment], offset: int = DEFAULT_LINE_OFFSET) -> list[InlineComment]:
    return [dataclasses.replace(c, line=map_line(c.line, offset)) for c in comments]


def to_review_comments(comments: Iterable[InlineComment]) -> list[dict]:
    """Payload shape expected by PullRequest.create_review(comments=...)."""
    return [{"path": c.path, "line": c.line, "body": c.body} for c in comments]
