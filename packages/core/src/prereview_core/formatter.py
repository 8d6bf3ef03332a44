"""Rendering of a ReviewResult into GitHub comments."""

from __future__ import annotations

from typing import Iterable

from prereview_core.models import CallMetadata, InlineComment, Issue, ReviewResult

_SEVERITY_EMOJI = {"high": "🔴", "medium": "🟠", "low": "🟡"}
_DEFAULT_EMOJI = "ℹ️"


def severity_emoji(severity: str) -> str:
    return _SEVERITY_EMOJI.get((severity or "").lower(), _DEFAULT_EMOJI)


def format_issue_line(issue: Issue) -> str:
    return (
        f"- {severity_emoji(issue.severity)} **[{issue.type.upper()}]** "
        f"`{issue.file}:{issue.line}` - {issue.description}"
    )


def format_summary(result: ReviewResult, metadata: CallMetadata | None = None) -> str:
    """Build the markdown body of the summary comment.

    Issues and suggestions keep the order the model returned them in; the
    Issues and Suggestions sections are omitted when empty.
    """
    lines = [f"# LLM PR Review - (Score: {result.score}/10)\n"]

    if metadata is not None:
        lines.append(f"Model: {metadata.model} \\")
        lines.append(f"Input Tokens: {metadata.input_tokens} \\")
        lines.append(f"Output Tokens: {metadata.output_tokens}\n")

    lines.append("## Summary\n")
    lines.append(f"{result.summary}\n")

    if result.issues:
        lines.append("## Issues Found\n")
        lines.extend(format_issue_line(issue) for issue in result.issues)
        lines.append("")

    if result.suggestions:
        lines.append("## Suggestions\n")
        lines.extend(f"{i}. {suggestion}" for i, suggestion in enumerate(result.suggestions, 1))
        lines.append("")

    return "\n".join(lines)


def inline_comment_body(issue: Issue) -> str:
    return f"**{issue.type.title()} Issue ({issue.severity})**\n\n{issue.description}"


def derive_inline_comments(issues: Iterable[Issue]) -> list[InlineComment]:
    """One comment per issue that names a file and a positive line.

    Lines are still as reported by the model; see line_mapper for the
    correction applied before posting.
    """
    return [
        InlineComment(path=issue.file, line=issue.line, body=inline_comment_body(issue))
        for issue in issues
        if issue.file and issue.line > 0
    ]
