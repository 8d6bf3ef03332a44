from __future__ import annotations

from typing import Iterable

import requests
from github import Github

from prereview_core.line_mapper import to_review_comments
from prereview_core.models import ChangedFile, InlineComment, PullRequestInfo

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
INLINE_REVIEW_BODY = "Automated code review with inline comments"


def get_repo(repo_name: str, token: str, timeout: float | None = None):
    """Return the repository through a client that never retries.

    ``timeout`` caps every request made through the returned object; without
    it PyGithub's default applies.
    """
    kwargs = {"retry": None}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return Github(token, **kwargs).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_info(pull) -> PullRequestInfo:
    return PullRequestInfo(
        title=pull.title or "",
        description=pull.body or "",
        head_sha=pull.head.sha,
        author=pull.user.login if pull.user else "",
    )


def get_raw_diff(pull, token: str, timeout: float | None = None) -> str:
    """Return the PR's unified diff as GitHub renders it.

    PyGithub only exposes per-file patches, so the raw diff is requested from
    the pull URL with the diff media type.
    """
    response = requests.get(
        pull.url,
        headers={"Authorization": f"Bearer {token}", "Accept": DIFF_MEDIA_TYPE},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.text


def get_changed_files(pull) -> list[ChangedFile]:
    # PaginatedList walks every page lazily as we iterate.
    return [ChangedFile(path=f.filename, additions=f.additions, deletions=f.deletions) for f in pull.get_files()]


def post_comment(pull, body: str):
    return pull.create_issue_comment(body)


def post_review(repo, pull, head_sha: str, comments: Iterable[InlineComment], body: str = INLINE_REVIEW_BODY):
    """Create a single COMMENT review carrying every inline comment, pinned to head_sha."""
    return pull.create_review(
        commit=repo.get_commit(head_sha),
        body=body,
        event="COMMENT",
        comments=to_review_comments(comments),
    )
