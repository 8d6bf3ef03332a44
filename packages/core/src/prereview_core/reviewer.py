"""Core PR review orchestration.

One review is one linear pipeline:

    START → FETCHED_PR → FETCHED_DIFF → FETCHED_FILES → REVIEWED
          → SUMMARY_POSTED → INLINE_POSTED → DONE

Each step starts only after the previous one succeeded. Any failure moves
the run to FAILED and propagates; nothing is retried and nothing is
published after a failed step.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

import requests
from github import GithubException
from rich.console import Console

from prereview_core.budget import TokenBudgetGuard
from prereview_core.errors import CollaboratorFetchError, ConfigurationError, PublicationError, ReviewError
from prereview_core.formatter import derive_inline_comments, format_summary
from prereview_core.gh.pull_request import (
    get_changed_files,
    get_pull,
    get_pull_info,
    get_raw_diff,
    get_repo,
    post_comment,
    post_review,
)
from prereview_core.line_mapper import DEFAULT_LINE_OFFSET, map_inline_comments
from prereview_core.models import (
    ChangedFile,
    InlineComment,
    ModelId,
    ReviewOutcome,
    ReviewRequest,
    ReviewResponse,
    ReviewState,
)
from prereview_core.prompt import build_review_prompt
from prereview_core.providers.base import BaseGenerator
from prereview_core.requester import request_review
from prereview_core.utils.cancel import CancelToken

console = Console()
_logger = logging.getLogger(__name__)

PROVIDERS = ("anthropic", "openai")

# Failures raised by the hosting collaborators; anything else is a bug and
# propagates unwrapped.
_HOST_ERRORS = (GithubException, requests.RequestException)

T = TypeVar("T")


def _get_generator(model: ModelId, api_key: str | None, base_url: str | None = None) -> BaseGenerator:
    provider = model.provider.lower()
    if provider not in PROVIDERS:
        raise ConfigurationError(f"Unknown model provider: {model.provider!r}. Choose 'anthropic' or 'openai'.")
    if not api_key:
        raise ConfigurationError("No model API key configured. Set PREREVIEW_MODEL_KEY.")
    try:
        if provider == "anthropic":
            from prereview_core.providers.anthropic import AnthropicGenerator

            return AnthropicGenerator(api_key=api_key, base_url=base_url)

        from prereview_core.providers.openai import OpenAIGenerator

        return OpenAIGenerator(api_key=api_key, base_url=base_url)
    except ImportError as e:
        raise ConfigurationError(str(e)) from e


def print_shadow_comment(body: str) -> None:
    console.print("\n[bold]Shadow review — PR comment (not posted)[/bold]\n")
    console.print(body, markup=False)


def print_shadow_comments(comments: list[InlineComment]) -> None:
    """Print inline comments to the terminal without posting to GitHub."""
    if not comments:
        console.print("[yellow]Shadow mode: no inline comments generated.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review — {len(comments)} inline comment(s) (not posted)[/bold]\n")
    for c in comments:
        console.print(f"[bold cyan]{c.path}[/bold cyan]  line [bold]{c.line}[/bold]")
        console.print(f"  {c.body}", markup=False)
        console.print()


class ReviewOrchestrator:
    """Runs the review pipeline for one ReviewRequest.

    ``state`` reflects the last step that completed, or FAILED. The logger is
    passed in explicitly so callers can bind their own context; it defaults
    to this module's logger.
    """

    def __init__(
        self,
        request: ReviewRequest,
        generator: BaseGenerator,
        github_token: str,
        repo_obj=None,
        line_offset: int = DEFAULT_LINE_OFFSET,
        shadow: bool = False,
        cancel: CancelToken | None = None,
        logger: logging.Logger | None = None,
    ):
        self.request = request
        self.generator = generator
        self.line_offset = line_offset
        self.shadow = shadow
        self.state = ReviewState.START
        self.outcome = ReviewOutcome(state=self.state)

        self._github_token = github_token
        self._repo = repo_obj
        self._pull = None
        self._cancel = cancel or CancelToken()
        self._log = logger or _logger
        self._guard = TokenBudgetGuard(request.max_input_tokens, logger=self._log)

    # ------------------------------------------------------------------ #
    # Pipeline                                                             #
    # ------------------------------------------------------------------ #

    def run(self) -> ReviewOutcome:
        req = self.request
        self._log.info(
            "starting PR review owner=%s repo=%s pr=%d model=%s", req.owner, req.repository, req.pr_number, req.model
        )

        pull_info = self._step(ReviewState.FETCHED_PR, "failed to get PR", CollaboratorFetchError, self._fetch_pull)
        self._log.info("retrieved PR details title=%r author=%s", pull_info.title, pull_info.author)

        diff = self._step(ReviewState.FETCHED_DIFF, "failed to get PR diff", CollaboratorFetchError, self._fetch_diff)
        self._log.info("retrieved PR diff diff_size=%d", len(diff))

        files = self._step(
            ReviewState.FETCHED_FILES,
            "failed to get changed files",
            CollaboratorFetchError,
            get_changed_files,
            self._pull,
        )
        self._log.info("retrieved changed files count=%d", len(files))

        # Budget and model failures are already typed; nothing to wrap here.
        response = self._step(
            ReviewState.REVIEWED, "failed to review with LLM", None, self._review, pull_info, diff, files
        )
        self.outcome.response = response
        result = response.result
        self._log.info("completed LLM review score=%d issues_count=%d", result.score, len(result.issues))

        summary = format_summary(result, response.metadata)
        self.outcome.summary_markdown = summary
        self._step(
            ReviewState.SUMMARY_POSTED, "failed to post review comment", PublicationError, self._publish, summary
        )
        self._log.info("posted review summary comment")

        if result.issues:
            comments = map_inline_comments(derive_inline_comments(result.issues), self.line_offset)
            self.outcome.inline_comments = comments
            self._step(
                ReviewState.INLINE_POSTED,
                "failed to post inline comments",
                PublicationError,
                self._publish_inline,
                pull_info.head_sha,
                comments,
            )
            self._log.info("posted inline comments count=%d", len(comments))
        else:
            self._log.info("no issues to post as inline comments")

        self._transition(ReviewState.DONE)
        self._log.info("PR review completed successfully pr=%d", req.pr_number)
        return self.outcome

    def _step(
        self,
        target: ReviewState,
        failure: str,
        error_cls: type[ReviewError] | None,
        fn: Callable[..., T],
        *args,
    ) -> T:
        """Run one pipeline step and advance to ``target``, or fail the run.

        Hosting errors are wrapped in ``error_cls`` with ``failure`` as the
        message prefix. ReviewErrors raised by the step keep their type and
        are tagged with the step.
        """
        try:
            self._cancel.check(step=target.value)
            value = fn(*args)
            # Hosting calls are not interruptible; an expiry is caught as soon as they return.
            self._cancel.check(step=target.value)
        except ReviewError as e:
            self._fail(failure, e)
            if e.step is None:
                e.step = target.value
            raise
        except _HOST_ERRORS as e:
            self._fail(failure, e)
            if error_cls is None:
                raise
            raise error_cls(f"{failure}: {e}", step=target.value) from e
        except Exception as e:
            self._fail(failure, e)
            raise
        self._transition(target)
        return value

    def _transition(self, state: ReviewState) -> None:
        self.state = state
        self.outcome.state = state

    def _fail(self, failure: str, err: BaseException) -> None:
        self._log.error("%s err=%s", failure, err)
        self._transition(ReviewState.FAILED)

    # ------------------------------------------------------------------ #
    # Steps                                                                #
    # ------------------------------------------------------------------ #

    def _fetch_pull(self):
        if self._repo is None:
            self._repo = get_repo(
                self.request.full_name,
                token=self._github_token,
                timeout=self._cancel.remaining(ReviewState.FETCHED_PR.value),
            )
        self._pull = get_pull(self._repo, self.request.pr_number)
        return get_pull_info(self._pull)

    def _fetch_diff(self) -> str:
        timeout = self._cancel.remaining(ReviewState.FETCHED_DIFF.value)
        return get_raw_diff(self._pull, self._github_token, timeout=timeout)

    def _review(self, pull_info, diff: str, files: list[ChangedFile]) -> ReviewResponse:
        prompt = build_review_prompt(pull_info, diff, files, logger=self._log)
        self._log.info("built review prompt length=%d", len(prompt))
        self._guard.enforce(prompt, self._publish)
        return request_review(self.generator, prompt, self.request, cancel=self._cancel, logger=self._log)

    def _publish(self, body: str) -> None:
        if self.shadow:
            print_shadow_comment(body)
            return
        post_comment(self._pull, body)

    def _publish_inline(self, head_sha: str, comments: list[InlineComment]) -> None:
        if not comments:
            self._log.info("all issues filtered out, no inline review created")
            return
        if self.shadow:
            print_shadow_comments(comments)
            return
        post_review(self._repo, self._pull, head_sha, comments)


def run_review(
    request: ReviewRequest,
    github_token: str,
    model_key: str | None = None,
    model_url: str | None = None,
    line_offset: int = DEFAULT_LINE_OFFSET,
    shadow: bool = False,
    cancel: CancelToken | None = None,
    repo_obj=None,
    generator: BaseGenerator | None = None,
    logger: logging.Logger | None = None,
) -> ReviewOutcome:
    """Run the full PR review pipeline and return its outcome.

    Raises a ReviewError subclass on any failure. The generator is built
    before the first network call, so an unknown provider or missing key
    fails as a ConfigurationError without touching GitHub.
    """
    if generator is None:
        generator = _get_generator(request.model, model_key, model_url)
    orchestrator = ReviewOrchestrator(
        request,
        generator,
        github_token,
        repo_obj=repo_obj,
        line_offset=line_offset,
        shadow=shadow,
        cancel=cancel,
        logger=logger,
    )
    return orchestrator.run()
