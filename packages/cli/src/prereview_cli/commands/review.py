"""review command — run an LLM review on a pull request."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from prereview_core.errors import ConfigurationError, PublicationError, ReviewError
from prereview_core.reviewer import run_review
from prereview_core.utils.cancel import CancelToken

console = Console()
logger = logging.getLogger(__name__)


@click.command("review")
@click.option("--repo", "repository", envvar="GITHUB_REPOSITORY", help="GitHub repository in owner/repo format.")
@click.option("--pr", "pr_number", type=int, envvar="GITHUB_PR_NUMBER", help="Pull request number to review.")
@click.option("--github-token", envvar="GITHUB_TOKEN", help="GitHub API token. Falls back to `gh auth token`.")
@click.option(
    "--model",
    envvar="PREREVIEW_MODEL",
    help="Model to use, as provider/name (e.g. anthropic/claude-sonnet-4-20250514, openai/gpt-4o).",
)
@click.option("--model-key", envvar="PREREVIEW_MODEL_KEY", help="API key for the model provider.")
@click.option("--model-url", envvar="PREREVIEW_MODEL_URL", help="Base URL of the model service.")
@click.option("--system-prompt", envvar="SYSTEM_PROMPT", help="System prompt used for the review.")
@click.option(
    "--system-prompt-addition",
    envvar="SYSTEM_PROMPT_ADDITION",
    help="Text appended to the system prompt.",
)
@click.option(
    "--max-input-tokens",
    type=int,
    envvar="PREREVIEW_MAX_INPUT_TOKENS",
    help="Approximate input budget; larger PRs are refused with a notice. [default: 10000]",
)
@click.option(
    "--max-output-tokens",
    type=int,
    envvar="PREREVIEW_MAX_OUTPUT_TOKENS",
    help="Maximum number of tokens the model may generate. [default: 5000]",
)
@click.option(
    "--line-offset",
    type=int,
    envvar="PREREVIEW_LINE_OFFSET",
    help="Added to model-reported lines before posting inline comments. [default: 1]",
)
@click.option("--timeout", type=float, default=None, help="Abort the whole review after this many seconds.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the review comments without posting to GitHub.",
)
@click.pass_context
def review_cmd(
    ctx,
    repository: str | None,
    pr_number: int | None,
    github_token: str | None,
    model: str | None,
    model_key: str | None,
    model_url: str | None,
    system_prompt: str | None,
    system_prompt_addition: str | None,
    max_input_tokens: int | None,
    max_output_tokens: int | None,
    line_offset: int | None,
    timeout: float | None,
    shadow: bool,
):
    """Review a pull request with an LLM and post the findings.

    Posts one summary comment with the score, issues and suggestions, and one
    review carrying an inline comment per issue.

    \b
    Required environment variables (or the matching flags):
      GITHUB_TOKEN          GitHub token (or use gh CLI)
      GITHUB_REPOSITORY     owner/repo
      GITHUB_PR_NUMBER      pull request number
      PREREVIEW_MODEL_KEY   API key for the model provider
    """
    from prereview_cli.auth import resolve_github_token
    from prereview_core.config import build_request, get_line_offset, load_config

    config_path = (ctx.obj or {}).get("config_path", ".prereview.yml")
    config = load_config(
        config_path,
        cli_overrides={
            "repository": repository,
            "pr_number": pr_number,
            "github_token": github_token,
            "model": model,
            "model_key": model_key,
            "model_url": model_url,
            "system_prompt": system_prompt,
            "system_prompt_addition": system_prompt_addition,
            "max_input_tokens": max_input_tokens,
            "max_output_tokens": max_output_tokens,
            "line_offset": line_offset,
        },
    )

    token = resolve_github_token(config.get("github_token"))
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    try:
        request = build_request(config)
        offset = get_line_offset(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    logger.info("loaded config repo=%s pr=%d model=%s", request.full_name, request.pr_number, request.model)

    try:
        outcome = run_review(
            request,
            github_token=token,
            model_key=config.get("model_key"),
            model_url=config.get("model_url"),
            line_offset=offset,
            shadow=shadow,
            cancel=CancelToken.after(timeout),
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e))
    except PublicationError as e:
        logger.error("review failed after the model call step=%s err=%s", e.step, e)
        console.print(f"[red]Review generated but could not be published: {e}[/red]")
        ctx.exit(1)
    except ReviewError as e:
        logger.error("got error running review step=%s err=%s", e.step, e)
        console.print(f"[red]Review failed: {e}[/red]")
        ctx.exit(1)
    else:
        result = outcome.response.result
        console.print(
            f"[green]Review {'printed' if shadow else 'posted'}: score {result.score}/10, "
            f"{len(outcome.inline_comments)} inline comment(s).[/green]"
        )
