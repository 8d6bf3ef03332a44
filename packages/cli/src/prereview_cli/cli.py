"""CLI entry point for prereview.

Commands:
  review   — run an LLM review on a pull request and post the results
"""

from __future__ import annotations

import logging
import sys

import click

from prereview_cli.commands.review import review_cmd

_NOISY_LOGGERS = ("urllib3", "httpx", "github")


def setup_logging(level: str) -> None:
    """Configure the operator-facing log stream (stderr)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group()
@click.version_option(package_name="prereview", prog_name="prereview")
@click.option(
    "--config",
    "config_path",
    default=".prereview.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PREREVIEW_CONFIG",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="PREREVIEW_LOG_LEVEL",
    help="Verbosity of the log stream.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, log_level: str):
    """LLM-powered GitHub pull request reviewer."""
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
