"""CLI entry point for revfix.

Commands:
  fetch    collect review discussions from GitHub into the ledger
  resolve  walk the ledger, suggest a fix per discussion and apply on approval
  undo     restore the file changed by the most recent applied fix
  status   show credentials, pending discussions and undo availability
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from revfix_cli.commands.fetch import fetch_cmd
from revfix_cli.commands.resolve import resolve_cmd
from revfix_cli.commands.status import status_cmd
from revfix_cli.commands.undo import undo_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("revfix"),
    prog_name="revfix",
)
@click.option(
    "--config",
    "config_path",
    default=".revfix.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVFIX_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Resolve code review discussions with AI-suggested fixes."""
    from revfix_core.config import load_config, validate_config
    from revfix_core.exceptions import ValidationError
    from revfix_cli.auth import resolve_github_credentials

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
        validate_config(config)
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    credentials = resolve_github_credentials(config)
    config["github_token"] = credentials.token
    config["github_token_source"] = credentials.source

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


main.add_command(fetch_cmd)
main.add_command(resolve_cmd)
main.add_command(undo_cmd)
main.add_command(status_cmd)
