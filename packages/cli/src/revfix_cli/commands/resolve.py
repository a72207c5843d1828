"""resolve command: walk the ledger and apply approved fixes."""

from __future__ import annotations

import click
from rich.console import Console

from revfix_cli.approval import AutoApprover, TerminalApprover
from revfix_core.context import ContextProvider
from revfix_core.exceptions import RevfixError
from revfix_core.gh.pull_request import GitHubReviewClient
from revfix_core.resolver import ResolutionCoordinator, get_suggester, print_summary
from revfix_core.undo import UndoManager
from revfix_store.json_ledger import JsonLedger

console = Console()


@click.command("resolve")
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--yes", "-y", is_flag=True, help="Apply every suggestion without asking.")
@click.option(
    "--local-only",
    "local_only",
    is_flag=True,
    help="Read context from local files only, even for pull request discussions.",
)
@click.pass_context
def resolve_cmd(ctx, model: str | None, yes: bool, local_only: bool):
    """Suggest a fix for each pending discussion and apply the approved ones.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
      GITHUB_TOKEN         Optional; enables context from pull request diffs
    """
    config = dict(ctx.obj["config"])
    if model:
        config["model"] = model
    if local_only:
        config["local_only"] = True

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    ledger = JsonLedger(config["discussions_file"], default_file=config["default_file"])
    if not ledger.exists():
        raise click.UsageError(f"Discussions file {ledger.path} not found. Run 'revfix fetch' first.")

    token = config.get("github_token")
    client = GitHubReviewClient(token) if token and not config["local_only"] else None
    if client is not None:
        console.print(f"[dim]Pull request context enabled (GitHub token from {config['github_token_source']})[/dim]")
    contexts = ContextProvider(
        review_client=client,
        context_radius=config["context_radius"],
        local_only=config["local_only"],
    )
    undo = UndoManager(config["undo_file"], config["backup_dir"])

    try:
        suggester = get_suggester(config)
    except (ImportError, ValueError) as e:
        raise click.UsageError(str(e)) from e

    coordinator = ResolutionCoordinator(
        ledger=ledger,
        context_provider=contexts,
        suggester=suggester,
        approver=AutoApprover() if yes else TerminalApprover(),
        undo_manager=undo,
        cleanup_keep=config["backup_keep"],
    )
    try:
        result = coordinator.run()
    except RevfixError as e:
        raise click.ClickException(str(e)) from e

    if result.processed:
        print_summary(result)
