"""fetch command: collect review discussions from a pull request into the ledger."""

from __future__ import annotations

import click
from rich.console import Console

from revfix_core.exceptions import RevfixError
from revfix_core.gh.pull_request import GitHubReviewClient
from revfix_store.json_ledger import JsonLedger

console = Console()


@click.command("fetch")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to scan the open pull requests.",
)
@click.pass_context
def fetch_cmd(ctx, repo: str, pr_number: int | None):
    """Fetch submitted review comments and write them to the discussions file.

    \b
    Review comments become one discussion each. Review bodies and PR
    conversation comments contribute a discussion for every "file.ext line N"
    or "file.ext:N" mention they contain.
    """
    config = ctx.obj["config"]
    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    console.print(f"[dim]GitHub token from {config['github_token_source']}[/dim]")
    target = f"PR #{pr_number}" if pr_number else "open pull requests"
    console.print(f"Fetching review comments from [bold]{repo}[/bold] ({target})...")

    client = GitHubReviewClient(token)
    try:
        discussions = client.fetch_discussions(repo, pr_number=pr_number, max_prs=config["max_open_prs"])
    except RevfixError as e:
        raise click.ClickException(str(e)) from e

    ledger = JsonLedger(config["discussions_file"], default_file=config["default_file"])
    try:
        ledger.save(discussions)
    except RevfixError as e:
        raise click.ClickException(str(e)) from e

    if not discussions:
        console.print("[yellow]No discussions found. Wrote an empty discussions file.[/yellow]")
        return

    console.print(f"[green]Saved {len(discussions)} discussion(s) to {ledger.path}[/green]")
    for d in discussions[:5]:
        console.print(f"  #{d.id} {d.file}:{d.lines[0]}  {d.comment[:60]}")
    if len(discussions) > 5:
        console.print(f"  [dim]... and {len(discussions) - 5} more[/dim]")
    console.print("\nRun [bold]revfix resolve[/bold] to work through them.")
