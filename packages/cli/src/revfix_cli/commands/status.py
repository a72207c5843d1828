"""status command: credentials, pending discussions and undo availability."""

from __future__ import annotations

import click
from rich.console import Console

from revfix_core.exceptions import RevfixError
from revfix_core.undo import UndoManager
from revfix_store.json_ledger import JsonLedger

console = Console()


def _mark(present) -> str:
    return "[green]set[/green]" if present else "[red]missing[/red]"


@click.command("status")
@click.pass_context
def status_cmd(ctx):
    """Show what a resolve run would work with."""
    config = ctx.obj["config"]

    console.print("[bold]Credentials[/bold]")
    source = config.get("github_token_source")
    origin = f" (from {source})" if source else ""
    console.print(f"  GitHub token:      {_mark(config.get('github_token'))}{origin}")
    console.print(f"  OpenAI API key:    {_mark(config.get('openai_api_key'))}")
    console.print(f"  Anthropic API key: {_mark(config.get('anthropic_api_key'))}")
    console.print(f"  Model:             {config['model']}")

    console.print("\n[bold]Discussions[/bold]")
    ledger = JsonLedger(config["discussions_file"], default_file=config["default_file"])
    if not ledger.exists():
        console.print(f"  [yellow]{ledger.path} not found. Run 'revfix fetch' first.[/yellow]")
    else:
        try:
            discussions = ledger.load()
        except RevfixError as e:
            console.print(f"  [red]{e}[/red]")
        else:
            console.print(f"  {len(discussions)} pending in {ledger.path}")
            for d in discussions[:3]:
                lines = ", ".join(str(n) for n in d.lines)
                console.print(f"  #{d.id} {d.file} (lines {lines}): {d.comment[:60]}")

    console.print("\n[bold]Undo[/bold]")
    undo = UndoManager(config["undo_file"], config["backup_dir"]).status()
    if undo["available"]:
        console.print(f"  [green]Available:[/green] {undo['description']} ({undo['timestamp']})")
    else:
        console.print(f"  [yellow]Not available:[/yellow] {undo['reason']}")
