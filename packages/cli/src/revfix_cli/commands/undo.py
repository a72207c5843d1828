"""undo command: restore the file changed by the most recent applied fix."""

from __future__ import annotations

import click
from rich.console import Console

from revfix_cli.approval import print_diff
from revfix_core.exceptions import UndoStateError
from revfix_core.undo import UndoManager

console = Console()


@click.command("undo")
@click.option("--force", "-f", is_flag=True, help="Restore without asking for confirmation.")
@click.pass_context
def undo_cmd(ctx, force: bool):
    """Undo the last applied fix. Each backup can be restored once."""
    config = ctx.obj["config"]
    manager = UndoManager(config["undo_file"], config["backup_dir"])

    check = manager.can_undo()
    if not check:
        console.print(f"[yellow]Nothing to undo: {check.reason}[/yellow]")
        return

    record = check.record
    console.print(f"[bold]Last change:[/bold] {record.description}")
    console.print(f"  File:      {record.file_path}")
    console.print(f"  Applied:   {record.timestamp}")

    try:
        restored, current = manager.preview_undo()
        print_diff(current, restored, title="Changes to be reverted")

        if not force and not click.confirm("Restore the file to its previous state?", default=False):
            console.print("Undo cancelled.")
            return

        manager.perform_undo()
    except UndoStateError as e:
        console.print(f"[yellow]Nothing to undo: {e.reason}[/yellow]")
        return
    except OSError as e:
        raise click.ClickException(f"Could not restore {record.file_path}: {e}") from e

    console.print(f"[green]Restored {record.file_path}.[/green]")
    console.print("[dim]This backup has been used and cannot be restored again.[/dim]")
