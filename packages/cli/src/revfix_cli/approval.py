"""Approval collaborators: decide whether a suggested fix gets applied."""

from __future__ import annotations

import difflib

import click
from rich.console import Console
from rich.markup import escape

from revfix_core.models import Discussion

console = Console()

_STYLE = {"+": "green", "-": "red", " ": "white"}


def diff_lines(original: str, suggested: str) -> list[tuple[str, str]]:
    """Line diff as (marker, text) pairs, marker in "+", "-", " "."""
    a, b = original.split("\n"), suggested.split("\n")
    out: list[tuple[str, str]] = []
    for tag, i1, i2, j1, j2 in difflib.SequenceMatcher(a=a, b=b, autojunk=False).get_opcodes():
        if tag == "equal":
            out.extend((" ", line) for line in a[i1:i2])
            continue
        out.extend(("-", line) for line in a[i1:i2])
        out.extend(("+", line) for line in b[j1:j2])
    return out


def print_diff(original: str, suggested: str, title: str = "Code comparison") -> None:
    console.rule(f"[bold]{title}[/bold]")
    for marker, line in diff_lines(original, suggested):
        style = _STYLE[marker]
        console.print(f"[{style}]{marker} {escape(line)}[/{style}]", highlight=False)
    console.rule()
    console.print("[dim]Legend:[/dim] [green]+ added[/green] | [red]- removed[/red] | unchanged")


class TerminalApprover:
    """Shows the discussion and the proposed change, then asks on the terminal."""

    def approve(self, discussion: Discussion, original: str, suggested: str, file_name: str) -> bool:
        console.print(f"\n[bold]Review discussion #{discussion.id}[/bold]")
        console.print(f"  Comment: {escape(discussion.comment)}")
        console.print(f"  Lines:   {', '.join(str(n) for n in discussion.lines)}")
        console.print(f"  File:    {file_name}")
        if discussion.source is not None and discussion.source.pr_number:
            console.print(f"  Author:  {discussion.source.author or 'unknown'}")
            console.print(f"  PR:      #{discussion.source.pr_number} {discussion.source.pr_title or ''}")
        print_diff(original, suggested)
        try:
            return click.confirm("Apply this suggested fix?", default=False)
        except click.Abort:
            # Abort subclasses RuntimeError; only KeyboardInterrupt stops the resolve loop.
            raise KeyboardInterrupt from None


class AutoApprover:
    """Answers every approval request the same way (used by --yes)."""

    def __init__(self, answer: bool = True):
        self.answer = answer

    def approve(self, discussion: Discussion, original: str, suggested: str, file_name: str) -> bool:
        return self.answer
