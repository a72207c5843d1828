"""Discussion resolution: context → suggestion → approval → apply or skip → ledger.

Discussions are processed one at a time in ledger order. The undo manager
holds a single slot and fixes are read-modify-write on the target file, so
nothing here runs in parallel. The approval call is the only place the loop
waits on the outside world; the target file is written only after it
returns True.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from revfix_core.exceptions import ExternalServiceError, RevfixError
from revfix_core.models import (
    CodeContext,
    Discussion,
    LineRange,
    ResolutionOutcome,
    RunResult,
    SourceKind,
)
from revfix_core.providers.anthropic import AnthropicSuggester
from revfix_core.providers.openai import OpenAISuggester
from revfix_core.utils.lines import apply_fix, read_text, write_text

if TYPE_CHECKING:
    from revfix_core.context import ContextProvider
    from revfix_core.providers.base import BaseSuggester
    from revfix_core.undo import UndoManager

console = Console()
logger = logging.getLogger(__name__)


def get_suggester(config: dict) -> BaseSuggester:
    model = config["model"]
    if model == "openai":
        return OpenAISuggester(api_key=config["openai_api_key"])
    if model == "anthropic":
        return AnthropicSuggester(api_key=config["anthropic_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'openai' or 'anthropic'.")


class ResolutionCoordinator:
    """Drives every pending discussion in the ledger through one resolution attempt.

    Collaborators are duck-typed:
      ledger    load() -> list[Discussion]; remove_resolved(all, ids)
      suggester suggest(code_context, comment, file_name, lines) -> str
      approver  approve(discussion, original, suggested, file_name) -> bool
    """

    def __init__(
        self,
        ledger,
        context_provider: ContextProvider,
        suggester,
        approver,
        undo_manager: UndoManager,
        cleanup_keep: int = 5,
    ):
        self._ledger = ledger
        self._contexts = context_provider
        self._suggester = suggester
        self._approver = approver
        self._undo = undo_manager
        self._cleanup_keep = cleanup_keep

    def run(self) -> RunResult:
        """Process the whole ledger and prune resolved discussions from it.

        Ledger load and ledger write failures propagate; everything scoped to
        a single discussion is caught and counted.
        """
        discussions = self._ledger.load()
        result = RunResult()
        logger.info("Found %d discussion(s) to process", len(discussions))

        if not discussions:
            console.print("[yellow]No discussions found to process.[/yellow]")
            return result

        undo_status = self._undo.status()
        if undo_status["available"]:
            console.print(f"[dim]Undo available: {undo_status['description']}[/dim]")

        total = len(discussions)
        for index, discussion in enumerate(discussions):
            outcome = self.process_discussion(discussion, index, total)
            result.record(discussion.id, outcome)

        if result.resolved_ids:
            self._ledger.remove_resolved(discussions, result.resolved_ids)
            console.print(f"[green]Removed {len(result.resolved_ids)} resolved discussion(s) from the ledger.[/green]")

        try:
            self._undo.cleanup_old_backups(keep=self._cleanup_keep)
        except OSError as e:
            logger.warning("Could not clean up backups: %s", e)

        return result

    def process_discussion(self, discussion: Discussion, index: int = 0, total: int = 1) -> ResolutionOutcome:
        console.print(
            f"\n[{index + 1}/{total}] Discussion [bold]#{discussion.id}[/bold] "
            f"in [cyan]{discussion.file}[/cyan]: {escape(discussion.comment)}"
        )
        try:
            context = self._contexts.get_context(discussion)
            logger.debug(
                "Context for #%s from %s (%s:%d)",
                discussion.id,
                context.source_kind.value,
                context.file_name,
                context.anchor_line,
            )

            suggestion = self._suggester.suggest(context.text, discussion.comment, context.file_name, discussion.lines)
            if not suggestion.strip():
                console.print(f"  [yellow]No suggestion returned for #{discussion.id}; skipped.[/yellow]")
                return ResolutionOutcome.SKIPPED

            if not self._approver.approve(discussion, context.text, suggestion, context.file_name):
                console.print(f"  [yellow]Skipped discussion #{discussion.id}[/yellow]")
                return ResolutionOutcome.SKIPPED

            self._apply(discussion, context, suggestion)
            return ResolutionOutcome.APPLIED
        except ExternalServiceError as e:
            logger.error("Discussion #%s: suggestion service failed: %s", discussion.id, e)
            console.print(f"  [red]Error processing discussion #{discussion.id}: {escape(str(e))}[/red]")
            return ResolutionOutcome.ERRORED
        except (RevfixError, OSError, UnicodeDecodeError) as e:
            logger.error("Discussion #%s failed: %s", discussion.id, e, exc_info=logger.isEnabledFor(logging.DEBUG))
            console.print(f"  [red]Error processing discussion #{discussion.id}: {escape(str(e))}[/red]")
            return ResolutionOutcome.ERRORED
        except Exception as e:
            logger.error("Discussion #%s failed unexpectedly: %s", discussion.id, e, exc_info=True)
            console.print(f"  [red]Error processing discussion #{discussion.id}: {escape(str(e))}[/red]")
            return ResolutionOutcome.ERRORED

    def _apply(self, discussion: Discussion, context: CodeContext, suggestion: str) -> None:
        if context.source_kind is SourceKind.REMOTE_DIFF:
            meta = context.metadata
            console.print(
                f"  [green]Accepted suggestion for #{discussion.id} from "
                f"{meta.get('owner')}/{meta.get('repo')}#{meta.get('pr_number')}.[/green]"
            )
            logger.warning(
                "Discussion #%s came from a pull request diff; apply the change to the repository manually.",
                discussion.id,
            )
            return

        path = Path(context.metadata.get("path", context.file_name))
        original = read_text(path)
        start, end = LineRange.for_lines(discussion.lines).to_slice()

        self._undo.create_backup(
            path,
            original,
            discussion.id,
            f"Fix for discussion #{discussion.id}: {discussion.comment}",
        )
        write_text(path, apply_fix(original, suggestion, start, end))
        console.print(f"  [green]Applied fix for discussion #{discussion.id} to {context.file_name}[/green]")


def print_summary(result: RunResult) -> None:
    """Print the aggregate counters for a resolve run."""
    console.print("\n[bold]Processing summary[/bold]")
    console.print(f"  Total discussions: {result.processed}")
    console.print(f"  Applied fixes:     [green]{result.applied}[/green]")
    skipped = f"  Skipped:           [yellow]{result.skipped}[/yellow]"
    if result.errored:
        skipped += f" [red]({result.errored} with errors)[/red]"
    console.print(skipped)
    console.print(f"  Success rate:      {result.success_rate}%")

    if result.applied:
        console.print("[dim]Use 'revfix undo' to revert the last change if needed.[/dim]")
    else:
        console.print("[dim]No changes made to files.[/dim]")
    if result.resolved_ids:
        console.print(f"  Resolved discussions: {', '.join(str(i) for i in result.resolved_ids)}")
