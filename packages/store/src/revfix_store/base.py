"""Abstract ledger interface.

The coordinator depends on this shape only, not on a concrete backend, so a
ledger can live in a JSON file, in memory, or anywhere else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from revfix_core.models import Discussion


class BaseLedger(ABC):
    """Persisted list of pending discussions."""

    @abstractmethod
    def load(self) -> list[Discussion]:
        """Return every pending discussion in ledger order.

        Raises ValidationError for a malformed entry and LedgerError when the
        ledger cannot be read.
        """

    @abstractmethod
    def save(self, discussions: list[Discussion]) -> None:
        """Replace the whole ledger. Either everything is written or nothing is."""

    def remove_resolved(self, discussions: list[Discussion], resolved_ids: Iterable[int]) -> list[Discussion]:
        """Drop resolved discussions, keep the rest in order, and persist the result.

        Ids that are not in the ledger are ignored.
        """
        resolved = set(resolved_ids)
        remaining = [d for d in discussions if d.id not in resolved]
        self.save(remaining)
        return remaining
