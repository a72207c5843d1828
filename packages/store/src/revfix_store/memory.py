"""In-memory ledger for programmatic callers and tests."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from revfix_store.base import BaseLedger

if TYPE_CHECKING:
    from revfix_core.models import Discussion


class MemoryLedger(BaseLedger):
    """Keeps discussions in a list; nothing touches the filesystem."""

    def __init__(self, discussions: list[Discussion] | None = None):
        self._discussions = list(discussions or [])

    def load(self) -> list[Discussion]:
        return copy.deepcopy(self._discussions)

    def save(self, discussions: list[Discussion]) -> None:
        self._discussions = copy.deepcopy(list(discussions))
