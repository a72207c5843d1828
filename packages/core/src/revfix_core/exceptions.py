"""Error taxonomy for discussion resolution.

Discussion-scoped errors are caught by the coordinator and counted against the
discussion that raised them. LedgerError (and a ValidationError raised while
loading the ledger) aborts the whole run.
"""

from __future__ import annotations


class RevfixError(Exception):
    """Base class for every error raised by revfix."""


class ValidationError(RevfixError, ValueError):
    """Malformed ledger entry, bad line bounds, or invalid user input."""


class OutOfBoundsError(ValidationError):
    def __init__(self, requested_line: int, line_count: int, file_name: str | None = None):
        self.requested_line = requested_line
        self.line_count = line_count
        self.file_name = file_name
        where = f" in {file_name}" if file_name else ""
        super().__init__(f"Start line {requested_line} is beyond file length ({line_count} lines){where}")


class NotFoundError(RevfixError, LookupError):
    """A file, pull request, or line could not be located."""


class ExternalServiceError(RevfixError):
    """The suggestion generator or the remote review system failed."""


class LedgerError(RevfixError):
    """The ledger file could not be read or written."""


class UndoStateError(RevfixError):
    """Undo was requested while no armed undo record is available."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
