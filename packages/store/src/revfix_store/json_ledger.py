"""JsonLedger: the discussions.json file shared with the fetch command.

Data format: a JSON array of discussion objects
(``{"id", "file", "lines", "comment", "source"?}``), written with 2-space
indentation on every mutation. Writes go to a temporary file in the same
directory which is then renamed over the ledger, so a failed write leaves
the previous ledger untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from revfix_core.exceptions import LedgerError, ValidationError
from revfix_core.models import Discussion

from revfix_store.base import BaseLedger

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_entry(entry, index: int, default_file: str) -> Discussion:
    """Validate one raw ledger entry and build a Discussion from it."""
    if not isinstance(entry, dict):
        raise ValidationError(f"Discussion at index {index} must be an object")
    if not entry.get("id") or not entry.get("comment") or "lines" not in entry:
        raise ValidationError(f"Discussion at index {index} is missing required fields (id, comment, lines)")

    discussion_id = entry["id"]
    if not _is_int(discussion_id):
        raise ValidationError(f"Discussion at index {index} has a non-integer id: {discussion_id!r}")
    lines = entry["lines"]
    if not isinstance(lines, list) or not lines or not all(_is_int(n) and n > 0 for n in lines):
        raise ValidationError(f"Discussion {discussion_id} has invalid lines array")
    if not isinstance(entry["comment"], str):
        raise ValidationError(f"Discussion {discussion_id} has a non-string comment")

    if not entry.get("file"):
        logger.warning("Discussion %s has no file; defaulting to %s", discussion_id, default_file)
        entry = {**entry, "file": default_file}
    return Discussion.from_dict(entry)


class JsonLedger(BaseLedger):
    """Pending discussions stored as a JSON array on disk."""

    def __init__(self, path: str | Path = "discussions.json", default_file: str = "app.js"):
        self.path = Path(path)
        self.default_file = default_file

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[Discussion]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise LedgerError(f"Discussions file {self.path} not found. Run 'revfix fetch' first.")
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerError(f"Failed to parse {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise ValidationError(f"{self.path} must contain a JSON array of discussions")

        discussions = [parse_entry(entry, i, self.default_file) for i, entry in enumerate(raw)]

        seen: set[int] = set()
        for d in discussions:
            if d.id in seen:
                raise ValidationError(f"Duplicate discussion id {d.id} in {self.path}")
            seen.add(d.id)
        return discussions

    def save(self, discussions: list[Discussion]) -> None:
        payload = json.dumps([d.to_dict() for d in discussions], indent=2, ensure_ascii=False)
        directory = self.path.parent if str(self.path.parent) else Path(".")
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload + "\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise LedgerError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Wrote %d discussion(s) to %s", len(discussions), self.path)
