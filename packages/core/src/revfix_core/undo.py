"""Single-slot backup and undo.

Only the most recent applied fix can be undone. Before a fix is written the
target file's content is copied into the backup directory and the undo-state
file is overwritten with a fresh Armed record. Undoing restores the backup
and flips the record to Consumed, so a second undo is refused.
"""

from __future__ import annotations

import json
import logging
import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from revfix_core.exceptions import UndoStateError
from revfix_core.models import UndoRecord, UndoState, utc_now
from revfix_core.utils.lines import read_text, write_text

logger = logging.getLogger(__name__)

NO_RECORD = "No undo data found"
ALREADY_CONSUMED = "Backup file was already used"
BACKUP_MISSING = "Backup file no longer exists"
TARGET_MISSING = "Original file no longer exists"

_BACKUP_SUFFIX = ".backup"


@dataclass
class UndoCheck:
    ok: bool
    reason: str = ""
    record: UndoRecord | None = None

    def __bool__(self) -> bool:
        return self.ok


class UndoManager:
    def __init__(self, undo_file: str | Path = "undo.json", backup_dir: str | Path = ".revfix-backups"):
        self.undo_file = Path(undo_file)
        self.backup_dir = Path(backup_dir)

    # ------------------------------------------------------------------ #
    # Record persistence                                                   #
    # ------------------------------------------------------------------ #

    def current(self) -> UndoRecord | None:
        if not self.undo_file.exists():
            return None
        try:
            return UndoRecord.from_dict(json.loads(self.undo_file.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable undo state in %s: %s", self.undo_file, e)
            return None

    def _write(self, record: UndoRecord) -> None:
        self.undo_file.parent.mkdir(parents=True, exist_ok=True)
        self.undo_file.write_text(json.dumps(record.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    # ------------------------------------------------------------------ #
    # Transitions                                                          #
    # ------------------------------------------------------------------ #

    def create_backup(
        self,
        file_path: str | Path,
        original_content: str,
        discussion_id: int | None,
        description: str,
    ) -> UndoRecord:
        """Snapshot ``original_content`` and arm the undo slot for ``file_path``."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        backup_path = self.backup_dir / f"{Path(file_path).name}.{stamp}-{uuid.uuid4().hex[:8]}{_BACKUP_SUFFIX}"
        write_text(backup_path, original_content)

        record = UndoRecord(
            timestamp=utc_now(),
            file_path=str(file_path),
            backup_path=str(backup_path),
            discussion_id=discussion_id,
            description=description,
        )
        self._write(record)
        logger.info("Backup created: %s", backup_path.name)
        return record

    def can_undo(self) -> UndoCheck:
        record = self.current()
        if record is None:
            return UndoCheck(False, NO_RECORD)
        if record.state is UndoState.CONSUMED:
            return UndoCheck(False, ALREADY_CONSUMED, record)
        if not Path(record.backup_path).exists():
            return UndoCheck(False, BACKUP_MISSING, record)
        if not Path(record.file_path).exists():
            return UndoCheck(False, TARGET_MISSING, record)
        return UndoCheck(True, f"Can undo: {record.description} ({record.timestamp})", record)

    def preview_undo(self) -> tuple[str, str]:
        """Return (backup content, current content) for an armed record."""
        check = self.can_undo()
        if not check:
            raise UndoStateError(check.reason)
        record = check.record
        if record is None:
            raise UndoStateError(NO_RECORD)
        return read_text(record.backup_path), read_text(record.file_path)

    def perform_undo(self) -> UndoRecord:
        check = self.can_undo()
        if not check:
            raise UndoStateError(check.reason)
        record = check.record
        if record is None:
            raise UndoStateError(NO_RECORD)

        write_text(record.file_path, read_text(record.backup_path))

        record.backup_consumed = True
        record.undone_at = utc_now()
        self._write(record)
        logger.info("Restored %s from %s", record.file_path, record.backup_path)
        return record

    def status(self) -> dict:
        check = self.can_undo()
        if not check:
            return {"available": False, "reason": check.reason}
        record = check.record
        return {
            "available": True,
            "timestamp": record.timestamp,  # type: ignore[union-attr]
            "file_path": record.file_path,  # type: ignore[union-attr]
            "description": record.description,  # type: ignore[union-attr]
            "discussion_id": record.discussion_id,  # type: ignore[union-attr]
        }

    # ------------------------------------------------------------------ #
    # Housekeeping                                                         #
    # ------------------------------------------------------------------ #

    def cleanup_old_backups(self, keep: int = 5) -> list[Path]:
        """Delete all but the ``keep`` most recently modified backups.

        The backup referenced by an armed record is never deleted, whatever its age.
        """
        if not self.backup_dir.exists():
            return []

        protected: Path | None = None
        record = self.current()
        if record is not None and record.state is UndoState.ARMED:
            protected = Path(record.backup_path).resolve()

        backups = sorted(
            (p for p in self.backup_dir.iterdir() if p.is_file() and p.name.endswith(_BACKUP_SUFFIX)),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        removed: list[Path] = []
        for path in backups[max(keep, 0) :]:
            if protected is not None and path.resolve() == protected:
                continue
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Could not remove old backup %s: %s", path, e)
                continue
            removed.append(path)
        if removed:
            logger.info("Removed %d old backup file(s)", len(removed))
        return removed

    def clear_all(self) -> None:
        if self.undo_file.exists():
            self.undo_file.unlink()
        if self.backup_dir.exists():
            shutil.rmtree(self.backup_dir)
