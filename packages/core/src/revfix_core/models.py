"""Domain models for discussion resolution.

Discussion and UndoRecord are the two persisted shapes (the ledger file and
the undo-state file). Everything else is derived per run and never written.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Provenance:
    """Where a discussion came from on the remote review system."""

    owner: str | None = None
    repo: str | None = None
    pr_number: int | None = None
    full_path: str | None = None
    comment_type: str | None = None  # "review_comment" | "review_body" | "issue_comment"
    pr_title: str | None = None
    author: str | None = None
    url: str | None = None

    @property
    def is_remote(self) -> bool:
        return bool(self.owner and self.repo and self.pr_number)

    @classmethod
    def from_dict(cls, d: dict) -> Provenance:
        pr = d.get("pr", d.get("pullRequestNumber"))
        if isinstance(pr, str):
            pr = int(pr) if pr.strip().isdigit() else None
        return cls(
            owner=d.get("owner"),
            repo=d.get("repo"),
            pr_number=pr,
            # Older ledgers only carry "path" for the PR-relative file path.
            full_path=d.get("fullPath") or d.get("path"),
            comment_type=d.get("type"),
            pr_title=d.get("prTitle"),
            author=d.get("author"),
            url=d.get("url"),
        )

    def to_dict(self) -> dict:
        d = {
            "type": self.comment_type,
            "pr": self.pr_number,
            "prTitle": self.pr_title,
            "author": self.author,
            "url": self.url,
            "owner": self.owner,
            "repo": self.repo,
            "fullPath": self.full_path,
        }
        return {k: v for k, v in d.items() if v is not None}


@dataclass
class Discussion:
    """A single review comment bound to a file and a set of line numbers."""

    id: int
    file: str
    lines: list[int]
    comment: str
    source: Provenance | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Discussion:
        source = d.get("source")
        return cls(
            id=d["id"],
            file=d["file"],
            lines=list(d["lines"]),
            comment=d["comment"],
            source=Provenance.from_dict(source) if isinstance(source, dict) else None,
        )

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"id": self.id, "file": self.file, "lines": list(self.lines), "comment": self.comment}
        if self.source is not None:
            d["source"] = self.source.to_dict()
        return d


@dataclass(frozen=True)
class LineRange:
    """1-based line range, end exclusive.

    The same range drives both the extraction window and the splice, so both
    go through to_slice().
    """

    start_line: int
    end_line: int

    @classmethod
    def for_lines(cls, lines: list[int]) -> LineRange:
        if not lines:
            raise ValueError("lines must not be empty")
        if len(lines) == 1:
            return cls(lines[0], lines[0] + 1)
        return cls(min(lines), max(lines) + 1)

    def to_slice(self) -> tuple[int, int]:
        """Return the 0-based half-open slice bounds."""
        return self.start_line - 1, self.end_line - 1


class SourceKind(str, enum.Enum):
    LOCAL_FILE = "local-file"
    REMOTE_DIFF = "github-pr-diff"


@dataclass(frozen=True)
class LocalSource:
    path: str


@dataclass(frozen=True)
class RemoteSource:
    owner: str
    repo: str
    pr_number: int
    file_name: str
    full_path: str | None = None

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pr_number}"


ContextSource = Union[LocalSource, RemoteSource]


def resolve_source(discussion: Discussion, local_only: bool = False) -> ContextSource:
    """Decide once per discussion where its code context comes from."""
    src = discussion.source
    if local_only or src is None or not src.is_remote:
        return LocalSource(path=discussion.file)
    return RemoteSource(
        owner=src.owner,  # type: ignore[arg-type]
        repo=src.repo,  # type: ignore[arg-type]
        pr_number=src.pr_number,  # type: ignore[arg-type]
        file_name=discussion.file,
        full_path=src.full_path,
    )


@dataclass
class CodeContext:
    """Context window handed to the suggestion generator. Never persisted."""

    file_name: str
    anchor_line: int
    text: str
    source_kind: SourceKind
    metadata: dict = field(default_factory=dict)


class UndoState(str, enum.Enum):
    ARMED = "armed"
    CONSUMED = "consumed"


@dataclass
class UndoRecord:
    timestamp: str
    file_path: str
    backup_path: str
    discussion_id: int | None
    description: str
    backup_consumed: bool = False
    undone_at: str | None = None

    @property
    def state(self) -> UndoState:
        return UndoState.CONSUMED if self.backup_consumed else UndoState.ARMED

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "filePath": self.file_path,
            "backupPath": self.backup_path,
            "discussionId": self.discussion_id,
            "description": self.description,
            "backupConsumed": self.backup_consumed,
            "undoneAt": self.undone_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> UndoRecord:
        return cls(
            timestamp=d["timestamp"],
            file_path=d["filePath"],
            backup_path=d["backupPath"],
            discussion_id=d.get("discussionId"),
            description=d.get("description", ""),
            backup_consumed=bool(d.get("backupConsumed", False)),
            undone_at=d.get("undoneAt"),
        )


class ResolutionOutcome(str, enum.Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass
class RunResult:
    """Aggregate outcome of one resolve run, built by the coordinator loop."""

    processed: int = 0
    applied: int = 0
    skipped: int = 0  # includes errored discussions
    errored: int = 0
    resolved_ids: list[int] = field(default_factory=list)
    outcomes: dict[int, ResolutionOutcome] = field(default_factory=dict)

    def record(self, discussion_id: int, outcome: ResolutionOutcome) -> None:
        self.processed += 1
        self.outcomes[discussion_id] = outcome
        if outcome is ResolutionOutcome.APPLIED:
            self.applied += 1
            self.resolved_ids.append(discussion_id)
        else:
            self.skipped += 1
            if outcome is ResolutionOutcome.ERRORED:
                self.errored += 1

    @property
    def success_rate(self) -> int:
        if not self.processed:
            return 0
        return round(self.applied / self.processed * 100)
