"""Code-context extraction for a discussion.

A discussion with remote provenance is located in its pull request's patch.
Everything else, and any remote discussion the review system cannot place,
is read from the local working tree.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from revfix_core.exceptions import ExternalServiceError, NotFoundError
from revfix_core.models import (
    CodeContext,
    Discussion,
    LineRange,
    LocalSource,
    RemoteSource,
    SourceKind,
    resolve_source,
)
from revfix_core.utils.lines import extract_lines, read_text, window_lines
from revfix_core.utils.patch import extract_patch_context

if TYPE_CHECKING:
    from revfix_core.gh.pull_request import GitHubReviewClient, PRFile

logger = logging.getLogger(__name__)


def match_pr_file(file_name: str, full_path: str | None, pr_files: dict[str, PRFile]) -> PRFile | None:
    """Pick the PR file a discussion refers to.

    Priority: exact path (discussion file, then provenance full path), then
    basename, then substring in either direction. First hit wins.
    """
    for candidate in (file_name, full_path):
        if candidate and candidate in pr_files:
            return pr_files[candidate]

    wanted = posixpath.basename(full_path or file_name)
    for path, info in pr_files.items():
        if posixpath.basename(path) == wanted:
            return info

    for path, info in pr_files.items():
        for candidate in (file_name, full_path):
            if candidate and (candidate in path or posixpath.basename(path) in candidate):
                return info
    return None


class ContextProvider:
    def __init__(
        self,
        review_client: GitHubReviewClient | None = None,
        context_radius: int = 2,
        local_only: bool = False,
        root: str | Path = ".",
    ):
        self._client = review_client
        self._radius = context_radius
        self._local_only = local_only or review_client is None
        self._root = Path(root)
        self._pr_files_cache: dict[str, dict[str, PRFile]] = {}

    def get_context(self, discussion: Discussion) -> CodeContext:
        source = resolve_source(discussion, local_only=self._local_only)
        if isinstance(source, RemoteSource):
            context = self._remote_context(discussion, source)
            if context is not None:
                return context
            logger.warning(
                "No remote context for discussion #%s (%s); falling back to the local file.",
                discussion.id,
                source.key,
            )
            source = LocalSource(path=discussion.file)
        return self._local_context(discussion, source)

    def _local_context(self, discussion: Discussion, source: LocalSource) -> CodeContext:
        path = self._root / source.path
        if not path.is_file():
            raise NotFoundError(f"File {source.path} not found")
        content = read_text(path)
        text = extract_lines(content, LineRange.for_lines(discussion.lines), file_name=source.path)
        return CodeContext(
            file_name=source.path,
            anchor_line=discussion.lines[0],
            text=text,
            source_kind=SourceKind.LOCAL_FILE,
            metadata={"path": str(path)},
        )

    def _remote_context(self, discussion: Discussion, source: RemoteSource) -> CodeContext | None:
        try:
            pr_files = self._pr_files(source)
        except (NotFoundError, ExternalServiceError) as e:
            logger.warning("Could not list files for %s: %s", source.key, e)
            return None

        pr_file = match_pr_file(source.file_name, source.full_path, pr_files)
        if pr_file is None:
            logger.info("File %s not among %d file(s) in %s", source.file_name, len(pr_files), source.key)
            return None

        target_line = min(discussion.lines)
        text = extract_patch_context(pr_file.patch, target_line, self._radius)
        if text is None and pr_file.raw_url:
            logger.debug("Line %d not in patch of %s; fetching full file", target_line, pr_file.filename)
            content = self._client.fetch_raw_file(pr_file.raw_url)  # type: ignore[union-attr]
            if content is not None:
                text = window_lines(content, target_line)
        if text is None:
            return None

        return CodeContext(
            file_name=source.file_name,
            anchor_line=target_line,
            text=text,
            source_kind=SourceKind.REMOTE_DIFF,
            metadata={
                "owner": source.owner,
                "repo": source.repo,
                "pr_number": source.pr_number,
                "path": pr_file.filename,
                "status": pr_file.status,
            },
        )

    def _pr_files(self, source: RemoteSource) -> dict[str, PRFile]:
        if source.key not in self._pr_files_cache:
            logger.debug("Fetching PR files for %s", source.key)
            self._pr_files_cache[source.key] = self._client.list_pr_files(  # type: ignore[union-attr]
                source.owner, source.repo, source.pr_number
            )
        return self._pr_files_cache[source.key]

    def clear_cache(self) -> None:
        self._pr_files_cache.clear()

    def cache_stats(self) -> dict:
        return {"size": len(self._pr_files_cache), "keys": list(self._pr_files_cache)}
