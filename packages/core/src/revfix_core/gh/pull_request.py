"""GitHub collaborator: PR file patches, raw file content, and review comments.

Everything here is best effort from the resolver's point of view. The
context provider falls back to the local file when the remote side has
nothing to offer.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass

import requests
from github import Github, GithubException
from rich.console import Console

from revfix_core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from revfix_core.models import Discussion, Provenance

console = Console()
logger = logging.getLogger(__name__)

_RAW_FETCH_TIMEOUT = 30

# "app.js line 15", "app.js:15", "src/utils/helpers.py:42"
_MENTION_RE = re.compile(r"([\w./-]*\w\.\w+)(?:\s+line\s+|:)(\d+)", re.IGNORECASE)


def parse_repo(repo_name: str) -> tuple[str, str]:
    """Split "owner/repo" into its parts."""
    if not repo_name or not isinstance(repo_name, str):
        raise ValidationError("Repository is required")
    parts = repo_name.strip().split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError('Repository format must be "owner/repo" (e.g., "microsoft/vscode")')
    return parts[0], parts[1]


def extract_file_line_mentions(text: str) -> list[tuple[str, int]]:
    """Find "file.ext line N" / "path/file.ext:N" mentions in free-form comment text.

    Paths are reduced to their basename, and repeated mentions are reported once.
    """
    mentions: list[tuple[str, int]] = []
    for match in _MENTION_RE.finditer(text or ""):
        mention = (posixpath.basename(match.group(1)), int(match.group(2)))
        if mention not in mentions:
            mentions.append(mention)
    return mentions


@dataclass
class PRFile:
    filename: str
    status: str
    patch: str | None
    raw_url: str | None
    additions: int = 0
    deletions: int = 0
    changes: int = 0


def _service_error(e: GithubException, what: str) -> Exception:
    if e.status == 404:
        return NotFoundError(f"{what} not found")
    if e.status == 403:
        return ExternalServiceError("Access forbidden. Check your GitHub token permissions.")
    return ExternalServiceError(f"GitHub API error fetching {what}: {e}")


class GitHubReviewClient:
    """Thin PyGithub wrapper exposing what the resolver needs from a pull request."""

    def __init__(self, token: str, github: Github | None = None):
        self._token = token
        self._gh = github if github is not None else Github(token)

    def _get_pull(self, owner: str, repo: str, pr_number: int):
        try:
            return self._gh.get_repo(f"{owner}/{repo}").get_pull(pr_number)
        except GithubException as e:
            raise _service_error(e, f"Pull request #{pr_number} in {owner}/{repo}")

    def list_pr_files(self, owner: str, repo: str, pr_number: int) -> dict[str, PRFile]:
        pull = self._get_pull(owner, repo, pr_number)
        try:
            files = list(pull.get_files())
        except GithubException as e:
            raise _service_error(e, f"files of PR #{pr_number}")
        logger.debug("PR %s/%s#%d has %d changed file(s)", owner, repo, pr_number, len(files))
        return {
            f.filename: PRFile(
                filename=f.filename,
                status=f.status,
                patch=f.patch,
                raw_url=f.raw_url,
                additions=f.additions,
                deletions=f.deletions,
                changes=f.changes,
            )
            for f in files
        }

    def fetch_file_patch(self, owner: str, repo: str, pr_number: int, path: str) -> str | None:
        pr_file = self.list_pr_files(owner, repo, pr_number).get(path)
        return pr_file.patch if pr_file else None

    def fetch_raw_file(self, url: str) -> str | None:
        try:
            response = requests.get(
                url,
                headers={"Authorization": f"token {self._token}"} if self._token else {},
                timeout=_RAW_FETCH_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Could not fetch full file content from %s: %s", url, e)
            return None
        return response.text

    def fetch_discussions(self, repo_name: str, pr_number: int | None = None, max_prs: int = 10) -> list[Discussion]:
        """Convert submitted review feedback on one PR (or the open PRs) into discussions."""
        owner, repo = parse_repo(repo_name)
        try:
            this_repo = self._gh.get_repo(f"{owner}/{repo}")
            if pr_number is not None:
                pulls = [this_repo.get_pull(pr_number)]
            else:
                pulls = list(this_repo.get_pulls(state="open"))[:max_prs]
        except GithubException as e:
            raise _service_error(e, f"Repository {owner}/{repo}")

        discussions: list[Discussion] = []
        for pull in pulls:
            console.print(f"  Processing PR #{pull.number}: {pull.title}")
            try:
                discussions.extend(self._pull_discussions(owner, repo, pull, next_id=len(discussions) + 1))
            except GithubException as e:
                raise _service_error(e, f"comments of PR #{pull.number}")
        return discussions

    def _pull_discussions(self, owner: str, repo: str, pull, next_id: int) -> list[Discussion]:
        review_comments = list(pull.get_review_comments())
        reviews = list(pull.get_reviews())
        issue_comments = list(pull.get_issue_comments())
        _warn_pending(owner, repo, pull.number, review_comments, reviews)

        found: list[Discussion] = []

        def add(file: str, line: int, body: str, source: Provenance) -> None:
            found.append(Discussion(id=next_id + len(found), file=file, lines=[line], comment=body, source=source))

        for c in review_comments:
            line = c.line if c.line is not None else getattr(c, "original_line", None)
            body = (c.body or "").strip()
            if not line or not body:
                continue
            add(
                posixpath.basename(c.path),
                line,
                body,
                Provenance(
                    owner=owner,
                    repo=repo,
                    pr_number=pull.number,
                    full_path=c.path,
                    comment_type="review_comment",
                    pr_title=pull.title,
                    author=c.user.login if c.user else None,
                    url=c.html_url,
                ),
            )

        for review in reviews:
            body = (review.body or "").strip()
            if not body or review.state == "PENDING":
                continue
            for file, line in extract_file_line_mentions(body):
                add(
                    file,
                    line,
                    body,
                    Provenance(
                        owner=owner,
                        repo=repo,
                        pr_number=pull.number,
                        comment_type="review_body",
                        pr_title=pull.title,
                        author=review.user.login if review.user else None,
                        url=review.html_url,
                    ),
                )

        for comment in issue_comments:
            body = (comment.body or "").strip()
            for file, line in extract_file_line_mentions(body):
                add(
                    file,
                    line,
                    body,
                    Provenance(
                        owner=owner,
                        repo=repo,
                        pr_number=pull.number,
                        comment_type="issue_comment",
                        pr_title=pull.title,
                        author=comment.user.login if comment.user else None,
                        url=comment.html_url,
                    ),
                )

        return found


def _warn_pending(owner: str, repo: str, pr_number: int, review_comments: list, reviews: list) -> None:
    submitted = [r for r in reviews if r.state != "PENDING"]
    pending = len(reviews) - len(submitted)
    if not review_comments and not submitted:
        console.print(
            f"[yellow]No submitted review comments on PR #{pr_number}. Pending (draft) reviews are not "
            f"visible through the GitHub API; submit them at "
            f"https://github.com/{owner}/{repo}/pull/{pr_number} and re-run fetch.[/yellow]"
        )
    elif pending:
        console.print(f"[yellow]{pending} pending review(s) on PR #{pr_number} are not accessible via the API.[/yellow]")
