"""Tests for the GitHub collaborator."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from github import GithubException

from revfix_core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from revfix_core.gh.pull_request import GitHubReviewClient, extract_file_line_mentions, parse_repo


def _user(login="octocat"):
    return SimpleNamespace(login=login)


def _review_comment(path="src/app.js", line=12, body="Use const here", original_line=None):
    return SimpleNamespace(
        path=path,
        line=line,
        original_line=original_line,
        body=body,
        user=_user(),
        html_url="https://github.com/acme/web/pull/7#discussion_r1",
    )


def _review(body, state="COMMENTED"):
    return SimpleNamespace(body=body, state=state, user=_user("reviewer"), html_url="https://github.com/r")


def _pull(review_comments=(), reviews=(), issue_comments=(), number=7, title="Add button"):
    pull = MagicMock()
    pull.number = number
    pull.title = title
    pull.get_review_comments.return_value = list(review_comments)
    pull.get_reviews.return_value = list(reviews)
    pull.get_issue_comments.return_value = list(issue_comments)
    return pull


def _client(pulls):
    gh = MagicMock()
    repo = gh.get_repo.return_value
    repo.get_pull.side_effect = lambda n: next(p for p in pulls if p.number == n)
    repo.get_pulls.return_value = pulls
    return GitHubReviewClient("tok", github=gh), gh


class TestParseRepo:
    def test_valid(self):
        assert parse_repo("acme/web") == ("acme", "web")

    @pytest.mark.parametrize("value", ["", "acme", "acme/", "a/b/c"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_repo(value)


class TestExtractFileLineMentions:
    def test_line_word_form(self):
        assert extract_file_line_mentions("Please fix app.js line 15") == [("app.js", 15)]

    def test_colon_form_reduces_to_basename(self):
        assert extract_file_line_mentions("see src/utils/helpers.py:42") == [("helpers.py", 42)]

    def test_duplicates_reported_once(self):
        text = "app.js:3 is wrong, and app.js line 3 again; also index.html:9"
        assert extract_file_line_mentions(text) == [("app.js", 3), ("index.html", 9)]

    def test_no_mentions(self):
        assert extract_file_line_mentions("LGTM") == []
        assert extract_file_line_mentions(None) == []


class TestFetchDiscussions:
    def test_review_comments_become_discussions(self):
        client, _ = _client([_pull(review_comments=[_review_comment()])])

        discussions = client.fetch_discussions("acme/web", pr_number=7)

        assert len(discussions) == 1
        d = discussions[0]
        assert (d.id, d.file, d.lines, d.comment) == (1, "app.js", [12], "Use const here")
        assert d.source.full_path == "src/app.js"
        assert d.source.comment_type == "review_comment"
        assert d.source.pr_number == 7
        assert d.source.author == "octocat"

    def test_outdated_comment_uses_original_line(self):
        client, _ = _client([_pull(review_comments=[_review_comment(line=None, original_line=8)])])
        assert client.fetch_discussions("acme/web", pr_number=7)[0].lines == [8]

    def test_review_bodies_and_issue_comments_use_mentions(self):
        pull = _pull(
            reviews=[_review("app.js:4 and util.py line 9"), _review("style.css:1", state="PENDING")],
            issue_comments=[SimpleNamespace(body="index.html:2", user=None, html_url="u")],
        )
        client, _ = _client([pull])

        discussions = client.fetch_discussions("acme/web", pr_number=7)

        assert [(d.id, d.file, d.lines) for d in discussions] == [
            (1, "app.js", [4]),
            (2, "util.py", [9]),
            (3, "index.html", [2]),
        ]
        assert discussions[0].source.comment_type == "review_body"
        assert discussions[2].source.comment_type == "issue_comment"
        assert discussions[2].source.author is None

    def test_ids_continue_across_pull_requests(self):
        pulls = [
            _pull(review_comments=[_review_comment()], number=1),
            _pull(review_comments=[_review_comment(line=3)], number=2),
        ]
        client, _ = _client(pulls)

        discussions = client.fetch_discussions("acme/web")

        assert [d.id for d in discussions] == [1, 2]
        assert [d.source.pr_number for d in discussions] == [1, 2]

    def test_max_prs_limits_open_pulls(self):
        pulls = [_pull(review_comments=[_review_comment()], number=n) for n in range(1, 4)]
        client, _ = _client(pulls)
        assert len(client.fetch_discussions("acme/web", max_prs=2)) == 2

    def test_missing_repo_raises_not_found(self):
        gh = MagicMock()
        gh.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)
        client = GitHubReviewClient("tok", github=gh)
        with pytest.raises(NotFoundError):
            client.fetch_discussions("acme/missing", pr_number=1)

    def test_forbidden_raises_external_service_error(self):
        gh = MagicMock()
        gh.get_repo.side_effect = GithubException(403, {"message": "Forbidden"}, None)
        client = GitHubReviewClient("tok", github=gh)
        with pytest.raises(ExternalServiceError, match="forbidden"):
            client.fetch_discussions("acme/web", pr_number=1)


class TestPullRequestFiles:
    def test_list_pr_files_keyed_by_filename(self):
        gh = MagicMock()
        f = SimpleNamespace(
            filename="src/app.js",
            status="modified",
            patch="@@ -1 +1 @@\n-a\n+b",
            raw_url="https://raw/app.js",
            additions=1,
            deletions=1,
            changes=2,
        )
        gh.get_repo.return_value.get_pull.return_value.get_files.return_value = [f]
        client = GitHubReviewClient("tok", github=gh)

        files = client.list_pr_files("acme", "web", 7)

        assert list(files) == ["src/app.js"]
        assert files["src/app.js"].raw_url == "https://raw/app.js"
        assert client.fetch_file_patch("acme", "web", 7, "src/app.js") == f.patch
        assert client.fetch_file_patch("acme", "web", 7, "other.js") is None

    def test_fetch_raw_file_returns_text(self):
        client = GitHubReviewClient("tok", github=MagicMock())
        with patch("revfix_core.gh.pull_request.requests.get") as get:
            get.return_value.text = "content"
            assert client.fetch_raw_file("https://raw/app.js") == "content"
        assert get.call_args.kwargs["headers"] == {"Authorization": "token tok"}

    def test_fetch_raw_file_failure_returns_none(self):
        client = GitHubReviewClient("tok", github=MagicMock())
        with patch("revfix_core.gh.pull_request.requests.get", side_effect=requests.ConnectionError("down")):
            assert client.fetch_raw_file("https://raw/app.js") is None
