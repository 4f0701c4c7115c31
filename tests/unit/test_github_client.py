"""
Unit tests for the GitHub client and change set parser.
"""

import pytest
from unittest.mock import Mock, patch
import requests
import time

from pr_lint.github.client import GitHubClient, GitHubAPIError, RateLimitExceeded
from pr_lint.github.parser import ChangeSetParser
from pr_lint.models.change_set import ChangeSet


def make_response(status_code=200, json_data=None, headers=None):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = json_data if json_data is not None else {}
    response.content = b'{}' if json_data is not None else b''
    response.headers = headers or {
        "X-RateLimit-Remaining": "4999",
        "X-RateLimit-Reset": str(int(time.time()) + 3600)
    }
    return response


class TestGitHubClient:
    """Unit tests for GitHubClient class."""

    def test_client_initialization(self):
        """Test GitHubClient initialization."""
        token = "ghp_test_token_123456789"
        client = GitHubClient(token)

        assert client.token == token
        assert client.base_url == "https://api.github.com"
        assert client.session.headers["Authorization"] == f"token {token}"
        assert client.session.headers["Accept"] == "application/vnd.github.v3+json"

    def test_client_requires_token(self):
        """Test GitHubClient rejects missing tokens."""
        with pytest.raises(ValueError):
            GitHubClient("")

        with pytest.raises(ValueError):
            GitHubClient(None)

    def test_make_request_success(self):
        """Test successful API request."""
        client = GitHubClient("test_token")

        with patch.object(client.session, 'request', return_value=make_response(json_data={"message": "ok"})) as mock_request:
            response = client._make_request('GET', '/test/endpoint')

        assert response.json() == {"message": "ok"}
        mock_request.assert_called_once_with(
            'GET', 'https://api.github.com/test/endpoint', timeout=30
        )
        assert client.rate_limit_remaining == 4999

    def test_make_request_rate_limit_response(self):
        """Test 429 responses raise RateLimitExceeded."""
        client = GitHubClient("test_token")

        with patch.object(client.session, 'request', return_value=make_response(status_code=429)):
            with pytest.raises(RateLimitExceeded):
                client._make_request('GET', '/test/endpoint')

    def test_low_rate_limit_blocks_requests(self):
        """Test requests are refused while the remaining quota is exhausted."""
        client = GitHubClient("test_token")
        headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(int(time.time()) + 3600)}

        with patch.object(client.session, 'request', return_value=make_response(headers=headers, json_data={})) as mock_request:
            client._make_request('GET', '/first')
            with pytest.raises(RateLimitExceeded):
                client._make_request('GET', '/second')

        assert mock_request.call_count == 1

    def test_make_request_api_error(self):
        """Test error responses raise GitHubAPIError with status code."""
        client = GitHubClient("test_token")
        response = make_response(status_code=404, json_data={"message": "Not Found"})

        with patch.object(client.session, 'request', return_value=response):
            with pytest.raises(GitHubAPIError) as exc_info:
                client._make_request('GET', '/missing')

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    def test_make_request_network_error(self):
        """Test transport errors are wrapped in GitHubAPIError."""
        client = GitHubClient("test_token")

        with patch.object(client.session, 'request', side_effect=requests.ConnectionError("down")):
            with pytest.raises(GitHubAPIError):
                client._make_request('GET', '/test')

    def test_get_pull_request(self):
        """Test getting pull request information."""
        client = GitHubClient("test_token")
        pr = {"number": 123, "title": "feat: thing", "state": "open"}

        with patch.object(client.session, 'request', return_value=make_response(json_data=pr)) as mock_request:
            result = client.get_pull_request("owner", "repo", 123)

        assert result["number"] == 123
        assert mock_request.call_args[0][1].endswith('/repos/owner/repo/pulls/123')

    def test_get_pull_request_files_paginates(self):
        """Test file listing follows pages until a short page."""
        client = GitHubClient("test_token")
        first_page = [{"filename": f"f{i}.swift"} for i in range(100)]
        second_page = [{"filename": "last.swift"}]

        with patch.object(client.session, 'request', side_effect=[
            make_response(json_data=first_page),
            make_response(json_data=second_page),
        ]) as mock_request:
            files = client.get_pull_request_files("owner", "repo", 7)

        assert len(files) == 101
        assert mock_request.call_count == 2
        assert mock_request.call_args[1]['params'] == {'page': 2, 'per_page': 100}

    def test_upsert_updates_existing_comment(self):
        """Test the previous bot comment is updated in place."""
        client = GitHubClient("test_token")
        comments = [
            {"id": 1, "body": "LGTM"},
            {"id": 2, "body": "<!-- pr-lint-report -->\nold"},
        ]

        with patch.object(client.session, 'request', side_effect=[
            make_response(json_data=comments),
            make_response(json_data={"id": 2, "html_url": "https://github.com/o/r/pull/7#issuecomment-2"}),
        ]) as mock_request:
            result = client.upsert_summary_comment("o", "r", 7, "<!-- pr-lint-report -->\nnew", "<!-- pr-lint-report -->")

        assert result["id"] == 2
        method, url = mock_request.call_args[0]
        assert method == 'PATCH'
        assert url.endswith('/repos/o/r/issues/comments/2')
        assert mock_request.call_args[1]['json'] == {'body': "<!-- pr-lint-report -->\nnew"}

    def test_upsert_creates_comment(self):
        """Test a new comment is created when none carries the marker."""
        client = GitHubClient("test_token")

        with patch.object(client.session, 'request', side_effect=[
            make_response(json_data=[]),
            make_response(json_data={"id": 9}),
        ]) as mock_request:
            client.upsert_summary_comment("o", "r", 7, "body", "<!-- pr-lint-report -->")

        method, url = mock_request.call_args[0]
        assert method == 'POST'
        assert url.endswith('/repos/o/r/issues/7/comments')


class TestChangeSetParser:
    """Unit tests for ChangeSetParser class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = ChangeSetParser()
        self.pr_data = {
            "number": 42,
            "title": "feat: add Foo",
            "body": None,
            "labels": [{"name": "trivial"}, {"name": "ios"}],
        }

    def test_parse_change_set(self):
        """Test GitHub files are sorted into modified/added/deleted."""
        files_data = [
            {"filename": "Sources/Foo.swift", "status": "added", "additions": 20, "deletions": 0,
             "patch": "@@ -0,0 +1,1 @@\n+struct Foo {}"},
            {"filename": "Sources/Bar.swift", "status": "modified", "additions": 3, "deletions": 2,
             "patch": "@@ -1 +1 @@\n-a\n+b"},
            {"filename": "Sources/Old.swift", "status": "removed", "additions": 0, "deletions": 10},
            {"filename": "Sources/Renamed.swift", "status": "renamed", "additions": 0, "deletions": 0},
            {"filename": "Assets/logo.png", "status": "added", "additions": 0, "deletions": 0},
        ]

        change_set = self.parser.parse(self.pr_data, files_data)

        assert isinstance(change_set, ChangeSet)
        assert change_set.added_files == ("Sources/Foo.swift", "Assets/logo.png")
        assert change_set.modified_files == ("Sources/Bar.swift", "Sources/Renamed.swift")
        assert change_set.deleted_files == ("Sources/Old.swift",)
        assert change_set.lines_changed == 35
        assert set(change_set.diffs) == {"Sources/Foo.swift", "Sources/Bar.swift"}
        assert change_set.title == "feat: add Foo"
        assert change_set.description == ""
        assert change_set.labels == ("trivial", "ios")

    @pytest.mark.parametrize("status, expected", [
        ("added", "added"),
        ("copied", "added"),
        ("removed", "deleted"),
        ("modified", "modified"),
        ("renamed", "modified"),
        ("something-new", "modified"),
    ])
    def test_determine_change_type(self, status, expected):
        """Test GitHub status normalization."""
        assert self.parser._determine_change_type(status) == expected

    def test_parse_empty_pr(self):
        change_set = self.parser.parse({"number": 1, "title": "docs: x"}, [])

        assert change_set.all_files == ()
        assert change_set.lines_changed == 0
