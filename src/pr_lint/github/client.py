"""
GitHub REST Client

Fetches pull request data for linting and publishes the summary comment.
Requests share one authenticated session; the remaining API quota is
tracked from response headers so a nearly exhausted quota fails fast.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from datetime import datetime
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

PAGE_SIZE = 100
QUOTA_RESERVE = 10


class GitHubAPIError(Exception):
    """A GitHub request failed or returned an error status."""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """The API quota is used up until ``reset_time``."""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


@dataclass
class RateLimit:
    """Quota reported by the last response."""
    remaining: int = 5000
    reset_at: datetime = field(default_factory=datetime.now)

    def update(self, headers: Mapping[str, str]) -> None:
        if 'X-RateLimit-Remaining' in headers:
            self.remaining = int(headers['X-RateLimit-Remaining'])
        if 'X-RateLimit-Reset' in headers:
            self.reset_at = datetime.fromtimestamp(int(headers['X-RateLimit-Reset']))

    def exhausted(self) -> bool:
        return self.remaining <= QUOTA_RESERVE and datetime.now() < self.reset_at


class GitHubClient:
    """
    Thin GitHub REST client for the lint bot.

    GET requests are retried on transient server errors. Any error status
    is raised as GitHubAPIError; HTTP 429 and a locally exhausted quota
    raise RateLimitExceeded.
    """

    def __init__(self, token: str, base_url: str = "https://api.github.com", timeout: int = 30):
        """
        Args:
            token: Personal access token or the Actions ``GITHUB_TOKEN``
            base_url: REST API root, e.g. a GitHub Enterprise ``/api/v3`` URL
            timeout: Per-request timeout in seconds
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.rate_limit = RateLimit()
        self.session = self._create_session()

    @property
    def rate_limit_remaining(self) -> int:
        return self.rate_limit.remaining

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        # Only idempotent reads are retried
        retries = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        for prefix in ("http://", "https://"):
            session.mount(prefix, HTTPAdapter(max_retries=retries))

        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'PR-Lint/1.0'
        })
        return session

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Send one request relative to the API root.

        Raises:
            RateLimitExceeded: Quota exhausted locally or HTTP 429
            GitHubAPIError: Transport failure or any other error status
        """
        if self.rate_limit.exhausted():
            logger.warning(
                f"Refusing request, {self.rate_limit.remaining} calls left until {self.rate_limit.reset_at}"
            )
            raise RateLimitExceeded(self.rate_limit.reset_at)

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise GitHubAPIError(f"Request failed: {e}")

        self.rate_limit.update(response.headers)

        if response.status_code == 429:
            reset = int(response.headers.get('X-RateLimit-Reset', time.time() + 3600))
            raise RateLimitExceeded(datetime.fromtimestamp(reset))

        if not response.ok:
            raise self._error_from(response)

        return response

    @staticmethod
    def _error_from(response: requests.Response) -> GitHubAPIError:
        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}
        detail = payload.get('message', 'Unknown error')
        return GitHubAPIError(
            f"GitHub API error: {response.status_code} - {detail}",
            status_code=response.status_code,
            response_data=payload,
        )

    def _get_json(self, endpoint: str) -> Any:
        return self._make_request('GET', endpoint).json()

    def _get_paginated(self, endpoint: str) -> List[Dict]:
        """Collect every page of a list endpoint."""
        items: List[Dict] = []
        page = 1

        while True:
            batch = self._make_request(
                'GET', endpoint, params={'page': page, 'per_page': PAGE_SIZE}
            ).json()
            items.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1

        logger.debug(f"{endpoint}: {len(items)} items over {page} page(s)")
        return items

    def _send_json(self, method: str, endpoint: str, payload: Dict) -> Dict:
        return self._make_request(method, endpoint, json=payload).json()

    def get_pull_request(self, owner: str, repo: str, pr_number: int) -> Dict:
        """Pull request metadata (title, body, labels, ...)."""
        logger.info(f"Fetching PR {owner}/{repo}#{pr_number}")
        return self._get_json(f'/repos/{owner}/{repo}/pulls/{pr_number}')

    def get_pull_request_files(self, owner: str, repo: str, pr_number: int) -> List[Dict]:
        """Changed files of a pull request, each with status, counts and patch."""
        logger.info(f"Fetching PR files for {owner}/{repo}#{pr_number}")
        return self._get_paginated(f'/repos/{owner}/{repo}/pulls/{pr_number}/files')

    def list_issue_comments(self, owner: str, repo: str, issue_number: int) -> List[Dict]:
        return self._get_paginated(f'/repos/{owner}/{repo}/issues/{issue_number}/comments')

    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> Dict:
        logger.info(f"Creating summary comment on {owner}/{repo}#{issue_number}")
        return self._send_json('POST', f'/repos/{owner}/{repo}/issues/{issue_number}/comments', {'body': body})

    def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> Dict:
        logger.info(f"Updating summary comment {comment_id} on {owner}/{repo}")
        return self._send_json('PATCH', f'/repos/{owner}/{repo}/issues/comments/{comment_id}', {'body': body})

    def upsert_summary_comment(self, owner: str, repo: str, issue_number: int, body: str, marker: str) -> Dict:
        """
        Publish the summary comment, editing the previous one if there is one.

        The bot's earlier comment is recognised by ``marker`` in its body, so
        repeated runs on a PR keep a single comment current.

        Returns:
            The created or updated comment
        """
        for comment in self.list_issue_comments(owner, repo, issue_number):
            if marker in (comment.get('body') or ''):
                return self.update_issue_comment(owner, repo, comment['id'], body)

        return self.create_issue_comment(owner, repo, issue_number, body)
