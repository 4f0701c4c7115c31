"""
Property-based tests for GitHub API error handling and rate limiting.

Property 4: GitHub API responses map to results or typed errors
"""

import pytest
from hypothesis import given, strategies as st
from unittest.mock import Mock, patch
import time

from pr_lint.github.client import GitHubClient, GitHubAPIError, RateLimitExceeded


def mock_response(status_code, remaining=4999, reset_in=3600):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b'{}'
    response.json.return_value = {'message': 'test'}
    response.headers = {
        'X-RateLimit-Remaining': str(remaining),
        'X-RateLimit-Reset': str(int(time.time()) + reset_in),
        'X-RateLimit-Limit': '5000'
    }
    return response


class TestGitHubRateLimiting:
    """Property tests for GitHub API error handling and rate limiting."""

    @given(
        token=st.text(min_size=1, max_size=60, alphabet=st.characters(whitelist_categories=('Lu', 'Ll', 'Nd')))
    )
    def test_token_is_sent_on_every_request(self, token):
        """
        Property: the token is always sent as the Authorization header.
        """
        client = GitHubClient(token)

        assert client.session.headers['Authorization'] == f'token {token}'

    @given(status_code=st.integers(min_value=200, max_value=599))
    def test_status_codes(self, status_code):
        """
        Property: every status code yields a response or a typed error.

        Given: A GitHub response with any HTTP status
        When: The request is made
        Then: 2xx/3xx return the response, 429 raises RateLimitExceeded and
              other 4xx/5xx raise GitHubAPIError carrying the status
        """
        client = GitHubClient('fake_token_for_testing_12345')

        with patch.object(client.session, 'request', return_value=mock_response(status_code)):
            if status_code < 400:
                assert client._make_request('GET', '/repos/o/r').status_code == status_code
            elif status_code == 429:
                with pytest.raises(RateLimitExceeded):
                    client._make_request('GET', '/repos/o/r')
            else:
                with pytest.raises(GitHubAPIError) as exc_info:
                    client._make_request('GET', '/repos/o/r')
                assert exc_info.value.status_code == status_code

    @given(
        remaining=st.integers(min_value=0, max_value=5000),
        reset_in=st.integers(min_value=60, max_value=3600)
    )
    def test_low_quota_blocks_next_request(self, remaining, reset_in):
        """
        Property: once the reported quota is nearly used up, further requests
        are refused locally until the reset time.
        """
        client = GitHubClient('fake_token_for_testing_12345')

        with patch.object(client.session, 'request', return_value=mock_response(200, remaining, reset_in)) as mock_request:
            client._make_request('GET', '/first')

            if remaining <= 10:
                with pytest.raises(RateLimitExceeded):
                    client._make_request('GET', '/second')
                assert mock_request.call_count == 1
            else:
                client._make_request('GET', '/second')
                assert mock_request.call_count == 2

        assert client.rate_limit_remaining == remaining
