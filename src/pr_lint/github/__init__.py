"""
GitHub Integration Layer

This module provides GitHub API integration for PR retrieval and
summary comment publishing.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded
from .parser import ChangeSetParser

__all__ = ['GitHubClient', 'GitHubAPIError', 'RateLimitExceeded', 'ChangeSetParser']
