"""
PR Lint

GitHub Pull Request 규칙 기반 린트 봇
"""

__version__ = "1.0.0"

from .api import PRLintAPI, LintResult

__all__ = ["PRLintAPI", "LintResult"]
