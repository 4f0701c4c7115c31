"""
Report Formatter

This module provides formatting of lint reports for GitHub annotations
and PR comments.
"""

from .github import ReportFormatter

__all__ = ['ReportFormatter']
