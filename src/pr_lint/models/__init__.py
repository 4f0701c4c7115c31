"""
Data Models

PR Lint 시스템의 핵심 데이터 모델들
"""

from .change_set import ChangeSet, ChangeSetRequest
from .report import Report, ReportMessage, Severity, ReportResponse

__all__ = [
    "ChangeSet",
    "ChangeSetRequest",
    "Report",
    "ReportMessage",
    "Severity",
    "ReportResponse",
]
