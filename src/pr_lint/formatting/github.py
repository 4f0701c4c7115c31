"""
GitHub Report Formatter

Formats a lint Report for GitHub: workflow command annotations for the
Actions log, a Markdown summary comment for the PR, and plain records.
"""

import logging
from typing import Dict, List, Optional
from datetime import datetime

from ..models.report import Report, ReportMessage, Severity


logger = logging.getLogger(__name__)


class ReportFormatter:
    """
    Formats reports for GitHub.

    Annotations use the Actions workflow command syntax so warnings show up
    inline on the PR diff; the summary comment groups entries into tables.
    """

    ANNOTATION_COMMANDS = {
        Severity.FAILURE: "error",
        Severity.WARNING: "warning",
        Severity.MESSAGE: "notice",
    }

    SECTION_TITLES = {
        Severity.FAILURE: ("🚫", "Fails"),
        Severity.WARNING: ("⚠️", "Warnings"),
        Severity.MESSAGE: ("📖", "Messages"),
    }

    def __init__(self, marker: str = "<!-- pr-lint-report -->"):
        """
        Initialize report formatter.

        Args:
            marker: Hidden marker embedded in the summary comment
        """
        self.marker = marker
        self.max_comment_length = 65536  # GitHub's comment limit

    def to_records(self, report: Report) -> List[Dict]:
        """Convert report to (message, severity, file, line) records."""
        return [entry.to_dict() for entry in report.entries]

    def to_annotations(self, report: Report) -> List[str]:
        """
        Format report entries as GitHub Actions workflow commands.

        Args:
            report: Report to format

        Returns:
            One ``::command ...::message`` line per entry
        """
        return [self._annotation(entry) for entry in report.entries]

    def _annotation(self, entry: ReportMessage) -> str:
        command = self.ANNOTATION_COMMANDS[entry.severity]

        properties = []
        if entry.file:
            properties.append(f"file={self._escape_property(entry.file)}")
        if entry.line:
            properties.append(f"line={entry.line}")
        if entry.rule:
            properties.append(f"title={self._escape_property('pr-lint: ' + entry.rule)}")

        prefix = f"::{command} {','.join(properties)}" if properties else f"::{command}"
        return f"{prefix}::{self._escape_data(entry.text)}"

    @staticmethod
    def _escape_data(value: str) -> str:
        return value.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')

    @classmethod
    def _escape_property(cls, value: str) -> str:
        return cls._escape_data(value).replace(':', '%3A').replace(',', '%2C')

    def to_markdown(self, report: Report, generated_at: Optional[datetime] = None) -> str:
        """
        Format report as a Markdown PR comment.

        Args:
            report: Report to format
            generated_at: Timestamp shown in the footer (default: now)

        Returns:
            Markdown comment body containing the hidden marker
        """
        body_parts = [self.marker]

        sections = [
            (Severity.FAILURE, report.failures),
            (Severity.WARNING, report.warnings),
            (Severity.MESSAGE, report.messages),
        ]
        for severity, entries in sections:
            if entries:
                body_parts.append(self._format_section(severity, entries))

        generated_at = generated_at or datetime.now()
        status = "✅ passed" if report.passed else "❌ failed"
        body_parts.append(
            f"<sub>pr-lint {status} · {len(report.failures)} fails, "
            f"{len(report.warnings)} warnings, {len(report.messages)} messages · "
            f"{generated_at.strftime('%Y-%m-%d %H:%M:%S')}</sub>"
        )

        body = "\n\n".join(body_parts)
        if len(body) > self.max_comment_length:
            body = self._truncate_comment(body)
        return body

    def _format_section(self, severity: Severity, entries) -> str:
        icon, title = self.SECTION_TITLES[severity]
        lines = [
            "<table>",
            "  <thead>",
            f"    <tr><th width=\"50\"></th><th width=\"100%\">{len(entries)} {title}</th></tr>",
            "  </thead>",
            "  <tbody>",
        ]
        for entry in entries:
            text = self._escape_html(entry.text)
            if entry.location:
                text += f" <code>{self._escape_html(entry.location)}</code>"
            lines.append(f"    <tr><td>{icon}</td><td>{text}</td></tr>")
        lines.extend(["  </tbody>", "</table>"])
        return "\n".join(lines)

    @staticmethod
    def _escape_html(value: str) -> str:
        return value.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')

    def _truncate_comment(self, comment: str) -> str:
        """Truncate comment to fit GitHub limits."""
        notice = "\n\n... (truncated, see the workflow log for all entries)"
        logger.warning(f"Summary comment truncated from {len(comment)} characters")
        return comment[:self.max_comment_length - len(notice)] + notice

    def exit_code(self, report: Report) -> int:
        """Process exit code for CI: 1 if the report has failures."""
        return 0 if report.passed else 1
