"""
Diff Analyzer

Reads unified diff text to extract added and removed lines with their
line numbers, and classifies individual lines for the diff content rules.
"""

import re
import logging
from typing import Iterator, Optional
from dataclasses import dataclass
from enum import Enum


logger = logging.getLogger(__name__)


class DiffParseError(ValueError):
    """Raised when diff text cannot be read as a unified diff."""


class LineKind(Enum):
    """Kinds of changed lines in a diff hunk."""
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangedLine:
    """A single added or removed line.

    ``number`` is the line number in the new file for added lines and in
    the old file for removed lines.
    """
    kind: LineKind
    number: int
    content: str


class DiffAnalyzer:
    """
    Reads per-file unified diff text.

    Tracks hunk headers to map every added line to its line number in the
    new version of the file, which is what review annotations point at.
    """

    def __init__(self):
        """Initialize diff analyzer."""
        self.hunk_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.string_literal_pattern = re.compile(r'"(?:[^"\\]|\\.)*"')
        self.trailing_comment_pattern = re.compile(r'\s*(//.*|/\*.*?(\*/|$))')

        # Language detection by extension
        self.language_patterns = {
            'swift': [r'\.swift$'],
            'python': [r'\.py$'],
            'javascript': [r'\.jsx?$', r'\.mjs$'],
            'typescript': [r'\.tsx?$'],
            'kotlin': [r'\.kts?$'],
            'java': [r'\.java$'],
            'objective-c': [r'\.m$', r'\.mm$'],
            'rust': [r'\.rs$'],
            'go': [r'\.go$'],
            'cpp': [r'\.cpp$', r'\.cc$', r'\.h$', r'\.hpp$'],
        }

        self.comment_patterns = [r'^\s*#', r'^\s*//', r'^\s*/\*', r'^\s*\*']

    def changed_lines(self, diff_text: str) -> Iterator[ChangedLine]:
        """
        Iterate over added and removed lines of a unified diff.

        Args:
            diff_text: Raw diff of a single file (GitHub ``patch`` or git output)

        Yields:
            ChangedLine objects in diff order

        Raises:
            DiffParseError: If a hunk header is malformed
        """
        if diff_text is None:
            return
        if not isinstance(diff_text, str):
            raise DiffParseError(f"Diff must be text, got {type(diff_text).__name__}")

        old_line: Optional[int] = None
        new_line: Optional[int] = None

        for raw_line in diff_text.splitlines():
            if raw_line.startswith('@@'):
                header_match = self.hunk_header_pattern.match(raw_line)
                if not header_match:
                    raise DiffParseError(f"Malformed hunk header: {raw_line!r}")
                old_line = int(header_match.group(1))
                new_line = int(header_match.group(3))
                continue

            # File headers before the first hunk
            if new_line is None:
                continue

            if raw_line.startswith('+'):
                yield ChangedLine(LineKind.ADDED, new_line, raw_line[1:])
                new_line += 1
            elif raw_line.startswith('-'):
                yield ChangedLine(LineKind.REMOVED, old_line, raw_line[1:])
                old_line += 1
            elif raw_line.startswith('\\'):
                # "\ No newline at end of file"
                continue
            elif raw_line.startswith('diff '):
                # Next file in a multi-file diff; wait for its hunk header
                old_line = new_line = None
            else:
                old_line += 1
                new_line += 1

    def added_lines(self, diff_text: str) -> Iterator[ChangedLine]:
        """Iterate over added lines only, numbered in the new file."""
        for line in self.changed_lines(diff_text):
            if line.kind is LineKind.ADDED:
                yield line

    def is_comment(self, line: str) -> bool:
        """Check whether a source line is a comment line."""
        return any(re.search(pattern, line) for pattern in self.comment_patterns)

    def strip_string_literals(self, line: str) -> str:
        """Replace double-quoted string literals with empty quotes."""
        return self.string_literal_pattern.sub('""', line)

    def code_only(self, line: str) -> str:
        """Blank string literals, then drop trailing and inline comments."""
        return self.trailing_comment_pattern.sub('', self.strip_string_literals(line))

    def detect_language(self, file_path: str) -> Optional[str]:
        """Detect programming language from file path."""
        for language, patterns in self.language_patterns.items():
            for pattern in patterns:
                if re.search(pattern, file_path, re.IGNORECASE):
                    return language
        return None
