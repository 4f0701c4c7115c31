"""
ChangeSet Parser

Converts GitHub pull request data into the ChangeSet snapshot the rule
evaluator works on.
"""

import logging
from typing import Dict, List

from ..models.change_set import ChangeSet


logger = logging.getLogger(__name__)


class ChangeSetParser:
    """
    Parser for GitHub PR data.

    Converts GitHub API responses (pull request + changed files) into an
    immutable ChangeSet.
    """

    STATUS_MAPPING = {
        'added': 'added',
        'copied': 'added',
        'removed': 'deleted',
        'modified': 'modified',
        'renamed': 'modified',
        'changed': 'modified',
        'unchanged': 'modified',
    }

    def parse(self, pr_data: Dict, files_data: List[Dict]) -> ChangeSet:
        """
        Parse PR data and files into a ChangeSet.

        Args:
            pr_data: PR information from GitHub API
            files_data: List of file changes from GitHub API

        Returns:
            ChangeSet for the pull request
        """
        logger.info(f"Parsing change set for PR #{pr_data.get('number')}")

        modified: List[str] = []
        added: List[str] = []
        deleted: List[str] = []
        diffs: Dict[str, str] = {}
        lines_changed = 0

        buckets = {'added': added, 'deleted': deleted, 'modified': modified}

        for file_data in files_data:
            file_path = file_data['filename']
            change_type = self._determine_change_type(file_data.get('status', 'modified'))
            buckets[change_type].append(file_path)

            lines_changed += file_data.get('additions', 0) + file_data.get('deletions', 0)

            patch = file_data.get('patch')
            if patch:
                diffs[file_path] = patch
            else:
                logger.debug(f"No patch for {file_path} (binary or too large)")

        labels = [label.get('name', '') for label in pr_data.get('labels', []) if label.get('name')]

        change_set = ChangeSet(
            modified_files=modified,
            added_files=added,
            deleted_files=deleted,
            lines_changed=lines_changed,
            diffs=diffs,
            title=pr_data.get('title') or '',
            description=pr_data.get('body') or '',
            labels=labels,
        )

        logger.info(
            f"Parsed change set: {len(modified)} modified, {len(added)} added, "
            f"{len(deleted)} deleted, {lines_changed} lines"
        )
        return change_set

    def _determine_change_type(self, status: str) -> str:
        """
        Determine file change type from GitHub status.

        Args:
            status: GitHub file status

        Returns:
            Normalized change type
        """
        return self.STATUS_MAPPING.get(status, 'modified')
