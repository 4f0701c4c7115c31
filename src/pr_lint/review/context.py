"""
Rule Context

Bundles the ChangeSet, configuration and project tree handed to every rule,
together with the path classification helpers the rules share.
"""

import logging
import os
import re
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass

from ..config import AppConfig
from ..models.change_set import ChangeSet
from .analyzer import DiffAnalyzer


logger = logging.getLogger(__name__)


class ProjectTree:
    """
    Filesystem lookups relative to the project root.

    Searches skip VCS and build directories. Name lookups are cached per
    instance since several rules ask for the same companion files.
    """

    SKIP_DIRS = {'.git', '.build', 'node_modules', '.venv', '__pycache__'}

    def __init__(self, root: Optional[str] = None):
        """
        Initialize project tree.

        Args:
            root: Project root directory (default: current directory)
        """
        self.root = Path(root or os.getcwd())
        self._name_cache: Dict[Tuple[str, Tuple[str, ...]], List[str]] = {}

    def exists(self, relative_path: str) -> bool:
        """Check whether a file exists relative to the project root."""
        return (self.root / relative_path).is_file()

    def find_by_name(self, file_name: str, under: Sequence[str] = ()) -> List[str]:
        """
        Find files with the given name anywhere below the given directories.

        Args:
            file_name: Bare file name to look for
            under: Directories relative to the root; the whole tree if empty

        Returns:
            Sorted list of matching paths, relative to the root, POSIX style
        """
        key = (file_name, tuple(under))
        if key in self._name_cache:
            return self._name_cache[key]

        search_roots = [self.root / d for d in under] if under else [self.root]
        matches = set()

        for search_root in search_roots:
            if not search_root.is_dir():
                continue
            for dirpath, dirnames, filenames in os.walk(search_root):
                dirnames[:] = [d for d in dirnames if d not in self.SKIP_DIRS]
                if file_name in filenames:
                    found = Path(dirpath) / file_name
                    matches.add(found.relative_to(self.root).as_posix())

        result = sorted(matches)
        logger.debug(f"Lookup {file_name} under {list(under) or ['.']}: {len(result)} match(es)")
        self._name_cache[key] = result
        return result


@dataclass
class RuleContext:
    """Everything a rule may read during one evaluation."""
    change_set: ChangeSet
    config: AppConfig
    tree: ProjectTree
    analyzer: DiffAnalyzer

    @staticmethod
    def _under(path: str, directories: Sequence[str]) -> bool:
        normalized = path[2:] if path.startswith('./') else path
        for directory in directories:
            prefix = directory.strip('/') + '/'
            if normalized.startswith(prefix) or ('/' + prefix) in normalized:
                return True
        return False

    def is_test(self, path: str) -> bool:
        """Check if path lives under a test directory."""
        return self._under(path, self.config.paths.test_dirs)

    def is_source(self, path: str) -> bool:
        """Check if path is a source file (under a source dir, not a test)."""
        if self.is_test(path) or not self._under(path, self.config.paths.source_dirs):
            return False
        extensions = self.config.paths.source_extensions
        return not extensions or PurePosixPath(path).suffix in extensions

    def is_doc(self, path: str) -> bool:
        """Check if path is a documentation file."""
        if PurePosixPath(path).name in self.config.paths.doc_files:
            return True
        return self._under(path, self.config.paths.doc_dirs)

    def is_manifest(self, path: str) -> bool:
        """Check if path is a manifest/build file."""
        return PurePosixPath(path).name in self.config.paths.manifest_files

    def is_generated(self, path: str) -> bool:
        """Check if path carries a generated-code marker."""
        lowered = path.lower()
        return any(marker.lower() in lowered for marker in self.config.paths.generated_markers)

    @cached_property
    def source_files(self) -> List[str]:
        """Changed (modified or added) source files."""
        return [p for p in self.change_set.changed_files if self.is_source(p)]

    @cached_property
    def source_dir_files(self) -> List[str]:
        """Changed paths under a source directory, whatever their extension."""
        paths = self.config.paths
        return [
            p for p in self.change_set.changed_files
            if self._under(p, paths.source_dirs) and not self.is_test(p)
        ]

    @cached_property
    def added_source_files(self) -> List[str]:
        return [p for p in self.change_set.added_files if self.is_source(p)]

    @cached_property
    def test_files(self) -> List[str]:
        """Changed test files, deletions included."""
        return [p for p in self.change_set.all_files if self.is_test(p)]

    @cached_property
    def docs_changed(self) -> bool:
        return any(self.is_doc(p) for p in self.change_set.all_files)

    def pattern(self, name: str) -> re.Pattern:
        """Compiled pattern from the pattern config."""
        return re.compile(getattr(self.config.patterns, name))
