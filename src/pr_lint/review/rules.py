"""
Built-in Rules

Each rule is an independent check over the ChangeSet that returns report
entries. Rules never mutate the ChangeSet or the report they are shown;
the evaluator folds their output into a new Report.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterable, List, Optional

from ..config import AppConfig
from ..models.report import Report, ReportMessage, message, warning, failure
from .context import RuleContext


logger = logging.getLogger(__name__)

RuleCheck = Callable[[RuleContext, Report], Iterable[ReportMessage]]


@dataclass(frozen=True)
class Rule:
    """A named check paired with the entries it reports."""
    name: str
    description: str
    check: RuleCheck
    final: bool = False


def _code(text: str) -> str:
    return f"`{text}`"


def check_large_pr(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    limit = ctx.config.thresholds.large_pr_lines
    lines = ctx.change_set.lines_changed
    if lines > limit:
        return [warning(
            f"This is a large PR ({lines} lines changed, limit {limit}). "
            f"Consider splitting it into smaller PRs."
        )]
    return []


def check_very_large_pr(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    limit = ctx.config.thresholds.very_large_pr_lines
    lines = ctx.change_set.lines_changed
    if lines > limit:
        return [warning(
            f"This is a very large PR ({lines} lines changed), review may be slow."
        )]
    return []


def check_title_format(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    title = ctx.change_set.title.strip()
    if ctx.pattern('title_pattern').match(title):
        return []
    return [warning(
        f"PR title {_code(title) if title else '(empty)'} does not follow the "
        f"conventional commit format `type(scope): subject`, e.g. `feat: add login screen`."
    )]


def check_description(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    minimum = ctx.config.thresholds.min_description_length
    if len(ctx.change_set.description.strip()) < minimum:
        return [warning("Please provide a PR description that explains what changed and why.")]
    return []


def check_needs_tests(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    """Changes under a source directory above the size threshold without any test changes."""
    if not ctx.source_dir_files or ctx.test_files:
        return []
    if ctx.change_set.lines_changed <= ctx.config.thresholds.needs_tests_min_lines:
        return []
    return [warning(
        "Source files changed but no tests were updated. This PR needs tests."
    )]


def check_new_files_without_tests(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    added = ctx.added_source_files
    if not added or ctx.test_files:
        return []
    return [warning(
        "New source files were added without test changes: "
        + ", ".join(_code(p) for p in added)
    )]


def expected_test_name(path: str, template: str) -> str:
    """Derive the expected test file name for a source file."""
    source = PurePosixPath(path)
    return template.format(stem=source.stem, ext=source.suffix, name=source.name)


def check_expected_test_files(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    """
    Look for the test file matching every added source file.

    A test file that exists but was not touched only gets a note; a test
    file that does not exist at all is a warning.
    """
    paths = ctx.config.paths
    changed_names = {PurePosixPath(p).name for p in ctx.change_set.changed_files}
    entries = []

    for source_path in ctx.added_source_files:
        file_name = PurePosixPath(source_path).name
        if any(file_name.startswith(prefix) for prefix in paths.test_exempt_prefixes):
            logger.debug(f"Skipping test lookup for exempt file {source_path}")
            continue

        expected = expected_test_name(source_path, paths.test_file_template)
        if expected in changed_names:
            continue

        existing = ctx.tree.find_by_name(expected, under=paths.test_dirs)
        if existing:
            entries.append(message(
                f"{_code(expected)} exists ({_code(existing[0])}) but was not updated "
                f"for the new file {_code(source_path)}. Consider adding tests for it.",
                file=source_path,
            ))
        else:
            entries.append(warning(
                f"No test file {_code(expected)} found for the new file {_code(source_path)}.",
                file=source_path,
            ))

    return entries


def _scan_per_file(
    ctx: RuleContext,
    paths: Iterable[str],
    scan: Callable[[str, str], Iterable[ReportMessage]],
) -> List[ReportMessage]:
    """
    Run ``scan(path, diff)`` for each path.

    A file whose diff cannot be read contributes no entries; all such files
    are listed in one internal warning so the remaining files are still
    checked.
    """
    entries = []
    unreadable = []

    for path in paths:
        try:
            file_entries = list(scan(path, ctx.change_set.diff_for(path)))
        except Exception as e:
            language = ctx.analyzer.detect_language(path) or "unknown"
            logger.warning(f"Could not scan diff of {path} ({language}): {e}")
            unreadable.append(path)
            continue
        entries.extend(file_entries)

    if unreadable:
        entries.append(warning(
            "pr-lint could not scan the diff of: " + ", ".join(_code(p) for p in unreadable),
            internal=True,
        ))

    return entries


def check_manifest_changed(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    """Guidance for manifest changes, plus a warning for undocumented dependencies."""
    manifests = [p for p in ctx.change_set.changed_files if ctx.is_manifest(p)]
    entries = []

    for path in manifests:
        entries.append(message(
            f"{_code(path)} changed. Make sure the resolved dependency versions "
            f"are committed alongside it.",
            file=path,
        ))
        entries.append(message(
            "Double-check version requirements and supported platforms after manifest changes.",
            file=path,
        ))

    if ctx.docs_changed:
        return entries

    dependency_pattern = ctx.pattern('dependency_pattern')

    def scan(path: str, diff: str) -> List[ReportMessage]:
        added = ctx.analyzer.added_lines(diff)
        if any(dependency_pattern.search(line.content) for line in added):
            return [warning(
                f"{_code(path)} adds a dependency but no documentation was updated. "
                f"Please document the new dependency.",
                file=path,
            )]
        return []

    return entries + _scan_per_file(ctx, manifests, scan)


def check_public_api_docs(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    if ctx.docs_changed:
        return []

    declaration = ctx.pattern('public_declaration_pattern')

    def scan(path: str, diff: str) -> List[ReportMessage]:
        if any(declaration.search(line.content) for line in ctx.analyzer.changed_lines(diff)):
            return [warning(
                f"Public API changed in {_code(path)} but no documentation was updated.",
                file=path,
            )]
        return []

    return _scan_per_file(ctx, ctx.source_files, scan)


def is_trivial(ctx: RuleContext) -> bool:
    """Check whether the PR opts out of the changelog requirement."""
    marker = ctx.config.policy.trivial_marker
    if not marker:
        return False
    change_set = ctx.change_set
    return (
        marker in change_set.title
        or marker in change_set.description
        or marker.lstrip('#') in change_set.labels
    )


def check_changelog(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    policy = ctx.config.policy
    if policy.changelog_policy == 'off' or not ctx.source_files:
        return []

    changelog = PurePosixPath(policy.changelog_file).name
    if any(PurePosixPath(p).name == changelog for p in ctx.change_set.all_files):
        return []
    if is_trivial(ctx):
        logger.debug("Changelog check skipped for trivial PR")
        return []

    text = (
        f"Please add an entry to {_code(policy.changelog_file)} for these changes. "
        f"If none is needed, add {_code(policy.trivial_marker)} to the PR title."
    )
    if policy.changelog_policy == 'fail':
        return [failure(text)]
    return [warning(text)]


def check_added_lines(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    """Scan every added line in source diffs for debug leftovers."""
    analyzer = ctx.analyzer
    todo = ctx.pattern('todo_pattern')
    debug_output = ctx.pattern('print_pattern')
    force_unwrap = ctx.pattern('force_unwrap_pattern')

    def scan(path: str, diff: str) -> List[ReportMessage]:
        found = []
        for line in analyzer.added_lines(diff):
            if todo.search(line.content):
                found.append(warning(
                    "TODO/FIXME added. Track it in an issue or resolve it before merging.",
                    file=path, line=line.number,
                ))

            if analyzer.is_comment(line.content):
                continue

            code = analyzer.code_only(line.content)
            if debug_output.search(code):
                found.append(warning(
                    "Print statement added. Remove debug output or use a logger.",
                    file=path, line=line.number,
                ))
            if force_unwrap.search(code):
                found.append(warning(
                    "Forced unwrap added. Prefer safe unwrapping to avoid runtime crashes.",
                    file=path, line=line.number,
                ))
        return found

    return _scan_per_file(ctx, ctx.source_files, scan)


def check_generated_files(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    return [
        message(
            f"{_code(path)} looks like generated code. Double-check that changing it was intentional.",
            file=path,
        )
        for path in ctx.change_set.changed_files
        if ctx.is_generated(path)
    ]


def check_success(ctx: RuleContext, report: Report) -> List[ReportMessage]:
    """Runs last: report success when nothing else was flagged."""
    if report.is_clean:
        return [message("All PR checks passed. Nice work!")]
    return []


def default_rules(config: Optional[AppConfig] = None) -> List[Rule]:
    """
    Build the ordered list of built-in rules.

    Rules switched off in the configuration are left out.

    Args:
        config: Application config; defaults are used when omitted

    Returns:
        Rules in evaluation order, the success check last
    """
    config = config or AppConfig()
    policy = config.policy

    rules = [
        Rule("large-pr", "Warn about large PRs", check_large_pr),
        Rule("very-large-pr", "Warn about very large PRs", check_very_large_pr),
    ]

    if policy.check_title:
        rules.append(Rule("title-format", "Conventional commit PR title", check_title_format))

    if config.thresholds.min_description_length > 0:
        rules.append(Rule("description", "PR description length", check_description))

    if policy.check_tests:
        rules.extend([
            Rule("needs-tests", "Source changes need test changes", check_needs_tests),
            Rule("new-files-without-tests", "New source files need tests", check_new_files_without_tests),
            Rule("expected-test-files", "Matching test file for new sources", check_expected_test_files),
        ])

    rules.extend([
        Rule("manifest-changed", "Manifest guidance and dependency docs", check_manifest_changed),
        Rule("public-api-docs", "Public API changes need docs", check_public_api_docs),
    ])

    if policy.changelog_policy != 'off':
        rules.append(Rule("changelog", "CHANGELOG entry for source changes", check_changelog))

    if policy.check_added_lines:
        rules.append(Rule("added-lines", "TODO, print and forced unwrap in added lines", check_added_lines))

    rules.extend([
        Rule("generated-files", "Changes to generated files", check_generated_files),
        Rule("success", "Success message for clean PRs", check_success, final=True),
    ])

    return rules
