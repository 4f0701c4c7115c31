"""
Main PR Lint API

Main interface that orchestrates a lint run from PR data collection
to the formatted report.
"""

import logging
from typing import Dict, List, Optional, Tuple
from datetime import datetime
from dataclasses import dataclass, field

from .github.client import GitHubClient
from .github.parser import ChangeSetParser
from .review.context import ProjectTree
from .review.evaluator import RuleEvaluator
from .formatting.github import ReportFormatter
from .models.change_set import ChangeSet
from .models.report import Report
from .config import AppConfig


logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """Result of one lint run."""
    report: Report
    annotations: List[str]
    comment_body: str
    processing_time: float
    created_at: datetime
    exit_code: int = 0
    repository: Optional[str] = None
    pr_number: Optional[int] = None
    comment_url: Optional[str] = None
    metadata: Dict = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.report.passed


def split_repository(repository: str) -> Tuple[str, str]:
    """Split 'owner/repo' into its parts."""
    owner, _, repo = repository.partition('/')
    if not owner or not repo or '/' in repo:
        raise ValueError("Repository must be in format 'owner/repo'")
    return owner, repo


class PRLintAPI:
    """
    Main PR Lint API interface.

    Orchestrates a lint run:
    1. Collect PR metadata and changed files (or take a ready ChangeSet)
    2. Evaluate the rules into a Report
    3. Format the Report for GitHub and optionally publish it
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        project_root: Optional[str] = None,
        github_client: Optional[GitHubClient] = None,
    ):
        """
        Initialize PR Lint API.

        Args:
            config: Optional configuration object
            project_root: Checkout used for companion file lookups
            github_client: Preconfigured client (default: built from config)
        """
        self.config = config or AppConfig()
        self.config.validate()

        self.parser = ChangeSetParser()
        self.evaluator = RuleEvaluator(config=self.config, tree=ProjectTree(project_root))
        self.formatter = ReportFormatter(marker=self.config.github.comment_marker)
        self._github_client = github_client

        logger.info(f"PR Lint API initialized with {len(self.evaluator.rules)} rules")

    @property
    def github_client(self) -> GitHubClient:
        """GitHub client, created on first use."""
        if self._github_client is None:
            self._github_client = GitHubClient(
                self.config.github.token,
                base_url=self.config.github.api_base_url,
                timeout=self.config.github.timeout_seconds,
            )
        return self._github_client

    def lint_change_set(self, change_set: ChangeSet) -> LintResult:
        """
        Evaluate rules against a ready ChangeSet.

        Args:
            change_set: Changes of one pull request

        Returns:
            LintResult with report and formatted output
        """
        start_time = datetime.now()

        report = self.evaluator.evaluate(change_set)

        result = LintResult(
            report=report,
            annotations=self.formatter.to_annotations(report),
            comment_body=self.formatter.to_markdown(report, generated_at=start_time),
            processing_time=(datetime.now() - start_time).total_seconds(),
            created_at=start_time,
            exit_code=self.formatter.exit_code(report),
            metadata={
                'files': len(change_set.all_files),
                'lines_changed': change_set.lines_changed,
                'rules': [rule.name for rule in self.evaluator.ordered_rules],
            },
        )

        logger.info(f"Lint finished in {result.processing_time:.2f}s, passed={result.passed}")
        return result

    def lint_pull_request(self, repository: str, pr_number: int, post_comment: bool = False) -> LintResult:
        """
        Fetch a pull request from GitHub and lint it.

        Args:
            repository: Repository in 'owner/repo' format
            pr_number: Pull request number
            post_comment: Publish (or update) the summary comment on the PR

        Returns:
            LintResult for the pull request
        """
        owner, repo = split_repository(repository)
        if pr_number <= 0:
            raise ValueError("PR number must be positive")

        logger.info(f"Linting {repository}#{pr_number}")

        pr_data = self.github_client.get_pull_request(owner, repo, pr_number)
        files_data = self.github_client.get_pull_request_files(owner, repo, pr_number)
        change_set = self.parser.parse(pr_data, files_data)

        result = self.lint_change_set(change_set)
        result.repository = repository
        result.pr_number = pr_number

        if post_comment:
            comment = self.github_client.upsert_summary_comment(
                owner, repo, pr_number, result.comment_body, self.config.github.comment_marker
            )
            result.comment_url = comment.get('html_url')

        return result
