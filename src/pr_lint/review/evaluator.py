"""
Rule Evaluator

Runs an ordered list of rules against one ChangeSet and folds their
output into an immutable Report.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ..config import AppConfig
from ..models.change_set import ChangeSet
from ..models.report import Report, ReportMessage, warning
from .analyzer import DiffAnalyzer
from .context import ProjectTree, RuleContext
from .rules import Rule, default_rules


logger = logging.getLogger(__name__)


class RuleEvaluator:
    """
    Evaluates rules against a ChangeSet.

    Rules run in registration order, except rules flagged ``final`` which
    run after all others since they inspect the accumulated report. A rule
    that raises is isolated: the error is logged and reported as a single
    internal warning, and the remaining rules still run.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        rules: Optional[Sequence[Rule]] = None,
        tree: Optional[ProjectTree] = None,
    ):
        """
        Initialize rule evaluator.

        Args:
            config: Application config (default: built-in defaults)
            rules: Rules to run (default: ``default_rules(config)``)
            tree: Project tree for filesystem lookups (default: current directory)
        """
        self.config = config or AppConfig()
        self.rules = list(rules) if rules is not None else default_rules(self.config)
        self.tree = tree or ProjectTree()
        self.analyzer = DiffAnalyzer()

    @property
    def ordered_rules(self) -> List[Rule]:
        """Rules in the order they are evaluated."""
        return [r for r in self.rules if not r.final] + [r for r in self.rules if r.final]

    def evaluate(self, change_set: ChangeSet) -> Report:
        """
        Evaluate all rules against a ChangeSet.

        Args:
            change_set: Changes of one pull request

        Returns:
            Final Report
        """
        logger.info(
            f"Evaluating {len(self.rules)} rules on {len(change_set.all_files)} files "
            f"({change_set.lines_changed} lines changed)"
        )

        context = RuleContext(
            change_set=change_set,
            config=self.config,
            tree=self.tree,
            analyzer=self.analyzer,
        )

        report = Report.empty()
        for rule in self.ordered_rules:
            report = report.extend(self._run_rule(rule, context, report))

        logger.info(
            f"Evaluation finished: {len(report.failures)} failures, "
            f"{len(report.warnings)} warnings, {len(report.messages)} messages"
        )
        return report

    def _run_rule(self, rule: Rule, context: RuleContext, report: Report) -> List[ReportMessage]:
        """Run a single rule, turning exceptions into an internal warning."""
        try:
            entries = [
                e if e.rule else replace(e, rule=rule.name)
                for e in rule.check(context, report) or []
            ]
        except Exception as e:
            logger.exception(f"Rule {rule.name} raised")
            diagnostic = warning(f"pr-lint internal error in rule `{rule.name}`: {e}", internal=True)
            return [replace(diagnostic, rule=rule.name)]

        logger.debug(f"Rule {rule.name} produced {len(entries)} entries")
        return entries
