"""
Unit tests for the rule evaluator.
"""

from dataclasses import replace

from pr_lint.config import AppConfig
from pr_lint.models.change_set import ChangeSet
from pr_lint.models.report import Severity, message, warning
from pr_lint.review.context import ProjectTree
from pr_lint.review.evaluator import RuleEvaluator
from pr_lint.review.rules import Rule, check_success


def _boom(ctx, report):
    raise RuntimeError("unexpected input")


def _always_warn(ctx, report):
    return [warning("always")]


class TestRuleEvaluator:
    """Unit tests for RuleEvaluator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = AppConfig()

    def test_clean_change_set_yields_single_success_message(self, tmp_path):
        """Test an otherwise empty report gets exactly one success message."""
        evaluator = RuleEvaluator(config=self.config, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet(title="feat: add X"))

        assert report.failures == ()
        assert report.warnings == ()
        assert len(report.messages) == 1
        assert report.messages[0].rule == "success"

    def test_entries_are_tagged_with_rule_name(self, tmp_path):
        evaluator = RuleEvaluator(config=self.config, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet(title="added X", lines_changed=1200))

        rules_hit = sorted(e.rule for e in report.warnings)
        assert rules_hit == ["large-pr", "title-format", "very-large-pr"]
        assert report.messages == ()

    def test_failing_rule_does_not_abort_evaluation(self, tmp_path):
        """Test a raising rule becomes an internal warning and others still run."""
        rules = [
            Rule("boom", "raises", _boom),
            Rule("always", "warns", _always_warn),
        ]
        evaluator = RuleEvaluator(config=self.config, rules=rules, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet())

        assert report.passed
        assert [e.rule for e in report.warnings] == ["boom", "always"]
        internal = report.internal_errors
        assert len(internal) == 1
        assert "unexpected input" in internal[0].text
        assert internal[0].severity is Severity.WARNING

    def test_final_rules_run_last(self, tmp_path):
        """Test the success check sees every other rule's output."""
        rules = [
            Rule("success", "success", check_success, final=True),
            Rule("always", "warns", _always_warn),
        ]
        evaluator = RuleEvaluator(config=self.config, rules=rules, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet())

        assert [r.name for r in evaluator.ordered_rules] == ["always", "success"]
        assert report.messages == ()
        assert len(report.warnings) == 1

    def test_malformed_rule_output_is_isolated(self, tmp_path):
        """Test a rule yielding something other than report entries is contained."""
        rules = [
            Rule("bad-output", "returns plain strings", lambda ctx, report: ["not an entry"]),
            Rule("always", "warns", _always_warn),
        ]
        evaluator = RuleEvaluator(config=self.config, rules=rules, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet())

        assert [e.rule for e in report.warnings] == ["bad-output", "always"]
        assert [e.rule for e in report.internal_errors] == ["bad-output"]

    def test_internal_error_suppresses_success(self, tmp_path):
        rules = [
            Rule("boom", "raises", _boom),
            Rule("success", "success", check_success, final=True),
        ]
        evaluator = RuleEvaluator(config=self.config, rules=rules, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(ChangeSet())

        assert report.messages == ()

    def test_rule_returning_none_is_tolerated(self, tmp_path):
        rules = [Rule("quiet", "returns None", lambda ctx, report: None)]
        evaluator = RuleEvaluator(config=self.config, rules=rules, tree=ProjectTree(str(tmp_path)))

        assert evaluator.evaluate(ChangeSet()).entries == ()

    def test_rule_name_from_entry_is_kept(self, tmp_path):
        def tagged(ctx, report):
            return [replace(message("note"), rule="custom")]

        evaluator = RuleEvaluator(
            config=self.config,
            rules=[Rule("outer", "tagged", tagged)],
            tree=ProjectTree(str(tmp_path)),
        )

        assert evaluator.evaluate(ChangeSet()).messages[0].rule == "custom"

    def test_change_set_is_not_mutated(self, tmp_path):
        change_set = ChangeSet(
            modified_files=["Sources/Foo.swift"],
            diffs={"Sources/Foo.swift": "@@ -1 +1,2 @@\n a\n+print(x)"},
            lines_changed=2,
            title="feat: foo",
        )
        snapshot = (change_set.modified_files, dict(change_set.diffs), change_set.lines_changed)
        evaluator = RuleEvaluator(config=self.config, tree=ProjectTree(str(tmp_path)))

        evaluator.evaluate(change_set)

        assert (change_set.modified_files, dict(change_set.diffs), change_set.lines_changed) == snapshot

    def test_realistic_swift_pr(self, tmp_path):
        """Test a realistic Swift PR produces the expected warnings."""
        change_set = ChangeSet(
            modified_files=["Sources/App/Foo.swift"],
            added_files=["Sources/App/Bar.swift"],
            lines_changed=60,
            diffs={
                "Sources/App/Foo.swift": "@@ -1,2 +1,3 @@\n import Foundation\n+    print(x)\n let y = 1",
                "Sources/App/Bar.swift": "@@ -0,0 +1,2 @@\n+struct Bar {\n+}",
            },
            title="feat: add bar",
        )
        evaluator = RuleEvaluator(config=self.config, tree=ProjectTree(str(tmp_path)))

        report = evaluator.evaluate(change_set)

        rules_hit = {e.rule for e in report.warnings}
        assert rules_hit == {
            "needs-tests", "new-files-without-tests", "expected-test-files", "changelog", "added-lines",
        }
        print_warning = [e for e in report.warnings if e.rule == "added-lines"][0]
        assert (print_warning.file, print_warning.line) == ("Sources/App/Foo.swift", 2)
        assert report.passed
