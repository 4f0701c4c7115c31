"""
Rule Evaluation

This module provides diff analysis, the built-in rules and the
evaluator that folds their output into a Report.
"""

from .analyzer import DiffAnalyzer, DiffParseError
from .context import ProjectTree, RuleContext
from .rules import Rule, default_rules
from .evaluator import RuleEvaluator

__all__ = [
    'DiffAnalyzer',
    'DiffParseError',
    'ProjectTree',
    'RuleContext',
    'Rule',
    'default_rules',
    'RuleEvaluator',
]
