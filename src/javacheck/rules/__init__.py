"""Rules: the rule interface, concrete rules, and rules.yml loading."""

from javacheck.rules.base import FileContext, Rule, Violation
from javacheck.rules.class_suffix import ClassSuffixRule
from javacheck.rules.config import LintConfig, RuleSpec, build_rules, load_config
from javacheck.rules.forbid_import import ForbiddenImportRule, matches_package
from javacheck.rules.parameter_assignment import ParameterAssignmentRule

__all__ = [
    "ClassSuffixRule",
    "FileContext",
    "ForbiddenImportRule",
    "LintConfig",
    "ParameterAssignmentRule",
    "Rule",
    "RuleSpec",
    "Violation",
    "build_rules",
    "load_config",
    "matches_package",
]
