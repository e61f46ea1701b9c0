"""
Corpus linting.

Checks that documents parse, that their front-matter fits the document
kind, and that the informal links between documents (Markdown links,
"See Agent N", skill bonds) point somewhere real.
"""

from promptshelf.lint.diagnostics import Diagnostic, Severity
from promptshelf.lint.linter import LintConfig, Linter, LintReport, lint_file
from promptshelf.lint.rules import RULES, Rule, get_rule, list_rules

__all__ = [
    "Diagnostic",
    "Severity",
    "LintConfig",
    "LintReport",
    "Linter",
    "lint_file",
    "RULES",
    "Rule",
    "get_rule",
    "list_rules",
]
