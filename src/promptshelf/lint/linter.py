"""
Running lint rules over a corpus or a single file.
"""

from __future__ import annotations

import collections as _collections
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import promptshelf.constants as constants
import promptshelf.discovery as discovery
import promptshelf.documents as documents
import promptshelf.documents.base as documents_base
import promptshelf.lint.diagnostics as diagnostics_module
import promptshelf.lint.rules as rules

if _typing.TYPE_CHECKING:
    import promptshelf.catalog as _catalog

_logger = _logging.getLogger(__name__)

Severity = diagnostics_module.Severity


@_dataclasses.dataclass
class LintConfig:
    """Which rules run and how loudly."""

    disabled: frozenset[str] = frozenset()
    """Rule codes that never report."""

    severity_overrides: dict[str, Severity] = _dataclasses.field(default_factory=dict)
    """Per-code severity replacing the rule default."""

    fail_on: Severity = Severity.ERROR
    """Lowest severity that makes the run fail."""

    body_soft_limit: int = constants.BODY_SOFT_LIMIT

    require_bond: bool = False
    """Report unbonded skills as warnings instead of info."""

    def __post_init__(self) -> None:
        self.disabled = frozenset(code.upper() for code in self.disabled)
        self.severity_overrides = {
            code.upper(): Severity(value) for code, value in self.severity_overrides.items()
        }
        self.fail_on = Severity(self.fail_on)
        unknown = (self.disabled | set(self.severity_overrides)) - set(rules.RULES)
        if unknown:
            raise ValueError(f"Unknown lint rule code(s): {', '.join(sorted(unknown))}")

    def is_enabled(self, code: str) -> bool:
        return code not in self.disabled

    def severity_for(self, rule: rules.Rule, requested: Severity | None = None) -> Severity:
        if rule.code in self.severity_overrides:
            return self.severity_overrides[rule.code]
        return requested or rule.severity


@_dataclasses.dataclass
class LintReport:
    """Diagnostics from one lint run."""

    diagnostics: list[diagnostics_module.Diagnostic]
    root: _pathlib.Path | None = None
    files_checked: int = 0

    def __post_init__(self) -> None:
        self.diagnostics = sorted(self.diagnostics, key=lambda d: d.sort_key())

    def counts(self) -> dict[str, int]:
        counter = _collections.Counter(d.severity.value for d in self.diagnostics)
        return {s.value: counter.get(s.value, 0) for s in (Severity.ERROR, Severity.WARNING, Severity.INFO)}

    def has_failures(self, fail_on: Severity = Severity.ERROR) -> bool:
        return any(d.severity >= fail_on for d in self.diagnostics)

    def exit_code(self, fail_on: Severity = Severity.ERROR) -> int:
        return 1 if self.has_failures(fail_on) else 0

    def by_path(self) -> dict[_pathlib.Path, list[diagnostics_module.Diagnostic]]:
        grouped: dict[_pathlib.Path, list[diagnostics_module.Diagnostic]] = {}
        for diagnostic in self.diagnostics:
            grouped.setdefault(diagnostic.path, []).append(diagnostic)
        return grouped

    def filter_paths(self, paths: _typing.Iterable[_pathlib.Path]) -> LintReport:
        """Keep diagnostics for files at or under any of ``paths``."""
        resolved = [p.resolve() for p in paths]

        def _wanted(path: _pathlib.Path) -> bool:
            return any(path == p or p in path.parents for p in resolved)

        return LintReport(
            [d for d in self.diagnostics if _wanted(d.path)],
            root=self.root,
            files_checked=self.files_checked,
        )

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "root": str(self.root) if self.root else None,
            "files_checked": self.files_checked,
            "counts": self.counts(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class Linter:
    """Applies the registered rules to a catalog."""

    def __init__(
        self,
        catalog: _catalog.Catalog | None = None,
        config: LintConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._config = config or LintConfig()
        self._context = rules.LintContext(catalog=catalog, config=self._config)

    @property
    def config(self) -> LintConfig:
        return self._config

    def _emit(
        self,
        rule: rules.Rule,
        findings: _typing.Iterable[rules.Finding],
    ) -> list[diagnostics_module.Diagnostic]:
        return [
            diagnostics_module.Diagnostic(
                code=rule.code,
                severity=self._config.severity_for(rule, finding.severity),
                message=finding.message,
                path=finding.path,
                line=finding.line,
            )
            for finding in findings
        ]

    def _active_rules(self, scope: str) -> list[rules.Rule]:
        return [
            rule
            for rule in rules.list_rules()
            if rule.scope == scope and self._config.is_enabled(rule.code)
        ]

    def check_document(self, document: _typing.Any) -> list[diagnostics_module.Diagnostic]:
        """Run document rules against one document."""
        found: list[diagnostics_module.Diagnostic] = []
        for rule in self._active_rules("document"):
            assert rule.check is not None
            found.extend(self._emit(rule, rule.check(document, self._context)))
        return found

    def check_failure(
        self, path: _pathlib.Path, error: documents.DocumentError
    ) -> list[diagnostics_module.Diagnostic]:
        """Turn a load failure into its diagnostic."""
        rule = rules.get_rule(error.code) or rules.RULES[documents_base.SCHEMA_ERROR]
        if not self._config.is_enabled(rule.code):
            return []
        return self._emit(rule, [rules.Finding(path, error.line, error.message)])

    def run(self) -> LintReport:
        """
        Lint the whole catalog.

        Raises:
            ValueError: If the linter was built without a catalog.
        """
        if self._catalog is None:
            raise ValueError("Linter.run() needs a catalog; use lint_file() for single files")

        corpus = self._catalog.corpus
        found: list[diagnostics_module.Diagnostic] = []

        for path, error in corpus.failures:
            found.extend(self.check_failure(path, error))
        for document in corpus.all_documents():
            found.extend(self.check_document(document))
        for rule in self._active_rules("corpus"):
            assert rule.check is not None
            found.extend(self._emit(rule, rule.check(self._context)))

        files = len(corpus.all_documents()) + len(corpus.failures)
        _logger.debug("Linted %d files, %d diagnostics", files, len(found))
        return LintReport(found, root=self._catalog.root, files_checked=files)


def lint_file(
    path: _pathlib.Path,
    *,
    layout: discovery.CorpusLayout | None = None,
    config: LintConfig | None = None,
    kind: str | None = None,
) -> LintReport:
    """
    Lint one file without a surrounding corpus.

    Rules that need the rest of the corpus (bonds, duplicates, ordinal
    references) are skipped.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    path = path.resolve()
    linter = Linter(None, config)
    try:
        document = discovery.load_document(path, layout, kind=kind)
    except documents.DocumentError as e:
        found = linter.check_failure(path, e)
    else:
        found = linter.check_document(document)
    return LintReport(found, root=path.parent, files_checked=1)
