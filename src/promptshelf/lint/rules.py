"""
Lint rules.

Each rule has a code, a default severity and a check. Document rules see
one document at a time; corpus rules see the whole catalog and only run
when one is available. Load rules have no check: their diagnostics come
from files that failed to load.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import promptshelf.documents as documents
import promptshelf.lint.diagnostics as diagnostics
import promptshelf.references as references

if _typing.TYPE_CHECKING:
    import promptshelf.catalog as _catalog
    import promptshelf.lint.linter as _linter

Severity = diagnostics.Severity


@_dataclasses.dataclass(frozen=True)
class Finding:
    """What a check reports; the linter turns it into a Diagnostic."""

    path: _pathlib.Path
    line: int | None
    message: str
    severity: Severity | None = None


@_dataclasses.dataclass
class LintContext:
    catalog: _catalog.Catalog | None
    config: _linter.LintConfig


DocumentCheck = _typing.Callable[[_typing.Any, LintContext], _typing.Iterable[Finding]]
CorpusCheck = _typing.Callable[[LintContext], _typing.Iterable[Finding]]


@_dataclasses.dataclass(frozen=True)
class Rule:
    code: str
    severity: Severity
    description: str
    scope: str  # "load", "document" or "corpus"
    check: _typing.Callable[..., _typing.Iterable[Finding]] | None = None

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "scope": self.scope,
            "description": self.description,
        }


RULES: dict[str, Rule] = {}


def _register(rule: Rule) -> None:
    if rule.code in RULES:
        raise ValueError(f"Duplicate lint rule code: {rule.code}")
    RULES[rule.code] = rule


def document_rule(
    code: str, severity: Severity, description: str
) -> _typing.Callable[[DocumentCheck], DocumentCheck]:
    def decorator(func: DocumentCheck) -> DocumentCheck:
        _register(Rule(code, severity, description, "document", func))
        return func

    return decorator


def corpus_rule(
    code: str, severity: Severity, description: str
) -> _typing.Callable[[CorpusCheck], CorpusCheck]:
    def decorator(func: CorpusCheck) -> CorpusCheck:
        _register(Rule(code, severity, description, "corpus", func))
        return func

    return decorator


# Load rules: reported from DocumentError.code
_register(Rule("FM001", Severity.ERROR, "front-matter YAML is invalid", "load"))
_register(Rule("FM002", Severity.ERROR, "front-matter block is unterminated", "load"))
_register(Rule("FM004", Severity.ERROR, "front-matter is not a mapping", "load"))
_register(
    Rule("SCH001", Severity.ERROR, "front-matter fails its document model", "load")
)
_register(Rule("IO001", Severity.ERROR, "file cannot be read as UTF-8 text", "load"))


@document_rule("FM003", Severity.WARNING, "agent or command has no front-matter")
def _missing_frontmatter(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if doc.kind in ("agent", "command") and not doc.has_frontmatter:
        yield Finding(doc.path, 1, f"{doc.kind} has no YAML front-matter")


@document_rule(
    "SCH002", Severity.WARNING, "input_schema/output_schema block is not a mapping"
)
def _schema_blocks(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if not isinstance(doc, documents.Agent):
        return
    for key in ("input_schema", "output_schema"):
        value = getattr(doc.frontmatter, key)
        if value is not None and not isinstance(value, dict):
            yield Finding(
                doc.path,
                doc.line_for(key),
                f"{key} should be a mapping, got {type(value).__name__}",
            )


@document_rule("NAME001", Severity.WARNING, "declared name differs from its file")
def _name_matches_file(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if isinstance(doc, documents.Skill):
        directory = doc.directory.name
        if doc.name != directory:
            yield Finding(
                doc.path,
                doc.line_for("name"),
                f"skill name '{doc.name}' does not match directory '{directory}'",
            )
    elif isinstance(doc, (documents.Agent, documents.Command)):
        declared = doc.frontmatter.name
        if declared and declared != doc.path.stem:
            yield Finding(
                doc.path,
                doc.line_for("name"),
                f"{doc.kind} name '{declared}' does not match file name '{doc.path.stem}'",
            )


@document_rule("BOND002", Severity.INFO, "skill has no bonded agent")
def _skill_unbonded(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if isinstance(doc, documents.Skill) and not doc.bonded_agent:
        severity = Severity.WARNING if ctx.config.require_bond else None
        yield Finding(doc.path, doc.line_for("name"), "skill is not bonded to an agent", severity)


@document_rule("REF001", Severity.WARNING, "relative link target does not exist")
def _broken_links(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    for ref in references.link_references(doc):
        if ref.is_broken:
            yield Finding(doc.path, ref.line, f"link target not found: {ref.target}")


@document_rule("REF002", Severity.WARNING, "ordinal reference has no target")
def _broken_ordinals(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if ctx.catalog is None:
        return
    for ref in references.ordinal_references(doc, ctx.catalog):
        if ref.is_broken:
            yield Finding(doc.path, ref.line, f"'{ref.target}' does not exist")


@document_rule("LEN001", Severity.WARNING, "body exceeds the soft line limit")
def _body_length(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if doc.kind == "guide":
        return
    limit = ctx.config.body_soft_limit
    if doc.exceeds_soft_limit(limit):
        yield Finding(
            doc.path,
            doc.body_start_line,
            f"body has {doc.body_line_count} lines (soft limit {limit})",
        )


@document_rule("CODE001", Severity.WARNING, "code fence is never closed")
def _unclosed_fences(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    for block in doc.code_blocks:
        if not block.closed:
            label = f" ({block.language})" if block.language else ""
            yield Finding(doc.path, block.start_line, f"code fence{label} is never closed")


@document_rule("EMPTY001", Severity.WARNING, "document body is empty")
def _empty_body(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if not doc.body.strip():
        yield Finding(doc.path, doc.body_start_line, f"{doc.kind} body is empty")


@document_rule("DESC001", Severity.INFO, "agent or command has no description")
def _missing_description(doc: _typing.Any, ctx: LintContext) -> _typing.Iterator[Finding]:
    if doc.kind in ("agent", "command") and not doc.description.strip():
        yield Finding(doc.path, doc.line_for("name") or 1, f"{doc.kind} has no description")


@corpus_rule("DUP001", Severity.ERROR, "two documents of one kind share a name")
def _duplicate_names(ctx: LintContext) -> _typing.Iterator[Finding]:
    assert ctx.catalog is not None
    for kind in ("agent", "skill", "command"):
        seen: dict[str, _pathlib.Path] = {}
        for doc in ctx.catalog.list_kind(kind):
            names = [doc.name]
            if isinstance(doc, documents.Command):
                names.extend(doc.aliases)
            for name in names:
                first = seen.get(name)
                if first is not None and first != doc.path:
                    yield Finding(
                        doc.path,
                        doc.line_for("name"),
                        f"duplicate {kind} name '{name}' (first defined in {first})",
                    )
                else:
                    seen.setdefault(name, doc.path)


@corpus_rule("BOND001", Severity.ERROR, "skill is bonded to an unknown agent")
def _unknown_bond(ctx: LintContext) -> _typing.Iterator[Finding]:
    assert ctx.catalog is not None
    for ref in references.bond_references(ctx.catalog):
        if ref.is_broken:
            yield Finding(ref.source, ref.line, f"bonded agent '{ref.target}' not found")


def get_rule(code: str) -> Rule | None:
    return RULES.get(code)


def list_rules() -> list[Rule]:
    return sorted(RULES.values(), key=lambda r: r.code)
