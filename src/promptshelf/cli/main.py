"""
Main CLI entry point for promptshelf.

Provides the command-line interface using Click.
"""

import json as _json
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic

import promptshelf
import promptshelf.catalog as catalog_module
import promptshelf.cli.output as output
import promptshelf.config as config
import promptshelf.lint as lint
import promptshelf.references as references

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_SEVERITY_CHOICE = _click.Choice(["error", "warning", "info"], case_sensitive=False)


def _get_settings(ctx: _click.Context) -> config.Settings:
    settings: config.Settings = ctx.obj["settings"]
    return settings


def _get_catalog(ctx: _click.Context) -> catalog_module.Catalog:
    """Build (once per invocation) the catalog for the configured root."""
    if "catalog" not in ctx.obj:
        settings = _get_settings(ctx)
        try:
            ctx.obj["catalog"] = catalog_module.Catalog(settings.corpus_root, settings.layout())
        except FileNotFoundError as e:
            raise _click.ClickException(str(e)) from e
    catalog: catalog_module.Catalog = ctx.obj["catalog"]
    return catalog


def _wants_json(ctx: _click.Context, json_output: bool) -> bool:
    return json_output or _get_settings(ctx).output.format == "json"


def _relative(path: _pathlib.Path, root: _pathlib.Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def _not_found(kind: str, name: str, json_output: bool) -> _typing.NoReturn:
    if json_output:
        _click.echo(_json.dumps({"error": f"{kind.capitalize()} not found: {name}"}))
    else:
        _click.echo(f"Error: {kind.capitalize()} '{name}' not found", err=True)
    raise SystemExit(1)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(promptshelf.__version__, "-V", "--version", prog_name="promptshelf")
@_click.option(
    "-r",
    "--root",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Corpus root (default: $PROMPTSHELF_ROOT or the current directory)",
)
@_click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@_click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@_click.pass_context
def cli(
    ctx: _click.Context,
    root: _pathlib.Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Promptshelf - catalogue and lint agent, skill and command documents.

    \b
    Examples:
        promptshelf lint                     # Lint the corpus in the current directory
        promptshelf -r ./corpus agent list   # List agents of another corpus
        promptshelf skill show api-design    # Show one skill
        promptshelf search "review my API"   # Find matching documents
        promptshelf index -o catalog.json    # Export the catalogue
    """
    overrides: dict[str, _typing.Any] = {}
    if root is not None:
        overrides["root"] = root

    try:
        settings = config.Settings(**overrides)
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid configuration:\n{e}") from e

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.logging.level
    output.setup_logging(level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# =============================================================================
# Agent Commands
# =============================================================================


@cli.group(name="agent")
def agent_group() -> None:
    """Agent document commands."""
    pass


@agent_group.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def agent_list(ctx: _click.Context, json_output: bool) -> None:
    """List all agents."""
    catalog = _get_catalog(ctx)
    agents = catalog.list_agents()

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps([a.to_dict() for a in agents], indent=2))
        return

    if not agents:
        _click.echo("No agents found.")
        return

    _click.echo(f"Agents ({len(agents)}):")
    widths = (4, 30, 8)
    _click.echo(output.format_row(["#", "Name", "Skills", "Description"], widths))
    _click.echo("-" * 80)
    for a in agents:
        skills = len(catalog.skills_for_agent(a.name))
        _click.echo(
            output.format_row(
                [str(a.ordinal or ""), a.name, str(skills), output.truncate(a.description, 40)],
                widths,
            )
        )


@agent_group.command(name="show")
@_click.argument("name")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--body", is_flag=True, help="Show full agent body")
@_click.option("--snippets", is_flag=True, help="List embedded code snippets")
@_click.pass_context
def agent_show(
    ctx: _click.Context, name: str, json_output: bool, body: bool, snippets: bool
) -> None:
    """Show details for a specific agent (by name or ordinal)."""
    catalog = _get_catalog(ctx)
    agent = catalog.get_agent(name)
    if agent is None and name.isdigit():
        agent = catalog.get_agent_by_ordinal(int(name))
    json_output = _wants_json(ctx, json_output)

    if agent is None:
        _not_found("agent", name, json_output)

    bonded = catalog.skills_for_agent(agent.name)

    if json_output:
        data = agent.to_dict()
        data["bonded_skills"] = [s.name for s in bonded]
        if body:
            data["body"] = agent.body
        if snippets:
            data["snippets"] = [
                {"language": b.language, "start_line": b.start_line, "end_line": b.end_line}
                for b in agent.code_blocks
            ]
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Agent: {agent.name}")
    _click.echo(f"  Ordinal: {agent.ordinal}")
    _click.echo(f"  Description: {agent.description or '(none)'}")
    _click.echo(f"  Path: {_relative(agent.path, catalog.root)}")
    _click.echo(f"  Body lines: {agent.body_line_count}")
    if agent.frontmatter.model:
        _click.echo(f"  Model: {agent.frontmatter.model}")
    if agent.frontmatter.tools:
        _click.echo(f"  Tools: {', '.join(agent.frontmatter.tools)}")
    inert = agent.frontmatter.inert_blocks()
    if inert:
        _click.echo(f"  Descriptive blocks: {', '.join(sorted(inert))}")

    if agent.capabilities:
        _click.echo()
        _click.echo("Capabilities:")
        for capability in agent.capabilities:
            _click.echo(f"  - {capability}")

    if agent.triggers:
        _click.echo()
        _click.echo("Triggers:")
        for trigger in agent.triggers:
            _click.echo(f"  - {trigger}")

    if bonded:
        _click.echo()
        _click.echo("Bonded skills:")
        for s in bonded:
            _click.echo(f"  - {s.name}")

    if snippets:
        _click.echo()
        _click.echo("Snippets:")
        for block in agent.code_blocks:
            language = block.language or "(none)"
            _click.echo(f"  - {language} (lines {block.start_line}-{block.end_line})")

    if body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(agent.body.strip())


# =============================================================================
# Skill Commands
# =============================================================================


@cli.group(name="skill")
def skill_group() -> None:
    """Skill document commands."""
    pass


@skill_group.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--agent", "agent_name", default=None, help="Only skills bonded to this agent")
@_click.pass_context
def skill_list(ctx: _click.Context, json_output: bool, agent_name: str | None) -> None:
    """List all skills."""
    catalog = _get_catalog(ctx)
    skills = catalog.skills_for_agent(agent_name) if agent_name else catalog.list_skills()
    limit = _get_settings(ctx).lint.body_soft_limit

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps([s.to_dict() for s in skills], indent=2))
        return

    if not skills:
        _click.echo("No skills found.")
        return

    _click.echo(f"Skills ({len(skills)}):")
    widths = (30, 25, 8)
    _click.echo(output.format_row(["Name", "Agent", "Lines", ""], widths))
    _click.echo("-" * 70)
    for s in skills:
        limit_warn = "⚠" if s.exceeds_soft_limit(limit) else ""
        _click.echo(
            output.format_row(
                [s.name, s.bonded_agent or "(none)", str(s.body_line_count), limit_warn],
                widths,
            )
        )


@skill_group.command(name="show")
@_click.argument("name")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--body", is_flag=True, help="Show full skill body")
@_click.pass_context
def skill_show(ctx: _click.Context, name: str, json_output: bool, body: bool) -> None:
    """Show details for a specific skill."""
    catalog = _get_catalog(ctx)
    skill = catalog.get_skill(name)
    json_output = _wants_json(ctx, json_output)

    if skill is None:
        _not_found("skill", name, json_output)

    if json_output:
        data = skill.to_dict()
        if body:
            data["body"] = skill.body
        _click.echo(_json.dumps(data, indent=2))
        return

    limit = _get_settings(ctx).lint.body_soft_limit
    agent = catalog.agent_for_skill(skill.name)

    _click.echo(f"Skill: {skill.name}")
    _click.echo(f"  Description: {skill.description}")
    _click.echo(f"  Path: {_relative(skill.path, catalog.root)}")
    if skill.bonded_agent:
        status = "" if agent is not None else " (not found)"
        _click.echo(f"  Bonded agent: {skill.bonded_agent}{status}")
    else:
        _click.echo("  Bonded agent: (none)")
    _click.echo(f"  Body lines: {skill.body_line_count}")
    if skill.exceeds_soft_limit(limit):
        _click.echo(f"  ⚠ Exceeds recommended limit of {limit} lines")
    if skill.frontmatter.license:
        _click.echo(f"  License: {skill.frontmatter.license}")
    if skill.frontmatter.tags:
        _click.echo(f"  Tags: {', '.join(skill.frontmatter.tags)}")

    refs = skill.list_reference_files()
    if refs:
        _click.echo()
        _click.echo("Reference files:")
        for ref in refs:
            _click.echo(f"  - {ref.name}")

    scripts = skill.list_scripts()
    if scripts:
        _click.echo()
        _click.echo("Scripts:")
        for script in scripts:
            _click.echo(f"  - {script.name}")

    if body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(skill.body.strip())


@skill_group.command(name="validate")
@_click.argument("path", type=_click.Path(exists=True, path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def skill_validate(ctx: _click.Context, path: _pathlib.Path, json_output: bool) -> None:
    """Validate a skill directory or SKILL.md file on its own."""
    settings = _get_settings(ctx)
    skill_file = path / settings.corpus.skill_file if path.is_dir() else path

    try:
        report = lint.lint_file(
            skill_file, layout=settings.layout(), config=settings.lint_config(), kind="skill"
        )
    except FileNotFoundError as e:
        report = None
        error: str | None = str(e)
    except ValueError as e:
        raise _click.ClickException(str(e)) from e
    else:
        error = None

    diagnostics = report.diagnostics if report else []
    errors = [d for d in diagnostics if d.severity >= lint.Severity.ERROR]
    result: dict[str, _typing.Any] = {
        "path": str(path),
        "valid": error is None and not errors,
        "warnings": [d.format() for d in diagnostics if d.severity < lint.Severity.ERROR],
        "error": error or ("; ".join(d.message for d in errors) if errors else None),
    }

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps(result, indent=2))
    else:
        _click.echo(f"Skill: {path}")
        if result["error"]:
            _click.echo("  Status: ✗ invalid")
            _click.echo(f"  Error: {result['error']}")
        elif result["warnings"]:
            _click.echo("  Status: ⚠ valid with warnings")
            for warning in result["warnings"]:
                _click.echo(f"  Warning: {warning}")
        else:
            _click.echo("  Status: ✓ valid")

    if not result["valid"]:
        raise SystemExit(1)


# =============================================================================
# Command Commands
# =============================================================================


@cli.group(name="command")
def command_group() -> None:
    """Slash-command document commands."""
    pass


@command_group.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def command_list(ctx: _click.Context, json_output: bool) -> None:
    """List all commands."""
    catalog = _get_catalog(ctx)
    commands = catalog.list_commands()

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps([c.to_dict() for c in commands], indent=2))
        return

    if not commands:
        _click.echo("No commands found.")
        return

    _click.echo(f"Commands ({len(commands)}):")
    widths = (25, 20)
    _click.echo(output.format_row(["Command", "Arguments", "Description"], widths))
    _click.echo("-" * 80)
    for c in commands:
        _click.echo(
            output.format_row(
                [f"/{c.name}", c.argument_hint, output.truncate(c.description, 40)],
                widths,
            )
        )


@command_group.command(name="show")
@_click.argument("name")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def command_show(ctx: _click.Context, name: str, json_output: bool) -> None:
    """Show a command and its template."""
    catalog = _get_catalog(ctx)
    command = catalog.get_command(name)
    json_output = _wants_json(ctx, json_output)

    if command is None:
        _not_found("command", name, json_output)

    if json_output:
        data = command.to_dict()
        data["body"] = command.body
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Command: /{command.name}")
    _click.echo(f"  Description: {command.description or '(none)'}")
    _click.echo(f"  Path: {_relative(command.path, catalog.root)}")
    if command.argument_hint:
        _click.echo(f"  Arguments: {command.argument_hint}")
    if command.aliases:
        _click.echo(f"  Aliases: {', '.join('/' + a for a in command.aliases)}")
    if command.frontmatter.allowed_tools:
        _click.echo(f"  Allowed tools: {', '.join(command.frontmatter.allowed_tools)}")
    _click.echo()
    _click.echo("--- Template ---")
    _click.echo(command.body.strip())


@command_group.command(name="render")
@_click.argument("name")
@_click.argument("arguments", nargs=-1)
@_click.option(
    "--var",
    "variables",
    multiple=True,
    metavar="KEY=VALUE",
    help="Extra {{KEY}} template variable (repeatable)",
)
@_click.pass_context
def command_render(
    ctx: _click.Context,
    name: str,
    arguments: tuple[str, ...],
    variables: tuple[str, ...],
) -> None:
    """Print a command's template with ARGUMENTS filled in."""
    catalog = _get_catalog(ctx)
    command = catalog.get_command(name)
    if command is None:
        _not_found("command", name, False)

    context: dict[str, str] = {}
    for item in variables:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise _click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--var")
        context[key] = value

    _click.echo(command.render(" ".join(arguments), **context))


# =============================================================================
# Corpus-wide Commands
# =============================================================================


@cli.command(name="search")
@_click.argument("query")
@_click.option(
    "--kind",
    type=_click.Choice(list(catalog_module.KINDS)),
    default=None,
    help="Only search one document kind",
)
@_click.option("--limit", type=int, default=10, show_default=True, help="Maximum results")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def search(
    ctx: _click.Context, query: str, kind: str | None, limit: int, json_output: bool
) -> None:
    """Find documents matching QUERY."""
    catalog = _get_catalog(ctx)
    matches = catalog.search(query, kind=kind, max_results=limit)

    if _wants_json(ctx, json_output):
        data = [
            {"kind": doc.kind, "name": doc.name, "score": score, "path": str(doc.path)}
            for doc, score in matches
        ]
        _click.echo(_json.dumps(data, indent=2))
        return

    if not matches:
        _click.echo("No matches.")
        return

    widths = (8, 30, 6)
    _click.echo(output.format_row(["Kind", "Name", "Score", "Description"], widths))
    _click.echo("-" * 80)
    for doc, score in matches:
        _click.echo(
            output.format_row(
                [doc.kind, doc.name, str(score), output.truncate(doc.description, 40)],
                widths,
            )
        )


@cli.command(name="refs")
@_click.option("--broken", is_flag=True, help="Only show references that don't resolve")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def refs(ctx: _click.Context, broken: bool, json_output: bool) -> None:
    """List cross-references between documents."""
    catalog = _get_catalog(ctx)
    found = (
        references.broken_references(catalog)
        if broken
        else references.collect_references(catalog)
    )

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps([r.to_dict() for r in found], indent=2))
        return

    if not found:
        _click.echo("No broken references." if broken else "No references found.")
        return

    for ref in found:
        source = _relative(ref.source, catalog.root)
        location = f"{source}:{ref.line}" if ref.line is not None else source
        target = _relative(ref.resolved, catalog.root) if ref.resolved else "✗ unresolved"
        _click.echo(f"{location} [{ref.kind}] {ref.target} -> {target}")


@cli.command(name="lint")
@_click.argument(
    "paths",
    nargs=-1,
    type=_click.Path(exists=True, path_type=_pathlib.Path),
)
@_click.option("--fail-on", type=_SEVERITY_CHOICE, default=None, help="Lowest failing severity")
@_click.option("--disable", "disabled", multiple=True, metavar="CODE", help="Disable a rule (repeatable)")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--color/--no-color", "use_color", default=None, help="Force or disable colour")
@_click.pass_context
def lint_cmd(
    ctx: _click.Context,
    paths: tuple[_pathlib.Path, ...],
    fail_on: str | None,
    disabled: tuple[str, ...],
    json_output: bool,
    use_color: bool | None,
) -> None:
    """Lint the corpus, or only the given PATHS within it.

    Exits with status 1 when any diagnostic is at or above the --fail-on
    severity (default from config: error).
    """
    settings = _get_settings(ctx)
    catalog = _get_catalog(ctx)

    try:
        lint_config = settings.lint_config()
        if disabled:
            lint_config = lint.LintConfig(
                disabled=lint_config.disabled | frozenset(disabled),
                severity_overrides=lint_config.severity_overrides,
                fail_on=lint_config.fail_on,
                body_soft_limit=lint_config.body_soft_limit,
                require_bond=lint_config.require_bond,
            )
    except ValueError as e:
        raise _click.ClickException(str(e)) from e

    threshold = lint.Severity(fail_on.lower()) if fail_on else lint_config.fail_on
    report = lint.Linter(catalog, lint_config).run()
    if paths:
        report = report.filter_paths(paths)

    if _wants_json(ctx, json_output):
        data = report.to_dict()
        data["fail_on"] = threshold.value
        data["passed"] = not report.has_failures(threshold)
        _click.echo(_json.dumps(data, indent=2))
    else:
        color, force = output.should_use_color(use_color, settings.output.color)
        output.print_lint_report(report, color=color, force_color=force)

    ctx.exit(report.exit_code(threshold))


@cli.command(name="rules")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def rules_cmd(ctx: _click.Context, json_output: bool) -> None:
    """List lint rules and their default severities."""
    all_rules = lint.list_rules()
    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps([r.to_dict() for r in all_rules], indent=2))
        return
    widths = (10, 9)
    _click.echo(output.format_row(["Code", "Severity", "Description"], widths))
    _click.echo("-" * 70)
    for rule in all_rules:
        _click.echo(output.format_row([rule.code, rule.severity.value, rule.description], widths))


@cli.command(name="index")
@_click.option(
    "-o",
    "--output",
    "output_path",
    type=_click.Path(dir_okay=False, writable=True, path_type=_pathlib.Path),
    default=None,
    help="Write to a file instead of stdout",
)
@_click.pass_context
def index(ctx: _click.Context, output_path: _pathlib.Path | None) -> None:
    """Export the whole catalogue as JSON."""
    catalog = _get_catalog(ctx)
    data = catalog.to_dict()
    data["version"] = promptshelf.__version__
    data["stats"] = catalog.stats()
    text = _json.dumps(data, indent=2)

    if output_path is None:
        _click.echo(text)
        return

    output_path.write_text(text + "\n", encoding="utf-8")
    _click.echo(f"Wrote catalogue to {output_path}", err=True)


@cli.command(name="stats")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def stats(ctx: _click.Context, json_output: bool) -> None:
    """Summarise the corpus."""
    catalog = _get_catalog(ctx)
    data = catalog.stats()

    if _wants_json(ctx, json_output):
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Corpus: {data['root']}")
    _click.echo(f"  Agents: {data['agents']}")
    _click.echo(
        f"  Skills: {data['skills']} "
        f"({data['bonded_skills']} bonded, {data['unbonded_skills']} unbonded)"
    )
    _click.echo(f"  Commands: {data['commands']}")
    _click.echo(f"  Guides: {data['guides']}")
    _click.echo(f"  Body lines: {data['body_lines']}")
    if data["failures"]:
        _click.echo(f"  ✗ Failed to load: {data['failures']}")
    if data["code_blocks"]:
        _click.echo()
        _click.echo("Code blocks by language:")
        for language, count in data["code_blocks"].items():
            _click.echo(f"  {language:<20} {count}")


# =============================================================================
# Config Commands
# =============================================================================


@_click.group(invoke_without_command=True)
@_click.pass_context
def config_cmd(ctx: _click.Context) -> None:
    """Configuration commands.

    Without a subcommand, shows a configuration overview.
    """
    if ctx.invoked_subcommand is None:
        settings = _get_settings(ctx)
        _click.echo("Promptshelf Configuration:")
        _click.echo(f"  Corpus Root: {settings.corpus_root}")
        _click.echo(f"  Agents Dir: {settings.corpus.agents_dir}")
        _click.echo(f"  Skills Dir: {settings.corpus.skills_dir}")
        _click.echo(f"  Commands Dir: {settings.corpus.commands_dir}")
        _click.echo(f"  Fail On: {settings.lint.fail_on}")
        _click.echo("  Config Files:")
        for layer, path in settings.config_layers():
            _click.echo(f"    {layer}: {path}")
        extras = settings.collect_extra_fields()
        if extras:
            _click.echo("  ⚠ Unknown keys: " + ", ".join(sorted(extras)))
        _click.echo("\nRun 'promptshelf config show' for full configuration details.")


# Register config_cmd with the name "config" to avoid shadowing the module
cli.add_command(config_cmd, name="config")


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--section", type=str, default=None, help="Show specific section only")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
@_click.pass_context
def config_show(
    ctx: _click.Context,
    as_json: bool,
    section: str | None,
    use_color: bool | None,
) -> None:
    """Show effective configuration from all sources."""
    import yaml as _yaml

    settings = _get_settings(ctx)
    full_config = settings.model_dump(mode="json")

    if section:
        if section not in full_config:
            raise _click.ClickException(f"Unknown section: {section}")
        full_config = {section: full_config[section]}

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
        return

    color, force = output.should_use_color(use_color, settings.output.color)
    yaml_text = _yaml.safe_dump(full_config, default_flow_style=False, sort_keys=False)
    output.print_yaml(yaml_text, color=color, force_color=force)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="promptshelf")


if __name__ == "__main__":
    main()
