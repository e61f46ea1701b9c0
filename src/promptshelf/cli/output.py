"""
Terminal output helpers for the CLI.

Colour decisions, rich rendering of lint reports and config YAML, and the
log handler the CLI installs. Library modules never touch any of this.
"""

import logging as _logging
import os as _os
import sys as _sys
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.syntax as _rich_syntax
import rich.text as _rich_text

import promptshelf.lint as lint

_SEVERITY_STYLES = {
    lint.Severity.ERROR: "bold red",
    lint.Severity.WARNING: "yellow",
    lint.Severity.INFO: "cyan",
}

_HANDLER_MARKER = "_promptshelf_cli_handler"


def should_use_color(cli_flag: bool | None, configured: bool | None = None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. output.color from config
    3. NO_COLOR env var (if set, disable color) - standard convention
    4. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
        force_color is True when color was explicitly requested.
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)

    if configured is not None:
        return (configured, configured)

    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)

    return (_sys.stdout.isatty(), False)


def make_console(*, color: bool, force_color: bool = False, stderr: bool = False) -> _rich_console.Console:
    """Console honouring the colour decision, even when output is piped."""
    if not color:
        return _rich_console.Console(no_color=True, highlight=False, stderr=stderr, color_system=None)
    return _rich_console.Console(
        force_terminal=force_color or None,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
        highlight=False,
        stderr=stderr,
    )


def setup_logging(level: str | int) -> None:
    """
    Route promptshelf log records to stderr through rich.

    Replaces any handler a previous call installed, so repeated CLI
    invocations in one process don't duplicate output.
    """
    logger = _logging.getLogger("promptshelf")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)

    handler = _rich_logging.RichHandler(
        console=_rich_console.Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if not color:
        _click.echo(yaml_text)
        return
    console = make_console(color=True, force_color=force_color)
    console.print(
        _rich_syntax.Syntax(yaml_text, "yaml", theme="monokai", background_color="default")
    )


def print_lint_report(
    report: lint.LintReport,
    *,
    color: bool = True,
    force_color: bool = False,
) -> None:
    """Print diagnostics grouped by file, then a summary line."""
    console = make_console(color=color, force_color=force_color)

    for diagnostic in report.diagnostics:
        line = _rich_text.Text()
        path = diagnostic.path
        if report.root is not None:
            try:
                path = diagnostic.path.relative_to(report.root)
            except ValueError:
                pass
        location = f"{path}:{diagnostic.line}" if diagnostic.line is not None else str(path)
        line.append(location, style="bold")
        line.append(": ")
        line.append(diagnostic.severity.value, style=_SEVERITY_STYLES[diagnostic.severity])
        line.append(f" {diagnostic.code} ", style="dim")
        line.append(diagnostic.message)
        console.print(line, soft_wrap=True)

    counts = report.counts()
    summary = _rich_text.Text()
    if report.diagnostics:
        summary.append("\n")
    summary.append(f"{report.files_checked} file(s) checked: ")
    summary.append(f"{counts['error']} error(s)", style=_SEVERITY_STYLES[lint.Severity.ERROR])
    summary.append(", ")
    summary.append(f"{counts['warning']} warning(s)", style=_SEVERITY_STYLES[lint.Severity.WARNING])
    summary.append(", ")
    summary.append(f"{counts['info']} info", style=_SEVERITY_STYLES[lint.Severity.INFO])
    console.print(summary, soft_wrap=True)


def truncate(text: str, width: int) -> str:
    """Single-line text cut to ``width`` characters."""
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: max(width - 1, 0)] + "…"


def format_row(values: _typing.Sequence[str], widths: _typing.Sequence[int]) -> str:
    """Left-aligned columns; the last column is not padded."""
    cells = [f"{value:<{width}}" for value, width in zip(values[:-1], widths)]
    return " ".join([*cells, values[-1]]).rstrip()
