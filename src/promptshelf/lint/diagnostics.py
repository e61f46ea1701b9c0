"""Lint diagnostics and severities."""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import pathlib as _pathlib
import typing as _typing


class Severity(str, _enum.Enum):
    """Diagnostic severity, comparable by importance."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_RANKS = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


@_dataclasses.dataclass(frozen=True)
class Diagnostic:
    """A single lint finding."""

    code: str
    severity: Severity
    message: str
    path: _pathlib.Path
    line: int | None = None

    def sort_key(self) -> tuple[str, int, str]:
        return (str(self.path), self.line or 0, self.code)

    def format(self, root: _pathlib.Path | None = None) -> str:
        """Render as ``path:line: severity CODE message``."""
        path = self.path
        if root is not None:
            try:
                path = self.path.relative_to(root)
            except ValueError:
                pass
        location = f"{path}:{self.line}" if self.line is not None else str(path)
        return f"{location}: {self.severity.value} {self.code} {self.message}"

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "path": str(self.path),
            "line": self.line,
        }
