# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic records produced by the parser and the compiler frontend.

Codes follow the C# compiler's numbering (`CS0246`, ...) where a C# compiler
would report the same condition, so users can look them up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .span import Span

ERROR = "error"
WARNING = "warning"


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Pipeline phase that produced the diagnostic ("parser", "binder", "emit").
	phase: str | None = None
	severity: str = ERROR
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == ERROR

	def format_human(self) -> str:
		"""Render as `file:line:col: severity CSxxxx: message`."""
		label = f"{self.severity} {self.code}" if self.code else self.severity
		return f"{self.span.short()}: {label}: {self.message}"

	def to_dict(self) -> dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.is_error for d in diagnostics)


__all__ = ["Diagnostic", "ERROR", "WARNING", "has_errors"]
