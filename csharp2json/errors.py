# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error kinds that cross the pipeline boundary.

Exactly three are raised to callers: `ParseError` (malformed source),
`CompileError` (semantic failure, carries every diagnostic) and
`ConstructionError` (a default constructor exists but raised). All of them are
`CSharp2JsonError`s with a stable `reason_code` for tooling.
"""

from __future__ import annotations

from typing import Any, Sequence

from .core.diagnostics import Diagnostic


class CSharp2JsonError(Exception):
	"""Base class for structured, serializable pipeline errors."""

	reason_code = "error"

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def to_dict(self) -> dict[str, Any]:
		return {"reason_code": self.reason_code, "message": self.message}

	def format_human(self) -> str:
		return f"[{self.reason_code}] {self.message}"


class _DiagnosticsError(CSharp2JsonError):
	def __init__(self, message: str, diagnostics: Sequence[Diagnostic]) -> None:
		super().__init__(message)
		self.diagnostics: list[Diagnostic] = list(diagnostics)

	@property
	def errors(self) -> list[Diagnostic]:
		return [d for d in self.diagnostics if d.is_error]

	def to_dict(self) -> dict[str, Any]:
		payload = super().to_dict()
		payload["diagnostics"] = [d.to_dict() for d in self.diagnostics]
		return payload

	def format_human(self) -> str:
		lines = [super().format_human()]
		lines.extend(d.format_human() for d in self.diagnostics)
		return "\n".join(lines)


class ParseError(_DiagnosticsError):
	"""The source text does not parse; raised before anything is compiled."""

	reason_code = "parse"

	def __str__(self) -> str:
		if self.diagnostics:
			return self.diagnostics[0].format_human()
		return self.message


class CompileError(_DiagnosticsError):
	"""Compilation failed; no artifact (and therefore no type) is usable."""

	reason_code = "compile"

	def __str__(self) -> str:
		errors = self.errors
		head = f"{self.message} ({len(errors)} error(s))"
		if errors:
			return f"{head}: {errors[0].format_human()}"
		return head


class ConstructionError(CSharp2JsonError):
	"""
	A declared type's default constructor (or its static initializer) raised.

	This is never used for types that simply lack a public parameterless
	constructor; those are skipped.
	"""

	reason_code = "construction"

	def __init__(self, type_name: str, cause: BaseException) -> None:
		super().__init__(f"constructing '{type_name}' failed: {type(cause).__name__}: {cause}")
		self.type_name = type_name
		self.cause = cause

	def to_dict(self) -> dict[str, Any]:
		payload = super().to_dict()
		payload["type_name"] = self.type_name
		payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
		return payload


__all__ = [
	"CSharp2JsonError",
	"ParseError",
	"CompileError",
	"ConstructionError",
]
