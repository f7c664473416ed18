# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser adapter: source text -> `parser.ast.CompilationUnit`.

lark failures and builder-level syntax errors are converted into a single
parser-phase `Diagnostic` and raised as `ParseError`.
"""

from __future__ import annotations

from typing import Optional

from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from . import ast as parser_ast
from . import parser as _parser
from ..core.diagnostics import Diagnostic
from ..core.span import Span
from ..errors import ParseError


def _describe_unexpected(err: UnexpectedInput) -> tuple[str, list[str]]:
	notes: list[str] = []
	if isinstance(err, UnexpectedToken):
		tok = err.token
		if tok.type == "$END":
			message = "unexpected end of input"
		else:
			message = f"unexpected '{tok}'"
		expected = sorted(err.accepts or err.expected or ())
		if expected:
			notes.append("expected one of: " + ", ".join(expected))
		return message, notes
	if isinstance(err, UnexpectedCharacters):
		return f"unexpected character {err.char!r}", notes
	if isinstance(err, UnexpectedEOF):
		return "unexpected end of input", notes
	return str(err), notes


def parse_source(source: str, *, file: Optional[str] = None) -> parser_ast.CompilationUnit:
	"""Parse C# source; raise `ParseError` with one diagnostic on failure."""
	try:
		return _parser.parse_compilation_unit(source)
	except UnexpectedInput as err:
		message, notes = _describe_unexpected(err)
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			start_pos=getattr(err, "pos_in_stream", None),
		)
		diag = Diagnostic(message=message, phase="parser", severity="error", span=span, notes=notes)
		raise ParseError("syntax error", [diag]) from err
	except _parser.SourceSyntaxError as err:
		diag = Diagnostic(message=str(err), code=err.code, phase="parser", severity="error", span=Span.from_loc(err.loc, file=file))
		raise ParseError("syntax error", [diag]) from err


__all__ = ["parse_source", "parser_ast"]
