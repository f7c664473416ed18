# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation used by diagnostics and AST nodes.

Lines and columns are 1-based (lark's convention). Offsets are 0-based indices
into the source text and are only populated when the parser knows them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""A best-effort source location (line/column plus optional offsets)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	start_pos: Optional[int] = None
	end_pos: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark Token, a tree `meta`, or another Span.

		Empty lark metas (rules that matched nothing) carry no position
		attributes, so every field is read with a default.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if file is not None and loc.file is None:
				return cls(
					file=file,
					line=loc.line,
					column=loc.column,
					end_line=loc.end_line,
					end_column=loc.end_column,
					start_pos=loc.start_pos,
					end_pos=loc.end_pos,
				)
			return loc
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			start_pos=getattr(loc, "start_pos", None),
			end_pos=getattr(loc, "end_pos", None),
		)

	def short(self) -> str:
		"""Format as `file:line:column` with `?` for unknown parts."""
		f = self.file or "<source>"
		line = self.line if self.line is not None else "?"
		col = self.column if self.column is not None else "?"
		return f"{f}:{line}:{col}"


__all__ = ["Span"]
