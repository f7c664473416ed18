# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""In-memory compilation artifacts."""

from __future__ import annotations

import hashlib
import marshal
from dataclasses import dataclass, field
from types import CodeType
from typing import List, Optional

from ..core.diagnostics import Diagnostic


@dataclass(frozen=True)
class CompiledArtifact:
	"""
	One successfully compiled unit.

	`image` is the marshalled code object of the generated module. It is only
	ever held in memory; `digest` identifies it in logs.
	"""

	name: str
	image: bytes
	declared_types: tuple[str, ...]
	references: tuple[str, ...]
	diagnostics: tuple[Diagnostic, ...] = ()
	python_source: str = ""
	digest: str = ""

	@classmethod
	def build(
		cls,
		name: str,
		code: CodeType,
		*,
		declared_types: tuple[str, ...],
		references: tuple[str, ...],
		diagnostics: tuple[Diagnostic, ...] = (),
		python_source: str = "",
	) -> "CompiledArtifact":
		image = marshal.dumps(code)
		return cls(
			name=name,
			image=image,
			declared_types=declared_types,
			references=references,
			diagnostics=diagnostics,
			python_source=python_source,
			digest=hashlib.sha256(image).hexdigest(),
		)

	def code(self) -> CodeType:
		return marshal.loads(self.image)


@dataclass
class EmitResult:
	"""Outcome of `emit`: an artifact exactly when `success`."""

	success: bool
	artifact: Optional[CompiledArtifact] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def errors(self) -> List[Diagnostic]:
		return [d for d in self.diagnostics if d.is_error]


__all__ = ["CompiledArtifact", "EmitResult"]
