"""
csharp2json.compiler: C# source -> in-memory compiled unit.

`emit` runs parse, bind, lower and Python compilation and reports the outcome
as an `EmitResult`; `compile_source` raises `CompileError` instead of
returning a failed result.

Modules:
  - symbols: symbol tables and bound types
  - constants: constant folding and implicit constant conversions
  - binder: declarations, name resolution and semantic diagnostics
  - lower: member bodies -> Python statements
  - emitter: bound unit -> Python module text
  - artifact: CompiledArtifact / EmitResult
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import DEFAULT_UNIT_NAME
from ..core.diagnostics import Diagnostic
from ..core.span import Span
from ..errors import CompileError
from ..parser import parse_source
from ..references import ReferenceSet, default_references
from .artifact import CompiledArtifact, EmitResult
from .binder import bind
from .emitter import emit_module

logger = logging.getLogger(__name__)


def emit(
	source: str,
	references: Optional[ReferenceSet] = None,
	*,
	unit_name: str = DEFAULT_UNIT_NAME,
	warnings_as_errors: bool = False,
	file: Optional[str] = None,
) -> EmitResult:
	"""
	Compile `source` against `references`.

	Raises `ParseError` for malformed text; every semantic problem is reported
	through the result instead. An artifact is built only when no error
	diagnostic was produced.
	"""
	refs = references if references is not None else default_references()
	unit = parse_source(source, file=file)
	bound = bind(unit, refs, file=file, warnings_as_errors=warnings_as_errors)
	# Bodies are lowered even after binder errors.
	module = emit_module(bound, unit_name)
	if bound.binder.bag.has_errors:
		return EmitResult(False, None, bound.diagnostics)
	text = module.render()
	diagnostics = bound.diagnostics
	try:
		code = compile(text, f"<csharp2json:{unit_name}>", "exec")
	except SyntaxError as err:
		logger.error("generated module for %r does not compile: %s", unit_name, err)
		diag = Diagnostic(
			message=f"generated code failed to compile: {err.msg}",
			phase="emit",
			span=Span(file=f"<csharp2json:{unit_name}>", line=err.lineno, column=err.offset),
		)
		return EmitResult(False, None, diagnostics + [diag])
	artifact = CompiledArtifact.build(
		unit_name,
		code,
		declared_types=tuple(sym.full_name for sym in bound.types),
		references=module.references,
		diagnostics=tuple(diagnostics),
		python_source=text,
	)
	logger.debug("compiled %r: %d type(s), digest %s", unit_name, len(artifact.declared_types), artifact.digest[:12])
	return EmitResult(True, artifact, diagnostics)


def compile_source(
	source: str,
	references: Optional[ReferenceSet] = None,
	*,
	unit_name: str = DEFAULT_UNIT_NAME,
	warnings_as_errors: bool = False,
	file: Optional[str] = None,
) -> CompiledArtifact:
	"""Like `emit`, but raise `CompileError` carrying every diagnostic on failure."""
	result = emit(source, references, unit_name=unit_name, warnings_as_errors=warnings_as_errors, file=file)
	if not result.success:
		raise CompileError("compilation failed", result.diagnostics)
	return result.artifact


__all__ = ["CompiledArtifact", "EmitResult", "compile_source", "emit"]
