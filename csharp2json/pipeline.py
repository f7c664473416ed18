# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Normalize -> compile -> materialize, as one call.

Parsing and compilation happen eagerly, so `ParseError` and `CompileError`
surface from `compile_classes` itself; instances are produced lazily.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from .compiler import compile_source
from .compiler.artifact import CompiledArtifact
from .config import CompileOptions
from .materialize import materialize
from .normalize import normalize
from .references import ReferenceSet, default_references

logger = logging.getLogger(__name__)


def compile_artifact(
	source: str,
	options: Optional[CompileOptions] = None,
	*,
	references: Optional[ReferenceSet] = None,
	file: Optional[str] = None,
) -> CompiledArtifact:
	opts = options or CompileOptions()
	refs = references if references is not None else default_references()
	text = normalize(source, opts.required_usings, file=file) if opts.normalize_usings else source
	artifact = compile_source(
		text,
		refs,
		unit_name=opts.unit_name,
		warnings_as_errors=opts.warnings_as_errors,
		file=file,
	)
	for diag in artifact.diagnostics:
		logger.warning("%s", diag.format_human())
	return artifact


def compile_classes(
	source: str,
	options: Optional[CompileOptions] = None,
	*,
	references: Optional[ReferenceSet] = None,
	file: Optional[str] = None,
) -> Iterator[Any]:
	"""
	Compile the C# type definitions in `source` and return a lazy iterator of
	default instances of its non-enum types.
	"""
	refs = references if references is not None else default_references()
	artifact = compile_artifact(source, options, references=refs, file=file)
	return materialize(artifact, refs)


__all__ = ["compile_artifact", "compile_classes"]
