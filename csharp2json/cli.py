# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`csharp2json` command line: C# type definitions in, sample JSON out.

Exit codes: 0 success, 1 the source did not parse or compile (or the
CSHARP2JSON_* settings are invalid), 2 a type's
constructor (or static initializer) threw, or an instance could not be
serialized.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import CompileOptions, log_level_from_env
from .core.diagnostics import Diagnostic
from .errors import CompileError, ConstructionError, ParseError
from .materialize import materialize
from .pipeline import compile_artifact
from .serialize import SerializationError, by_type_name, to_jsonable

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="csharp2json",
		description="Compile C# class definitions and print a default instance of each as JSON",
	)
	parser.add_argument("source", type=Path, nargs="?", help="C# source file (default: read stdin)")
	parser.add_argument("--array", action="store_true", help="Print a JSON array instead of an object keyed by type name")
	parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
	parser.add_argument("--no-normalize", action="store_true", help="Do not add the standard using directives")
	parser.add_argument("--warnings-as-errors", action="store_true", help="Treat compiler warnings as errors")
	parser.add_argument("--unit-name", default=None, help="Name of the compiled unit")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON on stdout")
	parser.add_argument("--emit-python", action="store_true", help="Print the generated Python module and exit")
	parser.add_argument(
		"--log-level",
		default=None,
		help="Logging level (default: $CSHARP2JSON_LOG_LEVEL or WARNING)",
	)
	return parser


def _report(diagnostics: Sequence[Diagnostic], exit_code: int, as_json: bool) -> int:
	if as_json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": [d.to_dict() for d in diagnostics]}))
	else:
		for d in diagnostics:
			print(d.format_human(), file=sys.stderr)
			for note in d.notes:
				print(f"  note: {note}", file=sys.stderr)
	return exit_code


def _runtime_failure(err: Exception, as_json: bool) -> int:
	if as_json:
		payload = {"exit_code": 2, "error": err.to_dict()}
		print(json.dumps(payload))
	else:
		print(f"error: {err}", file=sys.stderr)
	return 2


def main(argv: Optional[list[str]] = None) -> int:
	args = _build_parser().parse_args(argv)
	logging.basicConfig(
		level=(args.log_level or log_level_from_env()).upper(),
		format="%(levelname)s %(name)s: %(message)s",
	)

	if args.source is None:
		source = sys.stdin.read()
		file = "<stdin>"
	else:
		try:
			source = args.source.read_text(encoding="utf-8")
		except OSError as err:
			print(f"{args.source}: error: {err.strerror or err}", file=sys.stderr)
			return 1
		file = str(args.source)

	try:
		options = CompileOptions.from_env()
	except ValueError as err:
		print(f"error: {err}", file=sys.stderr)
		return 1
	overrides = {}
	if args.no_normalize:
		overrides["normalize_usings"] = False
	if args.warnings_as_errors:
		overrides["warnings_as_errors"] = True
	if args.unit_name:
		overrides["unit_name"] = args.unit_name
	options = dataclasses.replace(options, **overrides)

	try:
		artifact = compile_artifact(source, options, file=file)
	except (ParseError, CompileError) as err:
		return _report(err.diagnostics, 1, args.json)

	if artifact.diagnostics and not args.json:
		_report(artifact.diagnostics, 0, False)
	if args.emit_python:
		sys.stdout.write(artifact.python_source)
		return 0

	try:
		instances = materialize(artifact)
		data = [to_jsonable(i) for i in instances] if args.array else by_type_name(instances)
	except (ConstructionError, SerializationError) as err:
		return _runtime_failure(err, args.json)

	print(json.dumps(data, indent=args.indent, ensure_ascii=False))
	return 0


__all__ = ["main"]
