# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source normalization: make sure the required `using` directives are present.

Existing top-level directives are the source of truth. A required namespace
counts as present when some directive names it exactly (aliases compare their
target). Missing ones are inserted, in `REQUIRED_USINGS` order, right after the
last top-level directive, or at the very start when there is none. Nothing
else in the text changes, so the output parses whenever the input does.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .config import REQUIRED_USINGS
from .parser import parse_source
from .parser.ast import CompilationUnit, UsingDirective

logger = logging.getLogger(__name__)


def missing_usings(unit: CompilationUnit, required: Iterable[str] = REQUIRED_USINGS) -> list[str]:
	"""Required namespaces with no matching top-level directive, in order."""
	present = {u.name for u in unit.usings}
	missing: list[str] = []
	for name in required:
		if name not in present and name not in missing:
			missing.append(name)
	return missing


def _insertion_point(source: str, usings: Sequence[UsingDirective]) -> Optional[int]:
	if not usings:
		return None
	last = max(usings, key=lambda u: u.loc.end_pos or 0)
	end = last.loc.end_pos
	if end is None or end == 0 or source[end - 1] != ";":
		# Fall back to scanning for the terminator after the directive start.
		end = source.index(";", last.loc.start_pos or 0) + 1
	return end


def normalize(
	source: str,
	required: Iterable[str] = REQUIRED_USINGS,
	*,
	file: Optional[str] = None,
) -> str:
	"""
	Return `source` with every `required` namespace imported exactly once.

	Raises `ParseError` if the text does not parse. Idempotent.
	"""
	unit = parse_source(source, file=file)
	missing = missing_usings(unit, required)
	if not missing:
		return source
	logger.debug("adding using directives: %s", ", ".join(missing))
	point = _insertion_point(source, unit.usings)
	if point is None:
		block = "".join(f"using {name};\n" for name in missing)
		return block + source
	block = "".join(f"\nusing {name};" for name in missing)
	return source[:point] + block + source[point:]


__all__ = ["missing_usings", "normalize"]
