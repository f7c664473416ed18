# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Instance materializer: compiled artifact -> lazy sequence of instances.

`load_artifact` executes an artifact's image in a private module that is never
registered in `sys.modules`, so two loads never share state and a unit lives
exactly as long as something references one of its classes. `materialize`
walks the declared types in metadata order and default-constructs every one
that can be: enumerations, interfaces, abstract, static and open generic types
and types without a public parameterless constructor are skipped.
"""

from __future__ import annotations

import logging
import types
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from . import runtime
from .compiler.artifact import CompiledArtifact
from .errors import ConstructionError
from .references import ReferenceSet, default_references

logger = logging.getLogger(__name__)

# Qualified name of the direct base every compiled enumeration has.
ENUM_BASE = "enum.IntEnum"
UNIT_MODULE_PREFIX = "csharp2json.units."


def qualified_name(cls: type) -> str:
	return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True)
class DeclaredType:
	"""What reflection over one loaded class reports."""

	full_name: str
	base_type_name: Optional[str]
	kind: str
	is_abstract: bool = False
	is_static: bool = False
	is_generic: bool = False
	# CLR parameter type names of each public constructor.
	constructors: tuple[tuple[str, ...], ...] = ()

	@property
	def is_enum(self) -> bool:
		return self.base_type_name == ENUM_BASE

	@property
	def has_default_constructor(self) -> bool:
		if self.is_enum or self.kind == "interface":
			return False
		if self.is_abstract or self.is_static or self.is_generic:
			return False
		return () in self.constructors


def describe(cls: type) -> DeclaredType:
	kind = getattr(cls, "__cs_kind__", "class")
	base = cls.__bases__[0] if cls.__bases__ else None
	if base is None or kind == "interface":
		base_name = None
	elif issubclass(cls, runtime.IntEnum):
		base_name = qualified_name(base)
	else:
		base_name = getattr(base, "__cs_name__", None) or qualified_name(base)
	return DeclaredType(
		full_name=getattr(cls, "__cs_name__", None) or qualified_name(cls),
		base_type_name=base_name,
		kind=kind,
		is_abstract=bool(vars(cls).get("__cs_abstract__", False)),
		is_static=bool(vars(cls).get("__cs_static__", False)),
		is_generic=bool(vars(cls).get("__cs_generic__", False)),
		constructors=tuple(vars(cls).get("__cs_constructors__", ())),
	)


def _run_static_initializers(module: types.ModuleType) -> None:
	classes = module.__cs_types__
	for cls in classes:
		zero = vars(cls).get("__cs_zero_statics__")
		if zero is not None:
			zero.__func__()
	for cls in classes:
		cctor = vars(cls).get("__cs_cctor__")
		if cctor is None:
			continue
		try:
			cctor.__func__()
		except Exception as err:
			raise ConstructionError(cls.__cs_name__, err) from err


def load_artifact(artifact: CompiledArtifact, references: Optional[ReferenceSet] = None) -> types.ModuleType:
	"""
	Execute `artifact` in a fresh, unregistered module and run its static
	initializers. Raises `ConstructionError` when a static initializer throws.
	"""
	refs = references if references is not None else default_references()
	missing = [name for name in artifact.references if name not in refs.index]
	if missing:
		raise ValueError(f"artifact {artifact.name!r} needs reference types not in the reference set: {', '.join(missing)}")
	module = types.ModuleType(UNIT_MODULE_PREFIX + artifact.name)
	module.__dict__["_rt"] = runtime
	module.__dict__["_refs"] = {name: refs.get(name) for name in artifact.references}
	exec(artifact.code(), module.__dict__)
	logger.debug("loaded unit %r (%s)", artifact.name, artifact.digest[:12])
	_run_static_initializers(module)
	return module


def declared_classes(module: types.ModuleType) -> tuple[type, ...]:
	return tuple(module.__cs_types__)


def materialize(artifact: CompiledArtifact, references: Optional[ReferenceSet] = None) -> Iterator[Any]:
	"""
	Lazily yield one default-constructed instance per constructible type.

	Nothing is loaded until the first `next()`. A constructor that raises ends
	the sequence with `ConstructionError`; instances yielded before stay valid.
	"""
	module = load_artifact(artifact, references)
	for cls in declared_classes(module):
		info = describe(cls)
		if info.is_enum:
			continue
		if not info.has_default_constructor:
			logger.debug("skipping %s: no public parameterless constructor", info.full_name)
			continue
		try:
			instance = cls()
		except Exception as err:
			raise ConstructionError(info.full_name, err) from err
		yield instance


__all__ = [
	"DeclaredType",
	"ENUM_BASE",
	"declared_classes",
	"describe",
	"load_artifact",
	"materialize",
]
