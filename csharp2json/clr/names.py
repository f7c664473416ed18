# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
C# identifier -> Python identifier mapping.

Shared by the emitter (attribute and local names it writes) and the runtime
(names it looks up dynamically), so both sides always agree. Identifiers that
start with `_` get a `_cs` prefix; generated helpers and runtime internals
never use that prefix, so user names cannot collide with them.
"""

from __future__ import annotations

import keyword

_RESERVED = frozenset(keyword.kwlist) | {"self"}
# Attributes `enum.Enum` members cannot be called.
_ENUM_RESERVED = frozenset({"name", "value", "mro"})


def py_ident(name: str) -> str:
	if name.startswith("_"):
		name = "_cs" + name
	if name in _RESERVED:
		name += "_"
	return name


def py_enum_ident(name: str) -> str:
	ident = py_ident(name)
	if ident in _ENUM_RESERVED:
		ident += "_"
	if ident.startswith("_") and ident.endswith("_"):
		# `_sunder_` names are reserved by the enum machinery.
		ident += "cs"
	return ident


__all__ = ["py_enum_ident", "py_ident"]
