# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The `_rt` namespace every compiled unit is executed against.

Generated code only ever names runtime helpers as `_rt.<name>`, so this module
is the complete surface the emitter may target. Keep it in sync with
`compiler.lower`.
"""

from __future__ import annotations

import math
from decimal import Decimal

from .clr.exceptions import as_exception
from .clr.members import (
	base_call,
	base_get,
	base_set,
	call_member,
	get_item,
	get_member,
	initialize,
	set_item,
	set_member,
	to_decimal,
	to_double,
	to_enum,
	update_item,
	update_member,
)
from .clr.object import (
	AutoProperty,
	CsInterface,
	CsObject,
	CsType,
	CsValueType,
	IntEnum,
	array_of,
	construct,
	copy_value,
	dispatch,
	dispatch_static,
	enum_missing,
	nullable_of,
	overloaded,
	overloaded_static,
	type_of,
	zero,
)
from .clr.ops import add, div, equals, mod, new_array, not_equals, wrap

INFINITY = math.inf
NAN = math.nan

__all__ = [
	"AutoProperty",
	"CsInterface",
	"CsObject",
	"CsType",
	"CsValueType",
	"Decimal",
	"INFINITY",
	"IntEnum",
	"NAN",
	"add",
	"array_of",
	"as_exception",
	"base_call",
	"base_get",
	"base_set",
	"call_member",
	"construct",
	"copy_value",
	"dispatch",
	"dispatch_static",
	"div",
	"enum_missing",
	"equals",
	"get_item",
	"get_member",
	"initialize",
	"mod",
	"new_array",
	"not_equals",
	"nullable_of",
	"overloaded",
	"overloaded_static",
	"set_item",
	"set_member",
	"to_decimal",
	"to_double",
	"to_enum",
	"type_of",
	"update_item",
	"update_member",
	"wrap",
	"zero",
]
