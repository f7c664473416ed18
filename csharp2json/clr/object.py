# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Root of the object model compiled units run on.

Classes compiled from C# derive from `CsObject` (or from a reference type that
does); structs derive from `CsValueType`. Construction always goes through
`construct`, which picks an entry from the class's *own* `__cs_ctors__`
table, so base-constructor chaining can target a specific class.

Constructor and overload tables hold `(function, parameter_types, required)`
triples. Parameter types are user classes, reference `RuntimeType`s, the
`ArrayOf`/`NullableOf` descriptors, or None (anything).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

IntEnum = enum.IntEnum


def _enum_missing(cls, value):
	# C# enums may hold any value of the underlying type; mint pseudo-members
	# for values that have no name (including the default 0).
	if not isinstance(value, int) or isinstance(value, bool):
		return None
	pseudo = int.__new__(cls, value)
	pseudo._name_ = None
	pseudo._value_ = value
	return cls._value2member_map_.setdefault(value, pseudo)


enum_missing = classmethod(_enum_missing)


class CsObject:
	"""`System.Object`."""

	__cs_name__ = "System.Object"
	__cs_kind__ = "class"

	def __init__(self, *args: Any) -> None:
		construct(self, type(self), args)

	def ToString(self) -> str:
		return type(self).__cs_name__

	def Equals(self, other: Any) -> bool:
		return self is other

	def GetHashCode(self) -> int:
		return id(self) & 0x7FFFFFFF

	def GetType(self) -> "CsType":
		return CsType.of(type(self))

	def __str__(self) -> str:
		return self.ToString()


CsObject.__cs_ctors__ = ((lambda self: None, (), 0),)


class CsValueType(CsObject):
	"""`System.ValueType`: value equality and copy-on-store."""

	__cs_name__ = "System.ValueType"

	def Equals(self, other: Any) -> bool:
		if type(other) is not type(self):
			return False
		return vars(self) == vars(other)

	def GetHashCode(self) -> int:
		return hash(tuple(sorted(vars(self).items(), key=lambda kv: kv[0]))) & 0x7FFFFFFF

	def __eq__(self, other: Any) -> bool:
		return self.Equals(other)

	def __hash__(self) -> int:
		return self.GetHashCode()

	def __cs_copy__(self) -> "CsValueType":
		clone = type(self).__new__(type(self))
		for key, value in vars(self).items():
			clone.__dict__[key] = copy_value(value)
		return clone


class CsInterface:
	"""Marker base for compiled interfaces; never instantiated."""

	__cs_name__ = None
	__cs_kind__ = "interface"


@dataclass(frozen=True)
class CsType:
	"""What `typeof(T)` and `GetType()` evaluate to."""

	FullName: str
	Name: str
	python_type: Any = None

	@classmethod
	def of(cls, target: Any) -> "CsType":
		full = getattr(target, "__cs_name__", None) or getattr(target, "full_name", None)
		if full is None:
			full = f"{type(target).__module__}.{type(target).__qualname__}"
		name = full.rsplit(".", 1)[-1].rsplit("+", 1)[-1]
		return cls(FullName=full, Name=name, python_type=getattr(target, "python_type", target))

	def ToString(self) -> str:
		return self.FullName

	def __str__(self) -> str:
		return self.FullName


def type_of(target: Any) -> CsType:
	return CsType.of(target)


# Parameter type descriptors ------------------------------------------------


@dataclass(frozen=True)
class ArrayOf:
	element: Any = None


@dataclass(frozen=True)
class NullableOf:
	inner: Any


def array_of(element: Any = None) -> ArrayOf:
	return ArrayOf(element)


def nullable_of(inner: Any) -> NullableOf:
	return NullableOf(inner)


def accepts(param: Any, value: Any, exact: bool = False) -> bool:
	"""Whether `value` can be passed where `param` is expected."""
	if param is None:
		return True
	if isinstance(param, NullableOf):
		return value is None or accepts(param.inner, value, exact)
	if isinstance(param, ArrayOf):
		return value is None or isinstance(value, list)
	if isinstance(param, type):
		if value is None:
			return not issubclass(param, (CsValueType, enum.Enum))
		return isinstance(value, param)
	# Reference RuntimeType.
	return param.accepts(value, exact)


def _select(entries: Sequence[tuple], args: Sequence[Any]) -> Optional[Callable]:
	candidates = [e for e in entries if e[2] <= len(args) <= len(e[1])]
	# Signatures that need no default arguments win over ones that do.
	candidates.sort(key=lambda e: len(e[1]) != len(args))
	for exact in (True, False):
		for fn, params, _required in candidates:
			if all(accepts(p, a, exact) for p, a in zip(params, args)):
				return fn
	return None


def construct(self: Any, cls: type, args: Sequence[Any]) -> None:
	"""Run the constructor of `cls` (not of a subclass) that accepts `args`."""
	ctors = cls.__dict__.get("__cs_ctors__", ())
	fn = _select(ctors, args)
	if fn is None:
		from .exceptions import MissingMethodException

		raise MissingMethodException(
			f"Constructor on type '{getattr(cls, '__cs_name__', cls.__name__)}' "
			f"taking {len(args)} argument(s) not found."
		)
	fn(self, *args)


def zero(cls: type) -> Any:
	"""The default (all-zero) value of a compiled struct."""
	obj = cls.__new__(cls)
	cls.__cs_zero__(obj)
	return obj


def copy_value(value: Any) -> Any:
	"""Struct values are copied when stored; everything else is shared."""
	if isinstance(value, CsValueType):
		return value.__cs_copy__()
	return value


class AutoProperty:
	"""
	Instance-dict backed property, used for auto-properties that override a
	computed base property.
	"""

	def __init__(self, name: str) -> None:
		self.name = name

	def __get__(self, obj: Any, owner: Any = None) -> Any:
		if obj is None:
			return self
		try:
			return obj.__dict__[self.name]
		except KeyError:
			raise AttributeError(self.name) from None

	def __set__(self, obj: Any, value: Any) -> None:
		obj.__dict__[self.name] = value


def select_overload(cls: type, name: str, args: Sequence[Any]) -> Callable:
	"""Find the most-derived overload of `name` accepting `args`, from `cls` up."""
	for klass in cls.__mro__:
		table = klass.__dict__.get("__cs_overloads__")
		if not table or name not in table:
			continue
		fn = _select(table[name], args)
		if fn is not None:
			return fn
	from .exceptions import MissingMethodException

	raise MissingMethodException(f"No overload for method '{name}' takes {len(args)} argument(s).")


def dispatch(self: Any, name: str, args: Sequence[Any], start: Optional[type] = None) -> Any:
	fn = select_overload(start or type(self), name, args)
	return fn(self, *args)


def dispatch_static(cls: type, name: str, args: Sequence[Any]) -> Any:
	fn = select_overload(cls, name, args)
	return fn(*args)


def overloaded(name: str) -> Callable:
	"""The instance attribute standing for every overload of `name`."""

	def method(self: Any, *args: Any) -> Any:
		return dispatch(self, name, args)

	method.__name__ = name
	return method


def overloaded_static(cls: type, name: str) -> Callable:
	def method(*args: Any) -> Any:
		return dispatch_static(cls, name, args)

	method.__name__ = name
	return staticmethod(method)


__all__ = [
	"ArrayOf",
	"AutoProperty",
	"CsInterface",
	"CsObject",
	"CsType",
	"CsValueType",
	"IntEnum",
	"NullableOf",
	"accepts",
	"array_of",
	"construct",
	"copy_value",
	"dispatch",
	"dispatch_static",
	"enum_missing",
	"nullable_of",
	"overloaded",
	"overloaded_static",
	"select_overload",
	"type_of",
	"zero",
]
