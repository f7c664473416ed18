# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The fixed reference set every unit is compiled against.

A `RuntimeType` is the compile-time *and* run-time face of one reference type:
the binder reads its name, kind, statics and instance members; compiled code
reaches it through the `_refs` mapping to construct values, read statics and
chain base constructors. Six assemblies are modeled after the ones the
original tool referenced (`mscorlib`, `System.Core`, `System`, `System.Data`,
`System.Data.Entity`, `System.Xml`).

Everything here is immutable after construction, and `default_references()`
builds the set once per process.
"""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Optional
from uuid import UUID

from .clr import attributes, collections, data, exceptions, system, text, xml
from .clr.names import py_ident
from .clr.object import CsObject, construct


def _is_int(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, eq=False)
class RuntimeType:
	"""
	One exported reference type. `full_name` uses CLR spelling, including the
	generic arity suffix (`System.Collections.Generic.List`1`).
	"""

	full_name: str
	python_type: Any = None
	kind: str = "class"
	statics: Mapping[str, Any] = field(default_factory=dict)
	default: Any = None
	factory: Optional[Callable[..., Any]] = None
	value_type: bool = False
	sealed: bool = False
	abstract: bool = False
	static: bool = False
	# System.Enum/ValueType/Array: nameable but not derivable.
	special: bool = False
	keyword: Optional[str] = None
	accepts_fn: Optional[Callable[[Any, bool], bool]] = None

	@property
	def name(self) -> str:
		return self.full_name.rsplit(".", 1)[-1].split("`", 1)[0]

	@property
	def namespace(self) -> str:
		head, _, _tail = self.full_name.rpartition(".")
		return head

	@property
	def arity(self) -> int:
		_, _, count = self.full_name.partition("`")
		return int(count) if count else 0

	@property
	def is_attribute(self) -> bool:
		return isinstance(self.python_type, type) and issubclass(self.python_type, attributes.Attribute)

	@functools.cached_property
	def instance_members(self) -> frozenset[str]:
		"""C# names of the public instance members compiled code may use."""
		cls = self.python_type
		if not isinstance(cls, type) or self.kind == "enum":
			return frozenset()
		names = {n for n in dir(cls) if not n.startswith("_")}
		for klass in cls.__mro__:
			for entry in vars(klass).get("__cs_members__", ()):
				names.add(entry[0])
		return frozenset(names)

	def __repr__(self) -> str:
		return f"RuntimeType({self.full_name!r})"

	# Statics -------------------------------------------------------------

	def has_static(self, name: str) -> bool:
		if name in self.statics:
			return True
		return self.kind == "enum" and name in self.python_type.__members__

	def is_static_method(self, name: str) -> bool:
		entry = self.statics.get(name)
		return entry is not None and not isinstance(entry, system.StaticProperty)

	def constant(self, name: str) -> Optional[tuple[Any, str]]:
		"""`(value, keyword)` when `name` is a C# constant of this type."""
		entry = self.statics.get(name)
		if isinstance(entry, system.StaticProperty) and entry.constant_kind is not None:
			return entry.getter(), entry.constant_kind
		return None

	def get_static(self, name: str) -> Any:
		entry = self.statics.get(name)
		if entry is None:
			if self.kind == "enum":
				return self.python_type[name]
			raise exceptions.MissingMemberException(f"'{self.full_name}' does not contain a definition for '{name}'")
		if isinstance(entry, system.StaticProperty):
			return entry.getter()
		return entry

	def call_static(self, name: str, *args: Any) -> Any:
		return self.get_static(name)(*args)

	# Values --------------------------------------------------------------

	def new(self, *args: Any) -> Any:
		"""`new T(args)`."""
		return (self.factory or self.python_type)(*args)

	def default_value(self) -> Any:
		"""`default(T)`."""
		if not self.value_type:
			return None
		if self.kind == "enum":
			return self.python_type(0)
		if self.factory is not None and self.default is None:
			return self.factory()
		return self.default

	def accepts(self, value: Any, exact: bool = False) -> bool:
		if self.accepts_fn is not None:
			return self.accepts_fn(value, exact)
		if value is None:
			return not self.value_type
		if isinstance(self.python_type, type):
			return isinstance(value, self.python_type)
		return True

	def init_base(self, obj: Any, args: tuple) -> None:
		"""Run this type's constructor on `obj` as the base part of a derived instance."""
		cls = self.python_type
		if "__cs_ctors__" in vars(cls):
			construct(obj, cls, args)
		else:
			cls.__init__(obj, *args)


@dataclass(frozen=True)
class ReferenceAssembly:
	name: str
	types: tuple[RuntimeType, ...]


@dataclass(frozen=True, eq=False)
class ReferenceSet:
	"""Immutable view over a list of reference assemblies."""

	assemblies: tuple[ReferenceAssembly, ...]
	index: Mapping[str, RuntimeType] = field(init=False)
	keywords: Mapping[str, RuntimeType] = field(init=False)

	def __post_init__(self) -> None:
		index: dict[str, RuntimeType] = {}
		keywords: dict[str, RuntimeType] = {}
		for assembly in self.assemblies:
			for rt in assembly.types:
				if rt.full_name in index:
					raise ValueError(f"reference type {rt.full_name!r} exported twice")
				index[rt.full_name] = rt
				if rt.keyword is not None:
					keywords[rt.keyword] = rt
		object.__setattr__(self, "index", index)
		object.__setattr__(self, "keywords", keywords)

	@property
	def names(self) -> tuple[str, ...]:
		return tuple(a.name for a in self.assemblies)

	def namespaces(self) -> frozenset[str]:
		"""Every namespace (and namespace prefix) some type lives in."""
		spaces: set[str] = set()
		for rt in self.index.values():
			parts = rt.namespace.split(".")
			for i in range(1, len(parts) + 1):
				spaces.add(".".join(parts[:i]))
		return frozenset(spaces)

	def types(self) -> Iterable[RuntimeType]:
		return self.index.values()

	def get(self, full_name: str) -> RuntimeType:
		return self.index[full_name]

	def lookup(self, namespace: str, name: str, arity: int = 0) -> Optional[RuntimeType]:
		full = f"{namespace}.{name}" if namespace else name
		if arity:
			full += f"`{arity}"
		return self.index.get(full)

	def keyword(self, keyword: str) -> RuntimeType:
		return self.keywords[keyword]


# Builders ------------------------------------------------------------------


def _value(
	full_name: str,
	keyword: Optional[str],
	python_type: Any,
	default: Any,
	statics: Mapping[str, Any],
	accepts_fn: Callable[[Any, bool], bool],
	factory: Optional[Callable[..., Any]] = None,
) -> RuntimeType:
	return RuntimeType(
		full_name=full_name,
		python_type=python_type,
		kind="struct",
		statics=statics,
		default=default,
		factory=factory or (lambda: default),
		value_type=True,
		sealed=True,
		keyword=keyword,
		accepts_fn=accepts_fn,
	)


def _integral(keyword: str) -> Callable[[Any, bool], bool]:
	lo, hi = system.INTEGRAL_RANGES[keyword]

	def accepts(value: Any, exact: bool) -> bool:
		if not _is_int(value) or isinstance(value, enum.Enum):
			return False
		return keyword == "int" if exact else lo <= value <= hi

	return accepts


def _floating(exact_type: type) -> Callable[[Any, bool], bool]:
	def accepts(value: Any, exact: bool) -> bool:
		if isinstance(value, exact_type):
			return True
		return not exact and _is_int(value) and not isinstance(value, enum.Enum)

	return accepts


def _reference(python_type: type) -> Callable[[Any, bool], bool]:
	def accepts(value: Any, exact: bool) -> bool:
		return value is None or isinstance(value, python_type)

	return accepts


def _cls(
	python_type: type,
	*,
	full_name: Optional[str] = None,
	sealed: bool = False,
	kind: Optional[str] = None,
	value_type: bool = False,
	statics: Optional[Mapping[str, Any]] = None,
	factory: Optional[Callable[..., Any]] = None,
	keyword: Optional[str] = None,
) -> RuntimeType:
	is_enum = isinstance(python_type, type) and issubclass(python_type, enum.Enum)
	return RuntimeType(
		full_name=full_name or python_type.__cs_name__,
		python_type=python_type,
		kind=kind or ("enum" if is_enum else "class"),
		statics=statics or {},
		factory=factory,
		value_type=value_type or is_enum,
		sealed=sealed or is_enum,
		keyword=keyword,
	)


def _static(full_name: str, statics: Mapping[str, Any]) -> RuntimeType:
	return RuntimeType(full_name=full_name, kind="class", statics=statics, sealed=True, abstract=True, static=True)


def _interface(full_name: str) -> RuntimeType:
	return RuntimeType(full_name=full_name, kind="interface", abstract=True)


def _special(full_name: str, python_type: Any = None) -> RuntimeType:
	return RuntimeType(full_name=full_name, python_type=python_type, kind="class", abstract=True, special=True)


def _mscorlib() -> ReferenceAssembly:
	types = [
		_cls(
			CsObject,
			full_name="System.Object",
			keyword="object",
			statics=system.OBJECT_STATICS,
		),
		RuntimeType(
			full_name="System.String",
			python_type=str,
			statics=system.STRING_STATICS,
			factory=system.new_string,
			sealed=True,
			keyword="string",
			accepts_fn=lambda value, exact: value is None or isinstance(value, str),
		),
		_value("System.Boolean", "bool", bool, False, system.BOOLEAN_STATICS, lambda v, exact: isinstance(v, bool)),
		_value(
			"System.Char",
			"char",
			str,
			"\0",
			system.CHAR_STATICS,
			lambda v, exact: isinstance(v, str) and len(v) == 1,
		),
		_value("System.SByte", "sbyte", int, 0, system.SBYTE_STATICS, _integral("sbyte")),
		_value("System.Byte", "byte", int, 0, system.BYTE_STATICS, _integral("byte")),
		_value("System.Int16", "short", int, 0, system.INT16_STATICS, _integral("short")),
		_value("System.UInt16", "ushort", int, 0, system.UINT16_STATICS, _integral("ushort")),
		_value("System.Int32", "int", int, 0, system.INT32_STATICS, _integral("int")),
		_value("System.UInt32", "uint", int, 0, system.UINT32_STATICS, _integral("uint")),
		_value("System.Int64", "long", int, 0, system.INT64_STATICS, _integral("long")),
		_value("System.UInt64", "ulong", int, 0, system.UINT64_STATICS, _integral("ulong")),
		_value("System.Single", "float", float, 0.0, system.SINGLE_STATICS, _floating(float)),
		_value("System.Double", "double", float, 0.0, system.DOUBLE_STATICS, _floating(float)),
		_value("System.Decimal", "decimal", Decimal, Decimal(0), system.DECIMAL_STATICS, _floating(Decimal)),
		_value(
			"System.DateTime",
			None,
			datetime,
			datetime.min,
			system.DATETIME_STATICS,
			lambda v, exact: isinstance(v, datetime),
			factory=system.new_datetime,
		),
		_value(
			"System.TimeSpan",
			None,
			timedelta,
			timedelta(0),
			system.TIMESPAN_STATICS,
			lambda v, exact: isinstance(v, timedelta),
			factory=system.new_timespan,
		),
		_value(
			"System.Guid",
			None,
			UUID,
			system.EMPTY_GUID,
			system.GUID_STATICS,
			lambda v, exact: isinstance(v, UUID),
			factory=system.new_guid,
		),
		_cls(system.DayOfWeek),
		_static("System.Math", system.MATH_STATICS),
		_static("System.Convert", system.CONVERT_STATICS),
		_static("System.Environment", system.ENVIRONMENT_STATICS),
		_static("System.Console", system.CONSOLE_STATICS),
		_special("System.Enum", enum.IntEnum),
		_special("System.ValueType"),
		_special("System.Array", list),
		RuntimeType(full_name="System.Nullable`1", kind="struct", value_type=True, sealed=True),
		_interface("System.IDisposable"),
		_interface("System.IComparable"),
		_interface("System.IComparable`1"),
		_interface("System.IEquatable`1"),
		_interface("System.ICloneable"),
		_interface("System.IFormattable"),
		_cls(collections.ArrayList),
		_cls(collections.Hashtable),
		_interface("System.Collections.IEnumerable"),
		_interface("System.Collections.ICollection"),
		_interface("System.Collections.IList"),
		_interface("System.Collections.IDictionary"),
		_cls(collections.List),
		_cls(collections.Dictionary),
		_cls(
			collections.KeyValuePair,
			kind="struct",
			value_type=True,
			sealed=True,
			factory=collections.KeyValuePair,
		),
		_interface("System.Collections.Generic.IEnumerable`1"),
		_interface("System.Collections.Generic.ICollection`1"),
		_interface("System.Collections.Generic.IList`1"),
		_interface("System.Collections.Generic.IDictionary`2"),
		_interface("System.Collections.Generic.IReadOnlyList`1"),
		_cls(text.StringBuilder, sealed=True),
	]
	types.extend(_cls(exc) for exc in exceptions.EXCEPTION_TYPES)
	types.extend(_cls(attr) for attr in attributes.MSCORLIB_ATTRIBUTES)
	return ReferenceAssembly("mscorlib", tuple(types))


def _system_core() -> ReferenceAssembly:
	return ReferenceAssembly(
		"System.Core",
		(
			_static("System.Linq.Enumerable", collections.ENUMERABLE_STATICS),
			_cls(collections.HashSet),
			_interface("System.Linq.IQueryable`1"),
		),
	)


def _system() -> ReferenceAssembly:
	types = [
		_cls(system.Uri),
		_cls(system.UriFormatException),
		_cls(collections.Queue),
		_cls(collections.Stack),
	]
	types.extend(_cls(attr) for attr in attributes.SYSTEM_ATTRIBUTES)
	return ReferenceAssembly("System", tuple(types))


def _system_data() -> ReferenceAssembly:
	return ReferenceAssembly("System.Data", (_cls(data.DataSet), _cls(data.DataTable)))


def _system_data_entity() -> ReferenceAssembly:
	return ReferenceAssembly("System.Data.Entity", (_cls(data.EntityKey, sealed=True), _cls(data.EntityState)))


def _system_xml() -> ReferenceAssembly:
	types = [_cls(xml.XmlNode), _cls(xml.XmlDocument), _cls(xml.XmlException)]
	types.extend(_cls(attr) for attr in attributes.XML_ATTRIBUTES)
	return ReferenceAssembly("System.Xml", tuple(types))


@functools.lru_cache(maxsize=None)
def default_references() -> ReferenceSet:
	"""The process-wide reference set (built on first use, then shared)."""
	return ReferenceSet(
		(
			_mscorlib(),
			_system_core(),
			_system(),
			_system_data(),
			_system_data_entity(),
			_system_xml(),
		)
	)


__all__ = [
	"ReferenceAssembly",
	"ReferenceSet",
	"RuntimeType",
	"default_references",
	"py_ident",
]
