# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON rendering of materialized instances, in Json.NET's default shapes.

Objects become JSON objects of their public instance fields and properties
(most derived type first, each type in declaration order). Enums are written
as numbers, `DateTime` as ISO-8601 without an offset, `Guid` in its canonical
form and `TimeSpan` as `[-][d.]hh:mm:ss[.fffffff]`. A reference that leads back
to an object currently being written raises `SerializationError`, as
Json.NET's default `ReferenceLoopHandling.Error` does.
"""

from __future__ import annotations

import enum
import json
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Iterator, List, Optional
from uuid import UUID

from .clr.object import CsType
from .clr.system import Uri
from .errors import CSharp2JsonError

_TICKS_PER_SECOND = 10_000_000


class SerializationError(CSharp2JsonError):
	reason_code = "serialization"


def format_datetime(value: datetime) -> str:
	text = f"{value.year:04d}-{value.month:02d}-{value.day:02d}T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
	if value.microsecond:
		text += "." + f"{value.microsecond * 10:07d}".rstrip("0")
	return text


def format_timespan(value: timedelta) -> str:
	ticks = (value.days * 86400 + value.seconds) * _TICKS_PER_SECOND + value.microseconds * 10
	sign = "-" if ticks < 0 else ""
	ticks = abs(ticks)
	seconds, fraction = divmod(ticks, _TICKS_PER_SECOND)
	minutes, secs = divmod(seconds, 60)
	hours, mins = divmod(minutes, 60)
	days, hrs = divmod(hours, 24)
	text = f"{sign}{days}." if days else sign
	text += f"{hrs:02d}:{mins:02d}:{secs:02d}"
	if fraction:
		text += f".{fraction:07d}"
	return text


def _number(value: float) -> Any:
	if math.isnan(value):
		return "NaN"
	if math.isinf(value):
		return "Infinity" if value > 0 else "-Infinity"
	return value


def member_table(cls: type) -> List[tuple]:
	"""`(cs_name, py_name)` of every serialized member, most derived type first."""
	seen: set[str] = set()
	table = []
	for klass in cls.__mro__:
		for entry in vars(klass).get("__cs_members__", ()):
			if entry[0] in seen:
				continue
			seen.add(entry[0])
			table.append((entry[0], entry[1]))
	return table


class _Writer:
	def __init__(self) -> None:
		self._stack: List[int] = []
		self._path: List[str] = []

	def _loop(self, obj: Any) -> SerializationError:
		path = ".".join(self._path)
		name = self._path[-1] if self._path else ""
		kind = getattr(type(obj), "__cs_name__", None) or type(obj).__name__
		return SerializationError(f"Self referencing loop detected for property '{name}' with type '{kind}'. Path '{path}'.")

	def _enter(self, obj: Any) -> None:
		if id(obj) in self._stack:
			raise self._loop(obj)
		self._stack.append(id(obj))

	def value(self, obj: Any) -> Any:
		if obj is None or isinstance(obj, (bool, str)):
			return obj
		if isinstance(obj, enum.Enum):
			return int(obj.value)
		if isinstance(obj, int):
			return obj
		if isinstance(obj, float):
			return _number(obj)
		if isinstance(obj, Decimal):
			return float(obj)
		if isinstance(obj, datetime):
			return format_datetime(obj)
		if isinstance(obj, timedelta):
			return format_timespan(obj)
		if isinstance(obj, UUID):
			return str(obj)
		if isinstance(obj, CsType):
			return obj.FullName
		if isinstance(obj, Uri):
			return obj.OriginalString
		self._enter(obj)
		try:
			return self._composite(obj)
		finally:
			self._stack.pop()

	def _composite(self, obj: Any) -> Any:
		hook = getattr(obj, "__cs_json__", None)
		if hook is not None:
			shape = hook()
			if isinstance(shape, dict):
				return self._mapping(shape.items())
			return [self._item(i, item) for i, item in enumerate(shape)]
		if isinstance(obj, dict):
			return self._mapping((self._key(k), v) for k, v in obj.items())
		if isinstance(obj, (list, tuple)) or getattr(obj, "__cs_enumerable__", False):
			return [self._item(i, item) for i, item in enumerate(obj)]
		table = member_table(type(obj))
		if not table and not hasattr(type(obj), "__cs_name__"):
			raise SerializationError(f"cannot serialize a value of type '{type(obj).__qualname__}'")
		pairs = []
		for cs_name, py_name in table:
			try:
				member = getattr(obj, py_name)
			except Exception as err:
				raise SerializationError(f"Error getting value from '{cs_name}' on '{type(obj).__cs_name__}': {err}") from err
			pairs.append((cs_name, member))
		return self._mapping(pairs)

	def _key(self, key: Any) -> str:
		value = self.value(key)
		if isinstance(value, bool):
			return "true" if value else "false"
		if value is None:
			raise SerializationError("dictionary keys cannot be null")
		return value if isinstance(value, str) else json.dumps(value)

	def _mapping(self, pairs: Iterable[tuple]) -> dict:
		out = {}
		for name, member in pairs:
			self._path.append(str(name))
			try:
				out[name] = self.value(member)
			finally:
				self._path.pop()
		return out

	def _item(self, index: int, item: Any) -> Any:
		if self._path:
			self._path[-1] += f"[{index}]"
			try:
				return self.value(item)
			finally:
				self._path[-1] = self._path[-1][: -len(f"[{index}]")]
		return self.value(item)


def to_jsonable(obj: Any) -> Any:
	"""Plain JSON data (dicts, lists, scalars) for `obj`."""
	return _Writer().value(obj)


def by_type_name(instances: Iterable[Any]) -> dict:
	"""`{CLR full name: serialized instance}` in iteration order."""
	out = {}
	for instance in instances:
		name = getattr(type(instance), "__cs_name__", None) or type(instance).__qualname__
		out[name] = to_jsonable(instance)
	return out


def dumps(value: Any, indent: Optional[int] = 2) -> str:
	"""
	Serialize `value` (one instance, or a list of them) to JSON text.

	Iterators (such as the one `materialize` returns) are written as arrays.
	"""
	if isinstance(value, Iterator):
		value = list(value)
	return json.dumps(to_jsonable(value), indent=indent, ensure_ascii=False)


__all__ = [
	"SerializationError",
	"by_type_name",
	"dumps",
	"format_datetime",
	"format_timespan",
	"member_table",
	"to_jsonable",
]
