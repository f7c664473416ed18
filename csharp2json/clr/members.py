# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dynamic member access for compiled code.

The binder resolves names on `this`, on types and on namespaces statically.
Everything reached through a *value* (`x.Length`, `list.Add(1)`,
`when.AddDays(1)`) goes through `get_member`/`set_member`/`call_member`,
because a value may be a compiled object, a reference-set object, or a plain
Python value standing in for a C# primitive. Primitive members come from the
tables below; any enumerable also gets the LINQ operators.
"""

from __future__ import annotations

import enum
import math
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence
from uuid import UUID

from .collections import LINQ_METHODS, List, is_enumerable
from .exceptions import (
	ArgumentNullException,
	ArgumentOutOfRangeException,
	IndexOutOfRangeException,
	InvalidOperationException,
	MissingMemberException,
	MissingMethodException,
	null_reference,
)
from .names import py_ident
from .object import CsObject, CsType
from .ops import BINARY, apply_format, equals, format_value, timespan_ticks
from .system import DayOfWeek, TICKS_PER_SECOND

_NULLABLE_MEMBERS = ("HasValue", "Value", "GetValueOrDefault")

_BUILTIN_TYPE_NAMES = (
	(bool, "System.Boolean"),
	(int, "System.Int32"),
	(float, "System.Double"),
	(Decimal, "System.Decimal"),
	(str, "System.String"),
	(datetime, "System.DateTime"),
	(timedelta, "System.TimeSpan"),
	(UUID, "System.Guid"),
	(list, "System.Object[]"),
)


def _type_of_value(value: Any) -> CsType:
	if isinstance(value, enum.Enum):
		return CsType.of(type(value))
	for py_type, full_name in _BUILTIN_TYPE_NAMES:
		if isinstance(value, py_type):
			return CsType(FullName=full_name, Name=full_name.rsplit(".", 1)[-1], python_type=py_type)
	return CsType.of(value)


def _compare_to(value: Any, other: Any) -> int:
	if other is None:
		return 1
	return (value > other) - (value < other)


_COMMON_METHODS: dict[str, Callable[..., Any]] = {
	"ToString": lambda value, fmt=None: apply_format(value, fmt) if fmt else format_value(value),
	"Equals": lambda value, other: equals(value, other),
	"GetHashCode": lambda value: hash(value) & 0x7FFFFFFF,
	"GetType": _type_of_value,
	"CompareTo": _compare_to,
	"GetValueOrDefault": lambda value, default=None: value,
}


# String ----------------------------------------------------------------------


def _substring(text: str, start: int, length: Optional[int] = None) -> str:
	if length is None:
		length = len(text) - start
	if start < 0 or length < 0 or start + length > len(text):
		raise ArgumentOutOfRangeException("Index and length must refer to a location within the string.")
	return text[start:start + length]


def _split(text: str, *separators: Any) -> list:
	seps = [s for group in separators for s in (group if isinstance(group, list) else [group]) if s]
	if not seps:
		return re.split(r"\s", text)
	return re.split("|".join(re.escape(s) for s in seps), text)


def _index_of(text: str, value: str, start: int = 0) -> int:
	if value is None:
		raise ArgumentNullException("Value cannot be null.\nParameter name: value")
	return text.find(value, start)


def _trim_chars(chars: tuple) -> Optional[str]:
	flat = "".join(c if isinstance(c, str) else "".join(c) for c in chars)
	return flat or None


def _remove(text: str, start: int, count: Optional[int] = None) -> str:
	if count is None:
		count = len(text) - start
	if start < 0 or count < 0 or start + count > len(text):
		raise ArgumentOutOfRangeException("Index and count must refer to a location within the string.")
	return text[:start] + text[start + count:]


_STRING_PROPERTIES: dict[str, Callable[[str], Any]] = {
	"Length": len,
}

_STRING_METHODS: dict[str, Callable[..., Any]] = {
	"ToUpper": lambda s: s.upper(),
	"ToLower": lambda s: s.lower(),
	"ToUpperInvariant": lambda s: s.upper(),
	"ToLowerInvariant": lambda s: s.lower(),
	"Trim": lambda s, *chars: s.strip(_trim_chars(chars)),
	"TrimStart": lambda s, *chars: s.lstrip(_trim_chars(chars)),
	"TrimEnd": lambda s, *chars: s.rstrip(_trim_chars(chars)),
	"Substring": _substring,
	"Contains": lambda s, value: value in s,
	"StartsWith": lambda s, value: s.startswith(value),
	"EndsWith": lambda s, value: s.endswith(value),
	"IndexOf": _index_of,
	"LastIndexOf": lambda s, value: s.rfind(value),
	"Replace": lambda s, old, new: s.replace(old, "" if new is None else new),
	"Split": _split,
	"PadLeft": lambda s, width, ch=" ": s.rjust(width, ch),
	"PadRight": lambda s, width, ch=" ": s.ljust(width, ch),
	"ToCharArray": lambda s: list(s),
	"Insert": lambda s, index, value: s[:index] + value + s[index:],
	"Remove": _remove,
	"ToString": lambda s: s,
}


# DateTime / TimeSpan / Guid ----------------------------------------------------

_STANDARD_DATE_FORMATS = {
	"d": "MM/dd/yyyy",
	"D": "dddd, dd MMMM yyyy",
	"t": "HH:mm",
	"T": "HH:mm:ss",
	"g": "MM/dd/yyyy HH:mm",
	"G": "MM/dd/yyyy HH:mm:ss",
	"s": "yyyy'-'MM'-'dd'T'HH':'mm':'ss",
	"o": "yyyy'-'MM'-'dd'T'HH':'mm':'ss'.'fffffff",
	"O": "yyyy'-'MM'-'dd'T'HH':'mm':'ss'.'fffffff",
	"u": "yyyy'-'MM'-'dd HH':'mm':'ss'Z'",
}

_DATE_TOKEN = re.compile(r"yyyy|yy|MMMM|MMM|MM|M|dddd|ddd|dd|d|HH|H|hh|h|mm|m|ss|s|f{1,7}|tt|'[^']*'|\\.|.")


def _date_token(value: datetime, token: str) -> str:
	if token.startswith("'"):
		return token[1:-1]
	if token.startswith("\\"):
		return token[1:]
	if token[0] == "f":
		return f"{value.microsecond * 10:07d}"[: len(token)]
	hour12 = value.hour % 12 or 12
	table = {
		"yyyy": f"{value.year:04d}",
		"yy": f"{value.year % 100:02d}",
		"MMMM": value.strftime("%B"),
		"MMM": value.strftime("%b"),
		"MM": f"{value.month:02d}",
		"M": str(value.month),
		"dddd": value.strftime("%A"),
		"ddd": value.strftime("%a"),
		"dd": f"{value.day:02d}",
		"d": str(value.day),
		"HH": f"{value.hour:02d}",
		"H": str(value.hour),
		"hh": f"{hour12:02d}",
		"h": str(hour12),
		"mm": f"{value.minute:02d}",
		"m": str(value.minute),
		"ss": f"{value.second:02d}",
		"s": str(value.second),
		"tt": "AM" if value.hour < 12 else "PM",
	}
	return table.get(token, token)


def format_datetime_with(value: datetime, fmt: Optional[str]) -> str:
	if not fmt:
		return format_value(value)
	pattern = _STANDARD_DATE_FORMATS.get(fmt, fmt)
	return "".join(_date_token(value, tok) for tok in _DATE_TOKEN.findall(pattern))


def _add_months(value: datetime, months: int) -> datetime:
	index = value.year * 12 + value.month - 1 + months
	year, month = divmod(index, 12)
	month += 1
	if month == 12:
		last_day = 31
	else:
		last_day = (datetime(year, month + 1, 1) - datetime(year, month, 1)).days
	return value.replace(year=year, month=month, day=min(value.day, last_day))


def _subtract(value: datetime, other: Any) -> Any:
	return value - other


_DATETIME_PROPERTIES: dict[str, Callable[[datetime], Any]] = {
	"Year": lambda d: d.year,
	"Month": lambda d: d.month,
	"Day": lambda d: d.day,
	"Hour": lambda d: d.hour,
	"Minute": lambda d: d.minute,
	"Second": lambda d: d.second,
	"Millisecond": lambda d: d.microsecond // 1000,
	"Date": lambda d: datetime(d.year, d.month, d.day),
	"DayOfWeek": lambda d: DayOfWeek((d.weekday() + 1) % 7),
	"DayOfYear": lambda d: d.timetuple().tm_yday,
	"TimeOfDay": lambda d: d - datetime(d.year, d.month, d.day),
	"Ticks": lambda d: timespan_ticks(d - datetime.min),
}

_DATETIME_METHODS: dict[str, Callable[..., Any]] = {
	"AddDays": lambda d, n: d + timedelta(days=n),
	"AddHours": lambda d, n: d + timedelta(hours=n),
	"AddMinutes": lambda d, n: d + timedelta(minutes=n),
	"AddSeconds": lambda d, n: d + timedelta(seconds=n),
	"AddMilliseconds": lambda d, n: d + timedelta(milliseconds=n),
	"AddTicks": lambda d, n: d + timedelta(microseconds=n // 10),
	"AddMonths": _add_months,
	"AddYears": lambda d, n: _add_months(d, 12 * n),
	"Add": lambda d, span: d + span,
	"Subtract": _subtract,
	"ToString": format_datetime_with,
	"ToShortDateString": lambda d: format_datetime_with(d, "M/d/yyyy"),
	"ToShortTimeString": lambda d: format_datetime_with(d, "h:mm tt"),
	"ToUniversalTime": lambda d: d,
	"ToLocalTime": lambda d: d,
}

_TIMESPAN_PROPERTIES: dict[str, Callable[[timedelta], Any]] = {
	"Days": lambda t: _timespan_part(t, 86400, None),
	"Hours": lambda t: _timespan_part(t, 3600, 24),
	"Minutes": lambda t: _timespan_part(t, 60, 60),
	"Seconds": lambda t: _timespan_part(t, 1, 60),
	"Milliseconds": lambda t: _timespan_part(t, 0.001, 1000),
	"Ticks": timespan_ticks,
	"TotalDays": lambda t: timespan_ticks(t) / (TICKS_PER_SECOND * 86400),
	"TotalHours": lambda t: timespan_ticks(t) / (TICKS_PER_SECOND * 3600),
	"TotalMinutes": lambda t: timespan_ticks(t) / (TICKS_PER_SECOND * 60),
	"TotalSeconds": lambda t: timespan_ticks(t) / TICKS_PER_SECOND,
	"TotalMilliseconds": lambda t: timespan_ticks(t) / (TICKS_PER_SECOND / 1000),
}


def _timespan_part(value: timedelta, unit_seconds: float, modulus: Optional[int]) -> int:
	ticks = timespan_ticks(value)
	sign = -1 if ticks < 0 else 1
	whole = int(abs(ticks) // (TICKS_PER_SECOND * unit_seconds))
	return sign * (whole if modulus is None else whole % modulus)


_TIMESPAN_METHODS: dict[str, Callable[..., Any]] = {
	"Add": lambda t, other: t + other,
	"Subtract": lambda t, other: t - other,
	"Negate": lambda t: -t,
	"Duration": lambda t: abs(t),
	"ToString": lambda t, fmt=None: format_value(t),
}

_GUID_METHODS: dict[str, Callable[..., Any]] = {
	"ToString": lambda g, fmt=None: _format_guid(g, fmt),
	"ToByteArray": lambda g: list(g.bytes_le),
}


def _format_guid(value: UUID, fmt: Optional[str]) -> str:
	text = str(value)
	spec = (fmt or "D").upper()
	if spec == "N":
		return value.hex
	if spec == "B":
		return "{" + text + "}"
	if spec == "P":
		return "(" + text + ")"
	return text


# Arrays / enums ----------------------------------------------------------------

_ARRAY_PROPERTIES: dict[str, Callable[[list], Any]] = {
	"Length": len,
	"LongLength": len,
	"Rank": lambda a: 1,
}

_ARRAY_METHODS: dict[str, Callable[..., Any]] = {
	"Clone": lambda a: list(a),
	"GetLength": lambda a, dimension: len(a),
}

_ENUM_METHODS: dict[str, Callable[..., Any]] = {
	"HasFlag": lambda value, flag: int(value) & int(flag) == int(flag),
	"ToString": lambda value, fmt=None: str(int(value)) if fmt in ("D", "d") else format_value(value),
}

def _tables(value: Any) -> tuple[dict, dict]:
	if isinstance(value, enum.Enum):
		return {}, _ENUM_METHODS
	if isinstance(value, str):
		return _STRING_PROPERTIES, _STRING_METHODS
	if isinstance(value, datetime):
		return _DATETIME_PROPERTIES, _DATETIME_METHODS
	if isinstance(value, timedelta):
		return _TIMESPAN_PROPERTIES, _TIMESPAN_METHODS
	if isinstance(value, UUID):
		return {}, _GUID_METHODS
	if isinstance(value, list):
		return _ARRAY_PROPERTIES, _ARRAY_METHODS
	return {}, {}


def _type_name(value: Any) -> str:
	return _type_of_value(value).FullName


# Public entry points -------------------------------------------------------------


def _null_member(name: str) -> Any:
	if name == "HasValue":
		return False
	if name == "Value":
		raise InvalidOperationException("Nullable object must have a value.")
	raise null_reference()


def get_member(obj: Any, name: str) -> Any:
	"""`obj.name` for any runtime value."""
	if obj is None:
		return _null_member(name)
	if isinstance(obj, CsObject):
		try:
			return getattr(obj, py_ident(name))
		except AttributeError:
			if name in _NULLABLE_MEMBERS:
				return obj if name == "Value" else True
			raise MissingMemberException(f"'{_type_name(obj)}' does not contain a definition for '{name}'") from None
	properties, methods = _tables(obj)
	if name in properties:
		return properties[name](obj)
	if name == "HasValue":
		return True
	if name == "Value":
		return obj
	fn = methods.get(name) or _COMMON_METHODS.get(name)
	if fn is not None:
		return lambda *args: fn(obj, *args)
	raise MissingMemberException(f"'{_type_name(obj)}' does not contain a definition for '{name}'")


def set_member(obj: Any, name: str, value: Any) -> None:
	if obj is None:
		raise null_reference()
	if not isinstance(obj, CsObject):
		raise MissingMemberException(f"Property or indexer '{_type_name(obj)}.{name}' cannot be assigned to -- it is read only")
	try:
		setattr(obj, py_ident(name), value)
	except AttributeError:
		raise MissingMemberException(
			f"Property or indexer '{_type_name(obj)}.{name}' cannot be assigned to -- it is read only"
		) from None


def call_member(obj: Any, name: str, *args: Any) -> Any:
	"""`obj.name(args)`."""
	if obj is None:
		if name == "GetValueOrDefault":
			return args[0] if args else None
		raise null_reference()
	if isinstance(obj, CsObject):
		method = getattr(obj, py_ident(name), None)
		if method is not None:
			return method(*args)
	else:
		_properties, methods = _tables(obj)
		fn = methods.get(name) or _COMMON_METHODS.get(name)
		if fn is not None:
			return fn(obj, *args)
	if name in LINQ_METHODS and is_enumerable(obj):
		return LINQ_METHODS[name](obj, *args)
	if isinstance(obj, CsObject) and name in _COMMON_METHODS:
		return _COMMON_METHODS[name](obj, *args)
	raise MissingMethodException(f"Method '{_type_name(obj)}.{name}' not found.")


# `base.X` --------------------------------------------------------------------


def _find_in(cls: type, ident: str) -> tuple[bool, Any]:
	for klass in cls.__mro__:
		if ident in klass.__dict__:
			return True, klass.__dict__[ident]
	return False, None


def base_get(self: Any, cls: type, name: str) -> Any:
	"""Read `name` starting the lookup at `cls` (the base class)."""
	ident = py_ident(name)
	found, attr = _find_in(cls, ident)
	if found and hasattr(attr, "__get__"):
		return attr.__get__(self, type(self))
	if found and ident not in vars(self):
		return attr
	return vars(self)[ident]


def base_set(self: Any, cls: type, name: str, value: Any) -> None:
	ident = py_ident(name)
	found, attr = _find_in(cls, ident)
	if found and hasattr(attr, "__set__"):
		attr.__set__(self, value)
	else:
		vars(self)[ident] = value


def base_call(self: Any, cls: type, name: str, *args: Any) -> Any:
	return base_get(self, cls, name)(*args)


# Indexers --------------------------------------------------------------------


def _check_index(obj: list, index: Any) -> int:
	if not isinstance(index, int) or isinstance(index, bool):
		raise IndexOutOfRangeException("Index was outside the bounds of the array.")
	if not 0 <= index < len(obj):
		if isinstance(obj, List):
			raise ArgumentOutOfRangeException(
				"Index was out of range. Must be non-negative and less than the size of the collection."
			)
		raise IndexOutOfRangeException("Index was outside the bounds of the array.")
	return index


def get_item(obj: Any, index: Any) -> Any:
	if obj is None:
		raise null_reference()
	getter = getattr(type(obj), "__cs_getitem__", None)
	if getter is not None:
		return getter(obj, index)
	if isinstance(obj, list):
		return obj[_check_index(obj, index)]
	if isinstance(obj, str):
		if not 0 <= index < len(obj):
			raise IndexOutOfRangeException("Index was outside the bounds of the array.")
		return obj[index]
	raise MissingMemberException(f"Cannot apply indexing with [] to an expression of type '{_type_name(obj)}'")


def set_item(obj: Any, index: Any, value: Any) -> None:
	if obj is None:
		raise null_reference()
	if isinstance(obj, list):
		obj[_check_index(obj, index)] = value
		return
	if isinstance(obj, dict):
		if index is None:
			raise ArgumentNullException("Value cannot be null.\nParameter name: key")
		obj[index] = value
		return
	raise MissingMemberException(f"Cannot apply indexing with [] to an expression of type '{_type_name(obj)}'")


# Compound assignment / initializers ---------------------------------------------


def update_member(obj: Any, name: str, op: str, value: Any) -> None:
	"""`obj.name op= value`."""
	set_member(obj, name, BINARY[op](get_member(obj, name), value))


def update_item(obj: Any, index: Any, op: str, value: Any) -> None:
	set_item(obj, index, BINARY[op](get_item(obj, index), value))


def initialize(obj: Any, ops: Sequence[tuple]) -> Any:
	"""
	Apply an object or collection initializer. Each op is one of
	`("set", name, value)`, `("add", args)`, `("index", key, value)` or
	`("nested", name, ops)`.
	"""
	for op in ops:
		kind = op[0]
		if kind == "set":
			set_member(obj, op[1], op[2])
		elif kind == "add":
			call_member(obj, "Add", *op[1])
		elif kind == "index":
			set_item(obj, op[1], op[2])
		elif kind == "nested":
			initialize(get_member(obj, op[1]), op[2])
		else:
			raise ValueError(f"unknown initializer op {kind!r}")
	return obj


# Conversions ---------------------------------------------------------------------


def to_double(value: Any) -> Any:
	"""Implicit conversion to `float`/`double` on store."""
	if value is None or isinstance(value, float):
		return value
	if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
		return float(value)
	return value


def to_decimal(value: Any) -> Any:
	if value is None or isinstance(value, Decimal):
		return value
	if isinstance(value, int) and not isinstance(value, bool):
		return Decimal(value)
	if isinstance(value, float) and math.isfinite(value):
		return Decimal(repr(value))
	return value


def to_enum(cls: type, value: Any) -> Any:
	if value is None or isinstance(value, cls):
		return value
	if isinstance(value, int) and not isinstance(value, bool):
		return cls(value)
	return value


__all__ = [
	"base_call",
	"base_get",
	"base_set",
	"call_member",
	"format_datetime_with",
	"get_item",
	"get_member",
	"initialize",
	"set_item",
	"set_member",
	"to_decimal",
	"to_double",
	"to_enum",
	"update_item",
	"update_member",
]
