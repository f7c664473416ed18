# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Statics and constructors of the `System` value types and utility classes.

C# primitives map onto Python values (`int`, `float`, `Decimal`, `bool`, a
one-character `str` for `char`, `datetime`, `timedelta`, `UUID`), so their
static members live in plain tables here. `StaticProperty` marks entries
that are read (`DateTime.Now`) rather than called (`Guid.NewGuid()`);
entries with a `constant_kind` are C# compile-time constants the binder may
fold.
"""

from __future__ import annotations

import math
import os
import platform
import sys
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from .collections import is_enumerable
from .exceptions import (
	ArgumentNullException,
	ArgumentOutOfRangeException,
	Exception as CsException,
	FormatException,
	OverflowException,
	derive_exception,
)
from .object import CsObject, IntEnum
from .ops import compose_format, equals, to_string


@dataclass(frozen=True)
class StaticProperty:
	getter: Callable[[], Any]
	constant_kind: Optional[str] = None

	@classmethod
	def constant(cls, value: Any, kind: str) -> "StaticProperty":
		return cls(lambda: value, kind)


# Integral types ------------------------------------------------------------

INTEGRAL_RANGES: dict[str, tuple[int, int]] = {
	"sbyte": (-(2**7), 2**7 - 1),
	"byte": (0, 2**8 - 1),
	"short": (-(2**15), 2**15 - 1),
	"ushort": (0, 2**16 - 1),
	"int": (-(2**31), 2**31 - 1),
	"uint": (0, 2**32 - 1),
	"long": (-(2**63), 2**63 - 1),
	"ulong": (0, 2**64 - 1),
	"char": (0, 2**16 - 1),
}

_CLR_NAMES = {
	"sbyte": "SByte",
	"byte": "Byte",
	"short": "Int16",
	"ushort": "UInt16",
	"int": "Int32",
	"uint": "UInt32",
	"long": "Int64",
	"ulong": "UInt64",
}


def _check_range(value: int, keyword: str) -> int:
	lo, hi = INTEGRAL_RANGES[keyword]
	if not lo <= value <= hi:
		raise OverflowException(f"Value was either too large or too small for an {_CLR_NAMES[keyword]}.")
	return value


def _require_text(text: Any) -> str:
	if text is None:
		raise ArgumentNullException("Value cannot be null.\nParameter name: s")
	return text


def _parse_integer(keyword: str) -> Callable[[str], int]:
	def parse(text: str) -> int:
		try:
			value = int(_require_text(text).strip())
		except ValueError:
			raise FormatException("Input string was not in a correct format.") from None
		return _check_range(value, keyword)

	return parse


def _integral_statics(keyword: str) -> dict[str, Any]:
	lo, hi = INTEGRAL_RANGES[keyword]
	return {
		"MinValue": StaticProperty.constant(lo, keyword),
		"MaxValue": StaticProperty.constant(hi, keyword),
		"Parse": _parse_integer(keyword),
	}


def parse_double(text: str) -> float:
	try:
		return float(_require_text(text).strip())
	except ValueError:
		raise FormatException("Input string was not in a correct format.") from None


def parse_decimal(text: str) -> Decimal:
	try:
		return Decimal(_require_text(text).strip())
	except InvalidOperation:
		raise FormatException("Input string was not in a correct format.") from None


def _float_statics(keyword: str, max_value: float, epsilon: float) -> dict[str, Any]:
	return {
		"MinValue": StaticProperty.constant(-max_value, keyword),
		"MaxValue": StaticProperty.constant(max_value, keyword),
		"Epsilon": StaticProperty.constant(epsilon, keyword),
		"NaN": StaticProperty.constant(math.nan, keyword),
		"PositiveInfinity": StaticProperty.constant(math.inf, keyword),
		"NegativeInfinity": StaticProperty.constant(-math.inf, keyword),
		"Parse": parse_double,
		"IsNaN": math.isnan,
		"IsInfinity": math.isinf,
	}


INT32_STATICS = _integral_statics("int")
INT64_STATICS = _integral_statics("long")
INT16_STATICS = _integral_statics("short")
BYTE_STATICS = _integral_statics("byte")
SBYTE_STATICS = _integral_statics("sbyte")
UINT16_STATICS = _integral_statics("ushort")
UINT32_STATICS = _integral_statics("uint")
UINT64_STATICS = _integral_statics("ulong")
SINGLE_STATICS = _float_statics("float", 3.4028234663852886e38, 1.401298464324817e-45)
DOUBLE_STATICS = _float_statics("double", sys.float_info.max, 5e-324)

_DECIMAL_MAX = Decimal(2**96 - 1)

DECIMAL_STATICS: dict[str, Any] = {
	"Zero": StaticProperty.constant(Decimal(0), "decimal"),
	"One": StaticProperty.constant(Decimal(1), "decimal"),
	"MinusOne": StaticProperty.constant(Decimal(-1), "decimal"),
	"MaxValue": StaticProperty.constant(_DECIMAL_MAX, "decimal"),
	"MinValue": StaticProperty.constant(-_DECIMAL_MAX, "decimal"),
	"Parse": parse_decimal,
	"Round": lambda value, digits=0: _round(Decimal(value), digits),
}


def parse_boolean(text: str) -> bool:
	value = _require_text(text).strip().lower()
	if value == "true":
		return True
	if value == "false":
		return False
	raise FormatException("String was not recognized as a valid Boolean.")


BOOLEAN_STATICS: dict[str, Any] = {
	"TrueString": StaticProperty(lambda: "True"),
	"FalseString": StaticProperty(lambda: "False"),
	"Parse": parse_boolean,
}

CHAR_STATICS: dict[str, Any] = {
	"MinValue": StaticProperty.constant("\0", "char"),
	"MaxValue": StaticProperty.constant("\uffff", "char"),
	"IsDigit": lambda c: c.isdigit(),
	"IsLetter": lambda c: c.isalpha(),
	"IsLetterOrDigit": lambda c: c.isalnum(),
	"IsWhiteSpace": lambda c: c.isspace(),
	"IsUpper": lambda c: c.isupper(),
	"IsLower": lambda c: c.islower(),
	"ToUpper": lambda c: c.upper(),
	"ToLower": lambda c: c.lower(),
}


# String --------------------------------------------------------------------


def _flatten(values: tuple) -> list:
	if len(values) == 1 and is_enumerable(values[0]) and not isinstance(values[0], str):
		return list(values[0])
	return list(values)


def _compare(left: Optional[str], right: Optional[str]) -> int:
	if left is None or right is None:
		return (left is not None) - (right is not None)
	return (left > right) - (left < right)


STRING_STATICS: dict[str, Any] = {
	"Empty": StaticProperty(lambda: ""),
	"IsNullOrEmpty": lambda s: s is None or s == "",
	"IsNullOrWhiteSpace": lambda s: s is None or s.strip() == "",
	"Format": lambda template, *args: compose_format(template, _flatten(args)),
	"Concat": lambda *args: "".join(to_string(a) for a in _flatten(args)),
	"Join": lambda sep, *values: to_string(sep).join(to_string(v) for v in _flatten(values)),
	"Compare": _compare,
	"Equals": lambda a, b: a == b,
}


def new_string(value: Any, count: Optional[int] = None) -> str:
	if count is not None:
		if count < 0:
			raise ArgumentOutOfRangeException("Count cannot be less than zero.")
		return value * count
	if value is None:
		return ""
	return "".join(value)


# DateTime / TimeSpan -------------------------------------------------------

TICKS_PER_SECOND = 10_000_000


def new_datetime(*args: Any) -> datetime:
	if not args:
		return datetime.min
	try:
		if len(args) == 1:
			return datetime.min + timedelta(microseconds=args[0] // 10)
		year, month, day, *rest = args
		hour, minute, second, millisecond = (list(rest) + [0, 0, 0, 0])[:4]
		return datetime(year, month, day, hour, minute, second, millisecond * 1000)
	except (ValueError, OverflowError):
		raise ArgumentOutOfRangeException(
			"Year, Month, and Day parameters describe an un-representable DateTime."
		) from None


def parse_datetime(text: str) -> datetime:
	value = _require_text(text).strip()
	for pattern in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%m/%d/%Y %H:%M:%S", "%m/%d/%Y"):
		try:
			return datetime.strptime(value, pattern)
		except ValueError:
			continue
	try:
		return datetime.fromisoformat(value)
	except ValueError:
		raise FormatException("String was not recognized as a valid DateTime.") from None


def _days_in_month(year: int, month: int) -> int:
	if not 1 <= month <= 12:
		raise ArgumentOutOfRangeException("Month must be between one and twelve.")
	if month == 12:
		return 31
	return (datetime(year, month + 1, 1) - datetime(year, month, 1)).days


def _is_leap_year(year: int) -> bool:
	return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


DATETIME_STATICS: dict[str, Any] = {
	"Now": StaticProperty(datetime.now),
	"UtcNow": StaticProperty(datetime.utcnow),
	"Today": StaticProperty(lambda: datetime.combine(datetime.now().date(), datetime.min.time())),
	"MinValue": StaticProperty(lambda: datetime.min),
	"MaxValue": StaticProperty(lambda: datetime.max),
	"Parse": parse_datetime,
	"DaysInMonth": _days_in_month,
	"IsLeapYear": _is_leap_year,
}


def new_timespan(*args: Any) -> timedelta:
	if not args:
		return timedelta(0)
	if len(args) == 1:
		return timedelta(microseconds=args[0] // 10)
	if len(args) == 3:
		hours, minutes, seconds = args
		return timedelta(hours=hours, minutes=minutes, seconds=seconds)
	days, hours, minutes, seconds, *ms = args
	return timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds, milliseconds=ms[0] if ms else 0)


TIMESPAN_STATICS: dict[str, Any] = {
	"Zero": StaticProperty(lambda: timedelta(0)),
	"MinValue": StaticProperty(lambda: timedelta.min),
	"MaxValue": StaticProperty(lambda: timedelta.max),
	"TicksPerMillisecond": StaticProperty.constant(TICKS_PER_SECOND // 1000, "long"),
	"TicksPerSecond": StaticProperty.constant(TICKS_PER_SECOND, "long"),
	"TicksPerMinute": StaticProperty.constant(TICKS_PER_SECOND * 60, "long"),
	"TicksPerHour": StaticProperty.constant(TICKS_PER_SECOND * 3600, "long"),
	"TicksPerDay": StaticProperty.constant(TICKS_PER_SECOND * 86400, "long"),
	"FromDays": lambda value: timedelta(days=value),
	"FromHours": lambda value: timedelta(hours=value),
	"FromMinutes": lambda value: timedelta(minutes=value),
	"FromSeconds": lambda value: timedelta(seconds=value),
	"FromMilliseconds": lambda value: timedelta(milliseconds=value),
	"FromTicks": lambda value: timedelta(microseconds=value // 10),
}


class DayOfWeek(IntEnum):
	Sunday = 0
	Monday = 1
	Tuesday = 2
	Wednesday = 3
	Thursday = 4
	Friday = 5
	Saturday = 6


DayOfWeek.__cs_name__ = "System.DayOfWeek"


# Guid ----------------------------------------------------------------------

EMPTY_GUID = uuid.UUID(int=0)


def parse_guid(text: str) -> uuid.UUID:
	try:
		return uuid.UUID(_require_text(text).strip())
	except ValueError:
		raise FormatException("Guid should contain 32 digits with 4 dashes (xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx).") from None


def new_guid(text: Optional[str] = None) -> uuid.UUID:
	if text is None:
		return EMPTY_GUID
	return parse_guid(text)


GUID_STATICS: dict[str, Any] = {
	"Empty": StaticProperty(lambda: EMPTY_GUID),
	"NewGuid": uuid.uuid4,
	"Parse": parse_guid,
}


# Math / Convert ------------------------------------------------------------


def _round(value: Any, digits: int = 0) -> Any:
	if isinstance(value, Decimal):
		return value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_EVEN)
	return float(round(value, digits))


def _floor(value: Any) -> Any:
	if isinstance(value, Decimal):
		return value.to_integral_value(rounding=ROUND_FLOOR)
	return float(math.floor(value))


def _ceiling(value: Any) -> Any:
	if isinstance(value, Decimal):
		return value.to_integral_value(rounding=ROUND_CEILING)
	return float(math.ceil(value))


def _truncate(value: Any) -> Any:
	if isinstance(value, Decimal):
		return value.to_integral_value(rounding=ROUND_DOWN)
	return float(math.trunc(value))


def _sqrt(value: float) -> float:
	return math.sqrt(value) if value >= 0 else math.nan


def _sign(value: Any) -> int:
	if isinstance(value, float) and math.isnan(value):
		raise CsException("Function does not accept floating point Not-a-Number values.")
	return (value > 0) - (value < 0)


MATH_STATICS: dict[str, Any] = {
	"PI": StaticProperty.constant(math.pi, "double"),
	"E": StaticProperty.constant(math.e, "double"),
	"Abs": abs,
	"Max": max,
	"Min": min,
	"Pow": lambda x, y: math.pow(x, y),
	"Sqrt": _sqrt,
	"Floor": _floor,
	"Ceiling": _ceiling,
	"Round": _round,
	"Truncate": _truncate,
	"Sign": _sign,
	"Exp": math.exp,
	"Log": lambda x, base=None: math.log(x) if base is None else math.log(x, base),
	"Log10": math.log10,
}


def _to_integral(keyword: str) -> Callable[[Any], int]:
	parse = _parse_integer(keyword)

	def convert(value: Any) -> int:
		if value is None:
			return 0
		if isinstance(value, str):
			return parse(value)
		if isinstance(value, bool):
			return int(value)
		if isinstance(value, float):
			if math.isnan(value) or math.isinf(value):
				raise OverflowException(f"Value was either too large or too small for an {_CLR_NAMES[keyword]}.")
			return _check_range(round(value), keyword)
		if isinstance(value, Decimal):
			return _check_range(int(value.quantize(Decimal(1), rounding=ROUND_HALF_EVEN)), keyword)
		return _check_range(int(value), keyword)

	return convert


def _to_double(value: Any) -> float:
	if value is None:
		return 0.0
	if isinstance(value, str):
		return parse_double(value)
	return float(value)


def _to_decimal(value: Any) -> Decimal:
	if value is None:
		return Decimal(0)
	if isinstance(value, str):
		return parse_decimal(value)
	return Decimal(value)


def _to_boolean(value: Any) -> bool:
	if value is None:
		return False
	if isinstance(value, str):
		return parse_boolean(value)
	return bool(value)


CONVERT_STATICS: dict[str, Any] = {
	"ToInt16": _to_integral("short"),
	"ToInt32": _to_integral("int"),
	"ToInt64": _to_integral("long"),
	"ToByte": _to_integral("byte"),
	"ToDouble": _to_double,
	"ToSingle": _to_double,
	"ToDecimal": _to_decimal,
	"ToBoolean": _to_boolean,
	"ToString": to_string,
	"ToChar": lambda value: chr(value) if isinstance(value, int) else str(value)[0],
	"ToDateTime": lambda value: datetime.min if value is None else parse_datetime(value),
}


# Environment / Console / Object --------------------------------------------

ENVIRONMENT_STATICS: dict[str, Any] = {
	"NewLine": StaticProperty(lambda: "\r\n"),
	"MachineName": StaticProperty(platform.node),
	"ProcessorCount": StaticProperty(lambda: os.cpu_count() or 1),
	"TickCount": StaticProperty(lambda: int(time.monotonic() * 1000) & 0x7FFFFFFF),
}


def _write(value: Any = None, *args: Any) -> None:
	text = compose_format(value, args) if args else to_string(value)
	sys.stdout.write(text)


def _write_line(value: Any = None, *args: Any) -> None:
	_write(value, *args)
	sys.stdout.write("\n")


CONSOLE_STATICS: dict[str, Any] = {
	"Write": _write,
	"WriteLine": _write_line,
}

OBJECT_STATICS: dict[str, Any] = {
	"ReferenceEquals": lambda a, b: a is b,
	"Equals": equals,
}


# Uri -----------------------------------------------------------------------

UriFormatException = derive_exception("UriFormatException", "System.UriFormatException", FormatException)


class Uri(CsObject):
	__cs_name__ = "System.Uri"
	__cs_members__ = (
		("AbsolutePath", "AbsolutePath", "property"),
		("AbsoluteUri", "AbsoluteUri", "property"),
		("Host", "Host", "property"),
		("Port", "Port", "property"),
		("Query", "Query", "property"),
		("Scheme", "Scheme", "property"),
		("OriginalString", "OriginalString", "property"),
	)

	_DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21}

	def __init__(self, text: str) -> None:
		if text is None:
			raise ArgumentNullException("Value cannot be null.\nParameter name: uriString")
		parts = urlsplit(text)
		if not parts.scheme or not parts.netloc:
			raise UriFormatException("Invalid URI: The format of the URI could not be determined.")
		self._parts = parts
		self.OriginalString = text

	@property
	def Scheme(self) -> str:
		return self._parts.scheme

	@property
	def Host(self) -> str:
		return self._parts.hostname or ""

	@property
	def Port(self) -> int:
		return self._parts.port or self._DEFAULT_PORTS.get(self._parts.scheme, -1)

	@property
	def AbsolutePath(self) -> str:
		return self._parts.path or "/"

	@property
	def Query(self) -> str:
		return f"?{self._parts.query}" if self._parts.query else ""

	@property
	def AbsoluteUri(self) -> str:
		return f"{self.Scheme}://{self._parts.netloc}{self.AbsolutePath}{self.Query}"

	def ToString(self) -> str:
		return self.OriginalString

	def __cs_json__(self) -> str:
		return self.OriginalString
