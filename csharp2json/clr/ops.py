# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Operators and string conversion with C# semantics.

Only operators whose Python meaning differs from C# get a helper here: `+`
(string concatenation), `/` and `%` (integer truncation toward zero), `==`
(reference equality for classes). Everything else compiles to the plain
Python operator. Integral results are narrowed to their type's width with
`wrap`, as in an unchecked C# context.
"""

from __future__ import annotations

import enum
import math
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence
from uuid import UUID

from .exceptions import DivideByZeroException, FormatException, OverflowException, null_reference
from .object import CsObject, CsValueType


def _is_integral(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


# keyword -> (bits, signed)
INTEGRAL_WIDTHS = {
	"sbyte": (8, True),
	"byte": (8, False),
	"short": (16, True),
	"ushort": (16, False),
	"int": (32, True),
	"uint": (32, False),
	"long": (64, True),
	"ulong": (64, False),
}


def wrap(value: Any, kind: str) -> Any:
	"""Reduce an integer to the range of the integral type `kind` (two's complement)."""
	if value is None:
		return None
	bits, signed = INTEGRAL_WIDTHS[kind]
	value &= (1 << bits) - 1
	if signed and value >> (bits - 1):
		value -= 1 << bits
	return value


def format_double(value: float) -> str:
	if math.isnan(value):
		return "NaN"
	if math.isinf(value):
		return "Infinity" if value > 0 else "-Infinity"
	if value == int(value) and abs(value) < 1e15:
		return str(int(value))
	text = repr(value)
	if "e" in text:
		mantissa, exponent = text.split("e")
		if mantissa.endswith(".0"):
			mantissa = mantissa[:-2]
		return f"{mantissa}E{exponent}"
	return text[:-2] if text.endswith(".0") else text


def format_timespan(value: timedelta) -> str:
	"""`[-][d.]hh:mm:ss[.fffffff]`, the invariant `TimeSpan.ToString()`."""
	ticks = timespan_ticks(value)
	sign = "-" if ticks < 0 else ""
	ticks = abs(ticks)
	days, rem = divmod(ticks, 864_000_000_000)
	hours, rem = divmod(rem, 36_000_000_000)
	minutes, rem = divmod(rem, 600_000_000)
	seconds, fraction = divmod(rem, 10_000_000)
	text = f"{sign}{str(days) + '.' if days else ''}{hours:02d}:{minutes:02d}:{seconds:02d}"
	if fraction:
		text += f".{fraction:07d}"
	return text


def timespan_ticks(value: timedelta) -> int:
	return (value.days * 86_400 + value.seconds) * 10_000_000 + value.microseconds * 10


def format_datetime(value: datetime) -> str:
	"""Invariant-culture `DateTime.ToString()`."""
	return (
		f"{value.month:02d}/{value.day:02d}/{value.year:04d} "
		f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
	)


def format_value(value: Any) -> str:
	"""`value.ToString()` for a non-null value."""
	if value is None:
		raise null_reference()
	if isinstance(value, bool):
		return "True" if value else "False"
	if isinstance(value, enum.Enum):
		return value._name_ if value._name_ is not None else str(int(value))
	if isinstance(value, int):
		return str(value)
	if isinstance(value, float):
		return format_double(value)
	if isinstance(value, Decimal):
		return format(value, "f")
	if isinstance(value, str):
		return value
	if isinstance(value, datetime):
		return format_datetime(value)
	if isinstance(value, timedelta):
		return format_timespan(value)
	if isinstance(value, UUID):
		return str(value)
	if isinstance(value, list):
		return "System.Object[]"
	to_string = getattr(value, "ToString", None)
	if to_string is not None:
		return to_string()
	return str(value)


def to_string(value: Any) -> str:
	"""String conversion used by concatenation: null becomes the empty string."""
	if value is None:
		return ""
	return format_value(value)


# Arithmetic ----------------------------------------------------------------


def add(left: Any, right: Any) -> Any:
	if isinstance(left, str) or isinstance(right, str):
		return to_string(left) + to_string(right)
	if left is None or right is None:
		return None
	return left + right


def div(left: Any, right: Any) -> Any:
	if left is None or right is None:
		return None
	if _is_integral(left) and _is_integral(right):
		if right == 0:
			raise DivideByZeroException("Attempted to divide by zero.")
		quotient = abs(left) // abs(right)
		return quotient if (left >= 0) == (right >= 0) else -quotient
	if isinstance(left, Decimal) or isinstance(right, Decimal):
		if right == 0:
			raise DivideByZeroException("Attempted to divide by zero.")
		return Decimal(left) / Decimal(right)
	try:
		return left / right
	except ZeroDivisionError:
		if left == 0 or math.isnan(left):
			return math.nan
		return math.copysign(math.inf, left) * math.copysign(1.0, right)


def mod(left: Any, right: Any) -> Any:
	if left is None or right is None:
		return None
	if _is_integral(left) and _is_integral(right):
		if right == 0:
			raise DivideByZeroException("Attempted to divide by zero.")
		remainder = abs(left) % abs(right)
		return remainder if left >= 0 else -remainder
	if isinstance(left, Decimal) or isinstance(right, Decimal):
		if right == 0:
			raise DivideByZeroException("Attempted to divide by zero.")
		return Decimal(left) % Decimal(right)
	if right == 0:
		return math.nan
	return math.fmod(left, right)


def equals(left: Any, right: Any) -> bool:
	if left is right:
		return True
	if left is None or right is None:
		return False
	if isinstance(left, CsObject) and not isinstance(left, CsValueType):
		return False
	return left == right


def not_equals(left: Any, right: Any) -> bool:
	return not equals(left, right)


BINARY: dict[str, Callable[[Any, Any], Any]] = {
	"+": add,
	"-": lambda a, b: None if a is None or b is None else a - b,
	"*": lambda a, b: None if a is None or b is None else a * b,
	"/": div,
	"%": mod,
	"&": lambda a, b: a & b,
	"|": lambda a, b: a | b,
	"^": lambda a, b: a ^ b,
	"<<": lambda a, b: a << b,
}


# Arrays --------------------------------------------------------------------


def new_array(size: Any, value: Any = None, factory: Optional[Callable[[], Any]] = None) -> list:
	"""`new T[size]`: every element set to T's default."""
	if not _is_integral(size):
		raise FormatException(f"Array size must be an integer, got {size!r}.")
	if size < 0:
		raise OverflowException("Arithmetic operation resulted in an overflow.")
	if factory is not None:
		return [factory() for _ in range(size)]
	return [value] * size


# Composite formatting ------------------------------------------------------

_FORMAT_ITEM = re.compile(r"\{\{|\}\}|\{(\d+)(?:,(-?\d+))?(?::([^}]*))?\}")


def apply_format(value: Any, spec: str) -> str:
	if value is None:
		return ""
	if not spec:
		return format_value(value)
	kind, digits = spec[0].upper(), spec[1:]
	if kind in ("N", "F") and isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
		places = int(digits) if digits else 2
		grouping = "," if kind == "N" else ""
		return format(value, f"{grouping}.{places}f")
	if kind == "D" and _is_integral(value):
		width = int(digits) if digits else 0
		sign = "-" if value < 0 else ""
		return sign + str(abs(value)).zfill(width)
	if kind == "X" and _is_integral(value):
		width = int(digits) if digits else 0
		text = format(value, "x" if spec[0] == "x" else "X")
		return text.zfill(width)
	if kind == "P" and isinstance(value, (int, float, Decimal)):
		places = int(digits) if digits else 2
		return format(value * 100, f",.{places}f") + " %"
	return format_value(value)


def compose_format(template: str, args: Sequence[Any]) -> str:
	"""`string.Format(template, args...)`."""
	if template is None:
		raise null_reference()

	def repl(match: re.Match) -> str:
		token = match.group(0)
		if token == "{{":
			return "{"
		if token == "}}":
			return "}"
		index = int(match.group(1))
		if index >= len(args):
			raise FormatException("Index (zero based) must be greater than or equal to zero and less than the size of the argument list.")
		text = apply_format(args[index], match.group(3) or "")
		if match.group(2):
			width = int(match.group(2))
			text = text.ljust(-width) if width < 0 else text.rjust(width)
		return text

	return _FORMAT_ITEM.sub(repl, template)


__all__ = [
	"BINARY",
	"add",
	"apply_format",
	"compose_format",
	"div",
	"equals",
	"format_datetime",
	"format_double",
	"format_timespan",
	"format_value",
	"mod",
	"new_array",
	"not_equals",
	"timespan_ticks",
	"to_string",
	"wrap",
]
