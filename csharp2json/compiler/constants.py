# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compile-time constant folding with C# typing rules.

Constants are `(value, kind)` pairs where `kind` is a C# keyword (`int`,
`ulong`, `double`, `string`, ...), `null`, or `enum` (with the enum type kept
alongside). Binary operators use C#'s numeric promotion; integral results that
overflow their type are reported as CS0220, integral division by zero as
CS0020. Everything the folder cannot prove constant yields None.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from ..clr.system import INTEGRAL_RANGES
from ..parser import ast

INTEGRAL = ("sbyte", "byte", "short", "ushort", "int", "uint", "long", "ulong", "char")
FLOATING = ("float", "double")
NUMERIC = INTEGRAL + FLOATING + ("decimal",)
_UNSIGNED = ("byte", "ushort", "uint", "ulong", "char")


@dataclass(frozen=True)
class Constant:
	value: Any
	kind: str
	# Enum type (compiler TypeSymbol or reference RuntimeType) when kind == "enum".
	enum: Any = None

	@property
	def numeric_kind(self) -> str:
		"""The kind arithmetic sees: enums decay to their underlying type."""
		if self.kind == "enum":
			return enum_underlying(self.enum)
		return self.kind


def enum_underlying(enum_type: Any) -> str:
	return getattr(enum_type, "underlying", None) or "int"


def fits(value: int, keyword: str) -> bool:
	lo, hi = INTEGRAL_RANGES[keyword]
	return lo <= value <= hi


def promote(left: str, right: str) -> Optional[str]:
	"""Binary numeric promotion; None when the pair is not numeric."""
	if left not in NUMERIC or right not in NUMERIC:
		return None
	if "decimal" in (left, right):
		return "decimal"
	if "double" in (left, right):
		return "double"
	if "float" in (left, right):
		return "float"
	if "ulong" in (left, right):
		return "ulong"
	if "long" in (left, right):
		return "long"
	if "uint" in (left, right):
		signed = {"sbyte", "short", "int"}
		return "long" if left in signed or right in signed else "uint"
	return "int"


def _numeric(value: Any, kind: str) -> Any:
	if kind == "char":
		return ord(value)
	return value


def _as(value: Any, kind: str) -> Any:
	if kind == "decimal":
		return value if isinstance(value, Decimal) else Decimal(repr(value) if isinstance(value, float) else value)
	if kind in FLOATING:
		return float(value)
	return value


def _truncate_div(left: int, right: int) -> int:
	quotient = abs(left) // abs(right)
	return quotient if (left >= 0) == (right >= 0) else -quotient


def _truncate_mod(left: int, right: int) -> int:
	remainder = abs(left) % abs(right)
	return remainder if left >= 0 else -remainder


class ConstantFolder:
	"""
	Folds expressions given a `resolve` callback for names.

	`resolve(expr)` is asked about `NameRef`, `MemberAccess` and
	`PredefinedMember` nodes and returns their Constant, or None when the name
	is not a constant.
	"""

	def __init__(
		self,
		resolve: Callable[[ast.Expr], Optional[Constant]],
		report: Callable[[str, str, Any], None],
	) -> None:
		self._resolve = resolve
		self._report = report

	def fold(self, expr: Any) -> Optional[Constant]:
		if isinstance(expr, ast.Literal):
			return self._literal(expr)
		if isinstance(expr, (ast.NameRef, ast.MemberAccess, ast.PredefinedMember)):
			return self._resolve(expr)
		if isinstance(expr, ast.Unary):
			operand = self.fold(expr.operand)
			return None if operand is None else self._unary(expr, operand)
		if isinstance(expr, ast.Binary):
			left = self.fold(expr.left)
			if left is None:
				return None
			right = self.fold(expr.right)
			if right is None:
				return None
			return self._binary(expr, left, right)
		if isinstance(expr, ast.Conditional):
			cond = self.fold(expr.condition)
			if cond is None or cond.kind != "bool":
				return None
			then_c = self.fold(expr.then_expr)
			else_c = self.fold(expr.else_expr)
			if then_c is None or else_c is None:
				return None
			return then_c if cond.value else else_c
		return None

	def _literal(self, lit: ast.Literal) -> Constant:
		if lit.kind == "decimal":
			try:
				return Constant(Decimal(lit.value), "decimal")
			except InvalidOperation:
				self._report("CS0594", "Floating-point constant is outside the range of type 'decimal'", lit.loc)
				return Constant(Decimal(0), "decimal")
		if lit.kind in FLOATING and math.isinf(lit.value):
			self._report("CS0594", f"Floating-point constant is outside the range of type '{lit.kind}'", lit.loc)
		return Constant(lit.value, lit.kind)

	def _checked(self, value: Any, kind: str, loc: Any) -> Optional[Constant]:
		if kind in INTEGRAL and not fits(value, kind):
			self._report("CS0220", "The operation overflows at compile time in checked mode", loc)
			return None
		if kind == "float":
			value = _round_single(value)
		return Constant(value, kind)

	def _unary(self, expr: ast.Unary, operand: Constant) -> Optional[Constant]:
		op = expr.op
		if op == "!":
			return Constant(not operand.value, "bool") if operand.kind == "bool" else None
		kind = operand.numeric_kind
		if kind not in NUMERIC:
			return None
		value = _numeric(operand.value, kind)
		if kind in ("sbyte", "byte", "short", "ushort", "char"):
			kind = "int"
		if op == "+":
			return Constant(value, kind)
		if op == "-":
			if kind == "uint":
				kind = "long"
			elif kind == "ulong":
				if value == 0:
					return Constant(0, "ulong")
				self._report("CS0023", "Operator '-' cannot be applied to operand of type 'ulong'", expr.loc)
				return None
			return self._checked(-value, kind, expr.loc)
		if op == "~":
			if kind not in INTEGRAL:
				return None
			if operand.kind == "enum":
				underlying = enum_underlying(operand.enum)
				flipped = ~value & _mask(underlying) if underlying in _UNSIGNED else ~value
				return Constant(flipped, "enum", operand.enum)
			if kind in ("uint", "ulong"):
				return Constant(~value & _mask(kind), kind)
			return Constant(~value, kind)
		return None

	def _binary(self, expr: ast.Binary, left: Constant, right: Constant) -> Optional[Constant]:
		op = expr.op
		if op in ("&&", "||"):
			if left.kind != "bool" or right.kind != "bool":
				return None
			return Constant(left.value and right.value if op == "&&" else left.value or right.value, "bool")
		if op == "+" and "string" in (left.kind, right.kind):
			if left.kind not in ("string", "null") or right.kind not in ("string", "null"):
				return None
			return Constant((left.value or "") + (right.value or ""), "string")
		if left.kind == "bool" and right.kind == "bool":
			return _bool_binary(op, left.value, right.value)
		if op in ("==", "!=") and (left.kind in ("string", "null") or right.kind in ("string", "null")):
			equal = left.value == right.value
			return Constant(equal if op == "==" else not equal, "bool")
		enum_type = left.enum if left.kind == "enum" else right.enum if right.kind == "enum" else None
		kind = promote(left.numeric_kind, right.numeric_kind)
		if kind is None:
			return None
		lv = _as(_numeric(left.value, left.numeric_kind), kind)
		rv = _as(_numeric(right.value, right.numeric_kind), kind)
		if op in ("==", "!=", "<", ">", "<=", ">="):
			return Constant(_compare(op, lv, rv), "bool")
		if op == "<<":
			if left.numeric_kind not in INTEGRAL or right.numeric_kind not in INTEGRAL:
				return None
			kind = left.numeric_kind if left.numeric_kind in ("uint", "long", "ulong") else "int"
			bits = 63 if kind in ("long", "ulong") else 31
			value = (_numeric(left.value, left.numeric_kind) << (rv & bits)) & _mask(kind)
			if kind in ("int", "long") and value > INTEGRAL_RANGES[kind][1]:
				value -= _mask(kind) + 1
			return Constant(value, kind)
		if op in ("&", "|", "^"):
			if kind not in INTEGRAL:
				return None
			value = lv & rv if op == "&" else lv | rv if op == "|" else lv ^ rv
			if enum_type is not None and left.kind == right.kind == "enum":
				return Constant(value, "enum", enum_type)
			return Constant(value, kind)
		if op in ("/", "%") and kind in INTEGRAL + ("decimal",) and rv == 0:
			self._report("CS0020", "Division by constant zero", expr.loc)
			return None
		if kind in INTEGRAL:
			if op == "+":
				value = lv + rv
			elif op == "-":
				value = lv - rv
			elif op == "*":
				value = lv * rv
			elif op == "/":
				value = _truncate_div(lv, rv)
			elif op == "%":
				value = _truncate_mod(lv, rv)
			else:
				return None
			if enum_type is not None and op in ("+", "-") and (left.kind == "enum") != (right.kind == "enum"):
				return Constant(value, "enum", enum_type)
			return self._checked(value, kind, expr.loc)
		return self._floating(op, lv, rv, kind, expr.loc)

	def _floating(self, op: str, lv: Any, rv: Any, kind: str, loc: Any) -> Optional[Constant]:
		if kind == "decimal":
			try:
				if op == "+":
					return Constant(lv + rv, kind)
				if op == "-":
					return Constant(lv - rv, kind)
				if op == "*":
					return Constant(lv * rv, kind)
				if op == "/":
					return Constant(lv / rv, kind)
				if op == "%":
					return Constant(lv % rv, kind)
			except InvalidOperation:
				self._report("CS0463", "Evaluation of the decimal constant expression failed", loc)
			return None
		if op == "+":
			value = lv + rv
		elif op == "-":
			value = lv - rv
		elif op == "*":
			value = lv * rv
		elif op == "/":
			if rv == 0:
				value = math.nan if lv == 0 or math.isnan(lv) else math.copysign(math.inf, lv) * math.copysign(1.0, rv)
			else:
				value = lv / rv
		elif op == "%":
			value = math.nan if rv == 0 else math.fmod(lv, rv)
		else:
			return None
		return Constant(_round_single(value) if kind == "float" else value, kind)


def convert(constant: Constant, target: str) -> Optional[Constant]:
	"""
	Implicit constant conversion to the predefined type `target`; None when
	C# would reject it.
	"""
	kind = constant.kind
	if kind == target:
		return constant
	if kind == "null":
		return None if target in NUMERIC or target == "bool" else constant
	if target == "object":
		return constant
	if kind == "enum":
		return None
	if target == "char":
		return None
	if target in INTEGRAL:
		if kind not in INTEGRAL or kind == "char" and target in ("sbyte", "byte", "short"):
			return None
		value = _numeric(constant.value, kind)
		if not fits(value, target):
			return None
		return Constant(value, target)
	if target in FLOATING:
		if kind in INTEGRAL:
			return Constant(float(_numeric(constant.value, kind)), target)
		if kind in FLOATING and not (kind == "double" and target == "float"):
			return Constant(constant.value, target)
		return None
	if target == "decimal":
		if kind in INTEGRAL:
			return Constant(Decimal(_numeric(constant.value, kind)), target)
		return None
	return None


def _round_single(value: float) -> float:
	if math.isnan(value) or math.isinf(value):
		return value
	try:
		return struct.unpack("f", struct.pack("f", value))[0]
	except OverflowError:
		return math.copysign(math.inf, value)


def _mask(kind: str) -> int:
	return (1 << (64 if kind in ("long", "ulong") else 32)) - 1


def _compare(op: str, left: Any, right: Any) -> bool:
	if op == "==":
		return left == right
	if op == "!=":
		return left != right
	if op == "<":
		return left < right
	if op == ">":
		return left > right
	if op == "<=":
		return left <= right
	return left >= right


def _bool_binary(op: str, left: bool, right: bool) -> Optional[Constant]:
	if op in ("&", "&&"):
		return Constant(left and right, "bool")
	if op in ("|", "||"):
		return Constant(left or right, "bool")
	if op in ("^", "!="):
		return Constant(left != right, "bool")
	if op == "==":
		return Constant(left == right, "bool")
	return None



__all__ = ["Constant", "ConstantFolder", "FLOATING", "INTEGRAL", "NUMERIC", "convert", "enum_underlying", "fits"]
