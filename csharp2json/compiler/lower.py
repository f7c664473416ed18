# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lowering of member bodies to Python source.

`FunctionLowerer` binds one body (method, accessor, constructor, field
initializers) and appends Python statements to `lines`. Expressions lower to
`Value`s: the Python expression text plus whatever static type is known.
Names that denote types or namespaces lower to `TypeName`/`NamespaceName` so
member access can continue through them.

Generated code reaches the runtime only through `_rt` (see `runtime`),
reference types through the `_rN` aliases the module builder hands out, and
user types through their `_Tk` class names.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from ..clr.names import py_ident
from ..clr.ops import INTEGRAL_WIDTHS
from ..parser import ast
from ..references import RuntimeType
from .binder import display_name, signature_text, type_display
from .constants import FLOATING, INTEGRAL, NUMERIC, Constant, convert, promote
from .symbols import BoundType, FieldSymbol, MethodSymbol, NamespaceSymbol, ParamSymbol, PropertySymbol, TypeSymbol

_IMPLICIT_NUMERIC: Dict[str, tuple] = {
	"sbyte": ("short", "int", "long", "float", "double", "decimal"),
	"byte": ("short", "ushort", "int", "uint", "long", "ulong", "float", "double", "decimal"),
	"short": ("int", "long", "float", "double", "decimal"),
	"ushort": ("int", "uint", "long", "ulong", "float", "double", "decimal"),
	"int": ("long", "float", "double", "decimal"),
	"uint": ("long", "ulong", "float", "double", "decimal"),
	"long": ("float", "double", "decimal"),
	"ulong": ("float", "double", "decimal"),
	"char": ("ushort", "int", "uint", "long", "ulong", "float", "double", "decimal"),
	"float": ("double",),
}
_COMPARISONS = ("<", ">", "<=", ">=")
_RUNTIME_BINARY = {"+": "_rt.add", "/": "_rt.div", "%": "_rt.mod", "==": "_rt.equals", "!=": "_rt.not_equals"}
# Operators whose integral result can leave the range of its type.
_WRAPPING = frozenset({"+", "-", "*", "<<"})
_OBJECT_METHODS = ("ToString", "Equals", "GetHashCode", "GetType")


@dataclass(frozen=True)
class Value:
	code: str
	type: Optional[BoundType] = None
	constant: Optional[Constant] = None
	# Freshly created (no other reference can observe it).
	fresh: bool = False


@dataclass(frozen=True)
class TypeName:
	target: Any


@dataclass(frozen=True)
class NamespaceName:
	ns: NamespaceSymbol


Lowered = Union[Value, TypeName, NamespaceName]
NULL = Value("None", constant=Constant(None, "null"))


@dataclass
class _Slot:
	"""Something assignable: how to read it, write it and update it in place."""

	load: str
	store: Callable[[str], str]
	type: Optional[BoundType] = None
	update: Optional[Callable[[str, str], str]] = None


def py_tuple(items: List[str]) -> str:
	if not items:
		return "()"
	if len(items) == 1:
		return f"({items[0]},)"
	return f"({', '.join(items)})"


def _keyword_of(bound: Optional[BoundType]) -> Optional[str]:
	"""Predefined keyword of `bound`, looking through `?`."""
	if bound is None or bound.ranks or not isinstance(bound.target, RuntimeType) or bound.type_param is not None:
		return None
	return bound.target.keyword


def _wrapped(code: str, bound: Optional[BoundType]) -> str:
	keyword = _keyword_of(bound)
	if keyword in INTEGRAL_WIDTHS:
		return f"_rt.wrap({code}, {keyword!r})"
	return code


def _contains_return(stmt: Any) -> bool:
	"""Whether every path through `stmt` ends in return or throw."""
	if isinstance(stmt, (ast.ReturnStmt, ast.ThrowStmt)):
		return True
	if isinstance(stmt, ast.Block):
		return any(_contains_return(s) for s in stmt.statements)
	if isinstance(stmt, ast.IfStmt):
		return stmt.else_stmt is not None and _contains_return(stmt.then_stmt) and _contains_return(stmt.else_stmt)
	return False


class FunctionLowerer:
	"""
	Lowers the body of one member.

	`kind` is one of `method`, `getter`, `setter`, `ctor`, `ctor_init` (the
	arguments of `: base(...)`/`: this(...)`), `field_init`, `static_init`.
	"""

	def __init__(
		self,
		module: Any,
		owner: TypeSymbol,
		*,
		kind: str = "method",
		static: bool = False,
		returns: Optional[BoundType] = None,
		void: bool = True,
		params: List[ParamSymbol] = (),
		where: str = "",
		depth: int = 1,
	) -> None:
		self.module = module
		self.binder = module.binder
		self.bag = module.binder.bag
		self.owner = owner
		self.kind = kind
		self.static = static
		self.returns = returns
		self.void = void
		self.where = where
		self.depth = depth
		self.lines: List[str] = []
		self.scopes: List[Dict[str, Optional[BoundType]]] = [{p.name: p.type for p in params}]

	# Output ----------------------------------------------------------------

	def emit(self, line: str) -> None:
		self.lines.append("\t" * self.depth + line)

	def _suite(self, stmt: Any) -> None:
		start = len(self.lines)
		self.depth += 1
		if isinstance(stmt, ast.LocalDecl):
			self.bag.error("CS1023", "Embedded statement cannot be a declaration or labeled statement", stmt.loc)
		else:
			self.statement(stmt)
		if len(self.lines) == start:
			self.emit("pass")
		self.depth -= 1

	# Locals ----------------------------------------------------------------

	def is_local(self, name: str) -> bool:
		return any(name in scope for scope in self.scopes)

	def _local_type(self, name: str) -> Optional[BoundType]:
		for scope in reversed(self.scopes):
			if name in scope:
				return scope[name]
		return None

	def declare_local(self, name: str, bound: Optional[BoundType], loc: Any) -> None:
		if name in self.scopes[-1]:
			self.bag.error("CS0128", f"A local variable or function named '{name}' is already defined in this scope", loc)
		elif self.is_local(name):
			self.bag.error(
				"CS0136",
				f"A local or parameter named '{name}' cannot be declared in this scope because that name is used in an "
				"enclosing local scope to define a local or parameter",
				loc,
			)
		self.scopes[-1][name] = bound

	# Types and defaults ----------------------------------------------------

	def keyword_type(self, keyword: str) -> Optional[BoundType]:
		if keyword == "null":
			return None
		return BoundType(self.binder.references.keyword(keyword))

	def resolve_type(self, ref: ast.TypeRef) -> BoundType:
		return self.binder.resolve_type(ref, self.owner, self.owner.scope)

	def type_code(self, target: Any) -> str:
		if isinstance(target, TypeSymbol):
			return target.py_name
		return self.module.ref(target)

	def constant_code(self, constant: Constant) -> str:
		value, kind = constant.value, constant.kind
		if kind == "null":
			return "None"
		if kind == "bool":
			return "True" if value else "False"
		if kind in ("string", "char"):
			return repr(value)
		if kind == "decimal":
			return f"_rt.Decimal({str(value)!r})"
		if kind == "enum":
			if isinstance(constant.enum, TypeSymbol):
				return f"{constant.enum.py_name}({value})"
			return f"{self.module.ref(constant.enum)}.python_type({value})"
		if kind in FLOATING:
			if math.isnan(value):
				return "_rt.NAN"
			if math.isinf(value):
				return "_rt.INFINITY" if value > 0 else "(-_rt.INFINITY)"
			text = repr(float(value))
			return f"({text})" if text.startswith("-") else text
		text = str(value)
		return f"({text})" if text.startswith("-") else text

	def constant_type(self, constant: Constant) -> Optional[BoundType]:
		if constant.kind == "enum":
			return BoundType(constant.enum)
		return self.keyword_type(constant.kind)

	def default_code(self, bound: Optional[BoundType]) -> str:
		"""Python expression for `default(T)`."""
		if bound is None or bound.ranks or bound.nullable or bound.type_param is not None or bound.target is None:
			return "None"
		target = bound.target
		if isinstance(target, TypeSymbol):
			if target.kind == "enum":
				return f"{target.py_name}(0)"
			if target.kind == "struct":
				return f"_rt.zero({target.py_name})"
			return "None"
		keyword = target.keyword
		if keyword in INTEGRAL and keyword != "char":
			return "0"
		if keyword in FLOATING:
			return "0.0"
		if keyword == "decimal":
			return "_rt.Decimal('0')"
		if keyword == "bool":
			return "False"
		if keyword == "char":
			return repr("\0")
		if target.value_type:
			return f"{self.module.ref(target)}.default_value()"
		return "None"

	# Context checks --------------------------------------------------------

	def _this_allowed(self, loc: Any) -> bool:
		if self.static:
			self.bag.error(
				"CS0026", "Keyword 'this' is not valid in a static property, static method, or static field initializer", loc
			)
			return False
		if self.kind in ("field_init", "ctor_init"):
			self.bag.error("CS0027", "Keyword 'this' is not available in the current context", loc)
			return False
		return True

	def _instance_ok(self, what: str, loc: Any) -> bool:
		if self.kind == "field_init":
			self.bag.error("CS0236", f"A field initializer cannot reference the non-static field, method, or property '{what}'", loc)
			return False
		if self.static or self.kind == "ctor_init":
			self.bag.error("CS0120", f"An object reference is required for the non-static field, method, or property '{what}'", loc)
			return False
		return True

	# Expressions -----------------------------------------------------------

	def _fold(self, expr: Any) -> Optional[Constant]:
		folder = self.binder.folder(
			lambda e: self.binder.constant_of_name(e, self.owner, self.owner.scope, is_local=self.is_local)
		)
		return folder.fold(expr)

	def value(self, expr: Any) -> Value:
		"""Lower `expr` where a value is required."""
		lowered = self.lower(expr)
		if isinstance(lowered, Value):
			return lowered
		if isinstance(lowered, NamespaceName):
			self.bag.error("CS0118", f"'{lowered.ns.name}' is a namespace but is used like a variable", expr.loc)
		elif isinstance(lowered.target, str):
			self.bag.error("CS0119", f"'{lowered.target}' is a type parameter, which is not valid in the given context", expr.loc)
		else:
			self.bag.error("CS0119", f"'{display_name(lowered.target)}' is a type, which is not valid in the given context", expr.loc)
		return NULL

	def lower(self, expr: Any) -> Lowered:
		if isinstance(expr, (ast.Literal, ast.Unary, ast.Binary, ast.Conditional, ast.NameRef, ast.MemberAccess, ast.PredefinedMember)):
			constant = self._fold(expr)
			if constant is not None:
				return Value(self.constant_code(constant), self.constant_type(constant), constant)
		if isinstance(expr, ast.Literal):
			return NULL
		if isinstance(expr, ast.NameRef):
			return self._name(expr)
		if isinstance(expr, ast.ThisRef):
			if not self._this_allowed(expr.loc):
				return NULL
			return Value("self", BoundType(self.owner))
		if isinstance(expr, ast.BaseAccess):
			return self._base_member(expr)
		if isinstance(expr, ast.MemberAccess):
			return self._member_access(expr)
		if isinstance(expr, ast.PredefinedMember):
			rt = self.binder.references.keyword(expr.keyword)
			return self._static_member(TypeName(rt), expr.name, expr.loc)
		if isinstance(expr, ast.Invocation):
			return self._invocation(expr)
		if isinstance(expr, ast.ElementAccess):
			target = self.value(expr.target)
			index = self.value(expr.index)
			return Value(f"_rt.get_item({target.code}, {index.code})", self._element_type(target.type))
		if isinstance(expr, ast.Unary):
			return self._unary(expr)
		if isinstance(expr, ast.Binary):
			return self._binary(expr)
		if isinstance(expr, ast.Conditional):
			cond = self.value(expr.condition)
			then_v = self.value(expr.then_expr)
			else_v = self.value(expr.else_expr)
			result = then_v.type if then_v.type is not None else else_v.type
			return Value(f"({then_v.code} if {cond.code} else {else_v.code})", result)
		if isinstance(expr, ast.ObjectCreation):
			return self._creation(expr)
		if isinstance(expr, ast.ArrayCreation):
			return self._array_creation(expr)
		if isinstance(expr, ast.DefaultValue):
			if expr.type is None:
				return NULL
			bound = self.resolve_type(expr.type)
			return Value(self.default_code(bound), bound, fresh=True)
		if isinstance(expr, ast.TypeOf):
			return self._typeof(expr)
		raise NotImplementedError(f"cannot lower {type(expr).__name__}")

	def _element_type(self, bound: Optional[BoundType]) -> Optional[BoundType]:
		if bound is None:
			return None
		if bound.ranks:
			return bound.element()
		if _keyword_of(bound) == "string":
			return self.keyword_type("char")
		return None

	# Names -----------------------------------------------------------------

	def _lookup_member(self, name: str) -> tuple[Optional[TypeSymbol], Any, bool]:
		"""Member `name` of the owner or an enclosing type: (declaring type, member, via enclosing)."""
		outer: Optional[TypeSymbol] = self.owner
		while outer is not None:
			declaring, member = outer.find_member(name)
			if member is not None:
				return declaring, member, outer is not self.owner
			outer = outer.outer
		return None, None, False

	def _reference_member(self, name: str) -> bool:
		root = self.owner.reference_root()
		if root is not None:
			return name in root.instance_members
		return name in _OBJECT_METHODS

	def _name(self, expr: ast.NameRef) -> Lowered:
		name = expr.name
		if self.is_local(name):
			return Value(self._local_code(name), self._local_type(name))
		declaring, member, via_outer = self._lookup_member(name)
		if member is not None:
			return self._member_read(declaring, member, expr.loc, via_type=via_outer and not self._is_static_member(member))
		if self._reference_member(name):
			if self._instance_ok(f"{display_name(self.owner)}.{name}", expr.loc):
				return Value(f"_rt.get_member(self, {name!r})")
			return NULL
		found = self.binder.lookup_type_name(name, 0, self.owner, self.owner.scope, report=False)
		if isinstance(found, NamespaceSymbol):
			return NamespaceName(found)
		if found is not None:
			return TypeName(found)
		self.bag.error("CS0103", f"The name '{name}' does not exist in the current context", expr.loc)
		return NULL

	@staticmethod
	def _local_code(name: str) -> str:
		return py_ident(name)

	@staticmethod
	def _is_static_member(member: Any) -> bool:
		if isinstance(member, list):
			return all(m.is_static for m in member)
		if isinstance(member, TypeSymbol):
			return True
		return member.is_static

	def _member_read(self, declaring: TypeSymbol, member: Any, loc: Any, *, via_type: bool = False, receiver: str = "self") -> Lowered:
		if isinstance(member, TypeSymbol):
			return TypeName(member)
		if isinstance(member, list):
			self.bag.error(
				"CS0428",
				f"Cannot convert method group '{member[0].name}' to non-delegate type 'object'. Did you intend to invoke the method?",
				loc,
			)
			return NULL
		what = f"{display_name(declaring)}.{member.name}"
		if isinstance(member, FieldSymbol):
			if member.is_const:
				constant = self.binder.const_value(member)
				if constant is None:
					return NULL
				return Value(self.constant_code(constant), member.type, constant)
			if member.is_static:
				return Value(f"{declaring.py_name}.{member.py_name}", member.type)
		else:
			if not member.has_getter:
				self.bag.error("CS0154", f"The property or indexer '{what}' cannot be used in this context because it lacks the get accessor", loc)
				return NULL
			if member.is_static:
				if member.is_auto:
					return Value(f"{declaring.py_name}.{member.py_name}", member.type)
				return Value(f"{declaring.py_name}_get_{member.py_name}()", member.type)
		if via_type:
			self.bag.error("CS0120", f"An object reference is required for the non-static field, method, or property '{what}'", loc)
			return NULL
		if receiver == "self" and not self._instance_ok(what, loc):
			return NULL
		return Value(f"{receiver}.{member.py_name}", member.type)

	def _base_class_code(self) -> str:
		base = self.owner.user_base
		if base is not None:
			return base.py_name
		root = self.owner.reference_root()
		if root is not None:
			return f"{self.module.ref(root)}.python_type"
		return "_rt.CsValueType" if self.owner.kind == "struct" else "_rt.CsObject"

	def _base_allowed(self, loc: Any) -> bool:
		if self.static or self.kind in ("field_init", "ctor_init"):
			self.bag.error("CS1511", "Keyword 'base' is not available in a static method", loc)
			return False
		return True

	def _base_member(self, expr: ast.BaseAccess) -> Value:
		if not self._base_allowed(expr.loc):
			return NULL
		base = self.owner.user_base
		member_type = None
		if base is not None:
			declaring, member = base.find_member(expr.name)
			if isinstance(member, (FieldSymbol, PropertySymbol)):
				member_type = member.type
			elif member is None and not self._reference_member(expr.name):
				self.bag.error("CS0117", f"'{display_name(base)}' does not contain a definition for '{expr.name}'", expr.loc)
				return NULL
		return Value(f"_rt.base_get(self, {self._base_class_code()}, {expr.name!r})", member_type)

	def _member_access(self, expr: ast.MemberAccess) -> Lowered:
		if isinstance(expr.target, ast.ThisRef):
			if not self._this_allowed(expr.target.loc):
				return NULL
			declaring, member = self.owner.find_member(expr.name)
			if member is not None:
				if self._is_static_member(member) and not isinstance(member, TypeSymbol):
					self._static_via_instance(declaring, expr.name, expr.loc)
				return self._member_read(declaring, member, expr.loc)
			if self._reference_member(expr.name):
				return Value(f"_rt.get_member(self, {expr.name!r})")
			self._no_definition(BoundType(self.owner), expr.name, expr.loc)
			return NULL
		container = self.lower(expr.target)
		if isinstance(container, NamespaceName):
			ns = container.ns
			found = ns.types.get((expr.name, 0))
			if found is not None:
				return TypeName(found)
			if expr.name in ns.children:
				return NamespaceName(ns.children[expr.name])
			self.bag.error(
				"CS0234",
				f"The type or namespace name '{expr.name}' does not exist in the namespace '{ns.name}' "
				"(are you missing an assembly reference?)",
				expr.loc,
			)
			return NULL
		if isinstance(container, TypeName):
			return self._static_member(container, expr.name, expr.loc)
		return self._instance_member(container, expr.name, expr.loc)

	def _static_member(self, container: TypeName, name: str, loc: Any) -> Lowered:
		target = container.target
		if isinstance(target, str):
			self.bag.error("CS0704", f"Cannot do non-virtual member lookup in '{target}' because it is a type parameter", loc)
			return NULL
		if isinstance(target, TypeSymbol):
			if target.kind == "enum":
				self.bag.error("CS0117", f"'{display_name(target)}' does not contain a definition for '{name}'", loc)
				return NULL
			declaring, member = target.find_member(name)
			if member is None:
				self.bag.error("CS0117", f"'{display_name(target)}' does not contain a definition for '{name}'", loc)
				return NULL
			return self._member_read(declaring, member, loc, via_type=not self._is_static_member(member))
		if target.has_static(name):
			if target.is_static_method(name):
				self.bag.error(
					"CS0428",
					f"Cannot convert method group '{name}' to non-delegate type 'object'. Did you intend to invoke the method?",
					loc,
				)
				return NULL
			return Value(f"{self.module.ref(target)}.get_static({name!r})")
		self.bag.error("CS0117", f"'{display_name(target)}' does not contain a definition for '{name}'", loc)
		return NULL

	def _static_via_instance(self, declaring: TypeSymbol, name: str, loc: Any) -> None:
		self.bag.error(
			"CS0176",
			f"Member '{display_name(declaring)}.{name}' cannot be accessed with an instance reference; qualify it with a type name instead",
			loc,
		)

	def _no_definition(self, bound: BoundType, name: str, loc: Any) -> None:
		shown = type_display(bound)
		self.bag.error(
			"CS1061",
			f"'{shown}' does not contain a definition for '{name}' and no accessible extension method '{name}' "
			f"accepting a first argument of type '{shown}' could be found (are you missing a using directive or an assembly reference?)",
			loc,
		)

	def _user_member(self, receiver: Value, name: str, loc: Any) -> tuple[bool, Any]:
		"""Check `name` on a receiver of user type; returns (ok, member or None)."""
		sym = receiver.type.user if receiver.type is not None and not receiver.type.nullable else None
		if sym is None or sym.kind == "enum":
			return True, None
		declaring, member = sym.find_member(name)
		if member is None:
			if sym.kind == "interface" or self.binder.inherits_member(sym, name):
				return True, None
			self._no_definition(receiver.type, name, loc)
			return False, None
		if isinstance(member, TypeSymbol) or self._is_static_member(member):
			self._static_via_instance(declaring, name, loc)
			return False, None
		return True, member

	def _instance_member(self, receiver: Value, name: str, loc: Any) -> Value:
		ok, member = self._user_member(receiver, name, loc)
		if not ok:
			return NULL
		member_type = None
		if isinstance(member, list):
			self.bag.error(
				"CS0428",
				f"Cannot convert method group '{name}' to non-delegate type 'object'. Did you intend to invoke the method?",
				loc,
			)
			return NULL
		if member is not None:
			member_type = member.type
		elif _keyword_of(receiver.type) == "string" and name == "Length":
			member_type = self.keyword_type("int")
		return Value(f"_rt.get_member({receiver.code}, {name!r})", member_type)

	# Operators -------------------------------------------------------------

	def _numeric_kind(self, value: Value) -> Optional[str]:
		keyword = _keyword_of(value.type)
		if value.type is not None and value.type.nullable:
			return None
		return keyword if keyword in NUMERIC else None

	def _unary(self, expr: ast.Unary) -> Value:
		operand = self.value(expr.operand)
		if expr.op == "!":
			return Value(f"(not {operand.code})", self.keyword_type("bool"))
		kind = self._numeric_kind(operand)
		result = None
		if kind is not None:
			result = self.keyword_type("int" if kind in ("sbyte", "byte", "short", "ushort", "char") else kind)
		if expr.op == "+":
			return Value(operand.code, result)
		if expr.op == "-":
			if kind == "uint":
				result = self.keyword_type("long")
			return Value(_wrapped(f"(-{operand.code})", result), result)
		return Value(_wrapped(f"(~{operand.code})", result), result or operand.type)

	def _binary(self, expr: ast.Binary) -> Value:
		op = expr.op
		left = self.value(expr.left)
		right = self.value(expr.right)
		boolean = self.keyword_type("bool")
		if op in ("&&", "||"):
			word = "and" if op == "&&" else "or"
			return Value(f"({left.code} {word} {right.code})", boolean)
		if op in ("==", "!="):
			return Value(f"{_RUNTIME_BINARY[op]}({left.code}, {right.code})", boolean)
		if op in _COMPARISONS:
			return Value(f"({left.code} {op} {right.code})", boolean)
		result = self._arith_type(op, left, right)
		if op in _RUNTIME_BINARY:
			code = f"{_RUNTIME_BINARY[op]}({left.code}, {right.code})"
		else:
			code = f"({left.code} {op} {right.code})"
		if op in _WRAPPING:
			code = _wrapped(code, result)
		return Value(code, result)

	def _arith_type(self, op: str, left: Value, right: Value) -> Optional[BoundType]:
		if op == "+" and "string" in (_keyword_of(left.type), _keyword_of(right.type)):
			return self.keyword_type("string")
		if op in ("&", "|", "^"):
			if _keyword_of(left.type) == "bool" and _keyword_of(right.type) == "bool":
				return self.keyword_type("bool")
			if left.type is not None and left.type.is_enum and right.type is not None and left.type.target is right.type.target:
				return left.type
		lk, rk = self._numeric_kind(left), self._numeric_kind(right)
		if lk is None or rk is None:
			return None
		if op == "<<":
			return self.keyword_type(lk if lk in ("uint", "long", "ulong") else "int")
		kind = promote(lk, rk)
		return self.keyword_type(kind) if kind is not None else None

	# Calls -----------------------------------------------------------------

	def _args(self, args: List[Any]) -> List[Value]:
		return [self.value(arg) for arg in args]

	def _arg_codes(self, values: List[Value], candidate: Optional[Any], loc: Any) -> List[str]:
		if candidate is None:
			return [v.code for v in values]
		return [self.convert(v, p.type, loc) for v, p in zip(values, candidate.params)]

	def _invocation(self, expr: ast.Invocation) -> Value:
		target = expr.target
		args = self._args(expr.args)
		if isinstance(target, ast.NameRef):
			return self._call_simple(target, args, expr.loc)
		if isinstance(target, ast.BaseAccess):
			return self._call_base(target, args, expr.loc)
		if isinstance(target, ast.PredefinedMember):
			rt = self.binder.references.keyword(target.keyword)
			return self._call_static(TypeName(rt), target.name, args, expr.loc)
		if isinstance(target, ast.MemberAccess):
			if isinstance(target.target, ast.ThisRef):
				if not self._this_allowed(target.target.loc):
					return NULL
				declaring, member = self.owner.find_member(target.name)
				if isinstance(member, list):
					return self._call_user(declaring, member, args, expr.loc, receiver="self")
				if member is None and self._reference_member(target.name):
					codes = [v.code for v in args]
					return Value(f"_rt.call_member({', '.join(['self', repr(target.name)] + codes)})")
				if member is None:
					self._no_definition(BoundType(self.owner), target.name, expr.loc)
				else:
					self._not_invocable(target.name, expr.loc)
				return NULL
			container = self.lower(target.target)
			if isinstance(container, TypeName):
				return self._call_static(container, target.name, args, expr.loc)
			if isinstance(container, NamespaceName):
				self.bag.error(
					"CS0234",
					f"The type or namespace name '{target.name}' does not exist in the namespace '{container.ns.name}' "
					"(are you missing an assembly reference?)",
					expr.loc,
				)
				return NULL
			return self._call_instance(container, target.name, args, expr.loc)
		self.bag.error("CS0149", "Method name expected", expr.loc)
		return NULL

	def _not_invocable(self, name: str, loc: Any) -> None:
		self.bag.error("CS1955", f"Non-invocable member '{name}' cannot be used like a method.", loc)

	def _call_simple(self, target: ast.NameRef, args: List[Value], loc: Any) -> Value:
		name = target.name
		if self.is_local(name):
			self._not_invocable(name, loc)
			return NULL
		declaring, member, via_outer = self._lookup_member(name)
		if isinstance(member, list):
			return self._call_user(declaring, member, args, loc, receiver=None if via_outer else "self")
		if member is not None:
			self._not_invocable(name, loc)
			return NULL
		if self._reference_member(name):
			if not self._instance_ok(f"{display_name(self.owner)}.{name}()", loc):
				return NULL
			codes = [v.code for v in args]
			return Value(f"_rt.call_member({', '.join(['self', repr(name)] + codes)})")
		self.bag.error("CS0103", f"The name '{name}' does not exist in the current context", loc)
		return NULL

	def _candidates(self, methods: List[MethodSymbol], count: int, loc: Any) -> Optional[List[MethodSymbol]]:
		fitting = [m for m in methods if m.accepts_count(count)]
		if not fitting:
			self.bag.error("CS1501", f"No overload for method '{methods[0].name}' takes {count} arguments", loc)
			return None
		return fitting

	def _call_user(
		self,
		declaring: TypeSymbol,
		methods: List[MethodSymbol],
		args: List[Value],
		loc: Any,
		*,
		receiver: Optional[str],
	) -> Value:
		"""Call a user method group; `receiver` None means only statics are reachable."""
		fitting = self._candidates(methods, len(args), loc)
		if fitting is None:
			return NULL
		single = fitting[0] if len(fitting) == 1 and methods[0].name not in self.module.dispatched else None
		codes = self._arg_codes(args, single, loc)
		instance = [m for m in fitting if not m.is_static]
		name = methods[0].py_name
		if instance and len(instance) == len(fitting):
			what = f"{display_name(declaring)}.{signature_text(methods[0].name, instance[0].params)}"
			if receiver is None:
				self.bag.error("CS0120", f"An object reference is required for the non-static field, method, or property '{what}'", loc)
				return NULL
			if receiver == "self" and not self._instance_ok(what, loc):
				return NULL
			code = f"{receiver}.{name}({', '.join(codes)})"
		elif receiver == "self" and instance and not self.static and self.kind not in ("field_init", "ctor_init"):
			code = f"self.{name}({', '.join(codes)})"
		else:
			code = f"{declaring.py_name}.{name}({', '.join(codes)})"
		return Value(code, single.return_type if single is not None else None)

	def _call_static(self, container: TypeName, name: str, args: List[Value], loc: Any) -> Value:
		target = container.target
		if isinstance(target, str):
			self.bag.error("CS0704", f"Cannot do non-virtual member lookup in '{target}' because it is a type parameter", loc)
			return NULL
		if isinstance(target, TypeSymbol):
			declaring, member = target.find_member(name)
			if isinstance(member, list):
				return self._call_user(declaring, member, args, loc, receiver=None)
			if member is None:
				self.bag.error("CS0117", f"'{display_name(target)}' does not contain a definition for '{name}'", loc)
			else:
				self._not_invocable(name, loc)
			return NULL
		if target.is_static_method(name):
			codes = [repr(name)] + [v.code for v in args]
			return Value(f"{self.module.ref(target)}.call_static({', '.join(codes)})")
		if target.has_static(name):
			self._not_invocable(name, loc)
		else:
			self.bag.error("CS0117", f"'{display_name(target)}' does not contain a definition for '{name}'", loc)
		return NULL

	def _call_instance(self, receiver: Value, name: str, args: List[Value], loc: Any) -> Value:
		ok, member = self._user_member(receiver, name, loc)
		if not ok:
			return NULL
		single = None
		if isinstance(member, list):
			fitting = self._candidates(member, len(args), loc)
			if fitting is None:
				return NULL
			if len(fitting) == 1 and name not in self.module.dispatched:
				single = fitting[0]
		elif member is not None:
			self._not_invocable(name, loc)
			return NULL
		codes = [receiver.code, repr(name)] + self._arg_codes(args, single, loc)
		return Value(f"_rt.call_member({', '.join(codes)})", single.return_type if single is not None else None)

	def _call_base(self, target: ast.BaseAccess, args: List[Value], loc: Any) -> Value:
		if not self._base_allowed(loc):
			return NULL
		base = self.owner.user_base
		codes = [v.code for v in args]
		if base is not None:
			_declaring, member = base.find_member(target.name)
			if isinstance(member, list):
				if self._candidates(member, len(args), loc) is None:
					return NULL
				if target.name in self.module.dispatched:
					return Value(f"_rt.dispatch(self, {target.name!r}, {py_tuple(codes)}, {base.py_name})")
			elif member is not None:
				self._not_invocable(target.name, loc)
				return NULL
			elif not self._reference_member(target.name):
				self.bag.error("CS0117", f"'{display_name(base)}' does not contain a definition for '{target.name}'", loc)
				return NULL
		call = ["self", self._base_class_code(), repr(target.name)] + codes
		return Value(f"_rt.base_call({', '.join(call)})")

	# Creation --------------------------------------------------------------

	def _creation(self, expr: ast.ObjectCreation) -> Value:
		bound = self.resolve_type(expr.type)
		if bound.ranks:
			if expr.args or expr.initializer is None:
				self.bag.error("CS1586", "Array creation must have array size or array initializer", expr.loc)
				return NULL
			return Value(self.initializer(expr.initializer, bound, expr.loc), bound, fresh=True)
		args = self._args(expr.args)
		if bound.type_param is not None:
			self.bag.error(
				"CS0304",
				f"Cannot create an instance of the variable type '{bound.type_param}' because it does not have the new() constraint",
				expr.loc,
			)
			return NULL
		target = bound.target
		if bound.nullable:
			code = args[0].code if args else "None"
		elif isinstance(target, TypeSymbol):
			code = self._new_user(target, args, expr.loc)
		elif target is None:
			code = "_rt.CsObject()"
		else:
			code = self._new_reference(target, args, expr.loc)
		if code is None:
			return NULL
		if expr.initializer is not None and expr.initializer.elements:
			ops = self._initializer_ops(expr.initializer, bound)
			code = f"_rt.initialize({code}, {py_tuple(ops)})"
		return Value(code, bound, fresh=True)

	def _new_user(self, target: TypeSymbol, args: List[Value], loc: Any) -> Optional[str]:
		if target.kind == "enum":
			return f"{target.py_name}(0)"
		if target.kind == "interface" or "abstract" in target.modifiers:
			self.bag.error("CS0144", f"Cannot create an instance of the abstract type or interface '{display_name(target)}'", loc)
			return None
		if target.is_static:
			self.bag.error("CS0712", f"Cannot create an instance of the static class '{display_name(target)}'", loc)
			return None
		fitting = [c for c in target.ctors if c.accepts_count(len(args))]
		if not fitting:
			self.bag.error("CS1729", f"'{display_name(target)}' does not contain a constructor that takes {len(args)} arguments", loc)
			return None
		codes = self._arg_codes(args, fitting[0] if len(fitting) == 1 else None, loc)
		return f"{target.py_name}({', '.join(codes)})"

	def _new_reference(self, target: RuntimeType, args: List[Value], loc: Any) -> Optional[str]:
		if target.static:
			self.bag.error("CS0712", f"Cannot create an instance of the static class '{display_name(target)}'", loc)
			return None
		if target.kind == "interface" or target.abstract or target.special:
			self.bag.error("CS0144", f"Cannot create an instance of the abstract type or interface '{display_name(target)}'", loc)
			return None
		ref = self.module.ref(target)
		if target.kind == "enum" or (target.value_type and not args and target.factory is None):
			return f"{ref}.default_value()"
		return f"{ref}.new({', '.join(v.code for v in args)})"

	def _initializer_ops(self, init: ast.InitializerList, bound: Optional[BoundType]) -> List[str]:
		ops: List[str] = []
		members = collection = False
		sym = bound.user if bound is not None else None
		for element in init.elements:
			if isinstance(element, ast.MemberInitializer):
				members = True
				member_type = self._initialized_member(sym, element)
				if isinstance(element.value, ast.InitializerList):
					nested = self._initializer_ops(element.value, member_type)
					ops.append(f"('nested', {element.name!r}, {py_tuple(nested)})")
				else:
					code = self.convert(self.value(element.value), member_type, element.loc)
					ops.append(f"('set', {element.name!r}, {code})")
			elif isinstance(element, ast.IndexInitializer):
				members = True
				if isinstance(element.value, ast.InitializerList):
					self.bag.error("CS0747", "Invalid initializer member declarator", element.loc)
					continue
				key = self.value(element.index).code
				ops.append(f"('index', {key}, {self.value(element.value).code})")
			else:
				collection = True
				if isinstance(element, ast.InitializerList):
					items = [self.value(e).code for e in element.elements]
				else:
					items = [self.value(element).code]
				ops.append(f"('add', {py_tuple(items)})")
		if members and collection:
			self.bag.error("CS0747", "Invalid initializer member declarator", init.loc)
		if collection and sym is not None and sym.reference_root() is None:
			self.bag.error(
				"CS1922",
				f"Cannot initialize type '{display_name(sym)}' with a collection initializer because it does not implement "
				"'System.Collections.IEnumerable'",
				init.loc,
			)
		return ops

	def _initialized_member(self, sym: Optional[TypeSymbol], element: ast.MemberInitializer) -> Optional[BoundType]:
		if sym is None:
			return None
		declaring, member = sym.find_member(element.name)
		if member is None:
			if not self.binder.inherits_member(sym, element.name):
				self.bag.error("CS0117", f"'{display_name(sym)}' does not contain a definition for '{element.name}'", element.loc)
			return None
		if isinstance(member, (FieldSymbol, PropertySymbol)) and not member.is_static:
			if isinstance(member, PropertySymbol) and not member.has_setter and not isinstance(element.value, ast.InitializerList):
				self.bag.error(
					"CS0200",
					f"Property or indexer '{display_name(declaring)}.{element.name}' cannot be assigned to -- it is read only",
					element.loc,
				)
			return member.type
		self.bag.error("CS1914", f"Static field or property '{display_name(declaring)}.{element.name}' cannot be assigned in an object initializer", element.loc)
		return None

	def _array_creation(self, expr: ast.ArrayCreation) -> Value:
		element = self.resolve_type(expr.element_type)
		size = self.value(expr.size)
		if size.constant is not None and size.constant.kind in INTEGRAL and size.constant.value < 0:
			self.bag.error("CS0248", "Cannot create an array with a negative size", expr.size.loc)
		bound = BoundType(element.target, nullable=element.nullable, ranks=element.ranks + 1, type_param=element.type_param)
		if element.is_struct:
			code = f"_rt.new_array({size.code}, factory=lambda: _rt.zero({element.user.py_name}))"
		else:
			default = self.default_code(element)
			code = f"_rt.new_array({size.code})" if default == "None" else f"_rt.new_array({size.code}, {default})"
		return Value(code, bound, fresh=True)

	def _typeof(self, expr: ast.TypeOf) -> Value:
		bound = self.resolve_type(expr.type)
		if bound.ranks or bound.nullable or bound.type_param is not None or bound.target is None:
			full = bound.clr_name()
			name = full.rsplit(".", 1)[-1]
			return Value(f"_rt.CsType({full!r}, {name!r})")
		return Value(f"_rt.type_of({self.type_code(bound.target)})")

	# Conversions -----------------------------------------------------------

	def initializer(self, init: Any, target: Optional[BoundType], loc: Any) -> str:
		"""Lower a variable initializer (expression or `{ ... }`) for a store of type `target`."""
		if isinstance(init, ast.InitializerList):
			if target is None or not target.ranks:
				self.bag.error(
					"CS0622",
					"Can only use array initializer expressions to assign to array types. Try using a new expression instead.",
					init.loc,
				)
				return "None"
			element = target.element()
			items = [self.initializer(e, element, loc) for e in init.elements]
			return f"[{', '.join(items)}]"
		if isinstance(init, ast.DefaultValue) and init.type is None:
			return self.default_code(target)
		return self.convert(self.value(init), target, loc)

	def convert(self, value: Value, target: Optional[BoundType], loc: Any) -> str:
		"""Implicit conversion of `value` for a store into `target`."""
		if target is None or target.type_param is not None:
			return value.code
		if value.constant is not None:
			return self._convert_constant(value, target, loc)
		self._check_assignable(value.type, target, loc)
		keyword = _keyword_of(target)
		source = _keyword_of(value.type)
		if keyword in FLOATING:
			return value.code if source in FLOATING else f"_rt.to_double({value.code})"
		if keyword == "decimal":
			return value.code if source == "decimal" else f"_rt.to_decimal({value.code})"
		if isinstance(target.target, TypeSymbol) and target.target.kind == "enum" and not target.ranks:
			if value.type is not None and value.type.target is target.target and not value.type.ranks:
				return value.code
			return f"_rt.to_enum({target.target.py_name}, {value.code})"
		if target.is_struct and not value.fresh:
			return f"_rt.copy_value({value.code})"
		return value.code

	def _convert_constant(self, value: Value, target: BoundType, loc: Any) -> str:
		constant = value.constant
		if constant.kind == "null":
			if target.is_value_type:
				self.bag.error(
					"CS0037", f"Cannot convert null to '{type_display(target)}' because it is a non-nullable value type", loc
				)
			return "None"
		keyword = _keyword_of(target)
		if keyword == "object" or (target.target is None and not target.ranks):
			return value.code
		if keyword is not None:
			converted = convert(constant, keyword)
			if converted is None:
				self.binder.conversion_error(constant, keyword, loc)
				return value.code
			return self.constant_code(converted)
		if target.is_enum or (target.nullable and not target.ranks and getattr(target.target, "kind", None) == "enum"):
			if constant.kind == "enum" and constant.enum is target.target:
				return value.code
			if constant.kind in INTEGRAL and constant.value == 0:
				return self.constant_code(Constant(0, "enum", target.target))
			self.bag.error(
				"CS0266",
				f"Cannot implicitly convert type '{constant.kind}' to '{type_display(target)}'. "
				"An explicit conversion exists, but cast expressions are not supported",
				loc,
			)
			return value.code
		target_kind = getattr(target.target, "kind", "class")
		if target.ranks or (target_kind != "interface" and not getattr(target.target, "special", False)):
			self.bag.error("CS0029", f"Cannot implicitly convert type '{constant.kind}' to '{type_display(target)}'", loc)
		return value.code

	def _check_assignable(self, source: Optional[BoundType], target: BoundType, loc: Any) -> None:
		if source is None:
			return
		sk, tk = _keyword_of(source), _keyword_of(target)
		if source.nullable or target.nullable:
			return
		if sk is not None and tk is not None:
			if sk == tk or tk == "object":
				return
			if sk in NUMERIC and tk in NUMERIC:
				if tk not in _IMPLICIT_NUMERIC.get(sk, ()):
					self.bag.error(
						"CS0266",
						f"Cannot implicitly convert type '{sk}' to '{tk}'. An explicit conversion exists, but cast expressions are not supported",
						loc,
					)
				return
			self.bag.error("CS0029", f"Cannot implicitly convert type '{sk}' to '{tk}'", loc)
			return
		if tk == "object":
			return
		src_sym, dst_sym = source.user, target.user
		if source.ranks != target.ranks and (src_sym is not None or sk is not None) and (dst_sym is not None or tk is not None):
			self.bag.error("CS0029", f"Cannot implicitly convert type '{type_display(source)}' to '{type_display(target)}'", loc)
			return
		if src_sym is not None and src_sym.kind == "enum" and tk in NUMERIC:
			self.bag.error(
				"CS0266",
				f"Cannot implicitly convert type '{type_display(source)}' to '{tk}'. An explicit conversion exists, but cast expressions are not supported",
				loc,
			)
			return
		mismatch = False
		if dst_sym is not None and dst_sym.kind != "interface":
			if src_sym is not None:
				mismatch = dst_sym not in list(src_sym.ancestors())
			else:
				mismatch = sk is not None
		elif src_sym is not None and tk is not None:
			mismatch = True
		if mismatch and dst_sym is not None and dst_sym.kind == "enum" and sk in NUMERIC:
			self.bag.error(
				"CS0266",
				f"Cannot implicitly convert type '{sk}' to '{type_display(target)}'. An explicit conversion exists, but cast expressions are not supported",
				loc,
			)
		elif mismatch:
			self.bag.error("CS0029", f"Cannot implicitly convert type '{type_display(source)}' to '{type_display(target)}'", loc)

	# Assignment targets ----------------------------------------------------

	def _slot(self, target: Any) -> Optional[_Slot]:
		if isinstance(target, ast.NameRef):
			name = target.name
			if self.is_local(name):
				code = self._local_code(name)
				return _Slot(code, lambda v: f"{code} = {v}", self._local_type(name))
			declaring, member, via_outer = self._lookup_member(name)
			if member is not None:
				return self._member_slot(declaring, member, target.loc, via_type=via_outer and not self._is_static_member(member))
			if self._reference_member(name):
				if not self._instance_ok(f"{display_name(self.owner)}.{name}", target.loc):
					return None
				return self._dynamic_slot("self", name)
			found = self.binder.lookup_type_name(name, 0, self.owner, self.owner.scope, report=False)
			if found is None:
				self.bag.error("CS0103", f"The name '{name}' does not exist in the current context", target.loc)
			else:
				self._not_assignable(target.loc)
			return None
		if isinstance(target, ast.MemberAccess):
			if isinstance(target.target, ast.ThisRef):
				if not self._this_allowed(target.target.loc):
					return None
				declaring, member = self.owner.find_member(target.name)
				if member is not None:
					if self._is_static_member(member):
						self._static_via_instance(declaring, target.name, target.loc)
						return None
					return self._member_slot(declaring, member, target.loc)
				if self._reference_member(target.name):
					return self._dynamic_slot("self", target.name)
				self._no_definition(BoundType(self.owner), target.name, target.loc)
				return None
			container = self.lower(target.target)
			if isinstance(container, TypeName) and isinstance(container.target, TypeSymbol):
				declaring, member = container.target.find_member(target.name)
				if member is None:
					self.bag.error("CS0117", f"'{display_name(container.target)}' does not contain a definition for '{target.name}'", target.loc)
					return None
				return self._member_slot(declaring, member, target.loc, via_type=not self._is_static_member(member))
			if isinstance(container, TypeName) and isinstance(container.target, RuntimeType):
				self.bag.error(
					"CS0200",
					f"Property or indexer '{display_name(container.target)}.{target.name}' cannot be assigned to -- it is read only",
					target.loc,
				)
				return None
			if not isinstance(container, Value):
				self._not_assignable(target.loc)
				return None
			ok, member = self._user_member(container, target.name, target.loc)
			if not ok:
				return None
			member_type = None
			if isinstance(member, list):
				self._method_group_store(target.name, target.loc)
				return None
			if member is not None:
				if not self._writable(member, target.loc):
					return None
				member_type = member.type
			return self._dynamic_slot(container.code, target.name, member_type)
		if isinstance(target, ast.ElementAccess):
			obj = self.value(target.target)
			index = self.value(target.index)
			if _keyword_of(obj.type) == "string":
				self.bag.error("CS0200", "Property or indexer 'string.this[int]' cannot be assigned to -- it is read only", target.loc)
				return None
			return _Slot(
				f"_rt.get_item({obj.code}, {index.code})",
				lambda v: f"_rt.set_item({obj.code}, {index.code}, {v})",
				self._element_type(obj.type),
				lambda op, v: f"_rt.update_item({obj.code}, {index.code}, {op!r}, {v})",
			)
		if isinstance(target, ast.BaseAccess):
			if not self._base_allowed(target.loc):
				return None
			base = self._base_class_code()
			name = target.name
			return _Slot(
				f"_rt.base_get(self, {base}, {name!r})",
				lambda v: f"_rt.base_set(self, {base}, {name!r}, {v})",
			)
		self._not_assignable(target.loc)
		return None

	def _not_assignable(self, loc: Any) -> None:
		self.bag.error("CS0131", "The left-hand side of an assignment must be a variable, property or indexer", loc)

	def _method_group_store(self, name: str, loc: Any) -> None:
		self.bag.error("CS1656", f"Cannot assign to '{name}' because it is a 'method group'", loc)

	def _dynamic_slot(self, obj: str, name: str, member_type: Optional[BoundType] = None) -> _Slot:
		return _Slot(
			f"_rt.get_member({obj}, {name!r})",
			lambda v: f"_rt.set_member({obj}, {name!r}, {v})",
			member_type,
			lambda op, v: f"_rt.update_member({obj}, {name!r}, {op!r}, {v})",
		)

	def _writable(self, member: Any, loc: Any) -> bool:
		"""Writability of a member reached through an instance other than `this`."""
		what = f"{display_name(member.owner)}.{member.name}"
		if isinstance(member, FieldSymbol):
			if member.is_readonly and not (self.kind == "ctor" and member.owner is self.owner):
				self.bag.error(
					"CS0191",
					"A readonly field cannot be assigned to (except in a constructor or init-only setter of the type in which "
					"the field is defined or a variable initializer)",
					loc,
				)
				return False
			return True
		if not member.has_setter:
			self.bag.error("CS0200", f"Property or indexer '{what}' cannot be assigned to -- it is read only", loc)
			return False
		return True

	def _member_slot(self, declaring: TypeSymbol, member: Any, loc: Any, *, via_type: bool = False) -> Optional[_Slot]:
		if isinstance(member, list):
			self._method_group_store(member[0].name, loc)
			return None
		if isinstance(member, TypeSymbol):
			self._not_assignable(loc)
			return None
		what = f"{display_name(declaring)}.{member.name}"
		in_ctor = self.kind == "ctor" and declaring is self.owner
		in_cctor = self.kind == "static_init" and declaring is self.owner
		if isinstance(member, FieldSymbol):
			if member.is_const:
				self._not_assignable(loc)
				return None
			if member.is_readonly and not (in_cctor if member.is_static else in_ctor):
				if member.is_static:
					self.bag.error(
						"CS0198",
						"A static readonly field cannot be assigned to (except in a static constructor or a variable initializer)",
						loc,
					)
				else:
					self._writable(member, loc)
				return None
			if member.is_static:
				code = f"{declaring.py_name}.{member.py_name}"
				return _Slot(code, lambda v: f"{code} = {v}", member.type)
		else:
			if member.is_static:
				if member.is_auto and (member.has_setter or in_cctor):
					code = f"{declaring.py_name}.{member.py_name}"
					return _Slot(code, lambda v: f"{code} = {v}", member.type)
				if not member.is_auto and member.has_setter:
					getter = f"{declaring.py_name}_get_{member.py_name}()" if member.has_getter else "None"
					setter = f"{declaring.py_name}_set_{member.py_name}"
					return _Slot(getter, lambda v: f"{setter}({v})", member.type)
				self.bag.error("CS0200", f"Property or indexer '{what}' cannot be assigned to -- it is read only", loc)
				return None
			if not member.has_setter:
				if not (member.is_auto and in_ctor):
					self.bag.error("CS0200", f"Property or indexer '{what}' cannot be assigned to -- it is read only", loc)
					return None
				if member.is_virtual:
					if via_type or not self._instance_ok(what, loc):
						return None
					slot = f"self.__dict__[{member.py_name!r}]"
					return _Slot(slot, lambda v: f"{slot} = {v}", member.type)
		if via_type:
			self.bag.error("CS0120", f"An object reference is required for the non-static field, method, or property '{what}'", loc)
			return None
		if not self._instance_ok(what, loc):
			return None
		code = f"self.{member.py_name}"
		return _Slot(code, lambda v: f"{code} = {v}", member.type)

	# Statements ------------------------------------------------------------

	def body(self, body: Any) -> None:
		"""Lower a member body (block or `=> expr`) and check its returns."""
		if isinstance(body, ast.Block):
			self.statement(body)
			if not self.void and not _contains_return(body):
				self.bag.error("CS0161", f"'{self.where}': not all code paths return a value", body.loc)
		elif body is not None:
			if self.void:
				self.statement(ast.ExprStmt(body.loc, body))
			else:
				value = self.value(body)
				self.emit(f"return {self.convert(value, self.returns, body.loc)}")

	def statement(self, stmt: Any) -> None:
		if isinstance(stmt, ast.Block):
			self.scopes.append({})
			for inner in stmt.statements:
				self.statement(inner)
			self.scopes.pop()
		elif isinstance(stmt, ast.LocalDecl):
			self._local_decl(stmt)
		elif isinstance(stmt, ast.AssignStmt):
			slot = self._slot(stmt.target)
			if slot is None:
				if not isinstance(stmt.value, ast.InitializerList):
					self.value(stmt.value)
				return
			self.emit(slot.store(self.initializer(stmt.value, slot.type, stmt.loc)))
		elif isinstance(stmt, ast.CompoundAssignStmt):
			self._compound(stmt.target, stmt.op, self.value(stmt.value), stmt.loc)
		elif isinstance(stmt, ast.IncrementStmt):
			one = Value("1", self.keyword_type("int"), Constant(1, "int"))
			self._compound(stmt.target, "+" if stmt.op == "++" else "-", one, stmt.loc)
		elif isinstance(stmt, ast.ExprStmt):
			if not isinstance(stmt.expr, (ast.Invocation, ast.ObjectCreation)):
				self.bag.error(
					"CS0201",
					"Only assignment, call, increment, decrement, await, and new object expressions can be used as a statement",
					stmt.loc,
				)
				return
			self.emit(self.value(stmt.expr).code)
		elif isinstance(stmt, ast.ThrowStmt):
			self._throw(stmt)
		elif isinstance(stmt, ast.ReturnStmt):
			self._return(stmt)
		elif isinstance(stmt, ast.IfStmt):
			cond = self.value(stmt.condition)
			boolean = _keyword_of(cond.type)
			if cond.type is not None and boolean is not None and boolean != "bool":
				self.bag.error("CS0029", f"Cannot implicitly convert type '{boolean}' to 'bool'", stmt.condition.loc)
			self.emit(f"if {cond.code}:")
			self._suite(stmt.then_stmt)
			if stmt.else_stmt is not None:
				self.emit("else:")
				self._suite(stmt.else_stmt)
		elif isinstance(stmt, ast.EmptyStmt):
			pass
		else:
			raise NotImplementedError(f"cannot lower {type(stmt).__name__}")

	def _local_decl(self, stmt: ast.LocalDecl) -> None:
		code_name = self._local_code(stmt.name)
		if stmt.type is None:
			bound = None
			if stmt.value is None:
				self.bag.error("CS0818", "Implicitly-typed variables must be initialized", stmt.loc)
				code = "None"
			elif isinstance(stmt.value, ast.InitializerList):
				self.bag.error("CS0820", "Cannot initialize an implicitly-typed variable with an array initializer", stmt.loc)
				code = "None"
			elif isinstance(stmt.value, ast.DefaultValue) and stmt.value.type is None:
				self.bag.error("CS8716", "There is no target type for the default literal.", stmt.loc)
				code = "None"
			else:
				value = self.value(stmt.value)
				if value.constant is not None and value.constant.kind == "null":
					self.bag.error("CS0815", "Cannot assign <null> to an implicitly-typed variable", stmt.loc)
				bound = value.type
				code = value.code if value.fresh or bound is None or not bound.is_struct else f"_rt.copy_value({value.code})"
		else:
			bound = self.resolve_type(stmt.type)
			if stmt.value is None:
				code = self.default_code(bound)
			else:
				code = self.initializer(stmt.value, bound, stmt.loc)
		self.declare_local(stmt.name, bound, stmt.loc)
		self.emit(f"{code_name} = {code}")

	def _compound(self, target: Any, op: str, value: Value, loc: Any) -> None:
		slot = self._slot(target)
		if slot is None:
			return
		if slot.update is not None:
			self.emit(slot.update(op, value.code))
			return
		current = Value(slot.load, slot.type)
		if op in _RUNTIME_BINARY:
			combined = Value(f"{_RUNTIME_BINARY[op]}({current.code}, {value.code})", self._arith_type(op, current, value))
		else:
			combined = Value(f"({current.code} {op} {value.code})", self._arith_type(op, current, value))
		if combined.type is not None and slot.type is not None and _keyword_of(slot.type) != _keyword_of(combined.type):
			# `x op= y` converts back to the target type implicitly.
			combined = Value(combined.code, slot.type)
		# `x op= y` is `x = (T)(x op y)`: narrow to the target's width.
		self.emit(slot.store(_wrapped(self.convert(combined, slot.type, loc), slot.type)))

	def _throw(self, stmt: ast.ThrowStmt) -> None:
		if stmt.value is None:
			self.bag.error("CS0156", "A throw statement with no arguments is not allowed outside of a catch clause", stmt.loc)
			return
		value = self.value(stmt.value)
		keyword = _keyword_of(value.type)
		if keyword not in (None, "object") or (value.type is not None and value.type.is_value_type):
			self.bag.error("CS0155", "The type caught or thrown must be derived from System.Exception", stmt.value.loc)
		self.emit(f"raise _rt.as_exception({value.code})")

	def _return(self, stmt: ast.ReturnStmt) -> None:
		if self.void:
			if stmt.value is not None:
				self.bag.error(
					"CS0127", f"Since '{self.where}' returns void, a return keyword must not be followed by an object expression", stmt.loc
				)
			self.emit("return")
			return
		if stmt.value is None:
			self.bag.error(
				"CS0126", f"An object of a type convertible to '{type_display(self.returns)}' is required", stmt.loc
			)
			self.emit("return None")
			return
		self.emit(f"return {self.convert(self.value(stmt.value), self.returns, stmt.loc)}")


__all__ = ["FunctionLowerer", "NamespaceName", "TypeName", "Value", "py_tuple"]
