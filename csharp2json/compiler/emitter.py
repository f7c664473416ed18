# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bound unit -> Python module text.

The generated module has a fixed layout:

  header         `_rN = _refs[...]` aliases for every reference type used
  classes        one `class _Tk(...)` per type (metadata only), bases first
  functions      constructors, field initializers, methods, accessors
  attachments    methods/properties/consts hung onto the classes
  tables         `__cs_ctors__` / `__cs_overloads__` dispatch tables
  footer         `__cs_types__`, every type in metadata order

Classes are kept free of code so that forward references between types never
matter: every function is defined after every class exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..clr.names import py_enum_ident
from ..parser import ast
from ..references import RuntimeType
from .binder import Binder, BoundUnit, display_name, signature_text
from .lower import FunctionLowerer, py_tuple
from .symbols import BoundType, CtorSymbol, FieldSymbol, MethodSymbol, ParamSymbol, PropertySymbol, TypeSymbol

logger = logging.getLogger(__name__)


@dataclass
class ModuleBuilder:
	"""Textual Python module builder; sections are joined by `render`."""

	binder: Binder
	dispatched: frozenset[str]
	unit_name: str = "CSharp2Json"
	classes: List[str] = field(default_factory=list)
	funcs: List[str] = field(default_factory=list)
	attachments: List[str] = field(default_factory=list)
	tables: List[str] = field(default_factory=list)
	types: List[TypeSymbol] = field(default_factory=list)
	_refs: Dict[str, str] = field(default_factory=dict)

	@property
	def references(self) -> tuple[str, ...]:
		return tuple(self._refs)

	def ref(self, rt: RuntimeType) -> str:
		"""Module-level alias of a reference type (allocated on first use)."""
		alias = self._refs.get(rt.full_name)
		if alias is None:
			alias = f"_r{len(self._refs)}"
			self._refs[rt.full_name] = alias
		return alias

	def render(self) -> str:
		out = [f"# csharp2json unit {self.unit_name!r}"]
		out.extend(f"{alias} = _refs[{name!r}]" for name, alias in self._refs.items())
		for section in (self.classes, self.funcs):
			for chunk in section:
				out.append("")
				out.append(chunk)
		out.append("")
		out.extend(self.attachments)
		out.extend(self.tables)
		names = [sym.py_name for sym in self.types]
		out.append(f"__cs_types__ = {py_tuple(names)}")
		return "\n".join(out) + "\n"


def _class_order(types: List[TypeSymbol]) -> List[TypeSymbol]:
	"""Types ordered so every user base class precedes its subclasses."""
	ordered: List[TypeSymbol] = []
	placed: set[int] = set()

	def place(sym: TypeSymbol) -> None:
		if id(sym) in placed:
			return
		placed.add(id(sym))
		if sym.user_base is not None:
			place(sym.user_base)
		ordered.append(sym)

	for sym in types:
		place(sym)
	return ordered


def _function(name: str, params: List[str], body: List[str]) -> str:
	lines = [f"def {name}({', '.join(params)}):"]
	lines.extend(body or ["\tpass"])
	return "\n".join(lines)


class TypeEmitter:
	"""Emits the class, functions and tables of one user type."""

	def __init__(self, module: ModuleBuilder, sym: TypeSymbol) -> None:
		self.module = module
		self.sym = sym
		self.bag = module.binder.bag
		self.py = sym.py_name

	def lowerer(self, **kw: Any) -> FunctionLowerer:
		return FunctionLowerer(self.module, self.sym, **kw)

	# Class statement -------------------------------------------------------

	def base_code(self) -> str:
		sym = self.sym
		if sym.kind == "enum":
			return "_rt.IntEnum"
		if sym.kind == "interface":
			return "_rt.CsInterface"
		if sym.kind == "struct":
			return "_rt.CsValueType"
		if sym.user_base is not None:
			return sym.user_base.py_name
		if isinstance(sym.base, RuntimeType):
			return f"{self.module.ref(sym.base)}.python_type"
		return "_rt.CsObject"

	def class_statement(self) -> str:
		sym = self.sym
		lines = [f"class {self.py}({self.base_code()}):"]
		if sym.kind == "enum":
			lines.append("\t_missing_ = _rt.enum_missing")
		lines.append(f"\t__qualname__ = {sym.qualname!r}")
		lines.append(f"\t__cs_name__ = {sym.full_name!r}")
		lines.append(f"\t__cs_kind__ = {sym.kind!r}")
		if sym.kind == "enum":
			for member in sym.decl.enum_members:
				value = sym.enum_values.get(member.name, 0)
				lines.append(f"\t{py_enum_ident(member.name)} = {value}")
			return "\n".join(lines)
		if isinstance(sym.base, RuntimeType) and sym.user_base is None and sym.kind == "class":
			lines.append("\t__init__ = _rt.CsObject.__init__")
		lines.append(f"\t__cs_abstract__ = {sym.is_abstract}")
		lines.append(f"\t__cs_static__ = {sym.is_static}")
		lines.append(f"\t__cs_generic__ = {sym.is_generic}")
		signatures = [py_tuple([repr(p.type.clr_name()) for p in c.params]) for c in sym.ctors if c.is_public]
		lines.append(f"\t__cs_constructors__ = {py_tuple(signatures)}")
		lines.append(f"\t__cs_members__ = {py_tuple(self.member_entries())}")
		return "\n".join(lines)

	def member_entries(self) -> List[str]:
		entries = []
		for member in self.sym.data_members:
			if member.is_static or not member.is_public or member.non_serialized:
				continue
			if isinstance(member, PropertySymbol):
				if not member.has_getter:
					continue
				kind = "property"
			else:
				kind = "field"
			entries.append(f"({member.name!r}, {member.py_name!r}, {kind!r})")
		return entries

	# Descriptors -----------------------------------------------------------

	def descriptor(self, bound: BoundType) -> str:
		"""Runtime parameter-type descriptor used by overload selection."""
		if bound.ranks:
			element = self.descriptor(bound.element())
			return "_rt.array_of()" if element == "None" else f"_rt.array_of({element})"
		if bound.type_param is not None or bound.target is None:
			return "None"
		target = bound.target
		if isinstance(target, TypeSymbol):
			code = "None" if target.kind == "interface" else target.py_name
		elif target.kind == "interface" or target.keyword == "object":
			code = "None"
		else:
			code = self.module.ref(target)
		if bound.nullable and code != "None":
			return f"_rt.nullable_of({code})"
		return code

	def table_entry(self, func: str, params: List[ParamSymbol], required: int) -> str:
		descs = [self.descriptor(p.type) for p in params]
		return f"({func}, {py_tuple(descs)}, {required})"

	# Parameters ------------------------------------------------------------

	def param_list(self, params: List[ParamSymbol], prologue: List[str]) -> List[str]:
		"""Python parameter texts; struct defaults become `None` plus a prologue line."""
		texts = []
		for param in params:
			name = param.py_name
			if param.default is None:
				texts.append(name)
				continue
			default = self.param_default(param)
			if default is None:
				prologue.append(f"\tif {name} is None:")
				prologue.append(f"\t\t{name} = _rt.zero({param.type.user.py_name})")
				texts.append(f"{name}=None")
			else:
				texts.append(f"{name}={default}")
		return texts

	def param_default(self, param: ParamSymbol) -> Optional[str]:
		expr = param.default
		lowerer = self.lowerer(kind="static_init", static=True)
		if param.type.is_struct and (
			isinstance(expr, ast.DefaultValue) or (isinstance(expr, ast.ObjectCreation) and not expr.args and expr.initializer is None)
		):
			return None
		if isinstance(expr, ast.DefaultValue):
			return lowerer.initializer(expr, param.type, expr.loc)
		value = lowerer.value(expr)
		if value.constant is None:
			self.bag.error("CS1736", f"Default parameter value for '{param.name}' must be a compile-time constant", expr.loc)
			return "None"
		return lowerer.convert(value, param.type, expr.loc)

	# Instance state --------------------------------------------------------

	def instance_members(self) -> List[Any]:
		members = []
		for member in self.sym.data_members:
			if member.is_static:
				continue
			if isinstance(member, PropertySymbol) and not member.is_auto:
				continue
			members.append(member)
		return members

	@staticmethod
	def store_target(member: Any) -> str:
		if isinstance(member, PropertySymbol) and member.is_virtual:
			return f"self.__dict__[{member.py_name!r}]"
		return f"self.{member.py_name}"

	def emit_fields(self) -> None:
		"""`_Tk_fields(self)`: C# defaults for every instance slot, then initializers."""
		lowerer = self.lowerer(kind="field_init")
		members = self.instance_members()
		for member in members:
			lowerer.emit(f"{self.store_target(member)} = {lowerer.default_code(member.type)}")
		for member in members:
			init = member.declarator.initializer if isinstance(member, FieldSymbol) else member.decl.initializer
			if init is None:
				continue
			lowerer.emit(f"{self.store_target(member)} = {lowerer.initializer(init, member.type, member.loc)}")
		self.module.funcs.append(_function(f"{self.py}_fields", ["self"], lowerer.lines))

	def emit_zero(self) -> None:
		"""`_Tk_zero(self)`: the all-default struct value (also the implicit constructor)."""
		lowerer = self.lowerer(kind="field_init")
		for member in self.instance_members():
			lowerer.emit(f"{self.store_target(member)} = {lowerer.default_code(member.type)}")
		func = f"{self.py}_zero"
		self.module.funcs.append(_function(func, ["self"], lowerer.lines))
		self.module.attachments.append(f"{self.py}.__cs_zero__ = {func}")

	def base_call(self, args: List[str]) -> Optional[str]:
		sym = self.sym
		if sym.user_base is not None:
			return f"_rt.construct(self, {sym.user_base.py_name}, {py_tuple(args)})"
		if isinstance(sym.base, RuntimeType):
			return f"{self.module.ref(sym.base)}.init_base(self, {py_tuple(args)})"
		return None

	def emit_ctor(self, ctor: CtorSymbol) -> None:
		sym = self.sym
		if ctor.is_implicit and sym.kind == "struct":
			return
		where = f"{display_name(sym)}.{signature_text(sym.name, ctor.params)}"
		prologue: List[str] = []
		params = ["self"] + self.param_list(ctor.params, prologue)
		decl = ctor.decl
		init = decl.initializer if decl is not None else None
		args: List[str] = []
		if init is not None:
			arg_lowerer = self.lowerer(kind="ctor_init", params=ctor.params, where=where)
			args = [arg_lowerer.value(a).code for a in init.args]
		lowerer = self.lowerer(kind="ctor", params=ctor.params, where=where)
		lowerer.lines.extend(prologue)
		if init is not None and init.kind == "this":
			lowerer.emit(f"_rt.construct(self, {self.py}, {py_tuple(args)})")
		else:
			lowerer.emit(f"{self.py}_zero(self)" if sym.kind == "struct" else f"{self.py}_fields(self)")
			if sym.kind != "struct":
				call = self.base_call(args)
				if call is not None:
					lowerer.emit(call)
		if decl is not None:
			lowerer.body(decl.body)
		self.module.funcs.append(_function(ctor.py_func, params, lowerer.lines))

	def emit_ctor_table(self) -> None:
		entries = [self.table_entry(c.py_func, c.params, c.required) for c in self.sym.ctors]
		self.module.tables.append(f"{self.py}.__cs_ctors__ = {py_tuple(entries)}")

	# Methods ---------------------------------------------------------------

	def emit_method(self, method: MethodSymbol) -> None:
		where = f"{display_name(self.sym)}.{signature_text(method.name, method.params)}"
		prologue: List[str] = []
		params = self.param_list(method.params, prologue)
		if not method.is_static:
			params.insert(0, "self")
		lowerer = self.lowerer(
			kind="method",
			static=method.is_static,
			returns=method.return_type,
			void=method.return_type is None,
			params=method.params,
			where=where,
		)
		lowerer.lines.extend(prologue)
		lowerer.body(method.decl.body)
		self.module.funcs.append(_function(method.py_func, params, lowerer.lines))

	def emit_methods(self) -> None:
		overloads: Dict[str, List[str]] = {}
		for name, methods in self.sym.methods.items():
			concrete = [m for m in methods if not m.is_abstract and m.decl.body is not None and self.sym.kind != "interface"]
			if not concrete:
				continue
			for method in concrete:
				self.emit_method(method)
			attr = methods[0].py_name
			static = concrete[0].is_static
			if name in self.module.dispatched:
				overloads[name] = [self.table_entry(m.py_func, m.params, m.required) for m in concrete]
				if static:
					self.module.attachments.append(f"{self.py}.{attr} = _rt.overloaded_static({self.py}, {name!r})")
				else:
					self.module.attachments.append(f"{self.py}.{attr} = _rt.overloaded({name!r})")
			else:
				func = concrete[0].py_func
				wrapped = f"staticmethod({func})" if static else func
				self.module.attachments.append(f"{self.py}.{attr} = {wrapped}")
		if overloads:
			items = [f"{name!r}: {py_tuple(entries)}" for name, entries in overloads.items()]
			self.module.tables.append(f"{self.py}.__cs_overloads__ = {{{', '.join(items)}}}")

	# Properties ------------------------------------------------------------

	def emit_accessor(self, prop: PropertySymbol, accessor: ast.Accessor) -> str:
		getter = accessor.kind == "get"
		func = f"{self.py}_{accessor.kind}_{prop.py_name}"
		value_param = ParamSymbol("value", prop.type, accessor.loc)
		lowerer = self.lowerer(
			kind="getter" if getter else "setter",
			static=prop.is_static,
			returns=prop.type if getter else None,
			void=not getter,
			params=[] if getter else [value_param],
			where=f"{display_name(self.sym)}.{prop.name}.{accessor.kind}",
		)
		lowerer.body(accessor.body)
		params = [] if prop.is_static else ["self"]
		if not getter:
			params.append("value")
		self.module.funcs.append(_function(func, params, lowerer.lines))
		return func

	def emit_properties(self) -> None:
		for prop in self.sym.properties.values():
			if prop.is_abstract or "extern" in prop.decl.modifiers:
				continue
			if prop.is_auto:
				if prop.is_override and not prop.is_static:
					self.module.attachments.append(f"{self.py}.{prop.py_name} = _rt.AutoProperty({prop.py_name!r})")
				continue
			funcs = [
				self.emit_accessor(prop, accessor) if accessor is not None and accessor.body is not None else "None"
				for accessor in (prop.decl.getter, prop.decl.setter)
			]
			if not prop.is_static:
				self.module.attachments.append(f"{self.py}.{prop.py_name} = property({funcs[0]}, {funcs[1]})")

	# Static state ----------------------------------------------------------

	def static_members(self) -> List[Any]:
		members = []
		for member in self.sym.data_members:
			if not member.is_static:
				continue
			if isinstance(member, FieldSymbol) and member.is_const:
				continue
			if isinstance(member, PropertySymbol) and not member.is_auto:
				continue
			members.append(member)
		return members

	def emit_consts(self) -> None:
		lowerer = self.lowerer(kind="static_init", static=True)
		for fld in self.sym.fields.values():
			if not fld.is_const:
				continue
			constant = self.module.binder.const_value(fld)
			code = "None" if constant is None else lowerer.constant_code(constant)
			self.module.attachments.append(f"{self.py}.{fld.py_name} = {code}")

	def emit_statics(self) -> None:
		members = self.static_members()
		if members:
			lowerer = self.lowerer(kind="static_init", static=True)
			for member in members:
				lowerer.emit(f"{self.py}.{member.py_name} = {lowerer.default_code(member.type)}")
			func = f"{self.py}_zero_statics"
			self.module.funcs.append(_function(func, [], lowerer.lines))
			self.module.attachments.append(f"{self.py}.__cs_zero_statics__ = staticmethod({func})")
		lowerer = self.lowerer(kind="static_init", static=True, where=f"{display_name(self.sym)}.{self.sym.name}()")
		for member in members:
			init = member.declarator.initializer if isinstance(member, FieldSymbol) else member.decl.initializer
			if init is not None:
				lowerer.emit(f"{self.py}.{member.py_name} = {lowerer.initializer(init, member.type, member.loc)}")
		if self.sym.static_ctor is not None:
			lowerer.body(self.sym.static_ctor.body)
		if lowerer.lines:
			func = f"{self.py}_cctor"
			self.module.funcs.append(_function(func, [], lowerer.lines))
			self.module.attachments.append(f"{self.py}.__cs_cctor__ = staticmethod({func})")

	# Driver ----------------------------------------------------------------

	def emit(self) -> None:
		sym = self.sym
		self.module.attachments.append(f"{self.py}.__name__ = {sym.name!r}")
		if sym.kind == "enum":
			return
		self.emit_consts()
		if sym.kind == "interface":
			return
		if sym.kind == "struct":
			self.emit_zero()
		elif not sym.is_static:
			self.emit_fields()
		for ctor in sym.ctors:
			self.emit_ctor(ctor)
		self.emit_ctor_table()
		self.emit_methods()
		self.emit_properties()
		self.emit_statics()


def emit_module(bound: BoundUnit, unit_name: str = "CSharp2Json") -> ModuleBuilder:
	"""Lower every type of `bound` into a `ModuleBuilder`; lowering errors land in the bag."""
	module = ModuleBuilder(binder=bound.binder, dispatched=bound.dispatched, unit_name=unit_name, types=list(bound.types))
	for sym in _class_order(bound.types):
		module.classes.append(TypeEmitter(module, sym).class_statement())
	for sym in bound.types:
		TypeEmitter(module, sym).emit()
	logger.debug("emitted %d type(s), %d reference alias(es)", len(bound.types), len(module.references))
	return module


__all__ = ["ModuleBuilder", "TypeEmitter", "emit_module"]
