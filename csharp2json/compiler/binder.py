# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Binder: declarations, using directives, type references and member checks.

Binding runs in passes over the whole unit so forward references work:

  1. declare every type (namespaces merged with the reference set)
  2. bind using directives of every namespace block
  3. resolve base lists, then reject circular inheritance
  4. collect members, with the structural checks C# performs on them
  5. evaluate enum members and `const` fields
  6. cross-type checks (abstract members, interfaces, constructor chaining,
     struct layout cycles)

Method bodies are not looked at here; `lower` binds them while generating
code, using the lookups this module exposes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..clr.attributes import NON_SERIALIZED
from ..core.diagnostics import ERROR, WARNING, Diagnostic
from ..core.span import Span
from ..parser import ast
from ..references import ReferenceSet, RuntimeType
from .constants import INTEGRAL, Constant, ConstantFolder, convert, fits
from .symbols import (
	OBJECT,
	BoundType,
	CtorSymbol,
	FieldSymbol,
	MethodSymbol,
	NamespaceSymbol,
	ParamSymbol,
	PropertySymbol,
	Scope,
	TypeSymbol,
)

logger = logging.getLogger(__name__)

_ENUM_UNDERLYING = ("sbyte", "byte", "short", "ushort", "int", "uint", "long", "ulong")
# Members every type inherits from System.Object.
_OBJECT_MEMBERS = frozenset({"ToString", "Equals", "GetHashCode", "GetType"})
_BUSY = object()


class DiagnosticBag:
	"""Collects binder/emitter diagnostics; identical reports are kept once."""

	def __init__(self, file: Optional[str] = None, *, warnings_as_errors: bool = False) -> None:
		self.file = file
		self.warnings_as_errors = warnings_as_errors
		self.diagnostics: List[Diagnostic] = []
		self._seen: set[tuple] = set()

	def report(self, code: str, message: str, loc: Any, *, severity: str = ERROR, phase: str = "binder") -> None:
		span = Span.from_loc(loc, file=self.file)
		key = (code, message, span.line, span.column)
		if key in self._seen:
			return
		self._seen.add(key)
		if severity == WARNING and self.warnings_as_errors:
			severity = ERROR
		self.diagnostics.append(Diagnostic(message=message, code=code, phase=phase, severity=severity, span=span))

	def error(self, code: str, message: str, loc: Any) -> None:
		self.report(code, message, loc)

	def warning(self, code: str, message: str, loc: Any) -> None:
		self.report(code, message, loc, severity=WARNING)

	@property
	def has_errors(self) -> bool:
		return any(d.is_error for d in self.diagnostics)


@dataclass
class BoundUnit:
	"""Result of binding: user types in metadata order plus lookup services."""

	types: List[TypeSymbol]
	binder: "Binder"
	dispatched: frozenset[str] = field(default_factory=frozenset)

	@property
	def diagnostics(self) -> List[Diagnostic]:
		return self.binder.bag.diagnostics


def display_name(target: Any) -> str:
	if isinstance(target, TypeSymbol):
		return target.full_name.replace("+", ".").split("`", 1)[0]
	if isinstance(target, RuntimeType):
		return target.full_name.split("`", 1)[0]
	if isinstance(target, NamespaceSymbol):
		return target.name
	return str(target)


def signature_text(name: str, params: Iterable[ParamSymbol]) -> str:
	types = ", ".join(type_display(p.type) for p in params)
	return f"{name}({types})"


def type_display(bound: BoundType) -> str:
	if bound.type_param is not None:
		text = bound.type_param
	elif isinstance(bound.target, RuntimeType) and bound.target.keyword is not None:
		text = bound.target.keyword
	elif bound.target is None:
		text = "object"
	else:
		text = display_name(bound.target)
	return text + ("?" if bound.nullable else "") + "[]" * bound.ranks


class Binder:
	def __init__(self, references: ReferenceSet, bag: DiagnosticBag) -> None:
		self.references = references
		self.bag = bag
		self.global_ns = NamespaceSymbol("")
		self.types: List[TypeSymbol] = []
		self._scopes: List[Scope] = []
		self._const_values: dict[int, Any] = {}
		self._enum_values: dict[tuple[int, str], Any] = {}

	# Entry point -----------------------------------------------------------

	def bind(self, unit: ast.CompilationUnit) -> BoundUnit:
		self._load_references()
		unit_scope = Scope(self.global_ns, directives=list(unit.usings))
		self._scopes.append(unit_scope)
		self._declare_members(unit.members, unit_scope, self.global_ns)
		for scope in self._scopes:
			self._bind_usings(scope)
		for sym in self.types:
			self._resolve_bases(sym)
		self._break_base_cycles()
		for sym in self.types:
			self._collect_members(sym)
		for sym in self.types:
			self._bind_attributes(sym)
			if sym.kind == "enum":
				for member in sym.decl.enum_members:
					self.enum_value(sym, member.name)
			for fld in sym.fields.values():
				if fld.is_const:
					self.const_value(fld)
		for sym in self.types:
			self._check_type(sym)
		self._check_struct_layout()
		dispatched = self._dispatched_names()
		logger.debug("bound %d type(s), %d diagnostic(s)", len(self.types), len(self.bag.diagnostics))
		return BoundUnit(types=self.types, binder=self, dispatched=dispatched)

	# Pass 1: declarations --------------------------------------------------

	def _load_references(self) -> None:
		for rt in self.references.types():
			ns = self.global_ns.walk(rt.namespace, create=True) if rt.namespace else self.global_ns
			ns.types[(rt.name, rt.arity)] = rt

	def _declare_members(self, members: Iterable[Any], scope: Scope, ns: NamespaceSymbol) -> None:
		for member in members:
			if isinstance(member, ast.NamespaceDecl):
				inner = scope
				target = ns
				for part in member.name.split("."):
					target = target.child(part)
					inner = Scope(target, parent=inner)
				inner.directives = list(member.usings)
				self._scopes.append(inner)
				self._declare_members(member.members, inner, target)
			else:
				self._declare_type(member, scope, ns, None)

	def _declare_type(self, decl: ast.TypeDecl, scope: Scope, ns: NamespaceSymbol, outer: Optional[TypeSymbol]) -> None:
		key = (decl.name, len(decl.type_params))
		container = outer.nested if outer is not None else ns.types
		existing = container.get(key)
		if isinstance(existing, TypeSymbol):
			if "partial" in decl.modifiers and "partial" in existing.decl.modifiers and existing.kind == decl.kind:
				existing.decls.append(decl)
				for member in decl.members:
					if isinstance(member, ast.TypeDecl):
						self._declare_type(member, scope, ns, existing)
				return
			if outer is None:
				where = ns.name or "<global namespace>"
				self.bag.error("CS0101", f"The namespace '{where}' already contains a definition for '{decl.name}'", decl.loc)
			else:
				self.bag.error("CS0102", f"The type '{display_name(outer)}' already contains a definition for '{decl.name}'", decl.loc)
			return
		if isinstance(existing, RuntimeType):
			self.bag.warning(
				"CS0436",
				f"The type '{display_name(existing)}' conflicts with the imported type '{display_name(existing)}'. "
				"Using the type defined in the compiled unit.",
				decl.loc,
			)
		sym = TypeSymbol(decl=decl, namespace=ns, scope=scope, index=len(self.types), outer=outer)
		self.types.append(sym)
		container[key] = sym
		if outer is not None and decl.name == outer.name:
			self.bag.error("CS0542", f"'{decl.name}': member names cannot be the same as their enclosing type", decl.loc)
		for member in decl.members:
			if isinstance(member, ast.TypeDecl):
				self._declare_type(member, scope, ns, sym)

	# Pass 2: using directives ----------------------------------------------

	def _bind_usings(self, scope: Scope) -> None:
		seen: set[str] = set()
		for directive in scope.directives:
			if directive.alias is not None:
				if directive.alias in scope.aliases:
					self.bag.error(
						"CS1537", f"The using alias '{directive.alias}' appeared previously in this namespace", directive.loc
					)
					continue
				target = self._lookup_dotted(directive.name, scope)
				if target is None:
					self._missing_type(directive.name, directive.loc)
				else:
					scope.aliases[directive.alias] = target
				continue
			if directive.name in seen:
				self.bag.warning(
					"CS0105", f"The using directive for '{directive.name}' appeared previously in this namespace", directive.loc
				)
				continue
			seen.add(directive.name)
			target = self._lookup_dotted(directive.name, scope)
			if isinstance(target, NamespaceSymbol):
				scope.usings.append(target)
			elif target is not None:
				self.bag.error(
					"CS0138",
					f"A 'using namespace' directive can only be applied to namespaces; '{directive.name}' is a type not a namespace. "
					"Consider a 'using static' directive instead",
					directive.loc,
				)
			else:
				self._missing_type(directive.name, directive.loc)

	def _lookup_dotted(self, dotted: str, scope: Scope) -> Any:
		"""Namespace or non-generic type named by `dotted`, relative to enclosing namespaces."""
		for sc in scope.chain():
			found: Any = sc.namespace
			for part in dotted.split("."):
				if isinstance(found, NamespaceSymbol):
					found = found.types.get((part, 0)) or found.children.get(part)
				elif isinstance(found, TypeSymbol):
					found = found.nested.get((part, 0))
				else:
					found = None
				if found is None:
					break
			if found is not None:
				return found
		return None

	def _missing_type(self, name: str, loc: Any) -> None:
		self.bag.error(
			"CS0246",
			f"The type or namespace name '{name}' could not be found (are you missing a using directive or an assembly reference?)",
			loc,
		)

	# Type lookup -----------------------------------------------------------

	def lookup_type_name(
		self,
		name: str,
		arity: int,
		sym: Optional[TypeSymbol],
		scope: Scope,
		loc: Any = None,
		*,
		report: bool = True,
	) -> Any:
		"""
		Resolve a simple name to a type parameter (str), TypeSymbol,
		RuntimeType or NamespaceSymbol. Reports CS0104/CS0246/CS0305 when
		`report` is set.
		"""
		if arity == 0 and sym is not None and name in sym.type_params:
			return name
		outer = sym
		while outer is not None:
			for anc in outer.ancestors():
				nested = anc.nested.get((name, arity))
				if nested is not None:
					return nested
			outer = outer.outer
		for sc in scope.chain():
			ns = sc.namespace
			found = ns.types.get((name, arity))
			if found is not None:
				return found
			if arity == 0:
				if name in ns.children:
					return ns.children[name]
				if name in sc.aliases:
					return sc.aliases[name]
			candidates: List[Any] = []
			for imported in sc.usings:
				candidate = imported.types.get((name, arity))
				if candidate is not None and not any(candidate is c for c in candidates):
					candidates.append(candidate)
			if len(candidates) > 1 and report:
				self.bag.error(
					"CS0104",
					f"'{name}' is an ambiguous reference between '{display_name(candidates[0])}' and '{display_name(candidates[1])}'",
					loc,
				)
			if candidates:
				return candidates[0]
		if report:
			arities = self._visible_arities(name, sym, scope)
			generic = [a for a in arities if a]
			if arity and arities and not generic:
				self.bag.error("CS0308", f"The non-generic type '{name}' cannot be used with type arguments", loc)
			elif generic:
				self.bag.error("CS0305", f"Using the generic type '{name}' requires {generic[0]} type arguments", loc)
			else:
				self._missing_type(name, loc)
		return None

	def _visible_arities(self, name: str, sym: Optional[TypeSymbol], scope: Scope) -> List[int]:
		arities: set[int] = set()
		outer = sym
		while outer is not None:
			for anc in outer.ancestors():
				arities.update(a for (n, a) in anc.nested if n == name)
			outer = outer.outer
		for sc in scope.chain():
			arities.update(sc.namespace.arities(name))
			for imported in sc.usings:
				arities.update(imported.arities(name))
		return sorted(arities)

	def resolve_type(self, ref: ast.TypeRef, sym: Optional[TypeSymbol], scope: Scope) -> BoundType:
		"""Bind a written type; unknown types are reported and bind to `object`."""
		if ref.predefined is not None:
			bound = BoundType(self.references.keyword(ref.predefined))
		else:
			bound = self._resolve_named(ref, sym, scope)
		if ref.nullable and bound.is_value_type:
			bound = BoundType(bound.target, nullable=True, type_param=bound.type_param)
		if ref.ranks:
			bound = BoundType(bound.target, nullable=bound.nullable, ranks=ref.ranks, type_param=bound.type_param)
		return bound

	def _resolve_named(self, ref: ast.TypeRef, sym: Optional[TypeSymbol], scope: Scope) -> BoundType:
		args_by_part = [[self.resolve_type(arg, sym, scope) for arg in part.args] for part in ref.parts]
		first = ref.parts[0]
		found = self.lookup_type_name(first.name, len(first.args), sym, scope, ref.loc)
		for part in ref.parts[1:]:
			if found is None:
				return OBJECT
			arity = len(part.args)
			if isinstance(found, NamespaceSymbol):
				nxt = found.types.get((part.name, arity))
				if nxt is None and arity == 0:
					nxt = found.children.get(part.name)
				if nxt is None:
					self.bag.error(
						"CS0234",
						f"The type or namespace name '{part.name}' does not exist in the namespace '{found.name}' "
						"(are you missing an assembly reference?)",
						ref.loc,
					)
				found = nxt
			elif isinstance(found, TypeSymbol):
				nxt = None
				for anc in found.ancestors():
					nxt = anc.nested.get((part.name, arity))
					if nxt is not None:
						break
				if nxt is None:
					self.bag.error(
						"CS0426", f"The type name '{part.name}' does not exist in the type '{display_name(found)}'", ref.loc
					)
				found = nxt
			else:
				self.bag.error(
					"CS0426", f"The type name '{part.name}' does not exist in the type '{display_name(found)}'", ref.loc
				)
				return OBJECT
		if found is None:
			return OBJECT
		if isinstance(found, NamespaceSymbol):
			self.bag.error("CS0118", f"'{found.name}' is a namespace but is used like a type", ref.loc)
			return OBJECT
		if isinstance(found, str):
			return BoundType(type_param=found)
		if isinstance(found, RuntimeType) and found.full_name == "System.Nullable`1":
			inner = args_by_part[-1][0]
			return BoundType(inner.target, nullable=True, type_param=inner.type_param)
		return BoundType(found)

	def resolve_type_expr(self, expr: ast.Expr, sym: Optional[TypeSymbol], scope: Scope) -> Any:
		"""
		Interpret a name expression (`Foo`, `A.B.Foo`, `int`) as a namespace or
		type, without reporting; None if it does not name one.
		"""
		if isinstance(expr, ast.NameRef):
			found = self.lookup_type_name(expr.name, 0, sym, scope, report=False)
			return None if isinstance(found, str) else found
		if isinstance(expr, ast.MemberAccess):
			container = self.resolve_type_expr(expr.target, sym, scope)
			if isinstance(container, NamespaceSymbol):
				return container.types.get((expr.name, 0)) or container.children.get(expr.name)
			if isinstance(container, TypeSymbol):
				for anc in container.ancestors():
					nested = anc.nested.get((expr.name, 0))
					if nested is not None:
						return nested
		return None

	# Pass 3: bases ---------------------------------------------------------

	def _resolve_bases(self, sym: TypeSymbol) -> None:
		refs = [ref for decl in sym.decls for ref in decl.bases]
		context = sym
		if sym.kind == "enum":
			sym.underlying = "int"
			if refs:
				bound = self.resolve_type(refs[0], context, sym.scope)
				if bound.keyword in _ENUM_UNDERLYING:
					sym.underlying = bound.keyword
				else:
					self.bag.error("CS1008", "Type byte, sbyte, short, ushort, int, uint, long, or ulong expected", refs[0].loc)
			return
		for position, ref in enumerate(refs):
			bound = self.resolve_type(ref, context, sym.scope)
			target = bound.target
			if bound.type_param is not None:
				self.bag.error("CS0689", f"Cannot derive from '{bound.type_param}' because it is a type parameter", ref.loc)
				continue
			if target is None:
				continue
			if target.kind == "interface" and not bound.ranks:
				sym.interfaces.append(target)
				continue
			if sym.kind in ("struct", "interface"):
				self.bag.error("CS0527", f"Type '{display_name(target)}' in interface list is not an interface", ref.loc)
				continue
			if sym.base is not None:
				self.bag.error(
					"CS1721",
					f"Class '{display_name(sym)}' cannot have multiple base classes: '{display_name(sym.base)}' and '{display_name(target)}'",
					ref.loc,
				)
				continue
			if position > 0:
				self.bag.error("CS1722", f"Base class '{display_name(target)}' must come before any interfaces", ref.loc)
				continue
			if isinstance(target, RuntimeType) and target.full_name == "System.Object":
				continue
			if isinstance(target, RuntimeType) and target.special:
				self.bag.error("CS0644", f"'{display_name(sym)}' cannot derive from special class '{display_name(target)}'", ref.loc)
			elif getattr(target, "is_static", False) or getattr(target, "static", False):
				self.bag.error("CS0709", f"'{display_name(sym)}': cannot derive from static class '{display_name(target)}'", ref.loc)
			elif bound.ranks or (target.is_sealed if isinstance(target, TypeSymbol) else target.sealed):
				self.bag.error("CS0509", f"'{display_name(sym)}': cannot derive from sealed type '{display_name(target)}'", ref.loc)
			elif sym.is_static:
				self.bag.error(
					"CS0713",
					f"Static class '{display_name(sym)}' cannot derive from type '{display_name(target)}'. Static classes must derive from object.",
					ref.loc,
				)
			else:
				sym.base = target

	def _break_base_cycles(self) -> None:
		for sym in self.types:
			seen: List[TypeSymbol] = [sym]
			current = sym.user_base
			while current is not None:
				if current is sym:
					other = seen[1] if len(seen) > 1 else sym
					self.bag.error(
						"CS0146",
						f"Circular base type dependency involving '{display_name(sym)}' and '{display_name(other)}'",
						sym.decl.loc,
					)
					sym.base = None
					break
				if current in seen:
					break
				seen.append(current)
				current = current.user_base

	# Pass 4: members -------------------------------------------------------

	def _claim(self, sym: TypeSymbol, name: str, loc: Any, *, method: bool = False) -> bool:
		"""Check `name` is free in `sym` (methods may share a name)."""
		if name == sym.name and sym.kind != "enum":
			self.bag.error("CS0542", f"'{name}': member names cannot be the same as their enclosing type", loc)
		existing = sym.own_member(name)
		if existing is None or (method and isinstance(existing, list)):
			return True
		self.bag.error("CS0102", f"The type '{display_name(sym)}' already contains a definition for '{name}'", loc)
		return False

	def _params(self, params: List[ast.Parameter], sym: TypeSymbol) -> List[ParamSymbol]:
		bound: List[ParamSymbol] = []
		seen: set[str] = set()
		for param in params:
			if param.name in seen:
				self.bag.error("CS0100", f"The parameter name '{param.name}' is a duplicate", param.loc)
			seen.add(param.name)
			bound.append(ParamSymbol(param.name, self.resolve_type(param.type, sym, sym.scope), param.loc, param.default))
		for earlier, later in zip(bound, bound[1:]):
			if earlier.default is not None and later.default is None:
				self.bag.error("CS1737", "Optional parameters must appear after all required parameters", later.loc)
		return bound

	def _non_serialized(self, attributes: List[ast.Attribute], sym: TypeSymbol) -> bool:
		for attr in attributes:
			target = self.bind_attribute(attr, sym, report=False)
			if target is not None and target.full_name == NON_SERIALIZED:
				return True
		return False

	def _collect_members(self, sym: TypeSymbol) -> None:
		if sym.kind == "enum":
			seen: set[str] = set()
			for member in sym.decl.enum_members:
				if member.name in seen:
					self.bag.error("CS0102", f"The type '{display_name(sym)}' already contains a definition for '{member.name}'", member.loc)
				seen.add(member.name)
			return
		for decl in sym.decls:
			for member in decl.members:
				if isinstance(member, ast.FieldDecl):
					self._collect_field(sym, member)
				elif isinstance(member, ast.PropertyDecl):
					self._collect_property(sym, member)
				elif isinstance(member, ast.MethodDecl):
					self._collect_method(sym, member)
				elif isinstance(member, ast.ConstructorDecl):
					self._collect_constructor(sym, member)
				elif isinstance(member, ast.TypeDecl):
					for other in sym.fields.keys() | sym.properties.keys() | sym.methods.keys():
						if other == member.name:
							self.bag.error(
								"CS0102", f"The type '{display_name(sym)}' already contains a definition for '{member.name}'", member.loc
							)
		if sym.kind == "struct":
			sym.ctors.insert(0, CtorSymbol(sym, []))
		elif sym.kind == "class" and not sym.is_static and not sym.ctors:
			sym.ctors.append(CtorSymbol(sym, []))
		for position, ctor in enumerate(sym.ctors):
			ctor.py_func = f"{sym.py_name}_zero" if ctor.is_implicit and sym.kind == "struct" else f"{sym.py_name}_ctor{position}"
		for name, overloads in sym.methods.items():
			for position, method in enumerate(overloads):
				suffix = f"_{position}" if position else ""
				method.py_func = f"{sym.py_name}_{method.py_name}{suffix}"

	def _instance_in_static(self, sym: TypeSymbol, what: str, loc: Any) -> None:
		self.bag.error("CS0708", f"'{display_name(sym)}.{what}': cannot declare instance members in a static class", loc)

	def _collect_field(self, sym: TypeSymbol, decl: ast.FieldDecl) -> None:
		bound = self.resolve_type(decl.type, sym, sym.scope)
		non_serialized = self._non_serialized(decl.attributes, sym)
		for declarator in decl.declarators:
			if not self._claim(sym, declarator.name, declarator.loc):
				continue
			fld = FieldSymbol(declarator.name, bound, sym, decl, declarator, non_serialized)
			if sym.kind == "interface" and not fld.is_static:
				self.bag.error("CS0525", "Interfaces cannot contain instance fields", declarator.loc)
			if sym.is_static and not fld.is_static:
				self._instance_in_static(sym, declarator.name, declarator.loc)
			if sym.kind == "struct" and not fld.is_static and declarator.initializer is not None:
				self.bag.error(
					"CS0573",
					f"'{display_name(sym)}.{declarator.name}': cannot have instance property or field initializers in structs",
					declarator.loc,
				)
			if fld.is_const and declarator.initializer is None:
				self.bag.error("CS0145", "A const field requires a value to be provided", declarator.loc)
			if fld.is_const and "static" in decl.modifiers:
				self.bag.error("CS0504", f"The constant '{display_name(sym)}.{declarator.name}' cannot be marked static", declarator.loc)
			sym.fields[declarator.name] = fld
			sym.data_members.append(fld)

	def _collect_property(self, sym: TypeSymbol, decl: ast.PropertyDecl) -> None:
		if not self._claim(sym, decl.name, decl.loc):
			return
		prop = PropertySymbol(decl.name, self.resolve_type(decl.type, sym, sym.scope), sym, decl)
		prop.non_serialized = self._non_serialized(decl.attributes, sym)
		where = f"{display_name(sym)}.{decl.name}"
		if sym.is_static and not prop.is_static:
			self._instance_in_static(sym, decl.name, decl.loc)
		if "abstract" in decl.modifiers and sym.kind == "class" and not sym.is_abstract:
			self.bag.error("CS0513", f"'{where}' is abstract but it is contained in non-abstract type '{display_name(sym)}'", decl.loc)
		if prop.is_abstract:
			for accessor in (decl.getter, decl.setter):
				if accessor is not None and accessor.body is not None and sym.kind != "interface":
					self.bag.error("CS0500", f"'{where}.{accessor.kind}' cannot declare a body because it is marked abstract", accessor.loc)
		elif decl.getter is None and decl.setter is not None and decl.setter.body is None:
			self.bag.error("CS8051", "Auto-implemented properties must have get accessors.", decl.loc)
		elif not decl.is_auto and any(
			a is not None and a.body is None for a in (decl.getter, decl.setter)
		) and "extern" not in decl.modifiers:
			accessor = decl.getter if decl.getter is not None and decl.getter.body is None else decl.setter
			self.bag.error(
				"CS0501",
				f"'{where}.{accessor.kind}' must declare a body because it is not marked abstract, extern, or partial",
				accessor.loc,
			)
		if decl.initializer is not None:
			if not prop.is_auto:
				self.bag.error("CS8050", "Only auto-implemented properties can have initializers.", decl.loc)
			elif sym.kind == "struct" and not prop.is_static:
				self.bag.error("CS0573", f"'{where}': cannot have instance property or field initializers in structs", decl.loc)
		sym.properties[decl.name] = prop
		sym.data_members.append(prop)

	def _collect_method(self, sym: TypeSymbol, decl: ast.MethodDecl) -> None:
		if not self._claim(sym, decl.name, decl.loc, method=True):
			return
		params = self._params(decl.params, sym)
		return_type = None if decl.return_type is None else self.resolve_type(decl.return_type, sym, sym.scope)
		method = MethodSymbol(decl.name, sym, decl, params, return_type)
		where = f"{display_name(sym)}.{signature_text(decl.name, params)}"
		if sym.is_static and not method.is_static:
			self._instance_in_static(sym, signature_text(decl.name, params), decl.loc)
		if "abstract" in decl.modifiers:
			if decl.body is not None:
				self.bag.error("CS0500", f"'{where}' cannot declare a body because it is marked abstract", decl.loc)
			if sym.kind == "class" and not sym.is_abstract:
				self.bag.error("CS0513", f"'{where}' is abstract but it is contained in non-abstract type '{display_name(sym)}'", decl.loc)
		elif decl.body is None and sym.kind != "interface" and not ({"extern", "partial"} & set(decl.modifiers)):
			self.bag.error("CS0501", f"'{where}' must declare a body because it is not marked abstract, extern, or partial", decl.loc)
		overloads = sym.methods.setdefault(decl.name, [])
		for other in overloads:
			if other.signature() == method.signature():
				self.bag.error(
					"CS0111",
					f"Type '{display_name(sym)}' already defines a member called '{decl.name}' with the same parameter types",
					decl.loc,
				)
				return
		overloads.append(method)

	def _collect_constructor(self, sym: TypeSymbol, decl: ast.ConstructorDecl) -> None:
		if decl.name != sym.name:
			self.bag.error("CS1520", "Method must have a return type", decl.loc)
			return
		params = self._params(decl.params, sym)
		where = f"{display_name(sym)}.{signature_text(sym.name, params)}"
		if "static" in decl.modifiers:
			if params:
				self.bag.error("CS0132", f"'{where}': a static constructor must be parameterless", decl.loc)
			elif sym.static_ctor is not None:
				self.bag.error(
					"CS0111", f"Type '{display_name(sym)}' already defines a member called '{sym.name}' with the same parameter types", decl.loc
				)
			else:
				sym.static_ctor = decl
			return
		if sym.kind == "interface":
			self.bag.error("CS0526", "Interfaces cannot contain instance constructors", decl.loc)
			return
		if sym.is_static:
			self.bag.error("CS0710", "Static classes cannot have instance constructors", decl.loc)
			return
		if sym.kind == "struct" and not params:
			self.bag.error("CS0568", "Structs cannot contain explicit parameterless constructors", decl.loc)
			return
		if sym.kind == "struct" and decl.initializer is not None and decl.initializer.kind == "base":
			self.bag.error("CS0522", f"'{where}': structs cannot call base class constructors", decl.initializer.loc)
		if decl.body is None and "extern" not in decl.modifiers:
			self.bag.error("CS0501", f"'{where}' must declare a body because it is not marked abstract, extern, or partial", decl.loc)
		ctor = CtorSymbol(sym, params, decl)
		for other in sym.ctors:
			if other.signature() == ctor.signature():
				self.bag.error(
					"CS0111", f"Type '{display_name(sym)}' already defines a member called '{sym.name}' with the same parameter types", decl.loc
				)
				return
		sym.ctors.append(ctor)

	# Attributes ------------------------------------------------------------

	def is_attribute_type(self, target: Any) -> bool:
		if isinstance(target, RuntimeType):
			return target.is_attribute
		if isinstance(target, TypeSymbol):
			root = target.reference_root()
			return root is not None and root.is_attribute
		return False

	def bind_attribute(self, attr: ast.Attribute, sym: Optional[TypeSymbol], *, report: bool = True) -> Any:
		scope = sym.scope if sym is not None else self._scopes[0]
		head, _, last = attr.name.rpartition(".")
		candidates = []
		for name in (f"{last}Attribute", last):
			dotted = f"{head}.{name}" if head else name
			if head:
				target = self._lookup_dotted(dotted, scope)
			else:
				target = self.lookup_type_name(name, 0, sym, scope, report=False)
			if target is not None and not isinstance(target, (str, NamespaceSymbol)):
				candidates.append(target)
		for target in candidates:
			if self.is_attribute_type(target):
				return target
		if report:
			if candidates:
				self.bag.error("CS0616", f"'{display_name(candidates[0])}' is not an attribute class", attr.loc)
			else:
				self._missing_type(f"{attr.name}Attribute", attr.loc)
		return None

	def _bind_attributes(self, sym: TypeSymbol) -> None:
		owners: List[Tuple[List[ast.Attribute], Optional[TypeSymbol]]] = [(decl.attributes, sym.outer or sym) for decl in sym.decls]
		for decl in sym.decls:
			for member in decl.members:
				if not isinstance(member, ast.TypeDecl):
					owners.append((member.attributes, sym))
		for attributes, context in owners:
			for attr in attributes:
				self.bind_attribute(attr, context)

	# Pass 5: constants -----------------------------------------------------

	def folder(self, resolve: Callable[[ast.Expr], Optional[Constant]]) -> ConstantFolder:
		return ConstantFolder(resolve, self.bag.error)

	def constant_of_name(
		self,
		expr: ast.Expr,
		sym: Optional[TypeSymbol],
		scope: Scope,
		*,
		is_local: Callable[[str], bool] = lambda name: False,
		enum_context: Optional[TypeSymbol] = None,
	) -> Optional[Constant]:
		"""Constant value of a name expression, or None."""
		if isinstance(expr, ast.PredefinedMember):
			rt = self.references.keyword(expr.keyword)
			return self._reference_constant(rt, expr.name)
		if isinstance(expr, ast.NameRef):
			if is_local(expr.name):
				return None
			if enum_context is not None and any(m.name == expr.name for m in enum_context.decl.enum_members):
				value = self.enum_value(enum_context, expr.name)
				return None if value is None else Constant(value, enum_context.underlying or "int")
			outer = sym
			while outer is not None:
				_owner, member = outer.find_member(expr.name)
				if member is not None:
					if isinstance(member, FieldSymbol) and member.is_const:
						return self.const_value(member)
					return None
				outer = outer.outer
			return None
		if isinstance(expr, ast.MemberAccess):
			if isinstance(expr.target, ast.NameRef) and (is_local(expr.target.name) or self._is_value_name(expr.target.name, sym)):
				return None
			container = self.resolve_type_expr(expr.target, sym, scope)
			if isinstance(container, TypeSymbol):
				if container.kind == "enum":
					value = self.enum_value(container, expr.name)
					return None if value is None else Constant(value, "enum", container)
				_owner, member = container.find_member(expr.name)
				if isinstance(member, FieldSymbol) and member.is_const:
					return self.const_value(member)
			elif isinstance(container, RuntimeType):
				return self._reference_constant(container, expr.name)
		return None

	def _is_value_name(self, name: str, sym: Optional[TypeSymbol]) -> bool:
		outer = sym
		while outer is not None:
			_owner, member = outer.find_member(name)
			if member is not None and not isinstance(member, TypeSymbol):
				return True
			outer = outer.outer
		return False

	def _reference_constant(self, rt: RuntimeType, name: str) -> Optional[Constant]:
		if rt.kind == "enum" and name in rt.python_type.__members__:
			return Constant(int(rt.python_type[name]), "enum", rt)
		found = rt.constant(name)
		if found is None:
			return None
		value, kind = found
		return Constant(value, kind)

	def enum_value(self, sym: TypeSymbol, name: str) -> Optional[int]:
		key = (id(sym), name)
		state = self._enum_values.get(key)
		if state is _BUSY:
			self.bag.error(
				"CS0110", f"The evaluation of the constant value for '{display_name(sym)}.{name}' involves a circular definition", sym.decl.loc
			)
			return None
		if key in self._enum_values:
			return state
		members = sym.decl.enum_members
		position = next((i for i, m in enumerate(members) if m.name == name), None)
		if position is None:
			return None
		member = members[position]
		underlying = sym.underlying or "int"
		self._enum_values[key] = _BUSY
		value: Optional[int]
		if member.value is None:
			if position == 0:
				value = 0
			else:
				previous = self.enum_value(sym, members[position - 1].name)
				value = None if previous is None else previous + 1
				if value is not None and not fits(value, underlying):
					self.bag.error("CS0543", f"'{display_name(sym)}.{name}': the enumerator value is too large to fit in its type", member.loc)
					value = None
		else:
			folder = self.folder(lambda e: self.constant_of_name(e, sym.outer, sym.scope, enum_context=sym))
			constant = folder.fold(member.value)
			value = self._enum_constant(sym, member, constant, underlying)
		if value is not None:
			sym.enum_values[name] = value
		self._enum_values[key] = value
		return value

	def _enum_constant(self, sym: TypeSymbol, member: ast.EnumMember, constant: Optional[Constant], underlying: str) -> Optional[int]:
		if constant is None:
			self.bag.error("CS0133", f"The expression being assigned to '{display_name(sym)}.{member.name}' must be constant", member.loc)
			return None
		if constant.kind == "enum":
			return constant.value
		converted = convert(constant, underlying)
		if converted is None:
			self.conversion_error(constant, underlying, member.loc)
			return None
		return converted.value

	def conversion_error(self, constant: Constant, target: str, loc: Any) -> None:
		if constant.kind in INTEGRAL and target in INTEGRAL:
			self.bag.error("CS0031", f"Constant value '{constant.value}' cannot be converted to a '{target}'", loc)
		elif constant.kind == "null":
			self.bag.error("CS0037", f"Cannot convert null to '{target}' because it is a non-nullable value type", loc)
		else:
			self.bag.error("CS0029", f"Cannot implicitly convert type '{constant.kind}' to '{target}'", loc)

	def const_value(self, fld: FieldSymbol) -> Optional[Constant]:
		key = id(fld)
		state = self._const_values.get(key)
		if state is _BUSY:
			self.bag.error(
				"CS0110",
				f"The evaluation of the constant value for '{display_name(fld.owner)}.{fld.name}' involves a circular definition",
				fld.loc,
			)
			return None
		if key in self._const_values:
			return state
		self._const_values[key] = _BUSY
		result = None
		initializer = fld.declarator.initializer
		if isinstance(initializer, ast.InitializerList):
			self.bag.error("CS0133", f"The expression being assigned to '{display_name(fld.owner)}.{fld.name}' must be constant", fld.loc)
		elif initializer is not None:
			folder = self.folder(lambda e: self.constant_of_name(e, fld.owner, fld.owner.scope))
			constant = folder.fold(initializer)
			if constant is None:
				self.bag.error("CS0133", f"The expression being assigned to '{display_name(fld.owner)}.{fld.name}' must be constant", fld.loc)
			else:
				result = self.convert_constant(constant, fld.type, fld.loc)
		self._const_values[key] = result
		return result

	def convert_constant(self, constant: Constant, target: BoundType, loc: Any) -> Optional[Constant]:
		"""Implicitly convert a constant to `target`, reporting when C# would not."""
		if target.keyword is not None and target.keyword not in ("object", "string"):
			converted = convert(constant, target.keyword)
			if converted is None:
				self.conversion_error(constant, target.keyword, loc)
			return converted
		if target.is_enum:
			if constant.kind == "enum" and constant.enum is target.target:
				return constant
			if constant.kind in INTEGRAL and constant.value == 0:
				return Constant(0, "enum", target.target)
			self.bag.error("CS0266", f"Cannot implicitly convert type '{constant.kind}' to '{type_display(target)}'", loc)
			return None
		if target.keyword == "string" and constant.kind not in ("string", "null"):
			self.bag.error("CS0029", f"Cannot implicitly convert type '{constant.kind}' to 'string'", loc)
			return None
		if constant.kind not in ("null", "string") and target.keyword != "object" and not target.nullable:
			self.bag.error("CS0134", f"A const field of a reference type other than string can only be initialized with null", loc)
			return None
		return constant

	# Pass 6: cross-type checks ---------------------------------------------

	def inherits_member(self, sym: TypeSymbol, name: str) -> bool:
		"""Whether a base of `sym` (user or reference) declares `name`."""
		for anc in list(sym.ancestors())[1:]:
			if anc.own_member(name) is not None:
				return True
		root = sym.reference_root()
		if root is not None:
			return name in root.instance_members
		return name in _OBJECT_MEMBERS

	def _check_type(self, sym: TypeSymbol) -> None:
		if sym.kind == "enum":
			return
		for methods in sym.methods.values():
			for method in methods:
				if method.is_override and not self.inherits_member(sym, method.name):
					self.bag.error(
						"CS0115",
						f"'{display_name(sym)}.{signature_text(method.name, method.params)}': no suitable method found to override",
						method.loc,
					)
		for prop in sym.properties.values():
			if prop.is_override and not self.inherits_member(sym, prop.name):
				self.bag.error("CS0115", f"'{display_name(sym)}.{prop.name}': no suitable method found to override", prop.loc)
		if sym.kind == "class" and not sym.is_abstract:
			self._check_abstract_implemented(sym)
		if sym.kind in ("class", "struct"):
			self._check_interfaces(sym)
			self._check_constructor_chaining(sym)

	def _check_abstract_implemented(self, sym: TypeSymbol) -> None:
		chain = list(sym.ancestors())
		for depth, anc in enumerate(chain[1:], start=1):
			derived = chain[:depth]
			for methods in anc.methods.values():
				for method in methods:
					if not method.is_abstract:
						continue
					if not any(
						m.is_override and len(m.params) == len(method.params)
						for d in derived
						for m in d.methods.get(method.name, ())
					):
						self.bag.error(
							"CS0534",
							f"'{display_name(sym)}' does not implement inherited abstract member "
							f"'{display_name(anc)}.{signature_text(method.name, method.params)}'",
							sym.decl.loc,
						)
			for prop in anc.properties.values():
				if prop.is_abstract and not any(
					p is not None and p.is_override for d in derived for p in (d.properties.get(prop.name),)
				):
					self.bag.error(
						"CS0534",
						f"'{display_name(sym)}' does not implement inherited abstract member '{display_name(anc)}.{prop.name}'",
						sym.decl.loc,
					)

	def _check_interfaces(self, sym: TypeSymbol) -> None:
		chain = list(sym.ancestors())
		root = sym.reference_root()
		for iface in sym.all_interfaces():
			if not isinstance(iface, TypeSymbol):
				continue
			for methods in iface.methods.values():
				for method in methods:
					if method.decl.body is not None or method.is_static:
						continue
					implemented = any(
						len(m.params) == len(method.params) and not m.is_static
						for anc in chain
						for m in anc.methods.get(method.name, ())
					) or (root is not None and method.name in root.instance_members)
					if not implemented:
						self.bag.error(
							"CS0535",
							f"'{display_name(sym)}' does not implement interface member '{display_name(iface)}.{signature_text(method.name, method.params)}'",
							sym.decl.loc,
						)
			for prop in iface.properties.values():
				implemented = any(prop.name in anc.properties for anc in chain) or (
					root is not None and prop.name in root.instance_members
				)
				if not implemented:
					self.bag.error(
						"CS0535", f"'{display_name(sym)}' does not implement interface member '{display_name(iface)}.{prop.name}'", sym.decl.loc
					)

	def _check_constructor_chaining(self, sym: TypeSymbol) -> None:
		base = sym.user_base
		for ctor in sym.ctors:
			init = ctor.decl.initializer if ctor.decl is not None else None
			if init is not None and init.kind == "this":
				if not any(other is not ctor and other.accepts_count(len(init.args)) for other in sym.ctors):
					self.bag.error(
						"CS1729", f"'{display_name(sym)}' does not contain a constructor that takes {len(init.args)} arguments", init.loc
					)
				continue
			if sym.kind == "struct" or base is None:
				continue
			count = len(init.args) if init is not None else 0
			if any(b.accepts_count(count) for b in base.ctors):
				continue
			if init is not None:
				self.bag.error("CS1729", f"'{display_name(base)}' does not contain a constructor that takes {count} arguments", init.loc)
				continue
			required = next((b for b in base.ctors if b.params), None)
			param = required.params[0].name if required is not None else "?"
			signature = signature_text(base.name, required.params) if required is not None else f"{base.name}()"
			self.bag.error(
				"CS7036",
				f"There is no argument given that corresponds to the required formal parameter '{param}' of "
				f"'{display_name(base)}.{signature}'",
				ctor.loc,
			)

	def _check_struct_layout(self) -> None:
		def struct_fields(sym: TypeSymbol) -> List[Tuple[str, TypeSymbol]]:
			out = []
			for member in sym.data_members:
				if member.is_static or (isinstance(member, PropertySymbol) and not member.is_auto):
					continue
				if member.type.is_struct:
					out.append((member.name, member.type.user))
			return out

		for sym in self.types:
			if sym.kind != "struct":
				continue
			pending = [(name, target, [sym]) for name, target in struct_fields(sym)]
			while pending:
				name, target, path = pending.pop()
				if target is sym:
					self.bag.error(
						"CS0523",
						f"Struct member '{display_name(path[-1])}.{name}' of type '{display_name(target)}' causes a cycle in the struct layout",
						sym.decl.loc,
					)
					break
				if target in path:
					continue
				pending.extend((n, t, path + [target]) for n, t in struct_fields(target))

	def _dispatched_names(self) -> frozenset[str]:
		dispatched: set[str] = set()
		for sym in self.types:
			signatures: dict[str, set] = {}
			for anc in sym.ancestors():
				for name, methods in anc.methods.items():
					for method in methods:
						signatures.setdefault(name, set()).add(method.signature())
			dispatched.update(name for name, sigs in signatures.items() if len(sigs) > 1)
		return frozenset(dispatched)


def bind(
	unit: ast.CompilationUnit,
	references: ReferenceSet,
	*,
	file: Optional[str] = None,
	warnings_as_errors: bool = False,
) -> BoundUnit:
	bag = DiagnosticBag(file, warnings_as_errors=warnings_as_errors)
	return Binder(references, bag).bind(unit)


__all__ = ["Binder", "BoundUnit", "DiagnosticBag", "bind", "display_name", "signature_text", "type_display"]
