# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Binder symbol tables.

A `NamespaceSymbol` tree merges the reference set with the unit's own
declarations. Each namespace block (and the compilation unit itself) gets a
`Scope` holding its using directives; type lookups walk scopes outward to the
global namespace. User types are `TypeSymbol`s, reference types stay
`RuntimeType`s; both can appear as the `target` of a `BoundType`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..clr.names import py_ident
from ..parser import ast
from ..references import RuntimeType

TypeKey = Tuple[str, int]


@dataclass(eq=False)
class NamespaceSymbol:
	name: str
	parent: Optional["NamespaceSymbol"] = None
	children: Dict[str, "NamespaceSymbol"] = field(default_factory=dict)
	types: Dict[TypeKey, Any] = field(default_factory=dict)

	def child(self, name: str) -> "NamespaceSymbol":
		ns = self.children.get(name)
		if ns is None:
			full = f"{self.name}.{name}" if self.name else name
			ns = NamespaceSymbol(full, self)
			self.children[name] = ns
		return ns

	def walk(self, dotted: str, *, create: bool = False) -> Optional["NamespaceSymbol"]:
		ns: Optional[NamespaceSymbol] = self
		for part in dotted.split("."):
			if ns is None:
				return None
			ns = ns.child(part) if create else ns.children.get(part)
		return ns

	def arities(self, name: str) -> List[int]:
		return sorted(arity for (n, arity) in self.types if n == name)

	def __repr__(self) -> str:
		return f"NamespaceSymbol({self.name!r})"


@dataclass(eq=False)
class Scope:
	"""Lookup context of one namespace block."""

	namespace: NamespaceSymbol
	parent: Optional["Scope"] = None
	usings: List[NamespaceSymbol] = field(default_factory=list)
	aliases: Dict[str, Any] = field(default_factory=dict)
	directives: List[ast.UsingDirective] = field(default_factory=list)

	def chain(self) -> Iterator["Scope"]:
		scope: Optional[Scope] = self
		while scope is not None:
			yield scope
			scope = scope.parent


@dataclass(frozen=True)
class BoundType:
	"""A resolved type reference: user type, reference type or type parameter."""

	target: Any = None
	nullable: bool = False
	ranks: int = 0
	type_param: Optional[str] = None

	@property
	def keyword(self) -> Optional[str]:
		if self.ranks or self.nullable or not isinstance(self.target, RuntimeType):
			return None
		return self.target.keyword

	@property
	def user(self) -> Optional["TypeSymbol"]:
		if self.ranks or not isinstance(self.target, TypeSymbol):
			return None
		return self.target

	@property
	def is_array(self) -> bool:
		return self.ranks > 0

	@property
	def is_struct(self) -> bool:
		sym = self.user
		return sym is not None and not self.nullable and sym.kind == "struct"

	@property
	def is_enum(self) -> bool:
		if self.ranks or self.nullable:
			return False
		target = self.target
		if isinstance(target, TypeSymbol):
			return target.kind == "enum"
		return isinstance(target, RuntimeType) and target.kind == "enum"

	@property
	def is_value_type(self) -> bool:
		if self.ranks or self.nullable or self.target is None:
			return False
		target = self.target
		if isinstance(target, TypeSymbol):
			return target.kind in ("struct", "enum")
		return target.value_type

	def element(self) -> "BoundType":
		return replace(self, ranks=self.ranks - 1)

	def clr_name(self) -> str:
		"""CLR spelling used in reflection metadata (`System.Int32[]`)."""
		if self.type_param is not None:
			text = self.type_param
		elif self.target is None:
			text = "System.Object"
		else:
			text = self.target.full_name
		if self.nullable:
			text = f"System.Nullable`1[{text}]"
		return text + "[]" * self.ranks

	def key(self) -> tuple:
		return (id(self.target), self.type_param, self.nullable, self.ranks)


OBJECT = BoundType()


def _has(modifiers: Any, *names: str) -> bool:
	return any(name in modifiers for name in names)


@dataclass(eq=False)
class FieldSymbol:
	name: str
	type: BoundType
	owner: "TypeSymbol"
	decl: ast.FieldDecl
	declarator: ast.VariableDeclarator
	non_serialized: bool = False

	@property
	def loc(self) -> ast.Located:
		return self.declarator.loc

	@property
	def py_name(self) -> str:
		return py_ident(self.name)

	@property
	def is_const(self) -> bool:
		return "const" in self.decl.modifiers

	@property
	def is_static(self) -> bool:
		return _has(self.decl.modifiers, "static", "const")

	@property
	def is_readonly(self) -> bool:
		return "readonly" in self.decl.modifiers

	@property
	def is_public(self) -> bool:
		return "public" in self.decl.modifiers


@dataclass(eq=False)
class PropertySymbol:
	name: str
	type: BoundType
	owner: "TypeSymbol"
	decl: ast.PropertyDecl
	non_serialized: bool = False

	@property
	def loc(self) -> ast.Located:
		return self.decl.loc

	@property
	def py_name(self) -> str:
		return py_ident(self.name)

	@property
	def is_static(self) -> bool:
		return "static" in self.decl.modifiers

	@property
	def is_abstract(self) -> bool:
		return self.owner.kind == "interface" or "abstract" in self.decl.modifiers

	@property
	def is_virtual(self) -> bool:
		return _has(self.decl.modifiers, "virtual", "abstract", "override") or self.owner.kind == "interface"

	@property
	def is_override(self) -> bool:
		return "override" in self.decl.modifiers

	@property
	def is_public(self) -> bool:
		return self.owner.kind == "interface" or "public" in self.decl.modifiers

	@property
	def is_auto(self) -> bool:
		return self.decl.is_auto and not self.is_abstract and "extern" not in self.decl.modifiers

	@property
	def has_getter(self) -> bool:
		return self.decl.getter is not None

	@property
	def has_setter(self) -> bool:
		return self.decl.setter is not None


@dataclass(eq=False)
class ParamSymbol:
	name: str
	type: BoundType
	loc: ast.Located
	default: Optional[ast.Expr] = None

	@property
	def py_name(self) -> str:
		return py_ident(self.name)


@dataclass(eq=False)
class MethodSymbol:
	name: str
	owner: "TypeSymbol"
	decl: ast.MethodDecl
	params: List[ParamSymbol]
	return_type: Optional[BoundType]
	py_func: str = ""

	@property
	def loc(self) -> ast.Located:
		return self.decl.loc

	@property
	def py_name(self) -> str:
		return py_ident(self.name)

	@property
	def is_static(self) -> bool:
		return "static" in self.decl.modifiers

	@property
	def is_abstract(self) -> bool:
		if self.owner.kind == "interface":
			return self.decl.body is None
		return "abstract" in self.decl.modifiers

	@property
	def is_override(self) -> bool:
		return "override" in self.decl.modifiers

	@property
	def is_public(self) -> bool:
		return self.owner.kind == "interface" or "public" in self.decl.modifiers

	@property
	def required(self) -> int:
		return sum(1 for p in self.params if p.default is None)

	def signature(self) -> tuple:
		return tuple(p.type.key() for p in self.params)

	def accepts_count(self, count: int) -> bool:
		return self.required <= count <= len(self.params)


@dataclass(eq=False)
class CtorSymbol:
	owner: "TypeSymbol"
	params: List[ParamSymbol]
	decl: Optional[ast.ConstructorDecl] = None
	py_func: str = ""

	@property
	def loc(self) -> ast.Located:
		return self.decl.loc if self.decl is not None else self.owner.decl.loc

	@property
	def is_implicit(self) -> bool:
		return self.decl is None

	@property
	def is_public(self) -> bool:
		if self.decl is None:
			# Implicit constructors of abstract classes are protected.
			return not self.owner.is_abstract
		return "public" in self.decl.modifiers

	@property
	def required(self) -> int:
		return sum(1 for p in self.params if p.default is None)

	def signature(self) -> tuple:
		return tuple(p.type.key() for p in self.params)

	def accepts_count(self, count: int) -> bool:
		return self.required <= count <= len(self.params)


Member = Union[FieldSymbol, PropertySymbol, List[MethodSymbol], "TypeSymbol"]


@dataclass(eq=False)
class TypeSymbol:
	decl: ast.TypeDecl
	namespace: NamespaceSymbol
	scope: Scope
	index: int
	outer: Optional["TypeSymbol"] = None
	decls: List[ast.TypeDecl] = field(default_factory=list)
	nested: Dict[TypeKey, "TypeSymbol"] = field(default_factory=dict)
	base: Any = None
	interfaces: List[Any] = field(default_factory=list)
	fields: Dict[str, FieldSymbol] = field(default_factory=dict)
	properties: Dict[str, PropertySymbol] = field(default_factory=dict)
	methods: Dict[str, List[MethodSymbol]] = field(default_factory=dict)
	ctors: List[CtorSymbol] = field(default_factory=list)
	static_ctor: Optional[ast.ConstructorDecl] = None
	# Fields and properties in declaration order.
	data_members: List[Union[FieldSymbol, PropertySymbol]] = field(default_factory=list)
	enum_values: Dict[str, int] = field(default_factory=dict)
	underlying: Optional[str] = None

	def __post_init__(self) -> None:
		if not self.decls:
			self.decls.append(self.decl)

	def __repr__(self) -> str:
		return f"TypeSymbol({self.full_name!r})"

	@property
	def name(self) -> str:
		return self.decl.name

	@property
	def kind(self) -> str:
		return self.decl.kind

	@property
	def arity(self) -> int:
		return len(self.decl.type_params)

	@property
	def type_params(self) -> List[str]:
		outer = self.outer.type_params if self.outer is not None else []
		return outer + list(self.decl.type_params)

	@property
	def modifiers(self) -> set[str]:
		mods: set[str] = set()
		for decl in self.decls:
			mods.update(decl.modifiers)
		return mods

	@property
	def is_static(self) -> bool:
		return "static" in self.modifiers

	@property
	def is_abstract(self) -> bool:
		return self.kind == "interface" or bool(self.modifiers & {"abstract", "static"})

	@property
	def is_sealed(self) -> bool:
		return self.kind in ("struct", "enum") or bool(self.modifiers & {"sealed", "static"})

	@property
	def is_generic(self) -> bool:
		return bool(self.type_params)

	@property
	def metadata_name(self) -> str:
		return f"{self.name}`{self.arity}" if self.arity else self.name

	@property
	def full_name(self) -> str:
		if self.outer is not None:
			return f"{self.outer.full_name}+{self.metadata_name}"
		if self.namespace.name:
			return f"{self.namespace.name}.{self.metadata_name}"
		return self.metadata_name

	@property
	def qualname(self) -> str:
		if self.outer is not None:
			return f"{self.outer.qualname}.{self.name}"
		return self.name

	@property
	def py_name(self) -> str:
		return f"_T{self.index}"

	@property
	def user_base(self) -> Optional["TypeSymbol"]:
		return self.base if isinstance(self.base, TypeSymbol) else None

	def ancestors(self) -> Iterator["TypeSymbol"]:
		"""This type, then its user base classes (most derived first)."""
		seen: set[int] = set()
		sym: Optional[TypeSymbol] = self
		while sym is not None and id(sym) not in seen:
			seen.add(id(sym))
			yield sym
			sym = sym.user_base

	def reference_root(self) -> Optional[RuntimeType]:
		"""The first reference type in the base chain, if any."""
		for sym in self.ancestors():
			if isinstance(sym.base, RuntimeType):
				return sym.base
		return None

	def own_member(self, name: str) -> Optional[Member]:
		if name in self.fields:
			return self.fields[name]
		if name in self.properties:
			return self.properties[name]
		if name in self.methods:
			return self.methods[name]
		for (nested_name, _arity), nested in self.nested.items():
			if nested_name == name:
				return nested
		return None

	def find_member(self, name: str) -> Tuple[Optional["TypeSymbol"], Optional[Member]]:
		"""Look `name` up on this type and its user bases."""
		for sym in self.ancestors():
			member = sym.own_member(name)
			if member is not None:
				return sym, member
		return None, None

	def all_interfaces(self) -> List[Any]:
		found: List[Any] = []
		pending = list(self.interfaces)
		while pending:
			iface = pending.pop(0)
			if any(iface is seen for seen in found):
				continue
			found.append(iface)
			if isinstance(iface, TypeSymbol):
				pending.extend(iface.interfaces)
		return found


__all__ = [
	"BoundType",
	"CtorSymbol",
	"FieldSymbol",
	"MethodSymbol",
	"NamespaceSymbol",
	"OBJECT",
	"ParamSymbol",
	"PropertySymbol",
	"Scope",
	"TypeSymbol",
]
