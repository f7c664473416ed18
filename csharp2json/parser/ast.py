# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Surface AST for the C# type-definition dialect.

Nodes are plain dataclasses built by `parser._build_*`. They keep C# spelling
(names, modifiers, operator text); resolution happens in the binder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: Optional[int] = None
	column: Optional[int] = None
	start_pos: Optional[int] = None
	end_pos: Optional[int] = None


# Types ---------------------------------------------------------------------


@dataclass
class TypePart:
	name: str
	args: List["TypeRef"] = field(default_factory=list)


@dataclass
class TypeRef:
	"""
	A type as written: either a predefined keyword (`int`, `string`, ...) or a
	dotted name with optional generic arguments, plus `?` and `[]` suffixes.
	"""

	loc: Located
	parts: List[TypePart] = field(default_factory=list)
	predefined: Optional[str] = None
	nullable: bool = False
	ranks: int = 0

	def display(self) -> str:
		if self.predefined is not None:
			text = self.predefined
		else:
			chunks = []
			for part in self.parts:
				if part.args:
					chunks.append(f"{part.name}<{', '.join(a.display() for a in part.args)}>")
				else:
					chunks.append(part.name)
			text = ".".join(chunks)
		if self.nullable:
			text += "?"
		return text + "[]" * self.ranks


# Expressions ---------------------------------------------------------------


class Expr:
	loc: Located


@dataclass
class Literal(Expr):
	"""
	`kind` is the C# literal type: int, uint, long, ulong, float, double,
	decimal, string, char, bool or null. Decimal values are kept as text.
	"""

	loc: Located
	kind: str
	value: object


@dataclass
class NameRef(Expr):
	loc: Located
	name: str


@dataclass
class ThisRef(Expr):
	loc: Located


@dataclass
class BaseAccess(Expr):
	loc: Located
	name: str


@dataclass
class MemberAccess(Expr):
	loc: Located
	target: Expr
	name: str


@dataclass
class PredefinedMember(Expr):
	"""`int.MaxValue`, `string.Empty`, ..."""

	loc: Located
	keyword: str
	name: str


@dataclass
class Invocation(Expr):
	loc: Located
	target: Expr
	args: List[Expr] = field(default_factory=list)


@dataclass
class ElementAccess(Expr):
	loc: Located
	target: Expr
	index: Expr


@dataclass
class Unary(Expr):
	loc: Located
	op: str
	operand: Expr


@dataclass
class Binary(Expr):
	loc: Located
	op: str
	left: Expr
	right: Expr


@dataclass
class Conditional(Expr):
	loc: Located
	condition: Expr
	then_expr: Expr
	else_expr: Expr


@dataclass
class MemberInitializer:
	loc: Located
	name: str
	value: "Initializer"


@dataclass
class IndexInitializer:
	loc: Located
	index: Expr
	value: "Initializer"


@dataclass
class InitializerList:
	"""`{ ... }` after `new T(...)`, or as an array/field initializer."""

	loc: Located
	elements: List[Union[Expr, "InitializerList", MemberInitializer, IndexInitializer]] = field(default_factory=list)


Initializer = Union[Expr, InitializerList]


@dataclass
class ObjectCreation(Expr):
	loc: Located
	type: TypeRef
	args: List[Expr] = field(default_factory=list)
	initializer: Optional[InitializerList] = None


@dataclass
class ArrayCreation(Expr):
	loc: Located
	element_type: TypeRef
	size: Expr


@dataclass
class DefaultValue(Expr):
	"""`default(T)`; `type` is None for the target-typed `default` literal."""

	loc: Located
	type: Optional[TypeRef] = None


@dataclass
class TypeOf(Expr):
	loc: Located
	type: TypeRef


# Statements ----------------------------------------------------------------


class Stmt:
	loc: Located


@dataclass
class Block(Stmt):
	loc: Located
	statements: List[Stmt] = field(default_factory=list)


@dataclass
class LocalDecl(Stmt):
	"""`var x = ...;` (type None) or `int[] x = ...;`."""

	loc: Located
	name: str
	type: Optional[TypeRef]
	value: Optional[Initializer] = None


@dataclass
class AssignStmt(Stmt):
	loc: Located
	target: Expr
	value: Initializer


@dataclass
class CompoundAssignStmt(Stmt):
	loc: Located
	target: Expr
	op: str
	value: Expr


@dataclass
class IncrementStmt(Stmt):
	loc: Located
	target: Expr
	op: str


@dataclass
class ExprStmt(Stmt):
	loc: Located
	expr: Expr


@dataclass
class ThrowStmt(Stmt):
	loc: Located
	value: Optional[Expr]


@dataclass
class ReturnStmt(Stmt):
	loc: Located
	value: Optional[Expr]


@dataclass
class IfStmt(Stmt):
	loc: Located
	condition: Expr
	then_stmt: Stmt
	else_stmt: Optional[Stmt] = None


@dataclass
class EmptyStmt(Stmt):
	loc: Located


# Bodies of methods/accessors/constructors: a block, an `=> expr` body, or
# None for `;`.
Body = Union[Block, Expr, None]


# Declarations --------------------------------------------------------------


@dataclass
class Attribute:
	loc: Located
	name: str
	args: List[Expr] = field(default_factory=list)
	named_args: List[tuple[str, Expr]] = field(default_factory=list)


@dataclass
class Parameter:
	loc: Located
	name: str
	type: TypeRef
	default: Optional[Expr] = None


@dataclass
class VariableDeclarator:
	loc: Located
	name: str
	initializer: Optional[Initializer] = None


@dataclass
class FieldDecl:
	loc: Located
	type: TypeRef
	declarators: List[VariableDeclarator]
	modifiers: List[str] = field(default_factory=list)
	attributes: List[Attribute] = field(default_factory=list)


@dataclass
class Accessor:
	loc: Located
	kind: str
	body: Body = None
	modifiers: List[str] = field(default_factory=list)


@dataclass
class PropertyDecl:
	"""
	Auto (`{ get; set; }`), accessor-bodied, or expression-bodied (`=> expr`,
	stored in `getter.body`) property.
	"""

	loc: Located
	type: TypeRef
	name: str
	getter: Optional[Accessor] = None
	setter: Optional[Accessor] = None
	initializer: Optional[Initializer] = None
	modifiers: List[str] = field(default_factory=list)
	attributes: List[Attribute] = field(default_factory=list)

	@property
	def is_auto(self) -> bool:
		accessors = [a for a in (self.getter, self.setter) if a is not None]
		return bool(accessors) and all(a.body is None for a in accessors)


@dataclass
class MethodDecl:
	loc: Located
	name: str
	return_type: Optional[TypeRef]
	params: List[Parameter] = field(default_factory=list)
	body: Body = None
	modifiers: List[str] = field(default_factory=list)
	attributes: List[Attribute] = field(default_factory=list)


@dataclass
class ConstructorInitializer:
	loc: Located
	kind: str  # "base" | "this"
	args: List[Expr] = field(default_factory=list)


@dataclass
class ConstructorDecl:
	loc: Located
	name: str
	params: List[Parameter] = field(default_factory=list)
	initializer: Optional[ConstructorInitializer] = None
	body: Body = None
	modifiers: List[str] = field(default_factory=list)
	attributes: List[Attribute] = field(default_factory=list)


@dataclass
class EnumMember:
	loc: Located
	name: str
	value: Optional[Expr] = None


@dataclass
class TypeDecl:
	"""A class, struct, interface or enum declaration (possibly nested)."""

	loc: Located
	kind: str
	name: str
	type_params: List[str] = field(default_factory=list)
	bases: List[TypeRef] = field(default_factory=list)
	members: List["Member"] = field(default_factory=list)
	enum_members: List[EnumMember] = field(default_factory=list)
	modifiers: List[str] = field(default_factory=list)
	attributes: List[Attribute] = field(default_factory=list)


Member = Union[FieldDecl, PropertyDecl, MethodDecl, ConstructorDecl, TypeDecl]


@dataclass
class UsingDirective:
	"""
	Top-level or namespace-level `using`. For `using A = X.Y;` `name` is the
	aliased target `X.Y` and `alias` is `A`.
	"""

	loc: Located
	name: str
	alias: Optional[str] = None


@dataclass
class NamespaceDecl:
	loc: Located
	name: str
	usings: List[UsingDirective] = field(default_factory=list)
	members: List[Union["NamespaceDecl", TypeDecl]] = field(default_factory=list)


@dataclass
class CompilationUnit:
	usings: List[UsingDirective] = field(default_factory=list)
	members: List[Union[NamespaceDecl, TypeDecl]] = field(default_factory=list)


