# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark-based parser for the C# type-definition dialect.

`parse_compilation_unit` returns the surface AST (`parser.ast`). The lark tree
is converted by hand-written `_build_*` functions; lark exceptions propagate to
the package adapter, which turns them into diagnostics.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
	Accessor,
	ArrayCreation,
	AssignStmt,
	Attribute,
	BaseAccess,
	Binary,
	Block,
	Body,
	CompilationUnit,
	CompoundAssignStmt,
	Conditional,
	ConstructorDecl,
	ConstructorInitializer,
	DefaultValue,
	ElementAccess,
	EmptyStmt,
	EnumMember,
	Expr,
	ExprStmt,
	FieldDecl,
	IfStmt,
	IncrementStmt,
	IndexInitializer,
	InitializerList,
	Invocation,
	Literal,
	LocalDecl,
	Located,
	MemberAccess,
	MemberInitializer,
	MethodDecl,
	NameRef,
	NamespaceDecl,
	ObjectCreation,
	Parameter,
	PredefinedMember,
	PropertyDecl,
	ReturnStmt,
	Stmt,
	ThisRef,
	ThrowStmt,
	TypeDecl,
	TypeOf,
	TypePart,
	TypeRef,
	Unary,
	UsingDirective,
	VariableDeclarator,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

# Built once per process; lark parsers are safe to share between threads as
# long as nobody mutates them.
_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


class SourceSyntaxError(ValueError):
	"""
	A syntax problem the grammar accepts but the AST builder rejects (bad
	literal, mismatched accessor list, ...). Converted to a parse diagnostic.
	"""

	def __init__(self, message: str, *, loc: Located | None, code: Optional[str] = None) -> None:
		super().__init__(message)
		self.loc = loc
		self.code = code


def parse_compilation_unit(source: str) -> CompilationUnit:
	tree = _PARSER.parse(source)
	return _build_compilation_unit(tree)


def _build_compilation_unit(tree: Tree) -> CompilationUnit:
	unit = CompilationUnit()
	for child in _trees(tree):
		kind = _name(child)
		if kind in ("using_namespace", "using_alias"):
			unit.usings.append(_build_using(child))
		else:
			unit.members.append(_build_namespace_member(child))
	return unit


def _build_using(tree: Tree) -> UsingDirective:
	if _name(tree) == "using_alias":
		alias_tok, target = tree.children
		return UsingDirective(loc=_loc(tree), name=_qualified_name(target), alias=_ident(alias_tok))
	return UsingDirective(loc=_loc(tree), name=_qualified_name(tree.children[0]))


def _build_namespace_member(tree: Tree):
	if _name(tree) == "namespace_decl":
		return _build_namespace(tree)
	return _build_type_decl(tree)


def _build_namespace(tree: Tree) -> NamespaceDecl:
	children = _trees(tree)
	ns = NamespaceDecl(loc=_loc(tree), name=_qualified_name(children[0]))
	for child in children[1:]:
		if _name(child) in ("using_namespace", "using_alias"):
			ns.usings.append(_build_using(child))
		else:
			ns.members.append(_build_namespace_member(child))
	return ns


def _build_type_decl(tree: Tree) -> TypeDecl:
	attrs_node, mods_node, body = tree.children
	decl = _build_type_body(body)
	decl.attributes = _build_attributes(attrs_node)
	decl.modifiers = _build_modifiers(mods_node)
	decl.loc = _loc(tree)
	return decl


def _build_type_body(tree: Tree) -> TypeDecl:
	kind = _name(tree).removesuffix("_decl")
	name_tok = tree.children[0]
	decl = TypeDecl(loc=_loc(tree), kind=kind, name=_ident(name_tok))
	for child in tree.children[1:]:
		if not isinstance(child, Tree):
			continue
		part = _name(child)
		if part == "type_parameters":
			decl.type_params = [_ident(tok) for tok in child.children]
		elif part == "base_list":
			decl.bases = [_build_type(t) for t in child.children]
		elif part == "enum_base":
			decl.bases = [_build_type(child.children[0])]
		elif part == "class_body":
			decl.members = [_build_member(m) for m in _trees(child)]
		elif part == "enum_body":
			decl.enum_members = [_build_enum_member(m) for m in _trees(child)]
	return decl


def _build_enum_member(tree: Tree) -> EnumMember:
	_attrs, name_tok, *value = tree.children
	return EnumMember(
		loc=_loc_from_token(name_tok),
		name=_ident(name_tok),
		value=_build_expr(value[0]) if value else None,
	)


def _build_attributes(tree: Tree) -> List[Attribute]:
	attrs: List[Attribute] = []
	for section in _trees(tree):
		for attr in _trees(section):
			attrs.append(_build_attribute(attr))
	return attrs


def _build_attribute(tree: Tree) -> Attribute:
	children = _trees(tree)
	attr = Attribute(loc=_loc(tree), name=_qualified_name(children[0]))
	if len(children) > 1:
		for arg in _trees(children[1]):
			if _name(arg) == "named_argument":
				name_tok, value = arg.children
				attr.named_args.append((_ident(name_tok), _build_expr(value)))
			else:
				attr.args.append(_build_expr(arg))
	return attr


def _build_modifiers(tree: Tree) -> List[str]:
	return [str(mod.children[0]) for mod in _trees(tree)]


# Members -------------------------------------------------------------------


def _build_member(tree: Tree):
	attrs_node, mods_node, body = tree.children
	attributes = _build_attributes(attrs_node)
	modifiers = _build_modifiers(mods_node)
	kind = _name(body)
	if kind in ("class_decl", "struct_decl", "interface_decl", "enum_decl"):
		member = _build_type_body(body)
	elif kind == "field_decl":
		member = _build_field(body)
	elif kind in ("property_decl", "expression_property"):
		member = _build_property(body)
	elif kind == "method_decl":
		member = _build_method(body)
	elif kind == "constructor_decl":
		member = _build_constructor(body)
	else:
		raise TypeError(f"Unexpected member node: {kind}")
	member.attributes = attributes
	member.modifiers = modifiers
	member.loc = _loc(tree)
	return member


def _build_field(tree: Tree) -> FieldDecl:
	type_node, *declarators = tree.children
	return FieldDecl(
		loc=_loc(tree),
		type=_build_type(type_node),
		declarators=[_build_declarator(d) for d in declarators],
	)


def _build_declarator(tree: Tree) -> VariableDeclarator:
	name_tok = tree.children[0]
	init = _build_initializer(tree.children[1]) if len(tree.children) > 1 else None
	return VariableDeclarator(loc=_loc_from_token(name_tok), name=_ident(name_tok), initializer=init)


def _build_property(tree: Tree) -> PropertyDecl:
	type_node, name_tok, rest, *tail = tree.children
	prop = PropertyDecl(loc=_loc(tree), type=_build_type(type_node), name=_ident(name_tok))
	if _name(tree) == "expression_property":
		prop.getter = Accessor(loc=_loc(rest), kind="get", body=_build_expr(rest))
		return prop
	for acc_node in _trees(rest):
		acc = _build_accessor(acc_node)
		if acc.kind == "get":
			if prop.getter is not None:
				raise SourceSyntaxError(f"property '{prop.name}' has more than one get accessor", loc=acc.loc, code="CS1007")
			prop.getter = acc
		else:
			if prop.setter is not None:
				raise SourceSyntaxError(f"property '{prop.name}' has more than one set accessor", loc=acc.loc, code="CS1007")
			prop.setter = acc
	if tail:
		prop.initializer = _build_initializer(tail[0].children[0])
	return prop


def _build_accessor(tree: Tree) -> Accessor:
	attrs_node, mods_node, kind_node, body = tree.children
	return Accessor(
		loc=_loc(tree),
		kind=str(kind_node.children[0]),
		body=_build_body(body),
		modifiers=_build_modifiers(mods_node),
	)


def _build_method(tree: Tree) -> MethodDecl:
	ret_node, name_tok, *rest = tree.children
	return_type = None if _name(ret_node) == "void_type" else _build_type(ret_node)
	params: List[Parameter] = []
	if rest and _name(rest[0]) == "parameters":
		params = [_build_parameter(p) for p in rest[0].children]
	return MethodDecl(
		loc=_loc(tree),
		name=_ident(name_tok),
		return_type=return_type,
		params=params,
		body=_build_body(rest[-1]),
	)


def _build_constructor(tree: Tree) -> ConstructorDecl:
	name_tok, *rest = tree.children
	ctor = ConstructorDecl(loc=_loc(tree), name=_ident(name_tok), body=_build_body(rest[-1]))
	for child in rest[:-1]:
		kind = _name(child)
		if kind == "parameters":
			ctor.params = [_build_parameter(p) for p in child.children]
		elif kind in ("base_initializer", "this_initializer"):
			args = _build_arguments(child.children[0]) if child.children else []
			ctor.initializer = ConstructorInitializer(
				loc=_loc(child),
				kind=kind.removesuffix("_initializer"),
				args=args,
			)
	return ctor


def _build_parameter(tree: Tree) -> Parameter:
	_attrs, type_node, name_tok, *default = tree.children
	return Parameter(
		loc=_loc_from_token(name_tok),
		name=_ident(name_tok),
		type=_build_type(type_node),
		default=_build_expr(default[0]) if default else None,
	)


def _build_body(tree: Tree) -> Body:
	kind = _name(tree)
	if kind == "empty_body":
		return None
	if kind == "expression_body":
		return _build_expr(tree.children[0])
	return _build_block(tree)


# Types ---------------------------------------------------------------------


def _build_type(tree: Tree) -> TypeRef:
	kind = _name(tree)
	if kind in ("predefined_type", "type_name"):
		return _build_base_type(tree)
	base_node, *ranks = tree.children
	nullable = _name(base_node) == "nullable_type"
	if nullable:
		base_node = base_node.children[0]
	ref = _build_base_type(base_node)
	ref.nullable = nullable
	ref.ranks = len(ranks)
	ref.loc = _loc(tree)
	return ref


def _build_base_type(tree: Tree) -> TypeRef:
	if _name(tree) == "predefined_type":
		return TypeRef(loc=_loc(tree), predefined=str(tree.children[0]))
	parts: List[TypePart] = []
	for part in tree.children:
		name_tok, *args = part.children
		type_args = [_build_type(t) for t in args[0].children] if args else []
		parts.append(TypePart(name=_ident(name_tok), args=type_args))
	return TypeRef(loc=_loc(tree), parts=parts)


# Statements ----------------------------------------------------------------


def _build_block(tree: Tree) -> Block:
	return Block(loc=_loc(tree), statements=[_build_stmt(s) for s in _trees(tree)])


def _build_stmt(tree: Tree) -> Stmt:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "block":
		return _build_block(tree)
	if kind == "local_declaration":
		type_node, name_tok, *init = tree.children
		if isinstance(type_node.children[0], Token):
			local_type = None
		else:
			pre, *ranks = type_node.children
			local_type = _build_base_type(pre)
			local_type.ranks = len(ranks)
		value = _build_initializer(init[0]) if init else None
		return LocalDecl(loc=loc, name=_ident(name_tok), type=local_type, value=value)
	if kind == "assignment":
		target, value = tree.children
		return AssignStmt(loc=loc, target=_build_expr(target), value=_build_initializer(value))
	if kind == "compound_assignment":
		target, op_tok, value = tree.children
		return CompoundAssignStmt(loc=loc, target=_build_expr(target), op=str(op_tok)[:-1], value=_build_expr(value))
	if kind == "postfix_increment":
		target, op_tok = tree.children
		return IncrementStmt(loc=loc, target=_build_expr(target), op=str(op_tok))
	if kind == "prefix_increment":
		op_tok, target = tree.children
		return IncrementStmt(loc=loc, target=_build_expr(target), op=str(op_tok))
	if kind == "expression_statement":
		return ExprStmt(loc=loc, expr=_build_expr(tree.children[0]))
	if kind == "throw_statement":
		return ThrowStmt(loc=loc, value=_build_expr(tree.children[0]) if tree.children else None)
	if kind == "return_statement":
		return ReturnStmt(loc=loc, value=_build_expr(tree.children[0]) if tree.children else None)
	if kind == "if_statement":
		cond, then_node, *else_node = tree.children
		return IfStmt(
			loc=loc,
			condition=_build_expr(cond),
			then_stmt=_build_stmt(then_node),
			else_stmt=_build_stmt(else_node[0]) if else_node else None,
		)
	if kind == "empty_statement":
		return EmptyStmt(loc=loc)
	raise TypeError(f"Unexpected statement node: {kind}")


# Expressions ---------------------------------------------------------------

_BINARY_OPS = {
	"or_op": "||",
	"and_op": "&&",
	"bitor_op": "|",
	"bitxor_op": "^",
	"bitand_op": "&",
	"eq_op": "==",
	"ne_op": "!=",
	"lt_op": "<",
	"gt_op": ">",
	"le_op": "<=",
	"ge_op": ">=",
	"shl_op": "<<",
	"add_op": "+",
	"sub_op": "-",
	"mul_op": "*",
	"div_op": "/",
	"mod_op": "%",
}

_UNARY_OPS = {
	"neg_op": "-",
	"pos_op": "+",
	"not_op": "!",
	"inv_op": "~",
}


def _build_initializer(node):
	if isinstance(node, Tree) and _name(node) == "initializer_list":
		return _build_initializer_list(node)
	return _build_expr(node)


def _build_initializer_list(tree: Tree) -> InitializerList:
	elements = []
	for child in tree.children:
		kind = _name(child)
		if kind == "member_initializer":
			name_tok, value = child.children
			elements.append(MemberInitializer(loc=_loc(child), name=_ident(name_tok), value=_build_initializer(value)))
		elif kind == "index_initializer":
			index, value = child.children
			elements.append(IndexInitializer(loc=_loc(child), index=_build_expr(index), value=_build_initializer(value)))
		else:
			elements.append(_build_initializer(child))
	return InitializerList(loc=_loc(tree), elements=elements)


def _build_arguments(tree: Tree) -> List[Expr]:
	return [_build_expr(c) for c in tree.children]


def _build_expr(node) -> Expr:
	if isinstance(node, Token):
		# `?primary` never surfaces bare tokens, but be explicit about it.
		raise TypeError(f"Unexpected token in expression: {node.type}")
	name = _name(node)
	loc = _loc(node)
	if name in _BINARY_OPS:
		left, right = node.children
		return Binary(loc=loc, op=_BINARY_OPS[name], left=_build_expr(left), right=_build_expr(right))
	if name in _UNARY_OPS:
		return Unary(loc=loc, op=_UNARY_OPS[name], operand=_build_expr(node.children[0]))
	if name == "conditional_expr":
		cond, then_expr, else_expr = node.children
		return Conditional(
			loc=loc,
			condition=_build_expr(cond),
			then_expr=_build_expr(then_expr),
			else_expr=_build_expr(else_expr),
		)
	if name == "name_ref":
		return NameRef(loc=loc, name=_ident(node.children[0]))
	if name == "this_access":
		return ThisRef(loc=loc)
	if name == "base_access":
		return BaseAccess(loc=loc, name=_ident(node.children[0]))
	if name == "member_access":
		target, name_tok = node.children
		return MemberAccess(loc=loc, target=_build_expr(target), name=_ident(name_tok))
	if name == "predefined_member":
		pre, name_tok = node.children
		return PredefinedMember(loc=loc, keyword=str(pre.children[0]), name=_ident(name_tok))
	if name == "invocation":
		target, *args = node.children
		return Invocation(loc=loc, target=_build_expr(target), args=_build_arguments(args[0]) if args else [])
	if name == "element_access":
		target, index = node.children
		return ElementAccess(loc=loc, target=_build_expr(target), index=_build_expr(index))
	if name == "object_creation":
		type_node, *rest = _trees(node)
		creation = ObjectCreation(loc=loc, type=_build_type(type_node))
		for child in rest:
			if _name(child) == "arguments":
				creation.args = _build_arguments(child)
			else:
				creation.initializer = _build_initializer_list(child)
		return creation
	if name == "array_creation":
		elem_node, size = _trees(node)
		return ArrayCreation(loc=loc, element_type=_build_base_type(elem_node), size=_build_expr(size))
	if name == "default_value":
		return DefaultValue(loc=loc, type=_build_type(node.children[0]))
	if name == "default_literal":
		return DefaultValue(loc=loc)
	if name == "typeof_expression":
		return TypeOf(loc=loc, type=_build_type(node.children[0]))
	if name.endswith("_literal"):
		return _build_literal(node, loc)
	raise TypeError(f"Unexpected expression node: {name}")


# Literals ------------------------------------------------------------------

_INT32_MAX = 2**31 - 1
_UINT32_MAX = 2**32 - 1
_INT64_MAX = 2**63 - 1
_UINT64_MAX = 2**64 - 1

_SIMPLE_ESCAPES = {
	"'": "'",
	'"': '"',
	"\\": "\\",
	"0": "\0",
	"a": "\a",
	"b": "\b",
	"f": "\f",
	"n": "\n",
	"r": "\r",
	"t": "\t",
	"v": "\v",
}

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{1,4}|.)")


def _build_literal(tree: Tree, loc: Located) -> Literal:
	name = _name(tree)
	if name == "true_literal":
		return Literal(loc=loc, kind="bool", value=True)
	if name == "false_literal":
		return Literal(loc=loc, kind="bool", value=False)
	if name == "null_literal":
		return Literal(loc=loc, kind="null", value=None)
	tok: Token = tree.children[0]
	text = str(tok)
	if name == "int_literal":
		return _integer_literal(text, loc)
	if name == "real_literal":
		return _real_literal(text, loc)
	if name == "string_literal":
		return Literal(loc=loc, kind="string", value=_unescape(text[1:-1], loc))
	if name == "verbatim_string_literal":
		return Literal(loc=loc, kind="string", value=text[2:-1].replace('""', '"'))
	if name == "char_literal":
		value = _unescape(text[1:-1], loc)
		if len(value) != 1:
			raise SourceSyntaxError("too many characters in character literal", loc=loc, code="CS1012")
		return Literal(loc=loc, kind="char", value=value)
	raise TypeError(f"Unexpected literal node: {name}")


def _integer_literal(text: str, loc: Located) -> Literal:
	lowered = text.replace("_", "").lower()
	digits = lowered.rstrip("ul")
	suffix = lowered[len(digits):]
	value = int(digits, 16) if digits.lower().startswith("0x") else int(digits)
	unsigned = "u" in suffix
	long_ = "l" in suffix
	if value > _UINT64_MAX:
		raise SourceSyntaxError("integral constant is too large", loc=loc, code="CS1021")
	if unsigned and long_:
		kind = "ulong"
	elif unsigned:
		kind = "uint" if value <= _UINT32_MAX else "ulong"
	elif long_:
		kind = "long" if value <= _INT64_MAX else "ulong"
	elif value <= _INT32_MAX:
		kind = "int"
	elif value <= _UINT32_MAX:
		kind = "uint"
	elif value <= _INT64_MAX:
		kind = "long"
	else:
		kind = "ulong"
	return Literal(loc=loc, kind=kind, value=value)


def _real_literal(text: str, loc: Located) -> Literal:
	digits = text.replace("_", "")
	suffix = digits[-1].lower() if digits[-1] in "fFdDmM" else ""
	if suffix:
		digits = digits[:-1]
	if suffix == "m":
		return Literal(loc=loc, kind="decimal", value=digits)
	return Literal(loc=loc, kind="float" if suffix == "f" else "double", value=float(digits))


def _unescape(body: str, loc: Located) -> str:
	def repl(match: re.Match) -> str:
		esc = match.group(1)
		head = esc[0]
		if head in ("u", "U", "x") and len(esc) > 1:
			return chr(int(esc[1:], 16))
		try:
			return _SIMPLE_ESCAPES[head]
		except KeyError:
			raise SourceSyntaxError(f"unrecognized escape sequence '\\{head}'", loc=loc, code="CS1009") from None

	return _ESCAPE_RE.sub(repl, body)


# Tree helpers --------------------------------------------------------------


def _qualified_name(tree: Tree) -> str:
	return ".".join(_ident(tok) for tok in tree.children)


def _ident(tok: Token) -> str:
	# `@class` is the identifier `class`.
	text = str(tok)
	return text[1:] if text.startswith("@") else text


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(
		line=getattr(meta, "line", None),
		column=getattr(meta, "column", None),
		start_pos=getattr(meta, "start_pos", None),
		end_pos=getattr(meta, "end_pos", None),
	)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column, start_pos=token.start_pos, end_pos=token.end_pos)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["SourceSyntaxError", "parse_compilation_unit"]
