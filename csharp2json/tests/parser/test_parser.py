from __future__ import annotations

import pytest

from csharp2json.errors import ParseError
from csharp2json.parser import parse_source
from csharp2json.parser import ast


def test_usings_and_aliases_are_recorded() -> None:
	unit = parse_source(
		"using System;\n"
		"using Col = System.Collections.Generic;\n"
		"class A {}\n"
	)
	assert [u.name for u in unit.usings] == ["System", "System.Collections.Generic"]
	assert unit.usings[0].alias is None
	assert unit.usings[1].alias == "Col"


def test_namespace_members_and_nested_usings() -> None:
	unit = parse_source(
		"namespace Acme.Models {\n"
		"\tusing System.Text;\n"
		"\tpublic class Order {}\n"
		"\tinternal enum Status { Open, Closed = 4 }\n"
		"}\n"
	)
	assert unit.usings == []
	ns = unit.members[0]
	assert isinstance(ns, ast.NamespaceDecl)
	assert ns.name == "Acme.Models"
	assert [u.name for u in ns.usings] == ["System.Text"]
	order, status = ns.members
	assert (order.kind, order.name, order.modifiers) == ("class", "Order", ["public"])
	assert status.kind == "enum"
	assert [m.name for m in status.enum_members] == ["Open", "Closed"]
	assert status.enum_members[1].value is not None


def test_property_shapes() -> None:
	unit = parse_source(
		"class P {\n"
		"\tpublic int Auto { get; set; } = 3;\n"
		"\tpublic int Computed => Auto * 2;\n"
		"\tprivate int _x;\n"
		"\tpublic int X { get { return _x; } set { _x = value; } }\n"
		"}\n"
	)
	auto, computed, _field, explicit = unit.members[0].members
	assert isinstance(auto, ast.PropertyDecl) and auto.is_auto
	assert auto.initializer is not None
	assert isinstance(computed, ast.PropertyDecl) and not computed.is_auto
	assert computed.setter is None
	assert isinstance(explicit.getter.body, ast.Block)
	assert not explicit.is_auto


def test_generic_type_and_base_list() -> None:
	unit = parse_source("class Box<T> : Base, IThing { public List<T>[] Items; }")
	decl = unit.members[0]
	assert decl.type_params == ["T"]
	assert [b.display() for b in decl.bases] == ["Base", "IThing"]
	field = decl.members[0]
	assert field.type.display() == "List<T>[]"


def test_constructor_initializer() -> None:
	unit = parse_source("class D : B { public D() : base(1, \"x\") {} public D(int a) : this() {} }")
	first, second = unit.members[0].members
	assert isinstance(first, ast.ConstructorDecl)
	assert first.initializer.kind == "base"
	assert len(first.initializer.args) == 2
	assert second.initializer.kind == "this"


def test_unexpected_end_of_input_reports_location() -> None:
	with pytest.raises(ParseError) as excinfo:
		parse_source("public class A {\n\tpublic int X;\n", file="broken.cs")
	err = excinfo.value
	assert len(err.diagnostics) == 1
	diag = err.diagnostics[0]
	assert diag.phase == "parser"
	assert diag.is_error
	assert diag.span.file == "broken.cs"


def test_unexpected_token_reports_line() -> None:
	with pytest.raises(ParseError) as excinfo:
		parse_source("class A {\n\tint x = ;\n}\n")
	diag = excinfo.value.diagnostics[0]
	assert diag.span.line == 2
	assert "unexpected" in diag.message


def test_duplicate_accessor_is_a_syntax_error() -> None:
	with pytest.raises(ParseError) as excinfo:
		parse_source("class A { public int X { get; get; } }")
	assert excinfo.value.diagnostics[0].code == "CS1007"
