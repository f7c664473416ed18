from __future__ import annotations

import pytest

from csharp2json.compiler import compile_source, emit
from csharp2json.errors import CompileError
from csharp2json.normalize import normalize


def _codes(source: str, **kwargs) -> list[str]:
	result = emit(normalize(source), **kwargs)
	assert not result.success
	assert result.artifact is None
	return [d.code for d in result.errors]


def test_unknown_type_is_cs0246() -> None:
	assert "CS0246" in _codes("public class A { public Missing M; }")


def test_duplicate_type_is_cs0101() -> None:
	assert "CS0101" in _codes("class A {} class A {}")


def test_unknown_name_is_cs0103() -> None:
	assert "CS0103" in _codes("class A { public int X = nowhere; }")


def test_string_to_int_is_cs0029() -> None:
	assert "CS0029" in _codes('class A { public int X = "seven"; }')


def test_constant_out_of_range_is_cs0031() -> None:
	assert "CS0031" in _codes("class A { public byte B = 300; }")


def test_missing_return_is_cs0161() -> None:
	assert "CS0161" in _codes("class A { public int F() { } }")


def test_base_call_with_wrong_arity_is_cs1729() -> None:
	source = """
	class B { public B(int x) {} }
	class D : B { public D() : base(1, 2) {} }
	"""
	assert "CS1729" in _codes(source)


def test_implicit_base_call_without_default_ctor_is_cs7036() -> None:
	source = """
	class B { public B(int x) {} }
	class D : B {}
	"""
	assert "CS7036" in _codes(source)


def test_circular_base_is_cs0146() -> None:
	assert "CS0146" in _codes("class A : B {} class B : A {}")


def test_struct_parameterless_ctor_is_cs0568() -> None:
	assert "CS0568" in _codes("struct S { public int X; public S() { X = 1; } }")


def test_member_named_like_type_is_cs0542() -> None:
	assert "CS0542" in _codes("class A { public int A; }")


def test_every_error_is_reported_not_just_the_first() -> None:
	codes = _codes("class A { public Missing M; public int X = nowhere; }")
	assert "CS0246" in codes
	assert "CS0103" in codes


def test_compile_error_carries_diagnostics() -> None:
	with pytest.raises(CompileError) as excinfo:
		compile_source("class A { public Missing M; }", file="a.cs")
	err = excinfo.value
	assert err.reason_code == "compile"
	diag = err.errors[0]
	assert diag.code == "CS0246"
	assert diag.span.file == "a.cs"
	assert diag.span.line == 1
	assert "CS0246" in str(err)


def test_duplicate_using_is_a_warning() -> None:
	result = emit("using System;\nusing System;\nclass A {}")
	assert result.success
	assert [d.code for d in result.diagnostics] == ["CS0105"]
	assert not result.errors
	assert result.artifact.diagnostics == tuple(result.diagnostics)


def test_warnings_as_errors_fails_the_build() -> None:
	result = emit("using System;\nusing System;\nclass A {}", warnings_as_errors=True)
	assert not result.success
	assert [d.code for d in result.errors] == ["CS0105"]


def test_diagnostic_serializes_to_dict() -> None:
	result = emit("class A { public Missing M; }", file="m.cs")
	payload = result.errors[0].to_dict()
	assert payload["code"] == "CS0246"
	assert payload["severity"] == "error"
	assert payload["file"] == "m.cs"
	assert payload["phase"] == "binder"


def test_body_errors_are_reported_alongside_declaration_errors() -> None:
	codes = _codes("class A { public Missing M; public int F() { } public int G = nowhere; }")
	assert {"CS0246", "CS0161", "CS0103"} <= set(codes)


def test_narrowing_message_does_not_suggest_a_cast() -> None:
	result = emit(normalize("class A { public int X; public A() { long big = 1; X = big; } }"))
	(error,) = result.errors
	assert error.code == "CS0266"
	assert "cast expressions are not supported" in error.message
	assert "missing a cast" not in error.message
