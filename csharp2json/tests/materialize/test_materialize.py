from __future__ import annotations

import sys

import pytest

from csharp2json.compiler import compile_source
from csharp2json.errors import ConstructionError
from csharp2json.materialize import ENUM_BASE, declared_classes, describe, load_artifact, materialize
from csharp2json.normalize import normalize
from csharp2json.references import ReferenceSet


def _artifact(source: str, unit_name: str = "Test"):
	return compile_source(normalize(source), unit_name=unit_name)


def test_only_default_constructible_non_enum_types_are_yielded() -> None:
	artifact = _artifact("class A {} class B { public B(int x) {} } enum C { X }")
	instances = list(materialize(artifact))
	assert [type(i).__cs_name__ for i in instances] == ["A"]


def test_skipped_type_kinds() -> None:
	source = """
	public interface IShape {}
	public abstract class Shape : IShape {}
	public static class Helpers {}
	public class Box<T> {}
	public class Hidden { private Hidden() {} }
	public class Square : Shape { public int Side = 2; }
	"""
	instances = list(materialize(_artifact(source)))
	assert [type(i).__cs_name__ for i in instances] == ["Square"]
	assert instances[0].Side == 2


def test_instances_follow_declaration_order_including_nested() -> None:
	source = """
	namespace Ns {
		public class Outer { public class Inner {} }
		public class Last {}
	}
	"""
	names = [type(i).__cs_name__ for i in materialize(_artifact(source))]
	assert names == ["Ns.Outer", "Ns.Outer+Inner", "Ns.Last"]


def test_nothing_runs_before_first_next() -> None:
	source = """
	public class A {
		public static int Count;
		static A() { throw new InvalidOperationException("static boom"); }
	}
	"""
	instances = materialize(_artifact(source))
	with pytest.raises(ConstructionError) as excinfo:
		next(instances)
	assert excinfo.value.type_name == "A"
	assert "static boom" in str(excinfo.value)


def test_constructor_failure_after_earlier_instances() -> None:
	source = """
	public class Ok { public int X = 1; }
	public class Bad { public Bad() { throw new InvalidOperationException("boom"); } }
	public class Never {}
	"""
	instances = materialize(_artifact(source))
	first = next(instances)
	assert type(first).__cs_name__ == "Ok"
	with pytest.raises(ConstructionError) as excinfo:
		next(instances)
	err = excinfo.value
	assert err.type_name == "Bad"
	assert err.cause.Message == "boom"
	assert err.to_dict()["reason_code"] == "construction"
	assert first.X == 1


def test_plain_exception_from_constructor_names_the_type() -> None:
	instances = materialize(_artifact("class D { public D() { throw new Exception(); } }"))
	with pytest.raises(ConstructionError) as excinfo:
		list(instances)
	assert excinfo.value.type_name == "D"
	assert excinfo.value.cause.Message == "Exception of type 'System.Exception' was thrown."


def test_describe_reports_reflection_facts() -> None:
	source = """
	public enum Color { Red, Green }
	public class Base { public Base() {} public Base(string name) {} }
	public class Derived : Base {}
	public interface IThing {}
	public abstract class Shape {}
	"""
	module = load_artifact(_artifact(source))
	color, base, derived, thing, shape = (describe(cls) for cls in declared_classes(module))
	assert color.is_enum
	assert color.base_type_name == ENUM_BASE
	assert not color.has_default_constructor
	assert base.base_type_name == "System.Object"
	assert set(base.constructors) == {(), ("System.String",)}
	assert derived.base_type_name == "Base"
	assert derived.has_default_constructor
	assert thing.kind == "interface"
	assert thing.base_type_name is None
	assert shape.is_abstract
	assert not shape.has_default_constructor


def test_loaded_unit_is_not_registered_globally() -> None:
	artifact = _artifact("public class Lonely {}", unit_name="Private")
	module = load_artifact(artifact)
	assert module.__name__ not in sys.modules
	assert not any(name.startswith("csharp2json.units.") for name in sys.modules)


def test_each_load_has_its_own_static_state() -> None:
	source = """
	public class Counter {
		public static int Created;
		public int Serial;
		public Counter() { Created++; Serial = Created; }
	}
	"""
	artifact = _artifact(source)
	first = [i.Serial for i in materialize(artifact)]
	second = [i.Serial for i in materialize(artifact)]
	assert first == [1]
	assert second == [1]


def test_struct_default_value() -> None:
	source = """
	public struct Point { public int X; public int Y; public string Label; }
	"""
	(point,) = materialize(_artifact(source))
	assert (point.X, point.Y, point.Label) == (0, 0, None)


def test_missing_reference_types_are_rejected() -> None:
	artifact = _artifact("public class A { public DateTime When; }")
	with pytest.raises(ValueError):
		load_artifact(artifact, ReferenceSet(()))
