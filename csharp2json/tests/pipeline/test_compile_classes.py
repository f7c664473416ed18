from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from csharp2json import CompileOptions, compile_classes
from csharp2json.errors import CompileError, ParseError
from csharp2json.serialize import by_type_name


def _json(source: str) -> dict:
	return by_type_name(compile_classes(source))


def test_default_values_of_every_primitive() -> None:
	source = """
	public class Defaults {
		public int I;
		public long L;
		public string S;
		public bool B;
		public double D;
		public decimal M;
		public char C;
		public DateTime When;
		public Guid Id;
		public TimeSpan Span;
		public int? Maybe;
		public List<int> Items;
		public int[] Slots = new int[2];
	}
	"""
	assert _json(source) == {
		"Defaults": {
			"I": 0,
			"L": 0,
			"S": None,
			"B": False,
			"D": 0.0,
			"M": 0.0,
			"C": "\0",
			"When": "0001-01-01T00:00:00",
			"Id": "00000000-0000-0000-0000-000000000000",
			"Span": "00:00:00",
			"Maybe": None,
			"Items": None,
			"Slots": [0, 0],
		}
	}


def test_field_initializers_run_before_base_and_derived_constructors() -> None:
	source = """
	public class Base {
		public string Log = "field;";
		public Base() { Log += "base;"; }
	}
	public class Derived : Base {
		public Derived() { Log += "derived;"; }
	}
	"""
	assert _json(source) == {
		"Base": {"Log": "field;base;"},
		"Derived": {"Log": "field;base;derived;"},
	}


def test_this_initializer_chains_to_another_constructor() -> None:
	source = """
	public class Named {
		public string Name;
		public int Size;
		public Named() : this("default", 3) {}
		public Named(string name, int size) { Name = name; Size = size; }
	}
	"""
	assert _json(source) == {"Named": {"Name": "default", "Size": 3}}


def test_overloads_are_chosen_by_argument_type() -> None:
	source = """
	public class Calc {
		public int Total;
		public Calc() { Total = Pick(1) + Pick("a"); }
		public int Pick(int x) { return 1; }
		public int Pick(string s) { return 10; }
	}
	"""
	assert _json(source) == {"Calc": {"Total": 11}}


def test_enums_are_written_as_numbers_and_not_instantiated() -> None:
	source = """
	public enum Color { Red, Green = 5, Blue }
	public class Car {
		public Color Paint = Color.Green;
		public Color Trim = Color.Blue;
		public Color Other;
	}
	"""
	assert _json(source) == {"Car": {"Paint": 5, "Trim": 6, "Other": 0}}


def test_statics_and_consts_feed_instances_but_are_not_written() -> None:
	source = """
	public class Settings {
		public const int Base = 40;
		public static int Version = Base + 2;
		public int Current = Version;
	}
	"""
	assert _json(source) == {"Settings": {"Current": 42}}


def test_properties() -> None:
	source = """
	public class Props {
		public int Auto { get; set; } = 4;
		public int Twice => Auto * 2;
		private int _hidden = 9;
		public int Hidden { get { return _hidden; } }
		public int WriteOnly { set { _hidden = value; } }
	}
	"""
	assert _json(source) == {"Props": {"Auto": 4, "Twice": 8, "Hidden": 9}}


def test_non_public_and_non_serialized_members_are_not_written() -> None:
	source = """
	public class Secret {
		public int Shown = 1;
		private int hidden = 2;
		internal int alsoHidden = 3;
		[NonSerialized] public int Skipped = 4;
	}
	"""
	assert _json(source) == {"Secret": {"Shown": 1}}


def test_collection_initializers() -> None:
	source = """
	public class Bag {
		public List<string> Tags = new List<string> { "a", "b" };
		public Dictionary<string, int> Counts = new Dictionary<string, int> { ["x"] = 1 };
	}
	"""
	assert _json(source) == {"Bag": {"Tags": ["a", "b"], "Counts": {"x": 1}}}


def test_object_initializer_and_nested_user_types() -> None:
	source = """
	public class Address { public string City; }
	public class Person {
		public string Name = "Ada";
		public Address Home = new Address { City = "London" };
	}
	"""
	out = _json(source)
	assert out["Person"] == {"Name": "Ada", "Home": {"City": "London"}}
	assert out["Address"] == {"City": None}


def test_struct_fields_hold_zero_values() -> None:
	source = """
	public struct Point { public int X; public int Y; }
	public class Segment { public Point From; public Point To; }
	"""
	out = _json(source)
	assert out["Segment"] == {"From": {"X": 0, "Y": 0}, "To": {"X": 0, "Y": 0}}


def test_namespaced_full_names_key_the_output() -> None:
	source = """
	namespace Shop.Models {
		public class Order { public int Id = 7; }
	}
	"""
	assert _json(source) == {"Shop.Models.Order": {"Id": 7}}


def test_missing_usings_are_added() -> None:
	# List<T> and DateTime resolve only through the added directives.
	assert "Log" in _json("public class Log { public List<DateTime> Entries; }")


def test_without_normalization_unqualified_names_fail() -> None:
	options = CompileOptions(normalize_usings=False)
	with pytest.raises(CompileError) as excinfo:
		compile_classes("public class Log { public List<int> Entries; }", options)
	assert any(d.code == "CS0246" for d in excinfo.value.errors)


def test_errors_surface_before_iteration() -> None:
	with pytest.raises(ParseError):
		compile_classes("public class {")
	with pytest.raises(CompileError):
		compile_classes("public class A : Nowhere {}")


def test_concurrent_units_with_the_same_type_names_are_isolated() -> None:
	def run(n: int) -> int:
		source = f"public class Model {{ public static int Seed = {n}; public int Value = Seed * 2; }}"
		(instance,) = compile_classes(source)
		return instance.Value

	with ThreadPoolExecutor(max_workers=4) as pool:
		results = list(pool.map(run, range(16)))
	assert results == [n * 2 for n in range(16)]
