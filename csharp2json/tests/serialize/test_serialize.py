from __future__ import annotations

import json
from datetime import datetime, timedelta
from decimal import Decimal
from uuid import UUID

import pytest

from csharp2json import compile_classes
from csharp2json.serialize import SerializationError, by_type_name, dumps, format_datetime, format_timespan, to_jsonable


def test_format_timespan() -> None:
	assert format_timespan(timedelta(0)) == "00:00:00"
	assert format_timespan(timedelta(hours=5, minutes=6, seconds=7)) == "05:06:07"
	assert format_timespan(timedelta(days=1, hours=2, minutes=3, seconds=4, microseconds=500000)) == "1.02:03:04.5000000"
	assert format_timespan(timedelta(minutes=-90)) == "-01:30:00"


def test_format_datetime() -> None:
	assert format_datetime(datetime.min) == "0001-01-01T00:00:00"
	assert format_datetime(datetime(2024, 5, 6, 7, 8, 9)) == "2024-05-06T07:08:09"
	assert format_datetime(datetime(2024, 5, 6, 7, 8, 9, 120000)) == "2024-05-06T07:08:09.12"


def test_scalars() -> None:
	assert to_jsonable(Decimal("1.5")) == 1.5
	assert to_jsonable(UUID(int=0)) == "00000000-0000-0000-0000-000000000000"
	assert to_jsonable(float("nan")) == "NaN"
	assert to_jsonable(float("-inf")) == "-Infinity"
	assert to_jsonable([1, "a", None, True]) == [1, "a", None, True]


def test_dictionary_keys_become_strings() -> None:
	assert to_jsonable({1: "one", False: "no"}) == {"1": "one", "false": "no"}


def test_plain_python_objects_are_rejected() -> None:
	with pytest.raises(SerializationError):
		to_jsonable(object())


def test_self_reference_is_a_loop() -> None:
	source = "public class Node { public Node Next; public Node() { Next = this; } }"
	with pytest.raises(SerializationError) as excinfo:
		by_type_name(compile_classes(source))
	message = str(excinfo.value)
	assert message.startswith("Self referencing loop detected for property 'Next'")
	assert "Path 'Next'" in message


def test_shared_references_that_are_not_loops_are_written_twice() -> None:
	source = """
	public class Leaf { public int V = 1; }
	public class Pair {
		public Leaf Left;
		public Leaf Right;
		public Pair() { Left = new Leaf(); Right = Left; }
	}
	"""
	out = by_type_name(compile_classes(source))
	assert out["Pair"] == {"Left": {"V": 1}, "Right": {"V": 1}}


def test_inherited_members_follow_own_members() -> None:
	source = """
	public class Animal { public string Name = "rex"; }
	public class Dog : Animal { public bool Good = true; }
	"""
	out = by_type_name(compile_classes(source))
	assert list(out["Dog"]) == ["Good", "Name"]


def test_exceptions_use_their_serialization_fields() -> None:
	source = 'public class Holder { public Exception Error = new InvalidOperationException("bad"); }'
	error = by_type_name(compile_classes(source))["Holder"]["Error"]
	assert error["ClassName"] == "System.InvalidOperationException"
	assert error["Message"] == "bad"
	assert error["InnerException"] is None


def test_dumps_writes_iterators_as_arrays() -> None:
	text = dumps(compile_classes("public class A { public int X = 1; } public class B {}"), indent=None)
	assert json.loads(text) == [{"X": 1}, {}]


def test_data_table_is_an_array_of_rows() -> None:
	source = """
	using System.Data;
	public class Report { public DataTable Table = new DataTable(); public DataTable Missing; }
	"""
	assert by_type_name(compile_classes(source)) == {"Report": {"Table": [], "Missing": None}}


def test_data_set_is_an_object_of_tables() -> None:
	source = """
	using System.Data;
	public class Store {
		public DataSet Data = new DataSet();
		public Store() { Data.Tables.Add("Orders"); Data.Tables.Add("Lines"); }
	}
	"""
	assert by_type_name(compile_classes(source)) == {"Store": {"Data": {"Orders": [], "Lines": []}}}


def test_entity_key_members() -> None:
	source = """
	using System.Data;
	public class Keyed { public EntityKey Key = new EntityKey(); }
	"""
	assert by_type_name(compile_classes(source)) == {
		"Keyed": {
			"Key": {
				"EntitySetName": None,
				"EntityContainerName": None,
				"EntityKeyValues": None,
				"IsTemporary": True,
			}
		}
	}
