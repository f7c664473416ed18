from __future__ import annotations

from csharp2json import compile_classes
from csharp2json.clr.ops import wrap
from csharp2json.serialize import by_type_name


def _json(source: str) -> dict:
	return by_type_name(compile_classes(source))


def test_wrap_helper() -> None:
	assert wrap(256, "byte") == 0
	assert wrap(-1, "uint") == 4294967295
	assert wrap(2147483648, "int") == -2147483648
	assert wrap(-129, "sbyte") == 127
	assert wrap(None, "int") is None


def test_increments_and_compound_assignments_wrap_to_the_target_width() -> None:
	source = """
	public class Counters {
		public byte B = 255;
		public uint U;
		public int I = int.MaxValue;
		public short S = short.MinValue;
		public Counters() {
			B++;
			U--;
			I++;
			S -= 1;
		}
	}
	"""
	assert _json(source) == {"Counters": {"B": 0, "U": 4294967295, "I": -2147483648, "S": 32767}}


def test_binary_results_wrap_before_widening() -> None:
	source = """
	public class Products {
		public long Doubled;
		public ulong Rolled;
		public int Negated;
		public uint Flipped;
		public Products() {
			int big = int.MaxValue;
			Doubled = big * 2;
			ulong top = ulong.MaxValue;
			Rolled = top + 1;
			int low = int.MinValue;
			Negated = -low;
			uint none = 0;
			Flipped = ~none;
		}
	}
	"""
	assert _json(source) == {
		"Products": {"Doubled": -2, "Rolled": 0, "Negated": -2147483648, "Flipped": 4294967295}
	}


def test_arithmetic_in_range_is_unchanged() -> None:
	source = """
	public class Plain {
		public int Sum;
		public long Big;
		public Plain() {
			int a = 40;
			Sum = a + 2;
			long b = 3000000000;
			Big = b * 2;
		}
	}
	"""
	assert _json(source) == {"Plain": {"Sum": 42, "Big": 6000000000}}
