from __future__ import annotations

import pytest

from csharp2json.config import REQUIRED_USINGS
from csharp2json.errors import ParseError
from csharp2json.normalize import missing_usings, normalize
from csharp2json.parser import parse_source


def _usings(text: str) -> list[str]:
	return [u.name for u in parse_source(text).usings]


def test_adds_every_required_using_at_start_when_none_present() -> None:
	source = "public class A { public int X; }\n"
	out = normalize(source)
	assert out.endswith(source)
	assert _usings(out) == list(REQUIRED_USINGS)
	assert out.startswith("using System;\nusing System.Collections;\n")


def test_inserts_after_last_existing_directive() -> None:
	source = "using System;\nusing System.IO;\n\nclass A {}\n"
	out = normalize(source)
	assert out.startswith("using System;\nusing System.IO;\nusing System.Collections;")
	assert out.endswith("\n\nclass A {}\n")
	assert _usings(out) == [
		"System",
		"System.IO",
		"System.Collections",
		"System.Collections.Generic",
		"System.Linq",
		"System.Text",
	]


def test_source_with_all_usings_is_unchanged() -> None:
	source = "".join(f"using {name};\n" for name in reversed(REQUIRED_USINGS)) + "class A {}"
	assert normalize(source) == source


def test_is_idempotent() -> None:
	once = normalize("using System.Linq;\nclass A {}")
	assert normalize(once) == once


def test_alias_counts_by_target() -> None:
	source = "using Gen = System.Collections.Generic;\nclass A {}"
	out = normalize(source)
	names = _usings(out)
	assert names.count("System.Collections.Generic") == 1


def test_namespace_level_usings_do_not_count() -> None:
	source = "namespace N {\n\tusing System.Text;\n\tclass A {}\n}\n"
	unit = parse_source(source)
	assert "System.Text" in missing_usings(unit)
	out = normalize(source)
	assert _usings(out) == list(REQUIRED_USINGS)


def test_custom_required_list() -> None:
	out = normalize("class A {}", ["System", "System"])
	assert out == "using System;\nclass A {}"


def test_malformed_source_raises_parse_error() -> None:
	with pytest.raises(ParseError):
		normalize("class A {")
