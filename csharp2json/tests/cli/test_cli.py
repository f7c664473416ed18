from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from csharp2json.cli import main


def _write(tmp_path: Path, text: str, name: str = "types.cs") -> Path:
	path = tmp_path / name
	path.write_text(text, encoding="utf-8")
	return path


def test_success_prints_instances_by_type_name(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A { public int X = 3; } public enum E { One }")
	assert main([str(src)]) == 0
	out = capsys.readouterr().out
	assert json.loads(out) == {"A": {"X": 3}}


def test_array_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A {} public class B { public string S = \"s\"; }")
	assert main([str(src), "--array"]) == 0
	out = capsys.readouterr().out
	assert json.loads(out) == [{}, {"S": "s"}]


def test_indent_zero_still_breaks_lines(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A { public int X = 1; }")
	assert main([str(src), "--indent", "0"]) == 0
	out = capsys.readouterr().out
	assert out == '{\n"A": {\n"X": 1\n}\n}\n'


def test_bad_environment_flag_exits_one(
	tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
	src = _write(tmp_path, "public class A {}")
	monkeypatch.setenv("CSHARP2JSON_WARNINGS_AS_ERRORS", "maybe")
	assert main([str(src)]) == 1
	err = capsys.readouterr().err
	assert "CSHARP2JSON_WARNINGS_AS_ERRORS" in err
	assert "maybe" in err


def test_data_table_field_serializes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "using System.Data;\npublic class R { public DataTable T = new DataTable(); }")
	assert main([str(src)]) == 0
	assert json.loads(capsys.readouterr().out) == {"R": {"T": []}}


def test_compile_error_exits_one(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A { public Missing M; }")
	assert main([str(src)]) == 1
	err = capsys.readouterr().err
	assert "error CS0246" in err
	assert str(src) in err


def test_parse_error_as_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A {")
	assert main([str(src), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert payload["diagnostics"][0]["phase"] == "parser"


def test_constructor_failure_exits_two(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, 'public class A { public A() { throw new NotSupportedException("no"); } }')
	assert main([str(src), "--json"]) == 2
	payload = json.loads(capsys.readouterr().out)
	assert payload["error"]["reason_code"] == "construction"
	assert payload["error"]["type_name"] == "A"


def test_serialization_loop_exits_two(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class N { public N Me; public N() { Me = this; } }")
	assert main([str(src)]) == 2
	assert "Self referencing loop" in capsys.readouterr().err


def test_missing_file_exits_one(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main([str(tmp_path / "absent.cs")]) == 1
	assert "absent.cs" in capsys.readouterr().err


def test_emit_python_prints_generated_module(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A {}")
	assert main([str(src), "--emit-python", "--unit-name", "Shown"]) == 0
	out = capsys.readouterr().out
	assert out.startswith("# csharp2json unit 'Shown'")
	assert "__cs_types__" in out


def test_warnings_as_errors_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "using System;\nusing System;\npublic class A {}")
	assert main([str(src)]) == 0
	assert "warning CS0105" in capsys.readouterr().err
	assert main([str(src), "--warnings-as-errors"]) == 1
	assert "error CS0105" in capsys.readouterr().err


def test_no_normalize_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "public class A { public List<int> Items; }")
	assert main([str(src), "--no-normalize"]) == 1
	assert "CS0246" in capsys.readouterr().err
	assert main([str(src)]) == 0
	assert json.loads(capsys.readouterr().out) == {"A": {"Items": None}}


def test_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.setattr("sys.stdin", io.StringIO("public class FromStdin { public bool Ok = true; }"))
	assert main([]) == 0
	assert json.loads(capsys.readouterr().out) == {"FromStdin": {"Ok": True}}
