from __future__ import annotations

import hashlib

from csharp2json.compiler import compile_source, emit
from csharp2json.normalize import normalize


def test_declared_types_follow_metadata_order() -> None:
	source = """
	namespace Ns {
		public class Outer {
			public class Inner {}
		}
		public enum Kind { A, B }
		public class Box<T> {}
	}
	public class Root {}
	"""
	artifact = compile_source(normalize(source))
	assert artifact.declared_types == ("Ns.Outer", "Ns.Outer+Inner", "Ns.Kind", "Ns.Box`1", "Root")


def test_digest_identifies_the_image() -> None:
	artifact = compile_source("class A { public int X = 1; }", unit_name="Digest")
	assert artifact.name == "Digest"
	assert artifact.digest == hashlib.sha256(artifact.image).hexdigest()
	assert artifact.code().co_filename == "<csharp2json:Digest>"


def test_same_source_compiles_to_the_same_image() -> None:
	first = compile_source("class A { public string S = \"x\"; }")
	second = compile_source("class A { public string S = \"x\"; }")
	assert first.digest == second.digest


def test_generated_module_lists_types_and_references() -> None:
	source = normalize("public class A { public List<int> Items = new List<int>(); public DateTime When; }")
	artifact = compile_source(source)
	text = artifact.python_source
	assert text.startswith("# csharp2json unit 'CSharp2Json'")
	assert "__cs_types__ = (_T0,)" in text
	assert "System.Collections.Generic.List`1" in artifact.references
	assert "System.DateTime" in artifact.references


def test_class_bases_precede_subclasses_in_module_text() -> None:
	text = compile_source("class Derived : Base {} class Base {}").python_source
	assert text.index("class _T1") < text.index("class _T0")


def test_emit_reports_success_without_raising() -> None:
	result = emit("class A {}")
	assert result.success
	assert result.errors == []
	assert result.artifact.declared_types == ("A",)
