"""
csharp2json.clr: the object model and reference-type implementations compiled
units run on.

Modules:
  - object: CsObject/CsValueType roots, construction and overload dispatch
  - exceptions: System.Exception and friends (real Python exceptions)
  - ops: operators and string conversion with C# semantics
  - members: dynamic member/indexer access on arbitrary runtime values
  - names: C# identifier -> Python identifier mapping
  - collections, text, system, data, xml, attributes: reference types
"""

__all__ = [
	"attributes",
	"collections",
	"data",
	"exceptions",
	"members",
	"names",
	"object",
	"ops",
	"system",
	"text",
	"xml",
]
