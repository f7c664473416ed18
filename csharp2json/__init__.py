"""
csharp2json: compile C# type definitions at runtime and default-construct them.

Pipeline: `normalize` (required using directives) -> `compiler` (in-memory
compilation against the fixed reference set) -> `materialize` (isolated load,
lazy default construction of every non-enum type).

Modules:
  - normalize: using-directive normalization
  - compiler: parse/bind/lower/emit, CompiledArtifact
  - materialize: loading and default construction
  - pipeline: compile_classes (the three steps in one call)
  - serialize: Json.NET-shaped JSON rendering of instances
  - references: the reference set compiled units bind to
  - runtime: helpers compiled units call at run time
  - cli: the `csharp2json` command
"""

from .compiler import compile_source, emit
from .config import CompileOptions
from .errors import CSharp2JsonError, CompileError, ConstructionError, ParseError
from .materialize import describe, load_artifact, materialize
from .normalize import normalize
from .pipeline import compile_classes

__all__ = [
	"CSharp2JsonError",
	"CompileError",
	"CompileOptions",
	"ConstructionError",
	"ParseError",
	"compile_classes",
	"compile_source",
	"describe",
	"emit",
	"load_artifact",
	"materialize",
	"normalize",
]
