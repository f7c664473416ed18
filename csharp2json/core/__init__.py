"""
csharp2json.core: shared diagnostics/span records used across the pipeline.

Modules:
  - span: Span (line/column/offsets)
  - diagnostics: Diagnostic record and severity constants
"""

__all__ = [
	"diagnostics",
	"span",
]
