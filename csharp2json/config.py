# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pipeline configuration.

Everything here is immutable data; a `CompileOptions` value may be shared by
concurrent invocations. Environment overrides use the `CSHARP2JSON_` prefix.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Using directives every compiled unit is guaranteed to have (in insertion order).
REQUIRED_USINGS: tuple[str, ...] = (
	"System",
	"System.Collections",
	"System.Collections.Generic",
	"System.Linq",
	"System.Text",
)

DEFAULT_UNIT_NAME = "CSharp2Json"

ENV_PREFIX = "CSHARP2JSON_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
	raw = environ.get(ENV_PREFIX + key)
	if raw is None:
		return default
	value = raw.strip().lower()
	if value in _TRUE:
		return True
	if value in _FALSE:
		return False
	raise ValueError(f"{ENV_PREFIX}{key}: expected a boolean, got {raw!r}")


@dataclass(frozen=True)
class CompileOptions:
	"""Knobs for one normalize/compile/materialize run."""

	unit_name: str = DEFAULT_UNIT_NAME
	required_usings: tuple[str, ...] = REQUIRED_USINGS
	normalize_usings: bool = True
	warnings_as_errors: bool = False

	@classmethod
	def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompileOptions":
		"""
		Build options from `CSHARP2JSON_*` variables.

		Recognized: `UNIT_NAME`, `NORMALIZE_USINGS`, `WARNINGS_AS_ERRORS`.
		"""
		env = os.environ if environ is None else environ
		return cls(
			unit_name=env.get(ENV_PREFIX + "UNIT_NAME") or DEFAULT_UNIT_NAME,
			normalize_usings=_env_flag(env, "NORMALIZE_USINGS", True),
			warnings_as_errors=_env_flag(env, "WARNINGS_AS_ERRORS", False),
		)


def log_level_from_env(environ: Optional[Mapping[str, str]] = None, default: str = "WARNING") -> str:
	env = os.environ if environ is None else environ
	return (env.get(ENV_PREFIX + "LOG_LEVEL") or default).upper()


__all__ = [
	"CompileOptions",
	"DEFAULT_UNIT_NAME",
	"REQUIRED_USINGS",
	"log_level_from_env",
]
