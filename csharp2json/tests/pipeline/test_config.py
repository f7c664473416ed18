from __future__ import annotations

import pytest

from csharp2json.config import DEFAULT_UNIT_NAME, CompileOptions, log_level_from_env


def test_defaults_without_environment() -> None:
	opts = CompileOptions.from_env({})
	assert opts == CompileOptions()
	assert opts.unit_name == DEFAULT_UNIT_NAME
	assert opts.normalize_usings
	assert not opts.warnings_as_errors


def test_environment_overrides() -> None:
	opts = CompileOptions.from_env(
		{
			"CSHARP2JSON_UNIT_NAME": "Samples",
			"CSHARP2JSON_NORMALIZE_USINGS": "off",
			"CSHARP2JSON_WARNINGS_AS_ERRORS": "Yes",
		}
	)
	assert opts.unit_name == "Samples"
	assert not opts.normalize_usings
	assert opts.warnings_as_errors


def test_bad_boolean_is_rejected() -> None:
	with pytest.raises(ValueError):
		CompileOptions.from_env({"CSHARP2JSON_WARNINGS_AS_ERRORS": "maybe"})


def test_log_level() -> None:
	assert log_level_from_env({}) == "WARNING"
	assert log_level_from_env({"CSHARP2JSON_LOG_LEVEL": "debug"}) == "DEBUG"
