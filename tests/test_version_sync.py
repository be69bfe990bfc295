#!/usr/bin/env python3
"""
Tests for packaging metadata: VERSION file and pyproject.toml agree.
"""

import importlib
from pathlib import Path
import tomllib

REPO_ROOT = Path(__file__).resolve().parent.parent


def _pyproject() -> dict:
	return tomllib.loads((REPO_ROOT / "pyproject.toml").read_text(encoding="utf-8"))


def test_version_file_matches_pyproject():
	version_file = (REPO_ROOT / "VERSION").read_text(encoding="utf-8").strip()
	assert version_file == _pyproject()["project"]["version"]


def test_console_script_target_exists():
	scripts = _pyproject()["project"]["scripts"]
	module_name, func_name = scripts["ondevice-ai-examples"].split(":")
	module = importlib.import_module(module_name)
	assert callable(getattr(module, func_name))
