#!/usr/bin/env python3
"""
Repo-root runner for ondevice_ai_examples.

Examples:
	python run_examples.py --example streaming
	python run_examples.py --example chat --llm-backend ollama
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
	"""
	Run the CLI entrypoint with repo-root import behavior.
	"""
	repo_root = Path(__file__).resolve().parent
	if str(repo_root) not in sys.path:
		sys.path.insert(0, str(repo_root))

	from ondevice_ai_examples.cli import main as cli_main

	cli_main()


if __name__ == "__main__":
	main()
