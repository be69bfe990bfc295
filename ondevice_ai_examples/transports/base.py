#!/usr/bin/env python3
"""
Transport interface for generative model backends.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Protocol

# PIP3 modules
from pydantic import BaseModel

#============================================


@dataclass(frozen=True, slots=True)
class GenerationOptions:
	temperature: float | None = None
	max_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class ToolSpec:
	"""
	A tool as a transport sees it: declared schema plus a text callback.
	"""

	name: str
	description: str
	arguments_model: type[BaseModel]
	invoke: Callable[[dict[str, Any]], str]


class ModelSession(Protocol):
	"""
	One conversation with the model; later calls see earlier turns.
	"""

	def respond(self, prompt: str, options: GenerationOptions) -> str:
		...

	def respond_structured(
		self, prompt: str, schema: type[BaseModel], options: GenerationOptions
	) -> dict[str, Any] | str:
		"""
		Return decoded JSON (dict) or raw JSON text for the requested schema.
		"""
		...

	def stream(self, prompt: str, options: GenerationOptions) -> Iterator[str]:
		"""
		Yield the full response text so far, once per update.
		"""
		...

	def close(self) -> None:
		...


class ModelCapability(Protocol):
	name: str

	def open_session(
		self,
		instructions: str | None = None,
		tools: Sequence[ToolSpec] = (),
	) -> ModelSession:
		...
