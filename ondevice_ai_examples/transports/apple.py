#!/usr/bin/env python3
"""
Apple Foundation Models transport.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator, Sequence
import inspect
from typing import Any, Callable

# PIP3 modules
from pydantic import BaseModel

# local repo modules
from ..availability import UnavailabilityReason
from ..errors import ModelUnavailableError
from .base import GenerationOptions, ToolSpec

#============================================


def _generate_kwargs(options: GenerationOptions) -> dict[str, Any]:
	kwargs: dict[str, Any] = {}
	if options.temperature is not None:
		kwargs["temperature"] = options.temperature
	if options.max_tokens is not None:
		kwargs["max_tokens"] = options.max_tokens
	return kwargs


def tool_callable(spec: ToolSpec) -> Callable[..., str]:
	"""
	Build a named, typed function for a tool so the binding can derive its schema.

	The binding reads the function name, docstring and annotated parameters;
	argument names follow the tool's declared (aliased) field names.
	"""
	params: list[inspect.Parameter] = []
	annotations: dict[str, Any] = {}
	arg_lines: list[str] = []
	for field_name, info in spec.arguments_model.model_fields.items():
		arg_name = info.alias or field_name
		params.append(
			inspect.Parameter(
				arg_name,
				inspect.Parameter.POSITIONAL_OR_KEYWORD,
				annotation=info.annotation,
			)
		)
		annotations[arg_name] = info.annotation
		if info.description:
			arg_lines.append(f"\t{arg_name}: {info.description}")

	def tool_function(*args: Any, **kwargs: Any) -> str:
		bound = tool_function.__signature__.bind(*args, **kwargs)
		return spec.invoke(dict(bound.arguments))

	doc = spec.description
	if arg_lines:
		doc = doc + "\n\nArgs:\n" + "\n".join(arg_lines)
	tool_function.__name__ = spec.name
	tool_function.__qualname__ = spec.name
	tool_function.__doc__ = doc
	tool_function.__signature__ = inspect.Signature(params, return_annotation=str)
	tool_function.__annotations__ = {**annotations, "return": str}
	return tool_function


#============================================


class AppleSession:
	def __init__(self, session: Any) -> None:
		self._session = session

	def respond(self, prompt: str, options: GenerationOptions) -> str:
		response = self._session.generate(prompt, **_generate_kwargs(options))
		return response.text.strip()

	def respond_structured(
		self, prompt: str, schema: type[BaseModel], options: GenerationOptions
	) -> dict[str, Any] | str:
		response = self._session.generate(prompt, schema=schema, **_generate_kwargs(options))
		parsed = getattr(response, "parsed", None)
		if isinstance(parsed, dict):
			return parsed
		return response.text

	def stream(self, prompt: str, options: GenerationOptions) -> Iterator[str]:
		# the binding streams deltas; callers get cumulative text
		text = ""
		for chunk in self._session.generate(prompt, stream=True, **_generate_kwargs(options)):
			piece = getattr(chunk, "content", chunk)
			if not piece:
				continue
			text += str(piece)
			yield text

	def close(self) -> None:
		closer = getattr(self._session, "close", None)
		if callable(closer):
			closer()


class AppleTransport:
	name = "AppleLLM"

	def open_session(
		self,
		instructions: str | None = None,
		tools: Sequence[ToolSpec] = (),
	) -> AppleSession:
		try:
			from applefoundationmodels import Session
		except Exception as exc:
			raise ModelUnavailableError(UnavailabilityReason.DEVICE_NOT_ELIGIBLE) from exc
		kwargs: dict[str, Any] = {}
		if instructions:
			kwargs["instructions"] = instructions
		if tools:
			kwargs["tools"] = [tool_callable(spec) for spec in tools]
		return AppleSession(Session(**kwargs))
