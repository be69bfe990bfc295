#!/usr/bin/env python3
"""
Ollama chat transport.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator, Sequence
import json
import logging
from typing import Any
import urllib.error
import urllib.request

# PIP3 modules
from pydantic import BaseModel

# local repo modules
from .base import GenerationOptions, ToolSpec

#============================================


MAX_TOOL_ROUNDS = 4


def _tool_schema(spec: ToolSpec) -> dict[str, Any]:
	parameters = spec.arguments_model.model_json_schema(by_alias=True)
	parameters.pop("title", None)
	return {
		"type": "function",
		"function": {
			"name": spec.name,
			"description": spec.description,
			"parameters": parameters,
		},
	}


def _options_payload(options: GenerationOptions) -> dict[str, Any]:
	payload: dict[str, Any] = {}
	if options.temperature is not None:
		payload["temperature"] = options.temperature
	if options.max_tokens is not None:
		payload["num_predict"] = options.max_tokens
	return payload


#============================================


class OllamaSession:
	def __init__(
		self,
		transport: OllamaTransport,
		instructions: str | None,
		tools: Sequence[ToolSpec],
	) -> None:
		self.transport = transport
		self.messages: list[dict[str, Any]] = []
		if instructions:
			self.messages.append({"role": "system", "content": instructions})
		self.tools = {spec.name: spec for spec in tools}

	def _payload(self, options: GenerationOptions, stream: bool) -> dict[str, Any]:
		payload: dict[str, Any] = {
			"model": self.transport.model,
			"messages": self.messages,
			"stream": stream,
		}
		extra = _options_payload(options)
		if extra:
			payload["options"] = extra
		return payload

	def _open(self, payload: dict[str, Any]):
		request = urllib.request.Request(
			f"{self.transport.base_url}/api/chat",
			data=json.dumps(payload).encode("utf-8"),
			headers={"Content-Type": "application/json"},
			method="POST",
		)
		try:
			return urllib.request.urlopen(request, timeout=self.transport.timeout)
		except urllib.error.HTTPError as exc:
			body = exc.read().decode("utf-8", errors="replace")
			raise RuntimeError(f"Ollama chat error: status {exc.code}: {body}") from exc

	def _chat(self, payload: dict[str, Any]) -> dict[str, Any]:
		with self._open(payload) as response:
			response_body = response.read()
		parsed = json.loads(response_body.decode("utf-8"))
		if parsed.get("error"):
			raise RuntimeError(f"Ollama chat error: {parsed['error']}")
		return parsed

	def _run_tool_calls(self, tool_calls: list[dict[str, Any]]) -> None:
		for call in tool_calls:
			function = call.get("function", {})
			name = function.get("name", "")
			spec = self.tools.get(name)
			if spec is None:
				raise RuntimeError(f"Ollama requested unknown tool: {name}")
			arguments = function.get("arguments") or {}
			if isinstance(arguments, str):
				arguments = json.loads(arguments)
			logging.info("Ollama tool call %s(%s)", name, arguments)
			result = spec.invoke(arguments)
			self.messages.append({"role": "tool", "content": result, "tool_name": name})

	def respond(self, prompt: str, options: GenerationOptions) -> str:
		self.messages.append({"role": "user", "content": prompt})
		for _round in range(MAX_TOOL_ROUNDS + 1):
			payload = self._payload(options, stream=False)
			if self.tools:
				payload["tools"] = [_tool_schema(spec) for spec in self.tools.values()]
			parsed = self._chat(payload)
			message = parsed.get("message", {})
			tool_calls = message.get("tool_calls") or []
			if tool_calls and self.tools:
				self.messages.append(message)
				self._run_tool_calls(tool_calls)
				continue
			assistant_message = message.get("content", "")
			if not assistant_message:
				raise RuntimeError("Ollama chat returned empty content")
			self.messages.append({"role": "assistant", "content": assistant_message})
			return assistant_message.strip()
		raise RuntimeError(f"Ollama chat exceeded {MAX_TOOL_ROUNDS} tool rounds")

	def respond_structured(
		self, prompt: str, schema: type[BaseModel], options: GenerationOptions
	) -> dict[str, Any] | str:
		self.messages.append({"role": "user", "content": prompt})
		payload = self._payload(options, stream=False)
		payload["format"] = schema.model_json_schema(by_alias=True)
		parsed = self._chat(payload)
		content = parsed.get("message", {}).get("content", "")
		self.messages.append({"role": "assistant", "content": content})
		return content

	def stream(self, prompt: str, options: GenerationOptions) -> Iterator[str]:
		user_message = {"role": "user", "content": prompt}
		self.messages.append(user_message)
		text = ""
		try:
			with self._open(self._payload(options, stream=True)) as response:
				for raw_line in response:
					line = raw_line.decode("utf-8").strip()
					if not line:
						continue
					event = json.loads(line)
					if event.get("error"):
						raise RuntimeError(f"Ollama chat error: {event['error']}")
					piece = event.get("message", {}).get("content", "")
					if piece:
						text += piece
						yield text
					if event.get("done"):
						break
		finally:
			# keep user/assistant pairs even when the stream stops early
			if text:
				self.messages.append({"role": "assistant", "content": text})
			elif self.messages and self.messages[-1] is user_message:
				self.messages.pop()

	def close(self) -> None:
		self.messages.clear()


class OllamaTransport:
	name = "Ollama"

	def __init__(
		self,
		model: str,
		base_url: str = "http://localhost:11434",
		timeout: float = 120.0,
	) -> None:
		self.model = model
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout

	def open_session(
		self,
		instructions: str | None = None,
		tools: Sequence[ToolSpec] = (),
	) -> OllamaSession:
		return OllamaSession(self, instructions, tools)
