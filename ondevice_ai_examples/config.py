#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from dataclasses import dataclass

# local repo modules
from .transports.base import GenerationOptions

#============================================


DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3.2:3b-instruct-q5_K_M"
DEFAULT_CHAT_INSTRUCTIONS = "Be concise and engaging in your responses."
DEFAULT_TOOL_INSTRUCTIONS = "You are a helpful assistant with access to art and painting databases."
DEFAULT_CHAT_TEMPERATURE = 0.8
MAX_TEMPERATURE = 2.0

#============================================


@dataclass(slots=True)
class AppConfig:
	"""
	Runtime configuration settings.

	Attributes:
		llm_backend: LLM backend selector ("macos" or "ollama").
		model_override: Optional Ollama model name.
		ollama_url: Base URL of the Ollama server.
		chat_instructions: Instructions for the chat session.
		tool_instructions: Instructions for tool-augmented sessions.
		chat_temperature: Sampling temperature for chat turns.
		temperature: Optional temperature for single-shot calls.
		max_tokens: Optional response length cap.
		verbose: Verbose logging and [LLM] progress lines.
	"""
	llm_backend: str = "macos"
	model_override: str | None = None
	ollama_url: str = DEFAULT_OLLAMA_URL
	chat_instructions: str = DEFAULT_CHAT_INSTRUCTIONS
	tool_instructions: str = DEFAULT_TOOL_INSTRUCTIONS
	chat_temperature: float = DEFAULT_CHAT_TEMPERATURE
	temperature: float | None = None
	max_tokens: int | None = None
	verbose: bool = False

	#============================================
	def ollama_model(self) -> str:
		return self.model_override or DEFAULT_OLLAMA_MODEL

	#============================================
	def generation_options(self) -> GenerationOptions:
		"""
		Options for single-shot, structured and tool calls.
		"""
		return GenerationOptions(temperature=self.temperature, max_tokens=self.max_tokens)

	#============================================
	def chat_options(self) -> GenerationOptions:
		return GenerationOptions(temperature=self.chat_temperature, max_tokens=self.max_tokens)


#============================================
def parse_temperature(value: str | float | None) -> float | None:
	"""
	Validate a sampling temperature.

	Args:
		value: Raw value from the CLI.

	Returns:
		Float in [0, MAX_TEMPERATURE] or None.
	"""
	if value is None or value == "":
		return None
	temperature = float(value)
	if temperature < 0 or temperature > MAX_TEMPERATURE:
		raise ValueError(f"temperature must be between 0 and {MAX_TEMPERATURE}")
	return temperature
