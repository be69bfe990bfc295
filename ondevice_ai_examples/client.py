#!/usr/bin/env python3
"""
Generation client: the single point of contact with the model capability.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable, Iterator, Sequence
import contextlib
import logging
import threading
from typing import Any, TypeVar

# PIP3 modules
from pydantic import BaseModel

# local repo modules
from .availability import AvailabilityGate
from .config import AppConfig
from .errors import (
	GenerationError,
	ModelUnavailableError,
	ToolCallFailure,
	ToolExecutionFailedError,
	translate_error,
)
from .llm_utils import _print_llm
from .tools import PaintingDatabaseTool, Tool
from .transports.base import GenerationOptions, ModelCapability, ModelSession, ToolSpec

#============================================


SchemaT = TypeVar("SchemaT", bound=BaseModel)


@contextlib.contextmanager
def _error_boundary(purpose: str, tool_failures: list[ToolCallFailure] | None = None):
	"""
	Convert anything raised inside the block into the error taxonomy.
	"""
	try:
		yield
	except GenerationError as exc:
		logging.warning("%s failed: %s", purpose, exc.description)
		raise
	except Exception as exc:
		mapped = translate_error(exc, tool_failures)
		logging.warning("%s failed: %s (%s)", purpose, mapped.description, exc.__class__.__name__)
		raise mapped from exc


def _decode_structured(schema: type[SchemaT], raw: Any) -> SchemaT:
	if isinstance(raw, schema):
		return raw
	if isinstance(raw, (str, bytes)):
		return schema.model_validate_json(raw)
	return schema.model_validate(raw)


def _close_iterator(iterator: Iterator[str]) -> None:
	closer = getattr(iterator, "close", None)
	if callable(closer):
		closer()


#============================================


class _ToolGuard:
	"""
	Wraps a tool so a failing callout is recorded with the tool's name.
	"""

	def __init__(self, tool: Tool, failures: list[ToolCallFailure]) -> None:
		self.tool = tool
		self.failures = failures

	def spec(self) -> ToolSpec:
		return ToolSpec(
			name=self.tool.name,
			description=self.tool.description,
			arguments_model=self.tool.arguments_model,
			invoke=self.invoke,
		)

	def invoke(self, arguments: dict[str, Any]) -> str:
		logging.info("tool call %s(%s)", self.tool.name, arguments)
		try:
			records = self.tool.call(arguments)
		except Exception as exc:
			failure = ToolCallFailure(self.tool.name, str(exc) or exc.__class__.__name__)
			self.failures.append(failure)
			raise failure from exc
		return "\n\n".join(records)


#============================================


class GenerationClient:
	"""
	Issues respond / structured / streaming / tool calls against a model capability.

	Every call checks the availability gate first and never reaches the
	capability when it reports unavailable. Single-shot calls use a fresh
	session each time; chat turns share one session until
	invalidate_chat_session() is called.
	"""

	def __init__(
		self,
		capability: ModelCapability,
		gate: AvailabilityGate,
		config: AppConfig | None = None,
	) -> None:
		self.capability = capability
		self.gate = gate
		self.config = config or AppConfig()
		self._chat_session: ModelSession | None = None
		self._chat_lock = threading.Lock()

	#============================================
	def _require_available(self) -> None:
		state = self.gate.check()
		if not state.available:
			logging.warning(
				"%s unavailable: %s",
				self.capability.name,
				state.reason.value if state.reason else "unknown",
			)
			raise ModelUnavailableError(state.reason)

	#============================================
	def _announce(self, purpose: str) -> None:
		logging.info("asking %s for %s", self.capability.name, purpose)
		if self.config.verbose:
			_print_llm(f"asking {self.capability.name} for {purpose}")

	#============================================
	def respond(
		self,
		prompt: str,
		instructions: str | None = None,
		options: GenerationOptions | None = None,
	) -> str:
		self._require_available()
		options = options or self.config.generation_options()
		self._announce("a response")
		with _error_boundary("respond"):
			session = self.capability.open_session(instructions=instructions)
			try:
				return session.respond(prompt, options)
			finally:
				session.close()

	#============================================
	def respond_structured(
		self,
		prompt: str,
		schema: type[SchemaT],
		instructions: str | None = None,
		options: GenerationOptions | None = None,
	) -> SchemaT:
		"""
		Generate a value of the given pydantic schema.

		Raises:
			StructuredGenerationFailedError: output did not decode into schema.
		"""
		self._require_available()
		options = options or self.config.generation_options()
		self._announce(f"a {schema.__name__}")
		with _error_boundary("respond_structured"):
			session = self.capability.open_session(instructions=instructions)
			try:
				raw = session.respond_structured(prompt, schema, options)
			finally:
				session.close()
			return _decode_structured(schema, raw)

	#============================================
	def stream_respond(
		self,
		prompt: str,
		instructions: str | None = None,
		options: GenerationOptions | None = None,
		cancel: threading.Event | None = None,
	) -> Iterator[str]:
		"""
		Stream a response as cumulative partial strings.

		Availability is checked now; the session is opened on first iteration.
		Each element is the whole response so far. Setting cancel (or closing
		the iterator) stops the stream before the next element.
		"""
		self._require_available()
		options = options or self.config.generation_options()
		self._announce("a streamed response")

		def open_session() -> ModelSession:
			return self.capability.open_session(instructions=instructions)

		return self._stream(open_session, prompt, options, cancel, close_session=True)

	#============================================
	def respond_with_tools(
		self,
		prompt: str,
		tools: Sequence[Tool] | None = None,
		instructions: str | None = None,
		options: GenerationOptions | None = None,
	) -> str:
		"""
		Respond with tools the model may call mid-generation.

		Raises:
			ToolExecutionFailedError: a tool raised during the call.
		"""
		self._require_available()
		if tools is None:
			tools = [PaintingDatabaseTool()]
		options = options or self.config.generation_options()
		failures: list[ToolCallFailure] = []
		specs = [_ToolGuard(tool, failures).spec() for tool in tools]
		self._announce(f"a response with tools ({', '.join(spec.name for spec in specs)})")
		with _error_boundary("respond_with_tools", failures):
			session = self.capability.open_session(
				instructions=instructions or self.config.tool_instructions,
				tools=specs,
			)
			try:
				text = session.respond(prompt, options)
			finally:
				session.close()
		if failures:
			# the runtime carried on after a failed callout
			failure = failures[-1]
			raise ToolExecutionFailedError(failure.tool_name, failure.detail)
		return text

	#============================================
	def stream_chat(
		self,
		prompt: str,
		options: GenerationOptions | None = None,
		cancel: threading.Event | None = None,
	) -> Iterator[str]:
		"""
		Stream one chat turn on the shared chat session.
		"""
		self._require_available()
		options = options or self.config.chat_options()
		self._announce("a chat reply")
		return self._stream(self._chat_session_or_open, prompt, options, cancel, close_session=False)

	#============================================
	def invalidate_chat_session(self) -> None:
		"""
		Drop the chat session so the next chat turn starts without memory.
		"""
		session = self.detach_chat_session()
		if session is not None:
			session.close()

	#============================================
	def detach_chat_session(self) -> ModelSession | None:
		"""
		Forget the chat session without closing it.

		Returns:
			The detached session; the caller must close it once no stream uses it.
		"""
		with self._chat_lock:
			session = self._chat_session
			self._chat_session = None
		if session is not None:
			logging.info("chat session invalidated")
		return session

	#============================================
	@property
	def has_chat_session(self) -> bool:
		return self._chat_session is not None

	#============================================
	def _chat_session_or_open(self) -> ModelSession:
		with self._chat_lock:
			if self._chat_session is None:
				self._chat_session = self.capability.open_session(
					instructions=self.config.chat_instructions
				)
			return self._chat_session

	#============================================
	def _stream(
		self,
		open_session: Callable[[], ModelSession],
		prompt: str,
		options: GenerationOptions,
		cancel: threading.Event | None,
		*,
		close_session: bool,
	) -> Iterator[str]:
		with _error_boundary("stream"):
			session = open_session()
			partials = session.stream(prompt, options)
			try:
				for partial in partials:
					if cancel is not None and cancel.is_set():
						break
					yield partial
					if cancel is not None and cancel.is_set():
						break
			finally:
				_close_iterator(partials)
				if close_session:
					session.close()
		if cancel is not None and cancel.is_set():
			logging.info("stream cancelled by caller")
