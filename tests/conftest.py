"""
Pytest config to ensure local package imports work without installation.
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path


def _add_repo_root_to_path() -> None:
	"""
	Insert the repo root into sys.path for local imports.
	"""
	repo_root = Path(__file__).resolve().parent.parent
	repo_root_str = str(repo_root)
	if repo_root_str not in sys.path:
		sys.path.insert(0, repo_root_str)


_add_repo_root_to_path()

from ondevice_ai_examples.availability import (  # noqa: E402
	AvailabilityState,
	StaticAvailabilityGate,
	UnavailabilityReason,
)
from ondevice_ai_examples.client import GenerationClient  # noqa: E402


class FakeSession:
	"""
	Test-only model session driven by its FakeCapability's settings.
	"""

	def __init__(self, capability, instructions, tools) -> None:
		self.capability = capability
		self.instructions = instructions
		self.tools = {spec.name: spec for spec in tools}
		self.prompts: list[str] = []
		self.closed = False

	def _record(self, kind: str, prompt: str, options) -> None:
		self.prompts.append(prompt)
		self.capability.calls.append((kind, prompt, options))
		if self.capability.error:
			raise self.capability.error

	def respond(self, prompt: str, options) -> str:
		self._record("respond", prompt, options)
		for name, arguments in self.capability.tool_calls:
			spec = self.tools[name]
			if self.capability.tool_error_wrapper is None:
				spec.invoke(arguments)
				continue
			try:
				spec.invoke(arguments)
			except Exception:
				if self.capability.tool_error_wrapper == "swallow":
					continue
				raise self.capability.tool_error_wrapper("tool call failed") from None
		reply = self.capability.reply
		if callable(reply):
			return reply(prompt, self)
		return reply

	def respond_structured(self, prompt: str, schema, options):
		self._record("structured", prompt, options)
		return self.capability.structured

	def stream(self, prompt: str, options):
		self._record("stream", prompt, options)
		for index, partial in enumerate(self.capability.partials):
			if self.capability.hold is not None:
				self.capability.hold.wait(5)
			if self.capability.stream_error_at == index:
				raise self.capability.stream_error
			yield partial

	def close(self) -> None:
		self.closed = True


class FakeCapability:
	"""
	Test-only model capability recording every session and call.
	"""

	name = "Fake"

	def __init__(
		self,
		reply="ok",
		partials=None,
		structured=None,
		error: Exception | None = None,
		tool_calls=None,
		tool_error_wrapper=None,
		stream_error: Exception | None = None,
		stream_error_at: int | None = None,
		hold: threading.Event | None = None,
	) -> None:
		self.reply = reply
		self.partials = list(partials or [])
		self.structured = structured
		self.error = error
		self.tool_calls = list(tool_calls or [])
		self.tool_error_wrapper = tool_error_wrapper
		self.stream_error = stream_error
		self.stream_error_at = stream_error_at
		self.hold = hold
		self.sessions: list[FakeSession] = []
		self.calls: list[tuple] = []

	def open_session(self, instructions=None, tools=()) -> FakeSession:
		session = FakeSession(self, instructions, tools)
		self.sessions.append(session)
		return session


def make_client(capability: FakeCapability, reason: UnavailabilityReason | None = None) -> GenerationClient:
	if reason is None:
		gate = StaticAvailabilityGate()
	else:
		gate = StaticAvailabilityGate(AvailabilityState.unavailable(reason))
	return GenerationClient(capability, gate)
