#!/usr/bin/env python3
"""
Multi-turn chat orchestration over a streaming generation client.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable
import contextlib
from dataclasses import dataclass, field, replace
import enum
import logging
import threading
import uuid

# local repo modules
from .client import GenerationClient
from .errors import describe_error
from .transports.base import GenerationOptions, ModelSession

#============================================


class Role(enum.Enum):
	USER = "user"
	ASSISTANT = "assistant"


class ChatState(enum.Enum):
	IDLE = "idle"
	GENERATING = "generating"


def _new_turn_id() -> str:
	return uuid.uuid4().hex


@dataclass(slots=True)
class ConversationTurn:
	role: Role
	text: str = ""
	id: str = field(default_factory=_new_turn_id)


#============================================


class ChatOrchestrator:
	"""
	Ordered transcript plus at most one in-flight streamed reply.

	submit() appends a user turn and an empty assistant turn, then streams
	the reply on a worker thread; each partial overwrites the assistant
	turn's text. All transcript and state changes happen under one lock,
	and a generation counter keeps a cancelled or reset worker from
	writing again.
	"""

	def __init__(
		self,
		client: GenerationClient,
		options: GenerationOptions | None = None,
		on_update: Callable[[ConversationTurn], None] | None = None,
	) -> None:
		self.client = client
		self.options = options
		self.on_update = on_update
		self.error_message = ""
		self.last_error: Exception | None = None
		self._turns: list[ConversationTurn] = []
		self._state = ChatState.IDLE
		self._lock = threading.Lock()
		# one runtime stream at a time, even while a cancelled one winds down
		self._stream_lock = threading.Lock()
		self._cancel: threading.Event | None = None
		self._worker: threading.Thread | None = None
		self._generation = 0
		# bumped by reset()
		self._epoch = 0
		# detached chat sessions; closed only while holding _stream_lock
		self._retired: list[ModelSession] = []

	#============================================
	@property
	def transcript(self) -> list[ConversationTurn]:
		with self._lock:
			return [replace(turn) for turn in self._turns]

	#============================================
	@property
	def state(self) -> ChatState:
		return self._state

	#============================================
	@property
	def is_generating(self) -> bool:
		return self._state is ChatState.GENERATING

	#============================================
	def can_send(self, text: str) -> bool:
		return bool(text.strip()) and not self.is_generating

	#============================================
	def submit(self, text: str) -> bool:
		"""
		Start a new turn.

		Returns:
			False (and changes nothing) for blank text or while generating.
		"""
		prompt = text.strip()
		with self._lock:
			if not prompt or self._state is ChatState.GENERATING:
				return False
			self._turns.append(ConversationTurn(role=Role.USER, text=prompt))
			assistant = ConversationTurn(role=Role.ASSISTANT)
			self._turns.append(assistant)
			self._generation += 1
			generation = self._generation
			cancel = threading.Event()
			self._cancel = cancel
			self._state = ChatState.GENERATING
			self.error_message = ""
			self.last_error = None
			worker = threading.Thread(
				target=self._run,
				args=(generation, self._epoch, prompt, assistant, cancel),
				name=f"chat-turn-{generation}",
				daemon=True,
			)
			self._worker = worker
			worker.start()
		return True

	#============================================
	def cancel(self) -> bool:
		"""
		Stop the in-flight reply, keeping whatever text it had so far.
		"""
		with self._lock:
			if self._state is not ChatState.GENERATING:
				return False
			if self._cancel is not None:
				self._cancel.set()
			self._cancel = None
			self._state = ChatState.IDLE
			generation = self._generation
		logging.info("chat turn %d cancelled", generation)
		return True

	#============================================
	def reset(self) -> None:
		"""
		Cancel any reply, clear the transcript and drop the chat session memory.

		The old session is closed once no worker is streaming on it.
		"""
		with self._lock:
			if self._cancel is not None:
				self._cancel.set()
			self._cancel = None
			self._generation += 1
			self._epoch += 1
			self._turns.clear()
			self._state = ChatState.IDLE
			self.error_message = ""
			self.last_error = None
			self._retire(self.client.detach_chat_session())
		# a worker still streaming on the old session closes it when done
		if self._stream_lock.acquire(blocking=False):
			try:
				self._close_retired()
			finally:
				self._stream_lock.release()

	#============================================
	def _retire(self, session: ModelSession | None) -> None:
		if session is not None:
			self._retired.append(session)

	#============================================
	def _close_retired(self) -> None:
		with self._lock:
			retired = self._retired
			self._retired = []
		for session in retired:
			session.close()

	#============================================
	def wait(self, timeout: float | None = None) -> bool:
		"""
		Join the current worker.

		Returns:
			True when no worker is running afterwards.
		"""
		worker = self._worker
		if worker is None:
			return True
		worker.join(timeout)
		return not worker.is_alive()

	#============================================
	def _is_current(self, generation: int, cancel: threading.Event) -> bool:
		return generation == self._generation and not cancel.is_set()

	#============================================
	def _run(
		self,
		generation: int,
		epoch: int,
		prompt: str,
		assistant: ConversationTurn,
		cancel: threading.Event,
	) -> None:
		try:
			with self._stream_lock:
				try:
					if cancel.is_set():
						return
					stream = self.client.stream_chat(prompt, options=self.options, cancel=cancel)
					with contextlib.closing(stream):
						for partial in stream:
							with self._lock:
								if not self._is_current(generation, cancel):
									break
								assistant.text = partial
								snapshot = replace(assistant)
							if self.on_update is not None:
								self.on_update(snapshot)
				finally:
					with self._lock:
						# a reset during this turn may have raced the chat session open
						if epoch != self._epoch:
							self._retire(self.client.detach_chat_session())
					self._close_retired()
		except Exception as exc:
			with self._lock:
				current = self._is_current(generation, cancel)
				if current:
					self.last_error = exc
					self.error_message = describe_error(exc)
			if current:
				logging.warning("chat turn %d failed: %s", generation, describe_error(exc))
			else:
				logging.info("chat turn %d ended after cancel: %s", generation, exc)
		finally:
			with self._lock:
				if generation == self._generation and self._state is ChatState.GENERATING:
					self._state = ChatState.IDLE
					self._cancel = None
