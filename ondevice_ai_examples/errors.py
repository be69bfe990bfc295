#!/usr/bin/env python3
"""
Closed error taxonomy surfaced by the generation client.

Every failure raised by a model runtime is converted by translate_error()
into one of five kinds, or into UnexpectedGenerationError when no kind fits.
"""

from __future__ import annotations

# PIP3 modules
import pydantic

# local repo modules
from .availability import UnavailabilityReason
from .llm_utils import (
	_is_context_window_error,
	_is_decoding_error,
	_is_guardrail_error,
	_is_tool_error,
	_is_unavailable_error,
)

#============================================


class GenerationError(RuntimeError):
	"""
	Base class for every error the generation client raises.
	"""

	retryable = False

	def __init__(self, description: str) -> None:
		super().__init__(description)
		self.description = description


class ModelUnavailableError(GenerationError):
	def __init__(self, reason: UnavailabilityReason | None = None) -> None:
		super().__init__(
			"AI model is not available. Please check your device compatibility "
			"and Apple Intelligence settings."
		)
		self.reason = reason


class ContentPolicyViolationError(GenerationError):
	def __init__(self) -> None:
		super().__init__(
			"Your request contains content that doesn't meet our guidelines. "
			"Please try rephrasing your request."
		)


class PromptTooLongError(GenerationError):
	def __init__(self) -> None:
		super().__init__("Your request is too long. Please try with a shorter prompt.")


class StructuredGenerationFailedError(GenerationError):
	retryable = True

	def __init__(self) -> None:
		super().__init__("Failed to generate the requested data format. Please try again.")


class ToolExecutionFailedError(GenerationError):
	def __init__(self, tool_name: str, detail: str) -> None:
		super().__init__(f"Tool '{tool_name}' encountered an error: {detail}")
		self.tool_name = tool_name
		self.detail = detail


class UnexpectedGenerationError(GenerationError):
	"""
	Passthrough for runtime failures with no taxonomy kind.
	"""

	def __init__(self, detail: str) -> None:
		super().__init__(f"Unexpected error: {detail}")
		self.detail = detail


#============================================


class ToolCallFailure(RuntimeError):
	"""
	Raised inside a tool callout so the failing tool can be identified later.
	"""

	def __init__(self, tool_name: str, detail: str) -> None:
		super().__init__(f"{tool_name}: {detail}")
		self.tool_name = tool_name
		self.detail = detail


def _find_tool_failure(exc: BaseException) -> ToolCallFailure | None:
	seen: set[int] = set()
	current: BaseException | None = exc
	while current is not None and id(current) not in seen:
		if isinstance(current, ToolCallFailure):
			return current
		seen.add(id(current))
		current = current.__cause__ or current.__context__
	return None


def translate_error(
	exc: BaseException,
	tool_failures: list[ToolCallFailure] | None = None,
) -> GenerationError:
	"""
	Map a runtime exception to the closed error taxonomy.

	Args:
		exc: Exception raised below the client boundary.
		tool_failures: Failures recorded by tool guards during the call.

	Returns:
		The matching GenerationError (never raises).
	"""
	if isinstance(exc, GenerationError):
		return exc
	failure = _find_tool_failure(exc)
	if failure is None and tool_failures:
		failure = tool_failures[-1]
	if failure is not None:
		return ToolExecutionFailedError(failure.tool_name, failure.detail)
	if _is_tool_error(exc):
		tool_name = getattr(exc, "tool_name", None) or "unknown"
		return ToolExecutionFailedError(str(tool_name), str(exc))
	if _is_guardrail_error(exc):
		return ContentPolicyViolationError()
	if _is_context_window_error(exc):
		return PromptTooLongError()
	if isinstance(exc, pydantic.ValidationError) or _is_decoding_error(exc):
		return StructuredGenerationFailedError()
	if _is_unavailable_error(exc):
		return ModelUnavailableError(UnavailabilityReason.MODEL_NOT_READY)
	detail = str(exc) or exc.__class__.__name__
	return UnexpectedGenerationError(detail)


def describe_error(exc: BaseException) -> str:
	"""
	User-facing message for any error.
	"""
	if isinstance(exc, GenerationError):
		return exc.description
	return f"Unexpected error: {exc}"
