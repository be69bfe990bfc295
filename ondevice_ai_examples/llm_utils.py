#!/usr/bin/env python3
"""
Shared LLM helpers (backend-agnostic).
"""

from __future__ import annotations

# Standard Library
import platform
import sys

#============================================


MIN_MACOS_MAJOR = 26


def _binding_errors(*names: str) -> tuple[type[BaseException], ...]:
	"""
	Collect exception classes exported by applefoundationmodels, if installed.
	"""
	try:
		from applefoundationmodels import exceptions
	except Exception:
		return ()
	found: list[type[BaseException]] = []
	for name in names:
		cls = getattr(exceptions, name, None)
		if isinstance(cls, type) and issubclass(cls, BaseException):
			found.append(cls)
	return tuple(found)


_GUARDRAIL_ERRORS = _binding_errors("GuardrailViolationError")
_CONTEXT_WINDOW_ERRORS = _binding_errors("ContextWindowExceededError")
_DECODING_ERRORS = _binding_errors("JSONParseError", "DecodingFailureError")
_TOOL_ERRORS = _binding_errors("ToolCallError", "ToolExecutionError")
_UNAVAILABLE_ERRORS = _binding_errors("NotAvailableError", "AssetsUnavailableError")


def _print_llm(label: str) -> None:
	if sys.stdout.isatty():
		print(f"\033[36m[LLM]\033[0m {label}")
	else:
		print(f"[LLM] {label}")


#============================================


def _parse_macos_version() -> tuple[int, int, int]:
	version_str = platform.mac_ver()[0]
	parts = [int(p) for p in version_str.split(".") if p.isdigit()]
	while len(parts) < 3:
		parts.append(0)
	if len(parts) >= 3:
		return parts[0], parts[1], parts[2]
	return 0, 0, 0


def apple_binding_installed() -> bool:
	try:
		from applefoundationmodels import Session, apple_intelligence_available
	except Exception:
		return False
	_ = (Session, apple_intelligence_available)
	return True


#============================================


def _name_and_message(exc: BaseException) -> tuple[str, str]:
	return exc.__class__.__name__.lower(), str(exc).lower()


def _is_guardrail_error(exc: BaseException) -> bool:
	if _GUARDRAIL_ERRORS and isinstance(exc, _GUARDRAIL_ERRORS):
		return True
	name, msg = _name_and_message(exc)
	if "guardrail" in name:
		return True
	if "content policy" in msg:
		return True
	return "guardrail" in msg and "unsafe" in msg


def _is_context_window_error(exc: BaseException) -> bool:
	"""
	Return True when the exception signals a context window overflow.
	"""
	if _CONTEXT_WINDOW_ERRORS and isinstance(exc, _CONTEXT_WINDOW_ERRORS):
		return True
	name, msg = _name_and_message(exc)
	if "contextwindow" in name:
		return True
	if "context window" in msg or "context length" in msg:
		return True
	return "exceededcontextwindowsize" in msg


def _is_decoding_error(exc: BaseException) -> bool:
	if _DECODING_ERRORS and isinstance(exc, _DECODING_ERRORS):
		return True
	name, msg = _name_and_message(exc)
	if "jsonparse" in name or "decoding" in name or "jsondecode" in name:
		return True
	return "decoding failure" in msg or "failed to decode" in msg


def _is_tool_error(exc: BaseException) -> bool:
	if _TOOL_ERRORS and isinstance(exc, _TOOL_ERRORS):
		return True
	name, _msg = _name_and_message(exc)
	return "toolcall" in name or "toolexecution" in name


def _is_unavailable_error(exc: BaseException) -> bool:
	if _UNAVAILABLE_ERRORS and isinstance(exc, _UNAVAILABLE_ERRORS):
		return True
	name, msg = _name_and_message(exc)
	if "notavailable" in name or "assetsunavailable" in name:
		return True
	return "assets unavailable" in msg or "model is not available" in msg
