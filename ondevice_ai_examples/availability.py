#!/usr/bin/env python3
"""
Model availability gate: whether generation is usable right now, and why not.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import enum
import logging
import platform
import subprocess
import sys
from typing import Protocol
import urllib.request

# local repo modules
from .llm_utils import MIN_MACOS_MAJOR, _parse_macos_version, apple_binding_installed

#============================================


APPLE_INTELLIGENCE_SETTINGS_URL = "x-apple.systempreferences:com.apple.Siri-Settings.extension"


class UnavailabilityReason(enum.Enum):
	DEVICE_NOT_ELIGIBLE = "deviceNotEligible"
	CAPABILITY_DISABLED = "capabilityDisabled"
	MODEL_NOT_READY = "modelNotReady"
	SYSTEM_VERSION_TOO_OLD = "systemVersionTooOld"
	UNKNOWN = "unknown"

	@property
	def title(self) -> str:
		return _REASON_TITLES[self]

	@property
	def description(self) -> str:
		return _REASON_DESCRIPTIONS[self]

	@property
	def action_title(self) -> str | None:
		if self is UnavailabilityReason.CAPABILITY_DISABLED:
			return "Open Settings"
		return None


_REASON_TITLES = {
	UnavailabilityReason.DEVICE_NOT_ELIGIBLE: "Device Not Compatible",
	UnavailabilityReason.CAPABILITY_DISABLED: "Apple Intelligence Disabled",
	UnavailabilityReason.MODEL_NOT_READY: "Model Not Ready",
	UnavailabilityReason.SYSTEM_VERSION_TOO_OLD: "System Update Required",
	UnavailabilityReason.UNKNOWN: "Foundation Models Unavailable",
}

_REASON_DESCRIPTIONS = {
	UnavailabilityReason.DEVICE_NOT_ELIGIBLE: (
		"Your device doesn't support Apple Intelligence. Foundation Models require "
		"an Apple Silicon device (iPhone 15 Pro or newer, iPad with M1 or newer, "
		"Mac with Apple Silicon)."
	),
	UnavailabilityReason.CAPABILITY_DISABLED: (
		"Apple Intelligence is not enabled on this device. Please enable it in "
		"Settings > Apple Intelligence & Siri."
	),
	UnavailabilityReason.MODEL_NOT_READY: (
		"Foundation Models are downloading or not ready. This may take some time "
		"depending on your network connection."
	),
	UnavailabilityReason.SYSTEM_VERSION_TOO_OLD: (
		f"Foundation Models require macOS {MIN_MACOS_MAJOR}.0 or newer."
	),
	UnavailabilityReason.UNKNOWN: "Foundation Models are not available on your device",
}


#============================================


@dataclass(frozen=True, slots=True)
class AvailabilityState:
	available: bool
	reason: UnavailabilityReason | None = None

	def __post_init__(self) -> None:
		if self.available and self.reason is not None:
			raise ValueError("An available state cannot carry a reason.")
		if not self.available and self.reason is None:
			raise ValueError("An unavailable state needs a reason.")

	@classmethod
	def ready(cls) -> AvailabilityState:
		return cls(available=True)

	@classmethod
	def unavailable(cls, reason: UnavailabilityReason) -> AvailabilityState:
		return cls(available=False, reason=reason)


class AvailabilityGate(Protocol):
	def check(self) -> AvailabilityState:
		"""
		Return the current availability of the generative capability.
		"""


#============================================


def reason_from_text(text: str) -> UnavailabilityReason:
	"""
	Map a runtime availability reason (enum name or message) to a reason code.
	"""
	compact = "".join(str(text).lower().replace("_", " ").split())
	if "noteligible" in compact:
		return UnavailabilityReason.DEVICE_NOT_ELIGIBLE
	if "notenabled" in compact or "disabled" in compact:
		return UnavailabilityReason.CAPABILITY_DISABLED
	if "notready" in compact or "download" in compact:
		return UnavailabilityReason.MODEL_NOT_READY
	if "version" in compact or "update" in compact:
		return UnavailabilityReason.SYSTEM_VERSION_TOO_OLD
	return UnavailabilityReason.UNKNOWN


class StaticAvailabilityGate:
	"""
	Gate with a fixed state.
	"""

	def __init__(self, state: AvailabilityState | None = None) -> None:
		self.state = state or AvailabilityState.ready()

	def check(self) -> AvailabilityState:
		return self.state


class AppleAvailabilityGate:
	"""
	Apple Foundation Models availability on the local Mac.
	"""

	def check(self) -> AvailabilityState:
		if sys.platform != "darwin":
			return AvailabilityState.unavailable(UnavailabilityReason.DEVICE_NOT_ELIGIBLE)
		arch = platform.machine().lower()
		if arch != "arm64":
			return AvailabilityState.unavailable(UnavailabilityReason.DEVICE_NOT_ELIGIBLE)
		major, _minor, _patch = _parse_macos_version()
		if major < MIN_MACOS_MAJOR:
			return AvailabilityState.unavailable(UnavailabilityReason.SYSTEM_VERSION_TOO_OLD)
		if not apple_binding_installed():
			logging.warning("apple-foundation-models is required for the Apple backend.")
			return AvailabilityState.unavailable(UnavailabilityReason.DEVICE_NOT_ELIGIBLE)
		from applefoundationmodels import Session, apple_intelligence_available

		try:
			if apple_intelligence_available():
				return AvailabilityState.ready()
		except Exception as exc:
			logging.warning("Apple Intelligence availability probe failed: %s", exc)
			return AvailabilityState.unavailable(UnavailabilityReason.UNKNOWN)
		try:
			reason = Session.get_availability_reason()
		except Exception:
			return AvailabilityState.unavailable(UnavailabilityReason.UNKNOWN)
		return AvailabilityState.unavailable(reason_from_text(str(reason)))

	def perform_action(self) -> bool:
		"""
		Open the Apple Intelligence settings pane when that fixes availability.

		Returns:
			True when a remediation was launched.
		"""
		state = self.check()
		if state.reason is not UnavailabilityReason.CAPABILITY_DISABLED:
			return False
		result = subprocess.run(["open", APPLE_INTELLIGENCE_SETTINGS_URL], check=False)
		return result.returncode == 0


class OllamaAvailabilityGate:
	"""
	Availability of a local Ollama server.
	"""

	def __init__(self, base_url: str = "http://localhost:11434") -> None:
		self.base_url = base_url.rstrip("/")

	def check(self) -> AvailabilityState:
		if _ollama_available(self.base_url):
			return AvailabilityState.ready()
		return AvailabilityState.unavailable(UnavailabilityReason.MODEL_NOT_READY)


#============================================


def _ollama_available(base_url: str) -> bool:
	"""
	Check if Ollama service is up.
	"""
	try:
		request = urllib.request.Request(f"{base_url}/api/tags", method="GET")
		with urllib.request.urlopen(request, timeout=2) as response:
			return response.status < 400
	except Exception:
		return False
