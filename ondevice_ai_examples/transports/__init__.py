#!/usr/bin/env python3
from __future__ import annotations

from .apple import AppleTransport
from .base import GenerationOptions, ModelCapability, ModelSession, ToolSpec
from .ollama import OllamaTransport

__all__ = [
	"AppleTransport",
	"GenerationOptions",
	"ModelCapability",
	"ModelSession",
	"OllamaTransport",
	"ToolSpec",
]
