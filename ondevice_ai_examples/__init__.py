"""
ondevice_ai_examples
====================

Request/response orchestration for on-device language models: single-shot,
streaming, structured, tool-augmented generation and multi-turn chat.
"""

__all__ = [
	"availability",
	"chat",
	"client",
	"config",
	"errors",
	"examples",
	"schemas",
	"tools",
	"transports",
]
