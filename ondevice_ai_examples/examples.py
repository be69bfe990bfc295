#!/usr/bin/env python3
"""
Catalogue of example interactions and a runner that executes them.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable
from dataclasses import dataclass
import enum

# local repo modules
from .client import GenerationClient
from .errors import GenerationError, describe_error
from .schemas import ColorPalette, FitnessWorkout, HarmonyType, format_workout, parse_hex_color, to_hex

#============================================


PALETTE_INSTRUCTIONS = (
	"You are a graphic designer with expert knowledge in color theory, "
	"visual identity, and user interface design."
)
PALETTE_SIZE = 6


class ExampleType(enum.Enum):
	BASIC_RESPONSE = "basic"
	STREAMING_RESPONSE = "streaming"
	INTERACTIVE_CHAT = "chat"
	STRUCTURED_GENERATION = "structured"
	CUSTOM_TOOL = "tool"

	@property
	def title(self) -> str:
		return _EXAMPLE_TEXT[self][0]

	@property
	def subtitle(self) -> str:
		return _EXAMPLE_TEXT[self][1]

	@property
	def prompt(self) -> str:
		return _EXAMPLE_TEXT[self][2]


_EXAMPLE_TEXT = {
	ExampleType.BASIC_RESPONSE: (
		"Basic Response",
		"Simple response from the model",
		"Tell a joke.",
	),
	ExampleType.STREAMING_RESPONSE: (
		"Streaming Response",
		"Real-time response streaming",
		"Write a short sciFi story.",
	),
	ExampleType.INTERACTIVE_CHAT: (
		"Interactive Chat",
		"Full conversation interface",
		"Start a conversation",
	),
	ExampleType.STRUCTURED_GENERATION: (
		"Structured Generation",
		"Generate typed objects",
		"Create a 30-minute strength training workout for beginners at home.",
	),
	ExampleType.CUSTOM_TOOL: (
		"Using Custom Tools",
		"Use custom tools with the model",
		"Find famous paintings by Picasso and Dalí, including their significance in art history",
	),
}


@dataclass(slots=True)
class ExampleResult:
	text: str
	is_error: bool = False
	error: GenerationError | None = None


#============================================


def build_palette_prompt(base_hex: str, harmony: HarmonyType) -> str:
	red, green, blue, _alpha = parse_hex_color(base_hex)
	lines = [
		f"Generate a color palette based on the base color {to_hex(red, green, blue)}.",
		f"The palette should use the {harmony.display_name} color harmony.",
		f"The palette should have exactly {PALETTE_SIZE} colors.",
		"Make the palette visually appealing and suitable for design purposes.",
	]
	return "\n".join(lines)


def format_palette(palette: ColorPalette) -> str:
	lines = [
		f"{palette.name} ({palette.harmony.display_name})",
		palette.description,
		f"Base: {palette.base_color.name} {palette.base_color.hex}",
	]
	lines.extend(f"- {color.name} {color.hex}" for color in palette.colors)
	return "\n".join(lines)


class ExampleRunner:
	"""
	Runs one example and turns failures into displayable text.
	"""

	def __init__(self, client: GenerationClient) -> None:
		self.client = client

	#============================================
	def run(
		self,
		example: ExampleType,
		prompt: str | None = None,
		on_partial: Callable[[str], None] | None = None,
		instructions: str | None = None,
	) -> ExampleResult:
		if example is ExampleType.INTERACTIVE_CHAT:
			raise ValueError("Interactive chat runs through ChatOrchestrator, not ExampleRunner.")
		prompt = prompt or example.prompt
		try:
			if example is ExampleType.BASIC_RESPONSE:
				text = self.client.respond(prompt, instructions=instructions)
			elif example is ExampleType.STREAMING_RESPONSE:
				text = ""
				for partial in self.client.stream_respond(prompt, instructions=instructions):
					text = partial
					if on_partial is not None:
						on_partial(partial)
			elif example is ExampleType.STRUCTURED_GENERATION:
				workout = self.client.respond_structured(prompt, FitnessWorkout, instructions=instructions)
				text = format_workout(workout)
			else:
				text = self.client.respond_with_tools(prompt, instructions=instructions)
		except GenerationError as exc:
			return ExampleResult(text=describe_error(exc), is_error=True, error=exc)
		return ExampleResult(text=text)

	#============================================
	def generate_palette(self, base_hex: str, harmony: HarmonyType) -> ColorPalette:
		prompt = build_palette_prompt(base_hex, harmony)
		return self.client.respond_structured(prompt, ColorPalette, instructions=PALETTE_INSTRUCTIONS)
