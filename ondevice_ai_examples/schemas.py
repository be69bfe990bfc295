#!/usr/bin/env python3
"""
Typed targets for structured generation.
"""

from __future__ import annotations

# Standard Library
import enum

# PIP3 modules
from pydantic import BaseModel, ConfigDict, Field

#============================================


class WorkoutDifficulty(str, enum.Enum):
	BEGINNER = "beginner"
	INTERMEDIATE = "intermediate"
	ADVANCED = "advanced"


class FitnessWorkout(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	name: str = Field(description="Name of the workout routine")
	difficulty: WorkoutDifficulty = Field(description="Difficulty level")
	duration: int = Field(description="Duration in minutes")
	exercises: list[str] = Field(description="List of exercises with reps")
	equipment: list[str] = Field(description="Equipment needed")
	calories_burned: int = Field(alias="caloriesBurned", description="Calories burned estimate")


def format_workout(workout: FitnessWorkout) -> str:
	lines = [
		"FITNESS WORKOUT:",
		f"Name: {workout.name}",
		f"Difficulty: {workout.difficulty.value}",
		f"Duration: {workout.duration} minutes",
		f"Calories Burned: {workout.calories_burned}",
		"",
		"Exercises:",
	]
	lines.extend(f"• {exercise}" for exercise in workout.exercises)
	lines.append("")
	lines.append(f"Equipment: {', '.join(workout.equipment)}")
	return "\n".join(lines)


#============================================


class HarmonyType(str, enum.Enum):
	MONOCHROMATIC = "monochromatic"
	ANALOGOUS = "analogous"
	COMPLEMENTARY = "complementary"
	TRIADIC = "triadic"
	TETRADIC = "tetradic"
	SPLIT_COMPLEMENTARY = "splitComplementary"

	@property
	def display_name(self) -> str:
		if self is HarmonyType.SPLIT_COMPLEMENTARY:
			return "Split-Complementary"
		return self.value.capitalize()


class ColorInfo(BaseModel):
	name: str = Field(description="Name of the color (e.g., 'Deep Ocean Blue')")
	hex: str = Field(description="Hex color code with # prefix (e.g., '#1E40AF')")

	def rgba(self) -> tuple[int, int, int, int]:
		return parse_hex_color(self.hex)


class ColorPalette(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	name: str = Field(description="Name of the color palette")
	description: str = Field(description="Description of the palette's mood and characteristics")
	base_color: ColorInfo = Field(
		alias="baseColor",
		description="Information about the base color used to generate the palette",
	)
	colors: list[ColorInfo] = Field(description="Array of colors in the palette (6 colors)")
	harmony: HarmonyType = Field(
		description="Type of color harmony used (complementary, analogous, etc.)"
	)


#============================================


def parse_hex_color(text: str) -> tuple[int, int, int, int]:
	"""
	Parse a 3, 6 or 8 digit hex color into (r, g, b, a).

	Eight digit values are ARGB. Any other length gives (1, 1, 0, 1).
	"""
	digits = "".join(ch for ch in text if ch.isalnum())
	try:
		value = int(digits, 16) if digits else 0
	except ValueError:
		value = 0
	if len(digits) == 3:
		return ((value >> 8) * 17, (value >> 4 & 0xF) * 17, (value & 0xF) * 17, 255)
	if len(digits) == 6:
		return (value >> 16, value >> 8 & 0xFF, value & 0xFF, 255)
	if len(digits) == 8:
		return (value >> 16 & 0xFF, value >> 8 & 0xFF, value & 0xFF, value >> 24)
	return (1, 1, 0, 1)


def to_hex(red: int, green: int, blue: int) -> str:
	for channel in (red, green, blue):
		if channel < 0 or channel > 255:
			raise ValueError(f"color channel out of range: {channel}")
	return f"#{red:02X}{green:02X}{blue:02X}"
