#!/usr/bin/env python3
"""
Tests for GenerationClient against a fake model capability.
"""

import threading

import pytest

from conftest import FakeCapability, make_client
from ondevice_ai_examples.availability import UnavailabilityReason
from ondevice_ai_examples.errors import (
	ContentPolicyViolationError,
	ModelUnavailableError,
	PromptTooLongError,
	StructuredGenerationFailedError,
	ToolExecutionFailedError,
	UnexpectedGenerationError,
)
from ondevice_ai_examples.schemas import FitnessWorkout
from ondevice_ai_examples.transports.base import GenerationOptions


class GuardrailViolationError(Exception):
	pass


class ContextWindowExceededError(Exception):
	pass


class ToolCallError(Exception):
	pass


class BrokenTool:
	name = "brokenTool"
	description = "Always fails."
	arguments_model = None

	def call(self, arguments):
		raise ValueError("db offline")


WORKOUT = {
	"name": "Home Strength",
	"difficulty": "beginner",
	"duration": 30,
	"exercises": ["10 squats", "8 push-ups"],
	"equipment": ["mat"],
	"caloriesBurned": 180,
}


#============================================


def test_unavailable_fails_fast_without_touching_model():
	capability = FakeCapability()
	client = make_client(capability, reason=UnavailabilityReason.CAPABILITY_DISABLED)
	with pytest.raises(ModelUnavailableError) as info:
		client.respond("hi")
	assert info.value.reason is UnavailabilityReason.CAPABILITY_DISABLED
	with pytest.raises(ModelUnavailableError):
		client.respond_structured("hi", FitnessWorkout)
	with pytest.raises(ModelUnavailableError):
		client.respond_with_tools("hi")
	with pytest.raises(ModelUnavailableError):
		client.stream_respond("hi")
	with pytest.raises(ModelUnavailableError):
		client.stream_chat("hi")
	assert capability.sessions == []
	assert capability.calls == []


def test_respond_uses_fresh_closed_session():
	capability = FakeCapability(reply="Why did the chicken cross the road?")
	client = make_client(capability)
	first = client.respond("Tell a joke.", instructions="Be brief.")
	second = client.respond("Tell a joke.")
	assert first == second == "Why did the chicken cross the road?"
	assert len(capability.sessions) == 2
	assert capability.sessions[0].instructions == "Be brief."
	assert capability.sessions[1].instructions is None
	assert all(session.closed for session in capability.sessions)
	assert capability.sessions[1].prompts == ["Tell a joke."]


def test_respond_passes_options():
	capability = FakeCapability()
	client = make_client(capability)
	options = GenerationOptions(temperature=0.2, max_tokens=64)
	client.respond("hi", options=options)
	assert capability.calls == [("respond", "hi", options)]


@pytest.mark.parametrize(
	"exc, expected",
	[
		(GuardrailViolationError("unsafe"), ContentPolicyViolationError),
		(ContextWindowExceededError("4096"), PromptTooLongError),
		(RuntimeError("boom"), UnexpectedGenerationError),
	],
)
def test_respond_translates_errors(exc, expected):
	capability = FakeCapability(error=exc)
	client = make_client(capability)
	with pytest.raises(expected) as info:
		client.respond("hi")
	assert info.value.__cause__ is exc
	assert capability.sessions[0].closed is True


#============================================


def test_structured_from_dict():
	capability = FakeCapability(structured=dict(WORKOUT))
	client = make_client(capability)
	workout = client.respond_structured("workout", FitnessWorkout)
	assert isinstance(workout, FitnessWorkout)
	assert workout.calories_burned == 180
	assert workout.exercises == ["10 squats", "8 push-ups"]


def test_structured_from_json_text():
	capability = FakeCapability(
		structured='{"name": "Core", "difficulty": "advanced", "duration": 20, '
		'"exercises": ["plank"], "equipment": [], "caloriesBurned": 90}'
	)
	client = make_client(capability)
	workout = client.respond_structured("workout", FitnessWorkout)
	assert workout.difficulty.value == "advanced"


@pytest.mark.parametrize(
	"raw",
	["not json at all", {"name": "Missing everything"}, dict(WORKOUT, duration="long")],
)
def test_structured_decode_failure(raw):
	capability = FakeCapability(structured=raw)
	client = make_client(capability)
	with pytest.raises(StructuredGenerationFailedError) as info:
		client.respond_structured("workout", FitnessWorkout)
	assert info.value.retryable is True


#============================================


def test_stream_yields_cumulative_partials():
	capability = FakeCapability(partials=["Once", "Once upon", "Once upon a time."])
	client = make_client(capability)
	partials = list(client.stream_respond("story"))
	assert partials == ["Once", "Once upon", "Once upon a time."]
	assert capability.sessions[0].closed is True


def test_stream_checks_availability_before_iteration():
	capability = FakeCapability(partials=["a"])
	client = make_client(capability)
	stream = client.stream_respond("story")
	assert capability.sessions == []
	assert list(stream) == ["a"]


def test_stream_cancel_stops_before_next_partial():
	capability = FakeCapability(partials=["a", "ab", "abc"])
	client = make_client(capability)
	cancel = threading.Event()
	seen = []
	for partial in client.stream_respond("story", cancel=cancel):
		seen.append(partial)
		cancel.set()
	assert seen == ["a"]
	assert capability.sessions[0].closed is True


def test_stream_close_releases_session():
	capability = FakeCapability(partials=["a", "ab", "abc"])
	client = make_client(capability)
	stream = client.stream_respond("story")
	assert next(stream) == "a"
	stream.close()
	assert capability.sessions[0].closed is True


def test_stream_error_after_partial():
	capability = FakeCapability(
		partials=["a", "ab", "abc"],
		stream_error=ContextWindowExceededError("full"),
		stream_error_at=2,
	)
	client = make_client(capability)
	seen = []
	with pytest.raises(PromptTooLongError):
		for partial in client.stream_respond("story"):
			seen.append(partial)
	assert seen == ["a", "ab"]


#============================================


def test_tools_registered_and_invoked():
	capability = FakeCapability(
		reply="Dalí painted The Persistence of Memory.",
		tool_calls=[("searchPaintingDatabase", {"searchTerm": "dali", "limit": 8})],
	)
	client = make_client(capability)
	text = client.respond_with_tools("Find paintings by Dalí")
	assert text == "Dalí painted The Persistence of Memory."
	session = capability.sessions[0]
	assert list(session.tools) == ["searchPaintingDatabase"]
	assert session.instructions == client.config.tool_instructions
	output = session.tools["searchPaintingDatabase"].invoke({"searchTerm": "dali", "limit": 8})
	assert output.startswith("**The Persistence of Memory**")


def test_tool_failure_names_the_tool():
	capability = FakeCapability(tool_calls=[("brokenTool", {})])
	client = make_client(capability)
	with pytest.raises(ToolExecutionFailedError) as info:
		client.respond_with_tools("hi", tools=[BrokenTool()])
	assert info.value.tool_name == "brokenTool"
	assert info.value.detail == "db offline"
	assert info.value.description == "Tool 'brokenTool' encountered an error: db offline"


def test_tool_failure_wrapped_by_runtime():
	capability = FakeCapability(tool_calls=[("brokenTool", {})], tool_error_wrapper=ToolCallError)
	client = make_client(capability)
	with pytest.raises(ToolExecutionFailedError) as info:
		client.respond_with_tools("hi", tools=[BrokenTool()])
	assert info.value.tool_name == "brokenTool"


def test_tool_failure_reported_even_if_runtime_recovers():
	capability = FakeCapability(
		reply="I could not search.",
		tool_calls=[("brokenTool", {})],
		tool_error_wrapper="swallow",
	)
	client = make_client(capability)
	with pytest.raises(ToolExecutionFailedError):
		client.respond_with_tools("hi", tools=[BrokenTool()])


#============================================


def test_chat_session_reused_until_invalidated():
	capability = FakeCapability(partials=["hi"])
	client = make_client(capability)
	assert list(client.stream_chat("one")) == ["hi"]
	assert list(client.stream_chat("two")) == ["hi"]
	assert len(capability.sessions) == 1
	assert capability.sessions[0].prompts == ["one", "two"]
	assert capability.sessions[0].closed is False
	assert capability.sessions[0].instructions == client.config.chat_instructions
	client.invalidate_chat_session()
	assert capability.sessions[0].closed is True
	assert client.has_chat_session is False
	list(client.stream_chat("three"))
	assert len(capability.sessions) == 2


def test_chat_uses_chat_temperature():
	capability = FakeCapability(partials=["hi"])
	client = make_client(capability)
	list(client.stream_chat("one"))
	_kind, _prompt, options = capability.calls[0]
	assert options.temperature == 0.8
