#!/usr/bin/env python3
"""
Tests for CLI config building and LLM backend selection.
"""

import pytest

import ondevice_ai_examples.cli as cli
from conftest import FakeCapability, make_client
from ondevice_ai_examples.availability import AvailabilityState, UnavailabilityReason
from ondevice_ai_examples.config import AppConfig, parse_temperature
from ondevice_ai_examples.transports.apple import AppleTransport
from ondevice_ai_examples.transports.ollama import OllamaTransport


def _gate_returning(state):
	class DummyGate:
		def check(self):
			return state

	return DummyGate


def test_backend_macos_default(monkeypatch):
	monkeypatch.setattr(cli, "AppleAvailabilityGate", _gate_returning(AvailabilityState.ready()))
	monkeypatch.setattr(cli, "_ollama_available", lambda _url: True)
	client = cli.build_client(AppConfig())
	assert isinstance(client.capability, AppleTransport)


def test_backend_macos_falls_back_to_ollama(monkeypatch):
	state = AvailabilityState.unavailable(UnavailabilityReason.CAPABILITY_DISABLED)
	monkeypatch.setattr(cli, "AppleAvailabilityGate", _gate_returning(state))
	monkeypatch.setattr(cli, "_ollama_available", lambda _url: True)
	client = cli.build_client(AppConfig(model_override="tiny"))
	assert isinstance(client.capability, OllamaTransport)
	assert client.capability.model == "tiny"


def test_backend_macos_unavailable_without_ollama_keeps_apple(monkeypatch):
	state = AvailabilityState.unavailable(UnavailabilityReason.MODEL_NOT_READY)
	monkeypatch.setattr(cli, "AppleAvailabilityGate", _gate_returning(state))
	monkeypatch.setattr(cli, "_ollama_available", lambda _url: False)
	client = cli.build_client(AppConfig())
	assert isinstance(client.capability, AppleTransport)
	assert client.gate.check().reason is UnavailabilityReason.MODEL_NOT_READY


def test_backend_ollama_unavailable_raises(monkeypatch):
	monkeypatch.setattr(cli, "_ollama_available", lambda _url: False)
	with pytest.raises(RuntimeError):
		cli.build_client(AppConfig(llm_backend="ollama"))


def test_build_config_from_args():
	args = cli.parse_args(
		["-e", "tool", "-t", "0.3", "--max-tokens", "200", "--llm-backend", "ollama", "-o", "m"]
	)
	config = cli.build_config(args)
	assert config.llm_backend == "ollama"
	assert config.model_override == "m"
	assert config.temperature == 0.3
	assert config.max_tokens == 200
	assert config.generation_options().max_tokens == 200
	assert config.chat_options().temperature == 0.8


@pytest.mark.parametrize("value", ["-0.1", "2.5"])
def test_parse_temperature_out_of_range(value):
	with pytest.raises(ValueError):
		parse_temperature(value)


def test_parse_temperature_blank():
	assert parse_temperature(None) is None
	assert parse_temperature("") is None
	assert parse_temperature("2") == 2.0


def test_run_example_prints_result(capsys):
	client = make_client(FakeCapability(reply="Knock knock."))
	status = cli.run_example(client, cli.parse_args(["-e", "basic"]))
	assert status == 0
	assert "Knock knock." in capsys.readouterr().out


def test_run_example_prints_unavailable_hint(capsys):
	client = make_client(FakeCapability(), reason=UnavailabilityReason.CAPABILITY_DISABLED)
	status = cli.run_example(client, cli.parse_args(["-e", "basic"]))
	out = capsys.readouterr().out
	assert status == 1
	assert "Apple Intelligence Disabled" in out
	assert "Open Settings" in out


def test_stream_printer_prints_deltas(capsys):
	printer = cli.StreamPrinter()
	printer.write("Once")
	printer.write("Once upon")
	assert capsys.readouterr().out == "Once upon"


def test_bad_temperature_is_a_usage_error(capsys):
	with pytest.raises(SystemExit) as info:
		cli.parse_args(["-t", "5"])
	assert info.value.code == 2
	assert "temperature" in capsys.readouterr().err


def test_chat_prompt_interrupt_exits_cleanly(monkeypatch, capsys):
	def interrupted(_prompt):
		raise KeyboardInterrupt

	monkeypatch.setattr("builtins.input", interrupted)
	capability = FakeCapability(partials=["hi"])
	cli.run_chat(make_client(capability), AppConfig())
	assert capability.calls == []
	assert "[CHAT]" in capsys.readouterr().out
