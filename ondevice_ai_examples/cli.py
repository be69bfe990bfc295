#!/usr/bin/env python3
"""
Command line interface for ondevice-ai-examples.
"""

# Standard Library
import argparse
import logging
import sys

# local repo modules
from .availability import AppleAvailabilityGate, OllamaAvailabilityGate, _ollama_available
from .chat import ChatOrchestrator, ConversationTurn
from .client import GenerationClient
from .config import AppConfig, parse_temperature
from .errors import GenerationError, ModelUnavailableError, describe_error
from .examples import ExampleRunner, ExampleType, format_palette
from .schemas import HarmonyType
from .transports import AppleTransport, OllamaTransport

#============================================


EXAMPLE_CHOICES = [example.value for example in ExampleType] + ["palette"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse CLI arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Run on-device language model examples: respond, stream, structured, tools, chat."
	)
	parser.add_argument(
		"-e",
		"--example",
		dest="example",
		choices=EXAMPLE_CHOICES,
		default="basic",
		help="Example to run (default basic).",
	)
	parser.add_argument(
		"-p",
		"--prompt",
		dest="prompt",
		help="Override the example's default prompt.",
	)
	parser.add_argument(
		"-i",
		"--instructions",
		dest="instructions",
		help="Session instructions for single-shot examples.",
	)
	parser.add_argument(
		"-t",
		"--temperature",
		dest="temperature",
		type=parse_temperature,
		help="Sampling temperature between 0 and 2.",
	)
	parser.add_argument(
		"--max-tokens",
		dest="max_tokens",
		type=int,
		help="Maximum response tokens.",
	)
	parser.add_argument(
		"--llm-backend",
		dest="llm_backend",
		choices=["macos", "ollama"],
		default="macos",
		help="Choose LLM backend: macos (default) or ollama.",
	)
	parser.add_argument(
		"-o",
		"--model",
		dest="model",
		help="Override Ollama model name.",
	)
	parser.add_argument(
		"--ollama-url",
		dest="ollama_url",
		default="http://localhost:11434",
		help="Ollama server URL.",
	)
	parser.add_argument(
		"-c",
		"--base-color",
		dest="base_color",
		default="#1E40AF",
		help="Base color for the palette example.",
	)
	parser.add_argument(
		"--harmony",
		dest="harmony",
		choices=[harmony.value for harmony in HarmonyType],
		default=HarmonyType.COMPLEMENTARY.value,
		help="Color harmony for the palette example.",
	)
	parser.add_argument(
		"--open-settings",
		dest="open_settings",
		action="store_true",
		help="Open Apple Intelligence settings when it is disabled.",
	)
	parser.add_argument(
		"-v",
		"--verbose",
		dest="verbose",
		action="store_true",
		help="Verbose logging.",
	)
	return parser.parse_args(argv)


#============================================


def build_config(args: argparse.Namespace) -> AppConfig:
	"""
	Build runtime config from args.
	"""
	config = AppConfig()
	if args.llm_backend:
		config.llm_backend = args.llm_backend
	if args.model:
		config.model_override = args.model
	if args.ollama_url:
		config.ollama_url = args.ollama_url
	config.temperature = args.temperature
	if args.max_tokens:
		config.max_tokens = args.max_tokens
	config.verbose = args.verbose
	return config


#============================================


def build_client(config: AppConfig) -> GenerationClient:
	"""
	Instantiate the generation client for the selected backend.

	Args:
		config: Application configuration.

	Returns:
		GenerationClient instance.
	"""
	base_url = config.ollama_url
	if config.llm_backend == "ollama":
		if not _ollama_available(base_url):
			raise RuntimeError("Ollama backend selected but service is not reachable.")
		return _ollama_client(config)
	apple_gate = AppleAvailabilityGate()
	state = apple_gate.check()
	if not state.available and _ollama_available(base_url):
		reason = state.reason.value if state.reason else "unknown"
		logging.warning("Apple Foundation Models unavailable (%s); using Ollama backup.", reason)
		return _ollama_client(config)
	return GenerationClient(AppleTransport(), apple_gate, config)


def _ollama_client(config: AppConfig) -> GenerationClient:
	transport = OllamaTransport(model=config.ollama_model(), base_url=config.ollama_url)
	return GenerationClient(transport, OllamaAvailabilityGate(config.ollama_url), config)


#============================================


def _color(text: str, code: str) -> str:
	if sys.stdout.isatty():
		return f"\033[{code}m{text}\033[0m"
	return text


class StreamPrinter:
	"""
	Prints cumulative partial text as deltas.
	"""

	def __init__(self) -> None:
		self.last_text = ""

	def start(self) -> None:
		self.last_text = ""

	def write(self, text: str) -> None:
		if text.startswith(self.last_text):
			print(text[len(self.last_text):], end="", flush=True)
		else:
			print("\n" + text, end="", flush=True)
		self.last_text = text

	def on_turn(self, turn: ConversationTurn) -> None:
		self.write(turn.text)


def _print_error(exc: BaseException) -> None:
	print(f"{_color('[ERROR]', '31')} {describe_error(exc)}")
	if isinstance(exc, ModelUnavailableError) and exc.reason is not None:
		print(f"{_color('[ERROR]', '31')} {exc.reason.title}: {exc.reason.description}")
		if exc.reason.action_title:
			print(f"{_color('[HINT]', '33')} {exc.reason.action_title} (--open-settings)")


#============================================


def run_example(client: GenerationClient, args: argparse.Namespace) -> int:
	"""
	Run one non-chat example and print its output.

	Returns:
		Process exit status.
	"""
	runner = ExampleRunner(client)
	if args.example == "palette":
		try:
			palette = runner.generate_palette(args.base_color, HarmonyType(args.harmony))
		except GenerationError as exc:
			_print_error(exc)
			return 1
		print(format_palette(palette))
		return 0
	example = ExampleType(args.example)
	print(f"{_color('[EXAMPLE]', '34')} {example.title}: {example.subtitle}")
	printer = StreamPrinter()
	streaming = example is ExampleType.STREAMING_RESPONSE
	result = runner.run(
		example,
		prompt=args.prompt,
		on_partial=printer.write if streaming else None,
		instructions=args.instructions,
	)
	if result.error is not None:
		if streaming:
			print()
		_print_error(result.error)
		return 1
	if streaming:
		print()
	else:
		print(result.text)
	return 0


def run_chat(client: GenerationClient, config: AppConfig) -> None:
	"""
	Interactive chat loop. Ctrl-C stops the reply in progress.
	"""
	printer = StreamPrinter()
	chat = ChatOrchestrator(client, options=config.chat_options(), on_update=printer.on_turn)
	print(f"{_color('[CHAT]', '34')} /reset clears the conversation, /quit exits.")
	while True:
		try:
			line = input(_color("you> ", "32"))
		except (EOFError, KeyboardInterrupt):
			print()
			break
		command = line.strip()
		if command in ("/quit", "/exit"):
			break
		if command == "/reset":
			chat.reset()
			print(f"{_color('[CHAT]', '34')} conversation cleared")
			continue
		printer.start()
		if not chat.submit(line):
			continue
		try:
			while not chat.wait(timeout=0.1):
				pass
		except KeyboardInterrupt:
			chat.cancel()
			chat.wait()
			print(f"\n{_color('[CHAT]', '34')} reply stopped", end="")
		print()
		if chat.last_error is not None:
			_print_error(chat.last_error)


#============================================


def main(argv: list[str] | None = None) -> None:
	"""
	Entry point for the CLI.
	"""
	args = parse_args(argv)
	config = build_config(args)
	if config.verbose:
		logging.basicConfig(level=logging.INFO)
	else:
		logging.basicConfig(level=logging.WARNING)
	client = build_client(config)
	if args.open_settings and isinstance(client.gate, AppleAvailabilityGate):
		if client.gate.perform_action():
			print(f"{_color('[HINT]', '33')} Opened Apple Intelligence settings.")
	if args.example == ExampleType.INTERACTIVE_CHAT.value:
		run_chat(client, config)
		return
	sys.exit(run_example(client, args))


#============================================


if __name__ == "__main__":
	main()
