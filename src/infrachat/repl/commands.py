"""REPL command parsing, registration and handlers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Literal, TypeAlias

from ..constants import OPTION_CANCEL
from ..domain.transcript import Message
from ..formatting import format_history_line, format_message
from ..message_ids import is_message_id
from ..timeouts import format_timeout
from ..session.store import MessageStore

if TYPE_CHECKING:
    from ..session.controller import SessionController


CommandSignalKind = Literal["exit"]


@dataclass(slots=True, frozen=True)
class CommandSignal:
    """Structured control-flow signal emitted by command handlers."""

    kind: CommandSignalKind


CommandResult: TypeAlias = str | CommandSignal | None
CommandCallable = Callable[[str], Awaitable[CommandResult]]


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """One command registration entry."""

    name: str
    method_name: str
    usage: str
    help: str
    aliases: tuple[str, ...] = ()


COMMAND_SPECS: tuple[CommandSpec, ...] = (
    CommandSpec("run", "run_decision", "/run <msg>", "Run the command a decision proposes"),
    CommandSpec("cancel", "cancel_decision", "/cancel <msg>", "Cancel a pending decision"),
    CommandSpec("choose", "choose_option", "/choose <msg> <option>", "Resolve a decision with any option"),
    CommandSpec("edit", "edit_parameters", "/edit <intent-id> key=value ...", "Send edited intent parameters"),
    CommandSpec("show", "show_message", "/show [msg]", "Show one message in full (default: last)"),
    CommandSpec("history", "show_history", "/history", "List the transcript"),
    CommandSpec("status", "show_status", "/status", "Show session and connection state"),
    CommandSpec("clear", "clear_session", "/clear", "Discard the transcript and start a new session"),
    CommandSpec("help", "show_help", "/help", "Show this help"),
    CommandSpec("exit", "exit_app", "/exit", "Quit", aliases=("quit",)),
)


def is_command(text: str) -> bool:
    """Check if text is a command (starts with ``/``)."""
    return text.strip().startswith("/")


def parse_command(text: str) -> tuple[str, str]:
    """Parse command text into command and arguments.

    Returns:
        Tuple of (command, args) where command is without ``/``
    """
    text = text.strip()
    if not text.startswith("/"):
        return "", ""

    parts = text[1:].split(None, 1)
    command = parts[0] if parts else ""
    args = parts[1] if len(parts) > 1 else ""
    return command, args


def resolve_message_ref(store: MessageStore, ref: str) -> Message:
    """Resolve a 1-based transcript index or a message id.

    A ref shaped like a generated message id is looked up by id, even when
    its random suffix happens to be all digits.

    Raises:
        ValueError: If nothing matches
    """
    ref = ref.strip()
    if not ref:
        raise ValueError("Message reference is required")

    if ref.isdigit() and not is_message_id(ref):
        index = int(ref)
        messages = store.messages
        if index < 1 or index > len(messages):
            raise ValueError(f"No message #{index} (transcript has {len(messages)})")
        return messages[index - 1]

    message = store.get(ref)
    if message is None:
        raise ValueError(f"Message not found: {ref}")
    return message


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_param_overrides(args: str) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are JSON when they parse as JSON.

    Raises:
        ValueError: On a pair without ``=`` or with an empty key
    """
    overrides: dict[str, Any] = {}
    for pair in args.split():
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got: {pair}")
        overrides[key] = _parse_value(value)
    if not overrides:
        raise ValueError("At least one key=value pair is required")
    return overrides


def _require_decision(message: Message) -> str:
    if not message.decision_id:
        raise ValueError(f"Message {message.id} has no decision")
    return message.decision_id


class CommandHandler:
    """Handles command parsing and execution against a session controller."""

    def __init__(self, controller: SessionController):
        self.controller = controller
        self._command_map = build_command_map(self)

    @property
    def store(self) -> MessageStore:
        return self.controller.context.store

    async def execute_command(self, text: str) -> CommandResult:
        """Execute a command.

        Raises:
            ValueError: If command is invalid
        """
        command, args = parse_command(text)
        if not command:
            raise ValueError("Empty command")

        handler = self._command_map.get(command)
        if handler is None:
            raise ValueError(f"Unknown command: /{command}")
        return await handler(args)

    # ===================================================================
    # Decisions and parameters
    # ===================================================================

    async def run_decision(self, args: str) -> CommandResult:
        message = resolve_message_ref(self.store, args)
        _require_decision(message)
        await self.controller.execute_command(message.id)
        return None

    async def cancel_decision(self, args: str) -> CommandResult:
        message = resolve_message_ref(self.store, args)
        await self.controller.resolve_decision(_require_decision(message), OPTION_CANCEL)
        return None

    async def choose_option(self, args: str) -> CommandResult:
        parts = args.split()
        if len(parts) != 2:
            raise ValueError("Usage: /choose <msg> <option>")
        message = resolve_message_ref(self.store, parts[0])
        await self.controller.resolve_decision(_require_decision(message), parts[1])
        return None

    async def edit_parameters(self, args: str) -> CommandResult:
        intent_id, _, rest = args.strip().partition(" ")
        if not intent_id:
            raise ValueError("Usage: /edit <intent-id> key=value ...")
        overrides = parse_param_overrides(rest)
        if not self.controller.session_id:
            raise ValueError("No active session")
        if await self.controller.send_param_update(intent_id, overrides):
            return f"Sent {len(overrides)} parameter update(s) for {intent_id}"
        return None

    # ===================================================================
    # Inspection
    # ===================================================================

    async def show_message(self, args: str) -> CommandResult:
        if args.strip():
            message = resolve_message_ref(self.store, args)
        else:
            message = self.store.last()
            if message is None:
                return "Transcript is empty"
        index = self.store.index_of(message.id)
        return format_message(message, index + 1 if index is not None else None)

    async def show_history(self, args: str) -> CommandResult:
        messages = self.store.messages
        if not messages:
            return "Transcript is empty"
        return "\n".join(
            format_history_line(message, index)
            for index, message in enumerate(messages, start=1)
        )

    async def show_status(self, args: str) -> CommandResult:
        controller = self.controller
        decision = controller.current_decision
        intent = controller.current_intent
        lines = [
            f"Backend:    {controller.config.base_url}",
            f"Timeout:    {format_timeout(controller.config.timeout)}",
            f"Session:    {controller.session_id or 'none'} ({controller.context.phase})",
            f"Connected:  {'yes' if controller.is_connected else 'no'}",
            f"Loading:    {'yes' if controller.is_loading else 'no'}",
            f"Messages:   {len(self.store)}",
        ]
        if decision is not None:
            lines.append(f"Decision:   {decision.id} ({decision.prompt})")
        if intent is not None:
            lines.append(f"Intent:     {intent.action} {intent.resource}")
        return "\n".join(lines)

    # ===================================================================
    # Session and misc
    # ===================================================================

    async def clear_session(self, args: str) -> CommandResult:
        self.controller.clear()
        return "Transcript cleared; creating a new session..."

    async def show_help(self, args: str) -> CommandResult:
        width = max(len(spec.usage) for spec in COMMAND_SPECS)
        lines = ["Commands:"]
        for spec in COMMAND_SPECS:
            lines.append(f"  {spec.usage.ljust(width)}  {spec.help}")
        lines.append("")
        lines.append("<msg> is a transcript number (see /history) or a message id.")
        lines.append("Anything else is sent to the backend as a message.")
        return "\n".join(lines)

    async def exit_app(self, args: str) -> CommandResult:
        return CommandSignal(kind="exit")


def build_command_map(handler: CommandHandler) -> dict[str, CommandCallable]:
    """Build command string to bound async handler map."""
    command_map: dict[str, CommandCallable] = {}

    for spec in COMMAND_SPECS:
        method = getattr(handler, spec.method_name)
        command_map[spec.name] = method
        for alias in spec.aliases:
            command_map[alias] = method

    return command_map
