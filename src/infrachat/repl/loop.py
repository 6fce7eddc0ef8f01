"""Main infrachat REPL loop."""

from __future__ import annotations

import logging
import time
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .. import __version__
from ..domain.config import ClientConfig
from ..formatting import make_borderline
from ..logging import log_event, summarize_command_args
from ..session.controller import SessionController
from .commands import CommandHandler, CommandSignal, is_command, parse_command
from .printer import TranscriptPrinter


PROMPT_TEXT = "> "


def create_prompt_session() -> PromptSession:
    """Create prompt-toolkit session for REPL input."""
    # In-memory only: nothing typed here is written to disk.
    return PromptSession(history=InMemoryHistory())


def print_startup_banner(config: ClientConfig, log_file: Optional[str]) -> None:
    """Print REPL startup context and usage hints."""
    borderline = make_borderline()
    print(borderline)
    print(f"infrachat {__version__} - Infrastructure Chat Client")
    print(borderline)
    print(f"Backend:          {config.base_url}")
    if log_file:
        print(f"Log:              {log_file}")
    print("Type /help for commands • /exit or Ctrl-D to quit")
    print(borderline)


async def handle_command(
    commands: CommandHandler,
    user_input: str,
) -> bool:
    """Run one command and print its result.

    Returns:
        False when the REPL should stop
    """
    command_name, command_args = parse_command(user_input)
    args_summary = summarize_command_args(command_name, command_args)
    try:
        command_started = time.perf_counter()
        result = await commands.execute_command(user_input)
        log_event(
            "command_exec",
            level=logging.INFO,
            command=command_name,
            args_summary=args_summary,
            elapsed_ms=round((time.perf_counter() - command_started) * 1000, 1),
        )
    except ValueError as error:
        log_event(
            "command_error",
            level=logging.ERROR,
            command=command_name,
            args_summary=args_summary,
            error_type=type(error).__name__,
            error=str(error),
        )
        print(f"Error: {error}")
        return True
    except Exception as error:
        log_event(
            "command_error",
            level=logging.ERROR,
            command=command_name,
            args_summary=args_summary,
            error_type=type(error).__name__,
            error=str(error),
        )
        logging.error(
            "Unexpected command error (command=%s): %s",
            command_name,
            error,
            exc_info=True,
        )
        print(f"Error: {error}")
        return True

    if isinstance(result, CommandSignal) and result.kind == "exit":
        return False
    if result:
        print(result)
    return True


async def repl_loop(
    config: ClientConfig,
    *,
    log_file: Optional[str] = None,
    controller: Optional[SessionController] = None,
) -> None:
    """Run the REPL loop."""
    controller = controller or SessionController(config)
    printer = TranscriptPrinter(controller.context.store)
    unsubscribe = controller.subscribe(printer)
    commands = CommandHandler(controller)
    prompt_session = create_prompt_session()

    print_startup_banner(config, log_file)
    log_event(
        "session_start",
        level=logging.INFO,
        base_url=config.base_url,
        log_file=log_file,
        timeout=config.timeout,
    )

    reason = "exit_command"
    try:
        async with controller:
            with patch_stdout():
                await controller.start()
                while True:
                    try:
                        user_input = await prompt_session.prompt_async(PROMPT_TEXT)
                        if not user_input.strip():
                            continue

                        if is_command(user_input):
                            if not await handle_command(commands, user_input):
                                break
                            continue

                        if controller.is_loading:
                            print("Still waiting for the previous request; try again shortly.")
                            continue
                        await controller.send_message(user_input)

                    except EOFError:
                        reason = "eof"
                        break

                    except KeyboardInterrupt:
                        # Ctrl+C clears the current line; it never quits.
                        continue

                    except Exception as error:
                        log_event(
                            "repl_error",
                            level=logging.ERROR,
                            error_type=type(error).__name__,
                            error=str(error),
                        )
                        logging.error("Unexpected REPL error: %s", error, exc_info=True)
                        print(f"Error: {error}")
    finally:
        unsubscribe()
        log_event(
            "session_stop",
            level=logging.INFO,
            reason=reason,
            session_id=controller.session_id,
            message_count=len(controller.context.store),
        )

    print("Goodbye!")
