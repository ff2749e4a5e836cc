"""REPL with prompt_toolkit for user interaction."""

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import CommandError, close_manager, dispatch_command
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.parser import ParseError, parse_command


async def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    completer = WordCompleter(COMMANDS, ignore_case=True)
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=completer, history=history, style=STYLE
    )

    print(WELCOME_TITLE)
    print(WELCOME_HELP)

    try:
        while True:
            try:
                user_input = await session.prompt_async([("class:prompt", PROMPT_TEXT)])

                if not user_input.strip():
                    continue

                if user_input.strip() == "exit":
                    print("Goodbye!")
                    break

                if user_input.strip() == "help":
                    print(HELP_TEXT)
                    continue

                cmd_obj = parse_command(user_input)
                print(await dispatch_command(cmd_obj))

            except ParseError as e:
                print(f"Error: {e}")
            except CommandError as e:
                print(e)
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        await close_manager()
