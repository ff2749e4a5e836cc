"""Command parser for CLI input."""

import shlex

from cli.models import (
    ChunksSizeCommand,
    CommandRequest,
    DeleteCommand,
    GetCommand,
    ListCommand,
    SetIdentityCommand,
    StoreCommand,
    VersionCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse a line of user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    return parse_tokens(tokens)


def parse_tokens(tokens: list[str]) -> CommandRequest:
    """Parse pre-split tokens (e.g. sys.argv[1:]) into a CommandRequest."""
    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "store":
        return _parse_store(args)
    elif command_name == "get":
        return GetCommand(asset_id=_single_argument("get", "<asset-id>", args))
    elif command_name == "list":
        _no_arguments("list", args)
        return ListCommand()
    elif command_name == "delete":
        return DeleteCommand(asset_id=_single_argument("delete", "<asset-id>", args))
    elif command_name == "version":
        _no_arguments("version", args)
        return VersionCommand()
    elif command_name == "chunks-size":
        _no_arguments("chunks-size", args)
        return ChunksSizeCommand()
    elif command_name == "set-identity":
        return SetIdentityCommand(identity=_single_argument("set-identity", "<identity>", args))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_store(args: list[str]) -> StoreCommand:
    """Parse 'store <path> [--content-type T] [--filename N]' command."""
    path = None
    options = {"--content-type": None, "--filename": None}

    index = 0
    while index < len(args):
        arg = args[index]
        if arg in options:
            if index + 1 >= len(args):
                raise ParseError(f"{arg} requires a value")
            options[arg] = args[index + 1]
            index += 2
            continue
        if arg.startswith("--"):
            raise ParseError(f"Unknown option for store: {arg}")
        if path is not None:
            raise ParseError("store accepts exactly one file path")
        path = arg
        index += 1

    if path is None:
        raise ParseError("store requires a file path")

    return StoreCommand(
        path=path,
        content_type=options["--content-type"],
        filename=options["--filename"],
    )


def _single_argument(command: str, usage: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command} requires exactly 1 argument: {usage}")
    return args[0]


def _no_arguments(command: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{command} takes no arguments")
