"""CLI entry point."""

import asyncio
import os
import sys

from common.logging_config import setup_logging
from cli.commands import CommandError, close_manager, dispatch_command
from cli.parser import ParseError, parse_tokens
from cli.repl import repl_loop


async def run_once(tokens: list[str]) -> int:
    """Run a single command given on the command line."""
    try:
        cmd = parse_tokens(tokens)
    except ParseError as e:
        print(f"Error: {e}")
        return 2

    try:
        print(await dispatch_command(cmd))
    except CommandError as e:
        print(e)
        return 1
    finally:
        await close_manager()

    return 0


def main() -> None:
    """Entry point for CLI."""
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    # Module loggers propagate to their package logger's handler.
    logger = setup_logging('cli', log_level=log_level)
    setup_logging('uploader', log_level=log_level)
    if debug:
        logger.info("Debug logging enabled")

    try:
        if args:
            sys.exit(asyncio.run(run_once(args)))
        asyncio.run(repl_loop())
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
