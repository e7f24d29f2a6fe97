"""Command parser for CLI input."""

import shlex

from cli.models import (
    CheckCommand,
    CommandRequest,
    GetCommand,
    InfoCommand,
    LoginCommand,
    PutCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Login/Info/Get/Put/Check)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "login":
        return _parse_login(tokens[1:])
    elif command_name == "info":
        return _parse_info(tokens[1:])
    elif command_name == "get":
        return _parse_get(tokens[1:])
    elif command_name == "put":
        return _parse_put(tokens[1:])
    elif command_name == "check":
        return _parse_check(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <token>' command."""
    if len(args) != 1:
        raise ParseError("login requires exactly 1 argument: <token>")

    return LoginCommand(token=args[0])


def _parse_info(args: list[str]) -> InfoCommand:
    """Parse 'info <uri>' command."""
    if len(args) != 1:
        raise ParseError("info requires exactly 1 argument: <uri>")

    return InfoCommand(uri=args[0])


def _parse_get(args: list[str]) -> GetCommand:
    """Parse 'get <uri> [output_path]' command."""
    if len(args) not in (1, 2):
        raise ParseError("get requires 1 or 2 arguments: <uri> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return GetCommand(uri=args[0], output_path=output_path)


def _parse_put(args: list[str]) -> PutCommand:
    """Parse 'put <local_path> <uri>' command."""
    if len(args) != 2:
        raise ParseError("put requires exactly 2 arguments: <local_path> <uri>")

    local_path, uri = args
    return PutCommand(local_path=local_path, uri=uri)


def _parse_check(args: list[str]) -> CheckCommand:
    """Parse 'check <uri> [--write]' command."""
    write = "--write" in args
    remaining = [arg for arg in args if arg != "--write"]
    if len(remaining) != 1:
        raise ParseError("check requires exactly 1 argument: <uri> [--write]")

    return CheckCommand(uri=remaining[0], write=write)
