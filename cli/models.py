"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class LoginCommand:
    """Store a Synapse personal access token."""

    token: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class InfoCommand:
    """Show metadata of an entity."""

    uri: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class GetCommand:
    """Download a file entity to a local path."""

    uri: str
    output_path: str | None = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class PutCommand:
    """Upload a local file into a Synapse folder."""

    local_path: str
    uri: str
    command: Literal["put"] = "put"


@dataclass(frozen=True)
class CheckCommand:
    """Check read (or write) access to an entity."""

    uri: str
    write: bool = False
    command: Literal["check"] = "check"


CommandRequest = (
    LoginCommand
    | InfoCommand
    | GetCommand
    | PutCommand
    | CheckCommand
)
