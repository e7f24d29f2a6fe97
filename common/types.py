"""Shared data type definitions (PartDescriptor, OpenOption, AccessMode)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


@dataclass(frozen=True)
class PartDescriptor:
    """
    One part of a multipart upload. Lives only for the duration of one upload call.
    """
    part_number: int
    byte_offset: int
    byte_length: int
    md5: str
    presigned_upload_url: str
    signed_headers: Dict[str, str] = field(default_factory=dict)


class OpenOption(Enum):
    """Options accepted when opening a byte channel."""
    READ = "read"
    WRITE = "write"
    APPEND = "append"
    CREATE = "create"
    CREATE_NEW = "create_new"
    TRUNCATE_EXISTING = "truncate_existing"


WRITE_OPTIONS = frozenset({OpenOption.WRITE, OpenOption.CREATE, OpenOption.CREATE_NEW})


class AccessMode(Enum):
    """Access modes checked by check_access."""
    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"
