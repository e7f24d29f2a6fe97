"""Basic file attributes derived from Synapse entity metadata."""

from datetime import datetime, timezone
from typing import Optional

from client.schemas import EntityMetadata
from common.logging_config import get_logger

logger = get_logger(__name__)

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

BASIC_ATTRIBUTE_NAMES = (
    "size",
    "last_modified_time",
    "last_access_time",
    "creation_time",
    "is_regular_file",
    "is_directory",
    "is_symbolic_link",
    "is_other",
    "file_key",
)


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    Parse a Synapse ISO-8601 timestamp such as "2024-01-15T10:30:00.000Z".

    Returns the epoch when the value is missing or unparseable.
    """
    if not value:
        return EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.debug(f"Could not parse timestamp: {value}")
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SynapseFileAttributes:
    """Read-only view of an entity as basic file attributes."""

    def __init__(self, entity: EntityMetadata):
        self.entity = entity

    def size(self) -> int:
        return self.entity.file_size or 0

    def last_modified_time(self) -> datetime:
        return parse_timestamp(self.entity.modified_on)

    def last_access_time(self) -> datetime:
        # Synapse does not track access times
        return self.last_modified_time()

    def creation_time(self) -> datetime:
        return parse_timestamp(self.entity.created_on)

    def is_regular_file(self) -> bool:
        return self.entity.is_file

    def is_directory(self) -> bool:
        return not self.entity.is_file

    def is_symbolic_link(self) -> bool:
        return False

    def is_other(self) -> bool:
        return False

    def file_key(self) -> str:
        return self.entity.id

    @property
    def name(self) -> str:
        return self.entity.name

    @property
    def content_type(self) -> Optional[str]:
        return self.entity.content_type

    @property
    def md5(self) -> Optional[str]:
        return self.entity.md5

    @property
    def version_number(self) -> Optional[int]:
        return self.entity.version_number

    @property
    def version_label(self) -> Optional[str]:
        return self.entity.version_label

    def to_dict(self) -> dict:
        """Return the basic attributes keyed by name."""
        return {name: getattr(self, name)() for name in BASIC_ATTRIBUTE_NAMES}
