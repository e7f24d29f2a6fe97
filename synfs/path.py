"""
Virtual paths for Synapse URIs.

Supported forms:
    syn://syn1234567            latest version of an entity (read target)
    syn://syn1234567.5          specific version of an entity (read target)
    syn://syn1234567/a/b.txt    file inside folder syn1234567 (write target)

The "syn://" prefix is optional. A path is either an EntityPath (optional
version) or a WriteTargetPath (relative name), never both.
"""

import functools
import os
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional, Union

from common.constants import URI_PREFIX
from common.exceptions import InvalidArgumentError, InvalidPathError, UnsupportedOperationError
from synfs.display_name import ComputeOnce, resolve_display_name

if TYPE_CHECKING:
    from synfs.filesystem import SynapseFileSystem

ENTITY_ID_PATTERN = re.compile(r'^syn\d+$')
_ENTITY_URI_PATTERN = re.compile(r'^(syn\d+)(?:\.(\d+))?$')
_WRITE_TARGET_URI_PATTERN = re.compile(r'^(syn\d+)/(.+)$', re.DOTALL)


@functools.total_ordering
class VirtualPath:
    """Behaviour shared by EntityPath and WriteTargetPath."""

    entity_id: str
    version: Optional[int]
    relative_name: Optional[str]
    filesystem: Optional["SynapseFileSystem"]

    def _sort_key(self) -> tuple:
        return (self.entity_id, self.version or 0, self.relative_name or "")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VirtualPath):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    @property
    def parent(self) -> Optional["VirtualPath"]:
        raise NotImplementedError

    @property
    def file_name(self) -> "VirtualPath":
        raise NotImplementedError

    @property
    def name_count(self) -> int:
        raise NotImplementedError

    @property
    def is_write_target(self) -> bool:
        return self.relative_name is not None

    @property
    def root(self) -> None:
        return None

    def is_absolute(self) -> bool:
        return True

    def absolute(self) -> "VirtualPath":
        return self

    def normalize(self) -> "VirtualPath":
        return self

    def to_uri(self) -> str:
        return format_uri(self)

    def resolve(self, other: Union[str, os.PathLike, "VirtualPath", None]) -> "VirtualPath":
        """
        Resolve a relative segment against this path.

        Segments are appended to the relative name with '/', so
        parse_uri("syn1").resolve("a").resolve("b") == parse_uri("syn1/a/b").
        Resolving another VirtualPath returns it unchanged.
        """
        if other is None:
            return self
        if isinstance(other, VirtualPath):
            return other
        segment = os.fspath(other).strip('/')
        if not segment:
            return self
        relative_name = f"{self.relative_name}/{segment}" if self.relative_name else segment
        return WriteTargetPath(self.entity_id, relative_name, filesystem=self.filesystem)

    def __truediv__(self, other: Union[str, os.PathLike]) -> "VirtualPath":
        return self.resolve(other)

    def starts_with(self, other: Union[str, "VirtualPath"]) -> bool:
        """Compare a path by equality; compare a string against the display name."""
        if isinstance(other, VirtualPath):
            return self == other
        return str(self) == other

    def ends_with(self, other: Union[str, "VirtualPath"]) -> bool:
        return self.starts_with(other)

    def get_name(self, index: int) -> "VirtualPath":
        if index != 0:
            raise InvalidArgumentError(f"Invalid name index: {index}")
        return self

    def subpath(self, begin_index: int, end_index: int) -> "VirtualPath":
        if (begin_index, end_index) != (0, 1):
            raise InvalidArgumentError(f"Invalid subpath range: [{begin_index}, {end_index})")
        return self

    def __iter__(self) -> Iterator["VirtualPath"]:
        yield self

    def resolve_sibling(self, other) -> "VirtualPath":
        raise UnsupportedOperationError("Cannot resolve sibling paths for Synapse URIs")

    def relativize(self, other) -> "VirtualPath":
        raise UnsupportedOperationError("Cannot relativize Synapse URIs")

    def to_local_path(self):
        raise UnsupportedOperationError("Synapse paths cannot be converted to local paths")

    def register(self, watcher, *events):
        raise UnsupportedOperationError("Watch not supported for Synapse paths")

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True, eq=True)
class EntityPath(VirtualPath):
    """Path naming an existing entity, optionally at a specific version."""

    entity_id: str
    version: Optional[int] = None
    filesystem: Optional["SynapseFileSystem"] = field(default=None, compare=False, repr=False)
    _display: ComputeOnce = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        if not ENTITY_ID_PATTERN.match(self.entity_id or ""):
            raise InvalidPathError(f"Invalid Synapse ID: {self.entity_id!r}")
        if self.version is not None and self.version < 0:
            raise InvalidPathError(f"Invalid version for {self.entity_id}: {self.version}")
        object.__setattr__(self, '_display', ComputeOnce(self._lookup_display_name))

    def _lookup_display_name(self) -> str:
        lookup = self.filesystem.client.get_entity if self.filesystem is not None else None
        return resolve_display_name(self.entity_id, self.version, lookup)

    @property
    def relative_name(self) -> None:
        return None

    @property
    def has_version(self) -> bool:
        return self.version is not None

    @property
    def display_name(self) -> str:
        return self._display.get()

    @property
    def parent(self) -> None:
        return None

    @property
    def file_name(self) -> "EntityPath":
        return self

    @property
    def name_count(self) -> int:
        return 1


@dataclass(frozen=True, eq=True)
class WriteTargetPath(VirtualPath):
    """Path naming a not-yet-existing file inside folder `entity_id`."""

    entity_id: str
    relative_name: str
    filesystem: Optional["SynapseFileSystem"] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not ENTITY_ID_PATTERN.match(self.entity_id or ""):
            raise InvalidPathError(f"Invalid Synapse ID: {self.entity_id!r}")
        if not self.relative_name:
            raise InvalidPathError(f"Write target under {self.entity_id} needs a file name")

    @property
    def version(self) -> None:
        return None

    @property
    def has_version(self) -> bool:
        return False

    @property
    def parent_folder_id(self) -> str:
        return self.entity_id

    @property
    def display_name(self) -> str:
        return self.relative_name.rsplit('/', 1)[-1]

    @property
    def parent(self) -> EntityPath:
        return EntityPath(self.entity_id, filesystem=self.filesystem)

    @property
    def file_name(self) -> "WriteTargetPath":
        return WriteTargetPath(self.entity_id, self.display_name, filesystem=self.filesystem)

    @property
    def name_count(self) -> int:
        return 2


def parse_uri(raw_uri: str, filesystem: Optional["SynapseFileSystem"] = None) -> VirtualPath:
    """
    Parse a Synapse URI into a virtual path.

    Args:
        raw_uri: URI such as "syn://syn123", "syn123.4" or "syn://syn123/dir/file.txt"
        filesystem: Filesystem used for display-name lookups

    Returns:
        EntityPath or WriteTargetPath

    Raises:
        InvalidPathError: If the URI matches neither form
    """
    if raw_uri is None:
        raise InvalidPathError("Invalid Synapse URI: None")

    path = raw_uri[len(URI_PREFIX):] if raw_uri.startswith(URI_PREFIX) else raw_uri
    path = path.rstrip('/')

    match = _WRITE_TARGET_URI_PATTERN.match(path)
    if match:
        return WriteTargetPath(match.group(1), match.group(2), filesystem=filesystem)

    match = _ENTITY_URI_PATTERN.match(path)
    if not match:
        raise InvalidPathError(
            f"Invalid Synapse URI: {raw_uri}. "
            "Expected format: syn://syn1234567, syn://syn1234567.5, or syn://syn1234567/filename.txt"
        )
    version = int(match.group(2)) if match.group(2) is not None else None
    return EntityPath(match.group(1), version, filesystem=filesystem)


def format_uri(path: VirtualPath) -> str:
    """Format a virtual path back into its canonical syn:// URI."""
    if path.relative_name is not None:
        return f"{URI_PREFIX}{path.entity_id}/{path.relative_name}"
    if path.version is not None:
        return f"{URI_PREFIX}{path.entity_id}.{path.version}"
    return f"{URI_PREFIX}{path.entity_id}"
