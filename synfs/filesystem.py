"""
Virtual filesystem façade for the "syn" URI scheme.

SynapseFileSystemProvider dispatches path operations to the byte channels
and the multipart uploader; SynapseFileSystem owns the REST client and the
configuration shared by every path it creates.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

import httpx

from client.config import SynapseConfig
from client.protocol import SynapseTransport
from client.synapse_client import SynapseClient
from common.constants import COPY_BUFFER_SIZE_BYTES, PARTIAL_DOWNLOAD_SUFFIX, SCHEME
from common.exceptions import (
    InvalidArgumentError,
    NoFileHandleError,
    NotAFileError,
    NotAFolderError,
    NotFoundError,
    UnsupportedOperationError,
)
from common.logging_config import get_logger
from common.types import WRITE_OPTIONS, AccessMode, OpenOption
from synfs.attributes import BASIC_ATTRIBUTE_NAMES, SynapseFileAttributes
from synfs.channels import EOF, ReadChannel, SeekableByteChannel, WriteChannel
from synfs.path import VirtualPath, WriteTargetPath, parse_uri
from synfs.uploader import MultipartUploader

logger = get_logger(__name__)

LocalPath = Union[str, os.PathLike]


class EmptyDirectoryStream:
    """Directory stream that yields nothing; Synapse folders are not listed."""

    def __init__(self, directory: VirtualPath):
        self.directory = directory
        self.closed = False

    def __iter__(self) -> Iterator[VirtualPath]:
        return iter(())

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "EmptyDirectoryStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SynapseFileSystem:
    """A single open Synapse filesystem: client, config and uploader."""

    def __init__(
        self,
        provider: "SynapseFileSystemProvider",
        config: SynapseConfig,
        client: Optional[SynapseTransport] = None,
        storage_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            provider: Provider that created this filesystem
            config: Endpoint, token and timeout configuration
            client: REST transport (defaults to a SynapseClient built from config)
            storage_client: HTTP client for presigned storage URLs (tests inject a MockTransport)
        """
        self.provider = provider
        self._config = config
        self._owns_client = client is None
        self._client = client if client is not None else SynapseClient(config)
        self.storage_client = storage_client
        self._uploader: Optional[MultipartUploader] = None
        self._open = True
        self._lock = threading.Lock()

    @property
    def client(self) -> SynapseTransport:
        return self._client

    @property
    def config(self) -> SynapseConfig:
        return self._config

    @property
    def uploader(self) -> MultipartUploader:
        with self._lock:
            if self._uploader is None:
                self._uploader = MultipartUploader(
                    self._client,
                    http_client=self.storage_client,
                    part_timeout=self._config.get_timeouts()['upload_part'],
                )
            return self._uploader

    def close(self) -> None:
        """Mark the filesystem closed and release the HTTP clients it created."""
        with self._lock:
            self._open = False
            if self._uploader is not None and self.storage_client is None:
                self._uploader.close()
            if self._owns_client:
                self._client.close()
        logger.debug("Synapse filesystem closed")

    def is_open(self) -> bool:
        return self._open

    def is_read_only(self) -> bool:
        return False

    @property
    def separator(self) -> str:
        return '/'

    def get_path(self, first: str, *more: str) -> VirtualPath:
        """
        Build a path from one or more segments joined with '/'.

        get_path("syn123", "dir", "file.txt") == get_path("syn://syn123/dir/file.txt")
        """
        raw = '/'.join([first, *more]) if more else first
        return parse_uri(raw, filesystem=self)

    @property
    def root_directories(self) -> list:
        return []

    @property
    def file_stores(self) -> list:
        return []

    @property
    def supported_file_attribute_views(self) -> set:
        return {"basic"}

    def get_path_matcher(self, syntax_and_pattern: str):
        raise UnsupportedOperationError("Path matchers not supported")

    def new_watch_service(self):
        raise UnsupportedOperationError("Watch service not supported")

    def get_user_principal_lookup_service(self):
        raise UnsupportedOperationError("User principal lookup not supported")


class SynapseFileSystemProvider:
    """Filesystem provider for the "syn" URI scheme."""

    _instance: Optional["SynapseFileSystemProvider"] = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._filesystem: Optional[SynapseFileSystem] = None
        self._lock = threading.Lock()

    @classmethod
    def instance(cls) -> "SynapseFileSystemProvider":
        """Return the process-wide provider."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def scheme(self) -> str:
        return SCHEME

    def new_file_system(
        self,
        config: Optional[SynapseConfig] = None,
        client: Optional[SynapseTransport] = None,
        storage_client: Optional[httpx.Client] = None,
    ) -> SynapseFileSystem:
        """
        Return the open filesystem, or create one.

        Args:
            config: Configuration (defaults to ~/.synfs/config.json)
            client: REST transport override
            storage_client: HTTP client override for presigned URLs
        """
        with self._lock:
            if self._filesystem is not None and self._filesystem.is_open():
                return self._filesystem
            self._filesystem = SynapseFileSystem(
                self,
                config or SynapseConfig(),
                client=client,
                storage_client=storage_client,
            )
            return self._filesystem

    def get_file_system(self) -> Optional[SynapseFileSystem]:
        with self._lock:
            return self._filesystem

    def get_path(self, uri: str) -> VirtualPath:
        fs = self.get_file_system() or self.new_file_system()
        return parse_uri(uri, filesystem=fs)

    def _filesystem_for(self, path: VirtualPath) -> SynapseFileSystem:
        if path.filesystem is not None:
            return path.filesystem
        return self.get_file_system() or self.new_file_system()

    @staticmethod
    def _to_virtual_path(path) -> VirtualPath:
        if isinstance(path, VirtualPath):
            return path
        raise InvalidArgumentError(f"Expected a Synapse path but got: {type(path).__name__}")

    def new_byte_channel(self, path: VirtualPath, options: Iterable[OpenOption] = ()) -> SeekableByteChannel:
        """
        Open a byte channel.

        WRITE, CREATE or CREATE_NEW open a WriteChannel on a write-target path;
        anything else opens a ReadChannel on a FileEntity.
        """
        path = self._to_virtual_path(path)
        fs = self._filesystem_for(path)

        if WRITE_OPTIONS.intersection(options):
            if not isinstance(path, WriteTargetPath):
                raise InvalidArgumentError(
                    f"Cannot write to {path.entity_id}: path must include a filename "
                    "(e.g., syn://folder/filename.txt)"
                )
            return WriteChannel(fs.uploader, path.parent_folder_id, path.relative_name)

        entity = fs.client.get_entity(path.entity_id, path.version)
        if not entity.is_file:
            raise NotAFileError(
                f"Cannot read {path.entity_id}: entity is a {entity.type_name}, not a file. "
                "Only FileEntity types can be downloaded."
            )
        if not entity.data_file_handle_id:
            raise NoFileHandleError(f"No file handle found for {path.entity_id}")

        presigned_url = fs.client.get_presigned_download_url(path.entity_id, entity.data_file_handle_id)
        content_size = entity.file_size if entity.file_size is not None else -1
        return ReadChannel(
            presigned_url,
            content_size,
            http_client=fs.storage_client,
            timeout=fs.config.get_timeouts()['download'],
        )

    def new_directory_stream(
        self,
        path: VirtualPath,
        path_filter: Optional[Callable[[VirtualPath], bool]] = None
    ) -> EmptyDirectoryStream:
        return EmptyDirectoryStream(self._to_virtual_path(path))

    def create_directory(self, path: VirtualPath) -> None:
        """
        Verify that the folder behind path exists; folders are never created here.

        Raises:
            NotAFolderError: If the entity is not a Synapse Folder
        """
        path = self._to_virtual_path(path)
        fs = self._filesystem_for(path)
        folder_id = path.entity_id
        if not fs.client.is_folder(folder_id):
            raise NotAFolderError(
                f"Cannot create directory: {folder_id} is not a Synapse Folder. "
                "Parent folder must already exist in Synapse."
            )
        logger.debug(f"Directory creation request for existing Synapse folder: {folder_id}")

    def delete(self, path: VirtualPath) -> None:
        logger.debug(f"Delete requested for Synapse path {path.to_uri()} - ignoring")

    def copy(self, source: Union[VirtualPath, LocalPath], target: Union[VirtualPath, LocalPath]) -> None:
        """
        Copy between the local filesystem and Synapse.

        Exactly one of source and target must be a Synapse path.
        """
        source_virtual = isinstance(source, VirtualPath)
        target_virtual = isinstance(target, VirtualPath)

        if target_virtual and not source_virtual:
            self.upload(source, target)
        elif source_virtual and not target_virtual:
            self._download_to_local(source, target)
        elif source_virtual and target_virtual:
            raise UnsupportedOperationError("Copy between Synapse paths is not supported")
        else:
            raise InvalidArgumentError("Copy requires a Synapse path as source or target")

    def upload(self, source: LocalPath, target: VirtualPath) -> str:
        """
        Upload a local file to target and return the new entity id.

        A write target names the file (and any sub-folders); an entity path
        names the folder and the source base name is used.
        """
        logger.debug(f"Uploading local file {source} to Synapse {target.to_uri()}")
        fs = self._filesystem_for(target)
        if isinstance(target, WriteTargetPath):
            parent_folder_id = target.parent_folder_id
            file_name = target.relative_name
        else:
            parent_folder_id = target.entity_id
            file_name = Path(source).name
        return fs.uploader.upload_file(source, parent_folder_id, file_name)

    def _download_to_local(self, source: VirtualPath, target: LocalPath) -> None:
        logger.debug(f"Downloading Synapse {source.to_uri()} to local file {target}")
        target_path = Path(target)
        buffer = bytearray(COPY_BUFFER_SIZE_BYTES)
        fd, partial_path = tempfile.mkstemp(
            prefix=f'.{target_path.name}.', suffix=PARTIAL_DOWNLOAD_SUFFIX, dir=target_path.parent
        )
        try:
            # The target is only replaced once the whole body has arrived
            with os.fdopen(fd, 'wb') as out, self.new_byte_channel(source) as channel:
                while True:
                    count = channel.read(buffer)
                    if count == EOF:
                        break
                    out.write(buffer[:count])
            os.replace(partial_path, target_path)
        finally:
            if os.path.exists(partial_path):
                os.remove(partial_path)

    def move(self, source, target) -> None:
        raise UnsupportedOperationError("Move not supported")

    def is_same_file(self, first: VirtualPath, second: VirtualPath) -> bool:
        return self._to_virtual_path(first) == self._to_virtual_path(second)

    def is_hidden(self, path: VirtualPath) -> bool:
        return False

    def get_file_store(self, path: VirtualPath):
        raise UnsupportedOperationError("FileStore not supported")

    def check_access(self, path: VirtualPath, *modes: AccessMode) -> None:
        """
        Check that path can be accessed.

        Write targets do not exist yet, so they always raise NotFoundError.
        WRITE access requires a Folder; any other access requires the entity to exist.
        """
        path = self._to_virtual_path(path)
        fs = self._filesystem_for(path)

        if isinstance(path, WriteTargetPath):
            raise NotFoundError(
                f"{path.relative_name}: Synapse folder/file paths are write-only destinations"
            )

        if AccessMode.WRITE in modes:
            if not fs.client.is_folder(path.entity_id):
                raise NotAFolderError(
                    f"Write access requires a Folder entity, but {path.entity_id} is not a Folder"
                )
            return

        fs.client.get_entity(path.entity_id, path.version)

    def read_attributes(self, path: VirtualPath) -> SynapseFileAttributes:
        path = self._to_virtual_path(path)
        fs = self._filesystem_for(path)
        return SynapseFileAttributes(fs.client.get_entity(path.entity_id, path.version))

    def read_attributes_map(self, path: VirtualPath, attributes: str = "basic:*") -> dict:
        """
        Read attributes by name, e.g. "basic:*", "*" or "size".

        Raises:
            UnsupportedOperationError: For views other than "basic"
        """
        view, _, names = attributes.rpartition(':')
        if view and view != "basic":
            raise UnsupportedOperationError(f"Attribute view '{view}' not supported")

        attrs = self.read_attributes(path)
        wanted = BASIC_ATTRIBUTE_NAMES if names == '*' else [n.strip() for n in names.split(',')]
        return {name: getattr(attrs, name)() for name in wanted if name in BASIC_ATTRIBUTE_NAMES}

    def set_attribute(self, path: VirtualPath, attribute: str, value) -> None:
        raise UnsupportedOperationError("Setting attributes not supported")
