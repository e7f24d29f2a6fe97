"""
Byte channels bridging a blocking, seekable-channel contract to Synapse.

ReadChannel streams a presigned download URL forward-only. WriteChannel
buffers into a private scratch file and uploads it when closed.
"""

import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator, Optional, Union

import httpx

from common.constants import (
    CONNECT_TIMEOUT_SECONDS,
    DOWNLOAD_TIMEOUT_SECONDS,
    SCRATCH_FILE_PREFIX,
    SCRATCH_FILE_SUFFIX,
)
from common.exceptions import (
    ChannelClosedError,
    DownloadFailedError,
    UnsupportedOperationError,
)
from common.logging_config import get_logger

if TYPE_CHECKING:
    from synfs.uploader import MultipartUploader

logger = get_logger(__name__)

EOF = -1

Buffer = Union[bytearray, memoryview]


class SeekableByteChannel(ABC):
    """Blocking byte channel with a position, modelled on NIO's SeekableByteChannel."""

    @abstractmethod
    def read(self, buffer: Buffer) -> int:
        """Fill buffer; return the number of bytes read or EOF."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write data; return the number of bytes written."""

    @abstractmethod
    def position(self, new_position: Optional[int] = None) -> int:
        """Return the current position, or move to new_position and return it."""

    @abstractmethod
    def size(self) -> int:
        """Return the channel size in bytes (-1 when unknown)."""

    @abstractmethod
    def truncate(self, size: int) -> "SeekableByteChannel":
        """Truncate the channel to size bytes."""

    @abstractmethod
    def is_open(self) -> bool:
        """Return True until close() has been called."""

    @abstractmethod
    def close(self) -> None:
        """Close the channel; calling it again has no effect."""

    def __enter__(self) -> "SeekableByteChannel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ReadChannel(SeekableByteChannel):
    """
    Read-only, forward-only channel over a presigned download URL.

    The HTTP request is issued lazily, on the first read() or position() query.
    """

    def __init__(
        self,
        presigned_url: str,
        content_size: int,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
    ):
        """
        Args:
            presigned_url: URL returned by the file handle endpoint
            content_size: Size from entity metadata, -1 when unknown
            http_client: Optional client (tests inject one with a MockTransport)
            timeout: Read timeout for the streaming response
        """
        self.presigned_url = presigned_url
        self.content_size = content_size
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout, connect=CONNECT_TIMEOUT_SECONDS),
            follow_redirects=True,
        )
        self._response: Optional[httpx.Response] = None
        self._chunks: Optional[Iterator[bytes]] = None
        self._pending = b""
        self._position = 0
        self._open = True
        self._lock = threading.Lock()

    def _ensure_open(self) -> None:
        with self._lock:
            if not self._open:
                raise ChannelClosedError("Channel is closed")
            if self._response is None:
                self._open_stream()

    def _open_stream(self) -> None:
        logger.debug("Opening stream from presigned URL")
        request = self._http_client.build_request('GET', self.presigned_url)
        response = self._http_client.send(request, stream=True)
        if response.status_code != 200:
            response.close()
            raise DownloadFailedError(
                f"Failed to download file: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        self._response = response
        self._chunks = response.iter_bytes()

    def read(self, buffer: Buffer) -> int:
        self._ensure_open()
        wanted = len(buffer)
        if wanted == 0:
            return 0

        while not self._pending:
            chunk = next(self._chunks, None)
            if chunk is None:
                return EOF
            self._pending = chunk

        count = min(wanted, len(self._pending))
        buffer[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        self._position += count
        return count

    def write(self, data: bytes) -> int:
        raise UnsupportedOperationError("Write not supported (read-only)")

    def position(self, new_position: Optional[int] = None) -> int:
        if new_position is None:
            self._ensure_open()
            return self._position
        if new_position != self._position:
            raise UnsupportedOperationError(
                "Seeking not supported. Synapse downloads are streaming-only."
            )
        return self._position

    def size(self) -> int:
        return self.content_size

    def truncate(self, size: int) -> "ReadChannel":
        raise UnsupportedOperationError("Truncate not supported (read-only)")

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        with self._lock:
            if not self._open:
                return
            self._open = False
            if self._response is not None:
                try:
                    self._response.close()
                except (httpx.HTTPError, OSError) as e:
                    logger.debug(f"Error closing download stream: {e}")
                self._response = None
                self._chunks = None
            if self._owns_client:
                self._http_client.close()


class WriteChannel(SeekableByteChannel):
    """
    Write channel that buffers content to a scratch file and uploads it on close.

    No network activity happens before close().
    """

    def __init__(self, uploader: "MultipartUploader", parent_folder_id: str, file_name: str):
        """
        Args:
            uploader: Upload engine invoked on close
            parent_folder_id: Folder the file is created in
            file_name: Target name, possibly with '/'-separated sub-folders
        """
        self.uploader = uploader
        self.parent_folder_id = parent_folder_id
        self.file_name = file_name
        self.entity_id: Optional[str] = None
        fd, scratch_path = tempfile.mkstemp(prefix=SCRATCH_FILE_PREFIX, suffix=SCRATCH_FILE_SUFFIX)
        self.scratch_path = scratch_path
        self._file = os.fdopen(fd, 'w+b')
        self._open = True
        logger.debug(f"Created writable channel for {file_name} in folder {parent_folder_id}, scratch file: {scratch_path}")

    def read(self, buffer: Buffer) -> int:
        raise UnsupportedOperationError("Read not supported on writable channel")

    def _check_open(self) -> None:
        if not self._open:
            raise ChannelClosedError("Channel is closed")

    def write(self, data: bytes) -> int:
        self._check_open()
        return self._file.write(data)

    def position(self, new_position: Optional[int] = None) -> int:
        self._check_open()
        if new_position is None:
            return self._file.tell()
        return self._file.seek(new_position)

    def size(self) -> int:
        self._check_open()
        self._file.flush()
        return os.fstat(self._file.fileno()).st_size

    def truncate(self, size: int) -> "WriteChannel":
        self._check_open()
        position = self._file.tell()
        self._file.truncate(size)
        if position > size:
            self._file.seek(size)
        return self

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        if not self._open:
            return
        self._open = False

        try:
            self._file.close()
            logger.info(f"Uploading {self.file_name} to Synapse folder {self.parent_folder_id}")
            self.entity_id = self.uploader.upload_file(self.scratch_path, self.parent_folder_id, self.file_name)
            logger.info(f"Upload complete: {self.file_name} ({self.entity_id})")
        finally:
            try:
                os.remove(self.scratch_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to delete scratch file {self.scratch_path}: {e}")
