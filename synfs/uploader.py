"""
Multipart upload of local files into Synapse folders.

Streams from disk: the whole-file MD5 is computed in fixed-size chunks and
each part is read with a seek, so memory use is bounded by the part size.
Parts are uploaded sequentially and nothing is retried.
"""

import math
import os
from pathlib import Path
from typing import Optional, Union

import httpx

from client.protocol import SynapseTransport
from common.checksum import compute_file_md5, compute_md5, read_file_part
from common.constants import (
    CONNECT_TIMEOUT_SECONDS,
    MAX_PART_SIZE_BYTES,
    MAX_PARTS,
    MD5_CHUNK_SIZE_BYTES,
    MIN_PART_SIZE_BYTES,
    UPLOAD_PART_TIMEOUT_SECONDS,
)
from common.content_types import detect_content_type
from common.exceptions import (
    FileTooLargeError,
    InvalidArgumentError,
    PartUploadFailedError,
)
from common.logging_config import get_logger
from common.types import PartDescriptor

logger = get_logger(__name__)


def calculate_part_size(
    file_size: int,
    min_part_size: int = MIN_PART_SIZE_BYTES,
    max_part_size: int = MAX_PART_SIZE_BYTES,
    max_parts: int = MAX_PARTS,
) -> int:
    """
    Calculate the part size for a file.

    Starts at min_part_size and doubles while the file would need more than
    max_parts parts.

    Raises:
        FileTooLargeError: If the part size would exceed max_part_size
    """
    part_size = min_part_size
    while file_size / part_size > max_parts:
        part_size *= 2
        if part_size > max_part_size:
            raise FileTooLargeError(
                f"File size {file_size} is too large. "
                f"Maximum supported file size is {max_parts * max_part_size} bytes."
            )
    return part_size


def count_parts(file_size: int, part_size: int) -> int:
    """Number of parts needed for file_size bytes; zero for an empty file."""
    return math.ceil(file_size / part_size)


def split_file_name(file_name: str) -> tuple[Optional[str], str]:
    """
    Split "a/b/file.txt" into ("a/b", "file.txt").

    Returns (None, file_name) when there is no folder component.
    """
    last_slash = file_name.rfind('/')
    if last_slash > 0:
        return file_name[:last_slash], file_name[last_slash + 1:]
    return None, file_name.lstrip('/')


class MultipartUploader:
    """Uploads local files to Synapse using the multipart upload API."""

    def __init__(
        self,
        transport: SynapseTransport,
        http_client: Optional[httpx.Client] = None,
        min_part_size: int = MIN_PART_SIZE_BYTES,
        max_part_size: int = MAX_PART_SIZE_BYTES,
        max_parts: int = MAX_PARTS,
        md5_chunk_size: int = MD5_CHUNK_SIZE_BYTES,
        part_timeout: float = UPLOAD_PART_TIMEOUT_SECONDS,
    ):
        """
        Initialize the uploader.

        Args:
            transport: Synapse REST transport
            http_client: Client used for presigned part uploads (tests inject a MockTransport)
            min_part_size: Smallest part size in bytes
            max_part_size: Largest part size in bytes
            max_parts: Maximum number of parts the storage backend accepts
            md5_chunk_size: Streaming window for whole-file MD5
            part_timeout: Timeout for a single part upload in seconds
        """
        self.transport = transport
        self.http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(part_timeout, connect=CONNECT_TIMEOUT_SECONDS),
            follow_redirects=True,
        )
        self.min_part_size = min_part_size
        self.max_part_size = max_part_size
        self.max_parts = max_parts
        self.md5_chunk_size = md5_chunk_size

    def calculate_part_size(self, file_size: int) -> int:
        return calculate_part_size(file_size, self.min_part_size, self.max_part_size, self.max_parts)

    def compute_md5(self, source: Union[str, os.PathLike]) -> str:
        return compute_file_md5(source, self.md5_chunk_size)

    def ensure_folder_path(self, base_folder_id: str, relative_path: Optional[str]) -> str:
        """
        Ensure every folder of relative_path exists below base_folder_id.

        Not transactional: concurrent callers may both create the same folder.

        Args:
            base_folder_id: Root Synapse folder ID
            relative_path: Path like "results/qc" (without the file name)

        Returns:
            ID of the deepest folder
        """
        if not relative_path:
            return base_folder_id

        current_parent_id = base_folder_id
        for folder_name in relative_path.split('/'):
            if not folder_name:
                continue
            existing = self._find_child_folder(current_parent_id, folder_name)
            if existing is not None:
                current_parent_id = existing
            else:
                current_parent_id = self.transport.create_folder(current_parent_id, folder_name)
                logger.info(f"Created folder '{folder_name}' ({current_parent_id}) under {base_folder_id}")
        return current_parent_id

    def _find_child_folder(self, parent_id: str, folder_name: str) -> Optional[str]:
        for child in self.transport.list_children(parent_id):
            if child.name == folder_name and child.is_folder:
                return child.id
        return None

    def upload_file(
        self,
        source: Union[str, os.PathLike],
        parent_folder_id: str,
        file_name: Optional[str] = None
    ) -> str:
        """
        Upload a local file into a Synapse folder.

        Args:
            source: Local file to upload
            parent_folder_id: Synapse ID of the destination folder
            file_name: Name in Synapse, may contain sub-folders (defaults to the source name)

        Returns:
            Synapse ID of the created FileEntity
        """
        source = Path(source)
        if file_name is None:
            file_name = source.name

        file_size = source.stat().st_size
        part_size = self.calculate_part_size(file_size)

        folder_path, actual_file_name = split_file_name(file_name)
        logger.info(f"Uploading file '{actual_file_name}' to Synapse folder {parent_folder_id}")

        if not self.transport.is_folder(parent_folder_id):
            raise InvalidArgumentError(f"Cannot write to {parent_folder_id}: not a Folder")

        target_folder_id = self.ensure_folder_path(parent_folder_id, folder_path)

        md5_hex = self.compute_md5(source)
        logger.debug(f"File size: {file_size} bytes, MD5: {md5_hex}, part size: {part_size} bytes")

        session = self.transport.start_multipart_upload(
            actual_file_name, file_size, md5_hex, detect_content_type(actual_file_name), part_size
        )
        logger.debug(f"Started multipart upload: {session.upload_id} (status: {session.state})")

        if session.is_completed:
            logger.info("Upload already completed (file exists in Synapse)")
            file_handle_id = session.result_file_handle_id
        else:
            num_parts = count_parts(file_size, part_size)
            logger.debug(f"Uploading {num_parts} parts")
            for part_number in range(1, num_parts + 1):
                self._upload_part(source, session.upload_id, part_number, part_size, file_size)

            completed = self.transport.complete_multipart_upload(session.upload_id)
            file_handle_id = completed.result_file_handle_id
            logger.debug(f"Upload complete, file handle: {file_handle_id}")

        entity_id = self.transport.create_file_entity(target_folder_id, actual_file_name, file_handle_id)
        logger.info(f"Created FileEntity {entity_id} in folder {target_folder_id}")
        return entity_id

    def _upload_part(
        self,
        source: Path,
        upload_id: str,
        part_number: int,
        part_size: int,
        file_size: int
    ) -> PartDescriptor:
        logger.debug(f"Uploading part {part_number}")

        presigned = self.transport.get_presigned_upload_urls(upload_id, [part_number])
        if not presigned:
            raise PartUploadFailedError(
                f"Failed to get presigned URL for part {part_number}", part_number=part_number
            )

        offset = (part_number - 1) * part_size
        length = min(part_size, file_size - offset)
        data = read_file_part(source, offset, length)
        part = PartDescriptor(
            part_number=part_number,
            byte_offset=offset,
            byte_length=length,
            md5=compute_md5(data),
            presigned_upload_url=presigned[0].upload_presigned_url,
            signed_headers=dict(presigned[0].signed_headers),
        )

        self._put_part(part, data)

        result = self.transport.add_upload_part(upload_id, part_number, part.md5)
        if not result.succeeded:
            raise PartUploadFailedError(
                f"Synapse rejected part {part_number}: {result.error_message}", part_number=part_number
            )

        logger.debug(f"Part {part_number} uploaded successfully ({length} bytes)")
        return part

    def _put_part(self, part: PartDescriptor, data: bytes) -> None:
        response = self.http_client.put(
            part.presigned_upload_url,
            content=data,
            headers=part.signed_headers,
        )
        if not response.is_success:
            raise PartUploadFailedError(
                f"Failed to upload part {part.part_number} to storage: HTTP {response.status_code} - {response.text}",
                part_number=part.part_number,
                status_code=response.status_code,
            )

    def close(self) -> None:
        self.http_client.close()
