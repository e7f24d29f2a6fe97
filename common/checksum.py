"""Provides MD5 checksum helpers for whole buffers, streamed files and file parts."""

import hashlib
import os
from typing import Union

from common.constants import MD5_CHUNK_SIZE_BYTES


def compute_md5(data: bytes) -> str:
    """
    Compute MD5 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of MD5 hash
    """
    return hashlib.md5(data).hexdigest()


def compute_file_md5(
    file_path: Union[str, os.PathLike],
    chunk_size: int = MD5_CHUNK_SIZE_BYTES
) -> str:
    """
    Compute MD5 checksum of a file by streaming it in fixed-size chunks.

    Memory use is bounded by chunk_size regardless of file size.

    Args:
        file_path: Path to the file
        chunk_size: Number of bytes read per iteration

    Returns:
        Hexadecimal string representation of MD5 hash
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    calculator = IncrementalChecksumCalculator()
    with open(file_path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            calculator.update(chunk)
    return calculator.finalize()


def read_file_part(
    file_path: Union[str, os.PathLike],
    offset: int,
    length: int
) -> bytes:
    """
    Read exactly `length` bytes starting at `offset` without loading the rest of the file.

    Raises:
        IOError: If the file ends before `length` bytes were read
    """
    buffer = bytearray()
    with open(file_path, 'rb') as f:
        f.seek(offset)
        while len(buffer) < length:
            piece = f.read(length - len(buffer))
            if not piece:
                raise IOError(
                    f"Unexpected end of file {file_path}: wanted {length} bytes at offset {offset}, got {len(buffer)}"
                )
            buffer.extend(piece)
    return bytes(buffer)


class IncrementalChecksumCalculator:
    """
    Calculate MD5 checksum incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(chunk1)
        calculator.update(chunk2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        """Initialize a new incremental checksum calculator."""
        self._hasher = hashlib.md5()
        self._finalized = False

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Hexadecimal string representation of MD5 hash
        """
        self._finalized = True
        return self._hasher.hexdigest()
