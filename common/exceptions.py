"""Custom exception classes shared by the client and the virtual filesystem."""

from typing import Optional


class SynapseFSError(Exception):
    """
    Base exception class for all SynFS errors.
    """
    pass


class InvalidPathError(SynapseFSError):
    """
    Raised when a URI cannot be parsed into a Synapse path.
    """
    pass


class InvalidArgumentError(SynapseFSError):
    """
    Raised when an operation receives an argument of the wrong kind
    (e.g., writing to an entity path, uploading under a non-folder).
    """
    pass


class NotAFolderError(SynapseFSError):
    """
    Raised when an operation requires a Folder entity.
    """
    pass


class NotAFileError(SynapseFSError):
    """
    Raised when an operation requires a FileEntity.
    """
    pass


class NoFileHandleError(SynapseFSError):
    """
    Raised when a FileEntity carries no data file handle.
    """
    pass


class NotFoundError(SynapseFSError):
    """
    Raised when an entity does not exist or cannot be checked for existence.
    """
    pass


class AccessDeniedError(SynapseFSError):
    """
    Raised when the backend refuses access to an entity (HTTP 403).
    """
    pass


class AuthenticationFailedError(SynapseFSError):
    """
    Raised when the backend rejects the auth token (HTTP 401).
    """
    pass


class MissingCredentialsError(SynapseFSError):
    """
    Raised when no auth token is configured anywhere.
    """
    pass


class FileTooLargeError(SynapseFSError):
    """
    Raised when a file would need parts larger than the backend maximum.
    """
    pass


class PartUploadFailedError(SynapseFSError):
    """
    Raised when a single part of a multipart upload is rejected.
    """

    def __init__(self, message: str, part_number: int, status_code: Optional[int] = None):
        super().__init__(message)
        self.part_number = part_number
        self.status_code = status_code


class UnsupportedOperationError(SynapseFSError):
    """
    Raised for operations the filesystem deliberately does not implement.
    """
    pass


class ChannelClosedError(SynapseFSError):
    """
    Raised when a closed channel is used.
    """
    pass


class DownloadFailedError(SynapseFSError):
    """
    Raised when a presigned download URL answers with a non-200 status.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class SynapseAPIError(SynapseFSError):
    """
    Raised for backend responses that do not map to a more specific error.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code
