"""
Transport protocol consumed by the virtual filesystem.

One method per REST call, so the upload engine and the filesystem façade can
be driven by the real SynapseClient or by an in-memory fake.
"""

from typing import List, Optional, Protocol, runtime_checkable

from client.schemas import (
    AddPartResponse,
    ChildEntry,
    EntityMetadata,
    PresignedPartUrl,
    UploadSession,
)


@runtime_checkable
class SynapseTransport(Protocol):
    """Narrow interface over the Synapse REST API."""

    def get_entity(self, entity_id: str, version: Optional[int] = None) -> EntityMetadata:
        """Fetch entity metadata, optionally for a specific version."""
        ...

    def is_folder(self, entity_id: str) -> bool:
        """Return True if the entity is a Folder."""
        ...

    def create_folder(self, parent_id: str, name: str) -> str:
        """Create a Folder under parent_id and return its id."""
        ...

    def list_children(self, parent_id: str) -> List[ChildEntry]:
        """List folder and file children of parent_id."""
        ...

    def get_presigned_download_url(self, entity_id: str, file_handle_id: str) -> str:
        """Resolve a presigned download URL for the entity's file handle."""
        ...

    def start_multipart_upload(
        self,
        file_name: str,
        file_size: int,
        md5_hex: str,
        content_type: str,
        part_size: int
    ) -> UploadSession:
        """Start (or short-circuit) a multipart upload session."""
        ...

    def get_presigned_upload_urls(self, upload_id: str, part_numbers: List[int]) -> List[PresignedPartUrl]:
        """Request presigned upload URLs for the given part numbers."""
        ...

    def add_upload_part(self, upload_id: str, part_number: int, part_md5_hex: str) -> AddPartResponse:
        """Confirm that a part was uploaded."""
        ...

    def complete_multipart_upload(self, upload_id: str) -> UploadSession:
        """Complete the session and return its final status."""
        ...

    def create_file_entity(self, parent_id: str, name: str, file_handle_id: str) -> str:
        """Create a FileEntity and return its id."""
        ...
