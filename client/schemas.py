"""Pydantic schemas for Synapse REST payloads."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.constants import FILE_ENTITY_TYPE, FOLDER_TYPE


class SynapseModel(BaseModel):
    """Base model accepting camelCase JSON and ignoring unknown fields."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EntityMetadata(SynapseModel):
    """Metadata of a single entity (file, folder or other)."""
    id: str
    name: str = ""
    concrete_type: str = Field("", alias="concreteType")
    data_file_handle_id: Optional[str] = Field(None, alias="dataFileHandleId")
    file_size: Optional[int] = Field(None, alias="fileSize")
    created_on: Optional[str] = Field(None, alias="createdOn")
    modified_on: Optional[str] = Field(None, alias="modifiedOn")
    md5: Optional[str] = None
    content_type: Optional[str] = Field(None, alias="contentType")
    version_number: Optional[int] = Field(None, alias="versionNumber")
    version_label: Optional[str] = Field(None, alias="versionLabel")
    parent_id: Optional[str] = Field(None, alias="parentId")

    @property
    def is_file(self) -> bool:
        return self.concrete_type.endswith(".FileEntity")

    @property
    def is_folder(self) -> bool:
        return self.concrete_type.endswith(".Folder")

    @property
    def type_name(self) -> str:
        """Short type name, e.g. 'Folder' for org.sagebionetworks.repo.model.Folder."""
        if not self.concrete_type:
            return "unknown type"
        return self.concrete_type.rsplit(".", 1)[-1]


class ChildEntry(SynapseModel):
    """One element of an entity children listing."""
    id: str
    name: str
    type: str

    @property
    def is_folder(self) -> bool:
        return self.type == FOLDER_TYPE


class ChildrenPage(SynapseModel):
    """Response of POST /entity/children."""
    page: List[ChildEntry] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")


class CreatedEntity(SynapseModel):
    """Response of POST /entity (only the fields we need)."""
    id: str
    name: Optional[str] = None


class FolderCreateRequest(SynapseModel):
    """Request body for creating a Folder entity."""
    concrete_type: str = Field(FOLDER_TYPE, alias="concreteType")
    name: str
    parent_id: str = Field(alias="parentId")


class FileEntityCreateRequest(SynapseModel):
    """Request body for creating a FileEntity."""
    concrete_type: str = Field(FILE_ENTITY_TYPE, alias="concreteType")
    name: str
    parent_id: str = Field(alias="parentId")
    data_file_handle_id: str = Field(alias="dataFileHandleId")


class UploadSession(SynapseModel):
    """Multipart upload status as returned by start and complete calls."""
    upload_id: str = Field(alias="uploadId")
    state: str = "UPLOADING"
    result_file_handle_id: Optional[str] = Field(None, alias="resultFileHandleId")

    @property
    def is_completed(self) -> bool:
        return self.state == "COMPLETED"


class PresignedPartUrl(SynapseModel):
    """Presigned upload URL for a single part."""
    part_number: int = Field(alias="partNumber")
    upload_presigned_url: str = Field(alias="uploadPresignedUrl")
    signed_headers: Dict[str, str] = Field(default_factory=dict, alias="signedHeaders")


class PresignedUrlBatch(SynapseModel):
    """Response of the presigned URL batch request."""
    part_presigned_urls: List[PresignedPartUrl] = Field(default_factory=list, alias="partPresignedUrls")


class AddPartResponse(SynapseModel):
    """Response of confirming one uploaded part."""
    upload_id: Optional[str] = Field(None, alias="uploadId")
    part_number: Optional[int] = Field(None, alias="partNumber")
    add_part_state: str = Field("ADD_SUCCESS", alias="addPartState")
    error_message: Optional[str] = Field(None, alias="errorMessage")

    @property
    def succeeded(self) -> bool:
        return self.add_part_state == "ADD_SUCCESS"
