"""HTTP client for the Synapse REST API."""

import uuid
from typing import List, Optional

import httpx

from client.config import SynapseConfig
from client.schemas import (
    AddPartResponse,
    ChildEntry,
    ChildrenPage,
    CreatedEntity,
    EntityMetadata,
    FileEntityCreateRequest,
    FolderCreateRequest,
    PresignedPartUrl,
    PresignedUrlBatch,
    UploadSession,
)
from common.constants import AUTH_TOKEN_ENV, MULTIPART_REQUEST_TYPE
from common.exceptions import (
    AccessDeniedError,
    AuthenticationFailedError,
    NotFoundError,
    SynapseAPIError,
)
from common.logging_config import get_logger

logger = get_logger(__name__)

REDIRECT_STATUSES = (301, 302, 307)


class SynapseClient:
    """
    Blocking HTTP client for the Synapse REST API.

    Implements the SynapseTransport protocol. Requests are never retried;
    401/403/404 responses are translated into the SynFS error taxonomy.
    """

    def __init__(self, config: SynapseConfig, http_client: Optional[httpx.Client] = None):
        """
        Initialize Synapse client.

        Args:
            config: Configuration instance (endpoint, token, timeouts)
            http_client: Optional pre-built httpx client (used by tests)
        """
        self.config = config
        timeouts = config.get_timeouts()
        self.session = http_client or httpx.Client(
            base_url=config.get_endpoint(),
            timeout=httpx.Timeout(timeouts['request'], connect=timeouts['connect']),
            follow_redirects=True,
        )
        logger.info(f"Initialized SynapseClient [endpoint={config.get_endpoint()}]")

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with the bearer token.

        Raises:
            MissingCredentialsError: If no token is configured
        """
        return {'Authorization': f'Bearer {self.config.get_auth_token()}'}

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make an authenticated HTTP request and map error statuses.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: API endpoint path
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object with a 2xx (or, when redirects are disabled, 3xx) status
        """
        request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', {})
        headers.update(self._get_auth_header())
        headers['Accept'] = 'application/json'
        headers['X-Request-ID'] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")
        response = self.session.request(method, endpoint, headers=headers, **kwargs)
        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} [request_id={request_id}]"
        )

        if response.status_code in REDIRECT_STATUSES and kwargs.get('follow_redirects') is False:
            return response

        self._raise_for_status(response, endpoint, request_id)
        return response

    def _raise_for_status(self, response: httpx.Response, endpoint: str, request_id: str) -> None:
        """
        Translate a non-success response into a SynFS exception.

        Args:
            response: HTTP response object
            endpoint: Endpoint used in error messages
            request_id: Id sent in the X-Request-ID header of this request
        """
        if response.is_success:
            return

        status = response.status_code
        logger.warning(f"Synapse error: {endpoint} status={status} [request_id={request_id}]")

        if status == 401:
            raise AuthenticationFailedError(
                "Synapse authentication failed. Your token may be invalid or expired. "
                f"Please refresh it with 'login <new-token>' or the {AUTH_TOKEN_ENV} environment variable."
            )
        if status == 403:
            raise AccessDeniedError(
                f"Access denied to {endpoint}. You don't have permission to access this Synapse entity."
            )
        if status == 404:
            raise NotFoundError(
                f"Synapse entity not found at {endpoint}. The entity may not exist or you may not have access."
            )
        raise SynapseAPIError(f"Synapse API error (HTTP {status}): {response.text}", status_code=status)

    def get_entity(self, entity_id: str, version: Optional[int] = None) -> EntityMetadata:
        """
        Get entity metadata.

        Args:
            entity_id: Synapse ID (e.g., "syn1234567")
            version: Optional version number

        Returns:
            Parsed entity metadata
        """
        endpoint = f'/repo/v1/entity/{entity_id}'
        if version is not None:
            endpoint += f'/version/{version}'
        response = self._request('GET', endpoint)
        return EntityMetadata.model_validate(response.json())

    def is_folder(self, entity_id: str) -> bool:
        """Return True if the entity is a Folder."""
        return self.get_entity(entity_id).is_folder

    def create_folder(self, parent_id: str, name: str) -> str:
        """
        Create a Folder entity.

        Returns:
            ID of the new folder
        """
        body = FolderCreateRequest(name=name, parent_id=parent_id).model_dump(by_alias=True)
        response = self._request('POST', '/repo/v1/entity', json=body)
        return CreatedEntity.model_validate(response.json()).id

    def list_children(self, parent_id: str) -> List[ChildEntry]:
        """
        List folder and file children of an entity, following page tokens.

        Returns:
            All child entries
        """
        children: List[ChildEntry] = []
        next_page_token = None
        while True:
            body = {'parentId': parent_id, 'includeTypes': ['folder', 'file']}
            if next_page_token:
                body['nextPageToken'] = next_page_token
            response = self._request('POST', '/repo/v1/entity/children', json=body)
            page = ChildrenPage.model_validate(response.json())
            children.extend(page.page)
            next_page_token = page.next_page_token
            if not next_page_token:
                return children

    def get_presigned_download_url(self, entity_id: str, file_handle_id: str) -> str:
        """
        Get a presigned download URL for an entity's file handle.

        Synapse may answer with a redirect, a plain-text URL or a JSON body.

        Returns:
            Presigned URL for downloading
        """
        params = {
            'redirect': 'false',
            'fileAssociateType': 'FileEntity',
            'fileAssociateId': entity_id,
        }
        response = self._request(
            'GET',
            f'/file/v1/file/{file_handle_id}',
            params=params,
            follow_redirects=False,
        )

        if response.status_code in REDIRECT_STATUSES:
            location = response.headers.get('Location')
            if not location:
                raise SynapseAPIError("Redirect response without Location header", status_code=response.status_code)
            return location

        body = response.text.strip()
        if body.startswith('http'):
            return body
        return response.json()['preSignedURL']

    def start_multipart_upload(
        self,
        file_name: str,
        file_size: int,
        md5_hex: str,
        content_type: str,
        part_size: int
    ) -> UploadSession:
        """
        Start a multipart upload.

        The returned session may already be COMPLETED when identical content exists.
        """
        body = {
            'concreteType': MULTIPART_REQUEST_TYPE,
            'fileName': file_name,
            'fileSizeBytes': file_size,
            'contentMD5Hex': md5_hex,
            'contentType': content_type,
            'partSizeBytes': part_size,
        }
        response = self._request('POST', '/file/v1/file/multipart', json=body)
        return UploadSession.model_validate(response.json())

    def get_presigned_upload_urls(self, upload_id: str, part_numbers: List[int]) -> List[PresignedPartUrl]:
        """Get presigned URLs for uploading the given parts (1-indexed)."""
        body = {'uploadId': upload_id, 'partNumbers': part_numbers}
        response = self._request(
            'POST',
            f'/file/v1/file/multipart/{upload_id}/presigned/url/batch',
            json=body,
        )
        return PresignedUrlBatch.model_validate(response.json()).part_presigned_urls

    def add_upload_part(self, upload_id: str, part_number: int, part_md5_hex: str) -> AddPartResponse:
        """Confirm that a part was successfully uploaded."""
        response = self._request(
            'PUT',
            f'/file/v1/file/multipart/{upload_id}/add/{part_number}',
            params={'partMD5Hex': part_md5_hex},
        )
        return AddPartResponse.model_validate(response.json())

    def complete_multipart_upload(self, upload_id: str) -> UploadSession:
        """Complete a multipart upload and return the final status with its file handle id."""
        response = self._request('PUT', f'/file/v1/file/multipart/{upload_id}/complete')
        return UploadSession.model_validate(response.json())

    def create_file_entity(self, parent_id: str, name: str, file_handle_id: str) -> str:
        """
        Create a FileEntity pointing at an uploaded file handle.

        Returns:
            ID of the new entity
        """
        body = FileEntityCreateRequest(
            name=name,
            parent_id=parent_id,
            data_file_handle_id=file_handle_id,
        ).model_dump(by_alias=True)
        response = self._request('POST', '/repo/v1/entity', json=body)
        return CreatedEntity.model_validate(response.json()).id

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
