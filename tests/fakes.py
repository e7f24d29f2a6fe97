"""In-memory stand-ins for the Synapse REST API and presigned storage."""

import itertools
from typing import Dict, List, Optional

import httpx

from client.schemas import (
    AddPartResponse,
    ChildEntry,
    EntityMetadata,
    PresignedPartUrl,
    UploadSession,
)
from common.constants import FILE_ENTITY_TYPE, FOLDER_TYPE
from common.exceptions import NotFoundError

STORAGE_HOST = "https://storage.test"


class FakeSynapseTransport:
    """
    Records every call and serves entities from dictionaries.

    Knobs:
        dedup: start_multipart_upload answers COMPLETED
        presign_empty: presigned URL batches come back empty
        failed_parts: part numbers whose confirmation is ADD_FAILED
    """

    def __init__(self):
        self.entities: Dict[str, EntityMetadata] = {}
        self.children: Dict[str, List[ChildEntry]] = {}
        self.calls: List[tuple] = []
        self.uploads: Dict[str, dict] = {}
        self.dedup = False
        self.presign_empty = False
        self.failed_parts: set = set()
        self.download_urls: Dict[str, str] = {}
        self._ids = itertools.count(9000)

    def _next_id(self) -> str:
        return f"syn{next(self._ids)}"

    def add_folder(self, entity_id: str, name: str, parent_id: Optional[str] = None) -> EntityMetadata:
        entity = EntityMetadata(id=entity_id, name=name, concrete_type=FOLDER_TYPE, parent_id=parent_id)
        self.entities[entity_id] = entity
        self.children.setdefault(entity_id, [])
        if parent_id is not None:
            self.children.setdefault(parent_id, []).append(ChildEntry(id=entity_id, name=name, type=FOLDER_TYPE))
        return entity

    def add_file(
        self,
        entity_id: str,
        name: str,
        file_size: Optional[int] = None,
        file_handle_id: Optional[str] = "fh1",
        parent_id: Optional[str] = None,
        **extra
    ) -> EntityMetadata:
        entity = EntityMetadata(
            id=entity_id,
            name=name,
            concrete_type=FILE_ENTITY_TYPE,
            data_file_handle_id=file_handle_id,
            file_size=file_size,
            parent_id=parent_id,
            **extra
        )
        self.entities[entity_id] = entity
        if parent_id is not None:
            self.children.setdefault(parent_id, []).append(ChildEntry(id=entity_id, name=name, type=FILE_ENTITY_TYPE))
        return entity

    def calls_to(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    def get_entity(self, entity_id: str, version: Optional[int] = None) -> EntityMetadata:
        self.calls.append(("get_entity", entity_id, version))
        if entity_id not in self.entities:
            raise NotFoundError(f"Synapse entity not found at /repo/v1/entity/{entity_id}")
        return self.entities[entity_id]

    def is_folder(self, entity_id: str) -> bool:
        self.calls.append(("is_folder", entity_id))
        entity = self.entities.get(entity_id)
        return entity is not None and entity.is_folder

    def create_folder(self, parent_id: str, name: str) -> str:
        self.calls.append(("create_folder", parent_id, name))
        folder_id = self._next_id()
        self.add_folder(folder_id, name, parent_id)
        return folder_id

    def list_children(self, parent_id: str) -> List[ChildEntry]:
        self.calls.append(("list_children", parent_id))
        return list(self.children.get(parent_id, []))

    def get_presigned_download_url(self, entity_id: str, file_handle_id: str) -> str:
        self.calls.append(("get_presigned_download_url", entity_id, file_handle_id))
        return self.download_urls.get(entity_id, f"{STORAGE_HOST}/download/{file_handle_id}")

    def start_multipart_upload(
        self,
        file_name: str,
        file_size: int,
        md5_hex: str,
        content_type: str,
        part_size: int
    ) -> UploadSession:
        self.calls.append(("start_multipart_upload", file_name, file_size, md5_hex, content_type, part_size))
        upload_id = f"upload-{len(self.uploads) + 1}"
        self.uploads[upload_id] = {"file_name": file_name, "parts": {}}
        if self.dedup:
            return UploadSession(upload_id=upload_id, state="COMPLETED", result_file_handle_id="fh-existing")
        return UploadSession(upload_id=upload_id, state="UPLOADING")

    def get_presigned_upload_urls(self, upload_id: str, part_numbers: List[int]) -> List[PresignedPartUrl]:
        self.calls.append(("get_presigned_upload_urls", upload_id, tuple(part_numbers)))
        if self.presign_empty:
            return []
        return [
            PresignedPartUrl(
                part_number=n,
                upload_presigned_url=f"{STORAGE_HOST}/{upload_id}/part/{n}",
                signed_headers={"Content-Type": "application/octet-stream"},
            )
            for n in part_numbers
        ]

    def add_upload_part(self, upload_id: str, part_number: int, part_md5_hex: str) -> AddPartResponse:
        self.calls.append(("add_upload_part", upload_id, part_number, part_md5_hex))
        if part_number in self.failed_parts:
            return AddPartResponse(
                upload_id=upload_id,
                part_number=part_number,
                add_part_state="ADD_FAILED",
                error_message="MD5 mismatch",
            )
        self.uploads[upload_id]["parts"][part_number] = part_md5_hex
        return AddPartResponse(upload_id=upload_id, part_number=part_number)

    def complete_multipart_upload(self, upload_id: str) -> UploadSession:
        self.calls.append(("complete_multipart_upload", upload_id))
        return UploadSession(upload_id=upload_id, state="COMPLETED", result_file_handle_id=f"fh-{upload_id}")

    def create_file_entity(self, parent_id: str, name: str, file_handle_id: str) -> str:
        self.calls.append(("create_file_entity", parent_id, name, file_handle_id))
        entity_id = self._next_id()
        self.add_file(entity_id, name, file_handle_id=file_handle_id, parent_id=parent_id)
        return entity_id


class FakeStorage:
    """
    Presigned-URL storage served through httpx.MockTransport.

    PUT bodies are kept per URL path; GET serves `downloads` by path.
    """

    def __init__(self):
        self.puts: List[httpx.Request] = []
        self.bodies: Dict[str, bytes] = {}
        self.downloads: Dict[str, bytes] = {}
        self.put_status = 200
        self.get_requests = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            self.puts.append(request)
            self.bodies[request.url.path] = request.read()
            return httpx.Response(self.put_status, text="" if self.put_status < 400 else "SignatureDoesNotMatch")
        if request.method == "GET":
            self.get_requests += 1
            body = self.downloads.get(request.url.path)
            if body is None:
                return httpx.Response(403, text="AccessDenied")
            return httpx.Response(200, content=body)
        return httpx.Response(405)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))
