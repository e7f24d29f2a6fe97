"""Project-wide constants (URI scheme, part sizing limits, timeouts)."""

SCHEME: str = "syn"
URI_PREFIX: str = f"{SCHEME}://"

DEFAULT_ENDPOINT: str = "https://repo-prod.prod.sagebase.org"
AUTH_TOKEN_ENV: str = "SYNAPSE_AUTH_TOKEN"
ENDPOINT_ENV: str = "SYNAPSE_ENDPOINT"

FOLDER_TYPE: str = "org.sagebionetworks.repo.model.Folder"
FILE_ENTITY_TYPE: str = "org.sagebionetworks.repo.model.FileEntity"
MULTIPART_REQUEST_TYPE: str = "org.sagebionetworks.repo.model.file.MultipartUploadRequest"

MD5_CHUNK_SIZE_BYTES: int = 2 * 1024 * 1024  # 2 MiB streaming window
MIN_PART_SIZE_BYTES: int = 5 * 1024 * 1024  # 5 MiB
MAX_PART_SIZE_BYTES: int = 5 * 1024 * 1024 * 1024  # 5 GiB
MAX_PARTS: int = 10000  # S3 limit
COPY_BUFFER_SIZE_BYTES: int = 8192

CONNECT_TIMEOUT_SECONDS: float = 30.0
REQUEST_TIMEOUT_SECONDS: float = 60.0
UPLOAD_PART_TIMEOUT_SECONDS: float = 10 * 60.0
DOWNLOAD_TIMEOUT_SECONDS: float = 30 * 60.0

SCRATCH_FILE_PREFIX: str = "synapse-upload-"
SCRATCH_FILE_SUFFIX: str = ".tmp"
PARTIAL_DOWNLOAD_SUFFIX: str = ".part"
