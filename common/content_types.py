"""Maps file name extensions to the content types sent when starting an upload."""

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
    "htm": "text/html",
    "pdf": "application/pdf",
    "gz": "application/gzip",
    "gzip": "application/gzip",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "bam": "application/octet-stream",
    # Genomics text formats
    "vcf": "text/plain",
    "fastq": "text/plain",
    "fq": "text/plain",
    "fasta": "text/plain",
    "fa": "text/plain",
    "bed": "text/plain",
}


def detect_content_type(file_name: str) -> str:
    """
    Detect content type from the file name extension (case-insensitive).

    Unknown or missing extensions map to application/octet-stream.
    """
    if "." not in file_name:
        return DEFAULT_CONTENT_TYPE
    extension = file_name.rsplit(".", 1)[1].lower()
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
