"""
Upload checks applied by callers before a document reaches a flow.

The flows accept any parsable MIME type; the allow-list and the size cap
belong to the layers that receive files from users.
"""

import logging
import mimetypes
import os

from legallyeasy.core.config import MAX_DOCUMENT_BYTES
from legallyeasy.core.errors import InvalidInputError
from legallyeasy.models.documents import decoded_size, encode_data_uri

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".md": "text/markdown",
}


def check_document_size(data_uri: str | None, max_bytes: int = MAX_DOCUMENT_BYTES) -> None:
    """Reject inline documents larger than ``max_bytes``."""
    if not data_uri:
        return
    size = decoded_size(data_uri)
    if size > max_bytes:
        raise InvalidInputError(
            f"Document is {size / (1024 * 1024):.1f} MB; "
            f"the limit is {max_bytes / (1024 * 1024):.0f} MB."
        )


def guess_mime_type(file_path: str) -> str:
    """Return the MIME type for an allowed file extension."""
    extension = os.path.splitext(file_path)[1].lower()
    mime_type = ALLOWED_MIME_TYPES.get(extension)
    if mime_type is None:
        guessed, _ = mimetypes.guess_type(file_path)
        allowed = ", ".join(sorted(ALLOWED_MIME_TYPES))
        raise InvalidInputError(
            f"Unsupported file type {guessed or extension or 'unknown'}; allowed: {allowed}."
        )
    return mime_type


def read_document(file_path: str, max_bytes: int = MAX_DOCUMENT_BYTES) -> tuple[str, str]:
    """
    Read a local file and encode it as a data URI.

    Returns:
        Tuple of (data_uri, file_name).

    Raises:
        InvalidInputError: if the file is missing, empty, too large or of a
            type that is not offered for upload.
    """
    if not os.path.isfile(file_path):
        raise InvalidInputError(f"File not found: {file_path}")

    mime_type = guess_mime_type(file_path)
    size = os.path.getsize(file_path)
    if size > max_bytes:
        raise InvalidInputError(
            f"File is {size / (1024 * 1024):.1f} MB; "
            f"the limit is {max_bytes / (1024 * 1024):.0f} MB."
        )
    if size == 0:
        raise InvalidInputError(f"File is empty: {file_path}")

    with open(file_path, "rb") as handle:
        data = handle.read()

    file_name = os.path.basename(file_path)
    logger.info("Encoded %s (%s, %d bytes)", file_name, mime_type, size)
    return encode_data_uri(data, mime_type), file_name
