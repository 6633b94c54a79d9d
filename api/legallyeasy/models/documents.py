"""
Inline document references.

Uploaded files travel as ``data:<mimetype>;base64,<payload>`` strings. A
reference is checked when it is constructed and decoded into an
InlineDocument for the single flow invocation that uses it.
"""

import base64
import binascii
import codecs
import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from legallyeasy.core.errors import InvalidInputError

_TOKEN = r"[A-Za-z0-9!#$&^_.+-]+"

DATA_URI_PATTERN = re.compile(
    rf"^data:(?P<mime_type>{_TOKEN}/{_TOKEN})"
    rf"(?P<params>(?:;{_TOKEN}=[^;,]*)*)"
    r";base64,(?P<payload>.*)$",
    re.DOTALL,
)

DEFAULT_DOCUMENT_NAME = "document"
DEFAULT_CHARSET = "utf-8"


@dataclass(frozen=True)
class InlineDocument:
    """A decoded data URI: MIME type, raw bytes and optional filename."""

    mime_type: str
    data: bytes
    data_uri: str
    name: str | None = None
    charset: str = DEFAULT_CHARSET

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_DOCUMENT_NAME

    def text(self) -> str:
        """Decode the payload with its declared charset, replacing undecodable bytes."""
        return self.data.decode(self.charset, errors="replace")


def _parse_params(params: str) -> dict[str, str]:
    """Split ``;key=value`` pairs; keys are case-insensitive."""
    result = {}
    for pair in params.split(";"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        result[key.strip().lower()] = value.strip().strip('"')
    return result


def _resolve_charset(params: dict[str, str]) -> str:
    charset = params.get("charset") or DEFAULT_CHARSET
    try:
        return codecs.lookup(charset).name
    except LookupError as exc:
        raise InvalidInputError(f"Unknown document charset: {charset}") from exc


def parse_data_uri(data_uri: str, name: str | None = None) -> InlineDocument:
    """
    Parse a ``data:<mimetype>;base64,<payload>`` string.

    Raises:
        InvalidInputError: if the MIME type is missing or malformed, or the
            payload is empty or not valid Base64.
    """
    if not isinstance(data_uri, str) or not data_uri.strip():
        raise InvalidInputError("A document data URI is required.")

    match = DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise InvalidInputError(
            "Document must be a data URI of the form data:<mimetype>;base64,<payload>."
        )

    payload = match.group("payload")
    if not payload:
        raise InvalidInputError("Document data URI has an empty payload.")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError("Document payload is not valid Base64.") from exc

    if not data:
        raise InvalidInputError("Document data URI has an empty payload.")

    return InlineDocument(
        mime_type=match.group("mime_type").lower(),
        data=data,
        data_uri=data_uri.strip(),
        name=name,
        charset=_resolve_charset(_parse_params(match.group("params"))),
    )


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Build a data URI from raw bytes."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def decoded_size(data_uri: str) -> int:
    """Size in bytes of the payload a data URI carries, without decoding it."""
    _, _, payload = data_uri.partition(",")
    payload = payload.strip()
    padding = len(payload) - len(payload.rstrip("="))
    return max(len(payload) * 3 // 4 - padding, 0)


class DocumentReference(BaseModel):
    """An uploaded document passed inline with a request."""

    model_config = ConfigDict(frozen=True)

    data_uri: str = Field(
        ..., description="Inline document as data:<mimetype>;base64,<payload>"
    )
    name: str | None = Field(None, description="Filename, used as prompt context only")

    @field_validator("data_uri")
    @classmethod
    def _check_data_uri(cls, value: str) -> str:
        try:
            parse_data_uri(value)
        except InvalidInputError as exc:
            raise ValueError(exc.message) from exc
        return value.strip()

    @field_validator("name")
    @classmethod
    def _blank_name_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def decode(self) -> InlineDocument:
        return parse_data_uri(self.data_uri, self.name)
