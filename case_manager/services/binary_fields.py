"""Binary field materialisation.

Runs strictly after authorization and tenancy filtering; it only reshapes
rows that have already been returned.

List views replace large payloads so responses stay small:
- payload with a stored filename -> the marker "exists"
- payload without a filename -> base64 text
Single-record fetches keep the raw bytes so the byte-serving path can
stream them with the right headers.
"""

import base64
import binascii
import re
from dataclasses import dataclass

from case_manager.core.exceptions import ValidationException

EXISTS_MARKER = "exists"

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "file"

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


@dataclass(frozen=True)
class BinaryField:
    column: str
    filename_column: str | None = None
    mime_column: str | None = None


@dataclass(frozen=True)
class StoredFile:
    """Raw payload plus the metadata needed to serve it"""

    content: bytes
    filename: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


def materialize_for_list(row: dict, fields: tuple[BinaryField, ...]) -> dict:
    """Return a copy of row with every binary payload replaced by a marker or base64 text"""
    if not fields:
        return row

    result = dict(row)
    for field in fields:
        payload = result.get(field.column)
        if payload is None:
            continue
        if field.filename_column and result.get(field.filename_column):
            result[field.column] = EXISTS_MARKER
        else:
            result[field.column] = encode_payload(payload)
    return result


def materialize_for_detail(row: dict, fields: tuple[BinaryField, ...]) -> dict:
    """Single-record fetch: payloads are returned unmodified"""
    return row


def encode_payload(payload) -> str:
    """Transport-safe (base64) form of a payload"""
    if isinstance(payload, str):
        return payload
    return base64.b64encode(bytes(payload)).decode("ascii")


def decode_payload(value) -> bytes | None:
    """
    Turn a stored or transported payload back into bytes.

    Accepts raw bytes, PostgreSQL hex text ("\\x..."), or base64 text.

    Raises:
        ValidationException: If a text payload is in neither encoding
    """
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValidationException("Binary payload must be bytes or encoded text")

    try:
        if value.startswith("\\x"):
            return bytes.fromhex(value[2:])
        if _BASE64_PATTERN.match(value):
            return base64.b64decode(value, validate=True)
    except (ValueError, binascii.Error):
        pass
    raise ValidationException("Unknown file encoding")


def extract_file(row: dict, field: BinaryField) -> StoredFile | None:
    """Build a StoredFile from a detail row, or None if it has no payload"""
    content = decode_payload(row.get(field.column))
    if not content:
        return None

    filename = (row.get(field.filename_column) if field.filename_column else None) or DEFAULT_FILENAME
    mime_type = (row.get(field.mime_column) if field.mime_column else None) or DEFAULT_MIME_TYPE
    return StoredFile(content=content, filename=filename, mime_type=mime_type)
