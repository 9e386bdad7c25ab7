"""
multipart/form-data decoder working directly on the raw request bytes.

Delimiters and the header/body separator are located with byte-exact
searches, so file payloads come back untouched. Only header lines and plain
field values are decoded to text.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger("SpeakCoachProxy.Utils.Multipart")

CRLF = b"\r\n"
HEADER_BODY_SEPARATOR = b"\r\n\r\n"
DEFAULT_FILE_MEDIA_TYPE = "application/octet-stream"

_BOUNDARY_PATTERN = re.compile(r'boundary=(?:"([^"]+)"|([^;\s]+))', re.IGNORECASE)
_NAME_PATTERN = re.compile(r'(?:^|;)\s*name="([^"]+)"', re.IGNORECASE)
_FILENAME_PATTERN = re.compile(r'(?:^|;)\s*filename="([^"]*)"', re.IGNORECASE)


class MultipartError(ValueError):
    """Base class for errors that abort decoding of a multipart body."""


class MissingBoundary(MultipartError):
    def __init__(self, message: str = "Missing multipart boundary"):
        super().__init__(message)


@dataclass
class FileRecord:
    filename: str
    media_type: str
    data: bytes


@dataclass
class DecodedForm:
    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, FileRecord] = field(default_factory=dict)


@dataclass
class _FieldPart:
    name: str
    value: str


@dataclass
class _FilePart:
    name: str
    record: FileRecord


_Part = Union[_FieldPart, _FilePart]


def extract_boundary(content_type: Optional[str]) -> Optional[str]:
    """Return the boundary parameter of a Content-Type header, or None."""
    if not content_type:
        return None
    match = _BOUNDARY_PATTERN.search(content_type)
    if not match:
        return None
    return match.group(1) or match.group(2)


def _split_headers(header_block: bytes) -> List[Tuple[str, str]]:
    headers = []
    for raw_line in header_block.split(CRLF):
        if not raw_line:
            continue
        line = raw_line.decode("utf-8", errors="replace")
        key, sep, value = line.partition(":")
        if not sep:
            continue
        headers.append((key.strip().lower(), value.strip()))
    return headers


def _find_header(headers: List[Tuple[str, str]], name: str) -> Optional[str]:
    for key, value in headers:
        if key == name:
            return value
    return None


def _parse_part(part: bytes) -> Optional[_Part]:
    """Decode one part. Malformed parts yield None and are skipped by the caller."""
    separator_at = part.find(HEADER_BODY_SEPARATOR)
    if separator_at == -1:
        return None

    headers = _split_headers(part[:separator_at])
    body = part[separator_at + len(HEADER_BODY_SEPARATOR):]

    disposition = _find_header(headers, "content-disposition")
    if disposition is None:
        return None

    name_match = _NAME_PATTERN.search(disposition)
    if not name_match:
        return None
    name = name_match.group(1)

    # payload is followed by the CRLF that belongs to the next delimiter
    if body.endswith(CRLF):
        body = body[:-len(CRLF)]

    filename_match = _FILENAME_PATTERN.search(disposition)
    if filename_match and filename_match.group(1):
        media_type = _find_header(headers, "content-type") or DEFAULT_FILE_MEDIA_TYPE
        return _FilePart(name, FileRecord(filename_match.group(1), media_type, bytes(body)))

    try:
        value = body.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug(f"Skipping field '{name}': value is not valid UTF-8")
        return None
    return _FieldPart(name, value)


def parse_multipart(body: bytes, boundary: Optional[str]) -> DecodedForm:
    """
    Decode a complete multipart/form-data body.

    Args:
        body: Raw bytes of the request body
        boundary: The boundary token from the Content-Type header

    Returns:
        DecodedForm with text fields and uploaded files. Repeated names keep
        the last occurrence.

    Raises:
        MissingBoundary: if no boundary was supplied, or it is not latin-1
            text (HTTP header values always are)
    """
    if not boundary:
        raise MissingBoundary()

    try:
        delimiter = b"--" + boundary.encode("latin-1")
    except UnicodeEncodeError:
        raise MissingBoundary("Invalid multipart boundary") from None

    form = DecodedForm()
    skipped = 0

    for segment in body.split(delimiter):
        # preamble, closing "--" delimiter and epilogue
        if not segment or segment.startswith(b"--") or not segment.strip():
            continue

        part = _parse_part(segment)
        if part is None:
            skipped += 1
        elif isinstance(part, _FilePart):
            form.files[part.name] = part.record
        else:
            form.fields[part.name] = part.value

    if skipped:
        logger.debug(f"Skipped {skipped} malformed multipart part(s)")
    return form
