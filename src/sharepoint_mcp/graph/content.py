"""Document content policies keyed by file type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharepoint_mcp.graph.models import DocumentMetadata

PDF_PLACEHOLDER_TEXT = "PDF content would be extracted here"
UNSUPPORTED_TEMPLATE = "Content extraction not supported for file type: {file_type}"


class ContentPolicy(Enum):
    """How the content of a document is retrieved and returned."""

    # Raw bytes of an Office file, no text extraction.
    OFFICE_PAYLOAD = "office-payload"
    # Body decoded and returned as text.
    RAW_TEXT = "raw-text"
    # Body fetched, fixed placeholder returned in its place.
    PDF_PLACEHOLDER = "pdf-placeholder"
    # Nothing fetched, message naming the file type returned.
    UNSUPPORTED = "unsupported"

    @property
    def fetches_content(self) -> bool:
        return self is not ContentPolicy.UNSUPPORTED


_POLICY_BY_FILE_TYPE: dict[str, ContentPolicy] = {
    "docx": ContentPolicy.OFFICE_PAYLOAD,
    "xlsx": ContentPolicy.OFFICE_PAYLOAD,
    "pptx": ContentPolicy.OFFICE_PAYLOAD,
    "txt": ContentPolicy.RAW_TEXT,
    "html": ContentPolicy.RAW_TEXT,
    "md": ContentPolicy.RAW_TEXT,
    "json": ContentPolicy.RAW_TEXT,
    "csv": ContentPolicy.RAW_TEXT,
    "pdf": ContentPolicy.PDF_PLACEHOLDER,
}


def policy_for(file_type: str) -> ContentPolicy:
    """Return the content policy for a file type (case-insensitive)."""
    return _POLICY_BY_FILE_TYPE.get(file_type.lower(), ContentPolicy.UNSUPPORTED)


def resolve_content(policy: ContentPolicy, file_type: str, payload: bytes | None) -> str | bytes:
    """Turn a fetched payload into the content returned for a document.

    Args:
        policy: Policy selected by ``policy_for``.
        file_type: Lower-cased file type of the document.
        payload: Raw body of the ``/content`` call, or None when the policy
            does not fetch content.

    Returns:
        Text for text-like, PDF and unsupported files; the untouched payload
        for Office files.
    """
    if policy is ContentPolicy.OFFICE_PAYLOAD:
        return payload if payload is not None else b""
    if policy is ContentPolicy.RAW_TEXT:
        return (payload or b"").decode("utf-8", errors="replace")
    if policy is ContentPolicy.PDF_PLACEHOLDER:
        return PDF_PLACEHOLDER_TEXT
    return UNSUPPORTED_TEMPLATE.format(file_type=file_type)


@dataclass(frozen=True)
class DocumentContent:
    """A document's metadata together with its resolved content."""

    metadata: DocumentMetadata
    policy: ContentPolicy
    content: str | bytes
