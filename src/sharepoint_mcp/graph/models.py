"""Data models for Microsoft Graph API sites, drives, drive items and search hits.

Each model is built from a raw Graph payload by a ``from_graph`` constructor
that checks the required fields, so a malformed response fails with
``GraphResponseError`` instead of surfacing later as a ``KeyError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sharepoint_mcp.graph.client import GraphResponseError

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_DISPLAY_NAME = "displayName"
FIELD_DESCRIPTION = "description"
FIELD_DRIVE_TYPE = "driveType"
FIELD_WEB_URL = "webUrl"
FIELD_SIZE = "size"
FIELD_CREATED = "createdDateTime"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_CREATED_BY = "createdBy"
FIELD_LAST_MODIFIED_BY = "lastModifiedBy"
FIELD_USER = "user"
FIELD_FOLDER = "folder"
FIELD_CHILD_COUNT = "childCount"
FIELD_AUTHOR = "author"
FIELD_FILETYPE = "filetype"

# Search response keys
SEARCH_HITS_CONTAINERS = "hitsContainers"
SEARCH_HITS = "hits"
SEARCH_RESOURCE = "resource"
SEARCH_PROPERTIES = "properties"

# OData response keys
ODATA_VALUE = "value"


def _require(raw: Any, key: str, kind: str, expected: type | tuple[type, ...] = object) -> Any:
    """Return ``raw[key]``, raising GraphResponseError if it is absent or mistyped."""
    if not isinstance(raw, dict):
        raise GraphResponseError(f"{kind} record is not a JSON object")
    value = raw.get(key)
    if value is None:
        raise GraphResponseError(f"{kind} record is missing required field '{key}'")
    if not isinstance(value, expected):
        raise GraphResponseError(
            f"{kind} field '{key}' has unexpected type {type(value).__name__}"
        )
    return value


def _optional_object(raw: dict[str, Any], key: str, kind: str) -> dict[str, Any] | None:
    """Return ``raw[key]`` if it is a JSON object, None if absent."""
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise GraphResponseError(f"{kind} field '{key}' is not a JSON object")
    return value


def _identity_name(raw: dict[str, Any], key: str) -> str | None:
    """Read ``raw[key].user.displayName`` from a Graph identitySet."""
    identity = _optional_object(raw, key, "identity") or {}
    user = _optional_object(identity, FIELD_USER, "identity") or {}
    return user.get(FIELD_DISPLAY_NAME)


def odata_values(response: dict[str, Any], kind: str) -> list[dict[str, Any]]:
    """Return the ``value`` collection of an OData list response.

    Raises:
        GraphResponseError: If the response has no ``value`` list.
    """
    values = response.get(ODATA_VALUE)
    if not isinstance(values, list):
        raise GraphResponseError(f"{kind} response has no '{ODATA_VALUE}' collection")
    return values


def file_type_from_name(name: str) -> str:
    """Return the lower-cased text after the last dot of a file name.

    A name without a dot yields the whole name, lower-cased.
    """
    return name.rsplit(".", 1)[-1].lower()


@dataclass(frozen=True)
class SiteSummary:
    """A SharePoint site as returned by ``GET /sites``."""

    id: str
    name: str | None
    display_name: str | None
    web_url: str | None
    created: str | None

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> SiteSummary:
        return cls(
            id=_require(raw, FIELD_ID, "site", str),
            name=raw.get(FIELD_NAME),
            display_name=raw.get(FIELD_DISPLAY_NAME),
            web_url=raw.get(FIELD_WEB_URL),
            created=raw.get(FIELD_CREATED),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "webUrl": self.web_url,
            "createdDateTime": self.created,
        }


@dataclass(frozen=True)
class LibrarySummary:
    """A document library (drive) of the bound site."""

    id: str
    name: str | None
    description: str | None
    drive_type: str | None
    web_url: str | None
    created: str | None
    last_modified: str | None

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> LibrarySummary:
        return cls(
            id=_require(raw, FIELD_ID, "drive", str),
            name=raw.get(FIELD_NAME),
            description=raw.get(FIELD_DESCRIPTION),
            drive_type=raw.get(FIELD_DRIVE_TYPE),
            web_url=raw.get(FIELD_WEB_URL),
            created=raw.get(FIELD_CREATED),
            last_modified=raw.get(FIELD_LAST_MODIFIED),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "driveType": self.drive_type,
            "webUrl": self.web_url,
            "createdDateTime": self.created,
            "lastModifiedDateTime": self.last_modified,
        }


@dataclass(frozen=True)
class ItemSummary:
    """A file or folder inside a document library folder."""

    id: str
    name: str
    web_url: str | None
    size: int | None
    is_folder: bool
    child_count: int | None
    created: str | None
    last_modified: str | None
    author: str | None

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> ItemSummary:
        item_id = _require(raw, FIELD_ID, "drive item", str)
        folder = _optional_object(raw, FIELD_FOLDER, "drive item")
        return cls(
            id=item_id,
            name=_require(raw, FIELD_NAME, "drive item", str),
            web_url=raw.get(FIELD_WEB_URL),
            size=raw.get(FIELD_SIZE),
            is_folder=folder is not None,
            child_count=folder.get(FIELD_CHILD_COUNT) if folder else None,
            created=raw.get(FIELD_CREATED),
            last_modified=raw.get(FIELD_LAST_MODIFIED),
            author=_identity_name(raw, FIELD_LAST_MODIFIED_BY),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "webUrl": self.web_url,
            "size": self.size,
            "isFolder": self.is_folder,
            "childCount": self.child_count,
            "createdDateTime": self.created,
            "lastModifiedDateTime": self.last_modified,
            "author": self.author,
        }


@dataclass(frozen=True)
class DocumentMetadata:
    """Metadata of a single document, fetched fresh for every request."""

    id: str
    name: str
    web_url: str | None
    created: str | None
    last_modified: str | None
    size: int | None
    author: str | None
    file_type: str

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> DocumentMetadata:
        name = _require(raw, FIELD_NAME, "document", str)
        return cls(
            id=_require(raw, FIELD_ID, "document", str),
            name=name,
            web_url=raw.get(FIELD_WEB_URL),
            created=raw.get(FIELD_CREATED),
            last_modified=raw.get(FIELD_LAST_MODIFIED),
            size=raw.get(FIELD_SIZE),
            author=_identity_name(raw, FIELD_CREATED_BY),
            file_type=file_type_from_name(name),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.web_url,
            "lastModified": self.last_modified,
            "created": self.created,
            "size": self.size,
            "author": self.author,
            "type": self.file_type,
        }


@dataclass(frozen=True)
class SearchHit:
    """A search result: document metadata plus the query that matched it."""

    id: str
    name: str | None
    url: str | None
    last_modified: str | None
    created: str | None
    size: int | None
    author: str | None
    type: str | None
    query: str

    @classmethod
    def from_graph(cls, raw: dict[str, Any], query: str) -> SearchHit:
        """Build a hit from one entry of ``hitsContainers[0].hits``.

        Fields are read from ``resource.properties`` when present, otherwise
        from ``resource`` directly (the shape Graph uses for driveItem hits).
        """
        resource = _require(raw, SEARCH_RESOURCE, "search hit", dict)
        hit_id = _require(resource, FIELD_ID, "search hit resource", str)
        props = _optional_object(resource, SEARCH_PROPERTIES, "search hit resource") or resource
        author = props.get(FIELD_AUTHOR)
        if author is None:
            author = _identity_name(resource, FIELD_CREATED_BY)
        return cls(
            id=hit_id,
            name=props.get(FIELD_NAME),
            url=props.get(FIELD_WEB_URL),
            last_modified=props.get(FIELD_LAST_MODIFIED),
            created=props.get(FIELD_CREATED),
            size=props.get(FIELD_SIZE),
            author=author,
            type=props.get(FIELD_FILETYPE),
            query=query,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "lastModified": self.last_modified,
            "created": self.created,
            "size": self.size,
            "author": self.author,
            "type": self.type,
        }
