# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses and enums define the *shape* of everything that flows
# through the bounded-response layer:
#
#   - CacheEntry          one fetched document / spreadsheet / file
#   - ParsedResourceUri   what the URI parser hands to the content server
#   - ServeResult         what the content server hands back to the host
#   - TruncationResult    what the truncator hands back to a tool
#
# WIRE SHAPES:
#   The host and the calling agent see camelCase JSON ("resourceId",
#   "originalLength").  Python code sees snake_case attributes.  Every model
#   that crosses the wire has a to_dict() that produces the JSON shape, and
#   omits optional keys that are unset rather than sending nulls.
# =============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


# -----------------------------------------------------------------------------
# Enums — the closed vocabularies the parser and server branch on
# -----------------------------------------------------------------------------
class ResourceType(str, Enum):
    """What kind of thing a cache entry holds."""

    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    FILE = "file"


class UriKind(str, Enum):
    """The resource kind named by a parsed URI."""

    LEGACY = "legacy"
    DOC = "doc"
    SHEET = "sheet"
    FILE = "file"


class ResourceAction(str, Enum):
    """The action segment of a typed resource URI."""

    CONTENT = "content"
    CHUNK = "chunk"
    STRUCTURE = "structure"
    VALUES = "values"


class ReturnMode(str, Enum):
    """How a fetch tool answers: a pointer into the cache, or the text itself."""

    SUMMARY = "summary"
    FULL = "full"


# -----------------------------------------------------------------------------
# CacheEntry — one fetched resource, as stored in the TTL cache
# -----------------------------------------------------------------------------
# Frozen: once stored, an entry never changes.  A re-fetch replaces the whole
# entry under the same key.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class CacheEntry:
    """A fetched resource and its flattened text projection."""

    raw_content: Any                   # Full API response, opaque to this layer
    extracted_text: str                # Plain text used for chunk slicing
    fetched_at: int                    # Epoch milliseconds at store() time
    resource_type: ResourceType

    @property
    def text_length(self) -> int:
        return len(self.extracted_text)


# -----------------------------------------------------------------------------
# URI parameters
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ChunkRange:
    """Half-open character range [start, end) of a cached text."""

    start: int
    end: int

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class SheetRange:
    """A decoded A1-notation range such as ``Sheet 1!A1:B10``."""

    range: str

    def to_dict(self) -> dict:
        return {"range": self.range}


# -----------------------------------------------------------------------------
# ParsedResourceUri — tagged union returned by core.resource_uri
# -----------------------------------------------------------------------------
# Three variants, told apart with isinstance():
#
#   InvalidUri  → the address was malformed; carries the error message
#   LegacyUri   → gdrive:///{id}; not backed by the cache
#   TypedUri    → gdrive://{docs|sheets|files}/{id}/{action}[/{param}]
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class InvalidUri:
    error: str

    valid = False

    def to_dict(self) -> dict:
        return {"valid": False, "error": self.error}


@dataclass(frozen=True)
class LegacyUri:
    resource_id: str

    valid = True
    kind = UriKind.LEGACY

    def to_dict(self) -> dict:
        return {"valid": True, "type": self.kind.value, "resourceId": self.resource_id}


@dataclass(frozen=True)
class TypedUri:
    kind: UriKind
    resource_id: str
    action: ResourceAction
    params: Optional[Union[ChunkRange, SheetRange]] = None

    valid = True

    def to_dict(self) -> dict:
        result = {
            "valid": True,
            "type": self.kind.value,
            "resourceId": self.resource_id,
            "action": self.action.value,
        }
        if self.params is not None:
            result["params"] = self.params.to_dict()
        return result


ParsedResourceUri = Union[InvalidUri, LegacyUri, TypedUri]


# -----------------------------------------------------------------------------
# ServeResult — the answer to a "read resource" call
# -----------------------------------------------------------------------------
# content is None whenever error or hint explains why there is nothing to
# show.  A chunk past the end of the text is content="" with no error.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ServeResult:
    content: Optional[str]
    error: Optional[str] = None
    hint: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.content is not None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"content": self.content}
        if self.error is not None:
            result["error"] = self.error
        if self.hint is not None:
            result["hint"] = self.hint
        return result


# -----------------------------------------------------------------------------
# TruncationResult — the bounded form of a tool response
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TruncationResult:
    text: str
    truncated: bool
    original_length: Optional[int] = None   # Only set when truncated

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"text": self.text, "truncated": self.truncated}
        if self.original_length is not None:
            result["originalLength"] = self.original_length
        return result
