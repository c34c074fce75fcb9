# =============================================================================
# core/resource_uri.py  —  gdrive:// Resource URI Parser & Builders
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns an opaque address string into a ParsedResourceUri, and builds the
#   addresses that fetch tools hand back to callers.
#
# THE GRAMMAR:
#
#   gdrive:///{fileId}                            legacy (not cache-backed)
#   gdrive://docs/{id}/content
#   gdrive://docs/{id}/structure
#   gdrive://docs/{id}/chunk/{start}-{end}
#   gdrive://sheets/{id}/values/{urlEncodedRange}
#   gdrive://files/{id}/content
#   gdrive://files/{id}/content/{start}-{end}
#
# Rules are checked in the order above: the triple-slash legacy prefix wins
# over the typed prefix, and segments after the fourth are ignored.
#
# parse_resource_uri() is a total function: every string produces either a
# valid variant or an InvalidUri carrying a message the caller can read.
# No cache or network access happens here.
# =============================================================================

import re
from typing import Optional, Union
from urllib.parse import quote, unquote

from core.models import (
    ChunkRange,
    InvalidUri,
    LegacyUri,
    ParsedResourceUri,
    ResourceAction,
    SheetRange,
    TypedUri,
    UriKind,
)


SCHEME = "gdrive://"
LEGACY_PREFIX = "gdrive:///"

_RANGE_RE = re.compile(r"([0-9]+)-([0-9]+)")

# Segment name → URI kind.  Keys double as the "Valid types" list in errors.
_TYPE_SEGMENTS = {
    "docs": UriKind.DOC,
    "sheets": UriKind.SHEET,
    "files": UriKind.FILE,
}


def _parse_range(param: str, label: str, format_label: str) -> Union[ChunkRange, InvalidUri]:
    """Validate a ``{start}-{end}`` segment.

    ``label`` is "Chunk" or "Content", ``format_label`` is "chunk" or
    "content"; they only change the wording of the error messages.
    """
    match = _RANGE_RE.fullmatch(param)
    if match is None:
        return InvalidUri(f"Invalid {format_label} range format. Use: {{start}}-{{end}} (e.g., 0-5000)")

    start = int(match.group(1), 10)
    end = int(match.group(2), 10)

    if start < 0:
        return InvalidUri(f"{label} start index cannot be negative")
    if end <= start:
        return InvalidUri(f"{label} end index must be greater than start index")
    return ChunkRange(start=start, end=end)


def _parse_docs(resource_id: str, action: Optional[str], param: Optional[str]) -> ParsedResourceUri:
    if not action:
        return InvalidUri("Docs URI requires action: content, chunk, or structure")

    if action == ResourceAction.CONTENT.value:
        return TypedUri(UriKind.DOC, resource_id, ResourceAction.CONTENT)

    if action == ResourceAction.STRUCTURE.value:
        return TypedUri(UriKind.DOC, resource_id, ResourceAction.STRUCTURE)

    if action == ResourceAction.CHUNK.value:
        if not param:
            return InvalidUri("Chunk action requires range parameter (e.g., 0-5000)")
        chunk = _parse_range(param, "Chunk", "chunk")
        if isinstance(chunk, InvalidUri):
            return chunk
        return TypedUri(UriKind.DOC, resource_id, ResourceAction.CHUNK, chunk)

    return InvalidUri(f"Unknown docs action: {action}. Valid actions: content, chunk, structure")


def _parse_sheets(resource_id: str, action: Optional[str], param: Optional[str]) -> ParsedResourceUri:
    if action != ResourceAction.VALUES.value:
        return InvalidUri('Sheets URI requires "values" action with range parameter')
    if not param:
        return InvalidUri("Sheets values action requires range parameter (e.g., Sheet1!A1:B10)")
    return TypedUri(UriKind.SHEET, resource_id, ResourceAction.VALUES, SheetRange(unquote(param)))


def _parse_files(resource_id: str, action: Optional[str], param: Optional[str]) -> ParsedResourceUri:
    if action != ResourceAction.CONTENT.value:
        return InvalidUri('Files URI requires "content" action')
    if not param:
        # Whole-file request
        return TypedUri(UriKind.FILE, resource_id, ResourceAction.CONTENT)
    content_range = _parse_range(param, "Content", "content")
    if isinstance(content_range, InvalidUri):
        return content_range
    return TypedUri(UriKind.FILE, resource_id, ResourceAction.CONTENT, content_range)


_KIND_PARSERS = {
    UriKind.DOC: _parse_docs,
    UriKind.SHEET: _parse_sheets,
    UriKind.FILE: _parse_files,
}


def parse_resource_uri(uri: str) -> ParsedResourceUri:
    """Parse a gdrive:// URI into a tagged result.

    Examples:
        >>> parse_resource_uri("gdrive://docs/abc123/chunk/0-5000").to_dict()
        {'valid': True, 'type': 'doc', 'resourceId': 'abc123', 'action': 'chunk', 'params': {'start': 0, 'end': 5000}}
        >>> parse_resource_uri("https://example.com").valid
        False
    """
    if uri.startswith(LEGACY_PREFIX):
        file_id = uri[len(LEGACY_PREFIX):]
        if not file_id:
            return InvalidUri("Empty file ID in legacy URI")
        return LegacyUri(file_id)

    if not uri.startswith(SCHEME):
        return InvalidUri("Invalid URI scheme - must start with gdrive://")

    segments = uri[len(SCHEME):].split("/")
    if len(segments) < 2:
        return InvalidUri("URI must have at least type and resource ID")

    resource_type, resource_id = segments[0], segments[1]
    action = segments[2] if len(segments) > 2 else None
    param = segments[3] if len(segments) > 3 else None

    if not resource_id:
        return InvalidUri("Missing resource ID")

    kind = _TYPE_SEGMENTS.get(resource_type)
    if kind is None:
        valid_types = ", ".join(_TYPE_SEGMENTS)
        return InvalidUri(f"Unknown resource type: {resource_type}. Valid types: {valid_types}")

    return _KIND_PARSERS[kind](resource_id, action, param)


# -----------------------------------------------------------------------------
# Builders — used by the fetch tools to hand out addresses
# -----------------------------------------------------------------------------
def doc_content_uri(document_id: str) -> str:
    return f"{SCHEME}docs/{document_id}/content"


def doc_chunk_uri(document_id: str, start: int, end: int) -> str:
    return f"{SCHEME}docs/{document_id}/chunk/{start}-{end}"


def sheet_values_uri(spreadsheet_id: str, a1_range: str) -> str:
    # "/" must be encoded or it would split the range into extra segments.
    return f"{SCHEME}sheets/{spreadsheet_id}/values/{quote(a1_range, safe='!:')}"


def file_content_uri(file_id: str) -> str:
    return f"{SCHEME}files/{file_id}/content"
