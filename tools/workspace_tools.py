# =============================================================================
# tools/workspace_tools.py  —  Fetch-Tool Logic (framework-free)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   The body of every fetch tool, as plain functions.  tools/mcp_server.py
#   wraps each one in a FastMCP decorator; tests call them directly.
#
# THE PATTERN EVERY FETCH TOOL FOLLOWS:
#   1. Fetch from the WorkspaceClient
#   2. Flatten the response to text (core/extraction.py)
#   3. Store (raw response, text, type) in the ResourceCache
#   4. Answer in one of two modes:
#        summary (default)  metadata + a gdrive:// URI into the cache
#        full               the text itself, capped by truncate_response()
#
#   Either way the response stays under CHARACTER_LIMIT (plus the short
#   truncation trailer).  The caller reads anything larger through the URI.
#
# ERRORS:
#   A WorkspaceError never escapes a tool.  It becomes an "error" dict with
#   a "hint", the same shape the resource-read path uses.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from core.cache import ResourceCache
from core.config import CACHE_TTL_MS, CHARACTER_LIMIT, ServerSettings
from core.extraction import (
    extract_document_text,
    extract_spreadsheet_text,
    extract_value_ranges_text,
)
from core.models import ResourceType, ReturnMode
from core.resource_server import read_resource
from core.resource_uri import (
    doc_chunk_uri,
    doc_content_uri,
    file_content_uri,
    sheet_values_uri,
)
from core.truncation import truncate_response
from core.workspace import (
    MockWorkspaceClient,
    WorkspaceClient,
    WorkspaceError,
    WorkspaceNotFoundError,
)

logger = logging.getLogger(__name__)

_CACHE_MINUTES = CACHE_TTL_MS // 60000


# -----------------------------------------------------------------------------
# ServerContext — the state one server instance owns
# -----------------------------------------------------------------------------
# Created once by create_server() and handed to every tool and to the
# read-resource handler.  Tests build their own with a fake-clock cache.
# -----------------------------------------------------------------------------
@dataclass
class ServerContext:
    cache: ResourceCache = field(default_factory=ResourceCache)
    client: WorkspaceClient = field(default_factory=MockWorkspaceClient)
    settings: ServerSettings = field(default_factory=ServerSettings)


def _resolve_mode(ctx: ServerContext, return_mode: Optional[Union[str, ReturnMode]]) -> ReturnMode:
    if return_mode is None:
        return ctx.settings.default_return_mode
    return ReturnMode(return_mode)


def _error_response(ctx: ServerContext, exc: WorkspaceError, fetch_hint: str) -> dict:
    logger.info("workspace error: %s", exc)
    response = {"error": str(exc)}
    if isinstance(exc, WorkspaceNotFoundError):
        response["available_ids"] = ctx.client.list_ids(exc.kind)
        response["hint"] = "Check the ID, or try one of the available IDs listed above."
    else:
        response["hint"] = fetch_hint
    return response


def _first_chunk_uri(resource_id: str, text_length: int) -> str:
    return doc_chunk_uri(resource_id, 0, max(1, min(CHARACTER_LIMIT, text_length)))


# =============================================================================
# docs_getDocument
# =============================================================================
def get_document(
    ctx: ServerContext,
    document_id: str,
    include_tabs_content: bool = False,
    return_mode: Optional[Union[str, ReturnMode]] = None,
) -> dict:
    mode = _resolve_mode(ctx, return_mode)
    try:
        document = ctx.client.get_document(document_id, include_tabs_content=include_tabs_content)
    except WorkspaceError as exc:
        return _error_response(ctx, exc, "Check the document ID and try again.")

    text = extract_document_text(document)
    ctx.cache.store(document_id, document, text, ResourceType.DOCUMENT)
    logger.info("cached document %s (%d chars)", document_id, len(text))

    if mode is ReturnMode.FULL:
        truncation = truncate_response(
            text,
            hint=(
                f"Read the remainder with gdrive://docs/{document_id}/chunk/{{start}}-{{end}} "
                f"(e.g., {doc_chunk_uri(document_id, CHARACTER_LIMIT, len(text))})."
            ),
        )
        return {"documentId": document_id, "title": document.get("title", ""), **truncation.to_dict()}

    return {
        "documentId": document_id,
        "title": document.get("title", ""),
        "textLength": len(text),
        "resourceUri": doc_content_uri(document_id),
        "chunkUriExample": _first_chunk_uri(document_id, len(text)),
        "hint": (
            f"Content cached for {_CACHE_MINUTES} minutes. Read it via resourceUri, or in slices via "
            f"gdrive://docs/{document_id}/chunk/{{start}}-{{end}}. Use returnMode: 'full' for inline text."
        ),
    }


# =============================================================================
# sheets_getSpreadsheet
# =============================================================================
def get_spreadsheet(
    ctx: ServerContext,
    spreadsheet_id: str,
    ranges: Optional[Sequence[str]] = None,
    include_grid_data: bool = False,
    return_mode: Optional[Union[str, ReturnMode]] = None,
) -> dict:
    mode = _resolve_mode(ctx, return_mode)
    try:
        spreadsheet = ctx.client.get_spreadsheet(
            spreadsheet_id, ranges=ranges, include_grid_data=include_grid_data
        )
    except WorkspaceError as exc:
        return _error_response(ctx, exc, "Check the spreadsheet ID and ranges, then try again.")

    text = extract_spreadsheet_text(spreadsheet)
    ctx.cache.store(spreadsheet_id, spreadsheet, text, ResourceType.SPREADSHEET)
    logger.info("cached spreadsheet %s (%d chars)", spreadsheet_id, len(text))

    title = spreadsheet.get("properties", {}).get("title", "")
    if mode is ReturnMode.FULL:
        truncation = truncate_response(
            text,
            hint="Pass narrower ranges, or use sheets_batchGetValues to fetch specific ranges.",
        )
        return {"spreadsheetId": spreadsheet_id, "title": title, **truncation.to_dict()}

    sheets = [
        {
            "title": sheet["properties"]["title"],
            "rowCount": sheet["properties"].get("gridProperties", {}).get("rowCount", 0),
            "columnCount": sheet["properties"].get("gridProperties", {}).get("columnCount", 0),
        }
        for sheet in spreadsheet.get("sheets", [])
    ]
    summary = {
        "spreadsheetId": spreadsheet_id,
        "title": title,
        "sheets": sheets,
        "textLength": len(text),
        "hint": (
            f"Spreadsheet cached for {_CACHE_MINUTES} minutes. "
            "Use sheets_batchGetValues to read cell values for specific ranges."
        ),
    }
    if sheets:
        summary["resourceUri"] = sheet_values_uri(spreadsheet_id, sheets[0]["title"])
    return summary


# =============================================================================
# sheets_batchGetValues
# =============================================================================
def batch_get_values(
    ctx: ServerContext,
    spreadsheet_id: str,
    ranges: Sequence[str],
    major_dimension: str = "ROWS",
    return_mode: Optional[Union[str, ReturnMode]] = None,
) -> dict:
    mode = _resolve_mode(ctx, return_mode)
    if not ranges:
        return {"error": "At least one range is required", "hint": "Pass ranges like ['Sheet1!A1:B10']."}
    try:
        response = ctx.client.batch_get_values(spreadsheet_id, ranges, major_dimension=major_dimension)
    except WorkspaceError as exc:
        return _error_response(ctx, exc, "Check the range syntax, e.g. 'Sheet1!A1:B10'.")

    value_ranges = response.get("valueRanges", [])
    text = extract_value_ranges_text(value_ranges)
    ctx.cache.store(spreadsheet_id, response, text, ResourceType.SPREADSHEET)
    logger.info("cached %d value ranges of %s (%d chars)", len(value_ranges), spreadsheet_id, len(text))

    if mode is ReturnMode.FULL:
        truncation = truncate_response(
            text,
            hint="Request fewer or narrower ranges to stay within the response limit.",
        )
        return {"spreadsheetId": spreadsheet_id, **truncation.to_dict()}

    return {
        "spreadsheetId": spreadsheet_id,
        "ranges": [
            {"range": vr.get("range", ""), "rowCount": len(vr.get("values", []))}
            for vr in value_ranges
        ],
        "textLength": len(text),
        "resourceUri": sheet_values_uri(spreadsheet_id, ranges[0]),
        "hint": (
            f"Values cached for {_CACHE_MINUTES} minutes. "
            "Use returnMode: 'full' to receive the values inline."
        ),
    }


# =============================================================================
# drive_exportFile
# =============================================================================
def export_file(
    ctx: ServerContext,
    file_id: str,
    mime_type: str,
    return_mode: Optional[Union[str, ReturnMode]] = None,
) -> dict:
    mode = _resolve_mode(ctx, return_mode)
    try:
        exported = ctx.client.export_file(file_id, mime_type)
    except WorkspaceError as exc:
        return _error_response(ctx, exc, "Export as text/plain or text/markdown instead.")

    text = exported.get("data", "")
    ctx.cache.store(file_id, exported, text, ResourceType.FILE)
    logger.info("cached file %s as %s (%d chars)", file_id, mime_type, len(text))

    if mode is ReturnMode.FULL:
        truncation = truncate_response(
            text,
            hint=f"Read the full export via {file_content_uri(file_id)}.",
        )
        return {"fileId": file_id, "mimeType": mime_type, **truncation.to_dict()}

    return {
        "fileId": file_id,
        "name": exported.get("name", ""),
        "mimeType": mime_type,
        "textLength": len(text),
        "resourceUri": file_content_uri(file_id),
        "chunkUriExample": _first_chunk_uri(file_id, len(text)),
        "hint": (
            f"Export cached for {_CACHE_MINUTES} minutes. Read it via resourceUri, or in slices "
            f"via gdrive://docs/{file_id}/chunk/{{start}}-{{end}}: the cache is keyed by ID "
            "alone, so the docs chunk form also reads exported files."
        ),
    }


# =============================================================================
# Cache observability & resource reads
# =============================================================================
def cache_stats(ctx: ServerContext) -> dict:
    return ctx.cache.stats()


def cache_cleanup(ctx: ServerContext) -> dict:
    removed = ctx.cache.cleanup()
    return {"removed": removed, "size": len(ctx.cache)}


def resource_read(ctx: ServerContext, uri: str) -> dict:
    return read_resource(uri, ctx.cache).to_dict()
