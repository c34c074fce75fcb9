# =============================================================================
# tools/mcp_server.py  —  FastMCP Server (tools + the gdrive:// resource)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the FastMCP server.  Each tool is a thin wrapper around a
#   function in tools/workspace_tools.py: it logs the call, delegates, and
#   logs the response.  No response-shaping logic lives here.
#
# TWO WAYS TO GET CONTENT OUT:
#   1. Tool calls (docs_getDocument, ...) answer with a bounded response:
#      a summary + gdrive:// URI, or truncated text.
#   2. The "read resource" path: the host reads a gdrive:// URI and
#      GdriveReadMiddleware parses the URI as sent and answers from the
#      cache.  resource_read exposes the same path as a tool for hosts that
#      only speak tools.
#
# ONE CACHE PER SERVER:
#   create_server() builds a ServerContext (cache + workspace client +
#   settings) and closes every tool over it.  Nothing is module-global.
#
# RUNNING THIS SERVER:
#   python main.py            (stdio transport)
#   gdrive-mcp                (console script installed by pyproject.toml)
# =============================================================================

import json
import logging
import sys
from typing import Literal, Optional

from fastmcp import FastMCP
from fastmcp.resources import ResourceContent, ResourceResult
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext

from core.config import ServerSettings
from core.workspace import WorkspaceClient
from tools import workspace_tools
from tools.workspace_tools import ServerContext

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP JSON-RPC stream, so every log line goes to STDERR.
# Colours: CYAN request, YELLOW status, GREEN response.
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

# Responses longer than this are abbreviated in the log (never in the reply).
_LOG_PREVIEW_CHARS = 400

ReturnModeParam = Literal["summary", "full"]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    payload = json.dumps(result, separators=(",", ":"), ensure_ascii=False)
    if len(payload) > _LOG_PREVIEW_CHARS:
        payload = f"{payload[:_LOG_PREVIEW_CHARS]}... ({len(payload)} chars)"
    logging.info(f"{_GREEN}  ← {tool_name} response: {payload}{_RESET}")
    return result


def read_gdrive_uri(context: ServerContext, uri: str) -> str:
    """Parse → serve one gdrive:// URI and return the result as JSON text."""
    _log_request("read_resource", uri=uri)
    result = _log_response("read_resource", workspace_tools.resource_read(context, uri))
    return json.dumps(result, ensure_ascii=False)


class GdriveReadMiddleware(Middleware):
    """Answers every resources/read for a gdrive: URI from the literal URI.

    Every gdrive: URI gets a {content, error, hint} body, including legacy
    and malformed ones, so the host never sees a "resource not found"
    protocol error for this scheme.
    """

    def __init__(self, context: ServerContext) -> None:
        self.context = context

    async def on_read_resource(
        self,
        context: MiddlewareContext,
        call_next: CallNext,
    ) -> ResourceResult:
        uri = str(context.message.uri)
        if not uri.startswith("gdrive:"):
            return await call_next(context)
        body = read_gdrive_uri(self.context, uri)
        return ResourceResult([ResourceContent(body, mime_type="application/json")])


def create_server(
    context: Optional[ServerContext] = None,
    *,
    settings: Optional[ServerSettings] = None,
    client: Optional[WorkspaceClient] = None,
) -> FastMCP:
    """Build a FastMCP server bound to one ServerContext.

    Args:
        context: Pre-built context (tests pass one with a fake-clock cache).
            When omitted, one is created from ``settings`` and ``client``.
        settings: Runtime settings; defaults to ServerSettings().
        client: Workspace client; defaults to the in-process mock.
    """
    if context is None:
        context = ServerContext()
        if settings is not None:
            context.settings = settings
        if client is not None:
            context.client = client

    mcp = FastMCP(context.settings.server_name)
    default_mode = context.settings.default_return_mode.value

    # =========================================================================
    # Fetch tools
    # =========================================================================
    @mcp.tool(name="docs_getDocument")
    def docs_get_document(
        documentId: str,
        includeTabsContent: bool = False,
        returnMode: Optional[ReturnModeParam] = None,
    ) -> dict:
        """Fetch a Google Doc and cache its text for gdrive:// resource reads.

        Args:
            documentId: The document ID.
            includeTabsContent: Include the content of every tab.
            returnMode: 'summary' (default) returns metadata plus a resource
                URI and caches the content. 'full' returns the text inline,
                truncated at 25,000 characters.

        Returns:
            summary: documentId, title, textLength, resourceUri,
                chunkUriExample, hint.
            full: documentId, title, text, truncated, originalLength (when
                truncated).
        """
        _log_request("docs_getDocument", documentId=documentId,
                     includeTabsContent=includeTabsContent, returnMode=returnMode)
        result = workspace_tools.get_document(
            context, documentId, includeTabsContent, returnMode or default_mode
        )
        return _log_response("docs_getDocument", result)

    @mcp.tool(name="sheets_getSpreadsheet")
    def sheets_get_spreadsheet(
        spreadsheetId: str,
        ranges: Optional[list[str]] = None,
        includeGridData: bool = False,
        returnMode: Optional[ReturnModeParam] = None,
    ) -> dict:
        """Fetch spreadsheet metadata (and optionally grid data) and cache it.

        Args:
            spreadsheetId: The spreadsheet ID.
            ranges: Only include these A1 ranges / sheet titles.
            includeGridData: Include cell values.
            returnMode: 'summary' (default) or 'full' (inline, truncated).
        """
        _log_request("sheets_getSpreadsheet", spreadsheetId=spreadsheetId, ranges=ranges,
                     includeGridData=includeGridData, returnMode=returnMode)
        result = workspace_tools.get_spreadsheet(
            context, spreadsheetId, ranges, includeGridData, returnMode or default_mode
        )
        return _log_response("sheets_getSpreadsheet", result)

    @mcp.tool(name="sheets_batchGetValues")
    def sheets_batch_get_values(
        spreadsheetId: str,
        ranges: list[str],
        majorDimension: Literal["ROWS", "COLUMNS"] = "ROWS",
        returnMode: Optional[ReturnModeParam] = None,
    ) -> dict:
        """Read cell values for one or more A1 ranges, e.g. 'Sheet1!A1:B10'.

        Use returnMode 'full' to get the values inline; 'summary' (default)
        returns row counts per range and caches the values.
        """
        _log_request("sheets_batchGetValues", spreadsheetId=spreadsheetId, ranges=ranges,
                     majorDimension=majorDimension, returnMode=returnMode)
        result = workspace_tools.batch_get_values(
            context, spreadsheetId, ranges, majorDimension, returnMode or default_mode
        )
        return _log_response("sheets_batchGetValues", result)

    @mcp.tool(name="drive_exportFile")
    def drive_export_file(
        fileId: str,
        mimeType: str,
        returnMode: Optional[ReturnModeParam] = None,
    ) -> dict:
        """Export a Drive file as text (e.g. text/plain, text/markdown) and cache it.

        Args:
            fileId: The Drive file ID.
            mimeType: Export MIME type.
            returnMode: 'summary' (default) or 'full' (inline, truncated).
        """
        _log_request("drive_exportFile", fileId=fileId, mimeType=mimeType, returnMode=returnMode)
        result = workspace_tools.export_file(context, fileId, mimeType, returnMode or default_mode)
        return _log_response("drive_exportFile", result)

    # =========================================================================
    # Cache tools
    # =========================================================================
    @mcp.tool(name="cache_getStats")
    def cache_get_stats() -> dict:
        """List cached resources with their type, age in seconds and text length."""
        _log_request("cache_getStats")
        return _log_response("cache_getStats", workspace_tools.cache_stats(context))

    @mcp.tool(name="cache_cleanup")
    def cache_cleanup() -> dict:
        """Remove expired cache entries and report how many were removed."""
        _log_request("cache_cleanup")
        result = workspace_tools.cache_cleanup(context)
        _log_status(f"Removed {result['removed']} expired entries")
        return _log_response("cache_cleanup", result)

    @mcp.tool(name="resource_read")
    def resource_read(uri: str) -> dict:
        """Read previously fetched content by gdrive:// URI.

        Accepted forms:
            gdrive://docs/{id}/content
            gdrive://docs/{id}/chunk/{start}-{end}
            gdrive://sheets/{id}/values/{urlEncodedRange}
            gdrive://files/{id}/content

        Returns {content, error?, hint?}. content is null on a cache miss;
        fetch the resource with the matching tool first.
        """
        _log_request("resource_read", uri=uri)
        return _log_response("resource_read", workspace_tools.resource_read(context, uri))


    # =========================================================================
    # gdrive:// reads (the host's "read resource" entry point)
    # =========================================================================
    # The template advertises the address space to hosts.  Reads are answered
    # by GdriveReadMiddleware from the URI exactly as the host sent it:
    # template parameters arrive percent-decoded and path-screened, which
    # would split encoded IDs and reject legacy gdrive:///{fileId} URIs.
    # =========================================================================
    @mcp.resource("gdrive://{path*}", name="gdrive_resource", mime_type="application/json")
    def gdrive_resource(path: str) -> str:
        """Cached Google Workspace content addressed by gdrive:// URI."""
        return read_gdrive_uri(context, f"gdrive://{path}")

    mcp.add_middleware(GdriveReadMiddleware(context))
    return mcp
