# =============================================================================
# core/resource_server.py  —  Resolve Parsed URIs Against the Cache
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Answers a "read resource" request.  Given a ParsedResourceUri and the
#   server's ResourceCache it returns a ServeResult:
#
#     content   the requested text (possibly "" for a chunk past the end)
#     error     why there is no content (bad URI, cache miss, placeholder)
#     hint      what the caller should do next
#
# NOTHING HERE RAISES.  Every branch returns a ServeResult, including the
# final fallthrough for an action this module does not know.
#
# NOT YET IMPLEMENTED:
#   "structure" (docs) and "values" (sheets) parse fine but always answer
#   with a fixed error + hint pointing at an alternative.  That is distinct
#   from a cache miss: the resource may well be cached.
# =============================================================================

import logging

from core.cache import ResourceCache
from core.models import (
    CacheEntry,
    ChunkRange,
    InvalidUri,
    LegacyUri,
    ParsedResourceUri,
    ResourceAction,
    ServeResult,
    TypedUri,
    UriKind,
)
from core.resource_uri import parse_resource_uri

logger = logging.getLogger(__name__)


LEGACY_HINT = "Legacy URI format - use standard resource fetch"

# Which fetch tool populates the cache for each URI kind.
FETCH_TOOL_BY_KIND = {
    UriKind.DOC: "docs_getDocument",
    UriKind.SHEET: "sheets_getSpreadsheet",
    UriKind.FILE: "drive_exportFile",
}


def _cache_miss(parsed: TypedUri) -> ServeResult:
    tool = FETCH_TOOL_BY_KIND.get(parsed.kind, "docs_getDocument")
    return ServeResult(
        content=None,
        error=f"Cache miss for resource: {parsed.resource_id}",
        hint=f"First fetch the document using the appropriate tool (e.g., {tool}) to populate the cache.",
    )


def _serve_chunk(entry: CacheEntry, params) -> ServeResult:
    text = entry.extracted_text
    start = params.start if isinstance(params, ChunkRange) else 0
    end = params.end if isinstance(params, ChunkRange) else len(text)
    return ServeResult(content=text[start:min(end, len(text))])


def serve_cached_content(parsed: ParsedResourceUri, cache: ResourceCache) -> ServeResult:
    """Resolve ``parsed`` against ``cache``."""
    if isinstance(parsed, InvalidUri):
        return ServeResult(content=None, error=parsed.error)

    if isinstance(parsed, LegacyUri):
        return ServeResult(content=None, hint=LEGACY_HINT)

    if not isinstance(parsed, TypedUri):
        return ServeResult(content=None, error=f"Unsupported parse result: {type(parsed).__name__}")

    entry = cache.get(parsed.resource_id)
    if entry is None:
        return _cache_miss(parsed)

    action = parsed.action
    if action is ResourceAction.CONTENT:
        return ServeResult(content=entry.extracted_text)

    if action is ResourceAction.CHUNK:
        return _serve_chunk(entry, parsed.params)

    if action is ResourceAction.STRUCTURE:
        return ServeResult(
            content=None,
            error="Structure extraction not yet implemented",
            hint="Use content or chunk actions to access document text",
        )

    if action is ResourceAction.VALUES:
        return ServeResult(
            content=None,
            error="Sheet values extraction not yet implemented",
            hint="Use sheets_batchGetValues tool to fetch specific ranges",
        )

    return ServeResult(content=None, error=f"Unknown action: {getattr(action, 'value', action)}")


def read_resource(uri: str, cache: ResourceCache) -> ServeResult:
    """The host's "read resource" entry point: parse, then serve."""
    parsed = parse_resource_uri(uri)
    result = serve_cached_content(parsed, cache)
    if result.error:
        logger.info("read_resource %s -> error: %s", uri, result.error)
    else:
        logger.info("read_resource %s -> %d chars", uri, len(result.content or ""))
    return result
