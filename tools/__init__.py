# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP layer: the translation between the protocol and core/.
#
#   workspace_tools.py  tool bodies as plain functions (fetch, cache, store,
#                       answer in summary or full mode)
#   mcp_server.py       FastMCP wiring: tool decorators, the gdrive://
#                       resource template, and logging
#
# Tools hold no parsing, caching or truncation logic of their own; that all
# lives in core/.
# =============================================================================
