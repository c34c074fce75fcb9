# =============================================================================
# core/__init__.py
# =============================================================================
# The bounded-response & resource-addressing layer.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or any transport.  Every module
#   here is plain Python and can be exercised in a REPL or a unit test with
#   no server running and no network access.
#
#   cache.py            TTL cache of fetched content
#   resource_uri.py     gdrive:// URI parser and builders
#   resource_server.py  resolves parsed URIs against the cache
#   truncation.py       caps inline tool responses at CHARACTER_LIMIT
#   extraction.py       flattens API responses to plain text
#   workspace.py        workspace client interface + mock data
#   config.py           constants and runtime settings
#   models.py           the dataclasses and enums shared by all of the above
# =============================================================================
