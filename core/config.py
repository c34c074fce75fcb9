# =============================================================================
# core/config.py  —  Constants & Runtime Settings
# =============================================================================
#
# Two kinds of knobs live here:
#
#   FIXED CONSTANTS  (CHARACTER_LIMIT, CACHE_TTL_MS)
#     These are part of the contract with callers.  A caller that reads a
#     truncated response or a cache-miss hint relies on them, so they are
#     plain module constants and NOT read from the environment.
#
#   RUNTIME SETTINGS  (ServerSettings)
#     Read from environment variables at startup.  main.py loads a .env file
#     (python-dotenv) before calling load_settings(), so either works:
#
#       GDRIVE_MCP_LOG_LEVEL=DEBUG
#       GDRIVE_MCP_SERVER_NAME=gdrive-mcp
#       GDRIVE_MCP_DEFAULT_RETURN_MODE=summary
# =============================================================================

import logging
import os
from dataclasses import dataclass

from core.models import ReturnMode


# Maximum number of characters any single tool response may carry.
CHARACTER_LIMIT = 25000

# How long a fetched resource stays addressable through gdrive:// URIs.
CACHE_TTL_MS = 30 * 60 * 1000   # 30 minutes

_ENV_PREFIX = "GDRIVE_MCP_"


@dataclass(frozen=True)
class ServerSettings:
    """Settings the server reads once at startup."""

    server_name: str = "gdrive-mcp"
    log_level: str = "INFO"
    default_return_mode: ReturnMode = ReturnMode.SUMMARY


def _getenv(name: str, default: str) -> str:
    value = os.environ.get(f"{_ENV_PREFIX}{name}", "").strip()
    return value or default


def load_settings() -> ServerSettings:
    """Build ServerSettings from the environment.

    Raises:
        ValueError: if GDRIVE_MCP_LOG_LEVEL is not a logging level name or
            GDRIVE_MCP_DEFAULT_RETURN_MODE is not "summary" / "full".
    """
    log_level = _getenv("LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"{_ENV_PREFIX}LOG_LEVEL has unknown level: {log_level!r}")

    raw_mode = _getenv("DEFAULT_RETURN_MODE", ReturnMode.SUMMARY.value).lower()
    try:
        return_mode = ReturnMode(raw_mode)
    except ValueError:
        raise ValueError(
            f"{_ENV_PREFIX}DEFAULT_RETURN_MODE must be 'summary' or 'full', got {raw_mode!r}"
        ) from None

    return ServerSettings(
        server_name=_getenv("SERVER_NAME", "gdrive-mcp"),
        log_level=log_level,
        default_return_mode=return_mode,
    )
