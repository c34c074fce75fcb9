# =============================================================================
# main.py  —  Entry Point for the gdrive-mcp Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#   (or, once installed:  gdrive-mcp)
#
# WHAT HAPPENS:
#   1. Loads a .env file if one exists (GDRIVE_MCP_* settings)
#   2. Reads ServerSettings from the environment
#   3. Configures logging to STDERR
#   4. Builds the FastMCP server around one fresh ResourceCache
#   5. Serves MCP over stdio until the host disconnects
#
# Cache entries live only as long as this process.
# =============================================================================

from dotenv import load_dotenv

from core.config import load_settings
from tools.mcp_server import configure_logging, create_server


def main() -> None:
    # Must run before load_settings(): the settings come from the environment.
    load_dotenv()

    settings = load_settings()
    configure_logging(settings.log_level)

    server = create_server(settings=settings)
    server.run()


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
