"""
Task parser MCP server entry point.

Startup sequence:
1. Build ParserSettings from environment
2. Create the shared TaskParser (validates keywords)
3. Start REST API server in background thread (if API_ENABLED)
4. Register all MCP tools
5. Run MCP server (stdio transport)
"""

import logging
import os
import sys
import threading

from mcp.server.fastmcp import FastMCP

from models.settings import settings_from_env
from parsers.task_parser import TaskParser
from tools import register_task_tools

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
log = logging.getLogger(__name__)


def _start_api_server(parser, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from api.app import create_app

    app = create_app(parser)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


def main() -> None:
    try:
        settings = settings_from_env()
        parser = TaskParser.create(settings)
    except ValueError as e:  # InvalidKeyword or a malformed DATE_LOOKAHEAD
        log.error("Invalid parser configuration: %s", e)
        sys.exit(1)

    log.info("Keywords: %s", ", ".join(parser.keyword_set))
    log.info(
        "Blocks: callouts=%s code=%s comments=%s language-comments=%s",
        settings.include_callout_blocks,
        settings.include_code_blocks,
        settings.include_comment_blocks,
        settings.language_comment_support.enabled,
    )

    # Start REST API in a daemon thread
    api_enabled = os.environ.get("API_ENABLED", "true").lower() in ("true", "1", "yes")
    if api_enabled:
        api_port = int(os.environ.get("API_PORT", "9400"))
        api_thread = threading.Thread(
            target=_start_api_server, args=(parser, api_port), daemon=True
        )
        api_thread.start()

    # Create MCP server and register tools
    mcp = FastMCP("todoseq-parser")
    register_task_tools(mcp, parser)

    log.info("Starting todoseq-parser server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
