# =============================================================================
# main.py  -  Entry Point for the OpenFEC MCP server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (OPENFEC_API_KEY and optional tuning knobs)
#   2. Builds the OpenFEC client, the shared rate limiter and the Dispatcher
#   3. Registers every catalog operation as an MCP tool
#   4. Serves MCP over stdio until the client disconnects or Ctrl-C
#
# Without OPENFEC_API_KEY the server prints the problem to stderr and exits
# with status 1 before opening the transport.
# =============================================================================

import asyncio
import logging
import sys

from dotenv import load_dotenv

from core.config import Settings, load_settings
from core.dispatcher import Dispatcher
from core.errors import ConfigError
from core.openfec import OpenFECClient
from core.rate_limiter import TokenBucket
from tools.mcp_server import configure_logging, create_server

logger = logging.getLogger("openfec.main")


async def serve(settings: Settings) -> None:
    """Run the stdio server; the HTTP client is closed however it stops."""
    client = OpenFECClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
    )
    limiter = TokenBucket(settings.rate_limit, settings.rate_window_seconds)
    mcp = create_server(Dispatcher(client, limiter))

    logger.info("OpenFEC MCP server running on stdio (%s)", settings.base_url)
    try:
        await mcp.run_async(transport="stdio")
    finally:
        await client.aclose()


def main() -> int:
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
