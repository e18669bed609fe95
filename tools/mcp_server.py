# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (all OpenFEC tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Registers every operation from core/catalog.py as an MCP tool and hands
#   each call to the core Dispatcher.  No OpenFEC knowledge lives here: this
#   file only translates between MCP and core/.
#
# HOW IT WORKS (the flow):
#   1. The agent lists tools; FastMCP answers from the CatalogTool
#      registrations (name, description, JSON schema from the catalog).
#   2. The agent calls a tool by name with an argument object.
#   3. CatalogTool.run() passes the raw arguments to Dispatcher.dispatch().
#      Validation happens there, after the rate-limit check, so FastMCP
#      never rejects arguments on its own.
#      A name with no registered tool is sent there as well, by
#      UnknownToolMiddleware, and comes back as UNKNOWN_OPERATION.
#   4. Success → one text block holding the OpenFEC JSON, unchanged.
#      Failure → ToolError("<KIND>: <message>"), which FastMCP returns to
#      the agent as an error result.
#
# RUNNING THIS SERVER:
#     a) python main.py
#     b) python -m tools.mcp_server
#   Both speak MCP over stdio.
# =============================================================================

import json
import logging
import sys
from typing import Any, Awaitable, Callable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

# The tools layer depends on core/ and nothing else.
from core.dispatcher import Dispatcher
from core.models import RemoteResult

SERVER_NAME = "openfec-server"
SERVER_VERSION = "0.1.0"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: STDOUT carries the MCP JSON stream, and anything else
# written there corrupts it.
#
# ANSI colours make calls and replies easy to tell apart in a terminal:
#   - CYAN for incoming calls (tool name + arguments)
#   - YELLOW for status lines
#   - GREEN for successful replies
#   - RED for error replies
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

# Upstream payloads can be hundreds of KB; only the head goes to the log.
_MAX_LOGGED_RESPONSE = 500

logger = logging.getLogger("openfec.mcp")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # httpx logs full request URLs at INFO, and ours carry the API key.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _log_request(tool_name: str, arguments: dict) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in arguments.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: RemoteResult) -> None:
    if result.ok:
        text = json.dumps(result.body, separators=(",", ":"))
        if len(text) > _MAX_LOGGED_RESPONSE:
            text = text[:_MAX_LOGGED_RESPONSE] + f"... ({len(text)} chars)"
        logger.info(f"{_GREEN}  ← {tool_name} response: {text}{_RESET}")
    else:
        logger.info(f"{_RED}  ← {tool_name} error: {result.error.describe()}{_RESET}")


# =============================================================================
# CatalogTool - one MCP tool per catalog descriptor
# =============================================================================
# FastMCP's @mcp.tool() decorator builds the schema from a Python signature
# and validates arguments itself.  Here the catalog is the single source of
# the schema and the Dispatcher does the validating (against pydantic models
# compiled from the same catalog), so each operation is registered as a Tool
# subclass that forwards the raw argument object.
# =============================================================================
def _reply(tool_name: str, result: RemoteResult, tokens_left: int) -> ToolResult:
    _log_status(f"{tokens_left} rate-limit tokens left")
    _log_response(tool_name, result)
    if not result.ok:
        raise ToolError(result.error.describe())
    return ToolResult(content=[TextContent(type="text", text=result.to_text())])


class CatalogTool(Tool):
    handler: Callable[..., Awaitable[RemoteResult]]
    tokens_left: Callable[[], int]

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        _log_request(self.name, arguments)
        result = await self.handler(self.name, arguments)
        return _reply(self.name, result, self.tokens_left())


# =============================================================================
# UnknownToolMiddleware - unregistered names go to the Dispatcher too
# =============================================================================
# Left alone, FastMCP answers an unknown name with a bare "Unknown tool: X".
# Routing it through the Dispatcher gives it the same "<KIND>: <message>"
# shape as every other error, and the Dispatcher rejects it before the
# rate-limit check.
# =============================================================================
class UnknownToolMiddleware(Middleware):
    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    async def on_call_tool(self, context: MiddlewareContext, call_next) -> ToolResult:
        name = context.message.name
        if self._dispatcher.descriptor(name) is not None:
            return await call_next(context)

        arguments = context.message.arguments or {}
        _log_request(name, arguments)
        result = await self._dispatcher.dispatch(name, arguments)
        return _reply(name, result, self._dispatcher.rate_limiter.available)


def create_server(dispatcher: Dispatcher) -> FastMCP:
    """Build the FastMCP server with one tool per catalog operation."""
    # Argument checking is the Dispatcher's job, after the rate-limit check.
    mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION, strict_input_validation=False)
    mcp.add_middleware(UnknownToolMiddleware(dispatcher))
    limiter = dispatcher.rate_limiter
    for name, description, schema in dispatcher.list_operations():
        mcp.add_tool(
            CatalogTool(
                name=name,
                description=description,
                parameters=schema,
                handler=dispatcher.dispatch,
                tokens_left=lambda: limiter.available,
            )
        )
    return mcp


# =============================================================================
# Server entry point
# =============================================================================
# `python -m tools.mcp_server` behaves exactly like `python main.py`.
# =============================================================================
if __name__ == "__main__":
    from main import main

    sys.exit(main())
