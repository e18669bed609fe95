# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP wiring for the OpenFEC tool server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  It:
#     1. Registers each catalog operation as an MCP tool
#     2. Forwards raw arguments to the core Dispatcher
#     3. Converts the result into MCP content or a ToolError
#     4. Owns logging setup (stderr only; stdout is the transport)
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate arguments or shape queries (that's in core/)
#   - They do NOT talk to OpenFEC directly
# =============================================================================
