# =============================================================================
# core/__init__.py
# =============================================================================
# The request-dispatch pipeline for the OpenFEC tool server:
#
#   catalog.py       what operations exist and what arguments they take
#   validation.py    raw arguments → ValidatedRequest | ValidationFailure
#   rate_limiter.py  the shared token bucket
#   shaping.py       ValidatedRequest → OpenFEC path + query parameters
#   openfec.py       the HTTP client and the committee lookup
#   dispatcher.py    runs one call through all of the above
#   config.py        environment settings
#   errors.py        the error taxonomy
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or the MCP SDK.  The pipeline can
#   be driven from a test or a REPL with a stubbed httpx transport.
# =============================================================================
