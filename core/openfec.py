# =============================================================================
# core/openfec.py  -  OpenFEC HTTP client + derived committee lookup
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   - OpenFECClient: a thin async wrapper around httpx that adds the API key
#     to every request and classifies failures as RemoteAPIError.
#   - resolve_committee_id(): the one dependent lookup in the system.
#     Contributions are filed under a committee, not a candidate, so
#     get_candidate_contributions first asks OpenFEC for the candidate's
#     principal campaign committee.
#
# WHAT THIS MODULE DOES NOT DO:
#   - No retries, no caching, no pagination.  One call in, one answer out.
#   - No reshaping of the payload.  Whatever JSON OpenFEC returns is handed
#     back unchanged.
#
# API REFERENCE: https://api.open.fec.gov/developers/
# =============================================================================

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from core.errors import NoPrincipalCommittee, RemoteAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.open.fec.gov/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
PRINCIPAL_CAMPAIGN_DESIGNATION = "P"


class OpenFECClient:
    """Async client for the OpenFEC REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            RemoteAPIError: transport failure, non-2xx status, or a body
                that isn't JSON.
        """
        query: dict[str, Any] = {"api_key": self._api_key}
        query.update(params or {})
        url = f"{self._base_url}{path}"
        logger.debug("GET %s params=%s", path, sorted(k for k in query if k != "api_key"))

        try:
            response = await self._client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise RemoteAPIError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise RemoteAPIError(_error_detail(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteAPIError(
                f"response from {path} is not valid JSON", status_code=response.status_code
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "OpenFECClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _error_detail(response: httpx.Response) -> str:
    """Prefer the message OpenFEC (or the api.data.gov gateway) sent back."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message")
        if not message and isinstance(payload.get("error"), dict):
            message = payload["error"].get("message")
        if message:
            return str(message)
    return f"Request failed with status code {response.status_code}"


# =============================================================================
# Derived lookup: candidate → principal campaign committee
# =============================================================================
async def resolve_committee_id(client: OpenFECClient, candidate_id: str) -> str:
    """Return the committee_id of the candidate's principal campaign committee.

    Takes the first committee OpenFEC returns for designation "P".  When
    several come back, the API's order decides; this is not "most recent".

    Raises:
        NoPrincipalCommittee: OpenFEC returned no usable principal committee.
        RemoteAPIError: the lookup request itself failed.
    """
    body = await client.get(
        f"/candidate/{quote(candidate_id, safe='')}/committees",
        {"designation": PRINCIPAL_CAMPAIGN_DESIGNATION},
    )
    results = body.get("results") if isinstance(body, dict) else None
    if results is not None and not isinstance(results, list):
        raise RemoteAPIError(f"unexpected committee lookup payload for {candidate_id}")
    if not results:
        raise NoPrincipalCommittee(candidate_id)

    first = results[0]
    committee_id = first.get("committee_id") if isinstance(first, dict) else None
    if not committee_id:
        raise NoPrincipalCommittee(candidate_id)
    return committee_id
