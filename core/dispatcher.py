# =============================================================================
# core/dispatcher.py  -  The Dispatcher (one tool call, start to finish)
# =============================================================================
#
# THE PIPELINE (fixed order):
#
#   Received
#     │  unknown name?  ─────────────────────────▶ UnknownOperation
#     ▼
#   AdmissionChecked
#     │  bucket empty?  ─────────────────────────▶ AdmissionDenied
#     ▼
#   Validated
#     │  bad arguments? ─────────────────────────▶ ValidationFailed
#     ▼  (one token consumed here)
#   Shaped
#     ▼
#   [Resolved]       only get_candidate_contributions
#     │  no principal committee? ────────────────▶ NoPrincipalCommittee
#     ▼
#   RemoteCallIssued
#     │  transport error / non-2xx? ─────────────▶ RemoteAPIError
#     ▼
#   Replied(success): the raw OpenFEC body
#
# Every classified failure comes back as an error RemoteResult; dispatch()
# does not raise for them.  The token is spent on attempts, not successes:
# a call that fails validation is free, a call that reaches OpenFEC and
# fails is not.
# =============================================================================

import logging
from typing import Any, Mapping, Optional

from core.catalog import OPERATIONS
from core.errors import AdmissionDenied, DispatchError, UnknownOperation, ValidationFailed
from core.models import OperationDescriptor, RemoteQuerySpec, RemoteResult, ValidationFailure
from core.openfec import OpenFECClient, resolve_committee_id
from core.rate_limiter import TokenBucket
from core.shaping import shape_request
from core.validation import validate_arguments

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes named operations through gate, validator, shaper and client.

    Args:
        client: The OpenFEC client used for both lookups and queries.
        rate_limiter: The single admission gate for the whole server.
        operations: Catalog to serve; defaults to the full OpenFEC catalog.
    """

    def __init__(
        self,
        client: OpenFECClient,
        rate_limiter: Optional[TokenBucket] = None,
        operations: tuple[OperationDescriptor, ...] = OPERATIONS,
    ) -> None:
        self._client = client
        self._rate_limiter = rate_limiter or TokenBucket()
        self._operations = {op.name: op for op in operations}

    @property
    def rate_limiter(self) -> TokenBucket:
        return self._rate_limiter

    def list_operations(self) -> list[tuple[str, str, dict]]:
        """(name, description, input schema) for every served operation."""
        return [(op.name, op.description, op.input_schema()) for op in self._operations.values()]

    def descriptor(self, name: str) -> Optional[OperationDescriptor]:
        return self._operations.get(name)

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]]) -> RemoteResult:
        """Run one call through the pipeline and return its result."""
        try:
            body = await self._run(name, arguments)
        except DispatchError as exc:
            logger.info("%s rejected: %s", name, exc.describe())
            return RemoteResult(operation=name, error=exc)
        return RemoteResult(operation=name, body=body)

    async def _run(self, name: str, arguments: Optional[Mapping[str, Any]]) -> Any:
        descriptor = self._operations.get(name)
        if descriptor is None:
            raise UnknownOperation(name)

        if not self._rate_limiter.can_admit():
            raise AdmissionDenied()

        outcome = validate_arguments(descriptor, arguments)
        if isinstance(outcome, ValidationFailure):
            raise ValidationFailed.from_failure(outcome)

        # Nothing between can_admit() and here awaits, so the check and the
        # spend happen in one step of the event loop.
        self._rate_limiter.consume()
        logger.debug("%s admitted, %d tokens left", name, self._rate_limiter.available)

        spec = shape_request(outcome)
        if spec.lookup is not None:
            spec = await self._resolve(spec)
        return await self._client.get(spec.path, spec.params)

    async def _resolve(self, spec: RemoteQuerySpec) -> RemoteQuerySpec:
        if spec.lookup != "committee_id":
            raise ValueError(f"no resolver for derived field {spec.lookup!r}")
        committee_id = await resolve_committee_id(self._client, spec.lookup_key)
        logger.info("resolved candidate %s to committee %s", spec.lookup_key, committee_id)
        return spec.with_param("committee_id", committee_id)
