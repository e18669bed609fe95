# =============================================================================
# core/errors.py  -  Error taxonomy for dispatched calls
# =============================================================================
#
# Every way a call can fail maps to exactly one ErrorKind.  The kind is what
# the calling agent sees in front of the message ("RATE_LIMITED: ..."), so
# it can tell "try later" apart from "fix your arguments" apart from "the
# upstream API said no".
#
# None of these are retried.  The dispatcher catches DispatchError
# subclasses and turns them into an error RemoteResult; anything else is a
# bug and propagates.
# =============================================================================

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
    RATE_LIMITED = "RATE_LIMITED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NO_PRINCIPAL_COMMITTEE = "NO_PRINCIPAL_COMMITTEE"
    REMOTE_API_ERROR = "REMOTE_API_ERROR"


class DispatchError(Exception):
    """Base class for every classified call failure."""

    kind: ErrorKind = ErrorKind.REMOTE_API_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        return f"{self.kind.value}: {self.message}"


class UnknownOperation(DispatchError):
    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class AdmissionDenied(DispatchError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.") -> None:
        super().__init__(message)


class ValidationFailed(DispatchError):
    """Raised from a ValidationFailure; carries the offending field."""

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    @classmethod
    def from_failure(cls, failure) -> "ValidationFailed":
        return cls(failure.message(), field=failure.field)


class DerivedLookupFailed(DispatchError):
    """A value needed to shape the real query could not be derived."""

    kind = ErrorKind.NO_PRINCIPAL_COMMITTEE


class NoPrincipalCommittee(DerivedLookupFailed):
    def __init__(self, candidate_id: str) -> None:
        super().__init__(
            f"No principal campaign committee found for candidate {candidate_id}"
        )
        self.candidate_id = candidate_id


class RemoteAPIError(DispatchError):
    """The OpenFEC call failed at the transport or returned a non-2xx status."""

    kind = ErrorKind.REMOTE_API_ERROR

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"OpenFEC API error: {detail}")
        self.detail = detail
        self.status_code = status_code


class ConfigError(RuntimeError):
    """Startup configuration is missing or malformed.  Fatal."""
