# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the dispatch pipeline)
# =============================================================================
#
# These dataclasses define the shape of everything that flows through a
# single tool call:
#
#   raw arguments ──▶ ValidatedRequest ──▶ RemoteQuerySpec ──▶ RemoteResult
#                 └─▶ ValidationFailure
#
# plus the static descriptors (OperationDescriptor / FieldSpec) that make up
# the operation catalog.
#
# Everything except RemoteResult is frozen.  Descriptors are built once at
# import time and shared by every call; per-call objects never outlive the
# call that created them.
# =============================================================================

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# -----------------------------------------------------------------------------
# FieldType - the four argument types the catalog knows about
# -----------------------------------------------------------------------------
class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    STRING_ARRAY = "array"
    ENUM = "enum"


# -----------------------------------------------------------------------------
# FieldSpec - one declared argument of one operation
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class FieldSpec:
    """Schema for a single operation argument."""

    name: str
    type: FieldType
    description: str = ""
    required: bool = False
    choices: tuple[str, ...] = ()      # only meaningful for FieldType.ENUM

    def __post_init__(self) -> None:
        if self.type is FieldType.ENUM and not self.choices:
            raise ValueError(f"enum field {self.name!r} needs at least one choice")

    def json_schema(self) -> dict:
        """Render this field as a JSON Schema property."""
        if self.type is FieldType.ENUM:
            prop: dict[str, Any] = {"type": "string", "enum": list(self.choices)}
        elif self.type is FieldType.STRING_ARRAY:
            prop = {"type": "array", "items": {"type": "string"}}
        else:
            prop = {"type": self.type.value}
        if self.description:
            prop["description"] = self.description
        return prop


# -----------------------------------------------------------------------------
# OperationDescriptor - one catalog entry
# -----------------------------------------------------------------------------
# The MCP "list tools" reply is rendered straight from these, so what the
# calling agent sees and what the validator enforces can never drift apart.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OperationDescriptor:
    """A named, invocable, read-only query."""

    name: str
    description: str
    fields: tuple[FieldSpec, ...] = ()

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def input_schema(self) -> dict:
        """JSON Schema object describing this operation's arguments."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {f.name: f.json_schema() for f in self.fields},
        }
        if self.required_fields:
            schema["required"] = list(self.required_fields)
        return schema


# -----------------------------------------------------------------------------
# ValidatedRequest / ValidationFailure - the two outcomes of validation
# -----------------------------------------------------------------------------
# The validator returns exactly one of these.  A ValidatedRequest only ever
# holds declared fields whose values already passed their type checks, so
# the shaper can use them without re-checking anything.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ValidatedRequest:
    """Typed, normalized arguments for one call."""

    operation: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidatedRequest):
            return NotImplemented
        return self.operation == other.operation and dict(self.params) == dict(other.params)

    def __hash__(self) -> int:
        return hash((self.operation, tuple(sorted(self.params))))


@dataclass(frozen=True)
class ValidationFailure:
    """Why an argument bag was rejected."""

    operation: str
    field: Optional[str]       # None when the bag itself is malformed
    reason: str

    def message(self) -> str:
        if self.field is None:
            return f"Invalid arguments for {self.operation}: {self.reason}"
        return f"Invalid argument '{self.field}' for {self.operation}: {self.reason}"


# -----------------------------------------------------------------------------
# RemoteQuerySpec - one outbound GET, ready to send
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RemoteQuerySpec:
    """Resource path + query parameters for a single remote call.

    ``lookup`` names a value that still has to be derived before the query
    can go out (only "committee_id" today); ``lookup_key`` is the input the
    resolver needs to derive it.
    """

    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    lookup: Optional[str] = None
    lookup_key: Optional[str] = None

    def with_param(self, name: str, value: Any) -> "RemoteQuerySpec":
        """Return a resolved copy with ``name`` injected ahead of other params."""
        params = {name: value}
        params.update((k, v) for k, v in self.params.items() if k != name)
        return replace(self, params=params, lookup=None, lookup_key=None)


# -----------------------------------------------------------------------------
# RemoteResult - what a dispatched call hands back to the protocol layer
# -----------------------------------------------------------------------------
@dataclass
class RemoteResult:
    """Outcome of one dispatched call: either a raw body or an error."""

    operation: str
    body: Any = None
    error: Optional[Exception] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.body is not None:
            raise ValueError("RemoteResult carries either a body or an error, not both")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_text(self) -> str:
        """Serialize the upstream payload unchanged, pretty-printed."""
        return json.dumps(self.body, indent=2)
