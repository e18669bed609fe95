# =============================================================================
# core/validation.py  -  Argument Validator
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns the untyped argument bag an agent sends into a ValidatedRequest,
#   or explains (field + reason) why it can't.
#
# HOW IT WORKS:
#   Each OperationDescriptor is compiled once into a pydantic model
#   (argument_model), and every call is checked against that model.  The
#   catalog stays the only place argument types are declared.
#
# RULES:
#   - A required field that is missing or null is rejected.
#   - A null optional field counts as "not given".
#   - Types are checked strictly: "2024" is not a number, True is not a
#     number, and arrays may only hold strings.
#   - Enum fields must hold one of their declared choices.
#   - Fields the operation doesn't declare are dropped without complaint,
#     so newer clients sending extra fields keep working.
#
# Validation is pure: no I/O, no rate-limit bookkeeping.
# =============================================================================

from functools import lru_cache
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from core.models import (
    FieldSpec,
    FieldType,
    OperationDescriptor,
    ValidatedRequest,
    ValidationFailure,
)

ValidationOutcome = Union[ValidatedRequest, ValidationFailure]


# -----------------------------------------------------------------------------
# Field annotations, one per catalog FieldType
# -----------------------------------------------------------------------------
def _reject_bool(value: Any) -> Any:
    # bool is an int subclass; JSON true/false must not pass as a number.
    if isinstance(value, bool):
        raise ValueError("expected number, got boolean")
    return value


def _integral_to_int(value: Union[int, float]) -> Union[int, float]:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Number = Annotated[
    Union[StrictInt, StrictFloat],
    BeforeValidator(_reject_bool),
    AfterValidator(_integral_to_int),
]

# Lists and tuples both accepted; validated requests hold a tuple.
StringArray = tuple[StrictStr, ...]


def _annotation(spec: FieldSpec) -> Any:
    if spec.type is FieldType.STRING:
        return StrictStr
    if spec.type is FieldType.NUMBER:
        return Number
    if spec.type is FieldType.STRING_ARRAY:
        return StringArray
    if spec.type is FieldType.ENUM:
        return Literal[spec.choices]
    raise ValueError(f"unsupported field type {spec.type!r}")


@lru_cache(maxsize=None)
def argument_model(descriptor: OperationDescriptor) -> type[BaseModel]:
    """The pydantic model that checks ``descriptor``'s arguments."""
    fields: dict[str, Any] = {}
    for spec in descriptor.fields:
        annotation = _annotation(spec)
        if spec.required:
            fields[spec.name] = (annotation, ...)
        else:
            fields[spec.name] = (Optional[annotation], None)
    return create_model(
        f"{descriptor.name}_arguments",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


# -----------------------------------------------------------------------------
# validate_arguments - the validator's one entry point
# -----------------------------------------------------------------------------
def validate_arguments(
    descriptor: OperationDescriptor,
    arguments: Optional[Mapping[str, Any]],
) -> ValidationOutcome:
    """Validate ``arguments`` against ``descriptor``'s schema.

    Args:
        descriptor: The catalog entry for the operation being called.
        arguments: The raw argument bag from the protocol layer.  ``None``
            is treated as an empty bag.

    Returns:
        A ValidatedRequest holding only declared fields, or a
        ValidationFailure naming the first offending field.
    """
    if arguments is None:
        arguments = {}
    if isinstance(arguments, Mapping):
        # null means "not given", for required fields too.
        arguments = {k: v for k, v in arguments.items() if v is not None}

    try:
        parsed = argument_model(descriptor).model_validate(arguments)
    except ValidationError as exc:
        return _failure(descriptor, exc.errors()[0])

    return ValidatedRequest(descriptor.name, parsed.model_dump(exclude_unset=True))


def _failure(descriptor: OperationDescriptor, error: Mapping[str, Any]) -> ValidationFailure:
    loc = error.get("loc") or ()
    if not loc:
        return ValidationFailure(descriptor.name, None, "expected an object of named arguments")

    name = str(loc[0])
    spec = next(s for s in descriptor.fields if s.name == name)
    if error["type"] == "missing":
        reason = "required field is missing"
    elif spec.type is FieldType.ENUM:
        allowed = ", ".join(repr(c) for c in spec.choices)
        reason = f"must be one of {allowed}, got {error.get('input')!r}"
    elif spec.type is FieldType.NUMBER:
        # One error per union member; the field is reported once.
        reason = f"expected number, got {error.get('input')!r}"
    elif spec.type is FieldType.STRING_ARRAY and len(loc) > 1:
        reason = f"expected array of strings, item {loc[1]}: {error['msg']}"
    else:
        reason = error["msg"]
    return ValidationFailure(descriptor.name, name, reason)
