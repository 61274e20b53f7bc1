"""
Behavior Tracker Backend: Validation Engine
===========================================

What:  The single entry point that evaluates any schema against input data.
How:   Pydantic does the evaluation; this module turns its exceptions into a
       `ValidationResult` holding either the normalized value or a tuple of
       `FieldError(field, message, code)`.

Two call styles:
    validate(schema, data)          → ValidationResult (never raises for bad input)
    validate_or_raise(schema, data) → normalized value, or the application
                                      ValidationError (rendered as HTTP 400)
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tracker.exceptions import ValidationError

T = TypeVar("T")

# Leading loc segments FastAPI adds for request parts
_REQUEST_PARTS = {"body", "query", "path", "header", "cookie"}


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    code: str = "invalid"

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def fields(self) -> List[str]:
        return [error.field for error in self.errors]


def format_error_details(details: Iterable[Mapping[str, Any]]) -> List[FieldError]:
    """
    Converts pydantic/FastAPI error dicts into FieldErrors.

    `loc` segments are joined with dots (`students.3.firstName`); a leading
    request-part segment such as "body" is dropped.
    """
    formatted = []
    for detail in details:
        loc = [str(part) for part in detail.get("loc", ())]
        if len(loc) > 1 and loc[0] in _REQUEST_PARTS:
            loc = loc[1:]
        formatted.append(
            FieldError(
                field=".".join(loc),
                message=detail.get("msg", "Invalid value"),
                code=detail.get("type", "invalid"),
            )
        )
    return formatted


def format_validation_errors(exc: PydanticValidationError) -> List[FieldError]:
    return format_error_details(exc.errors(include_url=False))


def validate(schema: Any, data: Any) -> ValidationResult:
    """
    Evaluates `data` against `schema` (a pydantic model class or any type
    pydantic can adapt, e.g. `UuidStr` or `List[Email]`).
    """
    try:
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            value = schema.model_validate(data)
        else:
            value = TypeAdapter(schema).validate_python(data)
    except PydanticValidationError as exc:
        return ValidationResult(errors=tuple(format_validation_errors(exc)))
    return ValidationResult(value=value)


def validate_or_raise(schema: Any, data: Any, message: str = "Validation failed") -> Any:
    result = validate(schema, data)
    if not result.ok:
        raise ValidationError(
            message=message,
            errors=[error.as_dict() for error in result.errors],
            context={"schema": getattr(schema, "__name__", repr(schema))},
        )
    return result.value
