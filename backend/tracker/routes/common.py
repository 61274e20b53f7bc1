"""Helpers shared by the resource routers."""

from functools import lru_cache
from typing import Any, Dict, Iterable, Mapping, Type, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from tracker.exceptions import ValidationError
from tracker.mappers import rows_to_dtos
from tracker.schemas.responses import ErrorResponse, PaginatedResponse, build_pagination
from tracker.timestamps import utcnow
from tracker.validation import validate_or_raise
from tracker.validation.factories import id_params_schema


# Documented on every resource router; bodies come from the handlers in main.py
ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    404: {"description": "Row not found", "model": ErrorResponse},
    409: {"description": "Conflicts with stored data", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def paginated(
    dto_class: Type[BaseModel],
    rows: Iterable[Mapping[str, Any]],
    page: int,
    limit: int,
    total: int,
) -> PaginatedResponse:
    return PaginatedResponse(
        data=rows_to_dtos(dto_class, rows),
        pagination=build_pagination(page, limit, total),
    )


_id_params = lru_cache(maxsize=None)(id_params_schema)


def path_id(param_name: str, value: str) -> str:
    """Validates a path UUID; the 400 names the camelCase parameter."""
    params = validate_or_raise(
        _id_params(param_name), {to_camel(param_name): value}, "Invalid path parameter"
    )
    return getattr(params, param_name)


def require_changes(partial: Dict[str, Any], timestamped: bool = True) -> Dict[str, Any]:
    """Rejects an update that sets nothing; stamps updated_at otherwise."""
    if not partial:
        raise ValidationError(
            message="No fields to update",
            errors=[{"field": "body", "message": "Provide at least one field to change", "code": "empty_update"}],
        )
    if timestamped:
        return {**partial, "updated_at": utcnow()}
    return partial


def merge_path(body: Dict[str, Any], **path: Any) -> Dict[str, Any]:
    """Body fields plus path parameters; the path wins on a clash."""
    merged: Dict[str, Any] = dict(body)
    merged.update(path)
    return merged

