"""
Behavior Tracker Backend: Schema Factories
==========================================

What:  Small parameterized builders that compose the primitive field types
       into reusable request schemas (pagination, sorting, date ranges,
       bulk operations, full search).
How:   Field factories return annotated types; schema factories return
       pydantic model classes built with `create_model`. Every schema
       derives from RequestSchema, so camelCase request keys map onto
       snake_case attributes.

Example:
    OrganizationSearch = comprehensive_search_schema(("name", "created_at"), "name")
    validate(OrganizationSearch, {"sortBy": "created_at", "page": "2"})
"""

from typing import Annotated, Any, Callable, Hashable, List, Literal, Optional, Sequence, Tuple, Type

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, create_model, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from tracker.validation.fields import SORT_ORDERS, IsoDatetime, UuidStr

FieldDefinition = Tuple[Any, Any]


class RequestSchema(BaseModel):
    """
    Base for every request schema.

    Incoming keys are camelCase (`organizationId`); attributes are
    snake_case (`organization_id`). Unknown keys are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ══════════════════════════════════════════════════════════════════════════
# Field factories
# ══════════════════════════════════════════════════════════════════════════


def search_query_field(min_length: int = 1, max_length: int = 100) -> Any:
    """Trimmed free-text search term; declare it Optional with a None default."""
    return Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=min_length, max_length=max_length)
    ]


def text_field(
    min_length: int = 1,
    max_length: int = 255,
    required: bool = True,
    trim: bool = True,
) -> Any:
    annotation = Annotated[
        str, StringConstraints(strip_whitespace=trim, min_length=min_length, max_length=max_length)
    ]
    return annotation if required else Optional[annotation]


def number_range_field(
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    integer: bool = False,
    required: bool = True,
) -> Any:
    annotation = Annotated[int if integer else float, Field(ge=min_value, le=max_value)]
    return annotation if required else Optional[annotation]


def enum_field(values: Sequence[str], required: bool = True) -> Any:
    if not values:
        raise ValueError("enum_field needs at least one value")
    annotation = Literal[tuple(values)]
    return annotation if required else Optional[annotation]


def enum_field_with_default(values: Sequence[str], default: str) -> FieldDefinition:
    if default not in values:
        raise ValueError(f"Default '{default}' is not one of {tuple(values)}")
    return (enum_field(values), default)


def array_field(item: Any, min_items: int = 1, max_items: int = 50) -> Any:
    """List of `item` with an inclusive item-count window."""
    return Annotated[List[item], Field(min_length=min_items, max_length=max_items)]


def unique_array_field(item: Any, key: Optional[Callable[[Any], Hashable]] = None) -> Any:
    """List of `item` whose elements (or `key(element)`) must be distinct."""
    extract = key or (lambda element: element)

    def check_unique(items: List[Any]) -> List[Any]:
        keys = [extract(element) for element in items]
        if len(keys) != len(set(keys)):
            raise PydanticCustomError("unique_items", "Array items must be unique")
        return items

    return Annotated[List[item], AfterValidator(check_unique)]


# ══════════════════════════════════════════════════════════════════════════
# Schema factories
# ══════════════════════════════════════════════════════════════════════════


def pagination_schema(default_limit: int = 10, max_limit: int = 100) -> Type[RequestSchema]:
    """page ≥ 1 (default 1), 1 ≤ limit ≤ max_limit (default `default_limit`)."""
    if not 1 <= default_limit <= max_limit:
        raise ValueError("default_limit must lie between 1 and max_limit")
    return create_model(
        "PaginationSchema",
        __base__=RequestSchema,
        page=(int, Field(default=1, ge=1)),
        limit=(int, Field(default=default_limit, ge=1, le=max_limit)),
    )


def sorting_schema(
    allowed_fields: Sequence[str],
    default_field: Optional[str] = None,
    default_order: str = "asc",
) -> Type[RequestSchema]:
    """sortBy restricted to `allowed_fields`; sortOrder asc|desc."""
    return create_model(
        "SortingSchema",
        __base__=RequestSchema,
        sort_by=enum_field_with_default(allowed_fields, default_field or allowed_fields[0]),
        sort_order=enum_field_with_default(SORT_ORDERS, default_order),
    )


def date_range_schema(
    from_field: str = "date_from",
    to_field: str = "date_to",
) -> Type[RequestSchema]:
    """
    Two optional ISO datetimes where `from_field <= to_field` when both are set.

    The ordering failure is reported on `to_field`.
    """

    def check_order(cls, value, info):
        start = info.data.get(from_field)
        if value is not None and start is not None and start > value:
            raise PydanticCustomError(
                "date_range",
                "{start} must be before or equal to {end}",
                {"start": to_camel(from_field), "end": to_camel(to_field)},
            )
        return value

    return create_model(
        "DateRangeSchema",
        __base__=RequestSchema,
        __validators__={"check_order": field_validator(to_field)(check_order)},
        **{
            from_field: (Optional[IsoDatetime], None),
            to_field: (Optional[IsoDatetime], None),
        },
    )


def filter_schema(
    filters: Type[RequestSchema],
    default_limit: int = 20,
    max_limit: int = 100,
) -> Type[RequestSchema]:
    """Extends an existing filter schema with page/limit."""
    return create_model(
        f"{filters.__name__}Page",
        __base__=(filters, pagination_schema(default_limit, max_limit)),
    )


def bulk_operation_schema(
    updates: Type[BaseModel],
    max_items: int = 50,
    ids_field: str = "ids",
) -> Type[RequestSchema]:
    """`{ids: [uuid, ...1..max_items], updates: <updates>}`."""
    return create_model(
        "BulkOperationSchema",
        __base__=RequestSchema,
        **{
            ids_field: (array_field(UuidStr, 1, max_items), ...),
            "updates": (updates, ...),
        },
    )


def comprehensive_search_schema(
    sort_fields: Sequence[str],
    default_sort: Optional[str] = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> Type[RequestSchema]:
    """Search term + pagination + sorting + created-at date window."""
    return create_model(
        "SearchSchema",
        __base__=(
            pagination_schema(default_limit, max_limit),
            sorting_schema(sort_fields, default_sort),
            date_range_schema(),
        ),
        query=(Optional[search_query_field()], None),
    )


def id_params_schema(param_name: str = "id") -> Type[RequestSchema]:
    return create_model("IdParams", __base__=RequestSchema, **{param_name: (UuidStr, ...)})


PaginationParams = pagination_schema()
