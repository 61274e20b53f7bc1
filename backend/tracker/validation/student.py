"""Request schemas for /api/students."""

from typing import Optional

from tracker.validation.factories import PaginationParams, RequestSchema, array_field, search_query_field
from tracker.validation.fields import FirstName, IsoDatetime, LastName, UuidStr

MAX_BULK_STUDENTS = 100

SearchQuery = search_query_field()


class CreateStudentRequest(RequestSchema):
    first_name: FirstName
    last_name: LastName
    dob: Optional[IsoDatetime] = None
    organization_id: UuidStr


class UpdateStudentRequest(RequestSchema):
    student_id: UuidStr
    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    dob: Optional[IsoDatetime] = None
    organization_id: Optional[UuidStr] = None


class StudentSearchRequest(PaginationParams):
    organization_id: UuidStr
    query: Optional[SearchQuery] = None


class BulkStudentItem(RequestSchema):
    """One entry of a bulk create; falls back to the request's organizationId."""

    first_name: FirstName
    last_name: LastName
    dob: Optional[IsoDatetime] = None
    organization_id: Optional[UuidStr] = None


class BulkCreateStudentsRequest(RequestSchema):
    students: array_field(BulkStudentItem, min_items=1, max_items=MAX_BULK_STUDENTS)
    organization_id: UuidStr
