"""
Request schemas for /api/profiles.

The search schema folds the plain search and the admin-dashboard filters
into one model: optional organization/role filters, a name search term, a
created-at window and page/limit.
"""

from typing import Optional

from tracker.validation.factories import (
    RequestSchema,
    bulk_operation_schema,
    date_range_schema,
    filter_schema,
    pagination_schema,
    search_query_field,
)
from tracker.validation.fields import FirstName, LastName, Role, Url, UuidStr


class CreateProfileRequest(RequestSchema):
    user_id: UuidStr
    organization_id: UuidStr
    role: Role
    first_name: FirstName
    last_name: LastName
    avatar: Optional[Url] = None


class UpdateProfileRequest(RequestSchema):
    profile_id: UuidStr
    organization_id: Optional[UuidStr] = None
    role: Optional[Role] = None
    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    # null clears the avatar
    avatar: Optional[Url] = None


class ProfileFilters(date_range_schema("created_after", "created_before")):
    organization_id: Optional[UuidStr] = None
    role: Optional[Role] = None
    query: Optional[search_query_field()] = None


ProfileSearchRequest = filter_schema(ProfileFilters, default_limit=20)


# ── Bulk and administrative payloads ──────────────────────────────────────

MAX_BULK_PROFILES = 50


class ProfileChanges(RequestSchema):
    organization_id: Optional[UuidStr] = None
    role: Optional[Role] = None


BulkUpdateProfilesRequest = bulk_operation_schema(
    ProfileChanges, max_items=MAX_BULK_PROFILES, ids_field="profile_ids"
)


class UpdateProfileSettingsRequest(RequestSchema):
    """Self-service edits; organization and role stay with administrators."""

    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    avatar: Optional[Url] = None


class AssignRoleRequest(RequestSchema):
    profile_id: UuidStr
    organization_id: UuidStr
    role: Role


class OrganizationProfilesRequest(pagination_schema(default_limit=20)):
    organization_id: UuidStr
    role: Optional[Role] = None
