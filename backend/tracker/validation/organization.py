"""
Request schemas for /api/organizations.

Beyond create/update/search, the membership, settings, statistics and
invitation payloads are validated here so admin tooling shares one rule
set with the API.
"""

from typing import Annotated, Optional

from pydantic import Field, StringConstraints

from tracker.validation.factories import (
    RequestSchema,
    array_field,
    bulk_operation_schema,
    comprehensive_search_schema,
    date_range_schema,
)
from tracker.validation.fields import Email, OrganizationName, Role, UuidStr

SORTABLE_FIELDS = ("name", "created_at")
MAX_BULK_MEMBERS = 50
MAX_BULK_ORGANIZATIONS = 20


class CreateOrganizationRequest(RequestSchema):
    name: OrganizationName


class UpdateOrganizationRequest(RequestSchema):
    organization_id: UuidStr
    name: OrganizationName


OrganizationSearchRequest = comprehensive_search_schema(SORTABLE_FIELDS, "name")


# ── Membership ────────────────────────────────────────────────────────────


class RemoveMemberRequest(RequestSchema):
    organization_id: UuidStr
    user_id: UuidStr


class AddMemberRequest(RemoveMemberRequest):
    role: Role = "user"


class UpdateMemberRoleRequest(RemoveMemberRequest):
    role: Role


class MemberItem(RequestSchema):
    user_id: UuidStr
    role: Role = "user"


class BulkAddMembersRequest(RequestSchema):
    organization_id: UuidStr
    members: array_field(MemberItem, 1, MAX_BULK_MEMBERS)


class OrganizationChanges(RequestSchema):
    name: Optional[OrganizationName] = None


BulkUpdateOrganizationsRequest = bulk_operation_schema(
    OrganizationChanges, max_items=MAX_BULK_ORGANIZATIONS, ids_field="organization_ids"
)


# ── Settings, statistics, invitations ─────────────────────────────────────


class OrganizationSettings(RequestSchema):
    allow_self_registration: bool = False
    default_member_role: Role = "user"
    max_members: Optional[Annotated[int, Field(ge=1, le=10000)]] = None


class OrganizationSettingsRequest(RequestSchema):
    organization_id: UuidStr
    settings: OrganizationSettings


class OrganizationStatsRequest(date_range_schema()):
    organization_id: UuidStr
    include_members: bool = True
    include_activity: bool = False


class InviteToOrganizationRequest(RequestSchema):
    organization_id: UuidStr
    email: Email
    role: Role = "user"
    message: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]] = None


class JoinOrganizationRequest(RequestSchema):
    invitation_code: Annotated[str, StringConstraints(min_length=10, max_length=100)]
    user_id: UuidStr
