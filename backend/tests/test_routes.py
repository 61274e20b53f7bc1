"""
Behavior Tracker Backend: API Endpoint Tests
============================================

What:  Every router exercised end-to-end through HTTPX against the app,
       backed by the per-test SQLite database.

What we test:
    ✅ Success envelopes and paginated envelopes (camelCase pagination keys)
    ✅ Error envelope: {success: false, error, message, statusCode, request_id}
    ✅ 400 validation / 401 auth / 404 missing / 409 conflict mappings
    ✅ Partial updates leave unsent columns untouched
"""

import uuid

import pytest

from tracker.config import Settings
from tracker.database import DatabaseClient, create_engine_from_settings, get_db_client
from tracker.schemas.responses import ErrorResponse

STRONG_PASSWORD = "Str0ngPassword"


def missing_id() -> str:
    return str(uuid.uuid4())


# ══════════════════════════════════════════════════════════════════════════
# Health
# ══════════════════════════════════════════════════════════════════════════


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] == "connected"
        assert body["time"].endswith("Z")
        assert "detail" not in body

    @pytest.mark.asyncio
    async def test_health_reports_unreachable_database(self, test_client, tmp_path):
        from tracker.main import app

        broken = DatabaseClient(
            create_engine_from_settings(
                Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}")
            )
        )
        app.dependency_overrides[get_db_client] = lambda: broken
        try:
            response = await test_client.get("/health")
        finally:
            await broken.dispose()
        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "error"
        assert body["database"] == "disconnected"
        assert body["detail"]

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8


# ══════════════════════════════════════════════════════════════════════════
# Auth
# ══════════════════════════════════════════════════════════════════════════


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_sign_up_returns_token_and_user(self, account):
        assert account["user"]["email"] == "counselor@example.com"
        assert account["token_type"] == "bearer"
        assert account["expires_in"] == 900
        assert "password_hash" not in account["user"]

    @pytest.mark.asyncio
    async def test_sign_up_validation_errors(self, test_client):
        response = await test_client.post("/api/auth/sign-up", json={"email": "bad", "password": "short"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["statusCode"] == 400
        assert sorted(error["field"] for error in body["validation_errors"]) == ["email", "password"]

    @pytest.mark.asyncio
    async def test_duplicate_sign_up_conflicts(self, test_client, account):
        response = await test_client.post(
            "/api/auth/sign-up",
            json={"email": "COUNSELOR@example.com", "password": STRONG_PASSWORD},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_sign_in(self, test_client, account):
        response = await test_client.post(
            "/api/auth/sign-in",
            json={"email": " Counselor@Example.com ", "password": STRONG_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == account["user"]["id"]
        assert data["user"]["last_sign_in_at"] is not None

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(self, test_client, account):
        response = await test_client.post(
            "/api/auth/sign-in",
            json={"email": "counselor@example.com", "password": "Wrongpass123"},
        )
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_me_requires_token(self, test_client):
        response = await test_client.get("/api/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_rejects_bad_token(self, test_client):
        response = await test_client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_returns_account(self, test_client, account):
        response = await test_client.get("/api/auth/me", headers=account["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "counselor@example.com"
        assert data["profile"] is None

    @pytest.mark.asyncio
    async def test_change_password(self, test_client, account):
        response = await test_client.post(
            "/api/auth/change-password",
            json={
                "email": "counselor@example.com",
                "currentPassword": STRONG_PASSWORD,
                "newPassword": "Fresh0Password",
            },
        )
        assert response.status_code == 200
        signed_in = await test_client.post(
            "/api/auth/sign-in",
            json={"email": "counselor@example.com", "password": "Fresh0Password"},
        )
        assert signed_in.status_code == 200

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/api/auth/sign-in",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "body"


# ══════════════════════════════════════════════════════════════════════════
# Organizations
# ══════════════════════════════════════════════════════════════════════════


class TestOrganizationRoutes:
    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client):
        created = await test_client.post("/api/organizations", json={"name": "  Cedar Academy "})
        assert created.status_code == 201
        body = created.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Cedar Academy"

        fetched = await test_client.get(f"/api/organizations/{body['data']['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["data"]["id"] == body["data"]["id"]

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, test_client):
        response = await test_client.get(f"/api/organizations/{missing_id()}")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["statusCode"] == 404
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_get_with_bad_id_is_400(self, test_client):
        response = await test_client.get("/api/organizations/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "organizationId"

    @pytest.mark.asyncio
    async def test_rename(self, test_client, organization):
        response = await test_client.patch(
            f"/api/organizations/{organization['id']}", json={"name": "Maple Middle"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Maple Middle"

    @pytest.mark.asyncio
    async def test_rename_missing_is_404(self, test_client):
        response = await test_client.patch(f"/api/organizations/{missing_id()}", json={"name": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_search_paginates(self, test_client, db_client):
        await db_client.insert(
            "organizations", [{"name": name} for name in ("Alpha", "Beta", "Gamma", "Alphabet")]
        )
        response = await test_client.get("/api/organizations", params={"query": "alpha", "limit": 1})
        assert response.status_code == 200
        body = response.json()
        assert [org["name"] for org in body["data"]] == ["Alpha"]
        assert body["pagination"] == {
            "page": 1,
            "limit": 1,
            "total": 2,
            "totalPages": 2,
            "hasNext": True,
            "hasPrev": False,
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["%", "_"])
    async def test_search_wildcards_match_literally(self, test_client, db_client, term):
        await db_client.insert("organizations", [{"name": "Alpha"}, {"name": "Beta"}])
        response = await test_client.get("/api/organizations", params={"query": term})
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_search_term_with_percent_sign(self, test_client, db_client):
        await db_client.insert("organizations", [{"name": "50% Club"}, {"name": "500 Club"}])
        response = await test_client.get("/api/organizations", params={"query": "50%"})
        assert [org["name"] for org in response.json()["data"]] == ["50% Club"]

    @pytest.mark.asyncio
    async def test_search_sorting(self, test_client, db_client):
        await db_client.insert("organizations", [{"name": name} for name in ("B", "C", "A")])
        response = await test_client.get(
            "/api/organizations", params={"sortBy": "name", "sortOrder": "desc"}
        )
        assert [org["name"] for org in response.json()["data"]] == ["C", "B", "A"]

    @pytest.mark.asyncio
    async def test_search_rejects_bad_params(self, test_client):
        response = await test_client.get("/api/organizations", params={"limit": 500})
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "limit"


# ══════════════════════════════════════════════════════════════════════════
# Students
# ══════════════════════════════════════════════════════════════════════════


class TestStudentRoutes:
    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client, organization):
        created = await test_client.post(
            "/api/students",
            json={
                "firstName": "Ada",
                "lastName": "Byron",
                "dob": "2015-04-01T00:00:00Z",
                "organizationId": organization["id"],
            },
        )
        assert created.status_code == 201
        student = created.json()["data"]
        assert student["dob"] == "2015-04-01"
        assert student["organization_id"] == organization["id"]

        fetched = await test_client.get(f"/api/students/{student['id']}")
        assert fetched.json()["data"]["first_name"] == "Ada"

    @pytest.mark.asyncio
    async def test_create_for_unknown_organization_conflicts(self, test_client):
        response = await test_client.post(
            "/api/students",
            json={"firstName": "Ada", "lastName": "Byron", "organizationId": missing_id()},
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_bulk_create(self, test_client, organization):
        response = await test_client.post(
            "/api/students/bulk",
            json={
                "organizationId": organization["id"],
                "students": [
                    {"firstName": "A", "lastName": "One"},
                    {"firstName": "B", "lastName": "Two"},
                ],
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert len(body["data"]) == 2
        assert body["message"] == "2 students created"

    @pytest.mark.asyncio
    async def test_bulk_create_over_limit_is_400(self, test_client, organization):
        response = await test_client.post(
            "/api/students/bulk",
            json={
                "organizationId": organization["id"],
                "students": [{"firstName": "A", "lastName": "B"} for _ in range(101)],
            },
        )
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "students"

    @pytest.mark.asyncio
    async def test_search_requires_organization(self, test_client):
        response = await test_client.get("/api/students")
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "organizationId"

    @pytest.mark.asyncio
    async def test_search_by_name(self, test_client, db_client, organization):
        await db_client.insert(
            "students",
            [
                {"first_name": "Ada", "last_name": "Byron", "organization_id": organization["id"]},
                {"first_name": "Alan", "last_name": "Turing", "organization_id": organization["id"]},
            ],
        )
        response = await test_client.get(
            "/api/students", params={"organizationId": organization["id"], "query": "tur"}
        )
        body = response.json()
        assert [s["last_name"] for s in body["data"]] == ["Turing"]
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, db_client, organization):
        [row] = await db_client.insert(
            "students",
            [
                {
                    "first_name": "Ada",
                    "last_name": "Byron",
                    "organization_id": organization["id"],
                }
            ],
        )
        response = await test_client.patch(f"/api/students/{row['id']}", json={"lastName": "Lovelace"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["last_name"] == "Lovelace"
        assert data["first_name"] == "Ada"

    @pytest.mark.asyncio
    async def test_empty_update_is_400(self, test_client, db_client, organization):
        [row] = await db_client.insert(
            "students",
            [{"first_name": "Ada", "last_name": "Byron", "organization_id": organization["id"]}],
        )
        response = await test_client.patch(f"/api/students/{row['id']}", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"


# ══════════════════════════════════════════════════════════════════════════
# Profiles
# ══════════════════════════════════════════════════════════════════════════


class TestProfileRoutes:
    async def _create_profile(self, test_client, account, organization, **extra):
        payload = {
            "userId": account["user"]["id"],
            "organizationId": organization["id"],
            "role": "user",
            "firstName": "Grace",
            "lastName": "Hopper",
            "avatar": "https://cdn.example.com/grace.png",
        }
        payload.update(extra)
        return await test_client.post("/api/profiles", json=payload)

    @pytest.mark.asyncio
    async def test_create_get_and_me(self, test_client, account, organization):
        created = await self._create_profile(test_client, account, organization)
        assert created.status_code == 201
        user_id = account["user"]["id"]

        fetched = await test_client.get(f"/api/profiles/{user_id}")
        assert fetched.json()["data"]["first_name"] == "Grace"

        me = await test_client.get("/api/auth/me", headers=account["headers"])
        assert me.json()["data"]["profile"]["user_id"] == user_id

    @pytest.mark.asyncio
    async def test_profile_for_unknown_user_conflicts(self, test_client, organization):
        response = await test_client.post(
            "/api/profiles",
            json={
                "userId": missing_id(),
                "organizationId": organization["id"],
                "role": "user",
                "firstName": "No",
                "lastName": "Body",
            },
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_null_avatar_clears(self, test_client, account, organization):
        await self._create_profile(test_client, account, organization)
        response = await test_client.patch(
            f"/api/profiles/{account['user']['id']}", json={"avatar": None}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["avatar"] is None
        assert data["first_name"] == "Grace"

    @pytest.mark.asyncio
    async def test_search_by_role(self, test_client, account, organization):
        await self._create_profile(test_client, account, organization, role="admin")
        admins = await test_client.get("/api/profiles", params={"role": "admin"})
        parents = await test_client.get("/api/profiles", params={"role": "parent"})
        assert admins.json()["pagination"]["total"] == 1
        assert parents.json()["data"] == []

    @pytest.mark.asyncio
    async def test_get_missing_profile_is_404(self, test_client):
        response = await test_client.get(f"/api/profiles/{missing_id()}")
        assert response.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Behavior categories and logs
# ══════════════════════════════════════════════════════════════════════════


class TestBehaviorCategoryRoutes:
    @pytest.mark.asyncio
    async def test_create_list_and_rename(self, test_client):
        for name in ("Kicking", "Biting"):
            response = await test_client.post("/api/behavior-categories", json={"name": name})
            assert response.status_code == 201

        listed = await test_client.get("/api/behavior-categories")
        categories = listed.json()["data"]
        assert [c["name"] for c in categories] == ["Biting", "Kicking"]

        renamed = await test_client.patch(
            f"/api/behavior-categories/{categories[0]['id']}", json={"name": "Nipping"}
        )
        assert renamed.json()["data"]["name"] == "Nipping"

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, test_client):
        await test_client.post("/api/behavior-categories", json={"name": "Kicking"})
        response = await test_client.post("/api/behavior-categories", json={"name": "Kicking"})
        assert response.status_code == 409


class TestBehaviorLogRoutes:
    @pytest.fixture
    def log_payload(self):
        return {"mood": "frustrated", "intent": "aggressive", "notes": "During recess"}

    async def _setup(self, db_client, organization):
        [student] = await db_client.insert(
            "students",
            [{"first_name": "Ada", "last_name": "Byron", "organization_id": organization["id"]}],
        )
        [category] = await db_client.insert("behavior_categories", [{"name": "Hitting"}])
        return student, category

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client, log_payload):
        response = await test_client.post("/api/behavior-logs", json=log_payload)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_uses_token_user(self, test_client, db_client, organization, account, log_payload):
        student, category = await self._setup(db_client, organization)
        log_payload.update(studentId=student["id"], behaviorCategoryId=category["id"])
        response = await test_client.post("/api/behavior-logs", json=log_payload, headers=account["headers"])
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user_id"] == account["user"]["id"]
        assert data["notes"] == "During recess"

    @pytest.mark.asyncio
    async def test_filter_and_update(self, test_client, db_client, organization, account, log_payload):
        student, category = await self._setup(db_client, organization)
        log_payload.update(studentId=student["id"], behaviorCategoryId=category["id"])
        for intent in ("aggressive", "sensory", "sensory"):
            log_payload["intent"] = intent
            await test_client.post("/api/behavior-logs", json=log_payload, headers=account["headers"])

        sensory = await test_client.get(
            "/api/behavior-logs", params={"studentId": student["id"], "intent": "sensory"}
        )
        body = sensory.json()
        assert body["pagination"]["total"] == 2
        log_id = body["data"][0]["id"]

        updated = await test_client.patch(f"/api/behavior-logs/{log_id}", json={"notes": ""})
        assert updated.status_code == 200
        assert updated.json()["data"]["notes"] is None
        assert updated.json()["data"]["intent"] == "sensory"

        fetched = await test_client.get(f"/api/behavior-logs/{log_id}")
        assert fetched.json()["data"]["notes"] is None

    @pytest.mark.asyncio
    async def test_filter_rejects_reversed_dates(self, test_client):
        response = await test_client.get(
            "/api/behavior-logs",
            params={"dateFrom": "2024-02-01T00:00:00Z", "dateTo": "2024-01-01T00:00:00Z"},
        )
        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["field"] == "dateTo"

    @pytest.mark.asyncio
    async def test_get_missing_log_is_404(self, test_client):
        response = await test_client.get(f"/api/behavior-logs/{missing_id()}")
        assert response.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Error contract
# ══════════════════════════════════════════════════════════════════════════


class TestErrorContract:
    ERROR_REF = "#/components/schemas/ErrorResponse"

    @pytest.mark.asyncio
    async def test_error_responses_are_documented(self, test_client):
        schema = (await test_client.get("/openapi.json")).json()
        student = schema["paths"]["/api/students/{student_id}"]["get"]["responses"]
        for status in ("400", "404", "409", "500"):
            assert student[status]["content"]["application/json"]["schema"]["$ref"] == self.ERROR_REF
        log_create = schema["paths"]["/api/behavior-logs"]["post"]["responses"]
        assert log_create["401"]["content"]["application/json"]["schema"]["$ref"] == self.ERROR_REF

    @pytest.mark.asyncio
    async def test_error_bodies_match_documented_model(self, test_client):
        missing = await test_client.get(f"/api/students/{missing_id()}")
        invalid = await test_client.get("/api/students/not-a-uuid")
        not_found = ErrorResponse.model_validate(missing.json())
        bad_input = ErrorResponse.model_validate(invalid.json())
        assert not_found.status_code == 404
        assert not_found.validation_errors is None
        assert bad_input.validation_errors[0]["field"] == "studentId"
