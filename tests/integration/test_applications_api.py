"""
Integration tests for the application API.

Runs the FastAPI app against an in-memory SQLite database and a mock
core banking client.
"""

import pytest

from tests.integration.conftest import application_payload


async def create(client, **overrides) -> dict:
    response = await client.post("/v1/applications", json=application_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateApplication:
    """Tests for POST /v1/applications."""

    @pytest.mark.asyncio
    async def test_create_returns_draft(self, client):
        data = await create(client)

        assert data["status"] == "draft"
        assert data["application_number"].startswith("APP-")
        assert data["personal_data"]["document_type"] == "CC"
        assert data["consents"]["terms_accepted_at"] is not None
        assert data["core_integration"]["attempt_count"] == 0
        assert len(data["status_history"]) == 1
        assert data["metadata"]["channel"] == "WEB"

    @pytest.mark.asyncio
    async def test_business_rule_violations(self, client):
        payload = application_payload()
        payload["personal_data"]["birth_date"] = "2020-01-01"
        payload["employment_data"]["monthly_income"] = 1_000_000

        response = await client.post("/v1/applications", json=payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_FAILED"
        assert len(data["details"]) >= 2

    @pytest.mark.asyncio
    async def test_schema_violation(self, client):
        payload = application_payload()
        payload["personal_data"]["email"] = "not-an-email"

        response = await client.post("/v1/applications", json=payload)

        assert response.status_code == 422


class TestGetAndUpdate:
    """Tests for GET and PATCH /v1/applications/{id}."""

    @pytest.mark.asyncio
    async def test_get_application(self, client):
        created = await create(client)

        response = await client.get(f"/v1/applications/{created['id']}")

        assert response.status_code == 200
        assert response.json()["application_number"] == created["application_number"]

    @pytest.mark.asyncio
    async def test_unknown_application(self, client):
        response = await client.get("/v1/applications/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "NOT_FOUND"
        assert "request_id" in data

    @pytest.mark.asyncio
    async def test_patch_draft(self, client):
        created = await create(client)

        response = await client.patch(
            f"/v1/applications/{created['id']}",
            json={"employment_data": {"company_name": "Globex"}},
        )

        assert response.status_code == 200
        employment = response.json()["employment_data"]
        assert employment["company_name"] == "Globex"
        assert employment["monthly_income"] == 5_000_000

    @pytest.mark.asyncio
    async def test_patch_breaking_rules(self, client):
        created = await create(client)

        response = await client.patch(
            f"/v1/applications/{created['id']}",
            json={"product_request": {"requested_limit": 20_000_000}},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_FAILED"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"personal_data": {"first_name": None}},
        {"personal_data": {"address": None}},
        {"consents": {"accepts_terms": None}},
    ])
    async def test_patch_cannot_clear_required_fields(self, client, body):
        created = await create(client)

        response = await client.patch(f"/v1/applications/{created['id']}", json=body)

        assert response.status_code == 422
        stored = await client.get(f"/v1/applications/{created['id']}")
        assert stored.status_code == 200
        assert stored.json()["personal_data"] == created["personal_data"]
        assert stored.json()["consents"] == created["consents"]

    @pytest.mark.asyncio
    async def test_patch_can_clear_optional_fields(self, client):
        created = await create(client)

        response = await client.patch(
            f"/v1/applications/{created['id']}",
            json={"personal_data": {"gender": None}, "employment_data": {"job_title": None}},
        )

        assert response.status_code == 200
        assert response.json()["personal_data"]["gender"] is None
        assert response.json()["employment_data"]["job_title"] is None


class TestSubmitApplication:
    """Tests for POST /v1/applications/{id}/submit."""

    @pytest.mark.asyncio
    async def test_submit_runs_integration(self, client, mock_core_client):
        created = await create(client)

        response = await client.post(f"/v1/applications/{created['id']}/submit")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["integration"]["validated"] is True
        assert data["integration"]["credit_score"] == 800
        assert data["integration"]["core_application_id"] is not None
        assert mock_core_client.calls["register_application"] == 1

    @pytest.mark.asyncio
    async def test_integration_failure_reverts_to_draft(
        self, client, mock_core_client, backoff_sleep
    ):
        mock_core_client.always_fail.add("register_application")
        created = await create(client)

        response = await client.post(f"/v1/applications/{created['id']}/submit")

        assert response.status_code == 502
        assert response.json()["error"] == "INTEGRATION_FAILED"
        assert backoff_sleep.delays == [1.0, 2.0]

        stored = (await client.get(f"/v1/applications/{created['id']}")).json()
        assert stored["status"] == "draft"
        assert stored["core_integration"]["attempt_count"] == 3
        assert stored["core_integration"]["last_error"]["code"] == "CORE_SYNC_ERROR"
        assert "Core integration failed" in stored["status_history"][-1]["note"]

    @pytest.mark.asyncio
    async def test_submit_without_consents(self, client):
        created = await create(client, consents={"accepts_terms": True})

        response = await client.post(f"/v1/applications/{created['id']}/submit")

        assert response.status_code == 409
        assert response.json()["error"] == "INVALID_STATE"

    @pytest.mark.asyncio
    async def test_decided_application_is_read_only(self, client):
        created = await create(client)
        await client.post(f"/v1/applications/{created['id']}/submit")

        patch = await client.patch(
            f"/v1/applications/{created['id']}",
            json={"employment_data": {"company_name": "Globex"}},
        )
        resubmit = await client.post(f"/v1/applications/{created['id']}/submit")
        abandon = await client.post(f"/v1/applications/{created['id']}/abandon")

        assert patch.status_code == 409
        assert resubmit.status_code == 409
        assert abandon.status_code == 409


class TestAbandonApplication:
    """Tests for POST /v1/applications/{id}/abandon."""

    @pytest.mark.asyncio
    async def test_abandon_draft(self, client):
        created = await create(client)

        response = await client.post(f"/v1/applications/{created['id']}/abandon")

        assert response.status_code == 200
        assert response.json()["status"] == "abandoned"


class TestCoreIntegrationEndpoints:
    """Tests for the step-by-step core integration endpoints."""

    @pytest.mark.asyncio
    async def test_validate_client(self, client):
        created = await create(client)

        response = await client.post(
            f"/v1/core-integration/applications/{created['id']}/validate-client"
        )

        assert response.status_code == 200
        assert response.json()["core_client_id"] == "CLI-1020304050"

    @pytest.mark.asyncio
    async def test_query_bureaus_applies_decision(self, client):
        created = await create(client)

        response = await client.post(
            f"/v1/core-integration/applications/{created['id']}/query-bureaus"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["credit_score"] == 800
        assert data["evaluated"] is True
        assert data["decision"]["action"] == "APPROVE"

    @pytest.mark.asyncio
    async def test_sync_draft_is_refused(self, client):
        created = await create(client)

        response = await client.post(f"/v1/core-integration/applications/{created['id']}/sync")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_status_before_sync_is_refused(self, client):
        created = await create(client)

        response = await client.get(f"/v1/core-integration/applications/{created['id']}/status")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_step_failure_returns_502(self, client, mock_core_client):
        mock_core_client.always_fail.add("validate_client")
        created = await create(client)

        response = await client.post(
            f"/v1/core-integration/applications/{created['id']}/validate-client"
        )

        assert response.status_code == 502
        assert response.json()["error"] == "CLIENT_VALIDATION_ERROR"


class TestOperationalEndpoints:
    """Tests for health, metrics and request context."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        await create(client)

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "card_gateway_applications_created_total" in response.text

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
