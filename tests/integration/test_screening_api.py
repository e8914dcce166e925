"""Integration tests for the subject screening endpoint."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_screening_service
from src.main import app

pytestmark = pytest.mark.integration

URL = "/api/v1/screening"


@pytest.fixture
def client(screening_service):
    app.dependency_overrides[get_screening_service] = lambda: screening_service
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestScreeningApi:
    @pytest.mark.asyncio
    async def test_sanctioned_individual(self, client):
        async with client:
            response = await client.post(URL, json={"subject": {"name": "SIDOROV, Ivan"}})
        assert response.status_code == 200
        data = response.json()
        assert data["subject"]["kind"] == "INDIVIDUAL"
        assert data["sources"]["sanctions"]["status"] == "OK"
        assert data["sources"]["sanctions"]["finding"]["evidence_refs"] == ["SDN-1001"]
        assert data["sources_checked"] == ["sanctions", "pep"]
        assert data["assessment"]["composite_score"] == 96
        assert data["assessment"]["level"] == "CRITICAL"
        assert data["assessment"]["sar_required"] is True

    @pytest.mark.asyncio
    async def test_clear_entity(self, client):
        async with client:
            response = await client.post(
                URL, json={"subject": {"name": "Blue Harbor Bakery", "kind": "ENTITY"}}
            )
        data = response.json()
        assert response.status_code == 200
        assert data["subject"]["kind"] == "ENTITY"
        assert data["assessment"]["composite_score"] == 0
        assert data["assessment"]["level"] == "LOW"

    @pytest.mark.asyncio
    async def test_wallet_address(self, client):
        async with client:
            response = await client.post(
                URL,
                json={"subject": {"address": "0x098b716b8aaf21512996dc57eb0615e2383e2f96"}},
            )
        data = response.json()
        assert response.status_code == 200
        assert data["subject"]["kind"] == "WALLET"
        assert data["subject"]["chain"] == "ETH"
        assert data["sources_skipped"] == ["pep"]
        assert data["sources"]["sanctions"]["finding"]["evidence_refs"] == ["SDN-2002"]

    @pytest.mark.asyncio
    async def test_allow_list(self, client):
        async with client:
            response = await client.post(
                URL, json={"subject": {"name": "Ivan Sidorov"}, "sources": ["pep"]}
            )
        data = response.json()
        assert data["sources"]["sanctions"]["status"] == "SKIPPED"
        assert data["assessment"]["composite_score"] == 0

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, client):
        async with client:
            response = await client.post(URL, json={"subject": {"name": "   "}}, headers={"X-Request-ID": "r-1"})
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "invalid_subject"
        assert data["request_id"] == "r-1"

    @pytest.mark.asyncio
    async def test_bad_wallet_rejected(self, client):
        async with client:
            response = await client.post(URL, json={"subject": {"address": "not-a-wallet"}})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_subject"

    @pytest.mark.asyncio
    async def test_name_and_address_rejected(self, client):
        async with client:
            response = await client.post(
                URL,
                json={"subject": {"name": "Jane Doe", "address": "0x098b716b8aaf21512996dc57eb0615e2383e2f96"}},
            )
        assert response.status_code == 400
        assert response.json()["error"] == "bad_request"

    @pytest.mark.asyncio
    async def test_unknown_kind_is_validation_error(self, client):
        async with client:
            response = await client.post(URL, json={"subject": {"name": "Jane", "kind": "ROBOT"}})
        assert response.status_code == 422
