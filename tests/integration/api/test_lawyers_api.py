"""
Integration tests for lawyer application review endpoints.
"""

import asyncio
import base64
import json

import pytest
from httpx import AsyncClient

from conftest import make_lawyer_data, seed

BASE = "/api/v1/lawyers"


class TestListLawyers:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.get(BASE)

        assert response.status_code == 401

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_pages_newest_first(self, async_client: AsyncClient, auth_headers, store):
        ids = await seed(store, "lawyers_details", [make_lawyer_data() for _ in range(3)])

        first = await async_client.get(BASE, params={"limit": 2}, headers=auth_headers)
        body = first.json()
        second = await async_client.get(
            BASE, params={"limit": 2, "cursor": body["next_cursor"]}, headers=auth_headers
        )

        assert first.status_code == 200
        assert body["has_more"] is True
        assert [item["id"] for item in body["items"]] == [ids[2], ids[1]]
        assert second.json()["has_more"] is False
        assert [item["id"] for item in second.json()["items"]] == [ids[0]]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_items_use_stored_field_names(self, async_client: AsyncClient, auth_headers, store):
        await seed(store, "lawyers_details", [make_lawyer_data(fullName="Asha Rao")])

        response = await async_client.get(BASE, headers=auth_headers)

        item = response.json()["items"][0]
        assert item["fullName"] == "Asha Rao"
        assert item["practiceAreasLabel"] == "criminal law, family law"
        assert item["paymentStatus"] == "Pending"
        assert item["isApproved"] is False

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_cursor_is_bad_request(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get(
            BASE, params={"cursor": "garbage"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CURSOR"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_out_of_range_cursor_is_bad_request(self, async_client: AsyncClient, auth_headers):
        raw = json.dumps({"v": 1e300, "id": "x"}).encode()
        cursor = base64.urlsafe_b64encode(raw).decode().rstrip("=")

        response = await async_client.get(
            BASE, params={"cursor": cursor}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CURSOR"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get(BASE, params={"limit": 0}, headers=auth_headers)

        assert response.status_code == 422


class TestLawyerApproval:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_approve_and_disapprove(self, async_client: AsyncClient, auth_headers, store):
        [lawyer_id] = await seed(store, "lawyers_details", [make_lawyer_data()])

        approved = await async_client.post(f"{BASE}/{lawyer_id}/approve", headers=auth_headers)
        disapproved = await async_client.post(
            f"{BASE}/{lawyer_id}/disapprove", headers=auth_headers
        )

        assert approved.status_code == 200
        assert approved.json()["message"] == "Lawyer approved successfully!"
        assert approved.json()["lawyer"]["isApproved"] is True
        assert disapproved.json()["message"] == "Lawyer disapproved."
        assert disapproved.json()["lawyer"]["isApproved"] is False

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_lawyer(self, async_client: AsyncClient, auth_headers):
        response = await async_client.post(f"{BASE}/missing/approve", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_lawyer(self, async_client: AsyncClient, auth_headers, store):
        [lawyer_id] = await seed(store, "lawyers_details", [make_lawyer_data()])

        response = await async_client.get(f"{BASE}/{lawyer_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == lawyer_id
        assert response.json()["createdAt"].startswith("2024-01-15T09:30")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_concurrent_request_for_same_row_conflicts(
        self, async_client: AsyncClient, auth_headers, lawyer_service, monkeypatch
    ):
        [lawyer_id] = await seed(lawyer_service.store, "lawyers_details", [make_lawyer_data()])
        release = asyncio.Event()
        original_update = lawyer_service.store.update

        async def slow_update(*args, **kwargs):
            await release.wait()
            return await original_update(*args, **kwargs)

        monkeypatch.setattr(lawyer_service.store, "update", slow_update)

        first = asyncio.create_task(
            async_client.post(f"{BASE}/{lawyer_id}/approve", headers=auth_headers)
        )
        while not lawyer_service.is_busy(lawyer_id) and not first.done():
            await asyncio.sleep(0)
        assert not first.done()

        second = await async_client.post(f"{BASE}/{lawyer_id}/disapprove", headers=auth_headers)
        release.set()
        first_response = await first

        assert second.status_code == 409
        assert second.json()["error"]["code"] == "RECORD_BUSY"
        assert first_response.status_code == 200
