"""
Integration tests for blog post endpoints.
"""

import pytest
from httpx import AsyncClient

from conftest import FROZEN_CLOCK, make_blog_payload

BASE = "/api/v1/blog-posts"
COVER_KEY = f"blog-images/{int(FROZEN_CLOCK * 1000)}-cover.png"
OLD_URL = "https://storage.googleapis.com/test-bucket/blog-images/old.png"


async def _create(client, headers, **overrides) -> dict:
    response = await client.post(BASE, json=make_blog_payload(**overrides), headers=headers)
    assert response.status_code == 201
    return response.json()["post"]


class TestCreateBlogPost:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create(self, async_client: AsyncClient, auth_headers):
        response = await async_client.post(BASE, json=make_blog_payload(), headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Blog post created successfully"
        assert data["post"]["title"] == "Contract Basics"
        assert data["post"]["author"] == {"name": "Admin"}
        assert data["post"]["coverImageUrl"] is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_empty_title_is_rejected(self, async_client: AsyncClient, auth_headers, store):
        response = await async_client.post(
            BASE, json=make_blog_payload(title=""), headers=auth_headers
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Title is required"
        page, _ = await store.query_page("blogPosts")
        assert page == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_too_many_tags_is_rejected(self, async_client: AsyncClient, auth_headers):
        response = await async_client.post(
            BASE,
            json=make_blog_payload(tags=["Tax Law", "Cyber Law", "Media Law", "Labor Law"]),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["validation_errors"][0]["field"] == "tags"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.post(BASE, json=make_blog_payload())

        assert response.status_code == 401


class TestBlogImages:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_image(self, async_client: AsyncClient, auth_headers, mock_bucket, png_bytes):
        response = await async_client.post(
            f"{BASE}/images",
            files={"file": ("cover.png", png_bytes, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["key"] == COVER_KEY
        assert data["url"].endswith(COVER_KEY)
        assert data["size"] == len(png_bytes)
        assert data["contentType"] == "image/png"
        assert COVER_KEY in mock_bucket.blobs

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_rejects_non_image(self, async_client: AsyncClient, auth_headers, mock_bucket):
        response = await async_client.post(
            f"{BASE}/images",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        mock_bucket.blob.assert_not_called()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_replace_cover_image(
        self, async_client: AsyncClient, auth_headers, mock_bucket, png_bytes
    ):
        post = await _create(async_client, auth_headers, coverImageUrl=OLD_URL)

        response = await async_client.put(
            f"{BASE}/{post['id']}/cover-image",
            files={"file": ("cover.png", png_bytes, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Cover image updated successfully"
        assert response.json()["post"]["coverImageUrl"].endswith(COVER_KEY)
        mock_bucket.blobs["blog-images/old.png"].delete.assert_called_once()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_tag_options(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get(f"{BASE}/tags", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["maxTags"] == 3
        assert "Contract Law" in response.json()["suggestedTags"]


class TestEditBlogPost:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_and_get(self, async_client: AsyncClient, auth_headers):
        first = await _create(async_client, auth_headers, title="First")
        second = await _create(async_client, auth_headers, title="Second")

        listing = await async_client.get(BASE, headers=auth_headers)
        single = await async_client.get(f"{BASE}/{second['id']}", headers=auth_headers)

        assert [p["id"] for p in listing.json()["items"]] == [first["id"], second["id"]]
        assert single.json()["title"] == "Second"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update(self, async_client: AsyncClient, auth_headers, mock_bucket):
        post = await _create(async_client, auth_headers, coverImageUrl=OLD_URL)

        response = await async_client.put(
            f"{BASE}/{post['id']}",
            json=make_blog_payload(title="Updated", removeCoverImage=True),
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Blog post updated successfully"
        assert response.json()["post"]["title"] == "Updated"
        assert response.json()["post"]["coverImageUrl"] is None
        mock_bucket.blobs["blog-images/old.png"].delete.assert_called_once()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_missing_post(self, async_client: AsyncClient, auth_headers):
        response = await async_client.put(
            f"{BASE}/missing", json=make_blog_payload(), headers=auth_headers
        )

        assert response.status_code == 404


class TestDeleteBlogPost:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_without_confirmation(self, async_client: AsyncClient, auth_headers):
        post = await _create(async_client, auth_headers)

        response = await async_client.delete(f"{BASE}/{post['id']}", headers=auth_headers)
        still_there = await async_client.get(f"{BASE}/{post['id']}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFIRMATION_REQUIRED"
        assert still_there.status_code == 200

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_with_confirmation(self, async_client: AsyncClient, auth_headers, mock_bucket):
        post = await _create(async_client, auth_headers, coverImageUrl=OLD_URL)

        response = await async_client.delete(
            f"{BASE}/{post['id']}", params={"confirm": "true"}, headers=auth_headers
        )
        gone = await async_client.get(f"{BASE}/{post['id']}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Blog post deleted successfully"
        assert data["id"] == post["id"]
        assert data["coverImageDeleted"] is True
        assert gone.status_code == 404
