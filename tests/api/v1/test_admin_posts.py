"""API tests for admin post management."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import PostReviews, Posts
from app.models.review import Reviews
from app.services.reviews import ReviewSubmission, submit_review


@pytest.mark.api
class TestCreatePost:
    """Tests for POST /api/v1/admin/posts"""

    async def test_create_post_numbers_automatically(
        self, client: AsyncClient, admin_headers, test_post
    ):
        response = await client.post(
            "/api/v1/admin/posts",
            json={"title": "Challenge Roth", "body": "Hot day in Bavaria."},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["num"] == test_post.num + 1
        assert data["img"] is None

    async def test_create_first_post(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/admin/posts",
            json={"title": "First", "body": "Hello."},
            headers=admin_headers,
        )

        assert response.json()["num"] == 1

    async def test_create_post_with_number(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/admin/posts",
            json={"title": "Old race", "body": "From the archive.", "num": 42},
            headers=admin_headers,
        )

        assert response.json()["num"] == 42

    async def test_create_post_requires_title(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/admin/posts", json={"body": "No title"}, headers=admin_headers
        )

        assert response.status_code == 422

    async def test_regular_user_forbidden(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/v1/admin/posts", json={"title": "x", "body": "y"}, headers=user_headers
        )

        assert response.status_code == 403


@pytest.mark.api
class TestUpdatePost:
    """Tests for PUT /api/v1/admin/posts/{post_id}"""

    async def test_partial_update(self, client: AsyncClient, admin_headers, test_post):
        response = await client.put(
            f"/api/v1/admin/posts/{test_post.post_id}",
            json={"title": "Ironman Lanzarote 2024"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Ironman Lanzarote 2024"
        assert data["body"] == test_post.body
        assert data["num"] == test_post.num

    async def test_update_unknown_post(self, client: AsyncClient, admin_headers):
        response = await client.put(
            "/api/v1/admin/posts/999", json={"title": "x"}, headers=admin_headers
        )

        assert response.status_code == 404


@pytest.mark.api
class TestDeletePost:
    """Tests for DELETE /api/v1/admin/posts/{post_id}"""

    async def test_delete_post_removes_reviews(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers, test_post,
        clean_review_text,
    ):
        await submit_review(
            db_session,
            test_post.post_id,
            ReviewSubmission(body=clean_review_text, ip_address="203.0.113.10"),
        )
        await submit_review(
            db_session,
            test_post.post_id,
            ReviewSubmission(body="Check out my amazing new bike setup", ip_address="203.0.113.10"),
        )

        response = await client.delete(
            f"/api/v1/admin/posts/{test_post.post_id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Post deleted successfully!"
        assert (await db_session.execute(select(Posts))).scalars().all() == []
        assert (await db_session.execute(select(Reviews))).scalars().all() == []
        assert (await db_session.execute(select(PostReviews))).scalars().all() == []

    async def test_delete_unknown_post(self, client: AsyncClient, admin_headers):
        response = await client.delete("/api/v1/admin/posts/999", headers=admin_headers)

        assert response.status_code == 404


@pytest.mark.api
async def test_admin_list_posts(client: AsyncClient, admin_headers, test_post):
    response = await client.get(
        "/api/v1/admin/posts", params={"sort": "oldest"}, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["sort"] == "oldest"
