"""API tests for the public post endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import Posts


@pytest.fixture
async def three_posts(db_session: AsyncSession) -> list[Posts]:
    posts = [
        Posts(title=f"Race {num}", body=f"Report number {num}", num=num) for num in (2, 1, 3)
    ]
    db_session.add_all(posts)
    await db_session.commit()
    return posts


@pytest.mark.api
class TestListPosts:
    """Tests for GET /api/v1/posts"""

    async def test_newest_first_by_default(self, client: AsyncClient, three_posts):
        response = await client.get("/api/v1/posts")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["sort"] == "newest"
        assert [p["num"] for p in data["posts"]] == [3, 2, 1]

    async def test_oldest_first(self, client: AsyncClient, three_posts):
        response = await client.get("/api/v1/posts", params={"sort": "oldest"})

        assert [p["num"] for p in response.json()["posts"]] == [1, 2, 3]

    async def test_invalid_sort(self, client: AsyncClient):
        response = await client.get("/api/v1/posts", params={"sort": "random"})

        assert response.status_code == 422

    async def test_empty(self, client: AsyncClient):
        response = await client.get("/api/v1/posts")

        assert response.json() == {"total": 0, "sort": "newest", "posts": []}


@pytest.mark.api
class TestGetPost:
    """Tests for GET /api/v1/posts/{post_id}"""

    async def test_get_post(self, client: AsyncClient, test_post):
        response = await client.get(f"/api/v1/posts/{test_post.post_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Ironman Lanzarote"
        assert data["img"] == "https://example.com/lanzarote.jpg"
        assert data["reviews"] == []
        assert data["created_at"].endswith("Z")

    async def test_post_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/posts/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"
