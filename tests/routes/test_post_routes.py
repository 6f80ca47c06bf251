"""HTTP tests for the public and admin post routes."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from press.dependencies import get_publishing_pipeline, get_user_repository
from press.main import app
from press.managers.rate_limiter import limiter
from press.managers.token_manager import create_access_token
from press.models import PostStatus, UserDB
from press.services import LocalStorage, PublishingPipeline

from conftest import InMemoryPostRepository, InMemoryUserRepository


@pytest.fixture
def route_storage() -> LocalStorage:
    """Storage on the configured directories, which the app serves statically."""
    return LocalStorage()


@pytest.fixture
async def client(
    post_repo: InMemoryPostRepository,
    user_repo: InMemoryUserRepository,
    route_storage: LocalStorage,
) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client with in-memory repositories behind the pipeline."""
    app.dependency_overrides[get_publishing_pipeline] = lambda: PublishingPipeline(
        post_repo,  # type: ignore[arg-type]
        user_repo,  # type: ignore[arg-type]
        route_storage,
    )
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    limiter.enabled = False
    async with AsyncClient(base_url="http://test", transport=ASGITransport(app=app)) as ac:
        yield ac
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(author: UserDB) -> dict[str, str]:
    assert author.id is not None
    token = create_access_token(author.id, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


def create_form(title: str = "Hello World", tags: str = "go,rust") -> dict[str, str]:
    return {"title": title, "tags": tags, "body": "First post"}


def jpeg_file(data: bytes) -> dict[str, tuple[str, bytes, str]]:
    return {"cover": ("cover.jpg", data, "image/jpeg")}


class TestAdminAuth:
    """Admin endpoints need a valid bearer token."""

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/admin/posts"),
            ("POST", "/admin/posts"),
            ("PUT", "/admin/posts/hello-world"),
            ("DELETE", "/admin/posts/hello-world"),
        ],
    )
    async def test_missing_token(self, client: AsyncClient, method: str, path: str) -> None:
        response = await client.request(method, path)
        assert response.status_code == 401

    async def test_invalid_token(self, client: AsyncClient) -> None:
        response = await client.get("/admin/posts", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    async def test_token_for_unknown_user(self, client: AsyncClient) -> None:
        token = create_access_token(999)
        response = await client.get("/admin/posts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestCreatePost:
    """POST /admin/posts."""

    async def test_create(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(),
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "hello-world"
        assert body["status"] == "DRAFT"
        assert body["authorName"] == "Ana Souza"
        assert body["createdAt"] == body["updatedAt"]
        assert body["cover"].startswith("http://test/uploads/covers/")
        assert body["cover"].endswith(".jpg")

    async def test_cover_is_served(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(),
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )
        cover_path = response.json()["cover"].removeprefix("http://test")

        served = await client.get(cover_path)

        assert served.status_code == 200
        assert served.content == valid_jpeg_bytes

    async def test_same_title_twice(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        for _ in range(2):
            response = await client.post(
                "/admin/posts",
                data=create_form(),
                files=jpeg_file(valid_jpeg_bytes),
                headers=auth_headers,
            )

        assert response.json()["slug"] == "hello-world-2"

    async def test_missing_title_is_reported_per_field(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
        post_repo: InMemoryPostRepository,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data={"body": "no title"},
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert [e["field"] for e in body["errors"]] == ["title"]
        assert post_repo.rows == {}

    async def test_blank_title_is_reported_per_field(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(title="   "),
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "title"

    async def test_missing_cover(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        response = await client.post("/admin/posts", data=create_form(), headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "cover"
        assert post_repo.rows == {}

    async def test_rejected_cover(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(),
            files={"cover": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 415
        assert "image/jpeg" in response.json()["allowed_types"]
        assert post_repo.rows == {}


class TestEditPost:
    """PUT /admin/posts/{slug}."""

    async def test_publish(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        created = (
            await client.post(
                "/admin/posts",
                data=create_form(),
                files=jpeg_file(valid_jpeg_bytes),
                headers=auth_headers,
            )
        ).json()

        response = await client.put(
            "/admin/posts/hello-world",
            data={"status": "PUBLISHED"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "PUBLISHED"
        assert body["slug"] == "hello-world"
        assert body["title"] == "Hello World"
        assert body["cover"] == created["cover"]
        updated_at = datetime.fromisoformat(body["updatedAt"])
        assert updated_at > datetime.fromisoformat(created["updatedAt"])

    async def test_rejected_cover_keeps_old_one(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        created = (
            await client.post(
                "/admin/posts",
                data=create_form(),
                files=jpeg_file(valid_jpeg_bytes),
                headers=auth_headers,
            )
        ).json()

        response = await client.put(
            "/admin/posts/hello-world",
            data={"title": "Renamed"},
            files={"cover": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        assert response.json()["slug"] == "hello-world"
        assert response.json()["cover"] == created["cover"]

    async def test_invalid_status(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world")

        response = await client.put(
            "/admin/posts/hello-world",
            data={"status": "ARCHIVED"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "status"

    async def test_missing(self, client: AsyncClient, auth_headers: dict[str, str]) -> None:
        response = await client.put("/admin/posts/nope", data={"title": "x"}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Post 'nope' not found", "slug": "nope"}


class TestDeletePost:
    """DELETE /admin/posts/{slug}."""

    async def test_delete(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world")

        response = await client.delete("/admin/posts/hello-world", headers=auth_headers)

        assert response.status_code == 204
        assert post_repo.rows == {}
        assert (await client.get("/posts/hello-world")).status_code == 404

    async def test_missing(self, client: AsyncClient, auth_headers: dict[str, str]) -> None:
        response = await client.delete("/admin/posts/nope", headers=auth_headers)
        assert response.status_code == 404


class TestListing:
    """GET /posts and GET /admin/posts."""

    async def test_public_list_hides_drafts(
        self,
        client: AsyncClient,
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("public-one")
        post_repo.seed("secret", status=PostStatus.DRAFT)

        response = await client.get("/posts")

        assert response.status_code == 200
        assert response.json()["page"] == 1
        assert [p["slug"] for p in response.json()["posts"]] == ["public-one"]

    async def test_admin_list_shows_everything(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("public-one")
        post_repo.seed("secret", status=PostStatus.DRAFT)

        response = await client.get("/admin/posts", headers=auth_headers)

        assert [p["slug"] for p in response.json()["posts"]] == ["secret", "public-one"]

    @pytest.mark.parametrize("page", ["0", "-3"])
    async def test_non_positive_page(
        self,
        client: AsyncClient,
        post_repo: InMemoryPostRepository,
        page: str,
    ) -> None:
        post_repo.seed("public-one")

        response = await client.get("/posts", params={"page": page})

        assert response.status_code == 200
        assert response.json()["posts"] == []


class TestPublicPost:
    """GET /posts/{slug} and GET /posts/{slug}/related."""

    async def test_get(self, client: AsyncClient, post_repo: InMemoryPostRepository) -> None:
        post_repo.seed("hello-world", tags="go")

        response = await client.get("/posts/hello-world")

        assert response.status_code == 200
        assert response.json()["authorName"] == "Ana Souza"
        assert response.json()["cover"] == "http://test/uploads/covers/seed.jpg"

    async def test_draft_is_not_found(
        self,
        client: AsyncClient,
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world", status=PostStatus.DRAFT)

        assert (await client.get("/posts/hello-world")).status_code == 404

    async def test_related(self, client: AsyncClient, post_repo: InMemoryPostRepository) -> None:
        post_repo.seed("hello-world", tags="go,rust")
        post_repo.seed("golang-tips", tags="golang")
        post_repo.seed("cooking", tags="food")

        response = await client.get("/posts/hello-world/related")

        assert response.status_code == 200
        assert response.json()["slug"] == "hello-world"
        assert [p["slug"] for p in response.json()["posts"]] == ["golang-tips"]

    async def test_related_unknown_slug_is_empty(self, client: AsyncClient) -> None:
        response = await client.get("/posts/nope/related")

        assert response.status_code == 200
        assert response.json()["posts"] == []


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


class TestFormFields:
    """Which form parts were sent decides what create and edit do."""

    async def test_create_without_tags_part(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
        post_repo: InMemoryPostRepository,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data={"title": "Hello World", "body": "First post"},
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert [e["field"] for e in response.json()["errors"]] == ["tags"]
        assert post_repo.rows == {}

    async def test_create_with_empty_tags(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(tags=""),
            files=jpeg_file(valid_jpeg_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["tags"] == ""

    async def test_edit_clears_tags(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world", tags="go,rust")

        response = await client.put(
            "/admin/posts/hello-world",
            data={"tags": ""},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["tags"] == ""
        assert response.json()["title"] == "Hello World"
        assert post_repo.rows["hello-world"].tags == ""

    async def test_edit_without_tags_keeps_them(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world", tags="go,rust")

        response = await client.put(
            "/admin/posts/hello-world",
            data={"title": "Renamed"},
            headers=auth_headers,
        )

        assert response.json()["tags"] == "go,rust"

    async def test_edit_blank_title(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        post_repo: InMemoryPostRepository,
    ) -> None:
        post_repo.seed("hello-world")

        response = await client.put(
            "/admin/posts/hello-world",
            data={"title": "   "},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "title"
        assert post_repo.rows["hello-world"].title == "Hello World"

    async def test_two_cover_parts(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        valid_jpeg_bytes: bytes,
        post_repo: InMemoryPostRepository,
    ) -> None:
        response = await client.post(
            "/admin/posts",
            data=create_form(),
            files=[
                ("cover", ("a.jpg", valid_jpeg_bytes, "image/jpeg")),
                ("cover", ("b.jpg", valid_jpeg_bytes, "image/jpeg")),
            ],
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert [e["field"] for e in response.json()["errors"]] == ["cover"]
        assert post_repo.rows == {}


class TestBearerScheme:
    """Admin auth is a plain bearer scheme."""

    async def test_non_bearer_scheme(self, client: AsyncClient) -> None:
        response = await client.get("/admin/posts", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_openapi_declares_http_bearer(self) -> None:
        schemes = app.openapi()["components"]["securitySchemes"]

        assert list(schemes) == ["HTTPBearer"]
        assert schemes["HTTPBearer"]["scheme"] == "bearer"
