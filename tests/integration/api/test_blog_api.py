"""
End-to-end HTTP flows against a real app, database and rules file.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from techblog.domain.entities import User


def create_post(client: TestClient, headers: dict[str, str], **body: object) -> dict:  # type: ignore[type-arg]
    payload = {"title": "Hello World", "content": "x"}
    payload.update(body)
    resp = client.post("/api/admin/posts", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()  # type: ignore[no-any-return]


class TestHealth:
    def test_health_reports_database(self, client: TestClient) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert {c["name"] for c in data["checks"]} == {"process", "database"}


class TestAuthFlow:
    def test_register_login_me_logout(self, client: TestClient) -> None:
        resp = client.post(
            "/api/auth/register",
            json={"email": " New@Example.com ", "password": "password123", "name": "Nia"},
        )
        assert resp.status_code == 200, resp.text
        user = resp.json()["user"]
        assert user["email"] == "new@example.com"
        assert user["role"] == "USER"
        assert "password_hash" not in user

        resp = client.post(
            "/api/auth/login", data={"username": "new@example.com", "password": "password123"}
        )
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"
        assert "access_token" in resp.cookies

        # Cookie carries the session from here on
        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"
        assert me.json()["role"] == "USER"

        client.post("/api/auth/logout")
        client.cookies.clear()
        assert client.get("/api/auth/me").status_code == 401

    def test_register_twice_conflicts(self, client: TestClient) -> None:
        body = {"email": "a@b.com", "password": "password123"}
        assert client.post("/api/auth/register", json=body).status_code == 200
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Email already registered."

    def test_register_validation(self, client: TestClient) -> None:
        resp = client.post("/api/auth/register", json={"email": "a@b.com", "password": "short"})
        assert resp.status_code == 400

    def test_bad_credentials(self, client: TestClient, api_users: dict[str, User]) -> None:
        resp = client.post(
            "/api/auth/login", data={"username": "admin@example.com", "password": "nope-nope"}
        )
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"


class TestAdminGate:
    def test_stats_anonymous_then_user_then_admin(
        self,
        client: TestClient,
        reader_headers: dict[str, str],
        admin_headers: dict[str, str],
    ) -> None:
        assert client.get("/api/admin/stats").status_code == 401
        assert client.get("/api/admin/stats", headers=reader_headers).status_code == 403

        resp = client.get("/api/admin/stats", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == {"users": 2, "posts": 0, "comments": 0}

    def test_every_admin_post_route_is_gated(
        self, client: TestClient, reader_headers: dict[str, str]
    ) -> None:
        post_id = "00000000-0000-0000-0000-000000000000"
        calls = [
            ("GET", "/api/admin/posts", None),
            ("POST", "/api/admin/posts", {"title": "t", "content": "c"}),
            ("GET", f"/api/admin/posts/{post_id}", None),
            ("PUT", f"/api/admin/posts/{post_id}", {"title": "t"}),
            ("DELETE", f"/api/admin/posts/{post_id}", None),
        ]
        for method, url, body in calls:
            assert client.request(method, url, json=body).status_code == 401, url
            resp = client.request(method, url, json=body, headers=reader_headers)
            assert resp.status_code == 403, url


class TestPostLifecycle:
    def test_create_publish_unpublish(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        created = create_post(client, admin_headers)
        assert created["status"] == "DRAFT"
        assert created["slug"] == "hello-world"
        assert created["published_at"] is None

        # Drafts are invisible publicly
        assert client.get("/api/posts/hello-world").status_code == 404

        url = f"/api/admin/posts/{created['id']}"
        published = client.put(url, json={"status": "PUBLISHED"}, headers=admin_headers).json()
        assert published["published_at"] is not None
        assert "updated_at" in published

        detail = client.get("/api/posts/hello-world")
        assert detail.status_code == 200
        assert detail.json()["author"] == {"name": "Admin", "email": "admin@example.com"}

        drafted = client.put(url, json={"status": "DRAFT"}, headers=admin_headers).json()
        assert drafted["published_at"] is None

    def test_duplicate_titles_and_admin_get(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        create_post(client, admin_headers)
        second = create_post(client, admin_headers, excerpt="Intro")
        assert second["slug"] == "hello-world-2"

        resp = client.get(f"/api/admin/posts/{second['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["excerpt"] == "Intro"
        assert resp.json()["content"] == "x"

    def test_create_requires_title_and_content(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        resp = client.post("/api/admin/posts", json={"title": "Only"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Title and content are required."

    def test_update_edge_cases(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        created = create_post(client, admin_headers, excerpt="Intro")
        url = f"/api/admin/posts/{created['id']}"

        empty = client.put(url, json={}, headers=admin_headers)
        assert empty.status_code == 400
        assert empty.json()["detail"] == "No updates provided."

        missing = client.put(
            "/api/admin/posts/00000000-0000-0000-0000-000000000000",
            json={"title": "New"},
            headers=admin_headers,
        )
        assert missing.status_code == 404

        cleared = client.put(url, json={"excerpt": None}, headers=admin_headers)
        assert cleared.status_code == 200
        fetched = client.get(url, headers=admin_headers).json()
        assert fetched["excerpt"] is None

    def test_delete(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        created = create_post(client, admin_headers, status="PUBLISHED")
        url = f"/api/admin/posts/{created['id']}"

        assert client.delete(url, headers=admin_headers).json() == {"success": True}
        assert client.get(url, headers=admin_headers).status_code == 404
        # Deleting again is a generic failure, not a silent success
        assert client.delete(url, headers=admin_headers).status_code == 500

    def test_listings_and_page_coercion(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        for i in range(12):
            create_post(client, admin_headers, title=f"Post {i}", status="PUBLISHED")
        create_post(client, admin_headers, title="Draft")

        public = client.get("/api/posts", params={"page": "abc"}).json()
        assert public["pagination"] == {"page": 1, "page_size": 10, "total": 12, "total_pages": 2}
        assert len(public["posts"]) == 10
        assert public["posts"][0]["author"]["name"] == "Admin"

        page2 = client.get("/api/posts", params={"page": 2}).json()
        assert len(page2["posts"]) == 2

        admin = client.get("/api/admin/posts", headers=admin_headers).json()
        assert admin["pagination"]["page_size"] == 20
        assert admin["pagination"]["total"] == 13
        assert admin["posts"][0]["slug"] == "draft"

    def test_long_title_post_is_reachable_by_slug(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        created = create_post(client, admin_headers, title="word " * 60, status="PUBLISHED")
        assert len(created["slug"]) <= 191

        resp = client.get(f"/api/posts/{created['slug']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == created["id"]

    def test_page_beyond_any_offset_is_empty(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        create_post(client, admin_headers, status="PUBLISHED")

        resp = client.get("/api/posts", params={"page": "99999999999999999999"})
        assert resp.status_code == 200
        assert resp.json()["posts"] == []
        assert resp.json()["pagination"]["total"] == 1


class TestComments:
    def test_comment_flow(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        reader_headers: dict[str, str],
    ) -> None:
        create_post(client, admin_headers, status="PUBLISHED")
        url = "/api/posts/hello-world/comments"

        assert client.post(url, json={"content": "hi"}).status_code == 401

        blank = client.post(url, json={"content": "   "}, headers=reader_headers)
        assert blank.status_code == 400

        created = client.post(url, json={"content": "<em>Great</em> post"}, headers=reader_headers)
        assert created.status_code == 200, created.text
        assert created.json()["content"] == "Great post"
        assert created.json()["author"] == {"name": "Reader", "email": "reader@example.com"}

        limited = client.post(url, json={"content": "again"}, headers=reader_headers)
        assert limited.status_code == 429
        assert 1 <= int(limited.headers["retry-after"]) <= 10

        listed = client.get(url)
        assert listed.status_code == 200
        assert [c["content"] for c in listed.json()] == ["Great post"]

    def test_comments_on_unknown_post(
        self, client: TestClient, reader_headers: dict[str, str]
    ) -> None:
        assert client.get("/api/posts/nope/comments").status_code == 404
        resp = client.post(
            "/api/posts/nope/comments", json={"content": "hello"}, headers=reader_headers
        )
        assert resp.status_code == 404
