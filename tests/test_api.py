from tests.conftest import ADMIN_PASSWORD

ARTICLE = {"title": "Hello World", "content": "---\ntitle: Hello\n---\n\n# Hello\n\nFirst version"}


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestAuth:
    def test_login(self, client):
        resp = client.post("/auth/login", json={"password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["access_token"]
        assert resp.cookies.get("session")

    def test_wrong_password(self, client):
        resp = client.post("/auth/login", json={"password": "guess"})
        assert resp.status_code == 401

    def test_session_status(self, client, admin_headers):
        assert client.get("/auth/session").json() == {"is_admin": False}
        assert client.get("/auth/session", headers=admin_headers).json() == {"is_admin": True}

    def test_tampered_token_is_not_admin(self, client, admin_token):
        resp = client.post("/content/articles", json=ARTICLE, headers={"Authorization": f"Bearer {admin_token}x"})
        assert resp.status_code == 401


class TestContent:
    def test_admin_required_for_writes(self, client):
        assert client.post("/content/articles", json=ARTICLE).status_code == 401
        assert client.put("/content/articles/hello-world/draft", json={"content": "x"}).status_code == 401
        assert client.post("/content/articles/hello-world/publish").status_code == 401
        assert client.delete("/content/articles/hello-world").status_code == 401

    def test_unknown_kind(self, client):
        assert client.get("/content/videos").status_code == 404

    def test_create_and_visibility(self, client, admin_headers):
        resp = client.post("/content/articles", json=ARTICLE, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json()["id"] == "hello-world"

        assert client.get("/content/articles/hello-world").status_code == 404
        assert client.get("/content/articles").json() == []

        resp = client.patch("/content/articles/hello-world", json={"visible": True}, headers=admin_headers)
        assert resp.json()["visible"] is True
        assert client.get("/content/articles/hello-world").status_code == 200

    def test_duplicate_create(self, client, admin_headers):
        client.post("/content/articles", json=ARTICLE, headers=admin_headers)
        assert client.post("/content/articles", json=ARTICLE, headers=admin_headers).status_code == 409

    def test_title_without_usable_id(self, client, admin_headers):
        resp = client.post("/content/docs", json={"title": "!!!"}, headers=admin_headers)
        assert resp.status_code == 422

    def test_draft_publish_restore(self, client, admin_headers):
        client.post("/content/articles", json={**ARTICLE, "visible": True}, headers=admin_headers)
        base = "/content/articles/hello-world"

        resp = client.put(f"{base}/draft", json={"content": "v1", "summary": "rewrite"}, headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["draft_content"] == "v1"
        assert body["history"][0]["content"] == ARTICLE["content"]
        assert body["history"][0]["summary"] == "rewrite"

        public = client.get(base).json()
        assert public["draft_content"] is None
        assert public["history"] == []
        assert public["published_content"] == ARTICLE["content"]

        resp = client.post(f"{base}/publish", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["published_content"] == "v1"
        assert resp.json()["draft_content"] is None

        resp = client.post(f"{base}/publish", headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json() == {"detail": "nothing to publish"}

        history_id = client.get(base, headers=admin_headers).json()["history"][0]["id"]
        resp = client.post(f"{base}/history/{history_id}/restore", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["draft_content"] == ARTICLE["content"]
        assert resp.json()["history"][0]["content"] == "v1"

    def test_restore_unknown_history(self, client, admin_headers):
        client.post("/content/articles", json=ARTICLE, headers=admin_headers)
        resp = client.post("/content/articles/hello-world/history/999/restore", headers=admin_headers)
        assert resp.status_code == 404

    def test_delete(self, client, admin_headers):
        client.post("/content/docs", json={"title": "Guide", "content": "x"}, headers=admin_headers)
        client.put("/content/docs/guide/draft", json={"content": "y"}, headers=admin_headers)

        assert client.delete("/content/docs/guide", headers=admin_headers).status_code == 200
        assert client.get("/content/docs/guide", headers=admin_headers).status_code == 404
        assert client.delete("/content/docs/guide", headers=admin_headers).status_code == 404

    def test_rendered_page_is_interpolated(self, client, admin_headers):
        page = {"title": "About", "content": "---\nname: Ada\n---\n\n## Who\n\nHello {{name}}", "visible": True}
        client.post("/content/pages", json=page, headers=admin_headers)

        resp = client.get("/content/pages/about/rendered")
        assert resp.status_code == 200
        body = resp.json()
        assert "Hello Ada" in body["html"]
        assert body["toc"] == [{"text": "Who", "slug": "who"}]

    def test_profile_singleton(self, client, admin_headers):
        resp = client.get("/content/profile/profile")
        assert resp.status_code == 200
        assert resp.json()["id"] == "profile"

        client.put("/content/profile/profile/draft", json={"content": "About me"}, headers=admin_headers)
        assert client.post("/content/profile/profile/publish", headers=admin_headers).status_code == 200
        assert client.get("/content/profile/profile").json()["published_content"] == "About me"
        assert client.delete("/content/profile/profile", headers=admin_headers).status_code == 400


class TestDocSections:
    def test_section_order_and_delete(self, client, admin_headers):
        for title, section in [("Install", "Start"), ("Tokens", "Reference"), ("Hooks", "Reference")]:
            doc = {"title": title, "content": "x", "project": "folio", "section": section}
            client.post("/content/docs", json=doc, headers=admin_headers)

        assert client.get("/content/docs/sections", params={"project": "folio"}).json() == ["Reference", "Start"]

        order = {"project": "folio", "sections": ["Start", "Reference"]}
        assert client.put("/content/docs/section-order", json=order).status_code == 401
        assert client.put("/content/docs/section-order", json=order, headers=admin_headers).status_code == 200
        assert client.get("/content/docs/sections", params={"project": "folio"}).json() == ["Start", "Reference"]

        missing = {"project": "ghost", "sections": ["Start"]}
        assert client.put("/content/docs/section-order", json=missing, headers=admin_headers).status_code == 404

        target = {"project": "folio", "section": "Reference"}
        resp = client.request("DELETE", "/content/docs/section", json=target, headers=admin_headers)
        assert resp.json() == {"ok": True, "deleted": 2}
        assert [doc["id"] for doc in client.get("/content/docs", headers=admin_headers).json()] == ["install"]

    def test_delete_section_requires_project_and_section(self, client, admin_headers):
        resp = client.request("DELETE", "/content/docs/section", json={"project": "folio"}, headers=admin_headers)
        assert resp.status_code == 422


class TestSearch:
    def test_search(self, client, admin_headers):
        doc = {"title": "Setup", "content": "## Install\n\nUse pip to install.", "visible": True, "project": "folio"}
        client.post("/content/docs", json=doc, headers=admin_headers)

        hits = client.get("/search", params={"q": "pip"}).json()
        assert hits[0]["id"] == "setup"
        assert hits[0]["heading_context"] == "Install"
        assert hits[0]["title_path"] == ["folio", "Setup"]
        assert hits[0]["preview_snippet"] == "Use pip to install."
        assert client.get("/search", params={"q": "p"}).json() == []


class TestSettings:
    def test_read_and_update(self, client, admin_headers):
        assert client.get("/settings").json()["maintenance"] is False
        assert client.put("/settings", json={"maintenance": True}).status_code == 401

        resp = client.put("/settings", json={"maintenance": True, "theme": "light"}, headers=admin_headers)
        assert resp.status_code == 200
        assert client.get("/settings").json()["theme"] == "light"

    def test_rejects_unknown_theme(self, client, admin_headers):
        assert client.put("/settings", json={"theme": "neon"}, headers=admin_headers).status_code == 422


class TestPreviewAndDocuments:
    def test_preview(self, client, admin_headers):
        resp = client.post(
            "/preview",
            json={"body": "## Hi {{name}}\n\n```bash\necho hi\n```", "preamble": {"name": "Ada"}, "interpolate": True},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["blocks"]) == 2
        assert "Hi Ada" in body["blocks"][0]
        assert len(body["overlay"]) == 5
        assert body["toc"] == [{"text": "Hi Ada", "slug": "hi-ada"}]

    def test_parse_and_serialize(self, client, admin_headers):
        resp = client.post("/documents/parse", json={"text": "---\ntags:\n  - a\n---\n\nBody"}, headers=admin_headers)
        assert resp.json() == {"preamble": {"tags": ["a"]}, "body": "Body"}

        resp = client.post("/documents/serialize", json=resp.json(), headers=admin_headers)
        assert resp.json() == {"text": "---\ntags:\n  - a\n---\n\nBody"}
