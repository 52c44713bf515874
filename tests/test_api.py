"""
Tests for the HTTP API: form/resource CRUD and form execution.
"""

from promptforms.llm.dispatcher import Provider


def _create_form(client, **overrides):
    body = {
        "title": "Summarizer",
        "description": "Summarizes a document",
        "prompt_template": "Summarize: {{doc}}",
        "provider": "gemini",
        "model": "",
        "fields": [{"name": "doc", "label": "Document", "type": "textarea", "required": True}],
        "resource_ids": [],
    }
    body.update(overrides)
    response = client.post("/api/forms", json=body)
    assert response.status_code == 201
    return response.json()["id"]


class TestFormRoutes:

    def test_create_and_get(self, client):
        form_id = _create_form(client)

        response = client.get(f"/api/forms/{form_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Summarizer"
        assert data["provider"] == "gemini"
        assert data["fields"][0]["name"] == "doc"
        assert data["fields"][0]["type"] == "textarea"
        assert data["fields"][0]["required"] is True
        assert data["resources"] == []

    def test_create_requires_title(self, client):
        response = client.post("/api/forms", json={"title": "  ", "prompt_template": "x"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Title is required"

    def test_invalid_field_type_rejected(self, client):
        response = client.post(
            "/api/forms",
            json={"title": "T", "fields": [{"name": "a", "type": "checkbox"}]},
        )
        assert response.status_code == 422

    def test_list_forms(self, client):
        first = _create_form(client, title="One")
        second = _create_form(client, title="Two")

        ids = [f["id"] for f in client.get("/api/forms").json()]

        assert ids == [second, first]

    def test_update_form(self, client):
        form_id = _create_form(client)

        response = client.put(
            f"/api/forms/{form_id}",
            json={"title": "Renamed", "provider": "openai", "model": "gpt-4o-mini", "fields": []},
        )

        assert response.status_code == 200
        data = client.get(f"/api/forms/{form_id}").json()
        assert data["title"] == "Renamed"
        assert data["model"] == "gpt-4o-mini"
        assert data["fields"] == []

    def test_update_missing_form(self, client):
        response = client.put("/api/forms/999", json={"title": "x"})
        assert response.status_code == 404

    def test_delete_form(self, client):
        form_id = _create_form(client)

        assert client.delete(f"/api/forms/{form_id}").status_code == 200
        assert client.get(f"/api/forms/{form_id}").status_code == 404
        assert client.delete(f"/api/forms/{form_id}").status_code == 404


class TestResourceRoutes:

    def test_create_list_and_attach(self, client):
        response = client.post("/api/resources", json={"name": "Style guide", "content": "Be brief."})
        assert response.status_code == 201
        resource_id = response.json()["id"]

        listed = client.get("/api/resources").json()
        assert [r["name"] for r in listed] == ["Style guide"]
        assert listed[0]["type"] == "text"

        form_id = _create_form(client, resource_ids=[resource_id])
        resources = client.get(f"/api/forms/{form_id}").json()["resources"]
        assert [r["id"] for r in resources] == [resource_id]

    def test_create_requires_name_and_content(self, client):
        response = client.post("/api/resources", json={"name": "Empty"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Name and content are required"

    def test_delete_resource_detaches(self, client):
        resource_id = client.post("/api/resources", json={"name": "R", "content": "c"}).json()["id"]
        form_id = _create_form(client, resource_ids=[resource_id])

        assert client.delete(f"/api/resources/{resource_id}").status_code == 200
        assert client.get(f"/api/resources/{resource_id}").status_code == 404
        assert client.get(f"/api/forms/{form_id}").json()["resources"] == []


class TestExecuteRoute:

    def test_execute_with_caller_credential(self, client, fake_backends):
        fake_backends[Provider.GEMINI].text = "A greeting."
        form_id = _create_form(client)

        response = client.post(
            f"/api/forms/{form_id}/execute",
            json={"inputs": {"doc": "hello world"}, "config": {"apiKey": "user-key"}},
        )

        assert response.status_code == 200
        assert response.json() == {"result": "A greeting."}
        call = fake_backends[Provider.GEMINI].calls[0]
        assert call["prompt"] == "Summarize: hello world"
        assert call["credential"] == "user-key"

    def test_execute_with_resources(self, client, fake_backends):
        resource_id = client.post("/api/resources", json={"name": "Glossary", "content": "hw = hello world"}).json()["id"]
        form_id = _create_form(client, provider="deepseek", resource_ids=[resource_id])

        response = client.post(
            f"/api/forms/{form_id}/execute",
            json={"inputs": {"doc": "hw"}, "config": {"apiKey": "ds-key"}},
        )

        assert response.status_code == 200
        assert response.json()["result"] == "deepseek says hi"
        prompt = fake_backends[Provider.DEEPSEEK].calls[0]["prompt"]
        assert prompt == (
            "Summarize: hw\n\n# Reference Knowledge:\n"
            "\n--- Source: Glossary ---\nhw = hello world\n"
        )

    def test_missing_credential(self, client, fake_backends):
        form_id = _create_form(client, provider="openai")

        response = client.post(f"/api/forms/{form_id}/execute", json={"inputs": {"doc": "x"}})

        assert response.status_code == 400
        assert response.json()["error_kind"] == "missing_credential"
        assert not fake_backends[Provider.OPENAI].calls

    def test_invalid_provider(self, client, fake_backends):
        form_id = _create_form(client, provider="anthropic")

        response = client.post(
            f"/api/forms/{form_id}/execute",
            json={"inputs": {}, "config": {"apiKey": "k"}},
        )

        assert response.status_code == 400
        assert response.json()["error_kind"] == "invalid_provider"
        assert not any(b.calls for b in fake_backends.values())

    def test_backend_error(self, client, fake_backends):
        fake_backends[Provider.OPENAI].error = RuntimeError("Incorrect API key provided")
        form_id = _create_form(client, provider="openai")

        response = client.post(
            f"/api/forms/{form_id}/execute",
            json={"inputs": {"doc": "x"}, "config": {"apiKey": "bad"}},
        )

        assert response.status_code == 500
        assert response.json() == {
            "detail": "Incorrect API key provided",
            "error_kind": "backend_error",
        }

    def test_form_not_found(self, client):
        response = client.post("/api/forms/12345/execute", json={"inputs": {}})

        assert response.status_code == 404
        assert response.json()["error_kind"] == "form_not_found"


class TestServiceRoutes:

    def test_providers(self, client):
        providers = client.get("/api/providers").json()

        assert [p["id"] for p in providers] == ["gemini", "openai", "deepseek"]
        assert providers[0]["default_model"] == "gemini-2.5-flash"
        assert providers[0]["uses_default_credential"] is True
        assert "deepseek-chat" in providers[2]["models"]

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["database"] == "sqlite"
        assert data["default_gemini_credential"] is False

    def test_root(self, client):
        assert client.get("/").json()["endpoints"]["forms"] == "/api/forms"
