"""
Tests for web/app.py — the JSON API over lexi topics.

Run with: pytest tests/test_app.py
"""

from __future__ import annotations

import pytest

from config.settings import Settings
from lexi import db
from web.app import create_app


@pytest.fixture
def client():
    app = create_app(Settings(languages="1:default,2:de:Deutsch"))
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def docs(client):
    response = client.post("/api/topics", json={"identifier": "docs", "title": "Docs"})
    assert response.status_code == 201
    return response.get_json()


class TestLanguages:
    def test_lists_configured_languages(self, client):
        data = client.get("/api/languages").get_json()
        assert [lang["id"] for lang in data] == [1, 2]
        assert data[1]["title"] == "Deutsch"


class TestTopics:
    def test_default_topic_exists_on_startup(self, client):
        data = client.get("/api/topics").get_json()
        assert [t["identifier"] for t in data] == ["default"]

    def test_create_returns_empty_translations(self, docs):
        assert docs["identifier"] == "docs"
        assert docs["id"] > 0
        assert docs["translations"] == {"1": {}, "2": {}}

    def test_create_duplicate_is_conflict(self, client, docs):
        response = client.post("/api/topics", json={"identifier": "docs"})
        assert response.status_code == 409

    def test_create_invalid_identifier(self, client):
        response = client.post("/api/topics", json={"identifier": "my docs"})
        assert response.status_code == 400

    def test_create_missing_body(self, client):
        response = client.post("/api/topics")
        assert response.status_code == 400

    def test_get_missing_topic(self, client):
        response = client.get("/api/topics/nope")
        assert response.status_code == 404
        assert "nope" in response.get_json()["error"]

    def test_patch_updates_fields(self, client, docs):
        response = client.patch(
            "/api/topics/docs", json={"identifier": "manual", "description": "How to"}
        )
        assert response.status_code == 200
        data = client.get("/api/topics/manual").get_json()
        assert data["title"] == "Docs"
        assert data["description"] == "How to"

    def test_patch_default_identifier_is_conflict(self, client):
        response = client.patch("/api/topics/default", json={"identifier": "other"})
        assert response.status_code == 409

    def test_patch_default_title_is_allowed(self, client):
        response = client.patch(
            "/api/topics/default", json={"identifier": "default", "title": "Common"}
        )
        assert response.status_code == 200
        assert response.get_json()["title"] == "Common"

    def test_delete(self, client, docs):
        assert client.delete("/api/topics/docs").status_code == 200
        assert client.get("/api/topics/docs").status_code == 404

    def test_delete_default_is_conflict(self, client):
        assert client.delete("/api/topics/default").status_code == 409
        assert client.get("/api/topics/default").status_code == 200


class TestTranslations:
    def test_set_translation_propagates_key(self, client, docs):
        response = client.put("/api/topics/docs/translations/2/greeting", json={"value": "Hallo"})
        assert response.status_code == 200

        data = client.get("/api/topics/docs").get_json()
        assert data["translations"] == {"1": {"greeting": ""}, "2": {"greeting": "Hallo"}}

    def test_unknown_language(self, client, docs):
        response = client.put("/api/topics/docs/translations/9/greeting", json={"value": "x"})
        assert response.status_code == 404

    def test_invalid_key(self, client, docs):
        response = client.put("/api/topics/docs/translations/1/a.b", json={"value": "x"})
        assert response.status_code == 400

    def test_missing_value(self, client, docs):
        response = client.put("/api/topics/docs/translations/1/greeting", json={})
        assert response.status_code == 400

    def test_remove_key(self, client, docs):
        client.put("/api/topics/docs/translations/1/greeting", json={"value": "hi"})
        client.put("/api/topics/docs/translations/1/farewell", json={"value": "bye"})

        assert client.delete("/api/topics/docs/keys/greeting").status_code == 200

        data = client.get("/api/topics/docs").get_json()
        assert data["translations"] == {"1": {"farewell": "bye"}, "2": {"farewell": ""}}

    def test_corrupt_blob_is_logged_server_error(self, client, docs, caplog):
        with db.connect() as conn:
            conn.execute(
                "UPDATE translations SET translations = ? WHERE topic_id = ? AND lang_id = 1",
                ('"not a map"', docs["id"]),
            )

        response = client.get("/api/topics/docs")

        assert response.status_code == 500
        assert "JSON object" in response.get_json()["error"]
        assert "Corrupt translations on GET /api/topics/docs" in caplog.text
