"""
Unit tests for the HTTP surface.

Tests /health, /prepare-pdf and /download/{id} with a stub renderer.
"""

import re
import time

import pytest
from fastapi.testclient import TestClient

from pdf_handoff.webapi import create_app

from .conftest import FAKE_PDF, StubRenderer

DOC = "<html><head><title>CV</title></head><body><h1>Jane Doe</h1></body></html>"


@pytest.fixture
def client(renderer):
    """Create a started test client backed by the stub renderer."""
    with TestClient(create_app(renderer=renderer)) as c:
        yield c


@pytest.fixture
def failing_client():
    with TestClient(create_app(renderer=StubRenderer(error=RuntimeError("chromium exploded")))) as c:
        yield c


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_reports_artifact_count(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "artifacts": 0}

        client.post("/prepare-pdf", json={"html": DOC})
        assert client.get("/health").json()["artifacts"] == 1

    def test_503_before_startup(self, renderer):
        """Without the lifespan running there is no service to use."""
        response = TestClient(create_app(renderer=renderer)).get("/health")
        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "not_ready"


class TestPreparePdfEndpoint:
    """Tests for POST /prepare-pdf."""

    def test_returns_id_url_and_filename(self, client):
        response = client.post("/prepare-pdf?template=modern", json={"html": DOC, "personName": "Jane  Doe!!"})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"id", "downloadUrl", "filename"}
        assert data["downloadUrl"] == f"/download/{data['id']}"
        assert re.fullmatch(r"Jane_Doe_Modern_[0-9a-f]{8}\.pdf", data["filename"])

    def test_template_defaults_to_classic(self, client, renderer):
        data = client.post("/prepare-pdf", json={"html": DOC}).json()

        assert re.fullmatch(r"CV_Classic_[0-9a-f]{8}\.pdf", data["filename"])
        assert ".template-classic" in renderer.calls[0][0]

    def test_unknown_template_renders_markup_unmodified(self, client, renderer):
        response = client.post("/prepare-pdf?template=unknown-kind", json={"html": DOC})

        assert response.status_code == 200
        assert renderer.calls[0][0] == DOC

    def test_missing_html_returns_400(self, client):
        response = client.post("/prepare-pdf", json={"personName": "Jane"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_request"
        assert client.get("/health").json()["artifacts"] == 0

    def test_empty_html_returns_400(self, client, renderer):
        response = client.post("/prepare-pdf", json={"html": ""})

        assert response.status_code == 400
        assert renderer.calls == []

    def test_missing_body_returns_400(self, client):
        response = client.post("/prepare-pdf")
        assert response.status_code == 400

    def test_non_object_body_returns_400(self, client, renderer):
        response = client.post("/prepare-pdf", json=["<html></html>"])

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_request"
        assert renderer.calls == []

    def test_plain_text_body_returns_400(self, client, renderer):
        response = client.post(
            "/prepare-pdf",
            content=b"<html></html>",
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_request"
        assert renderer.calls == []

    def test_malformed_json_returns_400(self, client):
        response = client.post(
            "/prepare-pdf",
            content=b'{"html": "<h1>',
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_json_with_charset_is_accepted(self, client):
        response = client.post(
            "/prepare-pdf",
            content=b'{"html": "<h1>x</h1>"}',
            headers={"content-type": "application/json; charset=utf-8"},
        )
        assert response.status_code == 200

    def test_non_string_html_returns_400(self, client, renderer):
        response = client.post("/prepare-pdf", json={"html": 123})

        assert response.status_code == 400
        assert renderer.calls == []

    def test_non_string_person_name_uses_default_base(self, client):
        response = client.post("/prepare-pdf?template=modern", json={"html": DOC, "personName": 42})

        assert response.status_code == 200
        assert re.fullmatch(r"CV_Modern_[0-9a-f]{8}\.pdf", response.json()["filename"])

    def test_render_failure_returns_generic_500(self, failing_client):
        response = failing_client.post("/prepare-pdf", json={"html": DOC})

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["code"] == "render_failed"
        assert "chromium exploded" not in response.text
        assert failing_client.get("/health").json()["artifacts"] == 0

    def test_oversized_body_returns_413(self, renderer):
        with TestClient(create_app(renderer=renderer, max_body_mb=0.001)) as c:
            response = c.post("/prepare-pdf", json={"html": "<p>" + "x" * 5000 + "</p>"})

        assert response.status_code == 413
        assert response.json()["detail"]["code"] == "payload_too_large"
        assert renderer.calls == []

    def test_cors_headers_present(self, client):
        response = client.post(
            "/prepare-pdf",
            json={"html": DOC},
            headers={"Origin": "http://frontend.example"},
        )
        assert response.headers.get("access-control-allow-origin") == "*"


class TestDownloadEndpoint:
    """Tests for GET /download/{id}."""

    def test_download_once(self, client):
        data = client.post("/prepare-pdf?template=minimal", json={"html": DOC, "personName": "Ada"}).json()

        response = client.get(data["downloadUrl"])

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == f'attachment; filename="{data["filename"]}"'
        assert response.content == FAKE_PDF

    def test_second_download_returns_404(self, client):
        data = client.post("/prepare-pdf", json={"html": DOC}).json()
        client.get(data["downloadUrl"])

        response = client.get(data["downloadUrl"])

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    def test_unknown_id_returns_404(self, client):
        assert client.get("/download/not-a-real-id").status_code == 404

    def test_expired_artifact_returns_404(self, renderer):
        with TestClient(create_app(renderer=renderer, ttl=0.1)) as c:
            data = c.post("/prepare-pdf", json={"html": DOC}).json()
            time.sleep(0.4)

            response = c.get(data["downloadUrl"])

            assert response.status_code == 404
            assert c.get("/health").json()["artifacts"] == 0
