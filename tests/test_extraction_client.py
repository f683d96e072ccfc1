"""Tests for the extraction proxy HTTP client."""

from __future__ import annotations

import base64

import pytest
import requests

from policy_portal.services.extraction_client import ExtractionClient, ExtractionError


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_extract_posts_base64_image_and_returns_fields() -> None:
    session = FakeSession(FakeResponse(200, {"customer_name": "Asha Roy", "premium": 490}))
    client = ExtractionClient("http://proxy/extract", timeout_seconds=5, session=session)

    result = client.extract(b"\x89PNG", "image/png")

    assert result == {"customer_name": "Asha Roy", "premium": 490}
    call = session.calls[0]
    assert call["url"] == "http://proxy/extract"
    assert call["timeout"] == 5
    assert call["json"] == {
        "imageB64": base64.b64encode(b"\x89PNG").decode("ascii"),
        "mimeType": "image/png",
    }


def test_error_body_message_is_surfaced() -> None:
    session = FakeSession(FakeResponse(500, {"error": "Failed to process image with the Gemini API."}))
    client = ExtractionClient("http://proxy/extract", session=session)

    with pytest.raises(ExtractionError, match="Failed to process image"):
        client.extract(b"data", "image/jpeg")


def test_status_fallback_message_without_error_body() -> None:
    session = FakeSession(FakeResponse(502, ValueError("no json")))
    client = ExtractionClient("http://proxy/extract", session=session)

    with pytest.raises(ExtractionError, match="Request failed with status 502"):
        client.extract(b"data", "image/jpeg")


def test_connection_failure_becomes_extraction_error() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))
    client = ExtractionClient("http://proxy/extract", session=session)

    with pytest.raises(ExtractionError, match="Could not reach"):
        client.extract(b"data", "image/jpeg")


def test_non_object_response_is_rejected() -> None:
    session = FakeSession(FakeResponse(200, ["not", "an", "object"]))
    client = ExtractionClient("http://proxy/extract", session=session)

    with pytest.raises(ExtractionError):
        client.extract(b"data", "image/jpeg")


def test_extract_file_guesses_mime_type(tmp_path) -> None:
    image = tmp_path / "form.png"
    image.write_bytes(b"png-bytes")
    session = FakeSession(FakeResponse(200, {"region": "East"}))
    client = ExtractionClient("http://proxy/extract", session=session)

    assert client.extract_file(image) == {"region": "East"}
    assert session.calls[0]["json"]["mimeType"] == "image/png"


def test_extract_file_rejects_non_image(tmp_path) -> None:
    document = tmp_path / "notes.txt"
    document.write_text("hello", encoding="utf-8")
    session = FakeSession(FakeResponse(200, {}))
    client = ExtractionClient("http://proxy/extract", session=session)

    with pytest.raises(ExtractionError, match="Not an image file"):
        client.extract_file(document)
    assert session.calls == []
