"""HTTP client for the document extraction proxy."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a document image could not be turned into policy fields."""


class ExtractionClient:
    """Posts an image to the proxy and returns the extracted partial record."""

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float = 60,
        session: requests.Session | None = None,
    ):
        self._endpoint = endpoint
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def extract(self, image_bytes: bytes, mime_type: str) -> dict[str, Any]:
        payload = {
            "imageB64": base64.b64encode(image_bytes).decode("ascii"),
            "mimeType": mime_type,
        }
        try:
            response = self._session.post(self._endpoint, json=payload, timeout=self._timeout)
        except requests.RequestException as error:
            logger.error("Extraction request to %s failed: %s", self._endpoint, error)
            raise ExtractionError(f"Could not reach the extraction service: {error}") from error

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code != 200:
            message = None
            if isinstance(body, dict):
                message = body.get("error")
            message = message or f"Request failed with status {response.status_code}"
            logger.error("Extraction failed with status %s: %s", response.status_code, message)
            raise ExtractionError(str(message))

        if not isinstance(body, dict):
            raise ExtractionError("The extraction service returned an unreadable response.")
        return body

    def extract_file(self, file_path: str | Path) -> dict[str, Any]:
        """Read an image file and extract fields from it."""
        path = Path(file_path)
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith("image/"):
            raise ExtractionError(f"Not an image file: {path.name}")
        try:
            image_bytes = path.read_bytes()
        except OSError as error:
            raise ExtractionError(f"Could not read {path.name}: {error}") from error
        return self.extract(image_bytes, mime_type)
