"""HTTP proxy that keeps the Gemini API key on the server side."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Callable, Protocol

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from policy_portal.core.config import ProxyConfig, configure_logging, get_required_env, load_config

logger = logging.getLogger(__name__)

MISSING_KEY_ERROR = "API key not configured on the server."
MISSING_INPUT_ERROR = "Missing image data or mime type."
PROCESSING_ERROR = "Failed to process image with the Gemini API."


class Extractor(Protocol):
    def extract(self, image_bytes: bytes, mime_type: str) -> dict[str, Any]: ...


ExtractorFactory = Callable[[str, str], Extractor]


class ExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_b64: str | None = Field(default=None, alias="imageB64")
    mime_type: str | None = Field(default=None, alias="mimeType")


def _default_extractor_factory(api_key: str, model_name: str) -> Extractor:
    from policy_portal.proxy.gemini import GeminiExtractor

    return GeminiExtractor(api_key, model_name)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    config: ProxyConfig | None = None,
    extractor_factory: ExtractorFactory = _default_extractor_factory,
) -> FastAPI:
    """Build the proxy application."""
    proxy_config = config or ProxyConfig(
        host="127.0.0.1",
        port=8787,
        api_key_env="GEMINI_API_KEY",
        model="gemini-2.5-flash",
    )
    app = FastAPI(
        title="Policy Portal Extraction Proxy",
        description="Extracts policy fields from document images",
        version="1.0.0",
    )

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    @app.post("/extract")
    async def extract(request: Request):
        # Key check precedes body parsing.
        try:
            api_key = get_required_env(proxy_config.api_key_env)
        except RuntimeError as error:
            logger.error("%s", error)
            return _error(500, MISSING_KEY_ERROR)

        raw_body = await request.body()
        try:
            body = json.loads(raw_body) if raw_body.strip() else {}
        except ValueError as error:
            logger.warning("Request body is not valid JSON: %s", error)
            return _error(500, PROCESSING_ERROR)

        try:
            payload = ExtractRequest.model_validate(body if isinstance(body, dict) else {})
        except ValidationError as error:
            logger.warning("Rejected extraction request: %s", error.errors())
            return _error(400, MISSING_INPUT_ERROR)

        if not payload.image_b64 or not payload.mime_type:
            return _error(400, MISSING_INPUT_ERROR)

        try:
            image_bytes = base64.b64decode(payload.image_b64, validate=True)
        except (binascii.Error, ValueError):
            return _error(400, MISSING_INPUT_ERROR)

        try:
            extractor = extractor_factory(api_key, proxy_config.model)
            data = await run_in_threadpool(extractor.extract, image_bytes, payload.mime_type)
        except Exception as error:  # pylint: disable=broad-except
            # Service boundary: any model failure becomes one generic message.
            logger.error("Extraction failed: %s", error, exc_info=True)
            return _error(500, PROCESSING_ERROR)

        logger.info("Extracted %d field(s) from a %s image", len(data), payload.mime_type)
        return JSONResponse(status_code=200, content=data)

    return app


def main() -> None:
    """Serve the proxy with uvicorn using the portal configuration."""
    import uvicorn

    config = load_config()
    configure_logging(config.logging.level)
    uvicorn.run(create_app(config.proxy), host=config.proxy.host, port=config.proxy.port)


if __name__ == "__main__":
    main()
