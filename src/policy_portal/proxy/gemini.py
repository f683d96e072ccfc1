"""Gemini-backed extraction of policy fields from document images."""

from __future__ import annotations

import json
import logging
from typing import Any

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

EXTRACTION_PROMPT = (
    "Analyze the document image and extract customer and policy information. "
    "Use YYYY-MM-DD format for dates."
)

_DATE = {"type": "STRING", "description": "Date in YYYY-MM-DD format"}
_GENDER = {"type": "STRING", "description": 'Should be "Male", "Female", or "Other"'}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "partner_name": {"type": "STRING"},
        "product_name": {"type": "STRING"},
        "premium": {"type": "NUMBER"},
        "branch_name": {"type": "STRING"},
        "branch_code": {"type": "STRING"},
        "region": {"type": "STRING"},
        "customer_name": {"type": "STRING"},
        "gender": _GENDER,
        "date_of_birth": _DATE,
        "mobile_number": {"type": "STRING"},
        "customer_id": {"type": "STRING"},
        "enrolment_date": _DATE,
        "savings_account_no": {"type": "STRING"},
        "csb_code": {"type": "STRING"},
        "d2c_code": {"type": "STRING"},
        "nominee_name": {"type": "STRING"},
        "nominee_dob": _DATE,
        "nominee_relationship": {"type": "STRING"},
        "nominee_mobile_number": {"type": "STRING"},
        "nominee_gender": _GENDER,
    },
}


class GeminiExtractor:
    """Sends one image plus the extraction prompt to a Gemini model."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        logger.info("GeminiExtractor initialized with model: %s", model_name)

    def extract(self, image_bytes: bytes, mime_type: str) -> dict[str, Any]:
        generation_config = GenerationConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )
        response = self.model.generate_content(
            [{"mime_type": mime_type, "data": image_bytes}, EXTRACTION_PROMPT],
            generation_config=generation_config,
        )
        data = json.loads(response.text)
        if not isinstance(data, dict):
            raise ValueError("Model response is not a JSON object.")
        return data
