"""Field-extraction collaborator.

Sends a rectified document image to a vision-language service and parses
the structured description it returns. This is an opaque request /
response boundary: a single attempt is made, and retries, auth and rate
limiting are the service's concern.

Example:
    >>> from docscan.extraction import GeminiFieldExtractor
    >>> extractor = GeminiFieldExtractor()
    >>> record = extractor.extract(rectified, locale="ko")
    >>> print(record.summary, record.tags)
"""

import base64
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import cv2
import requests
from pydantic import ValidationError

from docscan.common.exceptions import ExtractionError
from docscan.config_loader import ExtractionConfig
from docscan.extraction.types import DocumentRecord
from docscan.rectification.types import RectifiedImage

logger = logging.getLogger(__name__)

LOCALE_LANGUAGES = {
    "ko": "Korean",
    "jp": "Japanese",
    "ja": "Japanese",
    "en": "English",
}

PROMPT_TEMPLATE = """
You are an advanced document analysis AI.
I am sending you an image of a document (e.g., passport, receipt, business card, notebook).
Your task is to extract its key information, understand the context, and respond in JSON format.

LANGUAGE RULES:
- Do NOT translate the text written in the document.
- The "summary" and "tags" must be written in {language}.
- The "title" and "time" values in the "events" array must be in the original language exactly as written in the image.

Follow this JSON structure exactly:
{{
  "summary": "A clear single-sentence title of what this document is (e.g. 'Republic of Korea Passport', 'Coffee Shop Receipt', 'Handwritten meeting notes')",
  "logDate": "YYYY-MM-DD main date of the document, or null",
  "events": [
    {{"time": "Field Name", "title": "Original value exactly as written", "date": "YYYY-MM-DD only if a specific real date is meant, otherwise null"}}
  ],
  "sentiment": "Neutral (or Positive/Negative if it's a mood diary)",
  "tags": ["Tag1", "Tag2"]
}}
"""


def locale_language(locale: str) -> str:
    """Map a locale hint ("ko", "jp", "en-US", ...) to a prompt language name."""
    key = (locale or "en").split("-")[0].split("_")[0].lower()
    return LOCALE_LANGUAGES.get(key, "English")


def build_prompt(locale: str) -> str:
    return PROMPT_TEMPLATE.format(language=locale_language(locale))


def encode_image_payload(image: RectifiedImage, quality: int = 90) -> str:
    """
    JPEG-encode a rectified image and return it as base64 text.

    Raises:
        ExtractionError: If the image cannot be encoded.
    """
    ok, buffer = cv2.imencode(".jpg", image.data, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ExtractionError("Failed to JPEG-encode rectified image")
    return base64.b64encode(buffer.tobytes()).decode("ascii")


def parse_document_record(text: Optional[str]) -> DocumentRecord:
    """
    Parse the service's JSON text into a DocumentRecord.

    Tolerates a Markdown code fence around the JSON.

    Raises:
        ExtractionError: If the text is empty, not JSON, or not an object.
    """
    if not text or not text.strip():
        raise ExtractionError("Empty response from extraction service")

    body = text.strip()
    if body.startswith("```"):
        body = body.strip("`")
        if body.lower().startswith("json"):
            body = body[4:]

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Extraction response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError(
            f"Extraction response must be a JSON object, got {type(data).__name__}"
        )

    try:
        return DocumentRecord.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Extraction response has unexpected structure: {e}") from e


class FieldExtractor(ABC):
    """Interface of the field-extraction collaborator."""

    @abstractmethod
    def extract(self, image: RectifiedImage, locale: str = "en") -> DocumentRecord:
        """
        Describe a rectified document image.

        Raises:
            ExtractionError: On any failure; no retry is attempted.
        """


class GeminiFieldExtractor(FieldExtractor):
    """Gemini generateContent REST client.

    Args:
        config: Model, endpoint, key variable and timeout settings.
        api_key: Explicit API key. If None, read from ``config.api_key_env``
            when ``extract`` is called.
        session: Optional requests.Session to reuse connections.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ExtractionConfig()
        self._api_key = api_key
        self._session = session

        logger.info(
            f"GeminiFieldExtractor initialized: model={self.config.model}, "
            f"timeout={self.config.timeout_s}s"
        )

    @property
    def api_key(self) -> str:
        key = self._api_key or os.environ.get(self.config.api_key_env)
        if not key:
            raise ExtractionError(
                f"{self.config.api_key_env} is not set in the environment variables."
            )
        return key

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_base.rstrip('/')}/models/{self.config.model}:generateContent"

    def build_request(self, image: RectifiedImage, locale: str) -> dict:
        """Request body with the prompt and the inline JPEG payload."""
        return {
            "contents": [
                {
                    "parts": [
                        {"text": build_prompt(locale)},
                        {
                            "inline_data": {
                                "mime_type": "image/jpeg",
                                "data": encode_image_payload(image, self.config.jpeg_quality),
                            }
                        },
                    ]
                }
            ],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    @staticmethod
    def response_text(payload: dict) -> Optional[str]:
        """Concatenate the text parts of the first candidate."""
        candidates = payload.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [part.get("text", "") for part in parts if isinstance(part, dict)]
        return "".join(texts) or None

    def extract(self, image: RectifiedImage, locale: str = "en") -> DocumentRecord:
        body = self.build_request(image, locale)
        post = self._session.post if self._session is not None else requests.post

        logger.info(
            f"Requesting field extraction ({image.width}x{image.height}, locale={locale})"
        )
        try:
            response = post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                timeout=self.config.timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Extraction request timed out after {self.config.timeout_s}s")
            raise ExtractionError("Extraction request timed out") from e
        except requests.exceptions.HTTPError as e:
            logger.error(f"Extraction service returned HTTP error: {e}")
            raise ExtractionError(f"Extraction service error: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Extraction request failed: {e}")
            raise ExtractionError(f"Extraction request failed: {e}") from e
        except ValueError as e:
            raise ExtractionError(f"Extraction service returned non-JSON body: {e}") from e

        record = parse_document_record(self.response_text(payload))
        logger.info(
            f"Extraction complete: '{record.summary}' "
            f"({len(record.events)} fields, tags={record.tags})"
        )
        return record
