"""
Field-extraction boundary: rectified image in, structured record out.
"""

from docscan.extraction.client import (
    FieldExtractor,
    GeminiFieldExtractor,
    build_prompt,
    encode_image_payload,
    locale_language,
    parse_document_record,
)
from docscan.extraction.types import DocumentEvent, DocumentRecord

__all__ = [
    "FieldExtractor",
    "GeminiFieldExtractor",
    "DocumentRecord",
    "DocumentEvent",
    "build_prompt",
    "encode_image_payload",
    "locale_language",
    "parse_document_record",
]
