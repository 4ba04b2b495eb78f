"""Type definitions for the field-extraction boundary.

The extraction collaborator turns a rectified document image into a
structured description. These models validate its JSON response.
"""

import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_date(value: Any) -> Optional[datetime.date]:
    """Parse a YYYY-MM-DD value; anything unparsable becomes None."""
    if value is None or isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() in ("null", "none", "n/a"):
            return None
        try:
            return datetime.date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


class DocumentEvent(BaseModel):
    """One extracted field of the document.

    Attributes:
        time: Field name as written on the document (e.g. "Name", "Total")
        title: Field value exactly as written
        date: Strict calendar date, when the field denotes one
    """

    model_config = ConfigDict(populate_by_name=True)

    time: str = ""
    title: str = ""
    date: Optional[datetime.date] = None

    @field_validator("time", "title", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Optional[datetime.date]:
        return _coerce_date(v)


class DocumentRecord(BaseModel):
    """Structured document description returned by the extractor.

    Attributes:
        summary: Single-sentence title of the document
        log_date: Main date of the document, if any (``logDate`` in JSON)
        sentiment: Neutral / Positive / Negative (mood diaries), Unknown on error
        tags: Short keywords in the requested locale
        events: Extracted field/value pairs
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    log_date: Optional[datetime.date] = Field(default=None, alias="logDate")
    sentiment: str = "Neutral"
    tags: List[str] = Field(default_factory=list)
    events: List[DocumentEvent] = Field(default_factory=list)

    @field_validator("log_date", mode="before")
    @classmethod
    def _parse_log_date(cls, v: Any) -> Optional[datetime.date]:
        return _coerce_date(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(tag) for tag in v]

    @field_validator("events", mode="before")
    @classmethod
    def _normalize_events(cls, v: Any) -> Any:
        return [] if v is None else v

    @classmethod
    def placeholder(cls, message: str = "Extraction failed") -> "DocumentRecord":
        """Fallback record kept in the session when extraction fails."""
        return cls(summary=message, sentiment="Unknown", tags=["Error"], events=[])

    @property
    def is_placeholder(self) -> bool:
        return self.sentiment == "Unknown" and self.tags == ["Error"]
