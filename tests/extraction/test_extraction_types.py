"""Unit tests for extraction record models."""

import datetime

from docscan.extraction.types import DocumentEvent, DocumentRecord


class TestDocumentRecord:
    """Test DocumentRecord validation."""

    def test_alias_and_field_name(self):
        """Test that logDate and log_date both populate the field."""
        by_alias = DocumentRecord.model_validate({"summary": "A", "logDate": "2023-12-01"})
        by_name = DocumentRecord(summary="A", log_date=datetime.date(2023, 12, 1))

        assert by_alias == by_name
        assert by_alias.model_dump(by_alias=True)["logDate"] == datetime.date(2023, 12, 1)

    def test_single_tag_string(self):
        """Test that a bare tag string is wrapped in a list."""
        assert DocumentRecord(summary="A", tags="Receipt").tags == ["Receipt"]

    def test_placeholder(self):
        """Test the fallback record used on extraction failure."""
        record = DocumentRecord.placeholder("Extraction failed: timeout")

        assert record.summary == "Extraction failed: timeout"
        assert record.sentiment == "Unknown"
        assert record.tags == ["Error"]
        assert record.events == []
        assert record.is_placeholder


class TestDocumentEvent:
    """Test DocumentEvent validation."""

    def test_values_stringified(self):
        """Test that numeric values are kept as text."""
        event = DocumentEvent.model_validate({"time": "Total", "title": 4500})
        assert event.title == "4500"
        assert event.date is None

    def test_datetime_string_truncated_to_date(self):
        """Test that an ISO timestamp keeps its date part."""
        event = DocumentEvent(time="Issued", title="x", date="2021-06-30T10:00:00Z")
        assert event.date == datetime.date(2021, 6, 30)
