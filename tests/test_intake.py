"""Tests for email validation, extraction and workbook parsing."""

from io import BytesIO

import pytest
from openpyxl import Workbook

from event_manager.core.errors import EmptyOrUnreadable, InvalidInput, UpstreamFailure
from event_manager.google.sheets import parse_spreadsheet_id
from event_manager.intake.extractor import extract_emails
from event_manager.intake.sources import emails_from_sheet, emails_from_workbook
from event_manager.intake.validation import is_valid_email, normalize_email
from event_manager.intake.workbook import parse_workbook


def workbook_bytes(*sheets: list[list]) -> bytes:
    """Build an .xlsx file in memory, one worksheet per list of rows."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for index, rows in enumerate(sheets):
        worksheet = workbook.create_sheet(f"Sheet{index + 1}")
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestEmailValidation:
    """Tests for the email acceptance rule."""

    @pytest.mark.parametrize(
        "candidate",
        ["a@b.co", "first.last@example.com", "user+tag@sub.example.org", "A@B.CO"],
    )
    def test_accepts_addresses(self, candidate: str):
        assert is_valid_email(candidate)

    @pytest.mark.parametrize(
        "candidate",
        ["", "plain", "no-at.example.com", "a@b", "a@@b.co", "a b@c.co", " a@b.co", "a@b.co ", "a@b.c\n"],
    )
    def test_rejects_non_addresses(self, candidate: str):
        assert not is_valid_email(candidate)

    def test_rejects_non_strings(self):
        assert not is_valid_email(None)
        assert not is_valid_email(42)

    def test_normalize_trims_and_lowercases(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


class TestExtractEmails:
    """Tests for scanning rows for email-looking cells."""

    def test_scans_every_cell(self):
        rows = [
            ["Name", "Email", "Note"],
            ["Alice", "alice@example.com", None],
            [None, "Bob Smith", "BOB@Example.com"],
        ]
        assert extract_emails(rows) == {"alice@example.com", "bob@example.com"}

    def test_deduplicates_case_insensitively(self):
        rows = [["alice@example.com"], ["ALICE@example.com "], [" Alice@Example.com"]]
        assert extract_emails(rows) == {"alice@example.com"}

    def test_ignores_non_text_cells(self):
        rows = [[1, 2.5, True, None], ["x@y.io"]]
        assert extract_emails(rows) == {"x@y.io"}

    def test_empty_rows(self):
        assert extract_emails([[], None, [None]]) == set()

    def test_stray_email_text_is_admitted(self):
        """Header detection is not attempted; any email-shaped cell counts."""
        rows = [["contact", "help@service.io"]]
        assert extract_emails(rows) == {"help@service.io"}


class TestParseWorkbook:
    """Tests for reading uploaded workbooks."""

    def test_reads_first_sheet_only(self):
        data = workbook_bytes(
            [["Email"], ["a@x.com"]],
            [["b@x.com"]],
        )
        rows = parse_workbook(data)
        assert rows == [["Email"], ["a@x.com"]]

    def test_skips_blank_rows(self):
        data = workbook_bytes([["a@x.com"], [None], ["b@x.com"]])
        assert parse_workbook(data) == [["a@x.com"], ["b@x.com"]]

    def test_empty_bytes(self):
        with pytest.raises(EmptyOrUnreadable):
            parse_workbook(b"")

    def test_not_a_workbook(self):
        with pytest.raises(EmptyOrUnreadable):
            parse_workbook(b"this is not a spreadsheet")

    def test_empty_first_sheet(self):
        with pytest.raises(EmptyOrUnreadable):
            parse_workbook(workbook_bytes([]))

    def test_unreadable_is_invalid_input(self):
        """Unreadable uploads surface as invalid input (400)."""
        with pytest.raises(InvalidInput):
            parse_workbook(b"garbage")

    def test_emails_from_workbook(self):
        data = workbook_bytes(
            [["Name", "Email"], ["Alice", "Alice@Example.com"], ["Bob", "bob@"], ["Eve", "eve@x.org"]]
        )
        assert emails_from_workbook(data) == {"alice@example.com", "eve@x.org"}


class TestSheetSource:
    """Tests for reading attendee emails from an external Google Sheet."""

    URL = "https://docs.google.com/spreadsheets/d/abc123_-XYZ/edit#gid=0"

    def test_parse_spreadsheet_id(self):
        assert parse_spreadsheet_id(self.URL) == "abc123_-XYZ"
        assert parse_spreadsheet_id("abc123") == "abc123"
        assert parse_spreadsheet_id("https://example.com/not/a/sheet") is None
        assert parse_spreadsheet_id("") is None

    def test_reads_emails(self, sheets):
        sheets.shared["abc123_-XYZ"] = [["Email"], ["a@x.com", "B@x.com"], []]
        assert emails_from_sheet(sheets, self.URL, "A:Z") == {"a@x.com", "b@x.com"}

    def test_invalid_url(self, sheets):
        with pytest.raises(InvalidInput, match="Invalid Google Sheets URL"):
            emails_from_sheet(sheets, "https://example.com/not/a/sheet", "A:Z")

    @pytest.mark.parametrize("status, text", [(404, "not found"), (403, "Access denied")])
    def test_missing_or_private_sheet(self, sheets, status: int, text: str):
        sheets.read_failures["abc123_-XYZ"] = UpstreamFailure("boom", upstream_status=status)
        with pytest.raises(InvalidInput, match=text):
            emails_from_sheet(sheets, self.URL, "A:Z")

    def test_other_failures_propagate(self, sheets):
        sheets.read_failures["abc123_-XYZ"] = UpstreamFailure("boom", upstream_status=500)
        with pytest.raises(UpstreamFailure):
            emails_from_sheet(sheets, self.URL, "A:Z")
