"""Bulk attendee sources: uploaded workbooks and shared Google Sheets."""
import logging

from event_manager.core.errors import InvalidInput, UpstreamFailure
from event_manager.google.sheets import parse_spreadsheet_id
from event_manager.intake.extractor import extract_emails
from event_manager.intake.workbook import parse_workbook

logger = logging.getLogger(__name__)


def emails_from_workbook(data: bytes) -> set[str]:
    """Candidate emails in the first worksheet of an uploaded .xlsx file."""
    return extract_emails(parse_workbook(data))


def emails_from_sheet(sheets, sheet_url: str, range_expr: str) -> set[str]:
    """
    Candidate emails in a Google Sheet the organizer can read.

    Raises:
        InvalidInput: The URL holds no spreadsheet id, or Google reports the
            sheet as missing or not shared with the organizer.
        UpstreamFailure: Any other Sheets API failure.
    """
    spreadsheet_id = parse_spreadsheet_id(sheet_url)
    if not spreadsheet_id:
        raise InvalidInput("Invalid Google Sheets URL")

    try:
        rows = sheets.read_range(spreadsheet_id, range_expr)
    except UpstreamFailure as e:
        if e.upstream_status == 404:
            raise InvalidInput(
                "Google Sheet not found. Please check the URL and ensure the sheet is shared."
            ) from e
        if e.upstream_status == 403:
            raise InvalidInput(
                "Access denied. Please ensure the sheet is shared with appropriate permissions."
            ) from e
        raise

    emails = extract_emails(rows)
    logger.info(f"Read {len(emails)} email addresses from sheet {spreadsheet_id}")
    return emails
