"""Pull candidate attendee emails out of tabular cell data."""
from collections.abc import Iterable, Sequence
from typing import Any

from event_manager.intake.validation import is_valid_email, normalize_email


def extract_emails(rows: Iterable[Sequence[Any]]) -> set[str]:
    """
    Collect every email-looking cell from spreadsheet rows.

    Works the same for an uploaded workbook and for rows read from an
    external Google Sheet. Every cell of every row is scanned, without header
    detection, since attendee lists put addresses in arbitrary columns.
    Only text cells are considered; each is trimmed, validated and admitted
    lower-cased, so the result holds no duplicates.

    Stray text that happens to look like an email is admitted too.
    """
    emails = set()
    for row in rows:
        if not row:
            continue
        for cell in row:
            if not isinstance(cell, str):
                continue
            trimmed = cell.strip()
            if is_valid_email(trimmed):
                emails.add(normalize_email(trimmed))
    return emails
