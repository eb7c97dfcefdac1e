"""Mirror of events and attendees in the organizer's spreadsheet.

Each organizer owns one spreadsheet with an ``Events`` tab and an
``Attendees`` tab. Rows are keyed by the record id in column A. Stores call
the ledger before committing, so a failed write aborts the local change.
"""
import logging
from datetime import datetime

from event_manager.core.errors import UpstreamFailure
from event_manager.models import Attendee, Event

logger = logging.getLogger(__name__)

EVENTS_TAB = "Events"
ATTENDEES_TAB = "Attendees"

EVENT_COLUMNS = [
    "Event ID",
    "Name",
    "Location",
    "Description",
    "Instructor",
    "Date",
    "Form ID",
    "Form URL",
    "Created At",
]

ATTENDEE_COLUMNS = [
    "Attendee ID",
    "Event ID",
    "Email",
    "Name",
    "Status",
    "Response Date",
    "Created At",
]


def _timestamp(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def event_row(event: Event) -> list[str]:
    return [
        str(event.id),
        event.name,
        event.location,
        event.description,
        event.instructor,
        _timestamp(event.date),
        event.form_id or "",
        event.form_url or "",
        _timestamp(event.created_at),
    ]


def attendee_row(attendee: Attendee) -> list[str]:
    return [
        str(attendee.id),
        str(attendee.event_id),
        attendee.email,
        attendee.name or "",
        attendee.attendance_status.value,
        _timestamp(attendee.response_date),
        _timestamp(attendee.created_at),
    ]


class SheetLedger:
    """Writes Event and Attendee rows to one organizer's spreadsheet."""

    def __init__(self, sheets, spreadsheet_id: str):
        self.sheets = sheets
        self.spreadsheet_id = spreadsheet_id

    @staticmethod
    def create_workbook(sheets, organizer_name: str) -> str:
        """Create an organizer's spreadsheet and return its id."""
        return sheets.create_workbook(
            f"행사 관리 시스템 - {organizer_name}",
            {EVENTS_TAB: EVENT_COLUMNS, ATTENDEES_TAB: ATTENDEE_COLUMNS},
        )

    def record_event(self, event: Event) -> None:
        self.sheets.append_rows(self.spreadsheet_id, EVENTS_TAB, [event_row(event)])
        logger.debug(f"Stored event {event.id} in sheet {self.spreadsheet_id}")

    def update_event(self, event: Event) -> None:
        row = self._find_row(EVENTS_TAB, event.id)
        self.sheets.update_range(
            self.spreadsheet_id, f"{EVENTS_TAB}!A{row}:I{row}", [event_row(event)]
        )
        logger.debug(f"Updated event {event.id} at row {row}")

    def record_attendee(self, attendee: Attendee) -> None:
        self.sheets.append_rows(self.spreadsheet_id, ATTENDEES_TAB, [attendee_row(attendee)])
        logger.debug(f"Stored attendee {attendee.id} in sheet {self.spreadsheet_id}")

    def update_attendee(self, attendee: Attendee) -> None:
        """Rewrite the name, status and response date columns (D:F)."""
        row = self._find_row(ATTENDEES_TAB, attendee.id)
        self.sheets.update_range(
            self.spreadsheet_id,
            f"{ATTENDEES_TAB}!D{row}:F{row}",
            [attendee_row(attendee)[3:6]],
        )
        logger.debug(f"Updated attendee {attendee.id} at row {row}")

    def _find_row(self, tab: str, record_id) -> int:
        """Return the 1-based sheet row whose column A holds ``record_id``."""
        ids = self.sheets.read_range(self.spreadsheet_id, f"{tab}!A:A")
        wanted = str(record_id)
        # Row 1 is the header
        for index, row in enumerate(ids[1:], start=2):
            if row and row[0] == wanted:
                return index
        raise UpstreamFailure(f"{tab} row for {wanted} not found in sheet {self.spreadsheet_id}")


def commit_mirrored(session, record, write) -> None:
    """Flush ``record``, mirror it with ``write(record)``, then commit.

    The local change is rolled back if the mirror write raises, so the
    database never holds a record the spreadsheet does not.
    """
    session.add(record)
    try:
        session.flush()
        write(record)
    except Exception:
        session.rollback()
        raise
    session.commit()
    session.refresh(record)
