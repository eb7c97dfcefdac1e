"""Attendee registry: intake, listing and status updates."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from event_manager.core.errors import (
    DuplicateAttendee,
    EventManagerError,
    InvalidEmail,
    NotFound,
)
from event_manager.core.locks import EventLocks
from event_manager.intake.validation import is_valid_email, normalize_email
from event_manager.models import AttendanceStatus, Attendee, Event
from event_manager.services.ledger import SheetLedger, commit_mirrored

logger = logging.getLogger(__name__)


@dataclass
class BulkAddResult:
    """Outcome of a bulk intake.

    Attributes:
        added: Attendees created by this call.
        skipped: Emails already registered for the event.
        errors: (email, reason) pairs for every other failure.
    """
    added: list[Attendee] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)


class AttendeeStore:
    """Registry of attendees per event.

    At most one attendee exists per (event, normalized email). The check
    runs under the event's lock and the database unique constraint backs it.
    """

    def __init__(
        self,
        session: Session,
        ledger: SheetLedger | None = None,
        locks: EventLocks | None = None,
    ):
        self.session = session
        self.ledger = ledger
        self.locks = locks or EventLocks()

    def _require_ledger(self) -> SheetLedger:
        if self.ledger is None:
            raise RuntimeError("AttendeeStore was created without a ledger; it is read-only")
        return self.ledger

    def add(self, event_id: UUID, email: str) -> Attendee:
        """
        Register one email for an event.

        The attendee starts as pending. The row is appended to the
        organizer's spreadsheet before the insert commits; if that fails the
        insert is rolled back and UpstreamFailure propagates.

        Raises:
            InvalidEmail: ``email`` does not look like an address.
            DuplicateAttendee: The email is already registered for the event.
            NotFound: The event does not exist.
        """
        normalized = normalize_email(email or "")
        if not is_valid_email(normalized):
            raise InvalidEmail("Invalid email format")

        ledger = self._require_ledger()
        with self.locks.hold(event_id):
            if self.session.get(Event, event_id) is None:
                raise NotFound(f"Event {event_id} not found")
            if self.find_by_email(event_id, normalized):
                raise DuplicateAttendee("Attendee already registered for this event")

            attendee = Attendee(event_id=event_id, email=normalized)
            try:
                commit_mirrored(self.session, attendee, ledger.record_attendee)
            except IntegrityError as e:
                raise DuplicateAttendee("Attendee already registered for this event") from e

        logger.info(f"Added attendee {attendee.id} to event {event_id}")
        return attendee

    def bulk_add(self, event_id: UUID, emails: Iterable[str]) -> BulkAddResult:
        """
        Register many emails, one at a time.

        Never stops early: duplicates are skipped, any other failure is
        recorded with its reason and the next email is tried.
        """
        result = BulkAddResult()
        for email in sorted(emails):
            try:
                result.added.append(self.add(event_id, email))
            except DuplicateAttendee:
                logger.debug(f"Skipping duplicate attendee: {email}")
                result.skipped.append(email)
            except EventManagerError as e:
                result.errors.append((email, e.message))

        # Later commits expire the attendees added before them
        for attendee in result.added:
            self.session.refresh(attendee)

        logger.info(
            f"Bulk intake for event {event_id}: {len(result.added)} added, "
            f"{len(result.skipped)} skipped, {len(result.errors)} failed"
        )
        if result.errors:
            logger.warning(f"Failed to add {len(result.errors)} attendees: {result.errors}")
        return result

    def list(self, event_id: UUID) -> list[Attendee]:
        """Attendees of an event, oldest registration first."""
        statement = (
            select(Attendee)
            .where(Attendee.event_id == event_id)
            .order_by(Attendee.created_at)
        )
        return list(self.session.exec(statement).all())

    def get(self, attendee_id: UUID) -> Attendee:
        attendee = self.session.get(Attendee, attendee_id)
        if not attendee:
            raise NotFound(f"Attendee {attendee_id} not found")
        return attendee

    def find_by_email(self, event_id: UUID, email: str) -> Attendee | None:
        statement = (
            select(Attendee)
            .where(Attendee.event_id == event_id)
            .where(Attendee.email == normalize_email(email))
        )
        return self.session.exec(statement).first()

    def update_status(
        self,
        attendee_id: UUID,
        status: AttendanceStatus,
        name: str | None = None,
        response_date: datetime | None = None,
    ) -> Attendee:
        """
        Set an attendee's attendance status.

        A given ``name`` replaces the stored one. ``response_date`` defaults
        to now. The spreadsheet row is updated before the change commits.
        """
        ledger = self._require_ledger()
        attendee = self.get(attendee_id)
        with self.locks.hold(attendee.event_id):
            now = datetime.now(UTC)
            attendee.attendance_status = status
            if name and name.strip():
                attendee.name = name.strip()
            attendee.response_date = response_date or now
            attendee.updated_at = now
            commit_mirrored(self.session, attendee, ledger.update_attendee)

        logger.info(f"Updated attendance status for attendee {attendee_id} to {status.value}")
        return attendee
