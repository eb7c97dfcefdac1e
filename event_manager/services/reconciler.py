"""Match inbound form responses to attendees and record their answers.

A response names its event either directly (``eventId`` on the webhook URL
or in the payload) or only through the form it came from. In the second case
every organizer's events are scanned for a matching form id, then for a
matching form URL path. The scan is linear in the number of events and
stops at the first match, so two events sharing a form resolve to whichever
comes first. New integrations should pass ``eventId``.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlparse
from uuid import UUID

from sqlmodel import Session

from event_manager.core.errors import (
    AttendeeNotFound,
    InvalidInput,
    NoMatchingEvent,
    NotFound,
    UnrecognizedStatus,
)
from event_manager.core.locks import EventLocks
from event_manager.intake.validation import normalize_email
from event_manager.models import AttendanceStatus, Attendee, Event, Organizer
from event_manager.schemas import FormResponsePayload
from event_manager.services.attendance_form import (
    EMAIL_QUESTION,
    NAME_QUESTION,
    STATUS_BY_ANSWER,
    STATUS_QUESTION,
)
from event_manager.services.attendees import AttendeeStore
from event_manager.services.events import EventStore
from event_manager.services.ledger import SheetLedger
from event_manager.services.organizers import OrganizerStore

logger = logging.getLogger(__name__)


def extract_answer(responses: list[dict[str, Any]] | None, question_title: str) -> str | None:
    """
    Find the answer to a question in a list of response entries.

    An entry matches when its ``question`` (or ``title``) equals
    ``question_title`` exactly. The answer is either a plain ``answer``
    string or the first value of ``textAnswers.answers``.
    """
    for entry in responses or []:
        if not isinstance(entry, dict):
            continue
        title = entry.get("question", entry.get("title"))
        if title != question_title:
            continue

        answer = entry.get("answer")
        if isinstance(answer, str):
            return answer

        text_answers = entry.get("textAnswers")
        if not isinstance(text_answers, dict):
            continue
        for item in text_answers.get("answers") or []:
            value = item.get("value") if isinstance(item, dict) else None
            if isinstance(value, str):
                return value
    return None


def map_status(value: str) -> AttendanceStatus:
    """Map an attendance choice label to a status. No fuzzy matching."""
    status = STATUS_BY_ANSWER.get(value)
    if status is None:
        raise UnrecognizedStatus(f"Invalid attendance status: {value}")
    return status


def _form_path(url: str | None) -> str | None:
    if not url:
        return None
    return urlparse(url).path or None


@dataclass
class ReconcileOutcome:
    event: Event
    attendee: Attendee


class FormResponseReconciler:
    """Applies form responses to attendee records.

    Args:
        session: Database session.
        ledger_for: Builds the spreadsheet ledger of an event's organizer,
            used to mirror the status update.
        locks: Per-event lock registry.
    """

    def __init__(
        self,
        session: Session,
        ledger_for: Callable[[Organizer], SheetLedger],
        locks: EventLocks | None = None,
    ):
        self.session = session
        self.ledger_for = ledger_for
        self.locks = locks or EventLocks()

    def resolve_event(
        self,
        event_id: str | None,
        form_id: str | None,
        form_url: str | None,
    ) -> Event:
        """Find the event a response belongs to."""
        events = EventStore(self.session)

        if event_id:
            try:
                return events.get(UUID(str(event_id)))
            except ValueError as e:
                raise NotFound(f"Event {event_id} not found") from e

        if not form_id and not form_url:
            raise InvalidInput("Missing required fields: eventId, formId or formUrl")

        wanted_path = _form_path(form_url)
        for organizer in OrganizerStore(self.session).list_all():
            candidates = events.list_by_organizer(organizer.id)
            match = None
            if form_id:
                match = next((e for e in candidates if e.form_id == form_id), None)
            if match is None and wanted_path:
                match = next(
                    (e for e in candidates if _form_path(e.form_url) == wanted_path), None
                )
            if match is not None:
                logger.debug(f"Form response matched event {match.id} of organizer {organizer.id}")
                return match

        raise NoMatchingEvent(f"Event with form {form_id or form_url} not found")

    def reconcile(self, payload: FormResponsePayload, event_id: str | None = None) -> ReconcileOutcome:
        """
        Record the attendance answer carried by ``payload``.

        ``event_id`` (from the webhook URL) takes precedence over the
        payload's own ``eventId``. The status is mapped before anything is
        looked up, so an unrecognized answer changes nothing. Responses from
        emails not registered for the event are rejected, not added.
        """
        email = payload.email or extract_answer(payload.responses, EMAIL_QUESTION)
        answer = payload.attendance_status or extract_answer(payload.responses, STATUS_QUESTION)
        name = payload.name or extract_answer(payload.responses, NAME_QUESTION)

        if not email or not answer:
            raise InvalidInput("Missing required fields: email or attendanceStatus")

        status = map_status(answer)
        normalized = normalize_email(email)

        event = self.resolve_event(event_id or payload.event_id, payload.form_id, payload.form_url)

        organizer = OrganizerStore(self.session).get(event.organizer_id)
        attendees = AttendeeStore(self.session, self.ledger_for(organizer), self.locks)
        attendee = attendees.find_by_email(event.id, normalized)
        if attendee is None:
            raise AttendeeNotFound(
                f"Attendee with email {normalized} not found for event {event.id}"
            )

        attendee = attendees.update_status(
            attendee.id, status, name=name, response_date=datetime.now(UTC)
        )
        logger.info(f"Updated attendance status for {normalized} to {status.value}")
        return ReconcileOutcome(event=event, attendee=attendee)
