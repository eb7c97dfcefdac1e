"""Event registry for organizers."""
import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlmodel import Session, select

from event_manager.core.errors import Forbidden, NotFound
from event_manager.core.locks import EventLocks
from event_manager.models import Event
from event_manager.models.event import DESCRIPTIVE_FIELDS
from event_manager.schemas import EventCreate, EventOverrides, EventUpdate
from event_manager.services.ledger import SheetLedger, commit_mirrored

logger = logging.getLogger(__name__)


def _present(value):
    """Treat blank override strings as missing."""
    return value.strip() if isinstance(value, str) else value


class EventStore:
    """Create, read and modify events.

    Reads only need a session. Writes are mirrored to the owning organizer's
    spreadsheet through ``ledger`` and serialized per event through
    ``locks``.
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
            raise RuntimeError("EventStore was created without a ledger; it is read-only")
        return self.ledger

    def create(self, organizer_id: UUID, data: EventCreate) -> Event:
        ledger = self._require_ledger()
        event = Event(organizer_id=organizer_id, **data.model_dump())
        commit_mirrored(self.session, event, ledger.record_event)
        logger.info(f"Created event {event.id} for organizer {organizer_id}")
        return event

    def get(self, event_id: UUID) -> Event:
        event = self.session.get(Event, event_id)
        if not event:
            raise NotFound(f"Event {event_id} not found")
        return event

    def get_owned(self, event_id: UUID, organizer_id: UUID) -> Event:
        """Fetch an event and check that ``organizer_id`` owns it."""
        event = self.get(event_id)
        if event.organizer_id != organizer_id:
            raise Forbidden("You do not have access to this event")
        return event

    def list_by_organizer(self, organizer_id: UUID) -> list[Event]:
        """All events of an organizer, most recent date first."""
        statement = (
            select(Event)
            .where(Event.organizer_id == organizer_id)
            .order_by(Event.date.desc())
        )
        return list(self.session.exec(statement).all())

    def update(self, event_id: UUID, changes: EventUpdate) -> Event:
        """Apply the fields present in ``changes`` to an event."""
        ledger = self._require_ledger()
        with self.locks.hold(event_id):
            event = self.get(event_id)
            for field_name, value in changes.model_dump(exclude_none=True).items():
                setattr(event, field_name, value)
            event.updated_at = datetime.now(UTC)
            commit_mirrored(self.session, event, ledger.update_event)
        logger.info(f"Updated event {event_id}")
        return event

    def copy(self, source_id: UUID, overrides: EventOverrides) -> Event:
        """
        Create a new event from an existing one.

        Each descriptive field (date included) takes the override when it is
        present and not blank, otherwise the source's value. The copy belongs
        to the same organizer and has no form attached.
        """
        with self.locks.hold(source_id):
            source = self.get(source_id)
            merged = {
                field_name: _present(getattr(overrides, field_name)) or getattr(source, field_name)
                for field_name in DESCRIPTIVE_FIELDS
            }
            copied = self.create(source.organizer_id, EventCreate(**merged))
        logger.info(f"Copied event {source_id} to new event {copied.id}")
        return copied

    def attach_form(self, event_id: UUID, form_id: str, form_url: str) -> Event:
        ledger = self._require_ledger()
        with self.locks.hold(event_id):
            event = self.get(event_id)
            event.form_id = form_id
            event.form_url = form_url
            event.updated_at = datetime.now(UTC)
            commit_mirrored(self.session, event, ledger.update_event)
        logger.info(f"Attached form {form_id} to event {event_id}")
        return event
