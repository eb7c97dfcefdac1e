"""Invitation dispatch: attendance form creation and per-attendee emails."""
import logging
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from event_manager.core.errors import UpstreamFailure
from event_manager.models import Attendee, Event
from event_manager.services.attendance_form import (
    form_description,
    form_questions,
    form_title,
    format_korean_date,
    format_korean_time,
)
from event_manager.services.events import EventStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_invitation(event: Event, form_url: str) -> str:
    """Render the HTML invitation body for an event."""
    template = templates.get_template("invitation.html")
    return template.render(
        event=event,
        event_date=format_korean_date(event.date),
        event_time=format_korean_time(event.date),
        form_url=form_url,
    )


def invitation_subject(event: Event) -> str:
    return f"[{event.name}] 행사 초대"


@dataclass
class InvitationAttempt:
    email: str
    success: bool
    error: str | None = None


@dataclass
class InvitationSummary:
    """Aggregate counts over one dispatch."""

    total: int
    sent: int
    failed: int
    failures: list[InvitationAttempt] = field(default_factory=list)

    @classmethod
    def from_attempts(cls, attempts: list[InvitationAttempt]) -> "InvitationSummary":
        failures = [a for a in attempts if not a.success]
        return cls(
            total=len(attempts),
            sent=len(attempts) - len(failures),
            failed=len(failures),
            failures=failures,
        )


class InvitationDispatcher:
    """Sends an event's invitations through the organizer's Google account.

    Args:
        events: Store used to attach a newly created form to the event.
        forms: Form backend (``create_form``).
        mail: Mail backend (``send``).
    """

    def __init__(self, events: EventStore, forms, mail):
        self.events = events
        self.forms = forms
        self.mail = mail

    def ensure_form(self, event: Event) -> Event:
        """
        Return the event with an attendance form attached.

        An attached form is reused. Otherwise one form is created and stored
        on the event. The check is repeated under the event's lock so that
        concurrent dispatches create a single form.
        """
        if event.has_form:
            logger.info(f"Using existing form for event {event.id}: {event.form_id}")
            return event

        with self.events.locks.hold(event.id):
            self.events.session.refresh(event)
            if event.has_form:
                return event
            handle = self.forms.create_form(
                form_title(event), form_description(event), form_questions()
            )
            event = self.events.attach_form(event.id, handle.form_id, handle.url)

        logger.info(f"Created new form for event {event.id}: {event.form_id}")
        return event

    def send(self, event: Event, attendees: list[Attendee], sender: str) -> list[InvitationAttempt]:
        """
        Email every attendee a link to the event's attendance form.

        Each send is independent: a failure is recorded and the batch goes
        on. Nothing is retried, and a repeated call mails everyone again.
        Form creation failures propagate before any email is sent.
        """
        event = self.ensure_form(event)
        subject = invitation_subject(event)
        html = render_invitation(event, event.form_url)

        attempts = []
        for attendee in attendees:
            try:
                self.mail.send(sender, attendee.email, subject, html)
            except UpstreamFailure as e:
                logger.error(f"Failed to send invitation to {attendee.email}: {e.message}")
                attempts.append(InvitationAttempt(attendee.email, False, e.message))
                continue
            except Exception as e:
                logger.exception(f"Failed to send invitation to {attendee.email}")
                attempts.append(InvitationAttempt(attendee.email, False, str(e)))
                continue
            logger.info(f"Sent invitation to {attendee.email}")
            attempts.append(InvitationAttempt(attendee.email, True))

        summary = InvitationSummary.from_attempts(attempts)
        logger.info(
            f"Sent {summary.sent} invitations for event {event.id}, {summary.failed} failed"
        )
        return attempts
