"""Event routes for creating, editing, copying and inviting."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from event_manager.core.errors import EmptyRecipientList
from event_manager.routes.deps import OrganizerContext, organizer_context
from event_manager.schemas import EventCreate, EventOverrides, EventUpdate
from event_manager.services.invitations import InvitationDispatcher, InvitationSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", status_code=201)
def create_event(data: EventCreate, ctx: OrganizerContext = Depends(organizer_context)):
    """Create an event and record it in the organizer's spreadsheet."""
    return ctx.events().create(ctx.organizer.id, data)


@router.get("")
def list_events(ctx: OrganizerContext = Depends(organizer_context)):
    return {"events": ctx.events().list_by_organizer(ctx.organizer.id)}


@router.get("/{event_id}")
def get_event(event_id: UUID, ctx: OrganizerContext = Depends(organizer_context)):
    return {"event": ctx.events().get_owned(event_id, ctx.organizer.id)}


@router.patch("/{event_id}")
def update_event(
    event_id: UUID,
    changes: EventUpdate,
    ctx: OrganizerContext = Depends(organizer_context),
):
    """Change the given fields of an event. Omitted fields keep their values."""
    events = ctx.events()
    events.get_owned(event_id, ctx.organizer.id)
    return {"event": events.update(event_id, changes)}


@router.post("/{event_id}/copy", status_code=201)
def copy_event(
    event_id: UUID,
    overrides: EventOverrides | None = None,
    ctx: OrganizerContext = Depends(organizer_context),
):
    """
    Create a new event from an existing one.

    Empty or missing override fields inherit the source's values. The copy
    has no attendees and no attendance form.
    """
    events = ctx.events()
    events.get_owned(event_id, ctx.organizer.id)
    return events.copy(event_id, overrides or EventOverrides())


@router.post("/{event_id}/send-invitations")
def send_invitations(event_id: UUID, ctx: OrganizerContext = Depends(organizer_context)):
    """
    Email every attendee a link to the event's attendance form.

    The form is created on first use and reused afterwards. Individual
    delivery failures are reported in ``results`` without failing the call.
    """
    events = ctx.events()
    event = events.get_owned(event_id, ctx.organizer.id)

    attendees = ctx.attendees().list(event_id)
    if not attendees:
        raise EmptyRecipientList("No attendees to invite. Register attendees first.")

    dispatcher = InvitationDispatcher(events, ctx.workspace.forms, ctx.workspace.mail)
    attempts = dispatcher.send(event, attendees, ctx.organizer.email)
    summary = InvitationSummary.from_attempts(attempts)

    return {
        "message": f"Sent {summary.sent} of {summary.total} invitations",
        "form_id": event.form_id,
        "form_url": event.form_url,
        "results": {
            "total": summary.total,
            "sent": summary.sent,
            "failed": summary.failed,
            "failures": [{"email": a.email, "error": a.error} for a in summary.failures],
        },
    }
