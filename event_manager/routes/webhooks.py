"""Inbound form response webhook."""
import logging

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from event_manager.core.database import get_session
from event_manager.core.locks import EventLocks
from event_manager.google.identity import GoogleIdentityProvider
from event_manager.models import Organizer
from event_manager.routes.deps import (
    WorkspaceFactory,
    get_identity_provider,
    get_locks,
    get_workspace_factory,
)
from event_manager.schemas import FormResponsePayload
from event_manager.services.ledger import SheetLedger
from event_manager.services.organizers import OrganizerStore
from event_manager.services.reconciler import FormResponseReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/form-response")
def form_response(
    payload: FormResponsePayload,
    event_id: str | None = Query(default=None, alias="eventId"),
    session: Session = Depends(get_session),
    identity: GoogleIdentityProvider = Depends(get_identity_provider),
    workspace_for: WorkspaceFactory = Depends(get_workspace_factory),
    locks: EventLocks = Depends(get_locks),
):
    """
    Record an attendance answer submitted through an event's form.

    The event is taken from ``eventId`` when given, otherwise located by the
    form id or form URL in the payload. Only registered attendees can be
    updated.
    """
    logger.debug(f"Form response received: {payload.model_dump(by_alias=True)}")
    organizers = OrganizerStore(session)

    def ledger_for(organizer: Organizer) -> SheetLedger:
        credentials = organizers.credentials_for(organizer, identity)
        return SheetLedger(workspace_for(credentials).sheets, organizer.sheet_id)

    outcome = FormResponseReconciler(session, ledger_for, locks).reconcile(payload, event_id)
    return {"message": "Attendance status updated", "attendee": outcome.attendee}
