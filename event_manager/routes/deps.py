"""Request-scoped dependencies shared by the routers."""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Request
from google.oauth2.credentials import Credentials
from sqlmodel import Session

from event_manager.core.config import settings
from event_manager.core.database import get_session
from event_manager.core.errors import NotFound, Unauthenticated
from event_manager.core.locks import EventLocks
from event_manager.google.identity import GoogleIdentityProvider
from event_manager.google.workspace import GoogleWorkspace
from event_manager.models import Organizer
from event_manager.services.attendees import AttendeeStore
from event_manager.services.events import EventStore
from event_manager.services.ledger import SheetLedger
from event_manager.services.organizers import OrganizerStore

logger = logging.getLogger(__name__)

WorkspaceFactory = Callable[[Credentials], GoogleWorkspace]


def get_identity_provider() -> GoogleIdentityProvider:
    return GoogleIdentityProvider(settings)


def get_workspace_factory() -> WorkspaceFactory:
    """How Google collaborators are built from credentials (overridden in tests)."""
    return GoogleWorkspace


def get_locks(request: Request) -> EventLocks:
    return request.app.state.locks


def current_organizer(request: Request, session: Session = Depends(get_session)) -> Organizer:
    """The signed-in organizer, from the session cookie."""
    organizer_id = request.session.get("organizer_id")
    if not organizer_id:
        raise Unauthenticated("Authentication required. Please sign in.")
    try:
        return OrganizerStore(session).get(UUID(organizer_id))
    except (ValueError, NotFound):
        logger.warning(f"Session refers to unknown organizer {organizer_id}")
        request.session.clear()
        raise Unauthenticated("Authentication required. Please sign in.")


@dataclass
class OrganizerContext:
    """Everything a request needs to act on behalf of the signed-in organizer."""

    session: Session
    organizer: Organizer
    workspace: GoogleWorkspace
    ledger: SheetLedger
    locks: EventLocks

    def events(self) -> EventStore:
        return EventStore(self.session, self.ledger, self.locks)

    def attendees(self) -> AttendeeStore:
        return AttendeeStore(self.session, self.ledger, self.locks)


def organizer_context(
    organizer: Organizer = Depends(current_organizer),
    session: Session = Depends(get_session),
    identity: GoogleIdentityProvider = Depends(get_identity_provider),
    workspace_for: WorkspaceFactory = Depends(get_workspace_factory),
    locks: EventLocks = Depends(get_locks),
) -> OrganizerContext:
    credentials = OrganizerStore(session).credentials_for(organizer, identity)
    workspace = workspace_for(credentials)
    return OrganizerContext(
        session=session,
        organizer=organizer,
        workspace=workspace,
        ledger=SheetLedger(workspace.sheets, organizer.sheet_id),
        locks=locks,
    )
