"""Organizer accounts and their Google credentials."""
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID

from google.oauth2.credentials import Credentials
from sqlmodel import Session, select

from event_manager.core.errors import NotFound
from event_manager.google.client import build_credentials
from event_manager.google.identity import VerifiedIdentity
from event_manager.models import Organizer
from event_manager.services.ledger import SheetLedger

logger = logging.getLogger(__name__)


class OrganizerStore:
    """Registry of organizers keyed by their Google subject id."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, organizer_id: UUID) -> Organizer:
        organizer = self.session.get(Organizer, organizer_id)
        if not organizer:
            raise NotFound(f"Organizer {organizer_id} not found")
        return organizer

    def get_by_google_id(self, google_id: str) -> Organizer | None:
        statement = select(Organizer).where(Organizer.google_id == google_id)
        return self.session.exec(statement).first()

    def list_all(self) -> list[Organizer]:
        statement = select(Organizer).order_by(Organizer.created_at)
        return list(self.session.exec(statement).all())

    def sign_in(
        self,
        identity: VerifiedIdentity,
        workspace_for: Callable[[Credentials], object],
    ) -> Organizer:
        """
        Create or refresh the organizer for a verified Google identity.

        A first sign-in creates the organizer's spreadsheet; nothing is
        stored if that fails. Later sign-ins only replace the tokens, keeping
        the stored refresh token when Google does not send a new one.
        """
        now = datetime.now(UTC)
        organizer = self.get_by_google_id(identity.subject)

        if organizer is None:
            credentials = build_credentials(
                identity.access_token, identity.refresh_token, identity.expiry
            )
            sheet_id = SheetLedger.create_workbook(workspace_for(credentials).sheets, identity.name)
            organizer = Organizer(
                google_id=identity.subject,
                name=identity.name,
                email=identity.email,
                sheet_id=sheet_id,
            )
            logger.info(f"Created organizer for {identity.subject} with sheet {sheet_id}")
        else:
            organizer.name = identity.name or organizer.name
            organizer.email = identity.email or organizer.email

        organizer.access_token = identity.access_token
        organizer.refresh_token = identity.refresh_token or organizer.refresh_token
        organizer.token_expiry = identity.expiry
        organizer.updated_at = now

        self.session.add(organizer)
        self.session.commit()
        self.session.refresh(organizer)
        return organizer

    def credentials_for(self, organizer: Organizer, identity_provider) -> Credentials:
        """
        Build credentials from the organizer's stored tokens.

        An expired or missing access token is refreshed through
        ``identity_provider`` and the new token saved on the organizer.
        """
        credentials = build_credentials(
            organizer.access_token, organizer.refresh_token, organizer.token_expiry
        )
        if credentials.valid or not organizer.refresh_token:
            return credentials

        identity_provider.refresh(credentials)
        organizer.access_token = credentials.token
        organizer.token_expiry = credentials.expiry
        organizer.updated_at = datetime.now(UTC)
        self.session.add(organizer)
        self.session.commit()
        logger.info(f"Stored refreshed access token for organizer {organizer.id}")
        return credentials
