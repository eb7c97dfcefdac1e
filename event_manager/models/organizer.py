"""Organizer model for authenticated event owners.

This module defines the Organizer model which represents a person who signed
in with Google. The stored OAuth tokens let the service act on the
organizer's behalf outside of their own requests, e.g. when a form response
webhook needs to update the organizer's spreadsheet.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from event_manager.models.event import Event


class Organizer(SQLModel, table=True):
    """An authenticated user who owns events.

    Created on the first successful Google sign-in, together with the
    spreadsheet that mirrors the organizer's events and attendees. Tokens
    are replaced on every sign-in and whenever an expired access token is
    refreshed. Organizers are never deleted.

    Attributes:
        id: Unique identifier (UUID).
        google_id: Subject of the verified Google ID token (unique).
        name: Display name from the Google profile.
        email: Google account email, used as the invitation sender.
        sheet_id: Spreadsheet holding the Events and Attendees tabs.
        access_token: Short-lived token for Google API requests.
        refresh_token: Long-lived token used to obtain new access tokens.
        token_expiry: When the access token expires, if known.
        events: Events owned by this organizer.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    google_id: str = Field(index=True, unique=True)
    name: str
    email: str
    sheet_id: str
    access_token: str | None = None
    refresh_token: str | None = None
    token_expiry: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    events: list["Event"] = Relationship(back_populates="organizer")
