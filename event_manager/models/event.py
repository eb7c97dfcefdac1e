"""Event model for organizer-owned events.

This module defines the Event model which represents a single event an
organizer invites attendees to. Once invitations are sent the event carries
the Google Form used to collect attendance responses.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from event_manager.models.attendee import Attendee
    from event_manager.models.organizer import Organizer

# Fields an organizer edits directly and that a copy inherits
DESCRIPTIVE_FIELDS = ("name", "location", "description", "instructor", "date")


class Event(SQLModel, table=True):
    """An event owned by exactly one organizer.

    Attributes:
        id: Unique identifier (UUID).
        organizer_id: Owner of this event. Every access checks it against
            the requesting organizer.
        name: Event title.
        location: Where the event takes place.
        description: Free-text description shown in invitations.
        instructor: Speaker or instructor name.
        date: When the event takes place.
        form_id: Google Form collecting attendance responses, once created.
        form_url: Public responder URL of that form.
        created_at: When the event was created.
        updated_at: When the event was last modified.
        attendees: People registered for this event.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organizer_id: UUID = Field(foreign_key="organizer.id", index=True)
    name: str
    location: str
    description: str
    instructor: str
    date: datetime
    form_id: str | None = Field(default=None, index=True)
    form_url: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    organizer: Optional["Organizer"] = Relationship(back_populates="events")
    attendees: list["Attendee"] = Relationship(back_populates="event")

    @property
    def has_form(self) -> bool:
        return bool(self.form_id and self.form_url)
