"""Attendee model for tracking event invitees.

This module defines the Attendee model which represents a person registered
for an event, identified by their normalized email within that event.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from event_manager.models.event import Event


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    ATTENDING = "attending"
    NOT_ATTENDING = "not_attending"
    MAYBE = "maybe"


class Attendee(SQLModel, table=True):
    """A person invited to an event.

    Attendees are registered manually, from an uploaded workbook or from an
    external Google Sheet. They always start as ``pending`` and only change
    through an explicit status update, either from the organizer or from a
    form response.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the parent Event.
        email: Trimmed, lower-cased email. Unique within an event.
        name: Name given in the attendance form, if any.
        attendance_status: One of pending, attending, not_attending, maybe.
        response_date: When the attendee last answered.
        created_at: When the attendee was registered.
        updated_at: When the attendee was last modified.
        event: Reference to the parent Event object.
    """
    __table_args__ = (UniqueConstraint("event_id", "email", name="uq_attendee_event_email"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    email: str = Field(index=True)
    name: str | None = None
    attendance_status: AttendanceStatus = Field(default=AttendanceStatus.PENDING)
    response_date: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="attendees")
