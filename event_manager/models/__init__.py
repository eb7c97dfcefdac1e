from event_manager.models.attendee import AttendanceStatus, Attendee
from event_manager.models.event import Event
from event_manager.models.organizer import Organizer

__all__ = ["Organizer", "Event", "Attendee", "AttendanceStatus"]
