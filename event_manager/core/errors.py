"""Typed failures raised by the stores and services.

Every failure carries a stable machine-checkable ``kind`` and the HTTP status
the API layer answers with. Routes never catch these; a single exception
handler in ``event_manager.main`` renders them as::

    {"error": "<kind>", "message": "<human readable message>"}
"""


class EventManagerError(Exception):
    """Base class for all domain failures."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(EventManagerError):
    """Malformed value or missing required field."""

    kind = "invalid_input"
    status_code = 400


class InvalidEmail(InvalidInput):
    pass


class EmptyOrUnreadable(InvalidInput):
    """Uploaded workbook could not be read or has no cells."""


class EmptyRecipientList(InvalidInput):
    kind = "empty_recipient_list"


class Unauthenticated(EventManagerError):
    kind = "unauthenticated"
    status_code = 401


class Forbidden(EventManagerError):
    """Requester does not own the event."""

    kind = "forbidden"
    status_code = 403


class NotFound(EventManagerError):
    kind = "not_found"
    status_code = 404


class NoMatchingEvent(NotFound):
    """No event's attached form matches an inbound form response."""

    kind = "no_matching_event"


class AttendeeNotFound(NotFound):
    """Form response email is not registered for the resolved event."""

    kind = "attendee_not_found"


class Conflict(EventManagerError):
    kind = "conflict"
    status_code = 409


class DuplicateAttendee(Conflict):
    pass


class EmptySource(EventManagerError):
    """A bulk intake source produced zero candidate emails."""

    kind = "empty_source"
    status_code = 400


class UnrecognizedStatus(EventManagerError):
    kind = "unrecognized_status"
    status_code = 400


class UpstreamFailure(EventManagerError):
    """A call to Google (Sheets, Forms, Gmail, OAuth) failed.

    ``upstream_status`` is the HTTP status Google answered with, when there
    was an answer at all.
    """

    kind = "upstream_failure"
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status
