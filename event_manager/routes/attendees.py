"""Attendee intake and status routes."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from event_manager.core.config import settings
from event_manager.core.errors import EmptySource, InvalidInput
from event_manager.intake.sources import emails_from_sheet, emails_from_workbook
from event_manager.intake.workbook import EXCEL_CONTENT_TYPES
from event_manager.routes.deps import OrganizerContext, organizer_context
from event_manager.schemas import AttendeeCreate, SheetImport, StatusUpdate
from event_manager.services.attendees import BulkAddResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["attendees"])


def _bulk_response(result: BulkAddResult) -> dict:
    return {
        "message": f"Added {len(result.added)} attendees",
        "count": len(result.added),
        "attendees": result.added,
        "skipped": result.skipped,
        "errors": [{"email": email, "reason": reason} for email, reason in result.errors],
    }


@router.post("/events/{event_id}/attendees", status_code=201)
def add_attendee(
    event_id: UUID,
    data: AttendeeCreate,
    ctx: OrganizerContext = Depends(organizer_context),
):
    if not data.email.strip():
        raise InvalidInput("Email is required")
    ctx.events().get_owned(event_id, ctx.organizer.id)
    return ctx.attendees().add(event_id, data.email)


@router.post("/events/{event_id}/attendees/from-excel", status_code=201)
def add_attendees_from_excel(
    event_id: UUID,
    file: UploadFile = File(...),
    ctx: OrganizerContext = Depends(organizer_context),
):
    """
    Register every email found in the first worksheet of an .xlsx upload.

    Emails already registered are reported under ``skipped``.
    """
    if file.content_type not in EXCEL_CONTENT_TYPES:
        raise InvalidInput("Only Excel files are allowed")

    data = file.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise InvalidInput("File too large")

    ctx.events().get_owned(event_id, ctx.organizer.id)

    emails = emails_from_workbook(data)
    if not emails:
        raise EmptySource("No valid email addresses found in Excel file")

    logger.info(f"Importing {len(emails)} emails from {file.filename} into event {event_id}")
    return _bulk_response(ctx.attendees().bulk_add(event_id, emails))


@router.post("/events/{event_id}/attendees/from-sheets", status_code=201)
def add_attendees_from_sheet(
    event_id: UUID,
    data: SheetImport,
    ctx: OrganizerContext = Depends(organizer_context),
):
    """Register every email found in a Google Sheet shared with the organizer."""
    if not data.sheet_url.strip():
        raise InvalidInput("Google Sheets URL is required")

    ctx.events().get_owned(event_id, ctx.organizer.id)

    emails = emails_from_sheet(
        ctx.workspace.sheets, data.sheet_url, settings.external_sheet_range
    )
    if not emails:
        raise EmptySource("No valid email addresses found in Google Sheet")

    return _bulk_response(ctx.attendees().bulk_add(event_id, emails))


@router.get("/events/{event_id}/attendees")
def list_attendees(event_id: UUID, ctx: OrganizerContext = Depends(organizer_context)):
    ctx.events().get_owned(event_id, ctx.organizer.id)
    return {"attendees": ctx.attendees().list(event_id)}


@router.put("/attendees/{attendee_id}/status")
def update_attendee_status(
    attendee_id: UUID,
    data: StatusUpdate,
    ctx: OrganizerContext = Depends(organizer_context),
):
    """Set an attendee's status by hand. Only the event's organizer may do this."""
    attendees = ctx.attendees()
    attendee = attendees.get(attendee_id)
    ctx.events().get_owned(attendee.event_id, ctx.organizer.id)
    return {"attendee": attendees.update_status(attendee_id, data.status, name=data.name)}
