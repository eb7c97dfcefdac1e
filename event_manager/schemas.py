"""Request bodies accepted by the API."""
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from event_manager.models import AttendanceStatus

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class EventCreate(BaseModel):
    name: RequiredText
    location: RequiredText
    description: RequiredText
    instructor: RequiredText
    date: datetime


class EventUpdate(BaseModel):
    """Explicit update; only the fields present change."""

    name: RequiredText | None = None
    location: RequiredText | None = None
    description: RequiredText | None = None
    instructor: RequiredText | None = None
    date: datetime | None = None


class EventOverrides(BaseModel):
    """Copy overrides; a missing or empty value inherits the source's."""

    name: str | None = None
    location: str | None = None
    description: str | None = None
    instructor: str | None = None
    date: datetime | None = None


class AttendeeCreate(BaseModel):
    email: str


class SheetImport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_url: str = Field(alias="sheetUrl")


class StatusUpdate(BaseModel):
    status: AttendanceStatus
    name: str | None = None


class FormResponsePayload(BaseModel):
    """Inbound form response. Shapes vary by sender, so everything is optional.

    Either the direct ``email``/``attendanceStatus`` fields are set, or
    ``responses`` carries question/answer entries to extract them from.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    event_id: str | None = Field(default=None, alias="eventId")
    form_id: str | None = Field(default=None, alias="formId")
    form_url: str | None = Field(default=None, alias="formUrl")
    email: str | None = None
    name: str | None = None
    attendance_status: str | None = Field(default=None, alias="attendanceStatus")
    responses: list[dict[str, Any]] = Field(default_factory=list)
