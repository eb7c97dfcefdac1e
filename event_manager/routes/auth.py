"""Google sign-in and session routes."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from event_manager.core.config import settings
from event_manager.core.database import get_session
from event_manager.core.errors import InvalidInput, UpstreamFailure
from event_manager.google.identity import GoogleIdentityProvider
from event_manager.models import Organizer
from event_manager.routes.deps import (
    WorkspaceFactory,
    current_organizer,
    get_identity_provider,
    get_workspace_factory,
)
from event_manager.services.organizers import OrganizerStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _frontend(path: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}{path}"


@router.post("/google")
def start_google_sign_in(
    request: Request,
    identity: GoogleIdentityProvider = Depends(get_identity_provider),
):
    """
    Begin the Google OAuth flow.

    Returns the consent URL the browser should visit. The OAuth state is
    kept in the session and checked on callback.
    """
    auth_url, state = identity.authorization_url()
    request.session["oauth_state"] = state
    return {"auth_url": auth_url}


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    session: Session = Depends(get_session),
    identity: GoogleIdentityProvider = Depends(get_identity_provider),
    workspace_for: WorkspaceFactory = Depends(get_workspace_factory),
):
    """
    Complete sign-in and redirect to the frontend.

    On first sign-in the organizer and their event spreadsheet are created.
    Any failure redirects to the login page with ``error=auth_failed``.
    """
    if not code:
        raise InvalidInput("Missing authorization code")

    expected_state = request.session.pop("oauth_state", None)
    if expected_state and state != expected_state:
        logger.warning("OAuth state mismatch on Google callback")
        return RedirectResponse(_frontend("/login?error=auth_failed"), status_code=303)

    try:
        verified = identity.verify(code, state)
        organizer = OrganizerStore(session).sign_in(verified, workspace_for)
    except UpstreamFailure as e:
        logger.error(f"Google sign-in failed: {e.message}")
        return RedirectResponse(_frontend("/login?error=auth_failed"), status_code=303)

    request.session["organizer_id"] = str(organizer.id)
    logger.info(f"Organizer {organizer.id} signed in")
    return RedirectResponse(_frontend("/dashboard"), status_code=303)


@router.get("/me")
def me(organizer: Organizer = Depends(current_organizer)):
    """Current signed-in organizer."""
    return {
        "id": str(organizer.id),
        "name": organizer.name,
        "email": organizer.email,
        "sheet_id": organizer.sheet_id,
    }


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Signed out"}
