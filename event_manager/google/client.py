"""Google API credentials and service construction.

Credentials are built per organizer and per request from the tokens stored
on the Organizer row; no client object is shared between requests.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from event_manager.core.config import settings
from event_manager.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"

# Scopes requested at sign-in
SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/forms.body",
    "https://www.googleapis.com/auth/gmail.send",
]


def build_credentials(
    access_token: str | None,
    refresh_token: str | None,
    expiry: datetime | None = None,
) -> Credentials:
    """Create credentials from stored tokens.

    ``expiry`` must be naive UTC, which is what google-auth compares against.
    """
    if expiry is not None and expiry.tzinfo is not None:
        expiry = expiry.replace(tzinfo=None)
    return Credentials(
        token=access_token,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scopes=SCOPES,
        expiry=expiry,
    )


def build_service(name: str, version: str, credentials: Credentials):
    """Build an authenticated discovery client for one Google API."""
    return build(name, version, credentials=credentials, cache_discovery=False)


@contextmanager
def upstream_call(action: str) -> Iterator[None]:
    """Turn Google client and transport errors into UpstreamFailure."""
    try:
        yield
    except HttpError as e:
        logger.error(f"Google API call failed ({action}): {e}")
        raise UpstreamFailure(
            f"Failed to {action}: HTTP {e.resp.status}", upstream_status=e.resp.status
        ) from e
    except GoogleAuthError as e:
        logger.error(f"Google authorization failed ({action}): {e}")
        raise UpstreamFailure(f"Failed to {action}: authorization error") from e
    except (OSError, HttpLib2Error) as e:
        logger.error(f"Network error talking to Google ({action}): {e}")
        raise UpstreamFailure(f"Failed to {action}: network error") from e
