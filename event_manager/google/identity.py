"""Google sign-in: authorization URL, code exchange and token refresh."""
import logging
import os
from dataclasses import dataclass
from datetime import datetime

from google.auth.transport.requests import Request
from google.oauth2 import id_token
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from event_manager.core.config import Settings
from event_manager.core.errors import InvalidInput, UpstreamFailure
from event_manager.google.client import SCOPES, TOKEN_URI, upstream_call

logger = logging.getLogger(__name__)

# Google reports granted scopes in its own order and naming
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"


@dataclass
class VerifiedIdentity:
    """Profile and tokens obtained from a successful code exchange."""

    subject: str
    name: str
    email: str
    access_token: str
    refresh_token: str | None
    expiry: datetime | None


class GoogleIdentityProvider:
    """OAuth web-server flow against Google."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _flow(self, state: str | None = None) -> Flow:
        client_config = {
            "web": {
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.settings.google_redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=SCOPES,
            state=state,
            redirect_uri=self.settings.google_redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> tuple[str, str]:
        """Return the consent URL and the state value to check on callback.

        ``prompt=consent`` with offline access makes Google issue a refresh
        token on every sign-in.
        """
        url, state = self._flow().authorization_url(access_type="offline", prompt="consent")
        return url, state

    def verify(self, code: str, state: str | None = None) -> VerifiedIdentity:
        """Exchange an authorization code and verify the returned ID token."""
        if not code:
            raise InvalidInput("Missing authorization code")

        flow = self._flow(state)
        try:
            with upstream_call("exchange authorization code"):
                flow.fetch_token(code=code)
                credentials = flow.credentials
                claims = id_token.verify_oauth2_token(
                    credentials.id_token,
                    Request(),
                    audience=self.settings.google_client_id,
                )
        except (OAuth2Error, ValueError) as e:
            logger.error(f"Google sign-in failed: {e}")
            raise UpstreamFailure("Failed to authenticate with Google") from e

        logger.info(f"Verified Google identity {claims['sub']}")
        return VerifiedIdentity(
            subject=claims["sub"],
            name=claims.get("name") or claims.get("email", ""),
            email=claims.get("email", ""),
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expiry=credentials.expiry,
        )

    def refresh(self, credentials: Credentials) -> Credentials:
        """Obtain a new access token using the refresh token."""
        with upstream_call("refresh Google credentials"):
            credentials.refresh(Request())
        logger.info("Refreshed Google API credentials")
        return credentials
