"""Google collaborators bound to one organizer's credentials."""
from functools import cached_property

from google.oauth2.credentials import Credentials

from event_manager.google.forms import FormsBackend
from event_manager.google.gmail import GmailBackend
from event_manager.google.sheets import SheetsBackend


class GoogleWorkspace:
    """Sheets, Forms and Gmail clients for a single set of credentials.

    A workspace is created per request (or per webhook call) and discarded
    afterwards. The API clients are only built when first used.
    """

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    @cached_property
    def sheets(self) -> SheetsBackend:
        return SheetsBackend(self.credentials)

    @cached_property
    def forms(self) -> FormsBackend:
        return FormsBackend(self.credentials)

    @cached_property
    def mail(self) -> GmailBackend:
        return GmailBackend(self.credentials)
