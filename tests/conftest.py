"""Shared test fixtures."""

import re
from datetime import datetime
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from event_manager.core.database import get_session
from event_manager.core.errors import UpstreamFailure
from event_manager.core.locks import EventLocks
from event_manager.google.forms import FormHandle, public_form_url
from event_manager.google.identity import VerifiedIdentity
from event_manager.main import app
from event_manager.models import Event, Organizer
from event_manager.routes.deps import get_identity_provider, get_workspace_factory
from event_manager.schemas import EventCreate
from event_manager.services.events import EventStore
from event_manager.services.ledger import SheetLedger

CELL_PATTERN = re.compile(r"^([A-Z]+)(\d+)$")


class FakeSheets:
    """In-memory stand-in for the Sheets backend.

    ``workbooks`` holds the organizers' spreadsheets as lists of rows per tab.
    ``shared`` holds external sheets that can only be read.
    """

    def __init__(self):
        self.workbooks: dict[str, dict[str, list[list]]] = {}
        self.titles: dict[str, str] = {}
        self.shared: dict[str, list[list]] = {}
        self.read_failures: dict[str, UpstreamFailure] = {}
        self.fail_writes = False

    def create_workbook(self, title, tabs):
        spreadsheet_id = f"sheet-{len(self.workbooks) + 1}"
        self.workbooks[spreadsheet_id] = {tab: [list(columns)] for tab, columns in tabs.items()}
        self.titles[spreadsheet_id] = title
        return spreadsheet_id

    def append_rows(self, spreadsheet_id, tab, rows):
        self._check_writable()
        self.workbooks[spreadsheet_id][tab].extend(list(row) for row in rows)

    def read_range(self, spreadsheet_id, range_expr):
        if spreadsheet_id in self.read_failures:
            raise self.read_failures[spreadsheet_id]
        if spreadsheet_id in self.shared:
            return [list(row) for row in self.shared[spreadsheet_id]]

        tab, _, cells = range_expr.partition("!")
        rows = self.workbooks[spreadsheet_id][tab]
        if cells == "A:A":
            return [row[:1] for row in rows]
        return [list(row) for row in rows]

    def update_range(self, spreadsheet_id, range_expr, rows):
        self._check_writable()
        tab, _, cells = range_expr.partition("!")
        start = CELL_PATTERN.match(cells.split(":")[0])
        column = ord(start.group(1)) - ord("A")
        target = self.workbooks[spreadsheet_id][tab][int(start.group(2)) - 1]
        for offset, value in enumerate(rows[0]):
            while len(target) <= column + offset:
                target.append("")
            target[column + offset] = value

    def rows(self, spreadsheet_id, tab):
        """Data rows of a tab, without the header."""
        return self.workbooks[spreadsheet_id][tab][1:]

    def _check_writable(self):
        if self.fail_writes:
            raise UpstreamFailure("Failed to write to spreadsheet: HTTP 503", upstream_status=503)


class FakeForms:
    def __init__(self):
        self.created: list[dict] = []
        self.fail = False

    def create_form(self, title, description, questions):
        if self.fail:
            raise UpstreamFailure("Failed to create form: HTTP 500", upstream_status=500)
        form_id = f"form-{len(self.created) + 1}"
        self.created.append({"title": title, "description": description, "questions": questions})
        return FormHandle(form_id=form_id, url=public_form_url(form_id))


class FakeMail:
    def __init__(self):
        self.sent: list[dict] = []
        self.failing_recipients: set[str] = set()

    def send(self, sender, to, subject, html):
        if to in self.failing_recipients:
            raise UpstreamFailure("Failed to send email: HTTP 400", upstream_status=400)
        self.sent.append({"sender": sender, "to": to, "subject": subject, "html": html})
        return f"message-{len(self.sent)}"


class FakeWorkspace:
    def __init__(self):
        self.sheets = FakeSheets()
        self.forms = FakeForms()
        self.mail = FakeMail()


class FakeIdentityProvider:
    """Signs in whoever is registered under an authorization code."""

    def __init__(self):
        self.identities: dict[str, VerifiedIdentity] = {}
        self.refreshed = 0

    def authorization_url(self):
        return "https://accounts.google.com/o/oauth2/auth?state=test-state", "test-state"

    def verify(self, code, state=None):
        if code not in self.identities:
            raise UpstreamFailure("Failed to authenticate with Google")
        return self.identities[code]

    def refresh(self, credentials):
        self.refreshed += 1
        credentials.token = f"refreshed-token-{self.refreshed}"
        credentials.expiry = None
        return credentials


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="workspace")
def workspace_fixture() -> FakeWorkspace:
    return FakeWorkspace()


@pytest.fixture(name="sheets")
def sheets_fixture(workspace: FakeWorkspace) -> FakeSheets:
    return workspace.sheets


@pytest.fixture(name="identity")
def identity_fixture() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture(name="locks")
def locks_fixture() -> EventLocks:
    return EventLocks()


def make_organizer(session: Session, sheets: FakeSheets, name: str, email: str) -> Organizer:
    organizer = Organizer(
        google_id=f"google-{uuid4().hex[:8]}",
        name=name,
        email=email,
        sheet_id=SheetLedger.create_workbook(sheets, name),
        access_token="access-token",
        refresh_token="refresh-token",
    )
    session.add(organizer)
    session.commit()
    session.refresh(organizer)
    return organizer


@pytest.fixture(name="organizer")
def organizer_fixture(session: Session, sheets: FakeSheets) -> Organizer:
    """An organizer who has signed in before."""
    return make_organizer(session, sheets, "김주최", "host@example.com")


@pytest.fixture(name="other_organizer")
def other_organizer_fixture(session: Session, sheets: FakeSheets) -> Organizer:
    return make_organizer(session, sheets, "Other Host", "other@example.com")


@pytest.fixture(name="ledger")
def ledger_fixture(sheets: FakeSheets, organizer: Organizer) -> SheetLedger:
    return SheetLedger(sheets, organizer.sheet_id)


@pytest.fixture(name="event_store")
def event_store_fixture(session: Session, ledger: SheetLedger, locks: EventLocks) -> EventStore:
    return EventStore(session, ledger, locks)


@pytest.fixture(name="sample_event")
def sample_event_fixture(event_store: EventStore, organizer: Organizer) -> Event:
    """An event owned by ``organizer``."""
    return event_store.create(
        organizer.id,
        EventCreate(
            name="Python Workshop",
            location="Seoul",
            description="Hands-on session",
            instructor="Dr. Lee",
            date=datetime(2025, 3, 14, 14, 30),
        ),
    )


@pytest.fixture(name="client")
def client_fixture(session: Session, workspace: FakeWorkspace, identity: FakeIdentityProvider):
    """Create a test client with the test database session and fake Google services."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_workspace_factory] = lambda: (lambda credentials: workspace)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def sign_in(client: TestClient, identity: FakeIdentityProvider, organizer: Organizer):
    """Run the OAuth callback so the client carries ``organizer``'s session cookie."""
    code = f"code-{organizer.google_id}"
    identity.identities[code] = VerifiedIdentity(
        subject=organizer.google_id,
        name=organizer.name,
        email=organizer.email,
        access_token="access-token",
        refresh_token=None,
        expiry=None,
    )
    client.post("/api/auth/google")
    response = client.get(
        "/api/auth/google/callback",
        params={"code": code, "state": "test-state"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return response


@pytest.fixture(name="auth_client")
def auth_client_fixture(
    client: TestClient, identity: FakeIdentityProvider, organizer: Organizer
) -> TestClient:
    """A client signed in as ``organizer``."""
    sign_in(client, identity, organizer)
    return client


@pytest.fixture(name="sign_in_as")
def sign_in_as_fixture(client: TestClient, identity: FakeIdentityProvider):
    """Switch the client's session to another organizer."""
    return lambda organizer: sign_in(client, identity, organizer)
