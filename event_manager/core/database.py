"""Database configuration and session management.

The local database is the source of truth for organizers, events and
attendees. Each organizer's Google spreadsheet is a write-through mirror:
rows are appended or updated before the local transaction commits, but the
service never reads its own state back from the sheet.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Lets request threads read while another
      thread writes an attendee or event.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled so that an
      attendee always references an existing event and an event an existing
      organizer.

    - **check_same_thread=False**: FastAPI runs sync handlers on a thread
      pool, so a connection may be used by a different thread than the one
      that opened it.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from event_manager.core.config import settings

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Import models so they are registered on the metadata
    import event_manager.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
