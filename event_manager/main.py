"""Event Invitation Manager API."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from event_manager.core.config import settings
from event_manager.core.database import create_db_and_tables
from event_manager.core.errors import EventManagerError
from event_manager.core.locks import EventLocks
from event_manager.routes import attendees, auth, events, webhooks

# Configure logging
log_dir = Path.home() / ".logs" / "event_manager"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Event Invitation Manager")
    create_db_and_tables()
    yield
    logger.info("Event Invitation Manager shut down")


app = FastAPI(
    title=settings.app_name,
    description="Organize events, collect attendees and send Google Forms invitations",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.locks = EventLocks()

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie="event_manager_session",
    max_age=settings.session_max_age_seconds,
    same_site=settings.cookie_same_site,
    https_only=settings.cookie_secure,
)

# Configure CORS for the frontend
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EventManagerError)
async def event_manager_error_handler(request: Request, exc: EventManagerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_input", "message": message},
    )


# Include routers
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(attendees.router)
app.include_router(webhooks.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
