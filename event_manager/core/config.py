"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Event Invitation Manager"
    debug: bool = False
    secret_key: str = "change-me-in-production"  # Signs the session cookie

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "http://localhost:3000"  # Comma-separated origins, or "*" for all
    frontend_url: str = "http://localhost:3000"

    # Session cookie
    session_max_age_seconds: int = 24 * 60 * 60
    cookie_secure: bool = False
    cookie_same_site: str = "lax"

    # Database
    database_url: str = "sqlite:///./event_manager.db"

    # Google OAuth client (web application type)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/api/auth/google/callback"

    # Attendee intake
    max_upload_bytes: int = 5 * 1024 * 1024
    external_sheet_range: str = "A:Z"


settings = Settings()
