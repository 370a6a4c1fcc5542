"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All intake/fill configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: intakefill/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# Load .env into environment BEFORE pydantic reads. override=True ensures .env
# values override any shell env.
# When .env doesn't exist (prod), this is a no-op; platform env vars are used.
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "IntakeFill"
    app_version: str = "1.0.0"
    port: int = 8001

    # Database (presets)
    database_url: str = "sqlite:///./intakefill.db"

    # Uploads / intake
    max_upload_bytes: int = 10_000_000
    max_intake_chars: int = 20_000

    # Document sessions (loaded PDFs / presets kept in memory)
    document_session_ttl: int = 3600
    document_session_max_entries: int = 32

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


# --- Constants (non-env, business config) ---

# Filled document download
FILLED_FILENAME_TEMPLATE: str = "{client}-Services-Plan-{date}.pdf"
FILLED_FILENAME_DEFAULT_CLIENT: str = "Author"
PDF_MEDIA_TYPE: str = "application/pdf"

# Preset export payload
PRESET_EXPORT_VERSION: str = "1.0"

# Preview values longer than this are truncated with "..."
PREVIEW_MAX_VALUE_CHARS: int = 50
