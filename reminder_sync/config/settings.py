"""
Application settings and configuration.
All secrets are loaded from environment variables.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    openai_api_key: str
    llm_model: str = "gpt-4o-mini"

    # Google Sheets Configuration (service account)
    google_service_account_email: str
    google_private_key: str
    google_sheet_id: str
    google_sheet_name: str

    # Defaults written into operator-owned columns of new rows
    default_icon: str = "alert"
    default_status: str = "To DO"

    # Sync cycle
    sync_interval_minutes: int = 60

    # Shared secret expected from the WhatsApp bridge (disabled when unset)
    bridge_token: Optional[str] = None

    # Application Settings
    debug: bool = False
    log_level: str = "INFO"

    # Timezone used to compute "today" for relative due dates
    timezone: str = "UTC"

    @field_validator("google_private_key")
    @classmethod
    def _unescape_private_key(cls, value: str) -> str:
        # Keys pasted into .env files usually carry literal "\n" sequences
        return value.replace("\\n", "\n")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
