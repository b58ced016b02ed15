"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of companion/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/companion.db"
    db_create_all: bool = True  # create missing tables on startup (alembic still owns managed DBs)

    gemini_api_key: str = ""  # GEMINI_API_KEY in .env
    ai_model: str = "google-gla:gemini-2.5-flash"
    generation_max_retries: int = 2
    generation_retry_delay_seconds: float = 1.0
    generation_timeout_seconds: float = 30.0

    assistant_name: str = "D.R.O.S.S"
    assistant_full_name: str = "Digital Recovery Optimizer for Soulful Systems"

    default_session_id: str = "default"
    history_limit: int = 50  # GET /api/history
    context_history_limit: int = 10  # turns loaded before generating
    prompt_history_turns: int = 6  # turns serialized into the prompt

    cors_origins: str = ""  # comma-separated, added to the dev origins
    port: int = 5000

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("gemini_api_key", "ai_model", "default_session_id", mode="after")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return (v or "").strip()

    @property
    def gemini_ready(self) -> bool:
        return bool(self.gemini_api_key)


settings = Settings()
