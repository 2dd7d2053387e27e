from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INVOICE_DESK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # REST API
    api_base_url: str = "http://localhost:4000"
    request_timeout: float = 15.0

    # bearer token persistence
    token_file: Path = Path.home() / ".invoice_desk" / "session.json"

    # dashboard
    due_soon_days: int = 7
    recent_limit: int = 5
    # derive overdue / due-soon locally when the server figures are missing
    dashboard_fallback: bool = True

    # parallel screen loads
    max_workers: int = 4


@lru_cache()
def get_settings() -> Settings:
    return Settings()
