# backend/app/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    """Process settings for the salon booking API (env vars or .env)."""

    database_url: str = "sqlite:///./booking.db"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        """
        Database URL with relative SQLite files anchored at the repo root,
        so the API and tests share one file whatever the working directory.
        In-memory and server databases are returned unchanged.
        """
        url = make_url(self.database_url)
        if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
            return self.database_url
        db_path = Path(url.database)
        if db_path.is_absolute():
            return self.database_url
        return url.set(database=str(BASE_DIR / db_path)).render_as_string(hide_password=False)


settings = Settings()
