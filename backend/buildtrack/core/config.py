"""Application configuration"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "BuildTrack API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Database
    # WHY: SQLite default keeps local development dependency-free;
    # production deployments point this at PostgreSQL.
    DATABASE_URL: str = "sqlite+aiosqlite:///./buildtrack.db"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"

    # Estimates
    ESTIMATE_VALIDITY_DAYS: int = 30
    # WHY: The estimate workflow is permissive by default (any status to any
    # status). Enabling this restricts it to draft->sent->approved/rejected.
    ESTIMATE_STRICT_TRANSITIONS: bool = False

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.DATABASE_URL

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.async_database_url.startswith("sqlite")


settings = Settings()
