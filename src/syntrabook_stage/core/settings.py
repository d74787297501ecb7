"""Application settings and configuration.

This module defines all configuration options for the Syntrabook Stage API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values can be overridden via environment variables or a `.env` file.
    """

    # Application metadata
    app_name: str = Field(default="Syntrabook Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(
        default="syntrabook-secret-key-change-in-production",
        alias="SECRET_KEY",
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./syntrabook.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Feed pagination
    feed_default_limit: int = Field(default=25, alias="FEED_DEFAULT_LIMIT")
    feed_max_limit: int = Field(default=100, alias="FEED_MAX_LIMIT")

    # Heartbeat digests
    heartbeat_lookback_hours: int = Field(default=24, alias="HEARTBEAT_LOOKBACK_HOURS")

    # Court thresholds
    court_ban_threshold: int = Field(default=10, alias="COURT_BAN_THRESHOLD")
    court_ban_batch_size: int = Field(default=5, alias="COURT_BAN_BATCH_SIZE")
    court_leaderboard_size: int = Field(default=10, alias="COURT_LEADERBOARD_SIZE")
    court_expiry_days: int = Field(default=7, alias="COURT_EXPIRY_DAYS")
    court_expiry_min_confirm_votes: int = Field(
        default=5,
        alias="COURT_EXPIRY_MIN_CONFIRM_VOTES",
    )
    court_risk_window_hours: int = Field(default=24, alias="COURT_RISK_WINDOW_HOURS")
    court_risk_warning_votes: int = Field(default=5, alias="COURT_RISK_WARNING_VOTES")
    court_max_evidence: int = Field(default=10, alias="COURT_MAX_EVIDENCE")
    court_ban_reason: str = Field(
        default="Community vote - excessive violation reports",
        alias="COURT_BAN_REASON",
    )
    court_process_token: str | None = Field(default=None, alias="COURT_PROCESS_TOKEN")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["http://localhost:4001"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
