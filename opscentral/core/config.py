from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    ENV: str = Field(default="development", validation_alias="APP_ENV")
    APP_NAME: str = "opscentral-api"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Scheduling policy
    OPERATIONAL_TIMEZONE: str = "Asia/Dubai"
    DEFAULT_DAILY_JOB_LIMIT: int = 10
    WEEKLY_OFF_DAY: int = 6  # date.weekday(): Monday=0 .. Sunday=6
    DOCK_SLOTS_PER_DAY: int = 5
    EXPANSION_ITERATION_FACTOR: int = 3

    # Polling
    JOB_POLL_INTERVAL_SECONDS: float = 10.0

    # system_settings bootstrap
    SETTINGS_ROW_ID: int = 1
    SETTINGS_FETCH_ATTEMPTS: int = 3
    SETTINGS_RETRY_DELAY_SECONDS: float = 1.0

    # Per-viewer snapshot/notification storage: database | file | memory
    VIEWER_STATE_BACKEND: str = "database"
    VIEWER_STATE_DIR: str = "var/viewer_state"

    # Database: DATABASE_URL wins; otherwise a Postgres URL is assembled from DB_*
    DATABASE_URL: str | None = None
    DB_USER: str = "opscentral"
    DB_PASSWORD: str = "opscentral"
    DB_NAME: str = "opscentral"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    SQL_ECHO: bool = False

    AUTO_CREATE_TABLES: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def sqlalchemy_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            "postgresql+psycopg2://"
            f"{self.DB_USER}:{self.DB_PASSWORD}@"
            f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = CoreSettings()
