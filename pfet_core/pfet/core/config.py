from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PFET_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = Field("PFET", description="Logger namespace and display name")
    LOG_LEVEL: str = Field("INFO", description="Root level for the app logger")
    LOG_PATH: str = Field("./data/logs", description="Directory for rotating log files")

    # Statutory schedule used when a calculator is built without one
    TAX_YEAR: str = Field("2024", description="Key into the registered tax schedules")

    # Budgets, loans and goals
    DEFAULT_ALERT_THRESHOLD: float = 80.0
    UPCOMING_WINDOW_DAYS: int = 30

    # Reports
    REPORT_MONTHS: int = 6

settings = Settings()
