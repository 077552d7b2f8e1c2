"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here; no scattered magic strings.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_enabled: Enforce rate limits.
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_heavy: Rate limit for compute-heavy endpoints.
        database_url: SQLAlchemy URL of the SQLite database.
        default_broker: Broker selected as default on a fresh database.
        custody_job_enabled: Start the monthly custody fee job with the app.
        custody_job_cron: Crontab expression of the custody fee job.
        custody_job_timezone: Timezone the crontab is evaluated in.
        custody_job_dry_run: Compute custody fees without recording them.
        default_inflation_rate: Annual inflation used by break-even analyses.
        tax_rate: Tax rate applied to the estimated gain of long holdings.
        projection_months: Default break-even projection horizon.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "CEDEARs Manager"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_heavy: str = "10/minute"

    database_url: str = "sqlite:///./cedears.db"
    default_broker: str = "galicia"

    # Monthly custody fee job: 09:00 on the 1st, Buenos Aires time
    custody_job_enabled: bool = True
    custody_job_cron: str = "0 9 1 * *"
    custody_job_timezone: str = "America/Argentina/Buenos_Aires"
    custody_job_dry_run: bool = False

    default_inflation_rate: Decimal = Decimal("0.30")
    tax_rate: Decimal = Decimal("0.15")
    projection_months: int = 12


settings = Settings()
