from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NONCE_",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./nonces.db"

    # Expiry sweeper
    sweep_interval_seconds: float = 24 * 60 * 60  # 24 hours

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Alerting
    alerts_webhook_url: str | None = None
    alert_cooldown_seconds: int = 30

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v):
        """Accept JSON/Console in any case."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("json", "console"):
                raise ValueError(f"Unsupported log format: {v}")
        return v


settings = Settings()
