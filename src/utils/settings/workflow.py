"""Role-change workflow and notification settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Alert every administrator of the organization when a request is submitted
    NOTIFY_ADMINS_ON_ROLE_REQUEST: bool = False

    AUTH_CONTEXT_CACHE_TTL_SECONDS: int = 300

    REALTIME_RECONNECT_DELAY_SECONDS: float = 1.0
