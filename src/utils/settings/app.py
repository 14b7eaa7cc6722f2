from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "DEV"
    API_VERSION: str = "0.1.0"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Security settings
    MAX_REQUEST_SIZE: int = 1 * 1024 * 1024  # 1MB

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.upper() == "PROD"

    def validate_prod(self) -> None:
        """Sanity checks for production environment."""
        if self.is_production:
            if not self.CORS_ORIGINS:
                raise ValueError("CORS_ORIGINS must be set in production")
