"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./secret_santa.db"

    # Admin session
    ADMIN_PASSWORD: str = "santa2024"
    SESSION_SECRET: str = "change-this-in-production"
    ADMIN_SESSION_HOURS: int = 12

    # CORS (comma-separated)
    CORS_ORIGINS: str = "http://localhost:3000"

    # Used to build the QR scan links
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Matching behaviour
    REVEAL_EXISTING_MATCH: bool = False
    PREVENT_SELF_MATCH: bool = True
    PUBLIC_MATCHES: bool = False
    MATCH_CLAIM_RETRIES: int = 5

    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
