from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra fields in .env
    )

    database_url: str
    redis_url: str = "redis://localhost:6379/0"

    sendgrid_api_key: Optional[str] = None
    sendgrid_from_email: Optional[str] = None

    secret_key: str
    algorithm: str = "HS256"
    jwt_expires_in_days: int = 7
    reset_token_expire_minutes: int = 10
    otp_expire_seconds: Optional[int] = 600
    bcrypt_rounds: int = 10
    cookie_name: str = "jwt"

    environment: str = "development"
    debug: bool = True

    host: str = "0.0.0.0"
    port: int = 8010

    # Base URL of the web client, used for links in outgoing mail
    client_url: str = "http://localhost:5173"
    frontend_url: Optional[List[str]] = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
