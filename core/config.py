from dataclasses import dataclass
from datetime import timedelta

from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./todo.db"
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 1
    # Refresh only once the access token has lapsed
    REFRESH_REQUIRES_EXPIRED_ACCESS_TOKEN: bool = False
    ADMIN_ROLE: str = "Admin"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]


@dataclass(frozen=True)
class JwtConfig:
    """
    Immutable signing/lifetime parameters handed to the token issuer and verifier.
    """
    secret: str
    algorithm: str = "HS256"
    access_token_lifetime: timedelta = timedelta(seconds=30)
    refresh_token_lifetime: timedelta = timedelta(days=1)
    require_expired_access_token: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtConfig":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_token_lifetime=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
            refresh_token_lifetime=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            require_expired_access_token=settings.REFRESH_REQUIRES_EXPIRED_ACCESS_TOKEN,
        )


settings = Settings()
