from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    app_name: str = "QuizHub API"
    environment: str = "development"
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    database_url: str
    database_url_sync: str = ""
    cors_origins: str = "http://localhost:5173"

    secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # revoked access tokens
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: int = 5

    # upper bound for a single store round trip, in seconds
    store_timeout_seconds: float = 5.0

    # False -> one result per (user, quiz); a second submission is a conflict
    allow_resubmission: bool = True

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
