"""Application configuration."""

import secrets
import warnings
from typing import Annotated, Any, Literal, Self

from pydantic import (
    AnyUrl,
    BeforeValidator,
    Field,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Keyward"
    SERVER_PORT: int = 8000
    ROOTPATH: str = ""
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8  # 8 days
    DASHBOARD_HOST: str = "http://localhost:3000"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    JWT_ALGORITHM: str = "HS256"
    # 仅在部署于反向代理之后时开启，否则客户端可伪造 X-Forwarded-For 绕过 IP 黑名单
    TRUST_PROXY_HEADERS: bool = False

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    CORS_ALLOW_METHODS: list[str] = ["GET", "POST", "PUT", "PATCH", "DELETE"]
    CORS_ALLOW_HEADERS: list[str] = ["Authorization", "Content-Type", "X-API-Key"]

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.DASHBOARD_HOST
        ]

    # Sentry
    SENTRY_DSN: HttpUrl | None = None

    # PostgreSQL
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "keyward"

    @computed_field
    @property
    def database_url_object(self) -> MultiHostUrl:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return str(self.database_url_object)

    # Credentials
    PASSWORD_HASH_ROUNDS: int = Field(default=12, ge=4, le=16)

    # Applications / API keys
    APPLICATION_API_KEY_PREFIX: str = "kw"
    APPLICATION_API_KEY_BYTES: int = 24  # token_urlsafe(24) -> 32 chars

    # License keys
    LICENSE_DEFAULT_MAX_USERS: int = 1
    LICENSE_DEFAULT_VALIDITY_DAYS: int = 30
    LICENSE_KEY_SEGMENT_LENGTH: int = 8

    # Webhook delivery
    WEBHOOK_MAX_ATTEMPTS: int = 5
    WEBHOOK_BASE_RETRY_DELAY_SEC: float = 2.0
    WEBHOOK_MAX_RETRY_DELAY_SEC: float = 30.0
    WEBHOOK_STATUS_JITTER_SEC: float = 3.0  # 5xx/408/429 重试抖动上限
    WEBHOOK_NETWORK_JITTER_SEC: float = 5.0  # 网络错误重试抖动上限
    WEBHOOK_BASE_TIMEOUT_SEC: float = 45.0
    WEBHOOK_TIMEOUT_STEP_SEC: float = 5.0  # 每次重试额外增加的超时
    WEBHOOK_INTER_DELIVERY_DELAY_SEC: float = 0.5
    WEBHOOK_RATE_LIMIT_DELAY_STEP_SEC: float = 1.0
    WEBHOOK_MAX_INTER_DELIVERY_DELAY_SEC: float = 10.0
    WEBHOOK_PROBE_TIMEOUT_SEC: float = 15.0
    WEBHOOK_USER_AGENT: str = "Keyward-Webhook/1.0"
    NOTIFICATION_DRAIN_TIMEOUT_SEC: float = 30.0

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        return self

    @model_validator(mode="after")
    def _enforce_production_hash_cost(self) -> Self:
        if self.ENVIRONMENT != "local" and self.PASSWORD_HASH_ROUNDS < 10:
            raise ValueError("PASSWORD_HASH_ROUNDS must be at least 10 outside local")
        return self


settings = Settings()
