from functools import lru_cache
from typing import Literal, final

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL


class PostgresConfig(BaseModel):
    user: str
    password: str
    host: str
    port: int = 5432
    db: str


class RedisConfig(BaseModel):
    host: str = "redis"
    port: int = 6379
    db: int = 0
    password: str | None = None
    socket_timeout_seconds: float = 0.5
    socket_connect_timeout_seconds: float = 0.5


class APIConfig(BaseModel):
    title: str = "API Abuse Guard"
    version: str = "1.0.0"
    port: int = 3000
    host: str = "0.0.0.0"
    allowed_hosts: list[str] = Field(default_factory=lambda: ["*"])
    api_key: str | None = None


class InspectionConfig(BaseModel):
    enabled: bool = True
    store_backend: Literal["redis", "memory"] = "redis"
    trust_forwarded_ip: bool = True
    exempt_paths: list[str] = Field(
        default_factory=lambda: [
            "/health",
            "/dashboard",
            "/docs",
            "/redoc",
            "/openapi.json",
        ]
    )

    hit_window_seconds: int = 300
    device_ban_seconds: int = 600
    network_ban_seconds: int = 1800
    escalation_window_seconds: int = 900
    escalation_threshold: int = 3
    block_score_threshold: int = 70

    scripting_user_agent_markers: list[str] = Field(
        default_factory=lambda: [
            "curl",
            "wget",
            "python-requests",
            "go-http-client",
            "libwww-perl",
        ]
    )
    admin_path_markers: list[str] = Field(default_factory=lambda: ["admin"])

    log_queue_size: int = 1024
    log_drain_seconds: float = 5.0
    recent_logs_limit: int = 20
    top_ips_limit: int = 10


@final
class Config(BaseSettings):
    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="APP__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: Literal["local", "dev", "prod"] = "local"

    api: APIConfig = APIConfig()
    inspection: InspectionConfig = InspectionConfig()

    postgres: PostgresConfig
    redis: RedisConfig = RedisConfig()

    @property
    def database_url(self) -> str:
        host = "localhost" if self.env == "local" else self.postgres.host
        return URL.build(
            scheme="postgresql+asyncpg",
            user=self.postgres.user,
            password=self.postgres.password,
            host=host,
            port=self.postgres.port,
            path=f"/{self.postgres.db}",
        ).human_repr()

    @property
    def redis_url(self) -> str:
        host = "localhost" if self.env == "local" else self.redis.host
        return URL.build(
            scheme="redis",
            host=host,
            port=self.redis.port,
            path=f"/{self.redis.db}",
        ).human_repr()


@lru_cache
def get_config() -> Config:
    return Config()
