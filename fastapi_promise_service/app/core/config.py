from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Promise Service API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    debug: bool = Field(default=True, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=3306, alias="DB_PORT")
    db_user: str = Field(default="promise_user", alias="DB_USER")
    db_password: str = Field(default="promise_pass", alias="DB_PASSWORD")
    db_name: str = Field(default="promise_service_db", alias="DB_NAME")
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, alias="DB_MAX_OVERFLOW")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    encryption_key: str = Field(
        default="0123456789abcdeffedcba98765432100123456789abcdeffedcba9876543210",
        alias="ENCRYPTION_KEY",
    )

    app_base_url: str = Field(default="http://localhost:8080", alias="APP_BASE_URL")
    display_utc_offset_hours: int = Field(default=9, alias="DISPLAY_UTC_OFFSET_HOURS")
    kakao_api_base_url: str = Field(default="https://kapi.kakao.com", alias="KAKAO_API_BASE_URL")
    kakao_memo_path: str = Field(
        default="/v2/api/talk/memo/default/send",
        alias="KAKAO_MEMO_PATH",
    )
    kakao_connect_timeout: float = Field(default=3.0, alias="KAKAO_CONNECT_TIMEOUT")
    kakao_read_timeout: float = Field(default=10.0, alias="KAKAO_READ_TIMEOUT")
    kakao_dispatch_workers: int = Field(default=4, alias="KAKAO_DISPATCH_WORKERS")
    kakao_notification_enabled: bool = Field(
        default=True,
        alias="KAKAO_NOTIFICATION_ENABLED",
    )
    notify_max_receivers: int = Field(default=20, alias="NOTIFY_MAX_RECEIVERS")

    jwt_secret_key: str = Field(default="promise-service-secret", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def encryption_key_bytes(self) -> bytes:
        return bytes.fromhex(self.encryption_key)

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
            f"?charset=utf8mb4"
        )

    @property
    def kakao_memo_url(self) -> str:
        return f"{self.kakao_api_base_url.rstrip('/')}{self.kakao_memo_path}"


settings = Settings()
