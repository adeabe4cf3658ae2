from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = False
    allowed_origins: str = "http://localhost:3000"

    # Database
    # Empty database_url + empty db_host => no backing store, API answers 503.
    database_url: str | None = None
    db_host: str = "localhost"
    db_user: str = "incorpdesk"
    db_password: str = "change-me"  # development default only
    db_name: str = "incorpdesk"
    db_port: int = 5432
    auto_create_tables: bool = True

    # Auth / JWT
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Redis (token revocation). Empty = revocation disabled.
    redis_url: str = ""

    # File storage
    upload_dir: str = "public/uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_size: int = 10 * 1024 * 1024  # 10 MiB

    # First-run admin seeding
    admin_email: str = ""
    admin_password: str = ""
    admin_name: str = "Administrator"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def resolved_database_url(self) -> str | None:
        """DATABASE_URL if set, else a PostgreSQL URL built from the DB_* parts."""
        if self.database_url is not None:
            return self.database_url or None
        if not self.db_host:
            return None
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def database_url_sync(self) -> str | None:
        """Driver-less URL for Alembic and other sync tooling."""
        url = self.resolved_database_url
        if url is None:
            return None
        return url.replace("+asyncpg", "").replace("+aiosqlite", "")


settings = Settings()
