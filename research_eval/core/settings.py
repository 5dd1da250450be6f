# research_eval/core/settings.py
from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Basics
    PROJECT_NAME: str = "research-eval"
    VERSION: str = "1.0.0"
    FASTAPI_ROOT_PATH: str = ""
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Database: DATABASE_URL wins over the individual parts
    DATABASE_URL: str | None = None
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_NAME: str = "postgres"
    DATABASE_PORT: int = 5432
    DATABASE_SSLMODE: str = "prefer"

    # Uploads
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # CORS, comma separated ("*" = all)
    ALLOWED_ORIGINS: str = "*"

    # Users without a stored hash; off unless explicitly enabled
    ALLOW_LEGACY_PASSWORD: bool = False
    LEGACY_PASSWORD: str = "123456"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        url = URL.create(
            "postgresql+psycopg2",
            username=self.DATABASE_USER,
            password=self.DATABASE_PASSWORD,
            host=self.DATABASE_HOST,
            port=self.DATABASE_PORT,
            database=self.DATABASE_NAME,
            query={"sslmode": self.DATABASE_SSLMODE},
        )
        return url.render_as_string(hide_password=False)

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


# Settings singleton imported by the rest of the modules
settings = Settings()
