from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "shipping"
    POSTGRES_USER: str = "shipping"
    POSTGRES_PASSWORD: str = "shipping"
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* values
    DATABASE_URL: Optional[str] = None

    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    RUN_MIGRATIONS: bool = True

    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    LABEL_BASE_URL: str = "https://labels.example.com"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
