# goaltree/config.py
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./goaltree.db")
    SQL_ECHO: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")

    # Seed the "Buy a House" demo tree on startup when the store is empty.
    SEED_DEMO_DATA: bool = Field(False)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def async_database_url(self) -> str:
        return to_async_url(self.DATABASE_URL)


def to_async_url(url: str) -> str:
    # Ensure async drivers are used
    if url.startswith("postgresql://") and "+asyncpg" not in url:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and "+aiosqlite" not in url:
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


settings = Settings()
