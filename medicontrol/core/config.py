# medicontrol/core/config.py

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Storage
    DATABASE_URL: str = "sqlite:///./data/medicontrol.db"
    DB_BUSY_TIMEOUT_SECONDS: float = 30.0
    SQL_DIR: Path = Path("sql")

    # Seed catalog
    SEED_FILE: Path = Path("data/medicamentos_500_com_bula.json")
    SEED_ON_STARTUP: bool = True
    BACKFILL_PRICES_ON_STARTUP: bool = True

    # Security
    SECRET_KEY: str = "medicontrol-development-secret-change-me"
    ALGORITHM: Literal["HS256"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Built-in operator account
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "senha123"
    ADMIN_USER_ID: int = 1

    # Sales / reports
    DEFAULT_SALE_USER_ID: int = 1
    LOW_STOCK_DEFAULT_LIMIT: int = 50

    # HTTP
    RATE_LIMIT_ENABLED: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )

    @property
    def sql_dir(self) -> Path:
        return self.SQL_DIR if self.SQL_DIR.is_absolute() else PROJECT_ROOT / self.SQL_DIR

    @property
    def seed_file(self) -> Path:
        return self.SEED_FILE if self.SEED_FILE.is_absolute() else PROJECT_ROOT / self.SEED_FILE


settings = Settings()
