from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

# Values shipped in sample configs; treated as if nothing was configured.
PLACEHOLDER_SECRET = "your-super-secret-jwt-key-change-in-production"
PLACEHOLDER_DATABASE_URL = "YOUR_NEON_DATABASE_CONNECTION_STRING"


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "IWIL Practice Portal"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Credential store
    DATABASE_URL: Optional[str] = None
    STORE_BACKEND: Literal["auto", "memory", "sql"] = "auto"
    SEED_DEMO_ACCOUNTS: bool = True
    DEMO_SEED_ENABLED: bool = False

    ALLOWED_HOSTS: List[str] = ["*"]

    @field_validator("JWT_SECRET")
    @classmethod
    def check_secret(cls, value: str) -> str:
        if value == PLACEHOLDER_SECRET:
            raise ValueError("JWT_SECRET is the public placeholder value")
        if len(value) < 16:
            raise ValueError("JWT_SECRET must be at least 16 characters long")
        return value

    @field_validator("DATABASE_URL")
    @classmethod
    def drop_placeholder_url(cls, value: Optional[str]) -> Optional[str]:
        if not value or value.strip() == PLACEHOLDER_DATABASE_URL:
            return None
        return value.strip()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value

    @model_validator(mode="after")
    def check_store_backend(self) -> "Settings":
        if self.STORE_BACKEND == "sql" and not self.DATABASE_URL:
            raise ValueError("STORE_BACKEND=sql requires DATABASE_URL")
        if self.ENVIRONMENT == "production" and self.store_backend == "memory":
            raise ValueError(
                "The in-memory credential store is not allowed in production; "
                "set DATABASE_URL"
            )
        return self

    @property
    def store_backend(self) -> str:
        """Return the credential store backend this configuration selects."""
        if self.STORE_BACKEND == "auto":
            return "sql" if self.DATABASE_URL else "memory"
        return self.STORE_BACKEND

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
