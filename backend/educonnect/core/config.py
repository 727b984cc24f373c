from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "EduConnect"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    TESTING: bool = False

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    BCRYPT_ROUNDS: int = 12  # 4 for tests (fast), 12 for prod (secure)
    SESSION_COOKIE_NAME: str = "session_token"
    SESSION_EXPIRE_DAYS: int = 30
    SESSION_COOKIE_SECURE: bool = False

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting (fixed window, persisted in rate_limits table)
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT_MAX: int = 100
    RATE_LIMIT_DEFAULT_WINDOW_MS: int = 60000
    RATE_LIMIT_ENROLL_MAX: int = 10
    RATE_LIMIT_CREATE_TASK_MAX: int = 30
    RATE_LIMIT_CREATE_ASSIGNMENT_MAX: int = 20

    # ==========================================
    # Requests
    # ==========================================
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024  # 10MB
    SLOW_REQUEST_THRESHOLD_MS: float = 1000

    # ==========================================
    # Pagination
    # ==========================================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_EXPIRE_DAYS * 24 * 60 * 60


# Create settings instance
settings = Settings()
