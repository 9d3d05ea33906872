# ==================================================================================
# core/config.py — MissionBoard Configuration (pydantic-settings + .env)
# ==================================================================================
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./missionboard.db"

    # ------------------------
    # SECURITY / SESSION CONFIG
    # ------------------------
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    SESSION_COOKIE_NAME: str = "missionboard.session-token"

    # Shared secret that unlocks /api/diagnostics without a session
    ADMIN_DIAGNOSTIC_TOKEN: Optional[str] = None

    # ------------------------
    # FRONTEND / CORS CONFIG
    # ------------------------
    FRONTEND_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production'
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def IS_PRODUCTION(self) -> bool:
        """Convenience helper to check if running in production"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def session_cookie_name(self) -> str:
        # Browsers only accept the __Secure- prefix over https
        if self.IS_PRODUCTION:
            return f"__Secure-{self.SESSION_COOKIE_NAME}"
        return self.SESSION_COOKIE_NAME

    @property
    def cookie_secure(self) -> bool:
        return self.IS_PRODUCTION

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
try:
    settings = Settings()
    logger.info("Environment: %s, Debug: %s", settings.ENVIRONMENT, settings.DEBUG)
except ValidationError as e:
    logger.critical("Environment configuration error, missing or invalid settings:\n%s", e)
    sys.exit(1)
