import logging
import os
import re
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}
_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")


class ConfigError(Exception):
    """Raised when the environment does not describe a runnable configuration."""
    pass


def parse_duration(value: str) -> int:
    """
    Converts a duration such as "7d", "12h", "30m" or "3600" into seconds.
    A bare number is read as seconds.
    """
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ConfigError(f"Invalid duration '{value}'. Use a number optionally followed by s, m, h, d or w.")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]


class Config:
    """
    Settings read straight from environment variables (and a .env file if present).
    """
    # Server
    PORT: int = int(os.environ.get("PORT", 3000))
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")

    # Database
    MONGODB_URI: Optional[str] = os.environ.get("MONGODB_URI")
    MONGODB_DB_NAME: Optional[str] = os.environ.get("MONGODB_DB_NAME")

    # Authentication
    JWT_SECRET: Optional[str] = os.environ.get("JWT_SECRET")
    JWT_EXPIRES_IN: str = os.environ.get("JWT_EXPIRES_IN", "7d")
    JWT_ALGORITHM: str = "HS256"
    SALT_ROUNDS: int = int(os.environ.get("SALT_ROUNDS", 10))

    # Logging and rate limiting
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")
    RATE_LIMIT_STORAGE_URI: str = os.environ.get("RATE_LIMIT_STORAGE_URI", "memory://")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def jwt_expires_in_seconds(self) -> int:
        return parse_duration(self.JWT_EXPIRES_IN)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def validate(self) -> None:
        """Fails fast on a configuration the application cannot start with."""
        missing = [name for name in ("MONGODB_URI", "JWT_SECRET") if not getattr(self, name)]
        if missing:
            message = f"Missing required environment variables: {', '.join(missing)}"
            logger.error(message)
            raise ConfigError(message)

        if self.is_production:
            if self.JWT_SECRET == DEFAULT_JWT_SECRET:
                raise ConfigError("JWT_SECRET must be changed from default value in production")
            if len(self.JWT_SECRET) < 32:
                logger.warning("JWT_SECRET is less than 32 characters. Consider using a stronger secret in production.")

        # Raises ConfigError on a malformed value.
        self.jwt_expires_in_seconds


# Single importable settings instance
settings = Config()
