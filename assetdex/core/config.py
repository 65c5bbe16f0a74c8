# assetdex/core/config.py
"""
Application settings.

Values come from the process environment, optionally pre-loaded from an
``.env.<APP_ENV>`` file in the project root. Settings are built on first
access so importing this module never requires a complete environment.
"""
import os
from pathlib import Path
from typing import Dict, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings


# Project root: the directory holding pyproject.toml and the .env.* files
BASE_DIR = Path(__file__).resolve().parent.parent.parent

ENV_FILES: Dict[str, str] = {
    "dev": ".env.dev",
    "uat": ".env.uat",
    "prod": ".env.prod",
    "test": ".env.test",
}

_env_state: Dict[str, Optional[str]] = {"env_file": None, "warning": None}


def load_environment() -> None:
    """
    Load the .env file selected by APP_ENV (dev when unset).

    Variables already present in the process environment win over the file.
    A missing file is not an error; it is reported through
    ``get_env_load_state`` and logged at startup.
    """
    app_env = os.getenv("APP_ENV", "dev").lower()
    env_path = BASE_DIR / ENV_FILES.get(app_env, ENV_FILES["dev"])

    if env_path.exists():
        load_dotenv(env_path, override=False)
        _env_state.update(env_file=str(env_path), warning=None)
    else:
        _env_state.update(
            env_file=None,
            warning=f"Env file {env_path} not found. Using system environment variables only.",
        )


class Settings(BaseSettings):
    ENVIRONMENT: Literal["dev", "uat", "prod"] = "dev"

    # Logging; LOG_LEVEL defaults to INFO in prod and DEBUG elsewhere
    LOG_LEVEL: Optional[str] = None
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_FILE: Optional[str] = None  # e.g. "logs/app.log"

    # Access tokens are issued by the identity service; only decoded here
    JWT_SECRET_KEY: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"

    # Rack height used when a rack row has no explicit unit count
    RACK_TOTAL_UNITS: int = 42

    # Database
    DB_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30

    # Comma-separated list of allowed origins, or "*" for all origins
    # Example: "http://localhost:5173,http://localhost:3000"
    CORS_ORIGINS: str = "*"

    class Config:
        # load_environment() has already populated os.environ
        env_file = None
        case_sensitive = False

    @field_validator("RACK_TOTAL_UNITS")
    @classmethod
    def validate_rack_total_units(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"RACK_TOTAL_UNITS must be >= 1, got {value}")
        return value

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "INFO" if self.ENVIRONMENT == "prod" else "DEBUG"

    @property
    def cors_origin_list(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Build the settings on first call and return the same instance afterwards."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


class _SettingsProxy:
    """Module-level handle that defers building Settings until first use."""

    def __getattr__(self, name):
        return getattr(get_settings(), name)

    def __repr__(self):
        return repr(get_settings())


settings = _SettingsProxy()


def get_env_load_state() -> Dict[str, Optional[str]]:
    """Which env file was loaded, and the warning to log if none was."""
    return dict(_env_state)
