"""
Library configuration.

Centralized tuning knobs for the numeric kernel, read from environment
variables prefixed with ``NUMTOWER_``. Precision itself is never configured
here: it is always supplied by the caller through a PrecisionPolicy.
"""

import sys
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Numeric tower settings"""

    model_config = SettingsConfigDict(
        env_prefix="NUMTOWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Iteration control
    MAX_ITERATIONS: int = Field(default=10000, ge=1)
    GUARD_DIGITS: int = Field(default=4, ge=0)

    # Kernel tuning
    LN_TERMS_PER_DIGIT: int = Field(default=17, ge=1)
    LINEAR_EXPONENT_LIMIT: int = Field(default=1024, ge=1)
    RATIONAL_ROOT_LIMIT: int = Field(default=256, ge=1)

    # Caches
    FACTORIAL_CACHE_LIMIT: int = Field(default=sys.maxsize, ge=2)

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"  # json or text
    LOG_FILE: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
