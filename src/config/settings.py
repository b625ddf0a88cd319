"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Optional environment variables:
        - HOST: Server host (default: 0.0.0.0)
        - PORT: Server port (default: 8080)
        - ENVIRONMENT: Environment name (development, staging, production)
        - CATALOG_SEED: Seed for the mock product catalog (default: 2024)
        - CHECKOUT_BASE_URL: Base URL of the mock checkout redirect
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Catalog
    # ==========================================================================
    catalog_seed: int = Field(
        default=2024,
        description="Seed for the deterministic mock catalog"
    )

    # ==========================================================================
    # Round Timing
    # ==========================================================================
    countdown_seconds: int = Field(
        default=3,
        ge=0,
        description="Lead-in ticks (1 Hz) before swiping starts"
    )
    reject_cooldown_seconds: float = Field(
        default=0.6,
        ge=0,
        description="Input pause after a reject swipe"
    )
    keep_cooldown_seconds: float = Field(
        default=1.2,
        ge=0,
        description="Input pause after a keep swipe"
    )

    # ==========================================================================
    # Round Rules
    # ==========================================================================
    max_sector_draws: int = Field(
        default=50,
        ge=1,
        description="Sector draws attempted before falling back to a uniform pick"
    )
    max_replays: int = Field(
        default=2,
        ge=0,
        description="Replays allowed after a round reaches the summary"
    )
    session_ttl_seconds: int = Field(
        default=3600,
        description="Round session TTL in seconds"
    )

    # ==========================================================================
    # Checkout
    # ==========================================================================
    checkout_base_url: str = Field(
        default="https://checkout.example.com/demo",
        description="Base URL for mock checkout redirects"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)
