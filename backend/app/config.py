"""Application configuration settings."""
import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Triple Match Level Generator"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS settings - as comma-separated string or JSON array
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Game rules shared with the client
    slot_capacity: int = 7
    tile_size: float = 80.0

    # Assignment engine defaults (LevelConfig may override per level)
    dig_probability: float = 0.6
    buffer_safety_margin: int = 1
    dig_candidates: int = 3

    # Canvas geometry (mobile safe area)
    canvas_center_x: float = 375.0
    canvas_center_y: float = 580.0
    tile_jitter: float = 12.0
    safe_min_x: float = 90.0
    safe_max_x: float = 660.0
    safe_min_y: float = 240.0
    safe_max_y: float = 910.0

    # Bounds for scattered pile placement
    scatter_min_x: float = 50.0
    scatter_max_x: float = 700.0
    scatter_min_y: float = 200.0
    scatter_max_y: float = 950.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("dig_probability")
    @classmethod
    def _check_dig_probability(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("dig_probability must be within [0, 1]")
        return value

    @field_validator("slot_capacity", "dig_candidates")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from string (comma-separated or JSON)."""
        if not self.cors_origins:
            return ["http://localhost:5173"]

        # Try JSON parse first
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            pass

        # Fall back to comma-separated
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Don't use lru_cache in production to allow env var updates
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance (cached in production for performance)."""
    global _settings
    if _settings is None or os.getenv("DEBUG", "false").lower() == "true":
        _settings = Settings()
    return _settings
