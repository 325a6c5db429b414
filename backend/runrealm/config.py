"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./runrealm.db",
        description="Database connection URL for the key-value state store"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # === Run tracking ===
    min_accuracy_m: float = Field(default=20.0, gt=0)
    min_point_interval_ms: int = Field(default=1000, ge=0)
    min_distance_between_points_m: float = Field(default=5.0, ge=0)
    smoothing_factor: float = Field(default=0.3)
    territory_min_distance_m: float = Field(default=500.0, ge=0)
    territory_max_deviation_m: float = Field(default=50.0, ge=0)
    stats_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="How often live stats are emitted while recording"
    )

    # === Territories ===
    proximity_threshold_m: float = Field(default=100.0, gt=0)
    intent_expiry_hours: int = Field(default=24, gt=0)
    home_chain_id: int = Field(
        default=7001,
        description="Chain where territories are minted directly (ZetaChain testnet)"
    )

    # === Claim backend ===
    claim_backend_url: Optional[str] = Field(default=None)
    claim_backend_api_key: Optional[str] = Field(default=None)
    claim_backend_timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('smoothing_factor')
    @classmethod
    def check_smoothing_factor(cls, v: float) -> float:
        """Smoothing factor is a blend weight, so it must stay within 0..1."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("smoothing_factor must be between 0 and 1")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
