"""
Configuration management system using Pydantic Settings.
Supports environment-based configuration for the map orchestration service.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from enum import Enum


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GoogleMapsSettings(BaseSettings):
    """Places and elevation service configuration"""

    api_key: Optional[str] = Field(default=None)
    places_url: str = Field(default="https://places.googleapis.com/v1/places")
    elevation_url: str = Field(
        default="https://maps.googleapis.com/maps/api/elevation/json"
    )
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    model_config = {"env_prefix": "GOOGLE_MAPS_"}


class GroundingSettings(BaseSettings):
    """Grounded search (maps grounding) configuration"""

    api_key: Optional[str] = Field(default=None)
    api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models"
    )
    model_name: str = Field(default="gemini-2.5-flash")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=120.0)
    default_system_instruction: Optional[str] = Field(default=None)

    model_config = {"env_prefix": "GROUNDING_"}


class FramingSettings(BaseSettings):
    """Camera framing configuration"""

    default_padding: List[float] = Field(
        default_factory=lambda: [0.05, 0.05, 0.05, 0.05]
    )
    fly_duration_ms: int = Field(default=1500, ge=0, le=10000)
    field_of_view_deg: float = Field(default=35.0, gt=0.0, lt=180.0)
    min_range_m: float = Field(default=500.0, gt=0.0)
    max_range_m: float = Field(default=2_000_000.0, gt=0.0)
    default_tilt: float = Field(default=45.0, ge=0.0, le=90.0)
    altitude_offset_m: float = Field(default=200.0, ge=0.0)

    @field_validator('default_padding', mode='before')
    @classmethod
    def parse_padding(cls, v):
        """Parse padding from a comma separated environment variable"""
        if isinstance(v, str):
            return [float(part.strip()) for part in v.split(",") if part.strip()]
        return v

    @field_validator('default_padding')
    @classmethod
    def validate_padding(cls, v):
        if len(v) != 4:
            raise ValueError("default_padding needs exactly four insets")
        if any(not 0.0 <= inset < 1.0 for inset in v):
            raise ValueError("padding insets must be in [0, 1)")
        return v

    model_config = {"env_prefix": "FRAMING_"}


class OrchestrationSettings(BaseSettings):
    """Tool orchestration behaviour"""

    # When enabled, a grounding resolution that finishes after a newer marker
    # write is dropped instead of overwriting the newer markers.
    discard_stale_resolutions: bool = Field(default=True)

    model_config = {"env_prefix": "ORCHESTRATION_"}


class Settings(BaseSettings):
    """Main application settings"""

    # Application Configuration
    app_name: str = Field(default="Map Orchestration Engine")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False)

    # Logging Configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="json")

    # Nested Settings
    google_maps: GoogleMapsSettings = Field(default_factory=GoogleMapsSettings)
    grounding: GroundingSettings = Field(default_factory=GroundingSettings)
    framing: FramingSettings = Field(default_factory=FramingSettings)
    orchestration: OrchestrationSettings = Field(
        default_factory=OrchestrationSettings
    )

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = Settings()
    return settings
