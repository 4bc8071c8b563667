"""
Configuration package for the Map Orchestration Engine.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    GoogleMapsSettings,
    GroundingSettings,
    FramingSettings,
    OrchestrationSettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "GoogleMapsSettings",
    "GroundingSettings",
    "FramingSettings",
    "OrchestrationSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
