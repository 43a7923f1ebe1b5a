"""
Shared utilities for the personalization services.

This package contains code shared across services:
- engine_settings: Environment-driven configuration for the finance engines
- observability: Telemetry, logging, and privacy utilities
"""

from .engine_settings import (
    EngineSettings,
    EngineSettingsError,
    load_engine_settings,
)

__all__ = [
    "EngineSettings",
    "EngineSettingsError",
    "load_engine_settings",
]
