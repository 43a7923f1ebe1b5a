from __future__ import annotations

"""
Shared helpers for configuring the personalization engines.

The calculators themselves never read the environment; the HTTP service loads
an `EngineSettings` instance once at startup and hands it to the orchestrator
so identical inputs keep producing identical outputs.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_RETIREMENT_AGE = 65
DEFAULT_INFLATION_HORIZON_MONTHS = 12
DEFAULT_MAX_OPTIMIZATIONS = 3
DEFAULT_MIN_OPTIMIZATION_SAVINGS = 1000.0


class EngineSettingsError(RuntimeError):
    """Raised when engine configuration cannot be constructed."""


@dataclass(frozen=True, slots=True)
class EngineSettings:
    retirement_age: int = DEFAULT_RETIREMENT_AGE
    inflation_horizon_months: int = DEFAULT_INFLATION_HORIZON_MONTHS
    max_optimizations_per_goal: int = DEFAULT_MAX_OPTIMIZATIONS
    min_optimization_savings: float = DEFAULT_MIN_OPTIMIZATION_SAVINGS


def load_engine_settings(
    *,
    retirement_age_env: str = "PERSONALIZATION_RETIREMENT_AGE",
    horizon_env: str = "PERSONALIZATION_INFLATION_HORIZON_MONTHS",
    max_optimizations_env: str = "PERSONALIZATION_MAX_OPTIMIZATIONS",
    min_savings_env: str = "PERSONALIZATION_MIN_OPTIMIZATION_SAVINGS",
) -> EngineSettings:
    """
    Construct EngineSettings from environment variables.

    Args:
        retirement_age_env: Env var overriding the retirement age used by goal math.
        horizon_env: Env var overriding the default inflation horizon in months.
        max_optimizations_env: Env var capping spending optimizations kept per goal.
        min_savings_env: Env var overriding the minimum monthly savings worth suggesting.
    """

    retirement_age = _parse_int(os.getenv(retirement_age_env), DEFAULT_RETIREMENT_AGE, retirement_age_env)
    horizon = _parse_int(os.getenv(horizon_env), DEFAULT_INFLATION_HORIZON_MONTHS, horizon_env)
    max_optimizations = _parse_int(
        os.getenv(max_optimizations_env), DEFAULT_MAX_OPTIMIZATIONS, max_optimizations_env
    )
    min_savings = _parse_float(os.getenv(min_savings_env), DEFAULT_MIN_OPTIMIZATION_SAVINGS, min_savings_env)

    if retirement_age <= 18:
        raise EngineSettingsError(f"{retirement_age_env} must be greater than 18 (received {retirement_age})")
    if horizon <= 0:
        raise EngineSettingsError(f"{horizon_env} must be positive (received {horizon})")
    if max_optimizations <= 0:
        raise EngineSettingsError(f"{max_optimizations_env} must be positive (received {max_optimizations})")
    if min_savings < 0:
        raise EngineSettingsError(f"{min_savings_env} must not be negative (received {min_savings})")

    return EngineSettings(
        retirement_age=retirement_age,
        inflation_horizon_months=horizon,
        max_optimizations_per_goal=max_optimizations,
        min_optimization_savings=min_savings,
    )


def _parse_float(raw_value: Optional[str], default: float, env_key: str) -> float:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return float(raw_value)
    except ValueError as exc:
        raise EngineSettingsError(f"{env_key} must be numeric (received '{raw_value}')") from exc


def _parse_int(raw_value: Optional[str], default: int, env_key: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return int(raw_value)
    except ValueError as exc:
        raise EngineSettingsError(f"{env_key} must be an integer (received '{raw_value}')") from exc
