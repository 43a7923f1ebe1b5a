import pytest
from shared.engine_settings import EngineSettings, EngineSettingsError, load_engine_settings

ENV_KEYS = (
    "PERSONALIZATION_RETIREMENT_AGE",
    "PERSONALIZATION_INFLATION_HORIZON_MONTHS",
    "PERSONALIZATION_MAX_OPTIMIZATIONS",
    "PERSONALIZATION_MIN_OPTIMIZATION_SAVINGS",
)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_unset():
    assert load_engine_settings() == EngineSettings()


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PERSONALIZATION_RETIREMENT_AGE", "  ")

    assert load_engine_settings().retirement_age == 65


def test_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("PERSONALIZATION_RETIREMENT_AGE", "60")
    monkeypatch.setenv("PERSONALIZATION_INFLATION_HORIZON_MONTHS", "6")
    monkeypatch.setenv("PERSONALIZATION_MAX_OPTIMIZATIONS", "5")
    monkeypatch.setenv("PERSONALIZATION_MIN_OPTIMIZATION_SAVINGS", "2500.5")

    settings = load_engine_settings()

    assert settings == EngineSettings(
        retirement_age=60,
        inflation_horizon_months=6,
        max_optimizations_per_goal=5,
        min_optimization_savings=2500.5,
    )


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("PERSONALIZATION_RETIREMENT_AGE", "sixty"),
        ("PERSONALIZATION_RETIREMENT_AGE", "18"),
        ("PERSONALIZATION_INFLATION_HORIZON_MONTHS", "0"),
        ("PERSONALIZATION_MAX_OPTIMIZATIONS", "-1"),
        ("PERSONALIZATION_MIN_OPTIMIZATION_SAVINGS", "-100"),
        ("PERSONALIZATION_MIN_OPTIMIZATION_SAVINGS", "lots"),
    ],
)
def test_invalid_values_raise(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(EngineSettingsError):
        load_engine_settings()
