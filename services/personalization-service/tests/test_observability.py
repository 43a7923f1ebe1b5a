import logging
from datetime import date

from finance_model import UserProfile
from shared.observability import bind_request_context, hash_payload, reset_request_context
from shared.observability.telemetry import _RequestContextFilter


def make_profile(location: str = "Pune") -> UserProfile:
    return UserProfile(
        user_id="user-1",
        age=30,
        monthly_income=100_000.0,
        location=location,
        risk_tier="moderate",
        profession="Teacher",
    )


def test_hash_payload_is_stable_for_dataclasses() -> None:
    assert hash_payload(make_profile()) == hash_payload(make_profile())
    assert hash_payload(make_profile()) != hash_payload(make_profile(location="Delhi"))


def test_hash_payload_handles_dates_and_key_order() -> None:
    first = hash_payload({"as_of": date(2024, 3, 1), "food": 100})
    second = hash_payload({"food": 100, "as_of": date(2024, 3, 1)})

    assert first == second
    assert len(first) == 64


def test_context_filter_stamps_request_and_version() -> None:
    record = _make_record()
    token = bind_request_context("req-42")
    try:
        _RequestContextFilter("personalization-service", "2024.1", traces_enabled=False).filter(record)
    finally:
        reset_request_context(token)

    assert record.request_id == "req-42"
    assert record.tables_version == "2024.1"
    assert record.service_name == "personalization-service"
    assert (record.trace_id, record.span_id) == (None, None)


def _make_record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, {"event": "x"}, None, None)
