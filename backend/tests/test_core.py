from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from goalflow.core.clock import fixed_clock, system_clock, utc_today
from goalflow.core.config import Settings
from goalflow.core.context import bind_interview_id, get_interview_id
from goalflow.core.logging import InterviewIdFilter, configure_logging


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("MIN_SESSIONS_REQUIRED", "12")
    monkeypatch.setenv("DEFAULT_TIME_OF_DAY", "07:00")
    loaded = Settings()
    assert loaded.min_sessions_required == 12
    assert loaded.default_time_of_day == "07:00"
    assert loaded.opik_enabled is False


def test_fixed_clock_treats_naive_values_as_utc() -> None:
    clock = fixed_clock(datetime(2026, 10, 19, 23, 30))
    assert clock() == datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)
    assert utc_today(clock) == date(2026, 10, 19)


def test_utc_today_converts_offsets() -> None:
    from zoneinfo import ZoneInfo

    late_evening = datetime(2026, 10, 19, 20, 0, tzinfo=ZoneInfo("America/Los_Angeles"))
    assert utc_today(fixed_clock(late_evening)) == date(2026, 10, 20)


def test_system_clock_is_aware() -> None:
    assert system_clock().tzinfo is not None


def test_interview_id_binding_is_scoped() -> None:
    assert get_interview_id() is None
    with bind_interview_id("abc"):
        assert get_interview_id() == "abc"
    assert get_interview_id() is None


def test_log_filter_adds_interview_id() -> None:
    record = logging.LogRecord("goalflow", logging.INFO, __file__, 1, "hello", None, None)
    log_filter = InterviewIdFilter()
    assert log_filter.filter(record)
    assert record.interview_id == "-"
    with bind_interview_id("abc"):
        log_filter.filter(record)
    assert record.interview_id == "abc"


def test_configure_logging_is_idempotent() -> None:
    configure_logging(log_level="DEBUG")
    handlers = list(logging.getLogger().handlers)
    configure_logging(log_level="DEBUG")
    assert logging.getLogger().handlers == handlers


def test_startup_configures_logging_and_opik(monkeypatch) -> None:
    from goalflow import main

    calls = []
    monkeypatch.setattr(main.settings, "log_level", "WARNING")
    monkeypatch.setattr(main, "configure_logging", lambda *, log_level: calls.append(("logging", log_level)))
    monkeypatch.setattr(main, "init_opik", lambda: calls.append(("opik", None)))

    main.startup()

    assert calls == [("logging", "WARNING"), ("opik", None)]
