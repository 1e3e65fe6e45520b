"""Event window selection and the empty-versus-failed distinction."""

from datetime import timedelta

from winhealth.collectors import event_collector
from winhealth.collectors.base_collector import PowerShellError
from winhealth.collectors.event_collector import EventLogCollector, select_recent

from .conftest import FIXED_NOW


def _raw(minutes_ago, level=2, event_id=7000, message="The service terminated unexpectedly."):
    return {
        "TimeCreated": (FIXED_NOW - timedelta(minutes=minutes_ago)).strftime("%Y-%m-%dT%H:%M:%S"),
        "Id": event_id,
        "Level": level,
        "LogName": "System",
        "ProviderName": "Service Control Manager",
        "Message": message,
    }


def _collector(logger, console, **kwargs):
    return EventLogCollector(logger=logger, console=console, clock=lambda: FIXED_NOW, **kwargs)


def test_select_recent_keeps_newest(make_event):
    events = [make_event(minutes_ago=m) for m in range(0, 250, 10)]

    selected = select_recent(events, FIXED_NOW, timedelta(hours=24), limit=20)

    assert len(selected) == 20
    assert [e["time_created"] for e in selected] == sorted(
        (e["time_created"] for e in events), reverse=True
    )[:20]


def test_select_recent_applies_window_and_levels(make_event):
    events = [
        make_event(minutes_ago=5),
        make_event(minutes_ago=23 * 60, level="Warning"),
        make_event(minutes_ago=25 * 60),
        make_event(minutes_ago=-10),
        make_event(minutes_ago=1, level="Information"),
    ]

    selected = select_recent(events, FIXED_NOW, timedelta(hours=24), limit=20)

    assert [e["level"] for e in selected] == ["Error", "Warning"]


def test_collect_parses_and_caps(monkeypatch, logger, console):
    raw = [_raw(minutes_ago=m, level=2 if m % 20 else 3) for m in range(30, 0, -1)]
    raw.append(_raw(minutes_ago=0, level=4))
    monkeypatch.setattr(event_collector, "run_powershell", lambda script, timeout=60: raw)

    events = _collector(logger, console).collect()

    assert len(events) == 20
    assert events[0]["time_created"] == FIXED_NOW - timedelta(minutes=1)
    assert events[-1]["time_created"] == FIXED_NOW - timedelta(minutes=20)
    assert {e["level"] for e in events} == {"Error", "Warning"}
    assert set(events[0]) == {"time_created", "id", "level", "log", "provider", "message"}


def test_single_event_object(monkeypatch, logger, console):
    monkeypatch.setattr(
        event_collector, "run_powershell",
        lambda script, timeout=60: [_raw(minutes_ago=3, event_id=41, message="Line one\r\nLine two\r\n")],
    )

    events = _collector(logger, console).collect()

    assert len(events) == 1
    assert events[0]["id"] == 41
    assert events[0]["message"] == "Line one\r\nLine two"
    assert "Line one" in console.file.getvalue()


def test_zero_matches_is_success(monkeypatch, logger, console):
    monkeypatch.setattr(event_collector, "run_powershell", lambda script, timeout=60: [])

    events = _collector(logger, console).collect()

    assert events == []
    assert logger.messages("WARNING") == []
    assert "No Error/Warning events in the last 24 hours" in logger.messages("INFO")


def test_query_failure_returns_none(monkeypatch, logger, console):
    def failing(script, timeout=60):
        raise PowerShellError("The specified channel could not be found")

    monkeypatch.setattr(event_collector, "run_powershell", failing)

    events = _collector(logger, console).collect()

    assert events is None
    warnings = logger.messages("WARNING")
    assert len(warnings) == 1
    assert warnings[0].startswith("Event Log check failed")


def test_bad_timestamp_is_a_query_fault(monkeypatch, logger, console):
    bad = _raw(minutes_ago=1)
    bad["TimeCreated"] = "not a date"
    monkeypatch.setattr(event_collector, "run_powershell", lambda script, timeout=60: [bad])

    assert _collector(logger, console).collect() is None


def test_script_filters_logs_levels_and_window():
    collector = EventLogCollector(
        log_names=["System", "Application"], window=timedelta(hours=12), max_events=15
    )

    script = collector.build_script()

    assert "$logs = @('System', 'Application')" in script
    assert "LogName = $log" in script
    assert "-MaxEvents 15" in script
    assert "Level = @(2, 3)" in script
    assert "AddHours(-12.0)" in script
    assert "NoMatchingEventsFound" in script
