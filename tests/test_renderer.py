"""HTML report rendering and writing."""

from datetime import datetime
from html.parser import HTMLParser

import pytest

from winhealth.report.renderer import (
    DISK_HEADING,
    EVENTS_UNAVAILABLE_NOTICE,
    SERVICE_HEADING,
    ReportRenderer,
)

from .conftest import FIXED_NOW


class SectionParser(HTMLParser):
    """Collects section ids, h2 headings and table rows per section."""

    def __init__(self):
        super().__init__()
        self.sections = []
        self.headings = []
        self.rows = {}
        self._in_h2 = False

    def handle_starttag(self, tag, attrs):
        if tag == "section":
            self.sections.append(dict(attrs)["id"])
            self.rows[self.sections[-1]] = 0
        elif tag == "h2":
            self._in_h2 = True
        elif tag == "tr" and self.sections:
            self.rows[self.sections[-1]] += 1

    def handle_endtag(self, tag):
        if tag == "h2":
            self._in_h2 = False

    def handle_data(self, data):
        if self._in_h2:
            self.headings.append(data)


def parse(html):
    parser = SectionParser()
    parser.feed(html)
    return parser


@pytest.fixture
def renderer(tmp_path, logger):
    return ReportRenderer(
        machine_name="WS-042",
        output_dir=tmp_path / "Desktop",
        os_description="Windows 11",
        clock=lambda: FIXED_NOW,
        opener=None,
        logger=logger,
    )


DISKS = [{
    "drive": "C:", "total_gb": 500.0, "free_gb": 100.0, "used_gb": 400.0,
    "free_percent": 20, "used_percent": 80,
}]


def _service(name, state, start_mode):
    return {"name": name, "display_name": name + " display", "state": state, "start_mode": start_mode}


def test_sections_in_fixed_order(renderer, make_event):
    html = renderer.render_html(DISKS, [_service("Spooler", "Running", "Automatic")], [make_event(5)])

    parsed = parse(html)
    assert parsed.sections == ["disk", "services", "events"]
    assert parsed.headings == [
        DISK_HEADING,
        SERVICE_HEADING,
        "Recent Errors and Warnings (Last 24 Hours)",
    ]


def test_title_and_header(renderer):
    html = renderer.render_html([], [], [])

    assert "<title>System Health Report - WS-042</title>" in html
    assert "Generated 2026-10-18 09:30:00 on WS-042 (Windows 11)" in html
    assert "<style>" in html
    assert "<link" not in html


def test_disk_row(renderer):
    html = renderer.render_html(DISKS, [], [])

    assert "<td>C:</td><td>500.00</td><td>100.00</td><td>20%</td><td>80%</td>" in html


def test_stopped_automatic_service_flagged(renderer):
    html = renderer.render_html([], [_service("Spooler", "Stopped", "Automatic")], [])

    assert '<td class="unhealthy">Stopped</td>' in html
    assert "1 of 1 services need attention" in html


def test_disabled_service_not_flagged(renderer):
    html = renderer.render_html([], [_service("LanmanServer", "Stopped", "Disabled")], [])

    assert '<td class="healthy">Stopped</td>' in html
    assert "0 of 1 services need attention" in html


def test_running_manual_service_healthy(renderer):
    html = renderer.render_html([], [_service("Dhcp", "Running", "Manual")], [])

    assert '<td class="healthy">Running</td>' in html


def test_no_events_shows_success_notice(renderer):
    html = renderer.render_html([], [], [])

    assert "No errors or warnings found in the last 24 hours" in html
    assert EVENTS_UNAVAILABLE_NOTICE not in html
    assert parse(html).rows["events"] == 0


def test_failed_event_query_shows_neutral_notice(renderer):
    html = renderer.render_html([], [], None)

    assert EVENTS_UNAVAILABLE_NOTICE in html
    assert "No errors or warnings found" not in html
    assert parse(html).rows["events"] == 0


def test_event_rows_capped_at_twenty(renderer, make_event):
    events = [make_event(minutes_ago=m, event_id=m) for m in range(30)]

    html = renderer.render_html([], [], events)

    # header row plus twenty event rows
    assert parse(html).rows["events"] == 21
    assert html.count('<td class="message">') == 20
    assert "<td>19</td>" in html
    assert "<td>20</td>" not in html


def test_dynamic_text_escaped(renderer, make_event):
    event = make_event(1, message="<script>alert('x')</script>\nsecond line")

    html = renderer.render_html([], [_service("A&B", "Running", "Automatic")], [event])

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "A&amp;B" in html
    assert "second line" in html


def test_generate_writes_timestamped_file(renderer, tmp_path):
    path = renderer.generate(DISKS, [], [])

    assert path == tmp_path / "Desktop" / "SystemHealthReport_20261018_093000.html"
    assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
    assert [p.name for p in path.parent.iterdir()] == [path.name]


def test_generate_with_empty_sets(renderer):
    path = renderer.generate([], [], None)

    parsed = parse(path.read_text(encoding="utf-8"))
    assert parsed.sections == ["disk", "services", "events"]
    # header rows only
    assert parsed.rows["disk"] == 1
    assert parsed.rows["services"] == 1


def test_generate_calls_opener(tmp_path, logger):
    opened = []
    renderer = ReportRenderer(
        "WS-042", tmp_path, clock=lambda: FIXED_NOW,
        opener=lambda path, logger=None: opened.append(path), logger=logger,
    )

    path = renderer.generate([], [], [])

    assert opened == [path]


def test_unwritable_destination_raises(tmp_path, logger):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    renderer = ReportRenderer("WS-042", blocker, clock=lambda: FIXED_NOW, opener=None, logger=logger)

    with pytest.raises(OSError):
        renderer.generate([], [], [])


def test_report_path_uses_render_time(renderer, tmp_path):
    path = renderer.report_path(datetime(2026, 1, 2, 3, 4, 5))

    assert path.name == "SystemHealthReport_20260102_030405.html"
