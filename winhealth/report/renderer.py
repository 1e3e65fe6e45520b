"""Report renderer - builds the self-contained HTML health report."""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from jinja2 import Environment

from ..collectors.service_collector import is_unhealthy
from ..utils.logger import RunLogger
from .opener import open_report


DISK_HEADING = "Disk Usage"
SERVICE_HEADING = "Critical Services"
EVENT_HEADING = "Recent Errors and Warnings (Last {hours:g} Hours)"

NO_EVENTS_NOTICE = "No errors or warnings found in the last {hours:g} hours. Great job!"
EVENTS_UNAVAILABLE_NOTICE = "Event log data unavailable."

REPORT_FILENAME = "SystemHealthReport_{stamp}.html"

STYLE_SHEET = """
body { font-family: Segoe UI, Arial, sans-serif; margin: 20px; color: #222; }
h1 { color: #1f4e79; }
h2 { color: #2e75b6; border-bottom: 2px solid #2e75b6; padding-bottom: 4px; }
p.meta { color: #666; font-size: 0.9em; }
table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }
th, td { border: 1px solid #ccc; padding: 6px 10px; text-align: left; vertical-align: top; }
th { background-color: #2e75b6; color: #fff; }
tr:nth-child(even) { background-color: #f2f2f2; }
td.message { white-space: pre-wrap; font-size: 0.9em; }
.healthy { color: green; font-weight: bold; }
.unhealthy { color: red; font-weight: bold; }
.notice { padding: 10px; font-weight: bold; }
.notice.success { color: green; }
.notice.neutral { color: #666; }
"""

REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>{{ style_sheet|safe }}</style>
</head>
<body>
<h1>{{ title }}</h1>
<p class="meta">Generated {{ generated }} on {{ machine_name }}{% if os_description %} ({{ os_description }}){% endif %}</p>

<section id="disk">
<h2>{{ disk_heading }}</h2>
<table>
<thead><tr><th>Drive</th><th>Total (GB)</th><th>Free (GB)</th><th>Free (%)</th><th>Used (%)</th></tr></thead>
<tbody>
{%- for disk in disks %}
<tr><td>{{ disk.drive }}</td><td>{{ "%.2f"|format(disk.total_gb) }}</td><td>{{ "%.2f"|format(disk.free_gb) }}</td><td>{{ disk.free_percent }}%</td><td>{{ disk.used_percent }}%</td></tr>
{%- endfor %}
</tbody>
</table>
</section>

<section id="services">
<h2>{{ service_heading }}</h2>
<p class="meta">{{ unhealthy_count }} of {{ services|length }} services need attention</p>
<table>
<thead><tr><th>Name</th><th>Display Name</th><th>Status</th><th>Start Type</th></tr></thead>
<tbody>
{%- for row in services %}
<tr><td>{{ row.service.name }}</td><td>{{ row.service.display_name }}</td><td class="{{ row.status_class }}">{{ row.service.state }}</td><td>{{ row.service.start_mode }}</td></tr>
{%- endfor %}
</tbody>
</table>
</section>

<section id="events">
<h2>{{ event_heading }}</h2>
{%- if events is none %}
<p class="notice neutral">{{ events_unavailable_notice }}</p>
{%- elif not events %}
<p class="notice success">{{ no_events_notice }}</p>
{%- else %}
<table>
<thead><tr><th>Time</th><th>Event ID</th><th>Level</th><th>Source</th><th>Message</th></tr></thead>
<tbody>
{%- for event in events %}
<tr><td>{{ event.time_created.strftime("%Y-%m-%d %H:%M:%S") }}</td><td>{{ event.id }}</td><td class="{{ 'unhealthy' if event.level == 'Error' else '' }}">{{ event.level }}</td><td>{{ event.provider }}</td><td class="message">{{ event.message }}</td></tr>
{%- endfor %}
</tbody>
</table>
{%- endif %}
</section>
</body>
</html>
"""

_environment = Environment(autoescape=True)


class ReportRenderer:
    """Renders collected health data into a single HTML report."""

    def __init__(
        self,
        machine_name: str,
        output_dir: Path,
        os_description: str = "",
        max_events: int = 20,
        window_hours: float = 24,
        clock: Callable[[], datetime] = datetime.now,
        opener: Optional[Callable[..., Any]] = open_report,
        logger: Optional[RunLogger] = None,
    ):
        """Initialize the renderer.

        Args:
            machine_name: Host name shown in the title.
            output_dir: Directory the report is written to (normally the desktop).
            os_description: OS name and release shown under the title.
            max_events: Maximum event rows rendered.
            window_hours: Event window, used in headings and notices.
            clock: Source of the render time.
            opener: Called as opener(path, logger=...) after writing. None skips opening.
            logger: Run logger for diagnostics.
        """
        self.machine_name = machine_name
        self.output_dir = Path(output_dir)
        self.os_description = os_description
        self.max_events = max_events
        self.window_hours = window_hours
        self.clock = clock
        self.opener = opener
        self.logger = logger or RunLogger()
        self.template = _environment.from_string(REPORT_TEMPLATE)

    @property
    def title(self) -> str:
        return f"System Health Report - {self.machine_name}"

    @property
    def event_heading(self) -> str:
        return EVENT_HEADING.format(hours=self.window_hours)

    def report_path(self, now: datetime) -> Path:
        """Output path for a report rendered at `now`.

        Two renders within the same second share a path; the later one wins.
        """
        return self.output_dir / REPORT_FILENAME.format(stamp=now.strftime("%Y%m%d_%H%M%S"))

    def render_html(
        self,
        disks: List[Dict[str, Any]],
        services: List[Dict[str, Any]],
        events: Optional[List[Dict[str, Any]]],
        now: Optional[datetime] = None,
    ) -> str:
        """Render the report document.

        Args:
            disks: Disk records.
            services: Service records.
            events: Event records, or None when the event query failed.
            now: Render time shown in the header.

        Returns:
            Complete HTML document.
        """
        now = now or self.clock()

        service_rows = [
            {"service": svc, "status_class": "unhealthy" if is_unhealthy(svc) else "healthy"}
            for svc in services
        ]

        if events is not None:
            events = sorted(events, key=lambda e: e["time_created"], reverse=True)[:self.max_events]

        return self.template.render(
            title=self.title,
            style_sheet=STYLE_SHEET,
            generated=now.strftime("%Y-%m-%d %H:%M:%S"),
            machine_name=self.machine_name,
            os_description=self.os_description,
            disk_heading=DISK_HEADING,
            service_heading=SERVICE_HEADING,
            event_heading=self.event_heading,
            disks=disks,
            services=service_rows,
            unhealthy_count=sum(1 for row in service_rows if row["status_class"] == "unhealthy"),
            events=events,
            no_events_notice=NO_EVENTS_NOTICE.format(hours=self.window_hours),
            events_unavailable_notice=EVENTS_UNAVAILABLE_NOTICE,
        )

    def write_report(self, html: str, path: Path) -> Path:
        """Write the document in one step: temp file in the same directory, then replace."""
        path.parent.mkdir(parents=True, exist_ok=True)

        handle = tempfile.NamedTemporaryFile(
            'w', encoding='utf-8', dir=path.parent, prefix=".", suffix=".tmp", delete=False
        )
        try:
            with handle:
                handle.write(html)
            os.replace(handle.name, path)
        except BaseException:
            if os.path.exists(handle.name):
                os.remove(handle.name)
            raise

        return path

    def generate(
        self,
        disks: List[Dict[str, Any]],
        services: List[Dict[str, Any]],
        events: Optional[List[Dict[str, Any]]],
    ) -> Path:
        """Render, write and open the report.

        Raises:
            OSError: If the report cannot be written.

        Returns:
            Path of the written report.
        """
        now = self.clock()
        path = self.report_path(now)

        html = self.render_html(disks, services, events, now=now)
        self.write_report(html, path)
        self.logger.info(f"Report written to {path}")

        if self.opener is not None:
            self.opener(path, logger=self.logger)

        return path
