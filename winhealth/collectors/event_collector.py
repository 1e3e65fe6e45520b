"""Event log collector - gathers recent errors and warnings from Windows event logs."""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from rich.console import Console

from .base_collector import BaseCollector, ps_quote, run_powershell
from ..utils.logger import RunLogger


# Windows event levels kept in the report
LEVEL_LABELS = {
    2: "Error",
    3: "Warning",
}

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def select_recent(
    events: Iterable[Dict[str, Any]],
    now: datetime,
    window: timedelta,
    limit: int,
) -> List[Dict[str, Any]]:
    """Keep Error/Warning events inside [now - window, now], newest first.

    Args:
        events: Event records with a datetime "time_created".
        now: End of the window.
        window: Length of the window.
        limit: Maximum number of events returned.

    Returns:
        At most `limit` events, the most recent ones.
    """
    since = now - window
    matching = [
        e for e in events
        if e.get("level") in LEVEL_LABELS.values() and since <= e["time_created"] <= now
    ]
    matching.sort(key=lambda e: e["time_created"], reverse=True)
    return matching[:max(limit, 0)]


class EventLogCollector(BaseCollector):
    """Collects Error and Warning entries from the System and Application logs.

    collect() returns an empty list when nothing matched and None when the
    query itself failed.
    """

    columns = (
        ("time_created", "Time"),
        ("id", "Event ID"),
        ("level", "Level"),
        ("provider", "Source"),
        ("message", "Message"),
    )

    CONSOLE_MESSAGE_WIDTH = 80

    def __init__(
        self,
        log_names: Iterable[str] = ("System", "Application"),
        window: timedelta = timedelta(hours=24),
        max_events: int = 20,
        logger: Optional[RunLogger] = None,
        console: Optional[Console] = None,
        timeout: int = 60,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize event log collector.

        Args:
            log_names: Event logs to scan.
            window: How far back to look.
            max_events: Maximum number of events returned.
            logger: Run logger for diagnostics.
            console: Console for the collected table.
            timeout: Seconds to wait for PowerShell.
            clock: Source of the current local time.
        """
        super().__init__(logger, console)
        self.log_names = list(log_names)
        self.window = window
        self.max_events = max_events
        self.timeout = timeout
        self.clock = clock

    @property
    def collector_name(self) -> str:
        return "event_log"

    @property
    def window_label(self) -> str:
        hours = self.window.total_seconds() / 3600
        return f"last {hours:g} hours"

    def failure_result(self) -> Optional[List[Dict[str, Any]]]:
        return None

    def build_script(self) -> str:
        logs = ", ".join(ps_quote(name) for name in self.log_names)
        levels = ", ".join(str(level) for level in LEVEL_LABELS)
        hours = self.window.total_seconds() / 3600
        # Get-WinEvent returns each log newest first, so max_events per log
        # always covers the overall most recent max_events
        return f'''
        $start = (Get-Date).AddHours(-{hours!r})
        $logs = @({logs})
        $events = foreach ($log in $logs) {{
            $filter = @{{
                LogName = $log
                Level = @({levels})
                StartTime = $start
            }}
            try {{
                Get-WinEvent -FilterHashtable $filter -MaxEvents {max(self.max_events, 1)} -ErrorAction Stop
            }} catch {{
                if ($_.FullyQualifiedErrorId -like 'NoMatchingEventsFound*') {{ continue }}
                [Console]::Error.WriteLine($_.Exception.Message)
                exit 1
            }}
        }}
        $events | ForEach-Object {{
            [PSCustomObject]@{{
                TimeCreated = $_.TimeCreated.ToString("s")
                Id = $_.Id
                Level = $_.Level
                LogName = $_.LogName
                ProviderName = $_.ProviderName
                Message = $_.Message
            }}
        }} | ConvertTo-Json -Depth 3
        exit 0
        '''

    def parse_event(self, raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Reduce a raw event to a record. Returns None for other levels."""
        label = LEVEL_LABELS.get(raw.get("Level"))
        if label is None:
            return None

        return {
            "time_created": datetime.strptime(raw["TimeCreated"], TIMESTAMP_FORMAT),
            "id": raw.get("Id"),
            "level": label,
            "log": raw.get("LogName"),
            "provider": raw.get("ProviderName") or "",
            "message": (raw.get("Message") or "").strip(),
        }

    def query(self) -> List[Dict[str, Any]]:
        """Query the event logs.

        Returns:
            Up to max_events of the most recent matching events.
        """
        raw_events = run_powershell(self.build_script(), timeout=self.timeout)

        parsed = []
        for raw in raw_events:
            event = self.parse_event(raw)
            if event is not None:
                parsed.append(event)

        events = select_recent(parsed, self.clock(), self.window, self.max_events)

        if not events:
            self.logger.info(f"No Error/Warning events in the {self.window_label}")
        elif len(parsed) > len(events):
            self.logger.info(f"{len(parsed)} events matched, keeping the {len(events)} most recent")

        return events

    def format_cell(self, key: str, value: Any) -> str:
        if key == "time_created" and value is not None:
            return value.strftime("%Y-%m-%d %H:%M:%S")
        if key == "message" and value:
            first_line = value.splitlines()[0]
            if len(first_line) > self.CONSOLE_MESSAGE_WIDTH:
                first_line = first_line[:self.CONSOLE_MESSAGE_WIDTH - 3] + "..."
            return super().format_cell(key, first_line)
        return super().format_cell(key, value)
