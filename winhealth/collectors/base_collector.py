"""Base collector class with common functionality."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import platform
import subprocess

import psutil
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..utils.logger import RunLogger


class PowerShellError(RuntimeError):
    """PowerShell exited with a non-zero status."""


# Piped output otherwise uses the OEM code page
UTF8_PREAMBLE = "[Console]::OutputEncoding = New-Object System.Text.UTF8Encoding $false\n"


# Faults a collector converts into an empty (or sentinel) result
COLLECTOR_ERRORS = (
    PowerShellError,
    subprocess.SubprocessError,
    OSError,
    json.JSONDecodeError,
    ValueError,
    KeyError,
    TypeError,
    psutil.Error,
)


def run_powershell(script: str, timeout: int = 60) -> List[Dict[str, Any]]:
    """Run a PowerShell script that emits ConvertTo-Json output.

    Args:
        script: PowerShell source.
        timeout: Seconds before the call is abandoned.

    Returns:
        Parsed objects. Empty output yields an empty list.

    Raises:
        PowerShellError: If PowerShell exits with a non-zero status.
    """
    result = subprocess.run(
        ["powershell", "-NoProfile", "-Command", UTF8_PREAMBLE + script],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )

    if result.returncode != 0:
        message = (result.stderr or result.stdout or "").strip().splitlines()
        raise PowerShellError(message[0] if message else f"exit status {result.returncode}")

    output = result.stdout.lstrip("\ufeff")
    if not output.strip():
        return []

    data = json.loads(output)

    # PowerShell returns a bare object instead of an array for a single result
    if isinstance(data, dict):
        data = [data]
    return data


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class BaseCollector(ABC):
    """Abstract base class for all collectors."""

    # (record key, column header) pairs for the console table
    columns: Sequence[Tuple[str, str]] = ()

    def __init__(self, logger: Optional[RunLogger] = None, console: Optional[Console] = None):
        """Initialize the collector.

        Args:
            logger: Run logger for diagnostics.
            console: Console the collected table is echoed to.
        """
        self.console = console or Console()
        self.logger = logger or RunLogger(console=self.console)
        self.collected_at = datetime.now()

    @property
    @abstractmethod
    def collector_name(self) -> str:
        """Name of this collector for diagnostics."""
        pass

    @property
    def check_name(self) -> str:
        """Human-readable check name used as the diagnostic prefix."""
        return self.collector_name.replace("_", " ").title()

    @abstractmethod
    def query(self) -> List[Dict[str, Any]]:
        """Query the OS and return records.

        Raises whatever the underlying query raises; collect() owns the
        fault boundary.
        """
        pass

    def failure_result(self) -> Optional[List[Dict[str, Any]]]:
        """Value returned by collect() when the query fails."""
        return []

    def collect(self) -> Optional[List[Dict[str, Any]]]:
        """Collect records, echo them as a table, never raise on query faults.

        Returns:
            List of records, or failure_result() when the query fails.
        """
        self.collected_at = datetime.now()
        try:
            items = self.query()
        except COLLECTOR_ERRORS as e:
            self.logger.warning(f"{self.check_name} check failed: {type(e).__name__}: {e}")
            return self.failure_result()

        self.print_table(items)
        return items

    def format_cell(self, key: str, value: Any) -> str:
        if value is None:
            return ""
        return escape(str(value))

    def format_row(self, item: Dict[str, Any]) -> List[str]:
        return [self.format_cell(key, item.get(key)) for key, _ in self.columns]

    def print_table(self, items: List[Dict[str, Any]]):
        """Echo records to the console as a table."""
        table = Table(title=self.check_name, show_header=True, title_justify="left")
        for _, header in self.columns:
            table.add_column(header)

        for item in items:
            table.add_row(*self.format_row(item))

        self.console.print(table)


def get_system_info() -> Dict[str, Any]:
    """Get basic system information."""
    return {
        "os_name": platform.system(),
        "os_release": platform.release(),
        "hostname": platform.node(),
    }
