"""Service collector - gathers run state of critical Windows services."""

from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console

from .base_collector import BaseCollector, ps_quote, run_powershell
from ..utils.logger import RunLogger


def is_unhealthy(service: Dict[str, Any]) -> bool:
    """A service is unhealthy when it is not running but is not disabled either."""
    return service.get("state") != "Running" and service.get("start_mode") != "Disabled"


class ServiceCollector(BaseCollector):
    """Collects state of a fixed list of Windows services."""

    columns = (
        ("name", "Name"),
        ("display_name", "Display Name"),
        ("state", "Status"),
        ("start_mode", "Start Type"),
    )

    def __init__(
        self,
        service_names: Iterable[str],
        logger: Optional[RunLogger] = None,
        console: Optional[Console] = None,
        timeout: int = 60,
    ):
        """Initialize service collector.

        Args:
            service_names: Service identifiers to query, e.g. "Spooler".
            logger: Run logger for diagnostics.
            console: Console for the collected table.
            timeout: Seconds to wait for PowerShell.
        """
        super().__init__(logger, console)
        self.service_names = list(service_names)
        self.timeout = timeout

    @property
    def collector_name(self) -> str:
        return "services"

    def build_script(self) -> str:
        names = ", ".join(ps_quote(name) for name in self.service_names)
        # Unknown names raise non-terminating errors that are discarded
        return f'''
        $names = @({names})
        Get-Service -Name $names -ErrorAction SilentlyContinue | ForEach-Object {{
            [PSCustomObject]@{{
                Name = $_.Name
                DisplayName = $_.DisplayName
                Status = $_.Status.ToString()
                StartType = $_.StartType.ToString()
            }}
        }} | ConvertTo-Json -Depth 3
        exit 0
        '''

    def query(self) -> List[Dict[str, Any]]:
        """Query each configured service.

        Returns:
            Service records in configured order. Names that do not resolve on
            this host are left out.
        """
        if not self.service_names:
            return []

        raw_services = run_powershell(self.build_script(), timeout=self.timeout)

        found: Dict[str, Dict[str, Any]] = {}
        for svc in raw_services:
            service_info = {
                "name": svc.get("Name"),
                "display_name": svc.get("DisplayName"),
                "state": svc.get("Status"),
                "start_mode": svc.get("StartType"),
            }
            if service_info["name"]:
                found[service_info["name"].lower()] = service_info

        services = []
        for name in self.service_names:
            service_info = found.get(name.lower())
            if service_info is None:
                self.logger.info(f"Service '{name}' not found on this host, skipped")
                continue
            services.append(service_info)

        return services

    def format_row(self, item: Dict[str, Any]) -> List[str]:
        cells = super().format_row(item)
        color = "red" if is_unhealthy(item) else "green"
        for index, (key, _) in enumerate(self.columns):
            if key == "state" and cells[index]:
                cells[index] = f"[{color}]{cells[index]}[/{color}]"
        return cells

    def get_summary(self, services: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Get summary statistics for collected services.

        Args:
            services: List of service dictionaries.

        Returns:
            Summary statistics.
        """
        state_counts: Dict[str, int] = {}
        for s in services:
            state = s.get("state") or "Unknown"
            state_counts[state] = state_counts.get(state, 0) + 1

        unhealthy = [s["name"] for s in services if is_unhealthy(s)]

        return {
            "total_services": len(services),
            "state_distribution": state_counts,
            "unhealthy": unhealthy,
        }
