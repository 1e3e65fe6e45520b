"""
Generate a System Health Report for this Windows host.

The report covers:
- Capacity of local fixed drives
- State of critical Windows services
- Errors and warnings from the System and Application event logs

Usage:
    winhealth-report [--config PATH] [--output-dir PATH] [--no-open] [--no-color]
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console

from .collectors import DiskCollector, EventLogCollector, ServiceCollector
from .collectors.base_collector import get_system_info
from .report import ReportRenderer, open_report
from .utils import RunLogger, get_profile_dir, load_settings, resolve_report_dir


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate an HTML system health report")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: config/settings.yaml)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the report (default: your desktop)"
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the report when it is done"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored console output"
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
    opener: Optional[Callable] = open_report,
) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)

    console = console or Console(no_color=args.no_color)
    console.print("\n[bold blue]System Health Report[/bold blue]\n")

    system_info = get_system_info()
    machine_name = system_info["hostname"] or "localhost"
    os_description = f"{system_info['os_name']} {system_info['os_release']}".strip()
    console.print(f"[dim]System: {os_description}[/dim]")
    console.print(f"[dim]Host: {machine_name}[/dim]\n")

    logger = RunLogger(log_dir=settings.get("log_dir"), console=console)
    timeout = settings["powershell_timeout"]
    window_hours = settings["event_window_hours"]

    console.print("Checking disk space...")
    disks = DiskCollector(logger=logger, console=console).collect()

    console.print("Checking critical services...")
    service_collector = ServiceCollector(
        settings["services"],
        logger=logger,
        console=console,
        timeout=timeout,
    )
    services = service_collector.collect()

    console.print(f"Checking event logs (last {window_hours:g} hours)...")
    events = EventLogCollector(
        log_names=settings["event_logs"],
        window=timedelta(hours=window_hours),
        max_events=settings["max_events"],
        logger=logger,
        console=console,
        timeout=timeout,
    ).collect()

    output_dir = args.output_dir or resolve_report_dir(settings, get_profile_dir())
    if args.no_open or not settings.get("open_report", True):
        opener = None

    renderer = ReportRenderer(
        machine_name=machine_name,
        output_dir=output_dir,
        os_description=os_description,
        max_events=settings["max_events"],
        window_hours=window_hours,
        opener=opener,
        logger=logger,
    )

    console.print("Generating report...")
    try:
        report_path = renderer.generate(disks, services, events)
    except OSError as e:
        logger.error(f"Report generation failed: {e}")
        logger.finalize(report_path=None)
        return 1

    service_summary = service_collector.get_summary(services)
    unhealthy = service_summary["unhealthy"]
    event_summary = "unavailable" if events is None else str(len(events))

    console.print(f"\n[bold green]Report saved to:[/bold green] {report_path}")
    console.print(
        f"  Drives: {len(disks)}  "
        f"Unhealthy services: {len(unhealthy)}/{service_summary['total_services']}  "
        f"Events: {event_summary}\n"
    )

    logger.finalize(
        report_path=str(report_path),
        drives=len(disks),
        services=service_summary["total_services"],
        unhealthy_services=unhealthy,
        events=None if events is None else len(events),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
