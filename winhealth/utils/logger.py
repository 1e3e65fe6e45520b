"""Run logger - records diagnostics for a single health report run."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from rich.console import Console
from rich.markup import escape


class RunLogger:
    """Keeps leveled diagnostics for one run and mirrors them to a log file."""

    ECHO_LEVELS = ("WARNING", "ERROR")

    def __init__(self, log_dir: Optional[Path] = None, console: Optional[Console] = None):
        """Initialize the run logger.

        Args:
            log_dir: Directory to save run logs. None keeps diagnostics in memory only.
            console: Console used to echo warnings and errors.
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.console = console or Console(stderr=True)

        self.session_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.entries: List[Dict[str, Any]] = []
        self.log_file: Optional[Path] = None

        if self.log_dir is not None:
            self.log_file = self.log_dir / f"{self.session_id}_health.log"
            try:
                self.log_dir.mkdir(parents=True, exist_ok=True)
                self._write_header()
            except OSError as e:
                self._disable_file(e)

    def _write_header(self):
        with open(self.log_file, 'w', encoding='utf-8') as f:
            f.write("# System Health Report - Run Log\n")
            f.write(f"# Session: {self.session_id}\n")
            f.write(f"# Started: {datetime.now().isoformat()}\n")
            f.write(f"# {'=' * 70}\n\n")

    def _disable_file(self, error: OSError):
        """Stop writing the log file; diagnostics stay in memory and on the console."""
        self.log_file = None
        message = f"Run log unavailable, continuing without it: {error}"
        self.entries.append({"timestamp": datetime.now().isoformat(), "level": "WARNING", "message": message})
        self.console.print(f"[yellow]WARNING:[/yellow] {escape(message)}", highlight=False)

    def log_message(self, message: str, level: str = "INFO"):
        """Log a message.

        Args:
            message: Message to log.
            level: Log level (INFO, WARNING, ERROR).
        """
        timestamp = datetime.now().isoformat()
        self.entries.append({"timestamp": timestamp, "level": level, "message": message})

        if self.log_file is not None:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(f"[{timestamp}] {level}: {message}\n")
            except OSError as e:
                self._disable_file(e)

        if level in self.ECHO_LEVELS:
            style = "red" if level == "ERROR" else "yellow"
            self.console.print(f"[{style}]{level}:[/{style}] {escape(message)}", highlight=False)

    def info(self, message: str):
        self.log_message(message, "INFO")

    def warning(self, message: str):
        self.log_message(message, "WARNING")

    def error(self, message: str):
        self.log_message(message, "ERROR")

    def messages(self, level: Optional[str] = None) -> List[str]:
        """Return logged messages, optionally only those at one level."""
        return [e["message"] for e in self.entries if level is None or e["level"] == level]

    def get_summary(self, **details: Any) -> Dict[str, Any]:
        """Get summary of the run.

        Args:
            details: Extra run facts to include (record counts, report path).

        Returns:
            Summary dictionary.
        """
        return {
            "session_id": self.session_id,
            "warnings": len(self.messages("WARNING")),
            "errors": len(self.messages("ERROR")),
            "log_file": str(self.log_file) if self.log_file else None,
            **details,
        }

    def finalize(self, **details: Any) -> Dict[str, Any]:
        """Finalize the run log.

        Returns:
            Run summary.
        """
        summary = self.get_summary(**details)

        if self.log_file is None:
            return summary

        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(f"\n# {'=' * 70}\n")
                f.write(f"# Run Complete: {datetime.now().isoformat()}\n")
                f.write(f"# Warnings: {summary['warnings']}\n")
                f.write(f"# Errors: {summary['errors']}\n")
                if summary.get("report_path"):
                    f.write(f"# Report: {summary['report_path']}\n")

            summary_file = self.log_dir / f"{self.session_id}_summary.yaml"
            with open(summary_file, 'w', encoding='utf-8') as f:
                yaml.dump({
                    "run": summary,
                    "diagnostics": self.entries,
                }, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        except OSError as e:
            self._disable_file(e)

        return summary
