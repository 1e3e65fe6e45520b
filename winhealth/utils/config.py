"""Settings loader for the health report."""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_SETTINGS_PATH = Path("config/settings.yaml")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "services": [
        "EventLog",      # Windows Event Log
        "wuauserv",      # Windows Update
        "Spooler",       # Print Spooler
        "Dhcp",          # DHCP Client
        "LanmanServer",  # Server (file and print sharing)
    ],
    "event_logs": ["System", "Application"],
    "event_window_hours": 24,
    "max_events": 20,
    "powershell_timeout": 60,
    "report_dir": None,
    "log_dir": "data/logs",
    "open_report": True,
}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load settings from YAML, layered over the built-in defaults.

    Args:
        path: Path to settings.yaml. Defaults to config/settings.yaml.

    Returns:
        Settings dictionary. Unknown keys are kept, missing keys take defaults.
    """
    settings = dict(DEFAULT_SETTINGS)
    path = path or DEFAULT_SETTINGS_PATH

    try:
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                for key, value in loaded.items():
                    # Empty keys and non-list values for list settings keep the default
                    if value is None:
                        continue
                    if isinstance(DEFAULT_SETTINGS.get(key), list) and not isinstance(value, list):
                        continue
                    settings[key] = value
    except (yaml.YAMLError, IOError):
        pass

    return settings


def get_profile_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Resolve the invoking user's profile directory."""
    environ = os.environ if environ is None else environ
    profile = environ.get("USERPROFILE")
    if profile:
        return Path(profile)
    return Path.home()


def resolve_report_dir(settings: Mapping[str, Any], profile_dir: Path) -> Path:
    """Directory the report is written to: report_dir if set, else the desktop."""
    report_dir = settings.get("report_dir")
    if report_dir:
        return Path(report_dir).expanduser()
    return profile_dir / "Desktop"
