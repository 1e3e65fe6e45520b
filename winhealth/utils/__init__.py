# Utils module
"""
Shared utilities for run logging and settings.
"""

from .logger import RunLogger
from .config import load_settings, get_profile_dir, resolve_report_dir

__all__ = [
    "RunLogger",
    "load_settings",
    "get_profile_dir",
    "resolve_report_dir",
]
