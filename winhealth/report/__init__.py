# Report module
"""
HTML report rendering and hand-off to the default viewer.
"""

from .renderer import ReportRenderer
from .opener import open_report

__all__ = [
    "ReportRenderer",
    "open_report",
]
