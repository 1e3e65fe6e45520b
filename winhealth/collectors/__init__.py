# Collectors module
"""
Data collection modules for gathering host health information.
"""

from .disk_collector import DiskCollector
from .service_collector import ServiceCollector
from .event_collector import EventLogCollector

__all__ = [
    "DiskCollector",
    "ServiceCollector",
    "EventLogCollector",
]
