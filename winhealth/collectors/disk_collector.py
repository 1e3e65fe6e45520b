"""Disk collector - gathers capacity of local fixed drives."""

from typing import Any, Dict, List

import psutil

from .base_collector import BaseCollector


BYTES_PER_GB = 1024 ** 3


def build_disk_record(drive: str, total_bytes: int, free_bytes: int) -> Dict[str, Any]:
    """Build a disk record from raw byte counts.

    Args:
        drive: Drive identifier, e.g. "C:".
        total_bytes: Volume capacity. Must be positive.
        free_bytes: Free space on the volume.

    Returns:
        Disk record with GB values rounded to two places and integer percents.
    """
    if total_bytes <= 0:
        raise ValueError(f"drive {drive} reports no capacity")

    used_bytes = total_bytes - free_bytes
    return {
        "drive": drive,
        "total_gb": round(total_bytes / BYTES_PER_GB, 2),
        "free_gb": round(free_bytes / BYTES_PER_GB, 2),
        "used_gb": round(used_bytes / BYTES_PER_GB, 2),
        "free_percent": round(100 * free_bytes / total_bytes),
        "used_percent": round(100 * used_bytes / total_bytes),
    }


class DiskCollector(BaseCollector):
    """Collects capacity metrics for local fixed drives."""

    columns = (
        ("drive", "Drive"),
        ("total_gb", "Total (GB)"),
        ("free_gb", "Free (GB)"),
        ("free_percent", "Free %"),
        ("used_percent", "Used %"),
    )

    @property
    def collector_name(self) -> str:
        return "disk_space"

    def query(self) -> List[Dict[str, Any]]:
        """Query fixed drives through psutil.

        Returns:
            One disk record per fixed volume, sorted by drive.
        """
        disks = []

        for part in psutil.disk_partitions(all=False):
            # Windows reports drive type in opts: fixed, removable, cdrom, remote
            if "fixed" not in part.opts.split(","):
                continue

            usage = psutil.disk_usage(part.mountpoint)
            if usage.total <= 0:
                continue

            drive = part.device.rstrip("\\/") or part.mountpoint
            disks.append(build_disk_record(drive, usage.total, usage.free))

        disks.sort(key=lambda d: d["drive"])
        return disks

    def format_cell(self, key: str, value: Any) -> str:
        if key.endswith("_gb"):
            return f"{value:.2f}"
        if key.endswith("_percent"):
            return f"{value}%"
        return super().format_cell(key, value)
