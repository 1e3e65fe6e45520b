import io
from datetime import datetime, timedelta

import pytest
from rich.console import Console

from winhealth.utils.logger import RunLogger


FIXED_NOW = datetime(2026, 10, 18, 9, 30, 0)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=160, force_terminal=False, color_system=None)


@pytest.fixture
def logger(tmp_path, console):
    return RunLogger(log_dir=tmp_path / "logs", console=console)


@pytest.fixture
def make_event():
    def _make(minutes_ago, level="Error", event_id=1000, message="Something failed"):
        return {
            "time_created": FIXED_NOW - timedelta(minutes=minutes_ago),
            "id": event_id,
            "level": level,
            "log": "System",
            "provider": "Service Control Manager",
            "message": message,
        }
    return _make
