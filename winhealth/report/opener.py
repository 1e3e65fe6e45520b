"""Open a finished report with the host's default handler."""

import os
import webbrowser
from pathlib import Path
from typing import Optional

from ..utils.logger import RunLogger


def open_report(path: Path, logger: Optional[RunLogger] = None) -> bool:
    """Ask the OS to open the report. Failures are logged, never raised.

    Args:
        path: Report file.
        logger: Run logger for diagnostics.

    Returns:
        True if the open request was handed off.
    """
    startfile = getattr(os, "startfile", None)

    try:
        if startfile is not None:
            startfile(str(path))
            return True
        if webbrowser.open(Path(path).resolve().as_uri()):
            return True
        reason = "no browser available"
    except (OSError, webbrowser.Error) as e:
        reason = str(e)

    if logger is not None:
        logger.warning(f"Open report failed: {reason}")
    return False
