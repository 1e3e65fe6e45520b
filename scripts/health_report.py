#!/usr/bin/env python3
"""
Generate a System Health Report for this host.

Usage:
    python scripts/health_report.py [--config PATH] [--output-dir PATH] [--no-open] [--no-color]
"""

import sys
from pathlib import Path

# Fix encoding issues on Windows
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from winhealth.cli import main


if __name__ == "__main__":
    sys.exit(main())
