"""
Windows host health snapshot: disk capacity, critical services and recent
event log errors rendered as one HTML report.
"""

__version__ = "1.0.0"
