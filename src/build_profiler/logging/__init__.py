"""Structured logging utilities."""

from .events import JsonlEventLogger, RunEvent, new_run_id, utc_timestamp

__all__ = ["JsonlEventLogger", "RunEvent", "new_run_id", "utc_timestamp"]
