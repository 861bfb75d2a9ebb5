"""Change-set rendering."""

from .console import format_console_report
from .csv_report import CSV_HEADER, format_timestamp, render_csv, write_csv

__all__ = ["CSV_HEADER", "format_console_report", "format_timestamp", "render_csv", "write_csv"]
