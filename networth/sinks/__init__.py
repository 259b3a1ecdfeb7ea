"""Output sinks for exporting valuation results."""

from networth.sinks.console import ConsoleSink
from networth.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
