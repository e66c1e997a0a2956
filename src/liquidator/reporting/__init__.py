"""Result export and console output."""

from .console import ConsoleSink, format_arbitrage, format_summary
from .export import CsvMetricsSink, export_csv, export_json, records_to_dataframe

__all__ = [
    "CsvMetricsSink",
    "ConsoleSink",
    "export_csv",
    "export_json",
    "records_to_dataframe",
    "format_arbitrage",
    "format_summary",
]
