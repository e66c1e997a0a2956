"""Export functionality for CSV and JSON."""

import json
import logging
from typing import List

import pandas as pd

from ..simulation.runner import SimulationResult
from ..simulation.sinks import ArbitrageRecord, MetricsSink

logger = logging.getLogger(__name__)


def records_to_dataframe(records: List[ArbitrageRecord]) -> pd.DataFrame:
    """One row per arbitrage, columns in output order."""
    return pd.DataFrame(
        [record.to_row() for record in records],
        columns=ArbitrageRecord.columns()
    )


class CsvMetricsSink(MetricsSink):
    """Append one CSV row per arbitrage as it happens.

    The first row truncates the file and writes the header. A run with no
    arbitrage still leaves a header-only file once the sink is closed.
    """

    def __init__(self, filepath: str):
        self.filepath = filepath
        self.rows_written = 0

    def on_arbitrage(self, record: ArbitrageRecord) -> None:
        first = self.rows_written == 0
        records_to_dataframe([record]).to_csv(
            self.filepath, mode="w" if first else "a", header=first, index=False
        )
        self.rows_written += 1

    def close(self) -> None:
        if self.rows_written == 0:
            records_to_dataframe([]).to_csv(self.filepath, index=False)
        logger.info("Wrote %d arbitrage rows to %s", self.rows_written, self.filepath)


def export_csv(result: SimulationResult, filepath: str):
    """Export simulation records to CSV."""
    df = records_to_dataframe(result.records)
    df.to_csv(filepath, index=False)


def export_json(result: SimulationResult, filepath: str):
    """Export simulation results to JSON."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'records': [
            dict(zip(ArbitrageRecord.columns(), record.to_row()))
            for record in result.records
        ],
        'final_metrics': result.final_metrics,
        'commit_errors': result.commit_errors
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
