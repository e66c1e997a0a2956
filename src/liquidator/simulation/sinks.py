"""Observers that receive one record per executed arbitrage."""

from dataclasses import astuple, dataclass, fields
from typing import List


@dataclass(frozen=True)
class ArbitrageRecord:
    """Metrics of one executed arbitrage, in output column order."""
    time: int
    yield_accrual_rate: float
    available_yield: float  # backlog before the trade
    swap_amount_out: float
    swap_amount_in: float
    swap_exchange_rate: float  # yield per reward
    market_exchange_rate: float
    efficiency: float  # market rate / swap rate
    moving_average: float
    yield_virtual_liquidity: float
    token_virtual_liquidity: float
    unsold_yield: float  # backlog after the trade

    @classmethod
    def columns(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_row(self) -> list:
        return list(astuple(self))


class MetricsSink:
    """Base class for arbitrage observers."""

    def on_arbitrage(self, record: ArbitrageRecord) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Flush any buffered output. Called once after the run."""


class RecordCollector(MetricsSink):
    """Keep records in memory."""

    def __init__(self):
        self.records: List[ArbitrageRecord] = []

    def on_arbitrage(self, record: ArbitrageRecord) -> None:
        self.records.append(record)
