"""Human-readable run output."""

from ..simulation.runner import SimulationResult
from ..simulation.sinks import ArbitrageRecord, MetricsSink


def format_arbitrage(record: ArbitrageRecord) -> str:
    """Detail block for one arbitrage."""
    details = [
        f"@ {record.time} efficiency {int(record.efficiency * 100)}",
        f"moving average: {record.moving_average}",
        f"vr yield: {record.yield_virtual_liquidity}",
        f"vr pool: {record.token_virtual_liquidity}",
        f"swapExchangeRate {record.swap_exchange_rate}",
        f"remainingYield {record.unsold_yield}",
    ]
    return '\n\t'.join(details)


def format_summary(result: SimulationResult) -> str:
    """Final summary line."""
    return f"\n{result.arb_count} arbs brought in {result.cumulative_reward_spent} POOL"


class ConsoleSink(MetricsSink):
    """Print every arbitrage as it happens."""

    def __init__(self, stream=None):
        self.stream = stream

    def on_arbitrage(self, record: ArbitrageRecord) -> None:
        print(format_arbitrage(record), file=self.stream)
