"""Simulation runner - advance time and liquidate accrued yield.

Each tick:
- update the market and accrual rates from their schedules
- accrue yield into the backlog
- search for the most profitable trade against the virtual pool
- commit it if profit reaches the minimum, emitting one record to every sink
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config.schema import Config
from ..engine.buyback import BuybackModel
from ..engine.optimizer import TradeOptimizer
from ..engine.pricing import InvalidTrade
from ..engine.rebalancer import Rebalancer
from ..engine.state import MarketState, ReservePair
from .schedule import ScheduleMap, ZeroRatePolicy
from .sinks import ArbitrageRecord, MetricsSink, RecordCollector

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """Loop state threaded through the ticks."""
    tick: int = 0
    accrued_yield: float = 0.0
    cumulative_reward_spent: float = 0.0
    arb_count: int = 0


@dataclass
class SimulationResult:
    """Complete simulation result."""
    config: Config
    records: List[ArbitrageRecord]
    arb_count: int
    cumulative_reward_spent: float
    final_market_state: MarketState
    final_accrued_yield: float
    final_metrics: Dict[str, Any]
    commit_errors: List[str] = field(default_factory=list)


class SimulationRunner:
    """Run the liquidator against exogenous market and accrual schedules."""

    def __init__(self, config: Config, sinks: Optional[Sequence[MetricsSink]] = None):
        """
        Initialize simulation runner.

        Args:
            config: Simulation configuration
            sinks: Observers notified of every executed arbitrage
        """
        self.config = config
        self.sinks: List[MetricsSink] = list(sinks or [])

        policy = ZeroRatePolicy(config.schedules.zero_rate_policy)
        self.market_schedule = ScheduleMap(config.schedules.market_rates, policy)
        self.accrual_schedule = ScheduleMap(config.schedules.accrual_rates, policy)

        # One buyback model shared so evaluated and executed math agree
        buyback = BuybackModel()
        self.optimizer = TradeOptimizer(buyback)
        self.rebalancer = Rebalancer(config.liquidator, buyback)

    def initial_market_state(self) -> MarketState:
        initial = self.config.initial_state
        return MarketState(
            reserves=ReservePair(
                yield_reserve=initial.yield_reserve,
                reward_reserve=initial.reward_reserve
            ),
            yield_ema=initial.yield_ema
        )

    def run(self) -> SimulationResult:
        """
        Run the simulation for the configured duration.

        Returns:
            Simulation result
        """
        duration = self.config.simulation.duration
        min_profit = self.config.liquidator.min_profit

        collector = RecordCollector()
        sinks = [collector] + self.sinks

        market = self.initial_market_state()
        sim = SimulationState()
        commit_errors: List[str] = []

        market_rate = self.market_schedule.initial_rate
        accrual_rate = self.accrual_schedule.initial_rate

        logger.info(
            "Starting run: duration=%d config_hash=%s",
            duration, self.config.compute_hash()
        )

        try:
            for tick in range(duration):
                sim.tick = tick
                market_rate = self.market_schedule.update(tick, market_rate)
                accrual_rate = self.accrual_schedule.update(tick, accrual_rate)
                sim.accrued_yield += accrual_rate

                candidate = self.optimizer.find_optimal_trade(
                    sim.accrued_yield, market.reserves, market_rate
                )
                if candidate.profit < min_profit or candidate.yield_amount_out <= 0:
                    continue

                available_yield = sim.accrued_yield
                try:
                    market = self.rebalancer.commit(
                        candidate.yield_amount_out, available_yield, market
                    )
                except InvalidTrade as e:
                    # Optimizer-validated trades should always commit
                    message = f"t={tick}: commit of {candidate.yield_amount_out} aborted: {e}"
                    logger.warning(message)
                    commit_errors.append(message)
                    continue

                sim.arb_count += 1
                sim.cumulative_reward_spent += candidate.reward_amount_in
                sim.accrued_yield -= candidate.yield_amount_out

                swap_exchange_rate = candidate.exchange_rate
                record = ArbitrageRecord(
                    time=tick,
                    yield_accrual_rate=accrual_rate,
                    available_yield=available_yield,
                    swap_amount_out=candidate.yield_amount_out,
                    swap_amount_in=candidate.reward_amount_in,
                    swap_exchange_rate=swap_exchange_rate,
                    market_exchange_rate=market_rate,
                    efficiency=market_rate / swap_exchange_rate,
                    moving_average=market.yield_ema,
                    yield_virtual_liquidity=market.reserves.yield_reserve,
                    token_virtual_liquidity=market.reserves.reward_reserve,
                    unsold_yield=sim.accrued_yield
                )
                logger.debug(
                    "@ %d efficiency %d%% swap_rate=%.6f remaining=%.6f",
                    tick, int(record.efficiency * 100), swap_exchange_rate, sim.accrued_yield
                )
                for sink in sinks:
                    sink.on_arbitrage(record)
        finally:
            for sink in self.sinks:
                sink.close()

        final_metrics = self._compute_final_metrics(collector.records, sim, market)
        logger.info(
            "%d arbs brought in %s POOL", sim.arb_count, sim.cumulative_reward_spent
        )

        return SimulationResult(
            config=self.config,
            records=collector.records,
            arb_count=sim.arb_count,
            cumulative_reward_spent=sim.cumulative_reward_spent,
            final_market_state=market,
            final_accrued_yield=sim.accrued_yield,
            final_metrics=final_metrics,
            commit_errors=commit_errors
        )

    def _compute_final_metrics(
        self,
        records: List[ArbitrageRecord],
        sim: SimulationState,
        market: MarketState
    ) -> Dict[str, Any]:
        """Aggregate metrics over the run."""
        if records:
            efficiencies = np.array([r.efficiency for r in records])
            mean_efficiency = float(np.mean(efficiencies))
            total_yield_sold = float(np.sum([r.swap_amount_out for r in records]))
        else:
            mean_efficiency = 0.0
            total_yield_sold = 0.0

        return {
            'arb_count': sim.arb_count,
            'cumulative_reward_spent': sim.cumulative_reward_spent,
            'total_yield_sold': total_yield_sold,
            'mean_efficiency': mean_efficiency,
            'final_unsold_yield': sim.accrued_yield,
            'final_yield_reserve': market.reserves.yield_reserve,
            'final_reward_reserve': market.reserves.reward_reserve,
            'final_yield_ema': market.yield_ema,
        }
