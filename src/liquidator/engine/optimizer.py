"""Trade optimizer: grid search for the most profitable arbitrage."""

from typing import List, Optional

from .buyback import BuybackModel
from .pricing import InvalidTrade, get_amount_in
from .state import ReservePair, TradeCandidate


def compute_trade_profit(
    reward_amount_in: float,
    yield_amount_out: float,
    market_rate: float
) -> float:
    """
    Profit of buying yield from the pool, valued in yield.

    Args:
        reward_amount_in: Reward asset paid into the pool
        yield_amount_out: Yield asset received
        market_rate: Market price of one reward unit in yield units

    Returns:
        Profit in yield units, floored at 0
    """
    reward_cost_in_yield = reward_amount_in * market_rate
    if yield_amount_out > reward_cost_in_yield:
        return yield_amount_out - reward_cost_in_yield
    return 0.0


class TradeOptimizer:
    """Find the trade size with the highest arbitrage profit."""

    # Fraction of the backlog covered by each grid step is 1 / SEARCH_STEPS
    SEARCH_STEPS = 10

    def __init__(self, buyback: Optional[BuybackModel] = None):
        """
        Initialize optimizer.

        Args:
            buyback: Buyback model shared with the rebalancer
        """
        self.buyback = buyback or BuybackModel()

    def candidate_sizes(self, accrued_yield: float) -> List[float]:
        """
        Ascending trade sizes evaluated for a backlog.

        Returns an empty list when there is nothing to sell.
        """
        if accrued_yield <= 0:
            return []
        step_size = accrued_yield / self.SEARCH_STEPS
        return [
            min(step_size * i, accrued_yield)
            for i in range(1, self.SEARCH_STEPS + 1)
        ]

    def find_optimal_trade(
        self,
        accrued_yield: float,
        reserves: ReservePair,
        market_rate: float
    ) -> TradeCandidate:
        """
        Search the trade grid for maximum profit.

        The trader supplies reward and receives yield, so the pool's reward
        reserve is the "in" side of the pricing math.

        Args:
            accrued_yield: Unswapped yield backlog
            reserves: Current virtual reserves (before buyback)
            market_rate: Market price of one reward unit in yield units

        Returns:
            Best candidate, or the zero candidate if nothing is profitable
        """
        adjusted = self.buyback.apply(accrued_yield, reserves)
        best = TradeCandidate.zero()

        for yield_amount_out in self.candidate_sizes(accrued_yield):
            try:
                reward_amount_in = get_amount_in(
                    yield_amount_out,
                    adjusted.reward_reserve,
                    adjusted.yield_reserve
                )
            except InvalidTrade:
                continue

            profit = compute_trade_profit(reward_amount_in, yield_amount_out, market_rate)
            if profit > best.profit:
                best = TradeCandidate(
                    yield_amount_out=yield_amount_out,
                    reward_amount_in=reward_amount_in,
                    profit=profit
                )

        return best
