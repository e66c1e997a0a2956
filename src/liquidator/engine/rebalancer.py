"""Rebalancer: commit a trade and re-normalize virtual liquidity."""

import logging
from typing import Optional

from ..config.schema import LiquidatorParams
from .buyback import BuybackModel
from .pricing import InvalidTrade, get_amount_in
from .state import MarketState, ReservePair

logger = logging.getLogger(__name__)


class Rebalancer:
    """Apply a committed trade to the market state.

    Steps, in order:
    1. Buyback: fold the full backlog into the reserves
    2. Real swap: yield out, reward in
    3. Downward pressure: phantom swap of yield_amount_out * swap_multiplier
    4. EMA update from the full backlog
    5. Scale both reserves so that yield_ema == yield_reserve * liquidity_fraction
    """

    def __init__(self, params: LiquidatorParams, buyback: Optional[BuybackModel] = None):
        """
        Initialize rebalancer.

        Args:
            params: Liquidator tuning parameters
            buyback: Buyback model shared with the optimizer
        """
        self.params = params
        self.buyback = buyback or BuybackModel()

    def commit(
        self,
        yield_amount_out: float,
        accrued_yield: float,
        state: MarketState
    ) -> MarketState:
        """
        Commit a trade.

        Args:
            yield_amount_out: Yield bought from the pool
            accrued_yield: Full backlog before the trade (used for buyback and EMA)
            state: Current market state (not mutated)

        Returns:
            New market state

        Raises:
            InvalidTrade: If any swap would drain a reserve; nothing is committed
        """
        reserves = self.buyback.apply(accrued_yield, state.reserves)

        # swap
        reward_amount_in = get_amount_in(
            yield_amount_out,
            reserves.reward_reserve,
            reserves.yield_reserve
        )
        yield_reserve = reserves.yield_reserve - yield_amount_out
        reward_reserve = reserves.reward_reserve + reward_amount_in

        # Phantom swap that is never paid for; drives the price down faster
        pressure_yield_out = yield_amount_out * self.params.swap_multiplier
        pressure_reward_in = get_amount_in(pressure_yield_out, reward_reserve, yield_reserve)
        pressured = ReservePair(
            yield_reserve=yield_reserve - pressure_yield_out,
            reward_reserve=reward_reserve + pressure_reward_in
        )

        # Accrued yield is a sawtooth, so smooth it before sizing liquidity
        alpha = self.params.ema_alpha
        yield_ema = accrued_yield * alpha + state.yield_ema * (1 - alpha)

        scale = yield_ema / (pressured.yield_reserve * self.params.liquidity_fraction)
        new_reserves = pressured.scaled(scale)

        if not new_reserves.is_valid():
            raise InvalidTrade(
                f"Rebalance produced non-positive reserves: {new_reserves}"
            )

        logger.debug(
            "Rebalanced: scale=%.6f yield_ema=%.6f reserves=(%.6f, %.6f)",
            scale, yield_ema, new_reserves.yield_reserve, new_reserves.reward_reserve
        )

        return MarketState(reserves=new_reserves, yield_ema=yield_ema)
