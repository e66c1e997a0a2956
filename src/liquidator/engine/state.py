"""Market state of the virtual liquidator pool."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReservePair:
    """Virtual reserves of the pool.

    x = yield asset, y = reward (POOL) asset. Both must stay strictly positive;
    a pair that is not `is_valid()` is never committed.
    """
    yield_reserve: float
    reward_reserve: float

    def is_valid(self) -> bool:
        """Both reserves strictly positive."""
        return self.yield_reserve > 0 and self.reward_reserve > 0

    def scaled(self, factor: float) -> 'ReservePair':
        """Return both reserves multiplied by the same factor (price unchanged)."""
        return ReservePair(
            yield_reserve=self.yield_reserve * factor,
            reward_reserve=self.reward_reserve * factor
        )

    @property
    def price(self) -> float:
        """Spot price in yield per reward unit."""
        return self.yield_reserve / self.reward_reserve


@dataclass(frozen=True)
class MarketState:
    """Reserves plus the moving average of liquidated yield.

    After every committed rebalance:
        yield_ema == reserves.yield_reserve * liquidity_fraction
    """
    reserves: ReservePair
    yield_ema: float = 0.0


@dataclass(frozen=True)
class TradeCandidate:
    """Trade proposed by the optimizer: buy yield from the pool with reward."""
    yield_amount_out: float
    reward_amount_in: float
    profit: float

    @classmethod
    def zero(cls) -> 'TradeCandidate':
        return cls(yield_amount_out=0.0, reward_amount_in=0.0, profit=0.0)

    @property
    def exchange_rate(self) -> float:
        """Yield received per reward unit spent."""
        if self.reward_amount_in <= 0:
            return 0.0
        return self.yield_amount_out / self.reward_amount_in
