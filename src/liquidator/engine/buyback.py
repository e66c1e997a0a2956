"""Buyback model: fold accrued yield into the virtual reserves."""

from .pricing import get_amount_out
from .state import ReservePair


class BuybackModel:
    """Model continuous inflow pressure before a discrete trade is priced.

    The accrued backlog is treated as already swapped yield -> reward at the
    current curve. The optimizer and the rebalancer must share this math so
    that evaluated profit matches executed profit.
    """

    def apply(self, accrued_yield: float, reserves: ReservePair) -> ReservePair:
        """
        Compute post-inflow reserves.

        Args:
            accrued_yield: Unswapped yield backlog (>= 0)
            reserves: Current virtual reserves

        Returns:
            New reserve pair; the input is left untouched
        """
        reward_amount_out = get_amount_out(
            accrued_yield,
            reserves.yield_reserve,
            reserves.reward_reserve
        )
        return ReservePair(
            yield_reserve=reserves.yield_reserve + accrued_yield,
            reward_reserve=reserves.reward_reserve - reward_amount_out
        )
