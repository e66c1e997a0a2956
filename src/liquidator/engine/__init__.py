"""Virtual CPMM pricing, trade search and rebalancing."""

from .buyback import BuybackModel
from .optimizer import TradeOptimizer, compute_trade_profit
from .pricing import InvalidTrade, get_amount_in, get_amount_out
from .rebalancer import Rebalancer
from .state import MarketState, ReservePair, TradeCandidate

__all__ = [
    "InvalidTrade",
    "get_amount_in",
    "get_amount_out",
    "ReservePair",
    "MarketState",
    "TradeCandidate",
    "BuybackModel",
    "TradeOptimizer",
    "compute_trade_profit",
    "Rebalancer",
]
