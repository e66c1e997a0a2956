"""Tests for buyback, trade optimizer and rebalancer."""

import math

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from liquidator.config.schema import LiquidatorParams
from liquidator.engine import optimizer as optimizer_module
from liquidator.engine.buyback import BuybackModel
from liquidator.engine.optimizer import TradeOptimizer, compute_trade_profit
from liquidator.engine.pricing import InvalidTrade, get_amount_in
from liquidator.engine.rebalancer import Rebalancer
from liquidator.engine.state import MarketState, ReservePair, TradeCandidate


REFERENCE_RESERVES = ReservePair(yield_reserve=500.0, reward_reserve=50.0)


class FixedBuyback(BuybackModel):
    """Buyback stand-in that always returns the same reserves."""

    def __init__(self, reserves):
        self.reserves = reserves

    def apply(self, accrued_yield, reserves):
        return self.reserves


class TestReserveTypes:

    def test_reserve_validity(self):
        assert REFERENCE_RESERVES.is_valid()
        assert not ReservePair(0.0, 50.0).is_valid()
        assert not ReservePair(500.0, -1.0).is_valid()

    def test_scaling_preserves_price(self):
        scaled = REFERENCE_RESERVES.scaled(3.5)
        assert scaled.yield_reserve == pytest.approx(1750.0)
        assert scaled.price == pytest.approx(REFERENCE_RESERVES.price)

    def test_zero_candidate(self):
        zero = TradeCandidate.zero()
        assert (zero.yield_amount_out, zero.reward_amount_in, zero.profit) == (0.0, 0.0, 0.0)
        assert zero.exchange_rate == 0.0


class TestBuybackModel:

    def test_zero_accrual_is_identity(self):
        """No backlog leaves the reserves unchanged."""
        result = BuybackModel().apply(0.0, REFERENCE_RESERVES)
        assert result == REFERENCE_RESERVES

    def test_buyback_math(self):
        result = BuybackModel().apply(10.0, REFERENCE_RESERVES)
        assert result.yield_reserve == pytest.approx(510.0)
        assert result.reward_reserve == pytest.approx(50.0 - 500.0 / 510.0)

    def test_buyback_preserves_constant_product(self):
        result = BuybackModel().apply(123.0, REFERENCE_RESERVES)
        assert result.yield_reserve * result.reward_reserve == pytest.approx(500.0 * 50.0)

    def test_input_not_mutated(self):
        reserves = ReservePair(500.0, 50.0)
        BuybackModel().apply(10.0, reserves)
        assert reserves == ReservePair(500.0, 50.0)


class TestTradeProfit:

    def test_profitable(self):
        assert compute_trade_profit(0.5, 10.0, 10.0) == pytest.approx(5.0)

    def test_unprofitable_floors_at_zero(self):
        assert compute_trade_profit(2.0, 10.0, 10.0) == 0.0


class TestTradeOptimizer:

    def test_candidate_sizes_reference(self):
        """A backlog of 10 is searched at 1, 2, ..., 10."""
        sizes = TradeOptimizer().candidate_sizes(10.0)
        assert sizes == pytest.approx([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0])

    @pytest.mark.parametrize("accrued", [0.3, 7.0, 123.456, 1e6])
    def test_candidate_sizes_never_exceed_backlog(self, accrued):
        sizes = TradeOptimizer().candidate_sizes(accrued)
        assert len(sizes) == 10
        assert sizes == sorted(sizes)
        assert max(sizes) <= accrued

    def test_evaluates_exactly_ten_candidates(self, monkeypatch):
        seen = []

        def counting_amount_in(amount_out, reserve_in, reserve_out):
            seen.append(amount_out)
            return get_amount_in(amount_out, reserve_in, reserve_out)

        monkeypatch.setattr(optimizer_module, 'get_amount_in', counting_amount_in)
        TradeOptimizer().find_optimal_trade(10.0, REFERENCE_RESERVES, 10.0)
        assert seen == pytest.approx([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0])

    def test_reference_scenario(self):
        """500/50 reserves, backlog 10, market rate 10: best trade is the full backlog."""
        best = TradeOptimizer().find_optimal_trade(10.0, REFERENCE_RESERVES, 10.0)

        adjusted_reward = 50.0 * 500.0 / 510.0
        expected_in = adjusted_reward * 10.0 / 500.0
        assert best.yield_amount_out == pytest.approx(10.0)
        assert best.reward_amount_in == pytest.approx(expected_in)
        assert best.profit == pytest.approx(10.0 - expected_in * 10.0)
        # Below the one-unit execution threshold
        assert best.profit < 1.0

    def test_zero_backlog_returns_zero_candidate(self):
        best = TradeOptimizer().find_optimal_trade(0.0, REFERENCE_RESERVES, 10.0)
        assert best == TradeCandidate.zero()

    def test_unprofitable_market_returns_zero_candidate(self):
        # Market values reward far above the pool price
        best = TradeOptimizer().find_optimal_trade(10.0, REFERENCE_RESERVES, 1000.0)
        assert best == TradeCandidate.zero()

    def test_invalid_sizes_are_skipped(self):
        """Sizes at or above the yield reserve count as zero profit."""
        optimizer = TradeOptimizer(FixedBuyback(ReservePair(yield_reserve=5.0, reward_reserve=50.0)))
        best = optimizer.find_optimal_trade(10.0, REFERENCE_RESERVES, 0.01)
        # profit(x) = x - 0.01 * 50x / (5 - x): 0.875, 1.667, 2.25, 2.0 for x = 1..4
        assert best.yield_amount_out == pytest.approx(3.0)
        assert best.profit == pytest.approx(2.25)

    def test_ties_keep_smaller_trade(self, monkeypatch):
        monkeypatch.setattr(optimizer_module, 'compute_trade_profit', lambda *args: 2.0)
        best = TradeOptimizer().find_optimal_trade(10.0, REFERENCE_RESERVES, 10.0)
        assert best.yield_amount_out == pytest.approx(1.0)
        assert best.profit == 2.0

    def test_zero_market_rate_takes_full_backlog(self):
        """Free reward makes every size pure profit; the largest wins."""
        best = TradeOptimizer().find_optimal_trade(10.0, REFERENCE_RESERVES, 0.0)
        assert best.yield_amount_out == pytest.approx(10.0)
        assert best.profit == pytest.approx(10.0)

    @pytest.mark.parametrize("accrued,rate", [
        (1.0, 10.0), (30.0, 10.0), (500.0, 10.0), (5000.0, 3.0), (42.0, 0.5),
    ])
    def test_result_bounds(self, accrued, rate):
        best = TradeOptimizer().find_optimal_trade(accrued, REFERENCE_RESERVES, rate)
        assert 0.0 <= best.yield_amount_out <= accrued
        assert best.profit >= 0.0


class TestRebalancer:

    @pytest.fixture
    def params(self):
        return LiquidatorParams(ema_alpha=0.7, swap_multiplier=0.3, liquidity_fraction=0.02)

    def test_commit_matches_step_by_step_math(self, params):
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=0.0)
        new_state = Rebalancer(params).commit(20.0, 30.0, state)

        # buyback
        y = 530.0
        r = 50.0 - 30.0 * 50.0 / 530.0
        # trade
        reward_in = r * 20.0 / (y - 20.0)
        y, r = y - 20.0, r + reward_in
        # downward pressure
        pressure_in = r * 6.0 / (y - 6.0)
        y, r = y - 6.0, r + pressure_in
        # ema and rescale
        ema = 30.0 * 0.7
        scale = ema / (y * 0.02)

        assert new_state.yield_ema == pytest.approx(ema)
        assert new_state.reserves.yield_reserve == pytest.approx(y * scale)
        assert new_state.reserves.reward_reserve == pytest.approx(r * scale)

    def test_ema_invariant_after_commit(self, params):
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=12.0)
        new_state = Rebalancer(params).commit(25.0, 40.0, state)
        ratio = new_state.yield_ema / (new_state.reserves.yield_reserve * params.liquidity_fraction)
        assert ratio == pytest.approx(1.0, rel=1e-12)
        assert new_state.yield_ema == pytest.approx(40.0 * 0.7 + 12.0 * 0.3)

    def test_pressure_lowers_price(self):
        """More phantom pressure leaves fewer yield per reward in the pool."""
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=0.0)
        calm = Rebalancer(LiquidatorParams(swap_multiplier=0.0)).commit(20.0, 30.0, state)
        pressured = Rebalancer(LiquidatorParams(swap_multiplier=1.0)).commit(20.0, 30.0, state)
        assert pressured.reserves.price < calm.reserves.price

    def test_input_state_unchanged(self, params):
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=5.0)
        Rebalancer(params).commit(10.0, 30.0, state)
        assert state == MarketState(reserves=REFERENCE_RESERVES, yield_ema=5.0)

    def test_draining_pressure_raises(self):
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=0.0)
        rebalancer = Rebalancer(LiquidatorParams(swap_multiplier=100.0))
        with pytest.raises(InvalidTrade):
            rebalancer.commit(10.0, 10.0, state)

    def test_draining_trade_raises(self, params):
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=0.0)
        with pytest.raises(InvalidTrade):
            Rebalancer(params).commit(600.0, 10.0, state)

    def test_reserves_positive_over_many_commits(self, params):
        rebalancer = Rebalancer(params)
        optimizer = TradeOptimizer(rebalancer.buyback)
        state = MarketState(reserves=REFERENCE_RESERVES, yield_ema=0.0)
        backlog = 0.0
        commits = 0
        for tick in range(300):
            backlog += 10.0 if tick < 150 else 200.0
            best = optimizer.find_optimal_trade(backlog, state.reserves, 10.0)
            if best.profit < 1.0:
                continue
            state = rebalancer.commit(best.yield_amount_out, backlog, state)
            backlog -= best.yield_amount_out
            commits += 1
            assert state.reserves.is_valid()
            assert math.isclose(
                state.yield_ema,
                state.reserves.yield_reserve * params.liquidity_fraction,
                rel_tol=1e-9
            )
        assert commits > 0
