"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LiquidatorParams(BaseModel):
    """Tuning parameters of the liquidator."""
    ema_alpha: float = Field(
        gt=0, le=1, default=0.7,
        description="How reactive the yield moving average is. Higher alpha weights recent values more"
    )
    swap_multiplier: float = Field(
        ge=0, default=0.3,
        description="How quickly the price tracks downward market swings. Higher values leave more yield unsold"
    )
    liquidity_fraction: float = Field(
        gt=0, default=0.02,
        description="Size of the virtual LP relative to the average yield. Lower is more efficient but tracks drops poorly"
    )
    min_profit: float = Field(
        ge=0, default=1.0,
        description="Minimum arbitrage profit (yield units) for a trade to execute"
    )


class InitialState(BaseModel):
    """Initial virtual pool state."""
    yield_reserve: float = Field(gt=0, default=500.0, description="Virtual yield reserve")
    reward_reserve: float = Field(gt=0, default=50.0, description="Virtual reward (POOL) reserve")
    yield_ema: float = Field(ge=0, default=0.0, description="Initial moving average of liquidated yield")


def _default_market_rates() -> Dict[int, float]:
    return {
        0: 10.0, 50: 12.0, 80: 14.0, 100: 16.0, 140: 18.0, 150: 20.0, 180: 22.0,
        200: 24.0, 240: 26.0, 280: 28.0, 320: 30.0, 350: 32.0, 400: 30.0,
        450: 22.0, 500: 16.0, 600: 10.0, 700: 8.0,
    }


def _default_accrual_rates() -> Dict[int, float]:
    return {0: 10.0, 100: 100.0, 400: 1000.0, 800: 10000.0}


class Schedules(BaseModel):
    """Exogenous step-function schedules keyed by tick."""
    market_rates: Dict[int, float] = Field(
        default_factory=_default_market_rates,
        description="Market exchange rate (yield per reward unit) by tick"
    )
    accrual_rates: Dict[int, float] = Field(
        default_factory=_default_accrual_rates,
        description="Yield accrued per tick, by tick"
    )
    zero_rate_policy: Literal["carry_forward", "apply"] = Field(
        default="carry_forward",
        description="carry_forward ignores scheduled zeros (legacy); apply treats zero as a real rate"
    )

    @field_validator('market_rates', 'accrual_rates')
    @classmethod
    def validate_schedule(cls, v, info):
        """Ticks non-negative, rates non-negative, tick 0 present."""
        if 0 not in v:
            raise ValueError(f"{info.field_name} must define a rate at tick 0")
        for tick, rate in v.items():
            if tick < 0:
                raise ValueError(f"{info.field_name}: negative tick {tick}")
            if rate < 0:
                raise ValueError(f"{info.field_name}: negative rate {rate} at tick {tick}")
        return v


class Simulation(BaseModel):
    """Simulation run parameters."""
    duration: int = Field(gt=0, default=1000, description="Number of ticks to run")
    output_csv: Optional[str] = Field(default=None, description="Optional per-arbitrage CSV path")


class Config(BaseModel):
    """Complete configuration for the liquidator simulation."""
    liquidator: LiquidatorParams = Field(default_factory=LiquidatorParams)
    initial_state: InitialState = Field(default_factory=InitialState)
    schedules: Schedules = Field(default_factory=Schedules)
    simulation: Simulation = Field(default_factory=Simulation)

    @model_validator(mode='after')
    def validate_initial_rates(self):
        """The run starts from the tick-0 rates, so they must be usable."""
        if self.schedules.market_rates[0] <= 0:
            raise ValueError("market_rates[0] must be positive")
        return self

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
