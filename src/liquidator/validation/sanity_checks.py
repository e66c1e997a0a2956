"""Sanity checks and validation for simulation inputs and outputs."""

import math
from dataclasses import dataclass
from typing import List, Optional

from ..config.schema import Config
from ..simulation.runner import SimulationResult
from ..simulation.schedule import ScheduleMap, ZeroRatePolicy
from ..simulation.sinks import ArbitrageRecord


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "schedule", "bounds", "invariant"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration and simulation output."""

    # Relative tolerance for yield_ema == yield_reserve * liquidity_fraction
    EMA_TOLERANCE = 1e-9

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []
        params = self.config.liquidator
        schedules = self.config.schedules
        policy = ZeroRatePolicy(schedules.zero_rate_policy)

        # Scheduled zeros are silently skipped under carry-forward
        for name, rates in (("market_rates", schedules.market_rates),
                            ("accrual_rates", schedules.accrual_rates)):
            ignored = ScheduleMap(rates, policy).ignored_ticks()
            if ignored:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="schedule",
                    message=f"{name} has zero entries that will be ignored",
                    details=f"Ticks {ignored} keep the previous rate under '{policy.value}'"
                ))

        if params.liquidity_fraction > 0.5:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Liquidity fraction >50% makes the virtual pool very shallow",
                details=f"Current value: {params.liquidity_fraction}"
            ))

        if params.swap_multiplier > 1.0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Swap multiplier >1 applies more phantom pressure than real trading",
                details=f"Current value: {params.swap_multiplier}"
            ))

        return warnings

    def check_record(self, record: ArbitrageRecord) -> List[ValidationWarning]:
        """
        Check one arbitrage record against the pool invariants.

        Args:
            record: Executed arbitrage

        Returns:
            List of validation warnings
        """
        warnings = []

        for name, value in (("yield_virtual_liquidity", record.yield_virtual_liquidity),
                            ("token_virtual_liquidity", record.token_virtual_liquidity),
                            ("moving_average", record.moving_average),
                            ("efficiency", record.efficiency)):
            if math.isnan(value) or math.isinf(value):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="nan",
                    message=f"Invalid value detected in {name} at t={record.time}",
                    details=f"Value: {value}"
                ))

        if record.yield_virtual_liquidity <= 0 or record.token_virtual_liquidity <= 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message=f"Virtual reserves not positive at t={record.time}",
                details=f"yield={record.yield_virtual_liquidity}, token={record.token_virtual_liquidity}"
            ))
            return warnings

        target = record.yield_virtual_liquidity * self.config.liquidator.liquidity_fraction
        if not math.isclose(record.moving_average, target, rel_tol=self.EMA_TOLERANCE):
            warnings.append(ValidationWarning(
                severity="error",
                category="invariant",
                message=f"Moving average does not track virtual liquidity at t={record.time}",
                details=f"EMA {record.moving_average} vs {target}"
            ))

        if record.unsold_yield < 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message=f"Sold more yield than accrued at t={record.time}",
                details=f"Unsold: {record.unsold_yield}"
            ))

        return warnings


def validate_simulation_results(result: SimulationResult) -> List[ValidationWarning]:
    """
    Validate a complete simulation result.

    Args:
        result: Simulation result to validate

    Returns:
        List of all validation warnings
    """
    checker = SanityChecker(result.config)
    warnings = checker.check_config_inputs()

    for record in result.records:
        warnings.extend(checker.check_record(record))

    for message in result.commit_errors:
        warnings.append(ValidationWarning(
            severity="error",
            category="commit",
            message="Arbitrage commit aborted",
            details=message
        ))

    return warnings
