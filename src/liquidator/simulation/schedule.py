"""Sparse step-function rate schedules."""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping


class ZeroRatePolicy(str, Enum):
    """How a scheduled rate of exactly zero is treated.

    CARRY_FORWARD reproduces the legacy runs: a zero entry is skipped and the
    previous rate stays active. APPLY makes zero a real rate change.
    """
    CARRY_FORWARD = "carry_forward"
    APPLY = "apply"


class ScheduleMap:
    """Sparse tick -> rate mapping with carry-forward semantics.

    Ticks without an entry keep the previously active rate. The map is
    immutable once built.
    """

    def __init__(
        self,
        rates: Mapping[int, float],
        zero_rate_policy: ZeroRatePolicy = ZeroRatePolicy.CARRY_FORWARD
    ):
        """
        Initialize schedule.

        Args:
            rates: Tick -> rate entries; must contain tick 0
            zero_rate_policy: Treatment of zero entries
        """
        if 0 not in rates:
            raise ValueError("Schedule must define a rate at tick 0")
        for tick, rate in rates.items():
            if tick < 0:
                raise ValueError(f"Negative tick in schedule: {tick}")
            if rate < 0:
                raise ValueError(f"Negative rate {rate} at tick {tick}")

        entries: Dict[int, float] = {int(t): float(r) for t, r in sorted(rates.items())}
        self._rates = MappingProxyType(entries)
        self.zero_rate_policy = ZeroRatePolicy(zero_rate_policy)

    @property
    def rates(self) -> Mapping[int, float]:
        """Read-only view of the schedule entries."""
        return self._rates

    @property
    def initial_rate(self) -> float:
        return self._rates[0]

    def update(self, tick: int, current_rate: float) -> float:
        """
        Rate active at `tick` given the rate active before it.

        Args:
            tick: Current tick
            current_rate: Rate in force before this tick

        Returns:
            The scheduled rate if an accepted entry exists at this exact tick,
            otherwise current_rate
        """
        rate = self._rates.get(tick)
        if rate is None:
            return current_rate
        if rate > 0 or self.zero_rate_policy is ZeroRatePolicy.APPLY:
            return rate
        return current_rate

    def ignored_ticks(self) -> List[int]:
        """Ticks whose entries are skipped under the active policy."""
        if self.zero_rate_policy is ZeroRatePolicy.APPLY:
            return []
        return [tick for tick, rate in self._rates.items() if rate == 0]

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"ScheduleMap({dict(self._rates)!r}, zero_rate_policy={self.zero_rate_policy.value!r})"
