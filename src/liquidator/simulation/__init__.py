"""Time-stepped liquidator simulation."""

from .runner import SimulationResult, SimulationRunner, SimulationState
from .schedule import ScheduleMap, ZeroRatePolicy
from .sinks import ArbitrageRecord, MetricsSink, RecordCollector

__all__ = [
    "SimulationRunner",
    "SimulationResult",
    "SimulationState",
    "ScheduleMap",
    "ZeroRatePolicy",
    "ArbitrageRecord",
    "MetricsSink",
    "RecordCollector",
]
