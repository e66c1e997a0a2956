"""Sensitivity analysis for the liquidator tuning parameters."""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from ..config.schema import Config
from ..simulation.runner import SimulationRunner


@dataclass
class ParameterSweep:
    """Result of a single parameter sweep."""
    parameter_name: str
    parameter_label: str
    base_value: float
    sweep_values: List[float]
    metric_values: Dict[str, List[float]]  # metric_name -> values at each sweep point


@dataclass
class TornadoEntry:
    """Single entry in a tornado chart."""
    parameter_name: str
    parameter_label: str
    base_value: float
    low_value: float
    high_value: float
    metric_at_low: float
    metric_at_high: float
    impact_range: float  # |high - low| metric value


@dataclass
class SensitivityResult:
    """Complete sensitivity analysis result."""
    base_config: Config
    base_metrics: Dict[str, Any]
    sweeps: Dict[str, ParameterSweep]
    tornado_data: Dict[str, List[TornadoEntry]]  # metric_name -> sorted entries


class SensitivityAnalyzer:
    """Perform sensitivity analysis on the liquidator parameters."""

    # (config_path, label, low_mult, high_mult, (min, max))
    DEFAULT_PARAMETERS = {
        'ema_alpha': ('liquidator.ema_alpha', 'EMA Alpha', 0.5, 1.4, (1e-6, 1.0)),
        'swap_multiplier': ('liquidator.swap_multiplier', 'Swap Multiplier', 0.0, 2.0, (0.0, None)),
        'liquidity_fraction': ('liquidator.liquidity_fraction', 'Liquidity Fraction', 0.5, 2.0, (1e-9, None)),
    }

    CORE_METRICS = [
        'arb_count',
        'cumulative_reward_spent',
        'mean_efficiency',
        'final_unsold_yield'
    ]

    def __init__(self, config: Config, parameters: Dict[str, Tuple] = None):
        """
        Initialize sensitivity analyzer.

        Args:
            config: Base configuration
            parameters: Optional custom parameter definitions
                Format: {name: (config_path, label, low_mult, high_mult, (min, max))}
        """
        self.config = config
        self.parameters = parameters or self.DEFAULT_PARAMETERS

    def run_sweep(self, parameter_name: str, num_points: int = 11) -> ParameterSweep:
        """
        Run one-at-a-time sweep for a single parameter.

        Args:
            parameter_name: Name of parameter to sweep
            num_points: Number of sweep points

        Returns:
            ParameterSweep result
        """
        if parameter_name not in self.parameters:
            raise ValueError(f"Unknown parameter: {parameter_name}")

        config_path, label, low_mult, high_mult, bounds = self.parameters[parameter_name]
        base_value = self._get_config_value(self.config, config_path)

        low_value = self._clip(base_value * low_mult, bounds)
        high_value = self._clip(base_value * high_mult, bounds)
        sweep_values = [float(v) for v in np.linspace(low_value, high_value, num_points)]

        metric_values = {metric: [] for metric in self.CORE_METRICS}

        for val in sweep_values:
            metrics = self._run_with(config_path, val)
            for metric in self.CORE_METRICS:
                metric_values[metric].append(metrics[metric])

        return ParameterSweep(
            parameter_name=parameter_name,
            parameter_label=label,
            base_value=base_value,
            sweep_values=sweep_values,
            metric_values=metric_values
        )

    def compute_tornado(self, target_metric: str = 'cumulative_reward_spent') -> List[TornadoEntry]:
        """
        Compute tornado chart data for a target metric.

        Args:
            target_metric: Metric to analyze

        Returns:
            List of TornadoEntry sorted by impact (largest first)
        """
        if target_metric not in self.CORE_METRICS:
            raise ValueError(f"Unknown metric: {target_metric}")

        entries = []

        for param_name, (config_path, label, low_mult, high_mult, bounds) in self.parameters.items():
            base_value = self._get_config_value(self.config, config_path)
            low_value = self._clip(base_value * low_mult, bounds)
            high_value = self._clip(base_value * high_mult, bounds)

            metric_at_low = self._run_with(config_path, low_value)[target_metric]
            metric_at_high = self._run_with(config_path, high_value)[target_metric]

            entries.append(TornadoEntry(
                parameter_name=param_name,
                parameter_label=label,
                base_value=base_value,
                low_value=low_value,
                high_value=high_value,
                metric_at_low=metric_at_low,
                metric_at_high=metric_at_high,
                impact_range=abs(metric_at_high - metric_at_low)
            ))

        # Sort by impact (largest first)
        entries.sort(key=lambda e: e.impact_range, reverse=True)

        return entries

    def run_full_analysis(self, num_sweep_points: int = 11) -> SensitivityResult:
        """
        Run complete sensitivity analysis.

        Args:
            num_sweep_points: Number of points per parameter sweep

        Returns:
            Complete SensitivityResult
        """
        base_result = SimulationRunner(self.config).run()
        base_metrics = {metric: base_result.final_metrics[metric] for metric in self.CORE_METRICS}

        sweeps = {}
        for param_name in self.parameters:
            sweeps[param_name] = self.run_sweep(param_name, num_sweep_points)

        tornado_data = {}
        for metric in self.CORE_METRICS:
            tornado_data[metric] = self.compute_tornado(metric)

        return SensitivityResult(
            base_config=self.config,
            base_metrics=base_metrics,
            sweeps=sweeps,
            tornado_data=tornado_data
        )

    def _run_with(self, config_path: str, value: float) -> Dict[str, Any]:
        """Run a simulation with one parameter overridden."""
        modified_config = copy.deepcopy(self.config)
        self._set_config_value(modified_config, config_path, value)
        return SimulationRunner(modified_config).run().final_metrics

    @staticmethod
    def _clip(value: float, bounds: Tuple) -> float:
        low, high = bounds
        if low is not None:
            value = max(value, low)
        if high is not None:
            value = min(value, high)
        return value

    def _get_config_value(self, config: Config, path: str) -> float:
        """Get a value from config using dot-notation path."""
        parts = path.split('.')
        obj = config
        for part in parts:
            obj = getattr(obj, part)
        return float(obj)

    def _set_config_value(self, config: Config, path: str, value: float) -> None:
        """Set a value in config using dot-notation path."""
        parts = path.split('.')
        obj = config
        for part in parts[:-1]:
            obj = getattr(obj, part)
        setattr(obj, parts[-1], value)


def compute_parameter_importance(tornado_entries: List[TornadoEntry]) -> Dict[str, float]:
    """
    Compute normalized parameter importance scores.

    Args:
        tornado_entries: List of tornado entries

    Returns:
        Dict mapping parameter name to importance score (0-1)
    """
    if not tornado_entries:
        return {}

    max_impact = max(e.impact_range for e in tornado_entries)

    importance = {}
    for entry in tornado_entries:
        if max_impact > 0:
            importance[entry.parameter_name] = entry.impact_range / max_impact
        else:
            importance[entry.parameter_name] = 0.0

    return importance
