"""Configuration schema and loading."""

from .loader import config_from_dict, load_config
from .schema import Config, InitialState, LiquidatorParams, Schedules, Simulation

__all__ = [
    "Config",
    "InitialState",
    "LiquidatorParams",
    "Schedules",
    "Simulation",
    "load_config",
    "config_from_dict",
]
