"""Simulation of a yield liquidator backed by a self-adjusting virtual CPMM."""

__version__ = "0.1.0"
