"""Simulation drivers for control algorithms."""

from .pipeline import ControlPipeline

__all__ = ["ControlPipeline"]
