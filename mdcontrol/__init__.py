"""
mdcontrol - Simulation control algorithms for molecular dynamics.

Controls run once per (or every Nth) integration step to enforce
macroscopic constraints on a particle system:
- Temperature control (rescale and Berendsen thermostats)
- Removal of net linear and angular momentum
- Rewrapping of molecules into the periodic cell

Quick Start:
    >>> from mdcontrol import Box, ControlPipeline, RemoveTranslation, System
    >>> from mdcontrol import BerendsenThermostat
    >>> pipeline = ControlPipeline(thermostat=BerendsenThermostat(300.0, 100.0))
    >>> pipeline.add(RemoveTranslation())
    >>> pipeline.run(system, nsteps=1000, propagate=integrator_step)
"""

__version__ = "0.1.0"

from .config import load_pipeline, pipeline_from_config
from .controls import (
    Alternator,
    BerendsenThermostat,
    Control,
    RemoveRotation,
    RemoveTranslation,
    RescaleThermostat,
    Rewrap,
    Thermostat,
)
from .engines import ControlPipeline
from .errors import InvalidConfiguration
from .system import Box, System, Topology

__all__ = [
    "Box",
    "System",
    "Topology",
    "Control",
    "Thermostat",
    "Alternator",
    "RescaleThermostat",
    "BerendsenThermostat",
    "RemoveTranslation",
    "RemoveRotation",
    "Rewrap",
    "ControlPipeline",
    "InvalidConfiguration",
    "load_pipeline",
    "pipeline_from_config",
]
