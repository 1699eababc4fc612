"""Control algorithms applied during a simulation."""

from .alternator import Alternator
from .base import Control, Thermostat
from .momentum import RemoveRotation, RemoveTranslation
from .rewrap import Rewrap
from .thermostats import BerendsenThermostat, RescaleThermostat

__all__ = [
    # Base classes
    "Control",
    "Thermostat",
    "Alternator",
    # Thermostats
    "RescaleThermostat",
    "BerendsenThermostat",
    # Momentum correctors
    "RemoveTranslation",
    "RemoveRotation",
    # Periodic images
    "Rewrap",
]
