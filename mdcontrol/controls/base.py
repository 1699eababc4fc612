"""Base interfaces for control algorithms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..system import System


class Control(ABC):
    """
    Abstract base class for simulation control algorithms.

    Controls run once per integration step (or every Nth step when
    wrapped in an Alternator) and mutate the system they are given in
    place, to keep temperature, momentum or periodic images in check.
    A control only holds its own fixed parameters and never keeps a
    reference to the system between calls.
    """

    def setup(self, system: System) -> None:
        """Called once before the simulation starts."""
        pass

    @abstractmethod
    def control(self, system: System) -> None:
        """
        Apply the control algorithm.

        Args:
            system: System to modify in place.
        """
        ...

    def finish(self, system: System) -> None:
        """Called once after the simulation ends."""
        pass


class Thermostat(Control):
    """
    Abstract base class for controls acting as thermostats.

    Thermostats steer the instantaneous temperature of the system
    toward a fixed target by scaling velocities.
    """

    @property
    @abstractmethod
    def target_temperature(self) -> float:
        """Return target temperature."""
        ...
