"""Thermostat implementations as composable controls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ..errors import InvalidConfiguration
from ..system.velocities import scale_velocities
from .base import Thermostat

if TYPE_CHECKING:
    from ..system import System

logger = logging.getLogger(__name__)


def _check_temperature(temperature: float) -> None:
    # NaN fails every comparison
    if not temperature >= 0:
        raise InvalidConfiguration(
            f"The temperature must be positive in thermostats, got {temperature}"
        )


class RescaleThermostat(Thermostat):
    """
    Velocity rescaling thermostat with a tolerance window.

    Rescales all velocities to achieve exactly the target temperature,
    but only when the instantaneous temperature strays from the target
    by strictly more than the tolerance. With a target of 300 K and a
    tolerance of 10 K, velocities are only touched below 290 K or above
    310 K. A zero tolerance rescales on every call.

    Useful for equilibration but not for production NVT simulations,
    as it does not sample the canonical velocity distribution.
    """

    def __init__(self, temperature: float) -> None:
        """
        Initialize rescaling thermostat with a tolerance of 5% of the target.

        Args:
            temperature: Target temperature in K.

        Raises:
            InvalidConfiguration: If the temperature is negative or NaN.
        """
        _check_temperature(temperature)
        self._temperature = temperature
        self._tol = 0.05 * temperature

    @classmethod
    def with_tolerance(cls, temperature: float, tol: float) -> RescaleThermostat:
        """
        Create a rescaling thermostat with an explicit tolerance.

        Args:
            temperature: Target temperature in K.
            tol: Tolerance in K. Use 0 to rescale at every call.

        Raises:
            InvalidConfiguration: If the temperature or tolerance is negative or NaN.
        """
        if not tol >= 0:
            raise InvalidConfiguration(
                f"The tolerance must be positive in rescale thermostat, got {tol}"
            )
        thermostat = cls(temperature)
        thermostat._tol = tol
        return thermostat

    @property
    def target_temperature(self) -> float:
        return self._temperature

    @property
    def tolerance(self) -> float:
        return self._tol

    def control(self, system: System) -> None:
        """
        Rescale velocities if the temperature is out of the tolerance window.

        Args:
            system: System to modify in place.
        """
        current_temp = system.temperature
        if abs(current_temp - self._temperature) > self._tol:
            logger.debug(
                "Rescaling velocities from %.6g K to %.6g K",
                current_temp,
                self._temperature,
            )
            scale_velocities(system, self._temperature)

    def __repr__(self) -> str:
        return (
            f"RescaleThermostat(temperature={self._temperature}, tol={self._tol})"
        )


class BerendsenThermostat(Thermostat):
    """
    Berendsen weak-coupling thermostat.

    Scales velocities toward target temperature with a characteristic
    relaxation time, at every call. Does not produce the canonical
    ensemble but is useful for equilibration due to gentle temperature
    control.

    dT/dt = (T_target - T) / tau

    Reference: H.J.C. Berendsen et al., J. Chem. Phys. 81, 3684 (1984).

    Attributes:
        temperature: Target temperature in K.
        tau: Relaxation time, as a multiple of the integrator timestep.
    """

    def __init__(self, temperature: float, tau: float) -> None:
        """
        Initialize Berendsen thermostat.

        Args:
            temperature: Target temperature in K.
            tau: Relaxation time, in units of the integration timestep.
                ``tau = 0`` couples instantaneously, like a rescaling
                thermostat without tolerance.

        Raises:
            InvalidConfiguration: If the temperature or tau is negative or NaN.
        """
        _check_temperature(temperature)
        if not tau >= 0:
            raise InvalidConfiguration(
                f"The timestep must be positive in berendsen thermostat, got {tau}"
            )
        self._temperature = temperature
        self._tau = tau

    @property
    def target_temperature(self) -> float:
        return self._temperature

    @property
    def tau(self) -> float:
        return self._tau

    def control(self, system: System) -> None:
        """
        Apply Berendsen thermostat coupling.

        Args:
            system: System to modify in place.
        """
        current_temp = system.temperature

        if current_temp <= 0.0:
            logger.warning(
                "Berendsen thermostat can not act on a system at zero temperature"
            )
            return

        if self._tau == 0:
            scale_sq = self._temperature / current_temp
        else:
            # lambda = sqrt(1 + 1/tau * (T_target/T - 1))
            scale_sq = 1.0 + (self._temperature / current_temp - 1.0) / self._tau

        if scale_sq < 0:
            scale_sq = 0.0

        system.velocities *= np.sqrt(scale_sq)

    def __repr__(self) -> str:
        return f"BerendsenThermostat(temperature={self._temperature}, tau={self._tau})"
