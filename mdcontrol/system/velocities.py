"""Velocity initialization and rescaling."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ..errors import InvalidConfiguration
from .system import K_BOLTZMANN

if TYPE_CHECKING:
    from .system import System

logger = logging.getLogger(__name__)


def scale_velocities(system: System, temperature: float) -> None:
    """
    Rescale all velocities so the instantaneous temperature is exact.

    Leaves the velocities untouched (and logs a warning) when the system
    has no kinetic energy, since no scaling factor can heat it up.

    Args:
        system: System to modify in place.
        temperature: Temperature to reach, in K.
    """
    current = system.temperature
    if current <= 0.0:
        logger.warning(
            "Can not rescale velocities from zero temperature, leaving them as-is"
        )
        return
    system.velocities *= np.sqrt(temperature / current)


def boltzmann_velocities(
    system: System, temperature: float, seed: int | None = None
) -> None:
    """
    Draw velocities from the Maxwell-Boltzmann distribution.

    Each component is sampled with sigma = sqrt(kT/m), the center of
    mass drift is removed, and the result is rescaled so that the
    instantaneous temperature is exactly ``temperature``.

    Args:
        system: System to modify in place.
        temperature: Target temperature in K.
        seed: Random seed for reproducibility.
    """
    if not temperature >= 0:
        raise InvalidConfiguration(
            f"temperature must be non-negative, got {temperature}"
        )
    if system.n_atoms == 0:
        return
    if temperature == 0:
        system.velocities[:] = 0.0
        return

    rng = np.random.default_rng(seed)
    masses = system.masses
    sigma = np.sqrt(K_BOLTZMANN * temperature / masses)
    velocities = rng.standard_normal((system.n_atoms, 3)) * sigma[:, np.newaxis]

    velocities -= np.sum(masses[:, np.newaxis] * velocities, axis=0) / np.sum(masses)
    system.velocities[:] = velocities
    scale_velocities(system, temperature)
