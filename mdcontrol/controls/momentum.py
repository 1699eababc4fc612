"""Removal of global translation and rotation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .base import Control

if TYPE_CHECKING:
    from ..system import System

logger = logging.getLogger(__name__)


class RemoveTranslation(Control):
    """
    Remove the center of mass motion of the system.

    Subtracts v_com = sum(m * v) / sum(m) from every velocity, leaving
    a system with zero net linear momentum.
    """

    def control(self, system: System) -> None:
        total_mass = system.total_mass
        if total_mass <= 0.0:
            logger.warning("Can not remove translation from a massless system")
            return

        system.velocities -= system.momentum / total_mass

    def __repr__(self) -> str:
        return "RemoveTranslation()"


class RemoveRotation(Control):
    """
    Remove the global rotation of the system around its center of mass.

    The angular velocity is obtained from L = I w, with L the angular
    momentum and I the inertia tensor about the center of mass, and the
    matching rigid rotation w x (r - r_com) is subtracted from every
    velocity. The center of mass velocity is left unchanged.

    For linear or point-like mass distributions the inertia tensor is
    singular; the pseudo-inverse is used so that rotation about the
    remaining axes is still removed.
    """

    def control(self, system: System) -> None:
        if system.total_mass <= 0.0:
            logger.warning("Can not remove rotation from a massless system")
            return

        masses = system.masses
        delta = system.positions - system.center_of_mass

        moment = np.sum(
            masses[:, np.newaxis] * np.cross(delta, system.velocities), axis=0
        )

        # Point-mass accumulator A = -sum(m d (x) d), then I = A - tr(A) 1
        inertia = -np.einsum("i,ij,ik->jk", masses, delta, delta)
        inertia -= np.trace(inertia) * np.eye(3)

        angular = np.linalg.pinv(inertia) @ moment
        system.velocities -= np.cross(angular, delta)

    def __repr__(self) -> str:
        return "RemoveRotation()"
