"""Particle system, cell and topology."""

from .box import Box
from .system import K_BOLTZMANN, System
from .topology import Topology
from .velocities import boltzmann_velocities, scale_velocities

__all__ = [
    "Box",
    "System",
    "Topology",
    "K_BOLTZMANN",
    "boltzmann_velocities",
    "scale_velocities",
]
