"""Particle system handed to the control algorithms."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .box import Box
from .topology import Topology

# Boltzmann constant in MD units (kJ/mol/K)
K_BOLTZMANN = 8.314462618e-3


@dataclass
class System:
    """
    Particles, molecules and cell of a simulation.

    Per-particle attributes are stored column-wise: row ``i`` of
    ``positions``, ``velocities`` and ``masses`` describes the same
    particle, so algorithms can work on several attributes jointly by
    shared index. Control algorithms mutate these arrays in place.

    Attributes:
        positions: Atomic positions, shape (N, 3).
        velocities: Atomic velocities, shape (N, 3).
        masses: Atomic masses, shape (N,).
        box: Simulation cell.
        molecules: Atom indices of every molecule. Defaults to one
            molecule per atom.
        step: Current step number.
    """

    positions: NDArray[np.floating]
    velocities: NDArray[np.floating]
    masses: NDArray[np.floating]
    box: Box
    molecules: list[NDArray[np.integer]] = field(default_factory=list)
    step: int = 0

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.positions = np.asarray(self.positions, dtype=np.float64)
        self.velocities = np.asarray(self.velocities, dtype=np.float64)
        self.masses = np.asarray(self.masses, dtype=np.float64)

        n_atoms = len(self.masses)
        if self.positions.shape != (n_atoms, 3):
            raise ValueError(
                f"positions shape {self.positions.shape} incompatible with "
                f"{n_atoms} atoms"
            )
        if self.velocities.shape != (n_atoms, 3):
            raise ValueError(
                f"velocities shape {self.velocities.shape} incompatible with "
                f"{n_atoms} atoms"
            )

        if len(self.molecules) == 0:
            self.molecules = [np.array([i]) for i in range(n_atoms)]
        self.molecules = [np.asarray(m, dtype=np.intp) for m in self.molecules]

        covered = (
            np.sort(np.concatenate(self.molecules))
            if n_atoms > 0
            else np.array([], dtype=np.intp)
        )
        if not np.array_equal(covered, np.arange(n_atoms)):
            raise ValueError("molecules must partition the atoms exactly once")

    @classmethod
    def create(
        cls,
        positions: ArrayLike,
        masses: ArrayLike,
        box: Box,
        velocities: ArrayLike | None = None,
        topology: Topology | None = None,
        step: int = 0,
    ) -> System:
        """
        Create a System with optional velocity and topology initialization.

        Args:
            positions: Atomic positions, shape (N, 3).
            masses: Atomic masses, shape (N,).
            box: Simulation cell.
            velocities: Atomic velocities, shape (N, 3). Defaults to zeros.
            topology: Bond topology used to find molecules. Defaults to
                one molecule per atom.
            step: Current step number.

        Returns:
            New System instance.
        """
        positions = np.asarray(positions, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64)
        n_atoms = len(masses)

        if velocities is None:
            velocities = np.zeros((n_atoms, 3), dtype=np.float64)

        molecules: list[NDArray[np.integer]] = []
        if topology is not None:
            if topology.n_atoms != n_atoms:
                raise ValueError(
                    f"topology has {topology.n_atoms} atoms, system has {n_atoms}"
                )
            molecules = topology.molecules

        return cls(
            positions=positions,
            velocities=velocities,
            masses=masses,
            box=box,
            molecules=molecules,
            step=step,
        )

    def copy(self) -> System:
        """Create a deep copy of this system."""
        return System(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            masses=self.masses.copy(),
            box=self.box,  # Box is immutable
            molecules=[m.copy() for m in self.molecules],
            step=self.step,
        )

    @property
    def n_atoms(self) -> int:
        """Return number of atoms."""
        return len(self.masses)

    @property
    def n_molecules(self) -> int:
        """Return number of molecules."""
        return len(self.molecules)

    @property
    def total_mass(self) -> float:
        return float(np.sum(self.masses))

    @property
    def kinetic_energy(self) -> float:
        """Compute total kinetic energy: sum(0.5 * m * v^2)."""
        return float(0.5 * np.sum(self.masses[:, np.newaxis] * self.velocities**2))

    @property
    def degrees_of_freedom(self) -> int:
        """Number of degrees of freedom, 3N - 3 (0 for a single atom)."""
        if self.n_atoms <= 1:
            return 0
        return 3 * self.n_atoms - 3

    @property
    def temperature(self) -> float:
        """
        Compute instantaneous temperature from kinetic energy.

        Uses T = 2 * KE / (N_dof * k_B) where N_dof = 3*N - 3.
        Returns 0 if N <= 1.
        """
        n_dof = self.degrees_of_freedom
        if n_dof == 0:
            return 0.0
        return 2.0 * self.kinetic_energy / (n_dof * K_BOLTZMANN)

    @property
    def center_of_mass(self) -> NDArray[np.floating]:
        """Compute center of mass position."""
        return (
            np.sum(self.masses[:, np.newaxis] * self.positions, axis=0)
            / self.total_mass
        )

    @property
    def center_of_mass_velocity(self) -> NDArray[np.floating]:
        """Compute center of mass velocity."""
        return self.momentum / self.total_mass

    @property
    def momentum(self) -> NDArray[np.floating]:
        """Total linear momentum sum(m * v)."""
        return np.sum(self.masses[:, np.newaxis] * self.velocities, axis=0)

    @property
    def angular_momentum(self) -> NDArray[np.floating]:
        """Total angular momentum about the center of mass."""
        delta = self.positions - self.center_of_mass
        return np.sum(
            self.masses[:, np.newaxis] * np.cross(delta, self.velocities), axis=0
        )

    def molecule_center_of_mass(self, index: int) -> NDArray[np.floating]:
        """
        Compute the center of mass of molecule ``index``.

        Falls back to the geometric center for a massless molecule.
        """
        atoms = self.molecules[index]
        masses = self.masses[atoms]
        if np.sum(masses) <= 0:
            return np.mean(self.positions[atoms], axis=0)
        return (
            np.sum(masses[:, np.newaxis] * self.positions[atoms], axis=0)
            / np.sum(masses)
        )

    def wrap_molecule(self, index: int) -> None:
        """
        Translate molecule ``index`` so its center of mass is in the cell.

        The whole molecule moves by a single lattice vector: offsets
        between its atoms are unchanged, and individual atoms may still
        lie outside of the cell afterwards.
        """
        atoms = self.molecules[index]
        shift = self.box.image_shift(self.molecule_center_of_mass(index))
        self.positions[atoms] += shift
