"""Bond topology and molecule detection."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components


@dataclass
class Topology:
    """
    Bond topology of a particle system.

    Index-based design (no objects per atom). Molecules are the
    connected components of the bond graph: every atom that takes part
    in no bond forms a molecule of its own.

    Attributes:
        n_atoms: Number of atoms in the system.
        atom_names: Atom names, length N.
        bonds: Bond pairs as (i, j) indices with i < j, shape (N_bonds, 2).
    """

    n_atoms: int
    atom_names: list[str] = field(default_factory=list)
    bonds: NDArray[np.integer] = field(
        default_factory=lambda: np.empty((0, 2), dtype=np.int32)
    )

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        bonds = np.asarray(self.bonds, dtype=np.int32)
        self.bonds = (
            np.sort(bonds.reshape(-1, 2), axis=1)
            if bonds.size > 0
            else np.empty((0, 2), dtype=np.int32)
        )
        if len(self.atom_names) == 0:
            self.atom_names = [f"A{i}" for i in range(self.n_atoms)]
        if len(self.atom_names) != self.n_atoms:
            raise ValueError(
                f"atom_names length {len(self.atom_names)} != n_atoms {self.n_atoms}"
            )
        if self.bonds.size > 0 and (
            self.bonds.min() < 0 or self.bonds.max() >= self.n_atoms
        ):
            raise IndexError(f"Bond index out of range [0, {self.n_atoms})")
        if np.any(self.bonds[:, 0] == self.bonds[:, 1]):
            raise ValueError("An atom can not be bonded to itself")

    @property
    def n_bonds(self) -> int:
        """Return number of bonds."""
        return len(self.bonds)

    @property
    def n_molecules(self) -> int:
        """Return number of molecules."""
        return len(self.molecules)

    @property
    def molecules(self) -> list[NDArray[np.integer]]:
        """
        Atom indices of every molecule.

        Molecules are ordered by their lowest atom index, and indices
        inside a molecule are sorted.
        """
        labels = self._labels()
        n_molecules = int(labels.max()) + 1 if labels.size > 0 else 0
        return [np.flatnonzero(labels == m) for m in range(n_molecules)]

    def molecule_of(self, index: int) -> int:
        """Return the molecule containing atom ``index``."""
        self._validate_atom_index(index)
        return int(self._labels()[index])

    def add_bond(self, i: int, j: int) -> None:
        """Add a bond between atoms i and j."""
        self._validate_atom_index(i)
        self._validate_atom_index(j)
        if i == j:
            raise ValueError("An atom can not be bonded to itself")
        new_bond = np.array([[min(i, j), max(i, j)]], dtype=np.int32)
        self.bonds = np.vstack([self.bonds, new_bond])

    def _labels(self) -> NDArray[np.integer]:
        """Molecule label of every atom, numbered by lowest atom index."""
        n = self.n_atoms
        graph = coo_matrix(
            (np.ones(self.n_bonds), (self.bonds[:, 0], self.bonds[:, 1])),
            shape=(n, n),
        )
        _, labels = connected_components(graph, directed=False)
        # renumber so that molecules appear in order of their first atom
        _, first, inverse = np.unique(labels, return_index=True, return_inverse=True)
        rank = np.empty(len(first), dtype=np.intp)
        rank[np.argsort(first)] = np.arange(len(first))
        return rank[inverse.reshape(-1)]

    def _validate_atom_index(self, index: int) -> None:
        if index < 0 or index >= self.n_atoms:
            raise IndexError(f"Atom index {index} out of range [0, {self.n_atoms})")
