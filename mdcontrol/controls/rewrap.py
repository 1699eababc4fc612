"""Fold molecules back into the simulation cell."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Control

if TYPE_CHECKING:
    from ..system import System


class Rewrap(Control):
    """
    Rewrap all molecules' centers of mass to lie within the unit cell.

    Each molecule is moved as a whole by a lattice vector, so individual
    atoms in a molecule may still lie outside of the cell.
    """

    def control(self, system: System) -> None:
        for i in range(system.n_molecules):
            system.wrap_molecule(i)

    def __repr__(self) -> str:
        return "Rewrap()"
