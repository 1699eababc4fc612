"""Periodic simulation cell."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Box:
    """
    Simulation cell used for periodic wrapping.

    The cell is stored as a 3x3 matrix whose rows are the cell vectors
    [a, b, c]. Orthorhombic cells have a diagonal matrix. An all-zero
    matrix denotes an infinite (non-periodic) cell, for which every
    wrapping operation is the identity.

    Attributes:
        vectors: 3x3 array where rows are cell vectors [a, b, c].
    """

    vectors: NDArray[np.floating]

    def __post_init__(self) -> None:
        """Validate and convert vectors to proper shape."""
        vectors = np.asarray(self.vectors, dtype=np.float64)
        if vectors.shape == (3,):
            vectors = np.diag(vectors)
        if vectors.shape != (3, 3):
            raise ValueError(f"Box vectors must be (3,) or (3, 3), got {vectors.shape}")
        if not np.allclose(vectors, 0) and np.isclose(np.linalg.det(vectors), 0):
            raise ValueError("Box vectors must be linearly independent")
        object.__setattr__(self, "vectors", vectors)

    @classmethod
    def infinite(cls) -> Box:
        """Create a non-periodic cell."""
        return cls(np.zeros((3, 3)))

    @classmethod
    def orthorhombic(cls, lx: float, ly: float, lz: float) -> Box:
        """Create an orthorhombic cell with given side lengths."""
        return cls(np.array([lx, ly, lz]))

    @classmethod
    def cubic(cls, length: float) -> Box:
        """Create a cubic cell with given side length."""
        return cls.orthorhombic(length, length, length)

    @classmethod
    def triclinic(cls, vectors: ArrayLike) -> Box:
        """Create a triclinic cell from a 3x3 matrix of cell vectors."""
        return cls(np.asarray(vectors))

    @property
    def is_infinite(self) -> bool:
        return bool(np.allclose(self.vectors, 0))

    @property
    def is_orthorhombic(self) -> bool:
        """True for diagonal cells (infinite cells excluded)."""
        if self.is_infinite:
            return False
        off_diag = self.vectors.copy()
        np.fill_diagonal(off_diag, 0)
        return bool(np.allclose(off_diag, 0))

    @property
    def lengths(self) -> NDArray[np.floating]:
        """Return cell vector lengths [|a|, |b|, |c|]."""
        return np.linalg.norm(self.vectors, axis=1)

    @property
    def volume(self) -> float:
        """Return cell volume, or infinity for an infinite cell."""
        if self.is_infinite:
            return float("inf")
        return float(np.abs(np.linalg.det(self.vectors)))

    def fractional(self, positions: ArrayLike) -> NDArray[np.floating]:
        """Convert cartesian positions, shape (3,) or (N, 3), to fractional."""
        return np.asarray(positions, dtype=np.float64) @ np.linalg.inv(self.vectors)

    def cartesian(self, fractional: ArrayLike) -> NDArray[np.floating]:
        """Convert fractional coordinates back to cartesian."""
        return np.asarray(fractional, dtype=np.float64) @ self.vectors

    def image_shift(self, positions: ArrayLike) -> NDArray[np.floating]:
        """
        Lattice translation bringing positions into the primary cell.

        The returned vector(s) are integer combinations of the cell
        vectors, so ``positions + image_shift(positions)`` lies in
        [0, 1) along every fractional axis. A coordinate that rounding
        would put on the upper face (or just below zero) is moved
        exactly onto zero instead, off the lattice by at most an ulp.

        Args:
            positions: Position(s), shape (3,) or (N, 3).

        Returns:
            Translation(s) with the same shape as ``positions``.
        """
        positions = np.asarray(positions, dtype=np.float64)
        if self.is_infinite:
            return np.zeros_like(positions)
        if self.is_orthorhombic:
            lengths = np.diag(self.vectors)
            shift = -lengths * np.floor(positions / lengths)
            wrapped = positions + shift
            outside = (wrapped < 0.0) | (wrapped >= lengths)
            return np.where(outside, -positions, shift)

        fractional = self.fractional(positions)
        shift = -np.floor(fractional)
        wrapped = fractional + shift
        outside = (wrapped < 0.0) | (wrapped >= 1.0)
        return self.cartesian(np.where(outside, -fractional, shift))

    def wrap_positions(self, positions: ArrayLike) -> NDArray[np.floating]:
        """
        Wrap positions into the primary cell, each one independently.

        Args:
            positions: Positions array of shape (N, 3).

        Returns:
            Wrapped positions array of shape (N, 3).
        """
        positions = np.asarray(positions, dtype=np.float64)
        return positions + self.image_shift(positions)

    def minimum_image(
        self, r1: NDArray[np.floating], r2: NDArray[np.floating]
    ) -> NDArray[np.floating]:
        """
        Compute minimum image displacement vector r2 - r1.

        Args:
            r1: First position(s), shape (3,) or (N, 3).
            r2: Second position(s), shape (3,) or (N, 3).

        Returns:
            Displacement vector(s) under minimum image convention.
        """
        dr = np.asarray(r2, dtype=np.float64) - np.asarray(r1, dtype=np.float64)
        if self.is_infinite:
            return dr
        if self.is_orthorhombic:
            lengths = np.diag(self.vectors)
            return dr - lengths * np.round(dr / lengths)
        fractional = self.fractional(dr)
        return self.cartesian(fractional - np.round(fractional))
