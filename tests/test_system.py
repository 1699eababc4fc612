"""Tests for System class."""

import numpy as np
import pytest

from mdcontrol.system.box import Box
from mdcontrol.system.system import K_BOLTZMANN, System
from mdcontrol.system.topology import Topology


class TestSystemCreation:
    """Test System creation."""

    def test_basic_creation(self):
        """Test creating a System with all arrays."""
        n_atoms = 10
        system = System(
            positions=np.random.rand(n_atoms, 3),
            velocities=np.random.rand(n_atoms, 3),
            masses=np.ones(n_atoms),
            box=Box.cubic(5.0),
        )

        assert system.n_atoms == n_atoms
        assert system.positions.shape == (n_atoms, 3)
        assert system.velocities.shape == (n_atoms, 3)
        assert system.masses.shape == (n_atoms,)
        assert system.step == 0

    def test_create_factory(self):
        """Test System.create factory method."""
        positions = np.random.rand(5, 3)
        system = System.create(positions, np.ones(5) * 12.0, Box.cubic(10.0))

        assert system.n_atoms == 5
        assert np.allclose(system.positions, positions)
        assert np.allclose(system.velocities, 0)

    def test_default_molecules(self):
        """Test that each atom is its own molecule by default."""
        system = System.create(np.zeros((3, 3)), np.ones(3), Box.cubic(10.0))

        assert system.n_molecules == 3
        assert [m.tolist() for m in system.molecules] == [[0], [1], [2]]

    def test_molecules_from_topology(self):
        """Test that molecules follow the bond topology."""
        topology = Topology(n_atoms=4, bonds=[[0, 1], [2, 3]])
        system = System.create(
            np.zeros((4, 3)), np.ones(4), Box.cubic(10.0), topology=topology
        )

        assert system.n_molecules == 2
        assert system.molecules[1].tolist() == [2, 3]

    def test_topology_size_mismatch(self):
        """Test that topology size must match the system."""
        with pytest.raises(ValueError):
            System.create(
                np.zeros((3, 3)), np.ones(3), Box.cubic(10.0), topology=Topology(4)
            )

    def test_invalid_positions_shape(self):
        """Test that invalid positions shape raises error."""
        with pytest.raises(ValueError, match="positions shape"):
            System(
                positions=np.random.rand(5, 2),
                velocities=np.random.rand(5, 3),
                masses=np.ones(5),
                box=Box.cubic(10.0),
            )

    def test_invalid_velocities_shape(self):
        """Test that invalid velocities shape raises error."""
        with pytest.raises(ValueError, match="velocities shape"):
            System(
                positions=np.random.rand(5, 3),
                velocities=np.random.rand(4, 3),
                masses=np.ones(5),
                box=Box.cubic(10.0),
            )

    def test_molecules_must_partition_atoms(self):
        """Test that overlapping or missing molecules are rejected."""
        with pytest.raises(ValueError, match="partition"):
            System(
                positions=np.zeros((3, 3)),
                velocities=np.zeros((3, 3)),
                masses=np.ones(3),
                box=Box.cubic(10.0),
                molecules=[np.array([0, 1]), np.array([1])],
            )


class TestSystemCopy:
    """Test System copy."""

    def test_copy_is_independent(self):
        """Test that copy creates independent arrays."""
        system = System.create(np.random.rand(5, 3), np.ones(5), Box.cubic(10.0))
        copied = system.copy()

        copied.positions[0, 0] = 999.0
        copied.velocities[0, 0] = 999.0
        copied.molecules[0][0] = 4

        assert system.positions[0, 0] != 999.0
        assert system.velocities[0, 0] != 999.0
        assert system.molecules[0][0] == 0


class TestSystemProperties:
    """Test derived quantities."""

    def test_kinetic_energy(self):
        """Test kinetic energy calculation."""
        system = System.create(
            np.zeros((2, 3)),
            np.array([1.0, 2.0]),
            Box.cubic(10.0),
            velocities=np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]),
        )

        # KE = 0.5 * 1 * 1 + 0.5 * 2 * 1 = 1.5
        assert np.isclose(system.kinetic_energy, 1.5)

    def test_temperature(self):
        """Test temperature from equipartition."""
        rng = np.random.default_rng(0)
        system = System.create(
            np.zeros((10, 3)), np.ones(10), Box.cubic(10.0),
            velocities=rng.standard_normal((10, 3)),
        )

        assert system.degrees_of_freedom == 27
        expected = 2.0 * system.kinetic_energy / (27 * K_BOLTZMANN)
        assert np.isclose(system.temperature, expected)

    def test_single_atom_temperature(self):
        """Test that a single atom has no thermal degrees of freedom."""
        system = System.create(
            np.zeros((1, 3)), np.ones(1), Box.cubic(10.0),
            velocities=np.ones((1, 3)),
        )

        assert system.degrees_of_freedom == 0
        assert system.temperature == 0.0

    def test_center_of_mass(self):
        """Test center of mass calculation."""
        system = System.create(
            np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]),
            np.array([1.0, 3.0]),
            Box.cubic(10.0),
        )

        assert np.allclose(system.center_of_mass, [1.5, 0.0, 0.0])

    def test_momentum(self):
        """Test linear momentum and center of mass velocity."""
        system = System.create(
            np.zeros((2, 3)),
            np.array([1.0, 3.0]),
            Box.cubic(10.0),
            velocities=np.array([[4.0, 0.0, 0.0], [0.0, 0.0, 0.0]]),
        )

        assert np.allclose(system.momentum, [4.0, 0.0, 0.0])
        assert np.allclose(system.center_of_mass_velocity, [1.0, 0.0, 0.0])

    def test_angular_momentum(self):
        """Test angular momentum about the center of mass."""
        system = System.create(
            np.array([[-1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]),
            np.ones(2),
            Box.cubic(10.0),
            velocities=np.array([[0.0, -1.0, 0.0], [0.0, 1.0, 0.0]]),
        )

        assert np.allclose(system.angular_momentum, [0.0, 0.0, 2.0])


class TestWrapMolecule:
    """Test wrapping single molecules."""

    def test_molecule_center_of_mass(self):
        """Test per-molecule center of mass."""
        topology = Topology(n_atoms=3, bonds=[[1, 2]])
        system = System.create(
            np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [4.0, 0.0, 0.0]]),
            np.array([1.0, 3.0, 1.0]),
            Box.cubic(10.0),
            topology=topology,
        )

        assert np.allclose(system.molecule_center_of_mass(1), [1.75, 0.0, 0.0])

    def test_massless_molecule_center(self):
        """Test that massless molecules use their geometric center."""
        system = System.create(
            np.array([[1.0, 0.0, 0.0], [3.0, 0.0, 0.0]]),
            np.zeros(2),
            Box.cubic(10.0),
            topology=Topology(n_atoms=2, bonds=[[0, 1]]),
        )

        assert np.allclose(system.molecule_center_of_mass(0), [2.0, 0.0, 0.0])

    def test_wrap_only_given_molecule(self):
        """Test that wrapping one molecule leaves the others alone."""
        system = System.create(
            np.array([[25.0, 0.0, 0.0], [-5.0, 0.0, 0.0]]),
            np.ones(2),
            Box.cubic(20.0),
        )
        system.wrap_molecule(0)

        assert np.allclose(system.positions, [[5.0, 0.0, 0.0], [-5.0, 0.0, 0.0]])
