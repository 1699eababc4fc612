#!/usr/bin/env python
"""
Equilibrate a drifting gas of free particles with control algorithms.

This example demonstrates:
- Removing center of mass translation and global rotation
- Berendsen temperature coupling toward a target temperature
- Folding molecules back into the periodic cell

The integrator is a plain drift step (no forces), standing in for the
velocity Verlet step of a full engine.

Usage:
    python examples/run_controls.py [config.toml]
"""

import logging
import sys

import numpy as np

from mdcontrol import Box, ControlPipeline, System, load_pipeline
from mdcontrol.controls import BerendsenThermostat, RemoveRotation, RemoveTranslation, Rewrap
from mdcontrol.system import boltzmann_velocities

DT = 0.002  # ps


def drift(system: System) -> None:
    """Free-flight step: r(t + dt) = r(t) + dt * v(t)."""
    system.positions += DT * system.velocities


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    print("=" * 60)
    print("Control pipeline on a free argon gas")
    print("=" * 60)

    rng = np.random.default_rng(42)
    n_atoms = 125
    box = Box.cubic(3.0)
    system = System.create(
        positions=rng.random((n_atoms, 3)) * 3.0,
        masses=np.full(n_atoms, 39.948),
        box=box,
    )
    boltzmann_velocities(system, 400.0, seed=42)
    system.velocities += np.array([0.5, 0.0, 0.0])  # Add a net drift

    if len(sys.argv) > 1:
        pipeline = load_pipeline(sys.argv[1])
    else:
        pipeline = ControlPipeline(thermostat=BerendsenThermostat(300.0, 100.0))
        pipeline.add(RemoveTranslation())
        pipeline.add(RemoveRotation(), every=10)
        pipeline.add(Rewrap(), every=50)

    print(f"Initial temperature: {system.temperature:.2f} K")
    print(f"Initial momentum:    {system.momentum}")

    temperatures = []

    def record(s: System) -> bool:
        temperatures.append(s.temperature)
        return False

    pipeline.run(system, nsteps=2000, propagate=drift, callback=record)

    print(f"Final temperature:   {system.temperature:.2f} K")
    print(f"Final momentum:      {system.momentum}")
    print(f"Mean temperature (last 500 steps): {np.mean(temperatures[-500:]):.2f} K")


if __name__ == "__main__":
    main()
