"""Tests for the control pipeline driver."""

import numpy as np
import pytest

from mdcontrol.controls import (
    Alternator,
    BerendsenThermostat,
    Control,
    RemoveRotation,
    RemoveTranslation,
)
from mdcontrol.engines import ControlPipeline
from mdcontrol.errors import InvalidConfiguration
from mdcontrol.system import Box, System, boltzmann_velocities


class RecordingControl(Control):
    """Control appending lifecycle events to a shared log."""

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def setup(self, system):
        self.log.append(("setup", self.name))

    def control(self, system):
        self.log.append(("control", self.name, system.step))

    def finish(self, system):
        self.log.append(("finish", self.name))


@pytest.fixture
def gas():
    """Small gas with thermal velocities and a net drift."""
    rng = np.random.default_rng(7)
    system = System.create(
        positions=rng.random((50, 3)) * 4.0,
        masses=np.full(50, 39.948),
        box=Box.cubic(4.0),
    )
    boltzmann_velocities(system, 400.0, seed=7)
    system.velocities += np.array([0.3, -0.2, 0.1])
    return system


class TestPipelineComposition:
    """Test registration of controls."""

    def test_empty(self):
        """Test an empty pipeline."""
        pipeline = ControlPipeline()
        assert len(pipeline) == 0
        assert list(pipeline) == []

    def test_add_wraps_in_alternator(self):
        """Test that a period above one wraps the control."""
        pipeline = ControlPipeline()
        translation = pipeline.add(RemoveTranslation())
        rotation = pipeline.add(RemoveRotation(), every=10)

        assert isinstance(translation, RemoveTranslation)
        assert isinstance(rotation, Alternator)
        assert rotation.every == 10
        assert pipeline.controls == [translation, rotation]

    def test_add_invalid_period(self):
        """Test that invalid periods are rejected."""
        with pytest.raises(InvalidConfiguration):
            ControlPipeline().add(RemoveTranslation(), every=0)

    def test_remove(self):
        """Test removing a control."""
        pipeline = ControlPipeline()
        control = pipeline.add(RemoveTranslation())
        pipeline.remove(control)
        assert len(pipeline) == 0

    def test_thermostat_comes_last(self):
        """Test that the thermostat is iterated after the controls."""
        thermostat = BerendsenThermostat(300.0, 100.0)
        translation = RemoveTranslation()
        pipeline = ControlPipeline([translation], thermostat=thermostat)

        assert len(pipeline) == 2
        assert list(pipeline) == [translation, thermostat]


class TestPipelineExecution:
    """Test lifecycle and ordering when driving the pipeline."""

    def test_registration_order(self, gas):
        """Test that controls run in registration order, thermostat last."""
        log = []
        pipeline = ControlPipeline(thermostat=RecordingControl("thermostat", log))
        pipeline.add(RecordingControl("first", log))
        pipeline.add(RecordingControl("second", log))

        pipeline.control(gas)

        assert log == [
            ("control", "first", 0),
            ("control", "second", 0),
            ("control", "thermostat", 0),
        ]

    def test_run_lifecycle(self, gas):
        """Test that setup and finish run once around the loop."""
        log = []
        pipeline = ControlPipeline([RecordingControl("a", log)])

        pipeline.run(gas, nsteps=3)

        assert log == [
            ("setup", "a"),
            ("control", "a", 1),
            ("control", "a", 2),
            ("control", "a", 3),
            ("finish", "a"),
        ]
        assert gas.step == 3

    def test_run_calls_propagate_first(self, gas):
        """Test that the integrator step runs before the controls."""
        log = []
        pipeline = ControlPipeline([RecordingControl("a", log)])

        pipeline.run(gas, nsteps=2, propagate=lambda s: log.append(("propagate", s.step)))

        assert log[1:-1] == [
            ("propagate", 0),
            ("control", "a", 1),
            ("propagate", 1),
            ("control", "a", 2),
        ]

    def test_finish_called_on_error(self, gas):
        """Test that finish runs even when a step raises."""
        log = []
        pipeline = ControlPipeline([RecordingControl("a", log)])

        def explode(system):
            raise RuntimeError("integrator failure")

        with pytest.raises(RuntimeError):
            pipeline.run(gas, nsteps=5, propagate=explode)

        assert log[-1] == ("finish", "a")

    def test_callback_stops_early(self, gas):
        """Test early termination from the callback."""
        pipeline = ControlPipeline([RemoveTranslation()])
        pipeline.run(gas, nsteps=100, callback=lambda s: s.step >= 4)
        assert gas.step == 4

    def test_alternated_control_in_run(self, gas):
        """Test that alternated controls only run on their steps."""
        log = []
        pipeline = ControlPipeline()
        pipeline.add(RecordingControl("sparse", log), every=3)

        pipeline.run(gas, nsteps=7)

        steps = [entry[2] for entry in log if entry[0] == "control"]
        assert steps == [3, 6]

    def test_equilibration(self, gas):
        """Test a realistic pipeline removing drift and thermostatting."""
        pipeline = ControlPipeline(thermostat=BerendsenThermostat(300.0, 10.0))
        pipeline.add(RemoveTranslation())
        pipeline.add(RemoveRotation())

        def drift(system):
            system.positions += 0.002 * system.velocities

        pipeline.run(gas, nsteps=500, propagate=drift)

        assert gas.temperature == pytest.approx(300.0, rel=1e-6)
        assert np.allclose(gas.momentum, 0.0, atol=1e-8)
        assert np.allclose(gas.angular_momentum, 0.0, atol=1e-8)
