"""Ordered collection of controls driven once per integration step."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from ..controls.alternator import Alternator
from ..controls.base import Control, Thermostat

if TYPE_CHECKING:
    from ..system import System

logger = logging.getLogger(__name__)


class ControlPipeline(Control):
    """
    Ordered list of controls with an optional thermostat.

    Controls run in registration order, then the thermostat runs last,
    so that e.g. momentum removal happens before the temperature is
    measured. The pipeline is itself a Control and forwards ``setup``
    and ``finish`` to every member.

    Example usage:
        pipeline = ControlPipeline(thermostat=BerendsenThermostat(300.0, 100.0))
        pipeline.add(RemoveTranslation())
        pipeline.add(RemoveRotation(), every=10)
        pipeline.run(system, nsteps=1000, propagate=integrator_step)

    Attributes:
        controls: Registered controls, in application order.
        thermostat: Optional thermostat applied after the controls.
    """

    def __init__(
        self,
        controls: list[Control] | None = None,
        thermostat: Thermostat | Alternator | None = None,
    ) -> None:
        """
        Initialize control pipeline.

        Args:
            controls: Controls to apply, in order.
            thermostat: Optional thermostat, applied after the controls.
        """
        self._controls: list[Control] = list(controls) if controls else []
        self._thermostat = thermostat

    @property
    def controls(self) -> list[Control]:
        return list(self._controls)

    @property
    def thermostat(self) -> Thermostat | Alternator | None:
        """Return thermostat."""
        return self._thermostat

    @thermostat.setter
    def thermostat(self, value: Thermostat | Alternator | None) -> None:
        """Set thermostat."""
        self._thermostat = value

    def add(self, control: Control, every: int = 1) -> Control:
        """
        Append a control to the pipeline.

        Args:
            control: Control to append.
            every: Run the control only every ``every`` steps. Values
                above 1 wrap the control in an Alternator.

        Returns:
            The registered control (the Alternator when wrapped).
        """
        if every != 1:
            control = Alternator(every, control)
        self._controls.append(control)
        return control

    def remove(self, control: Control) -> None:
        """Remove a control from the pipeline."""
        self._controls.remove(control)

    def __len__(self) -> int:
        return len(self._controls) + (self._thermostat is not None)

    def __iter__(self) -> Iterator[Control]:
        yield from self._controls
        if self._thermostat is not None:
            yield self._thermostat

    def setup(self, system: System) -> None:
        for control in self:
            control.setup(system)

    def control(self, system: System) -> None:
        for control in self:
            control.control(system)

    def finish(self, system: System) -> None:
        for control in self:
            control.finish(system)

    def run(
        self,
        system: System,
        nsteps: int,
        propagate: Callable[[System], None] | None = None,
        callback: Callable[[System], bool] | None = None,
    ) -> System:
        """
        Drive the controls through a simulation of ``nsteps`` steps.

        ``setup`` is called once, then each step advances the system
        with ``propagate``, increments ``system.step`` and applies every
        control. ``finish`` is called once at the end, even if a step
        raised.

        Args:
            system: System to modify in place.
            nsteps: Number of steps to run.
            propagate: Integrator step, advancing the system in place.
            callback: Optional callback called after each step.
                     Return True to stop simulation early.

        Returns:
            The (modified) system.
        """
        logger.info("Running %d steps with %d controls", nsteps, len(self))
        self.setup(system)
        start_time = time.perf_counter()

        try:
            for _ in range(nsteps):
                if propagate is not None:
                    propagate(system)
                system.step += 1
                self.control(system)

                if callback is not None and callback(system):
                    logger.info("Stopped early by callback at step %d", system.step)
                    break
        finally:
            self.finish(system)

        logger.info(
            "Finished at step %d in %.3f s",
            system.step,
            time.perf_counter() - start_time,
        )
        return system
