"""
Build controls and pipelines from configuration mappings.

Configuration follows the layout of a simulation input file::

    [simulations.propagator]
    thermostat = {type = "Berendsen", temperature = 400, timestep = 100}
    controls = [
        {type = "RemoveRotation", every = 10},
        {type = "RemoveTranslation"},
    ]

Temperatures and tolerances are numbers in K, either bare (`400`) or
with an explicit kelvin suffix (`"400 K"`). Other units are rejected, as
unit conversion is left to the caller.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .controls import (
    Alternator,
    BerendsenThermostat,
    Control,
    RemoveRotation,
    RemoveTranslation,
    RescaleThermostat,
    Rewrap,
)
from .engines import ControlPipeline
from .errors import InvalidConfiguration

# Accepted keys (besides "type" and "every") for every control type
_CONTROL_KEYS: dict[str, tuple[set[str], set[str]]] = {
    # type: (required, optional)
    "RemoveTranslation": (set(), set()),
    "RemoveRotation": (set(), set()),
    "Rewrap": (set(), set()),
    "Rescale": ({"temperature"}, {"tolerance"}),
    "Berendsen": ({"temperature", "timestep"}, set()),
}

_THERMOSTATS = {"Rescale", "Berendsen"}


def load_toml(path: str | Path) -> dict[str, Any]:
    """
    Load a TOML configuration file.

    Args:
        path: Path to TOML file.

    Returns:
        Dictionary with configuration.
    """
    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise InvalidConfiguration(f"invalid TOML in {path}: {e}") from e


def _number(
    config: Mapping[str, Any], key: str, kind: str, unit: str | None = None
) -> float:
    value = config[key]
    if unit is not None and isinstance(value, str):
        text = value.strip()
        if text.endswith(unit):
            try:
                return float(text[: -len(unit)])
            except ValueError:
                pass
        raise InvalidConfiguration(
            f"'{key}' must be a number or '<number> {unit}' in {kind} control, "
            f"got {value!r}"
        )
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfiguration(
            f"'{key}' must be a number in {kind} control, got {value!r}"
        )
    return float(value)


def control_from_dict(config: Mapping[str, Any]) -> Control:
    """
    Build a single control from its configuration.

    Args:
        config: Mapping with a ``type`` key, the parameters of that type
            and an optional ``every`` period.

    Returns:
        The control, wrapped in an Alternator when ``every`` is given.

    Raises:
        InvalidConfiguration: On unknown types or keys, missing keys or
            invalid parameter values.
    """
    if not isinstance(config, Mapping):
        raise InvalidConfiguration(f"control must be a table, got {config!r}")
    if "type" not in config:
        raise InvalidConfiguration("missing 'type' key in control")

    kind = config["type"]
    if kind not in _CONTROL_KEYS:
        raise InvalidConfiguration(f"unknown control type '{kind}'")

    required, optional = _CONTROL_KEYS[kind]
    keys = set(config) - {"type", "every"}
    missing = required - keys
    if missing:
        raise InvalidConfiguration(
            f"missing {', '.join(sorted(missing))} in {kind} control"
        )
    unknown = keys - required - optional
    if unknown:
        raise InvalidConfiguration(
            f"unknown key(s) {', '.join(sorted(unknown))} in {kind} control"
        )

    control: Control
    if kind == "RemoveTranslation":
        control = RemoveTranslation()
    elif kind == "RemoveRotation":
        control = RemoveRotation()
    elif kind == "Rewrap":
        control = Rewrap()
    elif kind == "Rescale":
        temperature = _number(config, "temperature", kind, "K")
        if "tolerance" in config:
            control = RescaleThermostat.with_tolerance(
                temperature, _number(config, "tolerance", kind, "K")
            )
        else:
            control = RescaleThermostat(temperature)
    else:
        control = BerendsenThermostat(
            _number(config, "temperature", kind, "K"),
            _number(config, "timestep", kind),
        )

    if "every" in config:
        control = Alternator(config["every"], control)
    return control


def pipeline_from_config(config: Mapping[str, Any]) -> ControlPipeline:
    """
    Build a control pipeline from a propagator configuration.

    Args:
        config: Mapping with optional ``thermostat`` (a control table of
            a thermostat type) and ``controls`` (an array of control
            tables) keys.

    Returns:
        Configured ControlPipeline.
    """
    pipeline = ControlPipeline()

    thermostat = config.get("thermostat")
    if thermostat is not None:
        if not isinstance(thermostat, Mapping) or thermostat.get("type") not in _THERMOSTATS:
            raise InvalidConfiguration(
                f"thermostat must be one of {sorted(_THERMOSTATS)}, got {thermostat!r}"
            )
        pipeline.thermostat = control_from_dict(thermostat)

    controls = config.get("controls", [])
    if isinstance(controls, (str, Mapping)) or not isinstance(controls, Sequence):
        raise InvalidConfiguration("'controls' must be an array of tables")
    for entry in controls:
        pipeline.add(control_from_dict(entry))

    return pipeline


def load_pipeline(path: str | Path) -> ControlPipeline:
    """
    Load a control pipeline from a TOML file.

    The file may either hold the propagator keys at the top level, or
    use the ``[[simulations]]`` / ``[simulations.propagator]`` layout,
    in which case the first simulation is used. Temperatures may carry
    a kelvin suffix (``temperature = "400 K"``); any other unit string
    is rejected.

    Args:
        path: Path to TOML file.

    Returns:
        Configured ControlPipeline.
    """
    config = load_toml(path)

    simulations = config.get("simulations")
    if simulations is not None:
        if not isinstance(simulations, list) or len(simulations) == 0:
            raise InvalidConfiguration("'simulations' must be a non-empty array")
        simulation = simulations[0]
        if not isinstance(simulation, Mapping):
            raise InvalidConfiguration("'simulations' must be an array of tables")
        config = simulation.get("propagator", {})
        if not isinstance(config, Mapping):
            raise InvalidConfiguration("'propagator' must be a table")

    return pipeline_from_config(config)
