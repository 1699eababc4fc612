"""Exceptions raised by mdcontrol."""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """
    Raised when a control or pipeline is built from invalid parameters.

    Negative temperatures, tolerances or relaxation constants, a
    non-positive alternation period, and malformed configuration
    mappings all end up here. Subclasses ValueError so callers that
    already guard parameter errors keep working.
    """
