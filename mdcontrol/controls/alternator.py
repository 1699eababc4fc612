"""Run a control only every N calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from ..errors import InvalidConfiguration
from .base import Control

if TYPE_CHECKING:
    from ..system import System

C = TypeVar("C", bound=Control)


class Alternator(Control, Generic[C]):
    """
    Frequency gate around another control.

    Every call to :meth:`control` increments an internal counter, and
    the wrapped control only runs when the counter is a multiple of
    ``every``: on calls N, 2N, 3N and so on. Other calls leave the
    system untouched. ``setup`` and ``finish`` are always forwarded.

    Attributes:
        every: Period, in calls, between two runs of the inner control.
        inner: The wrapped control.
    """

    def __init__(self, every: int, inner: C) -> None:
        """
        Initialize alternator.

        Args:
            every: Run the inner control once every ``every`` calls.
            inner: Control to wrap.

        Raises:
            InvalidConfiguration: If ``every`` is not a positive integer.
        """
        if isinstance(every, bool) or not isinstance(every, int) or every < 1:
            raise InvalidConfiguration(
                f"alternation period must be a positive integer, got {every!r}"
            )
        self._every = every
        self._inner = inner
        self._count = 0

    @property
    def every(self) -> int:
        return self._every

    @property
    def inner(self) -> C:
        return self._inner

    def can_run(self) -> bool:
        """Advance the counter and tell whether the inner control is due."""
        self._count += 1
        return self._count % self._every == 0

    def setup(self, system: System) -> None:
        self._inner.setup(system)

    def control(self, system: System) -> None:
        if self.can_run():
            self._inner.control(system)

    def finish(self, system: System) -> None:
        self._inner.finish(system)

    def reset(self) -> None:
        """Reset the call counter."""
        self._count = 0

    def __repr__(self) -> str:
        return f"Alternator(every={self._every}, inner={self._inner!r})"
