"""Reporter implementations for Monte Carlo output."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TextIO

import numpy as np

if TYPE_CHECKING:
    from ..system import Space


class Reporter(ABC):
    """
    Abstract base class for simulation reporters.

    Reporters are called every `frequency` engine steps with the accepted
    space and the engine's running quantities as keyword arguments
    (`step`, `energy`, `drift`, `acceptance`).
    """

    @abstractmethod
    def report(self, space: Space, **kwargs: Any) -> None:
        """
        Generate report for the accepted configuration.

        Args:
            space: Accepted space.
            **kwargs: Running quantities of the engine.
        """
        ...

    @property
    @abstractmethod
    def frequency(self) -> int:
        """Return reporting frequency (every N steps)."""
        ...

    def should_report(self, step: int) -> bool:
        return step % self.frequency == 0

    def initialize(self, space: Space) -> None:
        """Called before the run."""
        pass

    def finalize(self, space: Space) -> None:
        """Called after the run."""
        pass


class ReporterGroup:
    """Collection of reporters with automatic frequency handling."""

    def __init__(self, reporters: list[Reporter] | None = None) -> None:
        self._reporters: list[Reporter] = reporters if reporters else []

    def __len__(self) -> int:
        return len(self._reporters)

    def add(self, reporter: Reporter) -> None:
        self._reporters.append(reporter)

    def remove(self, reporter: Reporter) -> None:
        self._reporters.remove(reporter)

    def initialize(self, space: Space) -> None:
        for reporter in self._reporters:
            reporter.initialize(space)

    def report(self, space: Space, step: int, **kwargs: Any) -> None:
        """Run all reporters that should fire at this step."""
        for reporter in self._reporters:
            if reporter.should_report(step):
                reporter.report(space, step=step, **kwargs)

    def finalize(self, space: Space) -> None:
        for reporter in self._reporters:
            reporter.finalize(space)


class StateReporter(Reporter):
    """
    Reporter that prints the running state to console or file.

    Outputs step, number of active particles, energy (kT), energy drift
    (kT) and the overall acceptance ratio.
    """

    def __init__(
        self,
        frequency: int = 1000,
        file: TextIO | None = None,
        separator: str = "\t",
    ) -> None:
        """
        Initialize state reporter.

        Args:
            frequency: Reporting frequency (every N steps).
            file: Output file (defaults to stdout).
            separator: Field separator.
        """
        self._frequency = frequency
        self._file = file if file is not None else sys.stdout
        self._separator = separator
        self._header_written = False

    @property
    def frequency(self) -> int:
        return self._frequency

    def initialize(self, space: Space) -> None:
        if not self._header_written:
            headers = ["Step", "N", "Energy", "Drift", "Acceptance"]
            self._file.write(self._separator.join(headers) + "\n")
            self._header_written = True

    def report(self, space: Space, **kwargs: Any) -> None:
        values = [
            f"{kwargs.get('step', 0)}",
            f"{space.n_active}",
            f"{kwargs.get('energy', 0.0):.4f}",
            f"{kwargs.get('drift', 0.0):.4g}",
            f"{kwargs.get('acceptance', 0.0):.3f}",
        ]
        self._file.write(self._separator.join(values) + "\n")
        self._file.flush()


class EnergyReporter(Reporter):
    """Reporter that records the running energy and particle count."""

    def __init__(self, frequency: int = 100) -> None:
        self._frequency = frequency
        self._steps: list[int] = []
        self._energy: list[float] = []
        self._n_active: list[int] = []

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, space: Space, **kwargs: Any) -> None:
        self._steps.append(kwargs.get("step", 0))
        self._energy.append(kwargs.get("energy", 0.0))
        self._n_active.append(space.n_active)

    @property
    def steps(self) -> np.ndarray:
        return np.array(self._steps)

    @property
    def energy(self) -> np.ndarray:
        """Running energy time series (kT)."""
        return np.array(self._energy)

    @property
    def n_active(self) -> np.ndarray:
        """Active particle count time series."""
        return np.array(self._n_active)

    def clear(self) -> None:
        self._steps.clear()
        self._energy.clear()
        self._n_active.clear()


class CallbackReporter(Reporter):
    """
    Reporter that calls a user-defined function.

    Allows arbitrary custom reporting logic.
    """

    def __init__(
        self,
        callback: Callable[[Space, dict[str, Any]], None],
        frequency: int = 1,
    ) -> None:
        """
        Initialize callback reporter.

        Args:
            callback: Function to call with (space, kwargs).
            frequency: Reporting frequency.
        """
        self._callback = callback
        self._frequency = frequency

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, space: Space, **kwargs: Any) -> None:
        self._callback(space, kwargs)
