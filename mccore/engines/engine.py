"""Monte Carlo simulation engine."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import numpy as np

from ..errors import InvariantViolation
from .reporters import Reporter, ReporterGroup

if TYPE_CHECKING:
    from ..energy import EnergyTerm
    from ..moves import Move
    from ..system import Space

logger = logging.getLogger(__name__)


class MonteCarloEngine:
    """
    Metropolis Monte Carlo engine.

    Owns the accepted space and an independent trial copy that every move
    works on. One engine step attempts each registered move with probability
    equal to its runfraction. The engine keeps a running energy from the
    accepted energy changes; `drift` compares it with a full recomputation
    and should stay at numerical noise.

    Example usage:
        engine = MonteCarloEngine(space, hamiltonian, seed=1)
        engine.add_move(AtomicTranslation(engine.space, engine.trial,
                                          hamiltonian, molid=0, dp=2.0,
                                          rng=engine.rng))
        engine.add_reporter(StateReporter(frequency=100))
        engine.run(nsteps=1000)

    Attributes:
        space: Accepted configuration.
        trial: Trial configuration.
        hamiltonian: Energy function.
        moves: Registered moves.
        rng: Random number generator shared with the moves.
    """

    def __init__(
        self,
        space: Space,
        hamiltonian: EnergyTerm,
        moves: Iterable[Move] = (),
        trial: Space | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            space: Accepted space.
            hamiltonian: Energy function.
            moves: Moves bound to `space` and `trial`.
            trial: Trial space; defaults to a copy of `space`.
            rng: Random number generator.
            seed: Seed used when no generator is given.
        """
        self.space = space
        self.trial = trial if trial is not None else space.copy()
        self.hamiltonian = hamiltonian
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.moves: list[Move] = []
        for move in moves:
            self.add_move(move)

        self._reporters = ReporterGroup()
        self._running = False
        self._total_steps = 0
        self._wall_time = 0.0

        self.initial_energy = hamiltonian.system_energy(space)
        self.energy = self.initial_energy
        logger.info("initial energy %g kT, %d active particles", self.energy, space.n_active)

    @property
    def total_steps(self) -> int:
        return self._total_steps

    @property
    def acceptance(self) -> float:
        """Overall acceptance ratio of all moves."""
        attempts = sum(move.cnt for move in self.moves)
        if attempts == 0:
            return 0.0
        return sum(move.naccept for move in self.moves) / attempts

    @property
    def performance(self) -> dict[str, float]:
        if self._wall_time == 0:
            return {"steps_per_second": 0.0}
        return {
            "steps_per_second": self._total_steps / self._wall_time,
            "wall_time": self._wall_time,
            "total_steps": self._total_steps,
        }

    def add_move(self, move: Move) -> None:
        """
        Register a move.

        Raises:
            InvariantViolation: If the move works on other spaces.
        """
        if move.space is not self.space or move.trial is not self.trial:
            raise InvariantViolation("move is not bound to this engine's spaces")
        self.moves.append(move)

    def remove_move(self, move: Move) -> None:
        self.moves.remove(move)

    def add_reporter(self, reporter: Reporter) -> None:
        self._reporters.add(reporter)

    def remove_reporter(self, reporter: Reporter) -> None:
        self._reporters.remove(reporter)

    def drift(self) -> float:
        """Running energy minus the recomputed system energy (kT)."""
        current = self.hamiltonian.system_energy(self.space)
        if np.isinf(current) and np.isinf(self.energy):
            return 0.0
        return self.energy - current

    def step(self) -> float:
        """
        Attempt every move once, each with probability `runfraction`.

        Returns:
            Sum of accepted energy changes in kT.
        """
        du = 0.0
        for move in self.moves:
            if not move.enabled:
                continue
            if move.runfraction < 1.0 and self.rng.random() >= move.runfraction:
                continue
            du += move.move()
        self.energy += du
        if not np.isfinite(self.energy):
            # Leaving an overlapping start configuration: inf + (-inf)
            self.energy = self.hamiltonian.system_energy(self.space)
        return du

    def run(
        self,
        nsteps: int,
        callback: Callable[[MonteCarloEngine], bool] | None = None,
    ) -> Space:
        """
        Run the simulation for `nsteps` engine steps.

        Args:
            nsteps: Number of steps to run.
            callback: Optional callback called each step.
                     Return True to stop the simulation early.

        Returns:
            The accepted space.
        """
        self._running = True
        self._reporters.initialize(self.space)
        start_time = time.perf_counter()

        try:
            for _ in range(nsteps):
                if not self._running:
                    break
                self.step()
                self._total_steps += 1
                if len(self._reporters):
                    self._reporters.report(
                        self.space,
                        self._total_steps,
                        energy=self.energy,
                        drift=self.drift(),
                        acceptance=self.acceptance,
                    )
                if callback is not None and callback(self):
                    break
        finally:
            self._wall_time += time.perf_counter() - start_time
            self._reporters.finalize(self.space)
            self._running = False

        logger.info(
            "ran %d steps, energy %g kT, drift %g kT",
            self._total_steps,
            self.energy,
            self.drift(),
        )
        return self.space

    def stop(self) -> None:
        """Signal the simulation to stop."""
        self._running = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": self._total_steps,
            "initial energy": self.initial_energy,
            "energy": self.energy,
            "drift": self.drift(),
            "moves": [move.to_dict() for move in self.moves],
        }

    def info(self) -> str:
        lines = [
            "# Monte Carlo engine",
            f"#   Steps                     = {self._total_steps}",
            f"#   Active particles          = {self.space.n_active}",
            f"#   Initial energy (kT)       = {self.initial_energy:.6g}",
            f"#   Current energy (kT)       = {self.energy:.6g}",
            f"#   Energy drift (kT)         = {self.drift():.3g}",
            f"# Energy terms: {self.hamiltonian.info()}",
        ]
        text = "\n".join(lines) + "\n"
        for move in self.moves:
            text += move.info()
        return text
