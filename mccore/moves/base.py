"""Base class for Metropolis Monte Carlo moves."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np

from ..energy import touched_indices
from ..errors import InvariantViolation
from ..system import Change

if TYPE_CHECKING:
    from ..energy import EnergyTerm
    from ..system import Space

logger = logging.getLogger(__name__)


class Move(ABC):
    """
    Abstract Monte Carlo move.

    A move works on two independent spaces: the accepted `space` and the
    `trial` space. `propose` mutates the trial space and records what it
    touched in `change`; the energy difference over the touched region then
    decides via the Metropolis criterion whether the trial is synced into the
    accepted space or the trial is reset from it.

    Subclasses implement `propose` and may override `acceptance_energy` to
    add bias terms (e.g. chemical potential) to the acceptance test.

    Attributes:
        space: Accepted configuration.
        trial: Trial configuration.
        hamiltonian: Energy function.
        rng: Random number generator.
        runfraction: Probability that the move is attempted per engine step.
        change: Change descriptor of the current proposal.
        cnt: Number of attempts.
        naccept: Number of accepted attempts.
        utot: Sum of accepted energy changes (kT).
    """

    name: str = ""
    cite: str = ""

    def __init__(
        self,
        space: Space,
        trial: Space,
        hamiltonian: EnergyTerm,
        rng: np.random.Generator | None = None,
        runfraction: float = 1.0,
        seed: int | None = None,
    ) -> None:
        if space is trial or np.may_share_memory(
            space.particles.buffer, trial.particles.buffer
        ):
            raise InvariantViolation("accepted and trial spaces must not share storage")
        self.space = space
        self.trial = trial
        self.hamiltonian = hamiltonian
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.runfraction = runfraction
        self.change = Change()

        self.cnt = 0
        self.naccept = 0
        self.utot = 0.0
        self.du = 0.0

    @property
    def enabled(self) -> bool:
        return self.runfraction > 0

    @property
    def acceptance(self) -> float:
        """Fraction of accepted attempts."""
        if self.cnt == 0:
            return 0.0
        return self.naccept / self.cnt

    @abstractmethod
    def propose(self) -> None:
        """Mutate the trial space and record the touched region in `change`."""
        ...

    def energy_change(self) -> float:
        """
        Energy difference trial - accepted over the touched region (kT).

        Touched particles outside the container give infinite energy.
        """
        touched = touched_indices(self.trial, self.change)
        if len(touched) and np.any(
            self.trial.geometry.collision(self.trial.p["pos"][touched])
        ):
            return np.inf
        unew = self.hamiltonian.energy(self.trial, self.change)
        if unew == np.inf:
            return np.inf
        uold = self.hamiltonian.energy(self.space, self.change)
        return unew - uold

    def acceptance_energy(self, du: float) -> float:
        """Quantity fed to the Metropolis test; `du` unless a bias applies."""
        return du

    def decide(self, du: float) -> bool:
        """
        Metropolis criterion.

        Accept if du <= 0, otherwise with probability exp(-du).
        """
        if du <= 0:
            return True
        return bool(self.rng.random() < np.exp(-du))

    def accept(self, du: float) -> None:
        self.space.sync(self.trial, self.change)
        self.naccept += 1
        self.utot += du

    def reject(self) -> None:
        self.trial.sync(self.space, self.change)

    def move(self) -> float:
        """
        Propose, evaluate and resolve one trial move.

        Returns:
            Accepted energy change in kT (0 on rejection).
        """
        self.du = 0.0
        if not self.enabled:
            return 0.0

        self.cnt += 1
        self.change.clear()
        self.propose()
        if self.change.empty():
            return 0.0

        du = self.energy_change()
        if self.decide(self.acceptance_energy(du)):
            self.accept(du)
            self.du = du
            logger.debug("%s accepted, du = %g kT", self.name, du)
        else:
            self.reject()
            logger.debug("%s rejected, du = %g kT", self.name, du)
        self.change.clear()
        return self.du

    def reset_statistics(self) -> None:
        """Reset acceptance statistics."""
        self.cnt = 0
        self.naccept = 0
        self.utot = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "trials": self.cnt,
            "acceptance": self.acceptance,
            "runfraction": self.runfraction,
            "energy change": self.utot,
        }

    def info(self) -> str:
        lines = [f"# {self.name}"]
        if self.cite:
            lines.append(f"#   More information:         {self.cite}")
        lines += [
            f"#   Runfraction               = {self.runfraction * 100:.1f} %",
            f"#   Number of trials          = {self.cnt}",
            f"#   Acceptance                = {self.acceptance * 100:.1f} %",
            f"#   Total energy change (kT)  = {self.utot:.6g}",
        ]
        return "\n".join(lines) + "\n"
