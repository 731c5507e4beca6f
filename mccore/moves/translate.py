"""Displacement moves."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from ..errors import ConfigurationError, optional
from .base import Move

if TYPE_CHECKING:
    from ..catalog import MoleculeCatalog
    from ..energy import EnergyTerm
    from ..system import Space


class _Displacement(Move):
    """Shared bookkeeping for moves displacing particles of one molecule type."""

    def __init__(
        self,
        space: Space,
        trial: Space,
        hamiltonian: EnergyTerm,
        molid: int,
        dp: float,
        direction: ArrayLike = (1.0, 1.0, 1.0),
        rng: np.random.Generator | None = None,
        runfraction: float = 1.0,
        seed: int | None = None,
    ) -> None:
        super().__init__(space, trial, hamiltonian, rng, runfraction, seed)
        self.molid = molid
        self.dp = float(dp)
        self.direction = np.asarray(direction, dtype=np.float64)
        self._sqd_sum = 0.0
        self._last_sqd = 0.0

    def _random_group(self) -> int | None:
        """Index of a random non-empty group of this molecule type."""
        candidates = [
            i
            for i, group in enumerate(self.trial.groups)
            if group.id == self.molid and group.size > 0
        ]
        if not candidates:
            return None
        return candidates[self.rng.integers(len(candidates))]

    def _displacement(self) -> np.ndarray:
        return self.dp * (self.rng.random(3) - 0.5) * self.direction

    def accept(self, du: float) -> None:
        super().accept(du)
        self._sqd_sum += self._last_sqd

    @property
    def mean_square_displacement(self) -> float:
        """Mean square displacement per attempt (A^2)."""
        if self.cnt == 0:
            return 0.0
        return self._sqd_sum / self.cnt

    def info(self) -> str:
        return (
            super().info()
            + f"#   Displacement parameter    = {self.dp:g}\n"
            + f"#   Mean square displacement  = {self.mean_square_displacement:.4g}\n"
        )

    @classmethod
    def from_dict(
        cls,
        record: dict,
        space: Space,
        trial: Space,
        hamiltonian: EnergyTerm,
        molecules: MoleculeCatalog,
        rng: np.random.Generator | None = None,
    ):
        """
        Create from ``{"molecule": "salt", "dp": 2.0, "dir": [1, 1, 0]}``.

        Raises:
            ConfigurationError: If the molecule is missing or unknown, or a
                numeric field is malformed.
        """
        if "molecule" not in record:
            raise ConfigurationError("missing required field", key=f"{cls.name}.molecule")
        molecule = molecules.find(record["molecule"])
        return cls(
            space,
            trial,
            hamiltonian,
            molid=molecule.id,
            dp=optional(record, "dp", 1.0, float, cls.name),
            direction=record.get("dir", (1.0, 1.0, 1.0)),
            rng=rng,
            runfraction=optional(record, "runfraction", 1.0, float, cls.name),
        )


class AtomicTranslation(_Displacement):
    """
    Displace a single random atom of a molecule type.

    The displacement is uniform in [-dp/2, dp/2] along each enabled
    direction, followed by the geometry's boundary operation.
    """

    name = "atomtranslate"

    def propose(self) -> None:
        index = self._random_group()
        if index is None:
            return
        group = self.trial.groups[index]
        offsets = group.active_offsets()
        offset = int(offsets[self.rng.integers(len(offsets))])
        slot = group.begin + offset

        old = self.trial.p["pos"][slot].copy()
        delta = self._displacement()
        self.trial.p["pos"][slot] = self.trial.geometry.boundary(old + delta)
        self._last_sqd = float(np.dot(delta, delta))
        self.change.add(index, atoms=[offset])


class MoleculeTranslation(_Displacement):
    """Displace every active particle of a random group by the same vector."""

    name = "moltranslate"

    def propose(self) -> None:
        index = self._random_group()
        if index is None:
            return
        group = self.trial.groups[index]
        delta = self._displacement()
        slots = group.slots
        mask = slots["active"]
        slots["pos"][mask] = self.trial.geometry.boundary(slots["pos"][mask] + delta)
        self._last_sqd = float(np.dot(delta, delta))
        self.change.add(index, all=True)
