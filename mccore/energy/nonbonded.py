"""Nonbonded pair-sum energy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .base import EnergyTerm, touched_indices

if TYPE_CHECKING:
    from ..potentials import PairPotential
    from ..system import Change, Space


class Nonbonded(EnergyTerm):
    """
    Pair-potential sum over active particles.

    For a change only pairs with at least one touched particle are summed:
    touched-untouched pairs plus pairs within the touched set.

    Attributes:
        pair_potential: Potential evaluated for every pair.
        cutoff: Pairs further apart than this are skipped.
    """

    name = "nonbonded"

    def __init__(self, pair_potential: PairPotential, cutoff: float = np.inf) -> None:
        self.pair_potential = pair_potential
        self.cutoff = cutoff

    def _pair_sum(
        self,
        space: Space,
        i_indices: NDArray[np.integer],
        j_indices: NDArray[np.integer],
    ) -> float:
        if len(i_indices) == 0:
            return 0.0
        p = space.p
        dr = space.geometry.distance(p["pos"][i_indices], p["pos"][j_indices])
        if np.isfinite(self.cutoff):
            mask = np.sum(dr * dr, axis=1) < self.cutoff**2
            if not np.any(mask):
                return 0.0
            i_indices, j_indices, dr = i_indices[mask], j_indices[mask], dr[mask]
        return float(np.sum(self.pair_potential(p[i_indices], p[j_indices], dr)))

    def _between(self, space: Space, first: NDArray, second: NDArray) -> float:
        i_indices = np.repeat(first, len(second))
        j_indices = np.tile(second, len(first))
        return self._pair_sum(space, i_indices, j_indices)

    def _within(self, space: Space, indices: NDArray) -> float:
        upper_i, upper_j = np.triu_indices(len(indices), k=1)
        return self._pair_sum(space, indices[upper_i], indices[upper_j])

    def energy(self, space: Space, change: Change) -> float:
        if change.dV != 0:
            return self.system_energy(space)
        touched = touched_indices(space, change)
        if len(touched) == 0:
            return 0.0
        others = np.setdiff1d(space.active_indices(), touched, assume_unique=True)
        return self._between(space, touched, others) + self._within(space, touched)

    def system_energy(self, space: Space) -> float:
        return self._within(space, space.active_indices())

    def info(self) -> str:
        text = f"{self.name}: {self.pair_potential.info()}"
        if np.isfinite(self.cutoff):
            text += f" (cutoff {self.cutoff:g} A)"
        return text
