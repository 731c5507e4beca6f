"""Base interface for energy terms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from ..system import Change, Space


class EnergyTerm(ABC):
    """
    Abstract base class for everything that contributes to the energy.

    Terms report the energy of the region a `Change` touches, so a move
    only pays for the particles it moved. Energies are in kT.
    """

    name: str = ""

    @abstractmethod
    def energy(self, space: Space, change: Change) -> float:
        """
        Energy of the part of `space` touched by `change`.

        Falls back to the whole system when the volume changed.

        Args:
            space: Space to evaluate.
            change: Touched groups and atoms.

        Returns:
            Energy in kT.
        """
        ...

    @abstractmethod
    def system_energy(self, space: Space) -> float:
        """Energy of the whole system in kT."""
        ...

    def info(self) -> str:
        return self.name


def touched_indices(space: Space, change: Change) -> NDArray[np.integer]:
    """
    Absolute indices of active particles touched by `change`.

    Offsets beyond a group's slot range are ignored: they describe slots that
    do not exist in this snapshot (the other snapshot grew the group).
    """
    indices = []
    for data in change.groups:
        group = space.group(data.index)
        if data.all:
            offsets = group.active_offsets()
        else:
            offsets = np.asarray(data.offsets(), dtype=np.intp)
            offsets = offsets[offsets < group.capacity]
            offsets = offsets[group.active_mask[offsets]]
        indices.append(offsets + group.begin)
    if not indices:
        return np.empty(0, dtype=np.intp)
    return np.unique(np.concatenate(indices))
