"""Groups: contiguous slot ranges over particle storage."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(eq=False)
class Group:
    """
    Half-open slot range [begin, end) of a particle buffer.

    A group never owns its particles. It holds the storage handle plus
    offsets, so when the owning storage reallocates the group is moved to
    the new buffer with `relocate`, keeping its offsets.

    Slots whose `active` flag is False belong to the group but hold no
    particle; grand-canonical moves switch slots on and off.

    Attributes:
        buffer: Particle storage the offsets refer to.
        begin: First slot index.
        end: One past the last slot index.
        id: Molecule type id.
    """

    buffer: NDArray
    begin: int
    end: int
    id: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.begin <= self.end:
            raise ValueError(f"invalid group range [{self.begin}, {self.end})")

    def relocate(self, buffer: NDArray) -> None:
        """Re-anchor onto new storage, preserving offsets."""
        if self.end > len(buffer):
            raise ValueError(
                f"group range [{self.begin}, {self.end}) exceeds buffer of length "
                f"{len(buffer)}"
            )
        self.buffer = buffer

    @property
    def slots(self) -> NDArray:
        """View of all slots, active or not."""
        return self.buffer[self.begin : self.end]

    @property
    def capacity(self) -> int:
        """Number of slots."""
        return self.end - self.begin

    @property
    def active_mask(self) -> NDArray[np.bool_]:
        return self.slots["active"]

    @property
    def size(self) -> int:
        """Number of active particles."""
        return int(np.count_nonzero(self.active_mask))

    def __len__(self) -> int:
        return self.size

    def empty(self) -> bool:
        return self.size == 0

    def active_offsets(self) -> NDArray[np.integer]:
        """Offsets (relative to begin) of active slots."""
        return np.flatnonzero(self.active_mask)

    def active_indices(self) -> NDArray[np.integer]:
        """Absolute indices of active slots."""
        return self.active_offsets() + self.begin

    def contains(self, index: int) -> bool:
        return self.begin <= index < self.end

    @property
    def positions(self) -> NDArray[np.floating]:
        """Positions of active particles (copy)."""
        return self.slots["pos"][self.active_mask]

    def copy_to(self, buffer: NDArray, offset: int = 0) -> Group:
        """Shallow group copy anchored on another buffer, shifted by `offset`."""
        return Group(buffer, self.begin + offset, self.end + offset, self.id)
