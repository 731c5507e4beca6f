"""Contiguous particle storage."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from ..catalog import AtomType

# One record per particle slot. `active` marks slots that currently hold a
# particle; grand-canonical moves toggle it instead of erasing storage.
PARTICLE_DTYPE = np.dtype(
    [
        ("id", np.int32),
        ("pos", np.float64, (3,)),
        ("charge", np.float64),
        ("radius", np.float64),
        ("mu", np.float64, (3,)),
        ("mulen", np.float64),
        ("active", np.bool_),
    ]
)


@dataclass
class Particle:
    """
    Convenience constructor for a single particle record.

    Attributes:
        id: Atom type id.
        pos: Position, shape (3,).
        charge: Charge in elementary charges.
        radius: Radius in angstrom.
        mu: Dipole unit vector, shape (3,).
        mulen: Dipole moment scalar.
        active: Whether the slot holds a particle.
    """

    id: int = 0
    pos: ArrayLike = field(default_factory=lambda: np.zeros(3))
    charge: float = 0.0
    radius: float = 0.0
    mu: ArrayLike = field(default_factory=lambda: np.zeros(3))
    mulen: float = 0.0
    active: bool = True

    def as_record(self) -> np.void:
        record = np.zeros(1, dtype=PARTICLE_DTYPE)
        record["id"] = self.id
        record["pos"] = np.asarray(self.pos, dtype=np.float64)
        record["charge"] = self.charge
        record["radius"] = self.radius
        record["mu"] = np.asarray(self.mu, dtype=np.float64)
        record["mulen"] = self.mulen
        record["active"] = self.active
        return record[0]


def particle_array(particles: Iterable[Particle] = ()) -> NDArray:
    """Build a structured particle array from Particle objects."""
    particles = list(particles)
    records = np.zeros(len(particles), dtype=PARTICLE_DTYPE)
    for i, particle in enumerate(particles):
        records[i] = particle.as_record()
    return records


def particles_from_atoms(
    atoms: Sequence[AtomType],
    positions: ArrayLike | None = None,
    active: bool = True,
) -> NDArray:
    """
    Build particle records from atom types.

    Args:
        atoms: Atom type of each particle.
        positions: Positions, shape (N, 3). Defaults to the origin.
        active: Initial slot state.

    Returns:
        Structured array of shape (N,).
    """
    n = len(atoms)
    records = np.zeros(n, dtype=PARTICLE_DTYPE)
    if n == 0:
        return records
    records["id"] = [atom.id for atom in atoms]
    records["charge"] = [atom.charge for atom in atoms]
    records["radius"] = [atom.radius for atom in atoms]
    if positions is not None:
        positions = np.asarray(positions, dtype=np.float64).reshape(n, 3)
        records["pos"] = positions
    records["active"] = active
    return records


class ParticleVector:
    """
    Growable contiguous particle storage.

    Records live in a single structured buffer that is reallocated
    geometrically when it runs out of capacity. Anything holding a view into
    the buffer must be re-anchored after a reallocation; `extend` and
    `insert` report when that happened.

    Attributes:
        buffer: Backing structured array (length == capacity).
    """

    def __init__(self, records: ArrayLike | None = None, capacity: int = 0) -> None:
        records = (
            np.zeros(0, dtype=PARTICLE_DTYPE)
            if records is None
            else np.asarray(records, dtype=PARTICLE_DTYPE).reshape(-1)
        )
        self._size = len(records)
        self.buffer = np.zeros(max(capacity, self._size), dtype=PARTICLE_DTYPE)
        self.buffer[: self._size] = records

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index):
        return self.data[index]

    def __iter__(self):
        return iter(self.data)

    @property
    def data(self) -> NDArray:
        """View of the used part of the buffer."""
        return self.buffer[: self._size]

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    def _reserve(self, size: int) -> bool:
        if size <= self.capacity:
            return False
        new_capacity = max(size, 2 * self.capacity, 8)
        new_buffer = np.zeros(new_capacity, dtype=PARTICLE_DTYPE)
        new_buffer[: self._size] = self.buffer[: self._size]
        self.buffer = new_buffer
        return True

    def extend(self, records: ArrayLike) -> bool:
        """
        Append records to the end of storage.

        Returns:
            True if the backing buffer was reallocated.
        """
        records = np.asarray(records, dtype=PARTICLE_DTYPE).reshape(-1)
        reallocated = self._reserve(self._size + len(records))
        self.buffer[self._size : self._size + len(records)] = records
        self._size += len(records)
        return reallocated

    def insert(self, at: int, records: ArrayLike) -> bool:
        """
        Insert records before position `at`, shifting the tail.

        Returns:
            True if the backing buffer was reallocated.
        """
        if not 0 <= at <= self._size:
            raise IndexError(f"insert position {at} out of range [0, {self._size}]")
        records = np.asarray(records, dtype=PARTICLE_DTYPE).reshape(-1)
        n = len(records)
        reallocated = self._reserve(self._size + n)
        self.buffer[at + n : self._size + n] = self.buffer[at : self._size].copy()
        self.buffer[at : at + n] = records
        self._size += n
        return reallocated

    def clear(self) -> None:
        self._size = 0

    def copy(self) -> ParticleVector:
        """Independent copy with the same capacity."""
        other = ParticleVector(capacity=self.capacity)
        other.buffer[: self._size] = self.buffer[: self._size]
        other._size = self._size
        return other
