"""Simulation space: particles, groups and container geometry."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import InvariantViolation
from .group import Group
from .particles import PARTICLE_DTYPE, ParticleVector

if TYPE_CHECKING:
    from ..catalog import MoleculeCatalog
    from .change import Change
    from .geometry import Geometry


class FilteredView:
    """
    Lazy, restartable view over a sequence.

    Every iteration re-reads the source, so the view stays valid when the
    underlying storage is reallocated between iterations.
    """

    def __init__(
        self, source: Callable[[], Iterable[Any]], predicate: Callable[[Any], bool]
    ) -> None:
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[Any]:
        return (item for item in self._source() if self._predicate(item))

    def __len__(self) -> int:
        return sum(1 for _ in self)


class Space:
    """
    Owner of the particle storage, the group list and the geometry.

    Groups are contiguous, non-overlapping slot ranges into the particle
    storage. Every mutating operation that may move the storage re-anchors
    all groups through `Group.relocate`.

    Monte Carlo runs keep two independent Space instances, an accepted one
    and a trial one, and bring them back in agreement with `sync`.

    Example:
        spc = Space(Cuboid.cubic(50.0))
        spc.append(0, particles_from_atoms([atoms.find("NA")] * 10))
        trial = spc.copy()
        ...  # mutate trial, record what changed in `change`
        spc.sync(trial, change)

    Attributes:
        geometry: Container geometry.
        particles: Particle storage.
        groups: Group list in storage order.
    """

    def __init__(self, geometry: Geometry) -> None:
        self.geometry = geometry
        self.particles = ParticleVector()
        self.groups: list[Group] = []

    @property
    def p(self) -> NDArray:
        """View of all particle slots."""
        return self.particles.data

    @property
    def n_active(self) -> int:
        return int(np.count_nonzero(self.p["active"]))

    def active_indices(self) -> NDArray[np.integer]:
        return np.flatnonzero(self.p["active"])

    def group(self, index: int) -> Group:
        """Return group `index`, failing fast on a bad index."""
        if not 0 <= index < len(self.groups):
            raise InvariantViolation(
                f"group index {index} out of range [0, {len(self.groups)})"
            )
        return self.groups[index]

    def _rebase(self) -> None:
        buffer = self.particles.buffer
        for group in self.groups:
            group.relocate(buffer)

    def clear(self) -> None:
        self.particles.clear()
        self.groups.clear()

    def append(self, molid: int, particles: ArrayLike) -> None:
        """
        Append particles and a group spanning them.

        Appending nothing is a no-op and creates no group.

        Args:
            molid: Molecule type id of the new group.
            particles: Particle records, structured array of PARTICLE_DTYPE.
        """
        records = np.asarray(particles, dtype=PARTICLE_DTYPE).reshape(-1)
        if len(records) == 0:
            return
        begin = len(self.particles)
        if self.particles.extend(records):
            self._rebase()
        self.groups.append(Group(self.particles.buffer, begin, begin + len(records), molid))

    def insert_slots(self, group_index: int, particles: ArrayLike) -> None:
        """
        Grow a group by inserting slots at its end.

        Groups after it shift by the number of inserted slots. This is a
        structural change: particle counts of two spaces differ afterwards.
        """
        group = self.group(group_index)
        records = np.asarray(particles, dtype=PARTICLE_DTYPE).reshape(-1)
        n = len(records)
        if n == 0:
            return
        self.particles.insert(group.end, records)
        group.end += n
        for other in self.groups[group_index + 1 :]:
            other.begin += n
            other.end += n
        self._rebase()

    def find_groups_by_type(self, molid: int) -> FilteredView:
        """Groups of molecule type `molid` (linear time)."""
        return FilteredView(lambda: self.groups, lambda g: g.id == molid)

    def find_particles_by_type(self, atomid: int) -> FilteredView:
        """Active particles of atom type `atomid` (linear time)."""
        return FilteredView(
            lambda: self.particles.data,
            lambda p: p["id"] == atomid and p["active"],
        )

    def group_of(self, index: int) -> int:
        """Index of the group holding particle slot `index`."""
        for i, group in enumerate(self.groups):
            if group.contains(index):
                return i
        raise InvariantViolation(f"particle index {index} belongs to no group")

    def copy(self) -> Space:
        """Independent deep copy sharing no storage with this space."""
        other = Space(self.geometry)
        other.particles = self.particles.copy()
        other.groups = [g.copy_to(other.particles.buffer) for g in self.groups]
        return other

    def sync(self, other: Space, change: Change) -> None:
        """
        Make this space equal to `other`, copying only what `change` lists.

        When particle or group counts differ the whole storage is copied and
        every group re-anchored; otherwise only touched slots are copied.
        Activated ranges copy the full slot records, deactivated ranges only
        take over the source's active flags, so the same change resets a
        trial space after a rejection.

        Args:
            other: Space to copy from. Must not share storage with this one.
            change: Description of what differs.

        Raises:
            InvariantViolation: On aliased storage, bad group indices, or
                touched groups whose slot ranges differ.
        """
        if len(self.particles) != len(other.particles) or len(self.groups) != len(
            other.groups
        ):
            self.particles = other.particles.copy()
            self.groups = [g.copy_to(self.particles.buffer) for g in other.groups]
            self.geometry = other.geometry
            return

        if np.may_share_memory(self.particles.buffer, other.particles.buffer):
            raise InvariantViolation("cannot sync spaces sharing particle storage")

        if change.dV != 0:
            self.geometry = other.geometry

        for data in change.groups:
            target = self.group(data.index)
            source = other.group(data.index)
            if target.begin != source.begin or target.end != source.end:
                raise InvariantViolation(
                    f"group {data.index} spans [{target.begin}, {target.end}) here "
                    f"but [{source.begin}, {source.end}) in the source"
                )
            if data.all:
                target.slots[:] = source.slots
                continue
            if data.atoms:
                offsets = np.asarray(data.atoms, dtype=np.intp)
                if offsets.min() < 0 or offsets.max() >= target.capacity:
                    raise InvariantViolation(
                        f"atom offsets {data.atoms} outside group {data.index}"
                    )
                target.slots[offsets] = source.slots[offsets]
            for first, last in data.activated:
                _check_range(first, last, target, data.index)
                target.slots[first:last] = source.slots[first:last]
            for first, last in data.deactivated:
                _check_range(first, last, target, data.index)
                target.slots["active"][first:last] = source.slots["active"][first:last]

    def populate(self, molecules: MoleculeCatalog, rng: np.random.Generator) -> None:
        """
        Clear, then insert `n_init` random conformations of each molecule type.

        An atomic molecule type with `n_init == 0` still gets one group, with
        every slot inactive, so grand-canonical moves can fill it later.
        """
        self.clear()
        for molecule in molecules:
            for _ in range(molecule.n_init):
                self.append(molecule.id, molecule.random_conformation(self.geometry, rng))
            if molecule.atomic and molecule.n_init == 0:
                placeholder = molecule.random_conformation(self.geometry, rng)
                placeholder["active"] = False
                self.append(molecule.id, placeholder)


def _check_range(first: int, last: int, group: Group, index: int) -> None:
    if not 0 <= first <= last <= group.capacity:
        raise InvariantViolation(f"slot range [{first}, {last}) outside group {index}")
