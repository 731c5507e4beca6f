"""Change descriptor between an accepted and a trial Space."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GroupChange:
    """
    What changed in one group.

    Atom offsets and (de)activated ranges are relative to the group's
    first slot.

    Attributes:
        index: Index of the touched group in the group list.
        all: True if every slot of the group may differ.
        atoms: Offsets of touched slots (ignored when `all` is set).
        activated: Half-open offset ranges of slots switched on.
        deactivated: Half-open offset ranges of slots switched off.
    """

    index: int
    all: bool = False
    atoms: list[int] = field(default_factory=list)
    activated: list[tuple[int, int]] = field(default_factory=list)
    deactivated: list[tuple[int, int]] = field(default_factory=list)

    def offsets(self) -> list[int]:
        """All explicitly touched offsets, including (de)activated slots."""
        touched = list(self.atoms)
        for first, last in self.activated + self.deactivated:
            touched.extend(range(first, last))
        return sorted(set(touched))


@dataclass
class Change:
    """
    Coordinates of everything that differs between two Space snapshots.

    Created fresh (or cleared) for every proposed move, filled by the move,
    consumed by `Space.sync` and then cleared. Holds no particle data.

    Attributes:
        dV: Volume change.
        groups: Touched groups.
    """

    dV: float = 0.0
    groups: list[GroupChange] = field(default_factory=list)

    def clear(self) -> None:
        self.dV = 0.0
        self.groups.clear()

    def empty(self) -> bool:
        return not self.groups and self.dV == 0

    def __bool__(self) -> bool:
        return not self.empty()

    def touched_group_indices(self) -> list[int]:
        return [data.index for data in self.groups]

    def find(self, index: int) -> GroupChange | None:
        for data in self.groups:
            if data.index == index:
                return data
        return None

    def add(
        self,
        index: int,
        all: bool = False,
        atoms: list[int] | None = None,
        activated: list[tuple[int, int]] | None = None,
        deactivated: list[tuple[int, int]] | None = None,
    ) -> GroupChange:
        """Record a touched group, merging with an existing entry."""
        data = self.find(index)
        if data is None:
            data = GroupChange(index)
            self.groups.append(data)
        data.all = data.all or all
        data.atoms.extend(a for a in (atoms or []) if a not in data.atoms)
        data.activated.extend(activated or [])
        data.deactivated.extend(deactivated or [])
        return data
