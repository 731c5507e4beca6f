"""Intramolecular bond energy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import EnergyTerm

if TYPE_CHECKING:
    from ..catalog import MoleculeCatalog
    from ..system import Change, Group, Space


class Bonded(EnergyTerm):
    """
    Bond energy of each group, from its molecule type's bond list.

    Bond indices are relative to the first slot of the group; bonds to an
    inactive slot do not contribute.

    Attributes:
        molecules: Molecule catalog the group ids refer to.
        temperature: Temperature for the kJ/mol -> kT conversion.
    """

    name = "bonded"

    def __init__(self, molecules: MoleculeCatalog, temperature: float | None = None) -> None:
        self.molecules = molecules
        self.temperature = temperature

    def group_energy(self, space: Space, group: Group) -> float:
        molecule = self.molecules[group.id]
        if not molecule.bonds:
            return 0.0
        active = space.p["active"]
        positions = space.p["pos"]
        total = 0.0
        for bond in molecule.bonds:
            shifted = bond.shift(group.begin)
            if all(active[i] for i in shifted.index):
                total += shifted.energy(positions, space.geometry.distance, self.temperature)
        return total

    def energy(self, space: Space, change: Change) -> float:
        if change.dV != 0:
            return self.system_energy(space)
        return sum(
            self.group_energy(space, space.group(index))
            for index in change.touched_group_indices()
        )

    def system_energy(self, space: Space) -> float:
        return sum(self.group_energy(space, group) for group in space.groups)
