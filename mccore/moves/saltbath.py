"""Grand-canonical salt bath move with Rosenbluth insertion."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from ..errors import ConfigurationError, optional, require
from ..system import Change
from ..system.particles import particles_from_atoms
from .base import Move

if TYPE_CHECKING:
    from ..catalog import AtomCatalog, AtomType
    from ..energy import EnergyTerm
    from ..system import Space

logger = logging.getLogger(__name__)

BOND_TYPES = ("none", "harmonic", "fene", "dihedral")


class SaltBathState(Enum):
    IDLE = "idle"
    PROPOSED_INSERT = "proposed insert"
    PROPOSED_REMOVE = "proposed remove"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class Species:
    """
    One inserted unit: a fixed sequence of atoms in a group.

    A group holding the species is divided into consecutive units of
    `valency` slots; a unit is either fully active or fully inactive.

    Attributes:
        sequence: Atom types of one unit.
        group_index: Index of the group holding the species.
    """

    sequence: tuple[AtomType, ...]
    group_index: int

    @property
    def valency(self) -> int:
        return len(self.sequence)

    @property
    def names(self) -> list[str]:
        return [atom.name for atom in self.sequence]


class SaltBath(Move):
    """
    Grand-canonical insertion and removal of a polymer unit plus counter-ions.

    Each attempt inserts or removes (50/50) one polymer unit and one counter
    ion unit together, at chemical potential `mu` (kT, standard state 1
    particle per A^3). Insertions place each unit with `k` Rosenbluth trials
    and pick one trial with probability proportional to its Boltzmann
    factor. Removals pick one unit of each species uniformly and compute the
    Rosenbluth weights of the old configuration in reverse order.

    Acceptance, with W the Rosenbluth weights, v the valencies and N the
    active unit counts before the move:

        insert: P = exp(mu) V^(vA+vB) / ((NA+1)(NB+1)) * (WA/k) * (WB/k)
        remove: P = NA NB / (exp(mu) V^(vA+vB)) / ((WA/k) * (WB/k))

    A move with `mu=None` is disabled: its runfraction is zero and it never
    proposes anything.

    Attributes:
        polymer: Polymer species.
        counter: Counter ion species.
        mu: Chemical potential of the salt in kT, or None.
        k: Number of Rosenbluth trials per unit.
        bondtype: Insertion scheme tag; only "none" places units.
        index: Move number, used in reports.
        state: Position in the propose/decide cycle.
    """

    name = "Rosenbluth salt bath"

    def __init__(
        self,
        space: Space,
        trial: Space,
        hamiltonian: EnergyTerm,
        atoms: AtomCatalog,
        polymer: Sequence[str] = ("NA",),
        counterions: Sequence[str] = ("CL",),
        mu: float | None = None,
        k: int = 1,
        bondtype: str = "none",
        index: int = 0,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        super().__init__(space, trial, hamiltonian, rng, 1.0, seed)
        self.index = index
        self.mu = mu
        self.k = int(k)
        self.bondtype = bondtype
        self.state = SaltBathState.IDLE
        self.n_inserted = 0
        self.n_removed = 0
        self._ln_acceptance = 0.0
        self._inserting = False

        if mu is None:
            self.runfraction = 0.0
            self.polymer = self.counter = None
            logger.warning("salt bath %d has no chemical potential and is disabled", index)
            return

        if self.k < 1:
            raise ConfigurationError("number of Rosenbluth trials must be >= 1", key="ktrials")
        if bondtype not in BOND_TYPES:
            raise ConfigurationError(f"unknown bond type '{bondtype}'", key="bond")
        if not polymer or not counterions:
            raise ConfigurationError("species sequences must not be empty", key="polymer")

        self.polymer = self._species(atoms, polymer, "polymer")
        self.counter = self._species(atoms, counterions, "counterions")
        if self.polymer.group_index == self.counter.group_index:
            raise ConfigurationError(
                "polymer and counter ions must live in different groups", key="counterions"
            )
        logger.info(
            "salt bath %d: mu = %g kT, k = %d, polymer %s, counter ions %s",
            index,
            mu,
            self.k,
            self.polymer.names,
            self.counter.names,
        )

    def _species(self, atoms: AtomCatalog, names: Sequence[str], key: str) -> Species:
        sequence = tuple(atoms.find(name) for name in names)
        first = sequence[0].id
        for i, group in enumerate(self.space.groups):
            if np.any(group.slots["id"] == first):
                if group.capacity % len(sequence):
                    raise ConfigurationError(
                        f"group {i} has {group.capacity} slots, not a multiple of "
                        f"the unit size {len(sequence)}",
                        key=key,
                    )
                return Species(sequence, i)
        raise ConfigurationError(f"no group contains atom '{names[0]}'", key=key)

    # -- unit bookkeeping ---------------------------------------------------

    def _active_units(self, space: Space, species: Species) -> NDArray[np.integer]:
        """Offsets of the first slot of every active unit."""
        group = space.group(species.group_index)
        mask = group.active_mask.reshape(-1, species.valency)
        return np.flatnonzero(np.all(mask, axis=1)) * species.valency

    def _free_unit(self, species: Species) -> int:
        """Offset of an inactive unit in the trial space, growing the group if needed."""
        group = self.trial.group(species.group_index)
        mask = group.active_mask.reshape(-1, species.valency)
        free = np.flatnonzero(~np.any(mask, axis=1))
        if len(free):
            return int(free[0]) * species.valency
        offset = group.capacity
        placeholders = particles_from_atoms(species.sequence, active=False)
        self.trial.insert_slots(species.group_index, placeholders)
        return offset

    def _unit_energies(self, species: Species, offset: int, n: int) -> tuple[NDArray, NDArray]:
        """
        Energies of `n` random placements of the unit at `offset` in the trial space.

        Returns:
            Tuple of (energies shape (n,), positions shape (n, valency, 3)).
        """
        group = self.trial.group(species.group_index)
        geometry = self.trial.geometry
        unit = slice(offset, offset + species.valency)
        probe = Change()
        probe.add(species.group_index, atoms=list(range(offset, offset + species.valency)))

        energies = np.empty(n)
        positions = np.empty((n, species.valency, 3))
        for t in range(n):
            positions[t] = geometry.boundary(geometry.random_position(self.rng, species.valency))
            group.slots["pos"][unit] = positions[t]
            if np.any(geometry.collision(positions[t])):
                energies[t] = np.inf
            else:
                energies[t] = self.hamiltonian.energy(self.trial, probe)
        return energies, positions

    def _log_weight(self, energies: NDArray) -> float:
        """ln(W / k) for Rosenbluth factors exp(-u)."""
        return float(logsumexp(-energies)) - np.log(self.k)

    # -- proposals ------------------------------------------------------------

    def insert(self) -> None:
        """Activate one polymer and one counter ion unit at Rosenbluth-chosen positions."""
        if self.bondtype != "none":
            raise NotImplementedError(f"insertion with bond type '{self.bondtype}'")
        self.state = SaltBathState.PROPOSED_INSERT
        ln_p = self.mu
        for species in (self.polymer, self.counter):
            n_units = len(self._active_units(self.trial, species))
            offset = self._free_unit(species)
            group = self.trial.group(species.group_index)
            unit = slice(offset, offset + species.valency)
            group.slots["active"][unit] = True

            energies, positions = self._unit_energies(species, offset, self.k)
            log_w = self._log_weight(energies)
            if np.isfinite(log_w):
                weights = np.exp(-energies - (log_w + np.log(self.k)))
                chosen = int(self.rng.choice(self.k, p=weights / weights.sum()))
            else:
                chosen = 0
            group.slots["pos"][unit] = positions[chosen]

            ln_p += (
                species.valency * np.log(self.trial.geometry.volume)
                - np.log(n_units + 1)
                + log_w
            )
            self.change.add(species.group_index, activated=[(offset, offset + species.valency)])
        self._ln_acceptance = ln_p

    def remove(self) -> None:
        """Deactivate one random polymer unit and one random counter ion unit."""
        self.state = SaltBathState.PROPOSED_REMOVE
        units = {}
        for species in (self.polymer, self.counter):
            active = self._active_units(self.trial, species)
            if len(active) == 0:
                return
            units[species.group_index] = (len(active), int(active[self.rng.integers(len(active))]))

        # Reverse of the insertion order: counter ions first
        ln_p = -self.mu
        for species in (self.counter, self.polymer):
            n_units, offset = units[species.group_index]
            group = self.trial.group(species.group_index)
            unit = slice(offset, offset + species.valency)
            original = group.slots["pos"][unit].copy()

            probe = Change()
            probe.add(species.group_index, atoms=list(range(offset, offset + species.valency)))
            actual = self.hamiltonian.energy(self.trial, probe)
            trials, _ = self._unit_energies(species, offset, self.k - 1)
            group.slots["pos"][unit] = original
            log_w = self._log_weight(np.concatenate(([actual], trials)))

            group.slots["active"][unit] = False
            ln_p += (
                np.log(n_units)
                - species.valency * np.log(self.trial.geometry.volume)
                - log_w
            )
            self.change.add(
                species.group_index, deactivated=[(offset, offset + species.valency)]
            )
        self._ln_acceptance = ln_p

    def propose(self) -> None:
        self._inserting = bool(self.rng.random() < 0.5)
        if self._inserting:
            self.insert()
        else:
            self.remove()

    def acceptance_energy(self, du: float) -> float:
        return -self._ln_acceptance

    def accept(self, du: float) -> None:
        super().accept(du)
        self.state = SaltBathState.ACCEPTED
        if self._inserting:
            self.n_inserted += 1
        else:
            self.n_removed += 1

    def reject(self) -> None:
        super().reject()
        self.state = SaltBathState.REJECTED

    def move(self) -> float:
        du = super().move()
        self.state = SaltBathState.IDLE
        return du

    def active_count(self, species: Species) -> int:
        """Active particles of a species in the accepted space."""
        return len(self._active_units(self.space, species)) * species.valency

    def to_dict(self) -> dict:
        record = super().to_dict()
        record.update({"index": self.index, "mu": self.mu, "ktrials": self.k})
        if self.enabled:
            record.update(
                {
                    "polymer": self.polymer.names,
                    "counterions": self.counter.names,
                    "bond": self.bondtype,
                    "insertions": self.n_inserted,
                    "removals": self.n_removed,
                }
            )
        return record

    def info(self) -> str:
        if not self.enabled:
            return f"# {self.name} {self.index}: disabled (no chemical potential)\n"
        return super().info() + (
            f"#   Index                     = {self.index}\n"
            f"#   Chemical potential (kT)   = {self.mu}\n"
            f"#   No. of monomers           = {self.polymer.valency} "
            f"{self.active_count(self.polymer)}\n"
            f"#   No. of counter ions       = {self.counter.valency} "
            f"{self.active_count(self.counter)}\n"
            f"#   Rosenbluth trials         = {self.k}\n"
            f"#   Bond type                 = {self.bondtype}\n"
        )

    @classmethod
    def from_dict(
        cls,
        record: dict,
        space: Space,
        trial: Space,
        hamiltonian: EnergyTerm,
        atoms: AtomCatalog,
        rng: np.random.Generator | None = None,
    ) -> SaltBath:
        """
        Create from a configuration record.

        Example::

            {"mu": -2.5, "ktrials": 10, "polymer": ["NA"],
             "counterions": ["CL"], "bond": "none", "index": 0}

        A record without ``mu`` creates a disabled move.

        Raises:
            ConfigurationError: On malformed values.
        """
        mu = None if record.get("mu") is None else require(record, "mu", float, "saltbath")
        k = optional(record, "ktrials", 1, int, "saltbath")
        index = optional(record, "index", 0, int, "saltbath")
        return cls(
            space,
            trial,
            hamiltonian,
            atoms,
            polymer=record.get("polymer", ("NA",)),
            counterions=record.get("counterions", ("CL",)),
            mu=mu,
            k=k,
            bondtype=record.get("bond", "none"),
            index=index,
            rng=rng,
        )
