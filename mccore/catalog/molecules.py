"""Molecule type catalog."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError
from ..potentials.bonds import BondData
from ..system.particles import particles_from_atoms
from .atoms import AtomCatalog, AtomType

if TYPE_CHECKING:
    from ..system.geometry import Geometry


@dataclass(frozen=True, eq=False)
class MoleculeType:
    """
    Template for one kind of molecule.

    Atomic molecules are loose collections of atoms (e.g. all salt ions of
    one kind) that are placed independently; non-atomic molecules keep the
    shape of their template conformation.

    Attributes:
        name: Unique molecule name.
        atoms: Atom type of each particle.
        id: Index of this type in its catalog.
        atomic: True if the atoms are placed independently.
        conformation: Template positions relative to the first atom, shape (N, 3).
        bonds: Bonds with indices relative to the first atom.
        n_init: Number of molecules inserted when a space is populated.
    """

    name: str
    atoms: tuple[AtomType, ...]
    id: int = 0
    atomic: bool = False
    conformation: NDArray[np.floating] | None = None
    bonds: tuple[BondData, ...] = field(default_factory=tuple)
    n_init: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "atoms", tuple(self.atoms))
        object.__setattr__(self, "bonds", tuple(self.bonds))
        if self.conformation is not None:
            conformation = np.asarray(self.conformation, dtype=np.float64).reshape(-1, 3)
            if len(conformation) != len(self.atoms):
                raise ValueError(
                    f"molecule '{self.name}': conformation has {len(conformation)} "
                    f"positions for {len(self.atoms)} atoms"
                )
            object.__setattr__(self, "conformation", conformation)
        for bond in self.bonds:
            if any(not 0 <= i < len(self.atoms) for i in bond.index):
                raise ValueError(
                    f"molecule '{self.name}': bond index {bond.index} out of range"
                )

    def __len__(self) -> int:
        return len(self.atoms)

    def random_conformation(self, geometry: Geometry, rng: np.random.Generator) -> NDArray:
        """
        Particle records for one molecule at a random place in the container.

        Atomic molecules get an independent random position per atom. Other
        molecules are translated as a rigid template to a random position.
        """
        n = len(self.atoms)
        if self.atomic or self.conformation is None:
            positions = geometry.random_position(rng, n)
        else:
            positions = geometry.boundary(
                self.conformation + geometry.random_position(rng)
            )
        return particles_from_atoms(self.atoms, positions)


class MoleculeCatalog(Sequence):
    """Read-only table of molecule types indexed by id."""

    def __init__(self, molecules: Sequence[MoleculeType] = ()) -> None:
        self._molecules: tuple[MoleculeType, ...] = tuple(
            MoleculeType(
                name=mol.name,
                atoms=mol.atoms,
                id=i,
                atomic=mol.atomic,
                conformation=mol.conformation,
                bonds=mol.bonds,
                n_init=mol.n_init,
            )
            if mol.id != i
            else mol
            for i, mol in enumerate(molecules)
        )
        self._by_name = {mol.name: mol for mol in self._molecules}
        if len(self._by_name) != len(self._molecules):
            raise ConfigurationError(
                "duplicate molecule names in molecule list", key="moleculelist"
            )

    def __getitem__(self, index):
        return self._molecules[index]

    def __len__(self) -> int:
        return len(self._molecules)

    def __iter__(self) -> Iterator[MoleculeType]:
        return iter(self._molecules)

    def find(self, name: str) -> MoleculeType:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(f"unknown molecule '{name}'", key=name) from None

    @classmethod
    def from_dict(cls, records: Sequence[dict], atoms: AtomCatalog) -> MoleculeCatalog:
        """
        Build a catalog from single-key records.

        Example record::

            {"salt": {"atoms": ["NA", "CL"], "atomic": true, "Ninit": 20}}
            {"dimer": {"atoms": ["A", "A"], "structure": [[0,0,0], [0,0,3]],
                       "bondlist": [{"harmonic": {"index": [0, 1], "k": 10, "req": 3}}]}}

        Raises:
            ConfigurationError: If a record is malformed.
        """
        molecules = []
        for record in records:
            if not isinstance(record, dict) or len(record) != 1:
                raise ConfigurationError(
                    "molecule records must have exactly one key", key="moleculelist"
                )
            ((name, params),) = record.items()
            if not isinstance(params, dict) or "atoms" not in params:
                raise ConfigurationError("missing required field", key=f"{name}.atoms")
            mol_atoms = [atoms.find(atom_name) for atom_name in params["atoms"]]
            bonds = [BondData.from_dict(b) for b in params.get("bondlist", [])]
            try:
                molecules.append(
                    MoleculeType(
                        name=name,
                        atoms=tuple(mol_atoms),
                        atomic=bool(params.get("atomic", False)),
                        conformation=params.get("structure"),
                        bonds=tuple(bonds),
                        n_init=int(params.get("Ninit", 0)),
                    )
                )
            except ValueError as err:
                raise ConfigurationError(str(err), key=name) from err
        return cls(molecules)
