"""Atom type catalog."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from ..errors import ConfigurationError, require


@dataclass(frozen=True)
class AtomType:
    """
    Physical parameters of one atom type.

    Attributes:
        name: Unique atom name, e.g. "NA".
        id: Index of this type in its catalog.
        charge: Charge in elementary charges.
        sigma: Lennard-Jones diameter in angstrom.
        eps: Lennard-Jones well depth in kJ/mol.
        radius: Hard-sphere radius in angstrom (defaults to sigma / 2).
        mw: Molecular weight in g/mol.
    """

    name: str
    id: int = 0
    charge: float = 0.0
    sigma: float = 0.0
    eps: float = 0.0
    radius: float | None = None
    mw: float = 1.0

    def __post_init__(self) -> None:
        if self.radius is None:
            object.__setattr__(self, "radius", 0.5 * self.sigma)
        if self.sigma < 0 or self.eps < 0:
            raise ValueError(f"atom '{self.name}': sigma and eps must be non-negative")

    def to_dict(self) -> dict:
        return {
            self.name: {
                "q": self.charge,
                "sigma": self.sigma,
                "eps": self.eps,
                "r": self.radius,
                "mw": self.mw,
            }
        }


class AtomCatalog(Sequence):
    """
    Read-only table of atom types indexed by id.

    Built once before any Space is constructed and passed by reference to
    everything that needs type parameters. Atom ids are the positions in
    the catalog.

    Example:
        atoms = AtomCatalog([
            AtomType("NA", charge=1.0, sigma=3.0, eps=0.1),
            AtomType("CL", charge=-1.0, sigma=4.0, eps=0.1),
        ])
        atoms.find("CL").id  # 1
    """

    def __init__(self, atoms: Sequence[AtomType] = ()) -> None:
        renumbered = []
        for i, atom in enumerate(atoms):
            if atom.id != i:
                atom = AtomType(
                    name=atom.name,
                    id=i,
                    charge=atom.charge,
                    sigma=atom.sigma,
                    eps=atom.eps,
                    radius=atom.radius,
                    mw=atom.mw,
                )
            renumbered.append(atom)
        self._atoms: tuple[AtomType, ...] = tuple(renumbered)
        self._by_name = {atom.name: atom for atom in self._atoms}
        if len(self._by_name) != len(self._atoms):
            raise ConfigurationError("duplicate atom names in atom list", key="atomlist")

    def __getitem__(self, index):
        return self._atoms[index]

    def __len__(self) -> int:
        return len(self._atoms)

    def __iter__(self) -> Iterator[AtomType]:
        return iter(self._atoms)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def find(self, name: str) -> AtomType:
        """Return the atom type called `name`."""
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(f"unknown atom type '{name}'", key=name) from None

    @property
    def names(self) -> list[str]:
        return [atom.name for atom in self._atoms]

    @classmethod
    def from_dict(cls, records: Sequence[dict]) -> AtomCatalog:
        """
        Build a catalog from a list of single-key records.

        Each record has the form ``{"NA": {"q": 1.0, "sigma": 3.0, "eps": 0.1}}``.
        Only ``sigma`` is required; charge, epsilon and weight default to the
        values of a neutral point particle.

        Raises:
            ConfigurationError: If a record is malformed.
        """
        atoms = []
        for record in records:
            if not isinstance(record, dict) or len(record) != 1:
                raise ConfigurationError(
                    "atom records must have exactly one key", key="atomlist"
                )
            ((name, params),) = record.items()
            if not isinstance(params, dict):
                raise ConfigurationError("atom parameters must be a mapping", key=name)
            sigma = require(params, "sigma", float, context=name)
            radius = params.get("r")
            atoms.append(
                AtomType(
                    name=name,
                    charge=float(params.get("q", 0.0)),
                    sigma=sigma,
                    eps=float(params.get("eps", 0.0)),
                    radius=None if radius is None else float(radius),
                    mw=float(params.get("mw", 1.0)),
                )
            )
        return cls(atoms)

    def to_dict(self) -> list[dict]:
        return [atom.to_dict() for atom in self._atoms]
