"""Bonded interactions as a tagged variant."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError, require
from ..units import kjmol


class BondType(Enum):
    HARMONIC = "harmonic"
    FENE = "fene"
    DIHEDRAL = "dihedral"
    NONE = "none"


# Parameters (besides "index") each variant reads and writes, and the number
# of particle indices it binds.
_BOND_FIELDS: dict[BondType, tuple[tuple[str, ...], int]] = {
    BondType.HARMONIC: (("k", "req"), 2),
    BondType.FENE: (("k", "rmax"), 2),
    BondType.DIHEDRAL: (("k", "deq"), 4),
}


@dataclass
class BondData:
    """
    One bonded interaction.

    Parameters are stored exactly as given in the input record (force
    constants in kJ/mol/A^2, lengths in angstrom, angles in degrees) and
    converted to kT when evaluated.

    V_harmonic(r) = 0.5 * k * (r - req)^2
    V_fene(r) = -0.5 * k * rmax^2 * ln(1 - (r / rmax)^2), infinite for r >= rmax

    Attributes:
        type: Variant tag.
        index: Particle indices of the bond.
        params: Variant parameters by name.
    """

    type: BondType = BondType.NONE
    index: list[int] = field(default_factory=list)
    params: dict[str, float] = field(default_factory=dict)

    def shift(self, offset: int) -> BondData:
        """Copy with every particle index shifted by `offset`."""
        return BondData(self.type, [i + offset for i in self.index], dict(self.params))

    def energy(
        self,
        positions: NDArray[np.floating],
        distance: Callable[[NDArray, NDArray], NDArray],
        temperature: float | None = None,
    ) -> float:
        """
        Bond energy in kT.

        Args:
            positions: Particle positions the bond indices refer to.
            distance: Geometry separation function a - b.
            temperature: Temperature for the kJ/mol -> kT conversion.

        Raises:
            NotImplementedError: For dihedral bonds.
        """
        to_kt = _converter(temperature)
        if self.type == BondType.HARMONIC:
            i, j = self.index
            r = float(np.linalg.norm(distance(positions[i], positions[j])))
            d = self.params["req"] - r
            return 0.5 * to_kt(self.params["k"]) * d * d
        if self.type == BondType.FENE:
            i, j = self.index
            r2 = float(np.sum(distance(positions[i], positions[j]) ** 2))
            rmax2 = self.params["rmax"] ** 2
            if r2 >= rmax2:
                return float("inf")
            return -0.5 * to_kt(self.params["k"]) * rmax2 * np.log(1.0 - r2 / rmax2)
        raise NotImplementedError(f"{self.type.value} bond energy is not implemented")

    def force(
        self,
        positions: NDArray[np.floating],
        distance: Callable[[NDArray, NDArray], NDArray],
        temperature: float | None = None,
    ) -> NDArray[np.floating]:
        """
        Force on the first bonded particle in kT/A (the second gets the opposite).

        Raises:
            NotImplementedError: For FENE and dihedral bonds.
        """
        to_kt = _converter(temperature)
        if self.type == BondType.HARMONIC:
            i, j = self.index
            dr = distance(positions[i], positions[j])
            r = max(float(np.linalg.norm(dr)), 1e-10)
            return -to_kt(self.params["k"]) * (r - self.params["req"]) * dr / r
        raise NotImplementedError(f"{self.type.value} bond force is not implemented")

    def to_dict(self) -> dict:
        """Serialize as ``{type: {"index": [...], param: value, ...}}``."""
        if self.type == BondType.NONE:
            return {}
        return {self.type.value: {"index": list(self.index), **self.params}}

    @classmethod
    def from_dict(cls, record: dict) -> BondData:
        """
        Parse a single-key bond record.

        Example:
            BondData.from_dict({"harmonic": {"index": [2, 3], "k": 0.5, "req": 2.1}})

        Raises:
            ConfigurationError: On unknown tags, missing fields or a wrong
                number of indices.
        """
        if not isinstance(record, dict) or len(record) != 1:
            raise ConfigurationError("bond records must have exactly one key", key="bond")
        ((tag, values),) = record.items()
        try:
            bond_type = BondType(tag)
        except ValueError:
            raise ConfigurationError(f"unknown bond type '{tag}'", key=tag) from None
        if bond_type == BondType.NONE:
            raise ConfigurationError("bond type 'none' cannot be parsed", key=tag)

        names, n_index = _BOND_FIELDS[bond_type]
        if not isinstance(values, dict) or "index" not in values:
            raise ConfigurationError("missing required field", key=f"{tag}.index")
        index = [int(i) for i in values["index"]]
        if len(index) != n_index:
            raise ConfigurationError(
                f"{tag} bond requires exactly {n_index} indices, got {len(index)}",
                key=f"{tag}.index",
            )
        params = {name: require(values, name, float, context=tag) for name in names}
        return cls(bond_type, index, params)


def filter_bonds(bonds: Sequence[BondData], bond_type: BondType) -> list[BondData]:
    """Bonds of the given type (references to the originals)."""
    return [bond for bond in bonds if bond.type == bond_type]


def _converter(temperature: float | None) -> Callable[[float], float]:
    if temperature is None:
        return kjmol
    return lambda value: kjmol(value, temperature)
