"""Coulomb pair potential."""

from __future__ import annotations

from ...errors import ConfigurationError, require
from ...units import DEFAULT_TEMPERATURE, bjerrum_length
from ..base import PairPotential, along, squared_norm


class Coulomb(PairPotential):
    """
    Plain Coulomb interaction in a dielectric continuum.

    V(r) = lB * q_a * q_b / r

    where lB is the Bjerrum length, so V is in kT.

    Attributes:
        lB: Bjerrum length in angstrom.
    """

    name = "coulomb"

    def __init__(self, lB: float) -> None:
        self.lB = float(lB)

    @classmethod
    def from_epsr(cls, epsr: float, temperature: float = DEFAULT_TEMPERATURE) -> Coulomb:
        """Create from the relative dielectric constant of the medium."""
        return cls(bjerrum_length(epsr, temperature))

    def __call__(self, a, b, r):
        return self.lB * a["charge"] * b["charge"] / squared_norm(r) ** 0.5

    def force(self, a, b, r):
        r2 = squared_norm(r)
        return along(self.lB * a["charge"] * b["charge"] / (r2 * r2**0.5), r)

    def to_dict(self) -> dict:
        return {"lB": self.lB}

    @classmethod
    def from_dict(cls, params, atoms=None, temperature: float = DEFAULT_TEMPERATURE) -> Coulomb:
        """
        Create from ``{"lB": 7.0}`` or ``{"epsr": 80}``.

        Raises:
            ConfigurationError: If neither key is present.
        """
        if isinstance(params, dict) and "lB" in params:
            return cls(require(params, "lB", float, context=cls.name))
        epsr = require(params, "epsr", float, context=cls.name)
        try:
            return cls.from_epsr(epsr, temperature)
        except ValueError as err:
            raise ConfigurationError(str(err), key=f"{cls.name}.epsr") from err
