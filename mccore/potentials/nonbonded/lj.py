"""Lennard-Jones and Weeks-Chandler-Andersen pair potentials."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ...errors import ConfigurationError
from ...units import DEFAULT_TEMPERATURE
from ..base import PairPotential, along, squared_norm
from ..mixing import SigmaEpsilonTable

if TYPE_CHECKING:
    from ...catalog import AtomCatalog


class LennardJones(PairPotential):
    """
    Lennard-Jones 12-6 potential with mixed pair parameters.

    V(r) = 4 * epsilon_ij * [(sigma_ij/r)^12 - (sigma_ij/r)^6]

    Attributes:
        table: Mixed sigma^2 and 4*epsilon (kT) for every atom type pair.
    """

    name = "lennardjones"

    def __init__(self, table: SigmaEpsilonTable) -> None:
        self.table = table

    def _reduced(self, a, b, r):
        ids_a, ids_b = a["id"], b["id"]
        r2 = squared_norm(r)
        s2 = self.table.s2[ids_a, ids_b]
        eps = self.table.eps[ids_a, ids_b]
        return r2, s2, eps

    def __call__(self, a, b, r):
        r2, s2, eps = self._reduced(a, b, r)
        x = (s2 / r2) ** 3  # (s/r)^6
        return eps * (x * x - x)

    def force(self, a, b, r):
        # F = 24 eps [2 (s/r)^12 - (s/r)^6] / r^2 * r_vec
        r2, s2, eps = self._reduced(a, b, r)
        x = (s2 / r2) ** 3
        return along(6.0 * eps * (2.0 * x * x - x) / r2, r)

    def to_dict(self) -> dict:
        return self.table.to_dict()

    @classmethod
    def from_dict(
        cls,
        params: dict,
        atoms: AtomCatalog | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> LennardJones:
        if atoms is None:
            raise ConfigurationError(
                f"{cls.__name__} needs an atom catalog to build its table", key=cls.name
            )
        return cls(SigmaEpsilonTable.from_dict(params, atoms, temperature))


class WeeksChandlerAndersen(LennardJones):
    """
    Weeks-Chandler-Andersen potential.

    Lennard-Jones cut and shifted to zero at r_c = 2^(1/6) sigma:

    V(r) = 4 * epsilon * [(sigma/r)^12 - (sigma/r)^6 + 1/4]  for r < r_c
    V(r) = 0                                                 for r >= r_c

    Energy and force are exactly zero at and beyond the cutoff.
    """

    name = "wca"
    cite = "doi:ct4kh9"

    TWO_TO_TWO_SIXTH = 2.0 ** (2.0 / 6.0)  # (r_c / sigma)^2

    def __call__(self, a, b, r):
        r2, s2, eps = self._reduced(a, b, r)
        inside = r2 < s2 * self.TWO_TO_TWO_SIXTH
        x = (s2 / r2) ** 3
        return np.where(inside, eps * (x * x - x + 0.25), 0.0)

    def force(self, a, b, r):
        r2, s2, eps = self._reduced(a, b, r)
        inside = r2 < s2 * self.TWO_TO_TWO_SIXTH
        x = (s2 / r2) ** 3
        return along(np.where(inside, 6.0 * eps * (2.0 * x * x - x) / r2, 0.0), r)
